"""
Recommendation Service

Suggests videos from a user's recent searches. Entirely best-effort: any
failure yields an empty list.
"""

from __future__ import annotations

from vidsearch.core.logging import get_logger, metrics_counter
from vidsearch.schemas.recommendation import RecommendationResponse
from vidsearch.schemas.search import VideoSummary
from vidsearch.services.search_history_service import SearchHistoryService
from vidsearch.services.search_service import SearchService, summary_fields
from vidsearch.services.similarity import score_candidates

logger = get_logger(__name__)


class RecommendationService:
    def __init__(
        self,
        *,
        search_service: SearchService,
        history_service: SearchHistoryService,
        history_window: int = 5,
        top_k: int = 3,
        min_similarity: float = 0.1,
    ) -> None:
        self.search_service = search_service
        self.history_service = history_service
        self.history_window = history_window
        self.top_k = top_k
        self.min_similarity = min_similarity

    async def recommend(self, user_id: str | None) -> RecommendationResponse:
        """Top matches for the caller's last few queries joined together."""

        if user_id is None:
            return RecommendationResponse()

        try:
            queries = await self.history_service.recent_queries(user_id, self.history_window)
            combined = " ".join(q for q in queries if q.strip())
            if not combined:
                return RecommendationResponse()

            query_vector = await self.search_service.embed(combined)
            candidates = await self.search_service.fetch_candidates()
        except Exception as exc:  # noqa: BLE001 - recommendations never fail the caller
            metrics_counter("recommendation_failed")
            logger.warning(
                "recommendation_failed",
                user_id=user_id,
                error=str(exc),
                error_type=exc.__class__.__name__,
            )
            return RecommendationResponse()

        scored = score_candidates(query_vector, candidates)
        picks = [c for c in scored if c.similarity >= self.min_similarity][: self.top_k]

        logger.info(
            "recommendation_completed",
            user_id=user_id,
            history_queries=len(queries),
            recommendations=len(picks),
        )
        return RecommendationResponse(
            recommendations=[VideoSummary(**summary_fields(c)) for c in picks]
        )
