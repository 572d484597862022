"""
Search Service

Query -> embedding -> candidate fetch -> ranking -> explanations -> history.

The embedding and candidate-store steps are on the critical path: any failure
there aborts the search with no partial results. Explanations and history are
best-effort and degrade silently.
"""

from __future__ import annotations

import asyncio
import math
from typing import Any, Sequence

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from vidsearch.core.config import Settings
from vidsearch.core.exceptions import (
    EmbeddingFailedError,
    StoreUnavailableError,
    ValidationError,
)
from vidsearch.core.logging import get_logger, measure_latency, metrics_counter
from vidsearch.embeddings.protocol import EmbeddingClientProtocol
from vidsearch.llm.protocol import LLMClientProtocol
from vidsearch.models.video import Video
from vidsearch.repositories.video_repository import VideoRepository
from vidsearch.schemas.search import SearchResponse, SearchResult
from vidsearch.services.explanation_service import ExplanationService
from vidsearch.services.search_history_service import HistoryRecorder
from vidsearch.services.similarity import DEFAULT_TOP_K, RankedCandidate, rank_candidates

logger = get_logger(__name__)


def summary_fields(candidate: RankedCandidate) -> dict[str, Any]:
    """Display fields shared by search results and recommendations."""

    video = candidate.video
    return {
        "item_id": video.id,
        "video_id": video.video_id,
        "title": video.title,
        "video_url": video.video_url,
        "duration": video.duration,
        "thumbnail_url": video.thumbnail_url,
        "custom_thumbnail_url": video.custom_thumbnail_url,
        "similarity": candidate.similarity,
    }


class SearchService:
    """Semantic video search over every stored candidate."""

    def __init__(
        self,
        *,
        session: AsyncSession,
        embedding_client: EmbeddingClientProtocol,
        explanation_service: ExplanationService,
        history_recorder: HistoryRecorder | None = None,
        video_repo: VideoRepository | None = None,
        top_k: int = DEFAULT_TOP_K,
        embedding_timeout: float = 10.0,
        store_timeout: float = 5.0,
        max_query_length: int = 1000,
    ) -> None:
        self.session = session
        self.embedding_client = embedding_client
        self.explanation_service = explanation_service
        self.history_recorder = history_recorder
        self.video_repo = video_repo or VideoRepository(session)
        self.top_k = top_k
        self.embedding_timeout = embedding_timeout
        self.store_timeout = store_timeout
        self.max_query_length = max_query_length

    @classmethod
    def from_settings(
        cls,
        config: Settings,
        *,
        session: AsyncSession,
        embedding_client: EmbeddingClientProtocol,
        llm_client: LLMClientProtocol | None,
        history_recorder: HistoryRecorder | None = None,
        top_k: int | None = None,
    ) -> SearchService:
        """Service tuned by ``config``; ``top_k`` overrides search_top_k."""

        return cls(
            session=session,
            embedding_client=embedding_client,
            explanation_service=ExplanationService.from_settings(config, llm_client),
            history_recorder=history_recorder,
            top_k=config.search_top_k if top_k is None else top_k,
            embedding_timeout=config.embedding_timeout_seconds,
            store_timeout=config.store_timeout_seconds,
            max_query_length=config.search_query_max_length,
        )

    @measure_latency("search")
    async def search(self, query: str, *, user_id: str | None = None) -> SearchResponse:
        """
        Run a full search.

        Raises:
            ValidationError: Blank or oversized query; nothing upstream is called
            EmbeddingFailedError: Query could not be embedded
            StoreUnavailableError: Candidates could not be fetched
        """
        text = self._validate_query(query)

        query_vector = await self.embed(text)
        candidates = await self.fetch_candidates()
        ranked = rank_candidates(query_vector, candidates, top_k=self.top_k)

        annotations = await self.explanation_service.annotate(text, ranked)
        results = [
            SearchResult(
                **summary_fields(candidate),
                rationale=annotation.rationale,
                excerpt=annotation.excerpt,
            )
            for candidate, annotation in zip(ranked, annotations)
        ]

        logger.info(
            "search_completed",
            user_id=user_id,
            candidates=len(candidates),
            results=len(results),
            top_similarity=results[0].similarity if results else None,
        )

        if user_id is not None and self.history_recorder is not None:
            await self.history_recorder.record_safely(user_id, text, len(results))

        return SearchResponse(query=text, results=results)

    def _validate_query(self, query: str) -> str:
        text = (query or "").strip()
        if not text:
            raise ValidationError("query must not be empty")
        if len(text) > self.max_query_length:
            raise ValidationError(
                f"query must be at most {self.max_query_length} characters"
            )
        return text

    async def embed(self, text: str) -> list[float]:
        """Embed ``text`` within the embedding timeout."""

        try:
            vector = await asyncio.wait_for(
                self.embedding_client.embed_query(text),
                timeout=self.embedding_timeout,
            )
        except EmbeddingFailedError as exc:
            self._critical_failure("embedding", exc)
            raise
        except asyncio.TimeoutError as exc:
            self._critical_failure("embedding", exc)
            raise EmbeddingFailedError(
                f"Embedding timed out after {self.embedding_timeout}s"
            ) from exc
        except Exception as exc:  # noqa: BLE001 - normalized to the critical-path error
            self._critical_failure("embedding", exc)
            raise EmbeddingFailedError(f"Embedding provider failed: {exc}") from exc

        if not vector or not all(
            isinstance(v, (int, float)) and not isinstance(v, bool) and math.isfinite(v)
            for v in vector
        ):
            error = EmbeddingFailedError("Embedding provider returned an unusable vector")
            self._critical_failure("embedding", error)
            raise error

        return [float(v) for v in vector]

    async def fetch_candidates(self) -> Sequence[Video]:
        """Every video with a stored embedding, within the store timeout."""

        try:
            return await asyncio.wait_for(
                self.video_repo.list_searchable(),
                timeout=self.store_timeout,
            )
        except asyncio.TimeoutError as exc:
            self._critical_failure("candidate_store", exc)
            raise StoreUnavailableError(
                f"Candidate store timed out after {self.store_timeout}s"
            ) from exc
        except (SQLAlchemyError, OSError) as exc:
            self._critical_failure("candidate_store", exc)
            raise StoreUnavailableError(f"Candidate store unavailable: {exc}") from exc

    def _critical_failure(self, stage: str, exc: BaseException) -> None:
        metrics_counter("search_aborted", stage=stage)
        logger.error(
            "search_aborted",
            stage=stage,
            error=str(exc) or exc.__class__.__name__,
            error_type=exc.__class__.__name__,
        )
