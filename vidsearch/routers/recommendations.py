"""
Recommendation API Routes
"""

from fastapi import APIRouter, Depends

from vidsearch.api.swagger_responses import combined_responses
from vidsearch.core.config import Settings
from vidsearch.core.dependencies import get_optional_user_id, get_settings
from vidsearch.routers.history import get_history_service
from vidsearch.routers.search import get_search_service
from vidsearch.schemas.recommendation import RecommendationResponse
from vidsearch.services.recommendation_service import RecommendationService
from vidsearch.services.search_history_service import SearchHistoryService
from vidsearch.services.search_service import SearchService

router = APIRouter(prefix="/recommendations", tags=["recommendations"])


def get_recommendation_service(
    search_service: SearchService = Depends(get_search_service),
    history_service: SearchHistoryService = Depends(get_history_service),
    config: Settings = Depends(get_settings),
) -> RecommendationService:
    return RecommendationService(
        search_service=search_service,
        history_service=history_service,
        history_window=config.recommend_history_window,
        top_k=config.recommend_top_k,
        min_similarity=config.recommend_min_similarity,
    )


@router.get(
    "",
    response_model=RecommendationResponse,
    summary="Videos related to recent searches",
    responses=combined_responses(data_example={"recommendations": []}, include_errors=[401, 500]),
)
async def get_recommendations(
    user_id: str | None = Depends(get_optional_user_id),
    service: RecommendationService = Depends(get_recommendation_service),
) -> RecommendationResponse:
    """Always succeeds; an empty list when there is nothing to go on."""

    return await service.recommend(user_id)
