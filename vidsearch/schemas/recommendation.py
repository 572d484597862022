"""
Recommendation Schemas
"""

from pydantic import Field

from vidsearch.schemas.base import BaseSchema
from vidsearch.schemas.search import VideoSummary


class RecommendationResponse(BaseSchema):
    """Videos related to the caller's recent searches."""

    recommendations: list[VideoSummary] = Field(default_factory=list)
