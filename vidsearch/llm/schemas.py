"""
LLM output DTOs

Structured fragment expected back from the explanation prompt.
"""

from pydantic import AliasChoices, ConfigDict, Field, TypeAdapter

from vidsearch.schemas.base import BaseSchema


class ExplanationItem(BaseSchema):
    """Annotation for the candidate at 1-based position ``index``."""

    model_config = ConfigDict(extra="ignore")

    index: int = Field(ge=1)
    rationale: str = Field(
        default="",
        validation_alias=AliasChoices("rationale", "comment"),
        description="Why the video is relevant",
    )
    excerpt: str = Field(
        default="",
        validation_alias=AliasChoices("excerpt", "relevant_excerpt"),
        description="Verbatim quote from the video's content",
    )


ExplanationList = TypeAdapter(list[ExplanationItem])
