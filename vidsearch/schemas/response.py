"""Common response envelope schemas."""

from __future__ import annotations

from datetime import datetime
from typing import Any, Generic, Optional, TypeVar

from pydantic import BaseModel, Field


T = TypeVar("T")


class ResponseMeta(BaseModel):
    request_id: str = Field(alias="requestId")
    timestamp: datetime

    model_config = {
        "populate_by_name": True,
    }


class ResponseFeedback(BaseModel):
    code: str
    level: str
    message: str


class ResponseError(BaseModel):
    code: str
    message: str
    details: Optional[dict] = None
    hint: Optional[str] = None


class ResponseEnvelope(BaseModel, Generic[T]):
    """Shape shared by every JSON response, successful or not."""

    success: bool
    data: Optional[T] = None
    error: Optional[ResponseError] = None
    meta: ResponseMeta
    feedback: list[ResponseFeedback] = Field(default_factory=list)

    model_config = {
        "populate_by_name": True,
    }

    @classmethod
    def ok(cls, data: Any, meta: ResponseMeta) -> "ResponseEnvelope":
        return cls(success=True, data=data, error=None, meta=meta)

    @classmethod
    def fail(
        cls,
        *,
        code: str,
        message: str,
        meta: ResponseMeta,
        details: Any | None = None,
        hint: str | None = None,
    ) -> "ResponseEnvelope":
        return cls(
            success=False,
            data=None,
            error=ResponseError(code=code, message=message, details=details, hint=hint),
            meta=meta,
        )
