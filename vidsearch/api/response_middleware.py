"""Middleware to ensure successful responses use the shared envelope."""

from __future__ import annotations

import json
from typing import Any

import structlog
from fastapi import Request
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse, Response
from starlette.middleware.base import BaseHTTPMiddleware

from vidsearch.api.response_utils import REQUEST_ID_HEADER, build_meta, get_request_id
from vidsearch.schemas.response import ResponseEnvelope


class SuccessEnvelopeMiddleware(BaseHTTPMiddleware):
    """
    Wrap successful JSON responses in the shared response envelope.

    Also binds the request id into the structlog context so every log line
    emitted while serving the request carries it.
    """

    async def dispatch(self, request: Request, call_next: Any) -> Response:
        request_id = get_request_id(request)
        structlog.contextvars.bind_contextvars(request_id=request_id)
        try:
            response = await call_next(request)
        finally:
            structlog.contextvars.unbind_contextvars("request_id")

        response.headers[REQUEST_ID_HEADER] = request_id
        if not self._should_wrap(response):
            return response

        body_bytes = await self._extract_body(response)
        if not body_bytes:
            return response

        try:
            payload = json.loads(body_bytes)
        except ValueError:
            return self._rebuild(response, body_bytes)

        if isinstance(payload, dict) and "success" in payload and "meta" in payload:
            return self._rebuild(response, body_bytes)

        envelope = ResponseEnvelope(
            success=True,
            data=payload,
            error=None,
            meta=build_meta(request),
        )

        headers = {
            key: value
            for key, value in response.headers.items()
            if key.lower() != "content-length"
        }
        return JSONResponse(
            status_code=response.status_code,
            content=jsonable_encoder(envelope, by_alias=True),
            headers=headers,
        )

    @staticmethod
    def _rebuild(response: Response, body: bytes) -> Response:
        # body_iterator has been consumed; hand back an equivalent response
        return Response(
            content=body,
            status_code=response.status_code,
            headers=dict(response.headers),
            media_type=response.media_type,
        )

    async def _extract_body(self, response: Response) -> bytes | None:
        body = getattr(response, "body", None)
        if body:
            return body

        body_iterator = getattr(response, "body_iterator", None)
        if body_iterator is None:
            return None

        data: list[bytes] = []
        async for chunk in body_iterator:
            data.append(chunk)

        return b"".join(data)

    def _should_wrap(self, response: Response) -> bool:
        if response.status_code >= 400:
            return False
        if response.status_code in (204, 304):
            return False

        content_type = response.headers.get("content-type", "")
        return "application/json" in content_type
