import pytest

from fastapi import FastAPI, Query
from httpx import ASGITransport, AsyncClient

from vidsearch.api.error_handlers import DEFAULT_ERROR_CODE, register_exception_handlers
from vidsearch.api.response_middleware import SuccessEnvelopeMiddleware
from vidsearch.core.exceptions import (
    EmbeddingFailedError,
    RecordNotFoundError,
    StoreUnavailableError,
    ValidationError,
    VidSearchException,
)
from pydantic import BaseModel


@pytest.fixture
def app() -> FastAPI:
    fastapi_app = FastAPI()
    fastapi_app.add_middleware(SuccessEnvelopeMiddleware)
    register_exception_handlers(fastapi_app)

    @fastapi_app.get("/record")
    async def record_endpoint():
        raise RecordNotFoundError("history entry not found")

    @fastapi_app.get("/embedding")
    async def embedding_endpoint():
        raise EmbeddingFailedError("Embedding timed out after 10.0s")

    @fastapi_app.get("/store")
    async def store_endpoint():
        raise StoreUnavailableError("Candidate store unavailable")

    @fastapi_app.get("/invalid")
    async def invalid_endpoint():
        raise ValidationError("query must not be empty")

    @fastapi_app.get("/custom")
    async def custom_endpoint():
        raise VidSearchException("force fallback")

    @fastapi_app.get("/success")
    async def success_endpoint():
        return {"ok": True}

    @fastapi_app.get("/query-validation")
    async def query_validation_endpoint(q: str = Query(..., min_length=1)):
        return {"q": q}

    class Item(BaseModel):
        name: str

    @fastapi_app.post("/body-validation")
    async def body_validation_endpoint(item: Item):
        return item

    return fastapi_app


async def _get(app: FastAPI, path: str, **kwargs):
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        return await client.get(path, **kwargs)


@pytest.mark.asyncio
async def test_record_not_found_envelope(app: FastAPI) -> None:
    response = await _get(app, "/record")

    assert response.status_code == 404
    body = response.json()
    assert body["success"] is False
    assert body["data"] is None
    assert body["error"]["code"] == "RecordNotFoundError"
    assert body["error"]["message"] == "history entry not found"
    assert body["feedback"] == []
    assert "meta" in body


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "path, code",
    [("/embedding", "EmbeddingFailedError"), ("/store", "StoreUnavailableError")],
)
async def test_critical_failures_are_503(app: FastAPI, path: str, code: str) -> None:
    response = await _get(app, path)

    assert response.status_code == 503
    body = response.json()
    assert body["success"] is False
    assert body["data"] is None
    assert body["error"]["code"] == code
    assert body["error"]["hint"]


@pytest.mark.asyncio
async def test_domain_validation_error_is_400(app: FastAPI) -> None:
    response = await _get(app, "/invalid")

    assert response.status_code == 400
    assert response.json()["error"]["code"] == "ValidationError"


@pytest.mark.asyncio
async def test_unexpected_error_envelope(app: FastAPI) -> None:
    response = await _get(app, "/custom")

    assert response.status_code == 500
    body = response.json()
    assert body["success"] is False
    assert body["error"]["code"] == DEFAULT_ERROR_CODE
    assert body["feedback"] == []
    assert body["data"] is None


@pytest.mark.asyncio
async def test_success_response_envelope(app: FastAPI) -> None:
    response = await _get(app, "/success", headers={"X-Request-ID": "req-123"})

    assert response.status_code == 200
    body = response.json()
    assert body["success"] is True
    assert body["data"] == {"ok": True}
    assert body["error"] is None
    assert body["meta"]["requestId"] == "req-123"
    assert response.headers["X-Request-ID"] == "req-123"


@pytest.mark.asyncio
async def test_query_validation_is_422(app: FastAPI) -> None:
    response = await _get(app, "/query-validation")

    assert response.status_code == 422
    body = response.json()
    assert body["error"]["code"] == "ValidationError"
    assert "query.q" in body["error"]["message"]


@pytest.mark.asyncio
async def test_body_validation_is_422(app: FastAPI) -> None:
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        response = await client.post("/body-validation", json={})

    assert response.status_code == 422
    body = response.json()
    assert body["success"] is False
    assert body["error"]["details"]["errors"]


@pytest.mark.asyncio
async def test_unknown_route_uses_envelope(app: FastAPI) -> None:
    response = await _get(app, "/nope")

    assert response.status_code == 404
    assert response.json()["error"]["code"] == "HTTP.404"
