"""
OpenAI-compatible Embedding Client

POSTs to ``{base_url}/embeddings`` (OpenAI, Azure-style gateways, local
servers speaking the same wire format).
"""

from __future__ import annotations

import math

import httpx

from vidsearch.core.exceptions import EmbeddingFailedError
from vidsearch.core.logging import get_logger

logger = get_logger(__name__)


class OpenAIEmbeddingClient:
    """HTTP embedding client."""

    def __init__(
        self,
        *,
        base_url: str,
        model: str,
        api_key: str | None,
        timeout: float = 10.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.model = model
        headers = {"Authorization": f"Bearer {api_key}"} if api_key else {}
        self._client = httpx.AsyncClient(
            base_url=self.base_url,
            headers=headers,
            timeout=timeout,
            transport=transport,
        )
        logger.info("openai_embedding_initialized", base_url=self.base_url, model=model)

    async def embed_query(self, text: str) -> list[float]:
        payload = {"model": self.model, "input": text}

        try:
            resp = await self._client.post("/embeddings", json=payload)
        except httpx.HTTPError as exc:
            raise EmbeddingFailedError(f"Embedding request failed: {exc}") from exc

        if resp.status_code >= 400:
            raise EmbeddingFailedError(
                f"Embedding provider error: {resp.status_code} {resp.text[:200]}"
            )

        try:
            embedding = resp.json()["data"][0]["embedding"]
            vector = [float(value) for value in embedding]
        except (ValueError, KeyError, IndexError, TypeError) as exc:
            raise EmbeddingFailedError("Malformed embedding response") from exc

        if not vector or not all(math.isfinite(value) for value in vector):
            raise EmbeddingFailedError("Embedding response contained no usable vector")

        logger.debug("query_embedded", text_length=len(text), embedding_dim=len(vector))
        return vector

    async def aclose(self) -> None:
        await self._client.aclose()
