"""
E5 Semantic Embedding Client

Runs a local multilingual E5 model through sentence-transformers.
SentenceTransformer.encode() is blocking, so every call goes through the
default threadpool executor, throttled by a semaphore so a burst of searches
cannot flood the pool.
"""

from __future__ import annotations

import asyncio
import time
from typing import Optional

from sentence_transformers import SentenceTransformer

from vidsearch.core.exceptions import EmbeddingFailedError
from vidsearch.core.logging import get_logger

logger = get_logger(__name__)


class E5EmbeddingClient:
    """
    Async-safe query embedder backed by a local E5 model.

    - E5 prefixes: "query: " is prepended to every search query
    - Warmup: load the model once at startup; the first request waits if the
      background warmup has not finished yet
    - Vectors are L2-normalized by the model
    """

    def __init__(
        self,
        *,
        model_name: str,
        device: str = "cpu",
        max_concurrency: int = 4,
        load_timeout: float = 300.0,
    ) -> None:
        self.model = model_name
        self.device = device
        self.max_concurrency = max_concurrency
        self.load_timeout = load_timeout
        self._model: Optional[SentenceTransformer] = None
        self._semaphore: Optional[asyncio.Semaphore] = None
        self._load_lock = asyncio.Lock()

        logger.info(
            "e5_embedding_created",
            model_name=model_name,
            device=device,
            max_concurrency=max_concurrency,
        )

    @property
    def is_ready(self) -> bool:
        return self._model is not None

    async def warmup(self) -> None:
        """
        Load the model and run one throwaway encode.

        Raises:
            EmbeddingFailedError: If model loading fails or times out
        """
        if self.is_ready:
            return

        async with self._load_lock:
            if self.is_ready:
                return

            t0 = time.perf_counter()
            logger.info("e5_embedding_loading_model", model_name=self.model)

            loop = asyncio.get_running_loop()
            try:
                model = await asyncio.wait_for(
                    loop.run_in_executor(
                        None,
                        lambda: SentenceTransformer(self.model, device=self.device),
                    ),
                    timeout=self.load_timeout,
                )
            except asyncio.TimeoutError as exc:
                logger.error("e5_embedding_load_timeout", model_name=self.model)
                raise EmbeddingFailedError(
                    f"Timeout loading embedding model {self.model}"
                ) from exc
            except Exception as exc:  # noqa: BLE001 - any loader error is fatal here
                logger.error("e5_embedding_load_failed", model_name=self.model, error=str(exc))
                raise EmbeddingFailedError(
                    f"Failed to load embedding model {self.model}: {exc}"
                ) from exc

            self._semaphore = asyncio.Semaphore(self.max_concurrency)
            self._model = model
            await self._encode("query: warmup")

            logger.info(
                "e5_embedding_warmed",
                model_name=self.model,
                elapsed_seconds=f"{time.perf_counter() - t0:.2f}",
            )

    async def embed_query(self, text: str) -> list[float]:
        """
        Embed a search query with the "query:" prefix.

        Raises:
            EmbeddingFailedError: If encoding fails
        """
        if not self.is_ready:
            logger.warning("e5_embedding_lazy_initialization")
            await self.warmup()

        try:
            embedding = await self._encode(f"query: {text}")
        except EmbeddingFailedError:
            raise
        except Exception as exc:  # noqa: BLE001
            logger.error("query_embedding_failed", error=str(exc), text_length=len(text))
            raise EmbeddingFailedError(f"Failed to embed query: {exc}") from exc

        logger.debug("query_embedded", text_length=len(text), embedding_dim=len(embedding))
        return embedding

    async def aclose(self) -> None:
        self._model = None

    async def _encode(self, text: str) -> list[float]:
        model = self._model
        semaphore = self._semaphore
        if model is None or semaphore is None:
            raise EmbeddingFailedError("Embedding model not initialized")

        loop = asyncio.get_running_loop()
        async with semaphore:
            embedding_array = await loop.run_in_executor(
                None,
                lambda: model.encode(text, normalize_embeddings=True),
            )

        embedding = embedding_array.tolist()
        if not isinstance(embedding, list) or len(embedding) == 0:
            raise EmbeddingFailedError(f"Invalid embedding output: {embedding!r}")
        return embedding
