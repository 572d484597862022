"""
Mock Embedding Client
Deterministic hashed bag-of-words vectors for development and tests
"""

from __future__ import annotations

import hashlib
import math
from collections import Counter

from vidsearch.core.exceptions import EmbeddingFailedError
from vidsearch.core.logging import get_logger

logger = get_logger(__name__)


class MockEmbeddingClient:
    """
    Produces the same vector for the same words, without any model.

    Word vectors come from an MD5 digest, so texts sharing vocabulary end up
    pointing in similar directions. Good enough to exercise ranking end to end.
    """

    def __init__(self, dimension: int = 1536, model: str = "mock-embedding"):
        self.dimension = dimension
        self.model = model
        logger.info("mock_embedding_initialized", dimension=dimension)

    def _word_vector(self, word: str) -> list[float]:
        digest = hashlib.md5(word.encode("utf-8")).digest()
        return [digest[i % len(digest)] / 255.0 for i in range(self.dimension)]

    def embed_text(self, text: str) -> list[float]:
        """Synchronous variant, also used to seed fixture data."""

        counts = Counter(word.casefold() for word in text.split() if word.strip())
        if not counts:
            raise EmbeddingFailedError("Cannot embed empty text")

        total = sum(counts.values())
        vector = [0.0] * self.dimension
        for word, count in counts.items():
            for idx, value in enumerate(self._word_vector(word)):
                vector[idx] += value * count / total

        norm = math.sqrt(sum(value * value for value in vector)) or 1.0
        return [value / norm for value in vector]

    async def embed_query(self, text: str) -> list[float]:
        embedding = self.embed_text(text)
        logger.debug("query_embedded", text_length=len(text), embedding_dim=len(embedding))
        return embedding

    async def aclose(self) -> None:
        return None
