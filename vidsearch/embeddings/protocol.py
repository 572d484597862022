"""
Embedding Client Protocol (Interface)
Defines contract for all query-embedding implementations
"""

from typing import Protocol


class EmbeddingClientProtocol(Protocol):
    """
    Turns query text into a fixed-dimension vector.

    Implementations raise EmbeddingFailedError for any transport or provider
    failure. Retries, if any, stay inside the implementation.
    """

    model: str

    async def embed_query(self, text: str) -> list[float]:
        """
        Embed a search query

        Args:
            text: Non-empty query text

        Returns:
            Embedding vector

        Raises:
            EmbeddingFailedError: If the provider fails or returns garbage
        """
        ...

    async def aclose(self) -> None:
        """Release network or model resources."""
        ...
