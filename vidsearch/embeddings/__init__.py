"""
Embedding Gateway
Query text -> vector, behind a swappable provider
"""

from vidsearch.embeddings.protocol import EmbeddingClientProtocol
from vidsearch.embeddings.factory import build_embedding_client

__all__ = ["EmbeddingClientProtocol", "build_embedding_client"]
