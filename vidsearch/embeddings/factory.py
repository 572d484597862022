"""
Embedding Client Factory
Creates the configured embedding provider
"""

from vidsearch.core.config import Settings
from vidsearch.core.logging import get_logger
from vidsearch.embeddings.mock import MockEmbeddingClient
from vidsearch.embeddings.protocol import EmbeddingClientProtocol

logger = get_logger(__name__)


def build_embedding_client(config: Settings) -> EmbeddingClientProtocol:
    """
    Build the embedding client selected by ``embedding_provider``.

    Called once at startup; the handle is injected wherever it is needed.

    Raises:
        ValueError: If embedding_provider is not supported
    """
    provider = config.embedding_provider

    logger.info("embedding_factory", provider=provider)

    if provider == "mock":
        return MockEmbeddingClient(dimension=config.embedding_dimension)

    if provider == "e5":
        # Imported lazily: sentence-transformers pulls in torch
        from vidsearch.embeddings.e5 import E5EmbeddingClient

        return E5EmbeddingClient(
            model_name=config.e5_model_name,
            device=config.embedding_device,
            max_concurrency=config.embedding_max_concurrency,
        )

    if provider == "openai":
        from vidsearch.embeddings.openai import OpenAIEmbeddingClient

        return OpenAIEmbeddingClient(
            base_url=config.openai_base_url,
            model=config.openai_embedding_model,
            api_key=config.openai_api_key,
            timeout=config.embedding_timeout_seconds,
        )

    raise ValueError(
        f"Unsupported embedding_provider: {provider}. "
        "Supported providers: mock, e5, openai"
    )
