"""
LLM Client Factory
Creates appropriate LLM client based on configuration
"""

from vidsearch.core.config import Settings
from vidsearch.core.logging import get_logger
from vidsearch.llm.anthropic import AnthropicLLMClient
from vidsearch.llm.mock import MockLLMClient
from vidsearch.llm.ollama import OllamaLLMClient
from vidsearch.llm.protocol import LLMClientProtocol

logger = get_logger(__name__)


def build_llm_client(config: Settings) -> LLMClientProtocol:
    """
    Build the LLM client selected by ``llm_provider``.

    Called once at startup; the handle is injected into services.

    Raises:
        ValueError: If llm_provider is not supported

    Usage:
        llm_client = build_llm_client(settings)
        response = await llm_client.complete("Hello")
    """
    provider = config.llm_provider

    logger.info("llm_factory", provider=provider, model=config.llm_model)

    if provider == "mock":
        return MockLLMClient(model=config.llm_model)

    if provider == "ollama":
        return OllamaLLMClient(
            base_url=config.ollama_base_url,
            model=config.llm_model,
            timeout=config.llm_timeout_seconds,
        )

    if provider == "anthropic":
        return AnthropicLLMClient(
            base_url=config.anthropic_base_url,
            model=config.llm_model,
            api_key=config.anthropic_api_key,
            api_version=config.anthropic_version,
            timeout=config.llm_timeout_seconds,
        )

    raise ValueError(
        f"Unsupported llm_provider: {provider}. "
        "Supported providers: mock, ollama, anthropic"
    )
