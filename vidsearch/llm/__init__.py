"""
LLM Client Abstraction
Interface for generative text providers and prompt templates
"""

from vidsearch.llm.protocol import LLMClientProtocol, LLMResponse
from vidsearch.llm.factory import build_llm_client

__all__ = ["LLMClientProtocol", "LLMResponse", "build_llm_client"]
