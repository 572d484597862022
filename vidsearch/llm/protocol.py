"""
LLM Client Protocol (Interface)
Defines contract for all generative text implementations
"""

from typing import Protocol, NamedTuple


class LLMResponse(NamedTuple):
    """
    LLM response container

    Attributes:
        content: Generated text content
        usage: Token usage info (prompt_tokens, completion_tokens, total_tokens)
        model: Model name used
    """

    content: str
    usage: dict | None = None
    model: str | None = None


class LLMClientProtocol(Protocol):
    """
    Protocol for LLM client implementations

    Callers treat output as untrusted free text and parse it themselves.
    """

    model: str

    async def complete(
        self,
        prompt: str,
        system_prompt: str | None = None,
        temperature: float = 0.3,
        max_tokens: int = 1024,
    ) -> LLMResponse:
        """
        Generate completion from LLM

        Args:
            prompt: User prompt
            system_prompt: Optional system prompt
            temperature: Sampling temperature (0.0 = deterministic, 1.0 = creative)
            max_tokens: Maximum tokens to generate

        Returns:
            LLM response

        Raises:
            LLMError: If LLM call fails
        """
        ...

    async def aclose(self) -> None:
        """Release the underlying HTTP client."""
        ...
