"""
Anthropic LLM Client

Calls the Messages API (/v1/messages) directly over httpx.
"""

from __future__ import annotations

import httpx

from vidsearch.core.exceptions import LLMError
from vidsearch.core.logging import get_logger
from vidsearch.llm.protocol import LLMResponse

logger = get_logger(__name__)


class AnthropicLLMClient:
    """Messages API client returning the concatenated text blocks."""

    def __init__(
        self,
        *,
        base_url: str,
        model: str,
        api_key: str | None,
        api_version: str = "2023-06-01",
        timeout: float = 60.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        if not api_key:
            raise ValueError("anthropic_api_key is required for llm_provider=anthropic")

        self.base_url = base_url.rstrip("/")
        self.model = model
        self._client = httpx.AsyncClient(
            base_url=self.base_url,
            headers={
                "x-api-key": api_key,
                "anthropic-version": api_version,
                "content-type": "application/json",
            },
            timeout=timeout,
            transport=transport,
        )
        logger.info("anthropic_llm_initialized", base_url=self.base_url, model=model)

    async def complete(
        self,
        prompt: str,
        system_prompt: str | None = None,
        temperature: float = 0.3,
        max_tokens: int = 1024,
    ) -> LLMResponse:
        payload: dict = {
            "model": self.model,
            "max_tokens": max_tokens,
            "temperature": temperature,
            "messages": [{"role": "user", "content": prompt}],
        }
        if system_prompt:
            payload["system"] = system_prompt

        try:
            resp = await self._client.post("/v1/messages", json=payload)
        except httpx.HTTPError as exc:
            raise LLMError(f"Anthropic request failed: {exc}") from exc

        if resp.status_code >= 400:
            raise LLMError(f"Anthropic error response: {resp.status_code} {resp.text[:200]}")

        try:
            data = resp.json()
        except ValueError as exc:
            raise LLMError("Anthropic returned a non-JSON body") from exc

        text_blocks = [
            block.get("text", "")
            for block in data.get("content") or []
            if isinstance(block, dict) and block.get("type") == "text"
        ]
        if not text_blocks:
            raise LLMError("Anthropic response has no text content")

        usage = data.get("usage") or {}
        input_tokens = usage.get("input_tokens")
        output_tokens = usage.get("output_tokens")
        usage_dict = None
        if input_tokens is not None or output_tokens is not None:
            usage_dict = {
                "prompt_tokens": input_tokens,
                "completion_tokens": output_tokens,
                "total_tokens": (input_tokens or 0) + (output_tokens or 0),
            }

        return LLMResponse(
            content="".join(text_blocks),
            usage=usage_dict,
            model=data.get("model") or self.model,
        )

    async def aclose(self) -> None:
        await self._client.aclose()
