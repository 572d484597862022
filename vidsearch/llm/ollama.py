"""
Ollama LLM Client

Talks to a local Ollama server (qwen3, llama3, ...) over /api/generate.
"""

from __future__ import annotations

import httpx

from vidsearch.core.exceptions import LLMError
from vidsearch.core.logging import get_logger
from vidsearch.llm.protocol import LLMResponse

logger = get_logger(__name__)


class OllamaLLMClient:
    """Ollama-backed LLM client."""

    def __init__(
        self,
        *,
        base_url: str,
        model: str,
        timeout: float = 60.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.model = model
        self._client = httpx.AsyncClient(
            base_url=self.base_url, timeout=timeout, transport=transport
        )
        logger.info("ollama_llm_initialized", base_url=self.base_url, model=self.model)

    async def complete(
        self,
        prompt: str,
        system_prompt: str | None = None,
        temperature: float = 0.3,
        max_tokens: int = 1024,
    ) -> LLMResponse:
        payload = {
            "model": self.model,
            "prompt": prompt,
            "system": system_prompt,
            "stream": False,
            "options": {
                "temperature": temperature,
                # Ollama caps generated tokens with num_predict
                "num_predict": max_tokens,
            },
        }

        try:
            resp = await self._client.post("/api/generate", json=payload)
        except httpx.HTTPError as exc:
            raise LLMError(f"Ollama request failed: {exc}") from exc

        if resp.status_code >= 400:
            raise LLMError(f"Ollama error response: {resp.status_code} {resp.text[:200]}")

        try:
            data = resp.json()
        except ValueError as exc:
            raise LLMError("Ollama returned a non-JSON body") from exc

        content = data.get("response") or ""
        prompt_tokens = data.get("prompt_eval_count")
        completion_tokens = data.get("eval_count")
        usage_dict = None
        if prompt_tokens is not None or completion_tokens is not None:
            usage_dict = {
                "prompt_tokens": prompt_tokens,
                "completion_tokens": completion_tokens,
                "total_tokens": (prompt_tokens or 0) + (completion_tokens or 0),
            }

        return LLMResponse(content=content, usage=usage_dict, model=self.model)

    async def aclose(self) -> None:
        await self._client.aclose()
