"""
Mock LLM Client
For development and testing without actual LLM API calls
"""

import asyncio
import json
import re

from vidsearch.core.logging import get_logger
from vidsearch.llm.protocol import LLMResponse

logger = get_logger(__name__)

_ITEM_PATTERN = re.compile(r"^(\d+)\. Title: (.*)\nContent: (.*?)\.\.\.$", re.MULTILINE)


class MockLLMClient:
    """
    Mock LLM client that answers explanation prompts with well-formed JSON

    Each numbered video in the prompt gets a canned rationale and the first
    sentence of its content as the excerpt.
    """

    def __init__(self, model: str = "mock-model", latency: float = 0.05):
        self.model = model
        self.latency = latency
        logger.info("mock_llm_initialized", model=model)

    async def complete(
        self,
        prompt: str,
        system_prompt: str | None = None,
        temperature: float = 0.3,
        max_tokens: int = 1024,
    ) -> LLMResponse:
        # Simulate API latency
        await asyncio.sleep(self.latency)

        logger.debug(
            "llm_complete_called",
            prompt_length=len(prompt),
            temperature=temperature,
        )

        annotations = []
        for match in _ITEM_PATTERN.finditer(prompt):
            index, title, content = match.groups()
            first_sentence = re.split(r"(?<=[.!?。])\s*", content.strip(), maxsplit=1)[0]
            annotations.append(
                {
                    "index": int(index),
                    "rationale": f"'{title.strip()}' covers the topic you asked about.",
                    "excerpt": first_sentence,
                }
            )

        content = "Here are the explanations:\n" + json.dumps(annotations, ensure_ascii=False)

        return LLMResponse(
            content=content,
            usage={
                "prompt_tokens": len(prompt) // 4,
                "completion_tokens": len(content) // 4,
                "total_tokens": (len(prompt) + len(content)) // 4,
            },
            model=self.model,
        )

    async def aclose(self) -> None:
        return None
