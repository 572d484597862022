"""
HTTP provider clients against httpx.MockTransport
"""

import json

import httpx
import pytest

from vidsearch.core.config import Settings
from vidsearch.core.exceptions import EmbeddingFailedError, LLMError
from vidsearch.embeddings import build_embedding_client
from vidsearch.embeddings.mock import MockEmbeddingClient
from vidsearch.embeddings.openai import OpenAIEmbeddingClient
from vidsearch.llm import build_llm_client
from vidsearch.llm.anthropic import AnthropicLLMClient
from vidsearch.llm.mock import MockLLMClient
from vidsearch.llm.ollama import OllamaLLMClient
from vidsearch.llm.prompts.search_explanation import build_search_explanation_prompt
from vidsearch.services.explanation_service import ParsedExplanations, parse_explanations


def _transport(status_code: int, payload, seen: list | None = None) -> httpx.MockTransport:
    def handler(request: httpx.Request) -> httpx.Response:
        if seen is not None:
            seen.append(request)
        if isinstance(payload, (dict, list)):
            return httpx.Response(status_code, json=payload)
        return httpx.Response(status_code, text=payload)

    return httpx.MockTransport(handler)


@pytest.mark.asyncio
async def test_openai_embedding_parses_vector() -> None:
    seen: list[httpx.Request] = []
    client = OpenAIEmbeddingClient(
        base_url="https://embed.test/v1/",
        model="text-embedding-3-small",
        api_key="sk-test",
        transport=_transport(200, {"data": [{"embedding": [0.1, 0.2, 0.3]}]}, seen),
    )

    vector = await client.embed_query("PMF")
    await client.aclose()

    assert vector == [0.1, 0.2, 0.3]
    assert seen[0].url.path == "/v1/embeddings"
    assert seen[0].headers["Authorization"] == "Bearer sk-test"
    assert json.loads(seen[0].content) == {"model": "text-embedding-3-small", "input": "PMF"}


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "status_code, payload",
    [
        (500, "upstream exploded"),
        (200, {"data": []}),
        (200, {"data": [{"embedding": ["a", "b"]}]}),
        (200, {"data": [{"embedding": []}]}),
        (200, "not json"),
    ],
)
async def test_openai_embedding_failures(status_code, payload) -> None:
    client = OpenAIEmbeddingClient(
        base_url="https://embed.test/v1",
        model="m",
        api_key=None,
        transport=_transport(status_code, payload),
    )

    with pytest.raises(EmbeddingFailedError):
        await client.embed_query("PMF")


@pytest.mark.asyncio
async def test_anthropic_joins_text_blocks() -> None:
    seen: list[httpx.Request] = []
    payload = {
        "model": "claude-3-5-haiku-20241022",
        "content": [
            {"type": "text", "text": "[{\"index\": 1, "},
            {"type": "text", "text": "\"rationale\": \"r\", \"excerpt\": \"e\"}]"},
        ],
        "usage": {"input_tokens": 100, "output_tokens": 20},
    }
    client = AnthropicLLMClient(
        base_url="https://anthropic.test",
        model="claude-3-5-haiku-20241022",
        api_key="key",
        transport=_transport(200, payload, seen),
    )

    response = await client.complete("prompt", system_prompt="system", max_tokens=1024)

    assert isinstance(parse_explanations(response.content, 1), ParsedExplanations)
    assert response.usage["total_tokens"] == 120
    body = json.loads(seen[0].content)
    assert body["system"] == "system"
    assert body["max_tokens"] == 1024
    assert seen[0].headers["x-api-key"] == "key"


@pytest.mark.asyncio
async def test_anthropic_error_status_raises() -> None:
    client = AnthropicLLMClient(
        base_url="https://anthropic.test",
        model="m",
        api_key="key",
        transport=_transport(529, {"error": "overloaded"}),
    )

    with pytest.raises(LLMError):
        await client.complete("prompt")


def test_anthropic_requires_api_key() -> None:
    with pytest.raises(ValueError):
        AnthropicLLMClient(base_url="https://anthropic.test", model="m", api_key=None)


@pytest.mark.asyncio
async def test_ollama_generate() -> None:
    client = OllamaLLMClient(
        base_url="http://ollama.test",
        model="qwen3",
        transport=_transport(200, {"response": "[]", "prompt_eval_count": 5, "eval_count": 1}),
    )

    response = await client.complete("prompt")

    assert response.content == "[]"
    assert response.usage == {"prompt_tokens": 5, "completion_tokens": 1, "total_tokens": 6}


@pytest.mark.asyncio
async def test_mock_llm_answers_explanation_prompt() -> None:
    prompt = build_search_explanation_prompt(
        query="pmf",
        candidates=[
            ("Finding PMF", "Retention is the signal. Everything else follows."),
            ("Pricing", "Price on value."),
        ],
    )

    response = await MockLLMClient(latency=0).complete(prompt)
    parsed = parse_explanations(response.content, 2)

    assert isinstance(parsed, ParsedExplanations)
    assert parsed.items[1].excerpt == "Retention is the signal."
    assert parsed.items[2].rationale


@pytest.mark.asyncio
async def test_mock_embedding_is_deterministic() -> None:
    client = MockEmbeddingClient(dimension=8)

    first = await client.embed_query("product market fit")
    second = await client.embed_query("Product  market FIT")

    assert first == second
    assert len(first) == 8
    with pytest.raises(EmbeddingFailedError):
        await client.embed_query("   ")


def test_factories_select_providers() -> None:
    config = Settings(embedding_provider="mock", llm_provider="mock", embedding_dimension=16)

    assert isinstance(build_embedding_client(config), MockEmbeddingClient)
    assert isinstance(build_llm_client(config), MockLLMClient)
    assert isinstance(
        build_embedding_client(Settings(embedding_provider="openai")), OpenAIEmbeddingClient
    )
