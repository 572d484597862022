"""
Unit tests for ExplanationService: parsing and guaranteed fallbacks
"""

import asyncio
import json

import pytest

from vidsearch.core.exceptions import LLMError
from vidsearch.core.logging import get_metric
from vidsearch.services.explanation_service import (
    ExplanationService,
    ParsedExplanations,
    Unparseable,
    parse_explanations,
)
from vidsearch.services.similarity import RankedCandidate


def _ranked(make_video, n: int, **fields) -> list[RankedCandidate]:
    return [
        RankedCandidate(video=make_video(**fields), similarity=1.0 - i / 10, vector_valid=True)
        for i in range(n)
    ]


def _service(llm_client, **kwargs) -> ExplanationService:
    return ExplanationService(
        llm_client=llm_client,
        timeout=kwargs.pop("timeout", 1.0),
        fallback_rationale="Related video",
        **kwargs,
    )


def test_parse_finds_array_inside_prose() -> None:
    raw = 'Here [is] what I found:\n[{"index": 1, "rationale": "r", "excerpt": "e"}]\nThanks!'

    result = parse_explanations(raw, 3)

    assert isinstance(result, ParsedExplanations)
    assert result.items[1].rationale == "r"


def test_parse_skips_arrays_that_are_not_annotations() -> None:
    raw = 'See [1] below:\n[{"index": 1, "rationale": "a", "excerpt": "b"}]'

    result = parse_explanations(raw, 1)

    assert isinstance(result, ParsedExplanations)
    assert result.items[1].rationale == "a"
    assert result.items[1].excerpt == "b"


def test_parse_reports_schema_mismatch_when_no_array_fits() -> None:
    result = parse_explanations('Sources [1] and [2, 3]', 3)

    assert isinstance(result, Unparseable)
    assert result.reason.startswith("schema_mismatch")


def test_parse_accepts_comment_and_relevant_excerpt_keys() -> None:
    raw = json.dumps([{"index": 2, "comment": "why", "relevant_excerpt": "quote"}])

    result = parse_explanations(raw, 2)

    assert result.items[2].rationale == "why"
    assert result.items[2].excerpt == "quote"


@pytest.mark.parametrize(
    "raw",
    [
        "",
        "I cannot help with that.",
        '[{"index": "first", "rationale": "r"}]',
        '[{"index": 0, "rationale": "r"}]',
        '["just", "strings"]',
        '[{"index": 1, "rationale": ',
    ],
)
def test_parse_unparseable(raw) -> None:
    assert isinstance(parse_explanations(raw, 3), Unparseable)


def test_parse_ignores_out_of_range_and_duplicate_indices() -> None:
    raw = json.dumps(
        [
            {"index": 1, "rationale": "first", "excerpt": "a"},
            {"index": 1, "rationale": "second", "excerpt": "b"},
            {"index": 9, "rationale": "ghost", "excerpt": "c"},
        ]
    )

    result = parse_explanations(raw, 2)

    assert set(result.items) == {1}
    assert result.items[1].rationale == "first"


async def test_successful_annotations(make_video, fake_llm_client, explanation_payload) -> None:
    ranked = _ranked(make_video, 3)
    service = _service(fake_llm_client(explanation_payload(3)))

    annotations = await service.annotate("what is pmf", ranked)

    assert [a.rationale for a in annotations] == ["Rationale 1", "Rationale 2", "Rationale 3"]
    assert [a.excerpt for a in annotations] == ["Excerpt 1", "Excerpt 2", "Excerpt 3"]
    assert all(a.generated for a in annotations)


async def test_provider_failure_falls_back_for_every_candidate(make_video, fake_llm_client) -> None:
    ranked = _ranked(make_video, 3, script_text="x" * 250)
    service = _service(fake_llm_client(error=LLMError("boom")))
    before = get_metric("explanation_fallback", kind="provider_error")

    annotations = await service.annotate("q", ranked)

    assert len(annotations) == 3
    for annotation in annotations:
        assert annotation.rationale == "Related video"
        assert annotation.excerpt == "x" * 100
        assert annotation.generated is False
    assert get_metric("explanation_fallback", kind="provider_error") == before + 1


async def test_timeout_falls_back(make_video, fake_llm_client) -> None:
    ranked = _ranked(make_video, 2)
    service = _service(fake_llm_client("[]", delay=1.0), timeout=0.01)

    annotations = await service.annotate("q", ranked)

    assert [a.rationale for a in annotations] == ["Related video", "Related video"]


async def test_unparseable_output_falls_back(make_video, fake_llm_client) -> None:
    ranked = _ranked(make_video, 2)
    service = _service(fake_llm_client("Sorry, I can't produce JSON today."))

    annotations = await service.annotate("q", ranked)

    assert all(a.rationale == "Related video" for a in annotations)
    assert annotations[0].excerpt.startswith("Transcript of video")


async def test_partial_response_fills_missing_entries(make_video, fake_llm_client) -> None:
    ranked = _ranked(make_video, 3)
    payload = json.dumps(
        [
            {"index": 2, "rationale": "Only the second", "excerpt": "quoted"},
            {"index": 3, "rationale": "   ", "excerpt": "kept"},
        ]
    )
    service = _service(fake_llm_client(payload))

    first, second, third = await service.annotate("q", ranked)

    assert first.rationale == "Related video"
    assert first.generated is False
    assert (second.rationale, second.excerpt, second.generated) == ("Only the second", "quoted", True)
    assert third.rationale == "Related video"
    assert third.excerpt == "kept"
    assert third.generated is False


async def test_fallback_excerpt_uses_title_when_content_empty(make_video, fake_llm_client) -> None:
    ranked = _ranked(make_video, 1, script_text=None, title="  Pricing   101 ")
    service = _service(fake_llm_client(error=RuntimeError("down")))

    (annotation,) = await service.annotate("q", ranked)

    assert annotation.excerpt == "Pricing 101"


async def test_fallback_excerpt_never_empty(make_video) -> None:
    ranked = _ranked(make_video, 1, script_text="   ", title="")
    service = _service(None)

    (annotation,) = await service.annotate("q", ranked)

    assert annotation.rationale == "Related video"
    assert annotation.excerpt == "Related video"


async def test_no_candidates_skips_llm(fake_llm_client) -> None:
    client = fake_llm_client("[]")
    service = _service(client)

    assert await service.annotate("q", []) == []
    assert client.prompts == []


async def test_prompt_lists_candidates_in_rank_order(make_video, fake_llm_client) -> None:
    ranked = _ranked(make_video, 2, script_text="line one\n\nline   two")
    client = fake_llm_client("[]")

    await _service(client).annotate("pricing", ranked)

    prompt = client.prompts[0]
    assert '"pricing"' in prompt
    assert prompt.index("1. Title: Video") < prompt.index("2. Title: Video")
    assert "Content: line one line two..." in prompt


async def test_cancellation_is_not_swallowed(make_video, fake_llm_client) -> None:
    ranked = _ranked(make_video, 1)
    service = _service(fake_llm_client("[]", delay=5.0), timeout=10.0)

    task = asyncio.create_task(service.annotate("q", ranked))
    await asyncio.sleep(0.01)
    task.cancel()

    with pytest.raises(asyncio.CancelledError):
        await task


def test_blank_fallback_rationale_rejected() -> None:
    with pytest.raises(ValueError):
        ExplanationService(llm_client=None, timeout=1.0, fallback_rationale="  ")
