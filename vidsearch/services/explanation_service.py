"""
Explanation Service

Asks the LLM why each top-K video matches the query. This path is
best-effort: whatever goes wrong (provider error, timeout, unparseable
output, missing entries), every candidate still gets a non-empty rationale
and excerpt, falling back to deterministic text taken from the video itself.
"""

from __future__ import annotations

import asyncio
import json
import time
from dataclasses import dataclass, field
from typing import Iterator, Sequence, Union

from pydantic import ValidationError as PydanticValidationError

from vidsearch.core.config import Settings
from vidsearch.core.logging import get_logger, log_llm_call, metrics_counter
from vidsearch.llm.prompts.search_explanation import (
    SYSTEM_PROMPT,
    build_search_explanation_prompt,
)
from vidsearch.llm.protocol import LLMClientProtocol
from vidsearch.llm.schemas import ExplanationItem, ExplanationList
from vidsearch.services.similarity import RankedCandidate

logger = get_logger(__name__)

_JSON_DECODER = json.JSONDecoder()


@dataclass(frozen=True, slots=True)
class ParsedExplanations:
    """Annotations keyed by 1-based candidate position."""

    items: dict[int, ExplanationItem] = field(default_factory=dict)


@dataclass(frozen=True, slots=True)
class Unparseable:
    reason: str


ExplanationParseResult = Union[ParsedExplanations, Unparseable]


@dataclass(frozen=True, slots=True)
class Annotation:
    rationale: str
    excerpt: str
    generated: bool


def _json_arrays(text: str) -> Iterator[list]:
    """Yield every ``[`` in ``text`` that starts a valid JSON array, in order."""

    start = text.find("[")
    while start != -1:
        try:
            value, _ = _JSON_DECODER.raw_decode(text, start)
        except ValueError:
            value = None
        if isinstance(value, list):
            yield value
        start = text.find("[", start + 1)


def parse_explanations(raw: str, candidate_count: int) -> ExplanationParseResult:
    """
    Strictly parse an LLM explanation response.

    The first JSON array in ``raw`` that validates as a list of
    ExplanationItem is used; arrays that do not (e.g. a ``[1]`` citation in
    leading prose) are skipped. If none validates the whole response is
    Unparseable. Entries pointing outside 1..candidate_count are dropped, and
    the first entry wins for a repeated index.
    """
    items: list[ExplanationItem] | None = None
    first_error: PydanticValidationError | None = None
    for decoded in _json_arrays(raw or ""):
        try:
            items = ExplanationList.validate_python(decoded)
        except PydanticValidationError as exc:
            first_error = first_error or exc
            continue
        break

    if items is None:
        if first_error is None:
            return Unparseable("no_json_array")
        return Unparseable(f"schema_mismatch: {first_error.error_count()} error(s)")

    by_index: dict[int, ExplanationItem] = {}
    for item in items:
        if item.index > candidate_count or item.index in by_index:
            continue
        by_index[item.index] = item
    return ParsedExplanations(items=by_index)


def _squash(text: str | None) -> str:
    return " ".join((text or "").split())


class ExplanationService:
    """Annotates ranked candidates with LLM rationale and excerpt text."""

    def __init__(
        self,
        *,
        llm_client: LLMClientProtocol | None,
        timeout: float,
        prompt_chars: int = 500,
        fallback_excerpt_chars: int = 100,
        fallback_rationale: str = "Related video",
        temperature: float = 0.3,
        max_tokens: int = 1024,
    ) -> None:
        if not fallback_rationale.strip():
            raise ValueError("fallback_rationale must be non-empty")

        self.llm_client = llm_client
        self.timeout = timeout
        self.prompt_chars = prompt_chars
        self.fallback_excerpt_chars = fallback_excerpt_chars
        self.fallback_rationale = fallback_rationale
        self.temperature = temperature
        self.max_tokens = max_tokens

    @classmethod
    def from_settings(
        cls, config: Settings, llm_client: LLMClientProtocol | None
    ) -> ExplanationService:
        return cls(
            llm_client=llm_client,
            timeout=config.llm_timeout_seconds,
            prompt_chars=config.search_excerpt_prompt_chars,
            fallback_excerpt_chars=config.search_fallback_excerpt_chars,
            fallback_rationale=config.search_fallback_rationale,
            temperature=config.llm_temperature,
            max_tokens=config.llm_max_tokens,
        )

    async def annotate(
        self,
        query: str,
        ranked: Sequence[RankedCandidate],
    ) -> list[Annotation]:
        """One Annotation per candidate, in the same order. Never raises."""

        if not ranked:
            return []

        parsed = await self._request_explanations(query, ranked)
        items = parsed.items if isinstance(parsed, ParsedExplanations) else {}

        annotations: list[Annotation] = []
        for position, candidate in enumerate(ranked, start=1):
            annotations.append(self._merge(candidate, items.get(position)))

        fallback_count = sum(1 for a in annotations if not a.generated)
        if fallback_count:
            metrics_counter("explanation_fallback", kind="candidate")
            logger.info(
                "explanation_fallback_applied",
                candidates=len(ranked),
                fallback=fallback_count,
            )
        return annotations

    def fallback_for(self, candidate: RankedCandidate) -> Annotation:
        """Deterministic annotation built only from the video record."""

        return Annotation(
            rationale=self.fallback_rationale,
            excerpt=self._fallback_excerpt(candidate),
            generated=False,
        )

    def _merge(
        self,
        candidate: RankedCandidate,
        item: ExplanationItem | None,
    ) -> Annotation:
        if item is None:
            return self.fallback_for(candidate)

        rationale = item.rationale.strip()
        excerpt = item.excerpt.strip()
        return Annotation(
            rationale=rationale or self.fallback_rationale,
            excerpt=excerpt or self._fallback_excerpt(candidate),
            generated=bool(rationale and excerpt),
        )

    def _fallback_excerpt(self, candidate: RankedCandidate) -> str:
        video = candidate.video
        excerpt = _squash(video.script_text)[: self.fallback_excerpt_chars].strip()
        return excerpt or _squash(video.title) or self.fallback_rationale

    async def _request_explanations(
        self,
        query: str,
        ranked: Sequence[RankedCandidate],
    ) -> ExplanationParseResult:
        if self.llm_client is None:
            return Unparseable("llm_not_configured")

        prompt = build_search_explanation_prompt(
            query=query,
            candidates=[
                (
                    _squash(c.video.title),
                    _squash(c.video.script_text)[: self.prompt_chars],
                )
                for c in ranked
            ],
        )

        model = getattr(self.llm_client, "model", None)
        started = time.perf_counter()
        try:
            response = await asyncio.wait_for(
                self.llm_client.complete(
                    prompt=prompt,
                    system_prompt=SYSTEM_PROMPT,
                    temperature=self.temperature,
                    max_tokens=self.max_tokens,
                ),
                timeout=self.timeout,
            )
        except asyncio.TimeoutError:
            self._record_failure(model, started, "timeout")
            return Unparseable("timeout")
        except Exception as exc:  # noqa: BLE001 - degraded path, never propagates
            self._record_failure(model, started, str(exc) or exc.__class__.__name__)
            return Unparseable("provider_error")

        log_llm_call(
            operation="search_explanation",
            model=response.model or model,
            latency_ms=(time.perf_counter() - started) * 1000,
            tokens=response.usage,
        )

        result = parse_explanations(response.content, len(ranked))
        if isinstance(result, Unparseable):
            metrics_counter("explanation_fallback", kind="unparseable")
            logger.warning(
                "explanation_unparseable",
                reason=result.reason,
                response_length=len(response.content or ""),
            )
        return result

    def _record_failure(self, model: str | None, started: float, error: str) -> None:
        log_llm_call(
            operation="search_explanation",
            model=model,
            latency_ms=(time.perf_counter() - started) * 1000,
            error=error,
        )
        metrics_counter("explanation_fallback", kind="provider_error")
        logger.warning("explanation_provider_failed", error=error)
