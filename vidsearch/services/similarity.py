"""
Similarity ranking

Brute-force cosine scoring of every candidate against the query vector.
Stored embeddings are untrusted: each one is parsed exactly once into a
ParsedVector before scoring, and scoring never raises on bad data.
"""

from __future__ import annotations

import json
import math
from dataclasses import dataclass
from typing import Any, Sequence, Union

from vidsearch.core.logging import get_logger
from vidsearch.models.video import Video

logger = get_logger(__name__)

DEFAULT_TOP_K = 5


@dataclass(frozen=True, slots=True)
class ValidVector:
    values: tuple[float, ...]


@dataclass(frozen=True, slots=True)
class InvalidVector:
    """Unusable stored embedding; scores as a zero vector."""

    reason: str


ParsedVector = Union[ValidVector, InvalidVector]


@dataclass(frozen=True, slots=True)
class RankedCandidate:
    video: Video
    similarity: float
    vector_valid: bool


def _to_float(value: Any) -> float | None:
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float, str)):
        try:
            return float(value)
        except (ValueError, OverflowError):
            return None
    return None


def parse_embedding(raw: Any, dimension: int) -> ParsedVector:
    """
    Interpret a raw stored embedding.

    Accepts a numeric array, or a string holding a JSON array (also the
    pgvector text form ``[0.1,0.2]``). Anything else, an empty array, or an
    array whose length differs from ``dimension`` is invalid. Non-finite
    entries are kept; they surface as a non-finite score and are zeroed there.
    """
    if raw is None:
        return InvalidVector("missing")

    if isinstance(raw, (bytes, bytearray)):
        raw = raw.decode("utf-8", errors="replace")

    if isinstance(raw, str):
        try:
            raw = json.loads(raw)
        except ValueError:
            return InvalidVector("undecodable")

    if not isinstance(raw, (list, tuple)):
        return InvalidVector("not_an_array")
    if len(raw) == 0:
        return InvalidVector("empty")
    if len(raw) != dimension:
        return InvalidVector("dimension_mismatch")

    values: list[float] = []
    for item in raw:
        number = _to_float(item)
        if number is None:
            return InvalidVector("non_numeric")
        values.append(number)

    return ValidVector(tuple(values))


def cosine_similarity(query: Sequence[float], candidate: ParsedVector) -> float:
    """
    Cosine similarity clamped to [0, 1].

    Invalid vectors, zero norms, length mismatches and non-finite results all
    score 0.0.
    """
    if not isinstance(candidate, ValidVector):
        return 0.0

    values = candidate.values
    if len(values) != len(query) or not values:
        return 0.0

    dot = sum(a * b for a, b in zip(query, values))
    norm_query = math.sqrt(sum(a * a for a in query))
    norm_candidate = math.sqrt(sum(b * b for b in values))

    denominator = norm_query * norm_candidate
    if denominator == 0 or not math.isfinite(denominator):
        return 0.0

    score = dot / denominator
    if not math.isfinite(score):
        return 0.0
    return min(max(score, 0.0), 1.0)


def score_candidates(
    query_vector: Sequence[float],
    candidates: Sequence[Video],
) -> list[RankedCandidate]:
    """
    Score every candidate and sort best first.

    No candidate is filtered out; invalid vectors score 0 and sink. The sort is
    stable, so equal scores keep the candidates' input order.
    """
    dimension = len(query_vector)
    scored: list[RankedCandidate] = []
    invalid_reasons: dict[str, int] = {}

    for video in candidates:
        parsed = parse_embedding(video.embedding, dimension)
        if isinstance(parsed, InvalidVector):
            invalid_reasons[parsed.reason] = invalid_reasons.get(parsed.reason, 0) + 1

        scored.append(
            RankedCandidate(
                video=video,
                similarity=cosine_similarity(query_vector, parsed),
                vector_valid=isinstance(parsed, ValidVector),
            )
        )

    if invalid_reasons:
        logger.warning(
            "invalid_candidate_embeddings",
            total=len(candidates),
            reasons=invalid_reasons,
        )

    scored.sort(key=lambda item: item.similarity, reverse=True)
    return scored


def rank_candidates(
    query_vector: Sequence[float],
    candidates: Sequence[Video],
    top_k: int = DEFAULT_TOP_K,
) -> list[RankedCandidate]:
    """Exhaustive scoring, then truncation to the first ``top_k``."""

    if top_k < 1:
        raise ValueError("top_k must be >= 1")

    return score_candidates(query_vector, candidates)[:top_k]
