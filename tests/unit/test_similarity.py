import json
import math

import pytest

from vidsearch.services.similarity import (
    InvalidVector,
    ValidVector,
    cosine_similarity,
    parse_embedding,
    rank_candidates,
    score_candidates,
)


@pytest.mark.parametrize(
    "raw, reason",
    [
        (None, "missing"),
        ("not json", "undecodable"),
        ({"values": [1, 2, 3]}, "not_an_array"),
        (42, "not_an_array"),
        ([], "empty"),
        ([0.1, 0.2], "dimension_mismatch"),
        ([0.1, "x", 0.3], "non_numeric"),
        ([0.1, None, 0.3], "non_numeric"),
        ([True, 0.0, 1.0], "non_numeric"),
    ],
)
def test_parse_embedding_invalid(raw, reason) -> None:
    assert parse_embedding(raw, 3) == InvalidVector(reason)


def test_parse_embedding_accepts_arrays_and_serialized_arrays() -> None:
    expected = ValidVector((0.1, 0.2, 0.3))

    assert parse_embedding([0.1, 0.2, 0.3], 3) == expected
    assert parse_embedding(json.dumps([0.1, 0.2, 0.3]), 3) == expected
    assert parse_embedding("[0.1,0.2,0.3]".encode(), 3) == expected
    assert parse_embedding(["0.1", "0.2", "0.3"], 3) == expected


def test_equal_nonzero_vectors_score_one() -> None:
    vector = [0.3, -1.2, 4.5]
    assert cosine_similarity(vector, ValidVector(tuple(vector))) == pytest.approx(1.0)


def test_orthogonal_vectors_score_zero() -> None:
    assert cosine_similarity([1.0, 0.0], ValidVector((0.0, 1.0))) == 0.0


def test_opposite_vectors_clamp_to_zero() -> None:
    assert cosine_similarity([1.0, 2.0], ValidVector((-1.0, -2.0))) == 0.0


def test_zero_vectors_score_zero() -> None:
    assert cosine_similarity([0.0, 0.0], ValidVector((1.0, 1.0))) == 0.0
    assert cosine_similarity([1.0, 1.0], ValidVector((0.0, 0.0))) == 0.0


def test_non_finite_values_score_zero() -> None:
    assert cosine_similarity([1.0, 1.0], ValidVector((math.nan, 1.0))) == 0.0
    assert cosine_similarity([1.0, 1.0], ValidVector((math.inf, 1.0))) == 0.0


def test_invalid_vector_scores_zero() -> None:
    assert cosine_similarity([1.0, 1.0], InvalidVector("missing")) == 0.0


def test_scores_stay_within_unit_interval() -> None:
    query = [0.9, -0.4, 0.2]
    for candidate in ([1e-300, 1e-300, 1e-300], [5.0, -2.0, 1.0], [-3.0, 1.0, 0.0]):
        score = cosine_similarity(query, ValidVector(tuple(candidate)))
        assert 0.0 <= score <= 1.0


def test_invalid_candidates_are_kept_and_sink(make_video) -> None:
    good = make_video(embedding=[1.0, 0.0, 0.0])
    broken = make_video(embedding="{oops")
    short = make_video(embedding=[1.0, 0.0])

    ranked = score_candidates([1.0, 0.0, 0.0], [broken, good, short])

    assert [r.video for r in ranked] == [good, broken, short]
    assert ranked[0].vector_valid is True
    assert [r.similarity for r in ranked[1:]] == [0.0, 0.0]
    assert not any(r.vector_valid for r in ranked[1:])


def test_ties_keep_input_order(make_video) -> None:
    videos = [make_video(embedding=[1.0, 1.0, 0.0]) for _ in range(4)]

    ranked = score_candidates([1.0, 1.0, 0.0], videos)

    assert [r.video for r in ranked] == videos


def test_rank_truncates_to_top_k_descending(make_video) -> None:
    videos = [make_video(embedding=[1.0, float(i), 0.0]) for i in range(8)]

    ranked = rank_candidates([1.0, 0.0, 0.0], videos)

    assert len(ranked) == 5
    similarities = [r.similarity for r in ranked]
    assert similarities == sorted(similarities, reverse=True)
    assert ranked[0].video is videos[0]


def test_rank_with_fewer_candidates_than_k(make_video) -> None:
    videos = [make_video(embedding=[0.0, 1.0, 0.0]), make_video(embedding=None)]

    assert len(rank_candidates([0.0, 1.0, 0.0], videos, top_k=5)) == 2
    assert rank_candidates([0.0, 1.0, 0.0], [], top_k=5) == []


def test_rank_rejects_non_positive_k() -> None:
    with pytest.raises(ValueError):
        rank_candidates([1.0], [], top_k=0)
