import pytest

from app.services.similarity import cosine_similarity


def test_self_similarity_is_one():
    for vec in ([1.0, 2.0, 3.0], [0.1, -0.4, 0.7, 0.0], [5.0]):
        assert cosine_similarity(vec, vec) == pytest.approx(1.0)


def test_symmetric():
    pairs = [
        ([1.0, 2.0, 3.0], [3.0, -1.0, 0.5]),
        ([0.12, 0.98, 0.33], [0.5, 0.5, 0.5]),
        ([1e-3, 2e-3], [4e3, -1e3]),
    ]
    for a, b in pairs:
        assert cosine_similarity(a, b) == cosine_similarity(b, a)


def test_orthogonal_and_opposite():
    assert cosine_similarity([1, 0, 0], [0, 1, 0]) == 0.0
    # no clamping
    assert cosine_similarity([1, 0], [-1, 0]) == pytest.approx(-1.0)


def test_degenerate_inputs_score_zero():
    assert cosine_similarity([1, 2, 3], [1, 2]) == 0.0
    assert cosine_similarity(None, [1, 2]) == 0.0
    assert cosine_similarity([1, 2], None) == 0.0
    assert cosine_similarity([], []) == 0.0
    assert cosine_similarity([0, 0, 0], [1, 2, 3]) == 0.0
    assert cosine_similarity([1, 2, 3], [0.0, 0.0, 0.0]) == 0.0
    assert cosine_similarity(["a", "b"], [1, 2]) == 0.0


def test_returns_plain_float():
    score = cosine_similarity([1, 1], [1, 0])
    assert type(score) is float
    assert score == pytest.approx(0.7071067811865475)


def test_extreme_magnitudes_do_not_overflow():
    assert cosine_similarity([1e200, 1e200], [1e200, 1e200]) == pytest.approx(1.0)
    assert cosine_similarity([1e-200, 1e-200], [2e-200, 2e-200]) == pytest.approx(1.0)
    assert cosine_similarity([1e200, 0.0], [0.0, 1e-200]) == 0.0


def test_non_finite_values_score_zero():
    assert cosine_similarity([float("nan"), 1.0], [1.0, 1.0]) == 0.0
    assert cosine_similarity([1.0, 1.0], [float("inf"), 1.0]) == 0.0
