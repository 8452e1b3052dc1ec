import numpy as np
import pytest

from gpx_tour.resample import simplify_indices, simplify_path


def _random_walk(n=200, seed=3):
    rng = np.random.default_rng(seed)
    return np.cumsum(rng.normal(scale=10.0, size=(n, 3)), axis=0)


@pytest.mark.parametrize("min_sep", [0.0, 1.0, 15.0, 40.0, 1e6])
def test_keeps_endpoints_and_order(min_sep):
    pts = _random_walk()
    idx = simplify_indices(pts, min_sep)

    assert idx[0] == 0
    assert idx[-1] == len(pts) - 1
    assert np.all(np.diff(idx) > 0)

    out = simplify_path(pts, min_sep)
    np.testing.assert_array_equal(out, pts[idx])


@pytest.mark.parametrize("min_sep", [5.0, 15.0, 40.0])
def test_consecutive_outputs_respect_min_separation(min_sep):
    pts = _random_walk()
    out = simplify_path(pts, min_sep)
    if len(out) > 2:
        gaps = np.linalg.norm(np.diff(out, axis=0), axis=1)
        assert np.all(gaps >= min_sep)


def test_last_point_replaces_too_close_neighbor():
    pts = np.array([[x, 0.0, 0.0] for x in range(11)], dtype=float)
    idx = simplify_indices(pts, 3.0)
    assert idx.tolist() == [0, 3, 6, 10]


def test_huge_separation_leaves_only_endpoints():
    pts = _random_walk(50)
    assert simplify_indices(pts, 1e9).tolist() == [0, 49]


def test_non_positive_separation_returns_input():
    pts = _random_walk(20)
    np.testing.assert_array_equal(simplify_path(pts, -5.0), pts)
    assert simplify_indices(pts, 0).tolist() == list(range(20))


def test_short_input_unchanged():
    one = np.array([[1.0, 2.0, 3.0]])
    np.testing.assert_array_equal(simplify_path(one, 10.0), one)
    assert simplify_indices(np.zeros((0, 3)), 10.0).tolist() == []
