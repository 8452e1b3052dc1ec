import numpy as np
import pytest

from gpx_tour.errors import InsufficientDataError
from gpx_tour.route import to_cartesian
from gpx_tour.timed_curve import RouteCurve

from conftest import make_track


def test_parameter_follows_distance_not_time():
    # Equal distances, very unequal durations
    track = make_track([(0.0, 0, 0), (0.001, 0, 0), (0.002, 0, 0)], [0.0, 100.0, 110.0])
    curve = RouteCurve(track.points)
    assert curve.parameter_at_time(50.0) == pytest.approx(0.25)
    assert curve.parameter_at_time(100.0) == pytest.approx(0.5)
    assert curve.parameter_at_time(105.0) == pytest.approx(0.75)


def test_parameter_is_clamped_and_monotonic(northbound_track):
    curve = RouteCurve(northbound_track.points)
    params = [curve.parameter_at_time(t) for t in np.linspace(-500, 2500, 301)]
    assert params[0] == 0.0
    assert params[-1] == 1.0
    assert np.all(np.diff(params) >= 0)


def test_endpoints_match_track(northbound_track):
    curve = RouteCurve(northbound_track.points)
    np.testing.assert_allclose(curve.point_at_time(curve.start_time), to_cartesian(0.0, 0.0), atol=1e-6)
    np.testing.assert_allclose(curve.point_at_time(curve.stop_time), to_cartesian(0.0, 0.03), atol=1e-6)


def test_simplified_control_points_keep_their_parameters(northbound_track):
    curve = RouteCurve(northbound_track.points, min_separation=250.0)
    keep = curve.control_indices
    assert keep[0] == 0
    assert keep[-1] == len(northbound_track) - 1
    assert len(keep) < len(northbound_track)
    for k in keep:
        p = northbound_track.points[k]
        np.testing.assert_allclose(curve.point_at_time(p.time), to_cartesian(p.lon, p.lat), atol=1e-6)


def test_tangent_points_along_route(northbound_track):
    curve = RouteCurve(northbound_track.points)
    tangent = curve.tangent_at_time(900.0)
    assert tangent[2] > 0.99


def test_stationary_route_collapses_to_one_point():
    track = make_track([(8.0, 46.0, 500.0)] * 4, [0.0, 10.0, 20.0, 30.0])
    curve = RouteCurve(track.points)
    assert curve.total_distance == 0.0
    np.testing.assert_allclose(curve.time_params, 0.0)
    np.testing.assert_allclose(curve.point_at_time(15.0), to_cartesian(8.0, 46.0, 500.0))
    np.testing.assert_allclose(curve.tangent_at_time(15.0), 0.0)


def test_repeated_timestamps_do_not_break_lookup():
    track = make_track([(0, 0.000, 0), (0, 0.001, 0), (0, 0.002, 0), (0, 0.003, 0)], [0.0, 10.0, 10.0, 20.0])
    curve = RouteCurve(track.points)
    assert np.isfinite(curve.parameter_at_time(10.0))
    assert 0.0 <= curve.parameter_at_time(10.0) <= 1.0


def test_requires_two_points():
    track = make_track([(0, 0, 0)], [0.0])
    with pytest.raises(InsufficientDataError):
        RouteCurve(track.points)
