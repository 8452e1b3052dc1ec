"""Shared fixtures: small hand-built routes and a headless render loop."""

import pytest

from gpx_tour.settings import TourSettings
from gpx_tour.track import TrackData, TrackPoint
from gpx_tour.viewport import RecordingViewport, TourClock


def make_track(coords, times, has_timestamps=True, **metrics) -> TrackData:
    """Build a TrackData from (lon, lat, elevation) tuples and matching times."""
    points = []
    for i, ((lon, lat, ele), t) in enumerate(zip(coords, times)):
        extra = {key: values[i] for key, values in metrics.items()}
        points.append(TrackPoint(lat=lat, lon=lon, elevation=ele, time=t, **extra))
    return TrackData.from_points(points, has_timestamps=has_timestamps)


@pytest.fixture
def three_point_track():
    return make_track([(0, 0, 0), (0, 0.001, 0), (0, 0.002, 0)], [0.0, 10.0, 20.0])


@pytest.fixture
def northbound_track():
    """A straight route due north along the prime meridian, one point a minute."""
    coords = [(0.0, 0.001 * i, 0.0) for i in range(31)]
    times = [60.0 * i for i in range(31)]
    return make_track(coords, times)


@pytest.fixture
def settings():
    return TourSettings(camera_transition_duration=0)


@pytest.fixture
def clock():
    return TourClock()


@pytest.fixture
def viewport(clock):
    return RecordingViewport(clock)
