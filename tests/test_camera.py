import math

import numpy as np
import pytest

from gpx_tour.camera import (
    AbsolutePose,
    LookAt,
    compute_overview_pose,
    ease_in_out,
    heading_delta,
    interpolate_heading,
    interpolate_pose,
    look_at_to_pose,
    normalize_heading,
    resolve_pose,
)
from gpx_tour.route import points_to_cartesian, to_cartesian, to_geodetic


def test_normalize_heading():
    assert normalize_heading(-10.0) == pytest.approx(350.0)
    assert normalize_heading(360.0) == 0.0
    assert normalize_heading(725.0) == pytest.approx(5.0)


def test_heading_delta_takes_short_way():
    assert heading_delta(350.0, 10.0) == pytest.approx(20.0)
    assert heading_delta(10.0, 350.0) == pytest.approx(-20.0)
    assert heading_delta(180.0, 0.0) == pytest.approx(180.0)


def test_interpolate_heading_across_north():
    assert interpolate_heading(350.0, 10.0, 0.5) == pytest.approx(0.0, abs=1e-9)
    assert interpolate_heading(350.0, 10.0, 0.25) == pytest.approx(355.0)
    assert interpolate_heading(10.0, 350.0, 0.75) == pytest.approx(355.0)
    assert interpolate_heading(90.0, 180.0, 1.0) == pytest.approx(180.0)


def test_look_at_backs_camera_off_from_target():
    target = tuple(to_cartesian(0.0, 0.0))
    pose = look_at_to_pose(LookAt(target, heading=0.0, pitch=-45.0, distance=1000.0))

    assert np.linalg.norm(np.subtract(pose.position, target)) == pytest.approx(1000.0)
    assert pose.heading == pytest.approx(0.0, abs=0.05)
    assert pose.pitch == pytest.approx(-45.0, abs=0.05)
    assert pose.roll == 0.0

    lon, lat, ele = to_geodetic(pose.position)
    assert lat < 0.0  # south of a north-facing target
    assert ele == pytest.approx(707.1, abs=1.0)


def test_look_at_heading_east_places_camera_west():
    target = tuple(to_cartesian(0.0, 0.0))
    pose = look_at_to_pose(LookAt(target, heading=90.0, pitch=-30.0, distance=500.0))
    lon, _, _ = to_geodetic(pose.position)
    assert lon < 0.0
    assert pose.heading == pytest.approx(90.0, abs=0.05)
    assert pose.pitch == pytest.approx(-30.0, abs=0.05)


def test_look_at_straight_down_keeps_heading():
    target = tuple(to_cartesian(8.0, 46.0, 1500.0))
    pose = look_at_to_pose(LookAt(target, heading=30.0, pitch=-90.0, distance=2000.0))
    assert pose.heading == pytest.approx(30.0)
    assert pose.pitch == pytest.approx(-90.0)
    _, _, ele = to_geodetic(pose.position)
    assert ele == pytest.approx(3500.0, abs=1e-3)


def test_resolve_pose_passes_absolute_poses_through():
    pose = AbsolutePose((1.0, 2.0, 3.0), 10.0, -20.0)
    assert resolve_pose(pose) is pose


def test_ease_in_out_endpoints():
    assert ease_in_out(0.0) == 0.0
    assert ease_in_out(1.0) == 1.0
    assert ease_in_out(0.5) == pytest.approx(0.5)
    assert ease_in_out(-1.0) == 0.0
    assert ease_in_out(2.0) == 1.0


def test_interpolate_pose():
    a = AbsolutePose((0.0, 0.0, 0.0), 350.0, -90.0)
    b = AbsolutePose((10.0, 0.0, 0.0), 10.0, -30.0)
    assert interpolate_pose(a, b, 0.0) == a
    assert interpolate_pose(a, b, 1.0).position == pytest.approx(b.position)
    mid = interpolate_pose(a, b, 0.5)
    assert mid.position == pytest.approx((5.0, 0.0, 0.0))
    assert mid.heading == pytest.approx(0.0, abs=1e-9)
    assert mid.pitch == pytest.approx(-60.0)


def test_overview_frames_route(northbound_track):
    positions = points_to_cartesian(northbound_track.points)
    center = positions.mean(axis=0)
    radius = np.max(np.linalg.norm(positions - center, axis=1))

    pose = compute_overview_pose(positions)
    assert pose.pitch == pytest.approx(-90.0)
    assert np.linalg.norm(np.subtract(pose.position, center)) == pytest.approx(2.5 * radius)


def test_overview_of_single_point_uses_minimum_distance():
    positions = np.array([to_cartesian(8.0, 46.0, 0.0)])
    pose = compute_overview_pose(positions)
    assert np.linalg.norm(np.subtract(pose.position, positions[0])) == pytest.approx(500.0)
    assert math.isfinite(pose.heading)
