"""Camera commands: absolute poses, look-at directives and the math between them."""

import math
from dataclasses import dataclass
from typing import Union

import numpy as np

from .route import enu_frame

Vec3 = tuple[float, float, float]


@dataclass(frozen=True)
class AbsolutePose:
    position: Vec3  # Earth-centered Cartesian, meters
    heading: float  # degrees, 0=north, 90=east
    pitch: float  # degrees, negative looks down
    roll: float = 0.0


@dataclass(frozen=True)
class LookAt:
    target: Vec3  # point the camera orbits and looks at
    heading: float
    pitch: float
    distance: float  # meters from target to camera


CameraCommand = Union[AbsolutePose, LookAt]


def as_vec3(v) -> Vec3:
    return (float(v[0]), float(v[1]), float(v[2]))


def normalize_heading(heading: float) -> float:
    """Wrap a heading into [0, 360)."""
    h = math.fmod(heading, 360.0)
    if h < 0:
        h += 360.0
    # fmod of tiny negatives can round to exactly 360
    return 0.0 if h >= 360.0 else h


def heading_delta(h1: float, h2: float) -> float:
    """Signed turn from h1 to h2 the short way round, in (-180, 180]."""
    d = normalize_heading(h2) - normalize_heading(h1)
    if d > 180.0:
        d -= 360.0
    elif d <= -180.0:
        d += 360.0
    return d


def interpolate_heading(h1: float, h2: float, alpha: float) -> float:
    """Angular interpolation along the shorter arc, result in [0, 360)."""
    return normalize_heading(normalize_heading(h1) + heading_delta(h1, h2) * alpha)


def lerp_vec3(a: Vec3, b: Vec3, alpha: float) -> Vec3:
    return tuple(x + (y - x) * alpha for x, y in zip(a, b))


def look_at_to_pose(command: LookAt) -> AbsolutePose:
    """Resolve a look-at directive into the camera pose that realizes it.

    The camera is backed off from the target along heading/pitch in the
    target's local east-north-up frame; its own heading and pitch are then
    measured from the vector back to the target in the camera's local frame.
    Roll is always zero.
    """
    target = np.array(command.target, dtype=float)
    east, north, up = enu_frame(target)
    h = math.radians(command.heading)
    p = math.radians(command.pitch)

    # Viewing direction (camera -> target) expressed in the target frame
    view = (
        math.cos(p) * math.sin(h) * east
        + math.cos(p) * math.cos(h) * north
        + math.sin(p) * up
    )
    camera = target - command.distance * view

    to_target = target - camera
    norm = np.linalg.norm(to_target)
    if norm < 1e-9:
        return AbsolutePose(as_vec3(camera), normalize_heading(command.heading), command.pitch, 0.0)
    to_target /= norm

    c_east, c_north, c_up = enu_frame(camera)
    de, dn, du = np.dot(to_target, c_east), np.dot(to_target, c_north), np.dot(to_target, c_up)
    if math.hypot(de, dn) < 1e-9:
        heading = normalize_heading(command.heading)  # looking straight down
    else:
        heading = normalize_heading(math.degrees(math.atan2(de, dn)))
    pitch = math.degrees(math.asin(max(-1.0, min(1.0, du))))
    return AbsolutePose(as_vec3(camera), heading, pitch, 0.0)


def resolve_pose(command: CameraCommand) -> AbsolutePose:
    if isinstance(command, LookAt):
        return look_at_to_pose(command)
    return command


def ease_in_out(t: float) -> float:
    """Smoothstep ease-in-out: 0→1 with zero derivative at endpoints."""
    t = max(0.0, min(1.0, t))
    return t * t * (3.0 - 2.0 * t)


def interpolate_pose(start: AbsolutePose, end: AbsolutePose, t: float) -> AbsolutePose:
    """Interpolate two poses with ease-in-out; heading takes the short way."""
    s = ease_in_out(t)
    return AbsolutePose(
        position=lerp_vec3(start.position, end.position, s),
        heading=interpolate_heading(start.heading, end.heading, s),
        pitch=start.pitch + (end.pitch - start.pitch) * s,
        roll=start.roll + (end.roll - start.roll) * s,
    )


def compute_overview_pose(
    positions: np.ndarray,
    min_distance: float = 500.0,
    distance_factor: float = 2.5,
) -> AbsolutePose:
    """Bird's-eye pose framing the bounding sphere of the whole route."""
    positions = np.asarray(positions, dtype=float)
    center = positions.mean(axis=0)
    radius = float(np.max(np.linalg.norm(positions - center, axis=1)))
    command = LookAt(
        target=as_vec3(center),
        heading=0.0,
        pitch=-90.0,
        distance=max(min_distance, radius * distance_factor),
    )
    return look_at_to_pose(command)
