"""Route geometry: geodesy on a spherical Earth and per-point route metrics."""

import dataclasses

import numpy as np
from scipy.ndimage import gaussian_filter1d

from .track import TrackPoint

EARTH_RADIUS = 6_371_000.0  # meters, shared by haversine and Cartesian conversion


def haversine(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """Distance in meters between two lat/lon points."""
    R = EARTH_RADIUS
    phi1, phi2 = np.radians(lat1), np.radians(lat2)
    dphi = np.radians(lat2 - lat1)
    dlam = np.radians(lon2 - lon1)
    a = np.sin(dphi / 2) ** 2 + np.cos(phi1) * np.cos(phi2) * np.sin(dlam / 2) ** 2
    return float(2 * R * np.arctan2(np.sqrt(a), np.sqrt(1 - a)))


def compute_cumulative_distances(points: list[TrackPoint]) -> np.ndarray:
    """Compute cumulative arc-length distance along the track."""
    dists = np.zeros(len(points))
    for i in range(1, len(points)):
        dists[i] = dists[i - 1] + haversine(
            points[i - 1].lat, points[i - 1].lon,
            points[i].lat, points[i].lon,
        )
    return dists


def compute_bearing(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """Bearing in degrees (0=north, 90=east) from point 1 to point 2."""
    phi1, phi2 = np.radians(lat1), np.radians(lat2)
    dlam = np.radians(lon2 - lon1)
    x = np.sin(dlam) * np.cos(phi2)
    y = np.cos(phi1) * np.sin(phi2) - np.sin(phi1) * np.cos(phi2) * np.cos(dlam)
    bearing = np.degrees(np.arctan2(x, y))
    return float((bearing + 360) % 360)


def to_cartesian(lon: float, lat: float, elevation: float = 0.0) -> np.ndarray:
    """Earth-centered Cartesian position (meters) of a geodetic point."""
    lam, phi = np.radians(lon), np.radians(lat)
    r = EARTH_RADIUS + elevation
    return np.array([
        r * np.cos(phi) * np.cos(lam),
        r * np.cos(phi) * np.sin(lam),
        r * np.sin(phi),
    ])


def to_geodetic(position: np.ndarray) -> tuple[float, float, float]:
    """Inverse of :func:`to_cartesian`: (lon, lat, elevation)."""
    x, y, z = (float(c) for c in position)
    r = float(np.sqrt(x * x + y * y + z * z))
    if r == 0.0:
        return 0.0, 0.0, -EARTH_RADIUS
    lat = float(np.degrees(np.arcsin(z / r)))
    lon = float(np.degrees(np.arctan2(y, x)))
    return lon, lat, r - EARTH_RADIUS


def points_to_cartesian(points: list[TrackPoint]) -> np.ndarray:
    """Convert TrackPoints to an (N, 3) array of Cartesian positions."""
    if not points:
        return np.zeros((0, 3))
    return np.array([to_cartesian(p.lon, p.lat, p.elevation) for p in points])


def enu_frame(position: np.ndarray) -> tuple[np.ndarray, np.ndarray, np.ndarray]:
    """East, north and up unit vectors of the local tangent frame at ``position``."""
    up = np.asarray(position, dtype=float)
    norm = np.linalg.norm(up)
    up = up / norm if norm > 0 else np.array([0.0, 0.0, 1.0])
    east = np.array([-up[1], up[0], 0.0])
    e_norm = np.linalg.norm(east)
    if e_norm < 1e-12:
        # At a pole east is undefined; pick the prime meridian convention
        east = np.array([0.0, 1.0, 0.0])
    else:
        east /= e_norm
    north = np.cross(up, east)
    return east, north, up


def bearing_between(a: np.ndarray, b: np.ndarray) -> float:
    """Geodetic bearing in degrees from Cartesian point ``a`` to ``b``."""
    lon1, lat1, _ = to_geodetic(a)
    lon2, lat2, _ = to_geodetic(b)
    return compute_bearing(lat1, lon1, lat2, lon2)


def heading_of_direction(position: np.ndarray, direction: np.ndarray) -> float:
    """Compass heading in degrees of a Cartesian direction vector at ``position``."""
    east, north, _ = enu_frame(position)
    heading = np.degrees(np.arctan2(np.dot(direction, east), np.dot(direction, north)))
    return float((heading + 360) % 360)


def compute_cumulative_elevation_gain(points: list[TrackPoint], sigma: float = 10.0) -> np.ndarray:
    """Compute cumulative positive elevation gain at each point."""
    elevs = np.array([p.elevation for p in points], dtype=float)
    if len(elevs) == 0:
        return elevs
    # Smooth elevation to remove GPS noise before computing gain
    if sigma > 0:
        elevs = gaussian_filter1d(elevs, sigma=sigma)
    gain = np.zeros(len(elevs))
    for i in range(1, len(elevs)):
        delta = elevs[i] - elevs[i - 1]
        gain[i] = gain[i - 1] + max(0.0, delta)
    return gain


def compute_smoothed_rates(
    points: list[TrackPoint],
    cum_dist: np.ndarray,
    sigma: float = 5.0,
) -> tuple[np.ndarray, np.ndarray]:
    """Smoothed speed (km/h) and vertical rate (m/h) at each point from its timestamps."""
    n = len(points)
    speeds = np.zeros(n)
    vrates = np.zeros(n)
    for i in range(1, n):
        dt = points[i].time - points[i - 1].time
        if dt > 0:
            speeds[i] = (cum_dist[i] - cum_dist[i - 1]) / dt * 3.6  # m/s -> km/h
            vrates[i] = (points[i].elevation - points[i - 1].elevation) / dt * 3600.0
    if n > 1:
        speeds[0] = speeds[1]
        vrates[0] = vrates[1]

    # Smooth to reduce GPS noise
    if n > 0 and sigma > 0:
        speeds = gaussian_filter1d(speeds, sigma=sigma)
        vrates = gaussian_filter1d(vrates, sigma=sigma)
    return np.clip(speeds, 0, None), vrates


def annotate_track(points: list[TrackPoint], has_timestamps: bool = True) -> list[TrackPoint]:
    """Fill in per-point distance, ascent and actual rates the upstream pipeline left unset.

    Values already present on a point are kept. Actual rates are only derived
    when the points carry real timestamps.
    """
    if not points:
        return []

    cum_dist = compute_cumulative_distances(points)
    cum_gain = compute_cumulative_elevation_gain(points)
    if has_timestamps:
        speeds, vrates = compute_smoothed_rates(points, cum_dist)
    else:
        speeds = vrates = None

    annotated = []
    for i, p in enumerate(points):
        updates = {}
        if p.cumulative_distance is None:
            updates["cumulative_distance"] = float(cum_dist[i])
        if p.cumulative_elevation_gain is None:
            updates["cumulative_elevation_gain"] = float(cum_gain[i])
        if speeds is not None and p.actual_speed is None:
            updates["actual_speed"] = float(speeds[i])
        if vrates is not None and p.actual_elevation_rate is None:
            updates["actual_elevation_rate"] = float(vrates[i])
        annotated.append(dataclasses.replace(p, **updates) if updates else p)
    return annotated


def compute_bounds(points: list[TrackPoint]) -> dict:
    """Return bounding box as {sw: [lng, lat], ne: [lng, lat]}."""
    lats = [p.lat for p in points]
    lons = [p.lon for p in points]
    return {
        "sw": [min(lons), min(lats)],
        "ne": [max(lons), max(lats)],
    }
