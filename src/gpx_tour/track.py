"""Route data consumed by the tour engine: track points and tour bounds."""

import math
from dataclasses import dataclass, field
from typing import Optional

import numpy as np

# Meters per degree of latitude
M_PER_DEG_LAT = 111_319.0


@dataclass(frozen=True)
class TrackPoint:
    lat: float
    lon: float
    elevation: float  # meters
    time: float = 0.0  # POSIX seconds, or projected seconds from start

    # Per-point analytics supplied by the upstream pipeline (None = unknown)
    cumulative_distance: Optional[float] = None  # meters
    cumulative_elevation_gain: Optional[float] = None  # meters
    cumulative_energy: Optional[float] = None  # kcal
    actual_speed: Optional[float] = None  # km/h, smoothed
    planned_speed: Optional[float] = None  # km/h, smoothed
    actual_elevation_rate: Optional[float] = None  # m/h, smoothed
    planned_elevation_rate: Optional[float] = None  # m/h, smoothed
    actual_effort_rate: Optional[float] = None  # effort-km/h, smoothed
    planned_effort_rate: Optional[float] = None  # effort-km/h, smoothed


@dataclass
class TrackData:
    """An ordered route plus the time window a tour plays it over.

    ``has_timestamps`` is False when the source had no clock times and
    ``TrackPoint.time`` holds projected seconds from a start of 0.
    """

    points: list[TrackPoint]
    start_time: float
    stop_time: float
    has_timestamps: bool = True
    name: str = field(default="", compare=False)

    @classmethod
    def from_points(
        cls,
        points: list[TrackPoint],
        has_timestamps: bool = True,
        name: str = "",
    ) -> "TrackData":
        """Build tour bounds from the first and last point times."""
        if not points:
            return cls([], 0.0, 0.0, has_timestamps, name)
        return cls(list(points), points[0].time, points[-1].time, has_timestamps, name)

    @property
    def duration(self) -> float:
        return self.stop_time - self.start_time

    def times(self) -> np.ndarray:
        return np.array([p.time for p in self.points], dtype=float)

    def __len__(self) -> int:
        return len(self.points)


def synthetic_track(
    kind: str = "loop",
    num_points: int = 600,
    duration_s: float = 3 * 3600.0,
    start_time: float = 1_735_722_000.0,  # 2025-01-01 09:00:00 UTC
    center_lat: float = 46.55,
    center_lon: float = 7.98,
    radius_m: float = 4000.0,
    has_timestamps: bool = True,
) -> TrackData:
    """Generate a demo route with timestamps and rolling elevation.

    ``loop`` rides a wobbly circle back to the start; ``out-and-back`` heads
    north-east and returns along the same line. Speed varies along the route
    so time and distance are not proportional.
    """
    if num_points < 2:
        raise ValueError("A synthetic track needs at least 2 points")
    if kind not in ("loop", "out-and-back"):
        raise ValueError(f"Unknown synthetic track kind '{kind}'")

    s = np.linspace(0.0, 1.0, num_points)
    if kind == "loop":
        theta = 2 * math.pi * s
        r = radius_m * (1.0 + 0.08 * np.sin(5 * theta))
        x = r * np.sin(theta)
        y = r * np.cos(theta) - radius_m
    else:
        along = radius_m * 2 * (1.0 - np.abs(2 * s - 1.0))
        x = along * math.sin(math.radians(45)) + 40.0 * np.sin(12 * math.pi * s)
        y = along * math.cos(math.radians(45))

    elevation = 1200.0 + 250.0 * np.sin(2 * math.pi * s) + 40.0 * np.sin(9 * math.pi * s)

    # Uneven pacing: slower on climbs
    pace = 1.0 + 0.5 * np.clip(np.gradient(elevation), 0, None) / max(1e-9, np.ptp(elevation) / num_points)
    elapsed = np.concatenate([[0.0], np.cumsum(pace[1:])])
    elapsed *= duration_s / elapsed[-1]

    lat = center_lat + y / M_PER_DEG_LAT
    lon = center_lon + x / (M_PER_DEG_LAT * math.cos(math.radians(center_lat)))
    base = start_time if has_timestamps else 0.0

    points = [
        TrackPoint(
            lat=float(lat[i]),
            lon=float(lon[i]),
            elevation=float(elevation[i]),
            time=float(base + elapsed[i]),
        )
        for i in range(num_points)
    ]
    return TrackData.from_points(points, has_timestamps=has_timestamps, name=f"synthetic {kind}")
