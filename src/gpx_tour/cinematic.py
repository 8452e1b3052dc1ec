"""Cinematic strategy: smooth pursuit along a spline with a decay-weighted gaze anchor."""

import logging
import math

import numpy as np

from .camera import LookAt, as_vec3, normalize_heading
from .errors import InsufficientDataError
from .route import bearing_between, heading_of_direction, to_cartesian
from .strategy import CachedPathStrategy, PathEntry
from .timed_curve import RouteCurve
from .track import TrackData

logger = logging.getLogger(__name__)

# Look-ahead targets closer than this (meters) give no usable bearing
_MIN_GAZE_DISTANCE = 0.01


def look_ahead_targets(
    times: np.ndarray,
    positions: np.ndarray,
    look_ahead: float,
    half_life: float,
) -> np.ndarray:
    """Decay-weighted average of the positions ahead of each sample.

    For sample i the window covers every sample with time in
    [t_i, t_i + look_ahead]; each is weighted by exp(-age / half_life) where
    age is its time offset from t_i. The cost is proportional to the window
    length per sample rather than the whole route.
    """
    n = len(times)
    targets = np.empty_like(positions)
    ends = np.searchsorted(times, times + max(0.0, look_ahead), side="right")
    for i in range(n - 1, -1, -1):
        end = max(int(ends[i]), i + 1)
        ages = times[i:end] - times[i]
        if half_life > 0:
            weights = np.exp(-ages / half_life)
        else:
            weights = (ages == 0).astype(float)
        total = weights.sum()
        if total > 0:
            targets[i] = weights @ positions[i:end] / total
        else:
            targets[i] = positions[i]
    return targets


class CinematicStrategy(CachedPathStrategy):
    """Pursuit camera over a simplified, distance-parameterized route spline.

    The spline is sampled at a fixed number of samples per minute of tour.
    Each sample looks at its own curve point, with the heading taken as the
    bearing towards a lagging, smoothed look-ahead point so that the camera
    turns with the route's general direction instead of every wiggle.
    """

    name = "cinematic"

    def _generate(self, track: TrackData) -> list[PathEntry]:
        points = track.points
        if not points:
            raise InsufficientDataError("cinematic path needs at least 1 track point")

        pitch = float(self.setting("camera_pitch"))
        distance = float(self.setting("camera_distance"))

        if len(points) == 1:
            p = points[0]
            command = LookAt(as_vec3(to_cartesian(p.lon, p.lat, p.elevation)), 0.0, pitch, distance)
            return [PathEntry(p.time, command)]

        curve = RouteCurve(
            points,
            tension=float(self.setting("camera_spline_tension")),
            min_separation=float(self.setting("camera_path_detail")),
        )
        if len(curve.control_indices) < 2:
            raise InsufficientDataError("simplified path has too few points for a spline")

        times = self._sample_times(track)
        logger.debug(
            "Sampling %d curve points from %d control points",
            len(times), len(curve.control_indices),
        )
        positions = np.array([curve.point_at_time(t) for t in times])

        if len(times) == 1:
            return [PathEntry(float(times[0]), LookAt(as_vec3(positions[0]), 0.0, pitch, distance))]

        targets = look_ahead_targets(
            times,
            positions,
            look_ahead=float(self.setting("camera_look_ahead_time")),
            half_life=float(self.setting("camera_gaze_smoothing")),
        )

        headings = np.zeros(len(times))
        for i in range(len(times) - 1):
            if np.linalg.norm(targets[i] - positions[i]) > _MIN_GAZE_DISTANCE:
                headings[i] = bearing_between(positions[i], targets[i])
            else:
                headings[i] = heading_of_direction(positions[i], curve.tangent_at_time(times[i]))
        # Nothing lies ahead of the final sample
        headings[-1] = headings[-2]

        headings += self._azimuth_sweep(curve, times)

        return [
            PathEntry(
                time=float(t),
                command=LookAt(as_vec3(pos), normalize_heading(float(h)), pitch, distance),
            )
            for t, pos, h in zip(times, positions, headings)
        ]

    def _sample_times(self, track: TrackData) -> np.ndarray:
        duration = track.stop_time - track.start_time
        if duration <= 0:
            return np.array([float(track.start_time)])
        density = float(self.setting("camera_path_sample_density"))
        count = max(2, int(math.ceil(duration / 60.0 * density)) + 1)
        return np.linspace(track.start_time, track.stop_time, count)

    def _azimuth_sweep(self, curve: RouteCurve, times: np.ndarray) -> np.ndarray:
        """Sideways orbit offset (degrees), faster on straights than in turns."""
        max_azimuth = float(self.setting("camera_max_azimuth"))
        if max_azimuth <= 0:
            return np.zeros(len(times))

        frequency = float(self.setting("camera_azimuth_freq"))
        offsets = np.zeros(len(times))
        for i, t in enumerate(times):
            param = curve.parameter_at_time(t)
            t1 = curve.curve.tangent_at(param)
            t2 = curve.curve.tangent_at(min(param + 0.001, 1.0))
            bend = math.acos(max(-1.0, min(1.0, float(np.dot(t1, t2)))))
            straightness = 1.0 - bend / math.pi
            modulated = frequency * (1.0 + 2.0 * straightness)
            offsets[i] = max_azimuth * math.sin((t - times[0]) * modulated)
        return offsets
