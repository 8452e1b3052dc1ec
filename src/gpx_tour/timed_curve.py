"""Time-aware route curve: distance-parameterized spline sampled by clock time."""

import logging

import numpy as np

from .errors import InsufficientDataError
from .resample import simplify_indices
from .route import compute_cumulative_distances, points_to_cartesian
from .spline import CatmullRomCurve
from .track import TrackPoint

logger = logging.getLogger(__name__)


class RouteCurve:
    """Catmull-Rom curve over a route whose shape ignores recording speed.

    Every recorded point gets a curve parameter equal to its normalized
    cumulative distance, so stops and sprints do not bend the path. The
    control points are the recorded points surviving simplification at
    ``min_separation`` meters, each keeping its own distance parameter. A
    (time, parameter) table over all recorded points maps clock time onto
    the curve.
    """

    def __init__(
        self,
        points: list[TrackPoint],
        tension: float = 0.5,
        min_separation: float = 0.0,
    ):
        if len(points) < 2:
            raise InsufficientDataError("A route curve requires at least 2 track points")

        cum_dist = compute_cumulative_distances(points)
        total = cum_dist[-1]
        # A route that never moves collapses every parameter to 0
        self.time_params = cum_dist / total if total > 0 else np.zeros(len(points))
        self.times = np.array([p.time for p in points], dtype=float)
        self.total_distance = float(total)

        positions = points_to_cartesian(points)
        keep = simplify_indices(positions, min_separation)
        self.control_indices = keep
        self.curve = CatmullRomCurve(positions[keep], tension=tension, params=self.time_params[keep])
        logger.debug(
            "Route curve: %d track points -> %d control points (min separation %.1f m)",
            len(points), len(keep), min_separation,
        )

    @property
    def start_time(self) -> float:
        return float(self.times[0])

    @property
    def stop_time(self) -> float:
        return float(self.times[-1])

    def parameter_at_time(self, time: float) -> float:
        """Curve parameter for a clock time; 0 before the route starts, 1 after it ends."""
        times = self.times
        if time <= times[0]:
            return 0.0
        if time >= times[-1]:
            return 1.0
        i = int(np.searchsorted(times, time, side="right")) - 1
        i = min(max(i, 0), len(times) - 2)
        dt = times[i + 1] - times[i]
        if dt <= 0:
            return float(self.time_params[i])
        alpha = (time - times[i]) / dt
        p1, p2 = self.time_params[i], self.time_params[i + 1]
        return float(p1 + alpha * (p2 - p1))

    def point_at_time(self, time: float) -> np.ndarray:
        return self.curve.point_at(self.parameter_at_time(time))

    def tangent_at_time(self, time: float) -> np.ndarray:
        return self.curve.tangent_at(self.parameter_at_time(time))
