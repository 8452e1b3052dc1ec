"""Catmull-Rom curve through ordered 3D control points."""

from typing import Optional, Sequence

import numpy as np

from .errors import InsufficientDataError


class CatmullRomCurve:
    """Cardinal (Catmull-Rom) spline evaluated over a normalized parameter.

    Each control point carries a parameter value in [0, 1]. By default these
    are uniform (i / (n - 1)); callers may pass their own, e.g. normalized
    cumulative distance, as long as they never decrease. The curve passes
    through every control point, repeats the boundary points at either end
    and never extrapolates past them.

    ``tension`` scales the tangents: 0.5 is the classic Catmull-Rom curve,
    0 gives straight-ish segments with flat tangents.
    """

    def __init__(
        self,
        points: Sequence[Sequence[float]],
        tension: float = 0.5,
        params: Optional[Sequence[float]] = None,
    ):
        pts = np.asarray(points, dtype=float)
        if pts.ndim != 2 or len(pts) < 2:
            raise InsufficientDataError("A Catmull-Rom curve requires at least 2 control points")

        if params is None:
            params = np.linspace(0.0, 1.0, len(pts))
        else:
            params = np.asarray(params, dtype=float)
            if params.shape != (len(pts),):
                raise ValueError(
                    f"Expected {len(pts)} parameter values, got {params.shape[0] if params.ndim else 0}"
                )
            if np.any(np.diff(params) < 0):
                raise ValueError("Curve parameter values must be non-decreasing")

        self.points = pts
        self.params = params
        self.tension = float(tension)

    def __len__(self) -> int:
        return len(self.points)

    def _locate(self, t: float) -> tuple[int, float]:
        """Segment index and local parameter u in [0, 1] for global ``t``."""
        t = min(1.0, max(0.0, float(t)))
        params = self.params
        last = len(params) - 2
        if t <= params[0]:
            return 0, 0.0
        if t >= params[-1]:
            return last, 1.0
        # params[i] <= t < params[i + 1], so the span is never zero here
        i = int(np.searchsorted(params, t, side="right")) - 1
        i = min(max(i, 0), last)
        span = params[i + 1] - params[i]
        if span <= 0:
            return i, 0.0
        return i, (t - params[i]) / span

    def _segment(self, i: int) -> tuple[np.ndarray, np.ndarray, np.ndarray, np.ndarray]:
        pts = self.points
        n = len(pts)
        return pts[max(i - 1, 0)], pts[i], pts[i + 1], pts[min(i + 2, n - 1)]

    def point_at(self, t: float) -> np.ndarray:
        """Position on the curve at global parameter ``t`` (clamped to [0, 1])."""
        i, u = self._locate(t)
        p0, p1, p2, p3 = self._segment(i)
        if len(self.points) == 2:
            return p1 + (p2 - p1) * u

        u2 = u * u
        u3 = u2 * u
        m1 = self.tension * (p2 - p0)
        m2 = self.tension * (p3 - p1)
        return (
            (2 * u3 - 3 * u2 + 1) * p1
            + (u3 - 2 * u2 + u) * m1
            + (-2 * u3 + 3 * u2) * p2
            + (u3 - u2) * m2
        )

    def points_at(self, ts: Sequence[float]) -> np.ndarray:
        """Positions for several parameters as an (N, 3) array."""
        return np.array([self.point_at(t) for t in ts]).reshape(-1, self.points.shape[1])

    def tangent_at(self, t: float) -> np.ndarray:
        """Unit forward direction at ``t``.

        Uses the analytic derivative of the segment. Where it vanishes (flat
        tangents or stacked control points) the nearest non-zero chord is used
        instead; a curve whose points all coincide has a zero tangent.
        """
        i, u = self._locate(t)
        p0, p1, p2, p3 = self._segment(i)
        if len(self.points) == 2:
            d = p2 - p1
        else:
            u2 = u * u
            m1 = self.tension * (p2 - p0)
            m2 = self.tension * (p3 - p1)
            d = (
                (6 * u2 - 6 * u) * p1
                + (3 * u2 - 4 * u + 1) * m1
                + (-6 * u2 + 6 * u) * p2
                + (3 * u2 - 2 * u) * m2
            )

        norm = np.linalg.norm(d)
        if norm > 1e-12:
            return d / norm
        return self._chord_direction(i)

    def _chord_direction(self, i: int) -> np.ndarray:
        pts = self.points
        n = len(pts)
        for offset in range(n):
            for j in (i + offset, i - offset):
                if 0 <= j < n - 1:
                    chord = pts[j + 1] - pts[j]
                    norm = np.linalg.norm(chord)
                    if norm > 1e-12:
                        return chord / norm
        return np.zeros(pts.shape[1])
