"""Chase strategy: follow the rider on demand, letting the user steer the heading."""

import logging
from typing import Any, Callable, Optional

import numpy as np

from .camera import LookAt, as_vec3, normalize_heading
from .route import points_to_cartesian
from .strategy import ViewStrategy
from .track import TrackData

logger = logging.getLogger(__name__)


class ChaseStrategy(ViewStrategy):
    """Interactive third-person view with no pre-computed path.

    Every query interpolates the rider's position from the raw track and
    pairs it with the live heading reported by ``heading_source`` (usually
    the viewport's current heading), so the user can rotate freely without
    anything being regenerated.
    """

    name = "chase"
    exit_flight = False

    def __init__(self, settings: Any, heading_source: Optional[Callable[[], float]] = None):
        super().__init__(settings)
        self._heading_source = heading_source or (lambda: 0.0)
        self._times = np.zeros(0)
        self._positions = np.zeros((0, 3))

    def build_path(self, track: Optional[TrackData]) -> None:
        logger.info("Chase strategy is interactive; storing track for on-demand use")
        if track is None or not track.points:
            self._times = np.zeros(0)
            self._positions = np.zeros((0, 3))
            return
        self._times = track.times()
        self._positions = points_to_cartesian(track.points)

    def position_at_time(self, time: float) -> Optional[np.ndarray]:
        """Rider position at ``time``, clamped to the first/last track point."""
        n = len(self._times)
        if n == 0:
            return None

        i = int(np.searchsorted(self._times, time, side="right")) - 1
        if i < 0:
            return self._positions[0]
        if i >= n - 1:
            return self._positions[-1]

        dt = self._times[i + 1] - self._times[i]
        if dt <= 0:
            return self._positions[i]
        alpha = (time - self._times[i]) / dt
        return self._positions[i] + (self._positions[i + 1] - self._positions[i]) * alpha

    def state_at_time(self, time: float) -> Optional[LookAt]:
        position = self.position_at_time(time)
        if position is None:
            return None
        return LookAt(
            target=as_vec3(position),
            heading=normalize_heading(float(self._heading_source())),
            pitch=float(self.setting("camera_pitch")),
            distance=float(self.setting("camera_distance")),
        )
