"""View strategy interface and the shared pre-computed camera path lookup."""

import logging
from dataclasses import dataclass
from typing import Any, Optional

import numpy as np

from .camera import CameraCommand, LookAt, interpolate_heading, lerp_vec3
from .errors import InsufficientDataError
from .settings import read_setting
from .track import TrackData

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PathEntry:
    time: float
    command: LookAt


class ViewStrategy:
    """A way of pointing the camera at a tour.

    ``build_path`` (re)computes whatever the strategy needs from the track
    and the current settings; ``state_at_time`` answers with a camera
    command for a clock time, or None when it has nothing to show. Neither
    raises: failures are logged and leave the strategy empty.
    """

    name = "base"
    # Whether stopping a tour flies out to the route overview
    exit_flight = True

    def __init__(self, settings: Any):
        self._settings = settings

    def setting(self, key: str) -> Any:
        return read_setting(self._settings, key)

    def build_path(self, track: Optional[TrackData]) -> None:
        raise NotImplementedError

    def state_at_time(self, time: float) -> Optional[CameraCommand]:
        raise NotImplementedError


class CachedPathStrategy(ViewStrategy):
    """Strategy whose camera path is computed up front and interpolated at playback."""

    def __init__(self, settings: Any):
        super().__init__(settings)
        self._times = np.zeros(0)
        self._entries: list[PathEntry] = []

    @property
    def path(self) -> list[PathEntry]:
        return list(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def build_path(self, track: Optional[TrackData]) -> None:
        """Regenerate the cached path; on failure the path is left empty."""
        self._entries = []
        self._times = np.zeros(0)
        if track is None:
            logger.warning("%s: no track data, camera path left empty", self.name)
            return

        logger.info("Generating %s camera path...", self.name)
        try:
            entries = self._generate(track)
        except InsufficientDataError as e:
            logger.warning("%s: %s; camera path left empty", self.name, e)
            return

        self._entries = entries
        self._times = np.array([e.time for e in entries], dtype=float)
        logger.info("%s camera path generated with %d points", self.name, len(entries))

    def _generate(self, track: TrackData) -> list[PathEntry]:
        raise NotImplementedError

    def state_at_time(self, time: float) -> Optional[LookAt]:
        """Interpolated command at ``time``, clamped to the first/last entry."""
        entries = self._entries
        if not entries:
            return None

        i = int(np.searchsorted(self._times, time, side="right")) - 1
        if i < 0:
            return entries[0].command
        if i >= len(entries) - 1:
            return entries[-1].command

        e1, e2 = entries[i], entries[i + 1]
        dt = e2.time - e1.time
        if dt <= 0:
            return e1.command
        alpha = (time - e1.time) / dt

        c1, c2 = e1.command, e2.command
        return LookAt(
            target=lerp_vec3(c1.target, c2.target, alpha),
            heading=interpolate_heading(c1.heading, c2.heading, alpha),
            pitch=c1.pitch + (c2.pitch - c1.pitch) * alpha,
            distance=c1.distance + (c2.distance - c1.distance) * alpha,
        )
