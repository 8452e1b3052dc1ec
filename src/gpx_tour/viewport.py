"""Render-surface contract plus a headless viewport and tour clock that drive it."""

import logging
from typing import Callable, Optional, Protocol

from .camera import AbsolutePose, CameraCommand, LookAt, look_at_to_pose, normalize_heading
from .route import EARTH_RADIUS

logger = logging.getLogger(__name__)

TickCallback = Callable[[float, float], None]  # (clock time, real seconds since last frame)
Disposer = Callable[[], None]

# Default playback length a whole route is squeezed into at relative speed 1
DEFAULT_PLAYBACK_SECONDS = 90.0


class Viewport(Protocol):
    """What the director needs from a render surface."""

    @property
    def heading(self) -> float: ...

    def set_pose(self, pose: AbsolutePose) -> None: ...

    def look_at(self, command: LookAt) -> None: ...

    def current_pose(self) -> AbsolutePose: ...

    def on_tick(self, callback: TickCallback) -> Disposer: ...


class TourClock:
    """Clamped playback clock that emits one tick per rendered frame.

    The clock advances by real frame time times ``multiplier`` while
    animating. Ticks are emitted on every frame, paused or not, so timed
    camera transitions keep moving while playback is held.
    """

    def __init__(self, start_time: float = 0.0, stop_time: float = 0.0):
        self.start_time = start_time
        self.stop_time = stop_time
        self.current_time = start_time
        self.animating = False
        self.default_multiplier = 1.0
        self.relative_speed = 1.0
        self.direction = 1
        self._listeners: list[TickCallback] = []

    @property
    def multiplier(self) -> float:
        return self.default_multiplier * self.relative_speed * self.direction

    def configure(
        self,
        start_time: float,
        stop_time: float,
        playback_seconds: float = DEFAULT_PLAYBACK_SECONDS,
    ) -> None:
        """Reset the clock to a tour window, paused at its start."""
        self.start_time = start_time
        self.stop_time = stop_time
        self.current_time = start_time
        self.animating = False
        duration = stop_time - start_time
        self.default_multiplier = duration / playback_seconds if playback_seconds > 0 and duration > 0 else 1.0
        logger.info("Default tour speed calculated: %.2fx", self.default_multiplier)

    def set_relative_speed(self, relative_speed: float) -> None:
        self.relative_speed = float(relative_speed)
        logger.info(
            "Relative speed set to %.2fx (effective %.0fx)", self.relative_speed, self.multiplier,
        )

    def toggle_direction(self) -> None:
        self.direction *= -1

    def reset_direction(self) -> None:
        self.direction = 1

    def play(self) -> None:
        self.animating = True

    def pause(self) -> None:
        self.animating = False

    def toggle_play_pause(self) -> bool:
        self.animating = not self.animating
        return self.animating

    def seek(self, fraction: float) -> float:
        """Jump to a fraction of the tour window; returns the new clock time."""
        fraction = max(0.0, min(1.0, fraction))
        self.current_time = self.start_time + (self.stop_time - self.start_time) * fraction
        return self.current_time

    @property
    def at_end(self) -> bool:
        return self.current_time >= self.stop_time

    def on_tick(self, callback: TickCallback) -> Disposer:
        self._listeners.append(callback)

        def dispose() -> None:
            if callback in self._listeners:
                self._listeners.remove(callback)

        return dispose

    @property
    def listener_count(self) -> int:
        return len(self._listeners)

    def advance(self, dt: float) -> None:
        """Render one frame ``dt`` real seconds after the previous one."""
        if self.animating:
            t = self.current_time + dt * self.multiplier
            self.current_time = min(self.stop_time, max(self.start_time, t))
        for callback in list(self._listeners):
            callback(self.current_time, dt)


class RecordingViewport:
    """Headless viewport that keeps the applied camera state and a command history."""

    def __init__(
        self,
        clock: TourClock,
        initial_pose: Optional[AbsolutePose] = None,
        record: bool = True,
    ):
        self.clock = clock
        self.pose = initial_pose or AbsolutePose((EARTH_RADIUS + 20_000.0, 0.0, 0.0), 0.0, -90.0)
        self._heading = self.pose.heading
        self.last_command: Optional[CameraCommand] = None
        self.record = record
        self.history: list[CameraCommand] = []

    @property
    def heading(self) -> float:
        return self._heading

    def rotate(self, degrees: float) -> None:
        """Turn the view as a user dragging the camera would."""
        self._heading = normalize_heading(self._heading + degrees)

    def _applied(self, command: CameraCommand) -> None:
        self.last_command = command
        if self.record:
            self.history.append(command)

    def set_pose(self, pose: AbsolutePose) -> None:
        self.pose = pose
        self._heading = pose.heading
        self._applied(pose)

    def look_at(self, command: LookAt) -> None:
        self.pose = look_at_to_pose(command)
        self._heading = normalize_heading(command.heading)
        self._applied(command)

    def current_pose(self) -> AbsolutePose:
        return self.pose

    def on_tick(self, callback: TickCallback) -> Disposer:
        return self.clock.on_tick(callback)
