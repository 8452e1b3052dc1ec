"""Playback director: binds a view strategy to a viewport and runs the tour lifecycle."""

import dataclasses
import enum
import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Callable, Optional

import numpy as np

from .camera import AbsolutePose, LookAt, compute_overview_pose, interpolate_pose, resolve_pose
from .chase import ChaseStrategy
from .cinematic import CinematicStrategy
from .errors import ConfigurationError
from .orbit import OrbitStrategy
from .route import points_to_cartesian
from .settings import read_setting
from .strategy import ViewStrategy
from .track import TrackData
from .viewport import Disposer, Viewport

logger = logging.getLogger(__name__)

StrategyFactory = Callable[[Any, Viewport], ViewStrategy]

STRATEGIES: dict[str, StrategyFactory] = {
    "orbit": lambda settings, viewport: OrbitStrategy(settings),
    "cinematic": lambda settings, viewport: CinematicStrategy(settings),
    "chase": lambda settings, viewport: ChaseStrategy(settings, heading_source=lambda: viewport.heading),
}


class PlaybackState(enum.Enum):
    IDLE = "idle"
    ENTERING_VIEW = "entering_view"
    ACTIVE = "active"
    EXITING_VIEW = "exiting_view"


@dataclass(frozen=True)
class LiveMetrics:
    elapsed_time: str
    distance_km: float
    ascent_m: float
    energy_kcal: float
    planned_speed_kmh: float
    planned_vertical_rate: float  # m/h
    planned_effort_rate: float
    # Only known when the route carries real timestamps
    actual_speed_kmh: Optional[float] = None
    actual_vertical_rate: Optional[float] = None
    actual_effort_rate: Optional[float] = None


@dataclass(frozen=True)
class Telemetry:
    progress: float  # elapsed fraction of the tour, in [0, 1]
    time_label: str
    live: Optional[LiveMetrics]


def format_elapsed(seconds: float) -> str:
    """HH:MM:SS for an elapsed duration."""
    total = max(0, int(seconds))
    hours, remainder = divmod(total, 3600)
    minutes, secs = divmod(remainder, 60)
    return f"{hours:02d}:{minutes:02d}:{secs:02d}"


def format_clock_time(timestamp: float) -> str:
    """YYYY-MM-DD HH:MM:SS (UTC) for a POSIX timestamp."""
    return datetime.fromtimestamp(timestamp, tz=timezone.utc).strftime("%Y-%m-%d %H:%M:%S")


def _value(x: Optional[float]) -> float:
    return 0.0 if x is None else float(x)


def compute_telemetry(track: TrackData, time: float, times: Optional[np.ndarray] = None) -> Telemetry:
    """Progress, time label and live route metrics for clock time ``time``."""
    total = track.stop_time - track.start_time
    elapsed = time - track.start_time
    progress = min(1.0, max(0.0, elapsed / total)) if total > 0 else 1.0

    elapsed_label = format_elapsed(elapsed)
    time_label = format_clock_time(time) if track.has_timestamps else elapsed_label

    points = track.points
    if not points:
        return Telemetry(progress, time_label, None)
    if times is None:
        times = track.times()

    if progress >= 1.0:
        index = len(points) - 1
    elif track.has_timestamps:
        # Last point already passed
        index = max(0, int(np.searchsorted(times, time, side="right")) - 1)
    else:
        # First point not yet behind us
        index = min(len(points) - 1, int(np.searchsorted(times, time, side="left")))
    point = points[index]

    live = LiveMetrics(
        elapsed_time=elapsed_label,
        distance_km=_value(point.cumulative_distance) / 1000.0,
        ascent_m=_value(point.cumulative_elevation_gain),
        energy_kcal=_value(point.cumulative_energy),
        planned_speed_kmh=_value(point.planned_speed),
        planned_vertical_rate=_value(point.planned_elevation_rate),
        planned_effort_rate=_value(point.planned_effort_rate),
    )
    if track.has_timestamps:
        live = dataclasses.replace(
            live,
            actual_speed_kmh=_value(point.actual_speed),
            actual_vertical_rate=_value(point.actual_elevation_rate),
            actual_effort_rate=_value(point.actual_effort_rate),
        )
    return Telemetry(progress, time_label, live)


class CameraFlight:
    """Eased camera transition advanced by frame time."""

    def __init__(
        self,
        start: AbsolutePose,
        end: AbsolutePose,
        duration: float,
        on_complete: Optional[Callable[[], None]] = None,
    ):
        self.start = start
        self.end = end
        self.duration = duration
        self.elapsed = 0.0
        self.on_complete = on_complete

    @property
    def done(self) -> bool:
        return self.duration <= 0 or self.elapsed >= self.duration

    def step(self, dt: float) -> AbsolutePose:
        self.elapsed += max(0.0, dt)
        if self.done:
            return self.end
        return interpolate_pose(self.start, self.end, self.elapsed / self.duration)


class PlaybackDirector:
    """Owns the active view strategy and moves a tour through its phases.

    Idle -> EnteringView -> Active -> ExitingView -> Idle. All work happens
    synchronously inside the viewport's tick callback; the director holds at
    most one tick registration at a time. Failures are logged and leave the
    camera where it is; nothing here raises into the render loop.
    """

    def __init__(
        self,
        viewport: Viewport,
        settings: Any,
        on_telemetry: Optional[Callable[[Telemetry], None]] = None,
    ):
        self.viewport = viewport
        self.settings = settings
        self.on_telemetry = on_telemetry
        self.state = PlaybackState.IDLE
        self.strategy: Optional[ViewStrategy] = None
        self.strategy_name: Optional[str] = None
        self.track: Optional[TrackData] = None
        self.telemetry: Optional[Telemetry] = None
        self._track_times: Optional[np.ndarray] = None
        self._flight: Optional[CameraFlight] = None
        self._dispose_tick: Optional[Disposer] = None
        self._on_ready: Optional[Callable[[], None]] = None
        self._on_stopped: Optional[Callable[[], None]] = None

    @property
    def has_tick_registration(self) -> bool:
        return self._dispose_tick is not None

    def _setting(self, key: str) -> Any:
        return read_setting(self.settings, key)

    def _create_strategy(self, name: str) -> ViewStrategy:
        factory = STRATEGIES.get(name)
        if factory is None:
            raise ConfigurationError(f"Unknown camera strategy '{name}'")
        return factory(self.settings, self.viewport)

    # -- strategy binding --------------------------------------------------

    def set_strategy(self, name: str, track: Optional[TrackData] = None) -> bool:
        """Switch to strategy ``name``, building its path for ``track`` right away.

        Legal in any state. Returns False (and unbinds) for unknown names.
        """
        try:
            strategy = self._create_strategy(name)
        except ConfigurationError as e:
            logger.warning("%s", e)
            self.strategy = None
            self.strategy_name = None
            self._bind_track(None)
            return False

        logger.info("Activating camera strategy '%s'", name)
        self.strategy = strategy
        self.strategy_name = name
        self._bind_track(track)
        if track is not None:
            self._build()
        if self.state is not PlaybackState.IDLE:
            self._install_tick()
        return True

    def _bind_track(self, track: Optional[TrackData]) -> None:
        self.track = track
        self._track_times = track.times() if track is not None else None

    def _build(self) -> None:
        try:
            self.strategy.build_path(self.track)
        except Exception:
            logger.exception("Camera path generation failed for '%s'", self.strategy_name)

    def on_parameter_change(self, *_args: Any) -> None:
        """Rebuild the bound strategy's path in full after a settings change."""
        if self.strategy is None or self.track is None:
            return
        logger.info("Camera settings changed, regenerating camera path")
        self._build()

    # -- lifecycle -------------------------------------------------------------

    def start_tour(
        self,
        track: TrackData,
        prior_pose: Optional[AbsolutePose] = None,
        on_ready: Optional[Callable[[], None]] = None,
        on_stopped: Optional[Callable[[], None]] = None,
    ) -> bool:
        """Bind the configured strategy and fly from ``prior_pose`` into the tour.

        ``on_ready`` fires when the entry flight finishes (immediately when
        the transition duration is 0); the caller should start its clock then.
        A tour already in progress is torn down first.
        """
        if self.state is not PlaybackState.IDLE:
            logger.info("Tour already running; tearing it down before restarting")
            previous = self._teardown()
            if previous:
                previous()

        name = self._setting("camera_strategy")
        logger.info("Starting tour with '%s' camera", name)
        if not self.set_strategy(name, track):
            logger.error("No valid camera strategy set; cannot start tour")
            return False

        self._on_ready = on_ready
        self._on_stopped = on_stopped
        self.state = PlaybackState.ENTERING_VIEW
        self._install_tick()

        duration = float(self._setting("camera_transition_duration"))
        if duration <= 0:
            self._enter_active()
            return True

        command = self.strategy.state_at_time(track.start_time)
        if command is None:
            logger.error("Could not get start state for camera strategy '%s'", name)
            self._enter_active()
            return True

        start = prior_pose if prior_pose is not None else self.viewport.current_pose()
        self._flight = CameraFlight(start, resolve_pose(command), duration, self._enter_active)
        return True

    def _enter_active(self) -> None:
        self._flight = None
        self.state = PlaybackState.ACTIVE
        logger.info("Entry transition complete; tour playback active")
        if self._on_ready:
            self._on_ready()

    def stop_tour(self) -> None:
        """Fly out to the route overview (when the strategy has one), then go idle.

        ``on_stopped`` fires exactly once. Does nothing while idle or while
        already exiting.
        """
        if self.state in (PlaybackState.IDLE, PlaybackState.EXITING_VIEW):
            return
        logger.info("Stopping tour")

        duration = float(self._setting("camera_transition_duration"))
        track = self.track
        if (
            duration > 0
            and self.strategy is not None
            and self.strategy.exit_flight
            and track is not None
            and track.points
        ):
            overview = compute_overview_pose(points_to_cartesian(track.points))
            self.state = PlaybackState.EXITING_VIEW
            self._flight = CameraFlight(self.viewport.current_pose(), overview, duration, self._finish_stop)
            self._install_tick()
            return

        self._finish_stop()

    def _finish_stop(self) -> None:
        on_stopped = self._teardown()
        logger.info("Tour stopped")
        if on_stopped:
            on_stopped()

    def _teardown(self) -> Optional[Callable[[], None]]:
        """Return to Idle, releasing everything; hands back the pending stop callback."""
        if self._dispose_tick is not None:
            self._dispose_tick()
            self._dispose_tick = None
        on_stopped = self._on_stopped
        self._flight = None
        self._on_ready = None
        self._on_stopped = None
        self.strategy = None
        self.strategy_name = None
        self._bind_track(None)
        self.state = PlaybackState.IDLE
        return on_stopped

    # -- per-frame -------------------------------------------------------------

    def _install_tick(self) -> None:
        if self._dispose_tick is not None:
            self._dispose_tick()
            self._dispose_tick = None
        self._dispose_tick = self.viewport.on_tick(self._on_tick)

    def _on_tick(self, time: float, dt: float) -> None:
        try:
            if self.state in (PlaybackState.ENTERING_VIEW, PlaybackState.EXITING_VIEW):
                self._step_flight(dt)
            elif self.state is PlaybackState.ACTIVE:
                self.update(time)
        except Exception:
            logger.exception("Camera update failed")

    def _step_flight(self, dt: float) -> None:
        flight = self._flight
        if flight is None:
            return
        self.viewport.set_pose(flight.step(dt))
        if flight.done and flight is self._flight:
            self._flight = None
            if flight.on_complete:
                flight.on_complete()

    def update(self, time: float) -> Optional[Telemetry]:
        """Apply the strategy's command for ``time`` and publish telemetry (Active only)."""
        if self.state is not PlaybackState.ACTIVE or self.strategy is None:
            return None

        command = self.strategy.state_at_time(time)
        if isinstance(command, LookAt):
            self.viewport.look_at(command)
        elif isinstance(command, AbsolutePose):
            self.viewport.set_pose(command)

        if self.track is None:
            return None
        telemetry = compute_telemetry(self.track, time, self._track_times)
        self.telemetry = telemetry
        if self.on_telemetry:
            self.on_telemetry(telemetry)
        return telemetry
