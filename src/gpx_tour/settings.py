"""Tour settings: camera and playback parameters with defaults, clamping and change callbacks."""

import logging
from dataclasses import dataclass
from typing import Any, Callable, Optional

logger = logging.getLogger(__name__)

STRATEGY_NAMES = ("orbit", "cinematic", "chase")


@dataclass(frozen=True)
class SettingSpec:
    default: Any
    minimum: Optional[float] = None
    maximum: Optional[float] = None
    options: Optional[tuple[str, ...]] = None


SETTINGS_SCHEMA: dict[str, SettingSpec] = {
    "camera_strategy": SettingSpec("cinematic", options=STRATEGY_NAMES),
    "camera_distance": SettingSpec(1000.0, 50.0, 50_000.0),  # meters
    "camera_pitch": SettingSpec(-45.0, -90.0, 0.0),  # degrees
    "camera_path_detail": SettingSpec(100.0, 0.0, 1000.0),  # min separation, meters
    "camera_spline_tension": SettingSpec(0.5, 0.0, 1.0),
    "camera_look_ahead_time": SettingSpec(3600.0, 0.0, 36_000.0),  # seconds
    "camera_gaze_smoothing": SettingSpec(1800.0, 0.0, 3600.0),  # half-life, seconds
    "camera_path_sample_density": SettingSpec(2.0, 1.0, 60.0),  # samples per minute
    "camera_max_azimuth": SettingSpec(0.0, 0.0, 180.0),  # degrees
    "camera_azimuth_freq": SettingSpec(0.1, 0.01, 1.0),  # rad/s
    "camera_transition_duration": SettingSpec(3.0, 0.0, 10.0),  # seconds
    "tour_speed": SettingSpec(1.0, 0.03125, 8.0),  # relative to default speed
}

DEFAULTS: dict[str, Any] = {key: spec.default for key, spec in SETTINGS_SCHEMA.items()}


class TourSettings:
    """In-memory settings store read synchronously by strategies and the director.

    Anything with a ``get(key)`` method (a plain dict included) can stand in
    for it; this class adds schema defaults, validation and subscriptions.
    """

    def __init__(self, **overrides: Any):
        self._values: dict[str, Any] = dict(DEFAULTS)
        self._subscribers: dict[str, list[Callable[[Any], None]]] = {}
        for key, value in overrides.items():
            self.set(key, value)

    def get(self, key: str) -> Any:
        if key not in self._values:
            logger.warning("Attempted to get unknown setting '%s'", key)
            return None
        return self._values[key]

    def set(self, key: str, value: Any) -> None:
        """Validate and store a value, notifying subscribers if it changed."""
        spec = SETTINGS_SCHEMA.get(key)
        if spec is None:
            logger.warning("Attempted to set unknown setting '%s'", key)
            return

        validated = _validate(key, spec, value)
        if self._values.get(key) != validated:
            self._values[key] = validated
            logger.info("Setting '%s' = %r", key, validated)
            for callback in list(self._subscribers.get(key, [])):
                callback(validated)

    def update(self, **values: Any) -> None:
        for key, value in values.items():
            self.set(key, value)

    def subscribe(self, key: str, callback: Callable[[Any], None]) -> Callable[[], None]:
        """Call ``callback(value)`` whenever ``key`` changes; returns an unsubscribe function."""
        self._subscribers.setdefault(key, []).append(callback)

        def unsubscribe() -> None:
            subs = self._subscribers.get(key, [])
            if callback in subs:
                subs.remove(callback)

        return unsubscribe

    def as_dict(self) -> dict[str, Any]:
        return dict(self._values)


def _validate(key: str, spec: SettingSpec, value: Any) -> Any:
    if spec.options is not None:
        if value not in spec.options:
            logger.warning("Invalid option %r for '%s', reverting to default", value, key)
            return spec.default
        return value

    try:
        number = float(value)
    except (TypeError, ValueError):
        logger.warning("Invalid number %r for '%s', reverting to default", value, key)
        return spec.default
    if number != number:  # NaN
        logger.warning("Invalid number %r for '%s', reverting to default", value, key)
        return spec.default
    if spec.minimum is not None:
        number = max(spec.minimum, number)
    if spec.maximum is not None:
        number = min(spec.maximum, number)
    return number


def read_setting(settings: Any, key: str) -> Any:
    """Read ``key`` from any settings provider, falling back to the schema default."""
    value = settings.get(key) if settings is not None else None
    return DEFAULTS.get(key) if value is None else value
