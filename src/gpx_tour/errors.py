"""Error types raised inside the tour engine and handled at its seams."""


class TourError(Exception):
    """Base class for tour engine failures."""


class ConfigurationError(TourError, ValueError):
    """A setting names something the engine does not know (e.g. a strategy)."""


class InsufficientDataError(TourError, ValueError):
    """Too few usable route points to build a curve or camera path."""
