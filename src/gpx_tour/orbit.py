"""Orbit strategy: circle the recorded position once over the whole tour."""

from .camera import LookAt, as_vec3, normalize_heading
from .errors import InsufficientDataError
from .route import points_to_cartesian
from .strategy import CachedPathStrategy, PathEntry
from .track import TrackData


class OrbitStrategy(CachedPathStrategy):
    """Fixed pitch and distance around each literal track point.

    Heading advances with the elapsed-time fraction of the tour, completing
    one full 360° rotation by the end. No smoothing is applied to the points.
    """

    name = "orbit"

    def _generate(self, track: TrackData) -> list[PathEntry]:
        points = track.points
        if not points:
            raise InsufficientDataError("orbit path needs at least 1 track point")

        pitch = float(self.setting("camera_pitch"))
        distance = float(self.setting("camera_distance"))
        positions = points_to_cartesian(points)
        t0 = points[0].time
        duration = points[-1].time - t0

        entries = []
        for p, position in zip(points, positions):
            progress = (p.time - t0) / duration if duration > 0 else 0.0
            entries.append(PathEntry(
                time=p.time,
                command=LookAt(
                    target=as_vec3(position),
                    heading=normalize_heading(progress * 360.0),
                    pitch=pitch,
                    distance=distance,
                ),
            ))
        return entries
