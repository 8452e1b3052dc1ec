"""CLI entry point for gpx-tour: play a synthetic route through the camera engine headlessly."""

import logging

import click
from tqdm import tqdm

from .camera import compute_overview_pose
from .director import PlaybackDirector, PlaybackState, Telemetry
from .route import annotate_track, compute_bounds, points_to_cartesian
from .settings import STRATEGY_NAMES, TourSettings
from .strategy import CachedPathStrategy
from .track import TrackData, synthetic_track
from .viewport import RecordingViewport, TourClock

# Settings whose change invalidates a pre-computed camera path
PATH_SETTINGS = (
    "camera_distance",
    "camera_pitch",
    "camera_path_detail",
    "camera_spline_tension",
    "camera_look_ahead_time",
    "camera_gaze_smoothing",
    "camera_path_sample_density",
    "camera_max_azimuth",
    "camera_azimuth_freq",
)


def _format_telemetry(t: Telemetry) -> str:
    line = f"{t.progress:6.1%}  {t.time_label}"
    if t.live:
        line += f"  {t.live.distance_km:7.2f} km  ▲ {t.live.ascent_m:5.0f} m"
        if t.live.actual_speed_kmh is not None:
            line += f"  {t.live.actual_speed_kmh:5.1f} km/h"
    return line


@click.command()
@click.option("--route", "route_kind", type=click.Choice(["loop", "out-and-back"]), default="loop",
              help="Shape of the synthetic route.")
@click.option("--points", "num_points", default=600, help="Number of track points in the route.")
@click.option("--hours", default=3.0, help="Recorded duration of the route.")
@click.option("--timestamps/--no-timestamps", default=True,
              help="Whether the route carries real clock times or only projected seconds.")
@click.option("--strategy", type=click.Choice(STRATEGY_NAMES), default="cinematic",
              help="Camera strategy used for the tour.")
@click.option("--switch-to", type=click.Choice(STRATEGY_NAMES), default=None,
              help="Switch to another strategy halfway through the tour.")
@click.option("--fps", default=30, help="Frames per second of the simulated render loop.")
@click.option("--playback", default=90.0, help="Seconds the whole route takes at speed 1.")
@click.option("--speed", default=1.0, help="Playback speed relative to the default.")
@click.option("--camera-distance", default=1000.0, help="Camera distance from its target (meters).")
@click.option("--camera-pitch", default=-45.0, help="Camera pitch (degrees, negative looks down).")
@click.option("--path-detail", default=100.0, help="Minimum spacing of spline control points (meters).")
@click.option("--tension", default=0.5, help="Spline tension.")
@click.option("--look-ahead", default=3600.0, help="Cinematic look-ahead window (seconds of route).")
@click.option("--gaze-smoothing", default=1800.0, help="Cinematic look-ahead decay half-life (seconds).")
@click.option("--sample-density", default=2.0, help="Cinematic samples per minute of route.")
@click.option("--max-azimuth", default=0.0, help="Cinematic sideways sweep amplitude (degrees).")
@click.option("--transition", default=3.0, help="Entry/exit transition duration (seconds).")
@click.option("--frames/--no-frames", default=False, help="Print telemetry for every frame.")
@click.option("--verbose", is_flag=True, help="Log engine activity.")
def main(
    route_kind: str,
    num_points: int,
    hours: float,
    timestamps: bool,
    strategy: str,
    switch_to: str | None,
    fps: int,
    playback: float,
    speed: float,
    camera_distance: float,
    camera_pitch: float,
    path_detail: float,
    tension: float,
    look_ahead: float,
    gaze_smoothing: float,
    sample_density: float,
    max_azimuth: float,
    transition: float,
    frames: bool,
    verbose: bool,
) -> None:
    """Run a headless camera tour over a synthetic route and report its telemetry."""
    logging.basicConfig(
        level=logging.INFO if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )
    if fps <= 0:
        raise click.UsageError("--fps must be positive.")
    if num_points < 2:
        raise click.UsageError(f"A route needs at least 2 track points (got {num_points}).")
    if hours <= 0 or playback <= 0:
        raise click.UsageError("--hours and --playback must be positive.")

    click.echo(f"Building {route_kind} route with {num_points} points over {hours:g} h...")
    raw = synthetic_track(
        kind=route_kind,
        num_points=num_points,
        duration_s=hours * 3600.0,
        has_timestamps=timestamps,
    )
    track = TrackData(
        points=annotate_track(raw.points, raw.has_timestamps),
        start_time=raw.start_time,
        stop_time=raw.stop_time,
        has_timestamps=raw.has_timestamps,
        name=raw.name,
    )
    bounds = compute_bounds(track.points)
    total_km = (track.points[-1].cumulative_distance or 0.0) / 1000.0
    click.echo(
        f"  {total_km:.1f} km, bounds {bounds['sw'][1]:.4f},{bounds['sw'][0]:.4f}"
        f" -> {bounds['ne'][1]:.4f},{bounds['ne'][0]:.4f}"
    )

    settings = TourSettings(
        camera_strategy=strategy,
        camera_distance=camera_distance,
        camera_pitch=camera_pitch,
        camera_path_detail=path_detail,
        camera_spline_tension=tension,
        camera_look_ahead_time=look_ahead,
        camera_gaze_smoothing=gaze_smoothing,
        camera_path_sample_density=sample_density,
        camera_max_azimuth=max_azimuth,
        camera_transition_duration=transition,
        tour_speed=speed,
    )

    clock = TourClock()
    clock.configure(track.start_time, track.stop_time, playback_seconds=playback)
    clock.set_relative_speed(settings.get("tour_speed"))
    viewport = RecordingViewport(clock, record=False)

    def on_telemetry(t: Telemetry) -> None:
        if frames:
            tqdm.write(_format_telemetry(t))

    director = PlaybackDirector(viewport, settings, on_telemetry=on_telemetry)
    unsubscribers = [settings.subscribe(key, director.on_parameter_change) for key in PATH_SETTINGS]
    unsubscribers.append(settings.subscribe("tour_speed", clock.set_relative_speed))

    stopped = []
    overview = compute_overview_pose(points_to_cartesian(track.points))
    if not director.start_tour(track, overview, on_ready=clock.play, on_stopped=lambda: stopped.append(True)):
        raise click.UsageError(f"Could not start a tour with strategy '{strategy}'.")

    if isinstance(director.strategy, CachedPathStrategy):
        click.echo(f"  {director.strategy_name} camera path: {len(director.strategy)} samples")

    dt = 1.0 / fps
    transition_s = settings.get("camera_transition_duration")
    expected = int((2 * transition_s + playback / settings.get("tour_speed")) * fps) + 1
    max_frames = expected + 10 * fps
    switched = switch_to is None
    rendered = 0

    with tqdm(total=expected, unit="frame", desc="Touring") as bar:
        while director.state is not PlaybackState.IDLE and rendered < max_frames:
            clock.advance(dt)
            rendered += 1
            bar.update(1)

            telemetry = director.telemetry
            if not switched and telemetry is not None and telemetry.progress >= 0.5:
                director.set_strategy(switch_to, track)
                switched = True
                tqdm.write(f"Switched camera strategy to {switch_to}")

            if director.state is PlaybackState.ACTIVE and clock.at_end:
                clock.pause()
                director.stop_tour()

    for unsubscribe in unsubscribers:
        unsubscribe()

    if director.state is not PlaybackState.IDLE:
        director.stop_tour()
    final = director.telemetry
    click.echo(f"Rendered {rendered} frames; tour {'stopped' if stopped else 'did not stop cleanly'}.")
    if final is not None:
        click.echo(f"Last telemetry: {_format_telemetry(final)}")


if __name__ == "__main__":
    main()
