import pytest

from gpx_tour.camera import AbsolutePose, LookAt, look_at_to_pose
from gpx_tour.route import to_cartesian
from gpx_tour.viewport import RecordingViewport, TourClock


def test_default_speed_fits_tour_into_playback_window():
    clock = TourClock()
    clock.configure(0.0, 9000.0)
    assert clock.multiplier == pytest.approx(100.0)
    clock.set_relative_speed(2.0)
    assert clock.multiplier == pytest.approx(200.0)
    clock.toggle_direction()
    assert clock.multiplier == pytest.approx(-200.0)
    clock.reset_direction()
    assert clock.multiplier == pytest.approx(200.0)


def test_zero_length_tour_uses_unit_speed():
    clock = TourClock()
    clock.configure(50.0, 50.0)
    assert clock.multiplier == 1.0


def test_ticks_fire_while_paused():
    clock = TourClock()
    clock.configure(0.0, 9000.0)
    ticks = []
    clock.on_tick(lambda time, dt: ticks.append((time, dt)))

    clock.advance(0.5)
    assert ticks == [(0.0, 0.5)]
    assert clock.current_time == 0.0


def test_playback_advances_and_clamps():
    clock = TourClock()
    clock.configure(0.0, 9000.0)
    clock.play()
    clock.advance(1.0)
    assert clock.current_time == pytest.approx(100.0)

    clock.advance(1000.0)
    assert clock.current_time == 9000.0
    assert clock.at_end

    clock.toggle_direction()
    clock.advance(2.0)
    assert clock.current_time == pytest.approx(8800.0)
    clock.advance(1000.0)
    assert clock.current_time == 0.0


def test_play_pause_and_seek():
    clock = TourClock()
    clock.configure(1000.0, 2000.0)
    assert clock.toggle_play_pause() is True
    assert clock.toggle_play_pause() is False
    assert clock.seek(0.25) == pytest.approx(1250.0)
    assert clock.seek(3.0) == 2000.0
    assert clock.seek(-1.0) == 1000.0


def test_disposer_removes_listener():
    clock = TourClock()
    calls = []
    dispose = clock.on_tick(lambda time, dt: calls.append(time))
    assert clock.listener_count == 1
    dispose()
    dispose()
    assert clock.listener_count == 0
    clock.advance(0.1)
    assert calls == []


def test_viewport_applies_commands():
    clock = TourClock()
    viewport = RecordingViewport(clock)
    command = LookAt(tuple(to_cartesian(8.0, 46.0)), 400.0, -45.0, 1000.0)

    viewport.look_at(command)
    assert viewport.current_pose() == look_at_to_pose(command)
    assert viewport.heading == pytest.approx(40.0)
    assert viewport.last_command is command

    pose = AbsolutePose((1.0, 2.0, 3.0), 120.0, -10.0)
    viewport.set_pose(pose)
    assert viewport.current_pose() is pose
    assert viewport.heading == 120.0
    assert viewport.history == [command, pose]


def test_user_rotation_changes_heading():
    viewport = RecordingViewport(TourClock(), record=False)
    viewport.rotate(-30.0)
    assert viewport.heading == pytest.approx(330.0)
    viewport.set_pose(AbsolutePose((0.0, 0.0, 0.0), 5.0, -90.0))
    assert viewport.history == []


def test_viewport_ticks_come_from_clock():
    clock = TourClock()
    viewport = RecordingViewport(clock)
    dispose = viewport.on_tick(lambda time, dt: None)
    assert clock.listener_count == 1
    dispose()
    assert clock.listener_count == 0
