import math

import pytest

from gpx_tour.settings import DEFAULTS, TourSettings, read_setting


def test_defaults():
    settings = TourSettings()
    assert settings.get("camera_strategy") == "cinematic"
    assert settings.get("camera_distance") == 1000.0
    assert settings.get("camera_pitch") == -45.0
    assert settings.get("camera_transition_duration") == 3.0
    assert settings.as_dict() == DEFAULTS


def test_values_are_clamped():
    settings = TourSettings(tour_speed=100.0)
    assert settings.get("tour_speed") == 8.0
    settings.set("camera_pitch", 20.0)
    assert settings.get("camera_pitch") == 0.0
    settings.set("camera_distance", 10.0)
    assert settings.get("camera_distance") == 50.0


@pytest.mark.parametrize("bad", ["abc", None, math.nan])
def test_invalid_numbers_revert_to_default(bad):
    settings = TourSettings(camera_distance=2000.0)
    settings.set("camera_distance", bad)
    assert settings.get("camera_distance") == 1000.0


def test_invalid_option_reverts_to_default():
    settings = TourSettings(camera_strategy="orbit")
    assert settings.get("camera_strategy") == "orbit"
    settings.set("camera_strategy", "helicopter")
    assert settings.get("camera_strategy") == "cinematic"


def test_unknown_keys_are_ignored():
    settings = TourSettings()
    assert settings.get("camera_zoom") is None
    settings.set("camera_zoom", 3)
    assert "camera_zoom" not in settings.as_dict()


def test_subscribers_hear_about_changes_only():
    settings = TourSettings()
    heard = []
    unsubscribe = settings.subscribe("camera_pitch", heard.append)

    settings.set("camera_pitch", -30.0)
    settings.set("camera_pitch", -30.0)
    settings.update(camera_pitch=-200.0, camera_distance=800.0)
    assert heard == [-30.0, -90.0]

    unsubscribe()
    settings.set("camera_pitch", -10.0)
    assert heard == [-30.0, -90.0]


def test_read_setting_falls_back_to_defaults():
    assert read_setting({}, "camera_pitch") == -45.0
    assert read_setting(None, "camera_distance") == 1000.0
    assert read_setting({"camera_pitch": -10.0}, "camera_pitch") == -10.0
    assert read_setting({"camera_look_ahead_time": 0.0}, "camera_look_ahead_time") == 0.0
    assert read_setting(TourSettings(camera_distance=300.0), "camera_distance") == 300.0
