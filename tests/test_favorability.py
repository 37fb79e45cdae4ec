"""Tests for rainbow favorability checks."""

import pytest

from rainbow.services.favorability import (
    assess_rainbow_conditions,
    azimuth_to_cardinal,
    evaluate,
    precipitation_moving_away,
    rainbow_azimuth,
)


def test_evaluate_boundaries():
    assert evaluate(sun_altitude=0, humidity=50, cloud_cover=99) is True
    assert evaluate(sun_altitude=42, humidity=50, cloud_cover=0) is True
    assert evaluate(sun_altitude=43, humidity=90, cloud_cover=50) is False
    assert evaluate(sun_altitude=20, humidity=49, cloud_cover=50) is False
    assert evaluate(sun_altitude=20, humidity=90, cloud_cover=100) is False
    assert evaluate(sun_altitude=-0.5, humidity=90, cloud_cover=50) is False


@pytest.mark.parametrize(
    "sun_altitude, humidity, cloud_cover",
    [(None, 80, 50), (20, None, 50), (20, 80, None)],
)
def test_evaluate_requires_every_input(sun_altitude, humidity, cloud_cover):
    assert evaluate(sun_altitude, humidity, cloud_cover) is False


def test_precipitation_moving_away():
    assert precipitation_moving_away(270, 270) is True
    assert precipitation_moving_away(315, 270) is False
    assert precipitation_moving_away(314, 270) is True
    assert precipitation_moving_away(10, 350) is True
    assert precipitation_moving_away(None, 270) is False


def test_rainbow_direction_is_opposite_the_sun():
    assert rainbow_azimuth(250.0) == 70.0
    assert azimuth_to_cardinal(70.0) == "ENE"
    assert azimuth_to_cardinal(359.0) == "N"
    assert rainbow_azimuth(None) is None


def test_outlook_scores_weighted_conditions():
    outlook = assess_rainbow_conditions(
        sun_altitude=20.0,
        sun_azimuth=250.0,
        humidity=85,
        cloud_cover=60,
        visibility=10000,
        precipitation_mm=0.4,
        weather_code=500,
    )

    assert outlook.score == 100
    assert outlook.is_favorable
    assert outlook.rainbow_cardinal == "ENE"
    assert outlook.recommendations == ["Excellent rainbow conditions! Keep watching the sky."]


def test_outlook_explains_unfavorable_conditions():
    outlook = assess_rainbow_conditions(
        sun_altitude=60.0,
        sun_azimuth=180.0,
        humidity=30,
        cloud_cover=95,
        visibility=10000,
        precipitation_mm=0.0,
        weather_code=800,
    )

    assert outlook.score == 10
    assert not outlook.is_favorable
    assert outlook.conditions["sun_altitude"].reason.startswith("Sun is too high")
    assert "Wait for some clearing in the clouds." in outlook.recommendations
