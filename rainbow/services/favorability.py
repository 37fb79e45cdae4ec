"""Rainbow favorability checks derived from stored observations."""

from __future__ import annotations

from dataclasses import dataclass, field

# A rainbow sits ~42 degrees from the antisolar point, so it clears the
# horizon only while the sun is between the horizon and 42 degrees up.
SUN_ALTITUDE_MIN_DEG = 0.0
SUN_ALTITUDE_MAX_DEG = 42.0
HUMIDITY_MIN_PCT = 50.0
CLOUD_COVER_LIMIT_PCT = 100.0
MOVING_AWAY_MAX_DIFF_DEG = 45.0

# Thresholds and weights of the scored outlook
OUTLOOK_CLOUD_COVER_MAX_PCT = 80.0
OUTLOOK_VISIBILITY_MIN_M = 1000.0
OUTLOOK_FAVORABLE_SCORE = 60
OUTLOOK_WEIGHTS = {
    "sun_altitude": 30,
    "precipitation": 30,
    "humidity": 15,
    "cloud_cover": 15,
    "visibility": 10,
}

_CARDINALS = (
    "N", "NNE", "NE", "ENE", "E", "ESE", "SE", "SSE",
    "S", "SSW", "SW", "WSW", "W", "WNW", "NW", "NNW",
)


def sun_position_favorable(sun_altitude: float | None) -> bool:
    return sun_altitude is not None and SUN_ALTITUDE_MIN_DEG <= sun_altitude <= SUN_ALTITUDE_MAX_DEG


def weather_favorable(humidity: float | None, cloud_cover: float | None) -> bool:
    """Enough moisture for precipitation and at least partial clearing."""

    return (
        humidity is not None
        and humidity >= HUMIDITY_MIN_PCT
        and cloud_cover is not None
        and cloud_cover < CLOUD_COVER_LIMIT_PCT
    )


def evaluate(sun_altitude: float | None, humidity: float | None, cloud_cover: float | None) -> bool:
    return sun_position_favorable(sun_altitude) and weather_favorable(humidity, cloud_cover)


def precipitation_moving_away(movement_direction: float | None, observer_direction: float) -> bool:
    """True when precipitation moves roughly along the observer's line of sight, away from them."""

    if movement_direction is None:
        return False
    diff = abs(movement_direction - observer_direction)
    if diff > 180:
        diff = 360 - diff
    return diff < MOVING_AWAY_MAX_DIFF_DEG


def rainbow_azimuth(sun_azimuth: float | None) -> float | None:
    """Compass bearing of the antisolar point."""

    if sun_azimuth is None:
        return None
    return round((sun_azimuth + 180.0) % 360.0, 1)


def azimuth_to_cardinal(azimuth: float) -> str:
    return _CARDINALS[int((azimuth + 11.25) // 22.5) % 16]


@dataclass
class ConditionCheck:
    value: float | bool | None
    favorable: bool
    reason: str


@dataclass
class RainbowOutlook:
    """Weighted rainbow outlook for one observation."""

    score: int
    conditions: dict[str, ConditionCheck]
    rainbow_azimuth: float | None = None
    rainbow_cardinal: str | None = None
    recommendations: list[str] = field(default_factory=list)

    @property
    def is_favorable(self) -> bool:
        return self.score >= OUTLOOK_FAVORABLE_SCORE


def assess_rainbow_conditions(
    sun_altitude: float | None,
    sun_azimuth: float | None,
    humidity: float | None,
    cloud_cover: float | None,
    visibility: float | None,
    precipitation_mm: float | None = None,
    weather_code: int | None = None,
) -> RainbowOutlook:
    recent_precipitation = _has_recent_precipitation(precipitation_mm, weather_code)
    conditions = {
        "sun_altitude": ConditionCheck(
            value=round(sun_altitude, 1) if sun_altitude is not None else None,
            favorable=sun_position_favorable(sun_altitude),
            reason=_sun_altitude_reason(sun_altitude),
        ),
        "humidity": ConditionCheck(
            value=humidity,
            favorable=humidity is not None and humidity >= HUMIDITY_MIN_PCT,
            reason=_humidity_reason(humidity),
        ),
        "cloud_cover": ConditionCheck(
            value=cloud_cover,
            favorable=cloud_cover is not None and cloud_cover <= OUTLOOK_CLOUD_COVER_MAX_PCT,
            reason=_cloud_cover_reason(cloud_cover),
        ),
        "precipitation": ConditionCheck(
            value=recent_precipitation,
            favorable=recent_precipitation,
            reason=(
                "Recent precipitation detected - water droplets present"
                if recent_precipitation
                else "No recent precipitation - rainbows need water droplets"
            ),
        ),
        "visibility": ConditionCheck(
            value=visibility,
            favorable=visibility is not None and visibility >= OUTLOOK_VISIBILITY_MIN_M,
            reason=_visibility_reason(visibility),
        ),
    }

    total = sum(OUTLOOK_WEIGHTS.values())
    earned = sum(OUTLOOK_WEIGHTS[key] for key, check in conditions.items() if check.favorable)
    score = round(earned / total * 100)
    azimuth = rainbow_azimuth(sun_azimuth)
    return RainbowOutlook(
        score=score,
        conditions=conditions,
        rainbow_azimuth=azimuth,
        rainbow_cardinal=azimuth_to_cardinal(azimuth) if azimuth is not None else None,
        recommendations=_recommendations(conditions, score),
    )


def _has_recent_precipitation(precipitation_mm: float | None, weather_code: int | None) -> bool:
    if precipitation_mm is not None and precipitation_mm > 0:
        return True
    if weather_code is None:
        return False
    return 200 <= weather_code <= 531 or 600 <= weather_code <= 622


def _sun_altitude_reason(altitude: float | None) -> str:
    if altitude is None:
        return "Sun position unknown"
    if altitude < SUN_ALTITUDE_MIN_DEG:
        return f"Sun is below horizon ({altitude:.1f}°)"
    if altitude > SUN_ALTITUDE_MAX_DEG:
        return f"Sun is too high ({altitude:.1f}°) - rainbows form when sun is lower"
    return f"Sun altitude is optimal ({altitude:.1f}°)"


def _humidity_reason(humidity: float | None) -> str:
    if humidity is None:
        return "Humidity unknown"
    if humidity < HUMIDITY_MIN_PCT:
        return f"Humidity too low ({humidity:g}%) - need moisture in the air"
    return f"Humidity is sufficient ({humidity:g}%)"


def _cloud_cover_reason(cloud_cover: float | None) -> str:
    if cloud_cover is None:
        return "Cloud cover unknown"
    if cloud_cover > OUTLOOK_CLOUD_COVER_MAX_PCT:
        return f"Too cloudy ({cloud_cover:g}%) - need some clear sky to see rainbow"
    return f"Cloud cover is acceptable ({cloud_cover:g}%)"


def _visibility_reason(visibility: float | None) -> str:
    if visibility is None:
        return "Visibility unknown"
    if visibility < OUTLOOK_VISIBILITY_MIN_M:
        return f"Visibility too low ({visibility:g}m)"
    return f"Visibility is good ({visibility:g}m)"


_ADVICE = {
    "sun_altitude": "Wait for sun to be lower in the sky (early morning or late afternoon).",
    "precipitation": "Watch for rain showers with breaks in the clouds.",
    "humidity": "Humidity is low - rainbows more likely after rain.",
    "cloud_cover": "Wait for some clearing in the clouds.",
    "visibility": "Poor visibility may obscure any rainbow.",
}


def _recommendations(conditions: dict[str, ConditionCheck], score: int) -> list[str]:
    if score >= 80:
        headline = "Excellent rainbow conditions! Keep watching the sky."
    elif score >= OUTLOOK_FAVORABLE_SCORE:
        headline = "Good chance of seeing a rainbow."
    elif score >= 40:
        headline = "Some favorable conditions, but rainbow unlikely."
    else:
        headline = "Conditions not favorable for rainbows."
    return [headline] + [_ADVICE[key] for key, check in conditions.items() if not check.favorable]


__all__ = [
    "ConditionCheck",
    "RainbowOutlook",
    "assess_rainbow_conditions",
    "azimuth_to_cardinal",
    "evaluate",
    "precipitation_moving_away",
    "rainbow_azimuth",
    "sun_position_favorable",
    "weather_favorable",
]
