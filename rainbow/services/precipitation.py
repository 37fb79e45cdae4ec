"""Precipitation classification from provider codes and radar reflectivity."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class PrecipitationType(str, Enum):
    THUNDERSTORM = "thunderstorm"
    DRIZZLE = "drizzle"
    RAIN = "rain"
    SNOW = "snow"
    ATMOSPHERE = "atmosphere"
    NONE = "none"


# OpenWeatherMap condition code ranges, see https://openweathermap.org/weather-conditions
_CODE_RANGES: tuple[tuple[int, int, PrecipitationType], ...] = (
    (200, 299, PrecipitationType.THUNDERSTORM),
    (300, 399, PrecipitationType.DRIZZLE),
    (500, 599, PrecipitationType.RAIN),
    (600, 699, PrecipitationType.SNOW),
    (700, 799, PrecipitationType.ATMOSPHERE),
)


def classify_precipitation(weather_code: int | None) -> PrecipitationType:
    """Coarse precipitation category; unknown and clear codes map to NONE."""

    if weather_code is None:
        return PrecipitationType.NONE
    for low, high, category in _CODE_RANGES:
        if low <= weather_code <= high:
            return category
    return PrecipitationType.NONE


@dataclass(frozen=True)
class IntensityLevel:
    level: str
    mm_per_hour: float
    description: str


# Lower dBZ bound of each level; Z-R relation Z = 200 * R^1.6 gives the mm/h values.
_INTENSITY_LEVELS: tuple[tuple[float, IntensityLevel], ...] = (
    (56, IntensityLevel("extreme", 100.0, "Extreme precipitation")),
    (46, IntensityLevel("very_heavy", 50.0, "Very heavy precipitation")),
    (36, IntensityLevel("heavy", 10.0, "Heavy precipitation")),
    (26, IntensityLevel("moderate", 2.5, "Moderate precipitation")),
    (16, IntensityLevel("light", 0.5, "Light precipitation")),
)
_NO_PRECIPITATION = IntensityLevel("none", 0.0, "No precipitation")


def classify_intensity(dbz: float | None) -> IntensityLevel:
    """Map radar reflectivity (dBZ) to a precipitation intensity level."""

    if dbz is None:
        return _NO_PRECIPITATION
    for lower_bound, level in _INTENSITY_LEVELS:
        if dbz >= lower_bound:
            return level
    return _NO_PRECIPITATION


__all__ = ["PrecipitationType", "IntensityLevel", "classify_precipitation", "classify_intensity"]
