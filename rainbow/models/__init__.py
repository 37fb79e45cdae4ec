"""Database models."""

from .photo import Photo
from .radar import RadarObservation
from .weather import WeatherObservation

__all__ = [
    "Photo",
    "RadarObservation",
    "WeatherObservation",
]
