"""Service-layer utilities."""

from .correlation import CorrelationResult, CorrelationStatus, PhotoWeatherCorrelator
from .favorability import evaluate, precipitation_moving_away
from .precipitation import PrecipitationType, classify_precipitation
from .provider_errors import (
    ApiError,
    ConfigurationError,
    InvalidResponseError,
    ProviderError,
    RateLimitError,
)
from .radar_api import RadarApiClient, RadarFrame, TileCoordinates, tile_coordinates_for
from .time_sampler import generate_sample_times
from .weather_api import WeatherApiClient, WeatherSnapshot

__all__ = [
    "ApiError",
    "ConfigurationError",
    "CorrelationResult",
    "CorrelationStatus",
    "InvalidResponseError",
    "PhotoWeatherCorrelator",
    "PrecipitationType",
    "ProviderError",
    "RadarApiClient",
    "RadarFrame",
    "RateLimitError",
    "TileCoordinates",
    "WeatherApiClient",
    "WeatherSnapshot",
    "classify_precipitation",
    "evaluate",
    "generate_sample_times",
    "precipitation_moving_away",
    "tile_coordinates_for",
]
