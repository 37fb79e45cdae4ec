"""OpenWeatherMap One Call 3.0 client."""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from datetime import datetime
from typing import Any, Callable, Iterable

import httpx

from rainbow.core.config import settings
from rainbow.services.provider_errors import (
    ApiError,
    ConfigurationError,
    InvalidResponseError,
    ProviderError,
    RateLimitError,
)
from rainbow.services.sun_position import SunPosition, SunPositionError, compute_sun_position
from rainbow.utils.timestamp import from_unix, to_naive_utc, to_unix, utcnow

logger = logging.getLogger(__name__)

SunLocator = Callable[[float, float, datetime], SunPosition]


@dataclass(frozen=True)
class WeatherSnapshot:
    """Normalized weather block from either endpoint."""

    observed_at: datetime | None = None
    requested_at: datetime | None = None
    temperature: float | None = None
    feels_like: float | None = None
    humidity: float | None = None
    pressure: float | None = None
    dew_point: float | None = None
    uvi: float | None = None
    cloud_cover: float | None = None
    visibility: float | None = None
    wind_speed: float | None = None
    wind_direction: float | None = None
    wind_gust: float | None = None
    weather_code: int | None = None
    weather_main: str | None = None
    weather_description: str | None = None
    weather_icon: str | None = None
    rain_1h: float | None = None
    snow_1h: float | None = None
    sunrise: datetime | None = None
    sunset: datetime | None = None
    sun_azimuth: float | None = None
    sun_altitude: float | None = None

    @property
    def precipitation_1h(self) -> float:
        if self.rain_1h is not None:
            return self.rain_1h
        if self.snow_1h is not None:
            return self.snow_1h
        return 0.0


@dataclass(frozen=True)
class FetchOutcome:
    """Per-instant result of a bulk fetch: a snapshot or the error that prevented it."""

    instant: datetime
    snapshot: WeatherSnapshot | None = None
    error: ProviderError | None = None

    @property
    def ok(self) -> bool:
        return self.snapshot is not None


class WeatherApiClient:
    """Current and historical conditions at a coordinate.

    No retries happen here; callers decide what to do with a ProviderError.
    """

    CURRENT_ENDPOINT = "/onecall"
    HISTORICAL_ENDPOINT = "/onecall/timemachine"

    def __init__(
        self,
        api_key: str | None = None,
        base_url: str | None = None,
        timeout: float | None = None,
        units: str | None = None,
        transport: httpx.BaseTransport | None = None,
        sun_locator: SunLocator | None = compute_sun_position,
    ) -> None:
        """Build a client bound to one API key.

        Args:
            api_key: OpenWeatherMap key; defaults to ``settings.openweathermap_api_key``
            base_url: One Call 3.0 root URL
            timeout: Connect and read timeout (seconds)
            units: Provider unit system (``metric`` gives degC and m/s)
            transport: Optional httpx transport, used by tests
            sun_locator: Sun position callable; ``None`` skips the enrichment

        Raises:
            ConfigurationError: The API key is empty.
        """
        self.api_key = settings.openweathermap_api_key if api_key is None else api_key
        if not self.api_key:
            raise ConfigurationError("OpenWeatherMap API key is required")
        self.base_url = base_url or settings.weather_api_base_url
        self.units = units or settings.weather_api_units
        self.timeout = timeout if timeout is not None else settings.weather_api_timeout
        self.sun_locator = sun_locator
        self._client = httpx.Client(base_url=self.base_url, timeout=self.timeout, transport=transport)

    def close(self) -> None:
        self._client.close()

    def __enter__(self) -> "WeatherApiClient":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def current_weather(self, lat: float, lng: float) -> WeatherSnapshot:
        """Fetch the conditions observed right now.

        Args:
            lat: Latitude (degrees)
            lng: Longitude (degrees, East positive)

        Returns:
            Snapshot of the ``current`` block, with the sun position at its observation time.

        Raises:
            RateLimitError: HTTP 429.
            ApiError: Other 4xx/5xx statuses, timeouts and transport failures.
            InvalidResponseError: Unexpected status or no usable ``current`` block.
        """
        payload = self._get(
            self.CURRENT_ENDPOINT,
            {
                "lat": lat,
                "lon": lng,
                "units": self.units,
                "exclude": "minutely,hourly,daily,alerts",
            },
        )
        current = payload.get("current")
        if not isinstance(current, dict):
            raise InvalidResponseError("Weather response has no 'current' block")
        snapshot = self._parse_block(current)
        return self._with_sun_position(snapshot, lat, lng, snapshot.observed_at or utcnow())

    def historical_weather(self, lat: float, lng: float, instant: datetime) -> WeatherSnapshot:
        """Fetch the conditions at a past instant from the timemachine endpoint.

        Args:
            lat: Latitude (degrees)
            lng: Longitude (degrees, East positive)
            instant: Requested time; naive values are taken as UTC

        Returns:
            Snapshot of ``data[0]`` with ``requested_at`` set and the sun position at ``instant``.

        Raises:
            RateLimitError: HTTP 429.
            ApiError: Other 4xx/5xx statuses, timeouts and transport failures.
            InvalidResponseError: Unexpected status or an empty ``data`` list.
        """
        requested = to_naive_utc(instant)
        payload = self._get(
            self.HISTORICAL_ENDPOINT,
            {"lat": lat, "lon": lng, "dt": to_unix(requested), "units": self.units},
        )
        blocks = payload.get("data")
        if not isinstance(blocks, list) or not blocks or not isinstance(blocks[0], dict):
            raise InvalidResponseError("Weather response has no 'data' entries")
        snapshot = replace(self._parse_block(blocks[0]), requested_at=requested)
        return self._with_sun_position(snapshot, lat, lng, requested)

    def historical_weather_outcomes(
        self, lat: float, lng: float, instants: Iterable[datetime]
    ) -> list[FetchOutcome]:
        """Fetch each instant and tag it with its snapshot or its provider error.

        Returns:
            One outcome per input instant, in input order.
        """
        outcomes: list[FetchOutcome] = []
        for instant in instants:
            try:
                outcomes.append(FetchOutcome(instant, snapshot=self.historical_weather(lat, lng, instant)))
            except ProviderError as exc:
                logger.warning("Failed to fetch historical weather for %s: %s", instant, exc)
                outcomes.append(FetchOutcome(instant, error=exc))
        return outcomes

    def historical_weather_bulk(
        self, lat: float, lng: float, instants: Iterable[datetime]
    ) -> list[WeatherSnapshot]:
        """Fetch each instant, dropping the ones that failed.

        The result may be shorter than the input.
        """

        return [
            outcome.snapshot
            for outcome in self.historical_weather_outcomes(lat, lng, instants)
            if outcome.snapshot is not None
        ]

    def _get(self, endpoint: str, params: dict[str, Any]) -> dict[str, Any]:
        query = dict(params, appid=self.api_key)
        try:
            response = self._client.get(endpoint, params=query)
        except httpx.TimeoutException as exc:
            raise ApiError(f"Weather API request timed out: {exc}") from exc
        except httpx.HTTPError as exc:
            raise ApiError(f"Weather API request failed: {exc}") from exc

        status = response.status_code
        if status == 200:
            try:
                data = response.json()
            except ValueError as exc:
                raise InvalidResponseError("Weather API returned invalid JSON", status, response.text) from exc
            if not isinstance(data, dict):
                raise InvalidResponseError("Weather API returned an unexpected payload", status, response.text)
            return data
        if status == 401:
            raise ApiError("Invalid API key", status, response.text)
        if status == 429:
            raise RateLimitError("API rate limit exceeded", status, response.text)
        if 400 <= status < 500:
            raise ApiError(f"Client error: {status} - {response.text}", status, response.text)
        if 500 <= status < 600:
            raise ApiError(f"Server error: {status}", status, response.text)
        raise InvalidResponseError(f"Unexpected response: {status}", status, response.text)

    def _parse_block(self, block: dict[str, Any]) -> WeatherSnapshot:
        weather = block.get("weather")
        condition = weather[0] if isinstance(weather, list) and weather and isinstance(weather[0], dict) else {}
        return WeatherSnapshot(
            observed_at=_parse_time(block.get("dt")),
            temperature=_coerce_float(block.get("temp")),
            feels_like=_coerce_float(block.get("feels_like")),
            humidity=_coerce_float(block.get("humidity")),
            pressure=_coerce_float(block.get("pressure")),
            dew_point=_coerce_float(block.get("dew_point")),
            uvi=_coerce_float(block.get("uvi")),
            cloud_cover=_coerce_float(block.get("clouds")),
            visibility=_coerce_float(block.get("visibility")),
            wind_speed=_coerce_float(block.get("wind_speed")),
            wind_direction=_coerce_float(block.get("wind_deg")),
            wind_gust=_coerce_float(block.get("wind_gust")),
            weather_code=_coerce_int(condition.get("id")),
            weather_main=_coerce_str(condition.get("main")),
            weather_description=_coerce_str(condition.get("description")),
            weather_icon=_coerce_str(condition.get("icon")),
            rain_1h=_last_hour(block.get("rain")),
            snow_1h=_last_hour(block.get("snow")),
            sunrise=_parse_time(block.get("sunrise")),
            sunset=_parse_time(block.get("sunset")),
        )

    def _with_sun_position(
        self, snapshot: WeatherSnapshot, lat: float, lng: float, instant: datetime
    ) -> WeatherSnapshot:
        if self.sun_locator is None:
            return snapshot
        try:
            position = self.sun_locator(lat, lng, instant)
        except SunPositionError as exc:
            logger.warning("Sun position unavailable for %s: %s", instant, exc)
            return snapshot
        return replace(snapshot, sun_azimuth=position.azimuth, sun_altitude=position.altitude)


def _coerce_float(value: Any) -> float | None:
    try:
        if value is None:
            return None
        return float(value)
    except (TypeError, ValueError):
        return None


def _coerce_int(value: Any) -> int | None:
    try:
        if value is None:
            return None
        return int(value)
    except (TypeError, ValueError, OverflowError):
        return None


def _coerce_str(value: Any) -> str | None:
    return value if isinstance(value, str) else None


def _last_hour(volume: Any) -> float | None:
    """``{"1h": mm}`` volume block; any other shape counts as absent."""
    if not isinstance(volume, dict):
        return None
    return _coerce_float(volume.get("1h"))


def _parse_time(value: Any) -> datetime | None:
    seconds = _coerce_float(value)
    if seconds is None:
        return None
    try:
        return from_unix(seconds)
    except (ValueError, OverflowError, OSError):
        return None


__all__ = ["WeatherApiClient", "WeatherSnapshot", "FetchOutcome"]
