"""Correlate a photo with the weather and radar around its capture time."""

from __future__ import annotations

import logging
import threading
import time
from concurrent.futures import Future, ThreadPoolExecutor, as_completed
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from enum import Enum
from typing import Callable, Protocol

from prometheus_client import Counter, Histogram

from rainbow.core.config import settings
from rainbow.services.observations import ObservationRepository
from rainbow.services.precipitation import classify_precipitation
from rainbow.services.provider_errors import ProviderError
from rainbow.services.radar_api import RadarApiClient, RadarFrame
from rainbow.services.time_sampler import generate_sample_times, round_to_interval
from rainbow.services.weather_api import WeatherApiClient, WeatherSnapshot
from rainbow.utils.timestamp import to_naive_utc, utcnow

logger = logging.getLogger(__name__)

CORRELATION_SECONDS = Histogram(
    "rainbow_correlation_run_seconds",
    "Wall time of photo correlation runs that reached the network.",
)
CORRELATION_RUNS = Counter(
    "rainbow_correlation_runs_total",
    "Photo correlation runs by final status.",
    ["status"],
)
WEATHER_FETCH_FAILURES = Counter(
    "rainbow_correlation_weather_failures_total",
    "Weather fetches skipped because the provider failed.",
    ["error"],
)
RADAR_FETCH_FAILURES = Counter(
    "rainbow_correlation_radar_failures_total",
    "Radar fetches skipped because the provider failed.",
    ["error"],
)


class CorrelationStatus(str, Enum):
    NOT_STARTED = "not_started"
    IN_PROGRESS = "in_progress"
    PARTIALLY_COMPLETED = "partially_completed"
    COMPLETED = "completed"
    SKIPPED = "skipped"


class CorrelationCancelled(RuntimeError):
    """The enclosing job asked the run to stop."""


@dataclass
class StepFailure:
    step: str
    instant: datetime | None
    error_type: str
    message: str


@dataclass
class CorrelationResult:
    photo_id: int
    status: CorrelationStatus = CorrelationStatus.NOT_STARTED
    weather_requested: int = 0
    weather_saved: int = 0
    weather_failed: int = 0
    radar_saved: bool = False
    failures: list[StepFailure] = field(default_factory=list)


class WeatherFetchStrategy(Protocol):
    name: str

    def fetch(self, client: WeatherApiClient, lat: float, lng: float, instant: datetime) -> WeatherSnapshot:
        ...


class CurrentWeatherStrategy:
    name = "current"

    def fetch(self, client: WeatherApiClient, lat: float, lng: float, instant: datetime) -> WeatherSnapshot:
        return client.current_weather(lat, lng)


class HistoricalWeatherStrategy:
    name = "historical"

    def fetch(self, client: WeatherApiClient, lat: float, lng: float, instant: datetime) -> WeatherSnapshot:
        return client.historical_weather(lat, lng, instant)


CURRENT_WEATHER = CurrentWeatherStrategy()
HISTORICAL_WEATHER = HistoricalWeatherStrategy()


def select_fetch_strategy(instant: datetime, now: datetime, tolerance: timedelta) -> WeatherFetchStrategy:
    """Current conditions for anything at or after ``now - tolerance``.

    Future instants land here too; the historical endpoint cannot serve them.
    """

    if to_naive_utc(instant) >= to_naive_utc(now) - tolerance:
        return CURRENT_WEATHER
    return HISTORICAL_WEATHER


class PhotoWeatherCorrelator:
    """Drive the sampled weather fetches and the radar fetch for one photo.

    Provider errors are downgraded to logged failures per step; anything
    else propagates so the job runner can retry the whole run.
    """

    def __init__(
        self,
        repository: ObservationRepository,
        weather_client: WeatherApiClient,
        radar_client: RadarApiClient,
        max_workers: int | None = None,
        radar_zoom: int | None = None,
        range_hours: int | None = None,
        interval_minutes: int | None = None,
        current_tolerance: timedelta | None = None,
        clock: Callable[[], datetime] = utcnow,
    ) -> None:
        self.repository = repository
        self.weather_client = weather_client
        self.radar_client = radar_client
        self.max_workers = max(1, max_workers or settings.correlation_max_workers)
        self.radar_zoom = radar_zoom if radar_zoom is not None else settings.radar_zoom
        self.range_hours = range_hours if range_hours is not None else settings.correlation_range_hours
        self.interval_minutes = interval_minutes or settings.correlation_interval_minutes
        self.current_tolerance = (
            current_tolerance
            if current_tolerance is not None
            else timedelta(minutes=settings.weather_current_tolerance_minutes)
        )
        self.clock = clock

    def run(self, photo_id: int, cancel_event: threading.Event | None = None) -> CorrelationResult:
        result = CorrelationResult(photo_id=photo_id)
        photo = self.repository.get_photo(photo_id)
        if photo is None:
            logger.info("Skipping photo %s: it no longer exists", photo_id)
            return self._finish(result, CorrelationStatus.SKIPPED)
        if not photo.has_correlation_inputs:
            logger.warning("Skipping photo %s: missing location or capture time", photo_id)
            return self._finish(result, CorrelationStatus.SKIPPED)

        lat, lng = photo.latitude, photo.longitude
        captured_at = to_naive_utc(photo.captured_at)
        instants = generate_sample_times(captured_at, self.range_hours, self.interval_minutes)
        result.status = CorrelationStatus.IN_PROGRESS
        result.weather_requested = len(instants)
        logger.info("Correlating photo %s at (%s, %s) around %s", photo_id, lat, lng, captured_at)

        now = self.clock()
        started = time.monotonic()
        pool = ThreadPoolExecutor(max_workers=self.max_workers, thread_name_prefix="correlate")
        cancelled = False
        try:
            radar_future = pool.submit(self.radar_client.latest_radar_for, lat, lng, self.radar_zoom, captured_at)
            weather_futures = {
                pool.submit(self._fetch_weather, lat, lng, instant, now): instant for instant in instants
            }
            for future in as_completed(weather_futures):
                cancelled = self._cancel_requested(cancel_event)
                if cancelled:
                    raise CorrelationCancelled(f"Correlation of photo {photo_id} cancelled")
                self._store_weather(result, weather_futures[future], future)

            cancelled = self._cancel_requested(cancel_event)
            if cancelled:
                raise CorrelationCancelled(f"Correlation of photo {photo_id} cancelled")
            self._store_radar(result, radar_future, captured_at)
        finally:
            pool.shutdown(wait=not cancelled, cancel_futures=True)

        if settings.metrics_enabled:
            CORRELATION_SECONDS.observe(time.monotonic() - started)
        logger.info(
            "Saved %s/%s weather data points for photo %s (radar=%s)",
            result.weather_saved,
            result.weather_requested,
            photo_id,
            result.radar_saved,
        )
        complete = result.weather_failed == 0 and result.radar_saved
        return self._finish(
            result, CorrelationStatus.COMPLETED if complete else CorrelationStatus.PARTIALLY_COMPLETED
        )

    def _fetch_weather(self, lat: float, lng: float, instant: datetime, now: datetime) -> WeatherSnapshot:
        strategy = select_fetch_strategy(instant, now, self.current_tolerance)
        logger.debug("Fetching %s weather for %s", strategy.name, instant)
        return strategy.fetch(self.weather_client, lat, lng, instant)

    def _store_weather(self, result: CorrelationResult, instant: datetime, future: Future) -> None:
        try:
            snapshot: WeatherSnapshot = future.result()
        except ProviderError as exc:
            result.weather_failed += 1
            result.failures.append(StepFailure("weather", instant, type(exc).__name__, str(exc)))
            logger.warning("Failed to fetch weather at %s for photo %s: %s", instant, result.photo_id, exc)
            if settings.metrics_enabled:
                WEATHER_FETCH_FAILURES.labels(error=type(exc).__name__).inc()
            return

        precipitation_type = (
            classify_precipitation(snapshot.weather_code) if snapshot.weather_code is not None else None
        )
        self.repository.upsert_weather(result.photo_id, instant, snapshot, precipitation_type)
        result.weather_saved += 1

    def _store_radar(self, result: CorrelationResult, future: Future, captured_at: datetime) -> None:
        try:
            frame: RadarFrame = future.result()
        except ProviderError as exc:
            result.failures.append(StepFailure("radar", None, type(exc).__name__, str(exc)))
            logger.warning("Failed to fetch radar data for photo %s: %s", result.photo_id, exc)
            if settings.metrics_enabled:
                RADAR_FETCH_FAILURES.labels(error=type(exc).__name__).inc()
            return

        radar_row = self.repository.upsert_radar(result.photo_id, frame)
        result.radar_saved = True
        self.repository.link_radar_to_capture(
            result.photo_id, radar_row, round_to_interval(captured_at, self.interval_minutes)
        )

    @staticmethod
    def _cancel_requested(cancel_event: threading.Event | None) -> bool:
        return cancel_event is not None and cancel_event.is_set()

    @staticmethod
    def _finish(result: CorrelationResult, status: CorrelationStatus) -> CorrelationResult:
        result.status = status
        if settings.metrics_enabled:
            CORRELATION_RUNS.labels(status=status.value).inc()
        return result


__all__ = [
    "CorrelationCancelled",
    "CorrelationResult",
    "CorrelationStatus",
    "CurrentWeatherStrategy",
    "HistoricalWeatherStrategy",
    "PhotoWeatherCorrelator",
    "StepFailure",
    "WeatherFetchStrategy",
    "select_fetch_strategy",
]
