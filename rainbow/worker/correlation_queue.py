"""Background job runner for photo correlation with job-level retries."""

from __future__ import annotations

import argparse
import logging
import threading
from dataclasses import dataclass
from queue import Empty, SimpleQueue
from typing import Callable

from prometheus_client import start_http_server

from rainbow.core.config import settings
from rainbow.core.logging_config import setup_logging
from rainbow.db.session import get_session, init_db
from rainbow.services.correlation import CorrelationCancelled, CorrelationResult, PhotoWeatherCorrelator
from rainbow.services.observations import ObservationRepository
from rainbow.services.provider_errors import ConfigurationError
from rainbow.services.radar_api import RadarApiClient
from rainbow.services.weather_api import WeatherApiClient

logger = logging.getLogger(__name__)

_METRICS_SERVER_STARTED = False

JobRunner = Callable[[int, threading.Event], CorrelationResult]


def run_correlation(photo_id: int, cancel_event: threading.Event | None = None) -> CorrelationResult:
    """One correlation run with freshly built provider clients and session."""

    with get_session() as session, WeatherApiClient() as weather_client, RadarApiClient() as radar_client:
        correlator = PhotoWeatherCorrelator(ObservationRepository(session), weather_client, radar_client)
        return correlator.run(photo_id, cancel_event=cancel_event)


@dataclass
class CorrelationJob:
    photo_id: int
    max_attempts: int = 3
    backoff_seconds: float = 10.0


class CorrelationQueue:
    """Serial worker that runs correlation jobs and retries unexpected failures.

    Provider errors never reach this level; they are handled per step by the
    correlator. A missing credential is not retried.
    """

    def __init__(self, runner: JobRunner = run_correlation) -> None:
        self.runner = runner
        self._queue: SimpleQueue[CorrelationJob] = SimpleQueue()
        self._stop = threading.Event()
        self._thread = threading.Thread(target=self._worker, name="correlation-queue", daemon=True)
        self._started = False

    def start(self) -> None:
        if not self._started:
            self._thread.start()
            self._started = True

    def stop(self, timeout: float | None = None) -> None:
        """Cancel the running job cooperatively and stop the worker."""

        self._stop.set()
        if self._started:
            self._thread.join(timeout)

    def enqueue(self, photo_id: int) -> CorrelationJob:
        job = CorrelationJob(
            photo_id=photo_id,
            max_attempts=max(1, settings.correlation_job_max_attempts),
            backoff_seconds=settings.correlation_job_backoff_seconds,
        )
        self._queue.put(job)
        if not self._started:
            self.start()
        return job

    def process(self, job: CorrelationJob) -> CorrelationResult | None:
        attempts = 0
        while attempts < job.max_attempts and not self._stop.is_set():
            attempts += 1
            try:
                result = self.runner(job.photo_id, self._stop)
            except ConfigurationError as exc:
                logger.error("Correlation for photo %s discarded, providers not configured: %s", job.photo_id, exc)
                return None
            except CorrelationCancelled:
                logger.info("Correlation for photo %s cancelled", job.photo_id)
                return None
            except Exception as exc:
                if attempts >= job.max_attempts:
                    logger.exception(
                        "Correlation for photo %s failed after %s attempts", job.photo_id, attempts
                    )
                    return None
                logger.warning(
                    "Correlation for photo %s failed attempt %s/%s: %s",
                    job.photo_id,
                    attempts,
                    job.max_attempts,
                    exc,
                )
                self._stop.wait(job.backoff_seconds * attempts)
                continue
            if attempts > 1:
                logger.info("Correlation for photo %s succeeded after %s attempts", job.photo_id, attempts)
            return result
        return None

    def _worker(self) -> None:
        while not self._stop.is_set():
            try:
                job = self._queue.get(timeout=1.0)
            except Empty:
                continue
            self.process(job)


CORRELATION_QUEUE = CorrelationQueue()


def start_metrics_server() -> None:
    global _METRICS_SERVER_STARTED
    if not settings.metrics_enabled or _METRICS_SERVER_STARTED:
        return
    start_http_server(settings.metrics_port, addr=settings.metrics_host)
    logger.info("Prometheus metrics exporter listening on %s:%s", settings.metrics_host, settings.metrics_port)
    _METRICS_SERVER_STARTED = True


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Correlate a photo with weather and radar data.")
    parser.add_argument("--photo-id", type=int, required=True, help="Photo to correlate")
    parser.add_argument(
        "--init-db",
        action="store_true",
        help="Create missing tables before running.",
    )
    parser.add_argument(
        "--serve-metrics",
        action="store_true",
        help="Expose Prometheus metrics while the job runs.",
    )
    return parser.parse_args()


def main() -> int:
    setup_logging("rainbow-worker")
    args = parse_args()
    if args.init_db:
        init_db()
    if args.serve_metrics:
        start_metrics_server()
    result = CorrelationQueue().process(
        CorrelationJob(
            photo_id=args.photo_id,
            max_attempts=max(1, settings.correlation_job_max_attempts),
            backoff_seconds=settings.correlation_job_backoff_seconds,
        )
    )
    if result is None:
        return 1
    print(
        f"photo={result.photo_id} status={result.status.value} "
        f"weather={result.weather_saved}/{result.weather_requested} radar={result.radar_saved}"
    )
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
