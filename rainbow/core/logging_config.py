"""Logging setup shared by the API process and the correlation worker."""

from __future__ import annotations

import logging
from collections import deque
from datetime import datetime, timezone
from typing import Optional

from pythonjsonlogger import jsonlogger

from rainbow.core.config import settings

_CONFIGURED = False
_LOG_BUFFER: deque[dict[str, str]] = deque(maxlen=settings.log_buffer_size)

# Per-request chatter from the HTTP and astronomy stacks.
_NOISY_LOGGERS = ("httpx", "httpcore", "astropy")


class _ServiceNameFilter(logging.Filter):
    def __init__(self, service_name: str) -> None:
        super().__init__()
        self.service_name = service_name

    def filter(self, record: logging.LogRecord) -> bool:  # pragma: no cover - trivial
        record.service = self.service_name
        return True


class _BufferHandler(logging.Handler):
    """Keeps the newest records in memory for the /logs endpoint."""

    def __init__(self, service_name: str) -> None:
        super().__init__()
        self.service_name = service_name

    def emit(self, record: logging.LogRecord) -> None:
        try:
            created = datetime.fromtimestamp(record.created, tz=timezone.utc)
            _LOG_BUFFER.appendleft(
                {
                    "time": created.strftime("%Y-%m-%dT%H:%M:%S.%fZ"),
                    "level": record.levelname,
                    "name": record.name,
                    "service": self.service_name,
                    "message": record.getMessage(),
                }
            )
        except Exception:
            self.handleError(record)


def setup_logging(service_name: Optional[str] = None) -> None:
    """Install the JSON root handler once per process."""

    global _CONFIGURED
    if _CONFIGURED:
        return

    service = service_name or settings.service_name
    handler = logging.StreamHandler()
    handler.setFormatter(
        jsonlogger.JsonFormatter("%(asctime)s %(levelname)s %(name)s %(threadName)s %(message)s %(service)s")
    )
    handler.addFilter(_ServiceNameFilter(service))

    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(handler)
    root.addHandler(_BufferHandler(service))
    root.setLevel(settings.log_level.upper())
    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
    logging.captureWarnings(True)
    _CONFIGURED = True


def get_log_buffer(limit: int = 100) -> list[dict[str, str]]:
    return list(_LOG_BUFFER)[:limit]


__all__ = ["setup_logging", "get_log_buffer"]
