"""Sample instants bracketing a photo's capture time."""

from __future__ import annotations

from datetime import datetime, timedelta

from rainbow.utils.timestamp import EPOCH, to_naive_utc

DEFAULT_RANGE_HOURS = 3
DEFAULT_INTERVAL_MINUTES = 30


def round_to_interval(instant: datetime, interval_minutes: int = DEFAULT_INTERVAL_MINUTES) -> datetime:
    """Round to the nearest interval boundary; exact halves go to the later boundary."""

    interval = timedelta(minutes=interval_minutes)
    offset = to_naive_utc(instant) - EPOCH
    steps = (offset + interval / 2) // interval
    return EPOCH + steps * interval


def generate_sample_times(
    captured_at: datetime,
    range_hours: int = DEFAULT_RANGE_HOURS,
    interval_minutes: int = DEFAULT_INTERVAL_MINUTES,
) -> list[datetime]:
    """Return the ordered instants from rounded-range to rounded+range inclusive.

    With the defaults this is 13 instants, 30 minutes apart, centred on the
    capture time rounded to the nearest half hour.
    """

    center = round_to_interval(captured_at, interval_minutes)
    step = timedelta(minutes=interval_minutes)
    count = (range_hours * 60) // interval_minutes
    return [center + step * offset for offset in range(-count, count + 1)]


__all__ = ["round_to_interval", "generate_sample_times"]
