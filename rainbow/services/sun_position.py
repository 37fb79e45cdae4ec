"""Astronomical sun position for a site and instant."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

import astropy.units as u
from astroplan import Observer
from astropy.time import Time

from rainbow.utils.timestamp import to_naive_utc


class SunPositionError(ValueError):
    """The ephemeris could not place the sun for this site and instant."""


@dataclass(frozen=True)
class SunPosition:
    azimuth: float
    altitude: float

    @property
    def is_daytime(self) -> bool:
        return self.altitude > 0


def compute_sun_position(lat: float, lng: float, instant: datetime) -> SunPosition:
    """Topocentric sun azimuth (0=N, 90=E) and altitude in degrees.

    Raises:
        SunPositionError: coordinates out of range, or the Earth-orientation
            tables cannot cover ``instant``.
    """

    try:
        observer = Observer(latitude=lat * u.deg, longitude=lng * u.deg, elevation=0 * u.m, timezone="UTC")
        altaz = observer.sun_altaz(Time(to_naive_utc(instant), scale="utc"))
    except (ValueError, IndexError, OSError) as exc:
        # ErfaError and UnitsError derive from ValueError, IERSRangeError from IndexError.
        raise SunPositionError(f"Sun position unavailable at ({lat}, {lng}) for {instant}: {exc}") from exc
    return SunPosition(azimuth=float(altaz.az.deg) % 360.0, altitude=float(altaz.alt.deg))


__all__ = ["SunPosition", "SunPositionError", "compute_sun_position"]
