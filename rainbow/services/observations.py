"""Upserts for the per-photo observation set."""

from __future__ import annotations

import logging
from datetime import datetime

from sqlmodel import Session, select

from rainbow.models import Photo, RadarObservation, WeatherObservation
from rainbow.services.precipitation import PrecipitationType, classify_intensity
from rainbow.services.radar_api import RadarFrame
from rainbow.services.weather_api import WeatherSnapshot
from rainbow.utils.timestamp import to_naive_utc, utcnow

logger = logging.getLogger(__name__)


class ObservationRepository:
    """Insert-or-update writes keyed by (photo, timestamp) for weather and (photo) for radar.

    Each write commits on its own so that rows saved before a failure survive it.
    """

    def __init__(self, session: Session) -> None:
        self.session = session

    def get_photo(self, photo_id: int) -> Photo | None:
        return self.session.get(Photo, photo_id)

    def upsert_weather(
        self,
        photo_id: int,
        instant: datetime,
        snapshot: WeatherSnapshot,
        precipitation_type: PrecipitationType | None,
    ) -> WeatherObservation:
        timestamp = to_naive_utc(instant)
        row = self.session.exec(
            select(WeatherObservation).where(
                WeatherObservation.photo_id == photo_id,
                WeatherObservation.timestamp == timestamp,
            )
        ).first()
        if row is None:
            row = WeatherObservation(photo_id=photo_id, timestamp=timestamp)

        row.temperature = snapshot.temperature
        row.humidity = snapshot.humidity
        row.pressure = snapshot.pressure
        row.wind_speed = snapshot.wind_speed
        row.wind_direction = snapshot.wind_direction
        row.wind_gust = snapshot.wind_gust
        row.cloud_cover = snapshot.cloud_cover
        row.visibility = snapshot.visibility
        row.weather_code = snapshot.weather_code
        row.weather_description = snapshot.weather_description
        row.precipitation = snapshot.precipitation_1h
        row.precipitation_type = precipitation_type.value if precipitation_type else None
        row.sun_azimuth = snapshot.sun_azimuth
        row.sun_altitude = snapshot.sun_altitude
        row.updated_at = utcnow()

        self.session.add(row)
        self.session.commit()
        self.session.refresh(row)
        logger.debug(
            "Saved weather observation for photo %s at %s: temp=%s, humidity=%s",
            photo_id,
            timestamp,
            snapshot.temperature,
            snapshot.humidity,
        )
        return row

    def upsert_radar(self, photo_id: int, frame: RadarFrame) -> RadarObservation:
        row = self.session.exec(
            select(RadarObservation).where(RadarObservation.photo_id == photo_id)
        ).first()
        if row is None:
            row = RadarObservation(
                photo_id=photo_id,
                timestamp=frame.timestamp,
                center_latitude=frame.latitude,
                center_longitude=frame.longitude,
                tile_x=frame.tile.x,
                tile_y=frame.tile.y,
                tile_z=frame.tile.z,
            )

        row.timestamp = frame.timestamp
        row.center_latitude = frame.latitude
        row.center_longitude = frame.longitude
        row.tile_x = frame.tile.x
        row.tile_y = frame.tile.y
        row.tile_z = frame.tile.z
        row.tile_url = frame.tile_url
        row.precipitation_intensity = (
            classify_intensity(frame.reflectivity_dbz).level if frame.reflectivity_dbz is not None else None
        )
        # Movement needs two frames compared pixel by pixel.
        row.movement_direction = None
        row.movement_speed = None
        row.updated_at = utcnow()

        self.session.add(row)
        self.session.commit()
        self.session.refresh(row)
        logger.debug("Saved radar observation for photo %s at %s: %s", photo_id, frame.timestamp, frame.tile_url)
        return row

    def link_radar_to_capture(self, photo_id: int, radar: RadarObservation, capture_instant: datetime) -> bool:
        """Point the weather row at the capture instant to the radar snapshot."""

        row = self.session.exec(
            select(WeatherObservation).where(
                WeatherObservation.photo_id == photo_id,
                WeatherObservation.timestamp == to_naive_utc(capture_instant),
            )
        ).first()
        if row is None:
            return False
        row.radar_observation_id = radar.id
        self.session.add(row)
        self.session.commit()
        return True


__all__ = ["ObservationRepository"]
