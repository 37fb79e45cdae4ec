"""Photo atmosphere endpoints."""

from __future__ import annotations

import logging
from datetime import datetime
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel
from sqlmodel import Session, select

from rainbow.api.deps import get_db, get_queue
from rainbow.models import Photo, RadarObservation, WeatherObservation
from rainbow.services.favorability import assess_rainbow_conditions, evaluate
from rainbow.worker.correlation_queue import CorrelationQueue

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/photos", tags=["photos"])


class WeatherObservationRead(BaseModel):
    timestamp: datetime
    temperature: Optional[float] = None
    humidity: Optional[float] = None
    pressure: Optional[float] = None
    wind_speed: Optional[float] = None
    wind_direction: Optional[float] = None
    cloud_cover: Optional[float] = None
    visibility: Optional[float] = None
    weather_code: Optional[int] = None
    weather_description: Optional[str] = None
    precipitation: Optional[float] = None
    precipitation_type: Optional[str] = None
    sun_azimuth: Optional[float] = None
    sun_altitude: Optional[float] = None
    rainbow_favorable: bool = False
    rainbow_score: int = 0
    rainbow_direction: Optional[str] = None


class RadarObservationRead(BaseModel):
    timestamp: datetime
    center_latitude: float
    center_longitude: float
    tile_x: int
    tile_y: int
    tile_z: int
    tile_url: Optional[str] = None
    precipitation_intensity: Optional[str] = None
    movement_direction: Optional[float] = None
    movement_speed: Optional[float] = None


class AtmosphereResponse(BaseModel):
    photo_id: int
    captured_at: Optional[datetime] = None
    weather: List[WeatherObservationRead]
    radar: Optional[RadarObservationRead] = None


class CorrelationAccepted(BaseModel):
    photo_id: int
    status: str = "queued"


def _weather_read(row: WeatherObservation) -> WeatherObservationRead:
    outlook = assess_rainbow_conditions(
        sun_altitude=row.sun_altitude,
        sun_azimuth=row.sun_azimuth,
        humidity=row.humidity,
        cloud_cover=row.cloud_cover,
        visibility=row.visibility,
        precipitation_mm=row.precipitation,
        weather_code=row.weather_code,
    )
    return WeatherObservationRead(
        timestamp=row.timestamp,
        temperature=row.temperature,
        humidity=row.humidity,
        pressure=row.pressure,
        wind_speed=row.wind_speed,
        wind_direction=row.wind_direction,
        cloud_cover=row.cloud_cover,
        visibility=row.visibility,
        weather_code=row.weather_code,
        weather_description=row.weather_description,
        precipitation=row.precipitation,
        precipitation_type=row.precipitation_type,
        sun_azimuth=row.sun_azimuth,
        sun_altitude=row.sun_altitude,
        rainbow_favorable=evaluate(row.sun_altitude, row.humidity, row.cloud_cover),
        rainbow_score=outlook.score,
        rainbow_direction=outlook.rainbow_cardinal,
    )


@router.get("/{photo_id}/atmosphere", response_model=AtmosphereResponse)
def get_atmosphere(photo_id: int, session: Session = Depends(get_db)) -> AtmosphereResponse:
    """Weather timeline and radar snapshot stored for a photo."""

    photo = session.get(Photo, photo_id)
    if not photo:
        raise HTTPException(status_code=404, detail="Photo not found")

    weather_rows = session.exec(
        select(WeatherObservation)
        .where(WeatherObservation.photo_id == photo_id)
        .order_by(WeatherObservation.timestamp)
    ).all()
    radar_row = session.exec(
        select(RadarObservation).where(RadarObservation.photo_id == photo_id)
    ).first()

    return AtmosphereResponse(
        photo_id=photo_id,
        captured_at=photo.captured_at,
        weather=[_weather_read(row) for row in weather_rows],
        radar=RadarObservationRead.model_validate(radar_row, from_attributes=True) if radar_row else None,
    )


@router.post("/{photo_id}/correlate", response_model=CorrelationAccepted, status_code=202)
def trigger_correlation(
    photo_id: int,
    session: Session = Depends(get_db),
    queue: CorrelationQueue = Depends(get_queue),
) -> CorrelationAccepted:
    if not session.get(Photo, photo_id):
        raise HTTPException(status_code=404, detail="Photo not found")
    queue.enqueue(photo_id)
    logger.info("Queued correlation for photo %s", photo_id)
    return CorrelationAccepted(photo_id=photo_id)
