"""Shared fixtures: in-memory database, seeded photos and canned provider payloads."""

import os

os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("OPENWEATHERMAP_API_KEY", "test-key")

from datetime import datetime  # noqa: E402

import httpx  # noqa: E402
import pytest  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402
from sqlmodel import Session, SQLModel, create_engine  # noqa: E402

from rainbow.models import Photo  # noqa: E402
from rainbow.services.radar_api import RadarApiClient  # noqa: E402
from rainbow.services.sun_position import SunPosition  # noqa: E402
from rainbow.services.weather_api import WeatherApiClient  # noqa: E402

SHIOJIRI_LAT = 36.115
SHIOJIRI_LNG = 137.954


def fixed_sun(lat: float, lng: float, instant: datetime) -> SunPosition:
    return SunPosition(azimuth=250.0, altitude=20.0)


def weather_block(dt: int, code: int = 500, humidity: float = 80, clouds: float = 60, temp: float = 18.5) -> dict:
    return {
        "dt": dt,
        "sunrise": dt - 20000,
        "sunset": dt + 20000,
        "temp": temp,
        "feels_like": temp - 0.5,
        "pressure": 1008,
        "humidity": humidity,
        "dew_point": 14.9,
        "uvi": 2.1,
        "clouds": clouds,
        "visibility": 10000,
        "wind_speed": 3.6,
        "wind_deg": 250,
        "wind_gust": 6.2,
        "weather": [{"id": code, "main": "Rain", "description": "light rain", "icon": "10d"}],
        "rain": {"1h": 0.4},
    }


def current_payload(dt: int, **kwargs) -> dict:
    return {
        "lat": SHIOJIRI_LAT,
        "lon": SHIOJIRI_LNG,
        "timezone": "Asia/Tokyo",
        "timezone_offset": 32400,
        "current": weather_block(dt, **kwargs),
    }


def timemachine_payload(dt: int, **kwargs) -> dict:
    return {
        "lat": SHIOJIRI_LAT,
        "lon": SHIOJIRI_LNG,
        "timezone": "Asia/Tokyo",
        "timezone_offset": 32400,
        "data": [weather_block(dt, **kwargs)],
    }


def radar_index_payload(past: list[int], nowcast: list[int] | None = None) -> dict:
    return {
        "version": "2.0",
        "generated": past[-1] if past else 0,
        "host": "https://tilecache.rainviewer.com",
        "radar": {
            "past": [{"time": ts, "path": f"/v2/radar/{ts}"} for ts in past],
            "nowcast": [{"time": ts, "path": f"/v2/radar/nowcast_{ts}"} for ts in (nowcast or [])],
        },
        "satellite": {"infrared": []},
    }


def make_weather_client(handler) -> WeatherApiClient:
    return WeatherApiClient(api_key="test-key", transport=httpx.MockTransport(handler), sun_locator=fixed_sun)


def make_radar_client(handler) -> RadarApiClient:
    return RadarApiClient(transport=httpx.MockTransport(handler))


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    SQLModel.metadata.create_all(engine)
    yield engine
    SQLModel.metadata.drop_all(engine)


@pytest.fixture
def session(engine):
    with Session(engine) as session:
        yield session


@pytest.fixture
def photo(session) -> Photo:
    photo = Photo(latitude=SHIOJIRI_LAT, longitude=SHIOJIRI_LNG, captured_at=datetime(2024, 6, 1, 10, 15))
    session.add(photo)
    session.commit()
    session.refresh(photo)
    return photo
