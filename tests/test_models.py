"""Storage round trips for the observation tables."""

from datetime import datetime

from sqlmodel import select

from rainbow.models import Photo, RadarObservation, WeatherObservation
from rainbow.services.observations import ObservationRepository
from rainbow.services.radar_api import RadarFrame, TileCoordinates
from rainbow.services.weather_api import WeatherSnapshot


def test_naive_utc_datetimes_round_trip(session, photo):
    session.add(WeatherObservation(photo_id=photo.id, timestamp=datetime(2024, 6, 1, 10, 30), humidity=80.0))
    session.commit()
    session.expire_all()

    stored_photo = session.get(Photo, photo.id)
    row = session.exec(select(WeatherObservation).where(WeatherObservation.photo_id == photo.id)).one()

    assert stored_photo.captured_at == datetime(2024, 6, 1, 10, 15)
    assert stored_photo.captured_at.tzinfo is None
    assert stored_photo.created_at.tzinfo is None
    assert row.timestamp == datetime(2024, 6, 1, 10, 30)
    assert row.updated_at.tzinfo is None


def test_weather_upsert_matches_existing_naive_timestamp(session, photo):
    repository = ObservationRepository(session)
    instant = datetime(2024, 6, 1, 10, 30)

    first = repository.upsert_weather(photo.id, instant, WeatherSnapshot(temperature=12.0), None)
    second = repository.upsert_weather(photo.id, instant, WeatherSnapshot(temperature=14.0), None)

    assert first.id == second.id
    assert second.temperature == 14.0
    assert second.precipitation_type is None


def _frame(dbz):
    return RadarFrame(
        timestamp=datetime(2024, 6, 1, 10, 10),
        latitude=36.115,
        longitude=137.954,
        zoom=10,
        tile=TileCoordinates(904, 401, 10),
        tile_url="https://tilecache.rainviewer.com/v2/radar/1717236600/256/10/904/401/1/1_1.png",
        reflectivity_dbz=dbz,
    )


def test_radar_upsert_stores_intensity_level(session, photo):
    repository = ObservationRepository(session)

    row = repository.upsert_radar(photo.id, _frame(30.0))
    assert row.precipitation_intensity == "moderate"
    assert row.active_precipitation

    row = repository.upsert_radar(photo.id, _frame(5.0))
    assert row.precipitation_intensity == "none"
    assert not row.active_precipitation

    row = repository.upsert_radar(photo.id, _frame(None))
    assert row.precipitation_intensity is None
    assert len(session.exec(select(RadarObservation)).all()) == 1
