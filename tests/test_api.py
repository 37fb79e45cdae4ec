"""HTTP surface tests."""

from datetime import datetime

import pytest
from fastapi.testclient import TestClient

from rainbow.api.deps import get_db, get_queue
from rainbow.main import create_app
from rainbow.models import RadarObservation, WeatherObservation


class RecordingQueue:
    def __init__(self) -> None:
        self.enqueued: list[int] = []

    def enqueue(self, photo_id: int) -> None:
        self.enqueued.append(photo_id)


@pytest.fixture
def queue():
    return RecordingQueue()


@pytest.fixture
def client(session, queue):
    app = create_app()
    app.dependency_overrides[get_db] = lambda: session
    app.dependency_overrides[get_queue] = lambda: queue
    return TestClient(app)


def test_health(client):
    response = client.get("/api/health")

    assert response.status_code == 200
    assert response.json() == {
        "status": "ok",
        "service": "rainbow-correlator",
        "version": "0.1.0",
        "database": "ok",
    }


def test_atmosphere_for_unknown_photo(client):
    assert client.get("/api/photos/999/atmosphere").status_code == 404


def test_atmosphere_lists_stored_observations(client, session, photo):
    radar = RadarObservation(
        photo_id=photo.id,
        timestamp=datetime(2024, 6, 1, 10, 10),
        center_latitude=photo.latitude,
        center_longitude=photo.longitude,
        tile_x=904,
        tile_y=401,
        tile_z=10,
        tile_url="https://tilecache.rainviewer.com/v2/radar/1717236600/256/10/904/401/1/1_1.png",
    )
    session.add(radar)
    for hour, humidity in ((11, 85.0), (10, 40.0)):
        session.add(
            WeatherObservation(
                photo_id=photo.id,
                timestamp=datetime(2024, 6, 1, hour, 0),
                humidity=humidity,
                cloud_cover=60.0,
                visibility=10000.0,
                weather_code=500,
                precipitation=0.4,
                precipitation_type="rain",
                sun_azimuth=250.0,
                sun_altitude=20.0,
            )
        )
    session.commit()

    response = client.get(f"/api/photos/{photo.id}/atmosphere")

    assert response.status_code == 200
    body = response.json()
    assert body["photo_id"] == photo.id
    assert [row["timestamp"] for row in body["weather"]] == ["2024-06-01T10:00:00", "2024-06-01T11:00:00"]
    assert [row["rainbow_favorable"] for row in body["weather"]] == [False, True]
    assert body["weather"][1]["rainbow_score"] == 100
    assert body["weather"][1]["rainbow_direction"] == "ENE"
    assert body["radar"]["tile_x"] == 904


def test_correlate_enqueues_job(client, queue, photo):
    response = client.post(f"/api/photos/{photo.id}/correlate")

    assert response.status_code == 202
    assert response.json() == {"photo_id": photo.id, "status": "queued"}
    assert queue.enqueued == [photo.id]


def test_correlate_unknown_photo(client, queue):
    assert client.post("/api/photos/999/correlate").status_code == 404
    assert queue.enqueued == []


def test_logs_endpoint_returns_recent_records(client, photo):
    client.post(f"/api/photos/{photo.id}/correlate")

    response = client.get("/api/logs", params={"level": "info", "limit": 50})

    assert response.status_code == 200
    messages = [entry["message"] for entry in response.json()["logs"]]
    assert f"Queued correlation for photo {photo.id}" in messages
