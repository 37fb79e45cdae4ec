"""Tests for the OpenWeatherMap client."""

from datetime import datetime

import httpx
import pytest

from conftest import SHIOJIRI_LAT, SHIOJIRI_LNG, current_payload, make_weather_client, timemachine_payload
from rainbow.services.provider_errors import (
    ApiError,
    ConfigurationError,
    InvalidResponseError,
    RateLimitError,
)
from rainbow.services.sun_position import SunPositionError
from rainbow.services.weather_api import WeatherApiClient
from rainbow.utils.timestamp import to_unix

INSTANT = datetime(2024, 6, 1, 10, 30)


def test_current_weather_parses_block_and_adds_sun_position():
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["path"] = request.url.path
        seen["params"] = dict(request.url.params)
        return httpx.Response(200, json=current_payload(to_unix(INSTANT), code=501, humidity=91))

    with make_weather_client(handler) as client:
        snapshot = client.current_weather(SHIOJIRI_LAT, SHIOJIRI_LNG)

    assert seen["path"].endswith("/onecall")
    assert seen["params"]["appid"] == "test-key"
    assert seen["params"]["exclude"] == "minutely,hourly,daily,alerts"
    assert seen["params"]["units"] == "metric"
    assert snapshot.observed_at == INSTANT
    assert snapshot.humidity == 91.0
    assert snapshot.weather_code == 501
    assert snapshot.weather_description == "light rain"
    assert snapshot.precipitation_1h == 0.4
    assert snapshot.sun_azimuth == 250.0
    assert snapshot.sun_altitude == 20.0


def test_historical_weather_sends_unix_time():
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["path"] = request.url.path
        seen["dt"] = request.url.params["dt"]
        return httpx.Response(200, json=timemachine_payload(to_unix(INSTANT), temp=12.25))

    with make_weather_client(handler) as client:
        snapshot = client.historical_weather(SHIOJIRI_LAT, SHIOJIRI_LNG, INSTANT)

    assert seen["path"].endswith("/onecall/timemachine")
    assert seen["dt"] == str(to_unix(INSTANT))
    assert snapshot.requested_at == INSTANT
    assert snapshot.temperature == 12.25
    assert snapshot.cloud_cover == 60.0
    assert snapshot.visibility == 10000.0
    assert snapshot.wind_direction == 250.0


def test_missing_rain_block_reports_zero_precipitation():
    payload = timemachine_payload(to_unix(INSTANT), code=800)
    del payload["data"][0]["rain"]

    with make_weather_client(lambda request: httpx.Response(200, json=payload)) as client:
        snapshot = client.historical_weather(SHIOJIRI_LAT, SHIOJIRI_LNG, INSTANT)

    assert snapshot.rain_1h is None
    assert snapshot.precipitation_1h == 0.0


def test_sun_locator_failure_leaves_fields_empty():
    def broken(lat, lng, instant):
        raise SunPositionError("no ephemeris")

    client = WeatherApiClient(
        api_key="test-key",
        transport=httpx.MockTransport(lambda request: httpx.Response(200, json=timemachine_payload(to_unix(INSTANT)))),
        sun_locator=broken,
    )
    with client:
        snapshot = client.historical_weather(SHIOJIRI_LAT, SHIOJIRI_LNG, INSTANT)

    assert snapshot.sun_altitude is None
    assert snapshot.temperature == 18.5


@pytest.mark.parametrize(
    "status, error_type",
    [
        (401, ApiError),
        (404, ApiError),
        (429, RateLimitError),
        (500, ApiError),
        (503, ApiError),
        (204, InvalidResponseError),
        (302, InvalidResponseError),
    ],
)
def test_status_codes_map_to_errors(status, error_type):
    with make_weather_client(lambda request: httpx.Response(status, text="nope")) as client:
        with pytest.raises(error_type) as excinfo:
            client.historical_weather(SHIOJIRI_LAT, SHIOJIRI_LNG, INSTANT)

    assert type(excinfo.value) is error_type
    assert excinfo.value.status_code == status


def test_unauthorized_and_server_errors_keep_message_and_body():
    with make_weather_client(lambda request: httpx.Response(401, text="bad key")) as client:
        with pytest.raises(ApiError, match="Invalid API key"):
            client.current_weather(SHIOJIRI_LAT, SHIOJIRI_LNG)

    with make_weather_client(lambda request: httpx.Response(500, text="boom")) as client:
        with pytest.raises(ApiError) as excinfo:
            client.current_weather(SHIOJIRI_LAT, SHIOJIRI_LNG)
    assert excinfo.value.body == "boom"
    assert "500" in str(excinfo.value)


def test_missing_data_and_bad_json_are_invalid_responses():
    with make_weather_client(lambda request: httpx.Response(200, json={"data": []})) as client:
        with pytest.raises(InvalidResponseError):
            client.historical_weather(SHIOJIRI_LAT, SHIOJIRI_LNG, INSTANT)

    with make_weather_client(lambda request: httpx.Response(200, json={"lat": 1.0})) as client:
        with pytest.raises(InvalidResponseError):
            client.current_weather(SHIOJIRI_LAT, SHIOJIRI_LNG)

    with make_weather_client(lambda request: httpx.Response(200, text="<html>")) as client:
        with pytest.raises(InvalidResponseError):
            client.current_weather(SHIOJIRI_LAT, SHIOJIRI_LNG)


def test_timeout_becomes_api_error_without_status():
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ReadTimeout("timed out", request=request)

    with make_weather_client(handler) as client:
        with pytest.raises(ApiError) as excinfo:
            client.current_weather(SHIOJIRI_LAT, SHIOJIRI_LNG)

    assert excinfo.value.status_code is None


def test_empty_api_key_is_a_configuration_error():
    with pytest.raises(ConfigurationError):
        WeatherApiClient(api_key="")


def test_bulk_fetch_drops_failed_instants():
    instants = [datetime(2024, 6, 1, 9, 0), datetime(2024, 6, 1, 9, 30), datetime(2024, 6, 1, 10, 0)]
    failing = str(to_unix(instants[1]))

    def handler(request: httpx.Request) -> httpx.Response:
        dt = request.url.params["dt"]
        if dt == failing:
            return httpx.Response(503, text="unavailable")
        return httpx.Response(200, json=timemachine_payload(int(dt)))

    with make_weather_client(handler) as client:
        snapshots = client.historical_weather_bulk(SHIOJIRI_LAT, SHIOJIRI_LNG, instants)
        outcomes = client.historical_weather_outcomes(SHIOJIRI_LAT, SHIOJIRI_LNG, instants)

    assert [snapshot.requested_at for snapshot in snapshots] == [instants[0], instants[2]]
    assert [outcome.ok for outcome in outcomes] == [True, False, True]
    assert outcomes[1].instant == instants[1]
    assert outcomes[1].error.status_code == 503


def test_unexpected_sun_locator_error_propagates():
    def buggy(lat, lng, instant):
        raise TypeError("bad call")

    client = WeatherApiClient(
        api_key="test-key",
        transport=httpx.MockTransport(lambda request: httpx.Response(200, json=timemachine_payload(to_unix(INSTANT)))),
        sun_locator=buggy,
    )
    with client:
        with pytest.raises(TypeError):
            client.historical_weather(SHIOJIRI_LAT, SHIOJIRI_LNG, INSTANT)


@pytest.mark.parametrize("volume", [0.4, "0.4", [0.4], None])
def test_non_mapping_rain_block_counts_as_absent(volume):
    payload = timemachine_payload(to_unix(INSTANT))
    payload["data"][0]["rain"] = volume
    payload["data"][0]["snow"] = 7

    with make_weather_client(lambda request: httpx.Response(200, json=payload)) as client:
        snapshot = client.historical_weather(SHIOJIRI_LAT, SHIOJIRI_LNG, INSTANT)

    assert snapshot.rain_1h is None
    assert snapshot.snow_1h is None
    assert snapshot.precipitation_1h == 0.0


def test_garbled_block_fields_are_dropped():
    payload = timemachine_payload(to_unix(INSTANT))
    block = payload["data"][0]
    block["dt"] = "yesterday"
    block["sunrise"] = 1e20
    block["humidity"] = {"value": 80}
    block["weather"] = [{"id": "rain", "main": 5, "description": ["light"]}]

    with make_weather_client(lambda request: httpx.Response(200, json=payload)) as client:
        snapshot = client.historical_weather(SHIOJIRI_LAT, SHIOJIRI_LNG, INSTANT)

    assert snapshot.observed_at is None
    assert snapshot.sunrise is None
    assert snapshot.humidity is None
    assert snapshot.weather_code is None
    assert snapshot.weather_main is None
    assert snapshot.weather_description is None
    assert snapshot.requested_at == INSTANT
