"""RainViewer radar frame index and tile addressing."""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Sequence

import httpx

from rainbow.core.config import settings
from rainbow.services.provider_errors import ApiError, InvalidResponseError
from rainbow.utils.timestamp import from_unix, to_naive_utc, to_unix

logger = logging.getLogger(__name__)

# Web-Mercator is undefined at the poles; slippy-map tiles stop here.
MAX_MERCATOR_LATITUDE = 85.0511287798


@dataclass(frozen=True)
class TileCoordinates:
    x: int
    y: int
    z: int


@dataclass(frozen=True)
class RadarFrameIndex:
    generated: datetime | None
    host: str | None
    past: list[datetime] = field(default_factory=list)
    nowcast: list[datetime] = field(default_factory=list)
    coverage: str = "unknown"


@dataclass(frozen=True)
class RadarFrame:
    """A radar frame addressed for one location.

    ``reflectivity_dbz`` is only set by callers that sample the tile image.
    """

    timestamp: datetime
    latitude: float
    longitude: float
    zoom: int
    tile: TileCoordinates
    tile_url: str
    coverage: str = "unknown"
    is_forecast: bool = False
    nowcast_timestamps: list[datetime] = field(default_factory=list)
    reflectivity_dbz: float | None = None

    @property
    def nowcast_available(self) -> bool:
        return bool(self.nowcast_timestamps)


def tile_coordinates_for(lat: float, lng: float, zoom: int) -> TileCoordinates:
    """Slippy-map tile containing (lat, lng) at ``zoom``."""

    n = 2**zoom
    lat = max(-MAX_MERCATOR_LATITUDE, min(MAX_MERCATOR_LATITUDE, lat))
    lat_rad = math.radians(lat)
    x = math.floor((lng + 180.0) / 360.0 * n)
    y = math.floor((1.0 - math.log(math.tan(lat_rad) + 1.0 / math.cos(lat_rad)) / math.pi) / 2.0 * n)
    return TileCoordinates(x=min(max(x, 0), n - 1), y=min(max(y, 0), n - 1), z=zoom)


def closest_frame_time(frames: Sequence[datetime], target: datetime) -> datetime | None:
    """Frame with the smallest absolute distance to ``target``; the earlier one wins ties."""

    if not frames:
        return None
    target = to_naive_utc(target)
    return min(frames, key=lambda frame: abs((frame - target).total_seconds()))


class RadarApiClient:
    """Query the RainViewer frame index and build tile URLs.

    Only the frame index hits the network; tile URLs are filled from a template.
    """

    MAPS_ENDPOINT = "/public/weather-maps.json"

    def __init__(
        self,
        base_url: str | None = None,
        timeout: float | None = None,
        tile_url_template: str | None = None,
        tile_size: int | None = None,
        color_scheme: int | None = None,
        smooth: bool | None = None,
        snow: bool | None = None,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self.base_url = base_url or settings.radar_api_base_url
        self.timeout = timeout if timeout is not None else settings.radar_api_timeout
        self.tile_url_template = tile_url_template or settings.radar_tile_url_template
        self.tile_size = tile_size or settings.radar_tile_size
        self.color_scheme = color_scheme if color_scheme is not None else settings.radar_color_scheme
        self.smooth = settings.radar_smooth if smooth is None else smooth
        self.snow = settings.radar_snow if snow is None else snow
        self._client = httpx.Client(base_url=self.base_url, timeout=self.timeout, transport=transport)

    def close(self) -> None:
        self._client.close()

    def __enter__(self) -> "RadarApiClient":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def available_timestamps(self) -> RadarFrameIndex:
        """Fetch the provider's frame index.

        Returns:
            Past and nowcast frame times (ascending), the generation time, host and coverage.

        Raises:
            ApiError: 4xx/5xx statuses, timeouts and transport failures.
            InvalidResponseError: Unexpected status, or a ``radar`` block whose frame lists are not lists.
        """
        payload = self._get(self.MAPS_ENDPOINT)
        radar = payload.get("radar") or {}
        if not isinstance(radar, dict):
            raise InvalidResponseError("Radar index has an unexpected 'radar' block")
        past_frames = _frame_list(radar, "past")
        nowcast_frames = _frame_list(radar, "nowcast")
        first_path = past_frames[0].get("path") if past_frames and isinstance(past_frames[0], dict) else None
        if not isinstance(first_path, str):
            first_path = None
        return RadarFrameIndex(
            generated=_parse_unix(payload.get("generated")),
            host=payload.get("host"),
            past=_frame_times(past_frames),
            nowcast=_frame_times(nowcast_frames),
            coverage="global" if first_path and "radar" in first_path else "unknown",
        )

    def latest_radar_for(
        self, lat: float, lng: float, zoom: int = 10, at: datetime | None = None
    ) -> RadarFrame:
        """Pick the radar frame for a location.

        Args:
            lat: Latitude (degrees)
            lng: Longitude (degrees, East positive)
            zoom: Slippy-map zoom level of the tile
            at: Target time; ``None`` selects the most recent past frame

        Returns:
            The past frame closest to ``at`` (the earlier one on ties), with its tile and URL.

        Raises:
            ApiError: The index request failed.
            InvalidResponseError: The index lists no usable past frames.
        """

        index = self.available_timestamps()
        if at is None:
            frame_time = index.past[-1] if index.past else None
        else:
            frame_time = closest_frame_time(index.past, at)
        if frame_time is None:
            raise InvalidResponseError("Radar index lists no past frames")

        tile = tile_coordinates_for(lat, lng, zoom)
        return RadarFrame(
            timestamp=frame_time,
            latitude=lat,
            longitude=lng,
            zoom=zoom,
            tile=tile,
            tile_url=self.tile_url(frame_time, tile),
            coverage=index.coverage,
            nowcast_timestamps=list(index.nowcast),
        )

    def precipitation_timeline(
        self, lat: float, lng: float, count: int = 7, zoom: int = 10
    ) -> list[RadarFrame]:
        """The last ``count`` past frames for a location, oldest first.

        Args:
            lat: Latitude (degrees)
            lng: Longitude (degrees, East positive)
            count: Number of frames; seven covers roughly an hour
            zoom: Slippy-map zoom level of the tile
        """

        index = self.available_timestamps()
        tile = tile_coordinates_for(lat, lng, zoom)
        return [
            RadarFrame(frame_time, lat, lng, zoom, tile, self.tile_url(frame_time, tile), index.coverage)
            for frame_time in (index.past[-count:] if count > 0 else [])
        ]

    def nowcast(self, lat: float, lng: float, zoom: int = 10) -> list[RadarFrame]:
        """Forecast frames published with the index, flagged ``is_forecast``."""
        index = self.available_timestamps()
        tile = tile_coordinates_for(lat, lng, zoom)
        return [
            RadarFrame(
                frame_time,
                lat,
                lng,
                zoom,
                tile,
                self.tile_url(frame_time, tile),
                index.coverage,
                is_forecast=True,
            )
            for frame_time in index.nowcast
        ]

    def tile_coordinates_for(self, lat: float, lng: float, zoom: int) -> TileCoordinates:
        return tile_coordinates_for(lat, lng, zoom)

    def tile_url(
        self,
        frame_time: datetime,
        tile: TileCoordinates,
        size: int | None = None,
        color_scheme: int | None = None,
        smooth: bool | None = None,
        snow: bool | None = None,
    ) -> str:
        """Fill the tile URL template; no request is made.

        Args:
            frame_time: Frame time, rendered as unix seconds
            tile: Tile to address
            size: Tile edge in pixels; defaults to the client setting
            color_scheme: Provider color scheme number
            smooth: Smoothed rendering flag
            snow: Snow coloring flag
        """
        return self.tile_url_template.format(
            timestamp=to_unix(frame_time),
            size=size or self.tile_size,
            z=tile.z,
            x=tile.x,
            y=tile.y,
            color=self.color_scheme if color_scheme is None else color_scheme,
            smooth=int(self.smooth if smooth is None else smooth),
            snow=int(self.snow if snow is None else snow),
        )

    def _get(self, endpoint: str) -> dict[str, Any]:
        try:
            response = self._client.get(endpoint)
        except httpx.TimeoutException as exc:
            raise ApiError(f"Radar API request timed out: {exc}") from exc
        except httpx.HTTPError as exc:
            raise ApiError(f"Radar API request failed: {exc}") from exc

        status = response.status_code
        if status == 200:
            try:
                data = response.json()
            except ValueError as exc:
                raise InvalidResponseError("Radar API returned invalid JSON", status, response.text) from exc
            if not isinstance(data, dict):
                raise InvalidResponseError("Radar API returned an unexpected payload", status, response.text)
            return data
        if 400 <= status < 500:
            raise ApiError(f"Client error: {status} - {response.text}", status, response.text)
        if 500 <= status < 600:
            raise ApiError(f"Server error: {status}", status, response.text)
        raise InvalidResponseError(f"Unexpected response: {status}", status, response.text)


def _frame_list(radar: dict[str, Any], key: str) -> list[Any]:
    frames = radar.get(key)
    if frames is None:
        return []
    if not isinstance(frames, list):
        raise InvalidResponseError(f"Radar index '{key}' is not a list of frames")
    return frames


def _frame_times(frames: Sequence[Any]) -> list[datetime]:
    times: list[datetime] = []
    for frame in frames:
        moment = _parse_unix(frame.get("time")) if isinstance(frame, dict) else None
        if moment is None:
            logger.debug("Skipping malformed radar frame entry: %s", frame)
            continue
        times.append(moment)
    return times


def _parse_unix(value: Any) -> datetime | None:
    try:
        return from_unix(value)
    except (TypeError, ValueError, OverflowError, OSError):
        return None


__all__ = [
    "RadarApiClient",
    "RadarFrame",
    "RadarFrameIndex",
    "TileCoordinates",
    "closest_frame_time",
    "tile_coordinates_for",
]
