"""Application settings loaded from environment variables."""

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    app_name: str = "rainbow-correlator"
    app_version: str = "0.1.0"
    api_prefix: str = "/api"
    database_url: str = "sqlite:///./rainbow.db"
    service_name: str = "rainbow-correlator"
    log_level: str = "INFO"
    log_buffer_size: int = 200
    # OpenWeatherMap One Call 3.0
    openweathermap_api_key: str = ""
    weather_api_base_url: str = "https://api.openweathermap.org/data/3.0"
    weather_api_units: str = "metric"
    weather_api_timeout: float = 10.0
    # RainViewer (no key required)
    radar_api_base_url: str = "https://api.rainviewer.com"
    radar_tile_url_template: str = (
        "https://tilecache.rainviewer.com/v2/radar/"
        "{timestamp}/{size}/{z}/{x}/{y}/{color}/{smooth}_{snow}.png"
    )
    radar_api_timeout: float = 10.0
    radar_tile_size: int = 256
    radar_color_scheme: int = 1
    radar_smooth: bool = True
    radar_snow: bool = True
    radar_zoom: int = 10
    # Bracketing window around the capture time
    correlation_range_hours: int = 3
    correlation_interval_minutes: int = 30
    correlation_max_workers: int = 4
    weather_current_tolerance_minutes: float = 5.0
    correlation_job_max_attempts: int = 3
    correlation_job_backoff_seconds: float = 10.0
    metrics_enabled: bool = True
    metrics_host: str = "0.0.0.0"
    metrics_port: int = 9510

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )


settings = Settings()

__all__ = ["settings", "Settings"]
