from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="MALLPARK_",
        case_sensitive=False,
    )

    # Application
    app_name: str = "Mall Parking System"
    debug: bool = False
    log_level: str = "INFO"
    shell_log_level: str = "WARNING"

    # Database
    database_url: str = "sqlite://"

    # Rates
    base_fee: int = 40
    base_window_hours: int = 3
    hourly_rate_small: int = 20
    hourly_rate_medium: int = 60
    hourly_rate_large: int = 100
    daily_fee: int = 5000
    hours_per_day: int = 24
    continuous_gap_max_hours: float = 1

    # Complex layout
    entry_point_count: int = 3


@lru_cache
def get_settings() -> Settings:
    return Settings()


settings = get_settings()
