"""
Configuration for the Gantt engine.

Values are read from environment variables prefixed with ``GANTT_`` (or a
``.env`` file) and cached for the lifetime of the process.
"""

from datetime import date
from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings."""

    model_config = SettingsConfigDict(
        env_prefix="GANTT_",
        env_file=".env",
        extra="ignore",
    )

    debug: bool = False
    log_level: str | None = None
    log_json: bool = False

    # Calendar (ISO weekdays: Monday=1 ... Sunday=7)
    working_days: list[int] = [1, 2, 3, 4, 5]
    holidays: list[date] = []
    validate_dependencies: bool = False

    # Editing
    history_size: int = 50
    history_mode: str = "snapshot"  # "snapshot" | "command"
    resize_handle_width: float = 10

    # Rendering
    theme: str = "default"
    redraw_debounce_ms: int = 16
    chart_width: float = 1200
    chart_height: float = 600
    row_height: float = 40
    header_height: float = 60
    sidebar_width: float = 250


@lru_cache
def get_settings() -> Settings:
    return Settings()
