"""Configuration settings for Serpent: loaded from environment variables."""

from __future__ import annotations

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings with env-driven overrides.

    All values can be overridden via environment variables prefixed with SERPENT_.
    Example: SERPENT_TICK_RATE_MS=50 doubles the game speed.
    """

    # Scheduler
    tick_rate_ms: int = 100

    # Field geometry (cell size applies to both axes)
    field_width: int = 960
    field_height: int = 500
    cell_size: int = 20

    # Agent rules
    initial_lives: int = 5
    growth_threshold: int = 3  # items eaten per new body segment

    # Fallbacks for out-of-range start parameters
    default_agent_length: int = 3
    default_obstacle_count: int = 10
    default_item_count: int = 5

    # Initial placement tries per entity before accepting an occupied cell
    placement_attempts: int = 200

    # Log session stats every N ticks
    stats_interval_ticks: int = 100

    # API server
    host: str = "0.0.0.0"
    port: int = 8000
    log_level: str = "info"

    model_config = SettingsConfigDict(
        env_prefix="SERPENT_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )
