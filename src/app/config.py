"""Configuration management using Pydantic settings."""

from typing import Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Application
    app_name: str = "LAWNLINE"
    debug: bool = False
    log_level: str = "INFO"

    # Server
    host: str = "0.0.0.0"
    port: int = 8000

    # Game loop
    loop_enabled: bool = True
    frame_rate: float = 60.0      # real frames per second driven by the loop thread
    snapshot_hz: float = 10.0     # frame snapshots pushed to WebSocket clients per second

    # Player defaults (survive reset)
    speed_multiplier: int = 1     # one of 1, 2, 4, 8
    auto_collect: bool = False

    # Seed for wave lane selection; unset = nondeterministic
    random_seed: Optional[int] = None


settings = Settings()
