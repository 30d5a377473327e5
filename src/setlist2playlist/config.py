"""Configuration settings using pydantic-settings for environment variable loading."""

from pathlib import Path
from functools import lru_cache
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from .errors import ConfigurationError


class Settings(BaseSettings):
    """Application settings loaded from environment variables.

    Automatically reads from .env file and environment variables.
    Environment variables take precedence over .env file.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Spotify OAuth
    spotify_client_id: str = ""
    spotify_client_secret: str = ""
    spotify_redirect_uri: str = "http://127.0.0.1:8888/callback"

    # Setlist.fm
    setlist_fm_api_key: str = ""

    # Paths
    token_cache_path: Path = Field(
        default_factory=lambda: Path.home() / ".setlist2playlist" / "credential.json"
    )

    # Provider behaviour
    search_limit: int = Field(default=5, ge=1, le=50)
    request_timeout: float = 30.0

    # HTTP API
    api_host: str = "0.0.0.0"
    api_port: int = 3001
    cors_origins: list[str] = Field(
        default_factory=lambda: ["http://localhost:5173", "http://localhost:3000"]
    )

    # Logging
    log_level: str = "INFO"
    log_format: Literal["console", "json"] = "console"

    def require_spotify(self) -> None:
        """Fail early when Spotify client credentials are not configured."""
        missing = [
            name
            for name, value in (
                ("SPOTIFY_CLIENT_ID", self.spotify_client_id),
                ("SPOTIFY_CLIENT_SECRET", self.spotify_client_secret),
            )
            if not value
        ]
        if missing:
            raise ConfigurationError(f"Missing environment variables: {', '.join(missing)}")

    def require_setlist_fm(self) -> None:
        if not self.setlist_fm_api_key:
            raise ConfigurationError("Missing environment variable: SETLIST_FM_API_KEY")


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance.

    Uses lru_cache to ensure settings are only loaded once.
    """
    return Settings()
