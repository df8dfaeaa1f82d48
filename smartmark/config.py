"""Application configuration using pydantic-settings."""
from functools import lru_cache
from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict

from .display import FAVICON_ENDPOINT
from .listing import COPY_FEEDBACK_SECONDS


class Settings(BaseSettings):
    """Settings loaded from SMARTMARK_* environment variables or a .env file."""

    model_config = SettingsConfigDict(
        env_prefix="SMARTMARK_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    data_file: Path = Path("bookmarks.json")

    host: str = "127.0.0.1"
    port: int = 8765
    open_browser: bool = False
    log_level: str = "INFO"

    # Page metadata and PWA manifest
    site_name: str = "Smart Bookmark"
    site_title: str = "Smart Bookmark — Save & Organize Your Links"
    site_description: str = (
        "A fast bookmark manager. Save, search, and organize your favorite links."
    )
    site_url: str = "http://127.0.0.1:8765"
    theme_color: str = "#7c3aed"

    favicon_endpoint: str = FAVICON_ENDPOINT
    probe_favicons: bool = False
    favicon_timeout: float = 3.0

    copy_feedback_ms: int = int(COPY_FEEDBACK_SECONDS * 1000)


@lru_cache
def get_settings() -> Settings:
    return Settings()
