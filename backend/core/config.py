"""Application configuration and logging setup."""

import logging
from functools import lru_cache
from pathlib import Path

from pydantic_settings import BaseSettings

# Bundled sample catalog, independent of the working directory
DEFAULT_CATALOG_FILE = Path(__file__).resolve().parents[1] / "catalog" / "data" / "sample_catalog.json"


class Settings(BaseSettings):
    """Application settings loaded from environment."""

    # API
    app_name: str = "Rule Documentation Browser"
    debug: bool = False
    log_level: str = "INFO"
    cors_origins: str = "*"

    # Gateway (frontend -> metadata service)
    api_url: str = "http://localhost:8000"
    request_timeout_seconds: float = 600.0  # rule sets may be large

    # Paths
    catalog_file: str = str(DEFAULT_CATALOG_FILE)

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8"}


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


def configure_logging(level: str | None = None) -> None:
    """Configure root logging once for the service or the page."""
    level = (level or get_settings().log_level).upper()
    logging.basicConfig(
        level=getattr(logging, level, logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
