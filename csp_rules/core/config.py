"""Application configuration and logging setup."""

import logging
from functools import lru_cache
from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings

PACKAGE_DIR = Path(__file__).resolve().parent.parent


class Settings(BaseSettings):
    """Application settings loaded from environment."""

    # API
    app_name: str = "CSP Rule Sync"
    debug: bool = False
    log_level: str = "INFO"

    # Rule generation
    default_benchmark_input: str = "cloudbeat/cis_k8s"
    find_page_size: int = Field(1000, gt=0)
    serialize_policy_events: bool = True

    # Paths
    templates_dir: str = str(PACKAGE_DIR / "rules" / "data")
    data_dir: str = "data"

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8"}


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


def configure_logging(level: str | None = None) -> None:
    """Configure root logging for the service process."""
    logging.basicConfig(
        level=(level or get_settings().log_level).upper(),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )
