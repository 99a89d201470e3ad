"""Core package - Shared configuration and database access."""

from .config import Settings, get_settings, configure_logging
from .database import (
    get_db_path,
    get_engine,
    init_sqlmodel_tables,
)

__all__ = [
    # Config
    "Settings",
    "get_settings",
    "configure_logging",
    # Database
    "get_db_path",
    "get_engine",
    "init_sqlmodel_tables",
]
