"""Database connection management for SQLModel ORM."""

from pathlib import Path

from sqlmodel import create_engine, SQLModel

from .config import get_settings

# Default database path
_DB_PATH: Path | None = None
_engine = None


def get_db_path() -> Path:
    """Get the database file path."""
    global _DB_PATH
    if _DB_PATH is None:
        data_dir = Path(get_settings().data_dir)
        data_dir.mkdir(parents=True, exist_ok=True)
        _DB_PATH = data_dir / "csp_rules.db"
    return _DB_PATH


def get_engine():
    """Get SQLAlchemy engine for SQLModel operations."""
    global _engine
    if _engine is None:
        db_path = get_db_path()
        _engine = create_engine(
            f"sqlite:///{db_path}",
            echo=False,
            connect_args={"check_same_thread": False},
        )
    return _engine


def init_sqlmodel_tables(engine=None) -> None:
    """Create SQLModel tables."""
    # Register table models on the shared metadata
    from csp_rules.persistence import models  # noqa: F401

    SQLModel.metadata.create_all(engine or get_engine())
