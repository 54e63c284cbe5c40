"""Database engine setup."""

from pathlib import Path

from sqlmodel import SQLModel, create_engine

from linkwatch.config import settings

engine = create_engine(
    f"sqlite:///{settings.db_path}",
    echo=False,
    connect_args={"check_same_thread": False},
)


def init_db() -> None:
    """Create all tables."""
    # In-memory engines have no database file
    if engine.url.database:
        Path(engine.url.database).parent.mkdir(parents=True, exist_ok=True)
    SQLModel.metadata.create_all(engine)
