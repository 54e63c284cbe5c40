"""Shared test fixtures."""

from collections.abc import Generator
from pathlib import Path

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.pool import StaticPool
from sqlmodel import Session, SQLModel, create_engine

import linkwatch.config as config_module
import linkwatch.database as db_module
import linkwatch.history.models  # noqa: F401
from linkwatch.config import Settings
from linkwatch.history.repository import HistoryRepository
from linkwatch.main import app


@pytest.fixture
def engine():
    """In-memory SQLite engine with all tables created.

    StaticPool ensures every session uses the same connection,
    so the in-memory database is shared across the test.
    """
    eng = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    SQLModel.metadata.create_all(eng)
    return eng


@pytest.fixture
def session(engine) -> Generator[Session, None, None]:
    with Session(engine) as s:
        yield s


@pytest.fixture
def repository(engine) -> HistoryRepository:
    return HistoryRepository(engine)


@pytest.fixture
def config() -> Settings:
    return Settings(
        primary_dns="8.8.8.8",
        secondary_dns="1.1.1.1",
        custom_ping_targets=[],
        show_notifications=True,
    )


@pytest.fixture
def env_file(tmp_path: Path) -> Generator[Path, None, None]:
    """Use a temporary .env file instead of the real one."""
    env_path = tmp_path / ".env"
    original = config_module._ENV_FILE
    config_module._ENV_FILE = env_path
    yield env_path
    config_module._ENV_FILE = original


@pytest.fixture
def client(engine, env_file, monkeypatch) -> Generator[TestClient, None, None]:
    """FastAPI TestClient on the test engine with mock probes.

    The orchestrator is started by the lifespan but its first cycle is
    pushed far into the future so tests control what it has seen.
    """
    monkeypatch.setenv("LINKWATCH_PROBE_MODE", "mock")
    monkeypatch.setenv("LINKWATCH_INITIAL_DELAY_SECONDS", "3600")

    # Patch the module-level engine so lifespan's init_db() and the
    # repository both use the test engine.
    original_engine = db_module.engine
    db_module.engine = engine
    with TestClient(app) as c:
        yield c
    db_module.engine = original_engine
