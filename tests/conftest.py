"""Shared test fixtures."""

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker

from src.core.animal import Animal, AnimalStats
from src.core.clock import ManualClock
from src.core.event_bus import EventBus
from src.core.scheduler import MaintenanceScheduler
from src.core.tricks.registry import TrickRegistry
from src.db.database import get_db
from src.db.models import Base
from src.db.store import MemoryStore
from src.main import Engines, app, attach_engines, create_engines

TRICK_DATA_PATH = "src/data/tricks.json"
START_MS = 1_700_000_000_000

TEST_ENGINE = create_engine(
    "sqlite:///:memory:",
    connect_args={"check_same_thread": False},
)
TestSession = sessionmaker(bind=TEST_ENGINE, autocommit=False, autoflush=False)


def _override_get_db():
    db = TestSession()
    try:
        yield db
    finally:
        db.close()


app.dependency_overrides[get_db] = _override_get_db


@pytest.fixture()
def clock() -> ManualClock:
    return ManualClock(start_ms=START_MS)


@pytest.fixture()
def store() -> MemoryStore:
    return MemoryStore()


@pytest.fixture()
def bus() -> EventBus:
    return EventBus()


@pytest.fixture()
def scheduler() -> MaintenanceScheduler:
    return MaintenanceScheduler()


@pytest.fixture(scope="session")
def registry() -> TrickRegistry:
    reg = TrickRegistry()
    reg.load_from_json(TRICK_DATA_PATH)
    return reg


@pytest.fixture()
def fox() -> Animal:
    return Animal(id="fox_1", species="fox", stats=AnimalStats(trust=80.0, energy=90.0))


@pytest.fixture()
def engines(store: MemoryStore, clock: ManualClock) -> Engines:
    """MemoryStore + ManualClock 위에 조립된 전체 엔진"""
    return create_engines(store, clock)


@pytest.fixture()
def client(engines: Engines) -> TestClient:
    """FastAPI TestClient wired to in-memory engines and SQLite."""
    attach_engines(app, engines)
    return TestClient(app)


@pytest.fixture()
def sql_session_factory() -> sessionmaker:
    """인메모리 SQLite + engine_state 테이블"""
    engine = create_engine("sqlite:///:memory:")
    Base.metadata.create_all(engine)
    return sessionmaker(bind=engine)


@pytest.fixture()
def db_session() -> Session:
    """Raw database session for direct DB assertions."""
    session = TestSession()
    try:
        yield session
    finally:
        session.close()
