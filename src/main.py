"""FastAPI application entrypoint."""

import asyncio
from contextlib import asynccontextmanager, suppress
from dataclasses import dataclass
from typing import AsyncGenerator, Optional

from fastapi import FastAPI

from src.api.bonding import router as bonding_router
from src.api.health import router as health_router
from src.api.taming import router as taming_router
from src.api.tricks import router as tricks_router
from src.config import Settings, settings
from src.core.clock import Clock
from src.core.event_bus import EventBus
from src.core.logging import get_logger, setup_logging
from src.core.scheduler import MaintenanceScheduler
from src.core.tricks.registry import TrickRegistry
from src.db.database import SessionLocal, init_db
from src.db.store import SqlStore, Store
from src.services.bonding_engine import BondingEngine
from src.services.taming_engine import TamingEngine
from src.services.trick_engine import TrickLearningEngine

setup_logging(settings.LOG_LEVEL, sql_echo=settings.DEBUG)
logger = get_logger(__name__)


@dataclass
class Engines:
    """조립된 엔진 묶음"""

    event_bus: EventBus
    scheduler: MaintenanceScheduler
    clock: Clock
    taming: TamingEngine
    bonding: BondingEngine
    tricks: TrickLearningEngine


def create_engines(
    store: Store,
    clock: Optional[Clock] = None,
    config: Settings = settings,
) -> Engines:
    """엔진 조립. 공유 EventBus/스케줄러를 만들고 읽기 전용 공급자를 연결한다.

    - BondingEngine ← taming.get_current_trust (마일스톤 신뢰 조건)
    - TrickLearningEngine ← bonding.get_bond_level (트릭 요구 단계)
    """
    clock = clock or Clock()
    event_bus = EventBus()
    scheduler = MaintenanceScheduler()

    registry = TrickRegistry()
    registry.load_from_json(config.TRICK_DATA_PATH)

    taming = TamingEngine(store, event_bus, clock, store_key=config.TAMING_STORE_KEY)
    bonding = BondingEngine(
        store,
        event_bus,
        clock,
        scheduler=scheduler,
        trust_of=taming.get_current_trust,
        store_key=config.BONDING_STORE_KEY,
        decay_interval_ms=config.DECAY_SWEEP_INTERVAL_MS,
        decay_idle_threshold_ms=config.DECAY_IDLE_THRESHOLD_MS,
    )
    tricks = TrickLearningEngine(
        registry,
        store,
        event_bus,
        clock,
        bond_level_of=bonding.get_bond_level,
        store_key=config.TRICK_STORE_KEY,
    )
    return Engines(
        event_bus=event_bus,
        scheduler=scheduler,
        clock=clock,
        taming=taming,
        bonding=bonding,
        tricks=tricks,
    )


def attach_engines(app: FastAPI, engines: Engines) -> None:
    """라우터가 request.app.state로 엔진을 찾는다."""
    app.state.event_bus = engines.event_bus
    app.state.scheduler = engines.scheduler
    app.state.taming_engine = engines.taming
    app.state.bonding_engine = engines.bonding
    app.state.trick_engine = engines.tricks


async def run_maintenance(
    scheduler: MaintenanceScheduler, clock: Clock, poll_seconds: float
) -> None:
    """스케줄러 드라이버. 요청 처리 사이에 tick을 호출한다."""
    while True:
        await asyncio.sleep(poll_seconds)
        ran = scheduler.tick(clock.now_ms())
        if ran:
            logger.debug("Maintenance jobs ran: %s", ran)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan handler for startup and shutdown events."""
    # DB 테이블 생성
    logger.info("Creating database tables...")
    init_db()
    logger.info("Database tables created.")

    logger.info("Initializing engines...")
    engines = create_engines(SqlStore(SessionLocal))
    attach_engines(app, engines)
    logger.info("Engines initialized.")

    maintenance = asyncio.create_task(
        run_maintenance(engines.scheduler, engines.clock, settings.SCHEDULER_POLL_SECONDS)
    )

    yield

    # 종료 시 정리
    logger.info("Shutting down...")
    maintenance.cancel()
    with suppress(asyncio.CancelledError):
        await maintenance
    engines.event_bus.clear()


app = FastAPI(title="Feral Friends", lifespan=lifespan)

app.include_router(health_router)
app.include_router(taming_router)
app.include_router(bonding_router)
app.include_router(tricks_router)
