"""FastAPI application entrypoint."""

import random
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI

from src.api.equipment import router as equipment_router
from src.api.health import router as health_router
from src.config import settings
from src.core.equipment.loot_generator import LootGenerator
from src.core.equipment.modifier_generator import ModifierGenerator
from src.core.equipment.modifiers import StatMode
from src.core.equipment.registry import build_default_registry
from src.core.event_bus import EventBus
from src.core.logging import get_logger, setup_logging
from src.db.database import SessionLocal, init_db
from src.modules.equipment import EquipmentModule
from src.modules.module_manager import ModuleManager
from src.services.equipment_service import EquipmentService

setup_logging(settings.LOG_LEVEL, verbose_generation=settings.DEBUG)
logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan handler for startup and shutdown events."""
    logger.info("Creating database tables...")
    init_db()

    # 정의 레지스트리 (시작 시 1회)
    logger.info("Loading definitions...")
    registry = build_default_registry(
        settings.ITEMS_DATA_PATH, settings.LOOT_TABLES_DATA_PATH
    )
    logger.info("Definitions loaded: %d", registry.count())

    # 생성기: 시드 하나로 전체 재현
    rng = random.Random(settings.LOOT_SEED)
    stat_mode = StatMode(settings.STAT_MODE)
    modifier_generator = ModifierGenerator(registry, rng)
    loot_generator = LootGenerator(
        registry,
        modifier_generator,
        rarity_bonus_per_floor=settings.RARITY_BONUS_PER_FLOOR,
        stat_mode=stat_mode,
    )

    event_bus = EventBus()
    db_session = SessionLocal()
    equipment_service = EquipmentService(
        db=db_session,
        event_bus=event_bus,
        registry=registry,
        loot_generator=loot_generator,
        stat_mode=stat_mode,
    )

    module_manager = ModuleManager(event_bus)
    module_manager.register(EquipmentModule(equipment_service))
    module_manager.enable("equipment")

    app.state.event_bus = event_bus
    app.state.registry = registry
    app.state.equipment_service = equipment_service
    app.state.module_manager = module_manager
    logger.info("EquipmentService initialized (seed=%s, stat_mode=%s)", settings.LOOT_SEED, stat_mode.value)

    yield

    logger.info("Shutting down...")
    db_session.close()


app = FastAPI(title="Loot Engine", lifespan=lifespan)

app.include_router(health_router)
app.include_router(equipment_router)
