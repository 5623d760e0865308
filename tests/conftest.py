"""Shared test fixtures."""

from pathlib import Path

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from src.core.equipment.registry import DefinitionRegistry, build_default_registry
from src.db.database import get_db
from src.db.models import Base
from src.main import app

ITEMS_PATH = Path("src/data/items.json")
LOOT_TABLES_PATH = Path("src/data/loot_tables.json")

TEST_ENGINE = create_engine(
    "sqlite:///:memory:",
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
Base.metadata.create_all(TEST_ENGINE)
TestSession = sessionmaker(bind=TEST_ENGINE, autocommit=False, autoflush=False)


def _override_get_db():
    db = TestSession()
    try:
        yield db
    finally:
        db.close()


app.dependency_overrides[get_db] = _override_get_db


@pytest.fixture()
def client() -> TestClient:
    """FastAPI TestClient wired to an in-memory SQLite database (lifespan 미실행)."""
    return TestClient(app)


@pytest.fixture()
def db_session() -> Session:
    """Raw database session for direct DB assertions."""
    session = TestSession()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture()
def registry() -> DefinitionRegistry:
    """시드 카탈로그 + 내장 수식어 테이블"""
    return build_default_registry(ITEMS_PATH, LOOT_TABLES_PATH)
