"""
tests/conftest.py — Shared Test Fixtures
=========================================
"""

from __future__ import annotations

import pytest
from sqlalchemy import Engine, create_engine
from sqlalchemy.orm import Session
from sqlalchemy.pool import StaticPool

from codequest.database.models import Base
from codequest.engine.activities import default_base_points
from codequest.engine.points_config import PointsConfig


@pytest.fixture
def db_engine() -> Engine:
    """Create an in-memory SQLite engine with all CodeQuest tables.

    Uses StaticPool so all threads share the same in-memory database
    (FastAPI runs sync routes on a worker thread).
    """
    engine = create_engine(
        "sqlite://",
        echo=False,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(engine)
    return engine


@pytest.fixture
def db_session(db_engine: Engine):
    """Provide a session that rolls back after each test."""
    with Session(db_engine) as session:
        yield session
        session.rollback()


@pytest.fixture
def default_config() -> PointsConfig:
    """Defaults wrapped in a full PointsConfig with no overrides."""
    return PointsConfig(base_points=default_base_points(), ai_modifier=0.75, org_overrides={})


@pytest.fixture
def client(db_engine):
    """A FastAPI TestClient wired to the in-memory database and a fresh cache."""
    from fastapi.testclient import TestClient

    from codequest.api.deps import get_engine, get_resolved_cache
    from codequest.api.main import app
    from codequest.engine.cache import ResolvedConfigCache

    cache = ResolvedConfigCache(ttl_seconds=60)
    app.dependency_overrides[get_engine] = lambda: db_engine
    app.dependency_overrides[get_resolved_cache] = lambda: cache
    try:
        yield TestClient(app, raise_server_exceptions=False)
    finally:
        app.dependency_overrides.clear()
