"""
codequest.database.engine — Engine factory, sessions and the async bridge
==========================================================================

The points engine never touches the database; only the services do, and
they are synchronous (SQLAlchemy + psycopg2).  Async callers such as the
award route wrap them in :func:`run_db`.

Usage::

    from codequest.database.engine import create_db_engine, init_db, run_db

    engine = create_db_engine()      # DATABASE_URL from the environment
    init_db(engine)                  # dev/test only; production runs Alembic

    config = await run_db(get_points_config, engine, company_id)
"""

from __future__ import annotations

import asyncio
import logging
import os
from collections.abc import Callable
from contextlib import contextmanager
from typing import ParamSpec, TypeVar

from sqlalchemy import Engine, create_engine
from sqlalchemy.orm import Session

from codequest.database.models import Base

logger = logging.getLogger(__name__)

P = ParamSpec("P")
T = TypeVar("T")


# ---------------------------------------------------------------------------
# Engine
# ---------------------------------------------------------------------------
def create_db_engine(url: str | None = None) -> Engine:
    """Build the engine for *url*, falling back to ``DATABASE_URL``.

    PostgreSQL gets a bounded pool (5 + 10 overflow, 10 s checkout timeout,
    hourly recycle, pre-ping).  SQLite keeps SQLAlchemy's defaults.

    Raises
    ------
    RuntimeError
        If neither *url* nor ``DATABASE_URL`` is available.
    """
    url = url or os.getenv("DATABASE_URL")
    if not url:
        raise RuntimeError(
            "DATABASE_URL is not set.  "
            "Copy .env.example to .env and point it at the points database."
        )

    if url.startswith("sqlite"):
        engine = create_engine(url, echo=False)
    else:
        engine = create_engine(
            url,
            echo=False,
            pool_size=5,
            max_overflow=10,
            pool_pre_ping=True,
            pool_timeout=10,
            pool_recycle=3600,
        )
    logger.info("Database engine ready: %s", engine.url.host or engine.url.database)
    return engine


def init_db(engine: Engine) -> None:
    """``create_all`` for the points tables.  Idempotent."""
    Base.metadata.create_all(engine)
    logger.info("Points tables checked.")


# ---------------------------------------------------------------------------
# Sessions
# ---------------------------------------------------------------------------
@contextmanager
def get_session(engine: Engine):
    """Session scope: commit when the block exits cleanly, else roll back."""
    session = Session(engine, expire_on_commit=False)
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()


# ---------------------------------------------------------------------------
# Async bridge
# ---------------------------------------------------------------------------
async def run_db(func: Callable[P, T], *args: P.args, **kwargs: P.kwargs) -> T:
    """Await a synchronous service call on the default thread pool."""
    return await asyncio.to_thread(func, *args, **kwargs)
