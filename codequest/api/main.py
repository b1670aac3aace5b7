"""
codequest.api.main — FastAPI application entry point
=====================================================

Run with::

    uvicorn codequest.api.main:app --reload --port 8000
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from dotenv import load_dotenv
from fastapi import FastAPI

load_dotenv()

from codequest import __version__  # noqa: E402
from codequest.api.deps import get_config, get_engine  # noqa: E402
from codequest.api.routes.points import router as points_router  # noqa: E402
from codequest.database.engine import init_db  # noqa: E402
from codequest.database.seed import seed_default_config  # noqa: E402

# ---------------------------------------------------------------------------
# Logging
# ---------------------------------------------------------------------------
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s │ %(levelname)-8s │ %(name)s │ %(message)s",
    datefmt="%H:%M:%S",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup/shutdown lifecycle — ensure tables and the default company."""
    cfg = get_config()
    logging.getLogger("codequest").setLevel(cfg.log_level)

    engine = get_engine()
    init_db(engine)
    if cfg.default_company_id:
        seed_default_config(engine, cfg.default_company_id)

    logger.info("%s API started — engine ready (%s)", cfg.service_name, engine.url.database)
    yield
    logger.info("%s API shutting down", cfg.service_name)


app = FastAPI(
    title="CodeQuest Points API",
    version=__version__,
    lifespan=lifespan,
)

app.include_router(points_router, prefix="/api")


@app.get("/api/health")
def health():
    return {"status": "ok"}
