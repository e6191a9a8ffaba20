import logging
import os
from contextlib import asynccontextmanager
from pathlib import Path

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from greasedesk.core.config import CORS_ORIGINS, DATABASE_URL, ENV, IS_DEV, IS_TEST
from greasedesk.core.database import Base, dispose_database, init_database
from greasedesk.core.errors import register_exception_handlers
from greasedesk.core.logging_setup import configure_logging
from greasedesk.core.startup_checks import (
    ensure_migrations_applied,
    validate_database_environment,
    validate_email_environment,
)
from greasedesk.middleware.observability import ObservabilityMiddleware
import greasedesk.models  # registers every table on Base.metadata

from greasedesk.routers.auth import router as auth_router
from greasedesk.routers.bookings import router as bookings_router
from greasedesk.routers.internal_metrics import router as internal_metrics_router
from greasedesk.routers.onboarding import router as onboarding_router
from greasedesk.routers.settings import router as settings_router

configure_logging()

logger = logging.getLogger(__name__)
STARTUP_PREFIX = "[STARTUP]"
REPO_ROOT = Path(__file__).resolve().parents[1]
ALEMBIC_CONFIG_PATH = Path(
    os.getenv("ALEMBIC_CONFIG", str(REPO_ROOT / "alembic.ini"))
)


def _startup_tasks() -> None:
    try:
        validate_database_environment()
        validate_email_environment()
        engine = init_database(DATABASE_URL)
        if DATABASE_URL.startswith("sqlite") and (IS_DEV or IS_TEST):
            Base.metadata.create_all(bind=engine)
        ensure_migrations_applied(engine=engine, alembic_config_path=ALEMBIC_CONFIG_PATH)
        logger.info("%s ready env=%s", STARTUP_PREFIX, ENV)
    except Exception:
        logger.exception("%s ERROR startup failed", STARTUP_PREFIX)
        raise


@asynccontextmanager
async def lifespan(_: FastAPI):
    _startup_tasks()
    try:
        yield
    finally:
        dispose_database()


app = FastAPI(
    title="GreaseDesk API",
    lifespan=lifespan,
    docs_url="/docs",
    redoc_url="/redoc",
    openapi_url="/openapi.json",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)
app.add_middleware(ObservabilityMiddleware)

register_exception_handlers(app)

# Routers
app.include_router(auth_router)
app.include_router(onboarding_router)
app.include_router(settings_router)
app.include_router(bookings_router)
app.include_router(internal_metrics_router)


@app.get("/")
def root():
    return {"status": "ok"}


@app.get("/health")
def health():
    return {"status": "healthy"}
