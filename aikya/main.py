"""Aikya Integration Vault - Main Application."""
from contextlib import asynccontextmanager
import asyncio
import logging

from fastapi import FastAPI

from aikya.api.integrations import router as integrations_router
from aikya.logging_hardening import configure_logging, setup_logging_redaction
from aikya.routers import health
from aikya.settings import settings, validate_secrets

logger = logging.getLogger(__name__)


def run_migrations() -> None:
    from alembic.config import Config
    from alembic import command

    alembic_cfg = Config("alembic.ini")
    alembic_cfg.set_main_option("sqlalchemy.url", settings.DATABASE_URL)
    command.upgrade(alembic_cfg, "head")


@asynccontextmanager
async def lifespan(app: FastAPI):
    configure_logging(settings.LOG_LEVEL)
    # Initialize logging redaction filters early
    setup_logging_redaction()
    validate_secrets(settings)

    if settings.RUN_MIGRATIONS:
        logger.info("Running DB Migrations...")
        await asyncio.to_thread(run_migrations)
        logger.info("Migrations complete.")

    yield


app = FastAPI(title="Aikya Integration Vault", lifespan=lifespan)
app.include_router(health.router)
app.include_router(integrations_router.router)
