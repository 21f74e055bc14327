import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI

from contentsync.api.routes_admin import router as admin_router
from contentsync.api.routes_bundles import router as bundles_router
from contentsync.api.routes_compare import router as compare_router
from contentsync.api.routes_health import router as health_router
from contentsync.api.routes_remote import router as remote_router
from contentsync.core.config import get_settings
from contentsync.db.migrations import apply_sql_migrations

logger = logging.getLogger(__name__)


def create_app() -> FastAPI:
    settings = get_settings()
    logging.basicConfig(level=settings.log_level.upper())

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        active_settings = app.state.settings
        result = apply_sql_migrations(active_settings)
        logger.info(
            "contentsync API starting: export_root=%s migrations_applied=%s",
            active_settings.export_root,
            result.applied,
        )
        yield
        logger.info("contentsync API shutting down")

    app = FastAPI(title="contentsync API", version="0.1.0", lifespan=lifespan)
    app.state.settings = settings
    app.include_router(health_router)
    app.include_router(admin_router)
    app.include_router(bundles_router)
    app.include_router(remote_router)
    app.include_router(compare_router)
    return app


app = create_app()
