from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI
from sqlalchemy import text

from userhub.config import Settings, settings
from userhub.container import Container, build_sql_container
from userhub.db.session import async_session, shutdown
from userhub.dependencies import DB
from userhub.error_handlers import register_error_handlers
from userhub.logging import get_logger
from userhub.middleware import RequestIDMiddleware
from userhub.routers import admin, auth, users

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Lifespan context manager: code before yield runs on startup, after yield on shutdown.

    Shutdown: close database connections gracefully.
    """
    logger.info("app_started", environment=app.state.environment)
    yield
    await shutdown()


def create_app(container: Container, app_settings: Settings = settings) -> FastAPI:
    """Assemble the ASGI app around an already-built ``container``."""
    app = FastAPI(title="userhub", lifespan=lifespan)
    app.state.environment = app_settings.environment
    app.state.session_cookie_name = app_settings.session_cookie_name

    app.add_middleware(RequestIDMiddleware)
    register_error_handlers(
        app,
        include_error_details=app_settings.include_error_details,
        log_errors=app_settings.log_errors,
    )

    app.include_router(auth.build_router(container))
    app.include_router(users.build_router(container))
    app.include_router(admin.build_router(container))

    @app.get("/health")
    async def health(db: DB) -> dict[str, str]:
        """Health check endpoint. Verifies database connectivity.

        Returns 200 OK only if the database responds to a ping query.
        """
        await db.execute(text("SELECT 1"))
        return {"status": "ok"}

    logger.debug("routes_registered", count=len(app.routes))
    return app


app = create_app(build_sql_container(settings, async_session))


def run() -> None:
    """Console entry point: serve ``app`` with uvicorn."""
    uvicorn.run("userhub.main:app", host=settings.host, port=settings.port)
