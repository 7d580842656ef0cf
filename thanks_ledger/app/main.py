import logging
import time
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request

from .api.exceptions import register_exception_handlers
from .api.routes import router as ledger_router
from .core.config import Settings, get_settings
from .core.db import ConnectionPool, create_pool, init_db

settings = get_settings()
logging.basicConfig(level=settings.log_level)
logger = logging.getLogger(__name__)

access_logger = logging.getLogger("thanks_ledger.access")


@asynccontextmanager
async def lifespan(app: FastAPI):
    owns_pool = app.state.pool is None
    if owns_pool:
        app.state.pool = create_pool(app.state.settings)
    if app.state.settings.create_schema:
        init_db(app.state.pool)
    logger.info("service.started", extra={"app_name": app.state.settings.app_name})
    try:
        yield
    finally:
        if owns_pool:
            app.state.pool.dispose()
            app.state.pool = None
        logger.info("service.stopped")


def create_app(
    settings: Optional[Settings] = None,
    pool: Optional[ConnectionPool] = None,
) -> FastAPI:
    settings = settings or get_settings()
    app = FastAPI(title=settings.app_name, lifespan=lifespan)
    app.state.settings = settings
    app.state.pool = pool

    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        started = time.perf_counter()
        # Unhandled exceptions become a 500 further out.
        status_code = 500
        try:
            response = await call_next(request)
            status_code = response.status_code
            return response
        finally:
            access_logger.info(
                "%s %s %s %s %s",
                request.client.host if request.client else "-",
                request.method,
                request.url.path,
                status_code,
                request.headers.get("user-agent", "-"),
                extra={"elapsed_ms": round((time.perf_counter() - started) * 1000, 2)},
            )

    app.include_router(ledger_router)
    register_exception_handlers(app)

    @app.get("/health")
    def read_health() -> dict[str, str]:
        return {"status": "ok"}

    return app


app = create_app(settings)
