# api/main.py
import logging
import time
import uuid
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware

from core.config import Settings, settings as default_settings
from core.sa.database import Database
from core.sa.models import utcnow
from core.utils.csv_export import format_timestamp
from core.utils.rate_limit import RateLimiter
from api.errors import register_exception_handlers
from api.routes import books, borrowers, borrowings

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Initialize database on startup
    app.state.database.init_db()
    logger.info(f"Service started name={app.state.settings.app_name!r}")
    yield
    app.state.database.dispose()


def create_app(database: Optional[Database] = None, settings: Optional[Settings] = None) -> FastAPI:
    """Build the application around a database and settings.

    Args:
        database: Database to serve from; one is created from settings if omitted
        settings: Settings to use; the environment-derived defaults if omitted
    """
    settings = settings or default_settings
    app = FastAPI(title=settings.app_name, debug=settings.debug, lifespan=lifespan)
    app.state.settings = settings
    app.state.database = database or Database(settings.database_url)
    app.state.rate_limiter = RateLimiter(
        max_requests=settings.rate_limit_max,
        window_seconds=settings.rate_limit_window_seconds
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials="*" not in settings.cors_origins,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        request_id = request.headers.get("X-Request-ID") or uuid.uuid4().hex
        started = time.perf_counter()
        response = await call_next(request)
        duration_ms = (time.perf_counter() - started) * 1000
        client_ip = request.client.host if request.client else "unknown"
        logger.info(
            f"Request method={request.method} path={request.url.path} status={response.status_code} "
            f"duration_ms={duration_ms:.1f} ip={client_ip} request_id={request_id}"
        )
        response.headers["X-Request-ID"] = request_id
        return response

    register_exception_handlers(app)

    @app.get("/health")
    async def health():
        return {
            "status": "OK",
            "timestamp": format_timestamp(utcnow()),
            "service": settings.app_name,
        }

    app.include_router(books.router, prefix="/api")
    app.include_router(borrowers.router, prefix="/api")
    app.include_router(borrowings.router, prefix="/api")
    return app


app = create_app()
