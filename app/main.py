"""FastAPI application entrypoint. No business logic; only wiring and middleware."""

from dotenv import load_dotenv

load_dotenv()

import logging
import time
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, Response
from fastapi.middleware.cors import CORSMiddleware
from fastapi.routing import APIRoute

from app.api.v1 import router as v1_router
from app.core.config import settings
from app.core.database import init_database
from app.core.errors import register_exception_handlers
from app.core.rate_limit import RateLimiter

API_VERSION = "1.0.0"

SECURE_HEADERS = {
    "X-Content-Type-Options": "nosniff",
    "X-Frame-Options": "SAMEORIGIN",
    "Referrer-Policy": "no-referrer",
    "Cross-Origin-Opener-Policy": "same-origin",
    "Cross-Origin-Resource-Policy": "same-origin",
    "X-XSS-Protection": "0",
}

logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s %(message)s",
    datefmt="%Y-%m-%dT%H:%M:%SZ",
)
logger = logging.getLogger(__name__)


def log_routes(app: FastAPI) -> None:
    """Log the registered API routes, one line per method and path."""
    routes = [r for r in app.routes if isinstance(r, APIRoute)]
    for route in sorted(routes, key=lambda r: r.path):
        for method in sorted(route.methods):
            logger.info("Route %-6s %s  %s", method, route.path, route.summary or route.name)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    # An unreachable database aborts startup (uvicorn exits nonzero)
    init_database()
    log_routes(app)
    logger.info("Talos API ready (env=%s)", settings.APP_ENV)
    yield


def create_app() -> FastAPI:
    """Build the application with a fresh rate limiter."""
    app = FastAPI(
        title="Talos API",
        version=API_VERSION,
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
    )
    app.state.rate_limiter = RateLimiter(max_keys=settings.RATE_LIMIT_MAX_KEYS)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=[settings.CORS_ORIGIN],
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
        allow_headers=["Content-Type", "Authorization"],
    )

    @app.middleware("http")
    async def secure_headers(request: Request, call_next) -> Response:
        response = await call_next(request)
        for name, value in SECURE_HEADERS.items():
            response.headers.setdefault(name, value)
        return response

    @app.middleware("http")
    async def log_requests(request: Request, call_next) -> Response:
        started = time.perf_counter()
        response = await call_next(request)
        duration_ms = (time.perf_counter() - started) * 1000
        logger.info(
            "%s %s %s %.1fms",
            request.method,
            request.url.path,
            response.status_code,
            duration_ms,
        )
        return response

    register_exception_handlers(app)
    app.include_router(v1_router, prefix=settings.API_V1_PREFIX)

    @app.get("/")
    def root() -> dict[str, str]:
        """Root route; minimal payload for discovery."""
        return {"name": "Talos API", "version": API_VERSION, "status": "ok"}

    return app


app = create_app()
