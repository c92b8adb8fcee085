from contextlib import asynccontextmanager
from pathlib import Path

import httpx
from alembic import command
from alembic.config import Config
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from savings.api.routes import health_router, ledger_router, portfolio_router, sync_router
from savings.core.config import settings
from savings.core.db import engine
from savings.core.errors import SavingsError
from savings.core.logging import get_logger
from savings.core.rate_limit import ClientRateLimiter
from savings.services.quote_service import QuoteGateway

log = get_logger("app")


def run_migrations() -> None:
    """Execute Alembic migrations programmatically on startup."""
    project_root = Path(__file__).resolve().parent.parent
    alembic_cfg = Config(str(project_root / "alembic.ini"))
    alembic_cfg.set_main_option("script_location", str(project_root / "alembic"))
    alembic_cfg.set_main_option("sqlalchemy.url", settings.DATABASE_URL)
    log.info("Running Alembic migrations to head")
    command.upgrade(alembic_cfg, "head")
    log.info("Alembic migrations applied")


@asynccontextmanager
async def lifespan(app: FastAPI):
    log.info(f"Starting application in {settings.ENV.upper()} mode")
    if settings.is_production:
        log.info("Production mode: Debug disabled, docs disabled, stricter logging")
    else:
        log.info("Development mode: Debug enabled, docs available")

    if settings.RUN_MIGRATIONS:
        try:
            run_migrations()
        except Exception:
            log.exception("Failed to apply migrations on startup")
            raise
    else:
        log.info("Startup migrations disabled (RUN_MIGRATIONS=false)")

    # One pooled HTTP client for all quote lookups
    quote_client = httpx.AsyncClient(timeout=settings.QUOTE_TIMEOUT_SECONDS)
    app.state.quote_gateway = QuoteGateway.from_settings(quote_client, settings)
    log.info(f"Quote gateway ready (prices for {sorted(settings.ASSET_PRICE_IDS)})")

    yield

    log.info("Shutting down services...")
    await quote_client.aclose()
    engine.dispose()
    log.info("Application shutdown complete")


async def savings_error_handler(request: Request, exc: SavingsError) -> JSONResponse:
    content = {"error": exc.message}
    if exc.details is not None:
        content["details"] = exc.details
    return JSONResponse(status_code=exc.status_code, content=content)


async def http_error_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    if exc.status_code == 404:
        return JSONResponse(status_code=404, content={"error": "Not found"})
    return JSONResponse(status_code=exc.status_code, content={"error": exc.detail}, headers=getattr(exc, "headers", None))


def create_app() -> FastAPI:
    app = FastAPI(
        title="Savings Portfolio Backend",
        description="Ledger sync and portfolio valuation for a multi-asset savings plan",
        version="1.0.0",
        lifespan=lifespan,
        # Disable docs in production for security
        docs_url="/docs" if settings.docs_enabled else None,
        redoc_url="/redoc" if settings.docs_enabled else None,
        openapi_url="/openapi.json" if settings.docs_enabled else None,
        debug=settings.debug_enabled,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Limiters live on the app so each app instance starts with empty buckets
    app.state.sync_limiter = ClientRateLimiter("sync", settings.SYNC_RATE_LIMIT_PER_MINUTE, settings.RATE_LIMIT_WINDOW_SECONDS)
    app.state.read_limiter = ClientRateLimiter("read", settings.READ_RATE_LIMIT_PER_MINUTE, settings.RATE_LIMIT_WINDOW_SECONDS)

    app.add_exception_handler(SavingsError, savings_error_handler)
    app.add_exception_handler(StarletteHTTPException, http_error_handler)

    app.include_router(health_router)
    app.include_router(ledger_router)
    app.include_router(portfolio_router)
    app.include_router(sync_router)
    return app


app = create_app()
