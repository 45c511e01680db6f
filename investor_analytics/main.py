from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

import structlog
import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from starlette.exceptions import HTTPException as StarletteHTTPException

from investor_analytics.core.config import settings
from investor_analytics.core.errors import (
    ERPClientError,
    InvestorNotFoundError,
    erp_client_error_handler,
    global_exception_handler,
    http_exception_handler,
    investor_not_found_handler,
)
from investor_analytics.core.logging_config import configure_logging
from investor_analytics.core.sentry import init_sentry
from investor_analytics.middleware.request_logging import RequestLoggingMiddleware
from investor_analytics.modules.debug.router import router as debug_router
from investor_analytics.modules.erp.factory import build_erp_provider
from investor_analytics.modules.investors.router import router as investors_router
from investor_analytics.modules.snapshot.router import router as snapshot_router
from investor_analytics.services.snapshot_cache import build_snapshot_cache

configure_logging(settings.LOG_LEVEL, json_logs=settings.LOG_JSON)

# ── Sentry: must be initialised BEFORE the FastAPI app is created ─────────────
init_sentry(settings.SENTRY_DSN, settings.SENTRY_ENVIRONMENT, settings.APP_VERSION)

logger = structlog.get_logger()


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    logger.info("Starting investor analytics API", env=settings.APP_ENV)
    app.state.erp = build_erp_provider(settings)
    app.state.snapshot_cache = build_snapshot_cache(settings)

    yield

    logger.info("Shutting down investor analytics API")
    await app.state.snapshot_cache.close()
    await app.state.erp.close()


_is_prod = settings.APP_ENV == "production"

app = FastAPI(
    title="Investor Analytics API",
    description="Portfolio KPIs, cash-flow IRR and cacheable investor snapshots over ERP data.",
    version=settings.APP_VERSION or "0.1.0",
    docs_url=None if _is_prod else "/docs",
    redoc_url=None if _is_prod else "/redoc",
    openapi_url=None if _is_prod else "/openapi.json",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=[settings.FRONTEND_URL],
    allow_credentials=True,
    allow_methods=["GET", "OPTIONS"],
    allow_headers=["Accept", "Content-Type", "If-None-Match", "X-Request-ID"],
    expose_headers=["ETag", "Cache-Control", "X-Request-ID"],
)
app.add_middleware(
    RequestLoggingMiddleware,  # type: ignore[arg-type]
    enabled=settings.ENABLE_REQUEST_LOGGING,
)

app.add_exception_handler(InvestorNotFoundError, investor_not_found_handler)  # type: ignore[arg-type]
app.add_exception_handler(ERPClientError, erp_client_error_handler)  # type: ignore[arg-type]
app.add_exception_handler(StarletteHTTPException, http_exception_handler)  # type: ignore[arg-type]
app.add_exception_handler(Exception, global_exception_handler)


@app.get("/health")
async def health_check() -> dict:
    """Liveness plus the configured collaborators (no upstream calls)."""
    erp = getattr(app.state, "erp", None)
    cache = getattr(app.state, "snapshot_cache", None)
    return {
        "status": "healthy",
        "service": "investor-analytics",
        "erp_provider": erp.name if erp else None,
        "snapshot_cache": cache.name if cache else None,
    }


app.include_router(investors_router)
app.include_router(snapshot_router)
if settings.ENABLE_DEBUG_ROUTES:
    app.include_router(debug_router)


def run() -> None:
    """Console entry point: serve the app with uvicorn."""
    uvicorn.run(app, host=settings.HOST, port=settings.PORT, log_config=None)


if __name__ == "__main__":
    run()
