"""FastAPI dependencies resolving the lifespan-scoped collaborators."""

from fastapi import Depends, Request

from investor_analytics.core.config import settings
from investor_analytics.modules.erp.base import ERPProvider
from investor_analytics.modules.investors.service import PortfolioService
from investor_analytics.modules.snapshot.service import SnapshotService
from investor_analytics.services.snapshot_cache import SnapshotCache


def get_erp_provider(request: Request) -> ERPProvider:
    return request.app.state.erp


def get_snapshot_cache(request: Request) -> SnapshotCache:
    return request.app.state.snapshot_cache


def get_portfolio_service(erp: ERPProvider = Depends(get_erp_provider)) -> PortfolioService:
    return PortfolioService(erp)


def get_snapshot_service(
    portfolio: PortfolioService = Depends(get_portfolio_service),
    cache: SnapshotCache = Depends(get_snapshot_cache),
) -> SnapshotService:
    return SnapshotService(
        portfolio,
        cache,
        ttl_seconds=settings.SNAPSHOT_CACHE_TTL_SECONDS,
        cache_version=settings.SNAPSHOT_CACHE_VERSION,
    )
