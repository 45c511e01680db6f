"""Selects the ERP backend once, at process start."""

import structlog

from investor_analytics.core.config import Settings
from investor_analytics.modules.erp.base import ERPProvider
from investor_analytics.modules.erp.http_client import HttpERPClient
from investor_analytics.modules.erp.mock_client import MockERPClient

logger = structlog.get_logger()


def build_erp_provider(settings: Settings) -> ERPProvider:
    """Factory: HTTP client when an ERP URL is configured, mock dataset otherwise."""
    if settings.ERP_USE_MOCKS:
        logger.info("erp_provider_selected", provider="mock", reason="ERP_USE_MOCKS")
        return MockERPClient()
    if not settings.ERP_BASE_URL:
        logger.warning("erp_provider_selected", provider="mock", reason="ERP_BASE_URL missing")
        return MockERPClient()

    logger.info("erp_provider_selected", provider="http", base_url=settings.ERP_BASE_URL)
    return HttpERPClient(
        base_url=settings.ERP_BASE_URL,
        api_key=settings.ERP_API_KEY,
        client_id=settings.ERP_CLIENT_ID,
        timeout=settings.ERP_TIMEOUT_SECONDS,
        cache_ttl=settings.ERP_CACHE_TTL_SECONDS,
        page_size=settings.ERP_PAGE_SIZE,
        max_pages=settings.ERP_MAX_PAGES,
    )
