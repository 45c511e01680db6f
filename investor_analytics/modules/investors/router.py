"""Investor search and portfolio summary API router."""

from __future__ import annotations

from datetime import date

from fastapi import APIRouter, Depends, Path, Query

from investor_analytics.core.dependencies import get_portfolio_service
from investor_analytics.core.errors import ErrorResponse
from investor_analytics.modules.analytics.schemas import PortfolioSummary
from investor_analytics.modules.investors.schemas import InvestorSearchResponse
from investor_analytics.modules.investors.service import PortfolioService

router = APIRouter(
    prefix="/investors",
    tags=["investors"],
    responses={404: {"model": ErrorResponse}, 502: {"model": ErrorResponse}},
)


@router.get("/search", response_model=InvestorSearchResponse)
async def search_investors(
    q: str = Query("", max_length=200),
    service: PortfolioService = Depends(get_portfolio_service),
):
    """Contacts whose name or reporting e-mail contains ``q`` (max 50)."""
    results = await service.search_investors(q)
    return InvestorSearchResponse(results=results)


@router.get("/{contact_id}/portfolio", response_model=PortfolioSummary)
async def get_portfolio(
    contact_id: int = Path(..., gt=0),
    from_date: date | None = Query(None, alias="from"),
    to_date: date | None = Query(None, alias="to"),
    base: str = Query("USD", pattern=r"^[A-Za-z]{3}$"),
    service: PortfolioService = Depends(get_portfolio_service),
):
    """
    Full portfolio summary for one investor.

    Defaults: ``from`` = 2010-01-01, ``to`` = today. An inverted range is
    swapped. Investors without accounts get a zeroed summary.
    """
    return await service.get_portfolio(contact_id, from_date=from_date, to_date=to_date, base_currency=base)
