"""Diagnostic routes, mounted only when ENABLE_DEBUG_ROUTES is set."""

from __future__ import annotations

from datetime import date

from fastapi import APIRouter, Depends, HTTPException, Query, status

from investor_analytics.core.dependencies import get_erp_provider
from investor_analytics.modules.debug import service
from investor_analytics.modules.debug.schemas import (
    FundListItem,
    FundSourcesReport,
    PortfolioFundsResponse,
)
from investor_analytics.modules.erp.base import ERPProvider

router = APIRouter(prefix="/debug", tags=["debug"])


async def _fund_sources(
    erp: ERPProvider,
    contact_id: int | None,
    email: str | None,
    from_date: date | None,
    to_date: date | None,
) -> FundSourcesReport:
    if contact_id is None and not email:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="email or contact_id is required",
        )
    return await service.get_fund_sources(
        erp, contact_id=contact_id, email=email, from_date=from_date, to_date=to_date
    )


@router.get("/investor", response_model=FundSourcesReport)
async def debug_investor(
    email: str | None = Query(None, max_length=320),
    contact_id: int | None = Query(None, gt=0),
    from_date: date | None = Query(None, alias="from"),
    to_date: date | None = Query(None, alias="to"),
    erp: ERPProvider = Depends(get_erp_provider),
):
    return await _fund_sources(erp, contact_id, email, from_date, to_date)


@router.get("/portfolio/funds", response_model=PortfolioFundsResponse)
async def debug_portfolio_funds(
    email: str | None = Query(None, max_length=320),
    contact_id: int | None = Query(None, gt=0),
    from_date: date | None = Query(None, alias="from"),
    to_date: date | None = Query(None, alias="to"),
    erp: ERPProvider = Depends(get_erp_provider),
):
    report = await _fund_sources(erp, contact_id, email, from_date, to_date)
    return PortfolioFundsResponse(
        investments_count=report.union_fund_count,
        funds=[FundListItem(id=f.fund_id, name=f.fund_name) for f in report.per_fund],
    )
