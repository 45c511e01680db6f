"""Investor service: ERP fetches feeding the portfolio aggregator."""

from __future__ import annotations

import asyncio
from datetime import date

import structlog

from investor_analytics.core.errors import InvestorNotFoundError
from investor_analytics.modules.analytics.dates import resolve_range
from investor_analytics.modules.analytics.portfolio import (
    PortfolioInputs,
    account_ids_for,
    build_portfolio_summary,
    empty_summary,
)
from investor_analytics.modules.analytics.schemas import PortfolioSummary, TimeRange
from investor_analytics.modules.erp.base import ERP_EPOCH, ERPProvider
from investor_analytics.modules.erp.schemas import Contact
from investor_analytics.modules.investors.schemas import InvestorSearchResult

logger = structlog.get_logger()

SEARCH_LIMIT = 50


class PortfolioService:
    """Reads one investor's records from the ERP and aggregates them."""

    def __init__(self, erp: ERPProvider) -> None:
        self.erp = erp

    async def search_investors(self, query: str) -> list[InvestorSearchResult]:
        contacts = await self.erp.search_contacts(query.strip())
        return [
            InvestorSearchResult(id=c.contact_id, name=c.full_name, email=c.reporting_email)
            for c in contacts[:SEARCH_LIMIT]
        ]

    async def get_contact(self, contact_id: int) -> Contact:
        contact = await self.erp.get_contact(contact_id)
        if contact is None:
            raise InvestorNotFoundError(contact_id=contact_id)
        return contact

    async def get_portfolio(
        self,
        contact_id: int,
        from_date: date | None = None,
        to_date: date | None = None,
        base_currency: str = "USD",
        today: date | None = None,
    ) -> PortfolioSummary:
        start, end = resolve_range(from_date, to_date, today)
        time_range = TimeRange(from_date=start, to_date=end, base_currency=base_currency.upper())

        contact = await self.get_contact(contact_id)
        mappings = await self.erp.get_account_contact_mappings(contact_id)
        account_ids = account_ids_for(mappings)
        if not account_ids:
            logger.info("portfolio_no_accounts", contact_id=contact_id)
            return empty_summary(contact_id, contact.full_name, time_range)

        commitments, cashflows, financials, funds, assets = await asyncio.gather(
            self.erp.get_commitments(),
            self.erp.get_cashflows(ERP_EPOCH, end),
            self.erp.get_financials(ERP_EPOCH, end),
            self.erp.get_funds(),
            self.erp.get_assets(),
        )

        return build_portfolio_summary(
            PortfolioInputs(
                contact_id=contact_id,
                contact_name=contact.full_name,
                time_range=time_range,
                account_ids=account_ids,
                mappings=mappings,
                commitments=commitments,
                cashflows=cashflows,
                financials=financials,
                funds=funds,
                assets=assets,
            )
        )
