"""Fund-source diagnostics: which discovery path put each fund in scope."""

from __future__ import annotations

from datetime import date

import structlog

from investor_analytics.core.errors import InvestorNotFoundError
from investor_analytics.modules.analytics.cashflow import normalize_cashflows
from investor_analytics.modules.analytics.dates import resolve_range, within_range
from investor_analytics.modules.analytics.portfolio import account_ids_for, resolve_fund_scope
from investor_analytics.modules.debug.schemas import (
    DebugContact,
    FundSourceCounts,
    FundSourcesReport,
    PerFundSources,
)
from investor_analytics.modules.erp.base import ERP_EPOCH, ERPProvider
from investor_analytics.modules.erp.schemas import Contact

logger = structlog.get_logger()


async def find_contact(
    erp: ERPProvider, contact_id: int | None = None, email: str | None = None
) -> Contact:
    """Resolve by id, or by exact (case-insensitive) reporting e-mail."""
    if contact_id is None and not email:
        raise ValueError("email or contact_id is required")

    if contact_id is not None:
        contact = await erp.get_contact(contact_id)
    else:
        needle = email.lower()
        matches = await erp.search_contacts(email)
        contact = next(
            (c for c in matches if c.reporting_email and c.reporting_email.lower() == needle), None
        )

    if contact is None:
        raise InvestorNotFoundError(contact_id=contact_id, email=email)
    return contact


async def get_fund_sources(
    erp: ERPProvider,
    contact_id: int | None = None,
    email: str | None = None,
    from_date: date | None = None,
    to_date: date | None = None,
) -> FundSourcesReport:
    start, end = resolve_range(from_date or ERP_EPOCH, to_date)

    contact = await find_contact(erp, contact_id=contact_id, email=email)
    mappings = await erp.get_account_contact_mappings(contact.contact_id)
    account_ids = account_ids_for(mappings)
    accounts = set(account_ids)

    commitments = await erp.get_commitments()
    cashflows = await erp.get_cashflows(ERP_EPOCH, end)
    account_cashflows = [cf for cf in cashflows if cf.account_id in accounts]
    scope = resolve_fund_scope(account_ids, mappings, commitments, account_cashflows)

    flows = normalize_cashflows(account_cashflows).flows
    funds_by_id = {f.fund_id: f for f in await erp.get_funds()}

    per_fund: list[PerFundSources] = []
    for fund_id in scope.fund_ids:
        fund_flows = [f for f in flows if f.fund_id == fund_id]
        in_range = [f for f in fund_flows if within_range(f.date, start, end)]
        life_dates = sorted(f.date for f in fund_flows)
        fund = funds_by_id.get(fund_id)
        per_fund.append(
            PerFundSources(
                fund_id=fund_id,
                fund_name=fund.display_name if fund else f"Fund {fund_id}",
                contributions_in_range=sum(abs(f.amount) for f in in_range if f.type == "contribution"),
                distributions_in_range=sum(f.amount for f in in_range if f.type == "distribution"),
                first_ever_flow=life_dates[0] if life_dates else None,
                last_ever_flow=life_dates[-1] if life_dates else None,
            )
        )

    logger.info(
        "debug.fund_sources",
        contact_id=contact.contact_id,
        account_count=len(account_ids),
        union_fund_count=len(scope.fund_ids),
    )
    return FundSourcesReport(
        contact=DebugContact(
            id=contact.contact_id, name=contact.full_name, email=contact.reporting_email or ""
        ),
        account_count=len(account_ids),
        union_fund_count=len(scope.fund_ids),
        sources=FundSourceCounts(
            from_mappings=len(scope.from_mappings),
            from_commitments=len(scope.from_commitments),
            from_cashflows=len(scope.from_cashflows),
        ),
        per_fund=per_fund,
    )
