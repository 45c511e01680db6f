"""In-memory ERP provider backed by a fixed dataset."""

from __future__ import annotations

from datetime import date
from typing import Any

from investor_analytics.modules.erp.base import ERPProvider
from investor_analytics.modules.erp.sample_data import SAMPLE_DATA
from investor_analytics.modules.erp.schemas import (
    AccountContactMap,
    Asset,
    Cashflow,
    Commitment,
    Contact,
    FinancialRecord,
    Fund,
)

_SEARCH_LIMIT = 50


class MockERPClient(ERPProvider):
    """Serves SAMPLE_DATA (or an injected dataset) with the same filters as the real API."""

    name = "mock"

    def __init__(self, data: dict[str, list[dict[str, Any]]] | None = None) -> None:
        raw = data if data is not None else SAMPLE_DATA
        self._contacts = [Contact.model_validate(r) for r in raw.get("contacts", [])]
        self._mappings = [AccountContactMap.model_validate(r) for r in raw.get("mappings", [])]
        self._commitments = [Commitment.model_validate(r) for r in raw.get("commitments", [])]
        self._cashflows = [Cashflow.model_validate(r) for r in raw.get("cashFlows", [])]
        self._financials = [FinancialRecord.model_validate(r) for r in raw.get("financials", [])]
        self._funds = [Fund.model_validate(r) for r in raw.get("funds", [])]
        self._assets = [Asset.model_validate(r) for r in raw.get("assets", [])]

    async def search_contacts(self, query: str) -> list[Contact]:
        needle = query.lower()
        matches = [
            c for c in self._contacts
            if any(needle in field.lower() for field in (c.full_name, c.reporting_email) if field)
        ]
        return matches[:_SEARCH_LIMIT]

    async def get_contact(self, contact_id: int) -> Contact | None:
        return next((c for c in self._contacts if c.contact_id == contact_id), None)

    async def get_account_contact_mappings(self, contact_id: int | None = None) -> list[AccountContactMap]:
        if contact_id is None:
            return list(self._mappings)
        return [m for m in self._mappings if m.contact_id == contact_id]

    async def get_commitments(
        self, fund_id: int | None = None, start_date: date | None = None
    ) -> list[Commitment]:
        return [
            c for c in self._commitments
            if (fund_id is None or c.fund_id == fund_id)
            and (start_date is None or c.commitment_date is None or c.commitment_date >= start_date)
        ]

    async def get_cashflows(
        self, start_date: date, end_date: date, fund_id: int | None = None
    ) -> list[Cashflow]:
        return [
            cf for cf in self._cashflows
            if (fund_id is None or cf.fund_id == fund_id)
            and start_date <= cf.transaction_date <= end_date
        ]

    async def get_financials(
        self,
        start_date: date,
        end_date: date,
        fund_id: int | None = None,
        report_frequency: str | None = None,
    ) -> list[FinancialRecord]:
        return [
            fr for fr in self._financials
            if (fund_id is None or fr.fund_id == fund_id)
            and start_date <= fr.report_date <= end_date
        ]

    async def get_funds(self) -> list[Fund]:
        return list(self._funds)

    async def get_assets(self) -> list[Asset]:
        return list(self._assets)
