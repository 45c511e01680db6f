"""ERP provider interface: the read-only upstream the analytics consume."""

from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import date

from investor_analytics.modules.erp.schemas import (
    AccountContactMap,
    Asset,
    Cashflow,
    Commitment,
    Contact,
    FinancialRecord,
    Fund,
)

# ERP "from the beginning" sentinel for date-bounded endpoints
ERP_EPOCH = date(1900, 1, 1)


class ERPProvider(ABC):
    """Abstract data provider all ERP backends must implement.

    Implementations never retry; failures propagate to the caller as
    ``ERPClientError``.
    """

    name: str = ""

    @abstractmethod
    async def search_contacts(self, query: str) -> list[Contact]:
        ...

    @abstractmethod
    async def get_contact(self, contact_id: int) -> Contact | None:
        ...

    @abstractmethod
    async def get_account_contact_mappings(self, contact_id: int | None = None) -> list[AccountContactMap]:
        ...

    @abstractmethod
    async def get_commitments(
        self, fund_id: int | None = None, start_date: date | None = None
    ) -> list[Commitment]:
        ...

    @abstractmethod
    async def get_cashflows(
        self, start_date: date, end_date: date, fund_id: int | None = None
    ) -> list[Cashflow]:
        ...

    @abstractmethod
    async def get_financials(
        self,
        start_date: date,
        end_date: date,
        fund_id: int | None = None,
        report_frequency: str | None = None,
    ) -> list[FinancialRecord]:
        ...

    @abstractmethod
    async def get_funds(self) -> list[Fund]:
        ...

    @abstractmethod
    async def get_assets(self) -> list[Asset]:
        ...

    async def close(self) -> None:
        """Release network resources. No-op for in-memory providers."""
        return None
