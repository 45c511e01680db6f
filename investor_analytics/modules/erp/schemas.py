"""Pydantic models for records served by the upstream ERP.

Every field except identifiers and dates is optional; the ERP omits fields
freely and the analytics must not fail on partial rows.
"""

from datetime import date
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator


def _iso_date_prefix(value: Any) -> Any:
    # ERP timestamps arrive as "2024-06-30T00:00:00" on some endpoints
    if isinstance(value, str) and len(value) > 10 and value[4] == "-":
        return value[:10]
    return value


def _label(value: Any) -> str | None:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


class ERPRecord(BaseModel):
    model_config = ConfigDict(extra="ignore", frozen=True, populate_by_name=True)


class Contact(ERPRecord):
    contact_id: int
    full_name: str = ""
    reporting_email: str | None = None
    updated_time: str | None = None


class AccountContactMap(ERPRecord):
    contact_id: int
    account_id: int
    contact_name: str | None = None
    account_name: str | None = None
    fund_id: int | None = None
    fund_name: str | None = None
    relationship: str | None = None
    is_primary: str | None = None


class Commitment(ERPRecord):
    fund_id: int
    account_id: int
    fundshortname: str | None = None
    account_name: str | None = None
    commitment_date: date | None = None
    commitment_amount: float = 0.0
    currency: str | None = None

    _normalize_date = field_validator("commitment_date", mode="before")(_iso_date_prefix)


class Cashflow(ERPRecord):
    """One transaction as reported by the ERP (a raw, un-normalized cashflow)."""

    fund_id: int
    account_id: int
    transaction_date: date
    transaction_amount: float = 0.0
    # Base-currency amount; authoritative when present
    transaction_amount_usd: float | None = None
    transaction_type: str | None = None
    transaction_subtype: str | None = None
    fundshortname: str | None = None
    account_name: str | None = None
    pay_date: date | None = None
    comments: str | None = None
    currency: str | None = None

    _normalize_dates = field_validator("transaction_date", "pay_date", mode="before")(_iso_date_prefix)

    @property
    def base_amount(self) -> float:
        if self.transaction_amount_usd is not None:
            return self.transaction_amount_usd
        return self.transaction_amount


class FinancialRecord(ERPRecord):
    """A fund's point-in-time reported metrics (NAV, NOI, ...)."""

    fund_id: int
    report_date: date
    fund_name: str | None = None
    financialtype: str | None = None
    report_frequency: str | None = None
    financial_metrics: dict[str, Any] = Field(default_factory=dict, alias="financialMetrics")

    _normalize_date = field_validator("report_date", mode="before")(_iso_date_prefix)

    @field_validator("financial_metrics", mode="before")
    @classmethod
    def _metrics_or_empty(cls, value: Any) -> Any:
        return value if isinstance(value, dict) else {}


class Fund(ERPRecord):
    fund_id: int
    fundname: str | None = None
    shortname: str | None = None
    status: str | None = None
    currency: str | None = None
    market_value: float | str | None = None
    strategy: str | None = None
    sector: str | None = None
    region: str | None = None

    @property
    def display_name(self) -> str:
        return self.fundname or self.shortname or f"Fund {self.fund_id}"


class Asset(ERPRecord):
    asset_id: int
    asset_name: str | None = None
    asset_long_name: str | None = None
    fund_id: int | None = None
    fund_name: str | None = None
    sector: str | None = None
    sub_sector: str | None = None
    country: str | None = None
    region: str | None = None

    _labels = field_validator("sector", "sub_sector", "country", "region", mode="before")(_label)
