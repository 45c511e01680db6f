"""Investor snapshot payload: a compact, cacheable view of the portfolio."""

from dataclasses import dataclass
from datetime import date
from typing import Literal

from pydantic import BaseModel, Field

NetView = Literal["invested", "to_investor"]


@dataclass(frozen=True)
class SnapshotParams:
    from_date: date
    to_date: date
    base: str = "USD"
    lang: str | None = None
    preset: str | None = None
    net_view: NetView = "invested"


class SnapshotInvestor(BaseModel):
    id: int
    name: str = ""
    email: str = ""


class SnapshotTotals(BaseModel):
    contributions_usd: float = 0.0
    distributions_usd: float = 0.0
    net_invested_usd: float = 0.0
    net_to_investor_usd: float = 0.0


class SnapshotHoldings(BaseModel):
    count: int = 0
    active_in_range_count: int = 0


class SnapshotFlow(BaseModel):
    date: str
    entity_type: Literal["fund"] = "fund"
    entity_id: int
    entity_name: str
    amount_usd: float


class SnapshotRecentActivity(BaseModel):
    in_usd: float = 0.0
    out_usd: float = 0.0
    flows: list[SnapshotFlow] = Field(default_factory=list)


class SnapshotInsights(BaseModel):
    cashflow_irr: float | None = None
    irr_excludes_unrealized: bool = True


class ExportContext(BaseModel):
    preset: str | None = None
    base: str = "USD"
    net_view: NetView = "invested"


class SnapshotPayload(BaseModel):
    investor: SnapshotInvestor
    totals: SnapshotTotals
    holdings: SnapshotHoldings
    recent_90d: SnapshotRecentActivity
    insights: SnapshotInsights
    export_context: ExportContext
    data_notes: list[str] = Field(default_factory=list)
