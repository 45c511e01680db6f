"""Pydantic schemas for portfolio analytics output."""

from datetime import date, datetime
from typing import Literal

from pydantic import BaseModel, Field


class TimeRange(BaseModel):
    from_date: date
    to_date: date
    base_currency: str = "USD"


class FundKpi(BaseModel):
    fund_id: int
    fund_name: str
    contributions: float = 0.0
    distributions: float = 0.0
    ending_nav: float | None = None
    profit: float | None = None
    tvpi: float | None = None
    dpi: float | None = None
    rvpi: float | None = None
    irr: float | None = None
    noi_actual: float | None = None
    noi_budget: float | None = None
    noi_variance: float | None = None
    noi_variance_pct: float | None = None
    currency: str | None = None
    first_flow_date: date | None = None
    last_flow_date: date | None = None
    net_cash: float | None = None


class PortfolioTotals(BaseModel):
    contributions: float = 0.0
    distributions: float = 0.0
    ending_nav: float = 0.0
    profit: float = 0.0
    tvpi: float | None = None
    dpi: float | None = None
    rvpi: float | None = None


class AnnualBucket(BaseModel):
    contributions: float = 0.0
    distributions: float = 0.0
    net_cash: float = 0.0


class BreakdownBucket(BaseModel):
    total_value: float = 0.0
    contribution: float = 0.0
    distribution: float = 0.0
    positions: int = 0


class PortfolioWarnings(BaseModel):
    unmapped_cashflow_types: list[str] = Field(default_factory=list)


class RecentFlow(BaseModel):
    date: date
    fund_id: int
    fund_name: str
    type: Literal["contribution", "distribution"]
    amount: float  # contributions negative, distributions positive


class RecentActivity(BaseModel):
    contributions_90d: float = 0.0
    distributions_90d: float = 0.0
    flows: list[RecentFlow] = Field(default_factory=list)


class PortfolioInsights(BaseModel):
    cashflow_irr: float | None = None
    # Portfolio IRR uses realised flows only, without a terminal NAV
    irr_excludes_unrealized: bool = True
    recent_activity: RecentActivity = Field(default_factory=RecentActivity)


class PortfolioSummary(BaseModel):
    contact_id: int
    contact_name: str | None = None
    time_range: TimeRange
    funds: list[FundKpi] = Field(default_factory=list)
    totals: PortfolioTotals = Field(default_factory=PortfolioTotals)
    annual_buckets: dict[str, AnnualBucket] = Field(default_factory=dict)
    sector_breakdown: dict[str, BreakdownBucket] = Field(default_factory=dict)
    country_breakdown: dict[str, BreakdownBucket] = Field(default_factory=dict)
    warnings: PortfolioWarnings = Field(default_factory=PortfolioWarnings)
    investments_count: int = 0
    insights: PortfolioInsights = Field(default_factory=PortfolioInsights)
    last_synced: datetime | None = None
