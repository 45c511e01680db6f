"""Diagnostic response schemas."""

from datetime import date

from pydantic import BaseModel, Field


class DebugContact(BaseModel):
    id: int
    name: str
    email: str = ""


class FundSourceCounts(BaseModel):
    """Distinct fund ids contributed by each discovery path."""

    from_mappings: int = 0
    from_commitments: int = 0
    from_cashflows: int = 0


class PerFundSources(BaseModel):
    fund_id: int
    fund_name: str
    contributions_in_range: float = 0.0
    distributions_in_range: float = 0.0
    first_ever_flow: date | None = None
    last_ever_flow: date | None = None


class FundSourcesReport(BaseModel):
    contact: DebugContact
    account_count: int = 0
    union_fund_count: int = 0
    sources: FundSourceCounts = Field(default_factory=FundSourceCounts)
    per_fund: list[PerFundSources] = Field(default_factory=list)


class FundListItem(BaseModel):
    id: int
    name: str


class PortfolioFundsResponse(BaseModel):
    investments_count: int = 0
    funds: list[FundListItem] = Field(default_factory=list)
