"""Investor lookup schemas."""

from pydantic import BaseModel, Field


class InvestorSearchResult(BaseModel):
    id: int
    name: str
    email: str | None = None


class InvestorSearchResponse(BaseModel):
    results: list[InvestorSearchResult] = Field(default_factory=list)
