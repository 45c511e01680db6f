"""Snapshot assembly with cache-aside reads and content-hash ETags."""

from __future__ import annotations

import hashlib
import json
from typing import Any

import structlog

from investor_analytics.modules.analytics.schemas import PortfolioSummary
from investor_analytics.modules.erp.schemas import Contact
from investor_analytics.modules.investors.service import PortfolioService
from investor_analytics.modules.snapshot.schemas import (
    ExportContext,
    SnapshotFlow,
    SnapshotHoldings,
    SnapshotInsights,
    SnapshotInvestor,
    SnapshotParams,
    SnapshotPayload,
    SnapshotRecentActivity,
    SnapshotTotals,
)
from investor_analytics.services.snapshot_cache import SnapshotCache, snapshot_cache_key

logger = structlog.get_logger()

IRR_UNAVAILABLE_NOTE = "Cash-flow IRR unavailable for this range."


def compute_etag(payload: dict[str, Any]) -> str:
    """sha256 hex digest of the canonical JSON form (sorted keys, no spaces)."""
    canonical = json.dumps(payload, sort_keys=True, separators=(",", ":"), default=str)
    return hashlib.sha256(canonical.encode("utf-8")).hexdigest()


def is_not_modified(etag: str, if_none_match: str | None) -> bool:
    """True when the client's ``If-None-Match`` token matches ``etag``.

    Accepts quoted and weak (``W/``) tokens, comma-separated lists and ``*``.
    """
    if not if_none_match:
        return False
    for token in if_none_match.split(","):
        token = token.strip()
        if token == "*":
            return True
        if token.startswith("W/"):
            token = token[2:]
        if token.strip('"') == etag:
            return True
    return False


def build_snapshot_payload(
    contact_id: int,
    contact: Contact | None,
    portfolio: PortfolioSummary,
    params: SnapshotParams,
) -> SnapshotPayload:
    contributions = portfolio.totals.contributions
    distributions = portfolio.totals.distributions
    recent = portfolio.insights.recent_activity
    active = [f for f in portfolio.funds if abs(f.contributions) > 0 or abs(f.distributions) > 0]

    payload = SnapshotPayload(
        investor=SnapshotInvestor(
            id=contact_id,
            name=(contact.full_name if contact else None) or portfolio.contact_name or "",
            email=(contact.reporting_email if contact else None) or "",
        ),
        totals=SnapshotTotals(
            contributions_usd=contributions,
            distributions_usd=distributions,
            net_invested_usd=contributions - distributions,
            net_to_investor_usd=distributions - contributions,
        ),
        holdings=SnapshotHoldings(count=len(portfolio.funds), active_in_range_count=len(active)),
        recent_90d=SnapshotRecentActivity(
            in_usd=recent.contributions_90d,
            out_usd=recent.distributions_90d,
            flows=[
                SnapshotFlow(
                    date=flow.date.isoformat(),
                    entity_id=flow.fund_id,
                    entity_name=flow.fund_name or f"Fund {flow.fund_id}",
                    amount_usd=flow.amount,
                )
                for flow in recent.flows
            ],
        ),
        insights=SnapshotInsights(cashflow_irr=portfolio.insights.cashflow_irr, irr_excludes_unrealized=True),
        export_context=ExportContext(preset=params.preset, base=params.base, net_view=params.net_view),
    )
    if payload.insights.cashflow_irr is None:
        payload.data_notes.append(IRR_UNAVAILABLE_NOTE)
    return payload


class SnapshotService:
    def __init__(
        self,
        portfolio: PortfolioService,
        cache: SnapshotCache,
        ttl_seconds: int = 600,
        cache_version: str = "1",
    ) -> None:
        self.portfolio = portfolio
        self.cache = cache
        self.ttl_seconds = ttl_seconds
        self.cache_version = cache_version

    def cache_key(self, contact_id: int, params: SnapshotParams) -> str:
        return snapshot_cache_key(
            self.cache_version,
            contact_id,
            params.from_date.isoformat(),
            params.to_date.isoformat(),
            params.base,
            params.lang,
            params.preset,
            params.net_view,
        )

    async def get_snapshot(self, contact_id: int, params: SnapshotParams) -> tuple[dict[str, Any], str]:
        """Return ``(payload, etag)``; a cache hit skips the ERP entirely."""
        key = self.cache_key(contact_id, params)
        cached = await self.cache.get(key)
        if cached is not None:
            logger.info("snapshot.cache_hit", contact_id=contact_id, backend=self.cache.name)
            return cached.value, cached.etag

        logger.info("snapshot.cache_miss", contact_id=contact_id, backend=self.cache.name)
        portfolio = await self.portfolio.get_portfolio(
            contact_id,
            from_date=params.from_date,
            to_date=params.to_date,
            base_currency=params.base,
        )
        contact = await self.portfolio.erp.get_contact(contact_id)

        payload = build_snapshot_payload(contact_id, contact, portfolio, params).model_dump(mode="json")
        etag = compute_etag(payload)
        await self.cache.set(key, payload, etag, self.ttl_seconds)
        return payload, etag
