"""Portfolio aggregation across an investor's funds.

Consumes flat ERP record lists (already fetched) and produces a
``PortfolioSummary``: per-fund KPIs, totals, annual buckets, sector/country
breakdowns and cash-flow insights. Nothing here performs I/O.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable, Sequence
from dataclasses import dataclass, field
from datetime import date, datetime, timezone

import structlog

from investor_analytics.modules.analytics.cashflow import NormalizedFlow, normalize_cashflows
from investor_analytics.modules.analytics.dates import recent_window_start, within_range, year_key
from investor_analytics.modules.analytics.kpi import (
    calculate_fund_kpis,
    coerce_number,
    latest_financials,
)
from investor_analytics.modules.analytics.schemas import (
    AnnualBucket,
    BreakdownBucket,
    FundKpi,
    PortfolioInsights,
    PortfolioSummary,
    PortfolioTotals,
    PortfolioWarnings,
    RecentActivity,
    RecentFlow,
    TimeRange,
)
from investor_analytics.modules.analytics.xirr import CashflowPoint, calculate_xirr
from investor_analytics.modules.erp.schemas import (
    AccountContactMap,
    Asset,
    Cashflow,
    Commitment,
    FinancialRecord,
    Fund,
)

logger = structlog.get_logger()

UNSPECIFIED = "Unspecified"
RECENT_FLOWS_LIMIT = 3

LabelSelector = Callable[[Fund | None, Asset | None], str]


# ── Fund scope ────────────────────────────────────────────────────────────────


@dataclass
class FundScope:
    """Fund ids reachable from an investor's accounts, per discovery path."""

    from_mappings: list[int] = field(default_factory=list)
    from_commitments: list[int] = field(default_factory=list)
    from_cashflows: list[int] = field(default_factory=list)

    @property
    def fund_ids(self) -> list[int]:
        # Union in discovery order: mappings, then commitments, then cashflows
        ordered = dict.fromkeys([*self.from_mappings, *self.from_commitments, *self.from_cashflows])
        return list(ordered)


def account_ids_for(mappings: Iterable[AccountContactMap]) -> list[int]:
    return list(dict.fromkeys(m.account_id for m in mappings))


def resolve_fund_scope(
    account_ids: Iterable[int],
    mappings: Iterable[AccountContactMap],
    commitments: Iterable[Commitment],
    cashflows: Iterable[Cashflow],
) -> FundScope:
    accounts = set(account_ids)
    return FundScope(
        from_mappings=list(dict.fromkeys(
            m.fund_id for m in mappings if m.account_id in accounts and m.fund_id is not None
        )),
        from_commitments=list(dict.fromkeys(c.fund_id for c in commitments if c.account_id in accounts)),
        from_cashflows=list(dict.fromkeys(cf.fund_id for cf in cashflows if cf.account_id in accounts)),
    )


# ── Breakdown label selectors ─────────────────────────────────────────────────


def sector_label(fund: Fund | None, asset: Asset | None) -> str:
    if asset is not None and asset.sector:
        return asset.sector
    if fund is not None:
        return fund.sector or fund.strategy or UNSPECIFIED
    return UNSPECIFIED


def country_label(fund: Fund | None, asset: Asset | None) -> str:
    if asset is not None and asset.country:
        return asset.country
    if fund is not None and fund.region:
        return fund.region
    return UNSPECIFIED


def build_breakdown(
    fund_kpis: Sequence[FundKpi],
    funds_by_id: dict[int, Fund],
    assets_by_fund: dict[int, list[Asset]],
    selector: LabelSelector,
) -> dict[str, BreakdownBucket]:
    """
    Bucket fund KPIs by a label.

    Every asset of a fund adds the fund's full bucket under the asset's label,
    so a fund with several assets is counted once per asset. Funds without
    assets are counted once under the fund-level label.
    """
    buckets: dict[str, BreakdownBucket] = {}

    def _add(label: str, kpi: FundKpi) -> None:
        bucket = buckets.setdefault(label, BreakdownBucket())
        bucket.total_value += kpi.ending_nav if kpi.ending_nav is not None else kpi.contributions
        bucket.contribution += kpi.contributions
        bucket.distribution += kpi.distributions
        bucket.positions += 1

    for kpi in fund_kpis:
        fund = funds_by_id.get(kpi.fund_id)
        assets = assets_by_fund.get(kpi.fund_id, [])
        if not assets:
            _add(selector(fund, None), kpi)
            continue
        for asset in assets:
            _add(selector(fund, asset), kpi)

    return buckets


# ── Totals / buckets / insights ───────────────────────────────────────────────


def build_totals(fund_kpis: Sequence[FundKpi]) -> PortfolioTotals:
    contributions = sum(k.contributions for k in fund_kpis)
    distributions = sum(k.distributions for k in fund_kpis)
    ending_nav = sum(k.ending_nav or 0.0 for k in fund_kpis)
    profit = sum(k.profit or 0.0 for k in fund_kpis)

    totals = PortfolioTotals(
        contributions=contributions,
        distributions=distributions,
        ending_nav=ending_nav,
        profit=profit,
    )
    if contributions > 0:
        totals.tvpi = (ending_nav + distributions) / contributions
        totals.dpi = distributions / contributions
        totals.rvpi = ending_nav / contributions
    return totals


def build_annual_buckets(flows: Iterable[NormalizedFlow]) -> dict[str, AnnualBucket]:
    buckets: dict[str, AnnualBucket] = {}
    for flow in flows:
        bucket = buckets.setdefault(year_key(flow.date), AnnualBucket())
        if flow.type == "contribution":
            bucket.contributions += abs(flow.amount)
        elif flow.type == "distribution":
            bucket.distributions += flow.amount
        bucket.net_cash = bucket.distributions - bucket.contributions
    return dict(sorted(buckets.items()))


def build_insights(
    flows: Sequence[NormalizedFlow],
    fund_names: dict[int, str],
    start: date,
    end: date,
) -> PortfolioInsights:
    """Realised-flow XIRR plus trailing-90-day activity.

    ``flows`` must already be restricted to the investor's accounts and to
    ``[start, end]``.
    """
    realised = [f for f in flows if f.type != "other"]
    points = sorted((CashflowPoint(date=f.date, amount=f.amount) for f in realised), key=lambda p: p.date)
    cashflow_irr = calculate_xirr(points)

    window_start = recent_window_start(start, end)
    recent = sorted(
        (f for f in realised if within_range(f.date, window_start, end)),
        key=lambda f: f.date,
        reverse=True,
    )

    activity = RecentActivity(
        contributions_90d=sum(abs(f.amount) for f in recent if f.type == "contribution"),
        distributions_90d=sum(f.amount for f in recent if f.type == "distribution"),
        flows=[
            RecentFlow(
                date=f.date,
                fund_id=f.fund_id,
                fund_name=fund_names.get(f.fund_id, f"Fund {f.fund_id}"),
                type=f.type,
                amount=-abs(f.amount) if f.type == "contribution" else abs(f.amount),
            )
            for f in recent[:RECENT_FLOWS_LIMIT]
        ],
    )
    return PortfolioInsights(cashflow_irr=cashflow_irr, irr_excludes_unrealized=True, recent_activity=activity)


# ── Entry points ──────────────────────────────────────────────────────────────


def empty_summary(
    contact_id: int, contact_name: str | None, time_range: TimeRange, now: datetime | None = None
) -> PortfolioSummary:
    """Zeroed summary for an investor with no accounts or no funds."""
    return PortfolioSummary(
        contact_id=contact_id,
        contact_name=contact_name,
        time_range=time_range,
        last_synced=now or datetime.now(timezone.utc),
    )


@dataclass
class PortfolioInputs:
    contact_id: int
    contact_name: str | None
    time_range: TimeRange
    account_ids: list[int]
    mappings: list[AccountContactMap]
    commitments: list[Commitment]
    cashflows: list[Cashflow]
    financials: list[FinancialRecord]
    funds: list[Fund]
    assets: list[Asset]


def build_portfolio_summary(inputs: PortfolioInputs, now: datetime | None = None) -> PortfolioSummary:
    """
    Aggregate one investor's portfolio over ``inputs.time_range``.

    ``cashflows`` should span from the ERP epoch to the range end so the
    per-fund first/last flow dates cover the full history; only flows inside
    the range feed the KPIs.
    """
    start, end = inputs.time_range.from_date, inputs.time_range.to_date
    synced_at = now or datetime.now(timezone.utc)

    if not inputs.account_ids:
        return empty_summary(inputs.contact_id, inputs.contact_name, inputs.time_range, synced_at)

    accounts = set(inputs.account_ids)
    account_cashflows = [cf for cf in inputs.cashflows if cf.account_id in accounts]
    scope = resolve_fund_scope(accounts, inputs.mappings, inputs.commitments, account_cashflows)
    fund_ids = scope.fund_ids
    if not fund_ids:
        return empty_summary(inputs.contact_id, inputs.contact_name, inputs.time_range, synced_at)

    normalized = normalize_cashflows(account_cashflows)
    flows_to_date = [f for f in normalized.flows if f.date <= end]
    flows_in_range = [f for f in flows_to_date if within_range(f.date, start, end)]

    funds_by_id = {f.fund_id: f for f in inputs.funds}
    assets_by_fund: dict[int, list[Asset]] = {}
    for asset in inputs.assets:
        if asset.fund_id is not None:
            assets_by_fund.setdefault(asset.fund_id, []).append(asset)
    latest = latest_financials(inputs.financials, end)

    fund_kpis: list[FundKpi] = []
    for fund_id in fund_ids:
        fund = funds_by_id.get(fund_id)
        history = [f for f in flows_to_date if f.fund_id == fund_id]
        in_range = [f for f in flows_in_range if f.fund_id == fund_id]

        metrics = calculate_fund_kpis(
            fund_id,
            in_range,
            terminal_date=end,
            financial=latest.get(fund_id),
            closing_nav_fallback=coerce_number(fund.market_value) if fund else None,
        )
        flow_dates = [f.date for f in history]
        fund_kpis.append(
            FundKpi(
                fund_id=fund_id,
                fund_name=fund.display_name if fund else f"Fund {fund_id}",
                currency=(fund.currency if fund and fund.currency else inputs.time_range.base_currency),
                first_flow_date=min(flow_dates) if flow_dates else None,
                last_flow_date=max(flow_dates) if flow_dates else None,
                net_cash=metrics.distributions - metrics.contributions,
                **metrics.to_dict(),
            )
        )

    fund_names = {k.fund_id: k.fund_name for k in fund_kpis}
    summary = PortfolioSummary(
        contact_id=inputs.contact_id,
        contact_name=inputs.contact_name,
        time_range=inputs.time_range,
        funds=fund_kpis,
        totals=build_totals(fund_kpis),
        annual_buckets=build_annual_buckets(flows_in_range),
        sector_breakdown=build_breakdown(fund_kpis, funds_by_id, assets_by_fund, sector_label),
        country_breakdown=build_breakdown(fund_kpis, funds_by_id, assets_by_fund, country_label),
        warnings=PortfolioWarnings(unmapped_cashflow_types=normalized.warnings.unmapped_types),
        investments_count=len(fund_kpis),
        insights=build_insights(flows_in_range, fund_names, start, end),
        last_synced=synced_at,
    )

    logger.info(
        "portfolio_summary_built",
        contact_id=inputs.contact_id,
        investments_count=summary.investments_count,
        flows_in_range=len(flows_in_range),
        unmapped_types=len(normalized.warnings.unmapped_types),
    )
    return summary
