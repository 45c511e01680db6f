"""Per-fund KPIs: TVPI, DPI, RVPI, profit, XIRR and NOI variance.

All calculations are deterministic Python. NAV and NOI are read from the
ERP's open ``financialMetrics`` bag through ordered alias accessors; the first
accessor that yields a finite number wins.
"""

from __future__ import annotations

import math
import re
from collections.abc import Callable, Iterable, Mapping, Sequence
from dataclasses import asdict, dataclass
from datetime import date
from decimal import Decimal
from typing import Any

import structlog

from investor_analytics.modules.analytics.cashflow import NormalizedFlow
from investor_analytics.modules.analytics.xirr import CashflowPoint, calculate_xirr
from investor_analytics.modules.erp.schemas import FinancialRecord

logger = structlog.get_logger()

MetricAccessor = Callable[[Mapping[str, Any]], float | None]

NAV_KEYS = ("nav", "market_value", "marketValue", "ending_nav", "endingNav")
NOI_ACTUAL_KEYS = ("noi_actual", "noiActual")
NOI_BUDGET_KEYS = ("noi_budget", "noiBudget", "noi_plan")

_NUMERIC_NOISE = re.compile(r"[$,%\s]")


def coerce_number(value: Any) -> float | None:
    """Numbers pass through; strings lose ``$ , %`` and whitespace first."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float, Decimal)):
        number = float(value)
    elif isinstance(value, str):
        if not value.strip():
            # A blank cell reads as zero, it does not defer to the next alias
            return 0.0
        cleaned = _NUMERIC_NOISE.sub("", value)
        if not cleaned:
            return None
        try:
            number = float(cleaned)
        except ValueError:
            return None
    else:
        return None
    return number if math.isfinite(number) else None


def metric_accessor(key: str) -> MetricAccessor:
    def _access(metrics: Mapping[str, Any]) -> float | None:
        return coerce_number(metrics.get(key))
    return _access


NAV_ACCESSORS: tuple[MetricAccessor, ...] = tuple(metric_accessor(k) for k in NAV_KEYS)
NOI_ACTUAL_ACCESSORS: tuple[MetricAccessor, ...] = tuple(metric_accessor(k) for k in NOI_ACTUAL_KEYS)
NOI_BUDGET_ACCESSORS: tuple[MetricAccessor, ...] = tuple(metric_accessor(k) for k in NOI_BUDGET_KEYS)


def resolve_metric(metrics: Mapping[str, Any], accessors: Iterable[MetricAccessor]) -> float | None:
    for accessor in accessors:
        value = accessor(metrics)
        if value is not None:
            return value
    return None


def extract_nav(financial: FinancialRecord | None) -> float | None:
    if financial is None:
        return None
    return resolve_metric(financial.financial_metrics, NAV_ACCESSORS)


@dataclass(frozen=True)
class NoiMetrics:
    actual: float | None = None
    budget: float | None = None
    variance: float | None = None
    variance_pct: float | None = None


def extract_noi(financial: FinancialRecord | None) -> NoiMetrics:
    if financial is None:
        return NoiMetrics()

    actual = resolve_metric(financial.financial_metrics, NOI_ACTUAL_ACCESSORS)
    budget = resolve_metric(financial.financial_metrics, NOI_BUDGET_ACCESSORS)

    variance = actual - budget if actual is not None and budget is not None else None
    variance_pct = (
        (actual - budget) / abs(budget) * 100
        if actual is not None and budget is not None and budget != 0
        else None
    )
    return NoiMetrics(actual=actual, budget=budget, variance=variance, variance_pct=variance_pct)


def latest_financials(financials: Iterable[FinancialRecord], as_of: date) -> dict[int, FinancialRecord]:
    """Most recent record per fund with ``report_date <= as_of``.

    Ties on report date keep the record seen first.
    """
    latest: dict[int, FinancialRecord] = {}
    for record in financials:
        if record.report_date > as_of:
            continue
        current = latest.get(record.fund_id)
        if current is None or current.report_date < record.report_date:
            latest[record.fund_id] = record
    return latest


@dataclass(frozen=True)
class FundMetrics:
    contributions: float
    distributions: float
    ending_nav: float | None
    profit: float | None
    tvpi: float | None
    dpi: float | None
    rvpi: float | None
    irr: float | None
    noi_actual: float | None
    noi_budget: float | None
    noi_variance: float | None
    noi_variance_pct: float | None

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


def build_irr_series(
    flows: Sequence[NormalizedFlow], ending_nav: float | None, terminal_date: date
) -> list[CashflowPoint]:
    """Contribution/distribution points plus the terminal NAV, date-sorted.

    ``sorted`` is stable, so same-day flows keep their original order.
    """
    points = [CashflowPoint(date=f.date, amount=f.amount) for f in flows if f.type != "other"]
    if ending_nav is not None:
        points.append(CashflowPoint(date=terminal_date, amount=ending_nav))
    return sorted(points, key=lambda p: p.date)


def calculate_fund_kpis(
    fund_id: int,
    flows: Sequence[NormalizedFlow],
    terminal_date: date,
    financial: FinancialRecord | None = None,
    closing_nav_fallback: float | None = None,
) -> FundMetrics:
    """
    Calculate one fund's KPIs for a date range.

    flows: the fund's normalized flows, already restricted to the range.
    financial: latest valuation record as of ``terminal_date`` (optional).
    closing_nav_fallback: used only when no NAV alias resolves on ``financial``.
    """
    contributions = abs(sum(f.amount for f in flows if f.type == "contribution"))
    distributions = sum(f.amount for f in flows if f.type == "distribution")

    nav = extract_nav(financial)
    ending_nav = nav if nav is not None else closing_nav_fallback
    if ending_nav is None:
        logger.debug("fund_kpis.nav_unresolved", fund_id=fund_id)

    profit = distributions + ending_nav - contributions if ending_nav is not None else None

    tvpi: float | None = None
    dpi: float | None = None
    rvpi: float | None = None
    if contributions > 0:
        dpi = distributions / contributions
        if ending_nav is not None:
            tvpi = (ending_nav + distributions) / contributions
            rvpi = ending_nav / contributions

    irr = calculate_xirr(build_irr_series(flows, ending_nav, terminal_date))
    noi = extract_noi(financial)

    return FundMetrics(
        contributions=contributions,
        distributions=distributions,
        ending_nav=ending_nav,
        profit=profit,
        tvpi=tvpi,
        dpi=dpi,
        rvpi=rvpi,
        irr=irr,
        noi_actual=noi.actual,
        noi_budget=noi.budget,
        noi_variance=noi.variance,
        noi_variance_pct=noi.variance_pct,
    )
