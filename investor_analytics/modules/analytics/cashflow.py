"""Cashflow normalization: classify ERP transaction types and fix signs.

Contributions are always <= 0 and distributions always >= 0 after
normalization. Labels outside both dictionaries are kept as "other" with their
original sign and reported once in ``unmapped_types``.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field
from datetime import date
from typing import Literal

from investor_analytics.modules.erp.schemas import Cashflow

FlowType = Literal["contribution", "distribution", "other"]

CONTRIBUTION_TYPES: frozenset[str] = frozenset({
    "contribution",
    "capital_call",
    "capital call",
    "capital contribution",
    "capital contribution (commitment)",
})

DISTRIBUTION_TYPES: frozenset[str] = frozenset({
    "distribution",
    "dividend",
    "return_of_capital",
    "return of capital",
    "roc",
    "interest_distribution",
    "interest distribution",
})


@dataclass(frozen=True)
class NormalizedFlow:
    fund_id: int
    account_id: int
    date: date
    amount: float
    type: FlowType
    original_type: str


@dataclass
class FlowWarnings:
    unmapped_types: list[str] = field(default_factory=list)


@dataclass
class NormalizationResult:
    flows: list[NormalizedFlow]
    warnings: FlowWarnings


def classify(type_label: str | None) -> FlowType:
    key = (type_label or "").lower()
    if key in CONTRIBUTION_TYPES:
        return "contribution"
    if key in DISTRIBUTION_TYPES:
        return "distribution"
    return "other"


def normalize_cashflows(cashflows: Iterable[Cashflow]) -> NormalizationResult:
    """Classify and sign-normalize raw ERP cashflows, preserving input order."""
    flows: list[NormalizedFlow] = []
    # dict keeps first-seen order and de-duplicates
    unmapped: dict[str, None] = {}

    for cf in cashflows:
        type_key = (cf.transaction_type or "").lower()
        flow_type = classify(type_key)
        amount = cf.base_amount

        if flow_type == "contribution":
            amount = -abs(amount)
        elif flow_type == "distribution":
            amount = abs(amount)
        else:
            unmapped.setdefault(type_key or "unknown", None)

        flows.append(
            NormalizedFlow(
                fund_id=cf.fund_id,
                account_id=cf.account_id,
                date=cf.transaction_date,
                amount=amount,
                type=flow_type,
                original_type=type_key,
            )
        )

    return NormalizationResult(flows=flows, warnings=FlowWarnings(unmapped_types=list(unmapped)))
