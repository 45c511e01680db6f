"""XIRR: money-weighted return for irregularly dated cashflows.

Newton-Raphson on the NPV function first; bisection over a bounded rate range
when Newton stalls, diverges or leaves the range. Deterministic Python/numpy.
"""

from __future__ import annotations

import math
from collections.abc import Sequence
from dataclasses import dataclass
from datetime import date

import numpy as np

MAX_ITERATIONS = 100
TOLERANCE = 1e-6
MIN_RATE = -0.9999
MAX_RATE = 10.0
INITIAL_GUESS = 0.10
DAYS_PER_YEAR = 365.0


@dataclass(frozen=True)
class CashflowPoint:
    date: date
    amount: float


def _year_fractions(cashflows: Sequence[CashflowPoint]) -> tuple[np.ndarray, np.ndarray]:
    origin = min(cf.date for cf in cashflows)
    years = np.array([(cf.date - origin).days / DAYS_PER_YEAR for cf in cashflows], dtype=float)
    amounts = np.array([cf.amount for cf in cashflows], dtype=float)
    return years, amounts


def _npv(rate: float, years: np.ndarray, amounts: np.ndarray) -> float:
    if abs(rate) <= TOLERANCE:
        return float(amounts.sum())
    with np.errstate(over="ignore", divide="ignore", invalid="ignore"):
        return float(np.sum(amounts / np.power(1.0 + rate, years)))


def _npv_derivative(rate: float, years: np.ndarray, amounts: np.ndarray) -> float:
    with np.errstate(over="ignore", divide="ignore", invalid="ignore"):
        return float(np.sum(-years * amounts / np.power(1.0 + rate, years + 1.0)))


def _has_sign_change(cashflows: Sequence[CashflowPoint]) -> bool:
    return any(cf.amount > 0 for cf in cashflows) and any(cf.amount < 0 for cf in cashflows)


def _newton(years: np.ndarray, amounts: np.ndarray) -> float | None:
    rate = INITIAL_GUESS
    for _ in range(MAX_ITERATIONS):
        value = _npv(rate, years, amounts)
        derivative = _npv_derivative(rate, years, amounts)
        if not math.isfinite(derivative) or abs(derivative) < TOLERANCE:
            return None

        next_rate = rate - value / derivative
        if not math.isfinite(next_rate):
            return None
        if abs(next_rate - rate) <= TOLERANCE:
            return next_rate

        rate = next_rate
        if rate <= MIN_RATE or rate >= MAX_RATE:
            return None
    return None


def _bisection(years: np.ndarray, amounts: np.ndarray) -> float:
    low, high = MIN_RATE, MAX_RATE
    mid = (low + high) / 2
    for _ in range(MAX_ITERATIONS):
        mid = (low + high) / 2
        value = _npv(mid, years, amounts)
        if abs(value) <= TOLERANCE:
            return mid

        low_value = _npv(low, years, amounts)
        if (value > 0) == (low_value > 0):
            low = mid
        else:
            high = mid
    # Best available midpoint; approximate rather than undefined
    return mid


def calculate_xirr(cashflows: Sequence[CashflowPoint]) -> float | None:
    """Annualised IRR of dated cashflows, or None when undefined.

    None is returned for an empty list and for flows that never change sign.
    The earliest date is the day-count origin (actual/365).
    """
    if not cashflows or not _has_sign_change(cashflows):
        return None

    years, amounts = _year_fractions(cashflows)

    rate = _newton(years, amounts)
    if rate is not None:
        return float(rate)
    return float(_bisection(years, amounts))
