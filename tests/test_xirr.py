"""Tests for the XIRR solver."""

from datetime import date

import math

import numpy as np
import pytest

from investor_analytics.modules.analytics.xirr import (
    MAX_RATE,
    MIN_RATE,
    CashflowPoint,
    _bisection,
    _newton,
    _npv,
    _year_fractions,
    calculate_xirr,
)


def _points(*pairs: tuple[str, float]) -> list[CashflowPoint]:
    return [CashflowPoint(date=date.fromisoformat(d), amount=a) for d, a in pairs]


class TestCalculateXirr:
    def test_empty_list_is_none(self):
        assert calculate_xirr([]) is None

    def test_single_sign_is_none(self):
        assert calculate_xirr(_points(("2021-01-01", -1000), ("2022-01-01", -500))) is None
        assert calculate_xirr(_points(("2021-01-01", 1000), ("2022-01-01", 500))) is None

    def test_zero_amounts_do_not_count_as_a_sign(self):
        assert calculate_xirr(_points(("2021-01-01", -1000), ("2022-01-01", 0))) is None

    def test_ten_percent_over_one_year(self):
        rate = calculate_xirr(_points(("2021-01-01", -1000), ("2022-01-01", 1100)))
        assert rate == pytest.approx(0.10, abs=1e-6)

    def test_negative_return(self):
        rate = calculate_xirr(_points(("2021-01-01", -1000), ("2022-01-01", 500)))
        assert rate == pytest.approx(-0.5, abs=1e-4)

    def test_multiple_contributions(self):
        # -1000 at t0, -1000 at t1, +2310 at t2 solves to 10% annually
        rate = calculate_xirr(
            _points(("2021-01-01", -1000), ("2022-01-01", -1000), ("2023-01-01", 2310))
        )
        assert rate == pytest.approx(0.10, abs=1e-4)

    def test_result_is_root_of_npv(self):
        points = _points(("2020-03-15", -25000), ("2021-07-01", 4000), ("2023-11-30", 30000))
        rate = calculate_xirr(points)
        assert rate is not None

        origin = points[0].date
        npv = sum(p.amount / (1 + rate) ** ((p.date - origin).days / 365) for p in points)
        assert abs(npv) < 1e-2


class TestNpv:
    def test_near_zero_rate_is_plain_sum(self):
        years = np.array([0.0, 1.0])
        amounts = np.array([-1000.0, 1100.0])
        assert _npv(1e-9, years, amounts) == pytest.approx(100.0)


class TestBisectionFallback:
    def test_bisection_finds_bracketed_root(self):
        years = np.array([0.0, 1.0])
        amounts = np.array([-1000.0, 1100.0])
        assert _bisection(years, amounts) == pytest.approx(0.10, abs=1e-6)

    def test_rate_above_range_falls_back_to_upper_bound(self):
        # True rate is 9900%; Newton leaves the range so bisection pins the bound
        points = _points(("2021-01-01", -100), ("2022-01-01", 10000))
        assert _newton(*_year_fractions(points)) is None

        rate = calculate_xirr(points)
        assert rate == pytest.approx(MAX_RATE, abs=1e-3)

    def test_multiple_sign_changes_stay_bounded(self):
        rate = calculate_xirr(
            _points(
                ("2020-01-01", -1000),
                ("2020-06-30", 3000),
                ("2021-02-15", -2500),
                ("2022-09-01", 600),
                ("2023-03-31", -50),
            )
        )
        assert rate is not None
        assert math.isfinite(rate)
        assert MIN_RATE <= rate <= MAX_RATE


class TestKnownCase:
    def test_twenty_percent_over_one_year(self):
        rate = calculate_xirr(_points(("2023-01-01", -100000), ("2024-01-01", 120000)))
        assert 0.18 < rate < 0.23
