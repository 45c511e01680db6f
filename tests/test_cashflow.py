"""Tests for cashflow classification and sign normalization."""

import pytest

from investor_analytics.modules.analytics.cashflow import classify, normalize_cashflows
from tests.conftest import make_cashflow


class TestClassify:
    @pytest.mark.parametrize(
        "label",
        ["contribution", "Capital_Call", "capital call", "Capital Contribution (Commitment)"],
    )
    def test_contribution_labels(self, label):
        assert classify(label) == "contribution"

    @pytest.mark.parametrize("label", ["Distribution", "dividend", "ROC", "return of capital"])
    def test_distribution_labels(self, label):
        assert classify(label) == "distribution"

    def test_unknown_label_is_other(self):
        assert classify("management fee") == "other"
        assert classify(None) == "other"


class TestNormalizeCashflows:
    def test_contribution_forced_negative_and_distribution_positive(self):
        result = normalize_cashflows([
            make_cashflow(amount=5000, type_="capital_call"),
            make_cashflow(amount=-700, type_="distribution"),
        ])
        assert [f.amount for f in result.flows] == [-5000, 700]
        assert [f.type for f in result.flows] == ["contribution", "distribution"]

    def test_other_keeps_sign(self):
        result = normalize_cashflows([make_cashflow(amount=-250, type_="Management Fee")])
        flow = result.flows[0]
        assert flow.type == "other"
        assert flow.amount == -250
        assert flow.original_type == "management fee"

    def test_prefers_base_currency_amount(self):
        result = normalize_cashflows([make_cashflow(amount=-900, usd=-1000, type_="contribution")])
        assert result.flows[0].amount == -1000

    def test_unmapped_types_deduplicated_in_first_seen_order(self):
        result = normalize_cashflows([
            make_cashflow(type_="Fee"),
            make_cashflow(type_=None),
            make_cashflow(type_="fee"),
            make_cashflow(type_="transfer"),
            make_cashflow(type_="contribution"),
        ])
        assert result.warnings.unmapped_types == ["fee", "unknown", "transfer"]

    def test_preserves_input_order(self):
        flows = [make_cashflow(on=d) for d in ("2024-03-01", "2021-01-01", "2022-06-30")]
        result = normalize_cashflows(flows)
        assert [f.date.isoformat() for f in result.flows] == ["2024-03-01", "2021-01-01", "2022-06-30"]

    def test_empty_input(self):
        result = normalize_cashflows([])
        assert result.flows == []
        assert result.warnings.unmapped_types == []
