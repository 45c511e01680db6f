"""Tests for portfolio aggregation (pure core) and PortfolioService (ERP fetch + aggregate)."""

from datetime import date
from unittest.mock import AsyncMock

import pytest

from investor_analytics.core.errors import ERPClientError, InvestorNotFoundError
from investor_analytics.modules.analytics.cashflow import normalize_cashflows
from investor_analytics.modules.analytics.portfolio import (
    build_breakdown,
    build_insights,
    country_label,
    resolve_fund_scope,
    sector_label,
)
from investor_analytics.modules.analytics.schemas import FundKpi
from investor_analytics.modules.erp.mock_client import MockERPClient
from investor_analytics.modules.erp.schemas import AccountContactMap, Asset, Commitment, Fund
from investor_analytics.modules.investors.service import PortfolioService
from tests.conftest import make_cashflow

pytestmark = pytest.mark.anyio

FROM = date(2022, 1, 1)
TO = date(2024, 12, 31)


class TestGetPortfolio:
    async def test_sample_investor_totals(self, erp):
        summary = await PortfolioService(erp).get_portfolio(1, FROM, TO)

        assert summary.contact_name == "Dana Levi"
        assert summary.investments_count == 2
        assert [f.fund_id for f in summary.funds] == [101, 102]
        assert summary.totals.contributions == 240000
        assert summary.totals.distributions == 20000
        assert summary.totals.ending_nav == 260000
        assert summary.totals.profit == 40000
        assert summary.totals.tvpi == pytest.approx(280000 / 240000)
        assert summary.totals.dpi == pytest.approx(20000 / 240000)

    async def test_fund_kpi_fields(self, erp):
        summary = await PortfolioService(erp).get_portfolio(1, FROM, TO)
        bif = summary.funds[0]

        assert bif.fund_name == "Buligo Industrial Fund"
        assert bif.currency == "USD"
        assert bif.first_flow_date == date(2022, 2, 1)
        assert bif.last_flow_date == date(2024, 6, 30)
        assert bif.net_cash == 12000 - 150000
        assert bif.noi_variance == 5000

    async def test_flows_outside_range_excluded_but_flow_dates_cover_history(self, erp):
        summary = await PortfolioService(erp).get_portfolio(1, date(2024, 1, 1), TO)
        bif = summary.funds[0]

        assert bif.contributions == 0
        assert bif.distributions == 12000
        assert bif.first_flow_date == date(2022, 2, 1)

    async def test_annual_buckets(self, erp):
        summary = await PortfolioService(erp).get_portfolio(1, FROM, TO)
        buckets = summary.annual_buckets

        assert list(buckets) == ["2022", "2023", "2024"]
        assert buckets["2022"].contributions == 150000
        assert buckets["2024"].contributions == 45000
        assert buckets["2024"].distributions == 20000
        assert buckets["2024"].net_cash == -25000

    async def test_sector_and_country_breakdowns(self, erp):
        summary = await PortfolioService(erp).get_portfolio(1, FROM, TO)

        assert summary.sector_breakdown["Industrial"].total_value == 162000
        assert summary.sector_breakdown["Multifamily"].contribution == 90000
        usa = summary.country_breakdown["USA"]
        assert usa.positions == 2
        assert usa.total_value == 260000

    async def test_inverted_range_is_swapped(self, erp):
        summary = await PortfolioService(erp).get_portfolio(1, TO, FROM)
        assert summary.time_range.from_date == FROM
        assert summary.time_range.to_date == TO
        assert summary.totals.contributions == 240000

    async def test_investor_without_accounts_gets_zeroed_summary(self, erp):
        summary = await PortfolioService(erp).get_portfolio(3, FROM, TO)

        assert summary.investments_count == 0
        assert summary.funds == []
        assert summary.totals.contributions == 0
        assert summary.totals.tvpi is None
        assert summary.insights.cashflow_irr is None
        assert summary.insights.irr_excludes_unrealized is True

    async def test_unknown_investor_raises(self, erp):
        with pytest.raises(InvestorNotFoundError):
            await PortfolioService(erp).get_portfolio(999, FROM, TO)

    async def test_upstream_failure_propagates(self, erp):
        erp.get_cashflows = AsyncMock(side_effect=ERPClientError("boom", path="/api/CashFlows"))
        with pytest.raises(ERPClientError):
            await PortfolioService(erp).get_portfolio(1, FROM, TO)

    async def test_fund_reachable_only_through_cashflows(self):
        erp = MockERPClient({
            "contacts": [{"contact_id": 7, "full_name": "Test Investor"}],
            "mappings": [{"contact_id": 7, "account_id": 70, "fund_id": None}],
            "cashFlows": [
                {"fund_id": 555, "account_id": 70, "transaction_date": "2023-01-01",
                 "transaction_amount": -1000, "transaction_type": "contribution"},
            ],
        })
        summary = await PortfolioService(erp).get_portfolio(7, FROM, TO)

        assert summary.investments_count == 1
        assert summary.funds[0].fund_name == "Fund 555"
        assert summary.funds[0].currency == "USD"
        assert summary.sector_breakdown["Unspecified"].positions == 1

    async def test_unmapped_types_reported(self):
        erp = MockERPClient({
            "contacts": [{"contact_id": 7, "full_name": "Test Investor"}],
            "mappings": [{"contact_id": 7, "account_id": 70, "fund_id": 1}],
            "cashFlows": [
                {"fund_id": 1, "account_id": 70, "transaction_date": "2023-01-01",
                 "transaction_amount": -10, "transaction_type": "Wire Fee"},
            ],
        })
        summary = await PortfolioService(erp).get_portfolio(7, FROM, TO)
        assert summary.warnings.unmapped_cashflow_types == ["wire fee"]


class TestSearchInvestors:
    async def test_matches_name_and_email(self, erp):
        service = PortfolioService(erp)

        by_name = await service.search_investors("levi")
        assert [r.id for r in by_name] == [1]
        by_email = await service.search_investors("AMIT.COHEN@")
        assert [r.email for r in by_email] == ["amit.cohen@example.com"]

    async def test_empty_query_lists_all(self, erp):
        assert len(await PortfolioService(erp).search_investors("")) == 3


class TestFundScope:
    def test_union_of_all_three_paths(self):
        scope = resolve_fund_scope(
            [11],
            [AccountContactMap(contact_id=1, account_id=11, fund_id=1)],
            [Commitment(fund_id=2, account_id=11), Commitment(fund_id=9, account_id=99)],
            [make_cashflow(fund_id=3, account_id=11), make_cashflow(fund_id=1, account_id=11)],
        )
        assert scope.fund_ids == [1, 2, 3]
        assert scope.from_commitments == [2]


class TestBreakdown:
    def test_fund_without_assets_counted_once_under_fund_label(self):
        kpis = [FundKpi(fund_id=1, fund_name="A", contributions=100, ending_nav=None)]
        funds = {1: Fund(fund_id=1, strategy="Credit")}
        breakdown = build_breakdown(kpis, funds, {}, sector_label)
        assert breakdown["Credit"].total_value == 100
        assert breakdown["Credit"].positions == 1

    def test_each_asset_receives_full_fund_bucket(self):
        kpis = [FundKpi(fund_id=1, fund_name="A", contributions=100, distributions=5, ending_nav=300)]
        assets = {1: [Asset(asset_id=1, fund_id=1, country="USA"), Asset(asset_id=2, fund_id=1)]}
        funds = {1: Fund(fund_id=1, region="EU")}
        breakdown = build_breakdown(kpis, funds, assets, country_label)
        assert breakdown["USA"].total_value == 300
        assert breakdown["EU"].total_value == 300
        assert breakdown["EU"].distribution == 5


class TestInsights:
    def test_recent_activity_window_and_limit(self):
        flows = normalize_cashflows([
            make_cashflow(on="2024-01-15", amount=-100),
            make_cashflow(on="2024-10-15", amount=-200),
            make_cashflow(on="2024-11-01", amount=50, type_="distribution"),
            make_cashflow(on="2024-12-01", amount=-300),
            make_cashflow(on="2024-12-20", amount=75, type_="dividend"),
            make_cashflow(on="2024-12-21", amount=-9, type_="fee"),
        ]).flows

        insights = build_insights(flows, {101: "BIF"}, date(2024, 1, 1), TO)
        recent = insights.recent_activity

        assert recent.contributions_90d == 500
        assert recent.distributions_90d == 125
        assert [f.date.isoformat() for f in recent.flows] == ["2024-12-20", "2024-12-01", "2024-11-01"]
        assert [f.amount for f in recent.flows] == [75, -300, 50]
        assert recent.flows[0].fund_name == "BIF"

    def test_window_clipped_to_range_start(self):
        flows = normalize_cashflows([
            make_cashflow(on="2024-10-01", amount=-200),
            make_cashflow(on="2024-12-01", amount=-300),
        ]).flows
        insights = build_insights(flows, {}, date(2024, 11, 15), TO)
        assert insights.recent_activity.contributions_90d == 300

    def test_cashflow_irr_excludes_nav(self):
        flows = normalize_cashflows([make_cashflow(on="2023-01-01", amount=-100)]).flows
        insights = build_insights(flows, {}, FROM, TO)
        assert insights.cashflow_irr is None
        assert insights.irr_excludes_unrealized is True
