"""Shared test fixtures for the investor analytics test suite."""

from collections.abc import AsyncGenerator
from datetime import date

import pytest
from httpx import ASGITransport, AsyncClient

from investor_analytics.main import app
from investor_analytics.modules.erp.mock_client import MockERPClient
from investor_analytics.modules.erp.schemas import Cashflow, FinancialRecord
from investor_analytics.services.snapshot_cache import MemorySnapshotCache


@pytest.fixture
def anyio_backend() -> str:
    return "asyncio"


@pytest.fixture
def erp() -> MockERPClient:
    return MockERPClient()


@pytest.fixture
def snapshot_cache() -> MemorySnapshotCache:
    return MemorySnapshotCache()


@pytest.fixture
async def client(erp: MockERPClient, snapshot_cache: MemorySnapshotCache) -> AsyncGenerator[AsyncClient, None]:
    # ASGITransport does not run the lifespan; wire the collaborators directly
    app.state.erp = erp
    app.state.snapshot_cache = snapshot_cache
    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as ac:
        yield ac


# ── Record builders ───────────────────────────────────────────────────────


def make_cashflow(
    fund_id: int = 101,
    account_id: int = 11,
    on: str = "2024-01-01",
    amount: float = -1000.0,
    type_: str | None = "contribution",
    usd: float | None = None,
) -> Cashflow:
    return Cashflow(
        fund_id=fund_id,
        account_id=account_id,
        transaction_date=date.fromisoformat(on),
        transaction_amount=amount,
        transaction_amount_usd=usd,
        transaction_type=type_,
    )


def make_financial(fund_id: int = 101, on: str = "2024-09-30", **metrics) -> FinancialRecord:
    return FinancialRecord(fund_id=fund_id, report_date=date.fromisoformat(on), financialMetrics=metrics)
