"""HTTP ERP provider: paged REST API with an in-process response cache."""

from __future__ import annotations

import time
from datetime import date
from typing import Any, TypeVar

import httpx
import structlog
from pydantic import ValidationError

from investor_analytics.core.errors import ERPClientError
from investor_analytics.modules.erp.base import ERP_EPOCH, ERPProvider
from investor_analytics.modules.erp.schemas import (
    AccountContactMap,
    Asset,
    Cashflow,
    Commitment,
    Contact,
    ERPRecord,
    FinancialRecord,
    Fund,
)

logger = structlog.get_logger()

RecordT = TypeVar("RecordT", bound=ERPRecord)

_SEARCH_LIMIT = 50


def _erp_date(value: date) -> str:
    """ERP path/query dates are YYYYMMDD."""
    return value.strftime("%Y%m%d")


class HttpERPClient(ERPProvider):
    """Authenticated async client for the ERP REST API.

    GET responses are cached per (path, params) for ``cache_ttl`` seconds so a
    single portfolio computation never fetches the same page twice.
    """

    name = "http"

    def __init__(
        self,
        base_url: str,
        api_key: str = "",
        client_id: str = "",
        timeout: float = 30.0,
        cache_ttl: int = 300,
        page_size: int = 200,
        max_pages: int = 50,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self._cache_ttl = cache_ttl
        self._page_size = page_size
        self._max_pages = max_pages
        self._cache: dict[str, tuple[Any, float]] = {}
        self._client = client or httpx.AsyncClient(
            base_url=base_url.rstrip("/"),
            timeout=timeout,
            headers=self._build_headers(api_key, client_id),
        )

    @staticmethod
    def _build_headers(api_key: str, client_id: str) -> dict[str, str]:
        headers: dict[str, str] = {}
        if api_key:
            headers["Authorization"] = api_key
        if client_id:
            headers["X-com-vantageir-subscriptions-clientid"] = client_id
        return headers

    # ── Transport ────────────────────────────────────────────────────────────

    async def _get(self, path: str, params: dict[str, Any] | None = None) -> Any:
        clean = {k: v for k, v in (params or {}).items() if v is not None}
        key = f"{path}:{sorted(clean.items())}"
        now = time.monotonic()
        cached = self._cache.get(key)
        if cached is not None and now - cached[1] < self._cache_ttl:
            return cached[0]

        start = time.monotonic()
        try:
            resp = await self._client.get(path, params=clean)
            logger.info(
                "erp.fetch",
                path=path,
                status=resp.status_code,
                ms=int((time.monotonic() - start) * 1000),
            )
            resp.raise_for_status()
            data = resp.json()
        except httpx.HTTPStatusError as exc:
            logger.error("erp.request_failed", path=path, status=exc.response.status_code)
            raise ERPClientError(
                f"ERP error {exc.response.status_code} on {path}: {exc.response.text[:200]}",
                path=path,
                status_code=exc.response.status_code,
            ) from exc
        except httpx.RequestError as exc:
            logger.error("erp.request_failed", path=path, error=str(exc))
            raise ERPClientError(f"ERP network error on {path}: {exc}", path=path) from exc
        except ValueError as exc:
            raise ERPClientError(f"ERP returned invalid JSON on {path}", path=path) from exc

        # Sweep expired entries so distinct range ends do not pile up
        self._cache = {k: v for k, v in self._cache.items() if now - v[1] < self._cache_ttl}
        self._cache[key] = (data, now)
        return data

    async def _fetch_paged(
        self,
        path: str,
        response_key: str,
        params: dict[str, Any] | None = None,
        per_page: int | None = None,
    ) -> list[Any]:
        """Follow ``page_context.has_more_page`` until exhausted or max_pages."""
        query = dict(params or {})
        query["per_page"] = per_page or self._page_size
        items: list[Any] = []
        page = 1
        while page <= self._max_pages:
            query["page"] = page
            data = await self._get(path, query)
            items.extend(data.get(response_key) or [])
            page_context = data.get("page_context") or {}
            if not page_context.get("has_more_page"):
                break
            page += 1
        else:
            logger.warning("erp.max_pages_reached", path=path, max_pages=self._max_pages)
        return items

    @staticmethod
    def _parse(model: type[RecordT], items: list[Any]) -> list[RecordT]:
        """Validate rows one by one; malformed rows are skipped, never fatal."""
        records: list[RecordT] = []
        skipped = 0
        for item in items:
            try:
                records.append(model.model_validate(item))
            except ValidationError:
                skipped += 1
        if skipped:
            logger.warning("erp.records_skipped", model=model.__name__, skipped=skipped)
        return records

    # ── Endpoints ────────────────────────────────────────────────────────────

    async def search_contacts(self, query: str) -> list[Contact]:
        items = await self._fetch_paged(f"/api/Contacts/GetbyDate/{_erp_date(ERP_EPOCH)}", "contacts")
        contacts = self._parse(Contact, items)
        if not query:
            return contacts[:_SEARCH_LIMIT]
        needle = query.lower()
        return [
            c for c in contacts
            if needle in f"{c.full_name} {c.reporting_email or ''}".lower()
        ][:_SEARCH_LIMIT]

    async def get_contact(self, contact_id: int) -> Contact | None:
        data = await self._get(f"/api/Contacts/Get/{contact_id}")
        contacts = self._parse(Contact, (data or {}).get("contacts") or [])
        return contacts[0] if contacts else None

    async def get_account_contact_mappings(self, contact_id: int | None = None) -> list[AccountContactMap]:
        items = await self._fetch_paged("/api/AccountContactMap/Get", "mappings")
        mappings = self._parse(AccountContactMap, items)
        if contact_id is None:
            return mappings
        return [m for m in mappings if m.contact_id == contact_id]

    async def get_commitments(
        self, fund_id: int | None = None, start_date: date | None = None
    ) -> list[Commitment]:
        start = _erp_date(start_date or ERP_EPOCH)
        items = await self._fetch_paged(f"/api/Commitment/GetbyDate/{start}", "commitments", per_page=500)
        commitments = self._parse(Commitment, items)
        if fund_id is None:
            return commitments
        return [c for c in commitments if c.fund_id == fund_id]

    async def get_cashflows(
        self, start_date: date, end_date: date, fund_id: int | None = None
    ) -> list[Cashflow]:
        if fund_id is not None:
            data = await self._get(f"/api/CashFlows/Get/{fund_id}")
        else:
            data = await self._get(f"/api/CashFlows/Get/{_erp_date(start_date)}&{_erp_date(end_date)}")
        flows = self._parse(Cashflow, (data or {}).get("cashFlows") or [])
        # The per-fund endpoint ignores dates
        return [cf for cf in flows if start_date <= cf.transaction_date <= end_date]

    async def get_financials(
        self,
        start_date: date,
        end_date: date,
        fund_id: int | None = None,
        report_frequency: str | None = None,
    ) -> list[FinancialRecord]:
        data = await self._get(
            "/api/Financials/Get",
            {
                "fund_id": fund_id,
                "startdate": _erp_date(start_date),
                "enddate": _erp_date(end_date),
                "report_frequency": report_frequency or "Quarterly",
            },
        )
        return self._parse(FinancialRecord, (data or {}).get("financials") or [])

    async def get_funds(self) -> list[Fund]:
        return self._parse(Fund, await self._fetch_paged("/api/Funds/Get", "funds"))

    async def get_assets(self) -> list[Asset]:
        return self._parse(Asset, await self._fetch_paged("/api/Assets/Get", "assets"))

    async def close(self) -> None:
        await self._client.aclose()
