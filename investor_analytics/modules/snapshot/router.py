"""Investor snapshot API router (ETag / conditional GET)."""

from __future__ import annotations

from datetime import date

from fastapi import APIRouter, Depends, Header, Path, Query, Response
from fastapi.responses import JSONResponse

from investor_analytics.core.dependencies import get_snapshot_service
from investor_analytics.core.errors import ErrorResponse
from investor_analytics.modules.analytics.dates import resolve_range
from investor_analytics.modules.snapshot.schemas import NetView, SnapshotParams, SnapshotPayload
from investor_analytics.modules.snapshot.service import SnapshotService, is_not_modified

router = APIRouter(
    prefix="/investor",
    tags=["snapshot"],
    responses={404: {"model": ErrorResponse}, 502: {"model": ErrorResponse}},
)

CACHE_CONTROL = "public, max-age=60, stale-while-revalidate=300"


@router.get("/{contact_id}/snapshot", response_model=SnapshotPayload)
async def get_snapshot(
    contact_id: int = Path(..., gt=0),
    from_date: date | None = Query(None, alias="from"),
    to_date: date | None = Query(None, alias="to"),
    base: str = Query("USD", pattern=r"^[A-Za-z]{3}$"),
    lang: str | None = Query(None, max_length=16),
    preset: str | None = Query(None, max_length=32),
    net_view: NetView = Query("invested"),
    if_none_match: str | None = Header(None),
    service: SnapshotService = Depends(get_snapshot_service),
):
    start, end = resolve_range(from_date, to_date)
    params = SnapshotParams(
        from_date=start,
        to_date=end,
        base=base.upper(),
        lang=lang,
        preset=preset,
        net_view=net_view,
    )
    payload, etag = await service.get_snapshot(contact_id, params)

    headers = {"ETag": f'"{etag}"', "Cache-Control": CACHE_CONTROL}
    if is_not_modified(etag, if_none_match):
        return Response(status_code=304, headers=headers)
    return JSONResponse(content=payload, headers=headers)
