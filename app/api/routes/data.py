"""Analytics, statistics, audit log and export/import routes."""

from typing import Any

from fastapi import APIRouter, Body, Query

from app.core.dependencies import Analytics, Store

router = APIRouter(tags=["data"])


@router.get("/analytics")
async def get_analytics(service: Analytics, time_range: str = Query(default="30d", alias="timeRange")):
    return await service.calculate(time_range)


@router.get("/stats")
async def get_stats(store: Store):
    return await store.get_stats()


@router.get("/audit-log")
async def get_audit_log(store: Store, limit: int = Query(default=100, ge=1, le=1000)):
    return await store.get_audit_log(limit)


@router.get("/export")
async def export_data(store: Store):
    return await store.export_data()


@router.post("/import")
async def import_data(store: Store, payload: dict[str, Any] = Body(...)):
    """Merge exported collections back into the store."""
    return await store.import_data(payload)
