"""Health check routes."""

from fastapi import APIRouter

from app.core.dependencies import Relay, Store
from app.schemas.v1.health import HealthResponse, ServiceHealthResponse
from app.utils.clock import utc_now_iso

router = APIRouter(tags=["health"])


@router.get("/health", response_model=ServiceHealthResponse)
async def health_check(store: Store, relay: Relay):
    """Store statistics and relay status."""
    return ServiceHealthResponse(
        status="healthy" if store.loaded else "degraded",
        timestamp=utc_now_iso(),
        database=await store.get_stats(),
        ai=relay.get_status(),
    )


@router.get("/health/live", response_model=HealthResponse)
async def liveness_check():
    """Liveness check."""
    return HealthResponse(status="alive")
