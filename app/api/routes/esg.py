"""ESG metrics routes."""

from fastapi import APIRouter

from app.core.dependencies import Agreements, Store
from app.core.errors import NotFoundError
from app.schemas.v1.records import ESGMetricsUpdateRequest

router = APIRouter(prefix="/esg-metrics", tags=["esg"])


@router.get("")
async def list_esg_metrics(store: Store):
    """All ESG metrics keyed by agreement id."""
    return await store.list_esg_metrics()


@router.post("")
async def update_esg_metrics(request: ESGMetricsUpdateRequest, service: Agreements):
    """Store metrics, recompute the score and trigger relay ESG analysis."""
    return await service.update_esg_metrics(request.agreement_id, request.metrics.to_record())


@router.get("/{agreement_id}")
async def get_esg_metrics(agreement_id: str, store: Store):
    metrics = await store.get_esg_metrics(agreement_id)
    if metrics is None:
        raise NotFoundError(f"ESG metrics not found: {agreement_id}")
    return metrics
