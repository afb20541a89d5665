"""Relay status, insights and inbound webhook routes."""

from fastapi import APIRouter, Query

from app.core.dependencies import Agreements, Relay, Store, WebhookEvents
from app.schemas.v1.ai import ReportRequest, WebhookAck, WebhookEvent
from app.utils.clock import utc_now_iso

router = APIRouter(tags=["ai"])


@router.get("/ai/status")
async def get_ai_status(relay: Relay):
    return relay.get_status()


@router.get("/ai/test")
async def test_ai_connection(relay: Relay):
    """Probe the automation webhook with a short timeout."""
    return await relay.test_connection()


@router.get("/ai/insights")
async def get_ai_insights(store: Store, limit: int = Query(default=50, ge=1, le=1000)):
    return await store.get_ai_insights(limit)


@router.post("/ai/process-agreement/{agreement_id}")
async def process_agreement(agreement_id: str, service: Agreements):
    return await service.process_agreement(agreement_id)


@router.post("/ai/report/{agreement_id}")
async def generate_report(
    agreement_id: str,
    service: Agreements,
    request: ReportRequest | None = None,
):
    report_type = request.report_type if request is not None else "comprehensive"
    return await service.generate_report(agreement_id, report_type)


@router.post("/ai-webhook", response_model=WebhookAck)
async def receive_webhook(request: WebhookEvent, events: WebhookEvents):
    """Accept ``{event, data}`` pushed by the automation workflow."""
    await events.handle(request.event, request.data)
    return WebhookAck(status="processed", timestamp=utc_now_iso())
