"""Dependency injection type aliases."""

from typing import Annotated

from fastapi import Depends, Request

from app.persistence.record_store import RecordStore
from app.services.agreement_service import AgreementService
from app.services.analytics_service import AnalyticsService
from app.services.insight_relay import InsightRelay
from app.services.webhook_event_service import WebhookEventService


def get_store(request: Request) -> RecordStore:
    return request.app.state.store


def get_relay(request: Request) -> InsightRelay:
    return request.app.state.relay


def get_agreement_service(
    store: Annotated[RecordStore, Depends(get_store)],
    relay: Annotated[InsightRelay, Depends(get_relay)],
) -> AgreementService:
    return AgreementService(store, relay)


def get_webhook_event_service(
    store: Annotated[RecordStore, Depends(get_store)],
) -> WebhookEventService:
    return WebhookEventService(store)


def get_analytics_service(
    store: Annotated[RecordStore, Depends(get_store)],
) -> AnalyticsService:
    return AnalyticsService(store)


Store = Annotated[RecordStore, Depends(get_store)]
Relay = Annotated[InsightRelay, Depends(get_relay)]
Agreements = Annotated[AgreementService, Depends(get_agreement_service)]
WebhookEvents = Annotated[WebhookEventService, Depends(get_webhook_event_service)]
Analytics = Annotated[AnalyticsService, Depends(get_analytics_service)]

__all__ = [
    "Agreements",
    "Analytics",
    "Relay",
    "Store",
    "WebhookEvents",
    "get_agreement_service",
    "get_analytics_service",
    "get_relay",
    "get_store",
    "get_webhook_event_service",
]
