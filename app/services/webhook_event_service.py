"""Inbound automation webhook events."""

from collections.abc import Awaitable, Callable
from typing import Any

import structlog

from app.persistence.record_store import RecordStore
from app.schemas.v1.common import ComplianceStatus, InsightType, RelayEvent

logger = structlog.get_logger(__name__)


class WebhookEventService:
    """Applies results pushed back by the automation workflow."""

    def __init__(self, store: RecordStore):
        self.store = store
        self._handlers: dict[str, Callable[[dict[str, Any]], Awaitable[None]]] = {
            RelayEvent.COMPLIANCE_VALIDATION: self._handle_compliance_validation,
            RelayEvent.ESG_ANALYSIS: self._handle_esg_analysis,
            RelayEvent.RISK_ASSESSMENT: self._handle_risk_assessment,
            RelayEvent.TRADE_RECOMMENDATION: self._handle_trade_recommendation,
            RelayEvent.MARKET_INSIGHTS: self._handle_market_insights,
        }

    async def handle(self, event: str, data: dict[str, Any]) -> bool:
        """Dispatch one event. Returns False for unrecognized event names."""
        handler = self._handlers.get(event)
        if handler is None:
            logger.warning("Unknown webhook event", webhook_event=event)
            return False

        logger.info("Webhook event received", webhook_event=event, agreement_id=data.get("agreementId"))
        await handler(data)
        return True

    async def _handle_compliance_validation(self, data: dict[str, Any]) -> None:
        agreement_id = data.get("agreementId")
        result = data.get("complianceResult") or {}
        if not agreement_id or await self.store.get_agreement(agreement_id) is None:
            return

        status = (
            ComplianceStatus.COMPLIANT
            if isinstance(result, dict) and result.get("isCompliant")
            else ComplianceStatus.NON_COMPLIANT
        )
        await self.store.update_agreement(
            agreement_id,
            {"compliance": result, "complianceStatus": status.value},
        )

    async def _handle_esg_analysis(self, data: dict[str, Any]) -> None:
        await self.store.store_ai_insight(
            {
                "type": InsightType.ESG_ANALYSIS.value,
                "agreementId": data.get("agreementId"),
                "analysis": data.get("esgAnalysis"),
            }
        )

    async def _handle_risk_assessment(self, data: dict[str, Any]) -> None:
        agreement_id = data.get("agreementId")
        if not agreement_id or await self.store.get_agreement(agreement_id) is None:
            return
        await self.store.update_agreement(
            agreement_id, {"riskAssessment": data.get("riskAssessment")}
        )

    async def _handle_trade_recommendation(self, data: dict[str, Any]) -> None:
        await self.store.store_ai_insight(
            {
                "type": InsightType.TRADE_RECOMMENDATION.value,
                "agreementId": data.get("agreementId"),
                "recommendations": data.get("recommendations"),
            }
        )

    async def _handle_market_insights(self, data: dict[str, Any]) -> None:
        await self.store.store_ai_insight(
            {
                "type": InsightType.MARKET_INSIGHTS.value,
                "agreementId": data.get("agreementId"),
                "insights": data.get("marketInsights"),
            }
        )
