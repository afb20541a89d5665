"""Insight relay - forwards agreement events to the automation webhook and
falls back to local stand-in analysis when it cannot be reached.

Each call returns exactly one result: the webhook's response or the local
fallback. Relay failures never propagate to the caller.
"""

from __future__ import annotations

from collections.abc import Callable, Mapping
from typing import Any

import structlog

from app.agents.fallback_engine import FallbackEngine
from app.clients.webhook_client import WebhookClient
from app.core.config import RelayConfig
from app.core.errors import RelayUnavailableError
from app.core.metrics import trade_hub_relay_requests_total
from app.schemas.v1.common import RelayEvent
from app.utils.clock import utc_now_iso

logger = structlog.get_logger(__name__)

COMPLIANCE_FIELDS = (
    "goodsDescription",
    "originCountry",
    "destinationCountry",
    "amount",
    "incoterms",
)
RISK_FIELDS = (
    "importer",
    "exporter",
    "amount",
    "goodsDescription",
    "originCountry",
    "destinationCountry",
)
ESG_FIELDS = ("goodsDescription", "originCountry", "destinationCountry", "amount")
RECOMMENDATION_FIELDS = ("goodsDescription", "amount", "originCountry", "destinationCountry")
MARKET_FIELDS = ("goodsDescription", "originCountry", "destinationCountry", "amount")


def _pick(agreement: Mapping[str, Any], fields: tuple[str, ...], with_id: bool = True) -> dict:
    payload: dict[str, Any] = {"agreementId": agreement.get("id")} if with_id else {}
    for field in fields:
        payload[field] = agreement.get(field)
    return payload


class InsightRelay:
    """Webhook delivery with deterministic local fallback."""

    def __init__(
        self,
        client: WebhookClient,
        fallback: FallbackEngine | None = None,
        config: RelayConfig | None = None,
    ):
        self.client = client
        self.fallback = fallback or FallbackEngine()
        self.config = config or client.config

    async def _dispatch(
        self,
        event: str,
        payload: dict[str, Any],
        local: Callable[[Mapping[str, Any]], dict[str, Any]],
    ) -> Any:
        try:
            result = await self.client.send(event, payload)
        except RelayUnavailableError as exc:
            if self.client.configured:
                logger.warning(
                    "Relay unavailable, using local fallback",
                    relay_event=event,
                    agreement_id=payload.get("agreementId"),
                    error=exc.message,
                )
            trade_hub_relay_requests_total.labels(event=event, outcome="fallback").inc()
            return local(payload)

        trade_hub_relay_requests_total.labels(event=event, outcome="remote").inc()
        return result

    async def validate_compliance(self, agreement: Mapping[str, Any]) -> Any:
        return await self._dispatch(
            RelayEvent.COMPLIANCE_VALIDATION,
            _pick(agreement, COMPLIANCE_FIELDS),
            self.fallback.compliance_validation,
        )

    async def assess_risk(self, agreement: Mapping[str, Any]) -> Any:
        return await self._dispatch(
            RelayEvent.RISK_ASSESSMENT,
            _pick(agreement, RISK_FIELDS),
            self.fallback.risk_assessment,
        )

    async def analyze_esg(self, agreement: Mapping[str, Any]) -> Any:
        return await self._dispatch(
            RelayEvent.ESG_ANALYSIS,
            _pick(agreement, ESG_FIELDS),
            self.fallback.esg_analysis,
        )

    async def generate_recommendations(self, agreement: Mapping[str, Any]) -> Any:
        return await self._dispatch(
            RelayEvent.TRADE_RECOMMENDATION,
            _pick(agreement, RECOMMENDATION_FIELDS),
            self.fallback.recommendations,
        )

    async def get_market_insights(self, agreement: Mapping[str, Any]) -> Any:
        return await self._dispatch(
            RelayEvent.MARKET_INSIGHTS,
            _pick(agreement, MARKET_FIELDS, with_id=False),
            self.fallback.market_insights,
        )

    async def generate_report(self, agreement_id: str, report_type: str = "comprehensive") -> Any:
        return await self._dispatch(
            "generate_report",
            {"agreementId": agreement_id, "reportType": report_type, "timestamp": utc_now_iso()},
            self.fallback.report,
        )

    async def process_trade_agreement(self, agreement: Mapping[str, Any]) -> dict[str, Any]:
        """Run all five analyses for one agreement."""
        logger.info("Relay processing agreement", agreement_id=agreement.get("id"))
        return {
            "agreementId": agreement.get("id"),
            "timestamp": utc_now_iso(),
            "compliance": await self.validate_compliance(agreement),
            "riskAssessment": await self.assess_risk(agreement),
            "esgAnalysis": await self.analyze_esg(agreement),
            "recommendations": await self.generate_recommendations(agreement),
            "marketInsights": await self.get_market_insights(agreement),
        }

    def get_status(self) -> dict[str, Any]:
        return {
            "enabled": self.config.enabled,
            "n8nConnected": self.client.configured,
            "openaiConnected": self.config.openai_configured,
            "lastActivity": utc_now_iso(),
            "health": "healthy",
        }

    async def test_connection(self) -> dict[str, Any]:
        if not self.client.configured:
            return {
                "success": True,
                "status": "fallback_mode",
                "message": "Using fallback AI functions",
            }
        return await self.client.probe()
