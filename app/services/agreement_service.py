"""Agreement service - record writes followed by relay analysis."""

from typing import Any

import structlog

from app.core.errors import NotFoundError
from app.persistence.record_store import RecordStore
from app.schemas.v1.common import AgreementStatus, InsightType
from app.services.insight_relay import InsightRelay
from app.utils.clock import utc_now_iso

logger = structlog.get_logger(__name__)


class AgreementService:
    """Orchestrates RecordStore writes with InsightRelay analysis."""

    def __init__(self, store: RecordStore, relay: InsightRelay):
        self.store = store
        self.relay = relay

    async def create_agreement(self, fields: dict[str, Any]) -> dict[str, Any]:
        """Create an agreement, analyse it and mark it ``ai_processed``."""
        agreement = await self.store.create_agreement(fields)

        analysis = await self.relay.process_trade_agreement(agreement)
        await self.store.store_ai_insight(
            {
                "type": InsightType.TRADE_AGREEMENT_ANALYSIS.value,
                "agreementId": agreement["id"],
                "analysis": analysis,
                "status": "completed",
            }
        )

        return await self.store.update_agreement(
            agreement["id"],
            {"aiAnalysis": analysis, "status": AgreementStatus.AI_PROCESSED.value},
        )

    async def process_agreement(self, agreement_id: str) -> dict[str, Any]:
        """Re-run the relay analysis for an existing agreement."""
        agreement = await self.store.get_agreement(agreement_id)
        if agreement is None:
            raise NotFoundError(f"Agreement not found: {agreement_id}")

        analysis = await self.relay.process_trade_agreement(agreement)
        await self.store.store_ai_insight(
            {
                "type": InsightType.TRADE_AGREEMENT_ANALYSIS.value,
                "agreementId": agreement_id,
                "analysis": analysis,
                "status": "completed",
            }
        )
        await self.store.update_agreement(
            agreement_id,
            {"aiAnalysis": analysis, "lastAIAnalysis": utc_now_iso()},
        )
        return analysis

    async def update_esg_metrics(
        self, agreement_id: str, metrics: dict[str, Any]
    ) -> dict[str, Any]:
        record = await self.store.update_esg_metrics(agreement_id, metrics)

        agreement = await self.store.get_agreement(agreement_id)
        if agreement is not None:
            esg_analysis = await self.relay.analyze_esg(agreement)
            await self.store.store_ai_insight(
                {
                    "type": InsightType.ESG_ANALYSIS.value,
                    "agreementId": agreement_id,
                    "analysis": esg_analysis,
                }
            )
        else:
            logger.info("ESG metrics stored for unknown agreement", agreement_id=agreement_id)

        return record

    async def create_compliance_report(self, fields: dict[str, Any]) -> dict[str, Any]:
        report = await self.store.create_compliance_report(fields)

        agreement_id = report.get("agreementId")
        agreement = await self.store.get_agreement(agreement_id) if agreement_id else None
        if agreement is not None:
            validation = await self.relay.validate_compliance(agreement)
            await self.store.store_ai_insight(
                {
                    "type": InsightType.COMPLIANCE_VALIDATION.value,
                    "agreementId": agreement_id,
                    "analysis": validation,
                }
            )

        return report

    async def generate_report(self, agreement_id: str, report_type: str) -> Any:
        return await self.relay.generate_report(agreement_id, report_type)
