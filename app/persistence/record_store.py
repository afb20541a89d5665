"""Record store - agreements, ESG metrics, compliance, participants, documents,
insights, analytics and the audit log, persisted as one JSON snapshot.

A single store instance is the only writer. Every mutation updates the
in-memory aggregate first and then rewrites the whole snapshot, so a
``PersistenceError`` from ``save()`` means memory is ahead of disk.
"""

from __future__ import annotations

import copy
import json
from collections.abc import Mapping
from typing import Any

import structlog

from app.agents.esg_scorer import calculate_esg_score
from app.core.config import StorageConfig
from app.core.errors import NotFoundError, PersistenceError, ValidationError
from app.core.metrics import trade_hub_records_created_total
from app.persistence.base import merge_fields, newest_first
from app.persistence.snapshot import SnapshotFile
from app.utils.clock import utc_now_iso
from app.utils.hashing import content_digest, generate_id
from app.utils.numbers import is_valid_amount

logger = structlog.get_logger(__name__)

EXPORT_VERSION = "1.0.0"

# Aggregate key -> expected JSON container type.
COLLECTION_TYPES: dict[str, type] = {
    "agreements": list,
    "esgMetrics": dict,
    "complianceReports": list,
    "participants": dict,
    "documents": dict,
    "aiInsights": list,
    "analytics": dict,
    "auditLog": list,
}

IMMUTABLE_RECORD_FIELDS = ("id", "createdAt")

# Server-computed result blobs; a new result replaces the previous one.
RESULT_FIELDS = ("aiAnalysis", "compliance", "riskAssessment")


def mistyped_collections(payload: Mapping[str, Any]) -> list[str]:
    """Known collection keys present in ``payload`` with the wrong container type."""
    return [
        key
        for key, expected in COLLECTION_TYPES.items()
        if key in payload and not isinstance(payload[key], expected)
    ]


def empty_aggregate() -> dict[str, Any]:
    return {
        "agreements": [],
        "esgMetrics": {},
        "complianceReports": [],
        "participants": {},
        "documents": {},
        "aiInsights": [],
        "analytics": {},
        "auditLog": [],
        "lastUpdated": utc_now_iso(),
    }


class RecordStore:
    """File-backed CRUD over the trade aggregate."""

    def __init__(self, config: StorageConfig, snapshot: SnapshotFile | None = None):
        self.config = config
        self.snapshot = snapshot or SnapshotFile(
            config.snapshot_file,
            config.backup_path,
            retention=config.backup_retention,
        )
        self.data: dict[str, Any] = empty_aggregate()
        self.loaded = False

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    async def load(self) -> None:
        """Load the snapshot from disk, or persist an empty one."""
        self.snapshot.ensure_directories()
        stored = self.snapshot.read()
        if stored is None:
            logger.info("Creating new snapshot", path=str(self.snapshot.snapshot_file))
            self.data = empty_aggregate()
            await self.save()
        else:
            mistyped = mistyped_collections(stored)
            if mistyped:
                raise PersistenceError(
                    "Snapshot collections have the wrong type",
                    details={"path": str(self.snapshot.snapshot_file), "fields": mistyped},
                )
            self.data = {**empty_aggregate(), **stored}
            self.data["auditLog"] = self.data["auditLog"][-self.config.audit_log_limit :]
            logger.info(
                "Snapshot loaded",
                path=str(self.snapshot.snapshot_file),
                agreements=len(self.data["agreements"]),
            )
        self.loaded = True

    async def save(self) -> None:
        """Stamp ``lastUpdated`` and rewrite the snapshot plus a backup."""
        self.data["lastUpdated"] = utc_now_iso()
        self.snapshot.write(self.data)

    # ------------------------------------------------------------------
    # Agreements
    # ------------------------------------------------------------------

    async def create_agreement(self, fields: Mapping[str, Any]) -> dict[str, Any]:
        if "amount" in fields and not is_valid_amount(fields["amount"]):
            raise ValidationError(
                "Invalid agreement amount",
                details={"amount": fields["amount"]},
            )

        agreement = {
            **copy.deepcopy(dict(fields)),
            "id": generate_id(),
            "createdAt": utc_now_iso(),
            "status": "pending",
            "blockchainTx": None,
            "auditTrail": [],
        }
        self.data["agreements"].append(agreement)
        self._add_audit_entry("agreement_created", agreement["id"], fields)
        await self.save()

        trade_hub_records_created_total.labels(entity="agreement").inc()
        logger.info("Agreement created", agreement_id=agreement["id"])
        return copy.deepcopy(agreement)

    def _agreement_index(self, agreement_id: str) -> int:
        for index, agreement in enumerate(self.data["agreements"]):
            if agreement.get("id") == agreement_id:
                return index
        raise NotFoundError(f"Agreement not found: {agreement_id}")

    async def update_agreement(self, agreement_id: str, patch: Mapping[str, Any]) -> dict[str, Any]:
        index = self._agreement_index(agreement_id)
        if "amount" in patch and not is_valid_amount(patch["amount"]):
            raise ValidationError("Invalid agreement amount", details={"amount": patch["amount"]})

        updated = merge_fields(
            self.data["agreements"][index],
            patch,
            protected=IMMUTABLE_RECORD_FIELDS,
            replace=RESULT_FIELDS,
        )
        updated["updatedAt"] = utc_now_iso()
        self.data["agreements"][index] = updated

        self._add_audit_entry("agreement_updated", agreement_id, patch)
        await self.save()
        return copy.deepcopy(updated)

    async def get_agreement(self, agreement_id: str) -> dict[str, Any] | None:
        for agreement in self.data["agreements"]:
            if agreement.get("id") == agreement_id:
                return copy.deepcopy(agreement)
        return None

    async def list_agreements(self) -> list[dict[str, Any]]:
        return copy.deepcopy(self.data["agreements"])

    async def list_agreements_by_status(self, status: str) -> list[dict[str, Any]]:
        return [copy.deepcopy(a) for a in self.data["agreements"] if a.get("status") == status]

    async def list_agreements_by_participant(self, address: str) -> list[dict[str, Any]]:
        return [
            copy.deepcopy(a)
            for a in self.data["agreements"]
            if a.get("importer") == address or a.get("exporter") == address
        ]

    # ------------------------------------------------------------------
    # ESG metrics
    # ------------------------------------------------------------------

    async def update_esg_metrics(
        self, agreement_id: str, metrics: Mapping[str, Any]
    ) -> dict[str, Any]:
        if not agreement_id:
            raise ValidationError("agreementId is required")

        record = {
            **copy.deepcopy(dict(metrics)),
            "updatedAt": utc_now_iso(),
            "calculatedScore": calculate_esg_score(metrics),
        }
        self.data["esgMetrics"][agreement_id] = record

        self._add_audit_entry("esg_updated", agreement_id, metrics)
        await self.save()

        logger.info(
            "ESG metrics updated",
            agreement_id=agreement_id,
            calculated_score=record["calculatedScore"],
        )
        return copy.deepcopy(record)

    async def get_esg_metrics(self, agreement_id: str) -> dict[str, Any] | None:
        record = self.data["esgMetrics"].get(agreement_id)
        return copy.deepcopy(record) if record is not None else None

    async def list_esg_metrics(self) -> dict[str, dict[str, Any]]:
        return copy.deepcopy(self.data["esgMetrics"])

    # ------------------------------------------------------------------
    # Compliance reports
    # ------------------------------------------------------------------

    async def create_compliance_report(self, fields: Mapping[str, Any]) -> dict[str, Any]:
        report = {
            **copy.deepcopy(dict(fields)),
            "id": generate_id(),
            "createdAt": utc_now_iso(),
            "status": "pending",
        }
        self.data["complianceReports"].append(report)
        self._add_audit_entry("compliance_report_created", report["id"], fields)
        await self.save()

        trade_hub_records_created_total.labels(entity="compliance_report").inc()
        return copy.deepcopy(report)

    async def update_compliance_report(
        self, report_id: str, patch: Mapping[str, Any]
    ) -> dict[str, Any]:
        reports = self.data["complianceReports"]
        for index, report in enumerate(reports):
            if report.get("id") == report_id:
                break
        else:
            raise NotFoundError(f"Compliance report not found: {report_id}")

        updated = merge_fields(reports[index], patch, protected=IMMUTABLE_RECORD_FIELDS)
        updated["updatedAt"] = utc_now_iso()
        reports[index] = updated

        self._add_audit_entry("compliance_report_updated", report_id, patch)
        await self.save()
        return copy.deepcopy(updated)

    async def list_compliance_reports(self) -> list[dict[str, Any]]:
        return copy.deepcopy(self.data["complianceReports"])

    # ------------------------------------------------------------------
    # Participants
    # ------------------------------------------------------------------

    async def register_participant(
        self, address: str, fields: Mapping[str, Any]
    ) -> dict[str, Any]:
        if not address:
            raise ValidationError("Participant address is required")

        participant = {
            "address": address,
            **copy.deepcopy(dict(fields)),
            "registeredAt": utc_now_iso(),
            "reputationScore": 0,
            "verificationStatus": "pending",
        }
        participant["address"] = address
        self.data["participants"][address] = participant

        self._add_audit_entry("participant_registered", address, fields)
        await self.save()

        trade_hub_records_created_total.labels(entity="participant").inc()
        return copy.deepcopy(participant)

    async def update_participant(self, address: str, patch: Mapping[str, Any]) -> dict[str, Any]:
        existing = self.data["participants"].get(address)
        if existing is None:
            raise NotFoundError(f"Participant not found: {address}")

        updated = merge_fields(existing, patch, protected=("address", "registeredAt"))
        updated["updatedAt"] = utc_now_iso()
        self.data["participants"][address] = updated

        self._add_audit_entry("participant_updated", address, patch)
        await self.save()
        return copy.deepcopy(updated)

    async def get_participant(self, address: str) -> dict[str, Any] | None:
        participant = self.data["participants"].get(address)
        return copy.deepcopy(participant) if participant is not None else None

    async def list_participants(self) -> list[dict[str, Any]]:
        return copy.deepcopy(list(self.data["participants"].values()))

    # ------------------------------------------------------------------
    # Documents
    # ------------------------------------------------------------------

    async def store_document(
        self, agreement_id: str, document: Mapping[str, Any]
    ) -> dict[str, Any]:
        if document.get("content") is None:
            raise ValidationError("Document content is required")

        document_id = generate_id()
        record = {
            **copy.deepcopy(dict(document)),
            "id": document_id,
            "agreementId": agreement_id,
            "storedAt": utc_now_iso(),
            "hash": content_digest(document["content"]),
        }
        self.data["documents"][document_id] = record

        self._add_audit_entry(
            "document_stored",
            document_id,
            {"agreementId": agreement_id, "type": document.get("type")},
        )
        await self.save()

        trade_hub_records_created_total.labels(entity="document").inc()
        return copy.deepcopy(record)

    async def get_documents(self, agreement_id: str) -> list[dict[str, Any]]:
        return [
            copy.deepcopy(d)
            for d in self.data["documents"].values()
            if d.get("agreementId") == agreement_id
        ]

    # ------------------------------------------------------------------
    # AI insights
    # ------------------------------------------------------------------

    async def store_ai_insight(self, insight: Mapping[str, Any]) -> dict[str, Any]:
        record = {
            **copy.deepcopy(dict(insight)),
            "id": generate_id(),
            "createdAt": utc_now_iso(),
        }
        self.data["aiInsights"].append(record)

        self._add_audit_entry("ai_insight_created", record["id"], insight)
        await self.save()

        trade_hub_records_created_total.labels(entity="ai_insight").inc()
        return copy.deepcopy(record)

    async def get_ai_insights(self, limit: int = 50) -> list[dict[str, Any]]:
        return newest_first(self.data["aiInsights"], "createdAt", limit)

    # ------------------------------------------------------------------
    # Analytics
    # ------------------------------------------------------------------

    async def update_analytics(self, values: Mapping[str, Any]) -> dict[str, Any]:
        analytics = merge_fields(self.data["analytics"], values)
        analytics["lastUpdated"] = utc_now_iso()
        self.data["analytics"] = analytics
        await self.save()
        return copy.deepcopy(analytics)

    async def get_analytics(self) -> dict[str, Any]:
        return copy.deepcopy(self.data["analytics"])

    # ------------------------------------------------------------------
    # Audit log
    # ------------------------------------------------------------------

    def _add_audit_entry(self, action: str, entity_id: str, data: Mapping[str, Any]) -> None:
        entry = {
            "id": generate_id(),
            "action": action,
            "entityId": entity_id,
            "data": copy.deepcopy(dict(data)),
            "timestamp": utc_now_iso(),
            "userId": data.get("userId") or "system",
        }
        audit_log = self.data["auditLog"]
        audit_log.append(entry)
        overflow = len(audit_log) - self.config.audit_log_limit
        if overflow > 0:
            del audit_log[:overflow]

    async def get_audit_log(self, limit: int = 100) -> list[dict[str, Any]]:
        return newest_first(self.data["auditLog"], "timestamp", limit)

    # ------------------------------------------------------------------
    # Export / import / stats
    # ------------------------------------------------------------------

    async def export_data(self) -> dict[str, Any]:
        return {
            **copy.deepcopy(self.data),
            "exportDate": utc_now_iso(),
            "version": EXPORT_VERSION,
        }

    async def import_data(self, payload: Mapping[str, Any]) -> dict[str, Any]:
        mistyped = mistyped_collections(payload)
        if mistyped:
            key = mistyped[0]
            raise ValidationError(
                f"Import field '{key}' must be a JSON {COLLECTION_TYPES[key].__name__}",
                details={"field": key},
            )
        incoming = {
            key: copy.deepcopy(payload[key]) for key in COLLECTION_TYPES if key in payload
        }

        if not incoming:
            raise ValidationError("Import payload contains no known collections")

        if "auditLog" in incoming:
            incoming["auditLog"] = incoming["auditLog"][-self.config.audit_log_limit :]

        self.data = {**self.data, **incoming}
        await self.save()

        logger.info("Data imported", collections=sorted(incoming))
        return {"success": True, "message": "Data imported successfully"}

    async def get_stats(self) -> dict[str, Any]:
        return {
            "totalAgreements": len(self.data["agreements"]),
            "totalParticipants": len(self.data["participants"]),
            "totalDocuments": len(self.data["documents"]),
            "totalAIInsights": len(self.data["aiInsights"]),
            "totalAuditLogs": len(self.data["auditLog"]),
            "lastUpdated": self.data["lastUpdated"],
            "databaseSize": len(json.dumps(self.data, separators=(",", ":"))),
        }
