"""Unit tests for RecordStore."""

import json

import pytest

from app.core.config import StorageConfig
from app.core.errors import NotFoundError, PersistenceError, ValidationError
from app.persistence.record_store import RecordStore


@pytest.mark.asyncio
async def test_load_creates_empty_snapshot(storage_config: StorageConfig):
    store = RecordStore(storage_config)
    await store.load()

    assert store.loaded is True
    assert storage_config.snapshot_file.exists()
    assert await store.list_agreements() == []
    assert len(store.snapshot.list_backups()) == 1


@pytest.mark.asyncio
async def test_load_rejects_corrupt_snapshot(storage_config: StorageConfig):
    storage_config.data_path.mkdir(parents=True)
    storage_config.snapshot_file.write_text("corrupt", encoding="utf-8")

    store = RecordStore(storage_config)
    with pytest.raises(PersistenceError):
        await store.load()
    assert store.loaded is False
    assert storage_config.snapshot_file.read_text(encoding="utf-8") == "corrupt"


@pytest.mark.asyncio
async def test_load_fills_missing_collections(storage_config: StorageConfig):
    storage_config.data_path.mkdir(parents=True)
    storage_config.snapshot_file.write_text(json.dumps({"agreements": []}), encoding="utf-8")

    store = RecordStore(storage_config)
    await store.load()

    assert await store.list_participants() == []
    assert await store.get_audit_log() == []


@pytest.mark.asyncio
async def test_load_rejects_mistyped_collections(storage_config: StorageConfig):
    storage_config.data_path.mkdir(parents=True)
    storage_config.snapshot_file.write_text(
        json.dumps({"agreements": {}, "participants": []}), encoding="utf-8"
    )

    store = RecordStore(storage_config)
    with pytest.raises(PersistenceError) as exc_info:
        await store.load()

    assert exc_info.value.details["fields"] == ["agreements", "participants"]
    assert store.loaded is False


@pytest.mark.asyncio
async def test_load_trims_oversized_audit_log(storage_config: StorageConfig):
    entries = [
        {"id": str(index), "entityId": f"entity-{index}", "timestamp": "2025-01-01T00:00:00.000Z"}
        for index in range(1005)
    ]
    storage_config.data_path.mkdir(parents=True)
    storage_config.snapshot_file.write_text(json.dumps({"auditLog": entries}), encoding="utf-8")

    store = RecordStore(storage_config)
    await store.load()

    log = store.data["auditLog"]
    assert len(log) == 1000
    assert log[0]["entityId"] == "entity-5"
    assert log[-1]["entityId"] == "entity-1004"


@pytest.mark.asyncio
async def test_failed_save_keeps_change_in_memory(
    store: RecordStore, sample_agreement: dict, monkeypatch: pytest.MonkeyPatch
):
    def failing_write(data):
        raise PersistenceError("Failed to write snapshot")

    monkeypatch.setattr(store.snapshot, "write", failing_write)

    with pytest.raises(PersistenceError):
        await store.create_agreement(sample_agreement)

    agreements = await store.list_agreements()
    assert len(agreements) == 1
    assert agreements[0]["importer"] == sample_agreement["importer"]


@pytest.mark.asyncio
async def test_create_agreement_defaults(store: RecordStore, sample_agreement: dict):
    first = await store.create_agreement(sample_agreement)
    second = await store.create_agreement(sample_agreement)

    assert first["status"] == "pending"
    assert first["blockchainTx"] is None
    assert first["auditTrail"] == []
    assert first["createdAt"].endswith("Z")
    assert first["goodsDescription"] == sample_agreement["goodsDescription"]
    assert first["id"] != second["id"]


@pytest.mark.asyncio
async def test_create_agreement_ignores_client_controlled_fields(store: RecordStore):
    agreement = await store.create_agreement({"id": "forged", "status": "ai_processed"})
    assert agreement["id"] != "forged"
    assert agreement["status"] == "pending"


@pytest.mark.asyncio
async def test_create_agreement_rejects_bad_amount(store: RecordStore):
    with pytest.raises(ValidationError):
        await store.create_agreement({"amount": "-10"})
    with pytest.raises(ValidationError):
        await store.create_agreement({"amount": "ten thousand"})
    assert await store.list_agreements() == []


@pytest.mark.asyncio
async def test_update_agreement_merges_fields(store: RecordStore, sample_agreement: dict):
    created = await store.create_agreement(sample_agreement)

    updated = await store.update_agreement(
        created["id"], {"status": "ai_processed", "id": "other", "createdAt": "never"}
    )

    assert updated["status"] == "ai_processed"
    assert updated["id"] == created["id"]
    assert updated["createdAt"] == created["createdAt"]
    assert updated["importer"] == sample_agreement["importer"]
    assert "updatedAt" in updated


@pytest.mark.asyncio
async def test_update_agreement_replaces_result_blobs(store: RecordStore):
    created = await store.create_agreement({})
    await store.update_agreement(
        created["id"],
        {"aiAnalysis": {"risk": {"overallRisk": "high"}, "esg": {"score": 40}}},
    )

    updated = await store.update_agreement(
        created["id"],
        {"aiAnalysis": {"risk": {"overallRisk": "low"}}, "riskAssessment": {"score": 10}},
    )

    assert updated["aiAnalysis"] == {"risk": {"overallRisk": "low"}}
    assert updated["riskAssessment"] == {"score": 10}


@pytest.mark.asyncio
async def test_update_unknown_agreement_raises_not_found(store: RecordStore):
    with pytest.raises(NotFoundError):
        await store.update_agreement("missing", {"status": "x"})
    assert await store.get_audit_log() == []


@pytest.mark.asyncio
async def test_update_agreement_rejects_bad_amount(store: RecordStore):
    created = await store.create_agreement({"amount": "10"})
    with pytest.raises(ValidationError):
        await store.update_agreement(created["id"], {"amount": "-1"})
    assert (await store.get_agreement(created["id"]))["amount"] == "10"


@pytest.mark.asyncio
async def test_reads_return_copies(store: RecordStore, sample_agreement: dict):
    created = await store.create_agreement(sample_agreement)

    fetched = await store.get_agreement(created["id"])
    fetched["status"] = "tampered"
    listed = await store.list_agreements()
    listed[0]["importer"] = "tampered"

    stored = await store.get_agreement(created["id"])
    assert stored["status"] == "pending"
    assert stored["importer"] == sample_agreement["importer"]


@pytest.mark.asyncio
async def test_filters_by_status_and_participant(store: RecordStore):
    a = await store.create_agreement({"importer": "0xA", "exporter": "0xB"})
    await store.create_agreement({"importer": "0xC", "exporter": "0xA"})
    await store.create_agreement({"importer": "0xD", "exporter": "0xE"})
    await store.update_agreement(a["id"], {"status": "ai_processed"})

    assert len(await store.list_agreements_by_participant("0xA")) == 2
    by_status = await store.list_agreements_by_status("ai_processed")
    assert [r["id"] for r in by_status] == [a["id"]]


@pytest.mark.asyncio
async def test_reload_round_trip(storage_config: StorageConfig, sample_agreement: dict):
    store = RecordStore(storage_config)
    await store.load()
    await store.create_agreement(sample_agreement)
    await store.update_esg_metrics("agr-1", {"carbonFootprint": "90", "waterUsage": "40"})
    await store.register_participant("0xImporter", {"name": "Importer Ltd"})

    reloaded = RecordStore(storage_config)
    await reloaded.load()

    assert reloaded.data == store.data


@pytest.mark.asyncio
async def test_update_esg_metrics_scores_and_overwrites(store: RecordStore):
    first = await store.update_esg_metrics("agr-1", {"carbonFootprint": "90", "waterUsage": "40"})
    assert first["calculatedScore"] == 45

    second = await store.update_esg_metrics("agr-1", {"laborCompliance": "95"})
    assert second["calculatedScore"] == 20
    assert "carbonFootprint" not in second
    assert await store.get_esg_metrics("agr-1") == second


@pytest.mark.asyncio
async def test_update_esg_metrics_requires_agreement_id(store: RecordStore):
    with pytest.raises(ValidationError):
        await store.update_esg_metrics("", {"carbonFootprint": "90"})


@pytest.mark.asyncio
async def test_compliance_report_lifecycle(store: RecordStore):
    report = await store.create_compliance_report({"agreementId": "agr-1", "reportType": "tariff"})
    assert report["status"] == "pending"

    updated = await store.update_compliance_report(report["id"], {"status": "approved"})
    assert updated["status"] == "approved"
    assert updated["reportType"] == "tariff"

    with pytest.raises(NotFoundError):
        await store.update_compliance_report("missing", {"status": "approved"})


@pytest.mark.asyncio
async def test_participant_registration_forces_defaults(store: RecordStore):
    participant = await store.register_participant(
        "0xA", {"name": "Acme", "reputationScore": 99, "verificationStatus": "verified"}
    )

    assert participant["address"] == "0xA"
    assert participant["reputationScore"] == 0
    assert participant["verificationStatus"] == "pending"

    updated = await store.update_participant(
        "0xA", {"reputationScore": 80, "address": "0xB", "registeredAt": "never"}
    )
    assert updated["reputationScore"] == 80
    assert updated["address"] == "0xA"
    assert updated["registeredAt"] == participant["registeredAt"]


@pytest.mark.asyncio
async def test_participant_errors(store: RecordStore):
    with pytest.raises(ValidationError):
        await store.register_participant("", {})
    with pytest.raises(NotFoundError):
        await store.update_participant("0xUnknown", {"name": "x"})
    assert await store.get_participant("0xUnknown") is None


@pytest.mark.asyncio
async def test_store_document_hashes_content(store: RecordStore):
    document = await store.store_document(
        "agr-1", {"type": "invoice", "name": "inv.pdf", "content": "INVOICE 001"}
    )

    assert len(document["hash"]) == 64
    assert document["agreementId"] == "agr-1"
    assert await store.get_documents("agr-1") == [document]
    assert await store.get_documents("agr-2") == []

    entry = (await store.get_audit_log(1))[0]
    assert entry["action"] == "document_stored"
    assert entry["data"] == {"agreementId": "agr-1", "type": "invoice"}


@pytest.mark.asyncio
async def test_store_document_requires_content(store: RecordStore):
    with pytest.raises(ValidationError):
        await store.store_document("agr-1", {"type": "invoice"})


@pytest.mark.asyncio
async def test_ai_insights_newest_first_and_read_only(store: RecordStore):
    for index in range(3):
        await store.store_ai_insight({"type": "esg_analysis", "index": index})

    insights = await store.get_ai_insights(limit=2)
    assert [i["index"] for i in insights] == [2, 1]
    assert await store.get_ai_insights(limit=50) == await store.get_ai_insights(limit=50)


@pytest.mark.asyncio
async def test_audit_log_is_capped(store: RecordStore):
    for index in range(1001):
        store._add_audit_entry("entity_touched", f"entity-{index}", {})

    log = await store.get_audit_log(1000)

    assert len(log) == 1000
    assert log[0]["entityId"] == "entity-1000"
    assert log[-1]["entityId"] == "entity-1"
    assert "entity-0" not in {entry["entityId"] for entry in log}


@pytest.mark.asyncio
async def test_audit_entry_user_id(store: RecordStore):
    await store.create_agreement({"userId": "0xUser"})
    await store.create_agreement({})

    entries = await store.get_audit_log()
    assert [e["userId"] for e in entries] == ["system", "0xUser"]


@pytest.mark.asyncio
async def test_analytics_are_merged_without_audit(store: RecordStore):
    await store.update_analytics({"totals": {"agreements": 1}})
    analytics = await store.update_analytics({"totals": {"value": 10}})

    assert analytics["totals"] == {"agreements": 1, "value": 10}
    assert "lastUpdated" in analytics
    assert await store.get_audit_log() == []


@pytest.mark.asyncio
async def test_export_and_import(store: RecordStore, sample_agreement: dict):
    await store.create_agreement(sample_agreement)
    exported = await store.export_data()

    assert exported["version"] == "1.0.0"
    assert "exportDate" in exported
    assert len(exported["agreements"]) == 1

    result = await store.import_data({"participants": {"0xZ": {"address": "0xZ"}}, "bogus": 1})

    assert result == {"success": True, "message": "Data imported successfully"}
    assert await store.get_participant("0xZ") == {"address": "0xZ"}
    assert len(await store.list_agreements()) == 1
    assert "bogus" not in store.data


@pytest.mark.asyncio
async def test_import_rejects_wrong_types_and_empty_payloads(store: RecordStore):
    with pytest.raises(ValidationError):
        await store.import_data({"agreements": {"not": "a list"}})
    with pytest.raises(ValidationError):
        await store.import_data({"unknown": []})


@pytest.mark.asyncio
async def test_stats(store: RecordStore, sample_agreement: dict):
    await store.create_agreement(sample_agreement)
    await store.register_participant("0xA", {})

    stats = await store.get_stats()

    assert stats["totalAgreements"] == 1
    assert stats["totalParticipants"] == 1
    assert stats["totalDocuments"] == 0
    assert stats["totalAIInsights"] == 0
    assert stats["totalAuditLogs"] == 2
    assert stats["databaseSize"] > 0
