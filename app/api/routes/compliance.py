"""Compliance report routes."""

from fastapi import APIRouter

from app.core.dependencies import Agreements, Store
from app.schemas.v1.agreements import ComplianceReportCreate, ComplianceReportUpdate

router = APIRouter(prefix="/compliance", tags=["compliance"])


@router.get("")
async def list_compliance_reports(store: Store):
    return await store.list_compliance_reports()


@router.post("", status_code=201)
async def create_compliance_report(request: ComplianceReportCreate, service: Agreements):
    """Create a report and validate the linked agreement through the relay."""
    return await service.create_compliance_report(request.to_record())


@router.put("/{report_id}")
async def update_compliance_report(report_id: str, request: ComplianceReportUpdate, store: Store):
    return await store.update_compliance_report(report_id, request.to_record())
