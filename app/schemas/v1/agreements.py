"""Agreement and compliance report schemas."""

from typing import Any

from app.schemas.v1.common import CamelModel


class AgreementCreate(CamelModel):
    importer: str | None = None
    exporter: str | None = None
    goods_description: str | None = None
    amount: str | int | float | None = None
    origin_country: str | None = None
    destination_country: str | None = None
    incoterms: str | None = None


class AgreementUpdate(CamelModel):
    status: str | None = None
    amount: str | int | float | None = None
    ai_analysis: dict[str, Any] | None = None


class ComplianceReportCreate(CamelModel):
    agreement_id: str | None = None
    report_type: str | None = None


class ComplianceReportUpdate(CamelModel):
    status: str | None = None
