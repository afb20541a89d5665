"""ESG metrics, participant and document schemas."""

from typing import Any

from pydantic import Field

from app.schemas.v1.common import CamelModel


class ESGMetricsInput(CamelModel):
    carbon_footprint: str | int | float | None = None
    water_usage: str | int | float | None = None
    waste_generated: str | int | float | None = None
    renewable_energy: str | int | float | None = None
    labor_compliance: str | int | float | None = None
    certifications: str | None = None


class ESGMetricsUpdateRequest(CamelModel):
    agreement_id: str = Field(min_length=1)
    metrics: ESGMetricsInput = Field(default_factory=ESGMetricsInput)


class ParticipantCreate(CamelModel):
    address: str = Field(min_length=1)
    name: str | None = None
    country: str | None = None
    role: str | None = None


class ParticipantUpdate(CamelModel):
    reputation_score: int | float | None = None
    verification_status: str | None = None


class DocumentCreate(CamelModel):
    agreement_id: str = Field(min_length=1)
    type: str | None = None
    name: str | None = None
    content: Any = None
