"""Relay and inbound webhook schemas."""

from typing import Any

from pydantic import BaseModel, Field

from app.schemas.v1.common import CamelModel


class WebhookEvent(BaseModel):
    event: str
    data: dict[str, Any] = Field(default_factory=dict)


class WebhookAck(BaseModel):
    status: str
    timestamp: str


class ReportRequest(CamelModel):
    report_type: str = "comprehensive"
