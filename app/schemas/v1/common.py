"""Common schemas: enums and error responses."""

from enum import StrEnum
from typing import Any

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class AgreementStatus(StrEnum):
    PENDING = "pending"
    AI_PROCESSED = "ai_processed"


class ComplianceStatus(StrEnum):
    COMPLIANT = "compliant"
    NON_COMPLIANT = "non-compliant"


class RelayEvent(StrEnum):
    COMPLIANCE_VALIDATION = "compliance_validation"
    RISK_ASSESSMENT = "risk_assessment"
    ESG_ANALYSIS = "esg_analysis"
    TRADE_RECOMMENDATION = "trade_recommendation"
    MARKET_INSIGHTS = "market_insights"


class InsightType(StrEnum):
    TRADE_AGREEMENT_ANALYSIS = "trade_agreement_analysis"
    COMPLIANCE_VALIDATION = "compliance_validation"
    ESG_ANALYSIS = "esg_analysis"
    TRADE_RECOMMENDATION = "trade_recommendation"
    MARKET_INSIGHTS = "market_insights"


class TimeRange(StrEnum):
    WEEK = "7d"
    MONTH = "30d"
    QUARTER = "90d"
    YEAR = "1y"


class CamelModel(BaseModel):
    """Request body with camelCase wire names that keeps unknown fields."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="allow",
    )

    def to_record(self) -> dict[str, Any]:
        """Wire-shaped dict of the fields the client actually sent."""
        declared = self.model_fields_set & set(type(self).model_fields)
        record = self.model_dump(by_alias=True, include=declared)
        record.update(self.model_extra or {})
        return record
