"""Local stand-in analysis used when the automation webhook is unavailable.

Each function mirrors one relay event and applies simple threshold rules to
the same payload the webhook would have received.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from app.core.config import FallbackConfig
from app.utils.clock import utc_now, utc_now_iso
from app.utils.numbers import parse_amount


def _text(data: Mapping[str, Any], key: str) -> str:
    value = data.get(key)
    return value if isinstance(value, str) else ""


class FallbackEngine:
    """Deterministic threshold rules for the five relay events."""

    def __init__(self, config: FallbackConfig | None = None):
        self.config = config or FallbackConfig()

    def _is_preferred_origin(self, data: Mapping[str, Any]) -> bool:
        return _text(data, "originCountry") == self.config.preferred_origin_country

    def compliance_validation(self, data: Mapping[str, Any]) -> dict[str, Any]:
        cfg = self.config
        compliance: dict[str, Any] = {
            "isCompliant": True,
            "score": 85,
            "details": {
                "tariffCompliance": True,
                "originVerification": True,
                "regulatoryCompliance": True,
                "documentationComplete": True,
            },
            "recommendations": [
                "Ensure all required documents are uploaded",
                "Verify origin certificates are valid",
                "Check tariff classifications",
            ],
            "risks": [
                "Potential delays in customs clearance",
                "Documentation requirements may change",
            ],
        }

        if parse_amount(data.get("amount")) > cfg.high_value_compliance_amount:
            compliance["score"] -= cfg.compliance_penalty
            compliance["risks"].append("High-value transaction requires additional scrutiny")

        if (
            self._is_preferred_origin(data)
            and _text(data, "destinationCountry") == cfg.preferred_destination_country
        ):
            compliance["score"] += cfg.preferred_pair_bonus
            compliance["details"]["indiaUsTrade"] = True

        return compliance

    def risk_assessment(self, data: Mapping[str, Any]) -> dict[str, Any]:
        cfg = self.config
        risk: dict[str, Any] = {
            "overallRisk": "medium",
            "score": 65,
            "factors": {
                "countryRisk": "low",
                "counterpartyRisk": "medium",
                "marketRisk": "medium",
                "regulatoryRisk": "low",
            },
            "recommendations": [
                "Monitor exchange rate fluctuations",
                "Verify counterparty credentials",
                "Consider trade insurance",
            ],
            "mitigation": [
                "Use escrow services",
                "Implement payment terms",
                "Regular monitoring",
            ],
        }

        if parse_amount(data.get("amount")) > cfg.high_risk_amount:
            risk["overallRisk"] = "high"
            risk["score"] += cfg.high_risk_score_increment

        if self._is_preferred_origin(data):
            risk["factors"]["countryRisk"] = "low"
            risk["score"] -= cfg.preferred_origin_risk_discount

        return risk

    def esg_analysis(self, data: Mapping[str, Any]) -> dict[str, Any]:
        esg: dict[str, Any] = {
            "environmentalScore": 75,
            "socialScore": 80,
            "governanceScore": 85,
            "overallScore": 80,
            "recommendations": [
                "Consider carbon offset programs",
                "Implement sustainable packaging",
                "Verify labor standards compliance",
            ],
            "certifications": [
                "ISO 14001 (Environmental Management)",
                "Fair Trade Certification",
                "Organic Certification",
            ],
        }

        if "organic" in _text(data, "goodsDescription").lower():
            esg["environmentalScore"] += 10
            esg["overallScore"] += 5

        if self._is_preferred_origin(data):
            esg["socialScore"] += 5
            esg["governanceScore"] += 5

        return esg

    def recommendations(self, data: Mapping[str, Any]) -> dict[str, Any]:
        return {
            "tradeOptimization": [
                "Consider bulk shipping for cost reduction",
                "Explore alternative payment terms",
                "Negotiate better freight rates",
            ],
            "compliance": [
                "Ensure all regulatory requirements are met",
                "Maintain proper documentation",
                "Regular compliance audits",
            ],
            "riskManagement": [
                "Implement trade insurance",
                "Use secure payment methods",
                "Monitor market conditions",
            ],
            "sustainability": [
                "Choose eco-friendly packaging",
                "Optimize transportation routes",
                "Partner with sustainable suppliers",
            ],
        }

    def market_insights(self, data: Mapping[str, Any]) -> dict[str, Any]:
        return {
            "marketTrends": [
                "Growing demand for sustainable products",
                "Digital trade platforms gaining popularity",
                "Increased focus on supply chain transparency",
            ],
            "opportunities": [
                "Expand to emerging markets",
                "Develop digital trade capabilities",
                "Focus on ESG-compliant products",
            ],
            "challenges": [
                "Regulatory complexity",
                "Currency fluctuations",
                "Supply chain disruptions",
            ],
            "forecasts": {
                "shortTerm": "Stable growth expected",
                "mediumTerm": "Digital transformation accelerating",
                "longTerm": "Sustainability becoming key differentiator",
            },
        }

    def report(self, data: Mapping[str, Any]) -> dict[str, Any]:
        millis = int(utc_now().timestamp() * 1000)
        return {
            "reportId": f"report_{millis}",
            "agreementId": data.get("agreementId"),
            "reportType": data.get("reportType", "comprehensive"),
            "generatedAt": utc_now_iso(),
            "summary": "Trade agreement analysis report",
            "sections": {
                "compliance": "Compliance validation completed",
                "risk": "Risk assessment performed",
                "esg": "ESG analysis conducted",
                "recommendations": "Recommendations provided",
            },
            "status": "completed",
        }
