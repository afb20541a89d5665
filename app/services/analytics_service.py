"""Trade analytics over a rolling time window."""

from collections import Counter
from datetime import timedelta
from typing import Any

from app.core.errors import ValidationError
from app.persistence.record_store import RecordStore
from app.schemas.v1.common import ComplianceStatus, TimeRange
from app.utils.clock import parse_iso, utc_now
from app.utils.numbers import parse_amount

TIME_RANGE_WINDOWS: dict[TimeRange, timedelta] = {
    TimeRange.WEEK: timedelta(days=7),
    TimeRange.MONTH: timedelta(days=30),
    TimeRange.QUARTER: timedelta(days=90),
    TimeRange.YEAR: timedelta(days=365),
}

TOP_PRODUCTS_LIMIT = 5
TOP_COUNTRIES_LIMIT = 10


def _product_name(agreement: dict[str, Any]) -> str:
    description = agreement.get("goodsDescription")
    if not isinstance(description, str):
        return ""
    return description.split("|")[0].strip()


class AnalyticsService:
    """Computes dashboard analytics from stored agreements and ESG metrics."""

    def __init__(self, store: RecordStore):
        self.store = store

    async def calculate(self, time_range: str = TimeRange.MONTH) -> dict[str, Any]:
        try:
            window = TIME_RANGE_WINDOWS[TimeRange(time_range)]
        except ValueError as exc:
            raise ValidationError(
                f"Unsupported time range: {time_range}",
                details={"allowed": [r.value for r in TimeRange]},
            ) from exc

        now = utc_now()
        agreements = []
        for agreement in await self.store.list_agreements():
            created_at = parse_iso(agreement.get("createdAt"))
            if created_at is not None and now - created_at <= window:
                agreements.append(agreement)

        total = len(agreements)
        compliant = sum(
            1 for a in agreements if a.get("complianceStatus") == ComplianceStatus.COMPLIANT
        )

        esg_scores = [
            metrics["calculatedScore"]
            for metrics in (await self.store.list_esg_metrics()).values()
            if metrics.get("calculatedScore")
        ]

        return {
            "timeRange": str(time_range),
            "totalAgreements": total,
            "totalValue": sum(parse_amount(a.get("amount")) for a in agreements),
            "complianceRate": (compliant / total) * 100 if total else 0,
            "averageESGScore": sum(esg_scores) / len(esg_scores) if esg_scores else 0,
            "tradeVolume": self._trade_volume(agreements),
            "topProducts": self._top_products(agreements),
            "countryStats": self._country_stats(agreements),
        }

    @staticmethod
    def _trade_volume(agreements: list[dict[str, Any]]) -> list[dict[str, Any]]:
        volume: dict[str, float] = {}
        for agreement in agreements:
            day = str(agreement["createdAt"])[:10]
            volume[day] = volume.get(day, 0.0) + parse_amount(agreement.get("amount"))
        return [{"date": day, "value": value} for day, value in sorted(volume.items())]

    @staticmethod
    def _top_products(agreements: list[dict[str, Any]]) -> list[dict[str, Any]]:
        counts = Counter(name for a in agreements if (name := _product_name(a)))
        return [
            {"product": product, "count": count}
            for product, count in counts.most_common(TOP_PRODUCTS_LIMIT)
        ]

    @staticmethod
    def _country_stats(agreements: list[dict[str, Any]]) -> list[dict[str, Any]]:
        stats: dict[str, dict[str, float]] = {}
        for agreement in agreements:
            amount = parse_amount(agreement.get("amount"))
            origin = agreement.get("originCountry")
            if isinstance(origin, str) and origin.strip():
                entry = stats.setdefault(origin.strip(), {"imports": 0.0, "exports": 0.0})
                entry["exports"] += amount
            destination = agreement.get("destinationCountry")
            if isinstance(destination, str) and destination.strip():
                entry = stats.setdefault(destination.strip(), {"imports": 0.0, "exports": 0.0})
                entry["imports"] += amount

        rows = [
            {
                "country": country,
                "totalValue": entry["imports"] + entry["exports"],
                "imports": entry["imports"],
                "exports": entry["exports"],
            }
            for country, entry in stats.items()
        ]
        rows.sort(key=lambda row: row["totalValue"], reverse=True)
        return rows[:TOP_COUNTRIES_LIMIT]
