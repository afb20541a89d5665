"""Prometheus scrape endpoint, guarded by a shared token."""

import hmac

import structlog
from fastapi import APIRouter, HTTPException, Request, status
from fastapi.responses import Response
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest

from app.core.config import get_settings

router = APIRouter(tags=["monitoring"])
logger = structlog.get_logger(__name__)

METRICS_TOKEN_HEADER = "X-Metrics-Token"


def _authorize_scrape(request: Request) -> None:
    expected = get_settings().metrics_token
    if not expected:
        logger.error("Metrics scraped without METRICS_TOKEN configured")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Metrics token not configured",
        )

    provided = request.headers.get(METRICS_TOKEN_HEADER) or ""
    if not hmac.compare_digest(provided, expected):
        logger.warning(
            "Rejected metrics scrape",
            client_host=request.client.host if request.client else "unknown",
        )
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Invalid metrics token")


@router.get("/metrics")
async def get_metrics(request: Request) -> Response:
    _authorize_scrape(request)
    return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)
