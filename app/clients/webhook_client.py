"""Automation webhook HTTP client.

Every outbound call is a POST of ``{"event": <name>, "data": <payload>}``.
Failures surface as ``RelayUnavailableError``; nothing is retried.
"""

from __future__ import annotations

import time
from typing import Any

import httpx
import structlog

from app.core.config import RelayConfig
from app.core.errors import RelayUnavailableError
from app.core.metrics import trade_hub_relay_latency_seconds
from app.core.tracing import outbound_headers
from app.utils.clock import utc_now_iso

logger = structlog.get_logger(__name__)

TEST_CONNECTION_EVENT = "test_connection"


class WebhookClient:
    """HTTP client for the automation webhook."""

    def __init__(self, config: RelayConfig):
        self.config = config
        self.webhook_url = config.webhook_url.strip()
        self.timeout = config.timeout_seconds
        self._client: httpx.AsyncClient | None = None

    @property
    def configured(self) -> bool:
        return bool(self.webhook_url)

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create async HTTP client."""
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=self.timeout)
        return self._client

    async def close(self) -> None:
        """Close the HTTP client."""
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    def _build_headers(self) -> dict[str, str]:
        headers = {"Content-Type": "application/json"}
        headers.update(outbound_headers())
        return headers

    async def _post(self, event: str, data: Any, timeout: float | None) -> httpx.Response:
        client = await self._get_client()
        return await client.post(
            self.webhook_url,
            json={"event": event, "data": data},
            headers=self._build_headers(),
            timeout=timeout if timeout is not None else self.timeout,
        )

    async def send(self, event: str, data: Any, timeout: float | None = None) -> Any:
        """Deliver an event and return the decoded JSON response body."""
        if not self.configured:
            raise RelayUnavailableError("Webhook URL not configured", event=event)

        start_time = time.perf_counter()
        try:
            response = await self._post(event, data, timeout)
        except httpx.TimeoutException as exc:
            raise RelayUnavailableError(
                f"Request timeout: {exc}", event=event
            ) from exc
        except (httpx.HTTPError, httpx.InvalidURL) as exc:
            raise RelayUnavailableError(f"Request error: {exc}", event=event) from exc
        finally:
            trade_hub_relay_latency_seconds.labels(event=event).observe(
                time.perf_counter() - start_time
            )

        if not 200 <= response.status_code < 300:
            raise RelayUnavailableError(
                f"HTTP {response.status_code}: {response.text[:200]}",
                event=event,
                details={"status_code": response.status_code},
            )

        try:
            return response.json()
        except ValueError as exc:
            raise RelayUnavailableError(
                "Webhook response is not valid JSON",
                event=event,
                details={"status_code": response.status_code},
            ) from exc

    async def probe(self) -> dict[str, Any]:
        """Send a ``test_connection`` event with the short test timeout."""
        try:
            response = await self._post(
                TEST_CONNECTION_EVENT,
                {"timestamp": utc_now_iso()},
                self.config.test_timeout_seconds,
            )
        except (httpx.HTTPError, httpx.InvalidURL) as exc:
            logger.warning("Webhook probe failed", error=str(exc))
            return {"success": False, "status": "error", "message": str(exc) or type(exc).__name__}

        ok = 200 <= response.status_code < 300
        return {
            "success": ok,
            "status": response.status_code,
            "message": "n8n connection successful" if ok else "n8n connection failed",
        }
