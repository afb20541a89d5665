"""Unit tests for WebhookClient."""

from __future__ import annotations

import httpx
import pytest

from app.clients.webhook_client import WebhookClient
from app.core.config import RelayConfig
from app.core.errors import RelayUnavailableError
from app.core.tracing import begin_request, end_request

WEBHOOK_URL = "https://n8n.test/webhook/trade"


class _FakeResponse:
    def __init__(self, status_code: int, json_data=None, text: str = "", invalid_json: bool = False):
        self.status_code = status_code
        self._json_data = json_data if json_data is not None else {}
        self._invalid_json = invalid_json
        self.text = text

    def json(self):
        if self._invalid_json:
            raise ValueError("not json")
        return self._json_data


class _FakeClient:
    def __init__(self, response: _FakeResponse | None = None, error: Exception | None = None):
        self._response = response
        self._error = error
        self.calls: list[dict] = []

    async def post(self, url: str, json: dict, headers: dict, timeout: float):
        self.calls.append({"url": url, "json": json, "headers": headers, "timeout": timeout})
        if self._error is not None:
            raise self._error
        return self._response


def _client(monkeypatch: pytest.MonkeyPatch, fake: _FakeClient, url: str = WEBHOOK_URL):
    client = WebhookClient(RelayConfig(webhook_url=url))

    async def fake_get_client() -> _FakeClient:
        return fake

    monkeypatch.setattr(client, "_get_client", fake_get_client)
    return client


@pytest.mark.asyncio
async def test_send_posts_event_envelope(monkeypatch: pytest.MonkeyPatch):
    fake = _FakeClient(_FakeResponse(200, {"score": 91}))
    client = _client(monkeypatch, fake)

    result = await client.send("risk_assessment", {"agreementId": "agr-1"})

    assert result == {"score": 91}
    assert fake.calls[0]["url"] == WEBHOOK_URL
    assert fake.calls[0]["json"] == {"event": "risk_assessment", "data": {"agreementId": "agr-1"}}
    assert fake.calls[0]["timeout"] == 30.0


@pytest.mark.asyncio
async def test_send_forwards_tracing_headers(monkeypatch: pytest.MonkeyPatch):
    fake = _FakeClient(_FakeResponse(200, {}))
    client = _client(monkeypatch, fake)

    begin_request("req-abc", "00-trace-span-01")
    try:
        await client.send("esg_analysis", {})
    finally:
        end_request()

    headers = fake.calls[0]["headers"]
    assert headers["X-Request-ID"] == "req-abc"
    assert headers["traceparent"] == "00-trace-span-01"
    assert headers["Content-Type"] == "application/json"


@pytest.mark.asyncio
async def test_send_unconfigured_raises(monkeypatch: pytest.MonkeyPatch):
    fake = _FakeClient(_FakeResponse(200, {}))
    client = _client(monkeypatch, fake, url="")

    with pytest.raises(RelayUnavailableError) as exc_info:
        await client.send("market_insights", {})

    assert exc_info.value.event == "market_insights"
    assert fake.calls == []


@pytest.mark.asyncio
async def test_send_non_2xx_raises(monkeypatch: pytest.MonkeyPatch):
    client = _client(monkeypatch, _FakeClient(_FakeResponse(503, text="maintenance")))

    with pytest.raises(RelayUnavailableError) as exc_info:
        await client.send("compliance_validation", {})

    assert exc_info.value.details["status_code"] == 503


@pytest.mark.asyncio
async def test_send_timeout_raises(monkeypatch: pytest.MonkeyPatch):
    client = _client(monkeypatch, _FakeClient(error=httpx.ReadTimeout("slow")))

    with pytest.raises(RelayUnavailableError, match="timeout"):
        await client.send("risk_assessment", {})


@pytest.mark.asyncio
async def test_send_connection_error_raises(monkeypatch: pytest.MonkeyPatch):
    client = _client(monkeypatch, _FakeClient(error=httpx.ConnectError("refused")))

    with pytest.raises(RelayUnavailableError, match="Request error"):
        await client.send("risk_assessment", {})


@pytest.mark.asyncio
async def test_send_invalid_json_raises(monkeypatch: pytest.MonkeyPatch):
    client = _client(monkeypatch, _FakeClient(_FakeResponse(200, invalid_json=True)))

    with pytest.raises(RelayUnavailableError, match="not valid JSON"):
        await client.send("risk_assessment", {})


@pytest.mark.asyncio
async def test_probe_success(monkeypatch: pytest.MonkeyPatch):
    fake = _FakeClient(_FakeResponse(200, {}))
    client = _client(monkeypatch, fake)

    result = await client.probe()

    assert result == {"success": True, "status": 200, "message": "n8n connection successful"}
    assert fake.calls[0]["json"]["event"] == "test_connection"
    assert fake.calls[0]["timeout"] == 5.0


@pytest.mark.asyncio
async def test_probe_failure_status(monkeypatch: pytest.MonkeyPatch):
    client = _client(monkeypatch, _FakeClient(_FakeResponse(500)))

    result = await client.probe()

    assert result["success"] is False
    assert result["status"] == 500


@pytest.mark.asyncio
async def test_probe_transport_error(monkeypatch: pytest.MonkeyPatch):
    client = _client(monkeypatch, _FakeClient(error=httpx.ConnectError("refused")))

    result = await client.probe()

    assert result["success"] is False
    assert result["status"] == "error"


@pytest.mark.asyncio
async def test_close_is_idempotent():
    client = WebhookClient(RelayConfig(webhook_url=WEBHOOK_URL))
    await client._get_client()
    await client.close()
    await client.close()
    assert client._client is None


@pytest.mark.asyncio
@pytest.mark.parametrize("url", ["http://n8n.local:56789a/hook", "http://[::1/hook"])
async def test_send_malformed_url_raises_relay_error(url: str):
    client = WebhookClient(RelayConfig(webhook_url=url))

    with pytest.raises(RelayUnavailableError, match="Request error"):
        await client.send("risk_assessment", {"agreementId": "agr-1"})

    await client.close()


@pytest.mark.asyncio
@pytest.mark.parametrize("url", ["http://n8n.local:56789a/hook", "http://[::1/hook"])
async def test_probe_malformed_url_reports_failure(url: str):
    client = WebhookClient(RelayConfig(webhook_url=url))

    result = await client.probe()

    assert result["success"] is False
    assert result["status"] == "error"
    await client.close()
