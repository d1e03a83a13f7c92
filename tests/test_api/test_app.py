"""
API Tests.

Covers:
- GET  /health
- Entry point binds the configured host and port
- POST /api/v1/events/report-updated
- POST /api/v1/attest/text (plain-text errors)
- Error middleware never leaks internals
"""

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from stableguard.api.app import create_app
from stableguard.oracle.codec import encode_event
from tests.conftest import make_report

TX_HASH = "0x" + "77" * 32


@pytest_asyncio.fixture
async def client(test_settings, ctx):
    app = create_app(test_settings, context_factory=lambda: ctx)
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as c:
        yield c


@pytest.mark.asyncio
async def test_health(client):
    response = await client.get("/health")
    assert response.status_code == 200
    assert response.json()["status"] == "ok"
    assert response.json()["service"] == "stableguard"
    assert response.json()["environment"] == "test"
    assert "X-Request-ID" in response.headers


@pytest.mark.asyncio
async def test_report_updated_event(client, webhook):
    topics, data = encode_event(make_report(ratio_bps=9_800, compliant=False))
    response = await client.post(
        "/api/v1/events/report-updated",
        json={"topics": topics, "data": data, "txHash": TX_HASH, "blockNumber": 7},
    )
    assert response.status_code == 200
    assert response.json()["status"].startswith("attestation_generated:USDC:0x")
    assert webhook.sent[0]["level"] == "EMERGENCY"


@pytest.mark.asyncio
async def test_report_updated_bad_payload_is_status_not_error(client):
    topics, _ = encode_event(make_report())
    response = await client.post(
        "/api/v1/events/report-updated",
        json={"topics": topics, "data": "0x1234", "txHash": TX_HASH},
    )
    assert response.status_code == 200
    assert response.json()["status"].startswith("error:schema_mismatch:")


@pytest.mark.asyncio
async def test_report_updated_missing_fields(client):
    response = await client.post("/api/v1/events/report-updated", json={"data": "0x"})
    assert response.status_code == 422


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "body,expected",
    [
        (b"", "Error: Empty request"),
        (b"not json", "Error: Invalid JSON"),
        (b'{"other": 1}', "Error: 'text' field is required"),
    ],
)
async def test_attest_text_errors(client, body, expected):
    response = await client.post("/api/v1/attest/text", content=body)
    assert response.status_code == 200
    assert response.headers["content-type"].startswith("text/plain")
    assert response.text == expected


@pytest.mark.asyncio
async def test_attest_text_returns_generated_text(client, generator):
    generator.text = "analysis result"
    response = await client.post("/api/v1/attest/text", json={"text": "New rule text"})
    assert response.text == "analysis result"


@pytest.mark.asyncio
async def test_unhandled_error_is_generic(test_settings):
    def broken_factory():
        raise RuntimeError("secret internal detail")

    app = create_app(test_settings, context_factory=broken_factory)
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as c:
        response = await c.post("/api/v1/attest/text", json={"text": "x"})

    assert response.status_code == 500
    body = response.json()
    assert "secret internal detail" not in response.text
    assert body["error_id"]
    assert body["status"] == 500


def test_run_binds_configured_host_and_port(monkeypatch):
    from stableguard.api import app as app_module

    calls = []
    monkeypatch.setattr(app_module.uvicorn, "run", lambda app, **kw: calls.append((app, kw)))
    monkeypatch.setattr(app_module.default_settings, "api_host", "127.0.0.1")
    monkeypatch.setattr(app_module.default_settings, "api_port", 9100)

    app_module.run()

    assert calls == [(app_module.app, {"host": "127.0.0.1", "port": 9100})]
