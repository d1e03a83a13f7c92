"""
Test fixtures for StableGuard tests.

Provides:
- In-memory collaborators (fetcher, webhook, text generator, ledgers)
- Snapshot / report factories
- An InvocationContext wired to the fakes with a fixed clock
"""

from typing import Any

import pytest

from stableguard.alerting.dedup import InMemoryDedupStore
from stableguard.compliance.thresholds import AUDIT_MAX_AGE_SECONDS
from stableguard.config import Settings, TrackedStablecoin
from stableguard.errors import MalformedResponse
from stableguard.oracle.ledger import SimulatedLedgerClient
from stableguard.oracle.schemas import (
    ComplianceReport,
    SubmissionConfig,
    SubmissionResult,
    SubmissionStatus,
)
from stableguard.reserves.schemas import UNIT, DataQuality, ReserveSnapshot
from stableguard.services.llm_gateway import GeneratedText
from stableguard.services.secrets import StaticSecretStore
from stableguard.workflows.context import InvocationContext

NOW = 1_750_000_000
DAY = 86_400
API_KEY_NAME = "GEMINI_API_KEY"


# ── Fakes ──────────────────────────────────────────────────────────────


class FakeFetcher:
    """Serves canned payloads per endpoint. Exceptions in the map are raised."""

    def __init__(self, payloads: dict[str, Any] | None = None, texts: dict[str, Any] | None = None):
        self.payloads = payloads or {}
        self.texts = texts or {}
        self.requested: list[str] = []

    async def fetch(self, endpoint: str) -> Any:
        self.requested.append(endpoint)
        value = self.payloads.get(endpoint, ConnectionError(f"no route to {endpoint}"))
        if isinstance(value, Exception):
            raise value
        return value

    async def fetch_text(self, endpoint: str) -> str:
        self.requested.append(endpoint)
        value = self.texts.get(endpoint, ConnectionError(f"no route to {endpoint}"))
        if isinstance(value, Exception):
            raise value
        return value


class RecordingWebhook:
    def __init__(self, success: bool = True, raises: Exception | None = None):
        self.success = success
        self.raises = raises
        self.sent: list[dict] = []

    async def send(self, payload: dict) -> dict:
        self.sent.append(payload)
        if self.raises is not None:
            raise self.raises
        if self.success:
            return {"success": True, "detail": "HTTP 200"}
        return {"success": False, "detail": "HTTP 503"}


class FakeTextGenerator:
    """Returns a fixed text, or raises the configured exception."""

    def __init__(self, text: str = "ATTESTATION: all checks reviewed.", raises: Exception | None = None):
        self.text = text
        self.raises = raises
        self.calls: list[tuple[str, str, str]] = []

    async def generate(self, system: str, user: str, api_key: str) -> GeneratedText:
        self.calls.append((system, user, api_key))
        if self.raises is not None:
            raise self.raises
        if not self.text:
            raise MalformedResponse("Malformed Gemini response: empty text")
        return GeneratedText(text=self.text, response_id="resp-1", provider="fake")


class RejectingLedger(SimulatedLedgerClient):
    async def submit_report(self, payload: bytes, config: SubmissionConfig) -> SubmissionResult:
        self.submissions.append((payload, config))
        return SubmissionResult(status=SubmissionStatus.FAILED, detail="txStatus=REVERTED")


class UnreachableLedger(SimulatedLedgerClient):
    async def submit_report(self, payload: bytes, config: SubmissionConfig) -> SubmissionResult:
        self.submissions.append((payload, config))
        raise TimeoutError("ledger relay timed out")

    async def call_contract(self, address: str, data: bytes) -> bytes:
        self.calls.append((address, data))
        raise ConnectionError("ledger relay unreachable")


class ConfirmingLedger(SimulatedLedgerClient):
    async def submit_report(self, payload: bytes, config: SubmissionConfig) -> SubmissionResult:
        self.submissions.append((payload, config))
        return SubmissionResult(status=SubmissionStatus.SUCCESS, tx_hash="0x" + "ab" * 32)


# ── Factories ─────────────────────────────────────────────────────────


def make_snapshot(
    symbol: str = "USDC",
    reserves: int = 10_300,
    supply: int = 10_000,
    permitted: bool = True,
    no_rehyp: bool = True,
    last_audit: int = NOW - 5 * DAY,
    quality: DataQuality = DataQuality.REPORTED,
) -> ReserveSnapshot:
    """Whole-unit reserves/supply, scaled to base units."""
    return ReserveSnapshot(
        symbol=symbol,
        total_reserves=reserves * UNIT,
        total_supply=supply * UNIT,
        permitted_assets_only=permitted,
        no_rehypothecation=no_rehyp,
        last_audit_timestamp=last_audit,
        data_quality=quality,
        source="test",
        observed_at=NOW,
    )


def make_report(
    symbol: str = "USDC",
    ratio_bps: int = 10_300,
    compliant: bool = True,
    permitted: bool = True,
    no_rehyp: bool = True,
    last_audit: int = NOW - 5 * DAY,
    timestamp: int = NOW,
    proof_hash: bytes = bytes(32),
) -> ComplianceReport:
    supply = 1_000_000 * UNIT
    return ComplianceReport(
        timestamp=timestamp,
        total_reserves=supply * ratio_bps // 10_000,
        total_supply=supply,
        ratio_bps=ratio_bps,
        compliant=compliant,
        proof_hash=proof_hash,
        symbol=symbol,
        permitted_assets_only=permitted,
        no_rehypothecation=no_rehyp,
        last_audit_timestamp=last_audit,
    )


OVERDUE_AUDIT = NOW - AUDIT_MAX_AGE_SECONDS - DAY


# ── Fixtures ──────────────────────────────────────────────────────────


@pytest.fixture
def test_settings() -> Settings:
    return Settings(
        stablecoins=[
            TrackedStablecoin(
                symbol="USDC",
                endpoint="https://reserves.test/usdc",
                permitted_assets_only=True,
                no_rehypothecation=True,
                fallback_supply=45_000_000_000,
            ),
            TrackedStablecoin(
                symbol="USDT",
                endpoint="https://reserves.test/usdt",
                permitted_assets_only=False,
                no_rehypothecation=True,
                fallback_supply=140_000_000_000,
            ),
        ],
        environment="test",
        ledger_mode="simulated",
        alert_webhook_url="https://hooks.test/alerts",
        regulatory_text_url="https://regulator.test/updates",
        text_generator_secret_name=API_KEY_NAME,
    )


@pytest.fixture
def fetcher() -> FakeFetcher:
    return FakeFetcher()


@pytest.fixture
def webhook() -> RecordingWebhook:
    return RecordingWebhook()


@pytest.fixture
def generator() -> FakeTextGenerator:
    return FakeTextGenerator()


@pytest.fixture
def ledger() -> SimulatedLedgerClient:
    return SimulatedLedgerClient()


@pytest.fixture
def dedup() -> InMemoryDedupStore:
    return InMemoryDedupStore()


@pytest.fixture
def secrets() -> StaticSecretStore:
    return StaticSecretStore({API_KEY_NAME: "test-key"})


@pytest.fixture
def ctx(test_settings, fetcher, ledger, generator, secrets, webhook, dedup) -> InvocationContext:
    return InvocationContext(
        settings=test_settings,
        fetcher=fetcher,
        ledger=ledger,
        generator=generator,
        secrets=secrets,
        webhook=webhook,
        dedup=dedup,
        clock=lambda: float(NOW),
    )
