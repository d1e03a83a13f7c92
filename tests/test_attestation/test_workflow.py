"""
Attestation Drafting Workflow Tests.

Covers:
- Deterministic compliance-data context
- Generated attestation → proof hash → webhook publication
- SIMULATION mode on missing credential / unreachable generator
- MalformedResponse is a hard error for the invocation
"""

import httpx
import pytest

from stableguard.attestation.prompts import SYSTEM_PROMPT, build_compliance_context
from stableguard.attestation.workflow import AttestationWorkflow
from stableguard.compliance.scoring import Grade, score_report
from stableguard.errors import MalformedResponse
from stableguard.oracle.codec import keccak256
from stableguard.oracle.schemas import ReportEvent
from stableguard.services.secrets import StaticSecretStore
from tests.conftest import API_KEY_NAME, NOW, FakeTextGenerator, RecordingWebhook, make_report

TX_HASH = "0x" + "ef" * 32
SOURCE = "StableGuard CRE"


def _event(report=None) -> ReportEvent:
    report = report or make_report()
    return ReportEvent(report=report, tx_hash=TX_HASH, indexed_timestamp=report.timestamp)


def _workflow(generator, webhook, secrets=None) -> AttestationWorkflow:
    return AttestationWorkflow(
        generator=generator,
        secrets=secrets or StaticSecretStore({API_KEY_NAME: "test-key"}),
        webhook=webhook,
        secret_name=API_KEY_NAME,
        source=SOURCE,
    )


class TestContext:
    def test_contains_required_facts(self):
        event = _event(make_report(ratio_bps=10_300))
        context = build_compliance_context(event, score_report(event.report))
        assert "Stablecoin: USDC" in context
        assert "Report Date: 2025-06-15" in context
        assert "Reserve Ratio: 103.00% (10300 basis points)" in context
        assert "Status: HEALTHY" in context
        assert "Section 4 - 1:1 Reserve Backing: PASS (ratio: 103.00%)" in context
        assert "Section 8 - Monthly Attestation: PASS" in context
        assert "Compliance Score: 100/100" in context
        assert "Grade: COMPLIANT" in context
        assert "Overall: COMPLIANT" in context
        assert context.endswith(f"Transaction Hash: {TX_HASH}")

    def test_is_deterministic(self):
        event = _event(make_report(ratio_bps=9_900, compliant=False))
        score = score_report(event.report)
        assert build_compliance_context(event, score) == build_compliance_context(event, score)
        assert "Overall: NON-COMPLIANT" in build_compliance_context(event, score)


class TestDraft:
    @pytest.mark.asyncio
    async def test_generated_attestation_is_hashed_and_published(self):
        generator = FakeTextGenerator("GENIUS Act attestation for USDC. I attest the above.")
        webhook = RecordingWebhook()
        event = _event()

        attestation = await _workflow(generator, webhook).draft(event)

        assert attestation.simulated is False
        assert attestation.text == "GENIUS Act attestation for USDC. I attest the above."
        assert attestation.proof_hash == "0x" + keccak256(attestation.text.encode()).hex()
        assert attestation.generated_for == f"{NOW}:USDC"
        assert attestation.grade == Grade.COMPLIANT

        system, user, api_key = generator.calls[0]
        assert system == SYSTEM_PROMPT
        assert api_key == "test-key"
        assert build_compliance_context(event, score_report(event.report)) in user

        payload = webhook.sent[0]
        assert payload["type"] == "COMPLIANCE_ATTESTATION"
        assert payload["proofHash"] == attestation.proof_hash
        assert payload["attestationText"] == attestation.text
        assert payload["reportReference"] == f"{NOW}:USDC"
        assert payload["txHash"] == TX_HASH
        assert payload["simulated"] is False

    @pytest.mark.asyncio
    async def test_report_on_ledger_is_untouched(self):
        event = _event()
        await _workflow(FakeTextGenerator(), RecordingWebhook()).draft(event)
        assert event.report.attested is False

    @pytest.mark.asyncio
    async def test_missing_credential_yields_simulation(self):
        generator = FakeTextGenerator()
        webhook = RecordingWebhook()
        event = _event()

        attestation = await _workflow(generator, webhook, StaticSecretStore()).draft(event)

        context = build_compliance_context(event, score_report(event.report))
        assert attestation.simulated is True
        assert attestation.text.startswith("COMPLIANCE ATTESTATION - SIMULATION MODE")
        assert f"{API_KEY_NAME} not available." in attestation.text
        assert context in attestation.text
        assert "Status: SIMULATION - No attestation generated." in attestation.text
        assert generator.calls == []
        assert webhook.sent[0]["simulated"] is True
        assert attestation.proof_hash == "0x" + keccak256(attestation.text.encode()).hex()

    @pytest.mark.asyncio
    async def test_unreachable_generator_yields_simulation(self):
        generator = FakeTextGenerator(raises=httpx.ConnectTimeout("timed out"))
        attestation = await _workflow(generator, RecordingWebhook()).draft(_event())
        assert attestation.simulated is True
        assert "Text generator unavailable." in attestation.text

    @pytest.mark.asyncio
    async def test_malformed_response_raises(self):
        webhook = RecordingWebhook()
        with pytest.raises(MalformedResponse):
            await _workflow(FakeTextGenerator(text=""), webhook).draft(_event())
        assert webhook.sent == []

    @pytest.mark.asyncio
    async def test_delivery_failure_is_swallowed(self):
        webhook = RecordingWebhook(raises=ConnectionError("refused"))
        attestation = await _workflow(FakeTextGenerator(), webhook).draft(_event())
        assert attestation.simulated is False
        assert len(webhook.sent) == 1
