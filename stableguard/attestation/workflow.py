"""
Attestation Drafting Workflow — published report → AI attestation + proof hash.

Pipeline:
1. Score the report and build the deterministic compliance-data context
2. Ask the text generator under the attestation system instruction
   (missing credential or unreachable generator → SIMULATION text)
3. proof_hash = keccak256(text)
4. Publish {text, proofHash, report reference} to the alert webhook

A malformed or empty generator response raises MalformedResponse for this
invocation only. The on-ledger report is never touched: the proof hash
travels out-of-band.
"""

from typing import Callable

import httpx
import structlog

from stableguard.alerting.channels import WebhookSender
from stableguard.attestation.prompts import (
    SYSTEM_PROMPT,
    USER_PROMPT,
    build_compliance_context,
    report_date,
    simulation_response,
)
from stableguard.attestation.schemas import Attestation
from stableguard.compliance.scoring import ComplianceScore, score_report
from stableguard.errors import DeliveryFailed
from stableguard.oracle.codec import keccak256
from stableguard.oracle.schemas import ReportEvent
from stableguard.services.llm_gateway import TextGenerator
from stableguard.services.secrets import SecretStore

logger = structlog.get_logger(__name__)


class AttestationWorkflow:
    """Drafts one attestation per published report."""

    def __init__(
        self,
        generator: TextGenerator,
        secrets: SecretStore,
        webhook: WebhookSender,
        secret_name: str,
        source: str,
    ):
        self.generator = generator
        self.secrets = secrets
        self.webhook = webhook
        self.secret_name = secret_name
        self.source = source

    async def generate_text(
        self, system: str, user: str, simulate: Callable[[str], str]
    ) -> tuple[str, bool]:
        """
        One text-generation call.

        Returns (text, simulated). Without a credential or a reachable
        generator, ``simulate(reason)`` supplies the text instead.
        """
        api_key = await self.secrets.get_secret(self.secret_name)
        if not api_key:
            logger.warning("text_generator_credential_missing", secret=self.secret_name)
            return simulate(f"{self.secret_name} not available."), True

        try:
            generated = await self.generator.generate(system, user, api_key)
        except httpx.HTTPError as e:
            logger.warning("text_generator_unavailable", error=str(e) or type(e).__name__)
            return simulate("Text generator unavailable."), True

        logger.info(
            "text_generated",
            provider=generated.provider,
            response_id=generated.response_id,
            chars=len(generated.text),
        )
        return generated.text, False

    async def draft(self, event: ReportEvent) -> Attestation:
        report = event.report
        score = score_report(report)
        context = build_compliance_context(event, score)
        logger.info("attestation_context_built", report=report.reference, chars=len(context))

        text, simulated = await self.generate_text(
            SYSTEM_PROMPT,
            USER_PROMPT.format(context=context),
            simulate=lambda reason: simulation_response(context, reason),
        )
        proof_hash = "0x" + keccak256(text.encode("utf-8")).hex()

        attestation = Attestation(
            text=text,
            proof_hash=proof_hash,
            generated_for=report.reference,
            compliance_score=score.score,
            grade=score.grade,
            simulated=simulated,
        )
        logger.info(
            "attestation_drafted",
            report=report.reference,
            proof_hash=proof_hash,
            score=score.score,
            grade=score.grade.value,
            simulated=simulated,
        )

        await self._publish(attestation, event, score)
        return attestation

    async def _publish(self, attestation: Attestation, event: ReportEvent, score: ComplianceScore) -> None:
        report = event.report
        payload = {
            "type": "COMPLIANCE_ATTESTATION",
            "level": "INFO",
            "message": f"{report.symbol} compliance attestation generated ({score.grade.value})",
            "timestamp": str(report.timestamp),
            "source": self.source,
            "stablecoin": report.symbol,
            "reportDate": report_date(report.timestamp),
            "reportReference": attestation.generated_for,
            "complianceScore": attestation.compliance_score,
            "grade": attestation.grade.value,
            "compliant": report.compliant,
            "ratioBps": report.ratio_bps,
            "proofHash": attestation.proof_hash,
            "attestationText": attestation.text,
            "txHash": event.tx_hash,
            "simulated": attestation.simulated,
        }
        try:
            result = await self.webhook.send(payload)
        except Exception as e:
            result = {"success": False, "detail": str(e)}

        if not result.get("success"):
            err = DeliveryFailed(
                f"attestation for {attestation.generated_for} not delivered",
                detail=result.get("detail", ""),
            )
            logger.error("attestation_delivery_failed", **err.to_dict())
