"""
Oracle Publisher — submit an encoded report exactly once per cycle.

Rules:
1. A skipped verdict is a no-op: the ledger is never called.
2. One submission attempt per report. No retry within the cycle; the next
   scheduled cycle produces a fresh report.
3. Failures (rejection, timeout, transport error) are logged as
   PublishFailed and returned as an outcome, never raised.
4. No local state is mutated by a failed submission.
"""

from typing import Optional

import structlog

from stableguard.compliance.schemas import ComplianceVerdict
from stableguard.errors import PublishFailed, Skipped
from stableguard.oracle.ledger import LedgerClient
from stableguard.oracle.schemas import (
    PublishOutcome,
    SubmissionConfig,
    SubmissionResult,
    SubmissionStatus,
)

logger = structlog.get_logger(__name__)


class OraclePublisher:
    """Owns the decision of when a report counts as durably recorded."""

    def __init__(self, ledger: LedgerClient, config: SubmissionConfig):
        self.ledger = ledger
        self.config = config

    async def publish(
        self,
        verdict: ComplianceVerdict,
        payload: Optional[bytes],
    ) -> PublishOutcome:
        if verdict.skipped or payload is None:
            skipped = Skipped(f"{verdict.symbol}: zero supply, nothing to publish", symbol=verdict.symbol)
            logger.info("report_publish_skipped", **skipped.to_dict())
            return PublishOutcome.SKIPPED

        try:
            result: SubmissionResult = await self.ledger.submit_report(payload, self.config)
        except Exception as e:
            return self._failed(verdict, f"submission channel error: {e}", cause=e)

        if result.status == SubmissionStatus.SUCCESS:
            logger.info(
                "report_published",
                symbol=verdict.symbol,
                tx_hash=result.tx_hash,
                ratio_bps=verdict.ratio_bps,
            )
            return PublishOutcome.PUBLISHED

        if result.status == SubmissionStatus.SIMULATED:
            logger.info(
                "report_publish_simulated",
                symbol=verdict.symbol,
                tx_hash=result.tx_hash,
                detail=result.detail,
            )
            return PublishOutcome.SIMULATED

        return self._failed(verdict, f"ledger rejected report: {result.detail}")

    def _failed(
        self,
        verdict: ComplianceVerdict,
        message: str,
        cause: Optional[BaseException] = None,
    ) -> PublishOutcome:
        err = PublishFailed(
            f"{verdict.symbol}: {message}",
            cause=cause,
            symbol=verdict.symbol,
            receiver=self.config.receiver,
        )
        logger.error("report_publish_failed", **err.to_dict())
        return PublishOutcome.FAILED
