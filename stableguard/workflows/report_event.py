"""
Report Event — ledger-event trigger.

A ReportUpdated log is decoded once, then handed to the breach alert
dispatcher and, independently, to the attestation workflow.

Terminal statuses:
    attestation_generated:<SYMBOL>:<proofHash>
    error:schema_mismatch:<detail>
    error:malformed_response:<detail>
"""

from typing import Optional, Sequence

import structlog

from stableguard.errors import MalformedResponse, SchemaMismatch
from stableguard.oracle.codec import HexLike, decode_event
from stableguard.workflows.context import InvocationContext

logger = structlog.get_logger(__name__)


async def handle_report_event(
    ctx: InvocationContext,
    topics: Sequence[HexLike],
    data: HexLike,
    tx_hash: HexLike,
    block_number: Optional[int] = None,
) -> str:
    structlog.contextvars.bind_contextvars(trigger="report_event")
    try:
        try:
            event = decode_event(topics, data, tx_hash, block_number=block_number)
        except SchemaMismatch as e:
            logger.error("report_event_rejected", **e.to_dict())
            return f"error:schema_mismatch:{e.message}"

        report = event.report
        logger.info(
            "report_event_received",
            report=report.reference,
            ratio_bps=report.ratio_bps,
            compliant=report.compliant,
            tx_hash=event.tx_hash,
        )

        await ctx.dispatcher().handle(event)

        try:
            attestation = await ctx.attestation().draft(event)
        except MalformedResponse as e:
            logger.error("attestation_aborted", report=report.reference, **e.to_dict())
            return f"error:malformed_response:{e.message}"

        return f"attestation_generated:{report.symbol}:{attestation.proof_hash}"
    finally:
        structlog.contextvars.unbind_contextvars("trigger")
