"""Regulatory scan — scheduled trigger."""

import structlog

from stableguard.workflows.context import InvocationContext

logger = structlog.get_logger(__name__)


async def run_regulatory_scan(ctx: InvocationContext) -> str:
    """Returns "action_required" or "compliant"."""
    logger.info("regulatory_scan_started")
    status = await ctx.regulatory().scan()
    logger.info("regulatory_scan_completed", status=status)
    return status
