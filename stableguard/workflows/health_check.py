"""
Reserve Health Check — scheduled trigger.

For every tracked stablecoin, strictly in order:
    Normalizer → Evaluator → Codec → Publisher

One coin's data outage degrades to its fallback snapshot and the cycle
continues. A SchemaMismatch drops only the offending coin; the remaining
coins are still published and the invocation ends with an error status.
"""

import structlog

from stableguard.compliance.evaluator import evaluate
from stableguard.compliance.schemas import ComplianceVerdict
from stableguard.config import TrackedStablecoin
from stableguard.errors import SchemaMismatch
from stableguard.oracle.codec import encode_report
from stableguard.oracle.publisher import OraclePublisher
from stableguard.oracle.schemas import ComplianceReport, PublishOutcome
from stableguard.workflows.context import InvocationContext

logger = structlog.get_logger(__name__)


def summarize(verdicts: list[ComplianceVerdict]) -> str:
    return " | ".join(f"{v.symbol}: {v.status_tier.value} ({v.ratio_bps}bps)" for v in verdicts)


async def _evaluate_coin(
    ctx: InvocationContext,
    publisher: OraclePublisher,
    coin: TrackedStablecoin,
    timestamp: int,
) -> tuple[ComplianceVerdict, PublishOutcome]:
    snapshot = await ctx.normalizer.snapshot(coin, ctx.fetcher, observed_at=timestamp)
    verdict = evaluate(snapshot, now=timestamp)
    if verdict.skipped:
        return verdict, await publisher.publish(verdict, None)

    report = ComplianceReport.from_verdict(snapshot, verdict, timestamp=timestamp)
    payload = encode_report(report)
    return verdict, await publisher.publish(verdict, payload)


async def run_health_check(ctx: InvocationContext) -> str:
    """One evaluation cycle. Returns a summary like "USDC: HEALTHY (10250bps) | ..."."""
    timestamp = ctx.now()
    structlog.contextvars.bind_contextvars(trigger="health_check", cycle=timestamp)
    try:
        return await _run_cycle(ctx, timestamp)
    finally:
        structlog.contextvars.unbind_contextvars("trigger", "cycle")


async def _run_cycle(ctx: InvocationContext, timestamp: int) -> str:
    logger.info("health_check_started", coins=len(ctx.settings.stablecoins))
    publisher = ctx.publisher()
    verdicts: list[ComplianceVerdict] = []
    outcomes: dict[str, str] = {}
    mismatch: SchemaMismatch | None = None
    for coin in ctx.settings.stablecoins:
        try:
            verdict, outcome = await _evaluate_coin(ctx, publisher, coin, timestamp)
        except SchemaMismatch as e:
            logger.error("health_check_coin_aborted", symbol=coin.symbol, **e.to_dict())
            mismatch = mismatch or e
            continue
        verdicts.append(verdict)
        outcomes[coin.symbol] = outcome.value

    if mismatch is not None:
        logger.error("health_check_failed", published=outcomes)
        return f"error:schema_mismatch:{mismatch.message}"

    summary = summarize(verdicts)
    logger.info("health_check_completed", summary=summary, outcomes=outcomes)
    return summary
