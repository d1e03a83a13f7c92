"""
Compliance Evaluator — pure, deterministic snapshot → verdict.

No I/O and no floating point: the ratio is integer basis points,
floor(reserves * 10000 / supply), reproducible by any implementation.
"""

import structlog

from stableguard.compliance.schemas import ComplianceVerdict, Reason, StatusTier
from stableguard.compliance.thresholds import (
    AUDIT_MAX_AGE_SECONDS,
    BPS_DENOMINATOR,
    WARNING_BPS,
    tier_for,
)
from stableguard.reserves.schemas import DataQuality, ReserveSnapshot

logger = structlog.get_logger(__name__)


def reserve_ratio_bps(total_reserves: int, total_supply: int) -> int:
    """Integer basis points. Defined only for total_supply > 0."""
    if total_supply <= 0:
        raise ValueError("reserve ratio undefined for zero supply")
    return (total_reserves * BPS_DENOMINATOR) // total_supply


def is_audit_overdue(last_audit_timestamp: int, now: int) -> bool:
    """Overdue only when the audit time is known and older than 30 days."""
    return last_audit_timestamp > 0 and (now - last_audit_timestamp) > AUDIT_MAX_AGE_SECONDS


def evaluate(snapshot: ReserveSnapshot, now: int) -> ComplianceVerdict:
    """
    Compute the compliance verdict for one snapshot at cycle time ``now``.

    Zero supply yields the SKIPPED sentinel (ratio 0, not compliant), which
    the publisher never submits.
    """
    if snapshot.total_supply == 0:
        logger.info("compliance_skipped_zero_supply", symbol=snapshot.symbol)
        return ComplianceVerdict(
            symbol=snapshot.symbol,
            ratio_bps=0,
            status_tier=StatusTier.SKIPPED,
            compliant=False,
            data_quality=snapshot.data_quality,
            reasons=(Reason.ZERO_SUPPLY,),
        )

    ratio_bps = reserve_ratio_bps(snapshot.total_reserves, snapshot.total_supply)
    tier = tier_for(ratio_bps)
    audit_overdue = is_audit_overdue(snapshot.last_audit_timestamp, now)
    audit_unknown = snapshot.last_audit_timestamp == 0

    compliant = (
        ratio_bps >= WARNING_BPS
        and snapshot.permitted_assets_only
        and snapshot.no_rehypothecation
        and not audit_overdue
    )

    reasons: list[Reason] = []
    if ratio_bps < WARNING_BPS:
        reasons.append(Reason.RATIO_BELOW_WARNING)
    if not snapshot.permitted_assets_only:
        reasons.append(Reason.NON_PERMITTED_ASSETS)
    if not snapshot.no_rehypothecation:
        reasons.append(Reason.REHYPOTHECATION)
    if audit_overdue:
        reasons.append(Reason.AUDIT_OVERDUE)
    if audit_unknown:
        reasons.append(Reason.AUDIT_UNKNOWN)
    if snapshot.data_quality == DataQuality.ASSUMED_PARITY:
        reasons.append(Reason.ASSUMED_PARITY)
    elif snapshot.data_quality == DataQuality.UNAVAILABLE:
        reasons.append(Reason.DATA_UNAVAILABLE)

    verdict = ComplianceVerdict(
        symbol=snapshot.symbol,
        ratio_bps=ratio_bps,
        status_tier=tier,
        compliant=compliant,
        audit_overdue=audit_overdue,
        audit_unknown=audit_unknown,
        data_quality=snapshot.data_quality,
        reasons=tuple(reasons),
    )

    logger.info(
        "compliance_evaluated",
        symbol=verdict.symbol,
        ratio_bps=verdict.ratio_bps,
        status=verdict.status_tier.value,
        compliant=verdict.compliant,
        reasons=[r.value for r in verdict.reasons],
    )
    return verdict
