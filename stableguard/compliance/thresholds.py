"""
Regulatory reserve thresholds (basis points: 10000 = 100%).

Tiers are an ordered (min_bps, tier) table evaluated top-down, first match
wins. Boundary tests iterate this table directly.
"""

from stableguard.compliance.schemas import StatusTier

BPS_DENOMINATOR = 10_000

WARNING_BPS = 10_200    # 102%: early warning
CRITICAL_BPS = 10_050   # 100.5%: critical
BREACH_BPS = 10_000     # 100%: breach / depeg risk

AUDIT_MAX_AGE_SECONDS = 30 * 86_400

TIER_TABLE: tuple[tuple[int, StatusTier], ...] = (
    (WARNING_BPS, StatusTier.HEALTHY),
    (CRITICAL_BPS, StatusTier.WARNING),
    (BREACH_BPS, StatusTier.CRITICAL),
    (0, StatusTier.BREACH),
)


def tier_for(ratio_bps: int) -> StatusTier:
    """Return the first tier whose minimum the ratio reaches."""
    for min_bps, tier in TIER_TABLE:
        if ratio_bps >= min_bps:
            return tier
    return StatusTier.BREACH
