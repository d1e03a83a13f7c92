"""
Compliance Verdict Schemas.
"""

from enum import StrEnum

from pydantic import BaseModel, ConfigDict, Field

from stableguard.reserves.schemas import DataQuality


class StatusTier(StrEnum):
    HEALTHY = "HEALTHY"
    WARNING = "WARNING"
    CRITICAL = "CRITICAL"
    BREACH = "BREACH"
    SKIPPED = "SKIPPED"     # Zero supply, nothing to assert


class Reason(StrEnum):
    RATIO_BELOW_WARNING = "RATIO_BELOW_WARNING"
    NON_PERMITTED_ASSETS = "NON_PERMITTED_ASSETS"
    REHYPOTHECATION = "REHYPOTHECATION"
    AUDIT_OVERDUE = "AUDIT_OVERDUE"
    AUDIT_UNKNOWN = "AUDIT_UNKNOWN"         # Informational, never forces non-compliance
    ASSUMED_PARITY = "ASSUMED_PARITY"       # Informational, see data_quality
    DATA_UNAVAILABLE = "DATA_UNAVAILABLE"
    ZERO_SUPPLY = "ZERO_SUPPLY"


class ComplianceVerdict(BaseModel):
    """
    Derived once per cycle from exactly one snapshot. Never mutated.

    status_tier is driven solely by the ratio; compliant combines the ratio
    with the asset, rehypothecation and audit checks. They are independent axes.
    """

    model_config = ConfigDict(frozen=True)

    symbol: str
    ratio_bps: int = Field(ge=0)
    status_tier: StatusTier
    compliant: bool
    audit_overdue: bool = False
    audit_unknown: bool = False
    data_quality: DataQuality = DataQuality.REPORTED
    reasons: tuple[Reason, ...] = ()

    @property
    def skipped(self) -> bool:
        return self.status_tier == StatusTier.SKIPPED
