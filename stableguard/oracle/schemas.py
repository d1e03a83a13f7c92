"""
Report & Submission Schemas.

A ComplianceReport holds exactly the fields of the on-ledger tuple. Tier and
audit staleness are derived from those fields, so decode(encode(r)) == r.
"""

from enum import StrEnum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from stableguard.compliance.evaluator import is_audit_overdue
from stableguard.compliance.schemas import ComplianceVerdict, StatusTier
from stableguard.compliance.thresholds import tier_for
from stableguard.reserves.schemas import ReserveSnapshot, validate_symbol

ZERO_HASH = bytes(32)


class ComplianceReport(BaseModel):
    """
    The on-the-wire / on-ledger record. Immutable once published.

    proof_hash is all-zero until an attestation exists; the zero value is a
    "not yet attested" sentinel and never a valid hash.
    """

    model_config = ConfigDict(frozen=True)

    timestamp: int = Field(ge=0)
    total_reserves: int = Field(ge=0)
    total_supply: int = Field(ge=0)
    ratio_bps: int = Field(ge=0)
    compliant: bool
    proof_hash: bytes = ZERO_HASH
    symbol: str
    permitted_assets_only: bool
    no_rehypothecation: bool
    last_audit_timestamp: int = Field(default=0, ge=0)

    @field_validator("symbol")
    @classmethod
    def _check_symbol(cls, v: str) -> str:
        return validate_symbol(v)

    @field_validator("proof_hash")
    @classmethod
    def _check_proof_hash(cls, v: bytes) -> bytes:
        if len(v) != 32:
            raise ValueError(f"proof_hash must be 32 bytes, got {len(v)}")
        return v

    @classmethod
    def from_verdict(
        cls,
        snapshot: ReserveSnapshot,
        verdict: ComplianceVerdict,
        timestamp: int,
    ) -> "ComplianceReport":
        if verdict.skipped:
            raise ValueError(f"{verdict.symbol}: skipped verdicts produce no report")
        return cls(
            timestamp=timestamp,
            total_reserves=snapshot.total_reserves,
            total_supply=snapshot.total_supply,
            ratio_bps=verdict.ratio_bps,
            compliant=verdict.compliant,
            symbol=snapshot.symbol,
            permitted_assets_only=snapshot.permitted_assets_only,
            no_rehypothecation=snapshot.no_rehypothecation,
            last_audit_timestamp=snapshot.last_audit_timestamp,
        )

    @property
    def reference(self) -> str:
        """Report identity: timestamp + symbol."""
        return f"{self.timestamp}:{self.symbol}"

    @property
    def status_tier(self) -> StatusTier:
        return tier_for(self.ratio_bps)

    @property
    def audit_overdue(self) -> bool:
        return is_audit_overdue(self.last_audit_timestamp, self.timestamp)

    @property
    def attested(self) -> bool:
        return self.proof_hash != ZERO_HASH


class ReportEvent(BaseModel):
    """A decoded ReportUpdated ledger event."""

    model_config = ConfigDict(frozen=True)

    report: ComplianceReport
    tx_hash: str
    indexed_timestamp: int
    block_number: Optional[int] = None


# ── Submission ─────────────────────────────────────────────────────────


class SubmissionStatus(StrEnum):
    SUCCESS = "SUCCESS"
    FAILED = "FAILED"
    SIMULATED = "SIMULATED"     # Ledger unavailable / simulation host


class SubmissionResult(BaseModel):
    status: SubmissionStatus
    tx_hash: str = ""
    detail: str = ""


class SubmissionConfig(BaseModel):
    """Declared report envelope for the ledger write."""
    receiver: str
    encoder_name: str = "evm"
    signing_algo: str = "ecdsa"
    hashing_algo: str = "keccak256"
    gas_limit: int = 500_000


class PublishOutcome(StrEnum):
    PUBLISHED = "PUBLISHED"
    FAILED = "FAILED"
    SIMULATED = "SIMULATED"
    SKIPPED = "SKIPPED"
