"""
Attestation Schemas.
"""

from pydantic import BaseModel, ConfigDict

from stableguard.compliance.scoring import Grade


class Attestation(BaseModel):
    """
    A drafted attestation. Only its hash outlives the invocation; the
    on-ledger report is never rewritten with it.
    """

    model_config = ConfigDict(frozen=True)

    text: str
    proof_hash: str             # 0x-prefixed keccak256 of the UTF-8 text
    generated_for: str          # report reference "<timestamp>:<symbol>"
    compliance_score: int
    grade: Grade
    simulated: bool = False
