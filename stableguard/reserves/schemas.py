"""
Reserve Snapshot Schemas.

All amounts are integers in 18-decimal fixed point so ratios are comparable
across stablecoins.
"""

from enum import StrEnum

from pydantic import BaseModel, ConfigDict, Field, field_validator

DECIMALS = 18
UNIT = 10**DECIMALS
SYMBOL_WIDTH = 4


class DataQuality(StrEnum):
    REPORTED = "reported"               # Reserves and supply reported separately
    ASSUMED_PARITY = "assumed_parity"   # Source cannot split reserves from supply (1:1)
    UNAVAILABLE = "unavailable"         # Fallback after upstream failure


def validate_symbol(value: str) -> str:
    """Symbols are 1-4 printable ASCII characters (fits a bytes4 field)."""
    if not value or len(value) > SYMBOL_WIDTH:
        raise ValueError(f"symbol must be 1-{SYMBOL_WIDTH} characters, got {value!r}")
    if not all(0x20 < ord(ch) < 0x7F for ch in value):
        raise ValueError(f"symbol must be printable ASCII, got {value!r}")
    return value


class ReserveSnapshot(BaseModel):
    """One normalized reading of reserve/supply data for one stablecoin."""

    model_config = ConfigDict(frozen=True)

    symbol: str
    total_reserves: int = Field(ge=0)
    total_supply: int = Field(ge=0)
    permitted_assets_only: bool
    no_rehypothecation: bool
    last_audit_timestamp: int = Field(default=0, ge=0)
    data_quality: DataQuality = DataQuality.REPORTED
    source: str = ""
    observed_at: int = 0

    @field_validator("symbol")
    @classmethod
    def _check_symbol(cls, v: str) -> str:
        return validate_symbol(v)
