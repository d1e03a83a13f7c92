"""
Reserve Snapshot Normalizer — upstream payload → canonical ReserveSnapshot.

Recognized payload shapes:
  Issuer transparency:  {"totalReserves": N, "totalSupply": N, "assets": [...], ...}
                        (whole-dollar numbers, or "*Wei" fields already in base units)
  Aggregator:           {"circulating": {"peggedUSD": N}, ...}
                        (no reserve figure → explicit 1:1 ASSUMED_PARITY snapshot)

Every amount goes through the same 10**18 scaling. Binary floats never reach
the ratio path: numbers are converted via their decimal string form.

Upstream failure NEVER raises out of ``snapshot()``. It returns a fallback
snapshot marked UNAVAILABLE with non-compliant-biased flags instead.
"""

from decimal import Decimal, InvalidOperation
from typing import Any, Optional

import structlog

from stableguard.config import TrackedStablecoin
from stableguard.errors import DataUnavailable
from stableguard.services.fetcher import DataFetcher
from stableguard.reserves.schemas import UNIT, DataQuality, ReserveSnapshot

logger = structlog.get_logger(__name__)

# Asset classes a reserve may hold: cash, insured deposits, short-dated
# government bills and overnight repo collateralized by them.
APPROVED_ASSET_PREFIXES = (
    "FIAT_CASH",
    "DEMAND_DEPOSIT",
    "INSURED_DEPOSIT",
    "US_TREASURY_BILL",
    "TREASURY_REPO_OVERNIGHT",
)


def to_base_units(value: Any) -> int:
    """
    Scale a whole-unit amount to 18-decimal base units.

    Fractions below one base unit are truncated toward zero.
    """
    if isinstance(value, bool):
        raise ValueError("boolean is not an amount")
    if isinstance(value, int):
        amount = Decimal(value)
    else:
        try:
            amount = Decimal(str(value))
        except InvalidOperation as e:
            raise ValueError(f"not a number: {value!r}") from e
    if not amount.is_finite() or amount < 0:
        raise ValueError(f"amount must be finite and non-negative: {value!r}")
    return int(amount * UNIT)


def parse_base_units(value: Any) -> int:
    """Parse an amount that is already in base units (int or decimal/hex string)."""
    if isinstance(value, bool):
        raise ValueError("boolean is not an amount")
    if isinstance(value, int):
        parsed = value
    elif isinstance(value, str):
        parsed = int(value, 16) if value.startswith("0x") else int(value)
    else:
        raise ValueError(f"base-unit amount must be int or string: {value!r}")
    if parsed < 0:
        raise ValueError(f"amount must be non-negative: {value!r}")
    return parsed


def assets_are_permitted(assets: list) -> bool:
    """True when every reported asset is an approved reserve asset class."""
    if not assets:
        return False
    for asset in assets:
        asset_type = str(asset.get("type", "")).upper() if isinstance(asset, dict) else ""
        if not asset_type.startswith(APPROVED_ASSET_PREFIXES):
            return False
    return True


def _amount(payload: dict, key: str) -> Optional[int]:
    if f"{key}Wei" in payload:
        return parse_base_units(payload[f"{key}Wei"])
    if key in payload and payload[key] is not None:
        return to_base_units(payload[key])
    return None


class ReserveNormalizer:
    """
    Turns heterogeneous upstream responses into one ReserveSnapshot per coin.

    Stateless. Issuer disclosure flags come from the payload when present,
    otherwise from the tracked-coin configuration.
    """

    def normalize(
        self, coin: TrackedStablecoin, payload: Any, observed_at: int = 0
    ) -> ReserveSnapshot:
        """
        Parse one payload. Raises ValueError if the shape is not recognized.
        """
        if not isinstance(payload, dict):
            raise ValueError(f"unexpected payload type: {type(payload).__name__}")

        reserves = _amount(payload, "totalReserves")
        supply = _amount(payload, "totalSupply")
        if supply is None:
            supply = _amount(payload, "circulatingSupply")

        if reserves is not None and supply is not None:
            quality = DataQuality.REPORTED
            source = "issuer_transparency"
        else:
            circulating = payload.get("circulating")
            pegged = circulating.get("peggedUSD") if isinstance(circulating, dict) else None
            if pegged is None:
                raise ValueError("payload carries neither reserves/supply nor circulating.peggedUSD")
            # Aggregator cannot separate reserves from supply: 1:1, flagged.
            supply = to_base_units(pegged)
            reserves = supply
            quality = DataQuality.ASSUMED_PARITY
            source = "aggregator"

        permitted = coin.permitted_assets_only
        if isinstance(payload.get("assets"), list):
            permitted = assets_are_permitted(payload["assets"])
        elif isinstance(payload.get("permittedAssetsOnly"), bool):
            permitted = payload["permittedAssetsOnly"]

        no_rehyp = coin.no_rehypothecation
        if isinstance(payload.get("noRehypothecation"), bool):
            no_rehyp = payload["noRehypothecation"]

        last_audit = coin.last_audit_timestamp
        raw_audit = payload.get("lastAuditTimestamp")
        if isinstance(raw_audit, int) and not isinstance(raw_audit, bool) and raw_audit >= 0:
            last_audit = raw_audit

        return ReserveSnapshot(
            symbol=coin.symbol,
            total_reserves=reserves,
            total_supply=supply,
            permitted_assets_only=permitted,
            no_rehypothecation=no_rehyp,
            last_audit_timestamp=last_audit,
            data_quality=quality,
            source=source,
            observed_at=observed_at,
        )

    def fallback(self, coin: TrackedStablecoin, observed_at: int = 0) -> ReserveSnapshot:
        """Conservative placeholder: flags fail, audit unknown, marked UNAVAILABLE."""
        supply = coin.fallback_supply * UNIT
        return ReserveSnapshot(
            symbol=coin.symbol,
            total_reserves=supply,
            total_supply=supply,
            permitted_assets_only=False,
            no_rehypothecation=False,
            last_audit_timestamp=0,
            data_quality=DataQuality.UNAVAILABLE,
            source="fallback",
            observed_at=observed_at,
        )

    async def snapshot(
        self,
        coin: TrackedStablecoin,
        fetcher: DataFetcher,
        observed_at: int = 0,
    ) -> ReserveSnapshot:
        """Fetch + normalize. Never raises: degrades to ``fallback()``."""
        try:
            payload = await fetcher.fetch(coin.endpoint)
            snap = self.normalize(coin, payload, observed_at=observed_at)
        except Exception as e:
            err = DataUnavailable(
                f"{coin.symbol} reserve data unavailable, using fallback",
                cause=e,
                symbol=coin.symbol,
                endpoint=coin.endpoint,
            )
            logger.warning("reserve_data_unavailable", **err.to_dict())
            return self.fallback(coin, observed_at=observed_at)

        logger.info(
            "reserve_snapshot_normalized",
            symbol=snap.symbol,
            data_quality=snap.data_quality.value,
            total_supply=str(snap.total_supply),
            permitted_assets_only=snap.permitted_assets_only,
        )
        return snap
