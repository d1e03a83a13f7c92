"""
StableGuard Configuration.

Pydantic Settings v2 — loads from .env, environment variables.
"""

from typing import List

from pydantic import BaseModel, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict
from web3 import Web3


class TrackedStablecoin(BaseModel):
    """One stablecoin the health-check cycle evaluates."""

    symbol: str
    endpoint: str
    # Issuer disclosures used when the upstream payload does not carry them
    permitted_assets_only: bool = False
    no_rehypothecation: bool = False
    last_audit_timestamp: int = 0
    # Whole-dollar supply assumed when the upstream source is unreachable
    fallback_supply: int = 0


def _default_stablecoins() -> list[TrackedStablecoin]:
    return [
        TrackedStablecoin(
            symbol="USDC",
            endpoint="https://stablecoins.llama.fi/stablecoin/2",
            permitted_assets_only=True,
            no_rehypothecation=True,
            fallback_supply=45_000_000_000,
        ),
        TrackedStablecoin(
            symbol="USDT",
            endpoint="https://stablecoins.llama.fi/stablecoin/1",
            permitted_assets_only=False,
            no_rehypothecation=True,
            fallback_supply=140_000_000_000,
        ),
    ]


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        populate_by_name=True,
    )

    # ── Application ──────────────────────────────────────────────────────
    app_name: str = "StableGuard"
    app_version: str = "1.0.0"
    environment: str = Field(default="development", alias="ENVIRONMENT")
    debug: bool = Field(default=False, alias="DEBUG")

    # ── API ───────────────────────────────────────────────────────────────
    api_host: str = Field(default="0.0.0.0", alias="API_HOST")
    api_port: int = Field(default=8002, alias="API_PORT")

    # ── Schedules (cron, 5 fields) ────────────────────────────────────────
    health_check_schedule: str = Field(default="*/10 * * * *", alias="HEALTH_CHECK_SCHEDULE")
    regulatory_scan_schedule: str = Field(default="0 */6 * * *", alias="REGULATORY_SCAN_SCHEDULE")
    safeguard_schedule: str = Field(default="*/30 * * * *", alias="SAFEGUARD_SCHEDULE")

    # ── Reserve Data ─────────────────────────────────────────────────────
    stablecoins: List[TrackedStablecoin] = Field(
        default_factory=_default_stablecoins, alias="STABLECOINS"
    )
    fetch_timeout_seconds: float = Field(default=10.0, alias="FETCH_TIMEOUT_SECONDS")

    # ── Ledger / Oracle ──────────────────────────────────────────────────
    ledger_mode: str = Field(
        default="simulated", alias="LEDGER_MODE",
        description="'relay' posts reports to LEDGER_RELAY_URL, 'simulated' keeps them in memory",
    )
    ledger_relay_url: str = Field(default="", alias="LEDGER_RELAY_URL")
    ledger_timeout_seconds: float = Field(default=30.0, alias="LEDGER_TIMEOUT_SECONDS")
    oracle_address: str = Field(
        default="0xA1b6d8b72448d50e9A2FaD472E6A0c2d887edc8B", alias="ORACLE_ADDRESS"
    )
    safeguard_controller_address: str = Field(
        default="0x5561Bca9505bF526cC0F8452459547E723E0C75a",
        alias="SAFEGUARD_CONTROLLER_ADDRESS",
    )
    gas_limit: int = Field(default=500_000, alias="GAS_LIMIT")

    # ── Alerting ──────────────────────────────────────────────────────────
    alert_webhook_url: str = Field(default="", alias="ALERT_WEBHOOK_URL")
    webhook_timeout_seconds: float = Field(default=10.0, alias="WEBHOOK_TIMEOUT_SECONDS")
    alert_source: str = Field(default="StableGuard CRE", alias="ALERT_SOURCE")

    # ── Text Generation ───────────────────────────────────────────────────
    text_generator_provider: str = Field(default="gemini", alias="TEXT_GENERATOR_PROVIDER")
    text_generator_model: str = Field(default="gemini-2.0-flash", alias="TEXT_GENERATOR_MODEL")
    text_generator_secret_name: str = Field(
        default="GEMINI_API_KEY", alias="TEXT_GENERATOR_SECRET_NAME"
    )
    text_generator_timeout_seconds: float = Field(
        default=60.0, alias="TEXT_GENERATOR_TIMEOUT_SECONDS"
    )
    text_generator_max_tokens: int = Field(default=1024, alias="TEXT_GENERATOR_MAX_TOKENS")

    # ── Regulatory Analysis ───────────────────────────────────────────────
    regulatory_text_url: str = Field(default="", alias="REGULATORY_TEXT_URL")

    # ── Operational ────────────────────────────────────────────────────────
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")
    log_format: str = Field(default="console", alias="LOG_FORMAT")

    @field_validator("oracle_address", "safeguard_controller_address")
    @classmethod
    def _checksum_address(cls, v: str) -> str:
        return Web3.to_checksum_address(v)


settings = Settings()
