"""
Alert Schemas.
"""

from enum import StrEnum

from pydantic import BaseModel, ConfigDict


class AlertLevel(StrEnum):
    INFO = "INFO"
    WARNING = "WARNING"
    CRITICAL = "CRITICAL"
    EMERGENCY = "EMERGENCY"


class DispatcherState(StrEnum):
    MONITORING = "MONITORING"
    EVALUATING = "EVALUATING"
    ALERTING = "ALERTING"


class Alert(BaseModel):
    """
    A breach alert — ephemeral, at most one per ComplianceReport.
    """

    model_config = ConfigDict(frozen=True)

    level: AlertLevel
    stablecoin: str
    ratio_bps: int
    compliant: bool
    message: str
    timestamp: int
    source_report_reference: str
    tx_hash: str = ""

    def to_webhook_payload(self, source: str) -> dict:
        return {
            "level": self.level.value,
            "message": self.message,
            "timestamp": str(self.timestamp),
            "source": source,
            "stablecoin": self.stablecoin,
            "ratio": self.ratio_bps,
            "compliant": self.compliant,
            "txHash": self.tx_hash,
            "reportReference": self.source_report_reference,
        }
