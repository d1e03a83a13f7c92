"""
Breach Alert Dispatcher — decoded report → at most one alert.

State machine (no terminal state, long-lived reactive loop):

    MONITORING ──report──▶ EVALUATING ──compliant──▶ MONITORING
                                │
                                └──non-compliant──▶ ALERTING ──dispatch──▶ MONITORING

Severity:
    ratio < BREACH               → EMERGENCY
    non-compliant, ratio ≥ BREACH → CRITICAL

Dispatch is keyed by report identity (timestamp + symbol), not by invocation
count. The key is claimed before delivery, so a failed delivery is not
retried by a redelivered event either.
"""

from typing import Optional

import structlog

from stableguard.alerting.channels import WebhookSender
from stableguard.alerting.dedup import DedupStore
from stableguard.alerting.schemas import Alert, AlertLevel, DispatcherState
from stableguard.compliance.thresholds import BREACH_BPS, WARNING_BPS
from stableguard.errors import DeliveryFailed
from stableguard.oracle.schemas import ComplianceReport, ReportEvent

logger = structlog.get_logger(__name__)


def severity_for(report: ComplianceReport) -> AlertLevel:
    if report.ratio_bps < BREACH_BPS:
        return AlertLevel.EMERGENCY
    return AlertLevel.CRITICAL


def failed_checks(report: ComplianceReport) -> list[str]:
    checks = []
    if report.ratio_bps < WARNING_BPS:
        checks.append(f"reserve ratio {report.ratio_bps / 100:.2f}% below 102.00%")
    if not report.permitted_assets_only:
        checks.append("non-permitted reserve assets")
    if not report.no_rehypothecation:
        checks.append("possible rehypothecation")
    if report.audit_overdue:
        checks.append("attestation overdue (>30 days)")
    return checks


def build_message(report: ComplianceReport, level: AlertLevel) -> str:
    ratio_pct = f"{report.ratio_bps / 100:.2f}%"
    if level == AlertLevel.EMERGENCY:
        return (
            f"{report.symbol} reserve BREACH: ratio {ratio_pct} is below 1:1 backing "
            f"({report.ratio_bps} bps)"
        )
    reasons = ", ".join(failed_checks(report)) or "compliance check failed"
    return (
        f"{report.symbol} non-compliant ({report.status_tier.value}, {ratio_pct}): {reasons}"
    )


class BreachAlertDispatcher:
    """
    Consumes decoded reports and emits at most one Alert per report.

    Never raises on delivery problems: they are logged as DeliveryFailed.
    """

    def __init__(self, webhook: WebhookSender, dedup: DedupStore, source: str):
        self.webhook = webhook
        self.dedup = dedup
        self.source = source
        self.state = DispatcherState.MONITORING

    def _transition(self, new_state: DispatcherState, reference: str) -> None:
        logger.debug(
            "dispatcher_transition",
            from_state=self.state.value,
            to_state=new_state.value,
            report=reference,
        )
        self.state = new_state

    async def handle(self, event: ReportEvent) -> Optional[Alert]:
        report = event.report
        reference = report.reference
        self._transition(DispatcherState.EVALUATING, reference)
        try:
            if report.compliant:
                logger.info("report_compliant_no_alert", report=reference, ratio_bps=report.ratio_bps)
                return None

            if not await self.dedup.claim(reference):
                logger.info("alert_suppressed_duplicate_report", report=reference)
                return None

            self._transition(DispatcherState.ALERTING, reference)
            level = severity_for(report)
            alert = Alert(
                level=level,
                stablecoin=report.symbol,
                ratio_bps=report.ratio_bps,
                compliant=report.compliant,
                message=build_message(report, level),
                timestamp=report.timestamp,
                source_report_reference=reference,
                tx_hash=event.tx_hash,
            )
            logger.info(
                "alert_triggered",
                report=reference,
                level=level.value,
                ratio_bps=report.ratio_bps,
            )
            await self._deliver(alert)
            return alert
        finally:
            self._transition(DispatcherState.MONITORING, reference)

    async def _deliver(self, alert: Alert) -> None:
        try:
            result = await self.webhook.send(alert.to_webhook_payload(self.source))
        except Exception as e:
            result = {"success": False, "detail": str(e)}

        if not result.get("success"):
            err = DeliveryFailed(
                f"alert for {alert.source_report_reference} not delivered",
                detail=result.get("detail", ""),
                level=alert.level.value,
            )
            logger.error("alert_delivery_failed", **err.to_dict())
