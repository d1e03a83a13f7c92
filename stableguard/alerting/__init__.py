"""
Breach Alert Dispatcher.

Components:
- schemas: Alert, AlertLevel, dispatcher states
- channels: WebhookSender capability + httpx implementation
- dedup: report-identity dedup store (one alert per report)
- dispatcher: MONITORING → EVALUATING → ALERTING state machine
"""
