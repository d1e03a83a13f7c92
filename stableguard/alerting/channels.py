"""
Webhook Channel — JSON POST to the configured notification endpoint.

One attempt, no retry. Failures come back as a delivery result
({"success": False, "detail": ...}) instead of an exception.
"""

from typing import Protocol

import httpx
import structlog

logger = structlog.get_logger(__name__)


class WebhookSender(Protocol):
    """Capability: deliver one JSON payload."""

    async def send(self, payload: dict) -> dict:
        """
        Returns:
            dict with delivery result: {"success": bool, "detail": str}
        """
        ...


class HttpWebhookSender:
    """Posts JSON payloads to a single webhook URL."""

    def __init__(
        self,
        url: str,
        timeout: float = 10.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.url = url
        self.timeout = timeout
        self._transport = transport

    async def send(self, payload: dict) -> dict:
        if not self.url:
            return {"success": False, "detail": "No webhook URL configured"}

        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
                response = await client.post(
                    self.url,
                    json=payload,
                    headers={"Content-Type": "application/json"},
                )
        except httpx.HTTPError as e:
            logger.warning("webhook_transport_error", url=self.url, error=str(e))
            return {"success": False, "detail": str(e) or type(e).__name__}

        if response.status_code < 400:
            logger.info("webhook_sent", url=self.url, status=response.status_code)
            return {"success": True, "detail": f"HTTP {response.status_code}"}
        logger.warning("webhook_rejected", url=self.url, status=response.status_code)
        return {"success": False, "detail": f"HTTP {response.status_code}"}
