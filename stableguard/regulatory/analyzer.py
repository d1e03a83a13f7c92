"""
Regulatory Analyzer — regulatory text → structured compliance implications.

The text generator is asked for one minified JSON object:
    {"restrictions": [], "reportingFrequency": null, "yieldRules": null,
     "requiresAction": false, "summary": ""}

The first {...} block of the response is parsed; anything else counts as
"no action required". A WARNING webhook goes out only when requiresAction
is literally true.

Without a credential or a reachable generator the analysis is a fixed
no-action verdict; the regulatory text itself is never parsed as one.
"""

import json
import re
import time
from typing import Any, Callable, Optional

import structlog

from stableguard.alerting.channels import WebhookSender
from stableguard.attestation.workflow import AttestationWorkflow
from stableguard.errors import DeliveryFailed, MalformedResponse
from stableguard.services.fetcher import DataFetcher

logger = structlog.get_logger(__name__)

FALLBACK_REGULATORY_TEXT = "No new regulatory updates available."
MAX_INPUT_CHARS = 5000
MAX_ALERT_ANALYSIS_CHARS = 500
ANALYZER_SOURCE = "StableGuard AI Regulatory Parser"

SYSTEM_PROMPT = """
You are a regulatory compliance analyst for stablecoins.
Analyze the provided text and extract structured data.

OUTPUT FORMAT (CRITICAL):
- You MUST respond with a SINGLE JSON object with this exact structure:
  {"restrictions": [], "reportingFrequency": null, "yieldRules": null, "requiresAction": false, "summary": ""}

STRICT RULES:
- Output MUST be valid JSON. No markdown, no backticks, no code fences, no prose.
- Output MUST be MINIFIED (one line).
- "requiresAction": true ONLY if there are new mandatory restrictions or reporting requirements.
"""

USER_PROMPT = (
    "Analyze this regulatory text for stablecoin compliance implications "
    "and return the result as JSON:\n\nRegulatory Text:\n"
)

_JSON_BLOCK = re.compile(r"\{[\s\S]*\}")


def simulation_analysis(reason: str) -> str:
    """Minified no-action verdict used when the generator is not called."""
    return json.dumps(
        {
            "restrictions": [],
            "reportingFrequency": None,
            "yieldRules": None,
            "requiresAction": False,
            "summary": f"{reason} (Simulation)",
        },
        separators=(",", ":"),
    )


def extract_analysis(response: str) -> Optional[dict[str, Any]]:
    """First {...} block of a response, or None if there is none or it is not JSON."""
    match = _JSON_BLOCK.search(response)
    if not match:
        return None
    try:
        parsed = json.loads(match.group(0))
    except ValueError:
        return None
    return parsed if isinstance(parsed, dict) else None


def requires_action(response: str) -> bool:
    analysis = extract_analysis(response)
    return analysis is not None and analysis.get("requiresAction") is True


class RegulatoryAnalyzer:
    """Runs regulatory text through the text generator and flags new obligations."""

    def __init__(
        self,
        workflow: AttestationWorkflow,
        fetcher: DataFetcher,
        webhook: WebhookSender,
        text_url: str = "",
        clock: Callable[[], float] = time.time,
    ):
        self.workflow = workflow
        self.fetcher = fetcher
        self.webhook = webhook
        self.text_url = text_url
        self.clock = clock

    async def analyze_text(self, text: str) -> str:
        """
        One analysis call. Returns the raw generator response.

        MalformedResponse propagates to the caller.
        """
        user = USER_PROMPT + text[:MAX_INPUT_CHARS]
        response, simulated = await self.workflow.generate_text(
            SYSTEM_PROMPT, user, simulate=simulation_analysis
        )
        logger.info("regulatory_analysis_complete", chars=len(response), simulated=simulated)
        return response

    async def fetch_text(self) -> str:
        if not self.text_url:
            logger.info("regulatory_text_url_unset_using_fallback")
            return FALLBACK_REGULATORY_TEXT
        try:
            text = await self.fetcher.fetch_text(self.text_url)
        except Exception as e:
            logger.warning("regulatory_text_unavailable", url=self.text_url, error=str(e))
            return FALLBACK_REGULATORY_TEXT
        logger.info("regulatory_text_fetched", chars=len(text))
        return text

    async def scan(self) -> str:
        """Scheduled scan. Returns "action_required" or "compliant"."""
        text = await self.fetch_text()
        try:
            response = await self.analyze_text(text)
        except MalformedResponse as e:
            logger.error("regulatory_analysis_failed", **e.to_dict())
            response = json.dumps({"requiresAction": False, "summary": "AI Module Failed"})

        if not requires_action(response):
            return "compliant"

        logger.warning("regulatory_action_required", analysis=response[:200])
        await self._alert(response)
        return "action_required"

    async def _alert(self, response: str) -> None:
        payload = {
            "level": "WARNING",
            "message": "New Regulatory Compliance Requirement Detected",
            "analysis": response[:MAX_ALERT_ANALYSIS_CHARS],
            "timestamp": str(int(self.clock())),
            "source": ANALYZER_SOURCE,
        }
        try:
            result = await self.webhook.send(payload)
        except Exception as e:
            result = {"success": False, "detail": str(e)}
        if not result.get("success"):
            err = DeliveryFailed("regulatory alert not delivered", detail=result.get("detail", ""))
            logger.error("regulatory_alert_delivery_failed", **err.to_dict())
