"""
Ad hoc text request — HTTP trigger.

Body: {"text": "..."}. The text goes straight to the regulatory analysis
generation call, bypassing the report pipeline. Validation problems come
back as plain strings, never as exceptions.
"""

import json
from typing import Union

import structlog

from stableguard.errors import MalformedResponse
from stableguard.workflows.context import InvocationContext

logger = structlog.get_logger(__name__)

EMPTY_REQUEST = "Error: Empty request"
INVALID_JSON = "Error: Invalid JSON"
TEXT_REQUIRED = "Error: 'text' field is required"


def parse_request(body: Union[bytes, str, None]) -> tuple[str | None, str | None]:
    """Returns (text, error). Exactly one of them is None."""
    if not body:
        return None, EMPTY_REQUEST
    try:
        data = json.loads(body)
    except (ValueError, UnicodeDecodeError):
        return None, INVALID_JSON

    text = data.get("text") if isinstance(data, dict) else None
    if not isinstance(text, str) or not text.strip():
        return None, TEXT_REQUIRED
    return text, None


async def handle_text_request(ctx: InvocationContext, body: Union[bytes, str, None]) -> str:
    text, error = parse_request(body)
    if error is not None:
        logger.warning("adhoc_request_rejected", reason=error)
        return error

    logger.info("adhoc_request_received", chars=len(text))
    try:
        return await ctx.regulatory().analyze_text(text)
    except MalformedResponse as e:
        logger.error("adhoc_generation_failed", **e.to_dict())
        return f"error:malformed_response:{e.message}"
