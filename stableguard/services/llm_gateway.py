"""
LLM Gateway — text-generation collaborators.

Two interchangeable providers behind one capability, selected by
configuration (TEXT_GENERATOR_PROVIDER):
- gemini:    Google Generative Language API (generateContent)
- anthropic: Claude Messages API

Contract:
- HTTP / transport failures raise httpx.HTTPError (caller degrades)
- A 2xx response without usable text raises MalformedResponse
"""

from typing import Protocol

import httpx
import structlog
from pydantic import BaseModel

from stableguard.config import Settings
from stableguard.errors import MalformedResponse

logger = structlog.get_logger(__name__)

GEMINI_API_URL = "https://generativelanguage.googleapis.com/v1beta/models/{model}:generateContent"
ANTHROPIC_API_URL = "https://api.anthropic.com/v1/messages"
ANTHROPIC_VERSION = "2023-06-01"


class GeneratedText(BaseModel):
    text: str
    response_id: str = ""
    provider: str = ""


class TextGenerator(Protocol):
    """Capability: one system + user prompt → generated text."""

    async def generate(self, system: str, user: str, api_key: str) -> GeneratedText:
        ...


def _json_body(response: httpx.Response, provider: str) -> dict:
    try:
        data = response.json()
    except ValueError as e:
        raise MalformedResponse(f"{provider} response is not JSON", cause=e) from e
    if not isinstance(data, dict):
        raise MalformedResponse(f"{provider} response is not a JSON object")
    return data


class GeminiTextGenerator:
    """Gemini generateContent, non-streaming."""

    provider = "gemini"

    def __init__(
        self,
        model: str = "gemini-2.0-flash",
        timeout: float = 60.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.model = model
        self.timeout = timeout
        self._transport = transport

    async def generate(self, system: str, user: str, api_key: str) -> GeneratedText:
        payload = {
            "system_instruction": {"parts": [{"text": system}]},
            "contents": [{"parts": [{"text": user}]}],
        }
        headers = {"Content-Type": "application/json", "x-goog-api-key": api_key}

        async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
            response = await client.post(
                GEMINI_API_URL.format(model=self.model), json=payload, headers=headers
            )
            if response.status_code != 200:
                logger.error(
                    "llm_api_error",
                    provider=self.provider,
                    status=response.status_code,
                    body=response.text[:500],
                )
            response.raise_for_status()

        data = _json_body(response, self.provider)
        try:
            text = data["candidates"][0]["content"]["parts"][0]["text"]
        except (KeyError, IndexError, TypeError) as e:
            raise MalformedResponse("Malformed Gemini response: missing text", cause=e) from e
        if not isinstance(text, str) or not text.strip():
            raise MalformedResponse("Malformed Gemini response: empty text")

        return GeneratedText(
            text=text,
            response_id=str(data.get("responseId", "")),
            provider=self.provider,
        )


class AnthropicTextGenerator:
    """Claude Messages API, non-streaming."""

    provider = "anthropic"

    def __init__(
        self,
        model: str = "claude-haiku-4-5-20251001",
        max_tokens: int = 1024,
        timeout: float = 60.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.model = model
        self.max_tokens = max_tokens
        self.timeout = timeout
        self._transport = transport

    async def generate(self, system: str, user: str, api_key: str) -> GeneratedText:
        headers = {
            "x-api-key": api_key,
            "anthropic-version": ANTHROPIC_VERSION,
            "content-type": "application/json",
        }
        payload = {
            "model": self.model,
            "max_tokens": self.max_tokens,
            "system": system,
            "messages": [{"role": "user", "content": user}],
        }

        async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
            response = await client.post(ANTHROPIC_API_URL, json=payload, headers=headers)
            if response.status_code != 200:
                logger.error(
                    "llm_api_error",
                    provider=self.provider,
                    status=response.status_code,
                    body=response.text[:500],
                )
            response.raise_for_status()

        data = _json_body(response, self.provider)
        content = data.get("content")
        if not isinstance(content, list):
            raise MalformedResponse("Malformed Claude response: missing content")
        text = "".join(
            block.get("text", "")
            for block in content
            if isinstance(block, dict) and block.get("type") == "text"
        )
        if not text.strip():
            raise MalformedResponse("Malformed Claude response: empty text")

        return GeneratedText(text=text, response_id=str(data.get("id", "")), provider=self.provider)


def build_text_generator(settings: Settings) -> TextGenerator:
    """Select the configured provider."""
    provider = settings.text_generator_provider.lower()
    if provider == "anthropic":
        return AnthropicTextGenerator(
            model=settings.text_generator_model,
            max_tokens=settings.text_generator_max_tokens,
            timeout=settings.text_generator_timeout_seconds,
        )
    if provider == "gemini":
        return GeminiTextGenerator(
            model=settings.text_generator_model,
            timeout=settings.text_generator_timeout_seconds,
        )
    raise ValueError(f"unknown text generator provider: {settings.text_generator_provider!r}")
