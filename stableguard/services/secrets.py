"""
Secret Store — named credential lookup.

Security Principles:
- Secrets are NEVER logged
- A missing secret is a normal, recoverable condition (returns None)
"""

import os
from typing import Optional, Protocol

import structlog

logger = structlog.get_logger(__name__)


class SecretStore(Protocol):
    """Capability: look up one named secret."""

    async def get_secret(self, name: str) -> Optional[str]:
        ...


class EnvSecretStore:
    """Reads secrets from environment variables of the same name."""

    async def get_secret(self, name: str) -> Optional[str]:
        value = os.environ.get(name)
        if not value:
            logger.info("secret_not_available", secret=name)
            return None
        return value


class StaticSecretStore:
    """Fixed mapping, for hosts that inject secrets at startup."""

    def __init__(self, secrets: dict[str, str] | None = None):
        self._secrets = dict(secrets or {})

    async def get_secret(self, name: str) -> Optional[str]:
        return self._secrets.get(name) or None
