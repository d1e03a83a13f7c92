"""
Invocation Context — collaborators for exactly one trigger invocation.

No module-level clients: every handler call receives (or builds) a context
from settings plus injected capabilities. The only object that outlives an
invocation is the host-owned DedupStore.
"""

import time
from dataclasses import dataclass, field
from typing import Callable, Optional

import structlog

from stableguard.alerting.channels import HttpWebhookSender, WebhookSender
from stableguard.alerting.dedup import DedupStore, InMemoryDedupStore
from stableguard.alerting.dispatcher import BreachAlertDispatcher
from stableguard.attestation.workflow import AttestationWorkflow
from stableguard.config import Settings
from stableguard.oracle.ledger import HttpLedgerClient, LedgerClient, SimulatedLedgerClient
from stableguard.oracle.publisher import OraclePublisher
from stableguard.oracle.schemas import SubmissionConfig
from stableguard.regulatory.analyzer import RegulatoryAnalyzer
from stableguard.reserves.normalizer import ReserveNormalizer
from stableguard.services.fetcher import DataFetcher, HttpDataFetcher
from stableguard.services.llm_gateway import TextGenerator, build_text_generator
from stableguard.services.secrets import EnvSecretStore, SecretStore

logger = structlog.get_logger(__name__)


@dataclass
class InvocationContext:
    settings: Settings
    fetcher: DataFetcher
    ledger: LedgerClient
    generator: TextGenerator
    secrets: SecretStore
    webhook: WebhookSender
    dedup: DedupStore
    clock: Callable[[], float] = time.time
    normalizer: ReserveNormalizer = field(default_factory=ReserveNormalizer)

    def now(self) -> int:
        return int(self.clock())

    def publisher(self) -> OraclePublisher:
        config = SubmissionConfig(
            receiver=self.settings.oracle_address,
            gas_limit=self.settings.gas_limit,
        )
        return OraclePublisher(self.ledger, config)

    def dispatcher(self) -> BreachAlertDispatcher:
        return BreachAlertDispatcher(self.webhook, self.dedup, source=self.settings.alert_source)

    def attestation(self) -> AttestationWorkflow:
        return AttestationWorkflow(
            generator=self.generator,
            secrets=self.secrets,
            webhook=self.webhook,
            secret_name=self.settings.text_generator_secret_name,
            source=self.settings.alert_source,
        )

    def regulatory(self) -> RegulatoryAnalyzer:
        return RegulatoryAnalyzer(
            workflow=self.attestation(),
            fetcher=self.fetcher,
            webhook=self.webhook,
            text_url=self.settings.regulatory_text_url,
            clock=self.clock,
        )


def build_ledger(settings: Settings) -> LedgerClient:
    mode = settings.ledger_mode.lower()
    if mode == "relay":
        if not settings.ledger_relay_url:
            raise ValueError("LEDGER_MODE=relay requires LEDGER_RELAY_URL")
        return HttpLedgerClient(settings.ledger_relay_url, timeout=settings.ledger_timeout_seconds)
    if mode == "simulated":
        return SimulatedLedgerClient()
    raise ValueError(f"unknown ledger mode: {settings.ledger_mode!r}")


def build_context(
    settings: Settings,
    dedup: Optional[DedupStore] = None,
    ledger: Optional[LedgerClient] = None,
) -> InvocationContext:
    """Context backed by the real HTTP collaborators selected by configuration."""
    return InvocationContext(
        settings=settings,
        fetcher=HttpDataFetcher(timeout=settings.fetch_timeout_seconds),
        ledger=ledger or build_ledger(settings),
        generator=build_text_generator(settings),
        secrets=EnvSecretStore(),
        webhook=HttpWebhookSender(
            settings.alert_webhook_url, timeout=settings.webhook_timeout_seconds
        ),
        dedup=dedup if dedup is not None else InMemoryDedupStore(),
    )
