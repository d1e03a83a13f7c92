"""Tests for the safeguard trigger."""

import pytest

from stableguard.workflows.safeguard import (
    EVALUATE_AND_ACT_SELECTOR,
    SAFEGUARD_COMPLETE,
    run_safeguard,
)
from tests.conftest import RecordingWebhook, UnreachableLedger


def test_selector_constant():
    assert EVALUATE_AND_ACT_SELECTOR.hex() == "63bc1659"


@pytest.mark.asyncio
async def test_calls_controller_and_notifies(ctx, ledger, webhook):
    assert await run_safeguard(ctx) == SAFEGUARD_COMPLETE
    assert ledger.calls == [(ctx.settings.safeguard_controller_address, bytes.fromhex("63bc1659"))]
    payload = webhook.sent[0]
    assert payload["level"] == "INFO"
    assert payload["message"] == "Safeguard evaluation completed"
    assert payload["timestamp"] == "2025-06-15T15:06:40+00:00"
    assert payload["source"] == ctx.settings.alert_source


@pytest.mark.asyncio
async def test_failures_are_swallowed(ctx):
    ctx.ledger = UnreachableLedger()
    ctx.webhook = RecordingWebhook(raises=ConnectionError("refused"))
    assert await run_safeguard(ctx) == "safeguard_evaluation_complete"
    assert len(ctx.ledger.calls) == 1
