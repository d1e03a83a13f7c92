"""
Ledger Clients — capability for writing reports and calling contracts.

The host owns signing, consensus and chain access. StableGuard only hands
over the encoded report with its declared envelope and reads back a
tri-state result.

- HttpLedgerClient: posts to a ledger relay over HTTP
- SimulatedLedgerClient: append-only in-memory log for local runs and tests
"""

import base64
from typing import Protocol

import httpx
import structlog

from stableguard.oracle.codec import keccak256
from stableguard.oracle.schemas import SubmissionConfig, SubmissionResult, SubmissionStatus

logger = structlog.get_logger(__name__)


class LedgerClient(Protocol):
    """Capability: durable report submission + read/call access."""

    async def submit_report(self, payload: bytes, config: SubmissionConfig) -> SubmissionResult:
        ...

    async def call_contract(self, address: str, data: bytes) -> bytes:
        ...


class HttpLedgerClient:
    """
    Ledger relay over HTTP.

    POST {base_url}/reports   {receiver, encodedPayload(base64), encoderName,
                               signingAlgo, hashingAlgo, gasConfig}
         → {"txStatus": "SUCCESS" | ..., "txHash": "0x..."}
    POST {base_url}/call      {to, data(hex)} → {"data": "0x..."}

    Transport errors raise; the caller decides how to degrade.
    """

    def __init__(
        self,
        base_url: str,
        timeout: float = 30.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._transport = transport

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(timeout=self.timeout, transport=self._transport)

    async def submit_report(self, payload: bytes, config: SubmissionConfig) -> SubmissionResult:
        body = {
            "receiver": config.receiver,
            "encodedPayload": base64.b64encode(payload).decode("ascii"),
            "encoderName": config.encoder_name,
            "signingAlgo": config.signing_algo,
            "hashingAlgo": config.hashing_algo,
            "gasConfig": {"gasLimit": str(config.gas_limit)},
        }
        async with self._client() as client:
            resp = await client.post(f"{self.base_url}/reports", json=body)
            resp.raise_for_status()
            data = resp.json()

        tx_status = str(data.get("txStatus", "")).upper()
        tx_hash = data.get("txHash") or ""
        if tx_status == SubmissionStatus.SUCCESS:
            return SubmissionResult(status=SubmissionStatus.SUCCESS, tx_hash=tx_hash)
        return SubmissionResult(
            status=SubmissionStatus.FAILED,
            tx_hash=tx_hash,
            detail=f"txStatus={tx_status or 'missing'}",
        )

    async def call_contract(self, address: str, data: bytes) -> bytes:
        async with self._client() as client:
            resp = await client.post(
                f"{self.base_url}/call",
                json={"to": address, "data": "0x" + data.hex()},
            )
            resp.raise_for_status()
            result = resp.json().get("data") or "0x"
        return bytes.fromhex(result[2:] if result.startswith("0x") else result)


class SimulatedLedgerClient:
    """
    In-memory, append-only stand-in for the ledger.

    Every submission is recorded and answered with SIMULATED.
    """

    def __init__(self):
        self.submissions: list[tuple[bytes, SubmissionConfig]] = []
        self.calls: list[tuple[str, bytes]] = []

    async def submit_report(self, payload: bytes, config: SubmissionConfig) -> SubmissionResult:
        self.submissions.append((payload, config))
        tx_hash = "0x" + keccak256(payload).hex()
        logger.info("ledger_simulated_submit", receiver=config.receiver, tx_hash=tx_hash)
        return SubmissionResult(
            status=SubmissionStatus.SIMULATED,
            tx_hash=tx_hash,
            detail="simulation mode",
        )

    async def call_contract(self, address: str, data: bytes) -> bytes:
        self.calls.append((address, data))
        logger.info("ledger_simulated_call", to=address, selector="0x" + data[:4].hex())
        return b""
