"""
Report Codec — ComplianceReport ↔ fixed-layout ABI tuple.

Wire layout (SCHEMA_VERSION 1, 10 static words = 320 bytes):

    uint256 timestamp
    uint256 totalReserves
    uint256 totalSupply
    uint16  ratioBps
    bool    compliant
    bytes32 proofHash
    bytes4  stablecoinSymbol      right-padded with NUL
    bool    permittedAssetsOnly
    bool    noRehypothecation
    uint256 lastAuditTimestamp

Field widths and order are a public contract: changing them requires a new
SCHEMA_VERSION. Decoding never reinterprets bytes that do not fit the layout;
it raises SchemaMismatch.
"""

from typing import Sequence, Union

from eth_abi import decode, encode
from eth_abi.exceptions import DecodingError, EncodingError
from pydantic import ValidationError
from web3 import Web3

from stableguard.errors import SchemaMismatch
from stableguard.oracle.schemas import ComplianceReport, ReportEvent
from stableguard.reserves.schemas import SYMBOL_WIDTH

SCHEMA_VERSION = 1

REPORT_FIELDS: tuple[tuple[str, str], ...] = (
    ("timestamp", "uint256"),
    ("totalReserves", "uint256"),
    ("totalSupply", "uint256"),
    ("ratioBps", "uint16"),
    ("compliant", "bool"),
    ("proofHash", "bytes32"),
    ("stablecoinSymbol", "bytes4"),
    ("permittedAssetsOnly", "bool"),
    ("noRehypothecation", "bool"),
    ("lastAuditTimestamp", "uint256"),
)

REPORT_TUPLE_TYPE = "(" + ",".join(t for _, t in REPORT_FIELDS) + ")"
REPORT_SIZE = 32 * len(REPORT_FIELDS)

REPORT_UPDATED_SIGNATURE = f"ReportUpdated(uint256,{REPORT_TUPLE_TYPE})"

HexLike = Union[bytes, str]


def keccak256(data: bytes) -> bytes:
    return bytes(Web3.keccak(data))


REPORT_UPDATED_TOPIC = keccak256(REPORT_UPDATED_SIGNATURE.encode("ascii"))


def to_bytes(value: HexLike) -> bytes:
    """Accept raw bytes or a 0x-prefixed hex string."""
    if isinstance(value, (bytes, bytearray)):
        return bytes(value)
    h = value[2:] if value.startswith(("0x", "0X")) else value
    try:
        return bytes.fromhex(h)
    except ValueError as e:
        raise SchemaMismatch(f"invalid hex payload: {value[:18]!r}", cause=e) from e


def encode_symbol(symbol: str) -> bytes:
    raw = symbol.encode("ascii")
    if len(raw) > SYMBOL_WIDTH:
        raise SchemaMismatch(f"symbol {symbol!r} exceeds {SYMBOL_WIDTH} bytes")
    return raw.ljust(SYMBOL_WIDTH, b"\x00")


def decode_symbol(raw: bytes) -> str:
    """Stop at the first NUL byte, discard the padding."""
    head = raw.split(b"\x00", 1)[0]
    try:
        return head.decode("ascii")
    except UnicodeDecodeError as e:
        raise SchemaMismatch(f"symbol bytes are not ASCII: {raw.hex()}", cause=e) from e


def encode_report(report: ComplianceReport) -> bytes:
    """Encode a report to its 320-byte wire form."""
    values = (
        report.timestamp,
        report.total_reserves,
        report.total_supply,
        report.ratio_bps,
        report.compliant,
        report.proof_hash,
        encode_symbol(report.symbol),
        report.permitted_assets_only,
        report.no_rehypothecation,
        report.last_audit_timestamp,
    )
    try:
        payload = encode([REPORT_TUPLE_TYPE], [values])
    except EncodingError as e:
        raise SchemaMismatch(
            f"{report.symbol}: report does not fit wire layout v{SCHEMA_VERSION}: {e}",
            cause=e,
            reference=report.reference,
        ) from e
    return payload


def decode_report(payload: HexLike) -> ComplianceReport:
    """Decode a 320-byte wire payload. Rejects any other size or non-canonical word."""
    data = to_bytes(payload)
    if len(data) != REPORT_SIZE:
        raise SchemaMismatch(
            f"report payload must be {REPORT_SIZE} bytes, got {len(data)}",
            expected=REPORT_SIZE,
            actual=len(data),
        )
    try:
        (values,) = decode([REPORT_TUPLE_TYPE], data, strict=True)
    except DecodingError as e:
        raise SchemaMismatch(f"report payload violates wire layout: {e}", cause=e) from e

    (
        timestamp,
        total_reserves,
        total_supply,
        ratio_bps,
        compliant,
        proof_hash,
        symbol_raw,
        permitted,
        no_rehyp,
        last_audit,
    ) = values

    try:
        return ComplianceReport(
            timestamp=timestamp,
            total_reserves=total_reserves,
            total_supply=total_supply,
            ratio_bps=ratio_bps,
            compliant=compliant,
            proof_hash=bytes(proof_hash),
            symbol=decode_symbol(bytes(symbol_raw)),
            permitted_assets_only=permitted,
            no_rehypothecation=no_rehyp,
            last_audit_timestamp=last_audit,
        )
    except ValidationError as e:
        raise SchemaMismatch(f"decoded report is invalid: {e}", cause=e) from e


def decode_event(
    topics: Sequence[HexLike],
    data: HexLike,
    tx_hash: HexLike,
    block_number: int | None = None,
) -> ReportEvent:
    """
    Decode a ReportUpdated log.

    topics[0] is the event selector, topics[1] the indexed report timestamp,
    data the encoded report tuple.
    """
    if len(topics) != 2:
        raise SchemaMismatch(f"ReportUpdated expects 2 topics, got {len(topics)}")
    selector = to_bytes(topics[0])
    if selector != REPORT_UPDATED_TOPIC:
        raise SchemaMismatch(f"unexpected event selector 0x{selector.hex()}")
    indexed = to_bytes(topics[1])
    if len(indexed) != 32:
        raise SchemaMismatch(f"indexed timestamp topic must be 32 bytes, got {len(indexed)}")
    indexed_timestamp = int.from_bytes(indexed, "big")

    report = decode_report(data)
    if report.timestamp != indexed_timestamp:
        raise SchemaMismatch(
            "indexed timestamp does not match report timestamp",
            indexed=indexed_timestamp,
            report=report.timestamp,
        )
    return ReportEvent(
        report=report,
        tx_hash="0x" + to_bytes(tx_hash).hex(),
        indexed_timestamp=indexed_timestamp,
        block_number=block_number,
    )


def encode_event(report: ComplianceReport) -> tuple[list[str], str]:
    """Build the (topics, data) pair a ReportUpdated log carries for ``report``."""
    data = encode_report(report)
    topics = [
        "0x" + REPORT_UPDATED_TOPIC.hex(),
        "0x" + report.timestamp.to_bytes(32, "big").hex(),
    ]
    return topics, "0x" + data.hex()
