"""
Attestation prompts and the compliance-data context.

The context is a pure function of the decoded event: the same report and
transaction always produce the same text.
"""

from datetime import datetime, timezone

from stableguard.compliance.scoring import ComplianceScore
from stableguard.oracle.schemas import ReportEvent

SYSTEM_PROMPT = """
You are a stablecoin compliance auditor generating formal GENIUS Act attestation reports.
You produce professional, concise compliance attestation documents.

STRICT RULES:
- Output MUST be plain text (no markdown, no code fences).
- Reference specific GENIUS Act sections (4, 5, 8) for each check.
- State PASS or FAIL for each compliance check with a one-line explanation.
- Include the compliance score and grade.
- Keep the report under 500 words.
- Do NOT invent facts. Use only the data provided.
- End with a formal attestation statement.
"""

USER_PROMPT = (
    "Generate a formal GENIUS Act compliance attestation report based on the "
    "following on-chain data:\n\n{context}\n\nProduce the attestation now."
)


def report_date(timestamp: int) -> str:
    return datetime.fromtimestamp(timestamp, tz=timezone.utc).strftime("%Y-%m-%d")


def build_compliance_context(event: ReportEvent, score: ComplianceScore) -> str:
    report = event.report
    ratio_pct = f"{report.ratio_bps / 100:.2f}"

    lines = [
        "STABLECOIN COMPLIANCE DATA",
        "==========================",
        f"Stablecoin: {report.symbol}",
        f"Report Date: {report_date(report.timestamp)}",
        f"Report Timestamp: {report.timestamp}",
        "",
        "RESERVE HEALTH:",
        f"  Reserve Ratio: {ratio_pct}% ({report.ratio_bps} basis points)",
        f"  Status: {report.status_tier.value}",
        "",
        "GENIUS ACT COMPLIANCE CHECKS:",
    ]
    for check in score.checks:
        lines.append(f"  {check.section} - {check.title}: {check.result.value} ({check.detail})")
    lines += [
        "",
        "COMPOSITE SCORE:",
        f"  Compliance Score: {score.score}/100",
        f"  Grade: {score.grade.value}",
        f"  Overall: {'COMPLIANT' if report.compliant else 'NON-COMPLIANT'}",
        "",
        f"Transaction Hash: {event.tx_hash}",
    ]
    return "\n".join(lines)


def simulation_response(context: str, reason: str) -> str:
    """Clearly labeled stand-in text that embeds the context verbatim."""
    return (
        "COMPLIANCE ATTESTATION - SIMULATION MODE\n\n"
        f"{reason} This is a simulated attestation.\n"
        "In production, this would contain a full GENIUS Act compliance report.\n\n"
        f"Data provided:\n{context}\n\n"
        "Status: SIMULATION - No attestation generated."
    )
