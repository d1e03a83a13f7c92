"""
Regulatory check results, composite score and grade for a published report.

Sections:
  Section 4 — 1:1 reserve backing          (weight 40)
  Section 5 — permitted assets only         (weight 20)
  Section 5 — no rehypothecation            (weight 20)
  Section 8 — monthly attestation recency   (weight 20)

An UNKNOWN result earns half its section weight.
"""

from enum import StrEnum

from pydantic import BaseModel, ConfigDict

from stableguard.compliance.evaluator import is_audit_overdue
from stableguard.compliance.thresholds import BREACH_BPS
from stableguard.oracle.schemas import ComplianceReport

GRADE_COMPLIANT_MIN = 80
GRADE_AT_RISK_MIN = 50


class CheckResult(StrEnum):
    PASS = "PASS"
    FAIL = "FAIL"
    UNKNOWN = "UNKNOWN"


class Grade(StrEnum):
    COMPLIANT = "COMPLIANT"
    AT_RISK = "AT_RISK"
    NON_COMPLIANT = "NON_COMPLIANT"


class SectionCheck(BaseModel):
    model_config = ConfigDict(frozen=True)

    section: str
    title: str
    result: CheckResult
    detail: str
    weight: int

    @property
    def points(self) -> int:
        if self.result == CheckResult.PASS:
            return self.weight
        if self.result == CheckResult.UNKNOWN:
            return self.weight // 2
        return 0


class ComplianceScore(BaseModel):
    model_config = ConfigDict(frozen=True)

    checks: tuple[SectionCheck, ...]
    score: int
    grade: Grade


def grade_for(score: int) -> Grade:
    if score >= GRADE_COMPLIANT_MIN:
        return Grade.COMPLIANT
    if score >= GRADE_AT_RISK_MIN:
        return Grade.AT_RISK
    return Grade.NON_COMPLIANT


def section_checks(report: ComplianceReport) -> tuple[SectionCheck, ...]:
    ratio_pct = f"{report.ratio_bps / 100:.2f}%"
    backing = SectionCheck(
        section="Section 4",
        title="1:1 Reserve Backing",
        result=CheckResult.PASS if report.ratio_bps >= BREACH_BPS else CheckResult.FAIL,
        detail=f"ratio: {ratio_pct}",
        weight=40,
    )
    assets = SectionCheck(
        section="Section 5",
        title="Permitted Assets Only",
        result=CheckResult.PASS if report.permitted_assets_only else CheckResult.FAIL,
        detail=(
            "reserves held in cash, deposits and short-dated T-bills"
            if report.permitted_assets_only
            else "non-permitted asset classes reported in reserves"
        ),
        weight=20,
    )
    rehyp = SectionCheck(
        section="Section 5",
        title="No Rehypothecation",
        result=CheckResult.PASS if report.no_rehypothecation else CheckResult.FAIL,
        detail=(
            "no evidence of reserve re-lending"
            if report.no_rehypothecation
            else "reserves may be re-lent or re-pledged"
        ),
        weight=20,
    )
    if report.last_audit_timestamp == 0:
        audit_result, audit_detail = CheckResult.UNKNOWN, "last attestation date not available"
    elif is_audit_overdue(report.last_audit_timestamp, report.timestamp):
        audit_result, audit_detail = CheckResult.FAIL, "last attestation older than 30 days"
    else:
        audit_result, audit_detail = CheckResult.PASS, "attested within the last 30 days"
    audit = SectionCheck(
        section="Section 8",
        title="Monthly Attestation",
        result=audit_result,
        detail=audit_detail,
        weight=20,
    )
    return (backing, assets, rehyp, audit)


def score_report(report: ComplianceReport) -> ComplianceScore:
    """Composite 0-100 score and grade for a report."""
    checks = section_checks(report)
    score = sum(c.points for c in checks)
    return ComplianceScore(checks=checks, score=score, grade=grade_for(score))
