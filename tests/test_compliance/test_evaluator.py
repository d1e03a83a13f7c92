"""
Compliance Evaluator Tests.

Includes property-based tests via Hypothesis.
"""

import pytest
from hypothesis import given, settings as hyp_settings
from hypothesis import strategies as st

from stableguard.compliance.evaluator import evaluate, is_audit_overdue, reserve_ratio_bps
from stableguard.compliance.schemas import Reason, StatusTier
from stableguard.compliance.thresholds import (
    AUDIT_MAX_AGE_SECONDS,
    BREACH_BPS,
    CRITICAL_BPS,
    TIER_TABLE,
    WARNING_BPS,
    tier_for,
)
from stableguard.reserves.schemas import DataQuality
from tests.conftest import DAY, NOW, OVERDUE_AUDIT, make_snapshot


class TestRatio:
    def test_exact_floor(self):
        assert reserve_ratio_bps(10_250, 10_000) == 10_250
        assert reserve_ratio_bps(2, 3) == 6_666

    def test_zero_supply_is_undefined(self):
        with pytest.raises(ValueError):
            reserve_ratio_bps(100, 0)

    @given(
        reserves=st.integers(min_value=0, max_value=10**40),
        supply=st.integers(min_value=1, max_value=10**40),
    )
    @hyp_settings(max_examples=200)
    def test_ratio_is_floor_of_exact_quotient(self, reserves, supply):
        ratio = reserve_ratio_bps(reserves, supply)
        # floor: ratio/10000 <= reserves/supply < (ratio+1)/10000
        assert ratio * supply <= reserves * 10_000 < (ratio + 1) * supply


class TestTiers:
    @pytest.mark.parametrize(
        "ratio,tier",
        [
            (10_200, StatusTier.HEALTHY),
            (10_199, StatusTier.WARNING),
            (10_050, StatusTier.WARNING),
            (10_049, StatusTier.CRITICAL),
            (10_000, StatusTier.CRITICAL),
            (9_999, StatusTier.BREACH),
            (0, StatusTier.BREACH),
        ],
    )
    def test_boundaries(self, ratio, tier):
        assert tier_for(ratio) == tier

    def test_table_is_ordered_descending(self):
        minimums = [m for m, _ in TIER_TABLE]
        assert minimums == sorted(minimums, reverse=True)
        assert minimums[:3] == [WARNING_BPS, CRITICAL_BPS, BREACH_BPS]

    @given(st.integers(min_value=0, max_value=65_535))
    @hyp_settings(max_examples=100)
    def test_tier_monotonic(self, ratio):
        order = [t for _, t in TIER_TABLE]
        assert order.index(tier_for(ratio + 1)) <= order.index(tier_for(ratio))


class TestAudit:
    def test_unknown_is_never_overdue(self):
        assert is_audit_overdue(0, NOW) is False

    def test_exactly_thirty_days_is_not_overdue(self):
        assert is_audit_overdue(NOW - AUDIT_MAX_AGE_SECONDS, NOW) is False

    def test_older_than_thirty_days(self):
        assert is_audit_overdue(NOW - AUDIT_MAX_AGE_SECONDS - 1, NOW) is True


class TestEvaluate:
    def test_healthy_and_compliant(self):
        verdict = evaluate(make_snapshot(reserves=10_300, supply=10_000), now=NOW)
        assert verdict.ratio_bps == 10_300
        assert verdict.status_tier == StatusTier.HEALTHY
        assert verdict.compliant is True
        assert verdict.reasons == ()

    def test_overdue_audit_is_healthy_but_non_compliant(self):
        verdict = evaluate(
            make_snapshot(reserves=10_300, supply=10_000, last_audit=NOW - 31 * DAY), now=NOW
        )
        assert verdict.ratio_bps == 10_300
        assert verdict.status_tier == StatusTier.HEALTHY
        assert verdict.compliant is False
        assert verdict.audit_overdue is True
        assert Reason.AUDIT_OVERDUE in verdict.reasons

    def test_warning_tier_is_non_compliant(self):
        verdict = evaluate(make_snapshot(reserves=10_100, supply=10_000), now=NOW)
        assert verdict.status_tier == StatusTier.WARNING
        assert verdict.compliant is False
        assert verdict.reasons == (Reason.RATIO_BELOW_WARNING,)

    def test_flags_fail_independently_of_ratio(self):
        verdict = evaluate(
            make_snapshot(reserves=11_000, supply=10_000, permitted=False, no_rehyp=False), now=NOW
        )
        assert verdict.status_tier == StatusTier.HEALTHY
        assert verdict.compliant is False
        assert Reason.NON_PERMITTED_ASSETS in verdict.reasons
        assert Reason.REHYPOTHECATION in verdict.reasons

    def test_unknown_audit_is_reported_not_failed(self):
        verdict = evaluate(make_snapshot(last_audit=0), now=NOW)
        assert verdict.audit_unknown is True
        assert verdict.audit_overdue is False
        assert verdict.compliant is True
        assert Reason.AUDIT_UNKNOWN in verdict.reasons

    def test_assumed_parity_is_visible(self):
        verdict = evaluate(
            make_snapshot(reserves=100, supply=100, quality=DataQuality.ASSUMED_PARITY), now=NOW
        )
        assert verdict.ratio_bps == 10_000
        assert verdict.data_quality == DataQuality.ASSUMED_PARITY
        assert Reason.ASSUMED_PARITY in verdict.reasons
        assert verdict.compliant is False

    def test_zero_supply_is_skipped(self):
        verdict = evaluate(make_snapshot(reserves=5, supply=0), now=NOW)
        assert verdict.skipped is True
        assert verdict.status_tier == StatusTier.SKIPPED
        assert verdict.ratio_bps == 0
        assert verdict.compliant is False
        assert verdict.reasons == (Reason.ZERO_SUPPLY,)

    def test_overdue_reference_uses_cycle_time(self):
        snap = make_snapshot(last_audit=OVERDUE_AUDIT)
        assert evaluate(snap, now=NOW).audit_overdue is True
        assert evaluate(snap, now=OVERDUE_AUDIT + DAY).audit_overdue is False

    @given(
        reserves=st.integers(min_value=0, max_value=10**12),
        supply=st.integers(min_value=1, max_value=10**12),
    )
    @hyp_settings(max_examples=100)
    def test_deterministic(self, reserves, supply):
        snap = make_snapshot(reserves=reserves, supply=supply)
        assert evaluate(snap, now=NOW) == evaluate(snap, now=NOW)
