"""
Unit tests for risk score computation and auto-lock eligibility.
"""

from types import SimpleNamespace

from datajeopardy.services.risk_engine import RiskEngine, compute_risk, compute_risk_score
from datajeopardy.types import UserStatus


class TestRiskScore:

    def test_score_formula(self):
        assert compute_risk_score(0, UserStatus.ACTIVE) == 0
        assert compute_risk_score(4, UserStatus.ACTIVE) == 60
        assert compute_risk_score(2, UserStatus.LOCKED) == 60

    def test_score_capped_at_100(self):
        assert compute_risk_score(7, UserStatus.ACTIVE) == 100
        assert compute_risk_score(5, UserStatus.LOCKED) == 100

    def test_score_always_within_bounds(self):
        for count in range(0, 200, 3):
            for status in (UserStatus.ACTIVE, UserStatus.LOCKED):
                assert 0 <= compute_risk_score(count, status) <= 100


class TestAutoLockDecision:

    def test_threshold_reached(self):
        risk = compute_risk("Developer", 4, UserStatus.ACTIVE, threshold=60)
        assert risk.risk_score == 60
        assert risk.should_auto_lock is True

    def test_below_threshold(self):
        assert compute_risk("Developer", 3, UserStatus.ACTIVE, threshold=60).should_auto_lock is False

    def test_admin_never_flagged(self):
        for count in (0, 4, 50):
            risk = compute_risk("Admin", count, UserStatus.ACTIVE, threshold=0)
            assert risk.should_auto_lock is False

    def test_locked_user_not_flagged(self):
        risk = compute_risk("Developer", 10, UserStatus.LOCKED, threshold=60)
        assert risk.risk_score == 100
        assert risk.should_auto_lock is False

    def test_threshold_is_configurable(self):
        assert compute_risk("Guest", 2, UserStatus.ACTIVE, threshold=30).should_auto_lock is True
        assert compute_risk("Guest", 2, UserStatus.ACTIVE, threshold=31).should_auto_lock is False


class TestRiskEngineBatch:

    def test_assess_many_uses_precomputed_counts(self):
        users = [
            SimpleNamespace(id=1, role_name="Developer", status="ACTIVE"),
            SimpleNamespace(id=2, role_name="Admin", status="ACTIVE"),
            SimpleNamespace(id=3, role_name="Guest", status="LOCKED"),
            SimpleNamespace(id=4, role_name="Guest", status="ACTIVE"),
        ]
        counts = {1: {"high": 4, "recent_high": 1}, 2: {"high": 9, "recent_high": 0}, 3: {"high": 1, "recent_high": 1}}

        results = RiskEngine(threshold=60).assess_many(users, counts)

        assert [r.user_id for r in results] == [1, 2, 3, 4]
        assert [r.risk_score for r in results] == [60, 100, 45, 0]
        assert [r.should_auto_lock for r in results] == [True, False, False, False]
        assert results[0].recent_high_count == 1
        assert results[3].high_severity_count == 0
