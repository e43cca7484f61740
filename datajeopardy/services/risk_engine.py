"""
Risk Engine - derives a bounded risk score from a user's HIGH audit entries.

Scores are never stored; they are recomputed on demand:

    score = min(100, high_count * 15 + (30 if LOCKED else 0))

A user is flagged for auto-lock when the score reaches the threshold, the
account is ACTIVE and the role is not Admin. The Admin exemption is a policy
invariant, not a setting.
"""

from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional

from ..models import ADMIN_ROLE_NAME, UserAccount
from ..types import UserStatus

MAX_RISK_SCORE = 100
HIGH_ENTRY_WEIGHT = 15
LOCKED_PENALTY = 30


@dataclass(frozen=True)
class RiskAssessment:
    user_id: Optional[int]
    high_severity_count: int
    recent_high_count: int
    risk_score: int
    should_auto_lock: bool


def compute_risk_score(high_severity_count: int, status: str) -> int:
    penalty = LOCKED_PENALTY if status == UserStatus.LOCKED else 0
    return min(MAX_RISK_SCORE, max(0, high_severity_count) * HIGH_ENTRY_WEIGHT + penalty)


def compute_risk(
    role_name: Optional[str],
    high_severity_count: int,
    status: str,
    threshold: int,
    user_id: Optional[int] = None,
    recent_high_count: int = 0,
) -> RiskAssessment:
    score = compute_risk_score(high_severity_count, status)
    should_lock = (
        role_name != ADMIN_ROLE_NAME
        and status == UserStatus.ACTIVE
        and score >= threshold
    )
    return RiskAssessment(
        user_id=user_id,
        high_severity_count=high_severity_count,
        recent_high_count=recent_high_count,
        risk_score=score,
        should_auto_lock=should_lock,
    )


class RiskEngine:
    """Risk aggregation with an explicit auto-lock threshold."""

    def __init__(self, threshold: int):
        self.threshold = threshold

    def assess(self, user: UserAccount, counts: Optional[dict] = None) -> RiskAssessment:
        counts = counts or {}
        return compute_risk(
            user.role_name,
            counts.get("high", 0),
            user.status,
            self.threshold,
            user_id=user.id,
            recent_high_count=counts.get("recent_high", 0),
        )

    def assess_many(
        self, users: Iterable[UserAccount], severity_counts: Dict[int, dict]
    ) -> List[RiskAssessment]:
        """One pass over users against a precomputed {user_id: counts} map."""
        return [self.assess(u, severity_counts.get(u.id)) for u in users]
