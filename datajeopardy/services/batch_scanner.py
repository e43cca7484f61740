"""
Batch risk scan: evaluates every ACTIVE non-admin user in one aggregate pass
and auto-locks those at or above the threshold.

The whole batch is a single transaction. If any lock in the batch fails,
no user in the batch is locked and no entry is written.
"""

import logging
from typing import List, Optional

from sqlalchemy.orm import Session

from .. import crud, models
from ..database import transaction
from ..decorators import retry_on_db_lock
from ..middleware.monitoring import record_lock_transition
from ..types import ScanTrigger, ThreatCategory, UserStatus
from .lock_service import LockService, auto_lock_description
from .risk_engine import RiskAssessment, RiskEngine
from .routine_resolver import find_system_routine

logger = logging.getLogger("BatchScanner")


def batch_lock_description(assessment: RiskAssessment) -> str:
    return f"Batch lock - high risk ({assessment.high_severity_count} violations)"


_DESCRIPTIONS = {
    ScanTrigger.LISTING: auto_lock_description,
    ScanTrigger.BATCH: batch_lock_description,
}


class BatchScanner:

    def __init__(self, risk_engine: RiskEngine, lock_service: Optional[LockService] = None):
        self.risk_engine = risk_engine
        self.lock_service = lock_service or LockService()

    def find_candidates(self, db: Session) -> List[RiskAssessment]:
        active_users = (
            db.query(models.UserAccount)
            .filter(models.UserAccount.status == UserStatus.ACTIVE.value)
            .order_by(models.UserAccount.id)
            .all()
        )
        eligible = [u for u in active_users if not u.is_admin]
        if not eligible:
            return []
        counts = crud.get_severity_counts(db, [u.id for u in eligible])
        return [a for a in self.risk_engine.assess_many(eligible, counts) if a.should_auto_lock]

    @retry_on_db_lock()
    def scan_and_lock(self, db: Session, trigger: ScanTrigger = ScanTrigger.BATCH) -> List[int]:
        """
        Lock every user whose risk crosses the threshold.

        Returns:
            Ids of the users locked by this call (empty when nothing changed)
        """
        describe = _DESCRIPTIONS[trigger]
        locked_ids = []
        with transaction(db, f"{trigger.value} risk scan"):
            candidates = self.find_candidates(db)
            if candidates:
                routine = find_system_routine(db, ThreatCategory.AUTO_LOCK)
                for assessment in candidates:
                    if self.lock_service.apply_auto_lock(db, assessment.user_id, describe(assessment), routine):
                        locked_ids.append(assessment.user_id)

        record_lock_transition("auto_lock", len(locked_ids))
        if locked_ids:
            logger.warning(f"Risk scan ({trigger.value}) locked {len(locked_ids)} user(s): {locked_ids}")
        return locked_ids
