"""
Account Lock Service

State transitions for user accounts, each paired with its audit entry:

    auto-lock      ACTIVE -> LOCKED   one HIGH entry, AUTO_LOCK routine
    manual lock    *      -> LOCKED   one HIGH entry, MANUAL_LOCK routine
    manual unlock  *      -> ACTIVE   purge history, then one LOW entry,
                                      MANUAL_UNLOCK routine

Every public transition is its own all-or-nothing transaction. The auto-lock
update is conditional on the account still being ACTIVE, so when two callers
race on the same user the loser changes nothing and writes no entry.
"""

import logging
from typing import Optional

from sqlalchemy.orm import Session

from .. import crud, models
from ..database import transaction
from ..decorators import retry_on_db_lock
from ..exceptions import UserNotFoundException
from ..middleware.monitoring import record_lock_transition
from ..types import Severity, ThreatCategory, UserStatus
from .risk_engine import RiskAssessment
from .routine_resolver import find_system_routine

logger = logging.getLogger("LockService")

AUTO_LOCK_ACTION = "Account auto-locked"
MANUAL_LOCK_TEXT = "MANUAL LOCK"
MANUAL_LOCK_ACTION = "Account locked by admin"
MANUAL_UNLOCK_TEXT = "MANUAL UNLOCK - risk reset"
MANUAL_UNLOCK_ACTION = "Account unlocked by admin"


def auto_lock_description(assessment: RiskAssessment) -> str:
    return f"AUTO-LOCK (RiskScore {assessment.risk_score})"


def _routine_id(routine: Optional[models.HandlerRoutine]) -> Optional[int]:
    return routine.id if routine else None


class LockService:

    def apply_auto_lock(
        self,
        db: Session,
        user_id: int,
        description: str,
        routine: Optional[models.HandlerRoutine] = None,
    ) -> bool:
        """
        ACTIVE -> LOCKED plus one HIGH entry. The caller owns the transaction.

        Returns False (and writes nothing) when the user was no longer ACTIVE.
        """
        changed = crud.set_status(db, user_id, UserStatus.LOCKED.value, only_if=UserStatus.ACTIVE.value)
        if not changed:
            logger.info(f"Auto-lock skipped for user {user_id}: already locked")
            return False
        crud.create_log(db, user_id, description, Severity.HIGH.value, AUTO_LOCK_ACTION, _routine_id(routine))
        logger.warning(f"User {user_id} auto-locked: {description}")
        return True

    @retry_on_db_lock()
    def auto_lock(self, db: Session, assessment: RiskAssessment) -> bool:
        with transaction(db, "auto-lock"):
            routine = find_system_routine(db, ThreatCategory.AUTO_LOCK)
            locked = self.apply_auto_lock(db, assessment.user_id, auto_lock_description(assessment), routine)
        record_lock_transition("auto_lock", int(locked))
        return locked

    @retry_on_db_lock()
    def manual_lock(self, db: Session, user_id: int) -> models.AuditLog:
        with transaction(db, "manual lock"):
            if crud.get_user(db, user_id) is None:
                raise UserNotFoundException(user_id)
            crud.set_status(db, user_id, UserStatus.LOCKED.value)
            routine = find_system_routine(db, ThreatCategory.MANUAL_LOCK)
            entry = crud.create_log(
                db, user_id, MANUAL_LOCK_TEXT, Severity.HIGH.value, MANUAL_LOCK_ACTION, _routine_id(routine)
            )
        record_lock_transition("manual_lock")
        logger.warning(f"User {user_id} locked by admin")
        return entry

    @retry_on_db_lock()
    def manual_unlock(self, db: Session, user_id: int) -> models.AuditLog:
        """
        Unlock and reset risk: the user's whole audit history is deleted
        before the status flip, and the unlock entry is written last so it
        survives the purge.
        """
        with transaction(db, "manual unlock"):
            if crud.get_user(db, user_id) is None:
                raise UserNotFoundException(user_id)
            purged = crud.purge_user_logs(db, user_id)
            crud.set_status(db, user_id, UserStatus.ACTIVE.value)
            routine = find_system_routine(db, ThreatCategory.MANUAL_UNLOCK)
            entry = crud.create_log(
                db, user_id, MANUAL_UNLOCK_TEXT, Severity.LOW.value, MANUAL_UNLOCK_ACTION, _routine_id(routine)
            )
        record_lock_transition("manual_unlock")
        logger.warning(f"User {user_id} unlocked by admin ({purged} audit entries purged)")
        return entry
