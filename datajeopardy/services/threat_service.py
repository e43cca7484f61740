"""
Threat Service - entry points used by the API layer.

Query submission:
    classify -> resolve handler routine -> write audit entry (one transaction)

User listing is two explicit phases:
    reconcile_risk()  locks every user over the threshold (writes)
    list_users()      reads users with their derived risk (no writes)
so the returned view never shows a lock status the policy would change.
"""

import logging
from dataclasses import dataclass
from typing import Iterable, List, Optional

from sqlalchemy.orm import Session

from .. import crud, models
from ..config import get_settings
from ..database import transaction
from ..decorators import retry_on_db_lock
from ..exceptions import UserNotFoundException, ValidationException
from ..middleware.monitoring import record_threat
from ..types import ScanTrigger, Severity
from .batch_scanner import BatchScanner
from .classifier import classify
from .lock_service import LockService
from .risk_engine import RiskEngine
from .routine_resolver import resolve_routine

logger = logging.getLogger("ThreatService")


@dataclass(frozen=True)
class QueryOutcome:
    log_id: int
    routine_name: str
    threat_category: str
    classified_as: str
    action: str
    severity: str


def _parse_severity(value: Optional[str]) -> Optional[Severity]:
    if value is None or value == "":
        return None
    try:
        return Severity(str(value).upper())
    except ValueError:
        raise ValidationException(f"Invalid severity: {value}", error_code="INVALID_SEVERITY")


class ThreatService:

    def __init__(self, threshold: int):
        self.risk_engine = RiskEngine(threshold)
        self.lock_service = LockService()
        self.scanner = BatchScanner(self.risk_engine, self.lock_service)

    # ── Query submission ──────────────────────────────────────────────

    @retry_on_db_lock()
    def submit_query(
        self,
        db: Session,
        user_id: int,
        query_text: str,
        override_severity: Optional[str] = None,
    ) -> QueryOutcome:
        if not user_id or not query_text:
            raise ValidationException("Missing fields", error_code="MISSING_FIELDS")
        override = _parse_severity(override_severity)

        with transaction(db, "submit query"):
            user = crud.get_user(db, user_id)
            if user is None:
                raise UserNotFoundException(user_id)

            category = classify(query_text)
            routine = resolve_routine(db, category, user.role_name)
            severity = (override or Severity(routine.severity)).value

            entry = crud.create_log(db, user_id, query_text, severity, routine.response_action, routine.id)
            if severity == Severity.HIGH.value or routine.notify_admin:
                crud.flag_suspicious(db, entry.id, f"{routine.routine_name}: {category.value}")
            if routine.notify_admin:
                logger.warning(
                    f"[ADMIN NOTIFY] {routine.routine_name} for user {user.username} "
                    f"(severity {severity}, log {entry.id})"
                )

            outcome = QueryOutcome(
                log_id=entry.id,
                routine_name=routine.routine_name,
                threat_category=routine.threat_type,
                classified_as=category.value,
                action=routine.response_action,
                severity=severity,
            )

        record_threat(outcome.threat_category, outcome.severity)
        logger.info(f"Query from user {user_id} classified {outcome.classified_as} -> {outcome.routine_name}")
        return outcome

    # ── Risk view ─────────────────────────────────────────────────────

    def reconcile_risk(self, db: Session) -> List[int]:
        return self.scanner.scan_and_lock(db, ScanTrigger.LISTING)

    def list_users(self, db: Session, just_locked: Iterable[int] = ()) -> List[dict]:
        just_locked = set(just_locked)
        users = crud.get_users(db)
        counts = crud.get_severity_counts(db, [u.id for u in users]) if users else {}
        rows = []
        for user, risk in zip(users, self.risk_engine.assess_many(users, counts)):
            rows.append({
                "user_id": user.id,
                "username": user.username,
                "status": user.status,
                "role_id": user.role_id,
                "role_name": user.role_name,
                "last_login": user.last_login,
                "failed_login_attempts": user.failed_login_attempts,
                "high_severity_count": risk.high_severity_count,
                "recent_high_count": risk.recent_high_count,
                "risk_score": risk.risk_score,
                "should_auto_lock": risk.should_auto_lock,
                "auto_locked": user.id in just_locked,
            })
        return rows

    def list_users_with_risk(self, db: Session) -> List[dict]:
        """Reconcile first; rows locked by this call carry auto_locked=True."""
        locked = self.reconcile_risk(db)
        return self.list_users(db, locked)

    # ── Administrative transitions ────────────────────────────────────

    def manual_lock(self, db: Session, user_id: int) -> models.AuditLog:
        if not user_id:
            raise ValidationException("Missing userId", error_code="MISSING_FIELDS")
        return self.lock_service.manual_lock(db, user_id)

    def manual_unlock(self, db: Session, user_id: int) -> models.AuditLog:
        if not user_id:
            raise ValidationException("Missing userId", error_code="MISSING_FIELDS")
        return self.lock_service.manual_unlock(db, user_id)

    def batch_lock_high_risk(self, db: Session) -> List[int]:
        return self.scanner.scan_and_lock(db, ScanTrigger.BATCH)

    # ── Account management ────────────────────────────────────────────

    @retry_on_db_lock()
    def create_user(self, db: Session, username: str, password: str, role_id: int) -> models.UserAccount:
        if not username or not password or not role_id:
            raise ValidationException("Missing fields", error_code="MISSING_FIELDS")
        with transaction(db, "create user"):
            if crud.get_role(db, role_id) is None:
                raise ValidationException(f"Unknown role: {role_id}", error_code="UNKNOWN_ROLE")
            if crud.get_user_by_username(db, username) is not None:
                raise ValidationException(f"Username already exists: {username}", error_code="DUPLICATE_USERNAME")
            user = crud.create_user(db, username, password, role_id)
        logger.info(f"Created user {username} (id={user.id})")
        return user


def get_threat_service() -> ThreatService:
    """FastAPI dependency: service bound to the configured threshold."""
    return ThreatService(get_settings().AUTO_LOCK_RISK_THRESHOLD)
