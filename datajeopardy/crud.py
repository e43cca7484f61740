from typing import Dict, Iterable, List, Optional
import datetime
import hashlib

from sqlalchemy import case, func, select
from sqlalchemy.orm import Session

from . import models
from .types import Severity, UserStatus

# Window for the "recent HIGH" counter shown in the user listing
RECENT_HIGH_WINDOW = datetime.timedelta(minutes=30)


def sha256(value: str) -> str:
    return hashlib.sha256((value or "").encode("utf-8")).hexdigest()


def get_user(db: Session, user_id: int) -> Optional[models.UserAccount]:
    return db.query(models.UserAccount).filter(models.UserAccount.id == user_id).first()


def get_user_by_username(db: Session, username: str) -> Optional[models.UserAccount]:
    return db.query(models.UserAccount).filter(models.UserAccount.username == username).first()


def get_users(db: Session) -> List[models.UserAccount]:
    return db.query(models.UserAccount).order_by(models.UserAccount.id).all()


def create_user(db: Session, username: str, password: str, role_id: int) -> models.UserAccount:
    db_user = models.UserAccount(
        username=username,
        password_hash=sha256(password),
        role_id=role_id,
        status=UserStatus.ACTIVE.value,
    )
    db.add(db_user)
    db.flush()
    return db_user


def get_role(db: Session, role_id: int) -> Optional[models.Role]:
    return db.query(models.Role).filter(models.Role.id == role_id).first()


def get_roles(db: Session) -> List[models.Role]:
    return db.query(models.Role).order_by(models.Role.id).all()


def get_routine_by_threat(db: Session, threat_type: str) -> Optional[models.HandlerRoutine]:
    return (
        db.query(models.HandlerRoutine)
        .filter(models.HandlerRoutine.threat_type == threat_type)
        .order_by(models.HandlerRoutine.id)
        .first()
    )


def get_routines(db: Session) -> List[models.HandlerRoutine]:
    severity_rank = case(
        (models.HandlerRoutine.severity == Severity.HIGH.value, 2),
        (models.HandlerRoutine.severity == Severity.MEDIUM.value, 1),
        else_=0,
    )
    return (
        db.query(models.HandlerRoutine)
        .order_by(severity_rank.desc(), models.HandlerRoutine.routine_name)
        .all()
    )


def get_routine_usage(db: Session) -> List[dict]:
    """Audit entry count per handler routine, most used first."""
    usage = func.count(models.AuditLog.id).label("usage_count")
    rows = (
        db.query(
            models.HandlerRoutine.id,
            models.HandlerRoutine.routine_name,
            models.HandlerRoutine.threat_type,
            models.HandlerRoutine.severity,
            usage,
        )
        .outerjoin(models.AuditLog, models.AuditLog.routine_id == models.HandlerRoutine.id)
        .group_by(models.HandlerRoutine.id)
        .order_by(usage.desc(), models.HandlerRoutine.id)
        .all()
    )
    return [
        {
            "routine_id": r.id,
            "routine_name": r.routine_name,
            "threat_type": r.threat_type,
            "severity": r.severity,
            "usage_count": r.usage_count,
        }
        for r in rows
    ]


def create_log(
    db: Session,
    user_id: int,
    query_text: str,
    severity: str,
    action_taken: str,
    routine_id: Optional[int],
) -> models.AuditLog:
    db_log = models.AuditLog(
        user_id=user_id,
        query_text=query_text,
        severity=severity,
        action_taken=action_taken,
        routine_id=routine_id,
        timestamp=datetime.datetime.utcnow(),
    )
    db.add(db_log)
    db.flush()
    return db_log


def get_recent_logs(db: Session, limit: int = 200) -> List[models.AuditLog]:
    return (
        db.query(models.AuditLog)
        .order_by(models.AuditLog.timestamp.desc(), models.AuditLog.id.desc())
        .limit(limit)
        .all()
    )


def get_user_logs(db: Session, user_id: int) -> List[models.AuditLog]:
    return (
        db.query(models.AuditLog)
        .filter(models.AuditLog.user_id == user_id)
        .order_by(models.AuditLog.id)
        .all()
    )


def flag_suspicious(db: Session, log_id: int, reason: str) -> models.SuspiciousActivity:
    db_flag = models.SuspiciousActivity(log_id=log_id, reason=reason)
    db.add(db_flag)
    db.flush()
    return db_flag


def purge_user_logs(db: Session, user_id: int) -> int:
    """Delete a user's audit entries and the annotations keyed to them."""
    user_log_ids = select(models.AuditLog.id).where(models.AuditLog.user_id == user_id)
    db.query(models.SuspiciousActivity).filter(
        models.SuspiciousActivity.log_id.in_(user_log_ids)
    ).delete(synchronize_session=False)
    return (
        db.query(models.AuditLog)
        .filter(models.AuditLog.user_id == user_id)
        .delete(synchronize_session=False)
    )


def get_severity_counts(
    db: Session,
    user_ids: Optional[Iterable[int]] = None,
    now: Optional[datetime.datetime] = None,
) -> Dict[int, dict]:
    """
    HIGH entry counts per user in a single GROUP BY pass.

    Returns {user_id: {"high": n, "recent_high": m}}; users without
    entries are absent.
    """
    now = now or datetime.datetime.utcnow()
    is_high = models.AuditLog.severity == Severity.HIGH.value
    q = db.query(
        models.AuditLog.user_id,
        func.sum(case((is_high, 1), else_=0)).label("high"),
        func.sum(
            case((is_high & (models.AuditLog.timestamp >= now - RECENT_HIGH_WINDOW), 1), else_=0)
        ).label("recent_high"),
    )
    if user_ids is not None:
        q = q.filter(models.AuditLog.user_id.in_(list(user_ids)))
    rows = q.group_by(models.AuditLog.user_id).all()
    return {r.user_id: {"high": int(r.high or 0), "recent_high": int(r.recent_high or 0)} for r in rows}


def set_status(db: Session, user_id: int, status: str, only_if: Optional[str] = None) -> int:
    """
    Update a user's status; with ``only_if`` the update is conditional on
    the current status. Returns the number of rows changed.
    """
    q = db.query(models.UserAccount).filter(models.UserAccount.id == user_id)
    if only_if is not None:
        q = q.filter(models.UserAccount.status == only_if)
    return q.update({models.UserAccount.status: status}, synchronize_session="fetch")
