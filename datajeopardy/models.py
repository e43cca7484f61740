from sqlalchemy import Column, Integer, String, DateTime, Boolean, ForeignKey, Text
from sqlalchemy.orm import declarative_base, relationship
import datetime

from .types import Severity, UserStatus

# IMPORTANT: engine and SessionLocal are defined ONLY in database.py
# This file defines models only. No duplicate DB connections.
Base = declarative_base()

# Distinguished role: exempt from auto-lock, always resolves to ADMIN_ACTION
ADMIN_ROLE_NAME = "Admin"


class Role(Base):
    __tablename__ = "roles"
    id = Column(Integer, primary_key=True, index=True)
    role_name = Column(String, unique=True, nullable=False)  # Admin, Security, Auditor, Developer, Guest


class UserAccount(Base):
    """
    Monitored platform user.

    Status is mutated only by the lock service; the remaining fields belong
    to account management flows.
    """
    __tablename__ = "user_accounts"
    id = Column(Integer, primary_key=True, index=True)
    username = Column(String, unique=True, index=True, nullable=False)
    password_hash = Column(String, nullable=False)  # SHA-256 hex digest
    role_id = Column(Integer, ForeignKey("roles.id"), nullable=False)
    status = Column(String, default=UserStatus.ACTIVE.value, index=True)  # ACTIVE, LOCKED
    failed_login_attempts = Column(Integer, default=0)
    last_login = Column(DateTime, nullable=True)
    created_at = Column(DateTime, default=datetime.datetime.utcnow)

    role = relationship("Role", lazy="joined")

    @property
    def role_name(self):
        return self.role.role_name if self.role else None

    @property
    def is_admin(self) -> bool:
        return self.role_name == ADMIN_ROLE_NAME


class HandlerRoutine(Base):
    """
    Remediation policy keyed by threat category.

    Static reference data. threat_type is unique so lookups never depend
    on row ordering.
    """
    __tablename__ = "handler_routines"
    id = Column(Integer, primary_key=True, index=True)
    routine_name = Column(String, nullable=False)
    threat_type = Column(String, unique=True, index=True, nullable=False)
    response_action = Column(Text, nullable=False)
    severity = Column(String, default=Severity.LOW.value)  # LOW, MEDIUM, HIGH
    description = Column(Text, nullable=True)
    auto_lock = Column(Boolean, default=False)
    notify_admin = Column(Boolean, default=False)


class AuditLog(Base):
    """
    Immutable record of a submitted query or a system action.

    Rows are only removed by the unlock risk reset.
    """
    __tablename__ = "audit_logs"
    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("user_accounts.id"), index=True, nullable=False)
    query_text = Column(Text, nullable=False)
    severity = Column(String, index=True, nullable=False)
    action_taken = Column(Text, nullable=True)
    timestamp = Column(DateTime, default=datetime.datetime.utcnow, index=True)
    routine_id = Column(Integer, ForeignKey("handler_routines.id"), nullable=True)

    routine = relationship("HandlerRoutine", lazy="joined")


class SuspiciousActivity(Base):
    """Annotation flagged against an audit entry (purged together with it)."""
    __tablename__ = "suspicious_activity"
    id = Column(Integer, primary_key=True, index=True)
    log_id = Column(Integer, ForeignKey("audit_logs.id"), index=True, nullable=False)
    reason = Column(Text)
    detected_at = Column(DateTime, default=datetime.datetime.utcnow)
