"""
Database initialization script for DataJeopardy

Creates all tables and seeds reference data:
- 5 application roles (Admin is the distinguished administrative role)
- Handler routine catalog: one routine per threat category, plus the
  ADMIN_ACTION routine and the AUTO_LOCK / MANUAL_LOCK / MANUAL_UNLOCK
  system routines
- Optional demo users

Run this script to initialize a fresh database:
    python -m datajeopardy.init_db [--demo]
"""

import argparse
import logging

from sqlalchemy.orm import Session

from . import crud, models
from .database import SessionLocal, engine, transaction
from .types import Severity, ThreatCategory

logger = logging.getLogger("InitDB")

ROLES = ["Admin", "Security", "Auditor", "Developer", "Guest"]

# (name, threat type, response action, severity, description, auto_lock, notify_admin)
HANDLER_ROUTINES = [
    ("Normal Query Handler", ThreatCategory.NORMAL_QUERY, "Query logged", Severity.LOW,
     "Routine read access", False, False),
    ("Drop Statement Blocker", ThreatCategory.SQL_INJECTION_DROP, "Query blocked - destructive DROP detected", Severity.HIGH,
     "DROP TABLE / DROP DATABASE attempt", True, True),
    ("Delete Statement Blocker", ThreatCategory.SQL_INJECTION_DELETE, "Query blocked - bulk DELETE detected", Severity.HIGH,
     "DELETE FROM attempt", True, True),
    ("Schema Change Blocker", ThreatCategory.SQL_INJECTION_ALTER, "Query blocked - schema change detected", Severity.HIGH,
     "ALTER TABLE attempt", True, True),
    ("Truncate Blocker", ThreatCategory.SQL_INJECTION_TRUNCATE, "Query blocked - TRUNCATE detected", Severity.HIGH,
     "TRUNCATE attempt", True, True),
    ("Privilege Escalation Monitor", ThreatCategory.PRIVILEGE_ESCALATION, "Privilege change denied and flagged", Severity.HIGH,
     "GRANT / REVOKE issued by a non-admin", True, True),
    ("Sensitive Data Monitor", ThreatCategory.SENSITIVE_DATA_ACCESS, "Sensitive column access flagged", Severity.MEDIUM,
     "Access to password, card or SSN data", False, True),
    ("Data Modification Monitor", ThreatCategory.DATA_MODIFICATION, "Write logged for review", Severity.MEDIUM,
     "INSERT / UPDATE statements", False, False),
    ("Admin Action Logger", ThreatCategory.ADMIN_ACTION, "Admin action logged", Severity.LOW,
     "Any query issued by an administrator", False, False),
    ("Auto Lock Routine", ThreatCategory.AUTO_LOCK, "Account auto-locked", Severity.HIGH,
     "Risk score reached the auto-lock threshold", True, True),
    ("Manual Lock Routine", ThreatCategory.MANUAL_LOCK, "Account locked by admin", Severity.HIGH,
     "Administrator locked the account", True, False),
    ("Manual Unlock Routine", ThreatCategory.MANUAL_UNLOCK, "Account unlocked by admin", Severity.LOW,
     "Administrator unlocked the account and reset its risk", False, False),
]

DEMO_USERS = [
    ("admin", "admin123", "Admin"),
    ("sec_analyst", "security123", "Security"),
    ("auditor", "audit123", "Auditor"),
    ("dev_alice", "dev123", "Developer"),
    ("guest", "guest123", "Guest"),
]


def seed_roles(db: Session) -> int:
    existing = {r.role_name for r in db.query(models.Role).all()}
    new_roles = [models.Role(role_name=name) for name in ROLES if name not in existing]
    db.add_all(new_roles)
    return len(new_roles)


def seed_handler_routines(db: Session) -> int:
    existing = {r.threat_type for r in db.query(models.HandlerRoutine).all()}
    added = 0
    for name, threat, action, severity, description, auto_lock, notify in HANDLER_ROUTINES:
        if threat.value in existing:
            continue
        db.add(models.HandlerRoutine(
            routine_name=name,
            threat_type=threat.value,
            response_action=action,
            severity=severity.value,
            description=description,
            auto_lock=auto_lock,
            notify_admin=notify,
        ))
        added += 1
    return added


def seed_demo_users(db: Session) -> int:
    roles = {r.role_name: r.id for r in db.query(models.Role).all()}
    added = 0
    for username, password, role_name in DEMO_USERS:
        if db.query(models.UserAccount).filter(models.UserAccount.username == username).first():
            continue
        crud.create_user(db, username, password, roles[role_name])
        added += 1
    return added


def init_db(db: Session, demo: bool = False) -> dict:
    """Seed reference data (idempotent). Tables must already exist."""
    with transaction(db, "seed"):
        summary = {"roles": seed_roles(db)}
        db.flush()
        summary["routines"] = seed_handler_routines(db)
        summary["demo_users"] = seed_demo_users(db) if demo else 0
    return summary


def main():
    parser = argparse.ArgumentParser(description="Create tables and seed DataJeopardy reference data")
    parser.add_argument("--demo", action="store_true", help="also create demo users")
    args = parser.parse_args()

    logging.basicConfig(level=logging.INFO, format="%(asctime)s [%(levelname)s] %(name)s: %(message)s")
    models.Base.metadata.create_all(bind=engine)
    db = SessionLocal()
    try:
        summary = init_db(db, demo=args.demo)
    finally:
        db.close()
    print(f"[OK] Added {summary['roles']} roles, {summary['routines']} handler routines, "
          f"{summary['demo_users']} demo users")


if __name__ == "__main__":
    main()
