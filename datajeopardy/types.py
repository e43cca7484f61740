"""
Enumerations shared by the threat classifier, risk engine and lock service.

Values are stored verbatim in the database string columns.
"""

from enum import Enum


class ThreatCategory(str, Enum):
    """Classification label assigned to a submitted query (or a system action)."""

    NORMAL_QUERY = "NORMAL_QUERY"
    SQL_INJECTION_DROP = "SQL_INJECTION_DROP"
    SQL_INJECTION_DELETE = "SQL_INJECTION_DELETE"
    SQL_INJECTION_ALTER = "SQL_INJECTION_ALTER"
    SQL_INJECTION_TRUNCATE = "SQL_INJECTION_TRUNCATE"
    PRIVILEGE_ESCALATION = "PRIVILEGE_ESCALATION"
    SENSITIVE_DATA_ACCESS = "SENSITIVE_DATA_ACCESS"
    DATA_MODIFICATION = "DATA_MODIFICATION"

    # Routine keys that are never produced by the classifier
    ADMIN_ACTION = "ADMIN_ACTION"
    AUTO_LOCK = "AUTO_LOCK"
    MANUAL_LOCK = "MANUAL_LOCK"
    MANUAL_UNLOCK = "MANUAL_UNLOCK"


class Severity(str, Enum):
    """Coarse priority tag attached to each audit log entry."""

    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"


class UserStatus(str, Enum):
    ACTIVE = "ACTIVE"
    LOCKED = "LOCKED"


class ScanTrigger(str, Enum):
    """What caused a batch risk scan; selects the audit entry wording."""

    LISTING = "listing"  # implicit, before the user list is returned
    BATCH = "batch"  # explicit batch-lock request
