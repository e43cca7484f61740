"""
Threat Classifier - Pure Logic Module

Maps raw query text to a threat category. Contains ZERO database calls or
external dependencies.

Rules are evaluated top to bottom and the first match wins. The order is
load-bearing: "DROP TABLE users; UPDATE ..." must classify as a DROP, not as
a data modification.
"""

from typing import Optional, Tuple

from ..types import ThreatCategory


CLASSIFICATION_RULES: Tuple[Tuple[Tuple[str, ...], ThreatCategory], ...] = (
    (("DROP TABLE", "DROP DATABASE"), ThreatCategory.SQL_INJECTION_DROP),
    (("DELETE FROM",), ThreatCategory.SQL_INJECTION_DELETE),
    (("ALTER TABLE",), ThreatCategory.SQL_INJECTION_ALTER),
    (("TRUNCATE",), ThreatCategory.SQL_INJECTION_TRUNCATE),
    (("GRANT", "REVOKE"), ThreatCategory.PRIVILEGE_ESCALATION),
    (("PASSWORD", "CREDITCARD", "SSN", "CARD"), ThreatCategory.SENSITIVE_DATA_ACCESS),
    (("INSERT", "UPDATE"), ThreatCategory.DATA_MODIFICATION),
)


def classify(query_text: Optional[str]) -> ThreatCategory:
    """
    Classify a query into a threat category.

    Args:
        query_text: Raw SQL text as submitted (None and "" are allowed)

    Returns:
        The first matching ThreatCategory, NORMAL_QUERY when nothing matches
    """
    q = (query_text or "").upper()
    if not q:
        return ThreatCategory.NORMAL_QUERY

    for keywords, category in CLASSIFICATION_RULES:
        if any(keyword in q for keyword in keywords):
            return category

    return ThreatCategory.NORMAL_QUERY
