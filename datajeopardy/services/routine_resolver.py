"""
Handler routine lookup.

Administrators always resolve to the ADMIN_ACTION routine, whatever the
query looked like.
"""

import logging
from typing import Optional

from sqlalchemy.orm import Session

from .. import crud, models
from ..exceptions import RoutineMissingException
from ..models import ADMIN_ROLE_NAME
from ..types import ThreatCategory

logger = logging.getLogger(__name__)


def effective_category(category: ThreatCategory, role_name: Optional[str]) -> ThreatCategory:
    if role_name == ADMIN_ROLE_NAME:
        return ThreatCategory.ADMIN_ACTION
    return category


def resolve_routine(db: Session, category: ThreatCategory, role_name: Optional[str]) -> models.HandlerRoutine:
    """Return the routine for ``category`` as seen by a caller with ``role_name``."""
    lookup = effective_category(category, role_name)
    routine = crud.get_routine_by_threat(db, lookup.value)
    if routine is None:
        logger.error(f"No handler routine configured for {lookup.value}")
        raise RoutineMissingException(lookup.value)
    return routine


def find_system_routine(db: Session, category: ThreatCategory) -> Optional[models.HandlerRoutine]:
    # System entries (lock/unlock) may carry a null routine reference
    routine = crud.get_routine_by_threat(db, category.value)
    if routine is None:
        logger.warning(f"System routine {category.value} not configured; entry will carry no routine")
    return routine
