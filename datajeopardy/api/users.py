"""
User & Lock Routes - list with risk, add user, lock, unlock, batch lock

Listing users is not a pure read: it first locks every user whose risk
score reached the threshold, so the returned statuses are always current.
"""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from .. import crud, schemas
from ..auth import verify_admin_api_key
from ..database import get_db
from ..services.threat_service import ThreatService, get_threat_service
import logging

router = APIRouter(tags=["users"])
logger = logging.getLogger("UserAPI")


@router.get("/roles")
def read_roles(db: Session = Depends(get_db)):
    roles = [schemas.Role.model_validate(r) for r in crud.get_roles(db)]
    return {"ok": True, "roles": roles}


@router.get("/users")
def read_users(db: Session = Depends(get_db), service: ThreatService = Depends(get_threat_service)):
    locked = service.reconcile_risk(db)
    if locked:
        logger.info(f"Listing auto-locked users {locked}")
    users = [schemas.UserWithRisk(**row) for row in service.list_users(db, locked)]
    return {"ok": True, "users": users, "auto_locked": locked}


@router.post("/add-user")
def add_user(
    payload: schemas.UserCreate,
    db: Session = Depends(get_db),
    service: ThreatService = Depends(get_threat_service),
    _auth=Depends(verify_admin_api_key),
):
    user = service.create_user(db, payload.username, payload.password, payload.role_id)
    return {"ok": True, "insertedId": user.id}


@router.post("/lock-user")
def lock_user(
    payload: schemas.UserTarget,
    db: Session = Depends(get_db),
    service: ThreatService = Depends(get_threat_service),
    _auth=Depends(verify_admin_api_key),
):
    service.manual_lock(db, payload.user_id)
    return {"ok": True}


@router.post("/unlock-user")
def unlock_user(
    payload: schemas.UserTarget,
    db: Session = Depends(get_db),
    service: ThreatService = Depends(get_threat_service),
    _auth=Depends(verify_admin_api_key),
):
    service.manual_unlock(db, payload.user_id)
    return {"ok": True}


@router.post("/lock-high-risk")
def lock_high_risk(
    db: Session = Depends(get_db),
    service: ThreatService = Depends(get_threat_service),
    _auth=Depends(verify_admin_api_key),
):
    locked = service.batch_lock_high_risk(db)
    return {"ok": True, "locked": locked}
