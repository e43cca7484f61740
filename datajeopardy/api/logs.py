from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy.orm import Session
from .. import crud, schemas
from ..config import settings
from ..database import get_db
from ..middleware.rate_limit import limiter
from ..services.threat_service import ThreatService, get_threat_service

router = APIRouter(tags=["logs"])


@router.get("/logs")
def read_logs(limit: int = Query(200, ge=1, le=200), db: Session = Depends(get_db)):
    entries = [
        schemas.AuditLogEntry(
            id=log.id,
            user_id=log.user_id,
            query_text=log.query_text,
            severity=log.severity,
            action_taken=log.action_taken,
            timestamp=log.timestamp,
            routine_name=log.routine.routine_name if log.routine else None,
            threat_type=log.routine.threat_type if log.routine else None,
        )
        for log in crud.get_recent_logs(db, limit=limit)
    ]
    return {"ok": True, "logs": entries}


@router.post("/add-log")
@limiter.limit(settings.RATE_LIMIT_ADD_LOG)
def add_log(
    request: Request,
    payload: schemas.QuerySubmission,
    db: Session = Depends(get_db),
    service: ThreatService = Depends(get_threat_service),
):
    """Classify a submitted query and record it against its handler routine."""
    outcome = service.submit_query(db, payload.user_id, payload.query, payload.severity)
    return {
        "ok": True,
        "logId": outcome.log_id,
        "handlerRoutine": schemas.HandlerOutcome(
            name=outcome.routine_name,
            threat_type=outcome.threat_category,
            classified_as=outcome.classified_as,
            action=outcome.action,
            severity=outcome.severity,
        ),
    }
