from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from .. import crud, schemas
from ..database import get_db

router = APIRouter(tags=["handler-routines"])


@router.get("/handler-routines")
def read_handler_routines(db: Session = Depends(get_db)):
    routines = [schemas.HandlerRoutine.model_validate(r) for r in crud.get_routines(db)]
    return {"ok": True, "routines": routines}


@router.get("/handler-stats")
def read_handler_stats(db: Session = Depends(get_db)):
    stats = [schemas.RoutineUsage(**row) for row in crud.get_routine_usage(db)]
    return {"ok": True, "stats": stats}
