from pydantic import BaseModel, Field
from typing import Optional, List
from datetime import datetime


class Role(BaseModel):
    id: int
    role_name: str

    class Config:
        from_attributes = True


class UserCreate(BaseModel):
    username: Optional[str] = None
    password: Optional[str] = None
    role_id: Optional[int] = Field(default=None, alias="roleId")

    class Config:
        populate_by_name = True


class UserTarget(BaseModel):
    user_id: Optional[int] = Field(default=None, alias="userId")

    class Config:
        populate_by_name = True


class QuerySubmission(BaseModel):
    user_id: Optional[int] = Field(default=None, alias="userId")
    query: Optional[str] = None
    severity: Optional[str] = None  # overrides the routine's default severity

    class Config:
        populate_by_name = True


class UserWithRisk(BaseModel):
    user_id: int
    username: str
    status: str
    role_id: int
    role_name: Optional[str] = None
    last_login: Optional[datetime] = None
    failed_login_attempts: int = 0
    high_severity_count: int
    recent_high_count: int
    risk_score: int
    should_auto_lock: bool
    auto_locked: bool = False


class HandlerRoutine(BaseModel):
    id: int
    routine_name: str
    threat_type: str
    response_action: str
    severity: str
    description: Optional[str] = None
    auto_lock: bool = False
    notify_admin: bool = False

    class Config:
        from_attributes = True


class AuditLogEntry(BaseModel):
    id: int
    user_id: int
    query_text: str
    severity: str
    action_taken: Optional[str] = None
    timestamp: datetime
    routine_name: Optional[str] = None
    threat_type: Optional[str] = None


class HandlerOutcome(BaseModel):
    name: str
    threat_type: str
    classified_as: str
    action: str
    severity: str


class RoutineUsage(BaseModel):
    routine_id: int
    routine_name: str
    threat_type: str
    severity: str
    usage_count: int
