from pydantic import BaseModel, Field
from typing import Optional, List, Dict, Any, Literal
from datetime import datetime

ReportStatus = Literal["pending", "reviewed", "resolved", "rejected"]


class ModeratorActionCreate(BaseModel):
    action_type: str = Field(..., min_length=1, max_length=50)
    target_id: str
    target_table: str
    reason: Optional[str] = None
    metadata: Dict[str, Any] = {}


class ModeratorActionResponse(BaseModel):
    id: str
    moderator_id: str
    action_type: str
    target_id: str
    target_table: str
    reason: Optional[str] = None
    metadata: Dict[str, Any] = {}
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class ContentDecision(BaseModel):
    target_id: str
    target_table: str
    reason: Optional[str] = None


class BanRequest(BaseModel):
    reason: str = Field(..., min_length=1)
    duration: Optional[str] = None


class UnbanRequest(BaseModel):
    reason: Optional[str] = None


class ActionTypeCount(BaseModel):
    type: str
    count: int


class ModerationStats(BaseModel):
    total_actions: int
    approvals: int
    rejections: int
    bans: int
    actions_by_type: List[ActionTypeCount] = []


class ReportCreate(BaseModel):
    content_type: Literal["poll", "comment"]
    content_id: str
    reason: str = Field(..., min_length=1, max_length=1000)


class ReportStatusUpdate(BaseModel):
    status: Literal["reviewed", "resolved", "rejected"]
    notes: Optional[str] = None


class ReportResponse(BaseModel):
    id: str
    reporter_id: str
    content_type: str
    content_id: str
    reason: str
    status: str = "pending"
    resolved_by: Optional[str] = None
    resolution_notes: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True
