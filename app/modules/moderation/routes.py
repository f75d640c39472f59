from fastapi import APIRouter, Depends, Query
from app.database.supabase_client import get_supabase
from app.modules.moderation.schemas import (
    ModeratorActionCreate, ModeratorActionResponse, ContentDecision, BanRequest, UnbanRequest,
    ModerationStats, ReportCreate, ReportStatusUpdate, ReportResponse
)
from app.modules.moderation.service import ModerationService
from app.core.dependencies import require_permission
from supabase import Client
from typing import List, Dict, Optional

router = APIRouter(prefix="/moderation", tags=["moderation"])


def get_moderation_service(supabase: Client = Depends(get_supabase)) -> ModerationService:
    return ModerationService(supabase)


@router.post("/actions", response_model=ModeratorActionResponse, status_code=201)
async def record_action(
    action: ModeratorActionCreate,
    user_data: Dict = Depends(require_permission("moderation:act")),
    service: ModerationService = Depends(get_moderation_service)
):
    return service.record_action(user_data["id"], action)


@router.get("/actions", response_model=List[ModeratorActionResponse])
async def list_actions(
    moderator_id: Optional[str] = None,
    action_type: Optional[str] = None,
    target_table: Optional[str] = None,
    start_date: Optional[str] = None,
    end_date: Optional[str] = None,
    limit: int = Query(50, ge=1, le=200),
    user_data: Dict = Depends(require_permission("moderation:read")),
    service: ModerationService = Depends(get_moderation_service)
):
    return service.list_actions(moderator_id, action_type, target_table, start_date, end_date, limit)


@router.post("/approve", response_model=ModeratorActionResponse)
async def approve_content(
    decision: ContentDecision,
    user_data: Dict = Depends(require_permission("moderation:act")),
    service: ModerationService = Depends(get_moderation_service)
):
    return service.approve_content(user_data["id"], decision.target_id, decision.target_table, decision.reason)


@router.post("/reject", response_model=ModeratorActionResponse)
async def reject_content(
    decision: ContentDecision,
    user_data: Dict = Depends(require_permission("moderation:act")),
    service: ModerationService = Depends(get_moderation_service)
):
    return service.reject_content(user_data["id"], decision.target_id, decision.target_table, decision.reason)


@router.post("/users/{user_id}/ban", response_model=ModeratorActionResponse)
async def ban_user(
    user_id: str,
    ban: BanRequest,
    user_data: Dict = Depends(require_permission("moderation:act")),
    service: ModerationService = Depends(get_moderation_service)
):
    return service.ban_user(user_data["id"], user_id, ban.reason, ban.duration)


@router.post("/users/{user_id}/unban", response_model=ModeratorActionResponse)
async def unban_user(
    user_id: str,
    unban: UnbanRequest,
    user_data: Dict = Depends(require_permission("moderation:act")),
    service: ModerationService = Depends(get_moderation_service)
):
    return service.unban_user(user_data["id"], user_id, unban.reason)


@router.get("/stats", response_model=ModerationStats)
async def get_moderation_stats(
    moderator_id: Optional[str] = None,
    timeframe: str = Query("month", pattern="^(day|week|month)$"),
    user_data: Dict = Depends(require_permission("moderation:read")),
    service: ModerationService = Depends(get_moderation_service)
):
    return service.get_stats(moderator_id, timeframe)


@router.post("/reports", response_model=ReportResponse, status_code=201)
async def report_content(
    report: ReportCreate,
    user_data: Dict = Depends(require_permission("reports:create")),
    service: ModerationService = Depends(get_moderation_service)
):
    return service.create_report(user_data["id"], report)


@router.get("/reports", response_model=List[ReportResponse])
async def list_reports(
    status: Optional[str] = Query(None, pattern="^(pending|reviewed|resolved|rejected)$"),
    content_type: Optional[str] = Query(None, pattern="^(poll|comment)$"),
    limit: int = Query(50, ge=1, le=200),
    offset: int = Query(0, ge=0),
    user_data: Dict = Depends(require_permission("reports:read")),
    service: ModerationService = Depends(get_moderation_service)
):
    return service.list_reports(status, content_type, limit, offset)


@router.put("/reports/{report_id}", response_model=ReportResponse)
async def update_report_status(
    report_id: str,
    status_data: ReportStatusUpdate,
    user_data: Dict = Depends(require_permission("reports:resolve")),
    service: ModerationService = Depends(get_moderation_service)
):
    return service.update_report_status(user_data["id"], report_id, status_data.status, status_data.notes)
