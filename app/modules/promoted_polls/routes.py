from fastapi import APIRouter, Depends, Query
from app.database.supabase_client import get_supabase
from app.modules.promoted_polls.schemas import (
    PromotedPollCreate, PromotedPollUpdate, PromotedPollReview, PromotedPollResponse,
    PromotedPollListResponse, PromotedPollAnalytics, StatusTransitionResult
)
from app.modules.app_settings.schemas import PromotedPollSettings
from app.modules.promoted_polls.service import PromotedPollService
from app.core.dependencies import require_permission, is_admin
from supabase import Client
from typing import List, Dict, Optional

router = APIRouter(prefix="/promoted-polls", tags=["promoted_polls"])


def get_promoted_poll_service(supabase: Client = Depends(get_supabase)) -> PromotedPollService:
    return PromotedPollService(supabase)


@router.get("/settings", response_model=PromotedPollSettings)
async def get_promotion_settings(
    user_data: Dict = Depends(require_permission("promoted_polls:read")),
    service: PromotedPollService = Depends(get_promoted_poll_service)
):
    return service.get_settings()


@router.get("/active", response_model=List[PromotedPollResponse])
async def list_active_promoted_polls(
    limit: int = Query(5, ge=1, le=50),
    user_data: Dict = Depends(require_permission("promoted_polls:read")),
    service: PromotedPollService = Depends(get_promoted_poll_service)
):
    return service.list_active_promoted_polls(limit)


@router.get("/me", response_model=PromotedPollListResponse)
async def list_my_promoted_polls(
    status: Optional[str] = None,
    limit: int = Query(10, ge=1, le=100),
    offset: int = Query(0, ge=0),
    user_data: Dict = Depends(require_permission("promoted_polls:read")),
    service: PromotedPollService = Depends(get_promoted_poll_service)
):
    return service.list_user_promoted_polls(user_data["id"], status, limit, offset)


@router.get("", response_model=PromotedPollListResponse)
async def list_promoted_polls(
    status: Optional[str] = None,
    payment_status: Optional[str] = None,
    sponsor_id: Optional[str] = None,
    limit: int = Query(10, ge=1, le=100),
    offset: int = Query(0, ge=0),
    user_data: Dict = Depends(require_permission("promoted_polls:approve")),
    service: PromotedPollService = Depends(get_promoted_poll_service)
):
    """All promotions (admin)"""
    return service.list_promoted_polls(limit, offset, status, payment_status, sponsor_id)


@router.post("", response_model=PromotedPollResponse, status_code=201)
async def create_promoted_poll(
    promoted_data: PromotedPollCreate,
    user_data: Dict = Depends(require_permission("promoted_polls:create")),
    service: PromotedPollService = Depends(get_promoted_poll_service)
):
    return service.create_promoted_poll(user_data["id"], promoted_data)


@router.post("/status-transitions", response_model=StatusTransitionResult)
async def run_status_transitions(
    user_data: Dict = Depends(require_permission("promoted_polls:approve")),
    service: PromotedPollService = Depends(get_promoted_poll_service)
):
    """Run one scheduler pass on demand (admin)"""
    return service.run_status_transitions()


@router.get("/{promoted_poll_id}", response_model=PromotedPollResponse)
async def get_promoted_poll(
    promoted_poll_id: str,
    user_data: Dict = Depends(require_permission("promoted_polls:read")),
    service: PromotedPollService = Depends(get_promoted_poll_service)
):
    return service.get_promoted_poll(promoted_poll_id)


@router.put("/{promoted_poll_id}", response_model=PromotedPollResponse)
async def update_promoted_poll(
    promoted_poll_id: str,
    promoted_data: PromotedPollUpdate,
    user_data: Dict = Depends(require_permission("promoted_polls:update")),
    service: PromotedPollService = Depends(get_promoted_poll_service)
):
    return service.update_promoted_poll(user_data["id"], promoted_poll_id, promoted_data, is_admin(user_data))


@router.post("/{promoted_poll_id}/approve", response_model=PromotedPollResponse)
async def approve_promoted_poll(
    promoted_poll_id: str,
    review: PromotedPollReview,
    user_data: Dict = Depends(require_permission("promoted_polls:approve")),
    service: PromotedPollService = Depends(get_promoted_poll_service)
):
    return service.approve_promoted_poll(user_data["id"], promoted_poll_id, review.notes)


@router.post("/{promoted_poll_id}/reject", response_model=PromotedPollResponse)
async def reject_promoted_poll(
    promoted_poll_id: str,
    review: PromotedPollReview,
    user_data: Dict = Depends(require_permission("promoted_polls:approve")),
    service: PromotedPollService = Depends(get_promoted_poll_service)
):
    return service.reject_promoted_poll(user_data["id"], promoted_poll_id, review.notes)


@router.post("/{promoted_poll_id}/pause", response_model=PromotedPollResponse)
async def pause_promoted_poll(
    promoted_poll_id: str,
    user_data: Dict = Depends(require_permission("promoted_polls:update")),
    service: PromotedPollService = Depends(get_promoted_poll_service)
):
    return service.pause_promoted_poll(user_data["id"], promoted_poll_id, is_admin(user_data))


@router.post("/{promoted_poll_id}/resume", response_model=PromotedPollResponse)
async def resume_promoted_poll(
    promoted_poll_id: str,
    user_data: Dict = Depends(require_permission("promoted_polls:update")),
    service: PromotedPollService = Depends(get_promoted_poll_service)
):
    return service.resume_promoted_poll(user_data["id"], promoted_poll_id, is_admin(user_data))


@router.get("/{promoted_poll_id}/analytics", response_model=PromotedPollAnalytics)
async def get_promoted_poll_analytics(
    promoted_poll_id: str,
    days: int = Query(7, ge=1, le=90),
    user_data: Dict = Depends(require_permission("promoted_polls:read")),
    service: PromotedPollService = Depends(get_promoted_poll_service)
):
    return service.get_analytics(user_data["id"], promoted_poll_id, is_admin(user_data), days)
