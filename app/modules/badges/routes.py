from fastapi import APIRouter, Depends
from app.database.supabase_client import get_supabase
from app.modules.badges.schemas import (
    BadgeCreate, BadgeUpdate, BadgeResponse, BadgeProgress, BadgeStatsResponse
)
from app.modules.badges.service import BadgeService
from app.core.dependencies import require_permission
from supabase import Client
from typing import List, Dict

router = APIRouter(prefix="/badges", tags=["badges"])


def get_badge_service(supabase: Client = Depends(get_supabase)) -> BadgeService:
    return BadgeService(supabase)


@router.get("", response_model=List[BadgeResponse])
async def list_badges(
    include_inactive: bool = False,
    user_data: Dict = Depends(require_permission("badges:read")),
    service: BadgeService = Depends(get_badge_service)
):
    return service.list_badges(include_inactive)


@router.get("/me/progress", response_model=List[BadgeProgress])
async def get_my_badge_progress(
    user_data: Dict = Depends(require_permission("badges:read")),
    service: BadgeService = Depends(get_badge_service)
):
    return service.get_badge_progress(user_data["id"])


@router.post("/me/check", response_model=List[str])
async def check_my_badges(
    user_data: Dict = Depends(require_permission("badges:read")),
    service: BadgeService = Depends(get_badge_service)
):
    """Award any badges the caller now qualifies for; returns the new badge names"""
    return service.check_and_award_badges(user_data["id"])


@router.get("/stats", response_model=BadgeStatsResponse)
async def get_badge_stats(
    user_data: Dict = Depends(require_permission("badges:manage")),
    service: BadgeService = Depends(get_badge_service)
):
    return service.get_badge_stats()


@router.get("/{badge_id}", response_model=BadgeResponse)
async def get_badge(
    badge_id: str,
    user_data: Dict = Depends(require_permission("badges:read")),
    service: BadgeService = Depends(get_badge_service)
):
    return service.get_badge(badge_id)


@router.post("", response_model=BadgeResponse, status_code=201)
async def create_badge(
    badge_data: BadgeCreate,
    user_data: Dict = Depends(require_permission("badges:manage")),
    service: BadgeService = Depends(get_badge_service)
):
    return service.create_badge(badge_data)


@router.put("/{badge_id}", response_model=BadgeResponse)
async def update_badge(
    badge_id: str,
    badge_data: BadgeUpdate,
    user_data: Dict = Depends(require_permission("badges:manage")),
    service: BadgeService = Depends(get_badge_service)
):
    return service.update_badge(badge_id, badge_data)
