from fastapi import APIRouter, Depends, Query
from app.database.supabase_client import get_supabase
from app.modules.profiles.schemas import (
    ProfileUpdate, AdminProfileUpdate, ProfileResponse, ProfileListResponse, UserRankResponse
)
from app.modules.profiles.service import ProfileService
from app.core.dependencies import require_permission
from supabase import Client
from typing import List, Dict, Optional

router = APIRouter(prefix="/profiles", tags=["profiles"])


def get_profile_service(supabase: Client = Depends(get_supabase)) -> ProfileService:
    return ProfileService(supabase)


@router.get("/me", response_model=ProfileResponse)
async def get_my_profile(
    user_data: Dict = Depends(require_permission("profiles:read")),
    service: ProfileService = Depends(get_profile_service)
):
    return service.get_profile(user_data["id"])


@router.put("/me", response_model=ProfileResponse)
async def update_my_profile(
    profile_data: ProfileUpdate,
    user_data: Dict = Depends(require_permission("profiles:update")),
    service: ProfileService = Depends(get_profile_service)
):
    return service.update_profile(user_data["id"], profile_data)


@router.get("/me/rank", response_model=UserRankResponse)
async def get_my_rank(
    user_data: Dict = Depends(require_permission("profiles:read")),
    service: ProfileService = Depends(get_profile_service)
):
    return service.get_user_rank(user_data["id"])


@router.get("/leaderboard", response_model=ProfileListResponse)
async def get_leaderboard(
    limit: int = Query(20, ge=1, le=100),
    offset: int = Query(0, ge=0),
    country: Optional[str] = None,
    user_data: Dict = Depends(require_permission("profiles:read")),
    service: ProfileService = Depends(get_profile_service)
):
    """Top users by points"""
    return service.list_profiles(limit=limit, offset=offset, country=country, order_by="points")


@router.get("/search", response_model=List[ProfileResponse])
async def search_profiles(
    q: str = Query(..., min_length=1),
    limit: int = Query(20, ge=1, le=100),
    user_data: Dict = Depends(require_permission("profiles:manage")),
    service: ProfileService = Depends(get_profile_service)
):
    return service.search_profiles(q, limit)


@router.get("", response_model=ProfileListResponse)
async def list_profiles(
    limit: int = Query(20, ge=1, le=100),
    offset: int = Query(0, ge=0),
    role: Optional[str] = None,
    country: Optional[str] = None,
    order_by: str = "created_at",
    user_data: Dict = Depends(require_permission("profiles:manage")),
    service: ProfileService = Depends(get_profile_service)
):
    return service.list_profiles(limit=limit, offset=offset, role=role, country=country, order_by=order_by)


@router.get("/{user_id}", response_model=ProfileResponse)
async def get_profile(
    user_id: str,
    user_data: Dict = Depends(require_permission("profiles:manage")),
    service: ProfileService = Depends(get_profile_service)
):
    return service.get_profile(user_id)


@router.put("/{user_id}", response_model=ProfileResponse)
async def admin_update_profile(
    user_id: str,
    profile_data: AdminProfileUpdate,
    user_data: Dict = Depends(require_permission("profiles:manage")),
    service: ProfileService = Depends(get_profile_service)
):
    """Update role, suspension or points of any user (admin)"""
    return service.admin_update_profile(user_id, profile_data, moderator_id=user_data["id"])
