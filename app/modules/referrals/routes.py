from fastapi import APIRouter, Depends, Query
from app.database.supabase_client import get_supabase
from app.modules.referrals.schemas import (
    ReferralStats, ReferralHistoryEntry, ReferralCodeValidation, ReferredUser, ReferralLeaderboardEntry
)
from app.modules.referrals.service import ReferralService
from app.core.dependencies import require_permission
from supabase import Client
from typing import List, Dict

router = APIRouter(prefix="/referrals", tags=["referrals"])


def get_referral_service(supabase: Client = Depends(get_supabase)) -> ReferralService:
    return ReferralService(supabase)


@router.get("/validate/{referral_code}", response_model=ReferralCodeValidation)
async def validate_referral_code(
    referral_code: str,
    service: ReferralService = Depends(get_referral_service)
):
    """Public check used by the sign-up form"""
    return service.check_referral_code(referral_code)


@router.get("/me/stats", response_model=ReferralStats)
async def get_my_referral_stats(
    user_data: Dict = Depends(require_permission("referrals:read")),
    service: ReferralService = Depends(get_referral_service)
):
    return service.get_referral_stats(user_data["id"])


@router.get("/me/history", response_model=List[ReferralHistoryEntry])
async def get_my_referral_history(
    limit: int = Query(50, ge=1, le=200),
    offset: int = Query(0, ge=0),
    user_data: Dict = Depends(require_permission("referrals:read")),
    service: ReferralService = Depends(get_referral_service)
):
    return service.get_referral_history(user_data["id"], limit, offset)


@router.get("/me/users", response_model=List[ReferredUser])
async def get_my_referred_users(
    limit: int = Query(50, ge=1, le=200),
    offset: int = Query(0, ge=0),
    user_data: Dict = Depends(require_permission("referrals:read")),
    service: ReferralService = Depends(get_referral_service)
):
    return service.get_referred_users(user_data["id"], limit, offset)


@router.get("/leaderboard", response_model=List[ReferralLeaderboardEntry])
async def get_referral_leaderboard(
    limit: int = Query(50, ge=1, le=200),
    timeframe: str = "all",
    user_data: Dict = Depends(require_permission("referrals:read")),
    service: ReferralService = Depends(get_referral_service)
):
    return service.get_referral_leaderboard(limit, timeframe)
