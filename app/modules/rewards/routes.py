from fastapi import APIRouter, Depends, Query
from app.database.supabase_client import get_supabase
from app.modules.rewards.schemas import (
    DailyRewardStatus, SpinResult, DailyTriviaQuestion, TriviaAnswerRequest,
    TriviaAnswerResult, AdWatchResult, RewardHistoryEntry
)
from app.modules.rewards.service import RewardService
from app.core.dependencies import require_permission
from supabase import Client
from typing import List, Dict, Optional

router = APIRouter(prefix="/rewards", tags=["rewards"])


def get_reward_service(supabase: Client = Depends(get_supabase)) -> RewardService:
    return RewardService(supabase)


@router.get("/daily", response_model=DailyRewardStatus)
async def get_daily_status(
    user_data: Dict = Depends(require_permission("rewards:read")),
    service: RewardService = Depends(get_reward_service)
):
    return service.get_daily_status(user_data["id"])


@router.post("/spin", response_model=SpinResult)
async def spin(
    user_data: Dict = Depends(require_permission("rewards:play")),
    service: RewardService = Depends(get_reward_service)
):
    """Spin the daily wheel"""
    return service.perform_spin(user_data["id"])


@router.get("/trivia/daily", response_model=DailyTriviaQuestion)
async def get_daily_trivia_question(
    user_data: Dict = Depends(require_permission("rewards:play")),
    service: RewardService = Depends(get_reward_service)
):
    return service.get_daily_trivia_question(user_data["id"], user_data.get("country"))


@router.post("/trivia/daily", response_model=TriviaAnswerResult)
async def submit_daily_trivia_answer(
    answer: TriviaAnswerRequest,
    user_data: Dict = Depends(require_permission("rewards:play")),
    service: RewardService = Depends(get_reward_service)
):
    return service.submit_trivia_answer(user_data["id"], answer)


@router.post("/ad-watch", response_model=AdWatchResult)
async def record_ad_watch(
    user_data: Dict = Depends(require_permission("rewards:play")),
    service: RewardService = Depends(get_reward_service)
):
    return service.record_ad_watch(user_data["id"])


@router.get("/history", response_model=List[RewardHistoryEntry])
async def get_reward_history(
    reward_type: Optional[str] = None,
    start_date: Optional[str] = None,
    end_date: Optional[str] = None,
    limit: int = Query(50, ge=1, le=200),
    user_data: Dict = Depends(require_permission("rewards:read")),
    service: RewardService = Depends(get_reward_service)
):
    return service.get_reward_history(user_data["id"], reward_type, start_date, end_date, limit)


@router.post("/{user_id}/reset", response_model=DailyRewardStatus)
async def reset_daily_rewards(
    user_id: str,
    user_data: Dict = Depends(require_permission("rewards:reset")),
    service: RewardService = Depends(get_reward_service)
):
    """Clear a user's daily flags (admin)"""
    return service.reset_daily_rewards(user_id)
