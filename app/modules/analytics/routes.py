from fastapi import APIRouter, Depends, Query
from app.database.supabase_client import get_supabase
from app.modules.analytics.schemas import (
    PlatformStats, ActivityItem, CountryUsers, DailyCount, PollAnalytics, TriviaAnalytics
)
from app.modules.analytics.service import AnalyticsService
from app.core.dependencies import require_permission
from supabase import Client
from typing import List, Dict, Optional
from datetime import datetime

router = APIRouter(prefix="/analytics", tags=["analytics"])


def get_analytics_service(supabase: Client = Depends(get_supabase)) -> AnalyticsService:
    return AnalyticsService(supabase)


@router.get("/platform", response_model=PlatformStats)
async def get_platform_stats(
    start_date: Optional[datetime] = None,
    end_date: Optional[datetime] = None,
    user_data: Dict = Depends(require_permission("analytics:read")),
    service: AnalyticsService = Depends(get_analytics_service)
):
    return service.get_platform_stats(start_date, end_date)


@router.get("/activity", response_model=List[ActivityItem])
async def get_recent_activity(
    limit: int = Query(10, ge=1, le=100),
    start_date: Optional[datetime] = None,
    end_date: Optional[datetime] = None,
    user_data: Dict = Depends(require_permission("analytics:read")),
    service: AnalyticsService = Depends(get_analytics_service)
):
    return service.get_recent_activity(limit, start_date, end_date)


@router.get("/countries", response_model=List[CountryUsers])
async def get_top_countries(
    limit: int = Query(5, ge=1, le=50),
    start_date: Optional[datetime] = None,
    end_date: Optional[datetime] = None,
    user_data: Dict = Depends(require_permission("analytics:read")),
    service: AnalyticsService = Depends(get_analytics_service)
):
    return service.get_top_countries(limit, start_date, end_date)


@router.get("/user-growth", response_model=List[DailyCount])
async def get_user_growth(
    days: int = Query(7, ge=1, le=90),
    start_date: Optional[datetime] = None,
    end_date: Optional[datetime] = None,
    user_data: Dict = Depends(require_permission("analytics:read")),
    service: AnalyticsService = Depends(get_analytics_service)
):
    return service.get_user_growth(days, start_date, end_date)


@router.get("/polls", response_model=PollAnalytics)
async def get_poll_analytics(
    start_date: Optional[datetime] = None,
    end_date: Optional[datetime] = None,
    user_data: Dict = Depends(require_permission("analytics:read")),
    service: AnalyticsService = Depends(get_analytics_service)
):
    return service.get_poll_analytics(start_date, end_date)


@router.get("/trivia", response_model=TriviaAnalytics)
async def get_trivia_analytics(
    start_date: Optional[datetime] = None,
    end_date: Optional[datetime] = None,
    user_data: Dict = Depends(require_permission("analytics:read")),
    service: AnalyticsService = Depends(get_analytics_service)
):
    return service.get_trivia_analytics(start_date, end_date)
