from fastapi import APIRouter, Depends, Query
from app.database.supabase_client import get_supabase
from app.modules.ambassadors.schemas import (
    AmbassadorCreate, AmbassadorUpdate, AmbassadorResponse, CountryMetricResponse, TopCountry,
    CommissionTierCreate, CommissionTierUpdate, CommissionTierResponse, TierInfo,
    AmbassadorStats, AmbassadorDashboard
)
from app.modules.ambassadors.service import AmbassadorService
from app.core.dependencies import require_permission
from supabase import Client
from typing import List, Dict, Optional

router = APIRouter(prefix="/ambassadors", tags=["ambassadors"])


def get_ambassador_service(supabase: Client = Depends(get_supabase)) -> AmbassadorService:
    return AmbassadorService(supabase)


@router.get("/me", response_model=AmbassadorResponse)
async def get_my_ambassador(
    user_data: Dict = Depends(require_permission("ambassadors:read")),
    service: AmbassadorService = Depends(get_ambassador_service)
):
    return service.require_ambassador(user_data["id"])


@router.put("/me", response_model=AmbassadorResponse)
async def update_my_ambassador(
    data: AmbassadorUpdate,
    user_data: Dict = Depends(require_permission("ambassadors:update")),
    service: AmbassadorService = Depends(get_ambassador_service)
):
    """Ambassadors may only change their country; rates and activation are admin fields"""
    return service.update_ambassador(user_data["id"], AmbassadorUpdate(country=data.country))


@router.get("/me/stats", response_model=AmbassadorStats)
async def get_my_stats(
    user_data: Dict = Depends(require_permission("ambassadors:read")),
    service: AmbassadorService = Depends(get_ambassador_service)
):
    return service.get_ambassador_stats(user_data["id"])


@router.get("/me/tier", response_model=TierInfo)
async def get_my_tier(
    user_data: Dict = Depends(require_permission("ambassadors:read")),
    service: AmbassadorService = Depends(get_ambassador_service)
):
    return service.get_tier_info(service.require_ambassador(user_data["id"]))


@router.get("/me/dashboard", response_model=AmbassadorDashboard)
async def get_my_dashboard(
    user_data: Dict = Depends(require_permission("ambassadors:read")),
    service: AmbassadorService = Depends(get_ambassador_service)
):
    return service.get_dashboard(user_data["id"])


@router.get("/metrics/{country}", response_model=List[CountryMetricResponse])
async def get_country_metrics(
    country: str,
    start_date: Optional[str] = None,
    end_date: Optional[str] = None,
    limit: int = Query(30, ge=1, le=365),
    user_data: Dict = Depends(require_permission("ambassadors:read")),
    service: AmbassadorService = Depends(get_ambassador_service)
):
    return service.get_country_metrics(country, start_date, end_date, limit)


@router.get("/top-countries", response_model=List[TopCountry])
async def get_top_countries(
    metric: str = "ad_revenue",
    limit: int = Query(10, ge=1, le=100),
    user_data: Dict = Depends(require_permission("ambassadors:read")),
    service: AmbassadorService = Depends(get_ambassador_service)
):
    return service.get_top_countries(metric, limit)


@router.get("/tiers", response_model=List[CommissionTierResponse])
async def list_commission_tiers(
    include_inactive: bool = False,
    user_data: Dict = Depends(require_permission("ambassadors:read")),
    service: AmbassadorService = Depends(get_ambassador_service)
):
    return [CommissionTierResponse(**t) for t in service.list_commission_tiers(include_inactive) if t.get("id")]


@router.post("/tiers", response_model=CommissionTierResponse, status_code=201)
async def create_commission_tier(
    data: CommissionTierCreate,
    user_data: Dict = Depends(require_permission("ambassadors:manage")),
    service: AmbassadorService = Depends(get_ambassador_service)
):
    return service.create_commission_tier(data)


@router.put("/tiers/{tier_id}", response_model=CommissionTierResponse)
async def update_commission_tier(
    tier_id: str,
    data: CommissionTierUpdate,
    user_data: Dict = Depends(require_permission("ambassadors:manage")),
    service: AmbassadorService = Depends(get_ambassador_service)
):
    return service.update_commission_tier(tier_id, data)


@router.get("", response_model=List[AmbassadorResponse])
async def list_ambassadors(
    limit: int = Query(50, ge=1, le=200),
    country: Optional[str] = None,
    is_active: Optional[bool] = None,
    order_by: str = "total_earnings",
    order: str = "desc",
    user_data: Dict = Depends(require_permission("ambassadors:manage")),
    service: AmbassadorService = Depends(get_ambassador_service)
):
    return service.list_ambassadors(limit, country, is_active, order_by, order)


@router.post("", response_model=AmbassadorResponse, status_code=201)
async def create_ambassador(
    data: AmbassadorCreate,
    user_data: Dict = Depends(require_permission("ambassadors:manage")),
    service: AmbassadorService = Depends(get_ambassador_service)
):
    return service.create_ambassador(data)


@router.put("/{user_id}", response_model=AmbassadorResponse)
async def update_ambassador(
    user_id: str,
    data: AmbassadorUpdate,
    user_data: Dict = Depends(require_permission("ambassadors:manage")),
    service: AmbassadorService = Depends(get_ambassador_service)
):
    return service.update_ambassador(user_id, data)
