from fastapi import APIRouter, Depends, Query
from app.database.supabase_client import get_supabase
from app.modules.store.schemas import (
    StoreItemCreate, StoreItemUpdate, StoreItemResponse, RedeemRequest, RedeemResult,
    RedemptionResponse, RedemptionStatusUpdate
)
from app.modules.store.service import StoreService
from app.core.dependencies import require_permission
from supabase import Client
from typing import List, Dict, Optional

router = APIRouter(prefix="/store", tags=["store"])


def get_store_service(supabase: Client = Depends(get_supabase)) -> StoreService:
    return StoreService(supabase)


@router.get("/items", response_model=List[StoreItemResponse])
async def list_store_items(
    item_type: Optional[str] = None,
    min_points: Optional[int] = Query(None, ge=0),
    max_points: Optional[int] = Query(None, ge=0),
    in_stock: bool = False,
    currency: Optional[str] = None,
    limit: int = Query(50, ge=1, le=200),
    user_data: Dict = Depends(require_permission("store:read")),
    service: StoreService = Depends(get_store_service)
):
    """List active items; costs are shown in the caller's currency unless one is given"""
    return service.list_items(item_type, min_points, max_points, in_stock, currency or user_data.get("currency"), limit)


@router.post("/items", response_model=StoreItemResponse, status_code=201)
async def create_store_item(
    item_data: StoreItemCreate,
    user_data: Dict = Depends(require_permission("store:manage")),
    service: StoreService = Depends(get_store_service)
):
    return service.create_item(item_data)


@router.put("/items/{item_id}", response_model=StoreItemResponse)
async def update_store_item(
    item_id: str,
    item_data: StoreItemUpdate,
    user_data: Dict = Depends(require_permission("store:manage")),
    service: StoreService = Depends(get_store_service)
):
    return service.update_item(item_id, item_data)


@router.post("/redeem", response_model=RedeemResult)
async def redeem_item(
    request: RedeemRequest,
    user_data: Dict = Depends(require_permission("store:redeem")),
    service: StoreService = Depends(get_store_service)
):
    return service.redeem_item(user_data["id"], request)


@router.get("/redemptions/me", response_model=List[RedemptionResponse])
async def list_my_redemptions(
    status: Optional[str] = None,
    limit: int = Query(50, ge=1, le=200),
    user_data: Dict = Depends(require_permission("store:read")),
    service: StoreService = Depends(get_store_service)
):
    return service.list_redemptions(user_data["id"], status, limit)


@router.get("/redemptions", response_model=List[RedemptionResponse])
async def list_all_redemptions(
    status: Optional[str] = None,
    limit: int = Query(50, ge=1, le=200),
    user_data: Dict = Depends(require_permission("store:manage")),
    service: StoreService = Depends(get_store_service)
):
    return service.list_redemptions(None, status, limit)


@router.put("/redemptions/{redemption_id}", response_model=RedemptionResponse)
async def update_redemption_status(
    redemption_id: str,
    update: RedemptionStatusUpdate,
    user_data: Dict = Depends(require_permission("store:manage")),
    service: StoreService = Depends(get_store_service)
):
    return service.update_redemption_status(redemption_id, update)
