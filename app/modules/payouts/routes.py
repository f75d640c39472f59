from fastapi import APIRouter, Depends, Query
from app.database.supabase_client import get_supabase
from app.modules.payouts.schemas import (
    PayoutMethodCreate, PayoutMethodUpdate, PayoutMethodResponse, PayoutRequestCreate,
    PayoutStatusUpdate, PayoutRequestResponse, PayoutRequestListResponse, PayableBalance, PayoutStats
)
from app.modules.payouts.service import PayoutService
from app.core.dependencies import require_permission
from supabase import Client
from typing import List, Dict, Optional

router = APIRouter(prefix="/payouts", tags=["payouts"])


def get_payout_service(supabase: Client = Depends(get_supabase)) -> PayoutService:
    return PayoutService(supabase)


@router.get("/methods", response_model=List[PayoutMethodResponse])
async def list_payout_methods(
    include_inactive: bool = False,
    user_data: Dict = Depends(require_permission("payouts:read")),
    service: PayoutService = Depends(get_payout_service)
):
    return service.list_payout_methods(include_inactive)


@router.post("/methods", response_model=PayoutMethodResponse, status_code=201)
async def create_payout_method(
    method_data: PayoutMethodCreate,
    user_data: Dict = Depends(require_permission("payouts:manage")),
    service: PayoutService = Depends(get_payout_service)
):
    return service.create_payout_method(method_data)


@router.put("/methods/{method_id}", response_model=PayoutMethodResponse)
async def update_payout_method(
    method_id: str,
    method_data: PayoutMethodUpdate,
    user_data: Dict = Depends(require_permission("payouts:manage")),
    service: PayoutService = Depends(get_payout_service)
):
    return service.update_payout_method(method_id, method_data)


@router.get("/balance", response_model=PayableBalance)
async def get_payable_balance(
    user_data: Dict = Depends(require_permission("payouts:read")),
    service: PayoutService = Depends(get_payout_service)
):
    return PayableBalance(user_id=user_data["id"], balance=service.get_payable_balance(user_data["id"]))


@router.post("/requests", response_model=PayoutRequestResponse, status_code=201)
async def request_payout(
    request_data: PayoutRequestCreate,
    user_data: Dict = Depends(require_permission("payouts:request")),
    service: PayoutService = Depends(get_payout_service)
):
    return service.request_payout(user_data["id"], request_data)


@router.get("/requests/me", response_model=PayoutRequestListResponse)
async def list_my_payout_requests(
    status: Optional[str] = Query(None, pattern="^(pending|approved|rejected|processed)$"),
    limit: int = Query(50, ge=1, le=200),
    offset: int = Query(0, ge=0),
    user_data: Dict = Depends(require_permission("payouts:read")),
    service: PayoutService = Depends(get_payout_service)
):
    return service.list_payout_requests(user_data["id"], status, limit, offset)


@router.get("/requests", response_model=PayoutRequestListResponse)
async def list_payout_requests(
    status: Optional[str] = Query(None, pattern="^(pending|approved|rejected|processed)$"),
    user_id: Optional[str] = None,
    limit: int = Query(50, ge=1, le=200),
    offset: int = Query(0, ge=0),
    user_data: Dict = Depends(require_permission("payouts:manage")),
    service: PayoutService = Depends(get_payout_service)
):
    return service.list_payout_requests(user_id, status, limit, offset)


@router.put("/requests/{request_id}", response_model=PayoutRequestResponse)
async def update_payout_status(
    request_id: str,
    status_data: PayoutStatusUpdate,
    user_data: Dict = Depends(require_permission("payouts:manage")),
    service: PayoutService = Depends(get_payout_service)
):
    return service.update_payout_status(user_data["id"], request_id, status_data)


@router.get("/stats", response_model=PayoutStats)
async def get_payout_stats(
    user_data: Dict = Depends(require_permission("payouts:manage")),
    service: PayoutService = Depends(get_payout_service)
):
    return service.get_payout_stats()
