from fastapi import APIRouter, Depends, Query
from app.database.supabase_client import get_supabase
from app.modules.payments.schemas import (
    WalletPaymentRequest, TransactionCreate, TransactionStatusUpdate,
    TransactionResponse, TransactionListResponse
)
from app.modules.payments.service import PaymentService
from app.core.dependencies import require_permission
from supabase import Client
from typing import Dict, Optional

router = APIRouter(prefix="/payments", tags=["payments"])


def get_payment_service(supabase: Client = Depends(get_supabase)) -> PaymentService:
    return PaymentService(supabase)


@router.post("/wallet", response_model=TransactionResponse, status_code=201)
async def pay_from_wallet(
    payment: WalletPaymentRequest,
    user_data: Dict = Depends(require_permission("payments:create")),
    service: PaymentService = Depends(get_payment_service)
):
    return service.process_wallet_payment(user_data["id"], payment)


@router.post("/transactions", response_model=TransactionResponse, status_code=201)
async def create_transaction(
    transaction_data: TransactionCreate,
    user_data: Dict = Depends(require_permission("payments:create")),
    service: PaymentService = Depends(get_payment_service)
):
    return service.create_transaction(user_data["id"], transaction_data)


@router.get("/transactions/me", response_model=TransactionListResponse)
async def list_my_transactions(
    status: Optional[str] = None,
    currency: Optional[str] = None,
    limit: int = Query(50, ge=1, le=200),
    offset: int = Query(0, ge=0),
    user_data: Dict = Depends(require_permission("payments:read")),
    service: PaymentService = Depends(get_payment_service)
):
    return service.list_transactions(user_data["id"], limit, offset, status, currency=currency)


@router.get("/transactions", response_model=TransactionListResponse)
async def list_transactions(
    status: Optional[str] = None,
    payment_method: Optional[str] = None,
    currency: Optional[str] = None,
    limit: int = Query(50, ge=1, le=200),
    offset: int = Query(0, ge=0),
    user_data: Dict = Depends(require_permission("payments:manage")),
    service: PaymentService = Depends(get_payment_service)
):
    return service.list_transactions(None, limit, offset, status, payment_method, currency)


@router.put("/transactions/{transaction_id}", response_model=TransactionResponse)
async def update_transaction_status(
    transaction_id: str,
    status_data: TransactionStatusUpdate,
    user_data: Dict = Depends(require_permission("payments:manage")),
    service: PaymentService = Depends(get_payment_service)
):
    return service.update_transaction_status(transaction_id, status_data)
