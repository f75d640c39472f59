from pydantic import BaseModel, Field
from typing import Optional, List, Dict, Any, Literal
from datetime import datetime
from app.config.settings import settings

PaymentMethod = Literal["wallet", "stripe", "paypal", "paystack"]
TransactionStatus = Literal["pending", "completed", "failed", "refunded"]


class WalletPaymentRequest(BaseModel):
    amount: float = Field(..., gt=0)
    currency: str = Field(default_factory=lambda: settings.default_currency, min_length=3, max_length=3)
    promoted_poll_id: Optional[str] = None


class TransactionCreate(BaseModel):
    amount: float = Field(..., gt=0)
    currency: str = Field(default_factory=lambda: settings.default_currency, min_length=3, max_length=3)
    payment_method: PaymentMethod
    promoted_poll_id: Optional[str] = None
    metadata: Dict[str, Any] = {}


class TransactionStatusUpdate(BaseModel):
    status: Literal["completed", "failed", "refunded"]
    gateway_transaction_id: Optional[str] = None


class TransactionResponse(BaseModel):
    id: str
    user_id: str
    promoted_poll_id: Optional[str] = None
    amount: float
    currency: str = Field(default_factory=lambda: settings.default_currency)
    original_amount: Optional[float] = None
    original_currency: Optional[str] = None
    payment_method: str
    status: str = "pending"
    gateway_transaction_id: Optional[str] = None
    metadata: Dict[str, Any] = {}
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class TransactionListResponse(BaseModel):
    items: List[TransactionResponse]
    total: int
