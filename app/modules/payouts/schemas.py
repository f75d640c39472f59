from pydantic import BaseModel, Field
from typing import Optional, List, Dict, Any, Literal
from datetime import datetime

PayoutStatus = Literal["pending", "approved", "rejected", "processed"]


class PayoutMethodConfig(BaseModel):
    min_payout: float = Field(0, ge=0)
    requires_email: bool = False
    requires_bank_details: bool = False


class PayoutMethodCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=50)
    description: Optional[str] = None
    config: PayoutMethodConfig = PayoutMethodConfig()
    is_active: bool = True


class PayoutMethodUpdate(BaseModel):
    description: Optional[str] = None
    config: Optional[PayoutMethodConfig] = None
    is_active: Optional[bool] = None


class PayoutMethodResponse(BaseModel):
    id: str
    name: str
    description: Optional[str] = None
    config: Dict[str, Any] = {}
    is_active: bool = True
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class PayoutRequestCreate(BaseModel):
    amount: float
    payout_method: str
    payout_details: Dict[str, Any] = {}


class PayoutStatusUpdate(BaseModel):
    status: PayoutStatus
    admin_notes: Optional[str] = None
    transaction_id: Optional[str] = None


class PayoutRequestResponse(BaseModel):
    id: str
    user_id: str
    amount: float
    payout_method: str
    payout_details: Dict[str, Any] = {}
    status: str = "pending"
    admin_notes: Optional[str] = None
    transaction_id: Optional[str] = None
    requested_at: Optional[datetime] = None
    processed_at: Optional[datetime] = None
    processed_by: Optional[str] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class PayoutRequestListResponse(BaseModel):
    items: List[PayoutRequestResponse]
    total: int


class PayableBalance(BaseModel):
    user_id: str
    balance: float


class PayoutStats(BaseModel):
    total_processed: int = 0
    total_pending: int = 0
    total_amount: float = 0.0
    pending_amount: float = 0.0
    average_amount: float = 0.0
    average_processing_hours: float = 0.0
