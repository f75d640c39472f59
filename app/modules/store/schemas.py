from pydantic import BaseModel, Field
from typing import Optional, Dict, Any, Literal
from datetime import datetime
from app.config.settings import settings

RedemptionStatus = Literal["pending_fulfillment", "fulfilled", "cancelled"]


class StoreItemCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=200)
    description: Optional[str] = None
    item_type: str = Field(..., min_length=1, max_length=50)
    points_cost: int = Field(..., gt=0)
    currency: str = Field(default_factory=lambda: settings.default_currency, min_length=3, max_length=3)
    image_url: Optional[str] = None
    stock_quantity: Optional[int] = Field(None, ge=0)
    is_active: bool = True


class StoreItemUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=200)
    description: Optional[str] = None
    item_type: Optional[str] = Field(None, min_length=1, max_length=50)
    points_cost: Optional[int] = Field(None, gt=0)
    currency: Optional[str] = Field(None, min_length=3, max_length=3)
    image_url: Optional[str] = None
    stock_quantity: Optional[int] = Field(None, ge=0)
    is_active: Optional[bool] = None


class StoreItemResponse(BaseModel):
    id: str
    name: str
    description: Optional[str] = None
    item_type: str
    points_cost: int
    currency: str = Field(default_factory=lambda: settings.default_currency)
    image_url: Optional[str] = None
    stock_quantity: Optional[int] = None
    is_active: bool = True
    original_currency: Optional[str] = None
    original_points_cost: Optional[int] = None
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class RedeemRequest(BaseModel):
    item_id: str
    fulfillment_details: Dict[str, Any] = {}


class RedeemResult(BaseModel):
    success: bool = True
    message: str
    points_cost: int
    new_points_balance: int
    redeemed_item_id: str


class RedemptionResponse(BaseModel):
    id: str
    user_id: str
    item_id: str
    item_name: Optional[str] = None
    points_cost: int
    fulfillment_details: Dict[str, Any] = {}
    status: str
    admin_notes: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class RedemptionStatusUpdate(BaseModel):
    status: RedemptionStatus
    admin_notes: Optional[str] = None
