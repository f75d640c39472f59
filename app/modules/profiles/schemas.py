from pydantic import BaseModel, EmailStr, Field
from typing import Optional, List, Dict, Any
from datetime import datetime


class ProfileUpdate(BaseModel):
    name: Optional[str] = Field(None, max_length=100)
    avatar_url: Optional[str] = None
    country: Optional[str] = Field(None, min_length=2, max_length=2)
    currency: Optional[str] = Field(None, min_length=3, max_length=3)
    paypal_email: Optional[EmailStr] = None
    bank_details: Optional[Dict[str, Any]] = None


class AdminProfileUpdate(ProfileUpdate):
    role: Optional[str] = Field(None, pattern="^(user|moderator|ambassador|admin)$")
    is_suspended: Optional[bool] = None
    points: Optional[int] = Field(None, ge=0)


class ProfileResponse(BaseModel):
    id: str
    email: Optional[str] = None
    name: Optional[str] = None
    avatar_url: Optional[str] = None
    role: str = "user"
    points: int = 0
    badges: List[str] = []
    country: Optional[str] = None
    currency: Optional[str] = None
    referral_code: Optional[str] = None
    referred_by: Optional[str] = None
    is_suspended: bool = False
    paypal_email: Optional[str] = None
    bank_details: Optional[Dict[str, Any]] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class ProfileListResponse(BaseModel):
    items: List[ProfileResponse]
    total: int


class UserRankResponse(BaseModel):
    user_id: str
    points: int
    rank: int
