from pydantic import BaseModel, EmailStr, Field
from typing import Optional, List
from datetime import datetime


class SponsorCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=200)
    contact_email: EmailStr
    website_url: Optional[str] = None
    description: Optional[str] = None


class SponsorUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=200)
    contact_email: Optional[EmailStr] = None
    website_url: Optional[str] = None
    description: Optional[str] = None
    is_active: Optional[bool] = None
    is_verified: Optional[bool] = None


class SponsorVerify(BaseModel):
    is_verified: bool = True


class SponsorResponse(BaseModel):
    id: str
    user_id: str
    name: str
    contact_email: str
    website_url: Optional[str] = None
    description: Optional[str] = None
    is_verified: bool = False
    is_active: bool = True
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class SponsorListResponse(BaseModel):
    items: List[SponsorResponse]
    total: int
