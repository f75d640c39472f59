from pydantic import BaseModel, Field
from typing import Optional, List, Dict
from datetime import datetime, date


class AmbassadorCreate(BaseModel):
    user_id: str
    country: str = Field(..., min_length=2, max_length=2)
    commission_rate: Optional[float] = Field(None, ge=0, le=100)


class AmbassadorUpdate(BaseModel):
    country: Optional[str] = Field(None, min_length=2, max_length=2)
    commission_rate: Optional[float] = Field(None, ge=0, le=100)
    is_active: Optional[bool] = None


class AmbassadorResponse(BaseModel):
    id: str
    user_id: str
    country: str
    commission_rate: float = 0
    total_referrals: int = 0
    total_earnings: float = 0
    total_payouts: float = 0
    is_active: bool = True
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class CountryMetricResponse(BaseModel):
    country: str
    metric_date: date
    ad_revenue: float = 0
    user_count: int = 0
    new_users: int = 0


class TopCountry(BaseModel):
    country: str
    value: float


class CommissionTierBase(BaseModel):
    tier_name: str = Field(..., min_length=1, max_length=50)
    min_referrals: int = Field(..., ge=0)
    commission_rate: float = Field(..., ge=0, le=100)
    country_specific_rates: Dict[str, float] = {}
    is_active: bool = True


class CommissionTierCreate(CommissionTierBase):
    pass


class CommissionTierUpdate(BaseModel):
    tier_name: Optional[str] = Field(None, min_length=1, max_length=50)
    min_referrals: Optional[int] = Field(None, ge=0)
    commission_rate: Optional[float] = Field(None, ge=0, le=100)
    country_specific_rates: Optional[Dict[str, float]] = None
    is_active: Optional[bool] = None


class CommissionTierResponse(CommissionTierBase):
    id: str


class TierInfo(BaseModel):
    tier_name: str
    commission_rate: float
    next_tier_name: Optional[str] = None
    referrals_to_next_tier: Optional[int] = None


class AmbassadorStats(BaseModel):
    total_referrals: int
    total_earnings: float
    monthly_earnings: float
    conversion_rate: float
    country_rank: int
    payable_balance: float
    tier: TierInfo


class AmbassadorDashboard(BaseModel):
    ambassador: AmbassadorResponse
    stats: AmbassadorStats
    recent_metrics: List[CountryMetricResponse]
    top_countries: List[TopCountry]
