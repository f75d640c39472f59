from pydantic import BaseModel
from typing import Optional, Dict, Any
from datetime import datetime


class ReferralStats(BaseModel):
    referral_code: Optional[str] = None
    total_referrals: int = 0
    total_earned_from_referrals: int = 0
    recent_referrals: int = 0


class ReferralHistoryEntry(BaseModel):
    id: str
    reward_type: str
    points_earned: int
    reward_data: Dict[str, Any] = {}
    created_at: Optional[datetime] = None


class ReferralCodeValidation(BaseModel):
    valid: bool
    referrer_id: Optional[str] = None
    referrer_name: Optional[str] = None


class ReferredUser(BaseModel):
    id: str
    name: Optional[str] = None
    email: Optional[str] = None
    points: int = 0
    created_at: Optional[datetime] = None


class ReferralLeaderboardEntry(BaseModel):
    id: str
    name: Optional[str] = None
    referral_count: int
    total_earned: int


class ReferralBonusResult(BaseModel):
    referrer_id: str
    referred_user_id: str
    points_awarded: int
    commission: float = 0
