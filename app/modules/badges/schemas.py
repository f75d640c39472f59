from pydantic import BaseModel, Field
from typing import Optional, List, Literal
from datetime import datetime

CriteriaType = Literal[
    "poll_votes", "polls_created", "trivia_completed", "trivia_perfect", "total_points",
    "login_streak", "spin_wins", "spin_jackpot", "ads_watched", "referrals", "early_adopter",
]


class BadgeCriteria(BaseModel):
    type: CriteriaType
    count: int = Field(1, ge=1)
    before: Optional[str] = None


class BadgeCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    description: str = ""
    icon: Optional[str] = None
    criteria: BadgeCriteria
    is_active: bool = True


class BadgeUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=100)
    description: Optional[str] = None
    icon: Optional[str] = None
    criteria: Optional[BadgeCriteria] = None
    is_active: Optional[bool] = None


class BadgeResponse(BaseModel):
    id: str
    name: str
    description: Optional[str] = None
    icon: Optional[str] = None
    criteria: BadgeCriteria
    is_active: bool = True
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class BadgeProgress(BaseModel):
    badge: BadgeResponse
    progress: int
    max: int
    earned: bool


class BadgeStat(BaseModel):
    badge_id: str
    name: str
    holders: int


class BadgeStatsResponse(BaseModel):
    total_badges: int
    active_badges: int
    total_awarded: int
    badges: List[BadgeStat]
