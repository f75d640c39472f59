from pydantic import BaseModel, Field, model_validator
from typing import Optional, List, Literal
from datetime import datetime

PromotedPollStatus = Literal["pending_approval", "active", "paused", "completed", "rejected"]
PaymentStatus = Literal["pending", "paid", "failed", "refunded"]


class PromotedPollCreate(BaseModel):
    poll_id: str
    sponsor_id: str
    pricing_model: str = "CPV"
    budget_amount: float = Field(..., gt=0)
    cost_per_vote: float = Field(..., gt=0)
    target_votes: int = Field(..., gt=0)
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None

    @model_validator(mode="after")
    def check_dates(self):
        if self.start_date and self.end_date and self.end_date <= self.start_date:
            raise ValueError("end_date must be after start_date")
        return self


class PromotedPollUpdate(BaseModel):
    budget_amount: Optional[float] = Field(None, gt=0)
    cost_per_vote: Optional[float] = Field(None, gt=0)
    target_votes: Optional[int] = Field(None, gt=0)
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None
    admin_notes: Optional[str] = None


class PromotedPollReview(BaseModel):
    notes: Optional[str] = None


class PromotedPollResponse(BaseModel):
    id: str
    poll_id: str
    sponsor_id: str
    pricing_model: str = "CPV"
    budget_amount: float
    cost_per_vote: float
    target_votes: int
    current_votes: int = 0
    status: str = "pending_approval"
    payment_status: str = "pending"
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None
    approved_by: Optional[str] = None
    approved_at: Optional[datetime] = None
    admin_notes: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class PromotedPollListResponse(BaseModel):
    items: List[PromotedPollResponse]
    total: int


class DailyVotes(BaseModel):
    date: str
    votes: int


class PromotedPollAnalytics(BaseModel):
    promoted_poll_id: str
    votes: int
    target_votes: int
    completion_rate: float
    cost_per_vote: float
    spent_budget: float
    remaining_budget: float
    daily_votes: List[DailyVotes] = []


class StatusTransitionResult(BaseModel):
    completed_promotions: int = 0
