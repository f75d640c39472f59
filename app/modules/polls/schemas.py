from pydantic import BaseModel, Field, model_validator
from typing import Optional, List, Literal
from datetime import datetime


class PollCategoryCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    description: Optional[str] = None


class PollCategoryUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=100)
    description: Optional[str] = None
    is_active: Optional[bool] = None


class PollCategoryResponse(BaseModel):
    id: str
    name: str
    description: Optional[str] = None
    is_active: bool = True
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class PollOption(BaseModel):
    text: str
    votes: int = 0


def clean_options(options: List[str]) -> List[str]:
    cleaned = [option.strip() for option in options]
    if any(not option for option in cleaned):
        raise ValueError("Poll options cannot be empty")
    if len({option.lower() for option in cleaned}) != len(cleaned):
        raise ValueError("Poll options must be unique")
    return cleaned


class PollCreate(BaseModel):
    title: str = Field(..., min_length=3, max_length=200)
    description: Optional[str] = None
    options: List[str] = Field(..., min_length=2, max_length=10)
    type: Literal["global", "country"] = "global"
    country: Optional[str] = Field(None, min_length=2, max_length=2)
    category: str = "General"
    start_date: Optional[datetime] = None
    active_until: Optional[datetime] = None

    @model_validator(mode="after")
    def check_poll(self):
        self.options = clean_options(self.options)
        if self.type == "country" and not self.country:
            raise ValueError("country is required for country polls")
        if self.start_date and self.active_until and self.active_until <= self.start_date:
            raise ValueError("active_until must be after start_date")
        return self


class PollUpdate(BaseModel):
    title: Optional[str] = Field(None, min_length=3, max_length=200)
    description: Optional[str] = None
    options: Optional[List[str]] = Field(None, min_length=2, max_length=10)
    category: Optional[str] = None
    start_date: Optional[datetime] = None
    active_until: Optional[datetime] = None
    is_active: Optional[bool] = None

    @model_validator(mode="after")
    def check_options(self):
        if self.options is not None:
            self.options = clean_options(self.options)
        return self


class PollResponse(BaseModel):
    id: str
    title: str
    description: Optional[str] = None
    options: List[PollOption]
    type: str = "global"
    country: Optional[str] = None
    category: str = "General"
    slug: str
    created_by: Optional[str] = None
    start_date: Optional[datetime] = None
    active_until: Optional[datetime] = None
    is_active: bool = True
    total_votes: int = 0
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    has_voted: bool = False
    user_vote: Optional[int] = None
    time_left: str = "No expiration"
    reward: int = 50

    class Config:
        from_attributes = True


class VoteRequest(BaseModel):
    vote_option: int = Field(..., ge=0)


class VoteResult(BaseModel):
    success: bool = True
    message: str
    points_earned: int
    total_points: int
    poll: PollResponse
    new_badges: List[str] = []


class PollHistoryResponse(BaseModel):
    created_polls: List[PollResponse] = []
    voted_polls: List[PollResponse] = []


class CategoryCount(BaseModel):
    category: str
    count: int


class PollStatsResponse(BaseModel):
    total_polls: int
    active_polls: int
    total_votes: int
    top_categories: List[CategoryCount] = []
