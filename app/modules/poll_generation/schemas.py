from pydantic import BaseModel, Field
from typing import Optional, List
from app.modules.polls.schemas import PollResponse


class PollGenerationRequest(BaseModel):
    num_polls: int = Field(1, ge=1, le=10)
    categories: List[str] = []
    topic: Optional[str] = Field(None, max_length=200)
    country: Optional[str] = Field(None, min_length=2, max_length=2)


class GeneratedPollError(BaseModel):
    title: Optional[str] = None
    error: str


class PollGenerationResult(BaseModel):
    created_polls: List[PollResponse] = []
    errors: List[GeneratedPollError] = []
    total_created: int = 0
    total_errors: int = 0
