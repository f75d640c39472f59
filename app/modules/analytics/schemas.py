from pydantic import BaseModel
from typing import List, Literal
from datetime import datetime


class PlatformStats(BaseModel):
    total_users: int = 0
    active_users: int = 0
    total_polls: int = 0
    active_polls: int = 0
    total_votes: int = 0
    total_points: int = 0
    recent_signups: int = 0


class ActivityItem(BaseModel):
    type: Literal["user", "poll", "moderation"]
    message: str
    time: str
    timestamp: datetime


class CountryUsers(BaseModel):
    country: str
    count: int
    percentage: float


class DailyCount(BaseModel):
    date: str
    count: int


class CategoryCount(BaseModel):
    category: str
    count: int


class PollAnalytics(BaseModel):
    total_polls: int = 0
    active_polls: int = 0
    polls_by_category: List[CategoryCount] = []
    votes_by_day: List[DailyCount] = []


class DifficultyCount(BaseModel):
    difficulty: str
    count: int


class DifficultyScore(BaseModel):
    difficulty: str
    score: int


class TriviaAnalytics(BaseModel):
    total_games: int = 0
    total_questions: int = 0
    completions_by_difficulty: List[DifficultyCount] = []
    average_scores: List[DifficultyScore] = []
