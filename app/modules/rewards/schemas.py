from pydantic import BaseModel, Field
from typing import Optional, List, Dict, Any
from datetime import datetime


class DailyRewardStatus(BaseModel):
    can_spin: bool
    can_play_trivia: bool
    can_watch_ad: bool
    last_spin_date: Optional[str] = None
    last_trivia_date: Optional[str] = None
    last_watch_date: Optional[str] = None
    spin_streak: int = 0
    trivia_streak: int = 0
    total_spins: int = 0
    total_trivia_completed: int = 0
    total_ads_watched: int = 0


class SpinResult(BaseModel):
    result: str
    points_earned: int
    base_points: int
    bonus_points: int
    streak: int
    streak_multiplier: float
    message: str
    total_points: int
    new_badges: List[str] = []


class DailyTriviaQuestion(BaseModel):
    id: str
    question: str
    options: List[str]
    difficulty: str
    category: Optional[str] = None
    country: Optional[str] = None


class TriviaAnswerRequest(BaseModel):
    question_id: str
    selected_answer: int = Field(..., ge=0)


class TriviaAnswerResult(BaseModel):
    correct: bool
    correct_answer: int
    points_earned: int
    base_points: int
    streak_bonus: int
    new_streak: int
    new_badges: List[str] = []


class AdWatchResult(BaseModel):
    points_earned: int
    total_points: int
    message: str
    new_badges: List[str] = []


class RewardHistoryEntry(BaseModel):
    id: str
    user_id: str
    reward_type: str
    points_earned: int
    reward_data: Dict[str, Any] = {}
    created_at: Optional[datetime] = None
