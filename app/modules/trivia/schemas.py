from pydantic import BaseModel, Field, model_validator
from typing import Optional, List, Literal
from datetime import datetime

Difficulty = Literal["easy", "medium", "hard"]


class TriviaQuestionCreate(BaseModel):
    question: str = Field(..., min_length=1, max_length=500)
    options: List[str] = Field(..., min_length=2, max_length=6)
    correct_answer: int = Field(..., ge=0)
    difficulty: Difficulty = "medium"
    category: str = Field(..., min_length=1, max_length=100)
    country: Optional[str] = Field(None, min_length=2, max_length=2)
    is_active: bool = True

    @model_validator(mode="after")
    def check_correct_answer(self):
        if self.correct_answer >= len(self.options):
            raise ValueError("correct_answer must index one of the options")
        return self


class TriviaQuestionUpdate(BaseModel):
    question: Optional[str] = Field(None, min_length=1, max_length=500)
    options: Optional[List[str]] = Field(None, min_length=2, max_length=6)
    correct_answer: Optional[int] = Field(None, ge=0)
    difficulty: Optional[Difficulty] = None
    category: Optional[str] = Field(None, min_length=1, max_length=100)
    country: Optional[str] = Field(None, min_length=2, max_length=2)
    is_active: Optional[bool] = None


class TriviaQuestionResponse(BaseModel):
    id: str
    question: str
    options: List[str]
    correct_answer: int
    difficulty: str
    category: Optional[str] = None
    country: Optional[str] = None
    is_active: bool = True
    created_at: Optional[datetime] = None


class TriviaGameQuestion(BaseModel):
    """Question as served to players: no correct answer"""
    id: str
    question: str
    options: List[str]
    difficulty: str
    category: Optional[str] = None


class TriviaGameCreate(BaseModel):
    title: str = Field(..., min_length=1, max_length=200)
    description: Optional[str] = None
    category: str = Field(..., min_length=1, max_length=100)
    difficulty: Difficulty = "medium"
    question_ids: List[str] = Field(..., min_length=1)
    points_reward: int = Field(100, ge=0)
    estimated_time_minutes: int = Field(5, ge=1)
    is_active: bool = True


class TriviaGameUpdate(BaseModel):
    title: Optional[str] = Field(None, min_length=1, max_length=200)
    description: Optional[str] = None
    category: Optional[str] = Field(None, min_length=1, max_length=100)
    difficulty: Optional[Difficulty] = None
    question_ids: Optional[List[str]] = Field(None, min_length=1)
    points_reward: Optional[int] = Field(None, ge=0)
    estimated_time_minutes: Optional[int] = Field(None, ge=1)
    is_active: Optional[bool] = None


class TriviaGameResponse(BaseModel):
    id: str
    title: str
    description: Optional[str] = None
    category: str
    difficulty: str
    question_ids: List[str]
    number_of_questions: int
    points_reward: int
    estimated_time_minutes: int = 5
    is_active: bool = True
    created_at: Optional[datetime] = None


class TriviaGameSummary(BaseModel):
    id: str
    title: str
    description: Optional[str] = None
    category: str
    difficulty: str
    question_count: int
    points_reward: int
    estimated_time: str
    has_played: bool = False


class TriviaGameSubmission(BaseModel):
    answers: List[int] = Field(..., min_length=1)


class TriviaGameResult(BaseModel):
    success: bool = True
    score: int
    correct_answers: int
    total_questions: int
    points_earned: int
    message: str
    new_badges: List[str] = []


class UserTriviaStats(BaseModel):
    total_games_played: int
    best_score: int
