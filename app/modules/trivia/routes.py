from fastapi import APIRouter, Depends, Query
from app.database.supabase_client import get_supabase
from app.modules.trivia.schemas import (
    TriviaQuestionCreate, TriviaQuestionUpdate, TriviaQuestionResponse, TriviaGameQuestion,
    TriviaGameCreate, TriviaGameUpdate, TriviaGameResponse, TriviaGameSummary,
    TriviaGameSubmission, TriviaGameResult, UserTriviaStats
)
from app.modules.trivia.service import TriviaService
from app.core.dependencies import require_permission
from supabase import Client
from typing import List, Dict, Optional

router = APIRouter(prefix="/trivia", tags=["trivia"])


def get_trivia_service(supabase: Client = Depends(get_supabase)) -> TriviaService:
    return TriviaService(supabase)


@router.get("/categories", response_model=List[str])
async def list_categories(
    user_data: Dict = Depends(require_permission("trivia:read")),
    service: TriviaService = Depends(get_trivia_service)
):
    return service.list_categories()


@router.get("/difficulties", response_model=List[str])
async def list_difficulties(
    user_data: Dict = Depends(require_permission("trivia:read")),
    service: TriviaService = Depends(get_trivia_service)
):
    return service.list_difficulties()


@router.get("/questions", response_model=List[TriviaQuestionResponse])
async def list_questions(
    category: Optional[str] = None,
    difficulty: Optional[str] = None,
    country: Optional[str] = None,
    include_inactive: bool = False,
    limit: int = Query(50, ge=1, le=200),
    offset: int = Query(0, ge=0),
    user_data: Dict = Depends(require_permission("trivia:manage")),
    service: TriviaService = Depends(get_trivia_service)
):
    """Questions with answers (admin)"""
    return service.list_questions(category, difficulty, country, include_inactive, limit, offset)


@router.post("/questions", response_model=TriviaQuestionResponse, status_code=201)
async def create_question(
    question_data: TriviaQuestionCreate,
    user_data: Dict = Depends(require_permission("trivia:manage")),
    service: TriviaService = Depends(get_trivia_service)
):
    return service.create_question(question_data)


@router.put("/questions/{question_id}", response_model=TriviaQuestionResponse)
async def update_question(
    question_id: str,
    question_data: TriviaQuestionUpdate,
    user_data: Dict = Depends(require_permission("trivia:manage")),
    service: TriviaService = Depends(get_trivia_service)
):
    return service.update_question(question_id, question_data)


@router.get("/games", response_model=List[TriviaGameSummary])
async def list_games(
    category: Optional[str] = None,
    difficulty: Optional[str] = None,
    limit: int = Query(10, ge=1, le=100),
    offset: int = Query(0, ge=0),
    user_data: Dict = Depends(require_permission("trivia:read")),
    service: TriviaService = Depends(get_trivia_service)
):
    return service.list_game_summaries(category, difficulty, limit, offset, user_id=user_data["id"])


@router.post("/games", response_model=TriviaGameResponse, status_code=201)
async def create_game(
    game_data: TriviaGameCreate,
    user_data: Dict = Depends(require_permission("trivia:manage")),
    service: TriviaService = Depends(get_trivia_service)
):
    return service.create_game(game_data)


@router.get("/games/{game_id}", response_model=TriviaGameResponse)
async def get_game(
    game_id: str,
    user_data: Dict = Depends(require_permission("trivia:read")),
    service: TriviaService = Depends(get_trivia_service)
):
    return service.get_game(game_id)


@router.put("/games/{game_id}", response_model=TriviaGameResponse)
async def update_game(
    game_id: str,
    game_data: TriviaGameUpdate,
    user_data: Dict = Depends(require_permission("trivia:manage")),
    service: TriviaService = Depends(get_trivia_service)
):
    return service.update_game(game_id, game_data)


@router.get("/games/{game_id}/questions", response_model=List[TriviaGameQuestion])
async def get_game_questions(
    game_id: str,
    user_data: Dict = Depends(require_permission("trivia:play")),
    service: TriviaService = Depends(get_trivia_service)
):
    return service.get_game_questions(game_id)


@router.post("/games/{game_id}/submit", response_model=TriviaGameResult)
async def submit_game(
    game_id: str,
    submission: TriviaGameSubmission,
    user_data: Dict = Depends(require_permission("trivia:play")),
    service: TriviaService = Depends(get_trivia_service)
):
    return service.submit_game(user_data["id"], game_id, submission.answers)


@router.get("/stats/me", response_model=UserTriviaStats)
async def get_my_trivia_stats(
    user_data: Dict = Depends(require_permission("trivia:read")),
    service: TriviaService = Depends(get_trivia_service)
):
    return service.get_user_stats(user_data["id"])
