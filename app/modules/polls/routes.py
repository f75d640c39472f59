from fastapi import APIRouter, Depends, Query
from app.database.supabase_client import get_supabase
from app.modules.polls.schemas import (
    PollCategoryCreate, PollCategoryUpdate, PollCategoryResponse,
    PollCreate, PollUpdate, PollResponse, VoteRequest, VoteResult,
    PollHistoryResponse, PollStatsResponse
)
from app.modules.polls.service import PollService
from app.core.dependencies import require_permission, is_admin
from supabase import Client
from typing import List, Dict, Optional

router = APIRouter(prefix="/polls", tags=["polls"])


def get_poll_service(supabase: Client = Depends(get_supabase)) -> PollService:
    return PollService(supabase)


@router.get("/categories", response_model=List[PollCategoryResponse])
async def list_categories(
    user_data: Dict = Depends(require_permission("polls:read")),
    service: PollService = Depends(get_poll_service)
):
    return service.list_categories()


@router.post("/categories", response_model=PollCategoryResponse, status_code=201)
async def create_category(
    category_data: PollCategoryCreate,
    user_data: Dict = Depends(require_permission("polls:manage")),
    service: PollService = Depends(get_poll_service)
):
    return service.create_category(category_data)


@router.put("/categories/{category_id}", response_model=PollCategoryResponse)
async def update_category(
    category_id: str,
    category_data: PollCategoryUpdate,
    user_data: Dict = Depends(require_permission("polls:manage")),
    service: PollService = Depends(get_poll_service)
):
    return service.update_category(category_id, category_data)


@router.get("", response_model=List[PollResponse])
async def list_polls(
    type: Optional[str] = Query(None, pattern="^(global|country)$"),
    country: Optional[str] = None,
    category: Optional[str] = None,
    order_by: str = "created_at",
    order: str = Query("desc", pattern="^(asc|desc)$"),
    include_expired: bool = False,
    limit: int = Query(10, ge=1, le=100),
    offset: int = Query(0, ge=0),
    user_data: Dict = Depends(require_permission("polls:read")),
    service: PollService = Depends(get_poll_service)
):
    return service.list_polls(
        user_data["id"], limit, offset, type, country, category, order_by, order, include_expired
    )


@router.get("/search", response_model=List[PollResponse])
async def search_polls(
    q: str = Query(..., min_length=1),
    type: Optional[str] = Query(None, pattern="^(global|country)$"),
    country: Optional[str] = None,
    category: Optional[str] = None,
    limit: int = Query(10, ge=1, le=100),
    offset: int = Query(0, ge=0),
    user_data: Dict = Depends(require_permission("polls:read")),
    service: PollService = Depends(get_poll_service)
):
    return service.search_polls(q, user_data["id"], limit, offset, type, country, category)


@router.get("/stats", response_model=PollStatsResponse)
async def get_poll_stats(
    user_data: Dict = Depends(require_permission("polls:manage")),
    service: PollService = Depends(get_poll_service)
):
    return service.get_poll_stats()


@router.get("/me/history", response_model=PollHistoryResponse)
async def get_my_poll_history(
    include_created: bool = True,
    include_voted: bool = True,
    limit: int = Query(10, ge=1, le=100),
    offset: int = Query(0, ge=0),
    user_data: Dict = Depends(require_permission("polls:read")),
    service: PollService = Depends(get_poll_service)
):
    return service.get_user_history(user_data["id"], limit, offset, include_created, include_voted)


@router.get("/slug/{slug}", response_model=PollResponse)
async def get_poll_by_slug(
    slug: str,
    user_data: Dict = Depends(require_permission("polls:read")),
    service: PollService = Depends(get_poll_service)
):
    return service.get_poll_by_slug(slug, user_data["id"])


@router.post("", response_model=PollResponse, status_code=201)
async def create_poll(
    poll_data: PollCreate,
    user_data: Dict = Depends(require_permission("polls:create")),
    service: PollService = Depends(get_poll_service)
):
    return service.create_poll(user_data["id"], poll_data)


@router.get("/{poll_id}", response_model=PollResponse)
async def get_poll(
    poll_id: str,
    user_data: Dict = Depends(require_permission("polls:read")),
    service: PollService = Depends(get_poll_service)
):
    return service.get_poll(poll_id, user_data["id"])


@router.put("/{poll_id}", response_model=PollResponse)
async def update_poll(
    poll_id: str,
    poll_data: PollUpdate,
    user_data: Dict = Depends(require_permission("polls:update")),
    service: PollService = Depends(get_poll_service)
):
    return service.update_poll(user_data["id"], poll_id, poll_data, is_admin(user_data))


@router.post("/{poll_id}/vote", response_model=VoteResult)
async def vote(
    poll_id: str,
    vote_data: VoteRequest,
    user_data: Dict = Depends(require_permission("polls:vote")),
    service: PollService = Depends(get_poll_service)
):
    return service.vote(user_data["id"], poll_id, vote_data.vote_option)


@router.post("/{poll_id}/archive")
async def archive_poll(
    poll_id: str,
    user_data: Dict = Depends(require_permission("polls:archive")),
    service: PollService = Depends(get_poll_service)
):
    service.archive_poll(user_data["id"], poll_id, is_admin(user_data))
    return {"message": "Poll archived successfully"}


@router.post("/{poll_id}/restore")
async def restore_poll(
    poll_id: str,
    user_data: Dict = Depends(require_permission("polls:archive")),
    service: PollService = Depends(get_poll_service)
):
    service.restore_poll(user_data["id"], poll_id, is_admin(user_data))
    return {"message": "Poll restored successfully"}
