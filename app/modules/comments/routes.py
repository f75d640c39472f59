from fastapi import APIRouter, Depends, Query
from app.database.supabase_client import get_supabase
from app.modules.comments.schemas import CommentCreate, CommentUpdate, CommentResponse
from app.modules.comments.service import CommentService
from app.core.dependencies import require_permission, is_moderator
from supabase import Client
from typing import List, Dict

router = APIRouter(prefix="/comments", tags=["comments"])


def get_comment_service(supabase: Client = Depends(get_supabase)) -> CommentService:
    return CommentService(supabase)


@router.get("/poll/{poll_id}", response_model=List[CommentResponse])
async def list_poll_comments(
    poll_id: str,
    limit: int = Query(50, ge=1, le=200),
    offset: int = Query(0, ge=0),
    user_data: Dict = Depends(require_permission("comments:read")),
    service: CommentService = Depends(get_comment_service)
):
    return service.list_comments(poll_id, limit, offset)


@router.post("", response_model=CommentResponse, status_code=201)
async def create_comment(
    comment_data: CommentCreate,
    user_data: Dict = Depends(require_permission("comments:create")),
    service: CommentService = Depends(get_comment_service)
):
    return service.create_comment(user_data["id"], comment_data)


@router.put("/{comment_id}", response_model=CommentResponse)
async def update_comment(
    comment_id: str,
    comment_data: CommentUpdate,
    user_data: Dict = Depends(require_permission("comments:update")),
    service: CommentService = Depends(get_comment_service)
):
    return service.update_comment(user_data["id"], comment_id, comment_data.comment_text, is_moderator(user_data))


@router.delete("/{comment_id}")
async def delete_comment(
    comment_id: str,
    user_data: Dict = Depends(require_permission("comments:delete")),
    service: CommentService = Depends(get_comment_service)
):
    service.delete_comment(user_data["id"], comment_id, is_moderator(user_data))
    return {"message": "Comment deleted successfully"}
