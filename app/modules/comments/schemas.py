from pydantic import BaseModel, Field
from typing import Optional, List
from datetime import datetime


class CommentCreate(BaseModel):
    poll_id: str
    comment_text: str = Field(..., min_length=1, max_length=2000)
    parent_comment_id: Optional[str] = None


class CommentUpdate(BaseModel):
    comment_text: str = Field(..., min_length=1, max_length=2000)


class CommentAuthor(BaseModel):
    name: Optional[str] = None
    avatar_url: Optional[str] = None


class CommentResponse(BaseModel):
    id: str
    poll_id: str
    user_id: str
    parent_comment_id: Optional[str] = None
    comment_text: str
    is_active: bool = True
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    user: Optional[CommentAuthor] = None
    replies: List["CommentResponse"] = []

    class Config:
        from_attributes = True
