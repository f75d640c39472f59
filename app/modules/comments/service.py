from supabase import Client
from app.modules.comments.schemas import CommentCreate, CommentResponse, CommentAuthor
from typing import List, Dict, Any
from fastapi import HTTPException
from datetime import datetime
import logging

logger = logging.getLogger(__name__)


class CommentService:
    def __init__(self, supabase: Client):
        self.supabase = supabase

    def _authors(self, user_ids: List[str]) -> Dict[str, CommentAuthor]:
        if not user_ids:
            return {}
        result = self.supabase.table("profiles")\
            .select("id, name, avatar_url")\
            .in_("id", list(set(user_ids)))\
            .execute()
        return {
            p["id"]: CommentAuthor(name=p.get("name"), avatar_url=p.get("avatar_url"))
            for p in (result.data or [])
        }

    def _with_authors(self, rows: List[Dict[str, Any]]) -> List[CommentResponse]:
        authors = self._authors([r["user_id"] for r in rows])
        return [CommentResponse(**r, user=authors.get(r["user_id"])) for r in rows]

    def _get_comment_row(self, comment_id: str) -> Dict[str, Any]:
        result = self.supabase.table("poll_comments")\
            .select("*")\
            .eq("id", comment_id)\
            .maybe_single()\
            .execute()
        if not result or not result.data:
            raise HTTPException(status_code=404, detail="Comment not found")
        return result.data

    def list_comments(self, poll_id: str, limit: int = 50, offset: int = 0) -> List[CommentResponse]:
        """Newest top-level comments, each with its active replies oldest first"""
        try:
            top_level = self.supabase.table("poll_comments")\
                .select("*")\
                .eq("poll_id", poll_id)\
                .is_("parent_comment_id", "null")\
                .eq("is_active", True)\
                .order("created_at", desc=True)\
                .range(offset, offset + limit - 1)\
                .execute()
            comments = self._with_authors(top_level.data or [])
            if not comments:
                return []

            replies = self.supabase.table("poll_comments")\
                .select("*")\
                .in_("parent_comment_id", [c.id for c in comments])\
                .eq("is_active", True)\
                .order("created_at")\
                .execute()
            by_parent: Dict[str, List[CommentResponse]] = {}
            for reply in self._with_authors(replies.data or []):
                by_parent.setdefault(reply.parent_comment_id, []).append(reply)
            for comment in comments:
                comment.replies = by_parent.get(comment.id, [])
            return comments
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def create_comment(self, user_id: str, data: CommentCreate) -> CommentResponse:
        try:
            poll = self.supabase.table("polls")\
                .select("id")\
                .eq("id", data.poll_id)\
                .maybe_single()\
                .execute()
            if not poll or not poll.data:
                raise HTTPException(status_code=404, detail="Poll not found")
            if data.parent_comment_id:
                parent = self._get_comment_row(data.parent_comment_id)
                if parent["poll_id"] != data.poll_id:
                    raise HTTPException(status_code=400, detail="Parent comment belongs to a different poll")

            result = self.supabase.table("poll_comments").insert({
                "poll_id": data.poll_id,
                "user_id": user_id,
                "comment_text": data.comment_text,
                "parent_comment_id": data.parent_comment_id,
                "is_active": True,
            }).execute()
            if not result.data:
                raise HTTPException(status_code=500, detail="Failed to create comment")
            return self._with_authors(result.data[:1])[0]
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def _check_can_modify(self, comment: Dict[str, Any], user_id: str, is_moderator: bool, action: str) -> None:
        if comment["user_id"] != user_id and not is_moderator:
            raise HTTPException(status_code=403, detail=f"You are not authorized to {action} this comment")

    def update_comment(self, user_id: str, comment_id: str, comment_text: str, is_moderator: bool = False) -> CommentResponse:
        try:
            comment = self._get_comment_row(comment_id)
            self._check_can_modify(comment, user_id, is_moderator, "update")
            result = self.supabase.table("poll_comments")\
                .update({
                    "comment_text": comment_text,
                    "updated_at": datetime.utcnow().isoformat(),
                })\
                .eq("id", comment_id)\
                .execute()
            if not result.data:
                raise HTTPException(status_code=404, detail="Comment not found")
            return self._with_authors(result.data[:1])[0]
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def delete_comment(self, user_id: str, comment_id: str, is_moderator: bool = False) -> bool:
        """Soft delete: the row stays, is_active goes false"""
        try:
            comment = self._get_comment_row(comment_id)
            self._check_can_modify(comment, user_id, is_moderator, "delete")
            self.supabase.table("poll_comments")\
                .update({
                    "is_active": False,
                    "updated_at": datetime.utcnow().isoformat(),
                })\
                .eq("id", comment_id)\
                .execute()
            logger.info(f"Comment {comment_id} deleted by {user_id}")
            return True
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))
