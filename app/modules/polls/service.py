from supabase import Client
from app.database.supabase_client import clean_filter_term
from postgrest.exceptions import APIError
from app.modules.polls.schemas import (
    PollCategoryCreate, PollCategoryUpdate, PollCategoryResponse,
    PollCreate, PollUpdate, PollResponse, VoteResult, PollHistoryResponse,
    PollStatsResponse, CategoryCount
)
from app.modules.profiles.service import ProfileService
from app.modules.app_settings.service import AppSettingsService
from app.modules.badges.service import BadgeService
from app.modules.promoted_polls.service import PromotedPollService
from app.modules.rewards.history import record_reward_history
from app.core.clock import utc_now, parse_timestamp
from typing import List, Optional, Dict, Any
from fastapi import HTTPException
from datetime import datetime
import logging
import re

logger = logging.getLogger(__name__)

POLL_ORDER_FIELDS = ("created_at", "total_votes", "active_until")
SLUG_MAX_LENGTH = 50
UNIQUE_VIOLATION = "23505"


def slugify(title: str) -> str:
    slug = re.sub(r"[^a-z0-9\s]", "", title.lower())
    slug = re.sub(r"\s+", "-", slug)
    return slug[:SLUG_MAX_LENGTH]


def _plural(count: int, unit: str) -> str:
    return f"{count} {unit}{'s' if count > 1 else ''}"


def poll_time_left(start_date: Any, active_until: Any, now: Optional[datetime] = None) -> str:
    """Human readable time until a poll opens or closes"""
    now = now or utc_now()
    start = parse_timestamp(start_date)
    if start and now < start:
        diff = start - now
        hours = diff.seconds // 3600
        if diff.days > 0:
            return f"Starts in {_plural(diff.days, 'day')}"
        if hours > 0:
            return f"Starts in {_plural(hours, 'hour')}"
        return "Starting soon"

    end = parse_timestamp(active_until)
    if end is None:
        return "No expiration"
    if end <= now:
        return "Expired"
    diff = end - now
    hours = diff.seconds // 3600
    if diff.days > 0:
        return f"{_plural(diff.days, 'day')} left"
    if hours > 0:
        return f"{_plural(hours, 'hour')} left"
    return "Less than 1 hour left"


class PollService:
    def __init__(self, supabase: Client):
        self.supabase = supabase
        self.app_settings = AppSettingsService(supabase)

    # Categories

    def list_categories(self) -> List[PollCategoryResponse]:
        """Active poll categories; distinct poll.category values when the table can't be read"""
        try:
            result = self.supabase.table("poll_categories")\
                .select("*")\
                .eq("is_active", True)\
                .order("name")\
                .execute()
            return [PollCategoryResponse(**c) for c in (result.data or [])]
        except Exception as e:
            logger.warning(f"Error fetching poll_categories, falling back to poll categories: {e}")
            return self._distinct_poll_categories()

    def _distinct_poll_categories(self) -> List[PollCategoryResponse]:
        try:
            result = self.supabase.table("polls")\
                .select("category")\
                .not_.is_("category", "null")\
                .execute()
            names = sorted({r["category"] for r in (result.data or []) if r.get("category")})
            if "General" not in names:
                names.insert(0, "General")
            return [
                PollCategoryResponse(id=re.sub(r"\s+", "-", name.lower()), name=name)
                for name in names
            ]
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def create_category(self, data: PollCategoryCreate) -> PollCategoryResponse:
        try:
            existing = self.supabase.table("poll_categories")\
                .select("id")\
                .eq("name", data.name)\
                .execute()
            if existing.data:
                raise HTTPException(status_code=400, detail="Category with this name already exists")
            result = self.supabase.table("poll_categories").insert({
                "name": data.name,
                "description": data.description,
                "is_active": True,
            }).execute()
            if not result.data:
                raise HTTPException(status_code=500, detail="Failed to create category")
            return PollCategoryResponse(**result.data[0])
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def update_category(self, category_id: str, data: PollCategoryUpdate) -> PollCategoryResponse:
        try:
            update_data = data.model_dump(exclude_unset=True)
            if not update_data:
                raise HTTPException(status_code=400, detail="No fields to update")
            update_data["updated_at"] = datetime.utcnow().isoformat()
            result = self.supabase.table("poll_categories")\
                .update(update_data)\
                .eq("id", category_id)\
                .execute()
            if not result.data:
                raise HTTPException(status_code=404, detail="Category not found")
            return PollCategoryResponse(**result.data[0])
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    # Polls

    def _user_votes(self, user_id: Optional[str], poll_ids: List[str]) -> Dict[str, int]:
        if not user_id or not poll_ids:
            return {}
        result = self.supabase.table("poll_votes")\
            .select("poll_id, vote_option")\
            .eq("user_id", user_id)\
            .in_("poll_id", poll_ids)\
            .execute()
        return {v["poll_id"]: v["vote_option"] for v in (result.data or [])}

    def _to_response(self, row: Dict[str, Any], user_vote: Optional[int] = None, reward: Optional[int] = None) -> PollResponse:
        return PollResponse(
            **{**row, "category": row.get("category") or "General"},
            has_voted=user_vote is not None,
            user_vote=user_vote,
            time_left=poll_time_left(row.get("start_date"), row.get("active_until")),
            reward=reward if reward is not None else self.app_settings.get_points_settings().pollVotePoints,
        )

    def _annotate(self, rows: List[Dict[str, Any]], user_id: Optional[str]) -> List[PollResponse]:
        votes = self._user_votes(user_id, [r["id"] for r in rows])
        reward = self.app_settings.get_points_settings().pollVotePoints
        return [self._to_response(r, votes.get(r["id"]), reward) for r in rows]

    def list_polls(
        self,
        user_id: Optional[str] = None,
        limit: int = 10,
        offset: int = 0,
        poll_type: Optional[str] = None,
        country: Optional[str] = None,
        category: Optional[str] = None,
        order_by: str = "created_at",
        order: str = "desc",
        include_expired: bool = False
    ) -> List[PollResponse]:
        try:
            if order_by not in POLL_ORDER_FIELDS:
                raise HTTPException(status_code=400, detail=f"order_by must be one of {', '.join(POLL_ORDER_FIELDS)}")
            query = self.supabase.table("polls")\
                .select("*")\
                .eq("is_active", True)
            if poll_type:
                query = query.eq("type", poll_type)
            if country:
                query = query.eq("country", country.upper())
            if category and category != "all":
                query = query.eq("category", category)
            if not include_expired:
                now = utc_now().isoformat()
                query = query.or_(f"start_date.is.null,start_date.lte.{now}")\
                    .or_(f"active_until.is.null,active_until.gt.{now}")
            result = query.order(order_by, desc=(order != "asc"))\
                .range(offset, offset + limit - 1)\
                .execute()
            return self._annotate(result.data or [], user_id)
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def search_polls(
        self,
        term: str,
        user_id: Optional[str] = None,
        limit: int = 10,
        offset: int = 0,
        poll_type: Optional[str] = None,
        country: Optional[str] = None,
        category: Optional[str] = None
    ) -> List[PollResponse]:
        """Match title or description, newest first"""
        try:
            term = clean_filter_term(term)
            if not term:
                return []
            query = self.supabase.table("polls")\
                .select("*")\
                .eq("is_active", True)\
                .or_(f"title.ilike.%{term}%,description.ilike.%{term}%")
            if poll_type:
                query = query.eq("type", poll_type)
            if country:
                query = query.eq("country", country.upper())
            if category and category != "all":
                query = query.eq("category", category)
            result = query.order("created_at", desc=True)\
                .range(offset, offset + limit - 1)\
                .execute()
            return self._annotate(result.data or [], user_id)
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def _get_poll_row(self, poll_id: str, active_only: bool = False) -> Dict[str, Any]:
        query = self.supabase.table("polls")\
            .select("*")\
            .eq("id", poll_id)
        if active_only:
            query = query.eq("is_active", True)
        result = query.maybe_single().execute()
        if not result or not result.data:
            detail = "Poll not found or inactive" if active_only else "Poll not found"
            raise HTTPException(status_code=404, detail=detail)
        return result.data

    def get_poll_by_slug(self, slug: str, user_id: Optional[str] = None) -> PollResponse:
        try:
            result = self.supabase.table("polls")\
                .select("*")\
                .eq("slug", slug)\
                .eq("is_active", True)\
                .maybe_single()\
                .execute()
            if not result or not result.data:
                raise HTTPException(status_code=404, detail="Poll not found")
            return self._annotate([result.data], user_id)[0]
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def get_poll(self, poll_id: str, user_id: Optional[str] = None) -> PollResponse:
        try:
            return self._annotate([self._get_poll_row(poll_id)], user_id)[0]
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def _unique_slug(self, title: str) -> str:
        base_slug = slugify(title) or "poll"
        slug = base_slug
        counter = 1
        while True:
            existing = self.supabase.table("polls")\
                .select("id")\
                .eq("slug", slug)\
                .limit(1)\
                .execute()
            if not existing.data:
                return slug
            slug = f"{base_slug}-{counter}"
            counter += 1

    def create_poll(self, user_id: str, poll_data: PollCreate) -> PollResponse:
        try:
            slug = self._unique_slug(poll_data.title)
            result = self.supabase.table("polls").insert({
                "title": poll_data.title,
                "description": poll_data.description,
                "options": [{"text": text.strip(), "votes": 0} for text in poll_data.options],
                "type": poll_data.type,
                "country": poll_data.country.upper() if poll_data.type == "country" else None,
                "category": poll_data.category or "General",
                "start_date": poll_data.start_date.isoformat() if poll_data.start_date else None,
                "active_until": poll_data.active_until.isoformat() if poll_data.active_until else None,
                "slug": slug,
                "created_by": user_id,
                "is_active": True,
                "total_votes": 0,
            }).execute()
            if not result.data:
                raise HTTPException(status_code=500, detail="Failed to create poll")
            logger.info(f"Poll {slug} created by {user_id}")
            return self._to_response(result.data[0])
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def vote(self, user_id: str, poll_id: str, vote_option: int) -> VoteResult:
        """
        Cast a single vote on an open poll.

        The voter earns pollVotePoints; if the poll is being promoted the vote
        also counts toward the promotion target.
        """
        try:
            poll = self._get_poll_row(poll_id, active_only=True)
            now = utc_now()
            active_until = parse_timestamp(poll.get("active_until"))
            if active_until and active_until < now:
                raise HTTPException(status_code=400, detail="Poll has expired")
            start_date = parse_timestamp(poll.get("start_date"))
            if start_date and start_date > now:
                raise HTTPException(status_code=400, detail="Poll has not started yet")

            options = [dict(o) for o in (poll.get("options") or [])]
            if vote_option < 0 or vote_option >= len(options):
                raise HTTPException(status_code=400, detail="Invalid vote option")

            existing = self.supabase.table("poll_votes")\
                .select("id")\
                .eq("user_id", user_id)\
                .eq("poll_id", poll_id)\
                .maybe_single()\
                .execute()
            if existing and existing.data:
                raise HTTPException(status_code=400, detail="You have already voted on this poll")

            try:
                self.supabase.table("poll_votes").insert({
                    "user_id": user_id,
                    "poll_id": poll_id,
                    "vote_option": vote_option,
                }).execute()
            except APIError as e:
                if e.code == UNIQUE_VIOLATION:
                    raise HTTPException(status_code=400, detail="You have already voted on this poll")
                raise

            options[vote_option]["votes"] = (options[vote_option].get("votes") or 0) + 1
            updated = self.supabase.table("polls")\
                .update({
                    "options": options,
                    "total_votes": (poll.get("total_votes") or 0) + 1,
                    "updated_at": datetime.utcnow().isoformat(),
                })\
                .eq("id", poll_id)\
                .execute()
            poll_row = updated.data[0] if updated.data else {**poll, "options": options}

            points_earned = self.app_settings.get_points_settings().pollVotePoints
            total_points = ProfileService(self.supabase).update_user_points(user_id, points_earned)
            record_reward_history(self.supabase, user_id, "poll_vote", points_earned, {
                "poll_id": poll_id,
                "vote_option": vote_option,
            })
            logger.info(f"Vote on poll {poll_id} option {vote_option} by {user_id}")

            try:
                PromotedPollService(self.supabase).record_poll_vote(poll_id)
            except HTTPException as e:
                logger.error(f"Promoted vote tracking failed for poll {poll_id}: {e.detail}")

            try:
                new_badges = BadgeService(self.supabase).check_and_award_badges(user_id)
            except HTTPException as e:
                logger.error(f"Badge check failed for {user_id}: {e.detail}")
                new_badges = []

            return VoteResult(
                message=f"Vote recorded successfully! You earned {points_earned} points.",
                points_earned=points_earned,
                total_points=total_points,
                poll=self._to_response(poll_row, vote_option, points_earned),
                new_badges=new_badges,
            )
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def update_poll(self, user_id: str, poll_id: str, poll_data: PollUpdate, is_admin: bool = False) -> PollResponse:
        """Creator or admin edit; existing option vote counts follow their text (case-insensitive)"""
        try:
            poll = self._get_poll_row(poll_id)
            if poll.get("created_by") != user_id and not is_admin:
                raise HTTPException(status_code=403, detail="You are not authorized to update this poll")

            update_data = poll_data.model_dump(exclude_unset=True)
            if not update_data:
                raise HTTPException(status_code=400, detail="No fields to update")
            if "options" in update_data:
                current_votes = {
                    (o.get("text") or "").lower(): o.get("votes") or 0
                    for o in (poll.get("options") or [])
                }
                update_data["options"] = [
                    {"text": text, "votes": current_votes.get(text.lower(), 0)}
                    for text in update_data["options"]
                ]
                update_data["total_votes"] = sum(o["votes"] for o in update_data["options"])
            for field in ("start_date", "active_until"):
                if isinstance(update_data.get(field), datetime):
                    update_data[field] = update_data[field].isoformat()
            update_data["updated_at"] = datetime.utcnow().isoformat()

            result = self.supabase.table("polls")\
                .update(update_data)\
                .eq("id", poll_id)\
                .execute()
            if not result.data:
                raise HTTPException(status_code=404, detail="Poll not found")
            return self._to_response(result.data[0])
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def _check_owner(self, user_id: str, poll_id: str, is_admin: bool) -> None:
        poll = self._get_poll_row(poll_id)
        if poll.get("created_by") != user_id and not is_admin:
            raise HTTPException(status_code=403, detail="You are not authorized to modify this poll")

    def archive_poll(self, user_id: str, poll_id: str, is_admin: bool = False) -> bool:
        try:
            self._check_owner(user_id, poll_id, is_admin)
            self.supabase.rpc("archive_poll", {"p_poll_id": poll_id, "p_user_id": user_id}).execute()
            logger.info(f"Poll {poll_id} archived by {user_id}")
            return True
        except HTTPException:
            raise
        except Exception as e:
            logger.error(f"Error archiving poll {poll_id}: {e}")
            raise HTTPException(status_code=500, detail=str(e))

    def restore_poll(self, user_id: str, poll_id: str, is_admin: bool = False) -> bool:
        try:
            self._check_owner(user_id, poll_id, is_admin)
            self.supabase.rpc("restore_poll", {"p_poll_id": poll_id, "p_user_id": user_id}).execute()
            logger.info(f"Poll {poll_id} restored by {user_id}")
            return True
        except HTTPException:
            raise
        except Exception as e:
            logger.error(f"Error restoring poll {poll_id}: {e}")
            raise HTTPException(status_code=500, detail=str(e))

    def get_user_history(
        self,
        user_id: str,
        limit: int = 10,
        offset: int = 0,
        include_created: bool = True,
        include_voted: bool = True
    ) -> PollHistoryResponse:
        try:
            history = PollHistoryResponse()
            if include_created:
                created = self.supabase.table("polls")\
                    .select("*")\
                    .eq("created_by", user_id)\
                    .order("created_at", desc=True)\
                    .range(offset, offset + limit - 1)\
                    .execute()
                history.created_polls = self._annotate(created.data or [], user_id)
            if include_voted:
                votes = self.supabase.table("poll_votes")\
                    .select("poll_id, vote_option, created_at")\
                    .eq("user_id", user_id)\
                    .order("created_at", desc=True)\
                    .range(offset, offset + limit - 1)\
                    .execute()
                poll_ids = [v["poll_id"] for v in (votes.data or [])]
                if poll_ids:
                    polls = self.supabase.table("polls")\
                        .select("*")\
                        .in_("id", poll_ids)\
                        .execute()
                    by_id = {p["id"]: p for p in (polls.data or [])}
                    rows = [by_id[pid] for pid in poll_ids if pid in by_id]
                    history.voted_polls = self._annotate(rows, user_id)
            return history
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def _top_categories(self, limit: int = 5) -> List[CategoryCount]:
        try:
            result = self.supabase.rpc("get_category_counts").execute()
            if isinstance(result.data, list) and result.data:
                counts = [CategoryCount(category=r["category"], count=int(r["count"])) for r in result.data]
                return sorted(counts, key=lambda c: c.count, reverse=True)[:limit]
        except Exception as e:
            logger.debug(f"get_category_counts unavailable, counting in place: {e}")

        polls = self.supabase.table("polls")\
            .select("category")\
            .eq("is_active", True)\
            .execute()
        counts: Dict[str, int] = {}
        for p in (polls.data or []):
            category = p.get("category") or "General"
            counts[category] = counts.get(category, 0) + 1
        ranked = sorted(counts.items(), key=lambda item: item[1], reverse=True)[:limit]
        return [CategoryCount(category=c, count=n) for c, n in ranked]

    def get_poll_stats(self) -> PollStatsResponse:
        try:
            total = self.supabase.table("polls")\
                .select("id", count="exact")\
                .execute()
            now = utc_now().isoformat()
            active = self.supabase.table("polls")\
                .select("id", count="exact")\
                .eq("is_active", True)\
                .or_(f"start_date.is.null,start_date.lte.{now}")\
                .or_(f"active_until.is.null,active_until.gt.{now}")\
                .execute()
            votes = self.supabase.table("poll_votes")\
                .select("id", count="exact")\
                .execute()
            return PollStatsResponse(
                total_polls=total.count or 0,
                active_polls=active.count or 0,
                total_votes=votes.count or 0,
                top_categories=self._top_categories(),
            )
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))
