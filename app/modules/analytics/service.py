from supabase import Client
from app.modules.analytics.schemas import (
    PlatformStats, ActivityItem, CountryUsers, DailyCount, CategoryCount,
    PollAnalytics, DifficultyCount, DifficultyScore, TriviaAnalytics
)
from app.modules.polls.service import PollService
from app.config.rewards_config import DIFFICULTY_ORDER
from app.core.clock import utc_now, parse_timestamp
from app.core.scoring import round_half_up
from typing import List, Optional, Dict, Any
from fastapi import HTTPException
from datetime import datetime, timedelta
import logging
import re

logger = logging.getLogger(__name__)

ACTIVE_USER_DAYS = 7
RECENT_SIGNUP_DAYS = 30
MAX_GROWTH_DAYS = 30

TIME_UNITS = (
    ("year", 31536000),
    ("month", 2592000),
    ("day", 86400),
    ("hour", 3600),
    ("minute", 60),
)


def time_ago(when: datetime, now: Optional[datetime] = None) -> str:
    seconds = max(int(((now or utc_now()) - when).total_seconds()), 0)
    for unit, length in TIME_UNITS:
        if seconds >= length:
            count = seconds // length
            return f"{count} {unit}{'s' if count > 1 else ''} ago"
    return f"{seconds} second{'s' if seconds != 1 else ''} ago"


def format_action_type(action_type: str) -> str:
    """ban_user -> Ban user, banUser -> Ban User"""
    text = re.sub(r"([A-Z])", r" \1", action_type.replace("_", " ")).strip()
    return text[:1].upper() + text[1:]


class AnalyticsService:
    """Admin dashboard aggregates; every date filter applies to created_at"""

    def __init__(self, supabase: Client):
        self.supabase = supabase

    def _in_range(self, query, start_date: Optional[datetime], end_date: Optional[datetime]):
        if start_date:
            query = query.gte("created_at", start_date.isoformat())
        if end_date:
            query = query.lte("created_at", end_date.isoformat())
        return query

    def _count(self, table: str, start_date: Optional[datetime] = None, end_date: Optional[datetime] = None) -> int:
        query = self.supabase.table(table).select("id", count="exact")
        result = self._in_range(query, start_date, end_date).execute()
        return result.count or 0

    def get_platform_stats(
        self,
        start_date: Optional[datetime] = None,
        end_date: Optional[datetime] = None
    ) -> PlatformStats:
        """
        Platform overview.

        Poll and vote totals come from the poll stats; active users are the
        distinct users with reward history in the last week; recent signups
        default to the last 30 days when no start date is given.
        """
        try:
            now = utc_now()
            poll_stats = PollService(self.supabase).get_poll_stats()

            history = self.supabase.table("daily_reward_history")\
                .select("user_id")\
                .gte("created_at", (now - timedelta(days=ACTIVE_USER_DAYS)).isoformat())\
                .execute()
            active_users = {row["user_id"] for row in (history.data or []) if row.get("user_id")}

            points = self.supabase.table("profiles")\
                .select("points")\
                .execute()
            total_points = sum(row.get("points") or 0 for row in (points.data or []))

            signups_from = start_date or now - timedelta(days=RECENT_SIGNUP_DAYS)
            return PlatformStats(
                total_users=self._count("profiles"),
                active_users=len(active_users),
                total_polls=poll_stats.total_polls,
                active_polls=poll_stats.active_polls,
                total_votes=poll_stats.total_votes,
                total_points=total_points,
                recent_signups=self._count("profiles", signups_from, end_date),
            )
        except HTTPException:
            raise
        except Exception as e:
            logger.error(f"Error building platform stats: {e}")
            raise HTTPException(status_code=500, detail=str(e))

    def get_recent_activity(
        self,
        limit: int = 10,
        start_date: Optional[datetime] = None,
        end_date: Optional[datetime] = None
    ) -> List[ActivityItem]:
        """Newest signups, polls and moderator actions merged, newest first"""
        try:
            now = utc_now()
            sources = (
                ("profiles", "id, email, created_at"),
                ("polls", "id, title, created_at"),
                ("moderator_actions", "id, action_type, target_id, target_table, created_at"),
            )
            rows: Dict[str, List[Dict[str, Any]]] = {}
            for table, columns in sources:
                query = self.supabase.table(table).select(columns)
                rows[table] = self._in_range(query, start_date, end_date)\
                    .order("created_at", desc=True)\
                    .limit(limit)\
                    .execute().data or []

            items: List[ActivityItem] = []
            for row in rows["profiles"]:
                items.append(self._activity("user", f"New user registration: {row.get('email')}", row, now))
            for row in rows["polls"]:
                items.append(self._activity("poll", f'New poll created: "{row.get("title")}"', row, now))
            for row in rows["moderator_actions"]:
                target = str(row.get("target_id") or "")[:8]
                message = f"{format_action_type(row['action_type'])} on {row.get('target_table')} #{target}"
                items.append(self._activity("moderation", message, row, now))

            items.sort(key=lambda item: item.timestamp, reverse=True)
            return items[:limit]
        except HTTPException:
            raise
        except Exception as e:
            logger.error(f"Error fetching recent activity: {e}")
            raise HTTPException(status_code=500, detail=str(e))

    def _activity(self, kind: str, message: str, row: Dict[str, Any], now: datetime) -> ActivityItem:
        timestamp = parse_timestamp(row.get("created_at")) or now
        return ActivityItem(type=kind, message=message, time=time_ago(timestamp, now), timestamp=timestamp)

    def _country_counts(self) -> List[Dict[str, Any]]:
        try:
            result = self.supabase.rpc("get_user_counts_by_country").execute()
            if isinstance(result.data, list):
                return [
                    {"country": r["country"], "count": int(r["user_count"])}
                    for r in result.data if r.get("country")
                ]
        except Exception as e:
            logger.debug(f"get_user_counts_by_country unavailable, counting in place: {e}")

        profiles = self.supabase.table("profiles")\
            .select("country")\
            .not_.is_("country", "null")\
            .execute()
        counts: Dict[str, int] = {}
        for p in (profiles.data or []):
            counts[p["country"]] = counts.get(p["country"], 0) + 1
        return [{"country": c, "count": n} for c, n in counts.items()]

    def get_top_countries(
        self,
        limit: int = 5,
        start_date: Optional[datetime] = None,
        end_date: Optional[datetime] = None
    ) -> List[CountryUsers]:
        """Countries by user count; percentage is against users created in the date range"""
        try:
            ranked = sorted(self._country_counts(), key=lambda c: c["count"], reverse=True)[:limit]
            total_users = self._count("profiles", start_date, end_date)
            return [
                CountryUsers(
                    country=c["country"],
                    count=c["count"],
                    percentage=round(c["count"] / total_users * 100, 2) if total_users else 0,
                )
                for c in ranked
            ]
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def get_user_growth(
        self,
        days: int = 7,
        start_date: Optional[datetime] = None,
        end_date: Optional[datetime] = None
    ) -> List[DailyCount]:
        """
        Signups per UTC day.

        With both dates the series covers start..end (at most 30 days),
        otherwise the last `days` days ending today.
        """
        try:
            start_date, end_date = parse_timestamp(start_date), parse_timestamp(end_date)
            if start_date and end_date:
                if end_date < start_date:
                    raise HTTPException(status_code=400, detail="end_date must not be before start_date")
                first_day = start_date.date()
                span = min((end_date.date() - first_day).days + 1, MAX_GROWTH_DAYS)
            else:
                span = days
                first_day = utc_now().date() - timedelta(days=days - 1)
            day_keys = [(first_day + timedelta(days=offset)).isoformat() for offset in range(span)]

            window_start = datetime.combine(first_day, datetime.min.time())
            signups = self.supabase.table("profiles")\
                .select("created_at")\
                .gte("created_at", window_start.isoformat())\
                .lt("created_at", (window_start + timedelta(days=span)).isoformat())\
                .execute()
            per_day: Dict[str, int] = {}
            for row in (signups.data or []):
                created = parse_timestamp(row.get("created_at"))
                if created:
                    key = created.date().isoformat()
                    per_day[key] = per_day.get(key, 0) + 1
            return [DailyCount(date=day, count=per_day.get(day, 0)) for day in day_keys]
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def get_poll_analytics(
        self,
        start_date: Optional[datetime] = None,
        end_date: Optional[datetime] = None
    ) -> PollAnalytics:
        try:
            active = self._in_range(
                self.supabase.table("polls").select("id", count="exact").eq("is_active", True),
                start_date, end_date
            ).execute()

            categories = self._in_range(
                self.supabase.table("polls").select("category"), start_date, end_date
            ).execute().data or []
            category_counts: Dict[str, int] = {}
            for poll in categories:
                category = poll.get("category") or "Uncategorized"
                category_counts[category] = category_counts.get(category, 0) + 1
            by_category = sorted(category_counts.items(), key=lambda item: item[1], reverse=True)

            votes = self._in_range(
                self.supabase.table("poll_votes").select("created_at"), start_date, end_date
            ).execute().data or []
            per_day: Dict[str, int] = {}
            for vote in votes:
                created = parse_timestamp(vote.get("created_at"))
                if created:
                    key = created.date().isoformat()
                    per_day[key] = per_day.get(key, 0) + 1

            return PollAnalytics(
                total_polls=len(categories),
                active_polls=active.count or 0,
                polls_by_category=[CategoryCount(category=c, count=n) for c, n in by_category],
                votes_by_day=[DailyCount(date=d, count=per_day[d]) for d in sorted(per_day)],
            )
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def get_trivia_analytics(
        self,
        start_date: Optional[datetime] = None,
        end_date: Optional[datetime] = None
    ) -> TriviaAnalytics:
        """Game completions and rounded average score per difficulty, from trivia_game history"""
        try:
            history = self._in_range(
                self.supabase.table("daily_reward_history")
                    .select("reward_data")
                    .eq("reward_type", "trivia_game"),
                start_date, end_date
            ).execute().data or []

            completions = {difficulty: 0 for difficulty in DIFFICULTY_ORDER}
            scores: Dict[str, List[int]] = {difficulty: [] for difficulty in DIFFICULTY_ORDER}
            for entry in history:
                data = entry.get("reward_data") or {}
                difficulty = data.get("difficulty")
                if difficulty not in DIFFICULTY_ORDER:
                    continue
                completions[difficulty] += 1
                if data.get("score") is not None:
                    scores[difficulty].append(data["score"])

            ordered = sorted(DIFFICULTY_ORDER, key=DIFFICULTY_ORDER.get)
            return TriviaAnalytics(
                total_games=self._count("trivia_games", start_date, end_date),
                total_questions=self._count("trivia_questions", start_date, end_date),
                completions_by_difficulty=[
                    DifficultyCount(difficulty=d, count=completions[d]) for d in ordered
                ],
                average_scores=[
                    DifficultyScore(
                        difficulty=d,
                        score=round_half_up(sum(scores[d]) / len(scores[d])) if scores[d] else 0,
                    )
                    for d in ordered
                ],
            )
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))
