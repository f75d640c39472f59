from supabase import Client
from app.modules.badges.schemas import (
    BadgeCreate, BadgeUpdate, BadgeResponse, BadgeProgress, BadgeStat, BadgeStatsResponse
)
from app.modules.profiles.service import ProfileService
from app.modules.profiles.schemas import ProfileResponse
from app.config.rewards_config import JACKPOT_POINTS
from typing import List, Dict, Any, Tuple
from fastapi import HTTPException
import logging

logger = logging.getLogger(__name__)


def badge_progress(stat: int, criteria: Dict[str, Any]) -> Tuple[int, int]:
    """(progress, max) for a badge; progress is capped at the target count"""
    target = int(criteria.get("count") or 1)
    return min(stat, target), target


def _is_jackpot(row: Dict[str, Any]) -> bool:
    data = row.get("reward_data") or {}
    return data.get("result") == "jackpot" or data.get("base_points") == JACKPOT_POINTS


def _is_perfect_hard_game(row: Dict[str, Any]) -> bool:
    data = row.get("reward_data") or {}
    return data.get("score") == 100 and data.get("difficulty") == "hard"


class BadgeService:
    def __init__(self, supabase: Client):
        self.supabase = supabase

    def list_badges(self, include_inactive: bool = False) -> List[BadgeResponse]:
        try:
            query = self.supabase.table("badges").select("*")
            if not include_inactive:
                query = query.eq("is_active", True)
            result = query.order("name").execute()
            return [BadgeResponse(**b) for b in (result.data or [])]
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def get_badge(self, badge_id: str) -> BadgeResponse:
        try:
            result = self.supabase.table("badges")\
                .select("*")\
                .eq("id", badge_id)\
                .maybe_single()\
                .execute()
            if not result or not result.data:
                raise HTTPException(status_code=404, detail="Badge not found")
            return BadgeResponse(**result.data)
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def create_badge(self, badge_data: BadgeCreate) -> BadgeResponse:
        try:
            existing = self.supabase.table("badges")\
                .select("id")\
                .eq("name", badge_data.name)\
                .execute()
            if existing.data:
                raise HTTPException(status_code=400, detail="A badge with this name already exists")
            result = self.supabase.table("badges")\
                .insert(badge_data.model_dump(exclude_none=True))\
                .execute()
            if not result.data:
                raise HTTPException(status_code=500, detail="Failed to create badge")
            return BadgeResponse(**result.data[0])
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def update_badge(self, badge_id: str, badge_data: BadgeUpdate) -> BadgeResponse:
        try:
            update_data = badge_data.model_dump(exclude_unset=True, exclude_none=True)
            if not update_data:
                raise HTTPException(status_code=400, detail="No fields to update")
            result = self.supabase.table("badges")\
                .update(update_data)\
                .eq("id", badge_id)\
                .execute()
            if not result.data:
                raise HTTPException(status_code=404, detail="Badge not found")
            return BadgeResponse(**result.data[0])
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def _count(self, table: str, column: str, value: str) -> int:
        result = self.supabase.table(table)\
            .select("id", count="exact")\
            .eq(column, value)\
            .execute()
        return result.count if result.count is not None else len(result.data or [])

    def _history(self, user_id: str, reward_types: List[str]) -> List[Dict[str, Any]]:
        result = self.supabase.table("daily_reward_history")\
            .select("points_earned, reward_type, reward_data")\
            .eq("user_id", user_id)\
            .in_("reward_type", reward_types)\
            .execute()
        return result.data or []

    def get_user_stat(self, user_id: str, criteria: Dict[str, Any], profile: ProfileResponse) -> int:
        """Current value of the statistic a badge criteria counts"""
        criteria_type = criteria.get("type")
        if criteria_type == "poll_votes":
            return self._count("poll_votes", "user_id", user_id)
        if criteria_type == "polls_created":
            return self._count("polls", "created_by", user_id)
        if criteria_type == "trivia_completed":
            return len(self._history(user_id, ["trivia", "trivia_game"]))
        if criteria_type == "trivia_perfect":
            return len([r for r in self._history(user_id, ["trivia_game"]) if _is_perfect_hard_game(r)])
        if criteria_type == "total_points":
            return profile.points
        if criteria_type == "login_streak":
            result = self.supabase.table("user_daily_rewards")\
                .select("trivia_streak")\
                .eq("user_id", user_id)\
                .maybe_single()\
                .execute()
            if not result or not result.data:
                return 0
            return result.data.get("trivia_streak") or 0
        if criteria_type == "spin_wins":
            return len([r for r in self._history(user_id, ["spin"]) if (r.get("points_earned") or 0) > 0])
        if criteria_type == "spin_jackpot":
            return len([r for r in self._history(user_id, ["spin"]) if _is_jackpot(r)])
        if criteria_type == "ads_watched":
            return len(self._history(user_id, ["watch"]))
        if criteria_type == "referrals":
            return self._count("profiles", "referred_by", user_id)
        if criteria_type == "early_adopter":
            before = criteria.get("before")
            if not before or not profile.created_at:
                return 0
            return 1 if profile.created_at.date().isoformat() < before else 0
        logger.warning(f"Unknown badge criteria type: {criteria_type}")
        return 0

    def get_badge_progress(self, user_id: str) -> List[BadgeProgress]:
        try:
            profile = ProfileService(self.supabase).get_profile(user_id)
            progress = []
            stat_cache: Dict[str, int] = {}
            for badge in self.list_badges():
                criteria = badge.criteria.model_dump()
                # early_adopter depends on "before", every other type only on the user
                key = f"{criteria['type']}:{criteria.get('before')}"
                if key not in stat_cache:
                    stat_cache[key] = self.get_user_stat(user_id, criteria, profile)
                current, target = badge_progress(stat_cache[key], criteria)
                progress.append(BadgeProgress(
                    badge=badge,
                    progress=current,
                    max=target,
                    earned=badge.name in profile.badges
                ))
            return progress
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def check_and_award_badges(self, user_id: str) -> List[str]:
        """Award every active badge whose progress reached its target; returns the newly awarded names"""
        try:
            awarded = []
            for item in self.get_badge_progress(user_id):
                if not item.earned and item.progress >= item.max:
                    awarded.append(item.badge.name)
            if awarded:
                profile = ProfileService(self.supabase).get_profile(user_id)
                badges = profile.badges + [name for name in awarded if name not in profile.badges]
                self.supabase.table("profiles")\
                    .update({"badges": badges})\
                    .eq("id", user_id)\
                    .execute()
                logger.info(f"Awarded badges {awarded} to {user_id}")
            return awarded
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def get_badge_stats(self) -> BadgeStatsResponse:
        try:
            badges = self.list_badges(include_inactive=True)
            holders = self.supabase.table("profiles")\
                .select("badges")\
                .execute()
            counts: Dict[str, int] = {}
            for row in holders.data or []:
                for name in row.get("badges") or []:
                    counts[name] = counts.get(name, 0) + 1
            stats = [BadgeStat(badge_id=b.id, name=b.name, holders=counts.get(b.name, 0)) for b in badges]
            stats.sort(key=lambda s: s.holders, reverse=True)
            return BadgeStatsResponse(
                total_badges=len(badges),
                active_badges=len([b for b in badges if b.is_active]),
                total_awarded=sum(s.holders for s in stats),
                badges=stats,
            )
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))
