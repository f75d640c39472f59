from supabase import Client
from app.modules.referrals.schemas import (
    ReferralStats, ReferralHistoryEntry, ReferralCodeValidation, ReferredUser,
    ReferralLeaderboardEntry, ReferralBonusResult
)
from app.modules.profiles.service import ProfileService
from app.modules.ambassadors.service import AmbassadorService
from app.modules.app_settings.service import AppSettingsService
from app.modules.rewards.history import record_reward_history
from typing import List, Optional, Dict, Any
from fastapi import HTTPException
from datetime import datetime, timedelta
from collections import Counter
import logging

logger = logging.getLogger(__name__)

REFERRAL_REWARD_TYPES = ["referral_signup", "referral_bonus"]
LEADERBOARD_TIMEFRAMES = {"all": None, "month": 30, "week": 7}


class ReferralService:
    def __init__(self, supabase: Client):
        self.supabase = supabase

    def validate_referral_code(self, referral_code: str) -> Optional[Dict[str, Any]]:
        """Profile (id, name) owning the code, matched case-insensitively; None when unknown"""
        code = (referral_code or "").strip().upper()
        if not code:
            return None
        try:
            result = self.supabase.table("profiles")\
                .select("id, name")\
                .eq("referral_code", code)\
                .maybe_single()\
                .execute()
            if not result or not result.data:
                return None
            return result.data
        except Exception as e:
            logger.error(f"Error validating referral code: {e}")
            return None

    def check_referral_code(self, referral_code: str) -> ReferralCodeValidation:
        referrer = self.validate_referral_code(referral_code)
        if not referrer:
            return ReferralCodeValidation(valid=False)
        return ReferralCodeValidation(valid=True, referrer_id=referrer["id"], referrer_name=referrer.get("name"))

    def process_referral_bonus(self, referrer_id: str, referred_user_id: str) -> ReferralBonusResult:
        """
        Credit referralBonusPoints to both users and write a history row on each side.
        When the referrer is an active ambassador the referral also counts toward
        their commission: the bonus value in USD times their commission rate.
        """
        try:
            if referrer_id == referred_user_id:
                raise HTTPException(status_code=400, detail="Users cannot refer themselves")
            existing = self.supabase.table("daily_reward_history")\
                .select("id")\
                .eq("user_id", referred_user_id)\
                .eq("reward_type", "referral_signup")\
                .limit(1)\
                .execute()
            if existing.data:
                raise HTTPException(status_code=400, detail="Referral bonus already processed")

            settings_service = AppSettingsService(self.supabase)
            bonus = settings_service.get_points_settings().referralBonusPoints
            profiles = ProfileService(self.supabase)
            profiles.update_user_points(referrer_id, bonus)
            profiles.update_user_points(referred_user_id, bonus)

            record_reward_history(self.supabase, referrer_id, "referral_bonus", bonus, {
                "referred_user_id": referred_user_id,
            })
            record_reward_history(self.supabase, referred_user_id, "referral_signup", bonus, {
                "referrer_id": referrer_id,
            })

            commission = 0.0
            ambassadors = AmbassadorService(self.supabase)
            ambassador = ambassadors.get_ambassador(referrer_id)
            if ambassador:
                points_per_usd = settings_service.get_promoted_poll_settings().points_to_usd_conversion or 100
                commission = round(bonus / points_per_usd * ambassador.commission_rate / 100, 2)
                ambassadors.record_referral(referrer_id, commission)

            logger.info(f"Referral bonus of {bonus} points: {referrer_id} -> {referred_user_id}")
            return ReferralBonusResult(
                referrer_id=referrer_id,
                referred_user_id=referred_user_id,
                points_awarded=bonus,
                commission=commission
            )
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def get_referral_stats(self, user_id: str) -> ReferralStats:
        try:
            profile = ProfileService(self.supabase).get_profile(user_id)
            referred = self.supabase.table("profiles")\
                .select("id, created_at")\
                .eq("referred_by", user_id)\
                .execute()
            referred_rows = referred.data or []
            cutoff = (datetime.utcnow() - timedelta(days=30)).isoformat()
            recent = [r for r in referred_rows if (r.get("created_at") or "") >= cutoff]

            earned = self.supabase.table("daily_reward_history")\
                .select("points_earned")\
                .eq("user_id", user_id)\
                .eq("reward_type", "referral_bonus")\
                .execute()
            return ReferralStats(
                referral_code=profile.referral_code,
                total_referrals=len(referred_rows),
                total_earned_from_referrals=sum(r.get("points_earned") or 0 for r in (earned.data or [])),
                recent_referrals=len(recent),
            )
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def get_referral_history(self, user_id: str, limit: int = 50, offset: int = 0) -> List[ReferralHistoryEntry]:
        try:
            result = self.supabase.table("daily_reward_history")\
                .select("*")\
                .eq("user_id", user_id)\
                .in_("reward_type", REFERRAL_REWARD_TYPES)\
                .order("created_at", desc=True)\
                .range(offset, offset + limit - 1)\
                .execute()
            return [ReferralHistoryEntry(**r) for r in (result.data or [])]
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def get_referred_users(self, user_id: str, limit: int = 50, offset: int = 0) -> List[ReferredUser]:
        try:
            result = self.supabase.table("profiles")\
                .select("id, name, email, points, created_at")\
                .eq("referred_by", user_id)\
                .order("created_at", desc=True)\
                .range(offset, offset + limit - 1)\
                .execute()
            return [ReferredUser(**r) for r in (result.data or [])]
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def get_referral_leaderboard(self, limit: int = 50, timeframe: str = "all") -> List[ReferralLeaderboardEntry]:
        """Referrers ranked by referral count, then by bonus points earned"""
        try:
            if timeframe not in LEADERBOARD_TIMEFRAMES:
                raise HTTPException(status_code=400, detail="timeframe must be all, month or week")
            query = self.supabase.table("profiles")\
                .select("referred_by, created_at")\
                .not_.is_("referred_by", "null")
            days = LEADERBOARD_TIMEFRAMES[timeframe]
            if days:
                query = query.gte("created_at", (datetime.utcnow() - timedelta(days=days)).isoformat())
            referred = query.execute()
            counts = Counter(r["referred_by"] for r in (referred.data or []) if r.get("referred_by"))
            if not counts:
                return []

            referrer_ids = list(counts.keys())
            names = self.supabase.table("profiles")\
                .select("id, name")\
                .in_("id", referrer_ids)\
                .execute()
            name_by_id = {p["id"]: p.get("name") for p in (names.data or [])}

            bonuses = self.supabase.table("daily_reward_history")\
                .select("user_id, points_earned")\
                .eq("reward_type", "referral_bonus")\
                .in_("user_id", referrer_ids)\
                .execute()
            earned: Counter = Counter()
            for row in bonuses.data or []:
                earned[row["user_id"]] += row.get("points_earned") or 0

            entries = [
                ReferralLeaderboardEntry(
                    id=referrer_id,
                    name=name_by_id.get(referrer_id),
                    referral_count=count,
                    total_earned=earned[referrer_id],
                )
                for referrer_id, count in counts.items()
            ]
            entries.sort(key=lambda e: (e.referral_count, e.total_earned), reverse=True)
            return entries[:limit]
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))
