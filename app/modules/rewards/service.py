from supabase import Client
from app.modules.rewards.schemas import (
    DailyRewardStatus, SpinResult, DailyTriviaQuestion, TriviaAnswerRequest,
    TriviaAnswerResult, AdWatchResult, RewardHistoryEntry
)
from app.modules.rewards.history import record_reward_history, REWARD_TYPES
from app.modules.profiles.service import ProfileService
from app.modules.app_settings.service import AppSettingsService
from app.modules.badges.service import BadgeService
from app.core.clock import utc_today
from app.core.scoring import (
    spin_outcome, spin_message, streak_multiplier, streak_bonus, trivia_answer_points
)
from typing import List, Optional, Dict, Any
from fastapi import HTTPException
from datetime import datetime
import logging
import random

logger = logging.getLogger(__name__)


class RewardService:
    def __init__(self, supabase: Client):
        self.supabase = supabase
        self.profiles = ProfileService(supabase)
        self.app_settings = AppSettingsService(supabase)

    def _get_or_create_daily_row(self, user_id: str) -> Dict[str, Any]:
        result = self.supabase.table("user_daily_rewards")\
            .select("*")\
            .eq("user_id", user_id)\
            .maybe_single()\
            .execute()
        if result and result.data:
            return result.data
        # first visit: the profile must exist before a rewards row can reference it
        self.profiles.get_profile(user_id)
        created = self.supabase.table("user_daily_rewards").insert({
            "user_id": user_id,
            "spin_streak": 0,
            "trivia_streak": 0,
            "total_spins": 0,
            "total_trivia_completed": 0,
            "total_ads_watched": 0,
        }).execute()
        if not created.data:
            raise HTTPException(status_code=500, detail="Failed to initialise daily rewards")
        logger.info(f"Created daily rewards row for {user_id}")
        return created.data[0]

    def _update_daily_row(self, user_id: str, values: Dict[str, Any]) -> None:
        values["updated_at"] = datetime.utcnow().isoformat()
        self.supabase.table("user_daily_rewards")\
            .update(values)\
            .eq("user_id", user_id)\
            .execute()

    def _check_badges(self, user_id: str) -> List[str]:
        try:
            return BadgeService(self.supabase).check_and_award_badges(user_id)
        except HTTPException as e:
            logger.error(f"Badge check failed for {user_id}: {e.detail}")
            return []

    @staticmethod
    def _status_from_row(row: Dict[str, Any]) -> DailyRewardStatus:
        today = utc_today()
        return DailyRewardStatus(
            can_spin=row.get("last_spin_date") != today,
            can_play_trivia=row.get("last_trivia_date") != today,
            can_watch_ad=row.get("last_watch_date") != today,
            last_spin_date=row.get("last_spin_date"),
            last_trivia_date=row.get("last_trivia_date"),
            last_watch_date=row.get("last_watch_date"),
            spin_streak=row.get("spin_streak") or 0,
            trivia_streak=row.get("trivia_streak") or 0,
            total_spins=row.get("total_spins") or 0,
            total_trivia_completed=row.get("total_trivia_completed") or 0,
            total_ads_watched=row.get("total_ads_watched") or 0,
        )

    def get_daily_status(self, user_id: str) -> DailyRewardStatus:
        """Today's availability of spin, trivia and ad rewards plus streaks and totals"""
        try:
            return self._status_from_row(self._get_or_create_daily_row(user_id))
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def perform_spin(self, user_id: str) -> SpinResult:
        """
        Spin the wheel once per UTC day.

        A winning spin extends spin_streak and earns a streak bonus of
        floor(base * (multiplier - 1)); a "try again" resets the streak.
        """
        try:
            row = self._get_or_create_daily_row(user_id)
            today = utc_today()
            if row.get("last_spin_date") == today:
                raise HTTPException(status_code=400, detail="You have already spun today. Come back tomorrow!")

            points = self.app_settings.get_points_settings()
            outcome, base_points = spin_outcome(random.random() * 100)
            won = base_points > 0
            new_streak = (row.get("spin_streak") or 0) + 1 if won else 0
            multiplier = streak_multiplier(new_streak, points.streakIncrement, points.maxStreakMultiplier)
            bonus_points = streak_bonus(base_points, multiplier) if won else 0
            total_earned = base_points + bonus_points
            message = spin_message(outcome, base_points, bonus_points)

            self._update_daily_row(user_id, {
                "last_spin_date": today,
                "spin_streak": new_streak,
                "total_spins": (row.get("total_spins") or 0) + 1,
            })
            total_points = self.profiles.update_user_points(user_id, total_earned)
            record_reward_history(self.supabase, user_id, "spin", total_earned, {
                "result": outcome,
                "message": message,
                "streak": new_streak,
                "streak_multiplier": multiplier,
                "base_points": base_points,
                "bonus_points": bonus_points,
            })
            logger.info(f"Spin for {user_id}: {outcome} (+{total_earned})")

            return SpinResult(
                result=outcome,
                points_earned=total_earned,
                base_points=base_points,
                bonus_points=bonus_points,
                streak=new_streak,
                streak_multiplier=multiplier,
                message=message,
                total_points=total_points,
                new_badges=self._check_badges(user_id) if won else [],
            )
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def get_daily_trivia_question(self, user_id: str, country: Optional[str] = None) -> DailyTriviaQuestion:
        """Random active question, preferring ones for the user's country over global ones"""
        try:
            row = self._get_or_create_daily_row(user_id)
            if row.get("last_trivia_date") == utc_today():
                raise HTTPException(status_code=400, detail="You have already played trivia today. Come back tomorrow!")

            if country is None:
                country = self.profiles.get_profile(user_id).country

            candidates = []
            if country:
                local = self.supabase.table("trivia_questions")\
                    .select("*")\
                    .eq("is_active", True)\
                    .eq("country", country.upper())\
                    .execute()
                candidates = local.data or []
            if not candidates:
                general = self.supabase.table("trivia_questions")\
                    .select("*")\
                    .eq("is_active", True)\
                    .is_("country", "null")\
                    .execute()
                candidates = general.data or []
            if not candidates:
                raise HTTPException(status_code=404, detail="No trivia questions available")

            return DailyTriviaQuestion(**random.choice(candidates))
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def submit_trivia_answer(self, user_id: str, answer: TriviaAnswerRequest) -> TriviaAnswerResult:
        try:
            row = self._get_or_create_daily_row(user_id)
            today = utc_today()
            if row.get("last_trivia_date") == today:
                raise HTTPException(status_code=400, detail="You have already played trivia today. Come back tomorrow!")

            question = self.supabase.table("trivia_questions")\
                .select("*")\
                .eq("id", answer.question_id)\
                .maybe_single()\
                .execute()
            if not question or not question.data:
                raise HTTPException(status_code=404, detail="Trivia question not found")
            question = question.data
            if answer.selected_answer >= len(question.get("options") or []):
                raise HTTPException(status_code=400, detail="Invalid answer option")

            points = self.app_settings.get_points_settings()
            is_correct = answer.selected_answer == question["correct_answer"]
            base_points = trivia_answer_points(question.get("difficulty"), is_correct, points.model_dump())
            new_streak = (row.get("trivia_streak") or 0) + 1 if is_correct else 0
            multiplier = streak_multiplier(new_streak, points.streakIncrement, points.maxStreakMultiplier)
            bonus_points = streak_bonus(base_points, multiplier) if is_correct else 0
            total_earned = base_points + bonus_points

            self._update_daily_row(user_id, {
                "last_trivia_date": today,
                "trivia_streak": new_streak,
                "total_trivia_completed": (row.get("total_trivia_completed") or 0) + 1,
            })
            if total_earned:
                self.profiles.update_user_points(user_id, total_earned)
            record_reward_history(self.supabase, user_id, "trivia", total_earned, {
                "question_id": answer.question_id,
                "selected_answer": answer.selected_answer,
                "correct_answer": question["correct_answer"],
                "is_correct": is_correct,
                "difficulty": question.get("difficulty"),
                "streak_bonus": bonus_points,
                "streak_multiplier": multiplier,
                "base_points": base_points,
            })
            logger.info(f"Trivia answer for {user_id}: correct={is_correct} (+{total_earned})")

            return TriviaAnswerResult(
                correct=is_correct,
                correct_answer=question["correct_answer"],
                points_earned=total_earned,
                base_points=base_points,
                streak_bonus=bonus_points,
                new_streak=new_streak,
                new_badges=self._check_badges(user_id),
            )
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def record_ad_watch(self, user_id: str) -> AdWatchResult:
        try:
            row = self._get_or_create_daily_row(user_id)
            today = utc_today()
            if row.get("last_watch_date") == today:
                raise HTTPException(status_code=400, detail="You have already watched an ad today. Come back tomorrow!")

            points_earned = self.app_settings.get_points_settings().adWatchPoints
            self._update_daily_row(user_id, {
                "last_watch_date": today,
                "total_ads_watched": (row.get("total_ads_watched") or 0) + 1,
            })
            total_points = self.profiles.update_user_points(user_id, points_earned)
            record_reward_history(self.supabase, user_id, "watch", points_earned, {
                "ad_type": "rewarded_video",
            })
            return AdWatchResult(
                points_earned=points_earned,
                total_points=total_points,
                message=f"You earned {points_earned} points for watching an ad!",
                new_badges=self._check_badges(user_id),
            )
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def get_reward_history(
        self,
        user_id: str,
        reward_type: Optional[str] = None,
        start_date: Optional[str] = None,
        end_date: Optional[str] = None,
        limit: int = 50
    ) -> List[RewardHistoryEntry]:
        try:
            if reward_type and reward_type not in REWARD_TYPES:
                raise HTTPException(status_code=400, detail=f"Unknown reward type: {reward_type}")
            query = self.supabase.table("daily_reward_history")\
                .select("*")\
                .eq("user_id", user_id)
            if reward_type:
                query = query.eq("reward_type", reward_type)
            if start_date:
                query = query.gte("created_at", start_date)
            if end_date:
                query = query.lte("created_at", end_date)
            result = query.order("created_at", desc=True).limit(limit).execute()
            return [RewardHistoryEntry(**r) for r in (result.data or [])]
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def reset_daily_rewards(self, user_id: str) -> DailyRewardStatus:
        """Clear today's flags so the user can play again (admin tool); streaks are kept"""
        try:
            self._get_or_create_daily_row(user_id)
            self._update_daily_row(user_id, {
                "last_spin_date": None,
                "last_trivia_date": None,
                "last_watch_date": None,
            })
            logger.info(f"Daily rewards reset for {user_id}")
            return self.get_daily_status(user_id)
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))
