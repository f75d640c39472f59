from supabase import Client
from app.modules.trivia.schemas import (
    TriviaQuestionCreate, TriviaQuestionUpdate, TriviaQuestionResponse, TriviaGameQuestion,
    TriviaGameCreate, TriviaGameUpdate, TriviaGameResponse, TriviaGameSummary,
    TriviaGameResult, UserTriviaStats
)
from app.modules.profiles.service import ProfileService
from app.modules.badges.service import BadgeService
from app.modules.rewards.history import record_reward_history
from app.config.rewards_config import DIFFICULTY_ORDER
from app.core.scoring import trivia_game_score, trivia_game_points
from typing import List, Optional, Dict, Any, Set
from fastapi import HTTPException
import logging

logger = logging.getLogger(__name__)


class TriviaService:
    def __init__(self, supabase: Client):
        self.supabase = supabase

    def list_categories(self) -> List[str]:
        try:
            result = self.supabase.table("trivia_questions")\
                .select("category")\
                .eq("is_active", True)\
                .execute()
            return sorted({r["category"] for r in (result.data or []) if r.get("category")})
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def list_difficulties(self) -> List[str]:
        try:
            result = self.supabase.table("trivia_questions")\
                .select("difficulty")\
                .eq("is_active", True)\
                .execute()
            found = {r["difficulty"] for r in (result.data or []) if r.get("difficulty")}
            return sorted(found, key=lambda d: DIFFICULTY_ORDER.get(d, len(DIFFICULTY_ORDER)))
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def list_questions(
        self,
        category: Optional[str] = None,
        difficulty: Optional[str] = None,
        country: Optional[str] = None,
        include_inactive: bool = False,
        limit: int = 50,
        offset: int = 0
    ) -> List[TriviaQuestionResponse]:
        try:
            query = self.supabase.table("trivia_questions").select("*")
            if not include_inactive:
                query = query.eq("is_active", True)
            if category and category != "all":
                query = query.eq("category", category)
            if difficulty and difficulty != "all":
                query = query.eq("difficulty", difficulty)
            if country:
                query = query.eq("country", country.upper())
            result = query.order("created_at", desc=True)\
                .range(offset, offset + limit - 1)\
                .execute()
            return [TriviaQuestionResponse(**q) for q in (result.data or [])]
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def create_question(self, question_data: TriviaQuestionCreate) -> TriviaQuestionResponse:
        try:
            payload = question_data.model_dump()
            if payload.get("country"):
                payload["country"] = payload["country"].upper()
            result = self.supabase.table("trivia_questions").insert(payload).execute()
            if not result.data:
                raise HTTPException(status_code=500, detail="Failed to create trivia question")
            return TriviaQuestionResponse(**result.data[0])
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def update_question(self, question_id: str, question_data: TriviaQuestionUpdate) -> TriviaQuestionResponse:
        try:
            current = self.supabase.table("trivia_questions")\
                .select("*")\
                .eq("id", question_id)\
                .maybe_single()\
                .execute()
            if not current or not current.data:
                raise HTTPException(status_code=404, detail="Trivia question not found")
            update_data = question_data.model_dump(exclude_unset=True)
            if not update_data:
                raise HTTPException(status_code=400, detail="No fields to update")
            options = update_data.get("options", current.data["options"])
            correct = update_data.get("correct_answer", current.data["correct_answer"])
            if correct >= len(options):
                raise HTTPException(status_code=400, detail="correct_answer must index one of the options")
            if update_data.get("country"):
                update_data["country"] = update_data["country"].upper()
            result = self.supabase.table("trivia_questions")\
                .update(update_data)\
                .eq("id", question_id)\
                .execute()
            return TriviaQuestionResponse(**result.data[0])
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def _played_game_ids(self, user_id: str) -> Set[str]:
        """Games that already paid out for this user"""
        result = self.supabase.table("daily_reward_history")\
            .select("reward_data")\
            .eq("user_id", user_id)\
            .eq("reward_type", "trivia_game")\
            .gt("points_earned", 0)\
            .execute()
        return {
            (r.get("reward_data") or {}).get("game_id")
            for r in (result.data or [])
            if (r.get("reward_data") or {}).get("game_id")
        }

    def list_game_summaries(
        self,
        category: Optional[str] = None,
        difficulty: Optional[str] = None,
        limit: int = 10,
        offset: int = 0,
        user_id: Optional[str] = None
    ) -> List[TriviaGameSummary]:
        """Active games sorted by category then difficulty (easy, medium, hard)"""
        try:
            query = self.supabase.table("trivia_games")\
                .select("*")\
                .eq("is_active", True)
            if category and category != "all":
                query = query.eq("category", category)
            if difficulty and difficulty != "all":
                query = query.eq("difficulty", difficulty)
            result = query.range(offset, offset + limit - 1).execute()

            played = self._played_game_ids(user_id) if user_id else set()
            summaries = [
                TriviaGameSummary(
                    id=g["id"],
                    title=g["title"],
                    description=g.get("description"),
                    category=g["category"],
                    difficulty=g["difficulty"],
                    question_count=g.get("number_of_questions") or len(g.get("question_ids") or []),
                    points_reward=g.get("points_reward") or 0,
                    estimated_time=f"{g.get('estimated_time_minutes') or 5} min",
                    has_played=g["id"] in played,
                )
                for g in (result.data or [])
            ]
            summaries.sort(key=lambda s: (s.category, DIFFICULTY_ORDER.get(s.difficulty, len(DIFFICULTY_ORDER))))
            return summaries
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def get_game(self, game_id: str) -> TriviaGameResponse:
        try:
            result = self.supabase.table("trivia_games")\
                .select("*")\
                .eq("id", game_id)\
                .eq("is_active", True)\
                .maybe_single()\
                .execute()
            if not result or not result.data:
                raise HTTPException(status_code=404, detail="Trivia game not found")
            return TriviaGameResponse(**result.data)
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def _fetch_game_questions(self, game: TriviaGameResponse) -> List[Dict[str, Any]]:
        """Active questions of a game in question_ids order"""
        result = self.supabase.table("trivia_questions")\
            .select("*")\
            .in_("id", game.question_ids)\
            .eq("is_active", True)\
            .execute()
        position = {qid: i for i, qid in enumerate(game.question_ids)}
        return sorted(result.data or [], key=lambda q: position.get(q["id"], len(position)))

    def get_game_questions(self, game_id: str) -> List[TriviaGameQuestion]:
        try:
            game = self.get_game(game_id)
            return [TriviaGameQuestion(**q) for q in self._fetch_game_questions(game)]
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def _validate_question_ids(self, question_ids: List[str]) -> None:
        result = self.supabase.table("trivia_questions")\
            .select("id")\
            .in_("id", question_ids)\
            .execute()
        found = {r["id"] for r in (result.data or [])}
        missing = [qid for qid in question_ids if qid not in found]
        if missing:
            raise HTTPException(status_code=400, detail=f"Unknown trivia questions: {', '.join(missing)}")

    def create_game(self, game_data: TriviaGameCreate) -> TriviaGameResponse:
        try:
            self._validate_question_ids(game_data.question_ids)
            payload = game_data.model_dump()
            payload["number_of_questions"] = len(game_data.question_ids)
            result = self.supabase.table("trivia_games").insert(payload).execute()
            if not result.data:
                raise HTTPException(status_code=500, detail="Failed to create trivia game")
            return TriviaGameResponse(**result.data[0])
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def update_game(self, game_id: str, game_data: TriviaGameUpdate) -> TriviaGameResponse:
        try:
            update_data = game_data.model_dump(exclude_unset=True, exclude_none=True)
            if not update_data:
                raise HTTPException(status_code=400, detail="No fields to update")
            if "question_ids" in update_data:
                self._validate_question_ids(update_data["question_ids"])
                update_data["number_of_questions"] = len(update_data["question_ids"])
            result = self.supabase.table("trivia_games")\
                .update(update_data)\
                .eq("id", game_id)\
                .execute()
            if not result.data:
                raise HTTPException(status_code=404, detail="Trivia game not found")
            return TriviaGameResponse(**result.data[0])
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def submit_game(self, user_id: str, game_id: str, answers: List[int]) -> TriviaGameResult:
        """
        Grade a completed game and pay points once per user per game.

        Answers are graded here against the stored questions; the score is the
        rounded percentage of number_of_questions and the payout scales
        points_reward by that score.
        """
        try:
            game = self.get_game(game_id)
            questions = self._fetch_game_questions(game)
            correct_answers = sum(
                1 for question, answer in zip(questions, answers)
                if answer == question["correct_answer"]
            )
            total_questions = game.number_of_questions or len(questions)
            score = trivia_game_score(correct_answers, total_questions)

            if game_id in self._played_game_ids(user_id):
                return TriviaGameResult(
                    score=score,
                    correct_answers=correct_answers,
                    total_questions=total_questions,
                    points_earned=0,
                    message=f"You scored {score}%. You've already earned points for this game!",
                )

            points_earned = trivia_game_points(score, game.points_reward)
            if points_earned:
                ProfileService(self.supabase).update_user_points(user_id, points_earned)
            record_reward_history(self.supabase, user_id, "trivia_game", points_earned, {
                "game_id": game_id,
                "score": score,
                "correct_answers": correct_answers,
                "total_questions": total_questions,
                "difficulty": game.difficulty,
            })
            logger.info(f"Trivia game {game_id} by {user_id}: {score}% (+{points_earned})")

            try:
                new_badges = BadgeService(self.supabase).check_and_award_badges(user_id)
            except HTTPException as e:
                logger.error(f"Badge check failed for {user_id}: {e.detail}")
                new_badges = []

            return TriviaGameResult(
                score=score,
                correct_answers=correct_answers,
                total_questions=total_questions,
                points_earned=points_earned,
                message=f"You scored {score}% and earned {points_earned} points!",
                new_badges=new_badges,
            )
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def get_user_stats(self, user_id: str) -> UserTriviaStats:
        try:
            result = self.supabase.table("daily_reward_history")\
                .select("points_earned, reward_data")\
                .eq("user_id", user_id)\
                .eq("reward_type", "trivia_game")\
                .execute()
            rows = result.data or []
            best_score = 0
            for row in rows:
                try:
                    best_score = max(best_score, int((row.get("reward_data") or {}).get("score") or 0))
                except (TypeError, ValueError):
                    continue
            return UserTriviaStats(
                total_games_played=len([r for r in rows if (r.get("points_earned") or 0) > 0]),
                best_score=best_score,
            )
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))
