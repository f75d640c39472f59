"""
Tests for Reward Service.

Tests the once-per-day rewards including:
- Spin outcomes, streaks and streak bonuses
- Daily trivia answers
- Rewarded ad watches
- Admin reset of the daily flags
"""

from datetime import datetime, timedelta
from unittest.mock import patch

import pytest
from fastapi import HTTPException

from app.core.clock import utc_today
from app.modules.rewards.schemas import TriviaAnswerRequest
from app.modules.rewards.service import RewardService


def _yesterday() -> str:
    return (datetime.utcnow() - timedelta(days=1)).date().isoformat()


def _spin(fake_db, user_id: str, roll: float):
    with patch("app.modules.rewards.service.random") as mock_random:
        mock_random.random.return_value = roll
        return RewardService(fake_db).perform_spin(user_id)


@pytest.fixture
def streak_row(fake_db, user):
    """Rewards row with a running spin and trivia streak of 4, last played yesterday."""
    return fake_db.seed("user_daily_rewards", {
        "user_id": user["id"],
        "last_spin_date": _yesterday(),
        "last_trivia_date": _yesterday(),
        "spin_streak": 4,
        "trivia_streak": 4,
        "total_spins": 10,
        "total_trivia_completed": 10,
        "total_ads_watched": 0,
    })[0]


@pytest.fixture
def hard_question(fake_db):
    return fake_db.seed("trivia_questions", {
        "question": "Which planet has the most moons?",
        "options": ["Earth", "Mars", "Saturn", "Venus"],
        "correct_answer": 2,
        "difficulty": "hard",
        "category": "Science",
        "country": None,
        "is_active": True,
    })[0]


@pytest.mark.unit
class TestSpin:
    """Daily spin."""

    def test_first_spin_creates_rewards_row(self, fake_db, user) -> None:
        result = _spin(fake_db, user["id"], 0.5)

        assert result.result == "points_10"
        assert result.base_points == 10
        assert result.streak == 1
        assert result.streak_multiplier == pytest.approx(1.1)
        assert result.bonus_points == 1
        assert result.points_earned == 11
        assert result.total_points == 1011
        assert result.message == "You won 10 points + 1 streak bonus!"

        row = fake_db.row("user_daily_rewards", user_id=user["id"])
        assert row["last_spin_date"] == utc_today()
        assert row["total_spins"] == 1
        [history] = fake_db.rows("daily_reward_history", user_id=user["id"], reward_type="spin")
        assert history["points_earned"] == 11
        assert history["reward_data"]["base_points"] == 10

    def test_one_spin_per_day(self, fake_db, user) -> None:
        _spin(fake_db, user["id"], 0.5)
        with pytest.raises(HTTPException) as exc:
            _spin(fake_db, user["id"], 0.5)
        assert exc.value.status_code == 400
        assert fake_db.row("user_daily_rewards", user_id=user["id"])["total_spins"] == 1

    def test_streak_raises_bonus(self, fake_db, user, streak_row) -> None:
        result = _spin(fake_db, user["id"], 0.9)

        assert result.result == "points_50"
        assert result.streak == 5
        assert result.bonus_points == 25
        assert result.points_earned == 75

    def test_losing_spin_resets_streak(self, fake_db, user, streak_row) -> None:
        result = _spin(fake_db, user["id"], 0.1)

        assert result.result == "try_again"
        assert result.points_earned == 0
        assert result.streak == 0
        assert result.message == "Try Again Tomorrow!"
        assert fake_db.row("profiles", id=user["id"])["points"] == 1000
        assert fake_db.row("user_daily_rewards", user_id=user["id"])["spin_streak"] == 0

    def test_jackpot(self, fake_db, user) -> None:
        result = _spin(fake_db, user["id"], 0.995)
        assert result.result == "jackpot"
        assert result.base_points == 250
        assert result.bonus_points == 25
        assert result.points_earned == 275

    def test_unknown_profile(self, fake_db) -> None:
        with pytest.raises(HTTPException) as exc:
            _spin(fake_db, "ghost", 0.5)
        assert exc.value.status_code == 404


@pytest.mark.unit
class TestDailyTrivia:
    """Single daily trivia question."""

    def test_correct_answer_pays_difficulty_and_streak(self, fake_db, user, hard_question) -> None:
        result = RewardService(fake_db).submit_trivia_answer(
            user["id"], TriviaAnswerRequest(question_id=hard_question["id"], selected_answer=2)
        )

        assert result.correct is True
        assert result.base_points == 30
        assert result.streak_bonus == 3
        assert result.points_earned == 33
        assert result.new_streak == 1
        assert fake_db.row("profiles", id=user["id"])["points"] == 1033

    def test_wrong_answer_resets_streak(self, fake_db, user, streak_row, hard_question) -> None:
        result = RewardService(fake_db).submit_trivia_answer(
            user["id"], TriviaAnswerRequest(question_id=hard_question["id"], selected_answer=0)
        )

        assert result.correct is False
        assert result.correct_answer == 2
        assert result.points_earned == 0
        assert result.new_streak == 0
        assert fake_db.row("profiles", id=user["id"])["points"] == 1000
        [history] = fake_db.rows("daily_reward_history", user_id=user["id"], reward_type="trivia")
        assert history["reward_data"]["is_correct"] is False

    def test_answer_outside_options(self, fake_db, user, hard_question) -> None:
        with pytest.raises(HTTPException) as exc:
            RewardService(fake_db).submit_trivia_answer(
                user["id"], TriviaAnswerRequest(question_id=hard_question["id"], selected_answer=4)
            )
        assert exc.value.status_code == 400

    def test_one_answer_per_day(self, fake_db, user, hard_question) -> None:
        service = RewardService(fake_db)
        request = TriviaAnswerRequest(question_id=hard_question["id"], selected_answer=2)
        service.submit_trivia_answer(user["id"], request)
        with pytest.raises(HTTPException) as exc:
            service.submit_trivia_answer(user["id"], request)
        assert exc.value.status_code == 400

    def test_question_prefers_user_country(self, fake_db, user, hard_question) -> None:
        local = fake_db.seed("trivia_questions", {
            "question": "Capital of the United States?",
            "options": ["New York", "Washington, D.C."],
            "correct_answer": 1,
            "difficulty": "easy",
            "country": "US",
            "is_active": True,
        })[0]
        question = RewardService(fake_db).get_daily_trivia_question(user["id"])
        assert question.id == local["id"]

    def test_question_falls_back_to_global(self, fake_db, user, hard_question) -> None:
        question = RewardService(fake_db).get_daily_trivia_question(user["id"], country="KE")
        assert question.id == hard_question["id"]

    def test_no_questions(self, fake_db, user) -> None:
        with pytest.raises(HTTPException) as exc:
            RewardService(fake_db).get_daily_trivia_question(user["id"])
        assert exc.value.status_code == 404


@pytest.mark.unit
class TestAdWatchAndReset:
    def test_ad_watch_once_per_day(self, fake_db, user) -> None:
        service = RewardService(fake_db)
        result = service.record_ad_watch(user["id"])
        assert result.points_earned == 15
        assert result.total_points == 1015

        with pytest.raises(HTTPException):
            service.record_ad_watch(user["id"])

    def test_reset_clears_flags_and_keeps_streaks(self, fake_db, user, streak_row) -> None:
        service = RewardService(fake_db)
        _spin(fake_db, user["id"], 0.5)
        assert service.get_daily_status(user["id"]).can_spin is False

        status = service.reset_daily_rewards(user["id"])
        assert status.can_spin is True
        assert status.can_play_trivia is True
        assert status.spin_streak == 5

    def test_history_rejects_unknown_type(self, fake_db, user) -> None:
        with pytest.raises(HTTPException) as exc:
            RewardService(fake_db).get_reward_history(user["id"], reward_type="lottery")
        assert exc.value.status_code == 400

    def test_history_filters_by_type(self, fake_db, user) -> None:
        service = RewardService(fake_db)
        service.record_ad_watch(user["id"])
        _spin(fake_db, user["id"], 0.5)
        entries = service.get_reward_history(user["id"], reward_type="watch")
        assert [e.reward_type for e in entries] == ["watch"]
