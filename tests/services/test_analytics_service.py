"""
Tests for Analytics Service.

Tests the admin dashboard aggregates including:
- Platform totals, active users and recent signups
- Merged recent activity feed
- Top countries with and without the counting procedure
- User growth series, poll and trivia breakdowns
"""

from datetime import datetime, timedelta

import pytest
from fastapi import HTTPException

from app.core.clock import utc_today
from app.modules.analytics.service import AnalyticsService, format_action_type, time_ago


def _ago(**delta) -> str:
    return (datetime.utcnow() - timedelta(**delta)).isoformat()


@pytest.mark.unit
class TestFormatting:
    @pytest.mark.parametrize("delta,expected", [
        (timedelta(seconds=5), "5 seconds ago"),
        (timedelta(seconds=90), "1 minute ago"),
        (timedelta(hours=5), "5 hours ago"),
        (timedelta(days=3), "3 days ago"),
        (timedelta(days=400), "1 year ago"),
    ])
    def test_time_ago(self, delta, expected) -> None:
        now = datetime(2026, 6, 1, 12, 0)
        assert time_ago(now - delta, now) == expected

    def test_future_timestamps_read_as_now(self) -> None:
        now = datetime(2026, 6, 1, 12, 0)
        assert time_ago(now + timedelta(minutes=5), now) == "0 seconds ago"

    @pytest.mark.parametrize("action_type,expected", [
        ("ban", "Ban"),
        ("report_resolved", "Report resolved"),
        ("updateUserProfile", "Update User Profile"),
    ])
    def test_format_action_type(self, action_type, expected) -> None:
        assert format_action_type(action_type) == expected


@pytest.mark.unit
class TestPlatformStats:
    def test_totals(self, fake_db, user, admin, profile_factory, active_poll) -> None:
        old = profile_factory("user-2", points=50, created_at=_ago(days=60))
        fake_db.seed("poll_votes", {"poll_id": active_poll["id"], "user_id": user["id"], "vote_option": 0})
        fake_db.seed(
            "daily_reward_history",
            {"user_id": user["id"], "reward_type": "spin", "points_earned": 10, "reward_data": {}},
            {"user_id": user["id"], "reward_type": "poll_vote", "points_earned": 50, "reward_data": {}},
            {"user_id": old["id"], "reward_type": "spin", "points_earned": 10, "reward_data": {},
             "created_at": _ago(days=10)},
        )

        stats = AnalyticsService(fake_db).get_platform_stats()

        assert stats.total_users == 3
        assert stats.active_users == 1
        assert stats.total_polls == 1
        assert stats.active_polls == 1
        assert stats.total_votes == 1
        assert stats.total_points == 1050
        assert stats.recent_signups == 2

    def test_signups_follow_date_range(self, fake_db, profile_factory) -> None:
        profile_factory("early", created_at="2026-01-05T10:00:00")
        profile_factory("late", created_at="2026-02-05T10:00:00")

        stats = AnalyticsService(fake_db).get_platform_stats(
            start_date=datetime(2026, 1, 1), end_date=datetime(2026, 1, 31)
        )

        assert stats.total_users == 2
        assert stats.recent_signups == 1

    def test_backend_failure(self, fake_db) -> None:
        fake_db.fail_tables["daily_reward_history"] = "select"
        with pytest.raises(HTTPException) as exc:
            AnalyticsService(fake_db).get_platform_stats()
        assert exc.value.status_code == 500


@pytest.mark.unit
class TestRecentActivity:
    def test_feed_is_merged_newest_first(self, fake_db, admin, profile_factory, active_poll) -> None:
        fake_db.row("profiles", id=admin["id"])["created_at"] = _ago(days=30)
        profile_factory("newbie", email="newbie@example.com", created_at=_ago(days=1))
        fake_db.seed("moderator_actions", {
            "moderator_id": "mod-1",
            "action_type": "ban_user",
            "target_id": "abcdef123456",
            "target_table": "profiles",
            "created_at": _ago(hours=2),
        })

        feed = AnalyticsService(fake_db).get_recent_activity(limit=3)

        assert [item.type for item in feed] == ["poll", "moderation", "user"]
        assert feed[0].message == 'New poll created: "Best season of the year"'
        assert feed[1].message == "Ban user on profiles #abcdef12"
        assert feed[1].time == "2 hours ago"
        assert feed[2].message == "New user registration: newbie@example.com"

    def test_limit_applies_to_merged_feed(self, fake_db, admin, profile_factory, active_poll) -> None:
        fake_db.row("profiles", id=admin["id"])["created_at"] = _ago(days=30)
        profile_factory("newbie", created_at=_ago(days=1))
        feed = AnalyticsService(fake_db).get_recent_activity(limit=1)
        assert [item.type for item in feed] == ["poll"]


@pytest.mark.unit
class TestTopCountries:
    def test_counts_profiles_without_procedure(self, fake_db, user, admin, profile_factory) -> None:
        profile_factory("user-ng", country="NG")
        profile_factory("user-none", country=None)

        top = AnalyticsService(fake_db).get_top_countries()

        assert [(c.country, c.count) for c in top] == [("US", 2), ("NG", 1)]
        assert top[0].percentage == 50.0
        assert top[1].percentage == 25.0

    def test_uses_procedure_when_available(self, fake_db, user) -> None:
        fake_db.rpc_handlers["get_user_counts_by_country"] = lambda db, params: [
            {"country": "US", "user_count": "1"},
            {"country": "NG", "user_count": "0"},
        ]

        top = AnalyticsService(fake_db).get_top_countries(limit=1)

        assert [(c.country, c.count, c.percentage) for c in top] == [("US", 1, 100.0)]
        assert fake_db.rpc_calls[0][0] == "get_user_counts_by_country"


@pytest.mark.unit
class TestUserGrowth:
    def test_explicit_range(self, fake_db, profile_factory) -> None:
        profile_factory("a", created_at="2026-01-01T10:00:00")
        profile_factory("b", created_at="2026-01-03T23:00:00")
        profile_factory("c", created_at="2026-01-04T00:30:00")

        growth = AnalyticsService(fake_db).get_user_growth(
            start_date=datetime(2026, 1, 1), end_date=datetime(2026, 1, 3, 12, 0)
        )

        assert [(d.date, d.count) for d in growth] == [
            ("2026-01-01", 1), ("2026-01-02", 0), ("2026-01-03", 1),
        ]

    def test_range_is_capped(self, fake_db) -> None:
        growth = AnalyticsService(fake_db).get_user_growth(
            start_date=datetime(2026, 1, 1), end_date=datetime(2026, 3, 1)
        )
        assert len(growth) == 30
        assert growth[-1].date == "2026-01-30"

    def test_default_window_ends_today(self, fake_db, user) -> None:
        growth = AnalyticsService(fake_db).get_user_growth(days=7)
        assert len(growth) == 7
        assert growth[-1].date == utc_today()
        assert growth[-1].count == 1
        assert sum(d.count for d in growth) == 1

    def test_reversed_range(self, fake_db) -> None:
        with pytest.raises(HTTPException) as exc:
            AnalyticsService(fake_db).get_user_growth(
                start_date=datetime(2026, 2, 1), end_date=datetime(2026, 1, 1)
            )
        assert exc.value.status_code == 400


@pytest.mark.unit
class TestPollAnalytics:
    def test_breakdown(self, fake_db, admin, active_poll) -> None:
        base = {"options": [{"text": "A", "votes": 0}, {"text": "B", "votes": 0}], "type": "global",
                "created_by": admin["id"], "total_votes": 0}
        fake_db.seed(
            "polls",
            {**base, "title": "Closed", "slug": "closed", "category": "Lifestyle", "is_active": False},
            {**base, "title": "Loose", "slug": "loose", "category": None, "is_active": True},
        )
        fake_db.seed(
            "poll_votes",
            {"poll_id": active_poll["id"], "user_id": "u1", "vote_option": 0, "created_at": "2026-02-01T10:00:00"},
            {"poll_id": active_poll["id"], "user_id": "u2", "vote_option": 1, "created_at": "2026-02-01T12:00:00"},
            {"poll_id": active_poll["id"], "user_id": "u3", "vote_option": 1, "created_at": "2026-02-02T08:00:00"},
        )
        service = AnalyticsService(fake_db)

        analytics = service.get_poll_analytics()
        assert analytics.total_polls == 3
        assert analytics.active_polls == 2
        assert [(c.category, c.count) for c in analytics.polls_by_category] == [
            ("Lifestyle", 2), ("Uncategorized", 1),
        ]
        assert [(d.date, d.count) for d in analytics.votes_by_day] == [
            ("2026-02-01", 2), ("2026-02-02", 1),
        ]

        later = service.get_poll_analytics(start_date=datetime(2026, 2, 2))
        assert [(d.date, d.count) for d in later.votes_by_day] == [("2026-02-02", 1)]


@pytest.mark.unit
class TestTriviaAnalytics:
    def test_completions_and_average_scores(self, fake_db) -> None:
        fake_db.seed("trivia_games", {"title": "Capitals"}, {"title": "Rivers"})
        fake_db.seed("trivia_questions", {"question": "Q1"}, {"question": "Q2"}, {"question": "Q3"})

        def game(difficulty, score=None):
            data = {"difficulty": difficulty}
            if score is not None:
                data["score"] = score
            return {"user_id": "u1", "reward_type": "trivia_game", "points_earned": 10, "reward_data": data}

        fake_db.seed(
            "daily_reward_history",
            game("easy", 80), game("easy", 65), game("hard", 100), game("hard"), game("expert", 90),
            {"user_id": "u1", "reward_type": "spin", "points_earned": 10, "reward_data": {"difficulty": "easy"}},
        )

        analytics = AnalyticsService(fake_db).get_trivia_analytics()

        assert analytics.total_games == 2
        assert analytics.total_questions == 3
        assert [(c.difficulty, c.count) for c in analytics.completions_by_difficulty] == [
            ("easy", 2), ("medium", 0), ("hard", 2),
        ]
        assert [(s.difficulty, s.score) for s in analytics.average_scores] == [
            ("easy", 73), ("medium", 0), ("hard", 100),
        ]
