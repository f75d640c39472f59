"""
Tests for Poll Service.

Tests poll behaviour including:
- Slugs and the human readable time left
- Voting rules, points and promotion tracking
- Editing options without losing votes
- Listing windows, archiving and stats fallbacks
"""

from datetime import datetime, timedelta

import pytest
from fastapi import HTTPException

from app.modules.polls.schemas import PollCreate, PollUpdate
from app.modules.polls.service import PollService, poll_time_left, slugify


def _iso(delta: timedelta) -> str:
    return (datetime.utcnow() + delta).isoformat()


@pytest.mark.unit
class TestPollHelpers:
    """Pure helpers used when building poll responses."""

    def test_slugify_strips_punctuation(self) -> None:
        assert slugify("Hello, World! 2026") == "hello-world-2026"

    def test_slugify_truncates(self) -> None:
        assert len(slugify("a" * 80)) == 50

    NOW = datetime(2026, 1, 1, 12, 0, 0)

    @pytest.mark.parametrize(
        "start,end,expected",
        [
            (None, None, "No expiration"),
            (NOW + timedelta(days=2), None, "Starts in 2 days"),
            (NOW + timedelta(days=1, hours=1), None, "Starts in 1 day"),
            (NOW + timedelta(hours=3), None, "Starts in 3 hours"),
            (NOW + timedelta(minutes=30), None, "Starting soon"),
            (None, NOW - timedelta(minutes=1), "Expired"),
            (None, NOW, "Expired"),
            (None, NOW + timedelta(days=5), "5 days left"),
            (None, NOW + timedelta(hours=1, minutes=30), "1 hour left"),
            (None, NOW + timedelta(minutes=20), "Less than 1 hour left"),
            (NOW - timedelta(days=1), NOW + timedelta(hours=2), "2 hours left"),
        ],
    )
    def test_time_left(self, start, end, expected) -> None:
        assert poll_time_left(start, end, now=self.NOW) == expected

    def test_time_left_accepts_strings(self) -> None:
        assert poll_time_left(None, "2026-01-03T12:00:00Z", now=self.NOW) == "2 days left"


@pytest.mark.unit
class TestCreatePoll:
    def test_slug_is_made_unique(self, fake_db, user) -> None:
        service = PollService(fake_db)
        data = PollCreate(title="Favourite colour?", options=["Red", "Blue"])
        first = service.create_poll(user["id"], data)
        second = service.create_poll(user["id"], data)
        third = service.create_poll(user["id"], data)

        assert first.slug == "favourite-colour"
        assert second.slug == "favourite-colour-1"
        assert third.slug == "favourite-colour-2"

    def test_new_poll_starts_empty(self, fake_db, user) -> None:
        poll = PollService(fake_db).create_poll(
            user["id"], PollCreate(title="Local election", options=["A", "B", "C"], type="country", country="ng")
        )
        assert poll.country == "NG"
        assert poll.total_votes == 0
        assert [o.votes for o in poll.options] == [0, 0, 0]
        assert poll.created_by == user["id"]

    def test_country_poll_needs_country(self) -> None:
        with pytest.raises(ValueError):
            PollCreate(title="Local election", options=["A", "B"], type="country")

    def test_too_few_options(self) -> None:
        with pytest.raises(ValueError):
            PollCreate(title="Yes or no", options=["Yes"])


@pytest.mark.unit
class TestVoting:
    """Casting votes."""

    def test_vote_awards_points_and_counts(self, fake_db, user, active_poll) -> None:
        result = PollService(fake_db).vote(user["id"], active_poll["id"], 1)

        assert result.points_earned == 50
        assert result.total_points == 1050
        assert result.poll.has_voted is True
        assert result.poll.user_vote == 1
        assert result.poll.options[1].votes == 1
        assert result.poll.total_votes == 1

        assert fake_db.row("profiles", id=user["id"])["points"] == 1050
        assert fake_db.row("poll_votes", user_id=user["id"], poll_id=active_poll["id"])["vote_option"] == 1
        history = fake_db.rows("daily_reward_history", user_id=user["id"], reward_type="poll_vote")
        assert len(history) == 1
        assert history[0]["points_earned"] == 50

    def test_vote_points_follow_settings(self, fake_db, user, active_poll) -> None:
        fake_db.seed("app_settings", {"category": "points", "settings": {"pollVotePoints": 75}})
        result = PollService(fake_db).vote(user["id"], active_poll["id"], 0)
        assert result.points_earned == 75

    def test_second_vote_is_rejected(self, fake_db, user, active_poll) -> None:
        service = PollService(fake_db)
        service.vote(user["id"], active_poll["id"], 0)
        with pytest.raises(HTTPException) as exc:
            service.vote(user["id"], active_poll["id"], 2)
        assert exc.value.status_code == 400
        assert exc.value.detail == "You have already voted on this poll"
        assert fake_db.row("polls", id=active_poll["id"])["total_votes"] == 1

    @pytest.mark.parametrize("option", [-1, 3])
    def test_invalid_option(self, fake_db, user, active_poll, option) -> None:
        with pytest.raises(HTTPException) as exc:
            PollService(fake_db).vote(user["id"], active_poll["id"], option)
        assert exc.value.status_code == 400
        assert exc.value.detail == "Invalid vote option"

    def test_expired_poll(self, fake_db, user, active_poll) -> None:
        fake_db.row("polls", id=active_poll["id"])["active_until"] = _iso(timedelta(hours=-1))
        with pytest.raises(HTTPException) as exc:
            PollService(fake_db).vote(user["id"], active_poll["id"], 0)
        assert exc.value.detail == "Poll has expired"

    def test_poll_not_started(self, fake_db, user, active_poll) -> None:
        fake_db.row("polls", id=active_poll["id"])["start_date"] = _iso(timedelta(days=1))
        with pytest.raises(HTTPException) as exc:
            PollService(fake_db).vote(user["id"], active_poll["id"], 0)
        assert exc.value.detail == "Poll has not started yet"

    def test_inactive_poll(self, fake_db, user, active_poll) -> None:
        fake_db.row("polls", id=active_poll["id"])["is_active"] = False
        with pytest.raises(HTTPException) as exc:
            PollService(fake_db).vote(user["id"], active_poll["id"], 0)
        assert exc.value.status_code == 404

    def test_vote_counts_toward_promotion(self, fake_db, user, admin, active_poll) -> None:
        sponsor = fake_db.seed("sponsors", {"user_id": admin["id"], "name": "Acme", "is_active": True})[0]
        promoted = fake_db.seed("promoted_polls", {
            "poll_id": active_poll["id"],
            "sponsor_id": sponsor["id"],
            "budget_amount": 10,
            "cost_per_vote": 0.05,
            "target_votes": 2,
            "current_votes": 1,
            "status": "active",
            "payment_status": "paid",
        })[0]

        PollService(fake_db).vote(user["id"], active_poll["id"], 0)

        row = fake_db.row("promoted_polls", id=promoted["id"])
        assert row["current_votes"] == 2
        assert row["status"] == "completed"

    def test_unpaid_promotion_is_not_counted(self, fake_db, user, admin, active_poll) -> None:
        sponsor = fake_db.seed("sponsors", {"user_id": admin["id"], "name": "Acme", "is_active": True})[0]
        promoted = fake_db.seed("promoted_polls", {
            "poll_id": active_poll["id"],
            "sponsor_id": sponsor["id"],
            "budget_amount": 10,
            "cost_per_vote": 0.05,
            "target_votes": 5,
            "current_votes": 0,
            "status": "active",
            "payment_status": "pending",
        })[0]

        PollService(fake_db).vote(user["id"], active_poll["id"], 0)
        assert fake_db.row("promoted_polls", id=promoted["id"])["current_votes"] == 0

    def test_first_vote_badge(self, fake_db, user, active_poll) -> None:
        fake_db.seed("badges", {
            "name": "First Steps",
            "description": "Vote on your first poll",
            "criteria": {"type": "poll_votes", "count": 1},
            "is_active": True,
        })
        result = PollService(fake_db).vote(user["id"], active_poll["id"], 0)
        assert result.new_badges == ["First Steps"]
        assert fake_db.row("profiles", id=user["id"])["badges"] == ["First Steps"]


@pytest.mark.unit
class TestUpdatePoll:
    def test_votes_follow_option_text(self, fake_db, admin, active_poll) -> None:
        row = fake_db.row("polls", id=active_poll["id"])
        row["options"] = [{"text": "Spring", "votes": 3}, {"text": "Summer", "votes": 2}, {"text": "Winter", "votes": 0}]
        row["total_votes"] = 5

        poll = PollService(fake_db).update_poll(
            admin["id"], active_poll["id"], PollUpdate(options=["spring", "Autumn"])
        )

        assert [(o.text, o.votes) for o in poll.options] == [("spring", 3), ("Autumn", 0)]
        assert poll.total_votes == 3

    def test_only_creator_or_admin(self, fake_db, user, active_poll) -> None:
        service = PollService(fake_db)
        with pytest.raises(HTTPException) as exc:
            service.update_poll(user["id"], active_poll["id"], PollUpdate(title="Hijacked title"))
        assert exc.value.status_code == 403

        poll = service.update_poll(user["id"], active_poll["id"], PollUpdate(title="Edited by admin"), is_admin=True)
        assert poll.title == "Edited by admin"

    def test_empty_update(self, fake_db, admin, active_poll) -> None:
        with pytest.raises(HTTPException) as exc:
            PollService(fake_db).update_poll(admin["id"], active_poll["id"], PollUpdate())
        assert exc.value.status_code == 400

    @pytest.mark.parametrize("options", [
        ["Spring", "spring"],
        ["Summer", " SUMMER "],
        ["Spring", "  "],
    ])
    def test_update_rejects_blank_or_repeated_options(self, options) -> None:
        with pytest.raises(ValueError):
            PollUpdate(options=options)

    def test_update_strips_option_text(self, fake_db, admin, active_poll) -> None:
        row = fake_db.row("polls", id=active_poll["id"])
        row["options"][0]["votes"] = 4
        row["total_votes"] = 4

        poll = PollService(fake_db).update_poll(
            admin["id"], active_poll["id"], PollUpdate(options=[" Spring ", "Autumn"])
        )

        assert [(o.text, o.votes) for o in poll.options] == [("Spring", 4), ("Autumn", 0)]
        assert poll.total_votes == 4


@pytest.mark.unit
class TestListingAndStats:
    def test_listing_hides_closed_windows(self, fake_db, user, admin, active_poll) -> None:
        base = {"options": [{"text": "A", "votes": 0}, {"text": "B", "votes": 0}], "type": "global",
                "category": "General", "created_by": admin["id"], "is_active": True, "total_votes": 0}
        fake_db.seed(
            "polls",
            {**base, "title": "Old", "slug": "old", "start_date": None, "active_until": _iso(timedelta(days=-1))},
            {**base, "title": "Future", "slug": "future", "start_date": _iso(timedelta(days=1)), "active_until": None},
            {**base, "title": "Hidden", "slug": "hidden", "is_active": False, "start_date": None, "active_until": None},
        )
        service = PollService(fake_db)

        visible = {p.slug for p in service.list_polls(user["id"])}
        assert visible == {active_poll["slug"]}

        everything = {p.slug for p in service.list_polls(user["id"], include_expired=True)}
        assert everything == {active_poll["slug"], "old", "future"}

    def test_listing_marks_votes(self, fake_db, user, active_poll) -> None:
        service = PollService(fake_db)
        service.vote(user["id"], active_poll["id"], 2)
        [poll] = service.list_polls(user["id"])
        assert poll.has_voted is True
        assert poll.user_vote == 2

    def test_bad_order_field(self, fake_db) -> None:
        with pytest.raises(HTTPException) as exc:
            PollService(fake_db).list_polls(order_by="title")
        assert exc.value.status_code == 400

    def test_search_matches_title(self, fake_db, active_poll) -> None:
        found = PollService(fake_db).search_polls("SEASON")
        assert [p.id for p in found] == [active_poll["id"]]

    def test_search_tolerates_filter_punctuation(self, fake_db, user, active_poll) -> None:
        service = PollService(fake_db)
        found = service.search_polls("season, of", user["id"])
        assert [p.id for p in found] == [active_poll["id"]]
        assert [p.id for p in service.search_polls("(season)")] == [active_poll["id"]]

    @pytest.mark.parametrize("term", ["(", ",", " ( , ) "])
    def test_search_with_only_punctuation_is_empty(self, fake_db, active_poll, term) -> None:
        assert PollService(fake_db).search_polls(term) == []

    def test_history_lists_voted_polls(self, fake_db, user, active_poll) -> None:
        service = PollService(fake_db)
        service.vote(user["id"], active_poll["id"], 0)
        history = service.get_user_history(user["id"])
        assert history.created_polls == []
        assert [p.id for p in history.voted_polls] == [active_poll["id"]]

    def test_stats_count_categories_without_rpc(self, fake_db, user, active_poll) -> None:
        service = PollService(fake_db)
        service.vote(user["id"], active_poll["id"], 0)
        stats = service.get_poll_stats()
        assert stats.total_polls == 1
        assert stats.active_polls == 1
        assert stats.total_votes == 1
        assert [(c.category, c.count) for c in stats.top_categories] == [("Lifestyle", 1)]

    def test_stats_use_rpc_when_available(self, fake_db, active_poll) -> None:
        fake_db.rpc_handlers["get_category_counts"] = lambda db, params: [
            {"category": "Sports", "count": 4},
            {"category": "Politics", "count": 9},
        ]
        stats = PollService(fake_db).get_poll_stats()
        assert [(c.category, c.count) for c in stats.top_categories] == [("Politics", 9), ("Sports", 4)]

    def test_categories_fall_back_to_poll_values(self, fake_db, active_poll) -> None:
        fake_db.fail_tables["poll_categories"] = "select"
        names = [c.name for c in PollService(fake_db).list_categories()]
        assert names == ["General", "Lifestyle"]


@pytest.mark.unit
class TestArchive:
    def test_archive_calls_rpc(self, fake_db, admin, active_poll) -> None:
        fake_db.rpc_handlers["archive_poll"] = lambda db, params: None
        assert PollService(fake_db).archive_poll(admin["id"], active_poll["id"]) is True
        assert fake_db.rpc_calls == [("archive_poll", {"p_poll_id": active_poll["id"], "p_user_id": admin["id"]})]

    def test_archive_needs_ownership(self, fake_db, user, active_poll) -> None:
        with pytest.raises(HTTPException) as exc:
            PollService(fake_db).archive_poll(user["id"], active_poll["id"])
        assert exc.value.status_code == 403
        assert fake_db.rpc_calls == []
