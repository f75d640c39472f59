"""
Tests for Promoted Poll Service.

Tests sponsored promotions including:
- Creation rules (ownership, open promotions, budget)
- Review, pause and resume transitions
- Vote counting and the periodic status transitions
"""

from datetime import datetime, timedelta

import pytest
from fastapi import HTTPException

from app.modules.payments.schemas import WalletPaymentRequest
from app.modules.payments.service import PaymentService
from app.modules.polls.service import PollService
from app.modules.promoted_polls.schemas import PromotedPollCreate, PromotedPollUpdate
from app.modules.promoted_polls.service import PromotedPollService


@pytest.fixture
def sponsor_user(profile_factory):
    return profile_factory("sponsor-user", points=5000)


@pytest.fixture
def sponsor(fake_db, sponsor_user):
    return fake_db.seed("sponsors", {
        "user_id": sponsor_user["id"],
        "name": "Acme Drinks",
        "is_active": True,
    })[0]


def _request(poll, sponsor, **overrides) -> PromotedPollCreate:
    data = {
        "poll_id": poll["id"],
        "sponsor_id": sponsor["id"],
        "budget_amount": 50,
        "cost_per_vote": 0.05,
        "target_votes": 1000,
    }
    data.update(overrides)
    return PromotedPollCreate(**data)


@pytest.fixture
def pending(fake_db, sponsor_user, sponsor, active_poll):
    return PromotedPollService(fake_db).create_promoted_poll(sponsor_user["id"], _request(active_poll, sponsor))


@pytest.mark.unit
class TestCreatePromotedPoll:
    def test_created_pending(self, pending) -> None:
        assert pending.status == "pending_approval"
        assert pending.payment_status == "pending"
        assert pending.current_votes == 0

    def test_only_sponsor_owner(self, fake_db, user, sponsor, active_poll) -> None:
        with pytest.raises(HTTPException) as exc:
            PromotedPollService(fake_db).create_promoted_poll(user["id"], _request(active_poll, sponsor))
        assert exc.value.status_code == 403

    def test_one_open_promotion_per_poll(self, fake_db, sponsor_user, sponsor, active_poll, pending) -> None:
        with pytest.raises(HTTPException) as exc:
            PromotedPollService(fake_db).create_promoted_poll(sponsor_user["id"], _request(active_poll, sponsor))
        assert exc.value.detail == "This poll is already being promoted"

    def test_finished_promotion_does_not_block(self, fake_db, sponsor_user, sponsor, active_poll, pending) -> None:
        fake_db.row("promoted_polls", id=pending.id)["status"] = "completed"
        again = PromotedPollService(fake_db).create_promoted_poll(sponsor_user["id"], _request(active_poll, sponsor))
        assert again.id != pending.id

    def test_budget_must_cover_target(self, fake_db, sponsor_user, sponsor, active_poll) -> None:
        with pytest.raises(HTTPException) as exc:
            PromotedPollService(fake_db).create_promoted_poll(
                sponsor_user["id"], _request(active_poll, sponsor, budget_amount=20)
            )
        assert "must be at least equal to target votes * cost per vote (50.0)" in exc.value.detail

    @pytest.mark.parametrize("budget,target", [(5, 100), (2000, 1000)])
    def test_budget_limits(self, fake_db, sponsor_user, sponsor, active_poll, budget, target) -> None:
        with pytest.raises(HTTPException) as exc:
            PromotedPollService(fake_db).create_promoted_poll(
                sponsor_user["id"], _request(active_poll, sponsor, budget_amount=budget, target_votes=target)
            )
        assert exc.value.detail == "Budget must be between 10.0 and 1000.0"

    def test_disabled(self, fake_db, sponsor_user, sponsor, active_poll) -> None:
        fake_db.seed("app_settings", {"category": "promoted_polls", "settings": {"is_enabled": False}})
        with pytest.raises(HTTPException) as exc:
            PromotedPollService(fake_db).create_promoted_poll(sponsor_user["id"], _request(active_poll, sponsor))
        assert exc.value.detail == "Poll promotion is currently disabled"

    def test_inactive_poll(self, fake_db, sponsor_user, sponsor, active_poll) -> None:
        fake_db.row("polls", id=active_poll["id"])["is_active"] = False
        with pytest.raises(HTTPException) as exc:
            PromotedPollService(fake_db).create_promoted_poll(sponsor_user["id"], _request(active_poll, sponsor))
        assert exc.value.status_code == 404


@pytest.mark.unit
class TestReviewAndLifecycle:
    def test_approve(self, fake_db, admin, pending) -> None:
        approved = PromotedPollService(fake_db).approve_promoted_poll(admin["id"], pending.id, "Looks good")
        assert approved.status == "active"
        assert approved.approved_by == admin["id"]
        assert approved.admin_notes == "Looks good"

    def test_approve_only_pending(self, fake_db, admin, pending) -> None:
        service = PromotedPollService(fake_db)
        service.approve_promoted_poll(admin["id"], pending.id)
        with pytest.raises(HTTPException) as exc:
            service.approve_promoted_poll(admin["id"], pending.id)
        assert exc.value.detail == "Only pending polls can be approved"

    def test_reject_paid_promotion_refunds(self, fake_db, admin, sponsor_user, pending) -> None:
        PaymentService(fake_db).process_wallet_payment(
            sponsor_user["id"], WalletPaymentRequest(amount=50, promoted_poll_id=pending.id)
        )
        assert fake_db.row("profiles", id=sponsor_user["id"])["points"] == 0

        rejected = PromotedPollService(fake_db).reject_promoted_poll(admin["id"], pending.id, "Off topic")
        assert rejected.status == "rejected"
        assert rejected.payment_status == "refunded"
        assert fake_db.row("profiles", id=sponsor_user["id"])["points"] == 5000
        [transaction] = fake_db.rows("transactions", promoted_poll_id=pending.id)
        assert transaction["status"] == "refunded"

    def test_pause_and_resume(self, fake_db, admin, sponsor_user, pending) -> None:
        service = PromotedPollService(fake_db)
        service.approve_promoted_poll(admin["id"], pending.id)

        assert service.pause_promoted_poll(sponsor_user["id"], pending.id).status == "paused"
        with pytest.raises(HTTPException):
            service.pause_promoted_poll(sponsor_user["id"], pending.id)
        assert service.resume_promoted_poll(sponsor_user["id"], pending.id).status == "active"

    def test_pause_requires_owner(self, fake_db, admin, user, pending) -> None:
        service = PromotedPollService(fake_db)
        service.approve_promoted_poll(admin["id"], pending.id)
        with pytest.raises(HTTPException) as exc:
            service.pause_promoted_poll(user["id"], pending.id)
        assert exc.value.status_code == 403
        assert service.pause_promoted_poll(admin["id"], pending.id, is_admin=True).status == "paused"

    def test_update_after_payment(self, fake_db, sponsor_user, pending) -> None:
        fake_db.row("promoted_polls", id=pending.id)["payment_status"] = "paid"
        with pytest.raises(HTTPException) as exc:
            PromotedPollService(fake_db).update_promoted_poll(
                sponsor_user["id"], pending.id, PromotedPollUpdate(budget_amount=80)
            )
        assert "after payment" in exc.value.detail

    def test_target_not_below_current_votes(self, fake_db, sponsor_user, pending) -> None:
        fake_db.row("promoted_polls", id=pending.id)["current_votes"] = 30
        with pytest.raises(HTTPException) as exc:
            PromotedPollService(fake_db).update_promoted_poll(
                sponsor_user["id"], pending.id, PromotedPollUpdate(target_votes=20)
            )
        assert exc.value.detail == "Target votes cannot be less than current votes (30)"


@pytest.mark.unit
class TestVotesAndTransitions:
    def _running(self, fake_db, active_poll, sponsor, **overrides):
        row = {
            "poll_id": active_poll["id"],
            "sponsor_id": sponsor["id"],
            "budget_amount": 10,
            "cost_per_vote": 0.05,
            "target_votes": 2,
            "current_votes": 0,
            "status": "active",
            "payment_status": "paid",
        }
        row.update(overrides)
        return fake_db.seed("promoted_polls", row)[0]

    def test_record_vote_completes_at_target(self, fake_db, active_poll, sponsor) -> None:
        promoted = self._running(fake_db, active_poll, sponsor)
        service = PromotedPollService(fake_db)

        assert service.record_vote(promoted["id"]) is True
        assert fake_db.row("promoted_polls", id=promoted["id"])["status"] == "active"
        assert service.record_vote(promoted["id"]) is True
        row = fake_db.row("promoted_polls", id=promoted["id"])
        assert row["current_votes"] == 2
        assert row["status"] == "completed"

        with pytest.raises(HTTPException) as exc:
            service.record_vote(promoted["id"])
        assert exc.value.status_code == 404

    def test_record_vote_needs_payment(self, fake_db, active_poll, sponsor) -> None:
        promoted = self._running(fake_db, active_poll, sponsor, payment_status="pending")
        with pytest.raises(HTTPException):
            PromotedPollService(fake_db).record_vote(promoted["id"])

    def test_status_transitions(self, fake_db, active_poll, sponsor) -> None:
        now = datetime(2026, 3, 1, 12, 0)
        ended = self._running(fake_db, active_poll, sponsor, end_date=(now - timedelta(hours=1)).isoformat())
        full = self._running(fake_db, active_poll, sponsor, current_votes=2)
        running = self._running(fake_db, active_poll, sponsor, end_date=(now + timedelta(days=1)).isoformat())
        expired_poll = fake_db.seed("polls", {
            "title": "Old question",
            "slug": "old-question",
            "options": [{"text": "Yes", "votes": 0}, {"text": "No", "votes": 0}],
            "is_active": True,
            "active_until": (now - timedelta(days=2)).isoformat(),
        })[0]

        outcome = PromotedPollService(fake_db).run_status_transitions(now)

        assert outcome.completed_promotions == 2
        assert fake_db.row("promoted_polls", id=ended["id"])["status"] == "completed"
        assert fake_db.row("promoted_polls", id=full["id"])["status"] == "completed"
        assert fake_db.row("promoted_polls", id=running["id"])["status"] == "active"
        assert fake_db.row("polls", id=expired_poll["id"])["is_active"] is True
        assert fake_db.row("polls", id=active_poll["id"])["is_active"] is True

        listed = {p.slug for p in PollService(fake_db).list_polls(include_expired=True)}
        assert "old-question" in listed
        assert PollService(fake_db).get_poll_by_slug("old-question").id == expired_poll["id"]

    def test_analytics(self, fake_db, sponsor_user, active_poll, sponsor) -> None:
        promoted = self._running(fake_db, active_poll, sponsor, target_votes=4, current_votes=1)
        fake_db.seed("poll_votes", {"poll_id": active_poll["id"], "user_id": "voter-1", "vote_option": 0})

        analytics = PromotedPollService(fake_db).get_analytics(sponsor_user["id"], promoted["id"])
        assert analytics.completion_rate == 25
        assert analytics.spent_budget == 0.05
        assert analytics.remaining_budget == 9.95
        assert len(analytics.daily_votes) == 7
        assert analytics.daily_votes[-1].votes == 1
