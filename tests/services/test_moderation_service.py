"""
Tests for Moderation Service.

Tests moderator tools including:
- Approving and rejecting content
- Suspending and restoring accounts
- Content reports and moderation statistics
"""

import pytest
from fastapi import HTTPException

from app.modules.moderation.schemas import ReportCreate
from app.modules.moderation.service import ModerationService


@pytest.mark.unit
class TestContentDecisions:
    def test_reject_hides_content(self, fake_db, moderator, active_poll) -> None:
        action = ModerationService(fake_db).reject_content(moderator["id"], active_poll["id"], "polls", "Spam")

        assert action.action_type == "reject"
        assert action.moderator_id == moderator["id"]
        assert fake_db.row("polls", id=active_poll["id"])["is_active"] is False

    def test_approve_restores_content(self, fake_db, moderator, active_poll) -> None:
        service = ModerationService(fake_db)
        service.reject_content(moderator["id"], active_poll["id"], "polls")
        service.approve_content(moderator["id"], active_poll["id"], "polls")
        assert fake_db.row("polls", id=active_poll["id"])["is_active"] is True

    def test_missing_content(self, fake_db, moderator) -> None:
        with pytest.raises(HTTPException) as exc:
            ModerationService(fake_db).reject_content(moderator["id"], "missing", "polls")
        assert exc.value.status_code == 404
        assert fake_db.rows("moderator_actions") == []

    def test_other_tables_only_record(self, fake_db, moderator) -> None:
        action = ModerationService(fake_db).approve_content(moderator["id"], "sponsor-9", "sponsors")
        assert action.target_table == "sponsors"


@pytest.mark.unit
class TestSuspension:
    def test_ban_and_unban(self, fake_db, moderator, user) -> None:
        service = ModerationService(fake_db)
        service.ban_user(moderator["id"], user["id"], "Vote farming", "7d")
        assert fake_db.row("profiles", id=user["id"])["is_suspended"] is True

        service.unban_user(moderator["id"], user["id"])
        assert fake_db.row("profiles", id=user["id"])["is_suspended"] is False

    def test_cannot_ban_self(self, fake_db, moderator) -> None:
        with pytest.raises(HTTPException) as exc:
            ModerationService(fake_db).ban_user(moderator["id"], moderator["id"], "Oops")
        assert exc.value.status_code == 400

    def test_unknown_user(self, fake_db, moderator) -> None:
        with pytest.raises(HTTPException) as exc:
            ModerationService(fake_db).ban_user(moderator["id"], "ghost", "Spam")
        assert exc.value.status_code == 404


@pytest.mark.unit
class TestReports:
    def test_report_once_while_open(self, fake_db, user, moderator, active_poll) -> None:
        service = ModerationService(fake_db)
        report = ReportCreate(content_type="poll", content_id=active_poll["id"], reason="Misleading")
        created = service.create_report(user["id"], report)
        assert created.status == "pending"

        with pytest.raises(HTTPException) as exc:
            service.create_report(user["id"], report)
        assert exc.value.detail == "You have already reported this content"

        service.update_report_status(moderator["id"], created.id, "rejected", "Not misleading")
        assert service.create_report(user["id"], report).status == "pending"

    def test_report_missing_content(self, fake_db, user) -> None:
        with pytest.raises(HTTPException) as exc:
            ModerationService(fake_db).create_report(
                user["id"], ReportCreate(content_type="comment", content_id="missing", reason="Rude")
            )
        assert exc.value.status_code == 404

    def test_resolution_is_recorded(self, fake_db, user, moderator, active_poll) -> None:
        service = ModerationService(fake_db)
        created = service.create_report(
            user["id"], ReportCreate(content_type="poll", content_id=active_poll["id"], reason="Spam")
        )
        resolved = service.update_report_status(moderator["id"], created.id, "resolved", "Removed")

        assert resolved.resolved_by == moderator["id"]
        assert [a["action_type"] for a in fake_db.rows("moderator_actions")] == ["report_resolved"]
        assert [r.id for r in service.list_reports(status="resolved")] == [created.id]


@pytest.mark.unit
class TestStats:
    def test_counts_by_type(self, fake_db, moderator, user, active_poll) -> None:
        service = ModerationService(fake_db)
        service.reject_content(moderator["id"], active_poll["id"], "polls")
        service.approve_content(moderator["id"], active_poll["id"], "polls")
        service.reject_content(moderator["id"], active_poll["id"], "polls")
        service.ban_user(moderator["id"], user["id"], "Spam")

        stats = service.get_stats(timeframe="week")
        assert stats.total_actions == 4
        assert stats.rejections == 2
        assert stats.approvals == 1
        assert stats.bans == 1
        assert stats.actions_by_type[0].type == "reject"

    def test_bad_timeframe(self, fake_db) -> None:
        with pytest.raises(HTTPException) as exc:
            ModerationService(fake_db).get_stats(timeframe="year")
        assert exc.value.status_code == 400
