from supabase import Client
from app.modules.moderation.schemas import (
    ModeratorActionCreate, ModeratorActionResponse, ModerationStats, ActionTypeCount,
    ReportCreate, ReportResponse
)
from app.core.clock import utc_now
from typing import List, Optional, Dict, Any
from fastapi import HTTPException
from datetime import datetime, timedelta
import logging

logger = logging.getLogger(__name__)

# tables whose rows can be hidden or restored through approve / reject
MODERATED_TABLES = ("polls", "poll_comments", "trivia_questions")
TIMEFRAME_DAYS = {"day": 1, "week": 7, "month": 30}
REPORTABLE_TABLES = {"poll": "polls", "comment": "poll_comments"}
OPEN_REPORT_STATUSES = ["pending", "reviewed"]


class ModerationService:
    def __init__(self, supabase: Client):
        self.supabase = supabase

    def record_action(self, moderator_id: str, action: ModeratorActionCreate) -> ModeratorActionResponse:
        try:
            result = self.supabase.table("moderator_actions").insert({
                "moderator_id": moderator_id,
                "action_type": action.action_type,
                "target_id": action.target_id,
                "target_table": action.target_table,
                "reason": action.reason,
                "metadata": action.metadata,
            }).execute()
            if not result.data:
                raise HTTPException(status_code=500, detail="Failed to record moderator action")
            logger.info(f"Moderator {moderator_id}: {action.action_type} on {action.target_table}/{action.target_id}")
            return ModeratorActionResponse(**result.data[0])
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def list_actions(
        self,
        moderator_id: Optional[str] = None,
        action_type: Optional[str] = None,
        target_table: Optional[str] = None,
        start_date: Optional[str] = None,
        end_date: Optional[str] = None,
        limit: int = 50
    ) -> List[ModeratorActionResponse]:
        try:
            query = self.supabase.table("moderator_actions").select("*")
            if moderator_id:
                query = query.eq("moderator_id", moderator_id)
            if action_type:
                query = query.eq("action_type", action_type)
            if target_table:
                query = query.eq("target_table", target_table)
            if start_date:
                query = query.gte("created_at", start_date)
            if end_date:
                query = query.lte("created_at", end_date)
            result = query.order("created_at", desc=True).limit(limit).execute()
            return [ModeratorActionResponse(**a) for a in (result.data or [])]
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def _set_content_active(self, target_table: str, target_id: str, is_active: bool) -> None:
        if target_table not in MODERATED_TABLES:
            return
        result = self.supabase.table(target_table)\
            .update({"is_active": is_active, "updated_at": datetime.utcnow().isoformat()})\
            .eq("id", target_id)\
            .execute()
        if not result.data:
            raise HTTPException(status_code=404, detail="Content not found")

    def approve_content(self, moderator_id: str, target_id: str, target_table: str, reason: Optional[str] = None) -> ModeratorActionResponse:
        try:
            self._set_content_active(target_table, target_id, True)
            return self.record_action(moderator_id, ModeratorActionCreate(
                action_type="approve",
                target_id=target_id,
                target_table=target_table,
                reason=reason,
                metadata={"approved": True},
            ))
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def reject_content(self, moderator_id: str, target_id: str, target_table: str, reason: Optional[str] = None) -> ModeratorActionResponse:
        try:
            self._set_content_active(target_table, target_id, False)
            return self.record_action(moderator_id, ModeratorActionCreate(
                action_type="reject",
                target_id=target_id,
                target_table=target_table,
                reason=reason,
                metadata={"approved": False},
            ))
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def _set_suspended(self, moderator_id: str, user_id: str, suspended: bool) -> None:
        if user_id == moderator_id:
            raise HTTPException(status_code=400, detail="You cannot change your own suspension")
        result = self.supabase.table("profiles")\
            .update({"is_suspended": suspended, "updated_at": datetime.utcnow().isoformat()})\
            .eq("id", user_id)\
            .execute()
        if not result.data:
            raise HTTPException(status_code=404, detail="Profile not found")

    def ban_user(self, moderator_id: str, user_id: str, reason: str, duration: Optional[str] = None) -> ModeratorActionResponse:
        """Suspend the account; suspended users are refused by every authenticated route"""
        try:
            self._set_suspended(moderator_id, user_id, True)
            return self.record_action(moderator_id, ModeratorActionCreate(
                action_type="ban",
                target_id=user_id,
                target_table="profiles",
                reason=reason,
                metadata={"duration": duration, "banned": True},
            ))
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def unban_user(self, moderator_id: str, user_id: str, reason: Optional[str] = None) -> ModeratorActionResponse:
        try:
            self._set_suspended(moderator_id, user_id, False)
            return self.record_action(moderator_id, ModeratorActionCreate(
                action_type="unban",
                target_id=user_id,
                target_table="profiles",
                reason=reason,
                metadata={"banned": False},
            ))
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def get_stats(self, moderator_id: Optional[str] = None, timeframe: str = "month") -> ModerationStats:
        try:
            if timeframe not in TIMEFRAME_DAYS:
                raise HTTPException(status_code=400, detail=f"timeframe must be one of {', '.join(TIMEFRAME_DAYS)}")
            since = utc_now() - timedelta(days=TIMEFRAME_DAYS[timeframe])
            query = self.supabase.table("moderator_actions")\
                .select("action_type")\
                .gte("created_at", since.isoformat())
            if moderator_id:
                query = query.eq("moderator_id", moderator_id)
            actions = query.execute().data or []

            counts: Dict[str, int] = {}
            for action in actions:
                counts[action["action_type"]] = counts.get(action["action_type"], 0) + 1
            by_type = sorted(counts.items(), key=lambda item: item[1], reverse=True)
            return ModerationStats(
                total_actions=len(actions),
                approvals=counts.get("approve", 0),
                rejections=counts.get("reject", 0),
                bans=counts.get("ban", 0),
                actions_by_type=[ActionTypeCount(type=t, count=c) for t, c in by_type],
            )
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    # Content reports

    def create_report(self, reporter_id: str, data: ReportCreate) -> ReportResponse:
        try:
            table = REPORTABLE_TABLES[data.content_type]
            content = self.supabase.table(table)\
                .select("id", count="exact")\
                .eq("id", data.content_id)\
                .execute()
            if not content.count and not content.data:
                raise HTTPException(status_code=404, detail=f"{data.content_type} not found")

            open_report = self.supabase.table("content_reports")\
                .select("id")\
                .eq("reporter_id", reporter_id)\
                .eq("content_type", data.content_type)\
                .eq("content_id", data.content_id)\
                .in_("status", OPEN_REPORT_STATUSES)\
                .execute()
            if open_report.data:
                raise HTTPException(status_code=400, detail="You have already reported this content")

            result = self.supabase.table("content_reports").insert({
                "reporter_id": reporter_id,
                "content_type": data.content_type,
                "content_id": data.content_id,
                "reason": data.reason,
                "status": "pending",
            }).execute()
            if not result.data:
                raise HTTPException(status_code=500, detail="Failed to report content")
            logger.info(f"{data.content_type} {data.content_id} reported by {reporter_id}")
            return ReportResponse(**result.data[0])
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def list_reports(
        self,
        status: Optional[str] = None,
        content_type: Optional[str] = None,
        limit: int = 50,
        offset: int = 0
    ) -> List[ReportResponse]:
        try:
            query = self.supabase.table("content_reports").select("*")
            if status:
                query = query.eq("status", status)
            if content_type:
                query = query.eq("content_type", content_type)
            result = query.order("created_at", desc=True)\
                .range(offset, offset + limit - 1)\
                .execute()
            return [ReportResponse(**r) for r in (result.data or [])]
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def update_report_status(self, moderator_id: str, report_id: str, status: str, notes: Optional[str] = None) -> ReportResponse:
        try:
            update_data: Dict[str, Any] = {
                "status": status,
                "resolved_by": moderator_id,
                "resolution_notes": notes,
                "updated_at": datetime.utcnow().isoformat(),
            }
            result = self.supabase.table("content_reports")\
                .update(update_data)\
                .eq("id", report_id)\
                .execute()
            if not result.data:
                raise HTTPException(status_code=404, detail="Report not found")
            self.record_action(moderator_id, ModeratorActionCreate(
                action_type=f"report_{status}",
                target_id=report_id,
                target_table="content_reports",
                reason=notes,
                metadata={"status": status},
            ))
            return ReportResponse(**result.data[0])
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))
