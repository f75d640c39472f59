from supabase import Client
from app.modules.promoted_polls.schemas import (
    PromotedPollCreate, PromotedPollUpdate, PromotedPollResponse, PromotedPollListResponse,
    PromotedPollAnalytics, DailyVotes, StatusTransitionResult
)
from app.modules.app_settings.schemas import PromotedPollSettings
from app.modules.app_settings.service import AppSettingsService
from app.modules.payments.service import PaymentService
from app.core.clock import utc_now, parse_timestamp
from typing import List, Optional, Dict, Any
from fastapi import HTTPException
from datetime import datetime, timedelta
import logging

logger = logging.getLogger(__name__)

OPEN_STATUSES = ["pending_approval", "active", "paused"]
EDITABLE_STATUSES = ("pending_approval", "paused")


class PromotedPollService:
    def __init__(self, supabase: Client):
        self.supabase = supabase
        self.app_settings = AppSettingsService(supabase)

    def _get_row(self, promoted_poll_id: str) -> Dict[str, Any]:
        result = self.supabase.table("promoted_polls")\
            .select("*")\
            .eq("id", promoted_poll_id)\
            .maybe_single()\
            .execute()
        if not result or not result.data:
            raise HTTPException(status_code=404, detail="Promoted poll not found")
        return result.data

    def _sponsor_owner(self, sponsor_id: str) -> Optional[str]:
        result = self.supabase.table("sponsors")\
            .select("user_id")\
            .eq("id", sponsor_id)\
            .maybe_single()\
            .execute()
        return result.data["user_id"] if result and result.data else None

    def _owned_row(self, promoted_poll_id: str, user_id: str, is_admin: bool, action: str) -> Dict[str, Any]:
        row = self._get_row(promoted_poll_id)
        if not is_admin and self._sponsor_owner(row["sponsor_id"]) != user_id:
            raise HTTPException(status_code=403, detail=f"You do not have permission to {action} this promoted poll")
        return row

    def _update(self, promoted_poll_id: str, values: Dict[str, Any]) -> PromotedPollResponse:
        values["updated_at"] = datetime.utcnow().isoformat()
        result = self.supabase.table("promoted_polls")\
            .update(values)\
            .eq("id", promoted_poll_id)\
            .execute()
        if not result.data:
            raise HTTPException(status_code=404, detail="Promoted poll not found")
        return PromotedPollResponse(**result.data[0])

    def get_settings(self) -> PromotedPollSettings:
        return self.app_settings.get_promoted_poll_settings()

    def list_promoted_polls(
        self,
        limit: int = 10,
        offset: int = 0,
        status: Optional[str] = None,
        payment_status: Optional[str] = None,
        sponsor_id: Optional[str] = None
    ) -> PromotedPollListResponse:
        try:
            query = self.supabase.table("promoted_polls").select("*", count="exact")
            if status:
                query = query.eq("status", status)
            if payment_status:
                query = query.eq("payment_status", payment_status)
            if sponsor_id:
                query = query.eq("sponsor_id", sponsor_id)
            result = query.order("created_at", desc=True)\
                .range(offset, offset + limit - 1)\
                .execute()
            items = [PromotedPollResponse(**p) for p in (result.data or [])]
            return PromotedPollListResponse(items=items, total=result.count if result.count is not None else len(items))
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def get_promoted_poll(self, promoted_poll_id: str) -> PromotedPollResponse:
        try:
            return PromotedPollResponse(**self._get_row(promoted_poll_id))
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def list_user_promoted_polls(
        self,
        user_id: str,
        status: Optional[str] = None,
        limit: int = 10,
        offset: int = 0
    ) -> PromotedPollListResponse:
        """Promotions of every sponsor the user owns"""
        try:
            sponsors = self.supabase.table("sponsors")\
                .select("id")\
                .eq("user_id", user_id)\
                .execute()
            sponsor_ids = [s["id"] for s in (sponsors.data or [])]
            if not sponsor_ids:
                return PromotedPollListResponse(items=[], total=0)
            query = self.supabase.table("promoted_polls")\
                .select("*", count="exact")\
                .in_("sponsor_id", sponsor_ids)
            if status:
                query = query.eq("status", status)
            result = query.order("created_at", desc=True)\
                .range(offset, offset + limit - 1)\
                .execute()
            items = [PromotedPollResponse(**p) for p in (result.data or [])]
            return PromotedPollListResponse(items=items, total=result.count if result.count is not None else len(items))
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def list_active_promoted_polls(self, limit: int = 5) -> List[PromotedPollResponse]:
        """Running, paid promotions for display next to regular polls"""
        try:
            result = self.supabase.table("promoted_polls")\
                .select("*")\
                .eq("status", "active")\
                .eq("payment_status", "paid")\
                .order("created_at", desc=True)\
                .limit(limit)\
                .execute()
            return [PromotedPollResponse(**p) for p in (result.data or [])]
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def create_promoted_poll(self, user_id: str, data: PromotedPollCreate) -> PromotedPollResponse:
        try:
            settings = self.get_settings()
            if not settings.is_enabled:
                raise HTTPException(status_code=400, detail="Poll promotion is currently disabled")
            if self._sponsor_owner(data.sponsor_id) != user_id:
                raise HTTPException(status_code=403, detail="You do not have permission to create promoted polls for this sponsor")

            poll = self.supabase.table("polls")\
                .select("id")\
                .eq("id", data.poll_id)\
                .eq("is_active", True)\
                .maybe_single()\
                .execute()
            if not poll or not poll.data:
                raise HTTPException(status_code=404, detail="Poll not found or is inactive")

            existing = self.supabase.table("promoted_polls")\
                .select("id", count="exact")\
                .eq("poll_id", data.poll_id)\
                .in_("status", OPEN_STATUSES)\
                .execute()
            if existing.count or existing.data:
                raise HTTPException(status_code=400, detail="This poll is already being promoted")

            total_cost = round(data.target_votes * data.cost_per_vote, 2)
            if data.budget_amount < total_cost:
                raise HTTPException(
                    status_code=400,
                    detail=f"Budget amount ({data.budget_amount}) must be at least equal to target votes * cost per vote ({total_cost})"
                )
            if data.budget_amount < settings.minimum_budget or data.budget_amount > settings.maximum_budget:
                raise HTTPException(
                    status_code=400,
                    detail=f"Budget must be between {settings.minimum_budget} and {settings.maximum_budget}"
                )

            result = self.supabase.table("promoted_polls").insert({
                "poll_id": data.poll_id,
                "sponsor_id": data.sponsor_id,
                "pricing_model": data.pricing_model or "CPV",
                "budget_amount": data.budget_amount,
                "cost_per_vote": data.cost_per_vote,
                "target_votes": data.target_votes,
                "current_votes": 0,
                "status": "pending_approval",
                "payment_status": "pending",
                "start_date": data.start_date.isoformat() if data.start_date else None,
                "end_date": data.end_date.isoformat() if data.end_date else None,
            }).execute()
            if not result.data:
                raise HTTPException(status_code=500, detail="Failed to create promoted poll")
            logger.info(f"Promotion requested for poll {data.poll_id} by sponsor {data.sponsor_id}")
            return PromotedPollResponse(**result.data[0])
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def update_promoted_poll(
        self,
        user_id: str,
        promoted_poll_id: str,
        data: PromotedPollUpdate,
        is_admin: bool = False
    ) -> PromotedPollResponse:
        try:
            row = self._owned_row(promoted_poll_id, user_id, is_admin, "update")
            if row["status"] not in EDITABLE_STATUSES and not is_admin:
                raise HTTPException(status_code=400, detail="This promoted poll cannot be updated in its current state")

            update_data = data.model_dump(exclude_unset=True)
            if not is_admin:
                update_data.pop("admin_notes", None)
            if not update_data:
                raise HTTPException(status_code=400, detail="No fields to update")

            current_votes = row.get("current_votes") or 0
            if "budget_amount" in update_data:
                spent = round(current_votes * row["cost_per_vote"], 2)
                if update_data["budget_amount"] < spent:
                    raise HTTPException(
                        status_code=400,
                        detail=f"Budget amount cannot be less than what's already spent ({spent})"
                    )
            if "target_votes" in update_data and update_data["target_votes"] < current_votes:
                raise HTTPException(
                    status_code=400,
                    detail=f"Target votes cannot be less than current votes ({current_votes})"
                )
            if row.get("payment_status") == "paid" and ("budget_amount" in update_data or "cost_per_vote" in update_data):
                raise HTTPException(
                    status_code=400,
                    detail="Budget and cost per vote cannot be changed after payment has been processed"
                )
            for field in ("start_date", "end_date"):
                if isinstance(update_data.get(field), datetime):
                    update_data[field] = update_data[field].isoformat()
            return self._update(promoted_poll_id, update_data)
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def approve_promoted_poll(self, admin_id: str, promoted_poll_id: str, notes: Optional[str] = None) -> PromotedPollResponse:
        try:
            row = self._get_row(promoted_poll_id)
            if row["status"] != "pending_approval":
                raise HTTPException(status_code=400, detail="Only pending polls can be approved")
            updated = self._update(promoted_poll_id, {
                "status": "active",
                "approved_by": admin_id,
                "approved_at": datetime.utcnow().isoformat(),
                "admin_notes": notes,
            })
            logger.info(f"Promoted poll {promoted_poll_id} approved by {admin_id}")
            return updated
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def reject_promoted_poll(self, admin_id: str, promoted_poll_id: str, notes: Optional[str] = None) -> PromotedPollResponse:
        """Reject a pending promotion; a paid one has its wallet points returned"""
        try:
            row = self._get_row(promoted_poll_id)
            if row["status"] != "pending_approval":
                raise HTTPException(status_code=400, detail="Only pending polls can be rejected")
            values: Dict[str, Any] = {"status": "rejected", "admin_notes": notes}
            if row.get("payment_status") == "paid":
                PaymentService(self.supabase).refund_promoted_poll(promoted_poll_id)
                values["payment_status"] = "refunded"
            updated = self._update(promoted_poll_id, values)
            logger.info(f"Promoted poll {promoted_poll_id} rejected by {admin_id}")
            return updated
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def pause_promoted_poll(self, user_id: str, promoted_poll_id: str, is_admin: bool = False) -> PromotedPollResponse:
        try:
            row = self._owned_row(promoted_poll_id, user_id, is_admin, "pause")
            if row["status"] != "active":
                raise HTTPException(status_code=400, detail="Only active polls can be paused")
            return self._update(promoted_poll_id, {"status": "paused"})
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def resume_promoted_poll(self, user_id: str, promoted_poll_id: str, is_admin: bool = False) -> PromotedPollResponse:
        try:
            row = self._owned_row(promoted_poll_id, user_id, is_admin, "resume")
            if row["status"] != "paused":
                raise HTTPException(status_code=400, detail="Only paused polls can be resumed")
            return self._update(promoted_poll_id, {"status": "active"})
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def _count_vote(self, row: Dict[str, Any]) -> bool:
        """Add one vote to a running promotion; completes it at the target. False when already full."""
        current_votes = row.get("current_votes") or 0
        if current_votes >= row["target_votes"]:
            self._update(row["id"], {"status": "completed"})
            return False
        values: Dict[str, Any] = {"current_votes": current_votes + 1}
        if current_votes + 1 >= row["target_votes"]:
            values["status"] = "completed"
            logger.info(f"Promoted poll {row['id']} reached its target of {row['target_votes']} votes")
        self._update(row["id"], values)
        return True

    def record_vote(self, promoted_poll_id: str) -> bool:
        try:
            result = self.supabase.table("promoted_polls")\
                .select("*")\
                .eq("id", promoted_poll_id)\
                .eq("status", "active")\
                .eq("payment_status", "paid")\
                .maybe_single()\
                .execute()
            if not result or not result.data:
                raise HTTPException(status_code=404, detail="Promoted poll not found or not active")
            return self._count_vote(result.data)
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def record_poll_vote(self, poll_id: str) -> bool:
        """Count a vote cast on poll_id toward its running promotion, if it has one"""
        try:
            result = self.supabase.table("promoted_polls")\
                .select("*")\
                .eq("poll_id", poll_id)\
                .eq("status", "active")\
                .eq("payment_status", "paid")\
                .limit(1)\
                .execute()
            if not result.data:
                return False
            return self._count_vote(result.data[0])
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def get_analytics(self, user_id: str, promoted_poll_id: str, is_admin: bool = False, days: int = 7) -> PromotedPollAnalytics:
        try:
            row = self._owned_row(promoted_poll_id, user_id, is_admin, "view analytics for")
            votes = row.get("current_votes") or 0
            target = row["target_votes"]
            spent = round(votes * row["cost_per_vote"], 2)

            today = utc_now().date()
            first_day = today - timedelta(days=days - 1)
            recent = self.supabase.table("poll_votes")\
                .select("created_at")\
                .eq("poll_id", row["poll_id"])\
                .gte("created_at", first_day.isoformat())\
                .execute()
            per_day: Dict[str, int] = {}
            for vote in recent.data or []:
                voted_at = parse_timestamp(vote.get("created_at"))
                if voted_at:
                    key = voted_at.date().isoformat()
                    per_day[key] = per_day.get(key, 0) + 1
            daily_votes = []
            for offset in range(days):
                day = (first_day + timedelta(days=offset)).isoformat()
                daily_votes.append(DailyVotes(date=day, votes=per_day.get(day, 0)))

            return PromotedPollAnalytics(
                promoted_poll_id=promoted_poll_id,
                votes=votes,
                target_votes=target,
                completion_rate=round(votes / target * 100, 2) if target else 0,
                cost_per_vote=row["cost_per_vote"],
                spent_budget=spent,
                remaining_budget=round(row["budget_amount"] - spent, 2),
                daily_votes=daily_votes,
            )
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def run_status_transitions(self, now: Optional[datetime] = None) -> StatusTransitionResult:
        """
        Complete promotions past end_date or at target. Polls themselves are left untouched.

        Called periodically by the status scheduler.
        """
        now = now or utc_now()
        outcome = StatusTransitionResult()

        running = self.supabase.table("promoted_polls")\
            .select("*")\
            .eq("status", "active")\
            .execute()
        for row in running.data or []:
            end_date = parse_timestamp(row.get("end_date"))
            expired = end_date is not None and end_date < now
            full = (row.get("current_votes") or 0) >= row["target_votes"]
            if expired or full:
                self._update(row["id"], {"status": "completed"})
                outcome.completed_promotions += 1
                logger.info(f"Promoted poll {row['id']} completed ({'ended' if expired else 'target reached'})")
        return outcome
