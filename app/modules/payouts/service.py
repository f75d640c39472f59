from supabase import Client
from app.modules.payouts.schemas import (
    PayoutMethodCreate, PayoutMethodUpdate, PayoutMethodResponse, PayoutRequestCreate,
    PayoutStatusUpdate, PayoutRequestResponse, PayoutRequestListResponse, PayoutStats
)
from app.modules.ambassadors.service import AmbassadorService
from app.modules.profiles.service import ProfileService
from app.core.clock import parse_timestamp
from typing import List, Optional, Dict, Any
from fastapi import HTTPException
from datetime import datetime
import logging

logger = logging.getLogger(__name__)

PAYPAL = "PayPal"
BANK_TRANSFER = "Bank Transfer"


class PayoutService:
    def __init__(self, supabase: Client):
        self.supabase = supabase
        self.ambassadors = AmbassadorService(supabase)
        self.profiles = ProfileService(supabase)

    # Payout methods

    def list_payout_methods(self, include_inactive: bool = False) -> List[PayoutMethodResponse]:
        try:
            query = self.supabase.table("payout_methods").select("*")
            if not include_inactive:
                query = query.eq("is_active", True)
            result = query.order("name").execute()
            return [PayoutMethodResponse(**m) for m in (result.data or [])]
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def create_payout_method(self, data: PayoutMethodCreate) -> PayoutMethodResponse:
        try:
            existing = self.supabase.table("payout_methods")\
                .select("id")\
                .eq("name", data.name)\
                .execute()
            if existing.data:
                raise HTTPException(status_code=400, detail=f"Payout method '{data.name}' already exists")

            result = self.supabase.table("payout_methods").insert(data.model_dump()).execute()
            if not result.data:
                raise HTTPException(status_code=500, detail="Failed to create payout method")
            logger.info(f"Payout method created: {data.name}")
            return PayoutMethodResponse(**result.data[0])
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def update_payout_method(self, method_id: str, data: PayoutMethodUpdate) -> PayoutMethodResponse:
        try:
            update_data = data.model_dump(exclude_unset=True)
            update_data["updated_at"] = datetime.utcnow().isoformat()
            result = self.supabase.table("payout_methods")\
                .update(update_data)\
                .eq("id", method_id)\
                .execute()
            if not result.data:
                raise HTTPException(status_code=404, detail="Payout method not found")
            return PayoutMethodResponse(**result.data[0])
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    # Requests

    def get_payable_balance(self, user_id: str) -> float:
        try:
            return self.ambassadors.get_payable_balance(user_id)
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def request_payout(self, user_id: str, request: PayoutRequestCreate) -> PayoutRequestResponse:
        """
        Queue a payout for admin review.
        The requested amount stays reserved against the balance while the request is pending or approved.
        """
        try:
            if not self.ambassadors.get_ambassador(user_id):
                raise HTTPException(status_code=403, detail="You must be an active ambassador to request payouts")
            if request.amount <= 0:
                raise HTTPException(status_code=400, detail="Payout amount must be greater than zero")

            balance = self.ambassadors.get_payable_balance(user_id)
            if request.amount > balance:
                raise HTTPException(
                    status_code=400,
                    detail=f"Insufficient balance. Your available balance is ${balance:.2f}"
                )

            method = next(
                (m for m in self.list_payout_methods() if m.name == request.payout_method), None
            )
            if not method:
                raise HTTPException(status_code=400, detail="Invalid payout method")

            min_payout = float(method.config.get("min_payout") or 0)
            if request.amount < min_payout:
                raise HTTPException(
                    status_code=400,
                    detail=f"Minimum payout amount for {method.name} is ${min_payout:.2f}"
                )

            profile = self.profiles.get_profile(user_id)
            details = request.payout_details or {}
            paypal_email = details.get("paypal_email") or profile.paypal_email
            bank_details = details.get("bank_details") or profile.bank_details

            requires_email = method.config.get("requires_email", method.name == PAYPAL)
            if requires_email and not paypal_email:
                raise HTTPException(status_code=400, detail="PayPal email is required for PayPal payouts")
            requires_bank = method.config.get("requires_bank_details", method.name == BANK_TRANSFER)
            if requires_bank and not bank_details:
                raise HTTPException(status_code=400, detail="Bank details are required for bank transfers")

            payout_details: Dict[str, Any] = {
                **details,
                "paypal_email": paypal_email,
                "bank_details": bank_details,
                "user_name": profile.name,
                "user_email": profile.email,
                "user_country": profile.country,
            }
            result = self.supabase.table("payout_requests").insert({
                "user_id": user_id,
                "amount": request.amount,
                "payout_method": method.name,
                "payout_details": payout_details,
                "status": "pending",
                "requested_at": datetime.utcnow().isoformat(),
            }).execute()
            if not result.data:
                raise HTTPException(status_code=500, detail="Failed to create payout request")
            logger.info(f"Payout of ${request.amount:.2f} via {method.name} requested by {user_id}")
            return PayoutRequestResponse(**result.data[0])
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def list_payout_requests(
        self,
        user_id: Optional[str] = None,
        status: Optional[str] = None,
        limit: int = 50,
        offset: int = 0
    ) -> PayoutRequestListResponse:
        try:
            query = self.supabase.table("payout_requests").select("*", count="exact")
            if user_id:
                query = query.eq("user_id", user_id)
            if status:
                query = query.eq("status", status)
            result = query.order("requested_at", desc=True)\
                .range(offset, offset + limit - 1)\
                .execute()
            items = [PayoutRequestResponse(**r) for r in (result.data or [])]
            return PayoutRequestListResponse(items=items, total=result.count or len(items))
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def update_payout_status(self, admin_id: str, request_id: str, data: PayoutStatusUpdate) -> PayoutRequestResponse:
        try:
            existing = self.supabase.table("payout_requests")\
                .select("*")\
                .eq("id", request_id)\
                .maybe_single()\
                .execute()
            if not existing or not existing.data:
                raise HTTPException(status_code=404, detail="Payout request not found")
            payout = existing.data
            if payout["status"] == "processed":
                raise HTTPException(status_code=400, detail="Payout request has already been processed")

            now = datetime.utcnow().isoformat()
            update_data: Dict[str, Any] = {
                "status": data.status,
                "admin_notes": data.admin_notes,
                "updated_at": now,
            }
            if data.status == "processed":
                update_data["processed_at"] = now
                update_data["processed_by"] = admin_id
                update_data["transaction_id"] = data.transaction_id

                ambassador = self.ambassadors.get_ambassador(payout["user_id"], active_only=False)
                if not ambassador:
                    raise HTTPException(status_code=404, detail="Ambassador not found")
                self.supabase.table("ambassadors")\
                    .update({
                        "total_payouts": round(ambassador.total_payouts + float(payout["amount"]), 2),
                        "updated_at": now,
                    })\
                    .eq("user_id", payout["user_id"])\
                    .execute()

            result = self.supabase.table("payout_requests")\
                .update(update_data)\
                .eq("id", request_id)\
                .execute()
            if not result.data:
                raise HTTPException(status_code=500, detail="Failed to update payout request")
            logger.info(f"Payout request {request_id} marked {data.status} by {admin_id}")
            return PayoutRequestResponse(**result.data[0])
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def get_payout_stats(self) -> PayoutStats:
        try:
            rows = self.supabase.table("payout_requests")\
                .select("amount, status, requested_at, processed_at")\
                .in_("status", ["pending", "processed"])\
                .execute().data or []

            processed = [r for r in rows if r["status"] == "processed"]
            pending = [r for r in rows if r["status"] == "pending"]
            total_amount = sum(float(r["amount"] or 0) for r in processed)
            pending_amount = sum(float(r["amount"] or 0) for r in pending)

            hours = []
            for r in processed:
                if r.get("requested_at") and r.get("processed_at"):
                    elapsed = parse_timestamp(r["processed_at"]) - parse_timestamp(r["requested_at"])
                    hours.append(elapsed.total_seconds() / 3600)

            return PayoutStats(
                total_processed=len(processed),
                total_pending=len(pending),
                total_amount=round(total_amount, 2),
                pending_amount=round(pending_amount, 2),
                average_amount=round(total_amount / len(processed), 2) if processed else 0.0,
                average_processing_hours=round(sum(hours) / len(hours), 2) if hours else 0.0,
            )
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))
