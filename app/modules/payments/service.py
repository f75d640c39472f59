from supabase import Client
from app.config.settings import settings
from app.modules.payments.schemas import (
    WalletPaymentRequest, TransactionCreate, TransactionStatusUpdate,
    TransactionResponse, TransactionListResponse
)
from app.modules.profiles.service import ProfileService
from app.modules.app_settings.service import AppSettingsService
from app.core.scoring import round_half_up
from typing import Optional, Dict, Any
from fastapi import HTTPException
from datetime import datetime
import logging

logger = logging.getLogger(__name__)


class PaymentService:
    def __init__(self, supabase: Client):
        self.supabase = supabase
        self.profiles = ProfileService(supabase)
        self.app_settings = AppSettingsService(supabase)

    def _converted(self, amount: float, currency: str, user_currency: str) -> tuple:
        """(amount in the user's currency, exchange rate used); unknown rates leave the amount as is"""
        rate = self.app_settings.get_exchange_rate(currency, user_currency)
        if rate is None:
            logger.warning(f"No exchange rate {currency}->{user_currency}, using amount unconverted")
            return amount, 1.0
        return amount * rate, rate

    def _payable_promoted_poll(self, user_id: str, promoted_poll_id: str) -> Dict[str, Any]:
        promoted = self.supabase.table("promoted_polls")\
            .select("*")\
            .eq("id", promoted_poll_id)\
            .maybe_single()\
            .execute()
        if not promoted or not promoted.data:
            raise HTTPException(status_code=404, detail="Promoted poll not found")
        sponsor = self.supabase.table("sponsors")\
            .select("user_id")\
            .eq("id", promoted.data["sponsor_id"])\
            .maybe_single()\
            .execute()
        if not sponsor or not sponsor.data or sponsor.data["user_id"] != user_id:
            raise HTTPException(status_code=403, detail="You do not have permission to pay for this promoted poll")
        if promoted.data.get("payment_status") == "paid":
            raise HTTPException(status_code=400, detail="Payment has already been processed for this promoted poll")
        return promoted.data

    def process_wallet_payment(self, user_id: str, payment: WalletPaymentRequest) -> TransactionResponse:
        """
        Pay from the user's points balance.

        The amount is converted into the profile currency, then priced at
        points_to_usd_conversion points per unit. Points are refunded if the
        transaction row cannot be written.
        """
        try:
            if payment.promoted_poll_id:
                self._payable_promoted_poll(user_id, payment.promoted_poll_id)

            conversion = self.app_settings.get_promoted_poll_settings().points_to_usd_conversion
            profile = self.profiles.get_profile(user_id)
            currency = payment.currency.upper()
            user_currency = (profile.currency or settings.default_currency).upper()
            converted_amount, exchange_rate = self._converted(payment.amount, currency, user_currency)
            points_needed = round_half_up(converted_amount * conversion)

            if profile.points < points_needed:
                raise HTTPException(
                    status_code=400,
                    detail=f"Insufficient points. You need {points_needed} points ({profile.points} available)."
                )

            self.profiles.update_user_points(user_id, -points_needed)
            try:
                result = self.supabase.table("transactions").insert({
                    "user_id": user_id,
                    "promoted_poll_id": payment.promoted_poll_id,
                    "amount": payment.amount,
                    "currency": currency,
                    "original_amount": round(converted_amount, 2),
                    "original_currency": user_currency,
                    "payment_method": "wallet",
                    "status": "completed",
                    "metadata": {
                        "points_used": points_needed,
                        "conversion_rate": conversion,
                        "exchange_rate": exchange_rate,
                    },
                }).execute()
                if not result.data:
                    raise HTTPException(status_code=500, detail="Failed to record transaction")
            except Exception:
                self.profiles.update_user_points(user_id, points_needed)
                logger.error(f"Refunded {points_needed} points to {user_id} after failed wallet payment")
                raise

            if payment.promoted_poll_id:
                self.supabase.table("promoted_polls")\
                    .update({"payment_status": "paid", "updated_at": datetime.utcnow().isoformat()})\
                    .eq("id", payment.promoted_poll_id)\
                    .execute()
            logger.info(f"Wallet payment by {user_id}: {payment.amount} {currency} for {points_needed} points")
            return TransactionResponse(**result.data[0])
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def create_transaction(self, user_id: str, data: TransactionCreate) -> TransactionResponse:
        """Pending transaction for an external gateway payment"""
        try:
            profile = self.profiles.get_profile(user_id)
            currency = data.currency.upper()
            user_currency = (profile.currency or settings.default_currency).upper()
            converted_amount, _ = self._converted(data.amount, currency, user_currency)
            result = self.supabase.table("transactions").insert({
                "user_id": user_id,
                "promoted_poll_id": data.promoted_poll_id,
                "amount": data.amount,
                "currency": currency,
                "original_amount": round(converted_amount, 2),
                "original_currency": user_currency,
                "payment_method": data.payment_method,
                "status": "pending",
                "metadata": data.metadata,
            }).execute()
            if not result.data:
                raise HTTPException(status_code=500, detail="Failed to create transaction")
            return TransactionResponse(**result.data[0])
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def update_transaction_status(self, transaction_id: str, data: TransactionStatusUpdate) -> TransactionResponse:
        try:
            update_data: Dict[str, Any] = {
                "status": data.status,
                "updated_at": datetime.utcnow().isoformat(),
            }
            if data.gateway_transaction_id:
                update_data["gateway_transaction_id"] = data.gateway_transaction_id
            result = self.supabase.table("transactions")\
                .update(update_data)\
                .eq("id", transaction_id)\
                .execute()
            if not result.data:
                raise HTTPException(status_code=404, detail="Transaction not found")
            logger.info(f"Transaction {transaction_id} marked {data.status}")
            return TransactionResponse(**result.data[0])
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def refund_promoted_poll(self, promoted_poll_id: str) -> int:
        """Return wallet points spent on a promotion; returns the number of points refunded"""
        try:
            result = self.supabase.table("transactions")\
                .select("*")\
                .eq("promoted_poll_id", promoted_poll_id)\
                .eq("payment_method", "wallet")\
                .eq("status", "completed")\
                .execute()
            refunded = 0
            for transaction in result.data or []:
                points = int((transaction.get("metadata") or {}).get("points_used") or 0)
                if points:
                    self.profiles.update_user_points(transaction["user_id"], points)
                    refunded += points
                self.supabase.table("transactions")\
                    .update({"status": "refunded", "updated_at": datetime.utcnow().isoformat()})\
                    .eq("id", transaction["id"])\
                    .execute()
            if refunded:
                logger.info(f"Refunded {refunded} points for promoted poll {promoted_poll_id}")
            return refunded
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def list_transactions(
        self,
        user_id: Optional[str] = None,
        limit: int = 50,
        offset: int = 0,
        status: Optional[str] = None,
        payment_method: Optional[str] = None,
        currency: Optional[str] = None
    ) -> TransactionListResponse:
        """Transactions newest first; all users when user_id is None"""
        try:
            query = self.supabase.table("transactions").select("*", count="exact")
            if user_id:
                query = query.eq("user_id", user_id)
            if status:
                query = query.eq("status", status)
            if payment_method:
                query = query.eq("payment_method", payment_method)
            if currency:
                query = query.eq("currency", currency.upper())
            result = query.order("created_at", desc=True)\
                .range(offset, offset + limit - 1)\
                .execute()
            items = [TransactionResponse(**t) for t in (result.data or [])]
            return TransactionListResponse(items=items, total=result.count if result.count is not None else len(items))
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))
