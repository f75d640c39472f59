from supabase import Client
from app.config.settings import settings
from app.modules.store.schemas import (
    StoreItemCreate, StoreItemUpdate, StoreItemResponse, RedeemRequest, RedeemResult,
    RedemptionResponse, RedemptionStatusUpdate
)
from app.modules.profiles.service import ProfileService
from app.modules.app_settings.service import AppSettingsService
from app.modules.rewards.history import record_reward_history
from app.core.scoring import round_half_up
from typing import List, Optional, Dict, Any
from fastapi import HTTPException
from datetime import datetime
import logging

logger = logging.getLogger(__name__)


class StoreService:
    def __init__(self, supabase: Client):
        self.supabase = supabase
        self.profiles = ProfileService(supabase)
        self.app_settings = AppSettingsService(supabase)

    def _convert_cost(self, points_cost: int, from_currency: str, to_currency: str) -> int:
        """Points cost re-quoted in another currency; unchanged when no rate is stored"""
        rate = self.app_settings.get_exchange_rate(from_currency, to_currency)
        if rate is None:
            logger.warning(f"No exchange rate {from_currency}->{to_currency}, using original cost")
            return points_cost
        return round_half_up(points_cost * rate)

    def _with_currency(self, item: Dict[str, Any], currency: Optional[str]) -> StoreItemResponse:
        item_currency = item.get("currency") or settings.default_currency
        if not currency or currency.upper() == item_currency:
            return StoreItemResponse(**{**item, "currency": item_currency})
        return StoreItemResponse(**{
            **item,
            "points_cost": self._convert_cost(item["points_cost"], item_currency, currency.upper()),
            "currency": currency.upper(),
            "original_currency": item_currency,
            "original_points_cost": item["points_cost"],
        })

    def list_items(
        self,
        item_type: Optional[str] = None,
        min_points: Optional[int] = None,
        max_points: Optional[int] = None,
        in_stock: bool = False,
        currency: Optional[str] = None,
        limit: int = 50
    ) -> List[StoreItemResponse]:
        """Active items, cheapest first; costs re-quoted in `currency` when given"""
        try:
            query = self.supabase.table("reward_store_items")\
                .select("*")\
                .eq("is_active", True)
            if item_type:
                query = query.eq("item_type", item_type)
            if min_points is not None:
                query = query.gte("points_cost", min_points)
            if max_points is not None:
                query = query.lte("points_cost", max_points)
            if in_stock:
                query = query.or_("stock_quantity.gt.0,stock_quantity.is.null")
            result = query.order("points_cost").limit(limit).execute()
            return [self._with_currency(item, currency) for item in (result.data or [])]
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def get_item(self, item_id: str, active_only: bool = True) -> Dict[str, Any]:
        query = self.supabase.table("reward_store_items")\
            .select("*")\
            .eq("id", item_id)
        if active_only:
            query = query.eq("is_active", True)
        result = query.maybe_single().execute()
        if not result or not result.data:
            raise HTTPException(status_code=404, detail="Item not found or no longer available")
        return result.data

    def create_item(self, item_data: StoreItemCreate) -> StoreItemResponse:
        try:
            payload = item_data.model_dump()
            payload["currency"] = payload["currency"].upper()
            result = self.supabase.table("reward_store_items").insert(payload).execute()
            if not result.data:
                raise HTTPException(status_code=500, detail="Failed to create store item")
            return StoreItemResponse(**result.data[0])
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def update_item(self, item_id: str, item_data: StoreItemUpdate) -> StoreItemResponse:
        try:
            update_data = item_data.model_dump(exclude_unset=True)
            if not update_data:
                raise HTTPException(status_code=400, detail="No fields to update")
            if update_data.get("currency"):
                update_data["currency"] = update_data["currency"].upper()
            update_data["updated_at"] = datetime.utcnow().isoformat()
            result = self.supabase.table("reward_store_items")\
                .update(update_data)\
                .eq("id", item_id)\
                .execute()
            if not result.data:
                raise HTTPException(status_code=404, detail="Store item not found")
            return StoreItemResponse(**result.data[0])
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def redeem_item(self, user_id: str, request: RedeemRequest) -> RedeemResult:
        """
        Redeem a store item for points.

        The cost is converted into the user's currency, checked against their
        balance and the item stock, then deducted. If the redemption row cannot
        be written the points are refunded.
        """
        try:
            profile = self.profiles.get_profile(user_id)
            user_currency = profile.currency or settings.default_currency
            item = self.get_item(request.item_id)
            item_currency = item.get("currency") or settings.default_currency

            points_cost = item["points_cost"]
            if item_currency != user_currency:
                points_cost = self._convert_cost(points_cost, item_currency, user_currency)

            if profile.points < points_cost:
                raise HTTPException(
                    status_code=400,
                    detail=f"Insufficient points. You have {profile.points} points, but this item costs {points_cost} points."
                )
            if item.get("stock_quantity") is not None and item["stock_quantity"] <= 0:
                raise HTTPException(status_code=400, detail="This item is out of stock")

            new_balance = self.profiles.update_user_points(user_id, -points_cost)

            try:
                record = self.supabase.table("redeemed_items").insert({
                    "user_id": user_id,
                    "item_id": request.item_id,
                    "item_name": item["name"],
                    "points_cost": points_cost,
                    "fulfillment_details": request.fulfillment_details,
                    "status": "pending_fulfillment",
                }).execute()
                if not record.data:
                    raise HTTPException(status_code=500, detail="Failed to record redemption")
            except Exception:
                self.profiles.update_user_points(user_id, points_cost)
                logger.error(f"Redemption of {request.item_id} by {user_id} failed; refunded {points_cost} points")
                raise

            if item.get("stock_quantity") is not None:
                self.supabase.table("reward_store_items")\
                    .update({
                        "stock_quantity": item["stock_quantity"] - 1,
                        "updated_at": datetime.utcnow().isoformat(),
                    })\
                    .eq("id", request.item_id)\
                    .execute()

            record_reward_history(self.supabase, user_id, "redemption", -points_cost, {
                "redemption_type": "store_item",
                "item_id": request.item_id,
                "item_name": item["name"],
                "currency": item_currency,
                "user_currency": user_currency,
            })
            logger.info(f"User {user_id} redeemed {item['name']} for {points_cost} points")

            return RedeemResult(
                message=f"Successfully redeemed {item['name']} for {points_cost} points!",
                points_cost=points_cost,
                new_points_balance=new_balance,
                redeemed_item_id=record.data[0]["id"],
            )
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def list_redemptions(
        self,
        user_id: Optional[str] = None,
        status: Optional[str] = None,
        limit: int = 50
    ) -> List[RedemptionResponse]:
        """Redemptions of one user, or of everyone when user_id is None (admin)"""
        try:
            query = self.supabase.table("redeemed_items").select("*")
            if user_id:
                query = query.eq("user_id", user_id)
            if status:
                query = query.eq("status", status)
            result = query.order("created_at", desc=True).limit(limit).execute()
            return [RedemptionResponse(**r) for r in (result.data or [])]
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def update_redemption_status(self, redemption_id: str, update: RedemptionStatusUpdate) -> RedemptionResponse:
        """Fulfil or cancel a pending redemption; cancelling refunds the points and restocks the item"""
        try:
            current = self.supabase.table("redeemed_items")\
                .select("*")\
                .eq("id", redemption_id)\
                .maybe_single()\
                .execute()
            if not current or not current.data:
                raise HTTPException(status_code=404, detail="Redemption not found")
            redemption = current.data
            if redemption["status"] != "pending_fulfillment" and update.status != redemption["status"]:
                raise HTTPException(status_code=400, detail=f"Redemption is already {redemption['status']}")

            update_data = {"status": update.status, "updated_at": datetime.utcnow().isoformat()}
            if update.admin_notes is not None:
                update_data["admin_notes"] = update.admin_notes
            result = self.supabase.table("redeemed_items")\
                .update(update_data)\
                .eq("id", redemption_id)\
                .execute()
            if not result.data:
                raise HTTPException(status_code=404, detail="Redemption not found")

            if update.status == "cancelled" and redemption["status"] == "pending_fulfillment":
                self.profiles.update_user_points(redemption["user_id"], redemption["points_cost"])
                item = self.get_item(redemption["item_id"], active_only=False)
                if item.get("stock_quantity") is not None:
                    self.supabase.table("reward_store_items")\
                        .update({"stock_quantity": item["stock_quantity"] + 1})\
                        .eq("id", redemption["item_id"])\
                        .execute()
                logger.info(f"Redemption {redemption_id} cancelled; refunded {redemption['points_cost']} points")

            return RedemptionResponse(**result.data[0])
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))
