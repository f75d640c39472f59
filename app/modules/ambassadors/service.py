from supabase import Client
from app.modules.ambassadors.schemas import (
    AmbassadorCreate, AmbassadorUpdate, AmbassadorResponse, CountryMetricResponse, TopCountry,
    CommissionTierCreate, CommissionTierUpdate, CommissionTierResponse, TierInfo,
    AmbassadorStats, AmbassadorDashboard
)
from app.config.rewards_config import DEFAULT_COMMISSION_TIERS
from app.core.scoring import resolve_commission_tier, payable_balance
from app.core.clock import utc_today
from typing import List, Optional
from fastapi import HTTPException
from datetime import datetime, date
import logging

logger = logging.getLogger(__name__)

TOP_COUNTRY_METRICS = ("ad_revenue", "user_count", "new_users")
AMBASSADOR_ORDER_FIELDS = ("total_earnings", "total_referrals", "created_at")


def _month_bounds(today: date) -> tuple:
    start = today.replace(day=1)
    if start.month == 12:
        end = start.replace(year=start.year + 1, month=1)
    else:
        end = start.replace(month=start.month + 1)
    return start.isoformat(), end.isoformat()


class AmbassadorService:
    def __init__(self, supabase: Client):
        self.supabase = supabase

    def get_ambassador(self, user_id: str, active_only: bool = True) -> Optional[AmbassadorResponse]:
        """Ambassador row for a user, None when the user is not an (active) ambassador"""
        try:
            query = self.supabase.table("ambassadors")\
                .select("*")\
                .eq("user_id", user_id)
            if active_only:
                query = query.eq("is_active", True)
            result = query.maybe_single().execute()
            if not result or not result.data:
                return None
            return AmbassadorResponse(**result.data)
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def require_ambassador(self, user_id: str) -> AmbassadorResponse:
        ambassador = self.get_ambassador(user_id)
        if not ambassador:
            raise HTTPException(status_code=404, detail="Ambassador not found")
        return ambassador

    def create_ambassador(self, data: AmbassadorCreate) -> AmbassadorResponse:
        """Enrol a user as ambassador and switch the profile role"""
        try:
            if self.get_ambassador(data.user_id, active_only=False):
                raise HTTPException(status_code=400, detail="User is already an ambassador")
            country = data.country.upper()
            rate = data.commission_rate
            if rate is None:
                rate = resolve_commission_tier(self.list_commission_tiers(), 0, country)["commission_rate"]
            result = self.supabase.table("ambassadors").insert({
                "user_id": data.user_id,
                "country": country,
                "commission_rate": rate,
                "total_referrals": 0,
                "total_earnings": 0,
                "total_payouts": 0,
                "is_active": True,
            }).execute()
            if not result.data:
                raise HTTPException(status_code=500, detail="Failed to create ambassador")
            self.supabase.table("profiles")\
                .update({"role": "ambassador"})\
                .eq("id", data.user_id)\
                .execute()
            logger.info(f"User {data.user_id} enrolled as ambassador for {country}")
            return AmbassadorResponse(**result.data[0])
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def update_ambassador(self, user_id: str, data: AmbassadorUpdate) -> AmbassadorResponse:
        try:
            update_data = data.model_dump(exclude_unset=True, exclude_none=True)
            if "country" in update_data:
                update_data["country"] = update_data["country"].upper()
            update_data["updated_at"] = datetime.utcnow().isoformat()
            result = self.supabase.table("ambassadors")\
                .update(update_data)\
                .eq("user_id", user_id)\
                .execute()
            if not result.data:
                raise HTTPException(status_code=404, detail="Ambassador not found")
            return AmbassadorResponse(**result.data[0])
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def list_ambassadors(
        self,
        limit: int = 50,
        country: Optional[str] = None,
        is_active: Optional[bool] = None,
        order_by: str = "total_earnings",
        order: str = "desc"
    ) -> List[AmbassadorResponse]:
        try:
            if order_by not in AMBASSADOR_ORDER_FIELDS:
                raise HTTPException(status_code=400, detail=f"order_by must be one of {', '.join(AMBASSADOR_ORDER_FIELDS)}")
            query = self.supabase.table("ambassadors").select("*")
            if country:
                query = query.eq("country", country.upper())
            if is_active is not None:
                query = query.eq("is_active", is_active)
            result = query.order(order_by, desc=(order != "asc")).limit(limit).execute()
            return [AmbassadorResponse(**a) for a in (result.data or [])]
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def get_country_metrics(
        self,
        country: str,
        start_date: Optional[str] = None,
        end_date: Optional[str] = None,
        limit: int = 30
    ) -> List[CountryMetricResponse]:
        try:
            query = self.supabase.table("country_metrics")\
                .select("*")\
                .eq("country", country.upper())
            if start_date:
                query = query.gte("metric_date", start_date)
            if end_date:
                query = query.lte("metric_date", end_date)
            result = query.order("metric_date", desc=True).limit(limit).execute()
            return [CountryMetricResponse(**m) for m in (result.data or [])]
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def get_top_countries(self, metric: str = "ad_revenue", limit: int = 10, metric_date: Optional[str] = None) -> List[TopCountry]:
        """Countries ranked by one metric for a single day (today by default)"""
        try:
            if metric not in TOP_COUNTRY_METRICS:
                raise HTTPException(status_code=400, detail=f"metric must be one of {', '.join(TOP_COUNTRY_METRICS)}")
            result = self.supabase.table("country_metrics")\
                .select(f"country, {metric}")\
                .eq("metric_date", metric_date or utc_today())\
                .order(metric, desc=True)\
                .limit(limit)\
                .execute()
            return [TopCountry(country=r["country"], value=r.get(metric) or 0) for r in (result.data or [])]
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def list_commission_tiers(self, include_inactive: bool = False) -> List[dict]:
        """Tier rows ordered by min_referrals; built-in tiers when the table is empty"""
        try:
            query = self.supabase.table("ambassador_commission_tiers").select("*")
            if not include_inactive:
                query = query.eq("is_active", True)
            result = query.order("min_referrals").execute()
            if result.data:
                return result.data
        except Exception as e:
            logger.error(f"Error loading commission tiers: {e}")
        return [{**t, "is_active": True} for t in DEFAULT_COMMISSION_TIERS]

    def create_commission_tier(self, data: CommissionTierCreate) -> CommissionTierResponse:
        try:
            result = self.supabase.table("ambassador_commission_tiers").insert(data.model_dump()).execute()
            if not result.data:
                raise HTTPException(status_code=500, detail="Failed to create commission tier")
            return CommissionTierResponse(**result.data[0])
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def update_commission_tier(self, tier_id: str, data: CommissionTierUpdate) -> CommissionTierResponse:
        try:
            update_data = data.model_dump(exclude_unset=True, exclude_none=True)
            if not update_data:
                raise HTTPException(status_code=400, detail="No fields to update")
            result = self.supabase.table("ambassador_commission_tiers")\
                .update(update_data)\
                .eq("id", tier_id)\
                .execute()
            if not result.data:
                raise HTTPException(status_code=404, detail="Commission tier not found")
            return CommissionTierResponse(**result.data[0])
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def get_tier_info(self, ambassador: AmbassadorResponse) -> TierInfo:
        return TierInfo(**resolve_commission_tier(
            self.list_commission_tiers(), ambassador.total_referrals, ambassador.country
        ))

    def get_pending_payout_total(self, user_id: str) -> float:
        result = self.supabase.table("payout_requests")\
            .select("amount")\
            .eq("user_id", user_id)\
            .in_("status", ["pending", "approved"])\
            .execute()
        return sum(float(r.get("amount") or 0) for r in (result.data or []))

    def get_payable_balance(self, user_id: str) -> float:
        ambassador = self.require_ambassador(user_id)
        return payable_balance(
            ambassador.total_earnings, ambassador.total_payouts, self.get_pending_payout_total(user_id)
        )

    def get_ambassador_stats(self, user_id: str) -> AmbassadorStats:
        try:
            ambassador = self.require_ambassador(user_id)

            month_start, next_month = _month_bounds(datetime.utcnow().date())
            metrics = self.supabase.table("country_metrics")\
                .select("ad_revenue")\
                .eq("country", ambassador.country)\
                .gte("metric_date", month_start)\
                .lt("metric_date", next_month)\
                .execute()
            monthly_revenue = sum(float(m.get("ad_revenue") or 0) for m in (metrics.data or []))
            monthly_earnings = round(monthly_revenue * ambassador.commission_rate / 100, 2)

            conversion_rate = min(ambassador.total_referrals / 100 * 100, 100) if ambassador.total_referrals > 0 else 0

            ahead = self.supabase.table("ambassadors")\
                .select("id", count="exact")\
                .eq("country", ambassador.country)\
                .eq("is_active", True)\
                .gt("total_earnings", ambassador.total_earnings)\
                .execute()
            ahead_count = ahead.count if ahead.count is not None else len(ahead.data or [])

            return AmbassadorStats(
                total_referrals=ambassador.total_referrals,
                total_earnings=ambassador.total_earnings,
                monthly_earnings=monthly_earnings,
                conversion_rate=conversion_rate,
                country_rank=ahead_count + 1,
                payable_balance=payable_balance(
                    ambassador.total_earnings, ambassador.total_payouts, self.get_pending_payout_total(user_id)
                ),
                tier=self.get_tier_info(ambassador),
            )
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def record_referral(self, ambassador_user_id: str, commission: float) -> AmbassadorResponse:
        """Count one referral, add its commission and move the ambassador onto the tier rate it now qualifies for"""
        try:
            ambassador = self.require_ambassador(ambassador_user_id)
            total_referrals = ambassador.total_referrals + 1
            tier = resolve_commission_tier(self.list_commission_tiers(), total_referrals, ambassador.country)
            result = self.supabase.table("ambassadors")\
                .update({
                    "total_referrals": total_referrals,
                    "total_earnings": round(ambassador.total_earnings + commission, 2),
                    "commission_rate": tier["commission_rate"],
                    "updated_at": datetime.utcnow().isoformat(),
                })\
                .eq("user_id", ambassador_user_id)\
                .execute()
            if not result.data:
                raise HTTPException(status_code=404, detail="Ambassador not found")
            if tier["tier_name"] != self.get_tier_info(ambassador).tier_name:
                logger.info(f"Ambassador {ambassador_user_id} reached tier {tier['tier_name']}")
            return AmbassadorResponse(**result.data[0])
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def get_dashboard(self, user_id: str) -> AmbassadorDashboard:
        ambassador = self.require_ambassador(user_id)
        return AmbassadorDashboard(
            ambassador=ambassador,
            stats=self.get_ambassador_stats(user_id),
            recent_metrics=self.get_country_metrics(ambassador.country, limit=7),
            top_countries=self.get_top_countries("ad_revenue", 5),
        )
