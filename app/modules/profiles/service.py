from supabase import Client
from app.config.settings import settings
from app.database.supabase_client import clean_filter_term
from app.modules.profiles.schemas import (
    ProfileUpdate, AdminProfileUpdate, ProfileResponse, ProfileListResponse, UserRankResponse
)
from typing import List, Optional
from fastapi import HTTPException
from datetime import datetime
import logging
import secrets
import string

logger = logging.getLogger(__name__)

REFERRAL_CODE_LENGTH = 8
REFERRAL_CODE_ALPHABET = string.ascii_uppercase + string.digits


class ProfileService:
    def __init__(self, supabase: Client):
        self.supabase = supabase

    def get_profile(self, user_id: str) -> ProfileResponse:
        """Get profile by user ID"""
        try:
            result = self.supabase.table("profiles")\
                .select("*")\
                .eq("id", user_id)\
                .maybe_single()\
                .execute()

            if not result or not result.data:
                raise HTTPException(status_code=404, detail="Profile not found")

            return ProfileResponse(**result.data)
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def generate_referral_code(self) -> str:
        """Random upper-case code not yet used by another profile."""
        for _ in range(10):
            code = "".join(secrets.choice(REFERRAL_CODE_ALPHABET) for _ in range(REFERRAL_CODE_LENGTH))
            existing = self.supabase.table("profiles")\
                .select("id")\
                .eq("referral_code", code)\
                .execute()
            if not existing.data:
                return code
        raise HTTPException(status_code=500, detail="Could not generate a unique referral code")

    def create_profile(
        self,
        user_id: str,
        email: str,
        name: Optional[str] = None,
        country: Optional[str] = None,
        currency: Optional[str] = None,
        referred_by: Optional[str] = None
    ) -> ProfileResponse:
        try:
            result = self.supabase.table("profiles").insert({
                "id": user_id,
                "email": email,
                "name": name,
                "country": country.upper() if country else None,
                "currency": (currency or settings.default_currency).upper(),
                "role": "user",
                "points": 0,
                "badges": [],
                "referral_code": self.generate_referral_code(),
                "referred_by": referred_by,
                "is_suspended": False,
            }).execute()
            if not result.data:
                raise HTTPException(status_code=500, detail="Failed to create profile")
            return ProfileResponse(**result.data[0])
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def _apply_update(self, user_id: str, update_data: dict) -> ProfileResponse:
        update_data["updated_at"] = datetime.utcnow().isoformat()
        result = self.supabase.table("profiles")\
            .update(update_data)\
            .eq("id", user_id)\
            .execute()
        if not result.data:
            raise HTTPException(status_code=404, detail="Profile not found")
        return ProfileResponse(**result.data[0])

    def update_profile(self, user_id: str, profile_data: ProfileUpdate) -> ProfileResponse:
        """Update the caller's own profile fields"""
        try:
            update_data = profile_data.model_dump(exclude_unset=True, exclude_none=True)
            if "country" in update_data:
                update_data["country"] = update_data["country"].upper()
            if "currency" in update_data:
                update_data["currency"] = update_data["currency"].upper()
            return self._apply_update(user_id, update_data)
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def admin_update_profile(self, user_id: str, profile_data: AdminProfileUpdate, moderator_id: str) -> ProfileResponse:
        """Update any profile field (role, suspension, points) and log it as a moderator action"""
        try:
            update_data = profile_data.model_dump(exclude_unset=True, exclude_none=True)
            profile = self._apply_update(user_id, update_data)
            self.supabase.table("moderator_actions").insert({
                "moderator_id": moderator_id,
                "action_type": "update_user_profile",
                "target_id": user_id,
                "target_table": "profiles",
                "metadata": {k: v for k, v in update_data.items() if k != "updated_at"},
            }).execute()
            logger.info(f"Profile {user_id} updated by moderator {moderator_id}")
            return profile
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def list_profiles(
        self,
        limit: int = 20,
        offset: int = 0,
        role: Optional[str] = None,
        country: Optional[str] = None,
        order_by: str = "points"
    ) -> ProfileListResponse:
        """List profiles with total count; ordered by points (leaderboard) or created_at"""
        try:
            if order_by not in ("points", "created_at"):
                raise HTTPException(status_code=400, detail="order_by must be points or created_at")
            query = self.supabase.table("profiles").select("*", count="exact")
            if role:
                query = query.eq("role", role)
            if country:
                query = query.eq("country", country.upper())
            result = query.order(order_by, desc=True)\
                .range(offset, offset + limit - 1)\
                .execute()
            items = [ProfileResponse(**p) for p in (result.data or [])]
            return ProfileListResponse(items=items, total=result.count or len(items))
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def search_profiles(self, query: str, limit: int = 20) -> List[ProfileResponse]:
        """Case-insensitive match on name or email"""
        try:
            term = clean_filter_term(query)
            if not term:
                return []
            result = self.supabase.table("profiles")\
                .select("*")\
                .or_(f"name.ilike.%{term}%,email.ilike.%{term}%")\
                .limit(limit)\
                .execute()
            return [ProfileResponse(**p) for p in (result.data or [])]
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def get_user_rank(self, user_id: str) -> UserRankResponse:
        """Rank is one plus the number of users with strictly more points"""
        try:
            profile = self.get_profile(user_id)
            result = self.supabase.table("profiles")\
                .select("id", count="exact")\
                .gt("points", profile.points)\
                .execute()
            ahead = result.count if result.count is not None else len(result.data or [])
            return UserRankResponse(user_id=user_id, points=profile.points, rank=ahead + 1)
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def update_user_points(self, user_id: str, delta: int) -> int:
        """Add delta (may be negative) to the user's points and return the new total"""
        try:
            profile = self.get_profile(user_id)
            new_total = profile.points + delta
            if new_total < 0:
                raise HTTPException(status_code=400, detail="Insufficient points")
            self.supabase.table("profiles")\
                .update({"points": new_total, "updated_at": datetime.utcnow().isoformat()})\
                .eq("id", user_id)\
                .execute()
            logger.debug(f"Points for {user_id}: {profile.points} -> {new_total}")
            return new_total
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def add_badge_to_user(self, user_id: str, badge_name: str) -> List[str]:
        try:
            profile = self.get_profile(user_id)
            if badge_name in profile.badges:
                raise HTTPException(status_code=400, detail="User already has this badge")
            badges = profile.badges + [badge_name]
            self.supabase.table("profiles")\
                .update({"badges": badges})\
                .eq("id", user_id)\
                .execute()
            logger.info(f"Badge '{badge_name}' awarded to {user_id}")
            return badges
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))
