from supabase import Client
from app.modules.sponsors.schemas import SponsorCreate, SponsorUpdate, SponsorResponse, SponsorListResponse
from typing import List, Optional, Dict, Any
from fastapi import HTTPException
from datetime import datetime
import logging

logger = logging.getLogger(__name__)


class SponsorService:
    def __init__(self, supabase: Client):
        self.supabase = supabase

    def _get_row(self, sponsor_id: str) -> Dict[str, Any]:
        result = self.supabase.table("sponsors")\
            .select("*")\
            .eq("id", sponsor_id)\
            .maybe_single()\
            .execute()
        if not result or not result.data:
            raise HTTPException(status_code=404, detail="Sponsor not found")
        return result.data

    def get_sponsor(self, sponsor_id: str) -> SponsorResponse:
        try:
            return SponsorResponse(**self._get_row(sponsor_id))
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def get_owned_sponsor(self, sponsor_id: str, user_id: str) -> SponsorResponse:
        """Sponsor owned by user_id; 403 for anyone else"""
        sponsor = self.get_sponsor(sponsor_id)
        if sponsor.user_id != user_id:
            raise HTTPException(status_code=403, detail="Unauthorized: You do not own this sponsor")
        return sponsor

    def list_user_sponsors(self, user_id: str) -> List[SponsorResponse]:
        try:
            result = self.supabase.table("sponsors")\
                .select("*")\
                .eq("user_id", user_id)\
                .order("created_at", desc=True)\
                .execute()
            return [SponsorResponse(**s) for s in (result.data or [])]
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def list_sponsors(
        self,
        limit: int = 10,
        offset: int = 0,
        is_verified: Optional[bool] = None,
        is_active: Optional[bool] = None
    ) -> SponsorListResponse:
        try:
            query = self.supabase.table("sponsors").select("*", count="exact")
            if is_verified is not None:
                query = query.eq("is_verified", is_verified)
            if is_active is not None:
                query = query.eq("is_active", is_active)
            result = query.order("created_at", desc=True)\
                .range(offset, offset + limit - 1)\
                .execute()
            items = [SponsorResponse(**s) for s in (result.data or [])]
            return SponsorListResponse(items=items, total=result.count if result.count is not None else len(items))
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def create_sponsor(self, user_id: str, data: SponsorCreate) -> SponsorResponse:
        try:
            result = self.supabase.table("sponsors").insert({
                "user_id": user_id,
                "name": data.name,
                "contact_email": data.contact_email,
                "website_url": data.website_url,
                "description": data.description,
                "is_verified": False,
                "is_active": True,
            }).execute()
            if not result.data:
                raise HTTPException(status_code=500, detail="Failed to create sponsor")
            logger.info(f"Sponsor {data.name} created by {user_id}")
            return SponsorResponse(**result.data[0])
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def update_sponsor(self, user_id: str, sponsor_id: str, data: SponsorUpdate, is_admin: bool = False) -> SponsorResponse:
        """Owner or admin edit; only admins may change is_verified"""
        try:
            sponsor = self._get_row(sponsor_id)
            if sponsor["user_id"] != user_id and not is_admin:
                raise HTTPException(status_code=403, detail="Unauthorized: You do not own this sponsor")
            update_data = data.model_dump(exclude_unset=True)
            if not is_admin:
                update_data.pop("is_verified", None)
            if not update_data:
                raise HTTPException(status_code=400, detail="No fields to update")
            update_data["updated_at"] = datetime.utcnow().isoformat()
            result = self.supabase.table("sponsors")\
                .update(update_data)\
                .eq("id", sponsor_id)\
                .execute()
            if not result.data:
                raise HTTPException(status_code=404, detail="Sponsor not found")
            return SponsorResponse(**result.data[0])
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def verify_sponsor(self, sponsor_id: str, is_verified: bool = True) -> SponsorResponse:
        try:
            self._get_row(sponsor_id)
            result = self.supabase.table("sponsors")\
                .update({
                    "is_verified": is_verified,
                    "updated_at": datetime.utcnow().isoformat(),
                })\
                .eq("id", sponsor_id)\
                .execute()
            logger.info(f"Sponsor {sponsor_id} verification set to {is_verified}")
            return SponsorResponse(**result.data[0])
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))
