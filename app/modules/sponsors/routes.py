from fastapi import APIRouter, Depends, Query
from app.database.supabase_client import get_supabase
from app.modules.sponsors.schemas import (
    SponsorCreate, SponsorUpdate, SponsorVerify, SponsorResponse, SponsorListResponse
)
from app.modules.sponsors.service import SponsorService
from app.core.dependencies import require_permission, is_admin
from supabase import Client
from typing import List, Dict, Optional

router = APIRouter(prefix="/sponsors", tags=["sponsors"])


def get_sponsor_service(supabase: Client = Depends(get_supabase)) -> SponsorService:
    return SponsorService(supabase)


@router.get("/me", response_model=List[SponsorResponse])
async def list_my_sponsors(
    user_data: Dict = Depends(require_permission("sponsors:read")),
    service: SponsorService = Depends(get_sponsor_service)
):
    return service.list_user_sponsors(user_data["id"])


@router.get("", response_model=SponsorListResponse)
async def list_sponsors(
    is_verified: Optional[bool] = None,
    is_active: Optional[bool] = None,
    limit: int = Query(10, ge=1, le=100),
    offset: int = Query(0, ge=0),
    user_data: Dict = Depends(require_permission("sponsors:verify")),
    service: SponsorService = Depends(get_sponsor_service)
):
    """All sponsors (admin)"""
    return service.list_sponsors(limit, offset, is_verified, is_active)


@router.post("", response_model=SponsorResponse, status_code=201)
async def create_sponsor(
    sponsor_data: SponsorCreate,
    user_data: Dict = Depends(require_permission("sponsors:create")),
    service: SponsorService = Depends(get_sponsor_service)
):
    return service.create_sponsor(user_data["id"], sponsor_data)


@router.get("/{sponsor_id}", response_model=SponsorResponse)
async def get_sponsor(
    sponsor_id: str,
    user_data: Dict = Depends(require_permission("sponsors:read")),
    service: SponsorService = Depends(get_sponsor_service)
):
    return service.get_sponsor(sponsor_id)


@router.put("/{sponsor_id}", response_model=SponsorResponse)
async def update_sponsor(
    sponsor_id: str,
    sponsor_data: SponsorUpdate,
    user_data: Dict = Depends(require_permission("sponsors:update")),
    service: SponsorService = Depends(get_sponsor_service)
):
    return service.update_sponsor(user_data["id"], sponsor_id, sponsor_data, is_admin(user_data))


@router.post("/{sponsor_id}/verify", response_model=SponsorResponse)
async def verify_sponsor(
    sponsor_id: str,
    verify_data: SponsorVerify,
    user_data: Dict = Depends(require_permission("sponsors:verify")),
    service: SponsorService = Depends(get_sponsor_service)
):
    return service.verify_sponsor(sponsor_id, verify_data.is_verified)
