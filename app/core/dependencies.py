"""
Core dependencies for route protection and permission checking
"""

from fastapi import Depends, HTTPException, Request, Security, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from app.database.supabase_client import get_supabase
from app.modules.auth.service import AuthService
from app.config.permissions_config import get_role_permissions
from supabase import Client
from typing import List, Optional, Dict, Any
import logging

logger = logging.getLogger(__name__)

security = HTTPBearer()

ADMIN_ROLE = "admin"
MODERATOR_ROLE = "moderator"


def _get_request_cache(request: Request) -> Dict[str, Any]:
    """Return request-scoped cache for access data (profile, permission_names)."""
    if not hasattr(request.state, "access_cache"):
        request.state.access_cache = {}
    return request.state.access_cache


def get_auth_service(supabase: Client = Depends(get_supabase)) -> AuthService:
    return AuthService(supabase)


def get_current_user_id(
    credentials: HTTPAuthorizationCredentials = Security(security),
    auth_service: AuthService = Depends(get_auth_service)
) -> dict:
    """Extract current user info from JWT token"""
    token = credentials.credentials
    user_data = auth_service.get_current_user(token)
    return user_data


def get_user_profile(user_id: str, supabase: Client, cache: Optional[Dict[str, Any]] = None) -> Optional[Dict[str, Any]]:
    """Return the caller's profiles row (role, is_suspended). Uses request-scoped cache when provided."""
    if cache is not None and "profile" in cache:
        return cache["profile"]
    try:
        result = supabase.table("profiles")\
            .select("id, role, is_suspended, country, currency")\
            .eq("id", user_id)\
            .maybe_single()\
            .execute()
        profile = result.data if result and result.data else None
        if cache is not None:
            cache["profile"] = profile
        return profile
    except Exception as e:
        logger.error(f"Error getting user profile: {e}")
        return None


def is_admin(user_data: dict) -> bool:
    return user_data.get("role") == ADMIN_ROLE


def is_moderator(user_data: dict) -> bool:
    """Moderators and admins both pass moderator checks."""
    return user_data.get("role") in (ADMIN_ROLE, MODERATOR_ROLE)


def get_user_permissions(user_id: str, supabase: Client, cache: Optional[Dict[str, Any]] = None) -> List[str]:
    """Get all permissions for a user through their profile role. Populates request-scoped cache when provided."""
    if cache is not None and "permission_names" in cache:
        return cache["permission_names"]
    profile = get_user_profile(user_id, supabase, cache)
    role = (profile or {}).get("role") or "user"
    names = get_role_permissions(role)
    if cache is not None:
        cache["permission_names"] = names
    return names


def get_current_user(
    request: Request,
    user_data: dict = Depends(get_current_user_id),
    supabase: Client = Depends(get_supabase)
) -> dict:
    """Authenticated user enriched with profile role; suspended accounts are rejected."""
    cache = _get_request_cache(request)
    profile = get_user_profile(user_data["id"], supabase, cache)
    if profile and profile.get("is_suspended"):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Account is suspended"
        )
    return {
        **user_data,
        "role": (profile or {}).get("role") or "user",
        "country": (profile or {}).get("country"),
        "currency": (profile or {}).get("currency"),
    }


def require_permission(required_permission: str):
    """Factory function to create permission check dependency"""
    def check_permission(
        request: Request,
        user_data: dict = Depends(get_current_user),
        supabase: Client = Depends(get_supabase)
    ) -> dict:
        """Dependency to check if user has required permission"""
        cache = _get_request_cache(request)
        user_permissions = get_user_permissions(user_data["id"], supabase, cache)
        if required_permission not in user_permissions:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail=f"Insufficient permissions. Required: {required_permission}"
            )
        return user_data
    return check_permission


def get_access_cache(request: Request) -> Dict[str, Any]:
    """Dependency that returns request-scoped access cache (populated by require_permission when used)."""
    return _get_request_cache(request)
