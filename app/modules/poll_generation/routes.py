from fastapi import APIRouter, Depends
from app.config.settings import settings
from app.database.supabase_client import get_supabase
from app.modules.poll_generation.schemas import PollGenerationRequest, PollGenerationResult
from app.modules.poll_generation.service import OpenAIClient, PollGenerationService
from app.core.dependencies import require_permission
from supabase import Client
from typing import AsyncGenerator, Dict, Optional
import httpx

router = APIRouter(prefix="/polls", tags=["poll-generation"])


async def get_openai_client() -> AsyncGenerator[Optional[OpenAIClient], None]:
    """Yields None when no API key is configured"""
    if not settings.openai_api_key:
        yield None
        return
    async with httpx.AsyncClient(timeout=settings.openai_timeout_seconds) as http_client:
        yield OpenAIClient(
            settings.openai_api_key, http_client, settings.openai_model, settings.openai_base_url
        )


def get_poll_generation_service(
    supabase: Client = Depends(get_supabase),
    client: Optional[OpenAIClient] = Depends(get_openai_client)
) -> PollGenerationService:
    return PollGenerationService(supabase, client)


@router.post("/generate", response_model=PollGenerationResult, status_code=201)
async def generate_polls(
    request: PollGenerationRequest,
    user_data: Dict = Depends(require_permission("polls:generate")),
    service: PollGenerationService = Depends(get_poll_generation_service)
):
    return await service.generate_polls(user_data["id"], request)
