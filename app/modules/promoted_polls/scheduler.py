import asyncio
import logging
from app.config.settings import settings
from app.database.supabase_client import SupabaseClient
from app.modules.promoted_polls.service import PromotedPollService

logger = logging.getLogger(__name__)


async def apply_status_transitions():
    """Complete finished promotions (one pass)."""
    try:
        service = PromotedPollService(SupabaseClient.get_service_client())
        result = service.run_status_transitions()
        if not result.completed_promotions:
            logger.debug("No promoted poll status changes")
            return result
        logger.info(f"Status scheduler: {result.completed_promotions} promotion(s) completed")
        return result
    except Exception as e:
        logger.error(f"Error in status scheduler: {str(e)}")
        return None


async def status_scheduler_loop():
    """Background task that periodically applies status transitions"""
    while True:
        try:
            await apply_status_transitions()
        except Exception as e:
            logger.error(f"Error in status scheduler loop: {str(e)}")

        await asyncio.sleep(settings.scheduler_interval_seconds)
