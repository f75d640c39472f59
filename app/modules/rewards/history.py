import logging
from supabase import Client
from typing import Any, Dict, Optional

logger = logging.getLogger(__name__)

REWARD_TYPES = (
    "spin", "trivia", "trivia_game", "watch", "redemption",
    "referral_signup", "referral_bonus", "poll_vote",
)


def record_reward_history(
    supabase: Client,
    user_id: str,
    reward_type: str,
    points_earned: int,
    reward_data: Optional[Dict[str, Any]] = None
) -> Optional[Dict[str, Any]]:
    """Append a daily_reward_history row; returns the inserted row"""
    if reward_type not in REWARD_TYPES:
        raise ValueError(f"Unknown reward type: {reward_type}")
    result = supabase.table("daily_reward_history").insert({
        "user_id": user_id,
        "reward_type": reward_type,
        "points_earned": points_earned,
        "reward_data": reward_data or {},
    }).execute()
    logger.debug(f"Reward history {reward_type} +{points_earned} for {user_id}")
    return result.data[0] if result.data else None
