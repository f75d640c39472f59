"""
Pure reward arithmetic shared by the rewards, trivia, badge and ambassador services.
No database access here so the rules can be tested in isolation.
"""

import math
from typing import Dict, List, Optional, Tuple

from app.config.rewards_config import (
    SPIN_WHEEL,
    DEFAULT_POINTS_SETTINGS,
    DEFAULT_COMMISSION_RATE,
)


def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def spin_outcome(roll: float) -> Tuple[str, int]:
    """Map a roll in [0, 100) to (outcome key, base points)."""
    if roll < 0 or roll >= 100:
        raise ValueError(f"Spin roll out of range: {roll}")
    for upper, outcome, points in SPIN_WHEEL:
        if roll < upper:
            return outcome, points
    # unreachable, last band ends at 100
    raise ValueError(f"Spin roll out of range: {roll}")


def spin_message(outcome: str, base_points: int, bonus_points: int = 0) -> str:
    if outcome == "try_again":
        return "Try Again Tomorrow!"
    if bonus_points > 0:
        return f"You won {base_points} points + {bonus_points} streak bonus!"
    if outcome == "jackpot":
        return f"JACKPOT! You won {base_points} points!"
    return f"You won {base_points} points!"


def streak_multiplier(streak: int, increment: float = 0.1, cap: float = 2.0) -> float:
    return min(1 + streak * increment, cap)


def streak_bonus(base_points: int, multiplier: float) -> int:
    if base_points <= 0:
        return 0
    # round away float noise like 10 * 0.1 == 1.0000000000000002 before flooring
    return int(math.floor(round(base_points * (multiplier - 1), 6)))


def trivia_answer_points(difficulty: str, is_correct: bool, points_settings: Optional[Dict] = None) -> int:
    if not is_correct:
        return 0
    points = {**DEFAULT_POINTS_SETTINGS, **(points_settings or {})}
    if difficulty == "easy":
        return int(points["triviaEasyPoints"])
    if difficulty == "hard":
        return int(points["triviaHardPoints"])
    return int(points["triviaMediumPoints"])


def trivia_game_score(correct_answers: int, total_questions: int) -> int:
    """Percentage score, rounded half up. A game with no questions scores 0."""
    if total_questions <= 0:
        return 0
    return round_half_up(correct_answers / total_questions * 100)


def trivia_game_points(score: int, points_reward: int) -> int:
    return round_half_up(score / 100 * points_reward)


def resolve_commission_tier(
    tiers: List[Dict],
    referral_count: int,
    country: Optional[str] = None,
) -> Dict:
    """
    Pick the highest active tier whose min_referrals <= referral_count.

    Returns tier_name, commission_rate (country override when present),
    next_tier_name and referrals_to_next_tier (None at the top tier).
    """
    active = sorted(
        (t for t in tiers if t.get("is_active", True)),
        key=lambda t: t.get("min_referrals", 0),
    )
    current = None
    next_tier = None
    for tier in active:
        if tier.get("min_referrals", 0) <= referral_count:
            current = tier
        elif next_tier is None:
            next_tier = tier

    if current is None:
        tier_name = "Default"
        rate = DEFAULT_COMMISSION_RATE
    else:
        tier_name = current["tier_name"]
        rate = current.get("commission_rate", DEFAULT_COMMISSION_RATE)
        country_rates = current.get("country_specific_rates") or {}
        if country and country in country_rates:
            rate = country_rates[country]

    return {
        "tier_name": tier_name,
        "commission_rate": float(rate),
        "next_tier_name": next_tier["tier_name"] if next_tier else None,
        "referrals_to_next_tier": (next_tier["min_referrals"] - referral_count) if next_tier else None,
    }


def commission_amount(revenue: float, commission_rate: float) -> float:
    return round(revenue * commission_rate / 100, 2)


def payable_balance(total_earnings: float, total_payouts: float, pending_payouts: float) -> float:
    return max(round((total_earnings or 0) - (total_payouts or 0) - (pending_payouts or 0), 2), 0.0)
