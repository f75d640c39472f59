"""
Gameplay reference data: default point values, spin wheel, badges, commission tiers,
payout methods and poll categories. Used as fallbacks when app_settings has no row
and by the seed script.
"""

DEFAULT_POINTS_SETTINGS = {
    "pollVotePoints": 50,
    "triviaEasyPoints": 10,
    "triviaMediumPoints": 20,
    "triviaHardPoints": 30,
    "adWatchPoints": 15,
    "referralBonusPoints": 100,
    "maxStreakMultiplier": 2.0,
    "streakIncrement": 0.1,
}

DEFAULT_PROMOTED_POLL_SETTINGS = {
    "default_cost_per_vote": 0.05,
    "minimum_budget": 10,
    "maximum_budget": 1000,
    "points_to_usd_conversion": 100,
    "is_enabled": True,
}

DEFAULT_SUPPORTED_CURRENCIES = ["USD", "EUR", "GBP", "NGN", "KES", "GHS", "ZAR"]

# (upper bound of roll in [0, 100), outcome key, points)
SPIN_WHEEL = [
    (40, "try_again", 0),
    (65, "points_10", 10),
    (85, "points_25", 25),
    (95, "points_50", 50),
    (99, "points_100", 100),
    (100, "jackpot", 250),
]

JACKPOT_POINTS = 250

DIFFICULTY_ORDER = {"easy": 0, "medium": 1, "hard": 2}

DEFAULT_BADGES = [
    {"name": "First Steps", "description": "Vote on your first poll", "icon": "vote",
     "criteria": {"type": "poll_votes", "count": 1}},
    {"name": "Poll Enthusiast", "description": "Vote on 10 polls", "icon": "vote",
     "criteria": {"type": "poll_votes", "count": 10}},
    {"name": "Poll Master", "description": "Vote on 50 polls", "icon": "crown",
     "criteria": {"type": "poll_votes", "count": 50}},
    {"name": "Poll Creator", "description": "Create your first poll", "icon": "pencil",
     "criteria": {"type": "polls_created", "count": 1}},
    {"name": "Community Builder", "description": "Create 5 polls", "icon": "users",
     "criteria": {"type": "polls_created", "count": 5}},
    {"name": "Trivia Novice", "description": "Complete your first trivia", "icon": "brain",
     "criteria": {"type": "trivia_completed", "count": 1}},
    {"name": "Trivia Expert", "description": "Complete 25 trivia games", "icon": "brain",
     "criteria": {"type": "trivia_completed", "count": 25}},
    {"name": "Trivia Master", "description": "Complete 100 trivia games", "icon": "trophy",
     "criteria": {"type": "trivia_completed", "count": 100}},
    {"name": "Perfect Score", "description": "Score 100% on a hard trivia game", "icon": "star",
     "criteria": {"type": "trivia_perfect", "count": 1}},
    {"name": "Streak Keeper", "description": "Reach a 7 answer streak", "icon": "flame",
     "criteria": {"type": "login_streak", "count": 7}},
    {"name": "Streak Master", "description": "Reach a 30 answer streak", "icon": "flame",
     "criteria": {"type": "login_streak", "count": 30}},
    {"name": "Streak Legend", "description": "Reach a 100 answer streak", "icon": "flame",
     "criteria": {"type": "login_streak", "count": 100}},
    {"name": "Point Collector", "description": "Earn 1,000 points", "icon": "coins",
     "criteria": {"type": "total_points", "count": 1000}},
    {"name": "Point Hoarder", "description": "Earn 10,000 points", "icon": "coins",
     "criteria": {"type": "total_points", "count": 10000}},
    {"name": "Points Millionaire", "description": "Earn 100,000 points", "icon": "gem",
     "criteria": {"type": "total_points", "count": 100000}},
    {"name": "Spin Winner", "description": "Win 10 spins", "icon": "wheel",
     "criteria": {"type": "spin_wins", "count": 10}},
    {"name": "Lucky Spinner", "description": "Hit the jackpot", "icon": "clover",
     "criteria": {"type": "spin_jackpot", "count": 1}},
    {"name": "Ad Watcher", "description": "Watch 50 rewarded ads", "icon": "tv",
     "criteria": {"type": "ads_watched", "count": 50}},
    {"name": "Early Adopter", "description": "Joined before July 2025", "icon": "rocket",
     "criteria": {"type": "early_adopter", "count": 1, "before": "2025-07-01"}},
    {"name": "Ambassador", "description": "Refer 10 friends", "icon": "megaphone",
     "criteria": {"type": "referrals", "count": 10}},
]

DEFAULT_COMMISSION_TIERS = [
    {"tier_name": "Bronze", "min_referrals": 0, "commission_rate": 10,
     "country_specific_rates": {"US": 12, "CA": 11, "GB": 11}},
    {"tier_name": "Silver", "min_referrals": 25, "commission_rate": 15,
     "country_specific_rates": {"US": 17, "CA": 16, "GB": 16}},
    {"tier_name": "Gold", "min_referrals": 100, "commission_rate": 20,
     "country_specific_rates": {"US": 22, "CA": 21, "GB": 21}},
    {"tier_name": "Platinum", "min_referrals": 250, "commission_rate": 25,
     "country_specific_rates": {"US": 27, "CA": 26, "GB": 26}},
]

DEFAULT_COMMISSION_RATE = 10

DEFAULT_PAYOUT_METHODS = [
    {"name": "PayPal", "description": "Payout to a PayPal account", "min_payout": 10,
     "requires_email": True, "requires_bank_details": False},
    {"name": "Bank Transfer", "description": "Direct bank transfer", "min_payout": 50,
     "requires_email": False, "requires_bank_details": True},
    {"name": "Manual", "description": "Manual payout handled by an administrator", "min_payout": 100,
     "requires_email": False, "requires_bank_details": False},
]

DEFAULT_POLL_CATEGORIES = [
    {"name": "General", "description": "General topics"},
    {"name": "Politics", "description": "Politics and government"},
    {"name": "Sports", "description": "Sports and competitions"},
    {"name": "Entertainment", "description": "Movies, music and celebrities"},
    {"name": "Technology", "description": "Gadgets, apps and the internet"},
    {"name": "Lifestyle", "description": "Food, travel and daily life"},
    {"name": "Business", "description": "Economy, money and work"},
]
