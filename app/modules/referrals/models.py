# Supabase tables: profiles (referral_code, referred_by), daily_reward_history
# This file documents the expected database schema
# Actual operations are handled via Supabase SDK in service.py

"""
Referrals have no table of their own:

- profiles.referral_code: the code a user shares (unique, upper-case)
- profiles.referred_by: the referrer's profile id, set at registration
- daily_reward_history rows with reward_type
    referral_bonus  -> credited to the referrer (reward_data.referred_user_id)
    referral_signup -> credited to the new user (reward_data.referrer_id)
"""
