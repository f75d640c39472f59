# Supabase tables: badges (awarded badge names are kept in profiles.badges)
# This file documents the expected database schema
# Actual operations are handled via Supabase SDK in service.py

"""
Expected Supabase table structure:

badges:
- id: uuid (primary key)
- name: text (unique; this is what profiles.badges stores)
- description: text
- icon: text (nullable)
- criteria: jsonb {"type": <criteria type>, "count": <int>, "before": <date, early_adopter only>}
- is_active: boolean (default true)
- created_at: timestamp

Criteria types and the statistic each one counts:
- poll_votes        rows in poll_votes for the user
- polls_created     rows in polls created by the user
- trivia_completed  trivia / trivia_game rows in daily_reward_history
- trivia_perfect    trivia_game rows scoring 100 on a hard game
- total_points      profiles.points
- login_streak      user_daily_rewards.trivia_streak
- spin_wins         spin rows with points_earned > 0
- spin_jackpot      spin rows whose outcome was the jackpot
- ads_watched       watch rows
- referrals         profiles whose referred_by is the user
- early_adopter     1 when the profile was created before criteria.before
"""
