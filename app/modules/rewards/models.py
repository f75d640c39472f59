# Supabase tables: user_daily_rewards, daily_reward_history, trivia_questions
# This file documents the expected database schema
# Actual operations are handled via Supabase SDK in service.py

"""
Expected Supabase table structure:

user_daily_rewards:
- id: uuid (primary key)
- user_id: uuid (unique, references profiles.id)
- last_spin_date: date (nullable, UTC)
- last_trivia_date: date (nullable, UTC)
- last_watch_date: date (nullable, UTC)
- spin_streak: integer (consecutive winning spins, default 0)
- trivia_streak: integer (consecutive correct daily answers, default 0)
- total_spins: integer (default 0)
- total_trivia_completed: integer (default 0)
- total_ads_watched: integer (default 0)
- created_at: timestamp
- updated_at: timestamp

daily_reward_history:
- id: uuid (primary key)
- user_id: uuid (references profiles.id)
- reward_type: text (spin | trivia | trivia_game | watch | redemption |
                     referral_signup | referral_bonus | poll_vote)
- points_earned: integer (negative for redemptions)
- reward_data: jsonb (per type: base_points, bonus_points, streak, question_id, ...)
- created_at: timestamp

trivia_questions (read here for the daily question, managed in the trivia module):
- id: uuid, question: text, options: jsonb (list of strings),
  correct_answer: integer (option index), difficulty: easy | medium | hard,
  category: text, country: text (nullable, null = global), is_active: boolean
"""
