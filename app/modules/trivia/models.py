# Supabase tables: trivia_questions, trivia_games
# This file documents the expected database schema
# Actual operations are handled via Supabase SDK in service.py

"""
Expected Supabase table structure:

trivia_questions:
- id: uuid (primary key)
- question: text
- options: jsonb (list of 2..6 answer strings)
- correct_answer: integer (index into options)
- difficulty: text (easy | medium | hard)
- category: text
- country: text (nullable; null means the question is global)
- is_active: boolean (default true)
- created_at: timestamp

trivia_games:
- id: uuid (primary key)
- title: text
- description: text (nullable)
- category: text
- difficulty: text (easy | medium | hard)
- question_ids: uuid[] (ordered)
- number_of_questions: integer (= length of question_ids)
- points_reward: integer (paid in full for a 100% score)
- estimated_time_minutes: integer
- is_active: boolean (default true)
- created_at: timestamp

Completed games are recorded in daily_reward_history with reward_type
'trivia_game' and reward_data {game_id, score, correct_answers,
total_questions, difficulty}. A game pays out only once per user.
"""
