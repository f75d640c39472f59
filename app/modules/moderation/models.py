# Supabase tables: moderator_actions, content_reports
# This file documents the expected database schema
# Actual operations are handled via Supabase SDK in service.py

"""
Expected Supabase table structure:

moderator_actions:
- id: uuid (primary key)
- moderator_id: uuid (references profiles.id)
- action_type: text (approve | reject | ban | unban | update_user_profile | report_<status> | ...)
- target_id: uuid
- target_table: text (polls | poll_comments | trivia_questions | profiles | content_reports)
- reason: text (nullable)
- metadata: jsonb
- created_at: timestamp

content_reports:
- id: uuid (primary key)
- reporter_id: uuid (references profiles.id)
- content_type: text (poll | comment)
- content_id: uuid
- reason: text
- status: text (pending | reviewed | resolved | rejected)
- resolved_by: uuid (nullable, references profiles.id)
- resolution_notes: text (nullable)
- created_at: timestamp
- updated_at: timestamp
"""
