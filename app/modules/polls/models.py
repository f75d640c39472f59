# Supabase tables: poll_categories, polls, poll_votes
# This file documents the expected database schema
# Actual operations are handled via Supabase SDK in service.py

"""
Expected Supabase table structure:

poll_categories:
- id: uuid (primary key)
- name: text (unique)
- description: text (nullable)
- is_active: boolean (default true)
- created_at: timestamp
- updated_at: timestamp

polls:
- id: uuid (primary key)
- title: text
- description: text (nullable)
- options: jsonb (list of {"text": str, "votes": int})
- type: text (global | country)
- country: text (nullable, only set for country polls)
- category: text (default 'General')
- slug: text (unique)
- created_by: uuid (references profiles.id)
- start_date: timestamp (nullable, null = already started)
- active_until: timestamp (nullable, null = never expires)
- is_active: boolean (false once archived or expired)
- archived_at: timestamp (nullable, set by archive_poll)
- total_votes: integer (default 0)
- created_at: timestamp
- updated_at: timestamp

poll_votes:
- id: uuid (primary key)
- poll_id: uuid (references polls.id)
- user_id: uuid (references profiles.id)
- vote_option: integer (index into polls.options)
- created_at: timestamp
- unique (poll_id, user_id)

Stored procedures:
- archive_poll(p_poll_id uuid, p_user_id uuid)
- restore_poll(p_poll_id uuid, p_user_id uuid)
- get_category_counts() -> setof (category text, count bigint)
"""
