# Supabase table: poll_comments
# This file documents the expected database schema
# Actual operations are handled via Supabase SDK in service.py

"""
Expected Supabase table structure:

poll_comments:
- id: uuid (primary key)
- poll_id: uuid (references polls.id)
- user_id: uuid (references profiles.id)
- parent_comment_id: uuid (nullable, references poll_comments.id; one level of replies)
- comment_text: text
- is_active: boolean (false = soft deleted or hidden by a moderator)
- created_at: timestamp
- updated_at: timestamp
"""
