# Supabase table: promoted_polls
# This file documents the expected database schema
# Actual operations are handled via Supabase SDK in service.py

"""
Expected Supabase table structure:

promoted_polls:
- id: uuid (primary key)
- poll_id: uuid (references polls.id)
- sponsor_id: uuid (references sponsors.id)
- pricing_model: text (default 'CPV', cost per vote)
- budget_amount: numeric (USD)
- cost_per_vote: numeric (USD)
- target_votes: integer
- current_votes: integer (default 0)
- status: text (pending_approval | active | paused | completed | rejected)
- payment_status: text (pending | paid | failed | refunded)
- start_date: timestamp (nullable)
- end_date: timestamp (nullable)
- approved_by: uuid (nullable, references profiles.id)
- approved_at: timestamp (nullable)
- admin_notes: text (nullable)
- created_at: timestamp
- updated_at: timestamp

Status transitions:
- pending_approval -> active (approve) | rejected (reject)
- active <-> paused (owner or admin)
- active -> completed (target reached, or end_date passed via the status scheduler)
"""
