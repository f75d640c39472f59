# Supabase tables: payout_methods, payout_requests
# This file documents the expected database schema
# Actual operations are handled via Supabase SDK in service.py

"""
Expected Supabase table structure:

payout_methods:
- id: uuid (primary key)
- name: text (unique, e.g. PayPal, Bank Transfer)
- description: text
- config: jsonb (min_payout, requires_email, requires_bank_details)
- is_active: boolean
- created_at: timestamp
- updated_at: timestamp

payout_requests:
- id: uuid (primary key)
- user_id: uuid (references profiles.id)
- amount: numeric (USD)
- payout_method: text (payout_methods.name)
- payout_details: jsonb (paypal_email, bank_details, user_name, user_email, user_country)
- status: text (pending | approved | rejected | processed)
- admin_notes: text
- transaction_id: text (external reference once processed)
- requested_at: timestamp
- processed_at: timestamp
- processed_by: uuid (references profiles.id)
- updated_at: timestamp
"""
