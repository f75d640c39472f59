# Supabase tables: profiles, auth.users
# This file documents the expected database schema
# Actual operations are handled via Supabase SDK in service.py
# Authentication is handled by Supabase Auth (auth.users table)

"""
Expected Supabase table structure:

profiles:
- id: uuid (primary key, references auth.users.id)
- email: text (not null)
- name: text (nullable)
- avatar_url: text (nullable)
- role: text (user | moderator | ambassador | admin, default 'user')
- points: integer (default 0, never negative)
- badges: text[] (badge names, default '{}')
- country: text (ISO 3166 alpha-2, nullable)
- currency: text (ISO 4217, default 'USD')
- referral_code: text (unique, 8 upper-case characters)
- referred_by: uuid (nullable, references profiles.id)
- is_suspended: boolean (default false)
- paypal_email: text (nullable)
- bank_details: jsonb (nullable: account_name, account_number, bank_name, ...)
- created_at: timestamp (default: now())
- updated_at: timestamp (nullable)
"""
