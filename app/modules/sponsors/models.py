# Supabase table: sponsors
# This file documents the expected database schema
# Actual operations are handled via Supabase SDK in service.py

"""
Expected Supabase table structure:

sponsors:
- id: uuid (primary key)
- user_id: uuid (references profiles.id, owner)
- name: text
- contact_email: text
- website_url: text (nullable)
- description: text (nullable)
- is_verified: boolean (default false, set by admins only)
- is_active: boolean (default true)
- created_at: timestamp
- updated_at: timestamp
"""
