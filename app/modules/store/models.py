# Supabase tables: reward_store_items, redeemed_items
# This file documents the expected database schema
# Actual operations are handled via Supabase SDK in service.py

"""
Expected Supabase table structure:

reward_store_items:
- id: uuid (primary key)
- name: text
- description: text (nullable)
- item_type: text (gift_card | voucher | merchandise | digital | airtime)
- points_cost: integer (price in points, quoted in `currency`)
- currency: text (ISO 4217, default 'USD')
- image_url: text (nullable)
- stock_quantity: integer (nullable = unlimited)
- is_active: boolean (default true)
- created_at: timestamp
- updated_at: timestamp

redeemed_items:
- id: uuid (primary key)
- user_id: uuid (references profiles.id)
- item_id: uuid (references reward_store_items.id)
- item_name: text
- points_cost: integer (points actually deducted, in the user's currency)
- fulfillment_details: jsonb (email, phone, address ...)
- status: text (pending_fulfillment | fulfilled | cancelled)
- admin_notes: text (nullable)
- created_at: timestamp
- updated_at: timestamp
"""
