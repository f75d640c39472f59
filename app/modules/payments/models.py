# Supabase table: transactions
# This file documents the expected database schema
# Actual operations are handled via Supabase SDK in service.py

"""
Expected Supabase table structure:

transactions:
- id: uuid (primary key)
- user_id: uuid (references profiles.id)
- promoted_poll_id: uuid (nullable, references promoted_polls.id)
- amount: numeric (in currency)
- currency: text (ISO 4217)
- original_amount: numeric (amount in the user's profile currency)
- original_currency: text
- payment_method: text (wallet | stripe | paypal | paystack)
- status: text (pending | completed | failed | refunded)
- gateway_transaction_id: text (nullable)
- metadata: jsonb (wallet payments: points_used, conversion_rate, exchange_rate)
- created_at: timestamp
- updated_at: timestamp
"""
