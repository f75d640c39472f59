# Supabase tables: app_settings, currency_exchange_rates, country_currency_settings
# This file documents the expected database schema
# Actual operations are handled via Supabase SDK in service.py

"""
Expected Supabase table structure:

app_settings:
- id: uuid (primary key)
- category: text (unique, e.g. points | promoted_polls | currencies)
- settings: jsonb (free-form values for the category)
- updated_by: uuid (nullable, references profiles.id)
- updated_at: timestamp

currency_exchange_rates:
- id: uuid (primary key)
- from_currency: text (ISO code)
- to_currency: text (ISO code)
- rate: numeric (amount of to_currency for one unit of from_currency)
- updated_at: timestamp
- unique (from_currency, to_currency)

country_currency_settings:
- id: uuid (primary key)
- country_code: text (unique, ISO 3166 alpha-2)
- currency_code: text (default 'USD')
- is_active: boolean (default true)
- updated_at: timestamp
"""
