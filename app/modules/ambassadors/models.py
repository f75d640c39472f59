# Supabase tables: ambassadors, ambassador_commission_tiers, country_metrics
# This file documents the expected database schema
# Actual operations are handled via Supabase SDK in service.py

"""
Expected Supabase table structure:

ambassadors:
- id: uuid (primary key)
- user_id: uuid (unique, references profiles.id)
- country: text (ISO 3166 alpha-2)
- commission_rate: numeric (percent, refreshed from the tier table on each referral)
- total_referrals: integer (default 0)
- total_earnings: numeric (USD, default 0)
- total_payouts: numeric (USD, default 0)
- is_active: boolean (default true)
- created_at: timestamp
- updated_at: timestamp

ambassador_commission_tiers:
- id: uuid (primary key)
- tier_name: text (unique: Bronze | Silver | Gold | Platinum ...)
- min_referrals: integer
- commission_rate: numeric (percent)
- country_specific_rates: jsonb ({"US": 12, ...})
- is_active: boolean (default true)

country_metrics:
- id: uuid (primary key)
- country: text
- metric_date: date
- ad_revenue: numeric (USD)
- user_count: integer
- new_users: integer
- unique (country, metric_date)
"""
