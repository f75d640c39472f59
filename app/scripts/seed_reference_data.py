"""
Seed Reference Data Script
Populates badges, commission tiers, app settings, payout methods and poll categories
from app/config/rewards_config.py. Rows are matched on their natural key, so re-running
updates existing rows instead of duplicating them.
"""

import sys
from pathlib import Path

# Add project root to path
project_root = Path(__file__).parent.parent.parent
sys.path.insert(0, str(project_root))

from app.config.rewards_config import (
    DEFAULT_BADGES, DEFAULT_COMMISSION_TIERS, DEFAULT_PAYOUT_METHODS, DEFAULT_POLL_CATEGORIES,
    DEFAULT_POINTS_SETTINGS, DEFAULT_PROMOTED_POLL_SETTINGS, DEFAULT_SUPPORTED_CURRENCIES
)
from app.database.supabase_client import SupabaseClient
from supabase import Client
from typing import List, Dict, Any, Tuple
import logging

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


def upsert_rows(supabase: Client, table: str, key: str, rows: List[Dict[str, Any]]) -> Tuple[int, int]:
    """Insert rows missing from the table and update the ones already present. Returns (created, updated)."""
    created_count = 0
    updated_count = 0

    for row in rows:
        try:
            existing = supabase.table(table)\
                .select("id")\
                .eq(key, row[key])\
                .execute()

            if existing.data:
                supabase.table(table)\
                    .update(row)\
                    .eq(key, row[key])\
                    .execute()
                updated_count += 1
                logger.debug(f"Updated {table}: {row[key]}")
            else:
                supabase.table(table).insert(row).execute()
                created_count += 1
                logger.debug(f"Created {table}: {row[key]}")
        except Exception as e:
            logger.error(f"Error processing {table} {row.get(key)}: {e}")

    logger.info(f"{table} seeded: {created_count} created, {updated_count} updated")
    return created_count, updated_count


def badge_rows() -> List[Dict[str, Any]]:
    return [{**badge, "is_active": True} for badge in DEFAULT_BADGES]


def commission_tier_rows() -> List[Dict[str, Any]]:
    return [{**tier, "is_active": True} for tier in DEFAULT_COMMISSION_TIERS]


def payout_method_rows() -> List[Dict[str, Any]]:
    rows = []
    for method in DEFAULT_PAYOUT_METHODS:
        rows.append({
            "name": method["name"],
            "description": method["description"],
            "config": {
                "min_payout": method["min_payout"],
                "requires_email": method["requires_email"],
                "requires_bank_details": method["requires_bank_details"],
            },
            "is_active": True,
        })
    return rows


def poll_category_rows() -> List[Dict[str, Any]]:
    return [{**category, "is_active": True} for category in DEFAULT_POLL_CATEGORIES]


def settings_rows() -> List[Dict[str, Any]]:
    return [
        {"category": "points", "settings": dict(DEFAULT_POINTS_SETTINGS)},
        {"category": "promoted_polls", "settings": dict(DEFAULT_PROMOTED_POLL_SETTINGS)},
        {"category": "currencies", "settings": {"supported": list(DEFAULT_SUPPORTED_CURRENCIES)}},
    ]


def seed_all(supabase: Client) -> int:
    total = 0
    for table, key, rows in (
        ("badges", "name", badge_rows()),
        ("ambassador_commission_tiers", "tier_name", commission_tier_rows()),
        ("payout_methods", "name", payout_method_rows()),
        ("poll_categories", "name", poll_category_rows()),
        ("app_settings", "category", settings_rows()),
    ):
        created, updated = upsert_rows(supabase, table, key, rows)
        total += created + updated
    return total


def main():
    """Seed every reference table"""
    try:
        supabase = SupabaseClient.get_service_client()

        logger.info("Starting reference data seeding...")
        total = seed_all(supabase)
        logger.info(f"Seeding completed successfully! {total} rows processed")

    except Exception as e:
        logger.error(f"Error during seeding: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
