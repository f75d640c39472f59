from supabase import Client
from app.config.settings import settings
from app.modules.app_settings.schemas import (
    SettingsCategoryResponse, PointsSettings, PromotedPollSettings,
    ExchangeRateUpsert, CountryCurrencyUpdate, CountryCurrencyResponse
)
from app.config.rewards_config import (
    DEFAULT_POINTS_SETTINGS, DEFAULT_PROMOTED_POLL_SETTINGS,
    DEFAULT_SUPPORTED_CURRENCIES
)
from typing import Dict, Any, List, Optional
from fastapi import HTTPException
from datetime import datetime
import logging

logger = logging.getLogger(__name__)


class AppSettingsService:
    def __init__(self, supabase: Client):
        self.supabase = supabase

    def get_category(self, category: str) -> Dict[str, Any]:
        """Raw settings dict for a category, empty when the row does not exist."""
        try:
            result = self.supabase.table("app_settings")\
                .select("*")\
                .eq("category", category)\
                .maybe_single()\
                .execute()
            if not result or not result.data:
                return {}
            return result.data.get("settings") or {}
        except Exception as e:
            logger.error(f"Error loading settings category {category}: {e}")
            return {}

    def get_settings(self, category: str) -> SettingsCategoryResponse:
        try:
            result = self.supabase.table("app_settings")\
                .select("*")\
                .eq("category", category)\
                .maybe_single()\
                .execute()
            if not result or not result.data:
                raise HTTPException(status_code=404, detail=f"Settings category '{category}' not found")
            return SettingsCategoryResponse(**result.data)
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def update_settings(self, category: str, values: Dict[str, Any], updated_by: Optional[str] = None) -> SettingsCategoryResponse:
        """Merge values into the category and upsert it."""
        try:
            merged = {**self.get_category(category), **values}
            result = self.supabase.table("app_settings").upsert(
                {
                    "category": category,
                    "settings": merged,
                    "updated_by": updated_by,
                    "updated_at": datetime.utcnow().isoformat(),
                },
                on_conflict="category"
            ).execute()
            if not result.data:
                raise HTTPException(status_code=500, detail="Failed to update settings")
            logger.info(f"Settings category {category} updated by {updated_by}")
            return SettingsCategoryResponse(**result.data[0])
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def get_points_settings(self) -> PointsSettings:
        return PointsSettings(**{**DEFAULT_POINTS_SETTINGS, **self.get_category("points")})

    def get_promoted_poll_settings(self) -> PromotedPollSettings:
        return PromotedPollSettings(**{**DEFAULT_PROMOTED_POLL_SETTINGS, **self.get_category("promoted_polls")})

    def get_supported_currencies(self) -> List[str]:
        """Currencies from settings, else those configured per country, else the built-in list."""
        configured = self.get_category("currencies").get("supported")
        if configured:
            return list(configured)
        try:
            result = self.supabase.table("country_currency_settings")\
                .select("currency_code")\
                .eq("is_active", True)\
                .execute()
            codes = sorted({r["currency_code"] for r in (result.data or []) if r.get("currency_code")})
            if codes:
                return codes
        except Exception as e:
            logger.error(f"Error loading country currencies: {e}")
        return list(DEFAULT_SUPPORTED_CURRENCIES)

    def get_exchange_rates(self, base_currency: Optional[str] = None) -> Dict[str, Dict[str, float]]:
        """Rates as {from_currency: {to_currency: rate}}."""
        try:
            query = self.supabase.table("currency_exchange_rates").select("*")
            if base_currency:
                query = query.eq("from_currency", base_currency.upper())
            result = query.execute()
            rates: Dict[str, Dict[str, float]] = {}
            for row in result.data or []:
                rates.setdefault(row["from_currency"], {})[row["to_currency"]] = float(row["rate"])
            return rates
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def get_exchange_rate(self, from_currency: str, to_currency: str) -> Optional[float]:
        """1.0 for the same currency, None when no rate is stored."""
        from_currency = (from_currency or settings.default_currency).upper()
        to_currency = (to_currency or settings.default_currency).upper()
        if from_currency == to_currency:
            return 1.0
        try:
            result = self.supabase.table("currency_exchange_rates")\
                .select("rate")\
                .eq("from_currency", from_currency)\
                .eq("to_currency", to_currency)\
                .maybe_single()\
                .execute()
            if not result or not result.data:
                return None
            return float(result.data["rate"])
        except Exception as e:
            logger.error(f"Error loading exchange rate {from_currency}->{to_currency}: {e}")
            return None

    def convert_amount(self, amount: float, from_currency: str, to_currency: str) -> float:
        rate = self.get_exchange_rate(from_currency, to_currency)
        if rate is None:
            raise HTTPException(
                status_code=400,
                detail=f"Exchange rate not available for {from_currency} to {to_currency}"
            )
        return amount * rate

    def upsert_exchange_rate(self, rate_data: ExchangeRateUpsert) -> Dict[str, Any]:
        try:
            result = self.supabase.table("currency_exchange_rates").upsert(
                {
                    "from_currency": rate_data.from_currency.upper(),
                    "to_currency": rate_data.to_currency.upper(),
                    "rate": rate_data.rate,
                    "updated_at": datetime.utcnow().isoformat(),
                },
                on_conflict="from_currency,to_currency"
            ).execute()
            if not result.data:
                raise HTTPException(status_code=500, detail="Failed to save exchange rate")
            return result.data[0]
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def get_country_currency(self, country_code: str) -> CountryCurrencyResponse:
        """Currency for a country, the default currency when nothing is configured."""
        country_code = country_code.upper()
        try:
            result = self.supabase.table("country_currency_settings")\
                .select("*")\
                .eq("country_code", country_code)\
                .maybe_single()\
                .execute()
            if not result or not result.data:
                return CountryCurrencyResponse(country_code=country_code, currency_code=settings.default_currency)
            return CountryCurrencyResponse(**result.data)
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def update_country_currency(self, country_code: str, data: CountryCurrencyUpdate) -> CountryCurrencyResponse:
        try:
            result = self.supabase.table("country_currency_settings").upsert(
                {
                    "country_code": country_code.upper(),
                    "currency_code": data.currency_code.upper(),
                    "is_active": data.is_active,
                    "updated_at": datetime.utcnow().isoformat(),
                },
                on_conflict="country_code"
            ).execute()
            if not result.data:
                raise HTTPException(status_code=500, detail="Failed to update country currency")
            return CountryCurrencyResponse(**result.data[0])
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))
