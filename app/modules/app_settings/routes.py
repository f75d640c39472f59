from fastapi import APIRouter, Depends
from app.database.supabase_client import get_supabase
from app.modules.app_settings.schemas import (
    SettingsCategoryResponse, SettingsCategoryUpdate, PointsSettings, PromotedPollSettings,
    ExchangeRateUpsert, ExchangeRateResponse, CountryCurrencyUpdate, CountryCurrencyResponse,
    SupportedCurrenciesResponse
)
from app.modules.app_settings.service import AppSettingsService
from app.core.dependencies import require_permission
from supabase import Client
from typing import Dict, Optional

router = APIRouter(prefix="/settings", tags=["settings"])


def get_app_settings_service(supabase: Client = Depends(get_supabase)) -> AppSettingsService:
    return AppSettingsService(supabase)


@router.get("/points", response_model=PointsSettings)
async def get_points_settings(
    user_data: Dict = Depends(require_permission("settings:read")),
    service: AppSettingsService = Depends(get_app_settings_service)
):
    return service.get_points_settings()


@router.get("/promoted-polls", response_model=PromotedPollSettings)
async def get_promoted_poll_settings(
    user_data: Dict = Depends(require_permission("settings:read")),
    service: AppSettingsService = Depends(get_app_settings_service)
):
    return service.get_promoted_poll_settings()


@router.get("/currencies", response_model=SupportedCurrenciesResponse)
async def get_supported_currencies(
    user_data: Dict = Depends(require_permission("settings:read")),
    service: AppSettingsService = Depends(get_app_settings_service)
):
    return SupportedCurrenciesResponse(currencies=service.get_supported_currencies())


@router.get("/exchange-rates")
async def get_exchange_rates(
    base: Optional[str] = None,
    user_data: Dict = Depends(require_permission("settings:read")),
    service: AppSettingsService = Depends(get_app_settings_service)
):
    return service.get_exchange_rates(base)


@router.get("/exchange-rates/{from_currency}/{to_currency}", response_model=ExchangeRateResponse)
async def get_exchange_rate(
    from_currency: str,
    to_currency: str,
    user_data: Dict = Depends(require_permission("settings:read")),
    service: AppSettingsService = Depends(get_app_settings_service)
):
    """Rate between two currencies; rate is null when none is stored"""
    return ExchangeRateResponse(
        from_currency=from_currency.upper(),
        to_currency=to_currency.upper(),
        rate=service.get_exchange_rate(from_currency, to_currency)
    )


@router.put("/exchange-rates")
async def upsert_exchange_rate(
    rate_data: ExchangeRateUpsert,
    user_data: Dict = Depends(require_permission("settings:update")),
    service: AppSettingsService = Depends(get_app_settings_service)
):
    return service.upsert_exchange_rate(rate_data)


@router.get("/countries/{country_code}/currency", response_model=CountryCurrencyResponse)
async def get_country_currency(
    country_code: str,
    user_data: Dict = Depends(require_permission("settings:read")),
    service: AppSettingsService = Depends(get_app_settings_service)
):
    return service.get_country_currency(country_code)


@router.put("/countries/{country_code}/currency", response_model=CountryCurrencyResponse)
async def update_country_currency(
    country_code: str,
    data: CountryCurrencyUpdate,
    user_data: Dict = Depends(require_permission("settings:update")),
    service: AppSettingsService = Depends(get_app_settings_service)
):
    return service.update_country_currency(country_code, data)


@router.get("/{category}", response_model=SettingsCategoryResponse)
async def get_settings(
    category: str,
    user_data: Dict = Depends(require_permission("settings:read")),
    service: AppSettingsService = Depends(get_app_settings_service)
):
    return service.get_settings(category)


@router.put("/{category}", response_model=SettingsCategoryResponse)
async def update_settings(
    category: str,
    body: SettingsCategoryUpdate,
    user_data: Dict = Depends(require_permission("settings:update")),
    service: AppSettingsService = Depends(get_app_settings_service)
):
    """Merge the given values into a settings category (admin)"""
    return service.update_settings(category, body.settings, updated_by=user_data["id"])
