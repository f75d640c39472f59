from pydantic import BaseModel, Field
from typing import Optional, Dict, Any, List
from datetime import datetime


class SettingsCategoryResponse(BaseModel):
    category: str
    settings: Dict[str, Any]
    updated_at: Optional[datetime] = None


class SettingsCategoryUpdate(BaseModel):
    settings: Dict[str, Any]


class PointsSettings(BaseModel):
    pollVotePoints: int = 50
    triviaEasyPoints: int = 10
    triviaMediumPoints: int = 20
    triviaHardPoints: int = 30
    adWatchPoints: int = 15
    referralBonusPoints: int = 100
    maxStreakMultiplier: float = 2.0
    streakIncrement: float = 0.1


class PromotedPollSettings(BaseModel):
    default_cost_per_vote: float = 0.05
    minimum_budget: float = 10
    maximum_budget: float = 1000
    points_to_usd_conversion: int = 100
    is_enabled: bool = True


class ExchangeRateUpsert(BaseModel):
    from_currency: str = Field(..., min_length=3, max_length=3)
    to_currency: str = Field(..., min_length=3, max_length=3)
    rate: float = Field(..., gt=0)


class ExchangeRateResponse(BaseModel):
    from_currency: str
    to_currency: str
    rate: Optional[float] = None


class CountryCurrencyUpdate(BaseModel):
    currency_code: str = Field(..., min_length=3, max_length=3)
    is_active: bool = True


class CountryCurrencyResponse(BaseModel):
    country_code: str
    currency_code: str
    is_active: bool = True


class SupportedCurrenciesResponse(BaseModel):
    currencies: List[str]
