from pydantic import BaseModel, ConfigDict, Field
from typing import List, Optional, Literal
from decimal import Decimal
from datetime import datetime


class NormalizedQuote(BaseModel):
    """시세 + 회사 프로필을 합쳐 정규화한 레코드 (캐시 upsert 입력)"""
    symbol: str
    name: str
    exchange: str
    price: Decimal
    change: Optional[Decimal] = None
    change_percent: Optional[Decimal] = None
    previous_close: Optional[Decimal] = None
    day_high: Optional[Decimal] = None
    day_low: Optional[Decimal] = None
    market_cap: Optional[str] = None
    currency: str
    sector: str
    sparkline_data: List[float] = Field(default_factory=list)


class MarketQuote(BaseModel):
    symbol: str
    name: Optional[str] = None
    exchange: Optional[str] = None
    price: Decimal
    change: Optional[Decimal] = None
    change_percent: Optional[Decimal] = None
    previous_close: Optional[Decimal] = None
    day_high: Optional[Decimal] = None
    day_low: Optional[Decimal] = None
    market_cap: Optional[str] = None
    currency: Optional[str] = None
    sector: Optional[str] = None
    last_updated: datetime
    sparkline_data: Optional[List[float]] = None

    model_config = ConfigDict(from_attributes=True)


class CatalogStock(BaseModel):
    symbol: str
    name: str
    sector: str


class Exchange(BaseModel):
    code: str
    name: str
    country: str
    currency: str
    timezone: str
    stocks: List[CatalogStock]


class WatchedAssetCreate(BaseModel):
    symbol: str = Field(..., min_length=1, max_length=20)
    is_favorite: bool = False
    name: Optional[str] = None
    exchange: Optional[str] = None
    asset_type: Optional[str] = None
    region: Optional[str] = None


class PriceAlertUpdate(BaseModel):
    # alert_price가 None이면 알림 해제
    alert_price: Optional[Decimal] = Field(None, gt=0)
    alert_type: Optional[Literal["above", "below"]] = None


class WatchedAsset(BaseModel):
    id: int
    user_id: str
    symbol: str
    name: Optional[str] = None
    exchange: Optional[str] = None
    asset_type: str
    region: str
    is_favorite: bool
    alert_price: Optional[Decimal] = None
    alert_type: Optional[str] = None
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class WatchlistEntry(BaseModel):
    watched_asset: WatchedAsset
    market_data: Optional[MarketQuote] = None
    alert_triggered: bool = False


class MarketNewsItem(BaseModel):
    category: Optional[str] = None
    published_at: Optional[int] = Field(None, alias="datetime")
    headline: Optional[str] = None
    id: Optional[int] = None
    image: Optional[str] = None
    related: Optional[str] = None
    source: Optional[str] = None
    summary: Optional[str] = None
    url: Optional[str] = None

    model_config = ConfigDict(populate_by_name=True)
