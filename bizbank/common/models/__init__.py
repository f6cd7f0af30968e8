from .user import User
from .company import Company
from .market_quote import MarketQuote
from .watched_asset import WatchedAsset

__all__ = [
    "User",
    "Company",
    "MarketQuote",
    "WatchedAsset",
]
