"""Market data settings (quote provider, cache freshness, throttling)."""
import os
from typing import List, Optional
from pydantic import BaseModel, Field


def _env_bool(name: str, default: str) -> bool:
    return os.getenv(name, default).lower() in ("1", "true", "yes")


def _env_list(name: str, default: str) -> List[str]:
    return [item.strip().upper() for item in os.getenv(name, default).split(",") if item.strip()]


class MarketConfig(BaseModel):
    """Settings for the quote provider and the market data cache"""

    finnhub_api_key: Optional[str] = Field(default_factory=lambda: os.getenv("FINNHUB_API_KEY"))
    finnhub_base_url: str = Field(default_factory=lambda: os.getenv("FINNHUB_BASE_URL", "https://finnhub.io/api/v1"))
    http_timeout_seconds: float = Field(default_factory=lambda: float(os.getenv("MARKET_HTTP_TIMEOUT_SECONDS", "10.0")))

    # 캐시 신선도 기준 (기본 5분)
    staleness_seconds: int = Field(default_factory=lambda: int(os.getenv("MARKET_STALENESS_SECONDS", "300")))
    # 업스트림 호출 간 최소 간격 (Finnhub 무료 플랜 한도)
    request_interval_seconds: float = Field(default_factory=lambda: float(os.getenv("MARKET_REQUEST_INTERVAL_SECONDS", "1.1")))
    sparkline_points: int = Field(default_factory=lambda: int(os.getenv("MARKET_SPARKLINE_POINTS", "7")))

    default_exchange: str = Field(default_factory=lambda: os.getenv("MARKET_DEFAULT_EXCHANGE", "OL").upper())
    warmup_on_startup: bool = Field(
        default_factory=lambda: _env_bool("MARKET_WARMUP_ON_STARTUP", "false" if os.getenv("APP_ENV") == "test" else "true")
    )
    worker_exchanges: List[str] = Field(default_factory=lambda: _env_list("MARKET_WORKER_EXCHANGES", "OL"))
    refresh_interval_minutes: int = Field(default_factory=lambda: int(os.getenv("MARKET_REFRESH_INTERVAL_MINUTES", "5")))

    @property
    def is_configured(self) -> bool:
        """Check if the quote provider API key is set"""
        return bool(self.finnhub_api_key)


# Singleton instance
market_config = MarketConfig()
