import asyncio
import logging
import random
from decimal import Decimal, InvalidOperation
from typing import Any, Dict, List, Optional

import httpx

from bizbank.common.config.market_config import MarketConfig, market_config
from bizbank.common.schemas.market import NormalizedQuote
from bizbank.common.services import exchange_catalog
from bizbank.common.utils.exceptions import QuoteProviderError
from bizbank.common.utils.http_client import get_retry_client

logger = logging.getLogger(__name__)

PRICE_QUANT = Decimal("0.0001")


def to_decimal(value: Any) -> Optional[Decimal]:
    """제공자 숫자(float/int/str)를 소수 4자리 Decimal로 변환합니다. 변환 불가 시 None."""
    if value is None:
        return None
    try:
        return Decimal(str(value)).quantize(PRICE_QUANT)
    except (InvalidOperation, ValueError):
        return None


class FinnhubClient:
    """Finnhub REST API 래퍼. 모든 실패는 QuoteProviderError로 변환됩니다."""

    def __init__(self, config: MarketConfig = market_config):
        self.config = config

    async def fetch(self, endpoint: str, params: Optional[Dict[str, Any]] = None) -> Any:
        if not self.config.finnhub_api_key:
            raise QuoteProviderError("FINNHUB_API_KEY가 설정되지 않았습니다.")

        query = dict(params or {})
        query["token"] = self.config.finnhub_api_key
        try:
            async with get_retry_client(base_url=self.config.finnhub_base_url, timeout=self.config.http_timeout_seconds) as client:
                resp = await client.get(endpoint, params=query)
                resp.raise_for_status()
                data = resp.json()
        except httpx.HTTPStatusError as e:
            logger.error(f"Finnhub 응답 오류: endpoint={endpoint}, status={e.response.status_code}")
            raise QuoteProviderError(f"Finnhub API error: {e.response.reason_phrase}", status_code=e.response.status_code) from e
        except httpx.RequestError as e:
            logger.error(f"Finnhub 요청 실패: endpoint={endpoint}, error={e}", exc_info=True)
            raise QuoteProviderError(f"Finnhub API 요청 실패: {e}") from e
        except ValueError as e:
            logger.error(f"Finnhub 응답 파싱 실패: endpoint={endpoint}, error={e}")
            raise QuoteProviderError(f"Finnhub API 응답 파싱 실패: {e}") from e

        if isinstance(data, dict) and data.get("error"):
            logger.error(f"Finnhub API가 오류를 반환했습니다. endpoint={endpoint}, error={data['error']}")
            raise QuoteProviderError(f"Finnhub API error: {data['error']}")

        return data

    async def get_quote(self, symbol: str) -> Dict[str, Any]:
        logger.debug(f"get_quote 호출: symbol={symbol}")
        return await self.fetch("/quote", {"symbol": symbol})

    async def get_company_profile(self, symbol: str) -> Dict[str, Any]:
        logger.debug(f"get_company_profile 호출: symbol={symbol}")
        return await self.fetch("/stock/profile2", {"symbol": symbol})

    async def get_market_news(self, category: str = "general", count: int = 20) -> List[Dict[str, Any]]:
        logger.debug(f"get_market_news 호출: category={category}, count={count}")
        news = await self.fetch("/news", {"category": category})
        # Finnhub /news는 개수 제한 파라미터가 없어 클라이언트에서 자름
        return list(news or [])[:count]

    async def get_company_news(self, symbol: str, from_date: str, to_date: str) -> List[Dict[str, Any]]:
        logger.debug(f"get_company_news 호출: symbol={symbol}, from={from_date}, to={to_date}")
        news = await self.fetch("/company-news", {"symbol": symbol, "from": from_date, "to": to_date})
        return list(news or [])


class SparklineSource:
    """스파크라인용 시계열 공급자 인터페이스."""

    def generate(self, price: Decimal, change: Optional[Decimal]) -> List[float]:
        raise NotImplementedError


class RandomWalkSparkline(SparklineSource):
    """
    전일 종가에서 현재가까지 선형으로 이동하며 무작위 변동을 더한 가짜 시계열.
    실제 과거 시세가 아니며 화면 표시용 근사치입니다.
    """

    def __init__(self, points: int = 7, jitter: float = 0.05, rng: Optional[random.Random] = None):
        self.points = max(points, 1)
        self.jitter = jitter
        self.rng = rng or random.Random()

    def generate(self, price: Decimal, change: Optional[Decimal]) -> List[float]:
        current = float(price)
        delta = float(change or 0)
        base = current - delta
        steps = max(self.points - 1, 1)

        series = []
        for i in range(self.points):
            variation = (self.rng.random() - 0.5) * (current * self.jitter)
            series.append(round(base + delta * (i / steps) + variation, 2))
        return series


class QuoteFetcher:
    """종목 하나의 시세와 (가능하면) 회사 프로필을 받아 NormalizedQuote로 합칩니다."""

    def __init__(self, client: Optional[FinnhubClient] = None, sparkline_source: Optional[SparklineSource] = None,
                 config: MarketConfig = market_config):
        self.client = client or FinnhubClient(config)
        self.sparkline_source = sparkline_source or RandomWalkSparkline(points=config.sparkline_points)

    async def _get_profile_or_none(self, symbol: str) -> Optional[Dict[str, Any]]:
        try:
            profile = await self.client.get_company_profile(symbol)
        except QuoteProviderError as e:
            logger.warning(f"회사 프로필 조회 실패, 카탈로그 값으로 대체: symbol={symbol}, error={e}")
            return None
        # 프로필이 없는 종목은 빈 객체가 옴
        return profile or None

    async def fetch(self, symbol: str) -> NormalizedQuote:
        logger.debug(f"시세 조회 시작: symbol={symbol}")
        # 시세 조회가 실패해도 프로필 요청이 끝날 때까지 기다림
        quote, profile = await asyncio.gather(
            self.client.get_quote(symbol),
            self._get_profile_or_none(symbol),
            return_exceptions=True,
        )
        if isinstance(quote, BaseException):
            raise quote
        if isinstance(profile, BaseException):
            logger.warning(f"회사 프로필 처리 실패, 카탈로그 값으로 대체: symbol={symbol}, error={profile}")
            profile = None

        price = to_decimal(quote.get("c")) if isinstance(quote, dict) else None
        previous_close = to_decimal(quote.get("pc")) if isinstance(quote, dict) else None
        if price is None or (price == 0 and not previous_close):
            raise QuoteProviderError(f"시세 데이터 없음: {symbol}")

        change = to_decimal(quote.get("d"))
        catalog_stock = exchange_catalog.find_catalog_stock(symbol)
        profile = profile or {}

        # Finnhub는 백만 단위로 제공. 숫자가 아니면 시가총액 없음
        market_cap = None
        cap_millions = to_decimal(profile.get("marketCapitalization"))
        if cap_millions is not None and cap_millions.is_finite() and cap_millions > 0:
            market_cap = str(int(cap_millions * 1_000_000))

        normalized = NormalizedQuote(
            symbol=symbol,
            name=profile.get("name") or (catalog_stock.name if catalog_stock else symbol),
            exchange=exchange_catalog.exchange_code_for_symbol(symbol),
            price=price,
            change=change,
            change_percent=to_decimal(quote.get("dp")),
            previous_close=previous_close,
            day_high=to_decimal(quote.get("h")),
            day_low=to_decimal(quote.get("l")),
            market_cap=market_cap,
            currency=profile.get("currency") or exchange_catalog.default_currency_for_symbol(symbol),
            sector=(catalog_stock.sector if catalog_stock else None) or profile.get("finnhubIndustry") or "Unknown",
            sparkline_data=self.sparkline_source.generate(price, change),
        )
        logger.debug(f"시세 조회 완료: symbol={symbol}, price={normalized.price}, currency={normalized.currency}")
        return normalized
