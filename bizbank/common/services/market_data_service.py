from sqlalchemy.orm import Session
from sqlalchemy.exc import SQLAlchemyError
from bizbank.common.database.db_connector import get_dialect_insert
from bizbank.common.models.market_quote import MarketQuote
from bizbank.common.config.market_config import MarketConfig, market_config
from bizbank.common.schemas.market import NormalizedQuote
from bizbank.common.services import exchange_catalog
from bizbank.common.services.quote_client import QuoteFetcher
from bizbank.common.services.throttle import RequestThrottle
from bizbank.common.utils.exceptions import QuoteProviderError, UnsupportedExchangeError
from bizbank.common.utils.time_utils import utcnow
from typing import List, Optional
import asyncio
import logging
from datetime import date, datetime, timedelta

logger = logging.getLogger(__name__)

# 충돌(이미 캐시된 종목) 시 갱신하는 컬럼. 이름/거래소/통화/섹터는 최초 삽입 값을 유지합니다.
REFRESH_COLUMNS = (
    "price",
    "change",
    "change_percent",
    "previous_close",
    "day_high",
    "day_low",
    "sparkline_data",
    "last_updated",
)


class MarketDataService:
    def __init__(self, fetcher: Optional[QuoteFetcher] = None, config: MarketConfig = market_config,
                 clock=utcnow, sleep=asyncio.sleep):
        self.config = config
        self.fetcher = fetcher or QuoteFetcher(config=config)
        self._clock = clock
        self._sleep = sleep

    @property
    def staleness(self) -> timedelta:
        return timedelta(seconds=self.config.staleness_seconds)

    def is_stale(self, row: Optional[MarketQuote], now: Optional[datetime] = None) -> bool:
        if row is None or row.last_updated is None:
            return True
        now = now or self._clock()
        return now - row.last_updated > self.staleness

    def get_cached_quote(self, symbol: str, db: Session) -> Optional[MarketQuote]:
        logger.debug(f"get_cached_quote 호출: symbol={symbol}")
        return db.query(MarketQuote).filter(MarketQuote.symbol == symbol).first()

    def upsert_quote(self, quote: NormalizedQuote, db: Session) -> None:
        """종목 하나를 단일 INSERT ... ON CONFLICT 문으로 저장합니다."""
        values = quote.model_dump()
        values["last_updated"] = self._clock()

        insert = get_dialect_insert(db)
        stmt = insert(MarketQuote).values(**values)
        stmt = stmt.on_conflict_do_update(
            index_elements=["symbol"],
            set_={column: stmt.excluded[column] for column in REFRESH_COLUMNS},
        )
        try:
            db.execute(stmt)
            db.commit()
            logger.info(f"시세 캐시 저장 성공: symbol={quote.symbol}, price={quote.price}")
        except SQLAlchemyError as e:
            db.rollback()
            logger.error(f"시세 캐시 저장 실패: symbol={quote.symbol}, error={e}", exc_info=True)
            raise

    async def update_market_data(self, symbol: str, db: Session) -> NormalizedQuote:
        """신선도와 관계없이 업스트림에서 받아 캐시에 저장합니다."""
        logger.debug(f"update_market_data 호출: symbol={symbol}")
        try:
            quote = await self.fetcher.fetch(symbol)
        except QuoteProviderError as e:
            logger.error(f"시세 갱신 실패: symbol={symbol}, error={e}")
            raise
        self.upsert_quote(quote, db)
        return quote

    async def refresh_if_stale(self, symbol: str, db: Session, throttle: Optional[RequestThrottle] = None) -> bool:
        """캐시가 없거나 오래된 경우에만 갱신합니다. 업스트림을 호출했으면 True."""
        row = self.get_cached_quote(symbol, db)
        if not self.is_stale(row):
            logger.debug(f"캐시 적중: symbol={symbol}, last_updated={row.last_updated}")
            return False
        if throttle is not None:
            await throttle.wait()
        await self.update_market_data(symbol, db)
        return True

    async def _refresh_batch(self, symbols: List[str], db: Session) -> dict:
        throttle = RequestThrottle(self.config.request_interval_seconds, sleep=self._sleep)
        refreshed, fresh, errors = [], [], []
        for symbol in symbols:
            try:
                if await self.refresh_if_stale(symbol, db, throttle=throttle):
                    refreshed.append(symbol)
                else:
                    fresh.append(symbol)
            except QuoteProviderError as e:
                # 한 종목 실패가 나머지 종목 갱신을 막지 않음
                logger.error(f"배치 갱신 중 '{symbol}' 처리에서 오류 발생: {e}")
                errors.append(symbol)
            except Exception as e:
                logger.error(f"배치 갱신 중 '{symbol}' 처리에서 예상치 못한 오류 발생: {e}", exc_info=True)
                errors.append(symbol)
        logger.info(f"배치 갱신 완료. 갱신 {len(refreshed)}개, 캐시 적중 {len(fresh)}개, 오류 {len(errors)}개.")
        return {"refreshed": refreshed, "fresh": fresh, "errors": errors}

    async def get_or_refresh(self, symbols: List[str], db: Session) -> List[MarketQuote]:
        logger.debug(f"get_or_refresh 호출: symbols={symbols}")
        await self._refresh_batch(symbols, db)
        return self.get_market_data_from_db(db, symbols)

    async def initialize_exchange_data(self, exchange: str, db: Session) -> dict:
        """거래소 구성 종목 중 오래된 종목만 순차적으로 갱신합니다. (best-effort)"""
        logger.debug(f"initialize_exchange_data 호출: exchange={exchange}")
        if not exchange_catalog.is_supported(exchange):
            logger.warning(f"카탈로그에 없는 거래소: {exchange}. 갱신을 건너뜁니다.")
            return {"refreshed": [], "fresh": [], "errors": []}
        return await self._refresh_batch(exchange_catalog.get_exchange_symbols(exchange), db)

    async def get_market_data_by_exchange(self, exchange: str, db: Session) -> List[MarketQuote]:
        if not exchange_catalog.is_supported(exchange):
            raise UnsupportedExchangeError(exchange)
        await self.initialize_exchange_data(exchange, db)
        return self.get_market_data_from_db(db, exchange_catalog.get_exchange_symbols(exchange))

    def get_market_data_from_db(self, db: Session, symbols: Optional[List[str]] = None) -> List[MarketQuote]:
        """캐시만 읽습니다. 네트워크를 호출하지 않습니다."""
        logger.debug(f"get_market_data_from_db 호출: symbols={symbols}")
        query = db.query(MarketQuote)
        if symbols is not None:
            if not symbols:
                return []
            query = query.filter(MarketQuote.symbol.in_(symbols))
        rows = query.order_by(MarketQuote.last_updated.desc(), MarketQuote.symbol).all()
        logger.debug(f"캐시 조회 결과: {len(rows)}개 종목.")
        return rows

    async def get_quote(self, symbol: str, db: Session) -> Optional[MarketQuote]:
        """단일 종목 조회. 항상 먼저 갱신한 뒤 캐시 행을 반환합니다."""
        await self.update_market_data(symbol, db)
        return self.get_cached_quote(symbol, db)

    async def get_market_news(self, category: str = "general", count: int = 20) -> List[dict]:
        logger.debug(f"get_market_news 호출: category={category}, count={count}")
        return await self.fetcher.client.get_market_news(category, count)

    async def get_company_news(self, symbol: str, from_date: date, to_date: date) -> List[dict]:
        logger.debug(f"get_company_news 호출: symbol={symbol}, from={from_date}, to={to_date}")
        return await self.fetcher.client.get_company_news(symbol, from_date.isoformat(), to_date.isoformat())


def get_market_data_service():
    return MarketDataService()
