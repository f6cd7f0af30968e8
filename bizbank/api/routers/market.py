from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session
from sqlalchemy.exc import SQLAlchemyError
from typing import List, Optional
from datetime import date, timedelta
import logging

from bizbank.common.database.db_connector import get_db
from bizbank.common.models.user import User
from bizbank.common.schemas.market import (
    CatalogStock as CatalogStockSchema,
    Exchange as ExchangeSchema,
    MarketNewsItem,
    MarketQuote as MarketQuoteSchema,
)
from bizbank.common.services import exchange_catalog
from bizbank.common.services.market_data_service import MarketDataService, get_market_data_service
from bizbank.common.utils.exceptions import QuoteProviderError, UnsupportedExchangeError
from bizbank.common.utils.time_utils import utcnow
from bizbank.api.auth.jwt_handler import get_current_user

router = APIRouter(prefix="/market", tags=["market"])
logger = logging.getLogger(__name__)


def parse_symbols(symbols: str) -> List[str]:
    """'eqnr.ol, AAPL,,' -> ['EQNR.OL', 'AAPL'] (순서 유지, 중복 제거)"""
    parsed = []
    for symbol in symbols.split(","):
        symbol = symbol.strip().upper()
        if symbol and symbol not in parsed:
            parsed.append(symbol)
    return parsed


@router.get("/exchanges", response_model=List[ExchangeSchema], tags=["market"])
def list_exchanges():
    """지원 거래소와 구성 종목 목록"""
    return [
        ExchangeSchema(
            code=exchange.code,
            name=exchange.name,
            country=exchange.country,
            currency=exchange.currency,
            timezone=exchange.timezone,
            stocks=[CatalogStockSchema(**stock._asdict()) for stock in exchange.stocks],
        )
        for exchange in exchange_catalog.list_exchanges()
    ]


@router.get("/live/{exchange}", response_model=List[MarketQuoteSchema], tags=["market"])
async def get_live_exchange_data(exchange: str, db: Session = Depends(get_db),
                                 market_data_service: MarketDataService = Depends(get_market_data_service),
                                 current_user: User = Depends(get_current_user)):
    """거래소 구성 종목 중 오래된 종목을 갱신한 뒤 캐시된 시세를 반환합니다."""
    exchange = exchange.upper()
    logger.debug(f"거래소 시세 요청: exchange={exchange}, user_id={current_user.id}")
    try:
        return await market_data_service.get_market_data_by_exchange(exchange, db)
    except UnsupportedExchangeError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    except SQLAlchemyError:
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="시세 캐시 처리 중 오류가 발생했습니다.")


@router.get("/data", response_model=List[MarketQuoteSchema], tags=["market"])
def get_cached_market_data(symbols: str = Query("", description="쉼표로 구분한 종목 코드. 비우면 전체 캐시"),
                           db: Session = Depends(get_db),
                           market_data_service: MarketDataService = Depends(get_market_data_service),
                           current_user: User = Depends(get_current_user)):
    """캐시만 조회합니다 (업스트림 호출 없음)."""
    requested = parse_symbols(symbols) if symbols.strip() else None
    return market_data_service.get_market_data_from_db(db, requested)


@router.get("/quote/{symbol}", response_model=MarketQuoteSchema, tags=["market"])
async def get_quote(symbol: str, db: Session = Depends(get_db),
                    market_data_service: MarketDataService = Depends(get_market_data_service),
                    current_user: User = Depends(get_current_user)):
    """단일 종목 시세. 캐시 신선도와 관계없이 갱신합니다."""
    symbol = symbol.strip().upper()
    try:
        quote = await market_data_service.get_quote(symbol, db)
    except QuoteProviderError as e:
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=str(e))
    except SQLAlchemyError:
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="시세 캐시 처리 중 오류가 발생했습니다.")
    if quote is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"Quote not found: {symbol}")
    return quote


@router.get("/news", response_model=List[MarketNewsItem], tags=["market"])
async def get_market_news(category: str = "general", count: int = Query(20, ge=1, le=100),
                          market_data_service: MarketDataService = Depends(get_market_data_service),
                          current_user: User = Depends(get_current_user)):
    """시장 뉴스 (Finnhub 그대로 전달)"""
    try:
        news = await market_data_service.get_market_news(category, count)
    except QuoteProviderError as e:
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=str(e))
    return [MarketNewsItem.model_validate(item) for item in news]


@router.get("/news/{symbol}", response_model=List[MarketNewsItem], tags=["market"])
async def get_company_news(symbol: str, from_date: Optional[date] = None, to_date: Optional[date] = None,
                           market_data_service: MarketDataService = Depends(get_market_data_service),
                           current_user: User = Depends(get_current_user)):
    """종목 뉴스. 기간을 주지 않으면 최근 7일."""
    symbol = symbol.strip().upper()
    to_date = to_date or utcnow().date()
    from_date = from_date or to_date - timedelta(days=7)
    if from_date > to_date:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="from_date는 to_date보다 늦을 수 없습니다.")
    try:
        news = await market_data_service.get_company_news(symbol, from_date, to_date)
    except QuoteProviderError as e:
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=str(e))
    return [MarketNewsItem.model_validate(item) for item in news]
