from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session
from sqlalchemy.exc import SQLAlchemyError
from typing import List
import logging

from bizbank.common.database.db_connector import get_db
from bizbank.common.models.user import User
from bizbank.common.schemas.market import (
    MarketQuote as MarketQuoteSchema,
    PriceAlertUpdate,
    WatchedAsset as WatchedAssetSchema,
    WatchedAssetCreate,
    WatchlistEntry,
)
from bizbank.common.services.watchlist_service import (
    WatchlistService,
    get_watchlist_service,
    is_alert_triggered,
)
from bizbank.api.auth.jwt_handler import get_current_user

router = APIRouter(prefix="/market/watchlist", tags=["watchlist"])
logger = logging.getLogger(__name__)


def _persistence_error():
    return HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="관심 종목 처리 중 오류가 발생했습니다.")


@router.get("", response_model=List[WatchlistEntry], tags=["watchlist"])
def get_watchlist(db: Session = Depends(get_db), current_user: User = Depends(get_current_user),
                  watchlist_service: WatchlistService = Depends(get_watchlist_service)):
    """내 관심 종목 + 캐시 시세 (캐시에 없으면 market_data는 null)"""
    rows = watchlist_service.get_user_watched_assets(db, current_user.id)
    return [
        WatchlistEntry(
            watched_asset=WatchedAssetSchema.model_validate(asset),
            market_data=MarketQuoteSchema.model_validate(quote) if quote is not None else None,
            alert_triggered=is_alert_triggered(asset, quote),
        )
        for asset, quote in rows
    ]


@router.post("", response_model=WatchedAssetSchema, status_code=status.HTTP_201_CREATED, tags=["watchlist"])
async def add_to_watchlist(item: WatchedAssetCreate, db: Session = Depends(get_db),
                           current_user: User = Depends(get_current_user),
                           watchlist_service: WatchlistService = Depends(get_watchlist_service)):
    symbol = item.symbol.strip().upper()
    if not symbol:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="종목 코드가 비어 있습니다.")
    metadata = item.model_dump(include={"name", "exchange", "asset_type", "region"})
    try:
        return await watchlist_service.add_watched_asset(db, current_user.id, symbol,
                                                         is_favorite=item.is_favorite, metadata=metadata)
    except SQLAlchemyError:
        raise _persistence_error()


@router.delete("/{symbol}", tags=["watchlist"])
def remove_from_watchlist(symbol: str, db: Session = Depends(get_db), current_user: User = Depends(get_current_user),
                          watchlist_service: WatchlistService = Depends(get_watchlist_service)):
    """관심 종목 삭제. 없는 종목이어도 성공으로 응답합니다."""
    symbol = symbol.strip().upper()
    try:
        removed = watchlist_service.remove_watched_asset(db, current_user.id, symbol)
    except SQLAlchemyError:
        raise _persistence_error()
    return {"symbol": symbol, "removed": removed}


@router.post("/{symbol}/favorite", response_model=WatchedAssetSchema, tags=["watchlist"])
async def toggle_favorite(symbol: str, db: Session = Depends(get_db), current_user: User = Depends(get_current_user),
                          watchlist_service: WatchlistService = Depends(get_watchlist_service)):
    """즐겨찾기 전환. 관심 목록에 없으면 즐겨찾기로 추가합니다."""
    symbol = symbol.strip().upper()
    try:
        return await watchlist_service.toggle_favorite(db, current_user.id, symbol)
    except SQLAlchemyError:
        raise _persistence_error()


@router.put("/{symbol}/alert", response_model=WatchedAssetSchema, tags=["watchlist"])
def set_price_alert(symbol: str, alert: PriceAlertUpdate, db: Session = Depends(get_db),
                    current_user: User = Depends(get_current_user),
                    watchlist_service: WatchlistService = Depends(get_watchlist_service)):
    """가격 알림 설정/해제 (alert_price가 null이면 해제)"""
    symbol = symbol.strip().upper()
    try:
        asset = watchlist_service.set_price_alert(db, current_user.id, symbol, alert.alert_price, alert.alert_type)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    except SQLAlchemyError:
        raise _persistence_error()
    if asset is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"관심 목록에 없는 종목입니다: {symbol}")
    return asset
