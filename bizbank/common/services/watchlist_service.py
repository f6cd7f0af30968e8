from sqlalchemy.orm import Session
from sqlalchemy.exc import SQLAlchemyError
from bizbank.common.models.watched_asset import WatchedAsset
from bizbank.common.models.market_quote import MarketQuote
from bizbank.common.database.db_connector import get_dialect_insert
from bizbank.common.services.market_data_service import MarketDataService
from bizbank.common.utils.exceptions import QuoteProviderError
from bizbank.common.utils.time_utils import utcnow
from decimal import Decimal
from typing import List, Optional, Tuple
import logging

logger = logging.getLogger(__name__)

ALERT_TYPES = ("above", "below")


def normalize_symbol(symbol: str) -> str:
    return symbol.strip().upper()


def is_alert_triggered(asset: WatchedAsset, quote: Optional[MarketQuote]) -> bool:
    """관심 종목의 가격 알림 조건이 현재 캐시 시세로 충족되는지 확인합니다."""
    if asset.alert_price is None or quote is None or quote.price is None:
        return False
    if asset.alert_type == "above":
        return quote.price >= asset.alert_price
    if asset.alert_type == "below":
        return quote.price <= asset.alert_price
    return False


class WatchlistService:
    def __init__(self, market_data_service: Optional[MarketDataService] = None, clock=utcnow):
        self.market_data_service = market_data_service or MarketDataService()
        self._clock = clock

    def get_watched_asset(self, db: Session, user_id: str, symbol: str) -> Optional[WatchedAsset]:
        logger.debug(f"get_watched_asset 호출: user_id={user_id}, symbol={symbol}")
        return db.query(WatchedAsset).filter(
            WatchedAsset.user_id == user_id,
            WatchedAsset.symbol == symbol
        ).first()

    async def add_watched_asset(self, db: Session, user_id: str, symbol: str, is_favorite: bool = False,
                                metadata: Optional[dict] = None) -> WatchedAsset:
        symbol = normalize_symbol(symbol)
        metadata = metadata or {}
        logger.debug(f"관심 종목 추가 시도: user_id={user_id}, symbol={symbol}, is_favorite={is_favorite}")

        # 시세 캐시 갱신은 best-effort. 실패해도 관심 종목은 추가합니다.
        try:
            await self.market_data_service.refresh_if_stale(symbol, db)
        except QuoteProviderError as e:
            logger.warning(f"시세를 가져오지 못했지만 관심 종목은 추가합니다: symbol={symbol}, error={e}")

        now = self._clock()
        insert = get_dialect_insert(db)
        stmt = insert(WatchedAsset).values(
            user_id=user_id,
            symbol=symbol,
            name=metadata.get("name"),
            exchange=metadata.get("exchange"),
            asset_type=metadata.get("asset_type") or "stock",
            region=metadata.get("region") or "Global",
            is_favorite=is_favorite,
            created_at=now,
            updated_at=now,
        )
        stmt = stmt.on_conflict_do_update(
            index_elements=["user_id", "symbol"],
            set_={"is_favorite": stmt.excluded.is_favorite, "updated_at": stmt.excluded.updated_at},
        )
        try:
            db.execute(stmt)
            db.commit()
        except SQLAlchemyError as e:
            db.rollback()
            logger.error(f"관심 종목 추가 실패: user_id={user_id}, symbol={symbol}, error={e}", exc_info=True)
            raise
        logger.info(f"관심 종목 추가 성공: user_id={user_id}, symbol={symbol}")
        return self.get_watched_asset(db, user_id, symbol)

    async def toggle_favorite(self, db: Session, user_id: str, symbol: str) -> WatchedAsset:
        symbol = normalize_symbol(symbol)
        existing = self.get_watched_asset(db, user_id, symbol)
        if existing is None:
            logger.debug(f"관심 목록에 없는 종목을 즐겨찾기로 추가: user_id={user_id}, symbol={symbol}")
            return await self.add_watched_asset(db, user_id, symbol, is_favorite=True)

        existing.is_favorite = not existing.is_favorite
        existing.updated_at = self._clock()
        try:
            db.commit()
            db.refresh(existing)
        except SQLAlchemyError as e:
            db.rollback()
            logger.error(f"즐겨찾기 변경 실패: user_id={user_id}, symbol={symbol}, error={e}", exc_info=True)
            raise
        logger.info(f"즐겨찾기 변경: user_id={user_id}, symbol={symbol}, is_favorite={existing.is_favorite}")
        return existing

    def remove_watched_asset(self, db: Session, user_id: str, symbol: str) -> bool:
        """관심 종목을 삭제합니다. 없으면 아무 일도 하지 않고 False를 반환합니다."""
        symbol = normalize_symbol(symbol)
        logger.debug(f"관심 종목 제거 시도: user_id={user_id}, symbol={symbol}")
        try:
            deleted = db.query(WatchedAsset).filter(
                WatchedAsset.user_id == user_id,
                WatchedAsset.symbol == symbol
            ).delete(synchronize_session=False)
            db.commit()
        except SQLAlchemyError as e:
            db.rollback()
            logger.error(f"관심 종목 제거 실패: user_id={user_id}, symbol={symbol}, error={e}", exc_info=True)
            raise
        if deleted:
            logger.info(f"관심 종목 제거 성공: user_id={user_id}, symbol={symbol}")
        else:
            logger.info(f"관심 목록에 없는 종목: user_id={user_id}, symbol={symbol}")
        return bool(deleted)

    def get_user_watched_assets(self, db: Session, user_id: str) -> List[Tuple[WatchedAsset, Optional[MarketQuote]]]:
        """관심 종목과 캐시 시세를 LEFT JOIN. 즐겨찾기 먼저, 그다음 등록 순."""
        logger.debug(f"관심 종목 조회 시도: user_id={user_id}")
        rows = db.query(WatchedAsset, MarketQuote).outerjoin(
            MarketQuote, WatchedAsset.symbol == MarketQuote.symbol
        ).filter(
            WatchedAsset.user_id == user_id
        ).order_by(
            WatchedAsset.is_favorite.desc(),
            WatchedAsset.created_at,
            WatchedAsset.id,
        ).all()
        logger.debug(f"관심 종목 조회 성공: user_id={user_id}, {len(rows)}개 종목.")
        return [(asset, quote) for asset, quote in rows]

    def set_price_alert(self, db: Session, user_id: str, symbol: str, alert_price: Optional[Decimal],
                        alert_type: Optional[str] = None) -> Optional[WatchedAsset]:
        """가격 알림을 설정합니다. alert_price가 None이면 알림을 해제합니다."""
        symbol = normalize_symbol(symbol)
        if alert_price is not None and alert_type not in ALERT_TYPES:
            raise ValueError(f"alert_type은 {ALERT_TYPES} 중 하나여야 합니다: {alert_type}")

        asset = self.get_watched_asset(db, user_id, symbol)
        if asset is None:
            logger.info(f"알림 설정 대상 관심 종목 없음: user_id={user_id}, symbol={symbol}")
            return None

        asset.alert_price = alert_price
        asset.alert_type = alert_type if alert_price is not None else None
        asset.updated_at = self._clock()
        try:
            db.commit()
            db.refresh(asset)
        except SQLAlchemyError as e:
            db.rollback()
            logger.error(f"가격 알림 설정 실패: user_id={user_id}, symbol={symbol}, error={e}", exc_info=True)
            raise
        logger.info(f"가격 알림 설정: user_id={user_id}, symbol={symbol}, alert_price={alert_price}, alert_type={asset.alert_type}")
        return asset


def get_watchlist_service():
    return WatchlistService()
