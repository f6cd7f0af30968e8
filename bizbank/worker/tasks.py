import logging
import asyncio
from datetime import datetime

from bizbank.common.database.db_connector import get_db
from bizbank.common.services.market_data_service import MarketDataService

# 로깅 설정
logger = logging.getLogger(__name__)


def refresh_exchange_task(exchange: str) -> bool:
    """[Process] 거래소 구성 종목 시세 캐시 갱신 작업 (오래된 종목만)"""
    job_name = f"{exchange} 시세 캐시 갱신"
    start_time = datetime.now()
    logger.info(f"[Process] {job_name} 시작.")

    db_gen = get_db()
    db = next(db_gen)
    market_data_service = MarketDataService()
    success = False

    try:
        summary = asyncio.run(market_data_service.initialize_exchange_data(exchange, db))
        success = True
        logger.info(
            f"[Process] {job_name} 성공. 갱신 {len(summary['refreshed'])}개, "
            f"캐시 적중 {len(summary['fresh'])}개, 오류 {len(summary['errors'])}개."
        )
    except Exception as e:
        logger.error(f"[Process] {job_name} 중 오류: {e}", exc_info=True)
    finally:
        next(db_gen, None)
        duration = (datetime.now() - start_time).total_seconds()
        logger.info(f"[Process] {job_name} 종료. 소요 시간 {duration:.2f}초")
    return success
