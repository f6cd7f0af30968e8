"""컨테이너 기동 시 DB가 연결을 받을 때까지 기다립니다. (python -m bizbank.api.check_db)"""
import logging
import os
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from tenacity import retry, stop_after_attempt, wait_fixed

from bizbank.common.database.db_connector import SessionLocal

logger = logging.getLogger(__name__)

MAX_TRIES = int(os.getenv("DB_CHECK_MAX_TRIES", "300"))
WAIT_SECONDS = 1

@retry(
    stop=stop_after_attempt(MAX_TRIES),
    wait=wait_fixed(WAIT_SECONDS),
    reraise=True,
    before_sleep=lambda retry_state: logger.info(
        f"DB 연결 재시도 중... Attempt #{retry_state.attempt_number}"
    ),
)
def check_db() -> None:
    db = SessionLocal()
    try:
        db.execute(text("SELECT 1"))
    except SQLAlchemyError as e:
        logger.error(f"DB 연결 실패: {e}")
        raise
    finally:
        db.close()

if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    logger.info("DB 연결 확인 시작")
    check_db()
    logger.info("DB 연결 확인 완료")
