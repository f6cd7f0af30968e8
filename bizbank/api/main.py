from fastapi import FastAPI
from contextlib import asynccontextmanager
from bizbank.api.routers import auth_router, market_router, watchlist_router
from bizbank.common.database.db_connector import Base, engine, SessionLocal
from bizbank.common.config.market_config import market_config
from bizbank.common.services.market_data_service import MarketDataService
import bizbank.common.models  # noqa: F401  (테이블 등록)
import asyncio
import sys
import os
import logging
from logging.handlers import RotatingFileHandler
from datetime import datetime

APP_ENV = os.getenv("APP_ENV", "development")

# 로깅 레벨 설정
LOGGING_LEVEL = logging.DEBUG if APP_ENV == "development" else logging.INFO

# 로그 디렉토리 생성
LOG_DIR = os.getenv("LOG_DIR", "/logs")
LOG_FILE = os.path.join(LOG_DIR, "app.log")
os.makedirs(LOG_DIR, exist_ok=True)

# 로깅 설정
logging.basicConfig(
    level=LOGGING_LEVEL,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
    handlers=[
        logging.StreamHandler(sys.stdout),
        RotatingFileHandler(LOG_FILE, maxBytes=5*1024*1024, backupCount=2, encoding='utf-8')
    ]
)
logging.getLogger("httpx").setLevel(logging.WARNING)
logger = logging.getLogger(__name__)


async def warm_up_market_data(exchange: str):
    """기본 거래소 시세 캐시를 미리 채웁니다. 실패해도 서비스 기동에는 영향이 없습니다."""
    db = SessionLocal()
    try:
        logger.info(f"시세 캐시 워밍업 시작: exchange={exchange}")
        summary = await MarketDataService().initialize_exchange_data(exchange, db)
        logger.info(f"시세 캐시 워밍업 완료: exchange={exchange}, 갱신 {len(summary['refreshed'])}개, 오류 {len(summary['errors'])}개")
    except Exception as e:
        logger.error(f"시세 캐시 워밍업 중 오류 발생: {e}", exc_info=True)
    finally:
        db.close()


@asynccontextmanager
async def lifespan(app: FastAPI):
    # 모든 환경에서 테이블 생성 보장
    Base.metadata.create_all(bind=engine)

    warmup_task = None
    if market_config.warmup_on_startup and market_config.is_configured:
        warmup_task = asyncio.create_task(warm_up_market_data(market_config.default_exchange))
    elif market_config.warmup_on_startup:
        logger.warning("FINNHUB_API_KEY가 없어 시세 캐시 워밍업을 건너뜁니다.")

    yield

    if warmup_task and not warmup_task.done():
        warmup_task.cancel()


app = FastAPI(
    title="BizBank Market API",
    lifespan=lifespan,
)

# --- Routers ---
app.include_router(auth_router, prefix="/api/v1")
app.include_router(market_router, prefix="/api/v1")
app.include_router(watchlist_router, prefix="/api/v1")

# --- Basic Endpoints ---
@app.get("/")
def read_root():
    return {"message": "API 서비스 정상 동작"}

@app.get("/health")
def health_check():
    """헬스체크 엔드포인트"""
    return {
        "status": "healthy",
        "timestamp": datetime.now().isoformat()
    }
