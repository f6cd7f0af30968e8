import os
import logging
from logging.handlers import RotatingFileHandler
import sys
from contextlib import asynccontextmanager
import multiprocessing

from fastapi import FastAPI

from bizbank.common.config.market_config import market_config
from bizbank.common.database.db_connector import Base, engine
from bizbank.worker.routers import scheduler as scheduler_router
from bizbank.worker.scheduler_instance import scheduler
from bizbank.worker import tasks
import bizbank.common.models  # noqa: F401  (테이블 등록)

# 로깅 설정
APP_ENV = os.getenv("APP_ENV", "development")
LOGGING_LEVEL = logging.DEBUG if APP_ENV == "development" else logging.INFO
LOG_DIR = os.getenv("LOG_DIR", "/logs")
LOG_FILE = os.path.join(LOG_DIR, "worker.log")
os.makedirs(LOG_DIR, exist_ok=True)

logging.basicConfig(
    level=LOGGING_LEVEL,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
    handlers=[
        logging.StreamHandler(sys.stdout),
        RotatingFileHandler(LOG_FILE, maxBytes=5*1024*1024, backupCount=2, encoding='utf-8')
    ]
)
logger = logging.getLogger(__name__)


def refresh_job_id(exchange: str) -> str:
    return f"refresh_{exchange.lower()}_market_data_job"


def register_jobs():
    """설정된 거래소마다 시세 캐시 갱신 잡을 하나씩 등록합니다."""
    for exchange in market_config.worker_exchanges:
        scheduler.add_job(
            refresh_exchange_job,
            'interval',
            minutes=market_config.refresh_interval_minutes,
            kwargs={"exchange": exchange},
            id=refresh_job_id(exchange),
            name=f'{exchange} 시세 캐시 갱신',
            replace_existing=True,
        )
        logger.info(f"잡 등록: exchange={exchange}, 주기 {market_config.refresh_interval_minutes}분")


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("Starting worker service...")
    Base.metadata.create_all(bind=engine)

    register_jobs()
    scheduler.start()
    logger.info("APScheduler started.")

    yield

    logger.info("Shutting down worker service...")
    scheduler.shutdown()

app = FastAPI(lifespan=lifespan)
app.include_router(scheduler_router.router, prefix="/api/v1")


# --- Scheduler Jobs (Process Triggers) ---

async def refresh_exchange_job(exchange: str):
    """거래소 시세 캐시 갱신 잡을 별도 프로세스로 실행합니다."""
    logger.info(f"[Trigger] 'refresh_exchange_task' process for exchange: {exchange}")
    p = multiprocessing.Process(target=tasks.refresh_exchange_task, args=(exchange,))
    p.start()

@app.get("/")
def read_root():
    return {"message": "Worker service is running"}
