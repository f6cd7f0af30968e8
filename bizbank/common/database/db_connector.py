import os
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, declarative_base
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from dotenv import load_dotenv
import logging

logger = logging.getLogger(__name__)

# APP_ENV 환경 변수에 따라 적절한 .env 파일 로드
app_env = os.getenv('APP_ENV', 'development')
env_file = f'.env.{app_env}'
load_dotenv(env_file)


def build_database_url() -> str:
    """DATABASE_URL이 있으면 그대로 사용하고, 없으면 DB_* 변수로 PostgreSQL URL을 조립합니다."""
    database_url = os.getenv("DATABASE_URL")
    if database_url:
        return database_url

    db_user = os.getenv("DB_USER", "postgres")
    db_password = os.getenv("DB_PASSWORD", "postgres")
    db_host = os.getenv("DB_HOST", "localhost")
    db_port = os.getenv("DB_PORT", "5432")
    db_name = os.getenv("DB_NAME", "bizbank")
    return f"postgresql://{db_user}:{db_password}@{db_host}:{db_port}/{db_name}"


SQLALCHEMY_DATABASE_URL = build_database_url()

logger.debug(f"데이터베이스 드라이버: {SQLALCHEMY_DATABASE_URL.split(':', 1)[0]}")

engine = create_engine(SQLALCHEMY_DATABASE_URL, pool_pre_ping=True)
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

Base = declarative_base()

def get_db():
    db = SessionLocal()
    try:
        logger.debug("DB 세션 시작.")
        yield db
    finally:
        db.close()
        logger.debug("DB 세션 종료.")


def get_dialect_insert(db):
    """세션의 DB 방언에 맞는 insert 구문 (ON CONFLICT 지원)을 반환합니다."""
    dialect = db.get_bind().dialect.name
    if dialect == "postgresql":
        return pg_insert
    if dialect == "sqlite":
        return sqlite_insert
    raise NotImplementedError(f"upsert를 지원하지 않는 DB 방언입니다: {dialect}")
