import pytest
from unittest.mock import AsyncMock
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from bizbank.common.database.db_connector import Base
from bizbank.common.config.market_config import MarketConfig
from bizbank.common.tests.unit.helpers import FakeClock, RecordingSleep, make_quote
import bizbank.common.models  # noqa: F401


# Setup in-memory SQLite database for testing
@pytest.fixture(scope='function')
def db_session():
    engine = create_engine(
        'sqlite:///:memory:',
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(engine)
    Session = sessionmaker(bind=engine, autocommit=False, autoflush=False)
    session = Session()
    yield session
    session.close()
    Base.metadata.drop_all(engine)
    engine.dispose()

@pytest.fixture
def clock():
    return FakeClock()

@pytest.fixture
def fake_sleep():
    return RecordingSleep()

@pytest.fixture
def market_config():
    return MarketConfig(
        finnhub_api_key="test-key",
        finnhub_base_url="https://finnhub.test/api/v1",
        staleness_seconds=300,
        request_interval_seconds=1.1,
        sparkline_points=7,
        default_exchange="OL",
        warmup_on_startup=False,
        worker_exchanges=["OL"],
    )

@pytest.fixture
def mock_fetcher():
    """심볼별 NormalizedQuote를 돌려주는 QuoteFetcher 대체"""
    fetcher = AsyncMock()
    fetcher.fetch.side_effect = lambda symbol: make_quote(symbol=symbol)
    return fetcher
