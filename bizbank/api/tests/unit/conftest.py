import os
import tempfile

# 앱 모듈 import 전에 설정되어야 함
os.environ.setdefault("APP_ENV", "test")
os.environ.setdefault("JWT_SECRET_KEY", "test-secret-key")
os.environ.setdefault("LOG_DIR", os.path.join(tempfile.gettempdir(), "bizbank-test-logs"))

import pytest
from datetime import datetime
from decimal import Decimal
from unittest.mock import MagicMock
from sqlalchemy.orm import Session

from bizbank.common.models.market_quote import MarketQuote
from bizbank.common.models.user import User
from bizbank.common.models.watched_asset import WatchedAsset


@pytest.fixture
def mock_db_session():
    return MagicMock(spec=Session)

@pytest.fixture
def current_user():
    return User(
        id="dev-alice",
        email=None,
        first_name="alice",
        last_name=None,
        role="user",
        auth_method="dev",
        created_at=datetime(2024, 1, 15, 9, 0),
    )

@pytest.fixture
def market_quote_row():
    return MarketQuote(
        id=1,
        symbol="EQNR.OL",
        name="Equinor ASA",
        exchange="OL",
        price=Decimal("300.5"),
        change=Decimal("1.5"),
        change_percent=Decimal("0.5"),
        previous_close=Decimal("299.0"),
        day_high=Decimal("302.5"),
        day_low=Decimal("298.5"),
        market_cap="1000000000",
        currency="NOK",
        sector="Energy",
        last_updated=datetime(2024, 1, 15, 9, 0),
        sparkline_data=[298.0, 299.0, 300.5],
    )

@pytest.fixture
def watched_asset_row():
    return WatchedAsset(
        id=1,
        user_id="dev-alice",
        symbol="EQNR.OL",
        name="Equinor ASA",
        exchange="OL",
        asset_type="stock",
        region="Global",
        is_favorite=False,
        alert_price=None,
        alert_type=None,
        created_at=datetime(2024, 1, 15, 9, 0),
        updated_at=datetime(2024, 1, 15, 9, 0),
    )
