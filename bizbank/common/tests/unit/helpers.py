from datetime import datetime, timedelta
from decimal import Decimal

from bizbank.common.schemas.market import NormalizedQuote


class FakeClock:
    """테스트용 UTC 시계. advance()로 시간을 진행합니다."""

    def __init__(self, now=datetime(2024, 1, 15, 9, 0, 0)):
        self.now = now

    def __call__(self):
        return self.now

    def advance(self, **kwargs):
        self.now = self.now + timedelta(**kwargs)


class RecordingSleep:
    """asyncio.sleep 대체. 실제로 기다리지 않고 요청된 시간만 기록합니다."""

    def __init__(self):
        self.calls = []

    async def __call__(self, seconds):
        self.calls.append(seconds)


def make_quote(symbol="EQNR.OL", price="300.5", name="Equinor ASA", exchange="OL", currency="NOK", sector="Energy"):
    price = Decimal(price)
    return NormalizedQuote(
        symbol=symbol,
        name=name,
        exchange=exchange,
        price=price,
        change=Decimal("1.5"),
        change_percent=Decimal("0.5"),
        previous_close=price - Decimal("1.5"),
        day_high=price + Decimal("2"),
        day_low=price - Decimal("2"),
        market_cap="1000000000",
        currency=currency,
        sector=sector,
        sparkline_data=[298.0, 299.0, 300.5],
    )
