from sqlalchemy import Column, Integer, String, Numeric, DateTime, JSON, Index
from bizbank.common.database.db_connector import Base

class MarketQuote(Base):
    """
    종목별 시세 캐시. 종목당 한 행만 존재하며 last_updated로 신선도를 판단합니다.
    """
    __tablename__ = 'market_data'

    id = Column(Integer, primary_key=True, autoincrement=True)
    symbol = Column(String(20), unique=True, nullable=False)
    name = Column(String(255), nullable=True)
    exchange = Column(String(10), nullable=True)
    price = Column(Numeric(15, 4), nullable=False)
    change = Column(Numeric(15, 4), nullable=True)
    change_percent = Column(Numeric(10, 4), nullable=True)
    previous_close = Column(Numeric(15, 4), nullable=True)
    day_high = Column(Numeric(15, 4), nullable=True)
    day_low = Column(Numeric(15, 4), nullable=True)
    market_cap = Column(String(32), nullable=True)
    currency = Column(String(3), nullable=True, default="NOK")
    sector = Column(String(100), nullable=True)
    last_updated = Column(DateTime, nullable=False)
    sparkline_data = Column(JSON, nullable=True)

    __table_args__ = (
        Index('idx_market_data_last_updated', 'last_updated'),
    )

    def __repr__(self):
        return f"<MarketQuote(symbol='{self.symbol}', price={self.price}, last_updated={self.last_updated})>"
