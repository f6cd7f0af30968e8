from sqlalchemy import Column, Integer, String, Numeric, Boolean, DateTime, UniqueConstraint
from bizbank.common.database.db_connector import Base

class WatchedAsset(Base):
    __tablename__ = 'watched_assets'

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(String(64), nullable=False, index=True)
    symbol = Column(String(20), nullable=False)
    name = Column(String(255), nullable=True)
    exchange = Column(String(10), nullable=True)
    asset_type = Column(String(20), default="stock", nullable=False)  # stock, fund, crypto
    region = Column(String(20), default="Global", nullable=False)
    is_favorite = Column(Boolean, default=False, nullable=False)
    alert_price = Column(Numeric(15, 4), nullable=True)
    alert_type = Column(String(10), nullable=True)  # 'above' or 'below'
    created_at = Column(DateTime, nullable=False)
    updated_at = Column(DateTime, nullable=False)

    __table_args__ = (
        UniqueConstraint('user_id', 'symbol', name='uq_watched_assets_user_symbol'),
    )

    def __repr__(self):
        return f"<WatchedAsset(user_id='{self.user_id}', symbol='{self.symbol}', is_favorite={self.is_favorite})>"
