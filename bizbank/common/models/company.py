from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, func
from bizbank.common.database.db_connector import Base

class Company(Base):
    """사용자별 소유 회사. 사용자 한 명당 회사 하나."""
    __tablename__ = 'companies'

    id = Column(Integer, primary_key=True, autoincrement=True)
    owner_user_id = Column(String(64), ForeignKey('app_users.id'), unique=True, nullable=False)
    name = Column(String(255), nullable=False)
    org_number = Column(String(20), unique=True, nullable=False)
    country = Column(String(2), default="NO", nullable=False)
    kyc_status = Column(String(20), default="pending", nullable=False)  # pending, verified, rejected
    created_at = Column(DateTime, default=func.now(), nullable=False)
    updated_at = Column(DateTime, default=func.now(), onupdate=func.now(), nullable=False)
