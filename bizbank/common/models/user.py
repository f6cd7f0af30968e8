"""
User 모델 정의 파일입니다.
"""
from sqlalchemy import Column, String, DateTime, func
from bizbank.common.database.db_connector import Base


class User(Base):
    """
    app_users 테이블과 매핑되는 User 모델 클래스입니다.

    Attributes:
        id (String): 인증 방식별로 정규화된 사용자 ID (BankID 주민번호, OIDC sub, dev-<username>).
        email (String): 사용자 이메일.
        first_name (String): 이름.
        last_name (String): 성.
        role (String): 사용자 역할 (e.g., 'user', 'admin').
        auth_method (String): 마지막으로 사용한 인증 방식 ('bankid', 'oidc', 'dev').
        created_at (DateTime): 계정 생성 시간.
        updated_at (DateTime): 계정 정보 마지막 수정 시간.
    """
    __tablename__ = 'app_users'

    id = Column(String(64), primary_key=True)
    email = Column(String(255), unique=True, nullable=True)
    first_name = Column(String(100), nullable=True)
    last_name = Column(String(100), nullable=True)
    role = Column(String(20), default='user', nullable=False)
    auth_method = Column(String(20), nullable=True)
    created_at = Column(DateTime, default=func.now(), nullable=False)
    updated_at = Column(DateTime, default=func.now(), onupdate=func.now(), nullable=False)

    def __repr__(self):
        return f"<User(id='{self.id}', email='{self.email}', role='{self.role}')>"
