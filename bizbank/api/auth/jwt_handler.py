from datetime import timedelta
from typing import Optional
from jose import JWTError, jwt
from fastapi import HTTPException, status, Depends
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from pydantic import ValidationError
import os
import logging
from sqlalchemy.orm import Session

from bizbank.common.models.user import User
from bizbank.common.database.db_connector import get_db
from bizbank.common.services.user_service import UserService, get_user_service
from bizbank.common.utils.time_utils import utcnow
from bizbank.api.auth.sessions import session_from_claims, resolve_identity

logger = logging.getLogger(__name__)

# JWT 설정
ALGORITHM = "HS256"
ACCESS_TOKEN_EXPIRE_MINUTES = int(os.getenv("ACCESS_TOKEN_EXPIRE_MINUTES", "30"))

# 보안
security = HTTPBearer()

def _credentials_exception():
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Could not validate credentials",
        headers={"WWW-Authenticate": "Bearer"},
    )

def dev_login_enabled() -> bool:
    """개발자 로그인 허용 여부. 운영 환경에서는 기본적으로 꺼져 있습니다."""
    default = "false" if os.getenv("APP_ENV", "development") == "production" else "true"
    return os.getenv("DEV_LOGIN_ENABLED", default).lower() in ("1", "true", "yes")

def create_access_token(data: dict, expires_delta: Optional[timedelta] = None):
    to_encode = data.copy()
    if expires_delta:
        expire = utcnow() + expires_delta
    else:
        expire = utcnow() + timedelta(minutes=ACCESS_TOKEN_EXPIRE_MINUTES)

    to_encode.update({"exp": expire})
    encoded_jwt = jwt.encode(to_encode, os.getenv("JWT_SECRET_KEY"), algorithm=ALGORITHM)
    return encoded_jwt

def verify_token(token: str) -> dict:
    try:
        payload = jwt.decode(token, os.getenv("JWT_SECRET_KEY"), algorithms=[ALGORITHM])
    except JWTError as e:
        logger.error(f"JWTError during token verification: {e}")
        raise _credentials_exception()
    logger.debug(f"JWT Payload: auth_method={payload.get('auth_method')}, sub={payload.get('sub')}")
    if payload.get("sub") is None:
        raise _credentials_exception()
    return payload

def get_current_user(credentials: HTTPAuthorizationCredentials = Depends(security), db: Session = Depends(get_db), user_service: UserService = Depends(get_user_service)):
    """현재 로그인한 사용자 반환"""
    payload = verify_token(credentials.credentials)
    try:
        session = session_from_claims(payload)
    except ValidationError as e:
        logger.warning(f"토큰 클레임으로 인증 세션을 만들 수 없음: {e.error_count()}개 오류")
        raise _credentials_exception()

    identity = resolve_identity(session)
    user = user_service.get_user_by_id(db, identity.user_id)
    logger.debug(f"get_current_user: user_id={identity.user_id}, auth_method={identity.auth_method}, found={user is not None}")
    if user is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")
    return user
