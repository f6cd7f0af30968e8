from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session
from sqlalchemy.exc import SQLAlchemyError
import logging

from bizbank.common.database.db_connector import get_db
from bizbank.common.models.user import User
from bizbank.common.schemas.user import (
    DevLoginRequest,
    Token,
    UserUpsert,
    User as UserSchema,
    Company as CompanySchema,
    UserWithCompany,
)
from bizbank.common.services.user_service import UserService, get_user_service
from bizbank.common.services.company_service import CompanyService, get_company_service
from bizbank.api.auth.jwt_handler import create_access_token, dev_login_enabled, get_current_user
from bizbank.api.auth.sessions import dev_user_id

router = APIRouter(prefix="/auth", tags=["auth"])
logger = logging.getLogger(__name__)


@router.post("/dev-login", response_model=Token, tags=["auth"])
def dev_login(request: DevLoginRequest, db: Session = Depends(get_db), user_service: UserService = Depends(get_user_service)):
    """개발자 로그인: 사용자명만으로 dev-<username> 사용자를 만들고 토큰을 발급합니다."""
    if not dev_login_enabled():
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Not Found")

    user_id = dev_user_id(request.username)
    logger.debug(f"개발자 로그인 시도: user_id={user_id}")
    try:
        user = user_service.upsert_user(db, UserUpsert(id=user_id, first_name=request.username, auth_method="dev"))
    except SQLAlchemyError:
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="사용자 저장 중 오류가 발생했습니다.")

    access_token = create_access_token(data={"sub": user_id, "auth_method": "dev", "username": request.username})
    logger.info(f"개발자 로그인 성공: user_id={user_id}")
    return Token(access_token=access_token, user=UserSchema.model_validate(user))


@router.get("/user", response_model=UserWithCompany, tags=["auth"])
def get_authenticated_user(current_user: User = Depends(get_current_user), db: Session = Depends(get_db),
                           company_service: CompanyService = Depends(get_company_service)):
    """현재 사용자와 사용자 소유 회사 조회"""
    try:
        company = company_service.get_company_for_user(db, current_user)
    except SQLAlchemyError:
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="회사 정보를 불러오지 못했습니다.")
    return UserWithCompany(
        **UserSchema.model_validate(current_user).model_dump(),
        company=CompanySchema.model_validate(company),
    )
