"""
인증 세션 모델.

BankID, OIDC, 개발자 로그인은 각자 다른 클레임을 갖습니다. 검증된 JWT 클레임을
auth_method 값으로 구분되는 세션 하나로 한 번만 변환하고, 이후 코드는
resolve_identity()가 돌려주는 AuthenticatedUser만 사용합니다.
"""
from typing import Annotated, Literal, NamedTuple, Optional, Union

from pydantic import BaseModel, Field, TypeAdapter


class BankIdSession(BaseModel):
    auth_method: Literal["bankid"]
    personnummer: str = Field(..., min_length=1)
    name: Optional[str] = None


class OidcSession(BaseModel):
    auth_method: Literal["oidc"]
    sub: str = Field(..., min_length=1)
    email: Optional[str] = None
    given_name: Optional[str] = None
    family_name: Optional[str] = None


class DevSession(BaseModel):
    auth_method: Literal["dev"]
    username: str = Field(..., min_length=1)


AuthSession = Annotated[Union[BankIdSession, OidcSession, DevSession], Field(discriminator="auth_method")]

_session_adapter = TypeAdapter(AuthSession)


class AuthenticatedUser(NamedTuple):
    user_id: str
    auth_method: str


def dev_user_id(username: str) -> str:
    return f"dev-{username}"


def session_from_claims(claims: dict) -> AuthSession:
    """검증된 JWT 페이로드를 세션으로 변환합니다. 알 수 없는 방식이면 pydantic ValidationError."""
    return _session_adapter.validate_python(claims)


def resolve_identity(session: AuthSession) -> AuthenticatedUser:
    if isinstance(session, BankIdSession):
        return AuthenticatedUser(session.personnummer, session.auth_method)
    if isinstance(session, OidcSession):
        return AuthenticatedUser(session.sub, session.auth_method)
    return AuthenticatedUser(dev_user_id(session.username), session.auth_method)
