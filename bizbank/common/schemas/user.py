from pydantic import BaseModel, ConfigDict, Field
from typing import Optional
from datetime import datetime


class DevLoginRequest(BaseModel):
    username: str = Field(..., min_length=1, max_length=50, pattern=r"^[A-Za-z0-9_.-]+$")


class UserUpsert(BaseModel):
    id: str
    email: Optional[str] = None
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    auth_method: Optional[str] = None


class Company(BaseModel):
    id: int
    name: str
    org_number: str
    country: str
    kyc_status: str

    model_config = ConfigDict(from_attributes=True)


class User(BaseModel):
    id: str
    email: Optional[str] = None
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    role: str
    auth_method: Optional[str] = None
    created_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


class UserWithCompany(User):
    company: Optional[Company] = None


class Token(BaseModel):
    access_token: str
    token_type: str = "bearer"
    user: User
