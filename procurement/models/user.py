from datetime import datetime
from enum import Enum
from typing import Optional
from pydantic import EmailStr, Field, field_validator
from procurement.models.base import CamelModel, MongoModel, PyObjectId


class Role(str, Enum):
    USER = "user"
    ADMIN = "admin"


class User(MongoModel):
    """
    Application user. ``password_hash`` is a salted digest and is never
    returned by the API; use ``UserPublic`` for responses.
    """
    username: str
    email: str
    password_hash: str
    role: Role = Role.USER
    is_active: bool = True
    last_login: Optional[datetime] = None
    created_at: datetime = Field(default_factory=datetime.utcnow)


class UserPublic(CamelModel):
    id: PyObjectId = Field(..., alias="_id")
    username: str
    email: str
    role: Role
    is_active: bool
    last_login: Optional[datetime] = None
    created_at: datetime


class RegisterRequest(CamelModel):
    username: str = Field(..., min_length=3, max_length=30)
    email: EmailStr
    password: str = Field(..., min_length=8)

    @field_validator("username", "email")
    @classmethod
    def normalize(cls, v: str) -> str:
        return v.strip().lower()


class LoginRequest(CamelModel):
    username: str = Field(..., min_length=1)
    password: str = Field(..., min_length=1)

    @field_validator("username")
    @classmethod
    def normalize(cls, v: str) -> str:
        return v.strip().lower()


class RefreshRequest(CamelModel):
    refresh_token: str = Field(..., min_length=1)


class TokenPair(CamelModel):
    token: str
    refresh_token: str
    id: Optional[PyObjectId] = Field(None, alias="_id")
    username: Optional[str] = None


class AccessToken(CamelModel):
    access_token: str
