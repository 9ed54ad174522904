from typing import Optional

from fastapi import APIRouter, Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from procurement.database import Database, get_db
from procurement.errors import AuthError
from procurement.guardrails.rate_limiter import limit_login_attempts
from procurement.models.user import (
    AccessToken,
    LoginRequest,
    RefreshRequest,
    RegisterRequest,
    TokenPair,
    User,
    UserPublic,
)
from procurement.services.auth import AuthService

router = APIRouter(prefix="/api/auth", tags=["Auth"])

bearer_scheme = HTTPBearer(auto_error=False)


def get_auth_service(db: Database = Depends(get_db)) -> AuthService:
    return AuthService(db)


async def get_current_active_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    auth: AuthService = Depends(get_auth_service),
) -> User:
    """Resolve the bearer token to an active user, or fail with 401."""
    if credentials is None:
        raise AuthError("Authentication required")
    return await auth.authenticate(credentials.credentials)


@router.post("/login", response_model=TokenPair, dependencies=[Depends(limit_login_attempts)])
async def login(payload: LoginRequest, auth: AuthService = Depends(get_auth_service)):
    return await auth.login(payload)


@router.post("/register", response_model=TokenPair, status_code=201)
async def register(payload: RegisterRequest, auth: AuthService = Depends(get_auth_service)):
    return await auth.register(payload)


@router.post("/refresh-token", response_model=AccessToken)
async def refresh_token(payload: RefreshRequest, auth: AuthService = Depends(get_auth_service)):
    return await auth.refresh(payload.refresh_token)


@router.get("/me", response_model=UserPublic)
async def me(current_user: User = Depends(get_current_active_user)):
    return UserPublic(**current_user.model_dump())
