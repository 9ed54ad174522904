import logging
from datetime import datetime, timedelta
from typing import Any, Dict

from jose import JWTError, jwt
from passlib.context import CryptContext

from procurement.config import Settings
from procurement.database import Database
from procurement.errors import AuthError, NotFoundError, ValidationError
from procurement.models.user import AccessToken, LoginRequest, RegisterRequest, TokenPair, User

logger = logging.getLogger(__name__)

# Salted digest; there is no plaintext comparison path.
pwd_context = CryptContext(schemes=["pbkdf2_sha256"], deprecated="auto")

ACCESS = "access"
REFRESH = "refresh"


def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(password: str, password_hash: str) -> bool:
    return pwd_context.verify(password, password_hash)


def create_token(user_id: str, token_type: str, settings: Settings) -> str:
    if token_type == REFRESH:
        secret = settings.JWT_REFRESH_SECRET
        expires = datetime.utcnow() + timedelta(days=settings.REFRESH_TOKEN_EXPIRE_DAYS)
    else:
        secret = settings.JWT_SECRET
        expires = datetime.utcnow() + timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)
    payload = {"sub": user_id, "type": token_type, "exp": expires}
    return jwt.encode(payload, secret, algorithm=settings.JWT_ALGORITHM)


def decode_token(token: str, token_type: str, settings: Settings) -> str:
    """Return the user id carried by a valid token of the given type."""
    secret = settings.JWT_REFRESH_SECRET if token_type == REFRESH else settings.JWT_SECRET
    try:
        payload: Dict[str, Any] = jwt.decode(token, secret, algorithms=[settings.JWT_ALGORITHM])
    except JWTError:
        raise AuthError("Invalid or expired token")
    if payload.get("type") != token_type or not payload.get("sub"):
        raise AuthError("Invalid token")
    return payload["sub"]


class AuthService:
    def __init__(self, db: Database):
        self.db = db
        self.settings = db.settings

    async def register(self, payload: RegisterRequest) -> TokenPair:
        if await self.db.users.get_by_username(payload.username):
            raise ValidationError("User already exists")
        if await self.db.users.get_by_email(payload.email):
            raise ValidationError("Email already registered")

        user = User(
            username=payload.username,
            email=payload.email,
            password_hash=hash_password(payload.password),
        )
        await self.db.users.create(user)
        logger.info(f"Registered user {user.username}")
        return self._tokens(user)

    async def login(self, payload: LoginRequest) -> TokenPair:
        user = await self.db.users.get_by_username(payload.username)
        if not user or not user.is_active or not verify_password(payload.password, user.password_hash):
            logger.warning(f"Failed login for {payload.username}")
            raise AuthError("Invalid credentials")

        await self.db.users.update(user.id, {"lastLogin": datetime.utcnow()})
        logger.info(f"User {user.username} logged in")
        return self._tokens(user)

    async def refresh(self, refresh_token: str) -> AccessToken:
        user_id = decode_token(refresh_token, REFRESH, self.settings)
        user = await self.db.users.get(user_id)
        if not user:
            raise NotFoundError("User not found")
        return AccessToken(access_token=create_token(user.id, ACCESS, self.settings))

    async def authenticate(self, access_token: str) -> User:
        user_id = decode_token(access_token, ACCESS, self.settings)
        user = await self.db.users.get(user_id)
        if not user or not user.is_active:
            raise AuthError("User not found or inactive")
        return user

    def _tokens(self, user: User) -> TokenPair:
        return TokenPair(
            token=create_token(user.id, ACCESS, self.settings),
            refresh_token=create_token(user.id, REFRESH, self.settings),
            id=user.id,
            username=user.username,
        )
