import pytest
from datetime import datetime, timedelta
from unittest.mock import AsyncMock

from jose import jwt

from procurement.errors import AuthError, NotFoundError, ValidationError
from procurement.models.user import LoginRequest, RegisterRequest
from procurement.services.auth import (
    ACCESS,
    REFRESH,
    AuthService,
    create_token,
    decode_token,
    hash_password,
    verify_password,
)


def test_password_hash_is_salted_and_verifiable():
    first = hash_password("correct-horse")
    second = hash_password("correct-horse")

    assert first != "correct-horse"
    assert first != second
    assert verify_password("correct-horse", first)
    assert not verify_password("wrong-horse", first)


def test_token_roundtrip(test_settings):
    token = create_token("65f000000000000000000001", ACCESS, test_settings)
    assert decode_token(token, ACCESS, test_settings) == "65f000000000000000000001"


def test_refresh_token_is_not_an_access_token(test_settings):
    refresh = create_token("65f000000000000000000001", REFRESH, test_settings)

    with pytest.raises(AuthError):
        decode_token(refresh, ACCESS, test_settings)


def test_token_type_is_checked_even_with_shared_secret(test_settings):
    test_settings.JWT_REFRESH_SECRET = test_settings.JWT_SECRET
    refresh = create_token("65f000000000000000000001", REFRESH, test_settings)

    with pytest.raises(AuthError) as exc:
        decode_token(refresh, ACCESS, test_settings)

    assert exc.value.message == "Invalid token"


def test_expired_token(test_settings):
    expired = jwt.encode(
        {"sub": "65f000000000000000000001", "type": ACCESS, "exp": datetime.utcnow() - timedelta(minutes=1)},
        test_settings.JWT_SECRET,
        algorithm=test_settings.JWT_ALGORITHM,
    )

    with pytest.raises(AuthError):
        decode_token(expired, ACCESS, test_settings)


def test_garbage_token(test_settings):
    with pytest.raises(AuthError) as exc:
        decode_token("not.a.token", ACCESS, test_settings)
    assert exc.value.status_code == 401


@pytest.mark.asyncio
async def test_register_stores_hash_and_returns_tokens(mock_db):
    mock_db.users.get_by_username = AsyncMock(return_value=None)
    mock_db.users.get_by_email = AsyncMock(return_value=None)
    mock_db.users.create = AsyncMock(side_effect=lambda u: u)

    tokens = await AuthService(mock_db).register(
        RegisterRequest(username="Bob", email="bob@example.com", password="long-enough")
    )

    stored = mock_db.users.create.call_args.args[0]
    assert stored.username == "bob"
    assert stored.password_hash != "long-enough"
    assert verify_password("long-enough", stored.password_hash)
    assert tokens.username == "bob"
    assert tokens.token and tokens.refresh_token


@pytest.mark.asyncio
async def test_register_duplicate_username(mock_db, user):
    mock_db.users.get_by_username = AsyncMock(return_value=user)

    with pytest.raises(ValidationError) as exc:
        await AuthService(mock_db).register(
            RegisterRequest(username="alice", email="other@example.com", password="long-enough")
        )

    assert exc.value.message == "User already exists"
    mock_db.users.create.assert_not_called()


@pytest.mark.asyncio
async def test_register_duplicate_email(mock_db, user):
    mock_db.users.get_by_username = AsyncMock(return_value=None)
    mock_db.users.get_by_email = AsyncMock(return_value=user)

    with pytest.raises(ValidationError):
        await AuthService(mock_db).register(
            RegisterRequest(username="alice2", email="alice@example.com", password="long-enough")
        )

    mock_db.users.create.assert_not_called()


@pytest.mark.asyncio
async def test_login_success_records_last_login(mock_db, user, test_settings):
    mock_db.users.get_by_username = AsyncMock(return_value=user)

    tokens = await AuthService(mock_db).login(LoginRequest(username="Alice", password="correct-horse"))

    mock_db.users.get_by_username.assert_awaited_once_with("alice")
    user_id, changes = mock_db.users.update.call_args.args
    assert user_id == user.id
    assert "lastLogin" in changes
    assert decode_token(tokens.token, ACCESS, test_settings) == user.id
    assert decode_token(tokens.refresh_token, REFRESH, test_settings) == user.id


@pytest.mark.asyncio
@pytest.mark.parametrize("username,password", [("alice", "wrong"), ("nobody", "correct-horse")])
async def test_login_failures_share_one_message(mock_db, user, username, password):
    mock_db.users.get_by_username = AsyncMock(return_value=user if username == "alice" else None)

    with pytest.raises(AuthError) as exc:
        await AuthService(mock_db).login(LoginRequest(username=username, password=password))

    assert exc.value.message == "Invalid credentials"
    mock_db.users.update.assert_not_called()


@pytest.mark.asyncio
async def test_login_inactive_user(mock_db, make_user):
    mock_db.users.get_by_username = AsyncMock(return_value=make_user(is_active=False))

    with pytest.raises(AuthError):
        await AuthService(mock_db).login(LoginRequest(username="alice", password="correct-horse"))


@pytest.mark.asyncio
async def test_refresh_issues_access_token(mock_db, user, test_settings):
    mock_db.users.get = AsyncMock(return_value=user)
    refresh = create_token(user.id, REFRESH, test_settings)

    result = await AuthService(mock_db).refresh(refresh)

    assert decode_token(result.access_token, ACCESS, test_settings) == user.id


@pytest.mark.asyncio
async def test_refresh_rejects_access_token(mock_db, user, test_settings):
    access = create_token(user.id, ACCESS, test_settings)

    with pytest.raises(AuthError):
        await AuthService(mock_db).refresh(access)


@pytest.mark.asyncio
async def test_refresh_for_deleted_user(mock_db, test_settings):
    mock_db.users.get = AsyncMock(return_value=None)

    with pytest.raises(NotFoundError):
        await AuthService(mock_db).refresh(create_token("65f0000000000000000000aa", REFRESH, test_settings))


@pytest.mark.asyncio
async def test_authenticate(mock_db, user, test_settings):
    mock_db.users.get = AsyncMock(return_value=user)

    result = await AuthService(mock_db).authenticate(create_token(user.id, ACCESS, test_settings))

    assert result is user
