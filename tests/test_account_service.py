from datetime import datetime, timedelta, timezone

import jwt
import pytest

from application.services.account_service import STATUS_OK, STATUS_UNAVAILABLE
from application.services.token_service import TokenService, session_key
from core.exceptions import ServiceUnavailableException, TokenExpiredException, UnauthorizedException
from domain.account.entity import Credentials, Token, User
from domain.common.exceptions import (
    DomainValidationException,
    PasswordErrorException,
    UsernameAlreadyExistsException,
)


pytestmark = pytest.mark.asyncio


async def test_sign_up_issues_live_token(account_service, account_repo, fake_cache):
    user_id, token = await account_service.sign_up(Credentials("alice", "secret1"))

    assert user_id == 1
    assert token
    assert account_repo.users[1].hashed_password != "secret1"
    claims = TokenService("test-secret-key").decode(token)
    assert claims.user_id == 1
    assert fake_cache.data[session_key(claims.jti)] == 1
    assert fake_cache.ttl[session_key(claims.jti)] == 60


async def test_sign_up_rejects_existing_username(account_service):
    await account_service.sign_up(Credentials("alice", "secret1"))
    with pytest.raises(UsernameAlreadyExistsException):
        await account_service.sign_up(Credentials("alice", "another"))


async def test_sign_up_validates_password_and_username(account_service):
    with pytest.raises(DomainValidationException):
        await account_service.sign_up(Credentials("alice", "123"))
    with pytest.raises(DomainValidationException):
        await account_service.sign_up(Credentials("bad name!", "secret1"))


async def test_sign_up_fails_when_session_cannot_be_stored(account_service, fake_cache):
    fake_cache.fail_writes = True
    with pytest.raises(ServiceUnavailableException):
        await account_service.sign_up(Credentials("alice", "secret1"))


async def test_login(account_service):
    uid, _ = await account_service.sign_up(Credentials("alice", "secret1"))

    login_id, token = await account_service.login(Credentials("alice", "secret1"))
    assert login_id == uid
    assert await account_service.is_auth(token) == token

    with pytest.raises(PasswordErrorException):
        await account_service.login(Credentials("alice", "wrong-password"))
    with pytest.raises(PasswordErrorException):
        await account_service.login(Credentials("nobody", "secret1"))


async def test_session_lives_exactly_as_long_as_the_token(account_service, fake_cache):
    _, token = await account_service.sign_up(Credentials("alice", "secret1"))
    key = session_key(TokenService("test-secret-key").decode(token).jti)
    assert fake_cache.ttl[key] == 60

    fake_cache.ttl[key] = 1
    assert await account_service.is_auth(token) == token

    # Checking a session never extends it past the token's exp
    assert fake_cache.ttl[key] == 1


async def test_is_auth_rejects_bad_tokens(account_service, token_service):
    with pytest.raises(UnauthorizedException):
        await account_service.is_auth(Token("not-a-jwt"))

    # Signed correctly but never stored as a session
    token, _ = token_service.issue(User(id=7, username="ghost", hashed_password="x"))
    with pytest.raises(UnauthorizedException):
        await account_service.is_auth(token)

    expired = jwt.encode(
        {
            "sub": "1",
            "jti": "abc",
            "type": "session",
            "exp": datetime.now(timezone.utc) - timedelta(seconds=5),
        },
        "test-secret-key",
        algorithm="HS256",
    )
    with pytest.raises(TokenExpiredException):
        await account_service.is_auth(Token(expired))


async def test_wrong_token_type_is_unauthorized(account_service):
    other = jwt.encode(
        {"sub": "1", "jti": "abc", "type": "refresh", "exp": datetime.now(timezone.utc) + timedelta(minutes=1)},
        "test-secret-key",
        algorithm="HS256",
    )
    with pytest.raises(UnauthorizedException):
        await account_service.is_auth(Token(other))


async def test_logout_revokes_session(account_service):
    _, token = await account_service.sign_up(Credentials("alice", "secret1"))

    await account_service.logout(token)

    with pytest.raises(UnauthorizedException):
        await account_service.is_auth(token)
    with pytest.raises(UnauthorizedException):
        await account_service.logout(token)


async def test_service_status(account_service, account_repo, fake_cache):
    assert await account_service.service_status() == STATUS_OK

    fake_cache.healthy = False
    assert await account_service.service_status() == STATUS_UNAVAILABLE

    fake_cache.healthy = True
    account_repo.healthy = False
    assert await account_service.service_status() == STATUS_UNAVAILABLE
