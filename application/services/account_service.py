"""
账户应用服务 - AccountService 的具体实现
"""
from datetime import datetime, timezone
from typing import Tuple

from domain.account.entity import Credentials, Token, User
from domain.account.repository import AccountRepository
from domain.account.service import AccountService, PasswordService
from domain.common.exceptions import (
    DomainValidationException,
    PasswordErrorException,
    UsernameAlreadyExistsException,
)
from application.services.token_service import TokenService
from core.exceptions import ServiceUnavailableException, UnauthorizedException
from core.logging_config import get_logger
from infrastructure.cache import CacheInterface


logger = get_logger(__name__)

STATUS_OK = 200
STATUS_UNAVAILABLE = 503


class AccountApplicationService(AccountService):
    """由仓储 + 缓存组合而成；除这两个引用外无状态，可并发使用"""

    def __init__(self, repository: AccountRepository, cache: CacheInterface, tokens: TokenService):
        self._repository = repository
        self._cache = cache
        self._tokens = tokens
        self._passwords = PasswordService()

    async def _issue(self, user: User) -> Token:
        token, claims = self._tokens.issue(user)
        stored = await self._cache.set(claims.session_key, claims.user_id, ttl=self._tokens.ttl_seconds)
        if not stored:
            raise ServiceUnavailableException("cache", "failed to persist session")
        return token

    def _new_user(self, user: Credentials) -> User:
        try:
            self._passwords.validate_password(user.password)
            return User(
                id=None,
                username=user.username,
                hashed_password=self._passwords.hash_password(user.password),
                created_at=datetime.now(timezone.utc),
            )
        except ValueError as exc:
            raise DomainValidationException(str(exc))

    async def sign_up(self, user: Credentials) -> Tuple[int, Token]:
        if await self._repository.exists_by_username(user.username):
            raise UsernameAlreadyExistsException(user.username)
        created = await self._repository.create(self._new_user(user))
        logger.info("account_signed_up", user_id=created.id)
        return int(created.id), await self._issue(created)

    async def login(self, user: Credentials) -> Tuple[int, Token]:
        found = await self._repository.get_by_username(user.username)
        if found is None or not self._passwords.verify_password(user.password, found.hashed_password):
            raise PasswordErrorException()
        logger.info("account_logged_in", user_id=found.id)
        return int(found.id), await self._issue(found)

    async def is_auth(self, token: Token) -> Token:
        claims = self._tokens.decode(token)
        if not await self._cache.exists(claims.session_key):
            raise UnauthorizedException("session expired or revoked")
        return token

    async def logout(self, token: Token) -> None:
        claims = self._tokens.decode(token)
        deleted = await self._cache.delete(claims.session_key)
        if not deleted:
            raise UnauthorizedException("session expired or revoked")
        logger.info("account_logged_out", user_id=claims.user_id)

    async def service_status(self) -> int:
        db_ok = await self._repository.ping()
        cache_ok = await self._cache.health_check()
        if db_ok and cache_ok:
            return STATUS_OK
        logger.warning("account_service_degraded", database=db_ok, cache=cache_ok)
        return STATUS_UNAVAILABLE
