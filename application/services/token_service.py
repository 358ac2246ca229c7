"""
令牌服务 - 签发与校验会话 JWT

令牌本身只证明签名有效；会话是否仍然存活由缓存中的 ``session:<jti>``
决定，注销即删除该键。
"""
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
import uuid

import jwt

from domain.account.entity import Token, User
from core.exceptions import UnauthorizedException, TokenExpiredException
from core.logging_config import get_logger


logger = get_logger(__name__)

SESSION_KEY_PREFIX = "session:"


@dataclass(frozen=True)
class TokenClaims:
    user_id: int
    jti: str
    expires_at: datetime

    @property
    def session_key(self) -> str:
        return session_key(self.jti)


def session_key(jti: str) -> str:
    return f"{SESSION_KEY_PREFIX}{jti}"


class TokenService:
    """JWT 编解码（PyJWT）"""

    def __init__(self, secret_key: str, algorithm: str = "HS256", ttl_seconds: int = 3600):
        self._secret_key = secret_key
        self._algorithm = algorithm
        self.ttl_seconds = ttl_seconds

    def _generate_jti(self) -> str:
        """生成唯一的JWT Token ID"""
        return uuid.uuid4().hex

    def issue(self, user: User) -> tuple[Token, TokenClaims]:
        expire = datetime.now(timezone.utc) + timedelta(seconds=self.ttl_seconds)
        jti = self._generate_jti()
        to_encode = {
            "sub": str(user.id),
            "username": user.username,
            "exp": expire,
            "type": "session",
            "jti": jti,
        }
        encoded = jwt.encode(to_encode, self._secret_key, algorithm=self._algorithm)
        return Token(encoded), TokenClaims(user_id=int(user.id), jti=jti, expires_at=expire)

    def decode(self, token: Token) -> TokenClaims:
        """校验签名与过期时间。

        - 过期: 抛出 TokenExpiredException
        - 无效签名 / 类型错误 / 缺少字段: 抛出 UnauthorizedException
        """
        try:
            payload = jwt.decode(
                token.value,
                self._secret_key,
                algorithms=[self._algorithm],
            )
        except jwt.ExpiredSignatureError:
            raise TokenExpiredException()
        except jwt.PyJWTError as e:
            logger.warning("invalid_token", err=str(e))
            raise UnauthorizedException("invalid token")

        if payload.get("type") != "session":
            raise UnauthorizedException("invalid token type")

        user_id = payload.get("sub")
        jti = payload.get("jti")
        if not user_id or not jti:
            raise UnauthorizedException("token missing required claims")

        return TokenClaims(
            user_id=int(user_id),
            jti=jti,
            expires_at=datetime.fromtimestamp(payload["exp"], tz=timezone.utc),
        )
