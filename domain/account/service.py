"""
账户服务能力接口与密码服务
"""
from abc import ABC, abstractmethod
from typing import Tuple
import hashlib
import hmac
import secrets

from .entity import Credentials, Token


class AccountService(ABC):
    """账户服务能力集合：传输层只依赖此接口"""

    @abstractmethod
    async def is_auth(self, token: Token) -> Token:
        """校验令牌，返回仍然有效的令牌"""

    @abstractmethod
    async def sign_up(self, user: Credentials) -> Tuple[int, Token]:
        """注册并签发令牌"""

    @abstractmethod
    async def login(self, user: Credentials) -> Tuple[int, Token]:
        """登录并签发令牌"""

    @abstractmethod
    async def logout(self, token: Token) -> None:
        """注销令牌"""

    @abstractmethod
    async def service_status(self) -> int:
        """依赖可用时返回 200，否则 503"""


class PasswordService:
    """密码服务 - 处理密码相关的业务逻辑"""

    ITERATIONS = 100_000

    @classmethod
    def hash_password(cls, password: str) -> str:
        salt = secrets.token_hex(32)
        pwd_hash = hashlib.pbkdf2_hmac('sha256',
                                       password.encode('utf-8'),
                                       salt.encode('utf-8'),
                                       cls.ITERATIONS)
        return f"{salt}${pwd_hash.hex()}"

    @classmethod
    def verify_password(cls, plain_password: str, hashed_password: str) -> bool:
        try:
            salt, pwd_hash = hashed_password.split('$')
        except ValueError:
            return False
        new_hash = hashlib.pbkdf2_hmac('sha256',
                                      plain_password.encode('utf-8'),
                                      salt.encode('utf-8'),
                                      cls.ITERATIONS)
        return hmac.compare_digest(new_hash.hex(), pwd_hash)

    @staticmethod
    def validate_password(password: str) -> None:
        """业务规则：密码不能为空且至少 6 位"""
        if not password or len(password) < 6:
            raise ValueError("password must be at least 6 characters")
