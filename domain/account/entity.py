"""
账户领域实体
"""
from dataclasses import dataclass
from datetime import datetime
from typing import Optional
import re


USERNAME_PATTERN = r'^[a-zA-Z0-9_.@-]+$'


@dataclass
class User:
    """账户用户实体"""

    id: Optional[int]
    username: str
    hashed_password: str
    created_at: Optional[datetime] = None

    def __post_init__(self):
        self.validate_username()

    def validate_username(self) -> None:
        """业务规则：用户名验证"""
        if len(self.username) < 3:
            raise ValueError("username must be at least 3 characters")
        if len(self.username) > 64:
            raise ValueError("username must be at most 64 characters")
        if not re.match(USERNAME_PATTERN, self.username):
            raise ValueError("username contains invalid characters")


@dataclass(frozen=True)
class Credentials:
    """登录/注册时携带的明文凭据，仅在请求处理期间存在"""

    username: str
    password: str


@dataclass(frozen=True)
class Token:
    """不透明的会话令牌"""

    value: str

    def __str__(self) -> str:
        return self.value

    def __bool__(self) -> bool:
        return bool(self.value)
