"""
web-api 聚合服务能力接口
"""
from abc import ABC, abstractmethod
from typing import List, Tuple

from domain.account.entity import Credentials, Token
from domain.calendar.entity import Event


class WebApiService(ABC):
    """事件增删查 + 透传到 account 服务的会话操作"""

    @abstractmethod
    async def add_event(self, event: Event) -> str:
        ...

    @abstractmethod
    async def list_event(self, user_id: int) -> List[Event]:
        ...

    @abstractmethod
    async def delete_event(self, event_id: str, user_id: int) -> None:
        ...

    @abstractmethod
    async def sign_up(self, user: Credentials) -> Tuple[int, Token]:
        ...

    @abstractmethod
    async def login(self, user: Credentials) -> Tuple[int, Token]:
        ...

    @abstractmethod
    async def logout(self, token: Token) -> None:
        ...
