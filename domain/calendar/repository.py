"""
日历事件仓储接口
"""
from abc import ABC, abstractmethod
from typing import List

from .entity import Event


class EventRepository(ABC):
    """事件仓储抽象接口"""

    @abstractmethod
    async def create(self, event: Event) -> Event:
        """保存事件（id 由调用方生成）"""
        pass

    @abstractmethod
    async def list_by_user(self, user_id: int) -> List[Event]:
        """按开始时间升序返回用户的全部事件"""
        pass

    @abstractmethod
    async def delete(self, event_id: str, user_id: int) -> bool:
        """删除属于该用户的事件，不存在返回 False"""
        pass

    @abstractmethod
    async def ping(self) -> bool:
        pass
