"""
日历事件领域实体
"""
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Optional


@dataclass
class Event:
    """日历事件"""

    id: Optional[str]
    user_id: int
    title: str
    starts_at: datetime
    ends_at: datetime
    description: Optional[str] = None
    created_at: Optional[datetime] = None

    def validate(self) -> None:
        """业务规则：标题非空，结束时间不早于开始时间"""
        if not self.title or not self.title.strip():
            raise ValueError("title must not be empty")
        if self.user_id <= 0:
            raise ValueError("user_id must be positive")
        if _as_utc(self.ends_at) < _as_utc(self.starts_at):
            raise ValueError("ends_at must not be earlier than starts_at")


def _as_utc(dt: datetime) -> datetime:
    return dt if dt.tzinfo else dt.replace(tzinfo=timezone.utc)
