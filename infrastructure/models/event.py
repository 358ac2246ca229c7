"""
日历事件数据库模型
"""
from sqlalchemy import Column, Integer, String, DateTime, Text, Index
from datetime import datetime, timezone

from .base import Base


class EventModel(Base):
    """日历事件表，id 为 UUID4 hex"""
    __tablename__ = "events"

    id = Column(String(32), primary_key=True)
    user_id = Column(Integer, nullable=False, index=True, comment="所属用户ID")
    title = Column(String(200), nullable=False, comment="标题")
    description = Column(Text, nullable=True, comment="描述")
    starts_at = Column(DateTime(timezone=True), nullable=False, comment="开始时间")
    ends_at = Column(DateTime(timezone=True), nullable=False, comment="结束时间")
    created_at = Column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        nullable=False,
        comment="创建时间"
    )

    __table_args__ = (
        Index("ix_events_user_starts", "user_id", "starts_at"),
    )

    def __repr__(self):
        return f"<EventModel(id='{self.id}', user_id={self.user_id}, title='{self.title}')>"
