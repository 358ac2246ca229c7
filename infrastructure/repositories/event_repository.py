"""
日历事件仓储实现
"""
from typing import List
from sqlalchemy import select, delete

from domain.calendar.entity import Event
from domain.calendar.repository import EventRepository
from infrastructure.database import Database
from infrastructure.models.event import EventModel


class SQLAlchemyEventRepository(EventRepository):
    """事件仓储的SQLAlchemy实现"""

    def __init__(self, db: Database):
        self._db = db

    def _to_entity(self, model: EventModel) -> Event:
        return Event(
            id=model.id,
            user_id=model.user_id,
            title=model.title,
            description=model.description,
            starts_at=model.starts_at,
            ends_at=model.ends_at,
            created_at=model.created_at,
        )

    async def create(self, event: Event) -> Event:
        async with self._db.session_factory() as session:
            db_event = EventModel(
                id=event.id,
                user_id=event.user_id,
                title=event.title,
                description=event.description,
                starts_at=event.starts_at,
                ends_at=event.ends_at,
                created_at=event.created_at,
            )
            session.add(db_event)
            await session.flush()
            await session.refresh(db_event)
            await session.commit()
            return self._to_entity(db_event)

    async def list_by_user(self, user_id: int) -> List[Event]:
        async with self._db.session_factory() as session:
            result = await session.execute(
                select(EventModel)
                .where(EventModel.user_id == user_id)
                .order_by(EventModel.starts_at.asc(), EventModel.id.asc())
            )
            return [self._to_entity(m) for m in result.scalars().all()]

    async def delete(self, event_id: str, user_id: int) -> bool:
        async with self._db.session_factory() as session:
            result = await session.execute(
                delete(EventModel)
                .where(EventModel.id == event_id, EventModel.user_id == user_id)
            )
            await session.commit()
            return (result.rowcount or 0) > 0

    async def ping(self) -> bool:
        return await self._db.ping()
