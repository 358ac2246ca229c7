"""
账户仓储实现 - 使用SQLAlchemy实现数据访问
"""
from typing import Optional
from sqlalchemy import select, func
from sqlalchemy.exc import IntegrityError

from domain.account.entity import User
from domain.account.repository import AccountRepository
from domain.common.exceptions import UsernameAlreadyExistsException
from infrastructure.database import Database
from infrastructure.models.account import AccountModel
from core.logging_config import get_logger


logger = get_logger(__name__)


class SQLAlchemyAccountRepository(AccountRepository):
    """账户仓储的SQLAlchemy实现，每次操作使用独立会话"""

    def __init__(self, db: Database):
        self._db = db

    def _to_entity(self, model: AccountModel) -> User:
        """将数据库模型转换为领域实体"""
        return User(
            id=model.id,
            username=model.username,
            hashed_password=model.hashed_password,
            created_at=model.created_at,
        )

    def _to_model(self, entity: User) -> AccountModel:
        """将领域实体转换为数据库模型"""
        return AccountModel(
            id=entity.id,
            username=entity.username,
            hashed_password=entity.hashed_password,
            created_at=entity.created_at,
        )

    async def create(self, user: User) -> User:
        """创建用户"""
        async with self._db.session_factory() as session:
            db_user = self._to_model(user)
            session.add(db_user)
            try:
                await session.flush()  # 获取生成的ID
                await session.refresh(db_user)
                await session.commit()
            except IntegrityError:
                await session.rollback()
                logger.warning("create_account_conflict", field="username", username=user.username)
                raise UsernameAlreadyExistsException(user.username)
            return self._to_entity(db_user)

    async def get_by_username(self, username: str) -> Optional[User]:
        """根据用户名获取用户"""
        async with self._db.session_factory() as session:
            result = await session.execute(
                select(AccountModel).where(AccountModel.username == username)
            )
            db_user = result.scalar_one_or_none()
            return self._to_entity(db_user) if db_user else None

    async def exists_by_username(self, username: str) -> bool:
        """检查用户名是否存在"""
        async with self._db.session_factory() as session:
            result = await session.execute(
                select(func.count()).select_from(AccountModel)
                .where(AccountModel.username == username)
            )
            return result.scalar() > 0

    async def ping(self) -> bool:
        return await self._db.ping()
