"""
账户数据库模型 - SQLAlchemy ORM模型
注意：这是基础设施层的实现细节，不是领域模型
"""
from sqlalchemy import Column, Integer, String, DateTime
from datetime import datetime, timezone

from .base import Base


class AccountModel(Base):
    """
    账户数据库模型

    所有业务规则都在 domain.account.entity.User 中
    """
    __tablename__ = "accounts"

    id = Column(Integer, primary_key=True, index=True)
    username = Column(String(64), unique=True, index=True, nullable=False, comment="用户名")
    hashed_password = Column(String(255), nullable=False, comment="密码哈希")
    created_at = Column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        nullable=False,
        comment="创建时间"
    )

    def __repr__(self):
        return f"<AccountModel(id={self.id}, username='{self.username}')>"
