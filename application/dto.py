"""
数据传输对象（DTO）- 端点与传输层之间的请求/响应消息

这些模型同时就是 gRPC 线上消息（见 grpc_app.codec）。
"""
from datetime import datetime, timezone
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, model_serializer


class DTOBase(BaseModel):
    """Base DTO: unify datetime serialization to UTC-Z for all subclasses."""

    model_config = ConfigDict(extra="ignore")

    @model_serializer(mode="wrap")
    def _serialize_model(self, handler):  # type: ignore[override]
        data = handler(self)

        def convert(value):
            if isinstance(value, datetime):
                ts = value if value.tzinfo else value.replace(tzinfo=timezone.utc)
                s = ts.astimezone(timezone.utc).isoformat()
                return s.replace("+00:00", "Z")
            if isinstance(value, list):
                return [convert(v) for v in value]
            if isinstance(value, tuple):
                return tuple(convert(v) for v in value)
            if isinstance(value, dict):
                return {k: convert(v) for k, v in value.items()}
            return value

        return convert(data)


class Empty(DTOBase):
    """无字段消息"""


# ============= account =============

class CredentialsDTO(DTOBase):
    """注册/登录请求"""
    username: str = Field(..., min_length=3, max_length=64, description="用户名")
    password: str = Field(..., min_length=1, description="密码")


class TokenRequest(DTOBase):
    token: str = Field(..., min_length=1)


class TokenReply(DTOBase):
    token: str


class SessionReply(DTOBase):
    """注册/登录响应：用户ID + 会话令牌"""
    id: int
    token: str


class ServiceStatusReply(DTOBase):
    code: int


# ============= web-api =============

class EventDTO(DTOBase):
    id: Optional[str] = None
    user_id: int = Field(..., gt=0)
    title: str = Field(..., min_length=1, max_length=200)
    description: Optional[str] = None
    starts_at: datetime
    ends_at: datetime
    created_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True, extra="ignore")


class EventIdReply(DTOBase):
    id: str


class ListEventRequest(DTOBase):
    user_id: int = Field(..., gt=0)


class ListEventReply(DTOBase):
    events: List[EventDTO] = Field(default_factory=list)


class DeleteEventRequest(DTOBase):
    event_id: str = Field(..., min_length=1)
    user_id: int = Field(..., gt=0)
