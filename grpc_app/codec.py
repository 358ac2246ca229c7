"""Message codec: pydantic models carried as UTF-8 JSON inside gRPC frames."""
from __future__ import annotations

from typing import Callable, Type, TypeVar

from pydantic import BaseModel


M = TypeVar("M", bound=BaseModel)


def serializer(_model: Type[BaseModel]) -> Callable[[BaseModel], bytes]:
    def _serialize(message: BaseModel) -> bytes:
        return message.model_dump_json().encode("utf-8")
    return _serialize


def deserializer(model: Type[M]) -> Callable[[bytes], M]:
    # ValidationError propagates: grpc rejects the call when the payload is malformed
    def _deserialize(data: bytes) -> M:
        return model.model_validate_json(data or b"{}")
    return _deserialize
