"""领域层业务异常定义，供领域与基础设施使用。

核心（core）层仅负责启动期错误与传输层映射，避免领域层反向依赖核心层。
"""
from __future__ import annotations

from typing import Optional
from shared.codes import BusinessCode


class BusinessException(Exception):
    """业务异常基类"""

    def __init__(
        self,
        code: int,
        message: str,
        error_type: str = "BusinessError",
        details: Optional[dict] = None,
        field: Optional[str] = None,
    ) -> None:
        self.code = code
        self.message = message
        self.error_type = error_type
        self.details = details
        self.field = field
        super().__init__(self.message)


class UsernameAlreadyExistsException(BusinessException):
    def __init__(self, username: str):
        super().__init__(
            code=BusinessCode.USER_ALREADY_EXISTS,
            message=f"Username {username} already exists",
            error_type="UsernameAlreadyExists",
            details={"username": username},
            field="username",
        )


class PasswordErrorException(BusinessException):
    def __init__(self):
        super().__init__(
            code=BusinessCode.PASSWORD_ERROR,
            message="Invalid username or password",
            error_type="PasswordError",
        )


class DomainValidationException(BusinessException):
    def __init__(
        self,
        message: str,
        *,
        field: str | None = None,
        details: dict | None = None,
    ):
        super().__init__(
            code=BusinessCode.PARAM_VALIDATION_ERROR,
            message=message,
            error_type="DomainValidationError",
            details=details,
            field=field,
        )


class EventNotFoundException(BusinessException):
    def __init__(self, event_id: str, user_id: Optional[int] = None):
        details: dict = {"event_id": event_id}
        if user_id is not None:
            details["user_id"] = user_id
        super().__init__(
            code=BusinessCode.EVENT_NOT_FOUND,
            message="Event not found",
            error_type="EventNotFound",
            details=details,
        )
