"""
Shared business codes used across layers (Domain/Core/gRPC).

Single source of truth so the domain exceptions and the gRPC status
mapping never drift apart.
"""
from enum import IntEnum


class BusinessCode(IntEnum):
    """业务状态码定义（单一来源）"""

    # 参数错误 (1xxxx)
    PARAM_VALIDATION_ERROR = 10003

    # 业务错误 (2xxxx)
    USER_ALREADY_EXISTS = 20002
    PASSWORD_ERROR = 20003
    TOKEN_EXPIRED = 20005
    EVENT_NOT_FOUND = 20007

    # 权限错误 (3xxxx)
    UNAUTHORIZED = 30001

    # 系统错误 (4xxxx)
    SYSTEM_ERROR = 40000
    SERVICE_UNAVAILABLE = 40003


__all__ = ["BusinessCode"]
