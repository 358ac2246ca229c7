"""
核心异常：认证类业务异常 + 进程启动期的致命错误
"""
from typing import Optional

from shared.codes import BusinessCode
from domain.common.exceptions import BusinessException


class UnauthorizedException(BusinessException):
    """未授权异常"""

    def __init__(self, message: str = "Unauthorized"):
        super().__init__(
            code=BusinessCode.UNAUTHORIZED,
            message=message,
            error_type="Unauthorized",
        )


class TokenExpiredException(BusinessException):
    """Token过期异常"""

    def __init__(self):
        super().__init__(
            code=BusinessCode.TOKEN_EXPIRED,
            message="Token expired",
            error_type="TokenExpired",
        )


class ServiceUnavailableException(BusinessException):
    """下游服务不可用（例如 web-api 调用 account 服务失败）"""

    def __init__(self, service: str, reason: Optional[str] = None):
        super().__init__(
            code=BusinessCode.SERVICE_UNAVAILABLE,
            message=f"Service {service} unavailable",
            error_type="ServiceUnavailable",
            details={"service": service, "reason": reason} if reason else {"service": service},
        )


# ============= 启动期错误 =============


class StartupError(Exception):
    """进程启动阶段的致命错误，引导流程捕获后以 exit_code 退出"""

    exit_code = 1
    during = "Startup"

    def __init__(self, message: str, *, cause: Optional[BaseException] = None) -> None:
        self.message = message
        self.cause = cause
        super().__init__(message)

    def __str__(self) -> str:
        if self.cause is not None:
            return f"{self.message}: {self.cause}"
        return self.message


class ConfigurationError(StartupError):
    during = "Config"


class DatabaseConnectionError(StartupError):
    during = "Connect"


class CacheConnectionError(StartupError):
    during = "Connect"


class ListenerBindError(StartupError):
    during = "Listen"
