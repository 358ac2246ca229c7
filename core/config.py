"""
配置文件 - 项目配置管理

每个微服务读取自己的命名配置段（``account_service`` / ``web_api_service``），
环境变量使用 ``__`` 作为嵌套分隔符，例如::

    ACCOUNT_SERVICE__GRPC_PORT=50051
    ACCOUNT_SERVICE__DATABASE__URL=postgresql+asyncpg://user:pwd@db/accounts
    ACCOUNT_SERVICE__REDIS__URL=redis://cache:6379/0
"""
from typing import Dict, Optional, Type

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from core.exceptions import ConfigurationError


class GrpcTlsSettings(BaseModel):
    model_config = ConfigDict(frozen=True)

    enabled: bool = False
    cert: Optional[str] = None
    key: Optional[str] = None
    ca: Optional[str] = None


class DatabaseSettings(BaseModel):
    model_config = ConfigDict(frozen=True)

    url: str
    echo: bool = False
    pool_pre_ping: bool = True
    # 开发环境下启动时自动建表；生产环境由迁移负责
    create_tables: bool = False


class RedisSettings(BaseModel):
    model_config = ConfigDict(frozen=True)

    url: str = "redis://localhost:6379/0"
    max_connections: int = 10
    namespace: str = "calendar"


class ServiceSettings(BaseSettings):
    """所有微服务共享的配置段结构"""

    grpc_host: str = "0.0.0.0"
    grpc_port: int = 50051
    # This maps to GRPC option grpc.max_concurrent_streams
    max_concurrent_streams: int = 100
    # 停机时等待在途请求完成的秒数
    shutdown_grace: float = 5.0
    # 数据库 / 缓存建连的超时上限（秒），超时即启动失败
    connect_timeout: float = 5.0
    tls: GrpcTlsSettings = Field(default_factory=GrpcTlsSettings)

    database: DatabaseSettings
    redis: RedisSettings = Field(default_factory=RedisSettings)

    @field_validator("grpc_port")
    @classmethod
    def _validate_port(cls, v: int) -> int:
        if not 0 <= v <= 65535:
            raise ValueError(f"invalid port: {v}")
        return v

    @field_validator("connect_timeout", "shutdown_grace")
    @classmethod
    def _validate_positive(cls, v: float) -> float:
        if v <= 0:
            raise ValueError("must be greater than 0")
        return v

    @property
    def grpc_address(self) -> str:
        return f"{self.grpc_host}:{self.grpc_port}"


class AccountServiceSettings(ServiceSettings):
    """account 服务配置段"""

    secret_key: str = Field(..., min_length=1, description="JWT签名密钥，必须显式配置")
    algorithm: str = "HS256"
    token_ttl_seconds: int = 3600

    model_config = SettingsConfigDict(
        env_prefix="ACCOUNT_SERVICE__",
        env_nested_delimiter="__",
        env_file=".env",
        case_sensitive=False,
        extra="ignore",
        frozen=True,
    )


class WebApiServiceSettings(ServiceSettings):
    """web-api 聚合服务配置段"""

    grpc_port: int = 50052
    # account 服务的 gRPC 地址（host:port）
    account_target: str = "localhost:50051"
    account_timeout: float = 5.0
    # 按用户事件列表的缓存时间（秒）
    events_cache_ttl: int = 60

    model_config = SettingsConfigDict(
        env_prefix="WEB_API_SERVICE__",
        env_nested_delimiter="__",
        env_file=".env",
        case_sensitive=False,
        extra="ignore",
        frozen=True,
    )


class Settings(BaseSettings):
    """进程级配置（日志等），全部字段有默认值"""

    PROJECT_NAME: str = "calendar"
    DEBUG: bool = False
    # logfmt | json | console
    LOG_FORMAT: str = "logfmt"
    LOG_LEVEL: str = "INFO"

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=False,
        extra="ignore",
    )

    @field_validator("LOG_FORMAT")
    @classmethod
    def _validate_log_format(cls, v: str) -> str:
        v = v.lower()
        if v not in {"logfmt", "json", "console"}:
            raise ValueError(f"unsupported LOG_FORMAT: {v}")
        return v


CONFIG_SECTIONS: Dict[str, Type[ServiceSettings]] = {
    "account_service": AccountServiceSettings,
    "web_api_service": WebApiServiceSettings,
}


def get_config_by_key(key: str, **overrides) -> ServiceSettings:
    """按配置段名称加载服务配置。

    加载失败时抛出 ConfigurationError，由引导流程决定退出，
    不会以零值配置继续启动。
    """
    section = CONFIG_SECTIONS.get(key)
    if section is None:
        raise ConfigurationError(f"unknown config section {key!r}")
    try:
        return section(**overrides)
    except ValidationError as exc:
        raise ConfigurationError(f"invalid config section {key!r}", cause=exc) from exc


settings = Settings()
