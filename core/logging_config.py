"""
Structlog 日志配置模块

所有日志（structlog 与标准库 logging）统一经 ProcessorFormatter 渲染，
写到标准错误。默认渲染为 logfmt（key=value），可通过 LOG_FORMAT 切换为
json 或 console。
"""
import json
import logging
import sys
from typing import Any, List, Optional

import structlog
from structlog.contextvars import merge_contextvars
from structlog.dev import ConsoleRenderer
from structlog.processors import JSONRenderer, LogfmtRenderer, TimeStamper, add_log_level
from structlog.stdlib import ProcessorFormatter

from core.config import settings


def get_renderer(fmt: Optional[str] = None) -> Any:
    """根据 LOG_FORMAT 选择渲染器。
    注意：structlog 会向 serializer 传入 default/sort_keys 等参数，需要适配。
    """
    fmt = (fmt or settings.LOG_FORMAT).lower()
    if fmt == "console":
        return ConsoleRenderer(colors=False)
    if fmt == "json":
        def _dumps(obj, default=None, **kwargs):
            return json.dumps(obj, ensure_ascii=False, default=default, **kwargs)
        return JSONRenderer(serializer=_dumps)
    return LogfmtRenderer(key_order=["ts", "level", "event"], drop_missing=True)


def configure_logging(fmt: Optional[str] = None, stream=None) -> None:
    """配置 structlog 并桥接标准库 logging 到同一处理链。"""
    timestamper = TimeStamper(fmt="iso", utc=True, key="ts")

    # 预处理链（同时用于 stdlib ProcessorFormatter 和 structlog.configure）
    shared_pre_chain: List[Any] = [
        merge_contextvars,
        add_log_level,
        timestamper,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
    ]

    structlog.configure(
        processors=[
            *shared_pre_chain,
            ProcessorFormatter.wrap_for_formatter,
        ],
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    formatter = ProcessorFormatter(
        foreign_pre_chain=shared_pre_chain,
        processors=[
            ProcessorFormatter.remove_processors_meta,
            get_renderer(fmt),
        ],
    )

    handler = logging.StreamHandler(stream or sys.stderr)
    handler.setFormatter(formatter)

    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(handler)
    root.setLevel(logging.DEBUG if settings.DEBUG else settings.LOG_LEVEL.upper())


def get_logger(name: str = __name__) -> structlog.stdlib.BoundLogger:
    """获取 structlog logger 实例。"""
    return structlog.get_logger(name)


# 初始化配置
configure_logging()
