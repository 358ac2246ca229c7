"""
进程监督：传输服务器 + 信号监听两个参与者放入同一个 Group

任一参与者结束（收到信号 / 服务器自行终止）都会中断另一个，
两者都返回后 run_until_stopped() 返回第一个结束者的结果。

信号处理器的生命周期归调用方：组合根在释放数据库、缓存等连接之后
才调用 watcher.close()，清理期间再到达的信号只会被记录。
"""
from __future__ import annotations

from typing import Optional

from core.exceptions import StartupError
from core.group import Group
from core.logging_config import get_logger
from core.signals import SignalWatcher, is_graceful
from grpc_app.server import GrpcTransport


logger = get_logger(__name__)


async def run_until_stopped(
    transport: GrpcTransport,
    watcher: SignalWatcher,
    *,
    join_timeout: Optional[float] = None,
) -> Optional[BaseException]:
    group = Group(join_timeout=join_timeout)

    serve, close = transport.actor()
    group.add(serve, close, name="transport")
    wait, cancel = watcher.actor()
    group.add(wait, cancel, name="signals")

    result = await group.run()
    logger.info("exit", exit=_describe(result), graceful=is_graceful(result))
    return result


def exit_code(result: Optional[BaseException]) -> int:
    """只有启动失败（数据库 / 监听绑定）才返回非零；信号与服务器自行终止都是 0"""
    if isinstance(result, StartupError):
        return result.exit_code
    return 0


def _describe(result: Optional[BaseException]) -> str:
    return "none" if result is None else str(result)


__all__ = ["run_until_stopped", "exit_code"]
