"""
终止信号监听，作为 Group 的一个参与者使用
"""
from __future__ import annotations

import asyncio
import signal
from typing import Iterable, Optional, Tuple

from core.logging_config import get_logger


logger = get_logger(__name__)

DEFAULT_SIGNALS: Tuple[signal.Signals, ...] = (signal.SIGINT, signal.SIGTERM)


class SignalReceived(Exception):
    """收到终止信号。属于正常停机触发，不是错误退出。"""

    def __init__(self, signum: int) -> None:
        self.signum = signum
        try:
            self.signame = signal.Signals(signum).name
        except ValueError:
            self.signame = str(signum)
        super().__init__(f"received signal {self.signame}")


class SignalWatcher:
    """等待 SIGINT/SIGTERM 或内部取消。

    - wait(): 收到信号返回 SignalReceived，被 cancel() 唤醒返回 None
    - 已经结束后再收到的信号只记录日志，不会触发第二次停机
    - close(): 恢复默认信号处理
    """

    def __init__(self, signals: Iterable[int] = DEFAULT_SIGNALS) -> None:
        self._signals = tuple(signals)
        self._future: Optional[asyncio.Future] = None
        self._loop: Optional[asyncio.AbstractEventLoop] = None
        self._cancelled = False
        self._installed = False
        self._fallback = False

    async def wait(self) -> Optional[SignalReceived]:
        self._loop = asyncio.get_running_loop()
        self._future = self._loop.create_future()
        self._install()
        if self._cancelled:
            self._future.set_result(None)
        return await self._future

    def cancel(self, _err: Optional[BaseException] = None) -> None:
        """中断回调：关闭内部取消通道"""
        self._cancelled = True
        if self._future is not None and not self._future.done():
            self._future.set_result(None)

    def close(self) -> None:
        if not self._installed:
            return
        for sig in self._signals:
            if self._fallback:
                signal.signal(sig, signal.SIG_DFL)
            elif self._loop is not None and not self._loop.is_closed():
                self._loop.remove_signal_handler(sig)
        self._installed = False

    def _install(self) -> None:
        if self._installed:
            return
        assert self._loop is not None
        for sig in self._signals:
            try:
                self._loop.add_signal_handler(sig, self._on_signal, sig)
            except NotImplementedError:
                # 不支持 add_signal_handler 的平台（Windows）
                self._fallback = True
                signal.signal(sig, self._on_signal_threadsafe)
        self._installed = True

    def _on_signal_threadsafe(self, signum, _frame) -> None:
        if self._loop is not None:
            self._loop.call_soon_threadsafe(self._on_signal, signum)

    def _on_signal(self, signum: int) -> None:
        if self._future is None or self._future.done():
            logger.warning("signal_ignored", signal=signal.Signals(signum).name, reason="shutdown in progress")
            return
        self._future.set_result(SignalReceived(signum))

    def actor(self):
        """返回可直接交给 Group.add 的 (execute, interrupt)"""
        return self.wait, self.cancel


def is_graceful(err: Optional[BaseException]) -> bool:
    """停机结果是否属于正常退出（exit code 0）"""
    return err is None or isinstance(err, SignalReceived)


__all__ = ["SignalWatcher", "SignalReceived", "DEFAULT_SIGNALS", "is_graceful"]
