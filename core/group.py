"""
进程内长生命周期任务组

Group 保存一组 (execute, interrupt) 参与者：run() 并发启动全部 execute，
第一个返回（成功或失败）的参与者触发对所有参与者的 interrupt，
待全部参与者返回后，run() 返回第一个参与者的结果。

interrupt 只会投递一次，无论是哪一个参与者先结束。
"""
from __future__ import annotations

import asyncio
import inspect
from dataclasses import dataclass
from typing import Awaitable, Callable, List, Optional, Union

from core.logging_config import get_logger


logger = get_logger(__name__)

Execute = Callable[[], Awaitable[Optional[BaseException]]]
Interrupt = Callable[[Optional[BaseException]], Union[Awaitable[None], None]]


@dataclass
class _Actor:
    name: str
    execute: Execute
    interrupt: Interrupt


class Group:
    """参与者注册表 + 一次性中断 + 全部返回的汇合点"""

    def __init__(self, *, join_timeout: Optional[float] = None) -> None:
        self._actors: List[_Actor] = []
        self._join_timeout = join_timeout
        self._interrupted = False
        self._running = False

    def __len__(self) -> int:
        return len(self._actors)

    @property
    def interrupted(self) -> bool:
        return self._interrupted

    def add(self, execute: Execute, interrupt: Interrupt, *, name: Optional[str] = None) -> None:
        """注册参与者。execute 返回 None 或错误对象（抛出的异常同样视为错误）。"""
        if self._running:
            raise RuntimeError("cannot add actors to a running group")
        self._actors.append(_Actor(name or f"actor-{len(self._actors)}", execute, interrupt))

    async def run(self) -> Optional[BaseException]:
        if not self._actors:
            return None
        if self._running:
            raise RuntimeError("group is already running")
        self._running = True

        tasks = [
            asyncio.create_task(self._execute(actor), name=f"group:{actor.name}")
            for actor in self._actors
        ]
        try:
            done, _ = await asyncio.wait(tasks, return_when=asyncio.FIRST_COMPLETED)
        except asyncio.CancelledError:
            await self._interrupt_all(None)
            for task in tasks:
                task.cancel()
            await asyncio.gather(*tasks, return_exceptions=True)
            raise

        # 同一轮中可能有多个参与者结束，按注册顺序取第一个
        first = min(done, key=tasks.index)
        err = first.result()
        logger.debug("group_actor_returned", actor=self._actors[tasks.index(first)].name, err=_describe(err))

        await self._interrupt_all(err)
        await self._join(tasks)
        return err

    async def _execute(self, actor: _Actor) -> Optional[BaseException]:
        try:
            return await actor.execute()
        except asyncio.CancelledError:
            raise
        except Exception as exc:
            return exc

    async def _interrupt_all(self, err: Optional[BaseException]) -> None:
        if self._interrupted:
            return
        self._interrupted = True
        for actor in self._actors:
            try:
                result = actor.interrupt(err)
                if inspect.isawaitable(result):
                    await result
            except Exception as exc:
                logger.error("group_interrupt_failed", actor=actor.name, err=str(exc), exc_info=True)

    async def _join(self, tasks: List[asyncio.Task]) -> None:
        pending = [t for t in tasks if not t.done()]
        if not pending:
            return
        _, still_pending = await asyncio.wait(pending, timeout=self._join_timeout)
        if still_pending:
            names = [t.get_name() for t in still_pending]
            logger.warning("group_join_timeout", pending=",".join(names), timeout=self._join_timeout)
            for task in still_pending:
                task.cancel()
            await asyncio.gather(*still_pending, return_exceptions=True)


def _describe(err: Optional[BaseException]) -> Optional[str]:
    return None if err is None else str(err)


__all__ = ["Group", "Execute", "Interrupt"]
