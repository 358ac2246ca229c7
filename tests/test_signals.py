import asyncio
import os
import signal

import pytest

from core.signals import SignalReceived, SignalWatcher, is_graceful


pytestmark = pytest.mark.asyncio


async def test_wait_returns_signal_received_on_sigterm():
    watcher = SignalWatcher()
    task = asyncio.create_task(watcher.wait())
    await asyncio.sleep(0.01)
    try:
        os.kill(os.getpid(), signal.SIGTERM)
        result = await asyncio.wait_for(task, 2)
    finally:
        watcher.close()

    assert isinstance(result, SignalReceived)
    assert result.signum == signal.SIGTERM
    assert result.signame == "SIGTERM"


async def test_cancel_returns_none():
    watcher = SignalWatcher()
    task = asyncio.create_task(watcher.wait())
    await asyncio.sleep(0)
    watcher.cancel(RuntimeError("other actor stopped"))
    try:
        assert await asyncio.wait_for(task, 2) is None
    finally:
        watcher.close()


async def test_cancel_before_wait_returns_immediately():
    watcher = SignalWatcher()
    watcher.cancel()
    try:
        assert await asyncio.wait_for(watcher.wait(), 2) is None
    finally:
        watcher.close()


async def test_second_signal_is_ignored():
    watcher = SignalWatcher()
    task = asyncio.create_task(watcher.wait())
    await asyncio.sleep(0.01)
    try:
        os.kill(os.getpid(), signal.SIGTERM)
        first = await asyncio.wait_for(task, 2)
        # Still installed: the second delivery is logged, not raised
        os.kill(os.getpid(), signal.SIGINT)
        await asyncio.sleep(0.05)
    finally:
        watcher.close()

    assert isinstance(first, SignalReceived)
    assert first.signum == signal.SIGTERM


async def test_is_graceful():
    assert is_graceful(None)
    assert is_graceful(SignalReceived(signal.SIGINT))
    assert not is_graceful(RuntimeError("x"))


async def test_close_restores_handlers():
    watcher = SignalWatcher()
    task = asyncio.create_task(watcher.wait())
    await asyncio.sleep(0)
    watcher.cancel()
    await task
    watcher.close()

    assert signal.getsignal(signal.SIGTERM) == signal.SIG_DFL
