"""
有状态操作单元的生命周期基类
"""

import asyncio
from typing import Awaitable, Callable, Optional, Set

from conference_storage.core.storage.abc import BaseStorage


class StorageHook:
    """
    有状态操作单元基类

    ``await hook.mount()`` 触发自动行为（自动获取、自动生成等），
    ``await hook.unmount()`` 取消所有已安排的定时任务。也可以用作异步上下文管理器。
    """

    def __init__(self, storage: BaseStorage, bucket_id: str):
        self.storage = storage
        self.bucket_id = bucket_id
        self.mounted = False
        self._timers: Set[asyncio.Task] = set()

    async def mount(self) -> None:
        self.mounted = True
        await self._on_mount()

    async def unmount(self) -> None:
        self.mounted = False
        self._cancel_timers()

    async def _on_mount(self) -> None:
        """挂载时的自动行为，子类按需覆盖"""

    def _schedule(self, delay: float, callback: Callable[[], Awaitable[object]]) -> asyncio.Task:
        """安排一次性延时任务，卸载或重置时统一取消"""
        async def run_later() -> None:
            await asyncio.sleep(delay)
            await callback()

        task = asyncio.create_task(run_later())
        self._timers.add(task)
        task.add_done_callback(self._timers.discard)
        return task

    def _cancel_timers(self, keep: Optional[asyncio.Task] = None) -> None:
        for task in list(self._timers):
            if task is not keep:
                task.cancel()

    @property
    def scheduled_timers(self) -> int:
        return sum(1 for task in self._timers if not task.done())

    async def __aenter__(self):
        await self.mount()
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.unmount()
