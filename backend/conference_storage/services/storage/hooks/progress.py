"""
合成上传进度

远程客户端不报告真实的字节级进度，这里按固定间隔模拟：每次推进文件大小的
10%，最多到90%，完成时由调用方直接置为100%。进度通过与真实进度流相同的
回调接口输出，后续可替换为分块上传的真实进度而不影响使用方。
"""

import asyncio
from typing import Callable, Optional

from conference_storage.core.config import settings
from conference_storage.services.storage.hooks.state import Progress

ProgressCallback = Callable[[Progress], None]

PROGRESS_STEP = 0.1
PROGRESS_CAP = 0.9


class SimulatedProgress:
    """按固定间隔推进的合成进度"""

    def __init__(self, total: int, on_update: ProgressCallback, interval: Optional[float] = None):
        self.total = total
        self.loaded = 0
        self.interval = settings.storage_progress_interval if interval is None else interval
        self._on_update = on_update
        self._task: Optional[asyncio.Task] = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def advance(self) -> Progress:
        """推进一步并通知回调"""
        step = max(int(self.total * PROGRESS_STEP), 1) if self.total else 0
        self.loaded = min(self.loaded + step, int(self.total * PROGRESS_CAP))
        progress = Progress.of(self.loaded, self.total)
        self._on_update(progress)
        return progress

    async def _run(self) -> None:
        while True:
            await asyncio.sleep(self.interval)
            self.advance()

    def start(self) -> None:
        if not self.running:
            self._task = asyncio.create_task(self._run())

    def stop(self) -> None:
        if self._task is not None:
            self._task.cancel()
            self._task = None
