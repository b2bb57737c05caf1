"""
签名URL状态单元
自动生成，并在过期前自动续签
"""

import asyncio
from typing import Callable, Optional, Union

from conference_storage.core.config import settings
from conference_storage.core.log_messages import log_messages
from conference_storage.core.log_utils import get_logger
from conference_storage.core.storage.abc import BaseStorage
from conference_storage.core.storage.exceptions import StorageError, StorageErrorCode
from conference_storage.core.storage.models import ImageTransform, SignedUrl
from conference_storage.services.storage.hooks.base import StorageHook
from conference_storage.services.storage.urls import create_signed_url
from conference_storage.utils.datetime_utils import get_current_timestamp

logger = get_logger(__name__)


class SignedUrlHook(StorageHook):
    """
    签名URL状态单元

    每次生成成功后，若剩余有效期大于刷新缓冲（默认60秒），安排一次在过期前
    缓冲时间触发的续签；剩余有效期不足缓冲时不安排续签。卸载时取消续签。
    """

    def __init__(
        self,
        storage: BaseStorage,
        bucket_id: str,
        path: Optional[str] = None,
        expires_in: Optional[int] = None,
        download: Union[bool, str] = False,
        transform: Optional[ImageTransform] = None,
        auto_generate: bool = True,
        refresh_buffer: Optional[float] = None,
        on_success: Optional[Callable[[SignedUrl], None]] = None,
        on_error: Optional[Callable[[StorageError], None]] = None
    ):
        super().__init__(storage, bucket_id)
        self.path = path
        self.expires_in = expires_in or settings.storage_signed_url_expires
        self.download = download
        self.transform = transform
        self.auto_generate = auto_generate
        self.refresh_buffer = settings.storage_refresh_buffer if refresh_buffer is None else refresh_buffer
        self.on_success = on_success
        self.on_error = on_error

        self.url: Optional[str] = None
        self.expires_at: Optional[float] = None
        self.is_loading = False
        self.error: Optional[StorageError] = None
        # 卸载或重置时递增，过期的生成结果据此丢弃
        self._epoch = 0

    @property
    def is_valid(self) -> bool:
        return self.expires_at is not None and self.expires_at > get_current_timestamp()

    async def _on_mount(self) -> None:
        if self.auto_generate and self.path:
            await self.generate()

    async def generate(self) -> Optional[SignedUrl]:
        """生成签名URL并安排续签"""
        if not self.path:
            return None

        epoch = self._epoch
        self.is_loading = True
        self.error = None
        try:
            result = await create_signed_url(
                self.storage,
                self.bucket_id,
                self.path,
                expires_in=self.expires_in,
                download=self.download,
                transform=self.transform
            )
        except Exception as e:
            if epoch != self._epoch:
                return None
            self._fail(StorageError(str(e) or "Failed to create signed URL", code=StorageErrorCode.UNKNOWN_ERROR, cause=e))
            return None
        finally:
            if epoch == self._epoch:
                self.is_loading = False

        if epoch != self._epoch:
            logger.debug(log_messages.HOOK_STATE_CHANGED, status="stale")
            return None

        if result.error:
            self._fail(result.error)
            return None

        self.url = result.data.signed_url
        self.expires_at = result.data.expires_at
        self._schedule_refresh()
        if self.on_success:
            self.on_success(result.data)
        return result.data

    def _fail(self, error: StorageError) -> None:
        self.error = error
        logger.debug(log_messages.HOOK_STATE_CHANGED, status="error")
        if self.on_error:
            self.on_error(error)

    def _schedule_refresh(self) -> None:
        # 续签任务内部调用 generate 时不能取消自身
        try:
            current = asyncio.current_task()
        except RuntimeError:
            current = None
        self._cancel_timers(keep=current)

        remaining = self.expires_at - get_current_timestamp()
        if remaining <= self.refresh_buffer:
            return

        delay = remaining - self.refresh_buffer
        logger.debug(log_messages.SIGNED_URL_REFRESH_SCHEDULED, delay=round(delay, 1))
        self._schedule(delay, self.generate)

    async def unmount(self) -> None:
        self._epoch += 1
        self.is_loading = False
        await super().unmount()

    def reset(self) -> None:
        self._epoch += 1
        self._cancel_timers()
        self.url = None
        self.expires_at = None
        self.is_loading = False
        self.error = None
