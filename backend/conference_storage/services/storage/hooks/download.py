"""
下载状态单元
"""

import os
import tempfile
from dataclasses import replace
from pathlib import Path
from typing import Callable, Optional, Union

from conference_storage.core.log_messages import log_messages
from conference_storage.core.log_utils import get_logger
from conference_storage.core.storage.abc import BaseStorage
from conference_storage.core.storage.exceptions import StorageError, StorageErrorCode
from conference_storage.core.storage.models import DownloadResult, ImageTransform
from conference_storage.services.storage.files import download_file
from conference_storage.services.storage.hooks.base import StorageHook
from conference_storage.services.storage.hooks.state import DownloadState, OperationStatus, Progress

logger = get_logger(__name__)


class DownloadHook(StorageHook):
    """
    下载状态单元

    auto_download 为真且提供了 path 时，挂载后立即下载一次。
    """

    def __init__(
        self,
        storage: BaseStorage,
        bucket_id: str,
        path: Optional[str] = None,
        transform: Optional[ImageTransform] = None,
        auto_download: bool = False,
        on_success: Optional[Callable[[DownloadResult], None]] = None,
        on_error: Optional[Callable[[StorageError], None]] = None
    ):
        super().__init__(storage, bucket_id)
        self.path = path
        self.transform = transform
        self.auto_download = auto_download
        self.on_success = on_success
        self.on_error = on_error
        self.state = DownloadState()

    @property
    def is_downloading(self) -> bool:
        return self.state.status == OperationStatus.DOWNLOADING

    async def _on_mount(self) -> None:
        if self.auto_download and self.path:
            await self.download()

    async def download(self, path: Optional[str] = None) -> Optional[DownloadResult]:
        """下载文件，未传 path 时使用构造时的路径"""
        file_path = path or self.path
        if not file_path:
            self._fail(StorageError("No file path provided", code=StorageErrorCode.DOWNLOAD_FAILED))
            return None

        self.state = DownloadState(status=OperationStatus.DOWNLOADING)
        logger.debug(log_messages.HOOK_STATE_CHANGED, status=self.state.status.value)

        try:
            result = await download_file(self.storage, self.bucket_id, file_path, self.transform)
        except Exception as e:
            self._fail(StorageError(str(e) or "Download failed", code=StorageErrorCode.DOWNLOAD_FAILED, cause=e))
            return None

        if result.error:
            self._fail(result.error)
            return None

        size = result.data.size
        self.state = DownloadState(
            status=OperationStatus.SUCCESS,
            progress=Progress.of(size, size) if size else Progress(loaded=0, total=0, percentage=100),
            result=result.data,
        )
        logger.debug(log_messages.HOOK_STATE_CHANGED, status=self.state.status.value)
        if self.on_success:
            self.on_success(result.data)
        return result.data

    def _fail(self, error: StorageError) -> None:
        self.state = replace(DownloadState(), status=OperationStatus.ERROR, error=error)
        logger.debug(log_messages.HOOK_STATE_CHANGED, status=self.state.status.value)
        if self.on_error:
            self.on_error(error)

    async def download_to_device(
        self,
        destination: Union[str, Path],
        filename: Optional[str] = None,
        path: Optional[str] = None
    ) -> Optional[Path]:
        """
        下载并保存到本地目录

        先写入同目录下的临时文件，完成后原子替换为目标文件，
        中途失败不会留下残缺文件。

        Args:
            destination: 保存目录
            filename: 保存的文件名，默认使用下载结果中的文件名
            path: 对象路径，默认使用构造时的路径

        Returns:
            Optional[Path]: 保存后的文件路径，下载失败时返回None
        """
        result = await self.download(path)
        if result is None:
            return None

        directory = Path(destination)
        directory.mkdir(parents=True, exist_ok=True)
        target = directory / (filename or result.filename)

        fd, temp_path = tempfile.mkstemp(dir=directory, prefix=".download-")
        try:
            with os.fdopen(fd, "wb") as f:
                f.write(result.data)
            os.replace(temp_path, target)
        except OSError:
            if os.path.exists(temp_path):
                os.remove(temp_path)
            raise

        logger.info(log_messages.FILE_DOWNLOAD_SAVED, extra={"bucket_id": self.bucket_id, "target": str(target)})
        return target

    def reset(self) -> None:
        self.state = DownloadState()
