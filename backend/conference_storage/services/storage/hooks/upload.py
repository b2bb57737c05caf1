"""
上传状态单元
单文件与批量上传，带合成进度、取消与回调
"""

import asyncio
from dataclasses import replace
from typing import Callable, List, Optional, Sequence

from conference_storage.core.log_messages import log_messages
from conference_storage.core.log_utils import get_logger
from conference_storage.core.storage.abc import BaseStorage
from conference_storage.core.storage.exceptions import StorageError, StorageErrorCode
from conference_storage.core.storage.models import FileUpload, StorageResult, UploadOptions, UploadResult
from conference_storage.core.storage.utils.paths import generate_unique_filename, join_paths
from conference_storage.services.storage.files import upload_file
from conference_storage.services.storage.hooks.base import StorageHook
from conference_storage.services.storage.hooks.progress import ProgressCallback, SimulatedProgress
from conference_storage.services.storage.hooks.state import (
    MultiUploadState,
    OperationStatus,
    Progress,
    UploadState,
)

logger = get_logger(__name__)


class UploadHook(StorageHook):
    """
    上传状态单元

    单文件上传的状态机：idle -> uploading -> success | error，终态只能通过
    reset 退出；新的上传会重新开始状态机。

    取消只保证本地状态立即回到 idle，并忽略之后返回的结果，不保证已发出的
    网络请求被中止。
    """

    def __init__(
        self,
        storage: BaseStorage,
        bucket_id: str,
        path: str = "",
        options: Optional[UploadOptions] = None,
        on_progress: Optional[ProgressCallback] = None,
        on_success: Optional[Callable[[UploadResult], None]] = None,
        on_error: Optional[Callable[[StorageError], None]] = None,
        progress_interval: Optional[float] = None
    ):
        super().__init__(storage, bucket_id)
        self.base_path = path
        self.options = options or UploadOptions()
        self.on_progress = on_progress
        self.on_success = on_success
        self.on_error = on_error
        self.progress_interval = progress_interval

        self.state = UploadState()
        self.multi_state = MultiUploadState()
        self._abort: Optional[asyncio.Event] = None
        self._progress: Optional[SimulatedProgress] = None

    @property
    def is_uploading(self) -> bool:
        return (
            self.state.status == OperationStatus.UPLOADING
            or self.multi_state.status == OperationStatus.UPLOADING
        )

    def _stop_progress(self) -> None:
        if self._progress is not None:
            self._progress.stop()
            self._progress = None

    def _fail(self, error: StorageError, total: int) -> None:
        self.state = UploadState(
            status=OperationStatus.ERROR,
            progress=Progress(loaded=0, total=total, percentage=0),
            error=error,
        )
        logger.debug(log_messages.HOOK_STATE_CHANGED, status=self.state.status.value)
        if self.on_error:
            self.on_error(error)

    async def upload(self, file: FileUpload, path: Optional[str] = None) -> Optional[UploadResult]:
        """
        上传单个文件

        Args:
            file: 待上传文件
            path: 目标路径，默认 ``<path>/<文件名>``

        Returns:
            Optional[UploadResult]: 成功时返回结果，失败或被取消时返回None
        """
        if self._abort is not None:
            self._abort.set()
        self._stop_progress()
        abort = asyncio.Event()
        self._abort = abort
        file_path = path or join_paths(self.base_path, file.name)
        total = file.size

        self.state = UploadState(status=OperationStatus.UPLOADING, progress=Progress.of(0, total))
        logger.debug(log_messages.HOOK_STATE_CHANGED, status=self.state.status.value)

        def report(progress: Progress) -> None:
            if abort.is_set() or self.state.status != OperationStatus.UPLOADING:
                return
            self.state = replace(self.state, progress=progress)
            if self.on_progress:
                self.on_progress(progress)

        progress = SimulatedProgress(total, report, interval=self.progress_interval)
        self._progress = progress
        progress.start()

        try:
            result: StorageResult[UploadResult] = await upload_file(
                self.storage,
                self.bucket_id,
                file_path,
                file,
                replace(self.options, content_type=file.content_type)
            )
        except Exception as e:
            if abort.is_set():
                return None
            self._fail(StorageError(str(e) or "Upload failed", code=StorageErrorCode.UPLOAD_FAILED, cause=e), total)
            return None
        finally:
            progress.stop()

        if abort.is_set():
            return None

        if result.error:
            self._fail(result.error, total)
            return None

        self.state = UploadState(
            status=OperationStatus.SUCCESS,
            progress=Progress.of(total, total),
            result=result.data,
        )
        logger.debug(log_messages.HOOK_STATE_CHANGED, status=self.state.status.value)
        if self.on_progress:
            self.on_progress(self.state.progress)
        if self.on_success:
            self.on_success(result.data)
        return result.data

    async def upload_multiple(
        self,
        files: Sequence[FileUpload],
        folder: Optional[str] = None
    ) -> List[Optional[UploadResult]]:
        """
        顺序上传多个文件

        每个文件以生成的唯一文件名存储在 folder 下；按文件名维护单文件状态，
        并累计成功与失败数。单文件回调不会被触发。

        Returns:
            List[Optional[UploadResult]]: 与输入顺序一致的结果，失败项为None
        """
        self.multi_state = MultiUploadState(
            status=OperationStatus.UPLOADING,
            files={file.name: UploadState() for file in files},
            total=len(files),
        )
        results: List[Optional[UploadResult]] = []

        for file in files:
            unique_name = generate_unique_filename(file.name)
            file_path = join_paths(folder, unique_name) if folder else unique_name
            self._set_file_state(file.name, UploadState(
                status=OperationStatus.UPLOADING,
                progress=Progress.of(0, file.size),
            ))

            result = await upload_file(
                self.storage,
                self.bucket_id,
                file_path,
                file,
                replace(self.options, content_type=file.content_type)
            )

            if result.error:
                self._set_file_state(file.name, UploadState(
                    status=OperationStatus.ERROR,
                    progress=Progress(loaded=0, total=file.size, percentage=0),
                    error=result.error,
                ), failed=1)
                results.append(None)
            else:
                self._set_file_state(file.name, UploadState(
                    status=OperationStatus.SUCCESS,
                    progress=Progress.of(file.size, file.size),
                    result=result.data,
                ), completed=1)
                results.append(result.data)

        state = self.multi_state
        if state.failed == 0:
            status = OperationStatus.SUCCESS
        elif state.failed == state.total:
            status = OperationStatus.ERROR
        else:
            status = OperationStatus.PARTIAL
        self.multi_state = replace(state, status=status)
        logger.debug(log_messages.HOOK_STATE_CHANGED, status=status.value)
        return results

    def _set_file_state(self, name: str, file_state: UploadState, completed: int = 0, failed: int = 0) -> None:
        files = dict(self.multi_state.files)
        files[name] = file_state
        self.multi_state = replace(
            self.multi_state,
            files=files,
            completed=self.multi_state.completed + completed,
            failed=self.multi_state.failed + failed,
        )

    def cancel(self) -> None:
        """取消当前上传：本地状态回到 idle，之后返回的结果将被忽略"""
        if self._abort is not None:
            self._abort.set()
            self._abort = None
        self._stop_progress()
        self.state = replace(self.state, status=OperationStatus.IDLE)
        logger.debug(log_messages.HOOK_CANCELLED)

    def reset(self) -> None:
        self._stop_progress()
        self.state = UploadState()
        self.multi_state = MultiUploadState()

    async def unmount(self) -> None:
        self._stop_progress()
        await super().unmount()
