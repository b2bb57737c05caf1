"""
删除状态单元
"""

from typing import Callable, List, Optional, Sequence

from conference_storage.core.log_messages import log_messages
from conference_storage.core.log_utils import get_logger
from conference_storage.core.storage.abc import BaseStorage
from conference_storage.core.storage.exceptions import StorageError, StorageErrorCode
from conference_storage.services.storage.files import delete_file, delete_files
from conference_storage.services.storage.hooks.base import StorageHook
from conference_storage.services.storage.hooks.state import DeleteOutcome

logger = get_logger(__name__)


class DeleteHook(StorageHook):
    """
    删除状态单元

    批量删除的结果是全有或全无的近似：远程调用失败时所有路径记为失败，
    成功时所有路径记为成功。
    """

    def __init__(
        self,
        storage: BaseStorage,
        bucket_id: str,
        on_success: Optional[Callable[[List[str]], None]] = None,
        on_error: Optional[Callable[[StorageError], None]] = None
    ):
        super().__init__(storage, bucket_id)
        self.on_success = on_success
        self.on_error = on_error
        self.is_deleting = False
        self.error: Optional[StorageError] = None

    def _fail(self, error: StorageError) -> None:
        self.error = error
        logger.debug(log_messages.HOOK_STATE_CHANGED, status="error")
        if self.on_error:
            self.on_error(error)

    async def delete_file(self, path: str) -> bool:
        """删除单个文件，返回是否成功"""
        self.is_deleting = True
        self.error = None
        try:
            result = await delete_file(self.storage, self.bucket_id, path)
        except Exception as e:
            self._fail(StorageError(str(e) or "Delete failed", code=StorageErrorCode.DELETE_FAILED, cause=e))
            return False
        finally:
            self.is_deleting = False

        if result.error:
            self._fail(result.error)
            return False

        if self.on_success:
            self.on_success([path])
        return True

    async def delete_files(self, paths: Sequence[str]) -> DeleteOutcome:
        """批量删除，结果按全有或全无划分为 success 与 failed"""
        paths = list(paths)
        self.is_deleting = True
        self.error = None
        try:
            result = await delete_files(self.storage, self.bucket_id, paths)
        except Exception as e:
            self._fail(StorageError(str(e) or "Delete failed", code=StorageErrorCode.DELETE_FAILED, cause=e))
            return DeleteOutcome(success=[], failed=paths)
        finally:
            self.is_deleting = False

        if result.error:
            self._fail(result.error)
            return DeleteOutcome(success=[], failed=paths)

        if self.on_success:
            self.on_success(paths)
        return DeleteOutcome(success=paths, failed=[])

    def reset(self) -> None:
        self.is_deleting = False
        self.error = None
