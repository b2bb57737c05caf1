"""
文件列表状态单元
"""

from typing import Callable, List, Optional

from conference_storage.core.storage.abc import BaseStorage
from conference_storage.core.storage.exceptions import StorageError, StorageErrorCode
from conference_storage.core.storage.models import FileObject, ListOptions
from conference_storage.services.storage.files import list_files
from conference_storage.services.storage.hooks.base import StorageHook


class ListHook(StorageHook):
    """
    文件列表状态单元

    auto_fetch 默认开启，挂载后立即获取一次。error 是扁平的错误消息字符串，
    仅在失败时设置，下一次获取或 reset 时清除；on_error 回调收到完整的 StorageError。
    """

    def __init__(
        self,
        storage: BaseStorage,
        bucket_id: str,
        path: str = "",
        options: Optional[ListOptions] = None,
        auto_fetch: bool = True,
        on_success: Optional[Callable[[List[FileObject]], None]] = None,
        on_error: Optional[Callable[[StorageError], None]] = None
    ):
        super().__init__(storage, bucket_id)
        self.path = path
        self.options = options
        self.auto_fetch = auto_fetch
        self.on_success = on_success
        self.on_error = on_error

        self.files: List[FileObject] = []
        self.is_loading = False
        self.error: Optional[str] = None

    async def _on_mount(self) -> None:
        if self.auto_fetch:
            await self.fetch()

    async def fetch(self) -> List[FileObject]:
        self.is_loading = True
        self.error = None
        error: Optional[StorageError] = None
        try:
            result = await list_files(self.storage, self.bucket_id, self.path, self.options)
        except Exception as e:
            result = None
            error = StorageError(str(e) or "Failed to list files", code=StorageErrorCode.UNKNOWN_ERROR, cause=e)
        finally:
            self.is_loading = False

        if result is not None and result.error:
            error = result.error

        if error is not None:
            self.error = error.message
            if self.on_error:
                self.on_error(error)
            return self.files

        self.files = result.data
        if self.on_success:
            self.on_success(self.files)
        return self.files

    async def refresh(self) -> List[FileObject]:
        """使用相同的参数重新获取"""
        return await self.fetch()

    def reset(self) -> None:
        self.files = []
        self.is_loading = False
        self.error = None
