"""
目录级组合状态单元
"""

from typing import Optional, Union

from conference_storage.core.storage.abc import BaseStorage
from conference_storage.core.storage.models import ImageTransform, SignedUrl
from conference_storage.core.storage.utils.paths import join_paths
from conference_storage.services.storage.hooks.base import StorageHook
from conference_storage.services.storage.hooks.delete import DeleteHook
from conference_storage.services.storage.hooks.listing import ListHook
from conference_storage.services.storage.hooks.upload import UploadHook
from conference_storage.services.storage.urls import DEFAULT_SIGNED_URL_EXPIRES, create_signed_url, get_public_url


class FolderStorageHook(StorageHook):
    """共享同一存储桶与目录的上传、列表与删除单元，路径均相对于 folder"""

    def __init__(self, storage: BaseStorage, bucket_id: str, folder: str = "", auto_fetch: bool = True):
        super().__init__(storage, bucket_id)
        self.folder = folder
        self.upload = UploadHook(storage, bucket_id, path=folder)
        self.list = ListHook(storage, bucket_id, path=folder, auto_fetch=auto_fetch)
        self.delete = DeleteHook(storage, bucket_id)

    def _full_path(self, path: str) -> str:
        return join_paths(self.folder, path) if self.folder else path

    def get_url(self, path: str, transform: Optional[ImageTransform] = None) -> str:
        return get_public_url(self.storage, self.bucket_id, self._full_path(path), transform=transform)

    async def get_signed_url(
        self,
        path: str,
        expires_in: int = DEFAULT_SIGNED_URL_EXPIRES,
        download: Union[bool, str] = False,
        transform: Optional[ImageTransform] = None
    ) -> Optional[SignedUrl]:
        """签发目录内对象的签名URL，失败时返回None"""
        result = await create_signed_url(
            self.storage, self.bucket_id, self._full_path(path),
            expires_in=expires_in, download=download, transform=transform
        )
        return result.data

    async def _on_mount(self) -> None:
        await self.upload.mount()
        await self.list.mount()
        await self.delete.mount()

    async def unmount(self) -> None:
        await self.upload.unmount()
        await self.list.unmount()
        await self.delete.unmount()
        await super().unmount()
