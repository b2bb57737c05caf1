"""
Supabase存储适配器
实现BaseStorage接口，通过官方SDK访问Supabase Storage
"""

import asyncio
from datetime import datetime
from functools import partial
from typing import Any, Callable, Dict, List, Optional, Sequence, TypeVar, Union

from conference_storage.core.config.storage_config import get_storage_config, validate_storage_config
from conference_storage.core.log_utils import get_logger
from conference_storage.core.storage.abc import BaseStorage
from conference_storage.core.storage.exceptions import ConfigurationError
from conference_storage.core.storage.models import (
    Bucket,
    BucketOptions,
    FileObject,
    ImageTransform,
    ListOptions,
    SignedUploadUrl,
    SignedUrlEntry,
    StoredObject,
    UploadOptions,
)
from conference_storage.utils.datetime_utils import parse_timestamp

logger = get_logger(__name__)

T = TypeVar('T')


def _field(raw: Any, name: str, default: Any = None) -> Any:
    """兼容SDK返回的字典与数据类两种形态"""
    if isinstance(raw, dict):
        return raw.get(name, default)
    return getattr(raw, name, default)


def _to_bucket(raw: Any) -> Bucket:
    created_at = _field(raw, "created_at")
    updated_at = _field(raw, "updated_at")
    return Bucket(
        id=_field(raw, "id"),
        name=_field(raw, "name") or _field(raw, "id"),
        public=bool(_field(raw, "public", False)),
        allowed_mime_types=_field(raw, "allowed_mime_types"),
        file_size_limit=_field(raw, "file_size_limit"),
        owner=_field(raw, "owner"),
        created_at=created_at if isinstance(created_at, datetime) else parse_timestamp(created_at),
        updated_at=updated_at if isinstance(updated_at, datetime) else parse_timestamp(updated_at),
    )


def _to_file_object(raw: Dict[str, Any], folder: str) -> FileObject:
    name = raw.get("name", "")
    return FileObject(
        name=name,
        path=f"{folder}/{name}" if folder else name,
        id=raw.get("id"),
        created_at=parse_timestamp(raw.get("created_at")),
        updated_at=parse_timestamp(raw.get("updated_at")),
        metadata=raw.get("metadata") or {},
    )


def _signed_url_from(response: Dict[str, Any]) -> Optional[str]:
    return response.get("signedURL") or response.get("signedUrl") or response.get("signed_url")


class SupabaseStorageAdapter(BaseStorage):
    """
    Supabase存储适配器

    官方SDK为同步实现，所有调用都在默认线程池中执行，避免阻塞事件循环。
    SDK抛出的 StorageApiError 原样向上传播，由操作函数统一映射。
    """

    # 适配器名称，用于工厂模式注册
    ADAPTER_NAME: str = "supabase"

    def __init__(self) -> None:
        """
        初始化Supabase存储客户端

        Raises:
            ConfigurationError: 配置不完整时抛出
        """
        self.config = get_storage_config()

        if not validate_storage_config(self.config):
            raise ConfigurationError("Supabase存储配置不完整，请检查 SUPABASE_URL 与 SUPABASE_KEY")

        self._client = self._create_client()

    def _create_client(self):
        """创建SDK存储客户端"""
        from supabase import create_client

        return create_client(self.config.url, self.config.key).storage

    async def _run_in_executor(self, func: Callable[..., T], *args: Any, **kwargs: Any) -> T:
        """
        在线程池中运行同步SDK函数

        Args:
            func: 同步函数
            *args: 位置参数
            **kwargs: 关键字参数

        Returns:
            函数执行结果
        """
        loop = asyncio.get_running_loop()
        try:
            return await loop.run_in_executor(None, partial(func, *args, **kwargs))
        except Exception as e:
            logger.warning(
                "Supabase SDK调用失败",
                extra={"sdk_call": getattr(func, "__name__", repr(func)), "error": str(e)}
            )
            raise

    def _bucket(self, bucket_id: str):
        return self._client.from_(bucket_id)

    # ==================== 存储桶 ====================

    async def list_buckets(self) -> List[Bucket]:
        buckets = await self._run_in_executor(self._client.list_buckets)
        return [_to_bucket(bucket) for bucket in buckets]

    async def get_bucket(self, bucket_id: str) -> Bucket:
        bucket = await self._run_in_executor(self._client.get_bucket, bucket_id)
        return _to_bucket(bucket)

    async def create_bucket(self, bucket_id: str, options: BucketOptions) -> str:
        response = await self._run_in_executor(
            self._client.create_bucket,
            bucket_id,
            options=options.to_dict()
        )
        return _field(response, "name", bucket_id)

    async def update_bucket(self, bucket_id: str, options: BucketOptions) -> str:
        response = await self._run_in_executor(self._client.update_bucket, bucket_id, options.to_dict())
        return _field(response, "message", "Successfully updated")

    async def delete_bucket(self, bucket_id: str) -> str:
        response = await self._run_in_executor(self._client.delete_bucket, bucket_id)
        return _field(response, "message", "Successfully deleted")

    async def empty_bucket(self, bucket_id: str) -> str:
        response = await self._run_in_executor(self._client.empty_bucket, bucket_id)
        return _field(response, "message", "Successfully emptied")

    # ==================== 文件 ====================

    async def list_objects(self, bucket_id: str, path: str, options: ListOptions) -> List[FileObject]:
        list_options: Dict[str, Any] = {
            "limit": options.limit,
            "offset": options.offset,
        }
        if options.sort_by:
            list_options["sortBy"] = {"column": options.sort_by.column, "order": options.sort_by.order}
        if options.search:
            list_options["search"] = options.search

        entries = await self._run_in_executor(self._bucket(bucket_id).list, path or None, list_options)
        return [_to_file_object(entry, path) for entry in entries or []]

    async def upload(
        self,
        bucket_id: str,
        path: str,
        data: bytes,
        options: UploadOptions
    ) -> StoredObject:
        file_options = {
            "cache-control": options.cache_control,
            "content-type": options.content_type or "application/octet-stream",
            "upsert": "true" if options.upsert else "false",
        }
        response = await self._run_in_executor(
            self._bucket(bucket_id).upload,
            path,
            data,
            file_options=file_options
        )
        return StoredObject(
            path=_field(response, "path", path),
            id=_field(response, "id"),
            key=_field(response, "full_path") or _field(response, "fullPath"),
        )

    async def download(
        self,
        bucket_id: str,
        path: str,
        transform: Optional[ImageTransform] = None
    ) -> bytes:
        options = {"transform": transform.to_params()} if transform else None
        return await self._run_in_executor(self._bucket(bucket_id).download, path, options)

    async def move(self, bucket_id: str, from_path: str, to_path: str) -> str:
        response = await self._run_in_executor(self._bucket(bucket_id).move, from_path, to_path)
        return _field(response, "message", "Successfully moved")

    async def copy(self, bucket_id: str, from_path: str, to_path: str) -> str:
        await self._run_in_executor(self._bucket(bucket_id).copy, from_path, to_path)
        return to_path

    async def remove(self, bucket_id: str, paths: Sequence[str]) -> List[FileObject]:
        removed = await self._run_in_executor(self._bucket(bucket_id).remove, list(paths))
        return [_to_file_object(entry, "") for entry in removed or []]

    # ==================== URL ====================

    def get_public_url(
        self,
        bucket_id: str,
        path: str,
        download: Union[bool, str] = False,
        transform: Optional[ImageTransform] = None
    ) -> str:
        options: Dict[str, Any] = {}
        if download:
            options["download"] = download
        if transform:
            options["transform"] = transform.to_params()
        return self._bucket(bucket_id).get_public_url(path, options or None)

    async def create_signed_url(
        self,
        bucket_id: str,
        path: str,
        expires_in: int,
        download: Union[bool, str] = False,
        transform: Optional[ImageTransform] = None
    ) -> str:
        options: Dict[str, Any] = {}
        if download:
            options["download"] = download
        if transform:
            options["transform"] = transform.to_params()
        response = await self._run_in_executor(
            self._bucket(bucket_id).create_signed_url,
            path,
            expires_in,
            options or None
        )
        return _signed_url_from(response)

    async def create_signed_urls(
        self,
        bucket_id: str,
        paths: Sequence[str],
        expires_in: int,
        download: Union[bool, str] = False
    ) -> List[SignedUrlEntry]:
        options = {"download": download} if download else None
        response = await self._run_in_executor(
            self._bucket(bucket_id).create_signed_urls,
            list(paths),
            expires_in,
            options
        )
        return [
            SignedUrlEntry(
                path=entry.get("path"),
                signed_url=_signed_url_from(entry),
                error=entry.get("error"),
            )
            for entry in response or []
        ]

    async def create_signed_upload_url(self, bucket_id: str, path: str) -> SignedUploadUrl:
        response = await self._run_in_executor(self._bucket(bucket_id).create_signed_upload_url, path)
        return SignedUploadUrl(
            signed_url=_signed_url_from(response),
            path=response.get("path", path),
            token=response.get("token"),
        )
