"""
内存存储适配器
在进程内模拟Supabase Storage的行为，用于本地开发、演示与测试

模拟的服务端行为：
- 上传时按存储桶策略校验大小与MIME类型
- 未开启覆盖时，上传到已存在路径返回 "already exists"
- 列表按目录层级返回文件与子目录，支持分页、排序与前缀搜索
- 公开、变换、签名与签名上传URL与服务端格式一致
"""

import secrets
import uuid
from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
from typing import Dict, List, Optional, Sequence, Union
from urllib.parse import quote, urlencode

from conference_storage.core.config import settings
from conference_storage.core.storage.abc import BaseStorage
from conference_storage.core.storage.exceptions import RemoteStorageError
from conference_storage.core.storage.models import (
    Bucket,
    BucketOptions,
    FileObject,
    ImageTransform,
    ListOptions,
    SignedUploadUrl,
    SignedUrlEntry,
    SortBy,
    StoredObject,
    UploadOptions,
)
from conference_storage.core.storage.utils.paths import join_paths, mime_type_allowed
from conference_storage.utils.datetime_utils import utc_now

_EPOCH = datetime.fromtimestamp(0, tz=timezone.utc)


@dataclass
class _StoredFile:
    """内存中的对象记录"""
    data: bytes
    content_type: str
    cache_control: str
    id: str = field(default_factory=lambda: str(uuid.uuid4()))
    created_at: datetime = field(default_factory=utc_now)
    updated_at: datetime = field(default_factory=utc_now)

    @property
    def metadata(self) -> Dict[str, object]:
        return {
            "size": len(self.data),
            "mimetype": self.content_type,
            "cacheControl": f"max-age={self.cache_control}",
            "lastModified": self.updated_at.isoformat(),
        }


def _not_found(what: str) -> RemoteStorageError:
    return RemoteStorageError(f"{what} not found", status=404, error="not_found")


def _already_exists() -> RemoteStorageError:
    return RemoteStorageError("The resource already exists", status=409, error="Duplicate")


def _sort_key(column: str):
    """列表排序键；文件夹没有时间字段，按时间排序时排在文件之前"""
    if column not in ("created_at", "updated_at", "last_accessed_at"):
        return lambda entry: entry.name
    attribute = "updated_at" if column == "last_accessed_at" else column
    return lambda entry: (getattr(entry, attribute) is not None, getattr(entry, attribute) or _EPOCH)


class InMemoryStorageAdapter(BaseStorage):
    """
    内存存储适配器

    所有状态保存在实例内，实例之间互不影响。失败时抛出与SDK
    StorageApiError 同形态的 RemoteStorageError。
    """

    ADAPTER_NAME: str = "memory"

    def __init__(self, base_url: Optional[str] = None) -> None:
        self.base_url = (base_url or settings.storage_public_base_url).rstrip("/")
        self._buckets: Dict[str, Bucket] = {}
        self._objects: Dict[str, Dict[str, _StoredFile]] = {}

    # ==================== 内部工具 ====================

    def _require_bucket(self, bucket_id: str) -> Dict[str, _StoredFile]:
        if bucket_id not in self._buckets:
            raise _not_found("Bucket")
        return self._objects[bucket_id]

    def _require_object(self, bucket_id: str, path: str) -> _StoredFile:
        stored = self._require_bucket(bucket_id).get(path)
        if stored is None:
            raise _not_found("Object")
        return stored

    def _object_url(self, kind: str, bucket_id: str, path: str, params: Dict[str, object]) -> str:
        url = f"{self.base_url}/storage/v1/{kind}/{quote(bucket_id)}/{quote(path, safe='/')}"
        query = {key: value for key, value in params.items() if value is not None}
        if query:
            url = f"{url}?{urlencode(query)}"
        return url

    @staticmethod
    def _download_param(download: Union[bool, str]) -> Optional[str]:
        if not download:
            return None
        return download if isinstance(download, str) else ""

    # ==================== 存储桶 ====================

    async def list_buckets(self) -> List[Bucket]:
        return list(self._buckets.values())

    async def get_bucket(self, bucket_id: str) -> Bucket:
        bucket = self._buckets.get(bucket_id)
        if bucket is None:
            raise _not_found("Bucket")
        return bucket

    async def create_bucket(self, bucket_id: str, options: BucketOptions) -> str:
        if bucket_id in self._buckets:
            raise _already_exists()
        now = utc_now()
        self._buckets[bucket_id] = Bucket(
            id=bucket_id,
            name=bucket_id,
            public=bool(options.public),
            allowed_mime_types=options.allowed_mime_types,
            file_size_limit=options.file_size_limit,
            created_at=now,
            updated_at=now,
        )
        self._objects[bucket_id] = {}
        return bucket_id

    async def update_bucket(self, bucket_id: str, options: BucketOptions) -> str:
        bucket = await self.get_bucket(bucket_id)
        changes = options.to_dict()
        self._buckets[bucket_id] = replace(bucket, updated_at=utc_now(), **changes)
        return "Successfully updated"

    async def delete_bucket(self, bucket_id: str) -> str:
        if self._require_bucket(bucket_id):
            raise RemoteStorageError("The bucket you tried to delete is not empty", status=409, error="InvalidRequest")
        del self._buckets[bucket_id]
        del self._objects[bucket_id]
        return "Successfully deleted"

    async def empty_bucket(self, bucket_id: str) -> str:
        self._require_bucket(bucket_id).clear()
        return "Successfully emptied"

    # ==================== 文件 ====================

    async def list_objects(self, bucket_id: str, path: str, options: ListOptions) -> List[FileObject]:
        objects = self._require_bucket(bucket_id)
        prefix = f"{path.strip('/')}/" if path.strip("/") else ""

        files: List[FileObject] = []
        folders: Dict[str, FileObject] = {}
        for object_path, stored in objects.items():
            if not object_path.startswith(prefix):
                continue
            remainder = object_path[len(prefix):]
            name, separator, _ = remainder.partition("/")
            if separator:
                folders.setdefault(name, FileObject(name=name, path=join_paths(prefix, name)))
            else:
                files.append(FileObject(
                    name=name,
                    path=object_path,
                    id=stored.id,
                    created_at=stored.created_at,
                    updated_at=stored.updated_at,
                    metadata=stored.metadata,
                ))

        entries = list(folders.values()) + files
        if options.search:
            needle = options.search.lower()
            entries = [entry for entry in entries if entry.name.lower().startswith(needle)]

        sort_by = options.sort_by or SortBy()
        entries.sort(key=_sort_key(sort_by.column), reverse=sort_by.order.lower() == "desc")

        return entries[options.offset:options.offset + options.limit]

    async def upload(
        self,
        bucket_id: str,
        path: str,
        data: bytes,
        options: UploadOptions
    ) -> StoredObject:
        objects = self._require_bucket(bucket_id)
        bucket = self._buckets[bucket_id]
        content_type = options.content_type or "application/octet-stream"

        if bucket.file_size_limit and len(data) > bucket.file_size_limit:
            raise RemoteStorageError("Payload too large", status=413, error="Payload too large")
        if bucket.allowed_mime_types and not mime_type_allowed(content_type, bucket.allowed_mime_types):
            raise RemoteStorageError(f"mime type {content_type} is not supported", status=415, error="invalid_mime_type")

        existing = objects.get(path)
        if existing is not None and not options.upsert:
            raise _already_exists()

        stored = _StoredFile(data=bytes(data), content_type=content_type, cache_control=options.cache_control)
        if existing is not None:
            stored.id = existing.id
            stored.created_at = existing.created_at
        objects[path] = stored
        return StoredObject(path=path, id=stored.id, key=f"{bucket_id}/{path}")

    async def download(
        self,
        bucket_id: str,
        path: str,
        transform: Optional[ImageTransform] = None
    ) -> bytes:
        # 内存实现不做图片处理，变换参数仅影响URL
        return self._require_object(bucket_id, path).data

    async def move(self, bucket_id: str, from_path: str, to_path: str) -> str:
        objects = self._require_bucket(bucket_id)
        stored = self._require_object(bucket_id, from_path)
        if to_path in objects:
            raise _already_exists()
        objects[to_path] = objects.pop(from_path)
        stored.updated_at = utc_now()
        return "Successfully moved"

    async def copy(self, bucket_id: str, from_path: str, to_path: str) -> str:
        objects = self._require_bucket(bucket_id)
        source = self._require_object(bucket_id, from_path)
        if to_path in objects:
            raise _already_exists()
        objects[to_path] = _StoredFile(
            data=source.data,
            content_type=source.content_type,
            cache_control=source.cache_control,
        )
        return to_path

    async def remove(self, bucket_id: str, paths: Sequence[str]) -> List[FileObject]:
        objects = self._require_bucket(bucket_id)
        removed: List[FileObject] = []
        for path in paths:
            stored = objects.pop(path, None)
            if stored is None:
                continue
            removed.append(FileObject(
                name=path.rsplit("/", 1)[-1],
                path=path,
                id=stored.id,
                created_at=stored.created_at,
                updated_at=stored.updated_at,
                metadata=stored.metadata,
            ))
        return removed

    # ==================== URL ====================

    def get_public_url(
        self,
        bucket_id: str,
        path: str,
        download: Union[bool, str] = False,
        transform: Optional[ImageTransform] = None
    ) -> str:
        params: Dict[str, object] = dict(transform.to_params()) if transform else {}
        params["download"] = self._download_param(download)
        kind = "render/image/public" if transform else "object/public"
        return self._object_url(kind, bucket_id, path, params)

    async def create_signed_url(
        self,
        bucket_id: str,
        path: str,
        expires_in: int,
        download: Union[bool, str] = False,
        transform: Optional[ImageTransform] = None
    ) -> str:
        self._require_object(bucket_id, path)
        params: Dict[str, object] = {"token": secrets.token_urlsafe(24)}
        if transform:
            params.update(transform.to_params())
        params["download"] = self._download_param(download)
        kind = "render/image/sign" if transform else "object/sign"
        return self._object_url(kind, bucket_id, path, params)

    async def create_signed_urls(
        self,
        bucket_id: str,
        paths: Sequence[str],
        expires_in: int,
        download: Union[bool, str] = False
    ) -> List[SignedUrlEntry]:
        self._require_bucket(bucket_id)
        entries: List[SignedUrlEntry] = []
        for path in paths:
            try:
                signed_url = await self.create_signed_url(bucket_id, path, expires_in, download=download)
            except RemoteStorageError as e:
                entries.append(SignedUrlEntry(path=path, error=e.message))
            else:
                entries.append(SignedUrlEntry(path=path, signed_url=signed_url))
        return entries

    async def create_signed_upload_url(self, bucket_id: str, path: str) -> SignedUploadUrl:
        self._require_bucket(bucket_id)
        token = secrets.token_urlsafe(24)
        return SignedUploadUrl(
            signed_url=self._object_url("object/upload/sign", bucket_id, path, {"token": token}),
            path=path,
            token=token,
        )
