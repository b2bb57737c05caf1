"""
存储业务处理器
HTTP路由的参数校验、存储桶白名单检查与错误转换，路由本身只负责收发
"""

import re
from urllib.parse import quote
from typing import List, Optional

from fastapi import HTTPException, UploadFile, status
from fastapi.responses import Response

from conference_storage.core.config import settings
from conference_storage.core.config.buckets import STORAGE_BUCKETS, BucketConfig, get_bucket_config
from conference_storage.core.log_utils import get_logger
from conference_storage.core.storage.abc import BaseStorage
from conference_storage.core.storage.exceptions import StorageError
from conference_storage.core.storage.models import (
    FilePolicy,
    FileUpload,
    ImageTransform,
    ListOptions,
    SortBy,
    StorageResult,
    UploadOptions,
)
from conference_storage.core.storage.utils.mime import get_mime_type
from conference_storage.core.storage.utils.paths import random_suffix, validate_file
from conference_storage.schemas.common import PaginationInfo
from conference_storage.schemas.storage import (
    BucketInitResponse,
    FileListResponse,
    FileObjectResponse,
    SignedUploadUrlResponse,
    SignedUrlEntryResponse,
    SignedUrlResponse,
    UploadResponse,
)
from conference_storage.services.storage.buckets import initialize_buckets
from conference_storage.services.storage.files import delete_files, download_file, list_files, upload_file
from conference_storage.services.storage.urls import (
    create_signed_upload_url,
    create_signed_url,
    create_signed_urls,
    get_public_url,
)
from conference_storage.utils.datetime_utils import get_current_timestamp_ms

logger = get_logger(__name__)

DOWNLOAD_MODES = ("url", "signed", "blob")
SORT_COLUMNS = ("name", "created_at", "updated_at", "last_accessed_at")

_UNSAFE_UPLOAD_NAME_CHARS = re.compile(r"[^a-zA-Z0-9.\-]")
_NON_PRINTABLE_ASCII = re.compile(r"[^\x20-\x7e]")


def _bad_request(detail: str) -> HTTPException:
    return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=detail)


def raise_for_error(result: StorageResult) -> None:
    """结果携带错误时转换为HTTP异常，状态码取映射后的状态码，缺省500"""
    if result.error is not None:
        error: StorageError = result.error
        raise HTTPException(
            status_code=error.status_code or status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=error.message
        )


def content_disposition(filename: str) -> str:
    """
    构造附件下载的 Content-Disposition 头

    响应头只能是latin-1，非ASCII文件名通过 RFC 5987 的 ``filename*`` 传递，
    ``filename`` 保留一个转义了引号的ASCII回退名。
    """
    fallback = _NON_PRINTABLE_ASCII.sub("_", filename).replace("\\", "\\\\").replace('"', '\\"')
    return f"attachment; filename=\"{fallback}\"; filename*=UTF-8''{quote(filename, safe='')}"


def generate_upload_path(filename: str) -> str:
    """未指定路径时的存储名：``<毫秒时间戳>-<6位随机串>-<规范化的小写原名>``"""
    safe_name = _UNSAFE_UPLOAD_NAME_CHARS.sub("-", filename).lower()
    return f"{get_current_timestamp_ms()}-{random_suffix()}-{safe_name}"


class StorageRequestHandler:
    """存储业务处理器"""

    def __init__(self, storage: BaseStorage):
        self.storage = storage

    @staticmethod
    def _require_bucket(bucket_id: Optional[str]) -> BucketConfig:
        if not bucket_id:
            raise _bad_request("Bucket ID is required")
        bucket_config = get_bucket_config(bucket_id)
        if bucket_config is None:
            raise _bad_request("Invalid bucket")
        return bucket_config

    async def handle_upload(
        self,
        file: UploadFile,
        bucket_id: str,
        path: Optional[str] = None,
        upsert: bool = False
    ) -> UploadResponse:
        """处理文件上传：按存储桶配置校验后上传"""
        bucket_config = self._require_bucket(bucket_id)
        filename = file.filename or "file"
        data = await file.read()
        upload = FileUpload(
            name=filename,
            data=data,
            content_type=file.content_type or get_mime_type(filename),
        )

        validation = validate_file(upload, FilePolicy(
            allowed_mime_types=bucket_config.allowed_mime_types,
            file_size_limit=bucket_config.file_size_limit,
        ))
        if not validation.valid:
            raise _bad_request(validation.error)

        final_path = path or generate_upload_path(filename)
        logger.info(
            "处理文件上传",
            extra={"bucket_id": bucket_id, "path": final_path, "size": upload.size}
        )

        result = await upload_file(
            self.storage,
            bucket_id,
            final_path,
            upload,
            UploadOptions(
                cache_control=settings.storage_cache_control,
                content_type=upload.content_type,
                upsert=upsert,
            )
        )
        raise_for_error(result)
        return UploadResponse.from_result(result.data)

    async def handle_download(
        self,
        bucket_id: str,
        path: str,
        mode: str = "url",
        expires_in: Optional[int] = None
    ):
        """
        处理下载请求

        - url: 公开存储桶的公开URL
        - signed: 限时签名URL
        - blob: 直接返回文件内容
        """
        bucket_config = self._require_bucket(bucket_id)
        if not path:
            raise _bad_request("File path is required")
        if mode not in DOWNLOAD_MODES:
            raise _bad_request("Invalid mode")

        if mode == "url":
            if not bucket_config.public:
                raise _bad_request("Cannot get public URL for private bucket")
            return {"url": get_public_url(self.storage, bucket_id, path)}

        if mode == "signed":
            result = await create_signed_url(
                self.storage, bucket_id, path,
                expires_in=expires_in or settings.storage_signed_url_expires
            )
            raise_for_error(result)
            return SignedUrlResponse(
                signed_url=result.data.signed_url,
                path=result.data.path,
                expires_at=result.data.expires_at,
            )

        result = await download_file(self.storage, bucket_id, path)
        raise_for_error(result)
        download = result.data
        return Response(
            content=download.data,
            media_type=download.content_type or "application/octet-stream",
            headers={"Content-Disposition": content_disposition(download.filename or "download")}
        )

    async def handle_list(
        self,
        bucket_id: str,
        path: str = "",
        limit: Optional[int] = None,
        offset: int = 0,
        search: Optional[str] = None,
        sort_by: Optional[str] = None,
        order: Optional[str] = None
    ) -> FileListResponse:
        """处理文件列表请求，has_more 在返回数量等于 limit 时为真"""
        limit = settings.storage_list_limit if limit is None else limit
        if not bucket_id:
            raise _bad_request("Bucket ID is required")
        if limit < 1 or limit > settings.storage_max_list_limit:
            raise _bad_request(f"Limit must be between 1 and {settings.storage_max_list_limit}")
        if offset < 0:
            raise _bad_request("Offset must not be negative")
        self._require_bucket(bucket_id)

        sort = None
        if sort_by and order:
            if sort_by not in SORT_COLUMNS or order not in ("asc", "desc"):
                raise _bad_request("Invalid sort options")
            sort = SortBy(column=sort_by, order=order)

        result = await list_files(
            self.storage, bucket_id, path,
            ListOptions(limit=limit, offset=offset, sort_by=sort, search=search or None)
        )
        raise_for_error(result)
        files = result.data or []
        return FileListResponse(
            files=[FileObjectResponse.from_file_object(item) for item in files],
            pagination=PaginationInfo(limit=limit, offset=offset, has_more=len(files) == limit),
        )

    async def handle_delete(self, bucket_id: str, paths: List[str]) -> List[str]:
        """处理批量删除请求，返回已删除的路径"""
        if not bucket_id:
            raise _bad_request("Bucket ID is required")
        if not paths:
            raise _bad_request("File paths are required")
        if len(paths) > settings.storage_max_delete_paths:
            raise _bad_request(f"Cannot delete more than {settings.storage_max_delete_paths} files at once")
        self._require_bucket(bucket_id)

        logger.info("处理文件删除", extra={"bucket_id": bucket_id, "count": len(paths)})
        result = await delete_files(self.storage, bucket_id, paths)
        raise_for_error(result)
        return list(paths)

    async def handle_signed_url(
        self,
        bucket_id: str,
        path: Optional[str] = None,
        paths: Optional[str] = None,
        expires_in: Optional[int] = None,
        download: Optional[str] = None,
        transform: Optional[ImageTransform] = None
    ):
        """
        处理签名URL请求

        paths 为逗号分隔的批量路径，优先于 path；批量签名不支持图片变换。
        download 为 ``"true"`` 时触发下载，其他非空值作为下载文件名。
        """
        expires_in = settings.storage_signed_url_expires if expires_in is None else expires_in
        if not bucket_id:
            raise _bad_request("Bucket ID is required")
        if not path and not paths:
            raise _bad_request("File path is required")
        if expires_in < 1 or expires_in > settings.storage_max_signed_url_expires:
            raise _bad_request("Expiration must be between 1 second and 7 days")
        self._require_bucket(bucket_id)

        if paths:
            path_list = [item.strip() for item in paths.split(",")]
            if len(path_list) > settings.storage_max_signed_urls:
                raise _bad_request(
                    f"Cannot generate more than {settings.storage_max_signed_urls} signed URLs at once"
                )
            result = await create_signed_urls(self.storage, bucket_id, path_list, expires_in)
            raise_for_error(result)
            return [SignedUrlEntryResponse.from_entry(entry) for entry in result.data]

        result = await create_signed_url(
            self.storage, bucket_id, path,
            expires_in=expires_in,
            download=True if download == "true" else (download or False),
            transform=transform
        )
        raise_for_error(result)
        return SignedUrlResponse(
            signed_url=result.data.signed_url,
            path=result.data.path,
            expires_at=result.data.expires_at,
        )

    async def handle_signed_upload_url(self, bucket_id: str, path: str) -> SignedUploadUrlResponse:
        if not path:
            raise _bad_request("File path is required")
        self._require_bucket(bucket_id)

        result = await create_signed_upload_url(self.storage, bucket_id, path)
        raise_for_error(result)
        return SignedUploadUrlResponse(
            signed_url=result.data.signed_url,
            path=result.data.path,
            token=result.data.token,
        )

    async def handle_initialize_buckets(self) -> BucketInitResponse:
        result = await initialize_buckets(self.storage, STORAGE_BUCKETS)
        return BucketInitResponse.from_result(result)
