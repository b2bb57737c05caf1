"""
文件操作
上传（可选按存储桶策略预校验）、下载（可选图片变换）、移动、复制、删除与列表
"""

import posixpath
from dataclasses import replace
from typing import List, Optional, Sequence, Union

from conference_storage.core.log_messages import log_messages
from conference_storage.core.log_utils import get_logger
from conference_storage.core.storage.abc import BaseStorage
from conference_storage.core.storage.exceptions import StorageError, StorageErrorCode
from conference_storage.core.storage.models import (
    DownloadResult,
    FileObject,
    FilePolicy,
    FileUpload,
    ImageTransform,
    ListOptions,
    StorageResult,
    UploadOptions,
    UploadResult,
)
from conference_storage.core.storage.utils.mime import get_mime_type
from conference_storage.core.storage.utils.paths import generate_unique_filename, join_paths, validate_file
from conference_storage.services.storage.buckets import get_bucket
from conference_storage.services.storage.results import failure_result

logger = get_logger(__name__)


def validation_error(message: Optional[str]) -> StorageError:
    """将文件校验失败转换为 file-too-large 或 invalid-mime-type 错误"""
    message = message or "File validation failed"
    if "size" in message:
        return StorageError(message, code=StorageErrorCode.FILE_TOO_LARGE, status_code=413)
    return StorageError(message, code=StorageErrorCode.INVALID_MIME_TYPE, status_code=415)


async def upload_file(
    storage: BaseStorage,
    bucket_id: str,
    path: str,
    file: Union[FileUpload, bytes],
    options: Optional[UploadOptions] = None
) -> StorageResult[UploadResult]:
    """
    上传文件

    传入 FileUpload 时先读取存储桶策略进行校验，校验失败直接返回错误，
    不会请求上传接口；裸 bytes 跳过预校验。默认不覆盖已存在的对象。

    Args:
        storage: 存储服务
        bucket_id: 存储桶标识
        path: 目标路径
        file: 待上传文件
        options: 上传参数

    Returns:
        StorageResult[UploadResult]: 成功时 full_path 为对象的公开访问URL
    """
    options = options or UploadOptions()

    if isinstance(file, FileUpload):
        bucket = await get_bucket(storage, bucket_id)
        if bucket.ok:
            validation = validate_file(file, bucket.data.policy)
            if not validation.valid:
                logger.warning(
                    log_messages.FILE_VALIDATION_FAILED,
                    extra={"bucket_id": bucket_id, "path": path, "error": validation.error}
                )
                return StorageResult.failure(validation_error(validation.error))
        data = file.data
        content_type = options.content_type or file.content_type
    else:
        data = bytes(file)
        content_type = options.content_type or get_mime_type(path)

    try:
        stored = await storage.upload(bucket_id, path, data, replace(options, content_type=content_type))
        public_url = storage.get_public_url(bucket_id, stored.path)
    except Exception as e:
        return failure_result("upload_file", e, bucket_id=bucket_id, path=path)

    logger.info(log_messages.FILE_UPLOAD_SUCCESS, extra={"bucket_id": bucket_id, "path": stored.path})
    return StorageResult.success(UploadResult(path=stored.path, id=stored.id, full_path=public_url))


async def upload_file_with_validation(
    storage: BaseStorage,
    bucket_id: str,
    file: FileUpload,
    policy: FilePolicy,
    options: Optional[UploadOptions] = None,
    folder: Optional[str] = None,
    generate_unique_name: bool = False
) -> StorageResult[UploadResult]:
    """
    按显式策略校验后上传

    目标路径为 ``<folder>/<文件名>``，文件名为原名或生成的唯一文件名。
    """
    validation = validate_file(file, policy)
    if not validation.valid:
        return StorageResult.failure(validation_error(validation.error))

    filename = generate_unique_filename(file.name) if generate_unique_name else file.name
    path = join_paths(folder, filename) if folder else filename
    options = replace(options or UploadOptions(), content_type=file.content_type)
    return await upload_file(storage, bucket_id, path, file, options)


async def download_file(
    storage: BaseStorage,
    bucket_id: str,
    path: str,
    transform: Optional[ImageTransform] = None
) -> StorageResult[DownloadResult]:
    """
    下载文件

    变换参数中的 format 仅在值为 ``origin`` 时转发给下载接口，其余格式不转发。
    """
    if transform is not None and transform.format != "origin":
        transform = replace(transform, format=None)

    try:
        data = await storage.download(bucket_id, path, transform)
    except Exception as e:
        return failure_result("download_file", e, bucket_id=bucket_id, path=path)

    return StorageResult.success(DownloadResult(
        data=data,
        filename=posixpath.basename(path),
        content_type=get_mime_type(path),
        size=len(data),
    ))


async def move_file(storage: BaseStorage, bucket_id: str, from_path: str, to_path: str) -> StorageResult[str]:
    try:
        return StorageResult.success(await storage.move(bucket_id, from_path, to_path))
    except Exception as e:
        return failure_result("move_file", e, bucket_id=bucket_id, from_path=from_path, to_path=to_path)


async def copy_file(storage: BaseStorage, bucket_id: str, from_path: str, to_path: str) -> StorageResult[str]:
    try:
        return StorageResult.success(await storage.copy(bucket_id, from_path, to_path))
    except Exception as e:
        return failure_result("copy_file", e, bucket_id=bucket_id, from_path=from_path, to_path=to_path)


async def delete_files(storage: BaseStorage, bucket_id: str, paths: Sequence[str]) -> StorageResult[List[FileObject]]:
    """
    批量删除文件

    远程接口不区分单个路径的成败，失败时整体返回错误。

    Returns:
        StorageResult[List[FileObject]]: 成功时为服务端确认删除的对象
    """
    try:
        return StorageResult.success(await storage.remove(bucket_id, list(paths)))
    except Exception as e:
        return failure_result("delete_files", e, bucket_id=bucket_id, paths=list(paths))


async def delete_file(storage: BaseStorage, bucket_id: str, path: str) -> StorageResult[List[FileObject]]:
    return await delete_files(storage, bucket_id, [path])


async def list_files(
    storage: BaseStorage,
    bucket_id: str,
    path: str = "",
    options: Optional[ListOptions] = None
) -> StorageResult[List[FileObject]]:
    """列出目录下的文件，默认 limit=100、offset=0"""
    try:
        return StorageResult.success(await storage.list_objects(bucket_id, path, options or ListOptions()))
    except Exception as e:
        return failure_result("list_files", e, bucket_id=bucket_id, path=path)
