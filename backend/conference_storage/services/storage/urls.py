"""
URL生成
公开URL、限时签名URL（单个与批量）以及直传签名上传URL
"""

from typing import List, Optional, Sequence, Union

from conference_storage.core.storage.abc import BaseStorage
from conference_storage.core.storage.models import (
    ImageTransform,
    SignedUploadUrl,
    SignedUrl,
    SignedUrlEntry,
    StorageResult,
)
from conference_storage.services.storage.results import failure_result
from conference_storage.utils.datetime_utils import get_current_timestamp

DEFAULT_SIGNED_URL_EXPIRES = 3600


def get_public_url(
    storage: BaseStorage,
    bucket_id: str,
    path: str,
    download: Union[bool, str] = False,
    transform: Optional[ImageTransform] = None
) -> str:
    """构建公开访问URL，纯字符串拼接，不会失败"""
    return storage.get_public_url(bucket_id, path, download=download, transform=transform)


async def create_signed_url(
    storage: BaseStorage,
    bucket_id: str,
    path: str,
    expires_in: int = DEFAULT_SIGNED_URL_EXPIRES,
    download: Union[bool, str] = False,
    transform: Optional[ImageTransform] = None
) -> StorageResult[SignedUrl]:
    """
    签发限时访问URL

    expires_at 按发起请求的本地时间加有效期计算，不解析服务端响应，
    调用方应视其为近似值。

    Args:
        storage: 存储服务
        bucket_id: 存储桶标识
        path: 对象路径
        expires_in: 有效期（秒）
        download: True 触发下载，字符串时作为下载文件名
        transform: 图片变换参数

    Returns:
        StorageResult[SignedUrl]: 签名URL与过期时间（Unix秒）
    """
    requested_at = get_current_timestamp()
    try:
        signed_url = await storage.create_signed_url(
            bucket_id, path, expires_in, download=download, transform=transform
        )
    except Exception as e:
        return failure_result("create_signed_url", e, bucket_id=bucket_id, path=path)

    return StorageResult.success(SignedUrl(
        signed_url=signed_url,
        path=path,
        expires_at=requested_at + expires_in,
    ))


async def create_signed_urls(
    storage: BaseStorage,
    bucket_id: str,
    paths: Sequence[str],
    expires_in: int = DEFAULT_SIGNED_URL_EXPIRES,
    download: Union[bool, str] = False
) -> StorageResult[List[SignedUrlEntry]]:
    try:
        entries = await storage.create_signed_urls(bucket_id, list(paths), expires_in, download=download)
    except Exception as e:
        return failure_result("create_signed_urls", e, bucket_id=bucket_id, paths=list(paths))
    return StorageResult.success(entries)


async def create_signed_upload_url(
    storage: BaseStorage,
    bucket_id: str,
    path: str
) -> StorageResult[SignedUploadUrl]:
    """签发直传上传URL，客户端凭返回的 token 直接上传到存储服务"""
    try:
        return StorageResult.success(await storage.create_signed_upload_url(bucket_id, path))
    except Exception as e:
        return failure_result("create_signed_upload_url", e, bucket_id=bucket_id, path=path)
