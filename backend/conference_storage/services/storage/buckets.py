"""
存储桶管理操作
存储桶的增删改查，以及按声明式配置幂等初始化
"""

from typing import List, Mapping, Optional

from conference_storage.core.config.buckets import STORAGE_BUCKETS, BucketConfig
from conference_storage.core.log_messages import log_messages
from conference_storage.core.log_utils import get_logger
from conference_storage.core.storage.abc import BaseStorage
from conference_storage.core.storage.exceptions import StorageErrorCode
from conference_storage.core.storage.models import (
    Bucket,
    BucketInitError,
    BucketInitResult,
    BucketOptions,
    BucketStats,
    ListOptions,
    StorageResult,
)
from conference_storage.core.storage.utils.paths import format_bytes
from conference_storage.services.storage.results import failure_result

logger = get_logger(__name__)

STATS_PAGE_SIZE = 1000


async def list_buckets(storage: BaseStorage) -> StorageResult[List[Bucket]]:
    try:
        return StorageResult.success(await storage.list_buckets())
    except Exception as e:
        return failure_result("list_buckets", e)


async def get_bucket(storage: BaseStorage, bucket_id: str) -> StorageResult[Bucket]:
    try:
        return StorageResult.success(await storage.get_bucket(bucket_id))
    except Exception as e:
        return failure_result("get_bucket", e, bucket_id=bucket_id)


async def create_bucket(
    storage: BaseStorage,
    bucket_id: str,
    options: Optional[BucketOptions] = None
) -> StorageResult[str]:
    """
    创建存储桶

    未指定 public 时默认创建私有存储桶。

    Returns:
        StorageResult[str]: 成功时为存储桶名称
    """
    options = options or BucketOptions()
    create_options = BucketOptions(
        public=bool(options.public),
        allowed_mime_types=options.allowed_mime_types,
        file_size_limit=options.file_size_limit,
    )
    try:
        return StorageResult.success(await storage.create_bucket(bucket_id, create_options))
    except Exception as e:
        return failure_result("create_bucket", e, bucket_id=bucket_id)


async def update_bucket(storage: BaseStorage, bucket_id: str, options: BucketOptions) -> StorageResult[str]:
    try:
        return StorageResult.success(await storage.update_bucket(bucket_id, options))
    except Exception as e:
        return failure_result("update_bucket", e, bucket_id=bucket_id)


async def delete_bucket(storage: BaseStorage, bucket_id: str) -> StorageResult[str]:
    try:
        return StorageResult.success(await storage.delete_bucket(bucket_id))
    except Exception as e:
        return failure_result("delete_bucket", e, bucket_id=bucket_id)


async def empty_bucket(storage: BaseStorage, bucket_id: str) -> StorageResult[str]:
    """清空存储桶内容，存储桶本身保留"""
    try:
        return StorageResult.success(await storage.empty_bucket(bucket_id))
    except Exception as e:
        return failure_result("empty_bucket", e, bucket_id=bucket_id)


async def initialize_buckets(
    storage: BaseStorage,
    config: Optional[Mapping[str, BucketConfig]] = None
) -> BucketInitResult:
    """
    按声明式配置初始化存储桶

    逐个检查存储桶是否存在，不存在则创建。创建时遇到 bucket-already-exists
    （与其他初始化进程并发）视为已存在。单个存储桶失败不会中断其余存储桶，
    失败原因记录在 errors 中，函数本身不抛出异常。

    Args:
        storage: 存储服务
        config: 存储桶配置，默认使用 STORAGE_BUCKETS

    Returns:
        BucketInitResult: 新建、已存在与失败的存储桶
    """
    config = STORAGE_BUCKETS if config is None else config
    result = BucketInitResult()
    logger.info(log_messages.BUCKET_INIT_START, extra={"bucket_count": len(config)})

    for bucket_config in config.values():
        existing = await get_bucket(storage, bucket_config.id)
        if existing.ok:
            result.existing.append(bucket_config.id)
            continue

        created = await create_bucket(
            storage,
            bucket_config.id,
            BucketOptions(
                public=bucket_config.public,
                allowed_mime_types=bucket_config.allowed_mime_types,
                file_size_limit=bucket_config.file_size_limit,
            )
        )
        if created.ok:
            result.created.append(bucket_config.id)
        elif created.error.code == StorageErrorCode.BUCKET_ALREADY_EXISTS:
            result.existing.append(bucket_config.id)
        else:
            logger.warning(
                log_messages.BUCKET_CREATE_FAILED,
                extra={"bucket_id": bucket_config.id, "error": created.error.message}
            )
            result.errors.append(BucketInitError(bucket=bucket_config.id, error=created.error))

    logger.info(
        log_messages.BUCKET_INIT_COMPLETE,
        created=len(result.created),
        existing=len(result.existing),
        failed=len(result.errors)
    )
    return result


async def get_bucket_stats(storage: BaseStorage, bucket_id: str) -> StorageResult[BucketStats]:
    """
    统计存储桶根目录下的文件数量与总大小

    按每页1000条分页遍历，仅统计带有大小信息的文件条目。
    """
    total_size = 0
    file_count = 0
    offset = 0

    while True:
        try:
            files = await storage.list_objects(
                bucket_id, "", ListOptions(limit=STATS_PAGE_SIZE, offset=offset)
            )
        except Exception as e:
            return failure_result("get_bucket_stats", e, bucket_id=bucket_id)

        for file in files:
            if file.size:
                total_size += file.size
                file_count += 1

        if len(files) < STATS_PAGE_SIZE:
            break
        offset += STATS_PAGE_SIZE

    return StorageResult.success(BucketStats(
        file_count=file_count,
        total_size=total_size,
        formatted_size=format_bytes(total_size),
    ))
