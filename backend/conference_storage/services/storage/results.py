"""
操作结果工具
操作函数捕获的任意异常都在这里统一映射、记录并转换为失败结果
"""

from typing import Any

from conference_storage.core.log_messages import log_messages
from conference_storage.core.log_utils import get_logger
from conference_storage.core.storage.error_mapper import map_storage_error
from conference_storage.core.storage.models import StorageResult

logger = get_logger(__name__)


def failure_result(operation_name: str, error: Any, **context: Any) -> StorageResult:
    """
    将异常映射为 StorageError 并包装为失败结果

    Args:
        operation_name: 操作名称，用于日志
        error: 捕获到的异常或远程服务返回的错误
        **context: 日志上下文（存储桶、路径等）

    Returns:
        StorageResult: 失败结果
    """
    storage_error = map_storage_error(error)
    logger.error(
        log_messages.OPERATION_FAILED,
        operation_name=operation_name,
        extra={
            **context,
            "code": storage_error.code.value,
            "error": storage_error.message,
        }
    )
    return StorageResult.failure(storage_error)
