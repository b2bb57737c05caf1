"""
存储错误映射器
将远程服务的任意错误形态转换为统一的 StorageError
"""

from typing import Any, Dict, List, Mapping, Optional, Tuple

import httpx

from conference_storage.core.storage.exceptions import StorageError, StorageErrorCode


# 关键字匹配表：按顺序匹配，先命中者生效（大小写敏感）
ERROR_KEYWORD_TABLE: List[Tuple[str, StorageErrorCode, int]] = [
    ("not found", StorageErrorCode.FILE_NOT_FOUND, 404),
    ("Not Found", StorageErrorCode.FILE_NOT_FOUND, 404),
    ("already exists", StorageErrorCode.BUCKET_ALREADY_EXISTS, 409),
    ("too large", StorageErrorCode.FILE_TOO_LARGE, 413),
    ("exceeds", StorageErrorCode.FILE_TOO_LARGE, 413),
    ("mime type", StorageErrorCode.INVALID_MIME_TYPE, 415),
    ("content type", StorageErrorCode.INVALID_MIME_TYPE, 415),
    ("permission", StorageErrorCode.PERMISSION_DENIED, 403),
    ("unauthorized", StorageErrorCode.PERMISSION_DENIED, 403),
    ("Unauthorized", StorageErrorCode.PERMISSION_DENIED, 403),
    ("row-level security", StorageErrorCode.PERMISSION_DENIED, 403),
    ("rate limit", StorageErrorCode.RATE_LIMITED, 429),
    ("quota", StorageErrorCode.STORAGE_QUOTA_EXCEEDED, 507),
    ("storage limit", StorageErrorCode.STORAGE_QUOTA_EXCEEDED, 507),
]

ERROR_MESSAGES: Dict[StorageErrorCode, str] = {
    StorageErrorCode.FILE_NOT_FOUND: "The requested file or bucket was not found",
    StorageErrorCode.BUCKET_ALREADY_EXISTS: "A bucket with this name already exists",
    StorageErrorCode.FILE_TOO_LARGE: "The file size exceeds the allowed limit",
    StorageErrorCode.INVALID_MIME_TYPE: "The file type is not allowed",
    StorageErrorCode.PERMISSION_DENIED: "You do not have permission to perform this operation",
    StorageErrorCode.RATE_LIMITED: "Too many requests. Please try again later",
    StorageErrorCode.STORAGE_QUOTA_EXCEEDED: "Storage quota has been exceeded",
    StorageErrorCode.NETWORK_ERROR: "Network error. Please check your connection",
    StorageErrorCode.UNKNOWN_ERROR: "An unknown error occurred",
}

NETWORK_EXCEPTIONS = (httpx.RequestError, ConnectionError, TimeoutError)


def _read_field(error: Any, *names: str) -> Any:
    """从字典或对象属性中读取第一个非空字段"""
    for name in names:
        if isinstance(error, Mapping):
            value = error.get(name)
        else:
            value = getattr(error, name, None)
        if value:
            return value
    return None


def _extract_message(error: Any) -> Optional[str]:
    """提取错误消息，优先使用显式的 message/error 字段"""
    message = _read_field(error, "message", "error")
    if isinstance(message, str) and message:
        return message
    if isinstance(error, BaseException) and str(error):
        return str(error)
    return None


def _extract_status(error: Any) -> Optional[int]:
    """提取远程状态码，兼容 statusCode/status_code/status 字段及字符串形式"""
    status = _read_field(error, "status_code", "statusCode", "status")
    if isinstance(status, int):
        return status
    if isinstance(status, str) and status.isdigit():
        return int(status)
    return None


def match_error_keyword(message: str) -> Optional[Tuple[StorageErrorCode, int]]:
    """按关键字表匹配错误消息，返回 (错误码, 状态码)"""
    for keyword, code, status_code in ERROR_KEYWORD_TABLE:
        if keyword in message:
            return code, status_code
    return None


def map_storage_error(error: Any) -> StorageError:
    """
    将任意错误值映射为 StorageError

    匹配顺序：
    1. 已经是 StorageError 的直接返回，保证只映射一次
    2. 错误消息命中关键字表时，返回对应错误码、固定消息与状态码
    3. 网络异常（httpx传输错误、连接错误、超时）映射为 network-error
    4. 有消息但未命中关键字的，映射为 unknown-error 并保留原消息、状态码与原始异常
    5. 其余情况映射为通用的 unknown-error

    Args:
        error: 远程客户端抛出或返回的错误（异常、字典或带message属性的对象）

    Returns:
        StorageError: 映射后的错误
    """
    if isinstance(error, StorageError):
        return error

    cause = error if isinstance(error, BaseException) else None
    message = _extract_message(error)

    if message:
        matched = match_error_keyword(message)
        if matched:
            code, status_code = matched
            return StorageError(ERROR_MESSAGES[code], code=code, status_code=status_code, cause=cause)

    if isinstance(error, NETWORK_EXCEPTIONS):
        return StorageError(
            ERROR_MESSAGES[StorageErrorCode.NETWORK_ERROR],
            code=StorageErrorCode.NETWORK_ERROR,
            cause=cause,
        )

    if message:
        return StorageError(
            message,
            code=StorageErrorCode.UNKNOWN_ERROR,
            status_code=_extract_status(error),
            cause=cause,
        )

    return StorageError(ERROR_MESSAGES[StorageErrorCode.UNKNOWN_ERROR], cause=cause)


__all__ = [
    'ERROR_KEYWORD_TABLE',
    'ERROR_MESSAGES',
    'map_storage_error',
    'match_error_keyword',
]
