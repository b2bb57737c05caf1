"""
存储服务异常定义
定义存储模块中使用的错误码与异常类型
"""

from enum import Enum
from typing import Any, Dict, Optional


class StorageErrorCode(str, Enum):
    """存储错误码（封闭集合）"""

    FILE_NOT_FOUND = "file-not-found"
    BUCKET_ALREADY_EXISTS = "bucket-already-exists"
    FILE_TOO_LARGE = "file-too-large"
    INVALID_MIME_TYPE = "invalid-mime-type"
    PERMISSION_DENIED = "permission-denied"
    RATE_LIMITED = "rate-limited"
    STORAGE_QUOTA_EXCEEDED = "storage-quota-exceeded"
    NETWORK_ERROR = "network-error"
    UPLOAD_FAILED = "upload-failed"
    DOWNLOAD_FAILED = "download-failed"
    DELETE_FAILED = "delete-failed"
    UNKNOWN_ERROR = "unknown-error"


class StorageError(Exception):
    """
    存储操作异常

    操作函数对外暴露的唯一错误类型，远程服务返回的任意错误都会经由
    错误映射器转换为该类型后再返回给调用方。

    Attributes:
        message: 可读的错误消息
        code: 错误码
        status_code: 类HTTP状态码，未知错误与网络错误可能为None
        cause: 原始异常
        details: 错误详情
    """

    def __init__(
        self,
        message: str,
        code: StorageErrorCode = StorageErrorCode.UNKNOWN_ERROR,
        status_code: Optional[int] = None,
        cause: Optional[BaseException] = None,
        details: Optional[Dict[str, Any]] = None
    ) -> None:
        super().__init__(message)
        self.message = message
        self.code = StorageErrorCode(code)
        self.status_code = status_code
        self.cause = cause
        self.details = details or {}

    def __str__(self) -> str:
        return f"[{self.code.value}] {self.message}"

    def __repr__(self) -> str:
        return (
            f"StorageError(code={self.code.value!r}, message={self.message!r}, "
            f"status_code={self.status_code!r})"
        )

    def to_dict(self) -> Dict[str, Any]:
        """转换为可序列化的字典，用于API错误响应"""
        data: Dict[str, Any] = {
            "code": self.code.value,
            "message": self.message,
        }
        if self.status_code is not None:
            data["status_code"] = self.status_code
        if self.details:
            data["details"] = self.details
        return data


class ConfigurationError(Exception):
    """存储配置错误（未知适配器、配置不完整等部署问题）"""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details or {}


class RemoteStorageError(Exception):
    """
    远程存储服务返回的原始错误

    与官方SDK的 StorageApiError 保持相同的属性形态（message/status/error），
    由内存适配器抛出。

    Attributes:
        message: 服务端错误消息
        status: 服务端状态码
        error: 服务端错误类型
    """

    def __init__(self, message: str, status: Optional[int] = None, error: Optional[str] = None) -> None:
        super().__init__(message)
        self.message = message
        self.status = status
        self.error = error or "Error"


__all__ = [
    'StorageErrorCode',
    'StorageError',
    'ConfigurationError',
    'RemoteStorageError',
]
