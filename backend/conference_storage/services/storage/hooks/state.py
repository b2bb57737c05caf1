"""
操作状态定义
上传、批量上传与下载的有限状态记录
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional

from conference_storage.core.storage.exceptions import StorageError
from conference_storage.core.storage.models import DownloadResult, UploadResult


class OperationStatus(str, Enum):
    """操作状态"""
    IDLE = "idle"
    UPLOADING = "uploading"
    DOWNLOADING = "downloading"
    SUCCESS = "success"
    ERROR = "error"
    PARTIAL = "partial"


@dataclass(frozen=True)
class Progress:
    """
    进度记录

    Attributes:
        loaded: 已完成字节数
        total: 总字节数，未知时为None
        percentage: 完成百分比，未知时为None
    """
    loaded: int = 0
    total: Optional[int] = 0
    percentage: Optional[int] = 0

    @classmethod
    def of(cls, loaded: int, total: int) -> "Progress":
        percentage = round(loaded / total * 100) if total else 0
        return cls(loaded=loaded, total=total, percentage=percentage)


@dataclass(frozen=True)
class UploadState:
    status: OperationStatus = OperationStatus.IDLE
    progress: Progress = field(default_factory=Progress)
    result: Optional[UploadResult] = None
    error: Optional[StorageError] = None


@dataclass(frozen=True)
class MultiUploadState:
    """
    批量上传状态

    Attributes:
        status: 整体状态，全部成功为 success，全部失败为 error，其余为 partial
        files: 以文件名为键的单文件状态
        completed: 成功数
        failed: 失败数
        total: 文件总数
    """
    status: OperationStatus = OperationStatus.IDLE
    files: Dict[str, UploadState] = field(default_factory=dict)
    completed: int = 0
    failed: int = 0
    total: int = 0


@dataclass(frozen=True)
class DownloadState:
    status: OperationStatus = OperationStatus.IDLE
    progress: Progress = field(default_factory=lambda: Progress(loaded=0, total=None, percentage=None))
    result: Optional[DownloadResult] = None
    error: Optional[StorageError] = None


@dataclass(frozen=True)
class DeleteOutcome:
    """
    批量删除结果

    远程批量删除接口不返回单个路径的成败：失败时所有路径记为失败，
    成功时所有路径记为成功，并非逐文件的保证。
    """
    success: List[str] = field(default_factory=list)
    failed: List[str] = field(default_factory=list)
