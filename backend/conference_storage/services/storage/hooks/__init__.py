"""
存储状态单元
将文件、URL与图片操作包装为带状态、进度、取消与生命周期的控制器
"""

from conference_storage.services.storage.hooks.base import StorageHook
from conference_storage.services.storage.hooks.delete import DeleteHook
from conference_storage.services.storage.hooks.derived import FileValidation, public_url, responsive_image
from conference_storage.services.storage.hooks.download import DownloadHook
from conference_storage.services.storage.hooks.folder import FolderStorageHook
from conference_storage.services.storage.hooks.listing import ListHook
from conference_storage.services.storage.hooks.progress import SimulatedProgress
from conference_storage.services.storage.hooks.signed_url import SignedUrlHook
from conference_storage.services.storage.hooks.state import (
    DeleteOutcome,
    DownloadState,
    MultiUploadState,
    OperationStatus,
    Progress,
    UploadState,
)
from conference_storage.services.storage.hooks.upload import UploadHook

__all__ = [
    'StorageHook',
    'UploadHook',
    'DownloadHook',
    'ListHook',
    'DeleteHook',
    'SignedUrlHook',
    'FolderStorageHook',
    'FileValidation',
    'public_url',
    'responsive_image',
    'SimulatedProgress',
    'OperationStatus',
    'Progress',
    'UploadState',
    'MultiUploadState',
    'DownloadState',
    'DeleteOutcome',
]
