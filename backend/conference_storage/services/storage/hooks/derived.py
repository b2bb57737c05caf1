"""
无状态派生单元
公开URL、响应式图片与文件校验，每次调用都按输入重新计算，不做缓存
"""

from typing import List, Optional, Sequence, Tuple, Union

from conference_storage.core.storage.abc import BaseStorage
from conference_storage.core.storage.models import (
    FilePolicy,
    FileUpload,
    ImageTransform,
    ResponsiveImageSet,
    ValidationResult,
)
from conference_storage.core.storage.utils.paths import validate_file
from conference_storage.services.storage.images import DEFAULT_RESPONSIVE_WIDTHS, generate_responsive_images
from conference_storage.services.storage.urls import get_public_url


def public_url(
    storage: BaseStorage,
    bucket_id: str,
    path: Optional[str],
    download: Union[bool, str] = False,
    transform: Optional[ImageTransform] = None
) -> Optional[str]:
    """路径为空时返回None"""
    if not path:
        return None
    return get_public_url(storage, bucket_id, path, download=download, transform=transform)


def responsive_image(
    storage: BaseStorage,
    bucket_id: str,
    path: Optional[str],
    widths: Sequence[int] = DEFAULT_RESPONSIVE_WIDTHS,
    format: str = "webp",
    quality: int = 80
) -> Optional[ResponsiveImageSet]:
    if not path:
        return None
    return generate_responsive_images(storage, bucket_id, path, widths=widths, format=format, quality=quality)


class FileValidation:
    """按固定策略校验文件"""

    def __init__(self, policy: Optional[FilePolicy] = None):
        self.policy = policy

    def validate(self, file: FileUpload) -> ValidationResult:
        """
        校验单个文件

        Returns:
            ValidationResult: 校验结果，未通过时携带原因
        """
        return validate_file(file, self.policy)

    def validate_multiple(
        self,
        files: Sequence[FileUpload]
    ) -> Tuple[List[FileUpload], List[Tuple[FileUpload, str]]]:
        """
        批量校验

        Returns:
            Tuple: (通过的文件, [(未通过的文件, 原因)])，各自保持输入顺序
        """
        valid: List[FileUpload] = []
        invalid: List[Tuple[FileUpload, str]] = []
        for file in files:
            result = self.validate(file)
            if result.valid:
                valid.append(file)
            else:
                invalid.append((file, result.error))
        return valid, invalid
