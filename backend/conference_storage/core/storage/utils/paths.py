"""
路径与文件名工具
存储路径规范化、唯一文件名生成、文件策略校验与大小格式化
"""

import os
import re
import secrets
import string
import threading
from typing import Any, List, Optional

from conference_storage.core.storage.models import FilePolicy, ValidationResult
from conference_storage.utils.datetime_utils import get_current_timestamp_ms

_UNSAFE_SEGMENT_CHARS = re.compile(r"[^A-Za-z0-9\-_.]")
_UNSAFE_NAME_CHARS = re.compile(r"[^A-Za-z0-9\-_]")
_DUPLICATE_SLASHES = re.compile(r"/+")

_BASE36_ALPHABET = string.digits + string.ascii_lowercase
_SIZE_UNITS = ["Bytes", "KB", "MB", "GB", "TB"]

# 唯一文件名的毫秒时间戳在进程内严格递增
_timestamp_lock = threading.Lock()
_last_timestamp_ms = 0


def sanitize_path(path: str) -> str:
    """
    规范化存储路径

    反斜杠转为正斜杠，合并重复斜杠，去掉首尾斜杠，并将每段中
    ``[A-Za-z0-9-_.]`` 以外的字符替换为 ``-``。函数是幂等的。

    Args:
        path: 用户提供的路径

    Returns:
        str: 规范化后的路径
    """
    normalized = _DUPLICATE_SLASHES.sub("/", path.replace("\\", "/")).strip("/")
    if not normalized:
        return ""
    return "/".join(_UNSAFE_SEGMENT_CHARS.sub("-", segment) for segment in normalized.split("/"))


def join_paths(*segments: str) -> str:
    """拼接路径片段，去掉各段首尾斜杠并忽略空片段"""
    parts = [segment.strip("/") for segment in segments if segment]
    return "/".join(part for part in parts if part)


def get_file_extension(filename: str) -> str:
    """
    获取文件扩展名（小写，不含点）

    Args:
        filename: 文件名或路径

    Returns:
        str: 扩展名，无扩展名时返回空字符串
    """
    return os.path.splitext(filename)[1].lstrip(".").lower()


def _next_timestamp_ms() -> int:
    global _last_timestamp_ms
    with _timestamp_lock:
        now_ms = get_current_timestamp_ms()
        _last_timestamp_ms = max(now_ms, _last_timestamp_ms + 1)
        return _last_timestamp_ms


def random_suffix(length: int = 6) -> str:
    """生成指定长度的base36随机串"""
    return "".join(secrets.choice(_BASE36_ALPHABET) for _ in range(length))


def generate_unique_filename(original_name: str) -> str:
    """
    生成唯一文件名

    格式为 ``<规范化的小写原名>-<毫秒时间戳>-<6位随机串>.<扩展名>``，
    保留原扩展名。同一进程内连续调用不会得到相同结果。

    Args:
        original_name: 原始文件名

    Returns:
        str: 唯一文件名
    """
    base, extension = os.path.splitext(os.path.basename(original_name))
    safe_base = _UNSAFE_NAME_CHARS.sub("-", base).lower() or "file"
    unique_name = f"{safe_base}-{_next_timestamp_ms()}-{random_suffix()}"
    if extension:
        unique_name = f"{unique_name}{extension.lower()}"
    return unique_name


def mime_type_allowed(content_type: str, allowed_mime_types: List[str]) -> bool:
    """判断MIME类型是否命中允许列表，支持 ``*/*`` 与 ``image/*`` 通配"""
    for allowed in allowed_mime_types:
        if allowed == "*/*" or allowed == content_type:
            return True
        if allowed.endswith("/*") and content_type.startswith(allowed[:-1]):
            return True
    return False


def validate_file(file: Any, policy: Optional[FilePolicy] = None) -> ValidationResult:
    """
    按存储桶策略校验文件

    未设置的约束视为通过；允许列表支持 ``*/*`` 与 ``image/*`` 形式的通配。

    Args:
        file: 具有 size 与 content_type 属性的文件对象
        policy: 校验策略

    Returns:
        ValidationResult: 校验结果，失败时携带原因
    """
    if policy is None:
        return ValidationResult(valid=True)

    if policy.file_size_limit and file.size > policy.file_size_limit:
        return ValidationResult(
            valid=False,
            error=f"File size exceeds limit of {format_bytes(policy.file_size_limit)}",
        )

    if policy.allowed_mime_types and not mime_type_allowed(file.content_type or "", policy.allowed_mime_types):
        return ValidationResult(
            valid=False,
            error=(
                f'File type "{file.content_type}" is not allowed. '
                f'Allowed types: {", ".join(policy.allowed_mime_types)}'
            ),
        )

    return ValidationResult(valid=True)


def format_bytes(size_bytes: int, decimals: int = 2) -> str:
    """
    将字节数转换为可读格式

    以1024为进制，单位最大到TB，小数末尾的0会被去掉，如 ``1.5 KB``。

    Args:
        size_bytes: 字节数
        decimals: 保留小数位数

    Returns:
        str: 可读的大小字符串
    """
    if size_bytes <= 0:
        return "0 Bytes"

    value = float(size_bytes)
    unit_index = 0
    while value >= 1024 and unit_index < len(_SIZE_UNITS) - 1:
        value /= 1024
        unit_index += 1

    formatted = f"{value:.{max(decimals, 0)}f}"
    if "." in formatted:
        formatted = formatted.rstrip("0").rstrip(".")
    return f"{formatted} {_SIZE_UNITS[unit_index]}"
