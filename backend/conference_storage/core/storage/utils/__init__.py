"""
存储工具模块
提供路径处理、文件校验与MIME分类等纯函数
"""

from conference_storage.core.storage.utils.mime import (
    get_file_type_icon,
    get_mime_type,
    is_document_file,
    is_image_file,
    is_video_file,
)
from conference_storage.core.storage.utils.paths import (
    format_bytes,
    generate_unique_filename,
    get_file_extension,
    join_paths,
    sanitize_path,
    validate_file,
)

__all__ = [
    'format_bytes',
    'generate_unique_filename',
    'get_file_extension',
    'get_file_type_icon',
    'get_mime_type',
    'is_document_file',
    'is_image_file',
    'is_video_file',
    'join_paths',
    'sanitize_path',
    'validate_file',
]
