"""
MIME类型工具
根据文件名推断MIME类型，并对常见文件类型进行分类
"""

from conference_storage.core.storage.utils.paths import get_file_extension

MIME_TYPE_MAP = {
    'jpg': 'image/jpeg',
    'jpeg': 'image/jpeg',
    'png': 'image/png',
    'gif': 'image/gif',
    'bmp': 'image/bmp',
    'webp': 'image/webp',
    'avif': 'image/avif',
    'svg': 'image/svg+xml',
    'mp4': 'video/mp4',
    'webm': 'video/webm',
    'mov': 'video/quicktime',
    'pdf': 'application/pdf',
    'doc': 'application/msword',
    'docx': 'application/vnd.openxmlformats-officedocument.wordprocessingml.document',
    'xls': 'application/vnd.ms-excel',
    'xlsx': 'application/vnd.openxmlformats-officedocument.spreadsheetml.sheet',
    'ppt': 'application/vnd.ms-powerpoint',
    'pptx': 'application/vnd.openxmlformats-officedocument.presentationml.presentation',
    'txt': 'text/plain',
    'csv': 'text/csv',
    'json': 'application/json',
    'zip': 'application/zip',
}

DOCUMENT_MIME_TYPES = frozenset([
    'application/pdf',
    'application/msword',
    'application/vnd.openxmlformats-officedocument.wordprocessingml.document',
    'application/vnd.ms-excel',
    'application/vnd.openxmlformats-officedocument.spreadsheetml.sheet',
    'application/vnd.ms-powerpoint',
    'application/vnd.openxmlformats-officedocument.presentationml.presentation',
    'text/plain',
    'text/csv',
])

DEFAULT_MIME_TYPE = 'application/octet-stream'


def get_mime_type(filename: str) -> str:
    """
    根据文件扩展名获取MIME类型

    Args:
        filename: 文件名或路径

    Returns:
        str: MIME类型，未知扩展名返回 application/octet-stream
    """
    return MIME_TYPE_MAP.get(get_file_extension(filename), DEFAULT_MIME_TYPE)


def is_image_file(mime_type: str) -> bool:
    return mime_type.startswith('image/')


def is_video_file(mime_type: str) -> bool:
    return mime_type.startswith('video/')


def is_document_file(mime_type: str) -> bool:
    """判断是否为常见文档类型（PDF、Office、纯文本、CSV）"""
    return mime_type in DOCUMENT_MIME_TYPES


def get_file_type_icon(mime_type: str) -> str:
    """按MIME类型返回用于展示的图标"""
    if is_image_file(mime_type):
        return '🖼️'
    if is_video_file(mime_type):
        return '🎬'
    if 'pdf' in mime_type:
        return '📕'
    if 'word' in mime_type:
        return '📘'
    if 'excel' in mime_type or 'spreadsheet' in mime_type:
        return '📗'
    if 'powerpoint' in mime_type or 'presentation' in mime_type:
        return '📙'
    return '📄'
