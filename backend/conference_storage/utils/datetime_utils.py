"""
日期时间工具模块
提供统一的日期时间处理函数
"""

import time
from datetime import datetime, timezone
from typing import Optional


def get_current_timestamp() -> float:
    """获取当前时间戳（秒级，含小数）"""
    return time.time()


def get_current_timestamp_ms() -> int:
    """获取当前时间戳（毫秒级）"""
    return int(time.time() * 1000)


def utc_now() -> datetime:
    """获取当前UTC时间"""
    return datetime.now(timezone.utc)


def parse_timestamp(value: Optional[str]) -> Optional[datetime]:
    """
    解析ISO 8601时间字符串

    兼容 ``Z`` 结尾的UTC时间；无时区信息时按UTC处理，无法解析时返回None。

    Args:
        value: 时间字符串

    Returns:
        Optional[datetime]: 带时区的时间对象
    """
    if not value:
        return None
    try:
        parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed
