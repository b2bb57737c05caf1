"""
API依赖注入
"""

from typing import Optional

from conference_storage.core.storage import BaseStorage, get_storage_service

# 进程内共享的存储服务实例，首次使用时创建
_storage: Optional[BaseStorage] = None


def get_storage() -> BaseStorage:
    """
    获取存储服务依赖
    用于FastAPI依赖注入，测试中可通过 dependency_overrides 替换
    """
    global _storage
    if _storage is None:
        _storage = get_storage_service()
    return _storage


def reset_storage() -> None:
    """丢弃共享实例，下次使用时按当前配置重新创建"""
    global _storage
    _storage = None
