"""
存储服务模块
提供统一的存储服务访问接口，支持多种存储适配器
"""

from typing import Optional

from conference_storage.core.config import settings
from conference_storage.core.config.storage_config import get_storage_config, validate_storage_config
from conference_storage.core.storage.abc import BaseStorage
from conference_storage.core.storage.adapters import InMemoryStorageAdapter, SupabaseStorageAdapter
from conference_storage.core.storage.error_mapper import map_storage_error
from conference_storage.core.storage.exceptions import (
    ConfigurationError,
    RemoteStorageError,
    StorageError,
    StorageErrorCode,
)
from conference_storage.core.storage.factory import (
    create_adapter,
    list_available_adapters,
    register_adapter,
)
from conference_storage.core.storage.models import StorageResult

# 自动注册内置适配器
register_adapter(SupabaseStorageAdapter.ADAPTER_NAME, SupabaseStorageAdapter)
register_adapter(InMemoryStorageAdapter.ADAPTER_NAME, InMemoryStorageAdapter)


def get_storage_service(adapter_name: Optional[str] = None) -> BaseStorage:
    """
    获取存储服务实例

    Args:
        adapter_name: 适配器名称（如 'supabase'、'memory'），
            不指定时使用 STORAGE_ADAPTER 配置，仍未配置则按Supabase配置自动检测

    Returns:
        BaseStorage: 存储服务实例

    Raises:
        ConfigurationError: 没有可用的存储服务或适配器创建失败时抛出

    Example:
        >>> storage = get_storage_service()
        >>> storage = get_storage_service('memory')
    """
    adapter_name = adapter_name or settings.storage_adapter
    if adapter_name is None:
        if validate_storage_config(get_storage_config()):
            adapter_name = SupabaseStorageAdapter.ADAPTER_NAME
        else:
            raise ConfigurationError(
                "没有可用的存储服务。请配置 SUPABASE_URL/SUPABASE_KEY 或设置 STORAGE_ADAPTER=memory"
            )

    return create_adapter(adapter_name)


__all__ = [
    # 工厂函数
    'get_storage_service',
    'create_adapter',
    'list_available_adapters',
    'register_adapter',
    # 抽象接口
    'BaseStorage',
    # 适配器类
    'InMemoryStorageAdapter',
    'SupabaseStorageAdapter',
    # 错误
    'ConfigurationError',
    'RemoteStorageError',
    'StorageError',
    'StorageErrorCode',
    'StorageResult',
    'map_storage_error',
]
