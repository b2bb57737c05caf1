"""
存储适配器模块
提供远程存储服务的适配器实现
"""

from conference_storage.core.storage.adapters.memory import InMemoryStorageAdapter
from conference_storage.core.storage.adapters.supabase import SupabaseStorageAdapter

__all__ = [
    'InMemoryStorageAdapter',
    'SupabaseStorageAdapter',
]
