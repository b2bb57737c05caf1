"""
测试配置和fixtures
为所有测试提供共享的配置和fixtures

远程存储服务由内存适配器模拟，单元测试不依赖任何外部服务
"""

import os

# 必须在导入应用配置之前设置
os.environ.setdefault("STORAGE_ADAPTER", "memory")
os.environ.setdefault("STORAGE_PUBLIC_BASE_URL", "http://storage.test")
os.environ.setdefault("LOG_LEVEL", "ERROR")

import pytest

from tests.utils.storage_utils import create_memory_storage


@pytest.fixture(scope="function")
def storage():
    """内存存储fixture，每个测试独立"""
    return create_memory_storage()


# 测试标记配置
def pytest_configure(config):
    """配置pytest标记"""
    config.addinivalue_line("markers", "unit: 单元测试")
    config.addinivalue_line("markers", "error_mapper: 错误映射测试")
    config.addinivalue_line("markers", "paths: 路径与文件名工具测试")
    config.addinivalue_line("markers", "mime: MIME分类测试")
    config.addinivalue_line("markers", "buckets: 存储桶管理测试")
    config.addinivalue_line("markers", "files: 文件操作测试")
    config.addinivalue_line("markers", "urls: URL生成测试")
    config.addinivalue_line("markers", "images: 图片优化测试")
    config.addinivalue_line("markers", "hooks: 有状态操作单元测试")
    config.addinivalue_line("markers", "adapters: 存储适配器测试")
    config.addinivalue_line("markers", "api: HTTP接口测试")
    config.addinivalue_line("markers", "logging: 日志系统测试")
    config.addinivalue_line("markers", "config: 配置测试")
    config.addinivalue_line("markers", "imports: 模块导入测试")
