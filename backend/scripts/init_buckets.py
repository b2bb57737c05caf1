#!/usr/bin/env python3
"""
存储桶初始化脚本

功能：
1. 按预置配置检查会议系统所需的存储桶
2. 创建缺失的存储桶，已存在的保持不变

使用方法：
    cd backend
    python -m scripts.init_buckets

注意：运行前确保已配置 SUPABASE_URL 与 SUPABASE_KEY（需要 service role 密钥）
"""

import sys
import asyncio
from pathlib import Path

# 添加项目根目录到 Python 路径
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

# 在导入配置之前，优先加载 .env.local（本地开发配置）
from conference_storage.utils.config_utils import get_config_path, load_env_file

env_local_path = get_config_path(".env.local")
if env_local_path.exists():
    print(f"加载本地开发配置: {env_local_path}")
    load_env_file(env_local_path)

from conference_storage.core.config.buckets import STORAGE_BUCKETS
from conference_storage.core.log_utils import setup_logging, get_logger
from conference_storage.core.storage import get_storage_service
from conference_storage.core.storage.exceptions import ConfigurationError
from conference_storage.core.storage.utils.paths import format_bytes
from conference_storage.services.storage.buckets import initialize_buckets

logger = get_logger(__name__)


async def main() -> int:
    """主函数，返回进程退出码"""
    print("=" * 60)
    print("存储桶初始化脚本")
    print("=" * 60)

    try:
        storage = get_storage_service()
    except ConfigurationError as e:
        print(f"错误: {e.message}")
        return 1

    print(f"待初始化存储桶数: {len(STORAGE_BUCKETS)}")
    for bucket in STORAGE_BUCKETS.values():
        visibility = "公开" if bucket.public else "私有"
        limit = format_bytes(bucket.file_size_limit) if bucket.file_size_limit else "不限"
        print(f"  - {bucket.id} ({visibility}, 上限 {limit})")
    print()

    result = await initialize_buckets(storage, STORAGE_BUCKETS)

    for bucket_id in result.created:
        print(f"  ✓ 已创建: {bucket_id}")
    for bucket_id in result.existing:
        print(f"  - 已存在: {bucket_id}")
    for item in result.errors:
        print(f"  ✗ 失败: {item.bucket} ({item.error})")

    print()
    print("=" * 60)
    print(f"初始化完成: 新建 {len(result.created)}, 已存在 {len(result.existing)}, 失败 {len(result.errors)}")
    print("=" * 60)

    logger.info(
        "存储桶初始化脚本执行完成",
        extra={"created": result.created, "existing": result.existing, "failed": [item.bucket for item in result.errors]}
    )
    return 1 if result.errors else 0


if __name__ == "__main__":
    setup_logging()
    sys.exit(asyncio.run(main()))
