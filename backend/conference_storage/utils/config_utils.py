"""
配置工具模块
处理配置加载、路径计算等工具方法
"""

import os
import json
import logging
from pathlib import Path
from typing import List, Optional

logger = logging.getLogger(__name__)


def get_project_root() -> Path:
    """获取项目根目录路径"""
    return Path(__file__).parent.parent.parent.parent


def load_env_file(env_file_path: Path, required_vars: Optional[List[str]] = None) -> bool:
    """
    加载环境变量文件

    已存在的环境变量优先，文件中的同名配置不会覆盖。

    Returns:
        bool: 文件存在并加载成功时返回True
    """
    loaded = False
    if env_file_path.exists():
        try:
            logger.info(f"加载环境变量文件: {env_file_path}")
            with open(env_file_path, "r", encoding="utf-8") as f:
                for line in f:
                    line = line.strip()
                    if not line or line.startswith("#") or "=" not in line:
                        continue
                    key, value = line.split("=", 1)
                    key = key.strip()
                    if key not in os.environ:
                        os.environ[key] = value.strip().strip('"').strip("'")
            loaded = True
        except OSError as e:
            logger.warning(f"加载环境变量文件失败 {env_file_path}: {e}")

    if required_vars:
        missing_vars = [var for var in required_vars if not os.environ.get(var)]
        if missing_vars:
            logger.warning(f"缺少必要的环境变量: {missing_vars}")

    return loaded


def get_workspace_path(sub_path: str = "") -> Path:
    """获取workspace目录路径"""
    workspace_dir = get_project_root() / "workspace"
    if sub_path:
        return workspace_dir / sub_path
    return workspace_dir


def get_config_path(sub_path: str = "") -> Path:
    """获取config目录路径"""
    config_dir = get_project_root() / "config"
    if sub_path:
        return config_dir / sub_path
    return config_dir


def parse_json_config(value: str) -> List[str]:
    """解析JSON格式的配置字符串"""
    if not value:
        return []
    try:
        return json.loads(value)
    except json.JSONDecodeError:
        logger.warning(f"JSON配置解析失败: {value}")
        return []
