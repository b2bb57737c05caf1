"""
应用配置管理模块
统一管理所有配置信息，包括环境变量和文件配置
"""

from typing import List, Optional
from pydantic_settings import BaseSettings
from pydantic import field_validator, ConfigDict

from conference_storage.utils.config_utils import (
    get_workspace_path, get_config_path, parse_json_config
)


class Settings(BaseSettings):
    """应用配置类 - 统一管理所有配置信息"""

    # ==================== 基础配置 ====================
    app_name: str = "Conference Storage"
    app_version: str = "1.0.0"
    app_debug: bool = False
    app_env: str = "development"

    # ==================== API配置 ====================
    api_v1_str: str = "/api/v1"
    project_name: str = "Conference Storage API"

    # ==================== Supabase配置 ====================
    supabase_url: str = ""
    supabase_key: str = ""
    supabase_timeout: int = 30

    # ==================== 存储配置 ====================
    # 存储适配器: supabase | memory，为空时按配置自动检测
    storage_adapter: Optional[str] = None
    # memory适配器生成URL时使用的服务地址
    storage_public_base_url: str = "http://localhost:54321"

    storage_signed_url_expires: int = 3600
    storage_refresh_buffer: int = 60  # 签名URL提前刷新时间（秒）
    storage_cache_control: str = "3600"
    storage_list_limit: int = 100
    storage_progress_interval: float = 0.1  # 模拟上传进度的刷新间隔（秒）
    storage_auto_init_buckets: bool = False

    # ------------------- HTTP接口限制 -------------------
    storage_max_list_limit: int = 1000
    storage_max_delete_paths: int = 100
    storage_max_signed_urls: int = 50
    storage_max_signed_url_expires: int = 604800  # 7天

    # ==================== 日志配置 ====================
    log_level: str = "INFO"
    log_dir: str = "log"
    log_file: str = "backend.log"
    log_format: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

    # ==================== 应用服务配置 ====================
    app_port: int = 8080
    app_host: str = "0.0.0.0"

    # ==================== CORS配置 ====================
    cors_origins: str = '["*"]'

    # ==================== 验证器 ====================
    @field_validator("storage_adapter")
    @classmethod
    def normalize_storage_adapter(cls, value: Optional[str]) -> Optional[str]:
        """统一适配器名称格式，空字符串视为未配置"""
        if not value or not value.strip():
            return None
        return value.strip().lower()

    @field_validator("cors_origins")
    @classmethod
    def parse_cors_origins(cls, value: str) -> List[str]:
        """解析CORS origins配置"""
        return parse_json_config(value)

    # ==================== 计算属性 ====================
    @property
    def absolute_log_dir(self) -> str:
        """获取绝对日志目录路径"""
        return str(get_workspace_path(self.log_dir))

    @property
    def supabase_enabled(self) -> bool:
        """检查Supabase是否已配置"""
        return bool(self.supabase_url and self.supabase_key)

    model_config = ConfigDict(
        env_file=get_config_path(".env"),
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="allow",
        validate_default=True
    )


def get_settings() -> Settings:
    """获取应用配置实例"""
    return Settings()


# 全局配置实例
settings = get_settings()
