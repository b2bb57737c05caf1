"""
Supabase存储配置模块
从全局配置派生存储客户端所需的连接参数
"""

from pydantic import BaseModel, Field

from conference_storage.core.config import settings


class SupabaseStorageConfig(BaseModel):
    """Supabase存储配置数据类"""

    url: str = Field(default="", description="Supabase项目URL")
    key: str = Field(default="", description="Supabase服务密钥（service role或anon key）")
    timeout: int = Field(default=30, description="存储请求超时时间（秒）")

    signed_url_expires: int = Field(default=3600, description="签名URL默认有效期（秒）")
    cache_control: str = Field(default="3600", description="上传文件默认Cache-Control")


def get_storage_config() -> SupabaseStorageConfig:
    """从全局配置获取存储配置"""
    return SupabaseStorageConfig(
        url=settings.supabase_url,
        key=settings.supabase_key,
        timeout=settings.supabase_timeout,
        signed_url_expires=settings.storage_signed_url_expires,
        cache_control=settings.storage_cache_control,
    )


def validate_storage_config(config: SupabaseStorageConfig) -> bool:
    """验证存储配置完整性"""
    required_fields = ["url", "key"]

    for field in required_fields:
        if not getattr(config, field):
            return False

    return True
