"""
存储桶声明式配置
会议系统预置的存储桶及其访问策略，供初始化与上传校验使用
"""

from typing import Dict, List, Optional

from pydantic import BaseModel, Field


MB = 1024 * 1024


class BucketConfig(BaseModel):
    """单个存储桶的声明式配置"""

    id: str = Field(..., description="存储桶唯一标识")
    name: str = Field(..., description="存储桶名称")
    public: bool = Field(default=False, description="是否公开读取")
    allowed_mime_types: Optional[List[str]] = Field(default=None, description="允许的MIME类型，支持 image/* 与 */* 通配")
    file_size_limit: Optional[int] = Field(default=None, description="单文件大小上限（字节）")


STORAGE_BUCKETS: Dict[str, BucketConfig] = {
    # 公共资源：Logo、横幅、宣传材料
    "public-assets": BucketConfig(
        id="public-assets",
        name="public-assets",
        public=True,
        allowed_mime_types=["image/*", "video/*", "application/pdf"],
        file_size_limit=10 * MB,
    ),
    "speakers": BucketConfig(
        id="speakers",
        name="speakers",
        public=True,
        allowed_mime_types=["image/jpeg", "image/png", "image/webp"],
        file_size_limit=5 * MB,
    ),
    "partners": BucketConfig(
        id="partners",
        name="partners",
        public=True,
        allowed_mime_types=["image/jpeg", "image/png", "image/svg+xml", "image/webp"],
        file_size_limit=2 * MB,
    ),
    "gallery": BucketConfig(
        id="gallery",
        name="gallery",
        public=True,
        allowed_mime_types=["image/jpeg", "image/png", "image/webp"],
        file_size_limit=15 * MB,
    ),
    # 用户上传：参会者提交的材料，仅签名URL访问
    "user-uploads": BucketConfig(
        id="user-uploads",
        name="user-uploads",
        public=False,
        allowed_mime_types=[
            "image/*",
            "application/pdf",
            "application/msword",
            "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
        ],
        file_size_limit=20 * MB,
    ),
    "admin-documents": BucketConfig(
        id="admin-documents",
        name="admin-documents",
        public=False,
        allowed_mime_types=["*/*"],
        file_size_limit=50 * MB,
    ),
}


def get_bucket_config(bucket_id: str) -> Optional[BucketConfig]:
    """按标识获取存储桶配置，未声明时返回None"""
    return STORAGE_BUCKETS.get(bucket_id)


def is_known_bucket(bucket_id: str) -> bool:
    """判断存储桶是否在声明式配置中"""
    return bucket_id in STORAGE_BUCKETS
