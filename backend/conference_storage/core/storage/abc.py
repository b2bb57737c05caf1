"""
存储抽象基类
定义远程存储服务客户端的统一接口

适配器方法在成功时返回数据，失败时直接抛出远程服务的原始异常，
由上层操作函数统一经过错误映射器转换。
"""

from abc import ABC, abstractmethod
from typing import List, Optional, Sequence, Union

from conference_storage.core.storage.models import (
    Bucket,
    BucketOptions,
    FileObject,
    ImageTransform,
    ListOptions,
    SignedUploadUrl,
    SignedUrlEntry,
    StoredObject,
    UploadOptions,
)


class BaseStorage(ABC):
    """存储抽象基类"""

    # ==================== 存储桶 ====================

    @abstractmethod
    async def list_buckets(self) -> List[Bucket]:
        """列出所有存储桶"""

    @abstractmethod
    async def get_bucket(self, bucket_id: str) -> Bucket:
        """
        获取存储桶

        Args:
            bucket_id: 存储桶标识

        Returns:
            Bucket: 存储桶信息

        Raises:
            Exception: 存储桶不存在或请求失败时抛出
        """

    @abstractmethod
    async def create_bucket(self, bucket_id: str, options: BucketOptions) -> str:
        """创建存储桶，返回存储桶名称"""

    @abstractmethod
    async def update_bucket(self, bucket_id: str, options: BucketOptions) -> str:
        """更新存储桶策略，返回服务端消息"""

    @abstractmethod
    async def delete_bucket(self, bucket_id: str) -> str:
        """删除存储桶，返回服务端消息"""

    @abstractmethod
    async def empty_bucket(self, bucket_id: str) -> str:
        """清空存储桶中的所有对象（保留存储桶本身），返回服务端消息"""

    # ==================== 文件 ====================

    @abstractmethod
    async def list_objects(self, bucket_id: str, path: str, options: ListOptions) -> List[FileObject]:
        """
        列出目录下的对象

        Args:
            bucket_id: 存储桶标识
            path: 目录路径，空字符串表示根目录
            options: 分页、排序与搜索参数

        Returns:
            List[FileObject]: 对象与子目录条目
        """

    @abstractmethod
    async def upload(
        self,
        bucket_id: str,
        path: str,
        data: bytes,
        options: UploadOptions
    ) -> StoredObject:
        """
        上传对象

        Args:
            bucket_id: 存储桶标识
            path: 目标路径
            data: 文件数据
            options: 上传参数，content_type 已由调用方确定

        Returns:
            StoredObject: 落盘信息

        Raises:
            Exception: 对象已存在（且未开启覆盖）、超出策略限制或请求失败时抛出
        """

    @abstractmethod
    async def download(
        self,
        bucket_id: str,
        path: str,
        transform: Optional[ImageTransform] = None
    ) -> bytes:
        """下载对象，可选由服务端实时变换图片"""

    @abstractmethod
    async def move(self, bucket_id: str, from_path: str, to_path: str) -> str:
        """移动对象，返回服务端消息"""

    @abstractmethod
    async def copy(self, bucket_id: str, from_path: str, to_path: str) -> str:
        """复制对象，返回新路径"""

    @abstractmethod
    async def remove(self, bucket_id: str, paths: Sequence[str]) -> List[FileObject]:
        """批量删除对象，返回已删除的对象"""

    # ==================== URL ====================

    @abstractmethod
    def get_public_url(
        self,
        bucket_id: str,
        path: str,
        download: Union[bool, str] = False,
        transform: Optional[ImageTransform] = None
    ) -> str:
        """
        构建公开访问URL（纯字符串拼接，不发起请求）

        Args:
            bucket_id: 存储桶标识
            path: 对象路径
            download: True 触发浏览器下载，字符串时作为下载文件名
            transform: 图片变换参数
        """

    @abstractmethod
    async def create_signed_url(
        self,
        bucket_id: str,
        path: str,
        expires_in: int,
        download: Union[bool, str] = False,
        transform: Optional[ImageTransform] = None
    ) -> str:
        """签发限时访问URL"""

    @abstractmethod
    async def create_signed_urls(
        self,
        bucket_id: str,
        paths: Sequence[str],
        expires_in: int,
        download: Union[bool, str] = False
    ) -> List[SignedUrlEntry]:
        """批量签发限时访问URL"""

    @abstractmethod
    async def create_signed_upload_url(self, bucket_id: str, path: str) -> SignedUploadUrl:
        """签发直传上传URL与一次性令牌"""


__all__ = ['BaseStorage']
