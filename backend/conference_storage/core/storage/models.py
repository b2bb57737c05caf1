"""
存储服务数据模型
定义存储操作中使用的所有数据结构
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, Generic, Iterator, List, Optional, TypeVar

from conference_storage.core.storage.exceptions import StorageError

T = TypeVar('T')


@dataclass(frozen=True)
class StorageResult(Generic[T]):
    """
    操作结果

    data 与 error 有且仅有一个被设置，支持 ``data, error = result`` 解包。

    Attributes:
        data: 成功时的结果数据
        error: 失败时的映射错误
    """
    data: Optional[T] = None
    error: Optional[StorageError] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @classmethod
    def success(cls, data: T) -> "StorageResult[T]":
        return cls(data=data, error=None)

    @classmethod
    def failure(cls, error: StorageError) -> "StorageResult[T]":
        return cls(data=None, error=error)

    def __iter__(self) -> Iterator[Any]:
        yield self.data
        yield self.error


# ==================== 存储桶 ====================

@dataclass(frozen=True)
class FilePolicy:
    """
    文件校验策略

    Attributes:
        allowed_mime_types: 允许的MIME类型，None或空列表表示不限制
        file_size_limit: 单文件大小上限（字节），None或0表示不限制
    """
    allowed_mime_types: Optional[List[str]] = None
    file_size_limit: Optional[int] = None


@dataclass(frozen=True)
class Bucket:
    """
    存储桶

    Attributes:
        id: 存储桶唯一标识
        name: 存储桶名称
        public: 是否公开读取
        allowed_mime_types: 允许的MIME类型
        file_size_limit: 单文件大小上限（字节）
        owner: 所有者
        created_at: 创建时间
        updated_at: 更新时间
    """
    id: str
    name: str
    public: bool = False
    allowed_mime_types: Optional[List[str]] = None
    file_size_limit: Optional[int] = None
    owner: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @property
    def policy(self) -> FilePolicy:
        """存储桶的上传校验策略"""
        return FilePolicy(
            allowed_mime_types=self.allowed_mime_types,
            file_size_limit=self.file_size_limit,
        )


@dataclass(frozen=True)
class BucketOptions:
    """创建或更新存储桶时的可选参数，None 表示不设置"""
    public: Optional[bool] = None
    allowed_mime_types: Optional[List[str]] = None
    file_size_limit: Optional[int] = None

    def to_dict(self) -> Dict[str, Any]:
        options: Dict[str, Any] = {}
        if self.public is not None:
            options["public"] = self.public
        if self.allowed_mime_types is not None:
            options["allowed_mime_types"] = list(self.allowed_mime_types)
        if self.file_size_limit is not None:
            options["file_size_limit"] = self.file_size_limit
        return options


@dataclass(frozen=True)
class BucketInitError:
    bucket: str
    error: StorageError


@dataclass(frozen=True)
class BucketInitResult:
    """
    存储桶初始化报告

    Attributes:
        created: 本次新建的存储桶
        existing: 已存在（含并发创建时被他人抢先创建）的存储桶
        errors: 创建失败的存储桶及其错误
    """
    created: List[str] = field(default_factory=list)
    existing: List[str] = field(default_factory=list)
    errors: List[BucketInitError] = field(default_factory=list)


@dataclass(frozen=True)
class BucketStats:
    file_count: int
    total_size: int
    formatted_size: str


# ==================== 文件 ====================

@dataclass(frozen=True)
class FileObject:
    """
    存储对象

    列表接口返回的 name 相对于所列目录；文件夹条目的 id 为 None。

    Attributes:
        name: 对象名称
        path: 对象在存储桶内的完整路径
        id: 对象ID
        created_at: 创建时间
        updated_at: 最后修改时间
        metadata: 元数据（size、mimetype、cacheControl 等）
    """
    name: str
    path: str
    id: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    metadata: Dict[str, Any] = field(default_factory=dict)

    @property
    def size(self) -> int:
        return int(self.metadata.get("size") or 0)

    @property
    def content_type(self) -> Optional[str]:
        return self.metadata.get("mimetype")

    @property
    def last_modified(self) -> Optional[datetime]:
        return self.updated_at

    @property
    def is_folder(self) -> bool:
        return self.id is None


@dataclass(frozen=True)
class FileUpload:
    """
    带类型信息的待上传文件

    与裸 bytes 不同，上传前会按目标存储桶策略校验。

    Attributes:
        name: 原始文件名
        data: 文件内容
        content_type: MIME类型
        last_modified: 最后修改时间
    """
    name: str
    data: bytes
    content_type: str = "application/octet-stream"
    last_modified: Optional[datetime] = None

    @property
    def size(self) -> int:
        return len(self.data)


@dataclass(frozen=True)
class ValidationResult:
    valid: bool
    error: Optional[str] = None


@dataclass(frozen=True)
class SortBy:
    column: str = "name"
    order: str = "asc"


@dataclass(frozen=True)
class ListOptions:
    """
    文件列表查询参数

    Attributes:
        limit: 返回条数上限
        offset: 偏移量
        sort_by: 排序字段与方向
        search: 名称前缀搜索
    """
    limit: int = 100
    offset: int = 0
    sort_by: Optional[SortBy] = None
    search: Optional[str] = None


@dataclass(frozen=True)
class UploadOptions:
    """
    上传参数

    Attributes:
        cache_control: Cache-Control 秒数
        content_type: 内容类型，为空时由文件推断
        upsert: 是否覆盖已存在的对象，默认不覆盖
    """
    cache_control: str = "3600"
    content_type: Optional[str] = None
    upsert: bool = False


@dataclass(frozen=True)
class StoredObject:
    """远程服务返回的上传落盘信息"""
    path: str
    id: Optional[str] = None
    key: Optional[str] = None


@dataclass(frozen=True)
class UploadResult:
    """
    上传结果

    Attributes:
        path: 存储路径
        id: 对象ID
        full_path: 对象的公开访问URL
    """
    path: str
    id: Optional[str]
    full_path: str


@dataclass(frozen=True)
class DownloadResult:
    """
    下载结果

    Attributes:
        data: 文件数据
        filename: 从路径推断的文件名
        content_type: MIME类型
        size: 文件大小（字节）
    """
    data: bytes
    filename: str
    content_type: str
    size: int


# ==================== URL ====================

@dataclass(frozen=True)
class ImageTransform:
    """
    图片变换参数，由远程服务按URL参数实时处理

    Attributes:
        width: 目标宽度
        height: 目标高度
        resize: 缩放模式 cover | contain | fill
        format: 输出格式，如 webp、origin
        quality: 图片质量 20-100
    """
    width: Optional[int] = None
    height: Optional[int] = None
    resize: Optional[str] = None
    format: Optional[str] = None
    quality: Optional[int] = None

    def to_params(self, include_format: bool = True) -> Dict[str, Any]:
        params: Dict[str, Any] = {}
        for key in ("width", "height", "resize", "format", "quality"):
            if key == "format" and not include_format:
                continue
            value = getattr(self, key)
            if value is not None:
                params[key] = value
        return params


@dataclass(frozen=True)
class SignedUrl:
    """
    签名URL

    expires_at 为客户端按请求时间加有效期计算的近似过期时间（Unix秒），
    不包含时钟偏差与网络延迟。
    """
    signed_url: str
    path: str
    expires_at: float


@dataclass(frozen=True)
class SignedUrlEntry:
    """批量签名结果中的单条记录，error 非空表示该路径签名失败"""
    path: str
    signed_url: Optional[str] = None
    error: Optional[str] = None


@dataclass(frozen=True)
class SignedUploadUrl:
    """
    签名上传URL，客户端凭 token 直接上传到存储服务

    Attributes:
        signed_url: 上传地址
        path: 目标路径
        token: 一次性上传令牌
    """
    signed_url: str
    path: str
    token: str


@dataclass(frozen=True)
class OptimizedImage:
    """单个宽度的变换图片"""
    url: str
    width: int
    format: Optional[str] = None
    quality: Optional[int] = None


@dataclass(frozen=True)
class ResponsiveImageSet:
    """
    响应式图片集

    Attributes:
        original: 原图URL
        srcset: ``"<url> <width>w, ..."`` 形式的字符串
        variants: 各宽度的变换图片，顺序与传入的宽度列表一致
    """
    original: str
    srcset: str
    variants: List[OptimizedImage]


__all__ = [
    'StorageResult',
    'FilePolicy',
    'Bucket',
    'BucketOptions',
    'BucketInitError',
    'BucketInitResult',
    'BucketStats',
    'FileObject',
    'FileUpload',
    'ValidationResult',
    'SortBy',
    'ListOptions',
    'UploadOptions',
    'StoredObject',
    'UploadResult',
    'DownloadResult',
    'ImageTransform',
    'SignedUrl',
    'SignedUrlEntry',
    'SignedUploadUrl',
    'OptimizedImage',
    'ResponsiveImageSet',
]
