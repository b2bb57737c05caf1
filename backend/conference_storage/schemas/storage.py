"""
存储相关的Pydantic模型
用于请求验证和响应序列化
"""

from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field

from conference_storage.core.storage.models import BucketInitResult, FileObject, SignedUrlEntry, UploadResult
from conference_storage.schemas.common import PaginationInfo


class DeleteFilesRequest(BaseModel):
    """批量删除请求模型"""
    bucket_id: str = Field(..., description="存储桶标识")
    paths: List[str] = Field(default_factory=list, description="待删除的对象路径")


class SignedUploadUrlRequest(BaseModel):
    """签名上传URL请求模型"""
    bucket_id: str = Field(..., description="存储桶标识")
    path: str = Field(..., description="上传目标路径")


class FileObjectResponse(BaseModel):
    """文件对象响应模型"""
    name: str
    path: str
    id: Optional[str] = None
    size: int = 0
    content_type: Optional[str] = None
    is_folder: bool = False
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    metadata: Optional[Dict[str, Any]] = None

    @classmethod
    def from_file_object(cls, file: FileObject) -> "FileObjectResponse":
        return cls(
            name=file.name,
            path=file.path,
            id=file.id,
            size=file.size,
            content_type=file.content_type,
            is_folder=file.is_folder,
            created_at=file.created_at,
            updated_at=file.updated_at,
            metadata=file.metadata,
        )


class UploadResponse(BaseModel):
    """上传响应模型"""
    path: str
    id: Optional[str] = None
    full_path: str

    @classmethod
    def from_result(cls, result: UploadResult) -> "UploadResponse":
        return cls(path=result.path, id=result.id, full_path=result.full_path)


class FileListResponse(BaseModel):
    """文件列表响应模型"""
    files: List[FileObjectResponse]
    pagination: PaginationInfo


class SignedUrlResponse(BaseModel):
    """签名URL响应模型，expires_at 为Unix秒"""
    signed_url: str
    path: str
    expires_at: float


class SignedUrlEntryResponse(BaseModel):
    """批量签名URL中的单项"""
    path: str
    signed_url: Optional[str] = None
    error: Optional[str] = None

    @classmethod
    def from_entry(cls, entry: SignedUrlEntry) -> "SignedUrlEntryResponse":
        return cls(path=entry.path, signed_url=entry.signed_url, error=entry.error)


class SignedUploadUrlResponse(BaseModel):
    """签名上传URL响应模型"""
    signed_url: str
    path: str
    token: str


class BucketInitErrorResponse(BaseModel):
    bucket: str
    code: str
    message: str


class BucketInitResponse(BaseModel):
    """存储桶初始化报告"""
    created: List[str]
    existing: List[str]
    errors: List[BucketInitErrorResponse]

    @classmethod
    def from_result(cls, result: BucketInitResult) -> "BucketInitResponse":
        return cls(
            created=list(result.created),
            existing=list(result.existing),
            errors=[
                BucketInitErrorResponse(bucket=item.bucket, code=item.error.code.value, message=item.error.message)
                for item in result.errors
            ],
        )
