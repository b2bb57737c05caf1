"""
存储API端点
文件上传、下载、列表、删除、签名URL与存储桶初始化
采用薄路由、重处理器的架构设计
"""

from typing import Optional

from fastapi import APIRouter, Depends, File, Form, Query, UploadFile

from conference_storage.api.deps import get_storage
from conference_storage.core.storage.abc import BaseStorage
from conference_storage.core.storage.models import ImageTransform
from conference_storage.schemas.common import StandardResponse
from conference_storage.schemas.storage import DeleteFilesRequest, SignedUploadUrlRequest
from conference_storage.services.storage.handler import StorageRequestHandler
router = APIRouter(tags=["文件存储"])


@router.post(
    "/upload",
    response_model=StandardResponse,
    summary="上传文件",
    description="按存储桶配置校验文件后上传，未指定路径时自动生成唯一存储名"
)
async def upload(
    file: UploadFile = File(..., description="要上传的文件"),
    bucket_id: str = Form(..., description="存储桶标识"),
    path: Optional[str] = Form(None, description="目标路径"),
    upsert: bool = Form(False, description="是否覆盖已存在的文件"),
    storage: BaseStorage = Depends(get_storage)
) -> StandardResponse:
    handler = StorageRequestHandler(storage)
    result = await handler.handle_upload(file=file, bucket_id=bucket_id, path=path, upsert=upsert)

    return StandardResponse(
        status="success",
        message="文件上传成功",
        data=result
    )


@router.get(
    "/download",
    summary="下载文件",
    description="mode=url 返回公开URL（仅公开存储桶），mode=signed 返回签名URL，mode=blob 直接返回文件内容"
)
async def download(
    bucket_id: str = Query(..., description="存储桶标识"),
    path: str = Query(..., description="对象路径"),
    mode: str = Query("url", description="下载方式 url | signed | blob"),
    expires_in: Optional[int] = Query(None, description="签名URL有效期（秒）"),
    storage: BaseStorage = Depends(get_storage)
):
    handler = StorageRequestHandler(storage)
    result = await handler.handle_download(bucket_id=bucket_id, path=path, mode=mode, expires_in=expires_in)

    if mode == "blob":
        return result

    return StandardResponse(
        status="success",
        message="获取下载地址成功",
        data=result
    )


@router.get(
    "/list",
    response_model=StandardResponse,
    summary="列出文件",
    description="分页列出目录下的文件与子目录，支持排序与前缀搜索"
)
async def list_objects(
    bucket_id: str = Query(..., description="存储桶标识"),
    path: str = Query("", description="目录路径"),
    limit: Optional[int] = Query(None, description="返回数量"),
    offset: int = Query(0, description="偏移量"),
    search: Optional[str] = Query(None, description="文件名前缀搜索"),
    sort_by: Optional[str] = Query(None, description="排序字段"),
    order: Optional[str] = Query(None, description="排序方向 asc | desc"),
    storage: BaseStorage = Depends(get_storage)
) -> StandardResponse:
    handler = StorageRequestHandler(storage)
    result = await handler.handle_list(
        bucket_id=bucket_id,
        path=path,
        limit=limit,
        offset=offset,
        search=search,
        sort_by=sort_by,
        order=order
    )

    return StandardResponse(
        status="success",
        message=f"获取到 {len(result.files)} 个文件",
        data=result
    )


@router.post(
    "/delete",
    response_model=StandardResponse,
    summary="批量删除文件"
)
async def delete(
    request: DeleteFilesRequest,
    storage: BaseStorage = Depends(get_storage)
) -> StandardResponse:
    handler = StorageRequestHandler(storage)
    deleted = await handler.handle_delete(bucket_id=request.bucket_id, paths=request.paths)

    return StandardResponse(
        status="success",
        message=f"已删除 {len(deleted)} 个文件",
        data={"deleted": deleted}
    )


@router.get(
    "/signed-url",
    response_model=StandardResponse,
    summary="生成签名URL",
    description="单个路径支持图片变换与下载参数；paths 为逗号分隔的批量路径"
)
async def get_signed_url(
    bucket_id: str = Query(..., description="存储桶标识"),
    path: Optional[str] = Query(None, description="对象路径"),
    paths: Optional[str] = Query(None, description="逗号分隔的批量路径"),
    expires_in: Optional[int] = Query(None, description="有效期（秒）"),
    download: Optional[str] = Query(None, description="true 或下载文件名"),
    width: Optional[int] = Query(None, description="图片宽度"),
    height: Optional[int] = Query(None, description="图片高度"),
    quality: Optional[int] = Query(None, description="图片质量"),
    format: Optional[str] = Query(None, description="图片格式"),
    storage: BaseStorage = Depends(get_storage)
) -> StandardResponse:
    transform = None
    if width or height or quality or format:
        transform = ImageTransform(width=width, height=height, quality=quality, format=format)

    handler = StorageRequestHandler(storage)
    result = await handler.handle_signed_url(
        bucket_id=bucket_id,
        path=path,
        paths=paths,
        expires_in=expires_in,
        download=download,
        transform=transform
    )

    return StandardResponse(
        status="success",
        message="签名URL生成成功",
        data=result
    )


@router.post(
    "/signed-url",
    response_model=StandardResponse,
    summary="生成签名上传URL",
    description="返回直传上传地址与一次性令牌，客户端凭令牌直接上传到存储服务"
)
async def create_upload_url(
    request: SignedUploadUrlRequest,
    storage: BaseStorage = Depends(get_storage)
) -> StandardResponse:
    handler = StorageRequestHandler(storage)
    result = await handler.handle_signed_upload_url(bucket_id=request.bucket_id, path=request.path)

    return StandardResponse(
        status="success",
        message="签名上传URL生成成功",
        data=result
    )


@router.post(
    "/buckets/initialize",
    response_model=StandardResponse,
    summary="初始化存储桶",
    description="按预置配置创建缺失的存储桶，已存在的存储桶保持不变"
)
async def initialize(storage: BaseStorage = Depends(get_storage)) -> StandardResponse:
    handler = StorageRequestHandler(storage)
    report = await handler.handle_initialize_buckets()

    return StandardResponse(
        status="error" if report.errors else "success",
        message=f"新建 {len(report.created)} 个, 已存在 {len(report.existing)} 个, 失败 {len(report.errors)} 个",
        data=report
    )
