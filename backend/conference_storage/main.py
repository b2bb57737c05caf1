"""
Conference Storage - FastAPI主应用
"""

from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from conference_storage.core.config import settings
from conference_storage.api.v1.router import api_router
from conference_storage.api.deps import get_storage
from conference_storage.core.log_utils import setup_logging, get_logger
from conference_storage.core.storage.exceptions import StorageError
from conference_storage.services.storage.buckets import initialize_buckets

# 初始化日志系统
setup_logging()

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(_: FastAPI):
    """应用生命周期管理"""
    logger.info("应用启动中...")

    if settings.storage_auto_init_buckets:
        result = await initialize_buckets(get_storage())
        if result.errors:
            logger.warning(
                "部分存储桶初始化失败",
                extra={"failed": [item.bucket for item in result.errors]}
            )
    else:
        logger.info("未启用存储桶自动初始化，可通过 scripts/init_buckets.py 手动执行")

    logger.info("应用启动完成")

    yield

    logger.info("应用关闭")


# 创建FastAPI应用实例
app = FastAPI(
    title=settings.project_name,
    version=settings.app_version,
    description="会议系统文件存储服务",
    openapi_url=f"{settings.api_v1_str}/openapi.json",
    docs_url=f"{settings.api_v1_str}/docs",
    redoc_url=f"{settings.api_v1_str}/redoc",
    lifespan=lifespan
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
    expose_headers=["*"]
)


def jsonable_errors(exc: RequestValidationError) -> list:
    return [
        {"loc": list(error.get("loc", ())), "msg": error.get("msg", "")}
        for error in exc.errors()
    ]


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(_: Request, exc: RequestValidationError) -> JSONResponse:
    """请求参数校验失败统一返回400"""
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"detail": "请求参数无效", "errors": jsonable_errors(exc)}
    )


@app.exception_handler(StorageError)
async def storage_exception_handler(_: Request, exc: StorageError) -> JSONResponse:
    """未被处理器转换的存储错误"""
    logger.error("存储错误未被处理", extra={"code": exc.code.value, "error": exc.message})
    return JSONResponse(
        status_code=exc.status_code or status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"detail": exc.message, "error": exc.to_dict()}
    )


# 注册API路由
app.include_router(api_router, prefix=settings.api_v1_str)


@app.get("/")
def read_root():
    """根路径"""
    return {
        "message": "Conference Storage API",
        "version": settings.app_version,
        "docs": f"{settings.api_v1_str}/docs"
    }


@app.get("/health")
def health_check():
    """健康检查"""
    return {"status": "healthy"}


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "conference_storage.main:app",
        host=settings.app_host,
        port=settings.app_port,
        reload=settings.app_debug,
        log_level=settings.log_level.lower()
    )
