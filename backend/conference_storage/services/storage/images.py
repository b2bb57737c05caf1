"""
图片优化URL
响应式图片集、优化图片与缩略图URL均由远程服务按URL参数实时处理，
本地不读取也不处理任何图片数据
"""

from typing import Optional, Sequence

from conference_storage.core.storage.abc import BaseStorage
from conference_storage.core.storage.models import ImageTransform, OptimizedImage, ResponsiveImageSet
from conference_storage.services.storage.urls import get_public_url

DEFAULT_RESPONSIVE_WIDTHS = (320, 640, 768, 1024, 1280, 1920)


def get_transformed_url(storage: BaseStorage, bucket_id: str, path: str, transform: ImageTransform) -> str:
    return get_public_url(storage, bucket_id, path, transform=transform)


def generate_responsive_images(
    storage: BaseStorage,
    bucket_id: str,
    path: str,
    widths: Sequence[int] = DEFAULT_RESPONSIVE_WIDTHS,
    format: str = "webp",
    quality: int = 80
) -> ResponsiveImageSet:
    """
    生成响应式图片集

    按传入顺序为每个宽度生成变换URL，srcset 形如 ``"<url> 320w, <url> 640w"``。
    需要升序时由调用方保证 widths 已排序。
    """
    variants = [
        OptimizedImage(
            url=get_transformed_url(
                storage, bucket_id, path, ImageTransform(width=width, format=format, quality=quality)
            ),
            width=width,
            format=format,
            quality=quality,
        )
        for width in widths
    ]
    return ResponsiveImageSet(
        original=get_public_url(storage, bucket_id, path),
        srcset=", ".join(f"{variant.url} {variant.width}w" for variant in variants),
        variants=variants,
    )


def get_optimized_image_url(
    storage: BaseStorage,
    bucket_id: str,
    path: str,
    width: Optional[int] = None,
    height: Optional[int] = None,
    quality: int = 80,
    format: str = "webp"
) -> str:
    return get_transformed_url(
        storage, bucket_id, path,
        ImageTransform(width=width, height=height, quality=quality, format=format)
    )


def get_thumbnail_url(storage: BaseStorage, bucket_id: str, path: str, size: int = 150) -> str:
    """固定尺寸的正方形缩略图（cover裁剪、webp、质量70）"""
    return get_transformed_url(
        storage, bucket_id, path,
        ImageTransform(width=size, height=size, resize="cover", format="webp", quality=70)
    )
