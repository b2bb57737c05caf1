"""
存储服务模块
存储桶管理、文件操作、URL生成与图片优化，所有操作返回 StorageResult
"""

from conference_storage.services.storage.buckets import (
    create_bucket,
    delete_bucket,
    empty_bucket,
    get_bucket,
    get_bucket_stats,
    initialize_buckets,
    list_buckets,
    update_bucket,
)
from conference_storage.services.storage.files import (
    copy_file,
    delete_file,
    delete_files,
    download_file,
    list_files,
    move_file,
    upload_file,
    upload_file_with_validation,
)
from conference_storage.services.storage.images import (
    generate_responsive_images,
    get_optimized_image_url,
    get_thumbnail_url,
    get_transformed_url,
)
from conference_storage.services.storage.urls import (
    create_signed_upload_url,
    create_signed_url,
    create_signed_urls,
    get_public_url,
)

__all__ = [
    # 存储桶
    'list_buckets',
    'get_bucket',
    'create_bucket',
    'update_bucket',
    'delete_bucket',
    'empty_bucket',
    'initialize_buckets',
    'get_bucket_stats',
    # 文件
    'upload_file',
    'upload_file_with_validation',
    'download_file',
    'move_file',
    'copy_file',
    'delete_file',
    'delete_files',
    'list_files',
    # URL
    'get_public_url',
    'create_signed_url',
    'create_signed_urls',
    'create_signed_upload_url',
    # 图片
    'get_transformed_url',
    'generate_responsive_images',
    'get_optimized_image_url',
    'get_thumbnail_url',
]
