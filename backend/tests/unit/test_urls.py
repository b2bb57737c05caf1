"""
URL生成单元测试
"""

import time
from urllib.parse import parse_qs, urlparse

import pytest

from conference_storage.core.storage.exceptions import StorageErrorCode
from conference_storage.core.storage.models import ImageTransform, UploadOptions
from conference_storage.services.storage import (
    create_signed_upload_url,
    create_signed_url,
    create_signed_urls,
    get_public_url,
)
from tests.utils.storage_utils import TEST_BASE_URL, seed_bucket


@pytest.mark.unit
@pytest.mark.urls
class TestPublicUrl:

    def test_plain(self, storage):
        url = get_public_url(storage, "gallery", "2024/a.png")

        assert url == f"{TEST_BASE_URL}/storage/v1/object/public/gallery/2024/a.png"

    def test_download_filename(self, storage):
        url = get_public_url(storage, "gallery", "a.png", download="poster.png")

        assert parse_qs(urlparse(url).query) == {"download": ["poster.png"]}

    def test_transform_keeps_format(self, storage):
        """公开URL的变换参数原样转发，包括 format"""
        url = get_public_url(storage, "gallery", "a.png", transform=ImageTransform(width=200, format="webp"))

        parsed = urlparse(url)
        assert parsed.path == "/storage/v1/render/image/public/gallery/a.png"
        assert parse_qs(parsed.query) == {"width": ["200"], "format": ["webp"]}


@pytest.mark.unit
@pytest.mark.urls
class TestSignedUrls:

    @pytest.mark.asyncio
    async def test_expires_at_is_request_time_plus_expiry(self, storage):
        await seed_bucket(storage, "private", public=False)
        await storage.upload("private", "doc.pdf", b"pdf", UploadOptions())

        before = time.time()
        result = await create_signed_url(storage, "private", "doc.pdf", expires_in=600)
        after = time.time()

        assert result.ok
        assert result.data.path == "doc.pdf"
        assert "/storage/v1/object/sign/private/doc.pdf?token=" in result.data.signed_url
        assert before + 600 <= result.data.expires_at <= after + 600

    @pytest.mark.asyncio
    async def test_missing_object(self, storage):
        await seed_bucket(storage, "private", public=False)

        result = await create_signed_url(storage, "private", "missing.pdf")

        assert result.error.code == StorageErrorCode.FILE_NOT_FOUND

    @pytest.mark.asyncio
    async def test_batch_reports_per_path_errors(self, storage):
        await seed_bucket(storage, "private", public=False)
        await storage.upload("private", "a.pdf", b"pdf", UploadOptions())

        result = await create_signed_urls(storage, "private", ["a.pdf", "missing.pdf"], expires_in=60)

        assert result.ok
        assert result.data[0].signed_url
        assert result.data[0].error is None
        assert result.data[1].signed_url is None
        assert result.data[1].error

    @pytest.mark.asyncio
    async def test_batch_missing_bucket(self, storage):
        result = await create_signed_urls(storage, "missing", ["a.pdf"])

        assert result.error.code == StorageErrorCode.FILE_NOT_FOUND

    @pytest.mark.asyncio
    async def test_signed_upload_url(self, storage):
        await seed_bucket(storage, "user-uploads", public=False)

        result = await create_signed_upload_url(storage, "user-uploads", "2024/cv.pdf")

        assert result.data.path == "2024/cv.pdf"
        assert result.data.token
        assert "/storage/v1/object/upload/sign/user-uploads/2024/cv.pdf" in result.data.signed_url
