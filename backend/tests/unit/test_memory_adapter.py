"""
内存存储适配器单元测试
验证其与远程存储服务一致的行为
"""

from urllib.parse import parse_qs, urlparse

import pytest

from conference_storage.core.storage.exceptions import RemoteStorageError
from conference_storage.core.storage.models import BucketOptions, ImageTransform, ListOptions, SortBy, UploadOptions
from tests.utils.storage_utils import TEST_BASE_URL, seed_bucket


@pytest.mark.unit
@pytest.mark.adapters
class TestInMemoryStorageAdapter:
    """InMemoryStorageAdapter 单元测试类"""

    @pytest.mark.asyncio
    async def test_bucket_lifecycle(self, storage):
        """测试存储桶的创建、更新、清空与删除"""
        assert await seed_bucket(storage, "gallery", public=False) == "gallery"

        await storage.update_bucket("gallery", BucketOptions(public=True, file_size_limit=10))
        bucket = await storage.get_bucket("gallery")
        assert bucket.public is True
        assert bucket.file_size_limit == 10

        await storage.upload("gallery", "a.png", b"1", UploadOptions())
        with pytest.raises(RemoteStorageError) as exc_info:
            await storage.delete_bucket("gallery")
        assert exc_info.value.status == 409

        await storage.empty_bucket("gallery")
        await storage.delete_bucket("gallery")
        assert await storage.list_buckets() == []

    @pytest.mark.asyncio
    async def test_duplicate_bucket(self, storage):
        await seed_bucket(storage, "gallery")

        with pytest.raises(RemoteStorageError, match="already exists"):
            await seed_bucket(storage, "gallery")

    @pytest.mark.asyncio
    async def test_missing_bucket(self, storage):
        with pytest.raises(RemoteStorageError, match="not found"):
            await storage.get_bucket("missing")

    @pytest.mark.asyncio
    async def test_upload_enforces_bucket_policy(self, storage):
        await seed_bucket(storage, "speakers", allowed_mime_types=["image/*"], file_size_limit=4)

        with pytest.raises(RemoteStorageError, match="too large"):
            await storage.upload("speakers", "a.png", b"12345", UploadOptions(content_type="image/png"))
        with pytest.raises(RemoteStorageError, match="mime type"):
            await storage.upload("speakers", "a.pdf", b"1", UploadOptions(content_type="application/pdf"))

        stored = await storage.upload("speakers", "a.png", b"1234", UploadOptions(content_type="image/png"))
        assert stored.path == "a.png"
        assert stored.key == "speakers/a.png"

    @pytest.mark.asyncio
    async def test_upload_without_upsert_rejects_existing(self, storage):
        await seed_bucket(storage)
        first = await storage.upload("gallery", "a.png", b"1", UploadOptions())

        with pytest.raises(RemoteStorageError, match="already exists"):
            await storage.upload("gallery", "a.png", b"2", UploadOptions())

        second = await storage.upload("gallery", "a.png", b"2", UploadOptions(upsert=True))
        assert second.id == first.id
        assert await storage.download("gallery", "a.png") == b"2"

    @pytest.mark.asyncio
    async def test_list_folders_and_files(self, storage):
        await seed_bucket(storage)
        for path in ("b.png", "a.png", "2024/x.png", "2024/y.png", "2023/z.png"):
            await storage.upload("gallery", path, b"data", UploadOptions(content_type="image/png"))

        root = await storage.list_objects("gallery", "", ListOptions())
        assert [entry.name for entry in root] == ["2023", "2024", "a.png", "b.png"]
        assert root[0].is_folder is True
        assert root[2].size == 4
        assert root[2].content_type == "image/png"

        nested = await storage.list_objects("gallery", "2024", ListOptions())
        assert [entry.path for entry in nested] == ["2024/x.png", "2024/y.png"]

    @pytest.mark.asyncio
    async def test_list_pagination_sort_and_search(self, storage):
        await seed_bucket(storage)
        for name in ("apple.png", "avocado.png", "banana.png", "cherry.png"):
            await storage.upload("gallery", name, b"1", UploadOptions())

        page = await storage.list_objects("gallery", "", ListOptions(limit=2, offset=1))
        assert [entry.name for entry in page] == ["avocado.png", "banana.png"]

        descending = await storage.list_objects(
            "gallery", "", ListOptions(sort_by=SortBy(column="name", order="desc"))
        )
        assert descending[0].name == "cherry.png"

        found = await storage.list_objects("gallery", "", ListOptions(search="a"))
        assert [entry.name for entry in found] == ["apple.png", "avocado.png"]

    @pytest.mark.asyncio
    async def test_move_copy_remove(self, storage):
        await seed_bucket(storage)
        await storage.upload("gallery", "a.png", b"1", UploadOptions())

        assert await storage.copy("gallery", "a.png", "b.png") == "b.png"
        await storage.move("gallery", "a.png", "c.png")

        with pytest.raises(RemoteStorageError, match="not found"):
            await storage.download("gallery", "a.png")

        removed = await storage.remove("gallery", ["b.png", "c.png", "missing.png"])
        assert sorted(entry.path for entry in removed) == ["b.png", "c.png"]

    def test_public_url(self, storage):
        url = storage.get_public_url("gallery", "2024/my photo.png")

        assert url == f"{TEST_BASE_URL}/storage/v1/object/public/gallery/2024/my%20photo.png"

    def test_public_url_with_transform_and_download(self, storage):
        url = storage.get_public_url(
            "gallery", "a.png", download="a.png", transform=ImageTransform(width=320, format="webp", quality=80)
        )
        parsed = urlparse(url)

        assert parsed.path == "/storage/v1/render/image/public/gallery/a.png"
        assert parse_qs(parsed.query) == {
            "width": ["320"], "format": ["webp"], "quality": ["80"], "download": ["a.png"]
        }

    @pytest.mark.asyncio
    async def test_signed_urls(self, storage):
        await seed_bucket(storage, public=False)
        await storage.upload("gallery", "a.png", b"1", UploadOptions())

        signed = await storage.create_signed_url("gallery", "a.png", 60)
        assert "/storage/v1/object/sign/gallery/a.png?token=" in signed

        entries = await storage.create_signed_urls("gallery", ["a.png", "missing.png"], 60)
        assert entries[0].signed_url is not None
        assert entries[0].error is None
        assert entries[1].signed_url is None
        assert "not found" in entries[1].error

        upload_url = await storage.create_signed_upload_url("gallery", "new.png")
        assert upload_url.token in upload_url.signed_url
        assert "/object/upload/sign/gallery/new.png" in upload_url.signed_url
