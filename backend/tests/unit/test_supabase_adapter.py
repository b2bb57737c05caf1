"""
Supabase存储适配器单元测试
使用MagicMock替代SDK客户端，验证参数转换与返回值解析
"""

import pytest
from unittest.mock import MagicMock, patch

from conference_storage.core.config.storage_config import SupabaseStorageConfig
from conference_storage.core.storage.adapters.supabase import SupabaseStorageAdapter
from conference_storage.core.storage.exceptions import ConfigurationError
from conference_storage.core.storage.models import BucketOptions, ImageTransform, ListOptions, SortBy, UploadOptions


@pytest.mark.unit
@pytest.mark.adapters
class TestSupabaseStorageAdapter:
    """SupabaseStorageAdapter 单元测试类"""

    @pytest.fixture
    def mock_config(self):
        """创建mock存储配置"""
        return SupabaseStorageConfig(url="https://project.supabase.co", key="service-role-key")

    @pytest.fixture
    def mock_client(self):
        """SDK存储客户端，from_() 始终返回同一个存储桶客户端"""
        client = MagicMock()
        client.bucket_api = MagicMock()
        client.from_.return_value = client.bucket_api
        return client

    @pytest.fixture
    def adapter(self, mock_config, mock_client):
        with patch('conference_storage.core.storage.adapters.supabase.get_storage_config', return_value=mock_config), \
             patch.object(SupabaseStorageAdapter, '_create_client', return_value=mock_client):
            return SupabaseStorageAdapter()

    def test_init_with_missing_config(self):
        """测试配置缺失时抛出配置错误"""
        with patch('conference_storage.core.storage.adapters.supabase.get_storage_config',
                   return_value=SupabaseStorageConfig(url="", key="")):
            with pytest.raises(ConfigurationError):
                SupabaseStorageAdapter()

    @pytest.mark.asyncio
    async def test_get_bucket(self, adapter, mock_client):
        mock_client.get_bucket.return_value = {
            "id": "gallery",
            "name": "gallery",
            "public": True,
            "allowed_mime_types": ["image/png"],
            "file_size_limit": 1024,
            "created_at": "2024-05-01T10:00:00Z",
        }

        bucket = await adapter.get_bucket("gallery")

        assert bucket.id == "gallery"
        assert bucket.public is True
        assert bucket.policy.file_size_limit == 1024
        assert bucket.created_at.year == 2024
        mock_client.get_bucket.assert_called_once_with("gallery")

    @pytest.mark.asyncio
    async def test_create_bucket_passes_options(self, adapter, mock_client):
        mock_client.create_bucket.return_value = {"name": "gallery"}

        name = await adapter.create_bucket("gallery", BucketOptions(public=False, file_size_limit=10))

        assert name == "gallery"
        mock_client.create_bucket.assert_called_once_with(
            "gallery", options={"public": False, "file_size_limit": 10}
        )

    @pytest.mark.asyncio
    async def test_upload_file_options(self, adapter, mock_client):
        """测试上传参数转换为SDK的 file_options"""
        mock_client.bucket_api.upload.return_value = MagicMock(path="a.png", full_path="gallery/a.png", id="obj-1")

        stored = await adapter.upload(
            "gallery", "a.png", b"data", UploadOptions(content_type="image/png", upsert=True)
        )

        assert stored.path == "a.png"
        assert stored.id == "obj-1"
        assert stored.key == "gallery/a.png"
        mock_client.from_.assert_called_with("gallery")
        mock_client.bucket_api.upload.assert_called_once_with(
            "a.png",
            b"data",
            file_options={"cache-control": "3600", "content-type": "image/png", "upsert": "true"}
        )

    @pytest.mark.asyncio
    async def test_list_options(self, adapter, mock_client):
        mock_client.bucket_api.list.return_value = [
            {"name": "a.png", "id": "1", "metadata": {"size": 10, "mimetype": "image/png"}},
            {"name": "2024", "id": None, "metadata": None},
        ]

        files = await adapter.list_objects(
            "gallery", "speakers",
            ListOptions(limit=10, offset=5, sort_by=SortBy(column="created_at", order="desc"), search="a")
        )

        assert [item.path for item in files] == ["speakers/a.png", "speakers/2024"]
        assert files[0].size == 10
        assert files[1].is_folder is True
        mock_client.bucket_api.list.assert_called_once_with(
            "speakers",
            {"limit": 10, "offset": 5, "sortBy": {"column": "created_at", "order": "desc"}, "search": "a"}
        )

    @pytest.mark.asyncio
    async def test_download_with_transform(self, adapter, mock_client):
        mock_client.bucket_api.download.return_value = b"image"

        data = await adapter.download("gallery", "a.png", ImageTransform(width=100, quality=50))

        assert data == b"image"
        mock_client.bucket_api.download.assert_called_once_with(
            "a.png", {"transform": {"width": 100, "quality": 50}}
        )

    @pytest.mark.asyncio
    async def test_copy_returns_new_path(self, adapter, mock_client):
        mock_client.bucket_api.copy.return_value = {"message": "Copied"}

        assert await adapter.copy("gallery", "a.png", "b.png") == "b.png"

    @pytest.mark.asyncio
    async def test_create_signed_url(self, adapter, mock_client):
        mock_client.bucket_api.create_signed_url.return_value = {"signedURL": "https://signed"}

        url = await adapter.create_signed_url("gallery", "a.png", 60, download=True)

        assert url == "https://signed"
        mock_client.bucket_api.create_signed_url.assert_called_once_with("a.png", 60, {"download": True})

    @pytest.mark.asyncio
    async def test_create_signed_urls(self, adapter, mock_client):
        mock_client.bucket_api.create_signed_urls.return_value = [
            {"path": "a.png", "signedURL": "https://a", "error": None},
            {"path": "b.png", "signedURL": None, "error": "Either the object does not exist"},
        ]

        entries = await adapter.create_signed_urls("gallery", ["a.png", "b.png"], 60)

        assert entries[0].signed_url == "https://a"
        assert entries[1].error == "Either the object does not exist"

    @pytest.mark.asyncio
    async def test_create_signed_upload_url(self, adapter, mock_client):
        mock_client.bucket_api.create_signed_upload_url.return_value = {
            "signed_url": "https://upload", "token": "tok", "path": "a.png"
        }

        result = await adapter.create_signed_upload_url("gallery", "a.png")

        assert result.signed_url == "https://upload"
        assert result.token == "tok"

    def test_public_url(self, adapter, mock_client):
        mock_client.bucket_api.get_public_url.return_value = "https://public"

        url = adapter.get_public_url("gallery", "a.png", transform=ImageTransform(width=320))

        assert url == "https://public"
        mock_client.bucket_api.get_public_url.assert_called_once_with("a.png", {"transform": {"width": 320}})

    @pytest.mark.asyncio
    async def test_sdk_error_propagates(self, adapter, mock_client):
        """测试SDK异常原样抛出，由操作函数统一映射"""
        mock_client.get_bucket.side_effect = RuntimeError("Bucket not found")

        with pytest.raises(RuntimeError, match="Bucket not found"):
            await adapter.get_bucket("missing")
