"""
存储API接口单元测试
使用TestClient调用路由，存储服务替换为内存适配器
"""

import asyncio
import re
from urllib.parse import quote

import pytest
from fastapi.testclient import TestClient

from conference_storage.api.deps import get_storage
from conference_storage.core.storage.models import UploadOptions
from conference_storage.main import app
from conference_storage.services.storage.buckets import initialize_buckets
from conference_storage.services.storage.handler import content_disposition

API = "/api/v1/storage"


@pytest.fixture
def initialized_storage(storage):
    """按预置配置初始化好存储桶的内存存储"""
    asyncio.run(initialize_buckets(storage))
    asyncio.run(storage.upload("gallery", "2024/photo.png", b"png-bytes", UploadOptions(content_type="image/png")))
    asyncio.run(storage.upload("user-uploads", "cv.pdf", b"pdf-bytes", UploadOptions(content_type="application/pdf")))
    return storage


@pytest.fixture
def client(initialized_storage):
    app.dependency_overrides[get_storage] = lambda: initialized_storage
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.mark.unit
@pytest.mark.api
class TestUploadEndpoint:

    def test_upload(self, client):
        response = client.post(
            f"{API}/upload",
            files={"file": ("speaker.png", b"x" * 100, "image/png")},
            data={"bucket_id": "gallery", "path": "2024/speaker.png"}
        )

        assert response.status_code == 200
        body = response.json()
        assert body["status"] == "success"
        assert body["data"]["path"] == "2024/speaker.png"
        assert body["data"]["full_path"].endswith("/object/public/gallery/2024/speaker.png")

    def test_upload_generates_path(self, client):
        response = client.post(
            f"{API}/upload",
            files={"file": ("My Photo.PNG", b"x" * 100, "image/png")},
            data={"bucket_id": "gallery"}
        )

        assert response.status_code == 200
        assert re.match(r"^\d+-[0-9a-z]{6}-my-photo\.png$", response.json()["data"]["path"])

    def test_upload_conflict_without_upsert(self, client):
        response = client.post(
            f"{API}/upload",
            files={"file": ("photo.png", b"x", "image/png")},
            data={"bucket_id": "gallery", "path": "2024/photo.png"}
        )

        assert response.status_code == 409

    def test_upload_with_upsert(self, client):
        response = client.post(
            f"{API}/upload",
            files={"file": ("photo.png", b"x", "image/png")},
            data={"bucket_id": "gallery", "path": "2024/photo.png", "upsert": "true"}
        )

        assert response.status_code == 200

    def test_upload_disallowed_type(self, client):
        response = client.post(
            f"{API}/upload",
            files={"file": ("doc.pdf", b"x", "application/pdf")},
            data={"bucket_id": "gallery"}
        )

        assert response.status_code == 400
        assert 'File type "application/pdf" is not allowed' in response.json()["detail"]

    def test_upload_unknown_bucket(self, client):
        response = client.post(
            f"{API}/upload",
            files={"file": ("photo.png", b"x", "image/png")},
            data={"bucket_id": "unknown"}
        )

        assert response.status_code == 400
        assert response.json()["detail"] == "Invalid bucket"

    def test_upload_missing_bucket_field(self, client):
        response = client.post(f"{API}/upload", files={"file": ("photo.png", b"x", "image/png")})

        assert response.status_code == 400
        assert response.json()["detail"] == "请求参数无效"


@pytest.mark.unit
@pytest.mark.api
class TestDownloadEndpoint:

    def test_public_url(self, client):
        response = client.get(f"{API}/download", params={"bucket_id": "gallery", "path": "2024/photo.png"})

        assert response.status_code == 200
        assert response.json()["data"]["url"].endswith("/object/public/gallery/2024/photo.png")

    def test_public_url_for_private_bucket(self, client):
        response = client.get(f"{API}/download", params={"bucket_id": "user-uploads", "path": "cv.pdf"})

        assert response.status_code == 400

    def test_signed(self, client):
        response = client.get(
            f"{API}/download",
            params={"bucket_id": "user-uploads", "path": "cv.pdf", "mode": "signed", "expires_in": 120}
        )

        data = response.json()["data"]
        assert response.status_code == 200
        assert "/object/sign/user-uploads/cv.pdf" in data["signed_url"]
        assert data["path"] == "cv.pdf"

    def test_blob(self, client):
        response = client.get(
            f"{API}/download", params={"bucket_id": "gallery", "path": "2024/photo.png", "mode": "blob"}
        )

        assert response.status_code == 200
        assert response.content == b"png-bytes"
        assert response.headers["content-type"] == "image/png"
        assert response.headers["content-disposition"] == "attachment; filename=\"photo.png\"; filename*=UTF-8''photo.png"

    def test_blob_non_ascii_filename(self, client, initialized_storage):
        """中文文件名通过 filename* 传递，ASCII回退名替换为下划线"""
        asyncio.run(initialized_storage.upload(
            "user-uploads", "talks/演讲稿.pdf", b"pdf-bytes", UploadOptions(content_type="application/pdf")
        ))

        response = client.get(
            f"{API}/download", params={"bucket_id": "user-uploads", "path": "talks/演讲稿.pdf", "mode": "blob"}
        )

        assert response.status_code == 200
        assert response.content == b"pdf-bytes"
        assert response.headers["content-disposition"] == (
            f"attachment; filename=\"___.pdf\"; filename*=UTF-8''{quote('演讲稿.pdf')}"
        )

    def test_blob_missing_file(self, client):
        response = client.get(
            f"{API}/download", params={"bucket_id": "gallery", "path": "missing.png", "mode": "blob"}
        )

        assert response.status_code == 404
        assert response.json()["detail"] == "The requested file or bucket was not found"

    def test_invalid_mode(self, client):
        response = client.get(
            f"{API}/download", params={"bucket_id": "gallery", "path": "2024/photo.png", "mode": "stream"}
        )

        assert response.status_code == 400
        assert response.json()["detail"] == "Invalid mode"


@pytest.mark.unit
@pytest.mark.api
class TestListEndpoint:

    def test_list(self, client):
        response = client.get(f"{API}/list", params={"bucket_id": "gallery", "path": "2024"})

        body = response.json()
        assert response.status_code == 200
        assert [item["name"] for item in body["data"]["files"]] == ["photo.png"]
        assert body["data"]["files"][0]["size"] == 9
        assert body["data"]["pagination"] == {"limit": 100, "offset": 0, "has_more": False}

    def test_has_more_when_page_full(self, client):
        response = client.get(f"{API}/list", params={"bucket_id": "gallery", "path": "2024", "limit": 1})

        assert response.json()["data"]["pagination"]["has_more"] is True

    @pytest.mark.parametrize("limit", [0, 1001])
    def test_limit_bounds(self, client, limit):
        response = client.get(f"{API}/list", params={"bucket_id": "gallery", "limit": limit})

        assert response.status_code == 400

    def test_negative_offset(self, client):
        response = client.get(f"{API}/list", params={"bucket_id": "gallery", "offset": -1})

        assert response.status_code == 400

    def test_invalid_sort(self, client):
        response = client.get(
            f"{API}/list", params={"bucket_id": "gallery", "sort_by": "size", "order": "asc"}
        )

        assert response.status_code == 400
        assert response.json()["detail"] == "Invalid sort options"


@pytest.mark.unit
@pytest.mark.api
class TestDeleteEndpoint:

    def test_delete(self, client, initialized_storage):
        response = client.post(f"{API}/delete", json={"bucket_id": "gallery", "paths": ["2024/photo.png"]})

        assert response.status_code == 200
        assert response.json()["data"] == {"deleted": ["2024/photo.png"]}

    def test_empty_paths(self, client):
        response = client.post(f"{API}/delete", json={"bucket_id": "gallery", "paths": []})

        assert response.status_code == 400
        assert response.json()["detail"] == "File paths are required"

    def test_too_many_paths(self, client):
        paths = [f"{index}.png" for index in range(101)]

        response = client.post(f"{API}/delete", json={"bucket_id": "gallery", "paths": paths})

        assert response.status_code == 400

    def test_unknown_bucket(self, client):
        response = client.post(f"{API}/delete", json={"bucket_id": "unknown", "paths": ["a.png"]})

        assert response.status_code == 400
        assert response.json()["detail"] == "Invalid bucket"


@pytest.mark.unit
@pytest.mark.api
class TestSignedUrlEndpoints:

    def test_single(self, client):
        response = client.get(
            f"{API}/signed-url",
            params={"bucket_id": "gallery", "path": "2024/photo.png", "width": 200, "download": "true"}
        )

        data = response.json()["data"]
        assert response.status_code == 200
        assert "/render/image/sign/gallery/2024/photo.png" in data["signed_url"]
        assert "width=200" in data["signed_url"]

    def test_batch(self, client):
        response = client.get(
            f"{API}/signed-url",
            params={"bucket_id": "gallery", "paths": "2024/photo.png, missing.png"}
        )

        entries = response.json()["data"]
        assert [entry["path"] for entry in entries] == ["2024/photo.png", "missing.png"]
        assert entries[0]["signed_url"]
        assert entries[1]["error"]

    def test_batch_limit(self, client):
        paths = ",".join(f"{index}.png" for index in range(51))

        response = client.get(f"{API}/signed-url", params={"bucket_id": "gallery", "paths": paths})

        assert response.status_code == 400

    @pytest.mark.parametrize("expires_in", [0, 604801])
    def test_expiry_bounds(self, client, expires_in):
        response = client.get(
            f"{API}/signed-url",
            params={"bucket_id": "gallery", "path": "2024/photo.png", "expires_in": expires_in}
        )

        assert response.status_code == 400
        assert response.json()["detail"] == "Expiration must be between 1 second and 7 days"

    def test_missing_path(self, client):
        response = client.get(f"{API}/signed-url", params={"bucket_id": "gallery"})

        assert response.status_code == 400
        assert response.json()["detail"] == "File path is required"

    def test_signed_upload_url(self, client):
        response = client.post(f"{API}/signed-url", json={"bucket_id": "user-uploads", "path": "new/cv.pdf"})

        data = response.json()["data"]
        assert response.status_code == 200
        assert data["path"] == "new/cv.pdf"
        assert data["token"]


@pytest.mark.unit
@pytest.mark.api
class TestBucketInitializeEndpoint:

    def test_initialize_existing(self, client):
        response = client.post(f"{API}/buckets/initialize")

        body = response.json()
        assert body["status"] == "success"
        assert body["data"]["created"] == []
        assert "gallery" in body["data"]["existing"]

    def test_initialize_fresh(self, storage):
        app.dependency_overrides[get_storage] = lambda: storage
        try:
            response = TestClient(app).post(f"{API}/buckets/initialize")
        finally:
            app.dependency_overrides.clear()

        assert "gallery" in response.json()["data"]["created"]


@pytest.mark.unit
@pytest.mark.api
def test_health():
    response = TestClient(app).get("/health")

    assert response.json() == {"status": "healthy"}


@pytest.mark.unit
@pytest.mark.api
class TestContentDisposition:
    """附件下载响应头"""

    def test_quotes_escaped_in_fallback(self):
        header = content_disposition('say "hi".pdf')

        assert header == "attachment; filename=\"say \\\"hi\\\".pdf\"; filename*=UTF-8''say%20%22hi%22.pdf"

    def test_header_is_latin1_encodable(self):
        header = content_disposition("Café 演讲.pdf")

        header.encode("latin-1")
        assert 'filename="Caf_ __.pdf"' in header
        assert "filename*=UTF-8''Caf%C3%A9%20%E6%BC%94%E8%AE%B2.pdf" in header
