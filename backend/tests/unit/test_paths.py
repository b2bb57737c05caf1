"""
路径与文件名工具单元测试
"""

import re

import pytest

from conference_storage.core.storage.models import FilePolicy, FileUpload
from conference_storage.core.storage.utils.paths import (
    format_bytes,
    generate_unique_filename,
    get_file_extension,
    join_paths,
    mime_type_allowed,
    sanitize_path,
    validate_file,
)


@pytest.mark.unit
@pytest.mark.paths
class TestSanitizePath:
    """sanitize_path 单元测试类"""

    @pytest.mark.parametrize("raw,expected", [
        ("/speakers//2024/photo.png/", "speakers/2024/photo.png"),
        ("a\\b\\c.txt", "a/b/c.txt"),
        ("my folder/ü file!.jpg", "my-folder/--file-.jpg"),
        ("", ""),
        ("///", ""),
    ])
    def test_sanitize(self, raw, expected):
        assert sanitize_path(raw) == expected

    @pytest.mark.parametrize("raw", [
        "/a//b/", "x y/z?.png", "..\\..\\etc", "already/clean-path_1.txt", "中文/文件.pdf",
    ])
    def test_idempotent(self, raw):
        """测试规范化是幂等的"""
        once = sanitize_path(raw)
        assert sanitize_path(once) == once


@pytest.mark.unit
@pytest.mark.paths
class TestJoinPaths:
    """join_paths 单元测试类"""

    def test_strips_and_skips_empty(self):
        assert join_paths("/speakers/", "", "2024/", "/photo.png") == "speakers/2024/photo.png"

    def test_all_empty(self):
        assert join_paths("", "/", "") == ""

    def test_reconstructs_normalized_path(self):
        """测试按斜杠拆分后再拼接得到原路径"""
        path = "speakers/2024/keynote/photo.png"
        assert join_paths(*path.split("/")) == path


@pytest.mark.unit
@pytest.mark.paths
class TestFileNames:
    """文件名工具单元测试类"""

    @pytest.mark.parametrize("name,expected", [
        ("photo.PNG", "png"),
        ("archive.tar.gz", "gz"),
        ("folder/report.pdf", "pdf"),
        ("README", ""),
    ])
    def test_get_file_extension(self, name, expected):
        assert get_file_extension(name) == expected

    def test_unique_filename_format(self):
        name = generate_unique_filename("My Photo.JPG")

        assert re.fullmatch(r"my-photo-\d+-[0-9a-z]{6}\.jpg", name)

    def test_unique_filename_without_extension(self):
        name = generate_unique_filename("README")

        assert re.fullmatch(r"readme-\d+-[0-9a-z]{6}", name)

    def test_unique_filename_empty_base(self):
        assert re.fullmatch(r"file-\d+-[0-9a-z]{6}", generate_unique_filename(""))
        assert re.fullmatch(r"----\d+-[0-9a-z]{6}\.png", generate_unique_filename("!!!.png"))

    def test_unique_filename_never_repeats(self):
        """测试连续调用不会得到相同结果"""
        names = [generate_unique_filename("photo.png") for _ in range(200)]

        assert len(set(names)) == len(names)

    def test_unique_filename_timestamps_increase(self):
        first = int(generate_unique_filename("a.png").split("-")[1])
        second = int(generate_unique_filename("a.png").split("-")[1])

        assert second > first


@pytest.mark.unit
@pytest.mark.paths
class TestValidateFile:
    """validate_file 单元测试类"""

    def _file(self, size=1024, content_type="image/png"):
        return FileUpload(name="photo.png", data=b"x" * size, content_type=content_type)

    def test_no_policy_always_valid(self):
        assert validate_file(self._file(size=10 ** 6)).valid is True
        assert validate_file(self._file(), FilePolicy()).valid is True

    def test_size_limit_exceeded(self):
        result = validate_file(self._file(size=2048), FilePolicy(file_size_limit=1024))

        assert result.valid is False
        assert result.error == "File size exceeds limit of 1 KB"

    def test_size_at_limit_is_valid(self):
        assert validate_file(self._file(size=1024), FilePolicy(file_size_limit=1024)).valid is True

    def test_mime_type_not_allowed(self):
        result = validate_file(
            self._file(content_type="application/pdf"),
            FilePolicy(allowed_mime_types=["image/jpeg", "image/png"])
        )

        assert result.valid is False
        assert result.error == 'File type "application/pdf" is not allowed. Allowed types: image/jpeg, image/png'

    def test_empty_allowlist_allows_everything(self):
        assert validate_file(self._file(content_type="text/html"), FilePolicy(allowed_mime_types=[])).valid is True

    def test_size_checked_before_type(self):
        result = validate_file(
            self._file(size=4096, content_type="text/html"),
            FilePolicy(allowed_mime_types=["image/png"], file_size_limit=1024)
        )

        assert "size" in result.error

    @pytest.mark.parametrize("content_type,allowed,expected", [
        ("image/png", ["image/*"], True),
        ("video/mp4", ["image/*"], False),
        ("application/zip", ["*/*"], True),
        ("image/png", ["image/png"], True),
        ("image/pngx", ["image/png"], False),
    ])
    def test_wildcards(self, content_type, allowed, expected):
        assert mime_type_allowed(content_type, allowed) is expected


@pytest.mark.unit
@pytest.mark.paths
class TestFormatBytes:
    """format_bytes 单元测试类"""

    @pytest.mark.parametrize("size,expected", [
        (0, "0 Bytes"),
        (-5, "0 Bytes"),
        (500, "500 Bytes"),
        (1024, "1 KB"),
        (1536, "1.5 KB"),
        (5 * 1024 * 1024, "5 MB"),
        (1024 ** 3, "1 GB"),
        (1024 ** 5, "1024 TB"),
    ])
    def test_format(self, size, expected):
        assert format_bytes(size) == expected

    def test_decimals(self):
        assert format_bytes(1234, decimals=1) == "1.2 KB"
        assert format_bytes(1536, decimals=0) == "2 KB"

    def test_monotonic(self):
        """测试换算后的数值随字节数单调不减"""
        units = {"Bytes": 1, "KB": 1024, "MB": 1024 ** 2, "GB": 1024 ** 3, "TB": 1024 ** 4}

        def magnitude(text):
            value, unit = text.split(" ")
            return float(value) * units[unit]

        sizes = [0, 1, 1023, 1024, 1025, 10 ** 6, 10 ** 9, 10 ** 12, 10 ** 13]
        magnitudes = [magnitude(format_bytes(size)) for size in sizes]
        assert magnitudes == sorted(magnitudes)
