"""Tests for filesystem utilities module."""

from picshift.utils.fs import (
    atomic_write_bytes,
    ensure_directory,
    format_size,
    get_unique_path,
    safe_filename,
)


class TestEnsureDirectory:
    """Tests for ensure_directory function."""

    def test_creates_nested_directories(self, tmp_path):
        """Test creating nested directories."""
        nested_dir = tmp_path / "level1" / "level2"
        result = ensure_directory(nested_dir)
        assert result == nested_dir
        assert nested_dir.is_dir()

    def test_existing_directory(self, tmp_path):
        """Test with existing directory."""
        assert ensure_directory(tmp_path) == tmp_path


class TestSafeFilename:
    """Tests for safe_filename function."""

    def test_removes_path_separators(self):
        assert safe_filename("file/name.webp") == "file_name.webp"
        assert safe_filename("file\\name.webp") == "file_name.webp"

    def test_removes_special_characters(self):
        assert safe_filename("a:b*c?d.png") == "a_b_c_d.png"
        assert safe_filename("file\0name") == "filename"

    def test_strips_dots_and_spaces(self):
        assert safe_filename("..hidden.avif ") == "hidden.avif"

    def test_truncates_but_keeps_extension(self):
        result = safe_filename("x" * 300 + ".webp", max_length=50)
        assert len(result) == 50
        assert result.endswith(".webp")


class TestGetUniquePath:
    """Tests for get_unique_path function."""

    def test_returns_free_path(self, tmp_path):
        path = tmp_path / "photo.webp"
        assert get_unique_path(path) == path

    def test_appends_counter(self, tmp_path):
        (tmp_path / "photo.webp").write_bytes(b"1")
        (tmp_path / "photo_1.webp").write_bytes(b"2")

        assert get_unique_path(tmp_path / "photo.webp") == tmp_path / "photo_2.webp"


class TestAtomicWriteBytes:
    """Tests for atomic_write_bytes function."""

    def test_writes_and_leaves_no_temp_files(self, tmp_path):
        target = tmp_path / "out" / "photo.webp"

        result = atomic_write_bytes(target, b"RIFF....WEBP")

        assert result == target
        assert target.read_bytes() == b"RIFF....WEBP"
        assert [p.name for p in target.parent.iterdir()] == ["photo.webp"]

    def test_overwrites_existing(self, tmp_path):
        target = tmp_path / "photo.webp"
        target.write_bytes(b"old")

        atomic_write_bytes(target, b"new")

        assert target.read_bytes() == b"new"


class TestFormatSize:
    """Tests for format_size function."""

    def test_bytes(self):
        assert format_size(512) == "512.0 B"

    def test_kilobytes(self):
        assert format_size(1536) == "1.5 KB"

    def test_megabytes(self):
        assert format_size(5 * 1024 * 1024) == "5.0 MB"
