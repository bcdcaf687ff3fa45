"""
Unit tests for the file store.
"""

from pathlib import Path

import pytest

from httpengine.errors import NotFoundError, StorageError
from httpengine.handlers.files import FileStore


class TestFileStore:
    """Tests for FileStore reads and writes."""

    def test_missing_directory(self, tmp_path: Path):
        with pytest.raises(ValueError):
            FileStore(str(tmp_path / "missing"))

    def test_read(self, storage_dir: Path):
        (storage_dir / "data.bin").write_bytes(b"\x00\xffbinary")

        assert FileStore(str(storage_dir)).read("data.bin") == b"\x00\xffbinary"

    def test_read_missing(self, storage_dir: Path):
        with pytest.raises(NotFoundError):
            FileStore(str(storage_dir)).read("nope")

    def test_read_directory_is_storage_error(self, storage_dir: Path):
        (storage_dir / "sub").mkdir()

        with pytest.raises(StorageError):
            FileStore(str(storage_dir)).read("sub")

    def test_read_too_large(self, storage_dir: Path):
        (storage_dir / "big").write_bytes(b"x" * 101)

        with pytest.raises(StorageError):
            FileStore(str(storage_dir), max_file_size=100).read("big")

    def test_read_at_limit(self, storage_dir: Path):
        (storage_dir / "edge").write_bytes(b"x" * 100)

        assert len(FileStore(str(storage_dir), max_file_size=100).read("edge")) == 100

    def test_write_creates(self, storage_dir: Path):
        FileStore(str(storage_dir)).write("out.txt", b"payload")

        assert (storage_dir / "out.txt").read_bytes() == b"payload"

    def test_write_truncates(self, storage_dir: Path):
        (storage_dir / "out.txt").write_bytes(b"0123456789")

        FileStore(str(storage_dir)).write("out.txt", b"ab")

        assert (storage_dir / "out.txt").read_bytes() == b"ab"

    def test_write_into_directory_is_storage_error(self, storage_dir: Path):
        (storage_dir / "sub").mkdir()

        with pytest.raises(StorageError):
            FileStore(str(storage_dir)).write("sub", b"x")

    @pytest.mark.parametrize("name", ["..", "", "a\0b"])
    def test_unusable_names(self, storage_dir: Path, name: str):
        store = FileStore(str(storage_dir))

        with pytest.raises(NotFoundError):
            store.read(name)
        with pytest.raises(NotFoundError):
            store.write(name, b"x")

    def test_names_with_spaces(self, storage_dir: Path):
        store = FileStore(str(storage_dir))
        store.write("my file.txt", b"ok")

        assert store.read("my file.txt") == b"ok"

    def test_name_outside_latin1_is_not_found(self, storage_dir: Path):
        """Names come from decoded request bytes, so every char is <= U+00FF."""
        with pytest.raises(NotFoundError):
            FileStore(str(storage_dir)).read("€")
