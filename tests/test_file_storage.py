"""Tests for contract_tracker/file_storage.py."""

import io

import pytest
from werkzeug.datastructures import FileStorage

from contract_tracker.file_storage import LocalFileStorage, UnsafePathError


@pytest.fixture
def storage(tmp_path):
    return LocalFileStorage(tmp_path / "uploads")


def _upload(name="signed contract.pdf", content=b"%PDF-1.4"):
    return FileStorage(stream=io.BytesIO(content), filename=name)


class TestLocalFileStorage:
    def test_save_prefixes_timestamp_and_sanitizes(self, storage):
        reference = storage.save(_upload())
        stamp, _, name = reference.partition("-")
        assert stamp.isdigit()
        assert name == "signed_contract.pdf"
        assert (storage.upload_dir / reference).read_bytes() == b"%PDF-1.4"

    def test_save_strips_directories_from_name(self, storage):
        reference = storage.save(_upload(name="../../etc/passwd"))
        assert "/" not in reference
        assert ".." not in reference

    def test_resolve_existing(self, storage):
        reference = storage.save(_upload())
        assert storage.resolve(reference) == (storage.upload_dir / reference).resolve()

    def test_resolve_missing(self, storage):
        assert storage.resolve("123-missing.pdf") is None

    def test_double_dot_inside_a_name_is_allowed(self, storage):
        reference = storage.save(_upload(name="report..v2.pdf"))
        assert reference.endswith("-report..v2.pdf")
        assert storage.resolve(reference) == (storage.upload_dir / reference).resolve()
        assert storage.delete(reference)
        assert storage.resolve(reference) is None

    def test_resolve_rejects_traversal(self, storage):
        with pytest.raises(UnsafePathError):
            storage.resolve("../contracts.db")

    def test_resolve_rejects_nested_traversal(self, storage):
        with pytest.raises(UnsafePathError):
            storage.resolve("reports/../../contracts.db")

    def test_resolve_rejects_absolute_paths(self, storage):
        with pytest.raises(UnsafePathError):
            storage.resolve("/etc/passwd")

    def test_delete(self, storage):
        reference = storage.save(_upload())
        assert storage.delete(reference)
        assert storage.resolve(reference) is None

    def test_delete_missing_is_ignored(self, storage):
        assert storage.delete("123-gone.pdf") is False
