import io
import zipfile
from typing import Any

import pytest

from coreason_playground.exceptions import InvalidArchivePathError
from coreason_playground.exporter import export_zip
from coreason_playground.models import ArchiveFile, VirtualArchive


def _entries(body: bytes) -> dict[str, bytes]:
    with zipfile.ZipFile(io.BytesIO(body)) as zf:
        assert zf.testzip() is None
        return {name: zf.read(name) for name in zf.namelist()}


def test_export_preserves_names_and_contents(make_archive: Any) -> None:
    body = export_zip(make_archive(**{"a.txt": "x", "b/c.txt": "y"}))

    assert _entries(body) == {"a.txt": b"x", "b/c.txt": b"y"}


def test_export_keeps_archive_order_and_binary_content() -> None:
    archive = VirtualArchive(
        files=(
            ArchiveFile(name="z.bin", data=bytes(range(256))),
            ArchiveFile(name="a/empty.go", data=b""),
        )
    )

    with zipfile.ZipFile(io.BytesIO(export_zip(archive))) as zf:
        assert zf.namelist() == ["z.bin", "a/empty.go"]
        assert zf.read("z.bin") == bytes(range(256))
        assert zf.read("a/empty.go") == b""


def test_export_empty_archive_is_a_valid_zip() -> None:
    body = export_zip(VirtualArchive())

    assert zipfile.is_zipfile(io.BytesIO(body))
    assert _entries(body) == {}


def test_export_is_deterministic(make_archive: Any) -> None:
    archive = make_archive(**{"main.go": "package main\n"})
    assert export_zip(archive) == export_zip(archive)


def test_export_rejects_unclean_paths(make_archive: Any) -> None:
    with pytest.raises(InvalidArchivePathError):
        export_zip(make_archive(**{"../../etc/passwd": "x"}))
