from typing import Any

import pytest
from pydantic import ValidationError

from coreason_playground.exceptions import InvalidArchivePathError
from coreason_playground.models import ArchiveFile, RunFailure, RunRequest, RunResult, VirtualArchive


def test_archive_is_immutable() -> None:
    archive = VirtualArchive(files=(ArchiveFile(name="main.go", data=b"package main"),))

    with pytest.raises(ValidationError):
        archive.files = ()  # type: ignore[misc]
    with pytest.raises(ValidationError):
        archive.files[0].data = b""  # type: ignore[misc]


def test_archive_names_and_len(make_archive: Any) -> None:
    archive = make_archive(**{"main.go": "package main", "b/c.txt": "y"})

    assert len(archive) == 2
    assert archive.names() == ["main.go", "b/c.txt"]
    assert archive.files[0].suffix == ".go"
    assert archive.files[1].suffix == ".txt"


def test_digest_depends_on_names_and_content(make_archive: Any) -> None:
    a = make_archive(**{"a.txt": "x"})
    b = make_archive(**{"a.txt": "x"})
    c = make_archive(**{"a.txt": "y"})
    d = make_archive(**{"b.txt": "x"})

    assert a.digest() == b.digest()
    assert a.digest() != c.digest()
    assert a.digest() != d.digest()


@pytest.mark.parametrize("name", ["a.txt", "dir/sub/file.go", "go.mod", ".hidden"])
def test_validate_paths_accepts_clean_relative_names(name: str) -> None:
    VirtualArchive(files=(ArchiveFile(name=name),)).validate_paths()


@pytest.mark.parametrize(
    "name",
    ["", "/etc/passwd", "../escape.go", "a/../../b", "a//b", "./main.go", "dir/", "a\\b"],
)
def test_validate_paths_rejects_unclean_names(name: str) -> None:
    with pytest.raises(InvalidArchivePathError):
        VirtualArchive(files=(ArchiveFile(name=name),)).validate_paths()


def test_validate_paths_rejects_file_used_as_directory() -> None:
    archive = VirtualArchive(files=(ArchiveFile(name="a"), ArchiveFile(name="a/b.go")))

    with pytest.raises(InvalidArchivePathError, match="directory"):
        archive.validate_paths()


def test_empty_archive_is_valid() -> None:
    VirtualArchive().validate_paths()


def test_run_models_defaults() -> None:
    request = RunRequest()
    assert request.run_id == 1
    assert len(request.archive) == 0

    failure = RunFailure(run_id=3, diagnostic_text="boom")
    assert failure.kind == "build"

    result = RunResult(run_id=3, encoded_artifact="AA==", origin_url="https://example.com")
    assert result.model_dump() == {"run_id": 3, "encoded_artifact": "AA==", "origin_url": "https://example.com"}
