# Copyright (c) 2025 CoReason, Inc.
#
# This software is proprietary and dual-licensed.
# Licensed under the Prosperity Public License 3.0 (the "License").
# A copy of the license is available at https://prosperitylicense.com/versions/3.0.0
# For details, see the LICENSE file.
# Commercial use beyond a 30-day trial requires a separate license.
#
# Source Code: https://github.com/CoReason-AI/coreason_sandbox

from collections.abc import Callable, Iterable
from typing import Any, Protocol

from coreason_playground.models import ArchiveFile, VirtualArchive

FILENAME_FIELD = "filename"


class FormLike(Protocol):
    """The subset of a parsed form (e.g. starlette ``FormData``) the assembler reads."""

    def getlist(self, key: Any) -> list[Any]: ...

    def get(self, key: Any, default: Any = None) -> Any: ...


def assemble_archive(filenames: Iterable[str], lookup: Callable[[str], Any]) -> VirtualArchive:
    """Build a VirtualArchive with one entry per distinct designated filename.

    Args:
        filenames: Field names designated as files, in submission order.
        lookup: Returns the submitted value of a field, or None when absent.

    Returns:
        VirtualArchive: Entries ordered by first designation. Values that are
        missing or not text (e.g. file uploads) become empty content.
    """
    files: list[ArchiveFile] = []
    seen: set[str] = set()
    for name in filenames:
        if name in seen:
            continue
        seen.add(name)
        value = lookup(name)
        data = value.encode("utf-8") if isinstance(value, str) else b""
        files.append(ArchiveFile(name=name, data=data))
    return VirtualArchive(files=tuple(files))


def read_archive(form: FormLike) -> VirtualArchive:
    """Assemble the archive from the ``filename`` list field of a parsed form."""
    filenames = [name for name in form.getlist(FILENAME_FIELD) if isinstance(name, str)]
    return assemble_archive(filenames, form.get)
