# Copyright (c) 2025 CoReason, Inc.
#
# This software is proprietary and dual-licensed.
# Licensed under the Prosperity Public License 3.0 (the "License").
# A copy of the license is available at https://prosperitylicense.com/versions/3.0.0
# For details, see the LICENSE file.
# Commercial use beyond a 30-day trial requires a separate license.
#
# Source Code: https://github.com/CoReason-AI/coreason_sandbox

import hashlib
from pathlib import PurePosixPath

from pydantic import BaseModel, ConfigDict

from coreason_playground.exceptions import InvalidArchivePathError


class ArchiveFile(BaseModel):
    """A single named blob in a VirtualArchive.

    Attributes:
        name: Slash-separated relative path of the file.
        data: The raw file content.
    """

    model_config = ConfigDict(frozen=True)

    name: str
    data: bytes = b""

    @property
    def suffix(self) -> str:
        return PurePosixPath(self.name).suffix


class VirtualArchive(BaseModel):
    """An ordered, immutable, in-memory source tree.

    Attributes:
        files: The archive entries in submission order.
    """

    model_config = ConfigDict(frozen=True)

    files: tuple[ArchiveFile, ...] = ()

    def __len__(self) -> int:
        return len(self.files)

    def names(self) -> list[str]:
        return [f.name for f in self.files]

    def digest(self) -> str:
        """Stable sha256 over every name and content, used for audit logging."""
        h = hashlib.sha256()
        for f in self.files:
            h.update(f.name.encode("utf-8"))
            h.update(b"\x00")
            h.update(len(f.data).to_bytes(8, "big"))
            h.update(f.data)
        return h.hexdigest()

    def validate_paths(self) -> None:
        """Check that every entry can be laid out as a relative file tree.

        Raises:
            InvalidArchivePathError: On the first name that is empty, absolute,
                contains a backslash, an empty, ``.`` or ``..`` element, or is
                also used as the directory of another entry.
        """
        seen: set[str] = set()
        for f in self.files:
            _check_relative_path(f.name)
            seen.add(f.name)

        for f in self.files:
            parts = f.name.split("/")
            for i in range(1, len(parts)):
                parent = "/".join(parts[:i])
                if parent in seen:
                    raise InvalidArchivePathError(parent, f"also used as the directory of {f.name!r}")


def _check_relative_path(name: str) -> None:
    if not name:
        raise InvalidArchivePathError(name, "empty name")
    if "\\" in name:
        raise InvalidArchivePathError(name, "backslash in name")
    if name.startswith("/"):
        raise InvalidArchivePathError(name, "absolute path")
    for element in name.split("/"):
        if element in ("", ".", ".."):
            raise InvalidArchivePathError(name, "path escapes or is not clean")
