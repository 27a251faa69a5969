# Copyright (c) 2025 CoReason, Inc.
#
# This software is proprietary and dual-licensed.
# Licensed under the Prosperity Public License 3.0 (the "License").
# A copy of the license is available at https://prosperitylicense.com/versions/3.0.0
# For details, see the LICENSE file.
# Commercial use beyond a 30-day trial requires a separate license.
#
# Source Code: https://github.com/CoReason-AI/coreason_sandbox

import base64
import binascii
from pathlib import Path

import aiofiles  # type: ignore[import-untyped]

from coreason_playground.exceptions import InfrastructureError


def encode_artifact(data: bytes) -> str:
    """Encode a binary as padded standard Base64 text, safe to embed in HTML."""
    return base64.b64encode(data).decode("ascii")


def decode_artifact(encoded: str) -> bytes:
    """Inverse of :func:`encode_artifact`.

    Raises:
        ValueError: If ``encoded`` is not valid standard Base64.
    """
    try:
        return base64.b64decode(encoded, validate=True)
    except binascii.Error as e:
        raise ValueError(f"Invalid artifact encoding: {e}") from e


async def read_artifact(file_path: Path) -> str:
    """Read a build output from disk and return it encoded.

    Args:
        file_path: The compiled binary inside the build directory.

    Returns:
        str: The Base64 encoded content.

    Raises:
        InfrastructureError: If the file cannot be read.
    """
    try:
        async with aiofiles.open(file_path, "rb") as f:
            content = await f.read()
    except OSError as e:
        raise InfrastructureError(f"failed to open build file: {e}") from e
    return encode_artifact(content)
