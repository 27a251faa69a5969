# Copyright (c) 2025 CoReason, Inc.
#
# This software is proprietary and dual-licensed.
# Licensed under the Prosperity Public License 3.0 (the "License").
# A copy of the license is available at https://prosperitylicense.com/versions/3.0.0
# For details, see the LICENSE file.
# Commercial use beyond a 30-day trial requires a separate license.
#
# Source Code: https://github.com/CoReason-AI/coreason_sandbox

import io
import zipfile

from coreason_playground.models import VirtualArchive

DOWNLOAD_FILENAME = "playground.zip"

# Fixed timestamp so the same archive always produces the same bytes.
_ZIP_EPOCH = (1980, 1, 1, 0, 0, 0)


def export_zip(archive: VirtualArchive) -> bytes:
    """Package an archive as a zip file mirroring its names and contents.

    An empty archive yields a valid, empty zip.

    Raises:
        InvalidArchivePathError: If an entry name is not a clean relative path.
    """
    archive.validate_paths()

    buffer = io.BytesIO()
    with zipfile.ZipFile(buffer, mode="w", compression=zipfile.ZIP_DEFLATED) as zf:
        for f in archive.files:
            info = zipfile.ZipInfo(f.name, date_time=_ZIP_EPOCH)
            info.compress_type = zipfile.ZIP_DEFLATED
            info.external_attr = 0o644 << 16
            zf.writestr(info, f.data)
    return buffer.getvalue()
