# Copyright (c) 2025 CoReason, Inc.
#
# This software is proprietary and dual-licensed.
# Licensed under the Prosperity Public License 3.0 (the "License").
# A copy of the license is available at https://prosperitylicense.com/versions/3.0.0
# For details, see the LICENSE file.
# Commercial use beyond a 30-day trial requires a separate license.
#
# Source Code: https://github.com/CoReason-AI/coreason_sandbox

"""
coreason-playground
"""

__version__ = "0.1.0"
__author__ = "Gowtham A Rao"
__email__ = "gowtham.rao@coreason.ai"

from .artifacts import decode_artifact, encode_artifact
from .assembler import assemble_archive, read_archive
from .config import PlaygroundConfig
from .exporter import export_zip
from .guard import ImportGuard
from .models import ArchiveFile, RunFailure, RunRequest, RunResult, VirtualArchive
from .playground import Playground, PlaygroundAsync
from .runtime import BuildRuntime
from .sandbox import BuildSandbox

__all__ = [
    "ArchiveFile",
    "BuildRuntime",
    "BuildSandbox",
    "ImportGuard",
    "Playground",
    "PlaygroundAsync",
    "PlaygroundConfig",
    "RunFailure",
    "RunRequest",
    "RunResult",
    "VirtualArchive",
    "assemble_archive",
    "decode_artifact",
    "encode_artifact",
    "export_zip",
    "read_archive",
]
