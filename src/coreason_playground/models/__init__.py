# src/coreason_playground/models/__init__.py

"""
Data models for the playground request pipeline.
"""

from .archive import ArchiveFile, VirtualArchive
from .results import CompileOutput, FailureKind, RunFailure, RunRequest, RunResult

__all__ = ["ArchiveFile", "VirtualArchive", "CompileOutput", "FailureKind", "RunFailure", "RunRequest", "RunResult"]
