# Copyright (c) 2025 CoReason, Inc.
#
# This software is proprietary and dual-licensed.
# Licensed under the Prosperity Public License 3.0 (the "License").
# A copy of the license is available at https://prosperitylicense.com/versions/3.0.0
# For details, see the LICENSE file.
# Commercial use beyond a 30-day trial requires a separate license.
#
# Source Code: https://github.com/CoReason-AI/coreason_sandbox

from abc import ABC, abstractmethod
from pathlib import Path

from coreason_playground.models import CompileOutput


class BuildRuntime(ABC):
    """
    Abstract base class for compiler backends.
    Follows the Strategy Pattern.
    """

    @abstractmethod
    async def compile(self, work_dir: Path, output_name: str) -> CompileOutput:
        """Compile the sources in a directory.

        Spawns exactly one compiler process rooted at ``work_dir``. The process
        must be killed if the calling task is cancelled.

        Args:
            work_dir: The populated build directory.
            output_name: File name the binary is written to, relative to ``work_dir``.

        Returns:
            CompileOutput: The exit code and merged output of the compiler.
        """
        pass  # pragma: no cover
