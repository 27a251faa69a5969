# Copyright (c) 2025 CoReason, Inc.
#
# This software is proprietary and dual-licensed.
# Licensed under the Prosperity Public License 3.0 (the "License").
# A copy of the license is available at https://prosperitylicense.com/versions/3.0.0
# For details, see the LICENSE file.
# Commercial use beyond a 30-day trial requires a separate license.
#
# Source Code: https://github.com/CoReason-AI/coreason_sandbox

import shutil
import tempfile
from functools import partial
from pathlib import Path

import aiofiles  # type: ignore[import-untyped]
import aiofiles.os  # type: ignore[import-untyped]
import anyio
from loguru import logger

from coreason_playground.artifacts import read_artifact
from coreason_playground.exceptions import BuildCancellation, BuildFailure, InfrastructureError
from coreason_playground.models import CompileOutput, VirtualArchive
from coreason_playground.runtime import BuildRuntime


class BuildSandbox:
    """Runs one compile per call inside a fresh, single-use scratch directory.

    The directory is owned by exactly one call and removed before the call
    returns, whatever the outcome. Archive contents are trusted here: import
    screening must already have run.
    """

    def __init__(
        self,
        runtime: BuildRuntime,
        output_name: str = "main.wasm",
        timeout: float = 30.0,
        temp_root: Path | None = None,
    ):
        """Initializes the BuildSandbox.

        Args:
            runtime: Compiler backend invoked once per build.
            output_name: Binary file name passed to the compiler.
            timeout: Deadline in seconds used when the caller supplies none.
            temp_root: Parent of the scratch directories (system default if None).
        """
        self.runtime = runtime
        self.output_name = output_name
        self.timeout = timeout
        self.temp_root = temp_root

    async def build(self, archive: VirtualArchive, deadline: float | None = None) -> str:
        """Compile an archive and return the Base64 encoded binary.

        Args:
            archive: Screened sources to compile.
            deadline: Absolute ``anyio.current_time()`` by which the build must
                finish. Defaults to now plus ``timeout``.

        Returns:
            str: The encoded binary.

        Raises:
            BuildFailure: If the compiler exits non-zero.
            BuildCancellation: If the deadline passes first.
            InfrastructureError: If the scratch directory cannot be created,
                populated, or the binary cannot be read.
        """
        caller_deadline = deadline is not None
        if deadline is None:
            deadline = anyio.current_time() + self.timeout

        work_dir = await self._create_work_dir()
        try:
            outcome: CompileOutput | None = None
            encoded: str | None = None
            with anyio.CancelScope(deadline=deadline) as scope:
                await self._materialize(archive, work_dir)
                outcome = await self.runtime.compile(work_dir, self.output_name)
                if outcome.exit_code == 0:
                    encoded = await read_artifact(work_dir / self.output_name)

            if scope.cancelled_caught or outcome is None:
                if caller_deadline:
                    logger.warning("Build exceeded the request deadline")
                    raise BuildCancellation()
                logger.warning(f"Build exceeded its deadline ({self.timeout:g}s)")
                raise BuildCancellation(self.timeout)
            if outcome.exit_code != 0 or encoded is None:
                raise BuildFailure(outcome.output, outcome.exit_code)
            return encoded
        finally:
            with anyio.CancelScope(shield=True):
                await self._remove_work_dir(work_dir)

    async def _create_work_dir(self) -> Path:
        mkdtemp = partial(tempfile.mkdtemp, prefix="playground-", dir=self.temp_root)
        try:
            path = await anyio.to_thread.run_sync(mkdtemp)
        except OSError as e:
            logger.error(f"Failed to create temporary directory: {e}")
            raise InfrastructureError("failed to create temporary directory") from e
        return Path(path).resolve()

    async def _materialize(self, archive: VirtualArchive, work_dir: Path) -> None:
        try:
            for f in archive.files:
                target = work_dir / f.name
                await aiofiles.os.makedirs(target.parent, exist_ok=True)
                async with aiofiles.open(target, "wb") as out:
                    await out.write(f.data)
        except OSError as e:
            logger.error(f"Failed to write archive into {work_dir}: {e}")
            raise InfrastructureError("failed to prepare build directory") from e

    async def _remove_work_dir(self, work_dir: Path) -> None:
        try:
            await anyio.to_thread.run_sync(shutil.rmtree, work_dir)
        except OSError as e:
            logger.error(f"Failed to remove build directory {work_dir}: {e}")
