# Copyright (c) 2025 CoReason, Inc.
#
# This software is proprietary and dual-licensed.
# Licensed under the Prosperity Public License 3.0 (the "License").
# A copy of the license is available at https://prosperitylicense.com/versions/3.0.0
# For details, see the LICENSE file.
# Commercial use beyond a 30-day trial requires a separate license.
#
# Source Code: https://github.com/CoReason-AI/coreason_sandbox

import re
from typing import Literal
from urllib.parse import urlsplit

import anyio
from loguru import logger

from coreason_playground.config import PlaygroundConfig
from coreason_playground.exceptions import BuildCancellation, BuildFailure, ClientInputError, ScreeningRejection
from coreason_playground.exporter import export_zip
from coreason_playground.guard import ImportGuard
from coreason_playground.models import RunFailure, RunRequest, RunResult, VirtualArchive
from coreason_playground.runtimes.go import GoRuntime
from coreason_playground.sandbox import BuildSandbox
from coreason_playground.toolchain import Toolchain

DEFAULT_RUN_ID = 1
PARTIAL_TARGET = "runner"

_RUN_ID_PATTERN = re.compile(r"[+-]?[0-9]+")
_RUN_ID_MIN = -(2**63)
_RUN_ID_MAX = 2**63 - 1

View = Literal["partial", "full"]


def parse_run_id(value: str | None) -> int:
    """Parse the optional ``run-id`` parameter.

    Raises:
        ClientInputError: If a non-empty value is not a decimal integer that
            fits in 64 bits.
    """
    if value is None or value == "":
        return DEFAULT_RUN_ID
    if not _RUN_ID_PATTERN.fullmatch(value):
        raise ClientInputError("invalid run id", status_code=400)
    try:
        run_id = int(value)
    except ValueError as e:
        # Past the interpreter's digit limit.
        raise ClientInputError("invalid run id", status_code=400) from e
    if not _RUN_ID_MIN <= run_id <= _RUN_ID_MAX:
        raise ClientInputError("invalid run id", status_code=400)
    return run_id


def parse_origin(current_url: str | None) -> str:
    """Reduce the calling page URL to ``scheme://host``.

    Raises:
        ClientInputError: With status 500 if the URL cannot be parsed.
    """
    try:
        parts = urlsplit(current_url or "")
        # Accessing the port validates it.
        _ = parts.port
    except ValueError as e:
        logger.warning(f"Failed to parse current url: {e}")
        raise ClientInputError("failed to parse current url", status_code=500) from e
    # Userinfo is dropped; port and bracketed IPv6 hosts are kept.
    host = parts.netloc.rpartition("@")[2]
    return f"{parts.scheme}://{host}"


def select_view(target: str | None) -> View:
    """Pick the response shape from the id of the UI region that issued the request."""
    return "partial" if target == PARTIAL_TARGET else "full"


class PlaygroundAsync:
    """Async request orchestrator (The Core).

    Sequences screening, building and exporting for each request. Holds no
    per-request state, so one instance serves every concurrent request.
    """

    def __init__(
        self,
        config: PlaygroundConfig | None = None,
        guard: ImportGuard | None = None,
        sandbox: BuildSandbox | None = None,
        toolchain: Toolchain | None = None,
    ):
        """Initializes the PlaygroundAsync service.

        Args:
            config: Configuration for the playground.
            guard: Import screening; loads the packaged allow-list if None.
            sandbox: Build sandbox; built from ``toolchain`` if None.
            toolchain: Resolved Go toolchain; discovered from ``config`` if needed.
        """
        self.config = config or PlaygroundConfig()
        self.guard = guard or ImportGuard()
        if sandbox is None:
            toolchain = toolchain or Toolchain.discover(self.config)
            sandbox = BuildSandbox(
                GoRuntime(toolchain.go_path, toolchain.env),
                output_name=self.config.output_name,
                timeout=self.config.request_timeout,
            )
        self.toolchain = toolchain
        self.sandbox = sandbox

    def deadline(self) -> float:
        """Absolute deadline for a request accepted now."""
        return anyio.current_time() + self.config.request_timeout

    async def run(self, request: RunRequest, deadline: float | None = None) -> RunResult | RunFailure:
        """Screen and compile a request.

        Args:
            request: The run to perform.
            deadline: Absolute ``anyio.current_time()`` bound for the build.

        Returns:
            RunResult | RunFailure: Exactly one outcome.

        Raises:
            InfrastructureError: On server-side failures unrelated to the input.
        """
        if self.config.enable_audit_logging:
            logger.info(
                "Compile requested",
                run_id=request.run_id,
                files=request.archive.names(),
                archive_sha256=request.archive.digest(),
            )

        try:
            self.guard.screen(request.archive)
            encoded = await self.sandbox.build(request.archive, deadline)
        except ScreeningRejection as e:
            return RunFailure(run_id=request.run_id, diagnostic_text=str(e), kind="screening")
        except BuildFailure as e:
            return RunFailure(run_id=request.run_id, diagnostic_text=e.output, kind="build")
        except BuildCancellation as e:
            return RunFailure(run_id=request.run_id, diagnostic_text=str(e), kind="cancelled")

        return RunResult(run_id=request.run_id, encoded_artifact=encoded, origin_url=request.origin_url)

    def download(self, archive: VirtualArchive) -> bytes:
        """Package the submitted files as a zip.

        Raises:
            InvalidArchivePathError: If a file name is not a clean relative path.
        """
        return export_zip(archive)


class Playground:
    """Sync Facade for PlaygroundAsync (The Facade).

    Wraps PlaygroundAsync and executes methods via anyio.run.
    """

    def __init__(
        self,
        config: PlaygroundConfig | None = None,
        guard: ImportGuard | None = None,
        sandbox: BuildSandbox | None = None,
        toolchain: Toolchain | None = None,
    ):
        self._async = PlaygroundAsync(config, guard=guard, sandbox=sandbox, toolchain=toolchain)

    def run(self, request: RunRequest) -> RunResult | RunFailure:
        """Screens and compiles a request synchronously."""
        return anyio.run(self._async.run, request)

    def download(self, archive: VirtualArchive) -> bytes:
        return self._async.download(archive)
