import os
import signal
import subprocess
import time
from collections.abc import Mapping
from pathlib import Path

import anyio
from anyio.abc import Process
from loguru import logger

from coreason_playground.models import CompileOutput
from coreason_playground.runtime import BuildRuntime


class GoRuntime(BuildRuntime):
    """
    Local ``go build`` implementation of the BuildRuntime.
    """

    def __init__(self, go_path: str, env: Mapping[str, str] | None = None):
        self.go_path = go_path
        self.env = dict(env) if env is not None else dict(os.environ)

    def command(self, work_dir: Path, output_name: str) -> list[str]:
        # -trimpath rewrites the scratch directory out of file names and DWARF data.
        return [
            self.go_path,
            "build",
            "-o",
            output_name,
            f"-gcflags=-trimpath={work_dir}",
            f"-asmflags=-trimpath={work_dir}",
        ]

    async def compile(self, work_dir: Path, output_name: str) -> CompileOutput:
        """
        Run ``go build`` and capture stdout and stderr as one stream.
        """
        cmd = self.command(work_dir, output_name)
        logger.debug(f"Running {' '.join(cmd)}")

        start_time = time.time()
        async with await anyio.open_process(
            cmd,
            cwd=work_dir,
            env=self.env,
            stdin=subprocess.DEVNULL,
            stdout=subprocess.PIPE,
            stderr=subprocess.STDOUT,
            start_new_session=True,
        ) as process:
            try:
                chunks: list[bytes] = []
                if process.stdout is not None:
                    async for chunk in process.stdout:
                        chunks.append(chunk)
                exit_code = await process.wait()
            except BaseException:
                logger.warning(f"Compiler process {process.pid} interrupted, killing it")
                _kill(process)
                raise

        duration = time.time() - start_time
        output = b"".join(chunks).decode("utf-8", errors="replace")
        logger.info(f"go build exited with {exit_code} in {duration:.2f}s")
        return CompileOutput(output=output, exit_code=exit_code, execution_duration=duration)


def _kill(process: Process) -> None:
    """Kill the compiler and the tool processes it spawned."""
    if hasattr(os, "killpg"):
        try:
            os.killpg(process.pid, signal.SIGKILL)
            return
        except ProcessLookupError:
            return
        except OSError as e:
            logger.warning(f"Failed to kill process group {process.pid}: {e}")
    try:
        process.kill()
    except ProcessLookupError:
        pass
