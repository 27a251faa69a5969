import os
import shutil
import stat
from collections.abc import Callable
from pathlib import Path
from typing import Any

import anyio
import pytest

from coreason_playground.guard import ImportGuard
from coreason_playground.models import ArchiveFile, CompileOutput, VirtualArchive
from coreason_playground.runtime import BuildRuntime

WASM_MAGIC = b"\x00asm\x01\x00\x00\x00"

HELLO_GO = """package main

import (
\t"fmt"
\t"syscall/js"
)

func main() {
\tfmt.Println("hello, playground")
\t_ = js.Global()
}
"""

FAKE_GO = """#!/bin/sh
if [ "$1" = "env" ]; then
  case "$2" in
    GOROOT) echo "$FAKE_GOROOT" ;;
    GOVERSION) echo "go1.99-fake" ;;
  esac
  exit 0
fi
case "$FAKE_GO_MODE" in
  fail)
    echo "./main.go:9:2: undefined: foo"
    echo "note: from stderr" >&2
    exit 1
    ;;
  sleep)
    sleep 30
    exit 0
    ;;
  *)
    printf '\\000asm\\001\\000\\000\\000' > "$3"
    echo "args: $*"
    exit 0
    ;;
esac
"""


class RecordingRuntime(BuildRuntime):
    """In-process compiler double that records every invocation."""

    def __init__(
        self,
        exit_code: int = 0,
        output: str = "",
        binary: bytes | None = WASM_MAGIC,
        delay: float = 0.0,
    ):
        self.exit_code = exit_code
        self.output = output
        self.binary = binary
        self.delay = delay
        self.calls: list[Path] = []
        self.seen_files: dict[str, bytes] = {}

    async def compile(self, work_dir: Path, output_name: str) -> CompileOutput:
        self.calls.append(work_dir)
        self.seen_files = {
            p.relative_to(work_dir).as_posix(): p.read_bytes() for p in sorted(work_dir.rglob("*")) if p.is_file()
        }
        if self.delay:
            await anyio.sleep(self.delay)
        if self.exit_code == 0 and self.binary is not None:
            (work_dir / output_name).write_bytes(self.binary)
        return CompileOutput(output=self.output, exit_code=self.exit_code)


@pytest.fixture
def recording_runtime() -> Callable[..., RecordingRuntime]:
    return RecordingRuntime


@pytest.fixture
def guard() -> ImportGuard:
    return ImportGuard({"fmt", "math/rand", "syscall/js", "time"})


@pytest.fixture
def make_archive() -> Callable[..., VirtualArchive]:
    def _make(**files: str) -> VirtualArchive:
        return VirtualArchive(files=tuple(ArchiveFile(name=k, data=v.encode()) for k, v in files.items()))

    return _make


@pytest.fixture
def hello_source() -> str:
    return HELLO_GO


@pytest.fixture
def hello_archive() -> VirtualArchive:
    return VirtualArchive(
        files=(
            ArchiveFile(name="go.mod", data=b"module example.com/hello\n\ngo 1.21\n"),
            ArchiveFile(name="main.go", data=HELLO_GO.encode()),
        )
    )


@pytest.fixture
def fake_go(tmp_path: Path) -> Path:
    """A shell script standing in for the go binary; behaviour is picked by FAKE_GO_MODE."""
    if os.name != "posix":
        pytest.skip("fake go script requires a POSIX shell")
    script = tmp_path / "bin" / "go"
    script.parent.mkdir()
    script.write_text(FAKE_GO)
    script.chmod(script.stat().st_mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
    return script


@pytest.fixture
def fake_goroot(tmp_path: Path) -> Path:
    root = tmp_path / "goroot"
    (root / "lib" / "wasm").mkdir(parents=True)
    (root / "lib" / "wasm" / "wasm_exec.js").write_text("// wasm_exec.js\n")
    return root


@pytest.fixture
def fake_go_env(fake_goroot: Path) -> Callable[[str], dict[str, Any]]:
    def _env(mode: str = "ok") -> dict[str, Any]:
        return {**os.environ, "FAKE_GO_MODE": mode, "FAKE_GOROOT": str(fake_goroot)}

    return _env


@pytest.fixture
def real_go() -> str:
    path = shutil.which("go")
    if path is None:
        pytest.skip("go toolchain not installed")
    return path
