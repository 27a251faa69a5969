# Copyright (c) 2025 CoReason, Inc.
#
# This software is proprietary and dual-licensed.
# Licensed under the Prosperity Public License 3.0 (the "License").
# A copy of the license is available at https://prosperitylicense.com/versions/3.0.0
# For details, see the LICENSE file.
# Commercial use beyond a 30-day trial requires a separate license.
#
# Source Code: https://github.com/CoReason-AI/coreason_sandbox

"""Startup-time discovery of the Go toolchain and its process environment."""

import os
import shutil
import subprocess
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path

from loguru import logger

from coreason_playground.config import PlaygroundConfig
from coreason_playground.exceptions import ToolchainNotFoundError

_WASM_EXEC_CANDIDATES = ("lib/wasm/wasm_exec.js", "misc/wasm/wasm_exec.js")


def go_env_override() -> dict[str, str]:
    """Environment every compile runs with: a js/wasm target and no network fetches."""
    return {
        "GOOS": "js",
        "GOARCH": "wasm",
        "CGO_ENABLED": "0",
        "GOTOOLCHAIN": "local",
        "GOPROXY": "off",
    }


def merge_env(base: Mapping[str, str], *overrides: Mapping[str, str]) -> dict[str, str]:
    """Return ``base`` with each override mapping applied in order; later keys win."""
    env = dict(base)
    for override in overrides:
        env.update(override)
    return env


def resolve_go_executable(name: str = "go") -> str:
    """Resolve the Go executable on PATH, or accept an explicit existing path.

    Raises:
        ToolchainNotFoundError: If no executable can be found.
    """
    path = shutil.which(name)
    if path is None:
        raise ToolchainNotFoundError(f"Go executable not found: {name}")
    return path


def _go_env(go_path: str, key: str, env: Mapping[str, str]) -> str:
    try:
        proc = subprocess.run(
            [go_path, "env", key],
            check=True,
            capture_output=True,
            text=True,
            env=dict(env),
        )
    except (OSError, subprocess.CalledProcessError) as e:
        raise ToolchainNotFoundError(f"Failed to query go env {key}: {e}") from e
    return proc.stdout.strip()


def load_wasm_exec_js(go_path: str, env: Mapping[str, str], explicit: Path | None = None) -> str:
    """Read the ``wasm_exec.js`` loader shipped with the toolchain.

    Raises:
        ToolchainNotFoundError: If the script cannot be located.
    """
    if explicit is not None:
        candidates = [explicit]
    else:
        goroot = Path(_go_env(go_path, "GOROOT", env))
        candidates = [goroot / rel for rel in _WASM_EXEC_CANDIDATES]

    for candidate in candidates:
        if candidate.is_file():
            return candidate.read_text(encoding="utf-8")
    raise ToolchainNotFoundError(f"wasm_exec.js not found (looked in: {', '.join(map(str, candidates))})")


@dataclass(frozen=True)
class Toolchain:
    """Process-wide, read-only view of the compiler: path, environment and loader script."""

    go_path: str
    env: Mapping[str, str] = field(default_factory=dict)
    wasm_exec_js: str = ""
    version: str = "unknown"

    @classmethod
    def discover(cls, config: PlaygroundConfig) -> "Toolchain":
        """Resolve everything the build pipeline needs, once, at startup."""
        go_path = resolve_go_executable(config.go_executable)
        env = merge_env(os.environ, go_env_override(), config.env_overrides)
        wasm_exec_js = load_wasm_exec_js(go_path, env, config.wasm_exec_js_path)
        version = _go_env(go_path, "GOVERSION", env) or "unknown"
        logger.info(f"Using Go toolchain {version} at {go_path}")
        return cls(go_path=go_path, env=env, wasm_exec_js=wasm_exec_js, version=version)
