# Copyright (c) 2025 CoReason, Inc.
#
# This software is proprietary and dual-licensed.
# Licensed under the Prosperity Public License 3.0 (the "License").
# A copy of the license is available at https://prosperitylicense.com/versions/3.0.0
# For details, see the LICENSE file.
# Commercial use beyond a 30-day trial requires a separate license.
#
# Source Code: https://github.com/CoReason-AI/coreason_sandbox

"""Data models for compile requests and their outcomes."""

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

from coreason_playground.models.archive import VirtualArchive

FailureKind = Literal["screening", "build", "cancelled"]


class RunRequest(BaseModel):
    """A single compile request."""

    model_config = ConfigDict(frozen=True)

    run_id: int = Field(1, description="Opaque correlation token echoed back to the page.")
    archive: VirtualArchive = Field(default_factory=VirtualArchive)
    origin_url: str = Field("", description="scheme://host of the calling page.")


class CompileOutput(BaseModel):
    """Raw outcome of one compiler invocation."""

    output: str = Field(..., description="Merged standard output and standard error.")
    exit_code: int
    execution_duration: float = 0.0


class RunResult(BaseModel):
    """A successful build."""

    run_id: int
    encoded_artifact: str = Field(..., description="Base64 encoded WebAssembly binary.")
    origin_url: str


class RunFailure(BaseModel):
    """A rejected or failed build."""

    run_id: int
    diagnostic_text: str = Field(..., description="Rejection reason or the compiler's raw output.")
    kind: FailureKind = "build"
