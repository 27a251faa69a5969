# Copyright (c) 2025 CoReason, Inc.
#
# This software is proprietary and dual-licensed.
# Licensed under the Prosperity Public License 3.0 (the "License").
# A copy of the license is available at https://prosperitylicense.com/versions/3.0.0
# For details, see the LICENSE file.
# Commercial use beyond a 30-day trial requires a separate license.
#
# Source Code: https://github.com/CoReason-AI/coreason_sandbox

from typing import Protocol

from jinja2 import Environment, PackageLoader

from coreason_playground.models import RunFailure, RunResult


class Renderer(Protocol):
    """Turns run outcomes into HTML bodies."""

    def render_result(self, result: RunResult, wasm_exec_js: str, partial: bool) -> str:
        """Render a successful run as a full document, or as a fragment when ``partial``."""
        ...

    def render_failure(self, failure: RunFailure) -> str:
        """Render a rejected or failed run."""
        ...


class Jinja2Renderer:
    """Renderer backed by the templates packaged with coreason-playground."""

    def __init__(self, env: Environment | None = None):
        self.env = env or Environment(
            loader=PackageLoader("coreason_playground", "templates"),
            autoescape=True,
        )

    def render_result(self, result: RunResult, wasm_exec_js: str, partial: bool) -> str:
        document = self.env.get_template("run.html.j2").render(result=result, wasm_exec_js=wasm_exec_js)
        if not partial:
            return document
        # The fragment embeds the full document in a sandboxed iframe.
        return self.env.get_template("run_item.html.j2").render(result=result, source_document=document)

    def render_failure(self, failure: RunFailure) -> str:
        return self.env.get_template("build_failure.html.j2").render(failure=failure)
