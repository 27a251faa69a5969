# Copyright (c) 2025 CoReason, Inc.
#
# This software is proprietary and dual-licensed.
# Licensed under the Prosperity Public License 3.0 (the "License").
# A copy of the license is available at https://prosperitylicense.com/versions/3.0.0
# For details, see the LICENSE file.
# Commercial use beyond a 30-day trial requires a separate license.
#
# Source Code: https://github.com/CoReason-AI/coreason_sandbox

from typing import Any

import anyio
from fastapi import FastAPI, Request
from fastapi.responses import HTMLResponse, PlainTextResponse, Response
from loguru import logger

from coreason_playground import __version__
from coreason_playground.assembler import read_archive
from coreason_playground.config import PlaygroundConfig
from coreason_playground.exceptions import (
    BuildCancellation,
    ClientInputError,
    InfrastructureError,
    ScreeningRejection,
    ToolchainNotFoundError,
)
from coreason_playground.exporter import DOWNLOAD_FILENAME
from coreason_playground.models import RunFailure, RunRequest
from coreason_playground.playground import DEFAULT_RUN_ID, PlaygroundAsync, parse_origin, parse_run_id, select_view
from coreason_playground.rendering import Jinja2Renderer, Renderer

RUN_ID_FIELD = "run-id"
CURRENT_URL_HEADER = "HX-Current-URL"
TARGET_HEADER = "HX-Target"


def create_app(
    config: PlaygroundConfig | None = None,
    playground: PlaygroundAsync | None = None,
    renderer: Renderer | None = None,
) -> FastAPI:
    """Build the FastAPI application exposing ``/run`` and ``/download``.

    Args:
        config: Configuration; read from the environment if None.
        playground: Orchestrator; constructed (and the toolchain discovered) if None.
        renderer: HTML renderer; the packaged Jinja2 templates if None.
    """
    config = config or PlaygroundConfig()
    playground = playground or PlaygroundAsync(config)
    renderer = renderer or Jinja2Renderer()
    toolchain = playground.toolchain
    wasm_exec_js = toolchain.wasm_exec_js if toolchain is not None else ""

    app = FastAPI(title="coreason-playground", version=__version__)

    @app.exception_handler(ClientInputError)
    async def client_input_error(request: Request, exc: ClientInputError) -> Response:
        return PlainTextResponse(exc.message, status_code=exc.status_code)

    @app.exception_handler(InfrastructureError)
    async def infrastructure_error(request: Request, exc: InfrastructureError) -> Response:
        logger.error(f"Infrastructure failure on {request.url.path}: {exc}")
        return PlainTextResponse("Internal Server Error", status_code=500)

    @app.get("/healthz")
    async def healthz() -> dict[str, Any]:
        return {"status": "ok", "go": toolchain.version if toolchain is not None else None}

    @app.post("/run")
    async def run(request: Request) -> Response:
        deadline = playground.deadline()
        try:
            with anyio.fail_after(max(deadline - anyio.current_time(), 0)):
                form = await request.form(max_part_size=config.max_form_bytes)
        except TimeoutError:
            failure = RunFailure(
                run_id=DEFAULT_RUN_ID,
                diagnostic_text=str(BuildCancellation(config.request_timeout)),
                kind="cancelled",
            )
            return HTMLResponse(renderer.render_failure(failure))

        archive = read_archive(form)
        raw_run_id = form.get(RUN_ID_FIELD)
        if raw_run_id is None:
            raw_run_id = request.query_params.get(RUN_ID_FIELD)
        run_id = parse_run_id(raw_run_id if isinstance(raw_run_id, str) else None)
        origin = parse_origin(request.headers.get(CURRENT_URL_HEADER))

        outcome = await playground.run(RunRequest(run_id=run_id, archive=archive, origin_url=origin), deadline)
        if isinstance(outcome, RunFailure):
            # 200 so the client-side swap still replaces the run region.
            return HTMLResponse(renderer.render_failure(outcome), status_code=200)

        partial = select_view(request.headers.get(TARGET_HEADER)) == "partial"
        return HTMLResponse(renderer.render_result(outcome, wasm_exec_js, partial))

    @app.post("/download")
    async def download(request: Request) -> Response:
        form = await request.form(max_part_size=config.max_form_bytes)
        archive = read_archive(form)
        try:
            body = playground.download(archive)
        except ScreeningRejection as e:
            return PlainTextResponse(str(e), status_code=400)
        return Response(
            content=body,
            media_type="application/zip",
            headers={"Content-Disposition": f'attachment; filename="{DOWNLOAD_FILENAME}"'},
        )

    return app


def main() -> None:
    """Entry point for the playground HTTP server."""
    import uvicorn

    from coreason_playground.utils.logger import logger as configured_logger

    config = PlaygroundConfig()
    try:
        app = create_app(config)
    except ToolchainNotFoundError as e:
        configured_logger.critical(f"Cannot start playground: {e}")
        raise SystemExit(1) from e
    uvicorn.run(app, host=config.host, port=config.port, log_level=config.log_level.lower())


if __name__ == "__main__":  # pragma: no cover
    main()
