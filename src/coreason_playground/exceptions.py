# Copyright (c) 2025 CoReason, Inc.
#
# This software is proprietary and dual-licensed.
# Licensed under the Prosperity Public License 3.0 (the "License").
# A copy of the license is available at https://prosperitylicense.com/versions/3.0.0
# For details, see the LICENSE file.
# Commercial use beyond a 30-day trial requires a separate license.
#
# Source Code: https://github.com/CoReason-AI/coreason_sandbox

"""Error taxonomy for the playground request pipeline."""


class PlaygroundError(Exception):
    """Base class for every error raised by coreason-playground."""


class ClientInputError(PlaygroundError):
    """A request parameter could not be interpreted.

    Surfaced to the caller as a plain-text HTTP error and never reaches the
    build pipeline.
    """

    def __init__(self, message: str, status_code: int = 400):
        super().__init__(message)
        self.message = message
        self.status_code = status_code


class ScreeningRejection(PlaygroundError):
    """The submission was refused before any compiler process was started."""


class MalformedSourceError(ScreeningRejection):
    """The package clause or import block of a source file does not parse."""

    def __init__(self, filename: str, detail: str):
        super().__init__(f"failed in {filename}: failed to parse {filename}: {detail}")
        self.filename = filename
        self.detail = detail


class ImportNotPermittedError(ScreeningRejection):
    """A source file imports a path that is not on the allow-list."""

    def __init__(self, filename: str, import_path: str):
        quoted = '"' + import_path.replace("\\", "\\\\").replace('"', '\\"') + '"'
        super().__init__(f"failed in {filename}: importing {quoted} is not permitted on this site")
        self.filename = filename
        self.import_path = import_path


class InvalidArchivePathError(ScreeningRejection):
    """An archive entry name cannot be materialized as a relative path."""

    def __init__(self, name: str, reason: str):
        super().__init__(f"invalid file name {name!r}: {reason}")
        self.name = name
        self.reason = reason


class EmptyArchiveError(ScreeningRejection):
    """No Go source file was submitted."""

    def __init__(self) -> None:
        super().__init__("no Go source files were submitted")


class BuildFailure(PlaygroundError):
    """The compiler exited non-zero. ``output`` is its merged stdout/stderr, verbatim."""

    def __init__(self, output: str, exit_code: int):
        super().__init__(output)
        self.output = output
        self.exit_code = exit_code


class BuildCancellation(PlaygroundError):
    """The build did not finish before its deadline."""

    def __init__(self, timeout: float | None = None):
        if timeout is None:
            message = "build cancelled: the request deadline was exceeded"
        else:
            message = f"build cancelled: exceeded the {timeout:g}s deadline"
        super().__init__(message)
        self.timeout = timeout


class InfrastructureError(PlaygroundError):
    """A server-side failure not attributable to user input.

    The message is logged; callers only ever see a generic error.
    """


class ToolchainNotFoundError(PlaygroundError):
    """The Go toolchain could not be located at startup."""
