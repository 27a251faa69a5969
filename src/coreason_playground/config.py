from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict


class PlaygroundConfig(BaseSettings):
    """
    Configuration for the Go WebAssembly playground.
    """

    go_executable: str = "go"
    wasm_exec_js_path: Path | None = None

    # Applied on top of the server environment for every compiler process.
    env_overrides: dict[str, str] = {}
    output_name: str = "main.wasm"

    request_timeout: float = 30.0
    max_form_bytes: int = 8 * 1024

    enable_audit_logging: bool = True
    log_level: str = "INFO"

    host: str = "127.0.0.1"
    port: int = 8080

    model_config = SettingsConfigDict(
        env_prefix="COREASON_PLAYGROUND_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )
