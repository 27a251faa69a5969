# Copyright (c) 2025 CoReason, Inc.
#
# This software is proprietary and dual-licensed.
# Licensed under the Prosperity Public License 3.0 (the "License").
# A copy of the license is available at https://prosperitylicense.com/versions/3.0.0
# For details, see the LICENSE file.
# Commercial use beyond a 30-day trial requires a separate license.
#
# Source Code: https://github.com/CoReason-AI/coreason_sandbox

import importlib
import shutil
from pathlib import Path

import coreason_playground.utils.logger as logger_module


def test_logger_creates_log_directory_and_sinks() -> None:
    """
    Importing the logger module configures a stderr sink and a JSON file sink.
    """
    log_dir = Path("logs")

    assert log_dir.is_dir()
    # Internal attribute access, for testing only.
    assert len(logger_module.logger._core.handlers) == 2


def test_logger_reload_recreates_directory() -> None:
    log_dir = Path("logs")
    logger_module.logger.remove()
    if log_dir.exists():
        shutil.rmtree(log_dir)

    importlib.reload(logger_module)

    assert log_dir.is_dir()
    assert len(logger_module.logger._core.handlers) == 2


def test_logger_writes_json_lines() -> None:
    importlib.reload(logger_module)

    logger_module.logger.bind(run_id=7).info("Compile requested")
    logger_module.logger.complete()

    contents = Path("logs/app.log").read_text(encoding="utf-8")
    assert '"message": "Compile requested"' in contents
    assert '"run_id": 7' in contents
