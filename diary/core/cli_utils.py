#!/usr/bin/env python3
"""
cli_utils.py
-------------------
Shared CLI utilities for diary commands.

Functions:
    setup_logger: Initialize DiaryLogger for CLI operations
    echo_json: Print a serializable payload as indented JSON

Usage:
    from diary.core.cli_utils import setup_logger

    logger = setup_logger(log_dir, "cli")
"""
import json
from pathlib import Path
from typing import Any

import click

from diary.core.logging_manager import DiaryLogger


def setup_logger(log_dir: Path, component_name: str) -> DiaryLogger:
    """
    Setup logging for CLI operations.

    Creates the operations log directory if it doesn't exist and initializes
    a DiaryLogger instance for the specified component.

    Args:
        log_dir: Base log directory (typically from paths.get_log_dir())
        component_name: Component identifier for logging (e.g., 'cli')

    Returns:
        Configured DiaryLogger instance
    """
    operations_log_dir = log_dir / "operations"
    operations_log_dir.mkdir(parents=True, exist_ok=True)
    return DiaryLogger(operations_log_dir, component_name=component_name)


def echo_json(payload: Any) -> None:
    """Print a JSON-serializable payload with stable formatting."""
    click.echo(json.dumps(payload, indent=2, ensure_ascii=False))
