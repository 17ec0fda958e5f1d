#!/usr/bin/env python3
"""
logging_manager.py
--------------------
Centralized logging system for all diary store operations.

Provides structured logging with rotation for database operations,
key custody and the command-line tool.

Log records carry ids, counts and durations. Detail dictionaries are
scrubbed before they are written: any key naming plaintext, ciphertext
or key material is replaced by a placeholder, so a careless caller
cannot leak an entry body into a log file.
"""
# --- Annotations ---
from __future__ import annotations

# --- Standard library imports ---
import json
import logging
import traceback
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Any, Dict, Optional

# --- Third party imports ---
import click


# Detail keys whose values never reach a log file
SENSITIVE_KEYS = frozenset(
    {"body", "content", "plaintext", "ciphertext", "envelope", "key", "secret"}
)
REDACTED = "<redacted>"


def scrub_details(details: Optional[Dict[str, Any]]) -> Dict[str, Any]:
    """
    Copy a details dictionary with sensitive values replaced.

    Nested dictionaries are scrubbed as well. Matching is on the key
    name, case-insensitively.

    Args:
        details: Details as passed to a log_* method

    Returns:
        New dictionary safe to serialize
    """
    if not details:
        return {}

    clean: Dict[str, Any] = {}
    for name, value in details.items():
        if str(name).lower() in SENSITIVE_KEYS:
            clean[name] = REDACTED
        elif isinstance(value, dict):
            clean[name] = scrub_details(value)
        else:
            clean[name] = value
    return clean


class DiaryLogger:
    """
    Centralized logging system for store operations.

    Each component gets its own pair of rotating files in log_dir:

        <component>.log   every record from DEBUG up
        errors.log        errors with context and traceback

    Warnings are echoed to the console as well, since they flag
    conditions the user should look at (orphan rows, stale timestamps,
    a short key file).

    Attributes:
        log_dir: Directory for log files
        component_name: Name of the component using this logger
        main_logger: Main logger for all operations
        error_logger: Dedicated logger for errors only
    """

    def __init__(
        self,
        log_dir: Path,
        component_name: str = "diary",
        max_bytes: int = 10 * 1024 * 1024,
        backup_count: int = 5,
    ) -> None:
        """
        Initialize logging system.

        Args:
            log_dir: Directory for log files (created if missing)
            component_name: Name for the component logger
                ('database', 'cli', ...)
            max_bytes: Maximum log file size before rotation (default: 10MB)
            backup_count: Number of rotated files to keep (default: 5)
        """
        self.log_dir = Path(log_dir)
        self.component_name = component_name
        self.max_bytes = max_bytes
        self.backup_count = backup_count
        self._setup_loggers()

    def _setup_loggers(self) -> None:
        """Attach file and console handlers to this component's loggers."""
        self.log_dir.mkdir(parents=True, exist_ok=True)

        self.main_logger = logging.getLogger(f"diary.{self.component_name}.operations")
        self.main_logger.setLevel(logging.DEBUG)
        # Replace only this component's handlers; global logging is untouched
        self.main_logger.handlers = []

        self.error_logger = logging.getLogger(f"diary.{self.component_name}.errors")
        self.error_logger.setLevel(logging.ERROR)
        self.error_logger.handlers = []

        self._create_file_handler(
            self.main_logger,
            self.log_dir / f"{self.component_name}.log",
            logging.DEBUG,
        )
        self._create_file_handler(
            self.error_logger,
            self.log_dir / "errors.log",
            logging.ERROR,
        )

        console_handler = logging.StreamHandler()
        console_handler.setLevel(logging.WARNING)
        console_handler.setFormatter(
            logging.Formatter("%(levelname)s [%(name)s] %(message)s")
        )
        self.main_logger.addHandler(console_handler)

    def _create_file_handler(
        self, logger: logging.Logger, file_path: Path, level: int
    ) -> None:
        handler = RotatingFileHandler(
            file_path,
            maxBytes=self.max_bytes,
            backupCount=self.backup_count,
            encoding="utf-8",
        )
        handler.setLevel(level)
        handler.setFormatter(
            logging.Formatter(
                "%(asctime)s %(levelname)-7s %(name)s "
                "[%(module)s:%(lineno)d] %(message)s",
                datefmt="%Y-%m-%d %H:%M:%S",
            )
        )
        logger.addHandler(handler)

    def close(self) -> None:
        """Flush and detach every handler of this component."""
        for logger in (self.main_logger, self.error_logger):
            for handler in list(logger.handlers):
                handler.close()
                logger.removeHandler(handler)

    # -------------------------------------------------------------------------
    # Record helpers
    # -------------------------------------------------------------------------

    def _emit(
        self,
        level: int,
        prefix: str,
        message: str,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        """Write one main-log record as 'PREFIX - message: {json}'."""
        line = f"{prefix} - {message}"
        if details:
            line += f": {json.dumps(scrub_details(details), default=str)}"
        # stacklevel 3 attributes the record to the log_* caller
        self.main_logger.log(level, line, stacklevel=3)

    def log_operation(
        self, operation: str, details: Optional[Dict[str, Any]] = None
    ) -> None:
        """
        Log a completed or started store operation.

        Args:
            operation: Operation name (e.g. 'save_entry_completed')
            details: Optional ids, counts and durations
        """
        self._emit(logging.INFO, "OPERATION", operation, details)

    def log_debug(self, message: str, details: Optional[Dict[str, Any]] = None) -> None:
        self._emit(logging.DEBUG, "DEBUG", message, details)

    def log_info(self, message: str, details: Optional[Dict[str, Any]] = None) -> None:
        self._emit(logging.INFO, "INFO", message, details)

    def log_warning(
        self, message: str, details: Optional[Dict[str, Any]] = None
    ) -> None:
        """Log a condition that needs attention; also shown on the console."""
        self._emit(logging.WARNING, "WARNING", message, details)

    def log_error(
        self, error: Exception, context: Optional[Dict[str, Any]] = None
    ) -> None:
        """
        Log an error with context and the active traceback.

        The error goes to errors.log with its traceback and a one-line
        summary goes to the component log so the sequence of events can
        be read in one place.

        Args:
            error: Exception that occurred
            context: Optional context (operation name, ids)
        """
        summary = f"{type(error).__name__}: {error}"
        context = scrub_details(context)

        self.error_logger.error(f"ERROR - {summary}")
        if context:
            self.error_logger.error(
                "Context: " + ", ".join(f"{k}={v}" for k, v in context.items())
            )
        if sys.exc_info()[0] is not None:
            self.error_logger.error(f"Traceback:\n{traceback.format_exc()}")

        self.main_logger.debug(f"ERROR - {summary}")

    def log_cli_error(
        self,
        error: Exception,
        context: Optional[Dict[str, Any]] = None,
        show_traceback: bool = False,
    ) -> str:
        """
        Log an error raised inside a command and format it for the terminal.

        Args:
            error: Exception to log
            context: Command name and arguments
            show_traceback: Append the traceback to the returned text

        Returns:
            Text for the user

        Examples:
            >>> logger.log_cli_error(EntryNotFoundError("abc"))
            '❌ EntryNotFoundError: Entry not found: abc'
        """
        self.log_error(error, context or {"source": "cli"})
        return format_cli_error(error, show_traceback)


def format_cli_error(error: Exception, show_traceback: bool = False) -> str:
    """One-line '❌ Type: message', optionally followed by the traceback."""
    text = f"❌ {type(error).__name__}: {error}"
    if show_traceback:
        text += f"\n\n{traceback.format_exc()}"
    return text


def handle_cli_error(
    ctx: "click.Context",
    error: Exception,
    operation: str,
    additional_context: Optional[Dict[str, Any]] = None,
    exit_code: int = 1,
) -> None:
    """
    Report a failed command and exit.

    Pulls the logger and the --verbose flag from the click context, logs
    the full error, prints the formatted message on stderr and exits.

    Args:
        ctx: Click context holding 'logger' and 'verbose'
        error: Exception that occurred
        operation: Name of the failed command (e.g. 'save', 'link')
        additional_context: Optional extra context (entry id, tag, ...)
        exit_code: Process exit code (default: 1)

    Note:
        This function never returns.
    """
    logger: Optional[DiaryLogger] = ctx.obj.get("logger")
    verbose: bool = ctx.obj.get("verbose", False)

    context = {"operation": operation, **(additional_context or {})}
    error_msg = safe_logger(logger).log_cli_error(error, context, show_traceback=verbose)

    click.echo(error_msg, err=True)
    sys.exit(exit_code)


class NullLogger:
    """Stand-in used when no log directory was configured. Logs nothing."""

    def log_operation(self, operation: str, details: Optional[Dict[str, Any]] = None) -> None:
        pass

    def log_error(self, error: Exception, context: Optional[Dict[str, Any]] = None) -> None:
        pass

    def log_debug(self, message: str, details: Optional[Dict[str, Any]] = None) -> None:
        pass

    def log_info(self, message: str, details: Optional[Dict[str, Any]] = None) -> None:
        pass

    def log_warning(self, message: str, details: Optional[Dict[str, Any]] = None) -> None:
        pass

    def log_cli_error(
        self,
        error: Exception,
        context: Optional[Dict[str, Any]] = None,
        show_traceback: bool = False,
    ) -> str:
        return format_cli_error(error, show_traceback)

    def close(self) -> None:
        pass


_null_logger = NullLogger()


def safe_logger(logger: Optional[DiaryLogger]) -> DiaryLogger:
    """
    Return the provided logger, or the shared NullLogger if None.

    Lets components write

        safe_logger(self.logger).log_info("message")

    instead of guarding every call with 'if self.logger:'.
    """
    return logger if logger is not None else _null_logger  # type: ignore[return-value]
