#!/usr/bin/env python3
"""
Diary Database CLI
-----------------------------------

Command-line interface for the encrypted diary store.

This module provides the main CLI group and shared context setup
for all commands.

Command Structure:
    - Setup (init)
    - Entries (save, show, list, delete, tags)
    - Relationships (link, unlink, links)
    - Maintenance (graph, health)

Usage:
    # Get general help
    diarydb --help

    # Get help for a specific command
    diarydb save --help
"""
import click
from pathlib import Path

from diary.core.cli_utils import setup_logger
from diary.core.logging_manager import handle_cli_error
from diary.core.paths import get_data_dir, get_log_dir
from diary.database import DiaryDB


@click.group()
@click.option(
    "--data-dir",
    type=click.Path(file_okay=False),
    default=None,
    help="Directory holding diary.db and encryption.key "
    "(default: $DIARY_DATA_DIR or the platform data directory)",
)
@click.option(
    "--log-dir",
    type=click.Path(file_okay=False),
    default=None,
    help="Path to log directory (default: $DIARY_LOG_DIR or <data-dir>/logs)",
)
@click.option(
    "--verbose",
    is_flag=True,
    help="Show detailed errors and tracebacks",
)
@click.pass_context
def cli(ctx, data_dir, log_dir, verbose):
    """Encrypted Diary Store CLI"""
    ctx.ensure_object(dict)
    ctx.obj["data_dir"] = get_data_dir(data_dir)
    ctx.obj["log_dir"] = get_log_dir(ctx.obj["data_dir"], log_dir)
    ctx.obj["verbose"] = verbose
    ctx.obj["logger"] = None

    try:
        ctx.obj["logger"] = setup_logger(Path(ctx.obj["log_dir"]), "cli")
    except OSError as e:
        handle_cli_error(
            ctx, e, "setup_logger", additional_context={"log_dir": str(ctx.obj["log_dir"])}
        )
    ctx.call_on_close(ctx.obj["logger"].close)


def get_db(ctx) -> DiaryDB:
    """Get or create database instance from context."""
    if "db" not in ctx.obj:
        db = DiaryDB(
            data_dir=ctx.obj["data_dir"],
            log_dir=ctx.obj["log_dir"],
        )
        ctx.obj["db"] = db
        ctx.find_root().call_on_close(db.close)
    return ctx.obj["db"]


# Import and register command modules
# These imports must come after CLI group definition
from .setup import init  # noqa: E402
from .entries import save, show, list_entries, delete, tags  # noqa: E402
from .relationships import link, unlink, links  # noqa: E402
from .maintenance import graph, health  # noqa: E402

cli.add_command(init)
cli.add_command(save)
cli.add_command(show)
cli.add_command(list_entries)
cli.add_command(delete)
cli.add_command(tags)
cli.add_command(link)
cli.add_command(unlink)
cli.add_command(links)
cli.add_command(graph)
cli.add_command(health)


if __name__ == "__main__":
    cli(obj={})
