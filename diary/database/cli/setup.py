"""
Setup & Initialization Commands
--------------------------------

Commands:
    - init: Create the key file and database schema
"""
import click

from diary.core.exceptions import DiaryError
from diary.core.logging_manager import handle_cli_error
from . import get_db


@click.command()
@click.pass_context
def init(ctx):
    """Create the encryption key and database schema (safe to re-run)."""
    try:
        click.echo("🚀 Initializing diary store...")
        db = get_db(ctx)
        db.initialize_schema()
        click.echo(f"🔑 Key file: {db.vault.path}")
        click.echo(f"🗄️  Database: {db.db_path}")
        click.echo("✅ Diary store ready!")

    except DiaryError as e:
        handle_cli_error(ctx, e, "init")
