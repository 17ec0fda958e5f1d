"""
Entry Commands
------------------------

Create, read, list and delete diary entries.

Commands:
    - save: Create or overwrite an entry
    - show: Display one decrypted entry
    - list: List entries, optionally filtered by tag
    - delete: Delete an entry with its tags and links
    - tags: List every tag
"""
from typing import List

import click

from diary.core.cli_utils import echo_json
from diary.core.exceptions import DiaryError
from diary.core.logging_manager import handle_cli_error
from diary.dataclasses import DiaryEntry
from . import get_db


def _summary_line(entry: DiaryEntry) -> str:
    line = f"  {entry.id}  {entry.created_at:%Y-%m-%d %H:%M}  {entry.title}"
    if entry.tags:
        line += f"  [{', '.join(entry.tags)}]"
    return line


@click.command()
@click.option("--id", "entry_id", default=None, help="Existing entry to overwrite")
@click.option("--title", required=True, help="Entry title")
@click.option("--body", default=None, help="Entry body text")
@click.option(
    "--body-file",
    type=click.File("r", encoding="utf-8"),
    default=None,
    help="Read the body from a file ('-' for stdin)",
)
@click.option("--tag", "tag_names", multiple=True, help="Tag name (repeatable)")
@click.pass_context
def save(ctx, entry_id, title, body, body_file, tag_names):
    """Create an entry, or overwrite one with --id."""
    if body is not None and body_file is not None:
        raise click.UsageError("Use either --body or --body-file, not both")
    if body_file is not None:
        body = body_file.read()

    try:
        db = get_db(ctx)
        saved_id = db.save_entry(entry_id, title, body or "", list(tag_names))
        verb = "Updated" if entry_id else "Created"
        click.echo(f"✅ {verb} entry {saved_id}")

    except DiaryError as e:
        handle_cli_error(
            ctx,
            e,
            "save",
            additional_context={"entry_id": entry_id, "tag_count": len(tag_names)},
        )


@click.command()
@click.argument("entry_id")
@click.option("--json", "as_json", is_flag=True, help="Print the entry as JSON")
@click.pass_context
def show(ctx, entry_id, as_json):
    """Display a single decrypted entry."""
    try:
        db = get_db(ctx)
        entry = db.get_entry(entry_id)

        if as_json:
            echo_json(entry.to_dict())
            return

        click.echo(f"\n📖 {entry.title}")
        click.echo(f"🆔 {entry.id}")
        click.echo(f"📅 Created: {entry.created_at.isoformat()}")
        click.echo(f"✏️  Updated: {entry.updated_at.isoformat()}")
        if entry.tags:
            click.echo(f"🏷️  Tags: {', '.join(entry.tags)}")
        click.echo("")
        click.echo(entry.content)

    except DiaryError as e:
        handle_cli_error(ctx, e, "show", additional_context={"entry_id": entry_id})


@click.command("list")
@click.option("--tag", default=None, help="Only entries carrying this exact tag")
@click.option("--json", "as_json", is_flag=True, help="Print entries as JSON")
@click.pass_context
def list_entries(ctx, tag, as_json):
    """List entries, newest first."""
    try:
        db = get_db(ctx)
        entries: List[DiaryEntry] = (
            db.search_entries_by_tag(tag) if tag is not None else db.list_entries()
        )

        if as_json:
            echo_json([entry.to_dict() for entry in entries])
            return

        if not entries:
            click.echo("⚠️  No entries found")
            return

        header = f"\n📚 Entries tagged '{tag}'" if tag is not None else "\n📚 Entries"
        click.echo(f"{header} ({len(entries)}):\n")
        for entry in entries:
            click.echo(_summary_line(entry))

    except DiaryError as e:
        handle_cli_error(ctx, e, "list", additional_context={"tag": tag})


@click.command()
@click.argument("entry_id")
@click.option("--yes", is_flag=True, help="Do not ask for confirmation")
@click.pass_context
def delete(ctx, entry_id, yes):
    """Delete an entry together with its tags and relationships."""
    if not yes:
        click.confirm(f"⚠️  Delete entry {entry_id}?", abort=True)

    try:
        db = get_db(ctx)
        db.delete_entry(entry_id)
        click.echo(f"🗑️  Deleted entry {entry_id}")

    except DiaryError as e:
        handle_cli_error(ctx, e, "delete", additional_context={"entry_id": entry_id})


@click.command()
@click.pass_context
def tags(ctx):
    """List every tag."""
    try:
        db = get_db(ctx)
        records = db.list_tags()

        if not records:
            click.echo("⚠️  No tags yet")
            return

        click.echo(f"\n🏷️  Tags ({len(records)}):\n")
        for record in records:
            click.echo(f"  • {record.name}  ({record.id})")

    except DiaryError as e:
        handle_cli_error(ctx, e, "tags")
