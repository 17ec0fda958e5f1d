"""
Relationship Commands
------------------------

Directed links between entries.

Commands:
    - link: Link CHILD to PARENT
    - unlink: Remove a link by id
    - links: Show links touching an entry
"""
import click

from diary.core.cli_utils import echo_json
from diary.core.exceptions import DiaryError
from diary.core.logging_manager import handle_cli_error
from . import get_db


@click.command()
@click.argument("parent_id")
@click.argument("child_id")
@click.option("--kind", default=None, help="Relationship label (default: depends_on)")
@click.option("--id", "relationship_id", default=None, help="Explicit relationship id")
@click.pass_context
def link(ctx, parent_id, child_id, kind, relationship_id):
    """Link CHILD_ID to PARENT_ID."""
    try:
        db = get_db(ctx)
        rel_id = db.add_relationship(parent_id, child_id, kind, relationship_id)
        click.echo(f"🔗 Created relationship {rel_id}")

    except DiaryError as e:
        handle_cli_error(
            ctx,
            e,
            "link",
            additional_context={"parent_id": parent_id, "child_id": child_id},
        )


@click.command()
@click.argument("relationship_id")
@click.pass_context
def unlink(ctx, relationship_id):
    """Remove a relationship (unknown ids are ignored)."""
    try:
        db = get_db(ctx)
        db.delete_relationship(relationship_id)
        click.echo(f"✂️  Removed relationship {relationship_id}")

    except DiaryError as e:
        handle_cli_error(
            ctx, e, "unlink", additional_context={"relationship_id": relationship_id}
        )


@click.command()
@click.argument("entry_id")
@click.option("--json", "as_json", is_flag=True, help="Print relationships as JSON")
@click.pass_context
def links(ctx, entry_id, as_json):
    """Show relationships in which ENTRY_ID is parent or child."""
    try:
        db = get_db(ctx)
        records = db.get_relationships(entry_id)

        if as_json:
            echo_json([record.to_dict() for record in records])
            return

        if not records:
            click.echo(f"⚠️  No relationships for {entry_id}")
            return

        click.echo(f"\n🔗 Relationships ({len(records)}):\n")
        for record in records:
            click.echo(
                f"  • {record.child_id} -[{record.relationship_type}]-> "
                f"{record.parent_id}  ({record.id})"
            )

    except DiaryError as e:
        handle_cli_error(ctx, e, "links", additional_context={"entry_id": entry_id})
