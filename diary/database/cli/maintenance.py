"""
Maintenance Commands
-----------------------------

Commands:
    - graph: Export the entry/tag graph as JSON
    - health: Run the database health check
"""
import json

import click

from diary.core.cli_utils import echo_json
from diary.core.exceptions import DiaryError
from diary.core.logging_manager import handle_cli_error
from . import get_db


@click.command()
@click.option(
    "--output",
    type=click.Path(dir_okay=False, writable=True),
    default=None,
    help="Write the graph to this file instead of stdout",
)
@click.pass_context
def graph(ctx, output):
    """Export entries, tags and links as a JSON graph."""
    try:
        db = get_db(ctx)
        payload = db.get_graph().to_dict()

        if output is None:
            echo_json(payload)
            return

        with open(output, "w", encoding="utf-8") as f:
            json.dump(payload, f, indent=2, ensure_ascii=False)
        click.echo(
            f"✅ Wrote {len(payload['nodes'])} nodes and "
            f"{len(payload['edges'])} edges to {output}"
        )

    except (DiaryError, OSError) as e:
        handle_cli_error(ctx, e, "graph", additional_context={"output": output})


@click.command()
@click.pass_context
def health(ctx):
    """Run comprehensive health check."""
    try:
        db = get_db(ctx)
        health_data = db.health_check()

        click.echo("\n🏥 Database Health Check")
        click.echo("=" * 50)
        click.echo(f"Status: {health_data['status'].upper()}")

        counts = health_data["metrics"]["performance"]["table_counts"]
        click.echo("\n📊 Rows:")
        for table, count in counts.items():
            click.echo(f"  {table}: {count}")

        if health_data["issues"]:
            click.echo(f"\n⚠️  Issues Found ({len(health_data['issues'])}):")
            for issue in health_data["issues"]:
                click.echo(f"  • {issue}")
        else:
            click.echo("\n✅ No issues found!")

        if health_data["recommendations"]:
            click.echo(f"\n💡 Recommendations ({len(health_data['recommendations'])}):")
            for rec in health_data["recommendations"]:
                click.echo(f"  • {rec}")

    except DiaryError as e:
        handle_cli_error(ctx, e, "health")
