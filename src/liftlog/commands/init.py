"""Initialize project command."""

import click

from ..db import get_db_path, init_db, seed_plans
from .base import async_command, echo_info, echo_success, get_data_dir


@click.command()
@async_command
async def init():
    """Initialize the liftlog data directory and database.

    This creates the SQLite database with the required schema and adds the
    default plans (existing plans with the same IDs are kept).
    """
    data_dir = get_data_dir()
    echo_info(f"Initializing liftlog in {data_dir}")

    db_path = get_db_path(data_dir)
    await init_db(db_path)
    echo_success("Database initialized")

    count = await seed_plans(db_path)
    echo_success(f"Default plans added ({count} new)")

    click.echo()
    click.echo("liftlog is ready to use!")
    click.echo()
    click.echo("Next steps:")
    click.echo("  1. Review your plans:")
    click.echo("     liftlog plans list")
    click.echo("     liftlog plans import my_plans.json")
    click.echo()
    click.echo("  2. Start a workout:")
    click.echo("     liftlog session start A")
