"""Session history commands."""

from pathlib import Path

import aiosqlite
import click

from ..data import dump_backup, load_backup
from ..db import PlanRepository, SessionHistoryRepository, get_db_path
from ..exceptions import PlanFormatError
from ..models.session import ProgressPoint, format_timestamp
from ..session.clock import format_clock
from .base import (
    async_command,
    echo_error,
    echo_info,
    echo_success,
    echo_warning,
    ensure_initialized,
    format_table,
)


def format_progress(points: list[ProgressPoint]) -> str:
    """Render top weights per session as a table with the overall change."""
    rows = [[point.date_label, f"{point.weight:g}"] for point in points]
    table = format_table(["Date", "Top weight"], rows)
    change = points[-1].weight - points[0].weight
    return f"{table}\n\nChange over {len(points)} session(s): {change:+g} kg"


@click.group()
@click.pass_context
def history(ctx):
    """Review finished workouts.

    List past sessions, show their sets, and move them in and out of
    backup files.
    """
    ensure_initialized(ctx)


@history.command(name="list")
@click.option("--limit", "-n", type=int, default=20, show_default=True)
@async_command
async def list_sessions(limit: int):
    """List recent sessions."""
    repo = SessionHistoryRepository(get_db_path())
    sessions = await repo.list_recent(limit=limit)

    if not sessions:
        echo_info("No sessions yet. Start one with 'liftlog session start'")
        return

    headers = ["ID", "Plan", "Date", "Duration", "Sets"]
    rows = [
        [
            log.id[:8],
            log.plan_id,
            format_timestamp(log.start_time),
            format_clock(int(log.duration_seconds)),
            str(log.total_sets),
        ]
        for log in sessions
    ]

    click.echo()
    click.echo(format_table(headers, rows))
    click.echo()
    click.echo(f"Showing {len(sessions)} session(s)")


@history.command()
@click.argument("session_id")
@click.pass_context
@async_command
async def show(ctx, session_id: str):
    """Show the sets logged in a session (ID prefixes are accepted)."""
    repo = SessionHistoryRepository(get_db_path())
    log = await repo.get(session_id)
    if log is None:
        matches = [s for s in await repo.list_recent() if s.id.startswith(session_id)]
        if len(matches) == 1:
            log = matches[0]
        elif len(matches) > 1:
            echo_error(f"Session ID {session_id} is ambiguous")
            ctx.exit(1)

    if log is None:
        echo_error(f"Session {session_id} not found")
        ctx.exit(1)

    plan = await PlanRepository(get_db_path()).get(log.plan_id)
    names = {ex.id: ex.name for ex in plan.exercises} if plan else {}

    click.echo()
    click.echo(log.get_summary())
    if names:
        click.echo("Exercises:")
        for ex_log in log.exercises:
            weights = ", ".join(f"{s.weight:g}" for s in ex_log.sets)
            click.echo(f"  {names.get(ex_log.exercise_id, ex_log.exercise_id)}: {weights}")


@history.command(name="exercise")
@click.argument("exercise_id")
@async_command
async def exercise_history(exercise_id: str):
    """Show the top weight of each session for one exercise."""
    points = await SessionHistoryRepository(get_db_path()).exercise_progress(exercise_id)

    if not points:
        echo_info(f"No sets logged for {exercise_id}")
        return

    click.echo()
    click.echo(format_progress(points))


@history.command(name="export")
@click.argument("path", type=click.Path(dir_okay=False, path_type=Path))
@async_command
async def export_history(path: Path):
    """Write all plans and sessions to a JSON backup file."""
    db_path = get_db_path()
    plans = await PlanRepository(db_path).list_all(include_hidden=True)
    sessions = await SessionHistoryRepository(db_path).list_recent()

    path.write_text(dump_backup(plans, sessions), encoding="utf-8")
    echo_success(f"Exported {len(plans)} plan(s) and {len(sessions)} session(s) to {path}")


@history.command(name="import")
@click.argument("path", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.pass_context
@async_command
async def import_history(ctx, path: Path):
    """Load sessions from a backup file, skipping ones already stored."""
    try:
        backup = load_backup(path)
    except PlanFormatError as e:
        echo_error(str(e))
        ctx.exit(1)

    repo = SessionHistoryRepository(get_db_path())
    imported = 0
    for log in backup.history:
        try:
            await repo.save(log)
            imported += 1
        except aiosqlite.IntegrityError:
            # Session already exists, skip
            continue

    skipped = len(backup.history) - imported
    echo_success(f"Imported {imported} session(s)")
    if skipped:
        echo_warning(f"Skipped {skipped} session(s) already in history")


@history.command()
@click.option("--force", "-f", is_flag=True, help="Skip confirmation")
@async_command
async def clear(force: bool):
    """Delete every recorded session."""
    if not force and not click.confirm("Delete all workout history?"):
        echo_info("Cancelled")
        return

    await SessionHistoryRepository(get_db_path()).clear()
    echo_success("History cleared")
