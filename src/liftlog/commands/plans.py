"""Plan management commands."""

from pathlib import Path

import click

from ..data import load_backup
from ..db import PlanRepository, get_db_path
from ..exceptions import PlanEditError, PlanFormatError
from ..models.plan import ExerciseDef, WorkoutPlan
from ..services import plan_editor
from ..session.grouping import group_exercises
from .base import (
    async_command,
    echo_error,
    echo_info,
    echo_success,
    echo_warning,
    ensure_initialized,
    format_table,
    truncate,
)


def format_plan(plan: WorkoutPlan) -> str:
    """Render a plan with its superset blocks, numbered in plan order."""
    lines = [f"Plan: {plan.name} (ID: {plan.id})", ""]
    for group in group_exercises(plan.exercises):
        if group.is_circuit:
            lines.append(f"  Circuit / superset ({group.group_id}):")
            indent = "      "
        else:
            indent = "  "
        for index, exercise in zip(group.indices, group.items):
            line = f"{indent}{index + 1}. {exercise.name}: {exercise.sets} x {exercise.reps}"
            if exercise.default_weight:
                line += f" @ {exercise.default_weight:g}kg"
            if exercise.is_duration:
                line += " [timed]"
            lines.append(line)
    lines.append("")
    lines.append(f"{len(plan.exercises)} exercises, {plan.total_planned_sets} planned sets")
    return "\n".join(lines)


@click.group()
@click.pass_context
def plans(ctx):
    """Manage workout plans.

    Commands for listing, viewing, importing, editing and deleting plans.
    Positions are the numbers shown by 'liftlog plans show'.
    """
    ensure_initialized(ctx)


@plans.command(name="list")
@click.option("--all", "show_all", is_flag=True, help="Include hidden plans")
@async_command
async def list_plans(show_all: bool):
    """List workout plans."""
    repo = PlanRepository(get_db_path())
    all_plans = await repo.list_all(include_hidden=show_all)

    if not all_plans:
        echo_info("No plans found. Import some with 'liftlog plans import'")
        return

    headers = ["ID", "Name", "Exercises", "Sets"]
    rows = []
    for plan in all_plans:
        name = truncate(plan.name)
        if plan.is_hidden:
            name += " (hidden)"
        rows.append([plan.id, name, str(len(plan.exercises)), str(plan.total_planned_sets)])

    click.echo()
    click.echo(format_table(headers, rows))
    click.echo()
    click.echo(f"Total: {len(all_plans)} plan(s)")


@plans.command()
@click.argument("plan_id")
@click.pass_context
@async_command
async def show(ctx, plan_id: str):
    """Show a plan grouped into exercises and circuits."""
    repo = PlanRepository(get_db_path())
    plan = await repo.get(plan_id)
    if not plan:
        echo_error(f"Plan {plan_id} not found")
        ctx.exit(1)

    click.echo()
    click.echo(format_plan(plan))


@plans.command(name="import")
@click.argument("path", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.pass_context
@async_command
async def import_plans(ctx, path: Path):
    """Import plans from a JSON file (a plan, a list of plans, or a backup)."""
    try:
        backup = load_backup(path)
    except PlanFormatError as e:
        echo_error(str(e))
        ctx.exit(1)

    if not backup.plans:
        echo_warning("No plans found in file")
        return

    repo = PlanRepository(get_db_path())
    for plan in backup.plans:
        await repo.upsert(plan)
        echo_success(f"Imported {plan.id}: {plan.name} ({len(plan.exercises)} exercises)")

    if backup.history:
        echo_info(
            f"File also holds {len(backup.history)} session(s); "
            "use 'liftlog history import' to load them"
        )


@plans.command()
@click.argument("plan_id")
@click.option("--force", "-f", is_flag=True, help="Skip confirmation")
@click.pass_context
@async_command
async def delete(ctx, plan_id: str, force: bool):
    """Delete a plan. Its past sessions are kept."""
    repo = PlanRepository(get_db_path())
    plan = await repo.get(plan_id)
    if not plan:
        echo_error(f"Plan {plan_id} not found")
        ctx.exit(1)

    if not force:
        click.echo(f"Plan: {plan.name}")
        if not click.confirm("Are you sure you want to delete this plan?"):
            echo_info("Cancelled")
            return

    await repo.delete(plan_id)
    echo_success(f"Plan {plan_id} deleted")


async def _save_edit(ctx: click.Context, plan_id: str, change) -> WorkoutPlan:
    """Load a plan, apply ``change`` to it, store and print the result."""
    repo = PlanRepository(get_db_path())
    plan = await repo.get(plan_id)
    if not plan:
        echo_error(f"Plan {plan_id} not found")
        ctx.exit(1)

    try:
        edited = change(plan)
    except PlanEditError as e:
        echo_error(str(e))
        ctx.exit(1)

    await repo.upsert(edited)
    click.echo()
    click.echo(format_plan(edited))
    return edited


@plans.command()
@click.argument("plan_id")
@click.argument("name")
@click.option("--sets", type=click.IntRange(min=1), default=3, show_default=True)
@click.option("--reps", default="10", show_default=True, help='Reps, or a duration like 30"')
@click.option("--weight", type=float, default=None, help="Default weight in kg")
@click.option("--timed", is_flag=True, help="Timed exercise with no weight")
@click.option("--notes", default="")
@click.option("--position", type=click.IntRange(min=1), default=None, help="Insert at this position")
@click.option("--id", "exercise_id", default=None, help="Exercise id (generated if omitted)")
@click.pass_context
@async_command
async def add(ctx, plan_id, name, sets, reps, weight, timed, notes, position, exercise_id):
    """Add an exercise to a plan."""
    exercise = ExerciseDef(
        id=exercise_id or plan_editor.new_exercise_id(),
        name=name,
        sets=sets,
        reps=reps,
        is_duration=timed,
        notes=notes,
        default_weight=weight,
    )
    index = position - 1 if position else None
    await _save_edit(ctx, plan_id, lambda plan: plan_editor.add_exercise(plan, exercise, index))
    echo_success(f"Added {name} ({exercise.id})")


@plans.command()
@click.argument("plan_id")
@click.argument("position", type=click.IntRange(min=1))
@click.option("--name", default=None)
@click.option("--sets", type=click.IntRange(min=1), default=None)
@click.option("--reps", default=None)
@click.option("--weight", type=float, default=None, help="Default weight in kg")
@click.option("--notes", default=None)
@click.pass_context
@async_command
async def edit(ctx, plan_id, position, name, sets, reps, weight, notes):
    """Change an exercise in a plan."""
    changes = {
        key: value
        for key, value in (
            ("name", name),
            ("sets", sets),
            ("reps", reps),
            ("default_weight", weight),
            ("notes", notes),
        )
        if value is not None
    }
    if not changes:
        echo_warning("Nothing to change")
        return

    await _save_edit(
        ctx, plan_id, lambda plan: plan_editor.update_exercise(plan, position - 1, **changes)
    )
    echo_success(f"Exercise {position} updated")


@plans.command()
@click.argument("plan_id")
@click.argument("position", type=click.IntRange(min=1))
@click.pass_context
@async_command
async def remove(ctx, plan_id, position):
    """Remove an exercise from a plan."""
    await _save_edit(ctx, plan_id, lambda plan: plan_editor.remove_exercise(plan, position - 1))
    echo_success(f"Exercise {position} removed")


@plans.command()
@click.argument("plan_id")
@click.argument("from_position", type=click.IntRange(min=1))
@click.argument("to_position", type=click.IntRange(min=1))
@click.pass_context
@async_command
async def move(ctx, plan_id, from_position, to_position):
    """Move an exercise, or its whole circuit, to another position."""
    await _save_edit(
        ctx,
        plan_id,
        lambda plan: plan_editor.move_group(plan, from_position - 1, to_position - 1),
    )
    echo_success("Plan reordered")


@plans.command()
@click.argument("plan_id")
@click.argument("positions", nargs=-1, required=True, type=click.IntRange(min=1))
@click.pass_context
@async_command
async def superset(ctx, plan_id, positions):
    """Group exercises at POSITIONS into a new superset."""
    indices = sorted(p - 1 for p in positions)
    edited = await _save_edit(
        ctx, plan_id, lambda plan: plan_editor.make_superset(plan, indices)[0]
    )
    # The selection is gathered at its top-most position
    echo_success(f"Superset {edited.exercises[indices[0]].superset_id} created")


@plans.command()
@click.argument("plan_id")
@click.argument("position", type=click.IntRange(min=1))
@click.pass_context
@async_command
async def unsuperset(ctx, plan_id, position):
    """Split the superset holding POSITION into standalone exercises."""
    await _save_edit(ctx, plan_id, lambda plan: plan_editor.clear_superset(plan, position - 1))
    echo_success("Superset removed")
