"""Interactive workout session command."""

import asyncio

import click
import questionary
from questionary import Style

from ..config import settings
from ..db import PlanRepository, SessionHistoryRepository, get_db_path
from ..models.plan import WorkoutPlan
from ..session import AudioCue, RestTimer, SessionEngine, StaticWeightLookup
from ..session.clock import format_clock
from ..session.rest_timer import ADJUST_STEP_SECONDS
from .base import echo_error, echo_info, echo_success, ensure_initialized
from .history import format_progress

custom_style = Style(
    [
        ("qmark", "fg:#1e88e5 bold"),
        ("question", "bold"),
        ("answer", "fg:#43a047 bold"),
        ("pointer", "fg:#1e88e5 bold"),
        ("highlighted", "fg:#1e88e5 bold"),
        ("instruction", ""),
        ("text", ""),
    ]
)

STATUS_MARKS = {"done": "[x]", "in_progress": "[~]", "todo": "[ ]"}


def ring_bell(cue: AudioCue) -> None:
    """Terminal stand-in for the rest timer beeps."""
    click.echo("\a" * (2 if cue is AudioCue.FINAL else 1), nl=False)


async def _load(plan_id: str) -> tuple[WorkoutPlan | None, dict[str, float]]:
    db_path = get_db_path()
    plan = await PlanRepository(db_path).get(plan_id)
    weights = await SessionHistoryRepository(db_path).last_weights()
    return plan, weights


async def _countdown(engine: SessionEngine) -> None:
    """Run the rest timer while redrawing the countdown and session clock."""
    timer = engine.rest_timer
    runner = asyncio.create_task(timer.run())
    while not runner.done():
        style = {"fg": "red", "bold": True} if timer.is_urgent else {"fg": "cyan"}
        click.echo(
            "\r  Rest "
            + click.style(timer.get_display(), **style)
            + f"   elapsed {format_clock(engine.elapsed_seconds)}"
            + f"   {engine.progress.percent}%   ",
            nl=False,
        )
        await asyncio.wait({runner}, timeout=0.25)
    click.echo()


def _run_countdown(engine: SessionEngine) -> bool:
    """Count down until the rest expires.

    Returns:
        True when the user interrupted the countdown with Ctrl-C
    """
    try:
        asyncio.run(_countdown(engine))
    except KeyboardInterrupt:
        click.echo()
        return True
    return False


def choose_rest_action(timer: RestTimer) -> str | None:
    step = ADJUST_STEP_SECONDS
    return questionary.select(
        f"Rest paused at {timer.get_display()}:",
        choices=[
            questionary.Choice("Skip rest", "skip"),
            questionary.Choice(f"+{step}s", "add"),
            questionary.Choice(f"-{step}s", "subtract"),
            questionary.Choice(f"Reset to {format_clock(timer.target_seconds)}", "reset"),
            questionary.Choice("Continue", "continue"),
        ],
        style=custom_style,
    ).ask()


def apply_rest_action(timer: RestTimer, action: str) -> None:
    """Apply a rest adjustment chosen while the countdown was paused."""
    if action == "add":
        timer.add_time()
    elif action == "subtract":
        timer.subtract_time()
    elif action == "reset":
        timer.reset()


def run_rest(engine: SessionEngine) -> None:
    """Show what comes next and count down.

    Ctrl-C pauses the countdown to skip, adjust or reset the rest.
    """
    if engine.rest_timer is None:
        return
    if engine.next_up is not None:
        click.echo()
        click.echo(click.style("  Next up: ", bold=True) + engine.next_up.name)
        click.echo(f"  {engine.next_up.set_info}")
    click.echo("  (Ctrl-C to skip or adjust the rest)")

    while engine.is_resting:
        if not _run_countdown(engine):
            break
        timer = engine.rest_timer
        action = choose_rest_action(timer)
        if action is None or action == "skip":
            break
        apply_rest_action(timer, action)

    # Closing the countdown any way other than expiry counts as skipping it
    engine.finish_rest()


def render(engine: SessionEngine) -> None:
    """Print the current exercise card."""
    exercise = engine.current_exercise
    plan = engine.plan
    progress = engine.progress

    click.echo()
    click.echo("=" * 50)
    click.echo(
        f"{plan.name}   elapsed {format_clock(engine.elapsed_seconds)}   "
        f"{progress.get_display()}"
    )
    click.echo("=" * 50)
    click.echo(f"#{engine.current_index + 1} / {len(plan.exercises)}")

    group = engine.current_group
    if group is not None and group.is_circuit:
        click.echo(click.style("  Circuit / superset", fg="magenta"))

    click.echo(click.style(f"  {exercise.name}", bold=True))
    click.echo(f"  Target: {engine.current_target} x {exercise.reps}")
    if exercise.notes:
        click.echo(f"  Notes: {exercise.notes}")
    if engine.is_last_set_of_exercise:
        click.echo(f"  All {engine.current_target} sets done")
    else:
        click.echo(f"  Set {engine.set_position} of {engine.current_target}")
    if exercise.takes_weight:
        click.echo(f"  Weight: {engine.weight_input or '-'} kg")


def show_exercise_history(engine: SessionEngine) -> None:
    """Print the top weight of past sessions for the current exercise."""
    exercise = engine.current_exercise
    repo = SessionHistoryRepository(get_db_path())
    points = asyncio.run(repo.exercise_progress(exercise.id))
    if not points:
        echo_info(f"No history for {exercise.name} yet")
        return

    click.echo()
    click.echo(click.style(f"  {exercise.name}", bold=True))
    click.echo(format_progress(points))


def choose_action(engine: SessionEngine) -> str | None:
    exercise = engine.current_exercise
    step = settings.WEIGHT_STEP
    choices = [questionary.Choice(engine.complete_label, "complete")]
    choices.append(questionary.Choice("Skip set", "skip"))
    if exercise.takes_weight:
        choices += [
            questionary.Choice(f"Weight +{step:g}", "weight_up"),
            questionary.Choice(f"Weight -{step:g}", "weight_down"),
            questionary.Choice("Enter weight", "weight"),
            questionary.Choice("Add a set", "add_set"),
        ]
    choices += [
        questionary.Choice("Next exercise", "next"),
        questionary.Choice("Previous exercise", "prev"),
        questionary.Choice("Exercise map", "map"),
        questionary.Choice("Exercise history", "history"),
        questionary.Choice("Rest timer", "rest"),
        questionary.Choice("Finish workout", "finish"),
        questionary.Choice("Quit without saving", "quit"),
    ]
    return questionary.select("Action:", choices=choices, style=custom_style).ask()


def choose_from_map(engine: SessionEngine) -> int | None:
    choices = []
    for entry in engine.map_entries():
        title = f"{STATUS_MARKS[entry.status]} {entry.index + 1}. {entry.exercise.name}"
        if entry.exercise.superset_id:
            title += " (circuit)"
        choices.append(questionary.Choice(title, entry.index))
    return questionary.select(
        "Jump to:",
        choices=choices,
        default=choices[engine.current_index],
        style=custom_style,
    ).ask()


def run_session(engine: SessionEngine) -> bool:
    """Drive an engine from the terminal.

    Returns:
        True when the workout was finished, False when it was discarded
    """
    step = settings.WEIGHT_STEP
    while True:
        render(engine)
        action = choose_action(engine)

        if action is None or action == "quit":
            if click.confirm("Discard this workout? Nothing will be saved", default=False):
                engine.abandon()
                return False
            continue

        if action == "complete":
            engine.complete_set()
            if engine.is_resting:
                run_rest(engine)
        elif action == "skip":
            engine.skip_set()
        elif action == "weight_up":
            engine.adjust_weight(step)
        elif action == "weight_down":
            engine.adjust_weight(-step)
        elif action == "weight":
            value = questionary.text(
                "Weight used (kg):", default=engine.weight_input, style=custom_style
            ).ask()
            if value is not None:
                engine.set_weight(value)
        elif action == "add_set":
            engine.add_extra_set()
        elif action == "next":
            engine.move_next()
        elif action == "prev":
            engine.move_prev()
        elif action == "map":
            index = choose_from_map(engine)
            if index is not None:
                engine.jump_to_exercise(index)
        elif action == "history":
            show_exercise_history(engine)
        elif action == "rest":
            engine.start_manual_rest()
            run_rest(engine)
        elif action == "finish":
            return True


@click.group()
@click.pass_context
def session(ctx):
    """Run a workout session."""
    ensure_initialized(ctx)


@session.command()
@click.argument("plan_id")
@click.option(
    "--rest",
    "rest_seconds",
    type=click.IntRange(min=0),
    default=None,
    help="Rest duration in seconds (default from LIFTLOG_REST_SECONDS)",
)
@click.pass_context
def start(ctx, plan_id: str, rest_seconds: int | None):
    """Start a workout on a plan and log sets as you go."""
    plan, weights = asyncio.run(_load(plan_id))
    if plan is None:
        echo_error(f"Plan {plan_id} not found")
        ctx.exit(1)
    if not plan.exercises:
        echo_error(f"Plan {plan_id} has no exercises")
        ctx.exit(1)

    engine = SessionEngine(
        plan,
        weight_lookup=StaticWeightLookup(weights),
        rest_seconds=rest_seconds if rest_seconds is not None else settings.REST_SECONDS,
        on_cue=ring_bell,
    )

    if not run_session(engine):
        echo_info("Workout discarded")
        return

    log = engine.finish()
    asyncio.run(SessionHistoryRepository(get_db_path()).save(log))

    click.echo()
    echo_success(f"Workout saved ({log.total_sets} sets)")
    click.echo(log.get_summary())
