"""Per-exercise targets and aggregate session progress."""

import math
from dataclasses import dataclass

from ..models.plan import ExerciseDef, WorkoutPlan
from .state import SessionState


@dataclass(frozen=True)
class Progress:
    """Set-based completion of a session."""

    total_planned: int
    total_completed: int
    percent: int

    def get_display(self) -> str:
        return f"{self.percent}% done ({self.total_completed}/{self.total_planned} sets)"


def effective_target(exercise: ExerciseDef, state: SessionState) -> int:
    """Planned sets plus any sets added during the session."""
    return exercise.sets + state.extra_count(exercise.id)


def done_count(exercise: ExerciseDef, state: SessionState) -> int:
    """Completed plus skipped sets."""
    return state.completed_count(exercise.id) + state.skipped_count(exercise.id)


def is_exercise_complete(exercise: ExerciseDef, state: SessionState) -> bool:
    return done_count(exercise, state) >= effective_target(exercise, state)


def exercise_status(exercise: ExerciseDef, state: SessionState) -> str:
    """Status shown on the exercise map: ``todo``, ``in_progress`` or ``done``."""
    done = done_count(exercise, state)
    if done >= effective_target(exercise, state):
        return "done"
    if done > 0:
        return "in_progress"
    return "todo"


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def compute_progress(plan: WorkoutPlan, state: SessionState) -> Progress:
    """Aggregate progress over every exercise in the plan.

    Done counts are not capped at the target, so skipping and extra sets
    can move an exercise above or below its share transiently.
    """
    planned = 0
    completed = 0
    for exercise in plan.exercises:
        planned += effective_target(exercise, state)
        completed += done_count(exercise, state)

    percent = _round_half_up(100 * completed / planned) if planned > 0 else 0
    return Progress(total_planned=planned, total_completed=completed, percent=percent)
