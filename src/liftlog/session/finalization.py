"""Turn working state into a session record."""

import logging
import uuid

from ..models.plan import WorkoutPlan
from ..models.session import ExerciseLog, WorkoutSessionLog
from .state import SessionState

logger = logging.getLogger(__name__)


def finalize_session(
    plan: WorkoutPlan,
    state: SessionState,
    *,
    end_time: int,
    session_id: str | None = None,
) -> WorkoutSessionLog:
    """Snapshot the completed sets of a session.

    Exercises without a completed set are left out, so an exercise finished
    only by skipping leaves no trace in the record.

    Args:
        plan: The plan the session followed
        state: Working state at the time of finishing
        end_time: Finish time in epoch milliseconds
        session_id: Id for the record; a uuid4 is generated if omitted

    Returns:
        The immutable session record
    """
    ordered_ids = [ex.id for ex in plan.exercises]
    # Sets logged against ids no longer in the plan still count
    ordered_ids += [ex_id for ex_id in state.completed if ex_id not in ordered_ids]

    seen: set[str] = set()
    exercises = []
    for exercise_id in ordered_ids:
        if exercise_id in seen:
            continue
        seen.add(exercise_id)
        sets = state.completed.get(exercise_id)
        if sets:
            exercises.append(ExerciseLog(exercise_id=exercise_id, sets=tuple(sets)))

    log = WorkoutSessionLog(
        id=session_id or str(uuid.uuid4()),
        plan_id=plan.id,
        start_time=state.start_time,
        end_time=end_time,
        duration_seconds=(end_time - state.start_time) / 1000,
        exercises=tuple(exercises),
    )
    logger.info(
        "Finalized session %s for plan %s: %d sets over %d exercises",
        log.id,
        plan.id,
        log.total_sets,
        len(exercises),
    )
    return log
