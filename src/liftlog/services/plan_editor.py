"""Edit the exercise list of a workout plan.

Every function takes a plan and returns a new one; positions are 0-based
plan indices. Groups are re-derived with ``group_exercises`` after each
change, so superset membership always follows plan order.
"""

import logging
import uuid
from dataclasses import replace
from typing import Iterable, Sequence

from ..exceptions import PlanEditError
from ..models.plan import ExerciseDef, WorkoutPlan
from ..session.grouping import find_group, flatten_groups, group_exercises

logger = logging.getLogger(__name__)

EDITABLE_FIELDS = frozenset(
    {"name", "sets", "reps", "is_duration", "is_circuit", "notes", "default_weight", "tags"}
)


def new_exercise_id() -> str:
    return f"custom_{uuid.uuid4().hex[:9]}"


def new_superset_id() -> str:
    return f"superset_{uuid.uuid4().hex[:9]}"


def _check_index(plan: WorkoutPlan, index: int) -> None:
    if not 0 <= index < len(plan.exercises):
        raise PlanEditError(
            f"Position {index + 1} out of range for plan of {len(plan.exercises)}"
        )


def _with_exercises(plan: WorkoutPlan, exercises: Sequence[ExerciseDef]) -> WorkoutPlan:
    return replace(plan, exercises=tuple(exercises))


def _drop_lone_supersets(
    exercises: Sequence[ExerciseDef], superset_ids: Iterable[str | None]
) -> list[ExerciseDef]:
    """Clear the superset id of any touched superset left with one member."""
    touched = {sid for sid in superset_ids if sid}
    exercises = list(exercises)
    for group in group_exercises(exercises):
        if group.is_superset and len(group) == 1 and group.group_id in touched:
            index = group.first_index
            exercises[index] = replace(exercises[index], superset_id=None)
    return exercises


def add_exercise(
    plan: WorkoutPlan, exercise: ExerciseDef, position: int | None = None
) -> WorkoutPlan:
    """Insert an exercise, appending when no position is given.

    Inserting between two members of a circuit makes the new exercise a
    member of that circuit.

    Raises:
        PlanEditError: If the id is already used or the position is outside the plan
    """
    if plan.index_of(exercise.id) is not None:
        raise PlanEditError(f"Exercise id {exercise.id!r} already in plan {plan.id}")

    size = len(plan.exercises)
    if position is None:
        position = size
    if not 0 <= position <= size:
        raise PlanEditError(f"Position {position + 1} out of range for plan of {size}")

    if 0 < position < size:
        group = find_group(group_exercises(plan.exercises), position - 1)
        if group.is_circuit and group.contains(position):
            exercise = replace(exercise, superset_id=group.group_id)

    exercises = list(plan.exercises)
    exercises.insert(position, exercise)
    logger.info("Added %s to plan %s at %d", exercise.id, plan.id, position)
    return _with_exercises(plan, exercises)


def update_exercise(plan: WorkoutPlan, index: int, **changes) -> WorkoutPlan:
    """Change fields of the exercise at ``index``. The id is kept."""
    _check_index(plan, index)
    unknown = set(changes) - EDITABLE_FIELDS
    if unknown:
        raise PlanEditError(f"Cannot edit field(s): {', '.join(sorted(unknown))}")
    if "sets" in changes and changes["sets"] < 1:
        raise PlanEditError("An exercise needs at least one set")

    exercises = list(plan.exercises)
    exercises[index] = replace(exercises[index], **changes)
    return _with_exercises(plan, exercises)


def remove_exercise(plan: WorkoutPlan, index: int) -> WorkoutPlan:
    """Remove the exercise at ``index``.

    A superset reduced to one exercise loses its grouping.
    """
    _check_index(plan, index)
    exercises = list(plan.exercises)
    removed = exercises.pop(index)
    logger.info("Removed %s from plan %s", removed.id, plan.id)
    return _with_exercises(plan, _drop_lone_supersets(exercises, [removed.superset_id]))


def move_group(plan: WorkoutPlan, from_index: int, to_index: int) -> WorkoutPlan:
    """Move the group holding ``from_index`` into the slot of the group holding ``to_index``.

    Circuits move as a whole block.
    """
    _check_index(plan, from_index)
    _check_index(plan, to_index)

    groups = group_exercises(plan.exercises)
    source = groups.index(find_group(groups, from_index))
    target = groups.index(find_group(groups, to_index))
    if source == target:
        return plan

    groups.insert(target, groups.pop(source))
    return _with_exercises(plan, flatten_groups(groups))


def make_superset(plan: WorkoutPlan, indices: Iterable[int]) -> tuple[WorkoutPlan, str]:
    """Group the selected exercises into a new superset.

    The selection is gathered at the position of its top-most exercise,
    keeping its relative order.

    Returns:
        The edited plan and the new superset id
    """
    selected = sorted(set(indices))
    if len(selected) < 2:
        raise PlanEditError("A superset needs at least two exercises")
    for index in selected:
        _check_index(plan, index)

    superset_id = new_superset_id()
    chosen = [replace(plan.exercises[i], superset_id=superset_id) for i in selected]
    previous_ids = [plan.exercises[i].superset_id for i in selected]

    exercises = [ex for i, ex in enumerate(plan.exercises) if i not in selected]
    exercises[selected[0]:selected[0]] = chosen

    logger.info("Created superset %s in plan %s", superset_id, plan.id)
    return _with_exercises(plan, _drop_lone_supersets(exercises, previous_ids)), superset_id


def clear_superset(plan: WorkoutPlan, index: int) -> WorkoutPlan:
    """Split the superset holding ``index`` back into standalone exercises."""
    _check_index(plan, index)
    group = find_group(group_exercises(plan.exercises), index)
    if not group.is_superset:
        raise PlanEditError(f"Exercise at position {index + 1} is not in a superset")

    exercises = list(plan.exercises)
    for i in group.indices:
        exercises[i] = replace(exercises[i], superset_id=None)
    return _with_exercises(plan, exercises)
