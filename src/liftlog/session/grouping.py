"""Partition a plan's exercise list into standalone and superset groups."""

from dataclasses import dataclass
from typing import Sequence

from ..models.plan import ExerciseDef


@dataclass(frozen=True)
class ExerciseGroup:
    """A contiguous run of exercises: one standalone exercise or one superset block."""

    group_id: str
    is_superset: bool
    items: tuple[ExerciseDef, ...]
    indices: tuple[int, ...]  # Positions in the plan, ascending

    def __len__(self) -> int:
        return len(self.items)

    @property
    def is_circuit(self) -> bool:
        """Whether navigation should chain and loop through this group.

        A superset tag on a lone exercise behaves as a standalone exercise.
        """
        return self.is_superset and len(self.items) > 1

    @property
    def first_index(self) -> int:
        return self.indices[0]

    @property
    def last_index(self) -> int:
        return self.indices[-1]

    def contains(self, index: int) -> bool:
        return index in self.indices

    def position_of(self, index: int) -> int:
        """Position of a plan index within this group."""
        return self.indices.index(index)


def group_exercises(exercises: Sequence[ExerciseDef]) -> list[ExerciseGroup]:
    """Group a flat exercise list, preserving order.

    Grouping is positional: the same superset id appearing in two
    non-adjacent runs yields two separate groups.

    Args:
        exercises: The plan's exercises in plan order

    Returns:
        Groups whose concatenated items reproduce ``exercises`` exactly
    """
    groups: list[ExerciseGroup] = []
    open_id: str | None = None
    open_items: list[ExerciseDef] = []
    open_indices: list[int] = []

    def flush():
        nonlocal open_id, open_items, open_indices
        if open_items:
            groups.append(
                ExerciseGroup(
                    group_id=open_id,
                    is_superset=True,
                    items=tuple(open_items),
                    indices=tuple(open_indices),
                )
            )
        open_id = None
        open_items = []
        open_indices = []

    for index, exercise in enumerate(exercises):
        if not exercise.superset_id:
            flush()
            groups.append(
                ExerciseGroup(
                    group_id=f"single_{exercise.id}_{index}",
                    is_superset=False,
                    items=(exercise,),
                    indices=(index,),
                )
            )
            continue

        if exercise.superset_id != open_id:
            flush()
            open_id = exercise.superset_id

        open_items.append(exercise)
        open_indices.append(index)

    flush()
    return groups


def flatten_groups(groups: Sequence[ExerciseGroup]) -> list[ExerciseDef]:
    """Concatenate group items back into a flat exercise list."""
    return [exercise for group in groups for exercise in group.items]


def find_group(groups: Sequence[ExerciseGroup], index: int) -> ExerciseGroup | None:
    """Find the group holding a plan index."""
    for group in groups:
        if group.first_index <= index <= group.last_index:
            return group
    return None
