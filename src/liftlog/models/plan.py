"""Workout plan data models."""

import logging
import uuid
from dataclasses import dataclass, field

logger = logging.getLogger(__name__)

DEFAULT_SETS = 3
DEFAULT_REPS = "10"
UNKNOWN_EXERCISE_NAME = "Unknown exercise"
UNKNOWN_PLAN_NAME = "Imported plan"


def _pick(data: dict, *keys, default=None):
    """Return the first present key (accepts snake_case and camelCase exports)."""
    for key in keys:
        if key in data and data[key] is not None:
            return data[key]
    return default


def _coerce_sets(value) -> int:
    try:
        sets = int(float(value))
    except (TypeError, ValueError):
        return DEFAULT_SETS
    return sets if sets > 0 else DEFAULT_SETS


def _coerce_optional_float(value) -> float | None:
    if value is None or value == "":
        return None
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


@dataclass(frozen=True)
class ExerciseDef:
    """An exercise as planned: what to do and how many sets."""

    id: str
    name: str
    sets: int = DEFAULT_SETS
    reps: str = DEFAULT_REPS  # Display string, may encode a duration ("30\"")
    is_duration: bool = False  # Cardio/stretching: no weight, no forced rest
    is_circuit: bool = False  # No weight input
    superset_id: str | None = None  # Adjacent exercises sharing it form a circuit
    notes: str = ""
    default_weight: float | None = None
    tags: tuple[str, ...] = ()

    @property
    def takes_weight(self) -> bool:
        """Whether the exercise has a per-set weight input."""
        return not (self.is_duration or self.is_circuit)

    def to_dict(self) -> dict:
        """Convert to dictionary."""
        return {
            "id": self.id,
            "name": self.name,
            "sets": self.sets,
            "reps": self.reps,
            "is_duration": self.is_duration,
            "is_circuit": self.is_circuit,
            "superset_id": self.superset_id,
            "notes": self.notes,
            "default_weight": self.default_weight,
            "tags": list(self.tags),
        }

    @classmethod
    def from_dict(cls, data: dict) -> "ExerciseDef":
        """Create from dictionary, repairing missing or malformed fields."""
        raw_tags = _pick(data, "tags", default=[])
        if not isinstance(raw_tags, (list, tuple)):
            raw_tags = []
        tags = tuple(str(t) for t in raw_tags if t is not None and str(t) not in ("", "null"))

        superset_id = _pick(data, "superset_id", "supersetId")
        return cls(
            id=str(_pick(data, "id") or f"restored_ex_{uuid.uuid4().hex[:9]}"),
            name=str(_pick(data, "name") or UNKNOWN_EXERCISE_NAME),
            sets=_coerce_sets(_pick(data, "sets")),
            reps=str(_pick(data, "reps") or DEFAULT_REPS),
            is_duration=bool(_pick(data, "is_duration", "isDuration", default=False)),
            is_circuit=bool(_pick(data, "is_circuit", "isCircuit", default=False)),
            superset_id=str(superset_id) if superset_id else None,
            notes=str(_pick(data, "notes", default="")),
            default_weight=_coerce_optional_float(
                _pick(data, "default_weight", "defaultWeight")
            ),
            tags=tags,
        )


@dataclass(frozen=True)
class WorkoutPlan:
    """An ordered list of exercises.

    Order is both the display order and the default navigation order.
    """

    id: str
    name: str
    exercises: tuple[ExerciseDef, ...] = field(default_factory=tuple)
    is_hidden: bool = False

    def __post_init__(self):
        # Accept lists from callers while keeping the snapshot immutable
        if not isinstance(self.exercises, tuple):
            object.__setattr__(self, "exercises", tuple(self.exercises))

    def __len__(self) -> int:
        return len(self.exercises)

    @property
    def total_planned_sets(self) -> int:
        """Sum of planned sets, ignoring any extras added during a session."""
        return sum(ex.sets for ex in self.exercises)

    def index_of(self, exercise_id: str) -> int | None:
        """Position of the first exercise with this id."""
        for i, ex in enumerate(self.exercises):
            if ex.id == exercise_id:
                return i
        return None

    def get_exercise(self, exercise_id: str) -> ExerciseDef | None:
        """Look up an exercise by id."""
        index = self.index_of(exercise_id)
        return self.exercises[index] if index is not None else None

    def to_dict(self) -> dict:
        """Convert to dictionary for storage."""
        return {
            "id": self.id,
            "name": self.name,
            "exercises": [ex.to_dict() for ex in self.exercises],
            "is_hidden": self.is_hidden,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "WorkoutPlan":
        """Create from dictionary, dropping entries that are not exercises."""
        raw_exercises = data.get("exercises")
        if not isinstance(raw_exercises, list):
            raw_exercises = []

        exercises = []
        for entry in raw_exercises:
            if not isinstance(entry, dict):
                logger.warning("Dropping non-object exercise entry: %r", entry)
                continue
            exercises.append(ExerciseDef.from_dict(entry))

        return cls(
            id=str(data.get("id") or f"restored_plan_{uuid.uuid4().hex[:9]}"),
            name=str(data.get("name") or UNKNOWN_PLAN_NAME),
            exercises=tuple(exercises),
            is_hidden=bool(_pick(data, "is_hidden", "isHidden", default=False)),
        )
