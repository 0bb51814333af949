"""Working state of a session in progress."""

from dataclasses import dataclass, field
from enum import Enum

from ..models.session import SetLog


class EngineStatus(str, Enum):
    """Where the engine is in a session."""

    ACTIVE = "active"
    RESTING = "resting"
    FINISHED = "finished"


class PendingKind(str, Enum):
    """What happens when a rest period ends."""

    ADVANCE = "advance"  # Move on to the next plan exercise
    LOOP = "loop"  # Circuit repeat: back to the first member of the group
    STAY = "stay"  # Remain on the current exercise


@dataclass(frozen=True)
class PendingAction:
    """Navigation decided before a rest period, applied when it ends."""

    kind: PendingKind
    index: int | None = None

    @classmethod
    def advance_to(cls, index: int) -> "PendingAction":
        return cls(PendingKind.ADVANCE, index)

    @classmethod
    def loop_to(cls, index: int) -> "PendingAction":
        return cls(PendingKind.LOOP, index)

    @classmethod
    def stay(cls) -> "PendingAction":
        return cls(PendingKind.STAY)


@dataclass(frozen=True)
class NextUp:
    """What the user will do when the current rest ends."""

    name: str
    set_info: str
    exercise_index: int | None = None
    set_number: int | None = None
    target: int | None = None
    is_circuit_round: bool = False
    is_finished: bool = False


FINISHED_NEXT_UP = NextUp(name="Workout complete!", set_info="Great work", is_finished=True)


@dataclass
class SessionState:
    """Mutable record of a session that has not been finalized yet.

    Owned by a single engine; never shared between sessions.
    """

    start_time: int  # Epoch milliseconds
    current_index: int = 0
    completed: dict[str, list[SetLog]] = field(default_factory=dict)
    skipped: dict[str, int] = field(default_factory=dict)
    extras: dict[str, int] = field(default_factory=dict)
    weight_input: str = ""

    def completed_count(self, exercise_id: str) -> int:
        return len(self.completed.get(exercise_id, ()))

    def skipped_count(self, exercise_id: str) -> int:
        return self.skipped.get(exercise_id, 0)

    def extra_count(self, exercise_id: str) -> int:
        return self.extras.get(exercise_id, 0)

    def record_set(self, exercise_id: str, set_log: SetLog) -> None:
        self.completed.setdefault(exercise_id, []).append(set_log)

    def record_skip(self, exercise_id: str) -> None:
        self.skipped[exercise_id] = self.skipped_count(exercise_id) + 1

    def record_extra(self, exercise_id: str) -> None:
        self.extras[exercise_id] = self.extra_count(exercise_id) + 1
