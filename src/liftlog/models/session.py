"""Logged set and finished session models."""

from dataclasses import dataclass, field
from datetime import datetime


def coerce_weight(value) -> float:
    """Parse a weight input, treating anything non-numeric as 0."""
    if isinstance(value, bool):
        return 0.0
    try:
        weight = float(value)
    except (TypeError, ValueError):
        return 0.0
    # NaN and infinities are not weights either
    if weight != weight or weight in (float("inf"), float("-inf")):
        return 0.0
    return weight


def format_timestamp(millis: int) -> str:
    """Format an epoch-milliseconds timestamp for display."""
    return datetime.fromtimestamp(millis / 1000).strftime("%Y-%m-%d %H:%M")


@dataclass(frozen=True)
class SetLog:
    """One finished set."""

    set_number: int
    weight: float
    completed_at: int  # Epoch milliseconds

    def to_dict(self) -> dict:
        """Convert to dictionary."""
        return {
            "set_number": self.set_number,
            "weight": self.weight,
            "completed_at": self.completed_at,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "SetLog":
        """Create from dictionary."""
        try:
            set_number = int(data.get("set_number", data.get("setNumber", 1)))
        except (TypeError, ValueError):
            set_number = 1
        try:
            completed_at = int(data.get("completed_at", data.get("completedAt", 0)))
        except (TypeError, ValueError):
            completed_at = 0
        return cls(
            set_number=set_number or 1,
            weight=coerce_weight(data.get("weight")),
            completed_at=completed_at,
        )


@dataclass(frozen=True)
class ProgressPoint:
    """Heaviest weight used on an exercise in one session."""

    timestamp: int  # Session end, epoch milliseconds
    weight: float

    @property
    def date_label(self) -> str:
        return datetime.fromtimestamp(self.timestamp / 1000).strftime("%d/%m")


@dataclass(frozen=True)
class ExerciseLog:
    """All sets logged for one exercise in one session."""

    exercise_id: str
    sets: tuple[SetLog, ...] = field(default_factory=tuple)

    @property
    def last_weight(self) -> float | None:
        """Weight used on the final logged set."""
        if not self.sets:
            return None
        return self.sets[-1].weight

    @property
    def top_weight(self) -> float:
        """Heaviest weight logged."""
        return max((s.weight for s in self.sets), default=0.0)

    def to_dict(self) -> dict:
        """Convert to dictionary."""
        return {
            "exercise_id": self.exercise_id,
            "sets": [s.to_dict() for s in self.sets],
        }

    @classmethod
    def from_dict(cls, data: dict) -> "ExerciseLog":
        """Create from dictionary."""
        raw_sets = data.get("sets")
        if not isinstance(raw_sets, list):
            raw_sets = []
        return cls(
            exercise_id=str(data.get("exercise_id", data.get("exerciseId", "unknown_ex"))),
            sets=tuple(SetLog.from_dict(s) for s in raw_sets if isinstance(s, dict)),
        )


@dataclass(frozen=True)
class WorkoutSessionLog:
    """A finished session, as handed to the history sink.

    Created once at finalization and never modified afterwards.
    """

    id: str
    plan_id: str
    start_time: int  # Epoch milliseconds
    end_time: int  # Epoch milliseconds
    duration_seconds: float
    exercises: tuple[ExerciseLog, ...] = field(default_factory=tuple)

    @property
    def total_sets(self) -> int:
        """Number of sets logged across all exercises."""
        return sum(len(ex.sets) for ex in self.exercises)

    @property
    def total_volume(self) -> float:
        """Sum of the weight of every logged set."""
        return sum(s.weight for ex in self.exercises for s in ex.sets)

    def get_exercise_log(self, exercise_id: str) -> ExerciseLog | None:
        """Find the log for one exercise."""
        for ex in self.exercises:
            if ex.exercise_id == exercise_id:
                return ex
        return None

    def get_summary(self) -> str:
        """Generate a summary of the session."""
        minutes, seconds = divmod(int(self.duration_seconds), 60)
        summary = f"Session {self.id}\n"
        summary += f"Plan: {self.plan_id}\n"
        summary += f"Started: {format_timestamp(self.start_time)}\n"
        summary += f"Duration: {minutes}:{seconds:02d}\n"
        summary += f"Sets logged: {self.total_sets}\n"
        summary += f"Volume: {self.total_volume:g} kg\n\n"

        for ex in self.exercises:
            weights = ", ".join(f"{s.weight:g}" for s in ex.sets)
            summary += (
                f"  - {ex.exercise_id}: {len(ex.sets)} sets ({weights}), top {ex.top_weight:g}\n"
            )

        return summary

    def to_dict(self) -> dict:
        """Convert to dictionary for storage."""
        return {
            "id": self.id,
            "plan_id": self.plan_id,
            "start_time": self.start_time,
            "end_time": self.end_time,
            "duration_seconds": self.duration_seconds,
            "exercises": [ex.to_dict() for ex in self.exercises],
        }

    @classmethod
    def from_dict(cls, data: dict) -> "WorkoutSessionLog":
        """Create from dictionary."""
        raw_exercises = data.get("exercises")
        if not isinstance(raw_exercises, list):
            raw_exercises = []
        return cls(
            id=str(data["id"]),
            plan_id=str(data.get("plan_id", data.get("workoutType", ""))),
            start_time=int(data.get("start_time", data.get("startTime", 0))),
            end_time=int(data.get("end_time", data.get("endTime", 0))),
            duration_seconds=float(
                data.get("duration_seconds", data.get("durationSeconds", 0))
            ),
            exercises=tuple(
                ExerciseLog.from_dict(ex) for ex in raw_exercises if isinstance(ex, dict)
            ),
        )
