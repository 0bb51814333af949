"""Data models for liftlog."""

from .plan import ExerciseDef, WorkoutPlan
from .session import (
    ExerciseLog,
    ProgressPoint,
    SetLog,
    WorkoutSessionLog,
    coerce_weight,
)

__all__ = [
    "coerce_weight",
    "ExerciseDef",
    "ExerciseLog",
    "ProgressPoint",
    "SetLog",
    "WorkoutPlan",
    "WorkoutSessionLog",
]
