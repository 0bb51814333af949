"""Workout session progression engine."""

from .accounting import Progress, compute_progress, effective_target, done_count
from .collaborators import (
    HistorySink,
    InMemoryHistorySink,
    InMemoryPlanStore,
    PlanStore,
    StaticWeightLookup,
    WeightLookup,
)
from .engine import MapEntry, SessionEngine
from .finalization import finalize_session
from .grouping import ExerciseGroup, find_group, flatten_groups, group_exercises
from .rest_timer import AudioCue, RestTimer, TimerStatus
from .state import EngineStatus, NextUp, PendingAction, PendingKind, SessionState

__all__ = [
    "AudioCue",
    "compute_progress",
    "done_count",
    "effective_target",
    "EngineStatus",
    "ExerciseGroup",
    "finalize_session",
    "find_group",
    "flatten_groups",
    "group_exercises",
    "HistorySink",
    "InMemoryHistorySink",
    "InMemoryPlanStore",
    "MapEntry",
    "NextUp",
    "PendingAction",
    "PendingKind",
    "PlanStore",
    "Progress",
    "RestTimer",
    "SessionEngine",
    "SessionState",
    "StaticWeightLookup",
    "TimerStatus",
    "WeightLookup",
]
