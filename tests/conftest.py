"""Pytest configuration and fixtures."""

import tempfile
from pathlib import Path

import pytest

from liftlog.models.plan import ExerciseDef, WorkoutPlan


class FakeClock:
    """Manually advanced epoch-milliseconds clock."""

    def __init__(self, start: int = 1_700_000_000_000):
        self.now = start

    def __call__(self) -> int:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += int(seconds * 1000)


def build_exercise(exercise_id: str, sets: int = 3, **kwargs) -> ExerciseDef:
    """Build an exercise named after its id."""
    kwargs.setdefault("name", exercise_id.title())
    return ExerciseDef(id=exercise_id, sets=sets, **kwargs)


@pytest.fixture
def make_exercise():
    """Factory for exercises named after their id."""
    return build_exercise


@pytest.fixture
def clock():
    """A fake clock starting at a fixed instant."""
    return FakeClock()


@pytest.fixture
def temp_db_path():
    """Create a temporary database path."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir) / "test.db"


@pytest.fixture
def single_plan():
    """One exercise, three sets."""
    return WorkoutPlan(id="single", name="Single", exercises=[build_exercise("bench")])


@pytest.fixture
def circuit_plan():
    """Warm-up, a three-exercise circuit of two rounds, then a finisher."""
    return WorkoutPlan(
        id="circuit",
        name="Circuit day",
        exercises=[
            build_exercise("warmup", sets=1, is_duration=True),
            build_exercise("x", sets=2, superset_id="abs"),
            build_exercise("y", sets=2, superset_id="abs"),
            build_exercise("z", sets=2, superset_id="abs"),
            build_exercise("row", sets=2, default_weight=40),
        ],
    )
