"""Contracts the session engine consumes, with in-memory adapters."""

from typing import Iterable, Mapping, Protocol, runtime_checkable

from ..exceptions import PlanNotFoundError
from ..models.plan import WorkoutPlan
from ..models.session import WorkoutSessionLog


@runtime_checkable
class PlanStore(Protocol):
    """Supplies plans by id."""

    def get_plan(self, plan_id: str) -> WorkoutPlan:
        """Return the plan, raising PlanNotFoundError if it does not exist."""
        ...


@runtime_checkable
class HistorySink(Protocol):
    """Durably records finished sessions."""

    def save_session(self, log: WorkoutSessionLog) -> None:
        ...


@runtime_checkable
class WeightLookup(Protocol):
    """Last weight used for an exercise, for prefilling the weight input."""

    def get_last_weight(self, exercise_id: str) -> float | None:
        ...


class InMemoryPlanStore:
    """Plan store backed by a dict."""

    def __init__(self, plans: Iterable[WorkoutPlan] = ()):
        self._plans: dict[str, WorkoutPlan] = {plan.id: plan for plan in plans}

    def get_plan(self, plan_id: str) -> WorkoutPlan:
        try:
            return self._plans[plan_id]
        except KeyError:
            raise PlanNotFoundError(plan_id) from None


class InMemoryHistorySink:
    """History sink that keeps sessions newest first.

    Also answers last-weight lookups from what it has recorded.
    """

    def __init__(self, sessions: Iterable[WorkoutSessionLog] = ()):
        self.sessions: list[WorkoutSessionLog] = list(sessions)

    def save_session(self, log: WorkoutSessionLog) -> None:
        self.sessions.insert(0, log)

    def get_last_weight(self, exercise_id: str) -> float | None:
        for session in self.sessions:
            exercise_log = session.get_exercise_log(exercise_id)
            if exercise_log is not None and exercise_log.sets:
                return exercise_log.last_weight
        return None


class StaticWeightLookup:
    """Weight lookup over a preloaded ``exercise_id -> weight`` mapping."""

    def __init__(self, weights: Mapping[str, float]):
        self._weights = dict(weights)

    def get_last_weight(self, exercise_id: str) -> float | None:
        return self._weights.get(exercise_id)
