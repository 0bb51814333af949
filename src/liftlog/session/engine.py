"""Set completion state machine for a live workout session.

The engine walks the user through a plan snapshot one exercise at a time.
After every completed set it decides between four outcomes:

* chain to the next member of a circuit without resting,
* rest, then loop back to the first member of the circuit,
* rest, then stay on the same exercise for its next set,
* rest, then advance to the next exercise in the plan.

The navigation decision is made *before* the rest starts and stored as a
:class:`PendingAction`; the rest timer only decides *when* it is applied.
"""

import logging
from dataclasses import dataclass
from typing import Callable

from ..config import DEFAULT_REST_SECONDS
from ..exceptions import InvalidNavigationError, SessionFinishedError
from ..models.plan import ExerciseDef, WorkoutPlan
from ..models.session import SetLog, WorkoutSessionLog, coerce_weight
from .accounting import (
    Progress,
    compute_progress,
    done_count,
    effective_target,
    exercise_status,
)
from .clock import Clock, SessionClock, now_millis
from .collaborators import HistorySink, PlanStore, WeightLookup
from .finalization import finalize_session
from .grouping import ExerciseGroup, find_group, group_exercises
from .rest_timer import AudioCue, RestTimer
from .state import (
    FINISHED_NEXT_UP,
    EngineStatus,
    NextUp,
    PendingAction,
    PendingKind,
    SessionState,
)

logger = logging.getLogger(__name__)


def format_weight(weight: float) -> str:
    """Format a weight the way it is typed into the input."""
    if float(weight).is_integer():
        return str(int(weight))
    return str(weight)


@dataclass(frozen=True)
class MapEntry:
    """One row of the exercise map."""

    index: int
    exercise: ExerciseDef
    status: str
    is_current: bool


class SessionEngine:
    """Progression engine for one session.

    Each engine owns its own :class:`SessionState`, so several sessions can
    run side by side without sharing counters.
    """

    def __init__(
        self,
        plan: WorkoutPlan,
        *,
        weight_lookup: WeightLookup | None = None,
        history_sink: HistorySink | None = None,
        clock: Clock = now_millis,
        rest_seconds: int = DEFAULT_REST_SECONDS,
        on_cue: Callable[[AudioCue], None] | None = None,
    ):
        self.plan = plan
        self.groups: list[ExerciseGroup] = group_exercises(plan.exercises)
        self.rest_seconds = rest_seconds
        self.status = EngineStatus.ACTIVE
        self.rest_timer: RestTimer | None = None
        self.pending: PendingAction | None = None
        self.next_up: NextUp | None = None

        self._weight_lookup = weight_lookup
        self._history_sink = history_sink
        self._clock = clock
        self._on_cue = on_cue

        self.state = SessionState(start_time=clock())
        self.session_clock = SessionClock(self.state.start_time, clock)
        self._prefill_weight()

    @classmethod
    def from_store(cls, store: PlanStore, plan_id: str, **kwargs) -> "SessionEngine":
        """Start a session on a snapshot of a stored plan."""
        return cls(store.get_plan(plan_id), **kwargs)

    # --- Queries ---

    @property
    def current_index(self) -> int:
        return self.state.current_index

    @property
    def current_exercise(self) -> ExerciseDef | None:
        if not self.plan.exercises:
            return None
        return self.plan.exercises[self.state.current_index]

    @property
    def current_group(self) -> ExerciseGroup | None:
        return find_group(self.groups, self.state.current_index)

    @property
    def is_resting(self) -> bool:
        return self.status == EngineStatus.RESTING

    @property
    def is_finished(self) -> bool:
        return self.status == EngineStatus.FINISHED

    @property
    def progress(self) -> Progress:
        return compute_progress(self.plan, self.state)

    @property
    def elapsed_seconds(self) -> int:
        return self.session_clock.elapsed_seconds

    @property
    def weight_input(self) -> str:
        return self.state.weight_input

    @property
    def is_last_set_of_exercise(self) -> bool:
        """Whether the current exercise has reached its effective target."""
        exercise = self.current_exercise
        if exercise is None:
            return True
        return done_count(exercise, self.state) >= effective_target(exercise, self.state)

    @property
    def set_position(self) -> int:
        """The set number shown on screen for the current exercise."""
        exercise = self.current_exercise
        if exercise is None:
            return 0
        return min(
            done_count(exercise, self.state) + 1,
            effective_target(exercise, self.state),
        )

    @property
    def current_target(self) -> int:
        exercise = self.current_exercise
        return effective_target(exercise, self.state) if exercise else 0

    @property
    def complete_label(self) -> str:
        """Label for the complete-set action, describing what it will do."""
        exercise = self.current_exercise
        if exercise is None:
            return "Done"
        group = self.current_group
        if group is not None and group.is_circuit:
            if group.position_of(self.state.current_index) < len(group) - 1:
                return "Next in circuit"
        if done_count(exercise, self.state) + 1 >= effective_target(exercise, self.state):
            return "Done, next"
        return "Done, rest"

    def map_entries(self) -> list[MapEntry]:
        """Every exercise with its status, for map-based navigation."""
        return [
            MapEntry(
                index=index,
                exercise=exercise,
                status=exercise_status(exercise, self.state),
                is_current=index == self.state.current_index,
            )
            for index, exercise in enumerate(self.plan.exercises)
        ]

    # --- Set actions ---

    def complete_set(self) -> SetLog | None:
        """Log a set for the current exercise and decide what comes next.

        Returns:
            The logged set, or None when the plan has no exercises
        """
        self._ensure_open()
        exercise = self.current_exercise
        if exercise is None:
            return None

        index = self.state.current_index
        set_log = SetLog(
            set_number=self.state.completed_count(exercise.id) + 1,
            weight=coerce_weight(self.state.weight_input),
            completed_at=self._clock(),
        )
        self.state.record_set(exercise.id, set_log)
        logger.debug(
            "Logged set %d of %s at %s", set_log.set_number, exercise.id, set_log.weight
        )

        target_reached = done_count(exercise, self.state) >= effective_target(
            exercise, self.state
        )

        group = self.current_group
        if group is not None and group.is_circuit:
            position = group.position_of(index)
            if position < len(group) - 1:
                # Circuit members chain without rest
                self._move_to(group.indices[position + 1])
                return set_log

            # The current (last) member's target decides whether the round
            # repeats, even if other members have different targets.
            if not target_reached:
                self.next_up = self._circuit_preview(group)
                self._begin_rest(PendingAction.loop_to(group.first_index), force=True)
                return set_log

        self.next_up = self._standard_preview(index)
        if target_reached and index < len(self.plan.exercises) - 1:
            action = PendingAction.advance_to(index + 1)
        else:
            action = PendingAction.stay()
        self._begin_rest(action, force=False)
        return set_log

    def skip_set(self) -> None:
        """Count a set as skipped; advance if that completes the exercise.

        Skipping is a manual override: it never rests or loops a circuit.
        """
        self._ensure_open()
        exercise = self.current_exercise
        if exercise is None:
            return

        self.state.record_skip(exercise.id)
        logger.debug("Skipped a set of %s", exercise.id)

        index = self.state.current_index
        if done_count(exercise, self.state) >= effective_target(exercise, self.state):
            if index < len(self.plan.exercises) - 1:
                self._move_to(index + 1)

    def add_extra_set(self) -> bool:
        """Raise the current exercise's target by one set.

        Returns:
            False when the exercise has no weight input (duration or circuit)
        """
        self._ensure_open()
        exercise = self.current_exercise
        if exercise is None or not exercise.takes_weight:
            logger.debug("Extra set refused for %s", exercise.id if exercise else None)
            return False
        self.state.record_extra(exercise.id)
        logger.debug(
            "Target for %s raised to %d", exercise.id, effective_target(exercise, self.state)
        )
        return True

    # --- Weight input ---

    def set_weight(self, value) -> None:
        """Replace the weight input; coerced to a number only when a set is logged."""
        self._ensure_open()
        self.state.weight_input = "" if value is None else str(value).strip()

    def adjust_weight(self, delta: float) -> float:
        """Step the weight input up or down, never below zero."""
        self._ensure_open()
        weight = max(0.0, coerce_weight(self.state.weight_input) + delta)
        self.state.weight_input = format_weight(weight)
        return weight

    # --- Navigation ---

    def jump_to_exercise(self, index: int) -> None:
        """Go straight to any exercise, bypassing rest and circuit logic."""
        self._ensure_open()
        if not 0 <= index < len(self.plan.exercises):
            raise InvalidNavigationError(index, len(self.plan.exercises))
        self._move_to(index)

    def move_next(self) -> None:
        self._ensure_open()
        if self.state.current_index < len(self.plan.exercises) - 1:
            self._move_to(self.state.current_index + 1)

    def move_prev(self) -> None:
        self._ensure_open()
        if self.state.current_index > 0:
            self._move_to(self.state.current_index - 1)

    # --- Rest ---

    def start_manual_rest(self) -> RestTimer | None:
        """Start a rest on request without changing position afterwards."""
        self._ensure_open()
        if self.current_exercise is None:
            return None
        self.next_up = self._stay_preview(self.state.current_index)
        self._begin_rest(PendingAction.stay(), force=True)
        return self.rest_timer

    def tick_rest(self) -> None:
        """Advance the running rest timer by one second."""
        if self.rest_timer is not None:
            self.rest_timer.tick()

    def finish_rest(self) -> None:
        """End the current rest now; the pending navigation is applied."""
        if self.rest_timer is not None:
            self.rest_timer.skip()

    # --- Lifecycle ---

    def finish(self) -> WorkoutSessionLog:
        """Finalize the session and hand the record to the history sink."""
        self._ensure_open()
        self._drop_rest()
        log = finalize_session(self.plan, self.state, end_time=self._clock())
        self.status = EngineStatus.FINISHED
        if self._history_sink is not None:
            self._history_sink.save_session(log)
        return log

    def abandon(self) -> None:
        """Discard the session without recording anything."""
        self._ensure_open()
        self._drop_rest()
        self.status = EngineStatus.FINISHED
        logger.info("Abandoned session on plan %s", self.plan.id)

    # --- Internals ---

    def _ensure_open(self) -> None:
        if self.status == EngineStatus.FINISHED:
            raise SessionFinishedError("Session is already finished")

    def _move_to(self, index: int) -> None:
        if index == self.state.current_index:
            return
        logger.debug("Moving from exercise %d to %d", self.state.current_index, index)
        self.state.current_index = index
        self._prefill_weight()

    def _prefill_weight(self) -> None:
        exercise = self.current_exercise
        if exercise is None:
            return
        weight = None
        if self._weight_lookup is not None:
            weight = self._weight_lookup.get_last_weight(exercise.id)
        if weight is not None:
            self.state.weight_input = format_weight(weight)
        elif exercise.default_weight:
            self.state.weight_input = format_weight(exercise.default_weight)
        else:
            self.state.weight_input = ""

    def _stay_preview(self, index: int) -> NextUp:
        """Preview for a rest that resumes on the same exercise."""
        exercise = self.plan.exercises[index]
        done = done_count(exercise, self.state)
        target = effective_target(exercise, self.state)
        set_number = min(done + 1, target)
        if done < target:
            set_info = f"Set {set_number} of {target}"
        else:
            set_info = f"All {target} sets done"
        return NextUp(
            name=exercise.name,
            set_info=set_info,
            exercise_index=index,
            set_number=set_number,
            target=target,
        )

    def _standard_preview(self, index: int) -> NextUp:
        exercise = self.plan.exercises[index]
        done = done_count(exercise, self.state)
        target = effective_target(exercise, self.state)
        group = find_group(self.groups, index)
        in_circuit = group is not None and group.is_circuit

        if done < target and not in_circuit:
            return NextUp(
                name=exercise.name,
                set_info=f"Set {done + 1} of {target}",
                exercise_index=index,
                set_number=done + 1,
                target=target,
            )

        next_index = index + 1
        if next_index < len(self.plan.exercises):
            next_exercise = self.plan.exercises[next_index]
            next_target = effective_target(next_exercise, self.state)
            return NextUp(
                name=next_exercise.name,
                set_info=f"Set 1 of {next_target}",
                exercise_index=next_index,
                set_number=1,
                target=next_target,
            )

        return FINISHED_NEXT_UP

    def _circuit_preview(self, group: ExerciseGroup) -> NextUp:
        first = group.items[0]
        target = effective_target(first, self.state)
        set_number = min(done_count(first, self.state) + 1, target)
        return NextUp(
            name=first.name,
            set_info=f"Set {set_number} of {target} (circuit)",
            exercise_index=group.first_index,
            set_number=set_number,
            target=target,
            is_circuit_round=True,
        )

    def _begin_rest(self, action: PendingAction, force: bool) -> None:
        exercise = self.current_exercise
        if exercise.is_duration and not force:
            self._drop_rest()
            self._apply(action)
            return

        # A new rest replaces one still running
        self._drop_rest()
        self.pending = action
        self.status = EngineStatus.RESTING
        timer = RestTimer(
            self.rest_seconds,
            on_complete=lambda: self._on_rest_complete(timer),
            on_cue=self._on_cue,
        )
        self.rest_timer = timer
        logger.debug("Resting %ds, then %s", self.rest_seconds, action.kind.value)
        timer.start()

    def _on_rest_complete(self, timer: RestTimer) -> None:
        if timer is not self.rest_timer:
            return
        action = self.pending
        self.rest_timer = None
        self.pending = None
        if self.status == EngineStatus.FINISHED:
            return
        self.status = EngineStatus.ACTIVE
        if action is not None:
            self._apply(action)

    def _drop_rest(self) -> None:
        self.rest_timer = None
        self.pending = None
        if self.status == EngineStatus.RESTING:
            self.status = EngineStatus.ACTIVE

    def _apply(self, action: PendingAction) -> None:
        if action.kind in (PendingKind.ADVANCE, PendingKind.LOOP):
            self._move_to(action.index)
