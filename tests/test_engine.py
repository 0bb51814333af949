"""Tests for the set completion state machine."""

import pytest

from liftlog.exceptions import (
    InvalidNavigationError,
    PlanNotFoundError,
    SessionFinishedError,
)
from liftlog.models.plan import WorkoutPlan
from liftlog.session.collaborators import (
    InMemoryHistorySink,
    InMemoryPlanStore,
    PlanStore,
    StaticWeightLookup,
)
from liftlog.session.engine import SessionEngine
from liftlog.session.rest_timer import AudioCue
from liftlog.session.state import EngineStatus, PendingKind


def complete_and_rest(engine: SessionEngine) -> None:
    """Log a set and end any rest it started."""
    engine.complete_set()
    engine.finish_rest()


@pytest.fixture
def two_plan(make_exercise):
    """Two standalone exercises of three sets."""
    return WorkoutPlan(
        id="two",
        name="Two",
        exercises=[make_exercise("bench"), make_exercise("row")],
    )


class TestStandardProgression:
    """Tests for non-circuit exercises."""

    def test_single_exercise_scenario(self, single_plan, clock):
        """Test completing every set of a one-exercise plan."""
        engine = SessionEngine(single_plan, clock=clock)

        for expected in (1, 2, 3):
            set_log = engine.complete_set()
            assert set_log.set_number == expected
            assert engine.is_resting
            engine.finish_rest()

        assert engine.is_last_set_of_exercise
        assert engine.current_index == 0
        assert engine.next_up.is_finished
        assert engine.progress.percent == 100

    def test_rest_then_stay_until_target(self, two_plan, clock):
        """Test the pointer stays on an exercise until its target is met."""
        engine = SessionEngine(two_plan, clock=clock)

        engine.complete_set()
        assert engine.is_resting
        assert engine.pending.kind == PendingKind.STAY
        assert engine.next_up.name == "Bench"
        assert engine.next_up.set_info == "Set 2 of 3"

        engine.finish_rest()
        assert engine.status == EngineStatus.ACTIVE
        assert engine.current_index == 0

    def test_last_set_advances_after_rest(self, two_plan, clock):
        """Test the final set rests, then advances to the next exercise."""
        engine = SessionEngine(two_plan, clock=clock)
        complete_and_rest(engine)
        complete_and_rest(engine)

        engine.complete_set()
        assert engine.is_resting
        assert engine.pending.kind == PendingKind.ADVANCE
        assert engine.next_up.name == "Row"
        assert engine.next_up.set_info == "Set 1 of 3"
        assert engine.current_index == 0

        engine.finish_rest()
        assert engine.current_index == 1

    def test_rest_completion_by_ticking(self, two_plan, clock):
        """Test the countdown reaching zero applies the pending move."""
        engine = SessionEngine(two_plan, clock=clock, rest_seconds=3)
        complete_and_rest(engine)
        complete_and_rest(engine)
        engine.complete_set()

        engine.tick_rest()
        engine.tick_rest()
        assert engine.is_resting
        engine.tick_rest()

        assert not engine.is_resting
        assert engine.rest_timer is None
        assert engine.current_index == 1

    def test_cues_forwarded(self, single_plan, clock):
        """Test rest timer cues reach the engine's listener."""
        cues = []
        engine = SessionEngine(single_plan, clock=clock, rest_seconds=4, on_cue=cues.append)
        engine.complete_set()
        for _ in range(4):
            engine.tick_rest()

        assert cues == [AudioCue.WARNING] * 3 + [AudioCue.FINAL]

    def test_duration_exercise_skips_rest(self, make_exercise, clock):
        """Test duration exercises move on without a countdown."""
        plan = WorkoutPlan(
            id="p",
            name="P",
            exercises=[make_exercise("plank", sets=2, is_duration=True), make_exercise("row")],
        )
        engine = SessionEngine(plan, clock=clock)

        engine.complete_set()
        assert not engine.is_resting
        assert engine.current_index == 0

        engine.complete_set()
        assert not engine.is_resting
        assert engine.current_index == 1

    def test_last_exercise_does_not_advance(self, single_plan, clock):
        """Test completing past the target on the last exercise stays put."""
        engine = SessionEngine(single_plan, clock=clock)
        for _ in range(4):
            complete_and_rest(engine)

        assert engine.current_index == 0
        assert engine.state.completed_count("bench") == 4

    def test_zero_second_rest_resumes_immediately(self, two_plan, clock):
        """Test a zero rest duration applies the pending action at once."""
        engine = SessionEngine(two_plan, clock=clock, rest_seconds=0)
        for _ in range(3):
            engine.complete_set()

        assert not engine.is_resting
        assert engine.current_index == 1


class TestCircuitProgression:
    """Tests for superset/circuit navigation."""

    def test_duration_warmup_leads_into_circuit(self, circuit_plan, clock):
        """Test a one-set duration warm-up advances without rest."""
        engine = SessionEngine(circuit_plan, clock=clock)
        engine.complete_set()

        assert not engine.is_resting
        assert engine.current_index == 1

    def test_circuit_scenario(self, circuit_plan, clock):
        """Test chaining, loop-back rest, and leaving after the last round."""
        engine = SessionEngine(circuit_plan, clock=clock)
        engine.jump_to_exercise(1)

        engine.complete_set()  # X round 1
        assert engine.current_index == 2
        assert not engine.is_resting

        engine.complete_set()  # Y round 1
        assert engine.current_index == 3
        assert not engine.is_resting

        engine.complete_set()  # Z round 1
        assert engine.is_resting
        assert engine.pending.kind == PendingKind.LOOP
        assert engine.next_up.name == "X"
        assert engine.next_up.is_circuit_round
        assert engine.next_up.set_info == "Set 2 of 2 (circuit)"

        engine.finish_rest()
        assert engine.current_index == 1

        engine.complete_set()  # X round 2
        engine.complete_set()  # Y round 2
        assert engine.current_index == 3
        assert not engine.is_resting

        engine.complete_set()  # Z round 2
        assert engine.is_resting
        assert engine.pending.kind == PendingKind.ADVANCE
        assert engine.next_up.name == "Row"

        engine.finish_rest()
        assert engine.current_index == 4

    def test_chaining_never_rests(self, circuit_plan, clock):
        """Test non-last members never enter the rest state."""
        engine = SessionEngine(circuit_plan, clock=clock)
        engine.jump_to_exercise(1)

        for _ in range(2):
            for member in (1, 2):
                assert engine.current_index == member
                engine.complete_set()
                assert engine.status == EngineStatus.ACTIVE
            engine.complete_set()
            engine.finish_rest()

    def test_loop_rest_forced_for_duration_member(self, make_exercise, clock):
        """Test a timed last member still rests before the next round."""
        plan = WorkoutPlan(
            id="p",
            name="P",
            exercises=[
                make_exercise("crunch", sets=2, superset_id="abs"),
                make_exercise("plank", sets=2, superset_id="abs", is_duration=True),
            ],
        )
        engine = SessionEngine(plan, clock=clock)
        engine.complete_set()
        engine.complete_set()

        assert engine.is_resting
        assert engine.pending.kind == PendingKind.LOOP

    def test_last_round_on_duration_member_skips_rest(self, make_exercise, clock):
        """Test the final round of a timed last member moves on at once."""
        plan = WorkoutPlan(
            id="p",
            name="P",
            exercises=[
                make_exercise("crunch", sets=1, superset_id="abs"),
                make_exercise("plank", sets=1, superset_id="abs", is_duration=True),
                make_exercise("row"),
            ],
        )
        engine = SessionEngine(plan, clock=clock)
        engine.complete_set()
        engine.complete_set()

        assert not engine.is_resting
        assert engine.current_index == 2

    def test_lone_superset_tag_behaves_standalone(self, make_exercise, clock):
        """Test a superset id on a single exercise does not loop."""
        plan = WorkoutPlan(
            id="p",
            name="P",
            exercises=[make_exercise("a", sets=2, superset_id="x"), make_exercise("b")],
        )
        engine = SessionEngine(plan, clock=clock)
        engine.complete_set()

        assert engine.pending.kind == PendingKind.STAY
        assert engine.next_up.name == "A"
        engine.finish_rest()
        assert engine.current_index == 0

    def test_non_contiguous_tag_loops_within_own_run(self, make_exercise, clock):
        """Test a circuit loops back to its own run, not an earlier one."""
        plan = WorkoutPlan(
            id="p",
            name="P",
            exercises=[
                make_exercise("a", sets=2, superset_id="x"),
                make_exercise("b"),
                make_exercise("c", sets=2, superset_id="x"),
                make_exercise("d", sets=2, superset_id="x"),
            ],
        )
        engine = SessionEngine(plan, clock=clock)
        engine.jump_to_exercise(2)
        engine.complete_set()
        engine.complete_set()

        assert engine.pending.kind == PendingKind.LOOP
        assert engine.pending.index == 2

    def test_loop_uses_last_member_target(self, make_exercise, clock):
        """Test the last member's target decides when the circuit ends."""
        plan = WorkoutPlan(
            id="p",
            name="P",
            exercises=[
                make_exercise("x", sets=3, superset_id="c"),
                make_exercise("y", sets=2, superset_id="c"),
                make_exercise("row"),
            ],
        )
        engine = SessionEngine(plan, clock=clock)
        for _ in range(2):
            engine.complete_set()
            complete_and_rest(engine)

        # X still has a set left, but Y is done so the circuit is left
        assert engine.current_index == 2
        assert engine.state.completed_count("x") == 2

    def test_skip_in_circuit_does_not_loop(self, circuit_plan, clock):
        """Test skipping is a manual override with no rest or loop."""
        engine = SessionEngine(circuit_plan, clock=clock)
        engine.jump_to_exercise(3)

        engine.skip_set()
        assert engine.current_index == 3
        assert not engine.is_resting

        engine.skip_set()
        assert engine.current_index == 4
        assert not engine.is_resting


class TestExtraAndSkippedSets:
    """Tests for add_extra_set and skip_set."""

    def test_extra_set_extends_exercise(self, two_plan, clock):
        """Test an added set allows one more set before advancing."""
        engine = SessionEngine(two_plan, clock=clock)
        for _ in range(3):
            complete_and_rest(engine)
        assert engine.current_index == 1

        engine.jump_to_exercise(0)
        assert engine.is_last_set_of_exercise

        assert engine.add_extra_set()
        assert engine.current_target == 4
        assert not engine.is_last_set_of_exercise

        set_log = engine.complete_set()
        assert set_log.set_number == 4
        assert engine.pending.kind == PendingKind.ADVANCE

    def test_extra_set_before_last(self, two_plan, clock):
        """Test adding a set mid-exercise keeps the pointer on it."""
        engine = SessionEngine(two_plan, clock=clock)
        complete_and_rest(engine)
        complete_and_rest(engine)
        engine.add_extra_set()

        complete_and_rest(engine)
        assert engine.current_index == 0

        complete_and_rest(engine)
        assert engine.current_index == 1

    def test_extra_set_refused_without_weight_input(self, make_exercise, clock):
        """Test duration and circuit exercises cannot be extended."""
        plan = WorkoutPlan(
            id="p",
            name="P",
            exercises=[
                make_exercise("plank", is_duration=True),
                make_exercise("burpees", is_circuit=True),
            ],
        )
        engine = SessionEngine(plan, clock=clock)

        assert not engine.add_extra_set()
        engine.move_next()
        assert not engine.add_extra_set()
        assert engine.state.extras == {}

    def test_skip_only_exercise(self, two_plan, clock):
        """Test skipping every set advances and leaves no record."""
        sink = InMemoryHistorySink()
        engine = SessionEngine(two_plan, clock=clock, history_sink=sink)

        engine.skip_set()
        engine.skip_set()
        assert engine.current_index == 0
        engine.skip_set()

        assert engine.current_index == 1
        assert not engine.is_resting
        assert engine.progress.total_completed == 3

        log = engine.finish()
        assert log.get_exercise_log("bench") is None
        assert log.exercises == ()
        assert sink.sessions == [log]

    def test_skip_on_last_exercise_stays(self, single_plan, clock):
        """Test skipping out the final exercise does not move the pointer."""
        engine = SessionEngine(single_plan, clock=clock)
        for _ in range(3):
            engine.skip_set()

        assert engine.current_index == 0
        assert engine.is_last_set_of_exercise


class TestNavigation:
    """Tests for manual navigation."""

    def test_move_clamped(self, two_plan, clock):
        """Test next/previous stop at the plan bounds."""
        engine = SessionEngine(two_plan, clock=clock)

        engine.move_prev()
        assert engine.current_index == 0
        engine.move_next()
        engine.move_next()
        assert engine.current_index == 1

    def test_jump_any_index(self, circuit_plan, clock):
        """Test jumping lands anywhere, including mid-circuit."""
        engine = SessionEngine(circuit_plan, clock=clock)
        engine.jump_to_exercise(3)
        assert engine.current_exercise.id == "z"
        assert engine.current_group.group_id == "abs"

    def test_jump_out_of_range(self, two_plan, clock):
        """Test jumping outside the plan raises."""
        engine = SessionEngine(two_plan, clock=clock)
        with pytest.raises(InvalidNavigationError):
            engine.jump_to_exercise(2)
        with pytest.raises(IndexError):
            engine.jump_to_exercise(-1)

    def test_pending_action_is_absolute(self, make_exercise, clock):
        """Test the move decided before rest holds even after navigating."""
        plan = WorkoutPlan(
            id="p",
            name="P",
            exercises=[make_exercise("a", sets=1), make_exercise("b"), make_exercise("c")],
        )
        engine = SessionEngine(plan, clock=clock)
        engine.complete_set()
        assert engine.is_resting

        engine.jump_to_exercise(2)
        assert engine.is_resting
        engine.finish_rest()
        assert engine.current_index == 1

    def test_empty_plan(self, clock):
        """Test an empty plan never crashes."""
        engine = SessionEngine(WorkoutPlan(id="e", name="Empty"), clock=clock)

        engine.move_next()
        engine.move_prev()
        assert engine.complete_set() is None
        engine.skip_set()
        assert not engine.add_extra_set()
        assert engine.start_manual_rest() is None
        assert engine.current_exercise is None
        assert engine.progress.percent == 0
        assert engine.finish().exercises == ()

    def test_map_entries(self, circuit_plan, clock):
        """Test map statuses and current marker."""
        engine = SessionEngine(circuit_plan, clock=clock)
        engine.complete_set()  # Warm-up done, now on X
        engine.complete_set()  # X round 1, now on Y

        entries = engine.map_entries()
        assert [e.status for e in entries] == ["done", "in_progress", "todo", "todo", "todo"]
        assert [e.is_current for e in entries] == [False, False, True, False, False]


class TestManualRest:
    """Tests for the rest timer started on request."""

    def test_manual_rest_stays(self, two_plan, clock):
        """Test a manual rest previews the next set and does not move."""
        engine = SessionEngine(two_plan, clock=clock)
        timer = engine.start_manual_rest()

        assert timer is engine.rest_timer
        assert engine.is_resting
        assert engine.pending.kind == PendingKind.STAY
        assert engine.next_up.set_info == "Set 1 of 3"

        engine.finish_rest()
        assert engine.current_index == 0
        assert not engine.is_resting

    def test_manual_rest_mid_circuit_previews_same_member(self, make_exercise, clock):
        """Test the preview matches where a manual rest inside a circuit ends."""
        plan = WorkoutPlan(
            id="p",
            name="P",
            exercises=[
                make_exercise("x", sets=2, superset_id="s"),
                make_exercise("y", sets=2, superset_id="s"),
            ],
        )
        engine = SessionEngine(plan, clock=clock)
        engine.start_manual_rest()

        assert engine.next_up.name == "X"
        assert engine.next_up.set_info == "Set 1 of 2"

        engine.finish_rest()
        assert engine.current_exercise.name == engine.next_up.name

    def test_manual_rest_after_last_set(self, single_plan, clock):
        """Test resting on a finished exercise does not preview another one."""
        engine = SessionEngine(single_plan, clock=clock)
        for _ in range(3):
            engine.skip_set()
        engine.start_manual_rest()

        assert engine.next_up.name == "Bench"
        assert engine.next_up.set_info == "All 3 sets done"
        assert not engine.next_up.is_finished

    def test_manual_rest_on_duration_exercise(self, make_exercise, clock):
        """Test a manual rest always counts down."""
        plan = WorkoutPlan(
            id="p", name="P", exercises=[make_exercise("plank", is_duration=True)]
        )
        engine = SessionEngine(plan, clock=clock)
        engine.start_manual_rest()

        assert engine.is_resting

    def test_new_rest_replaces_old(self, two_plan, clock):
        """Test completing a set mid-rest replaces the running rest."""
        engine = SessionEngine(two_plan, clock=clock)
        engine.complete_set()
        first_timer = engine.rest_timer

        engine.complete_set()
        assert engine.rest_timer is not first_timer

        first_timer.skip()
        assert engine.is_resting

        engine.complete_set()
        engine.finish_rest()
        assert engine.current_index == 1


class TestWeightInput:
    """Tests for weight prefill and coercion."""

    def test_prefill_from_lookup(self, circuit_plan, clock):
        """Test the last logged weight wins over the default."""
        lookup = StaticWeightLookup({"row": 42.5})
        engine = SessionEngine(circuit_plan, clock=clock, weight_lookup=lookup)
        engine.jump_to_exercise(4)

        assert engine.weight_input == "42.5"

    def test_prefill_from_default(self, circuit_plan, clock):
        """Test the default weight is used without history."""
        engine = SessionEngine(circuit_plan, clock=clock, weight_lookup=StaticWeightLookup({}))
        engine.jump_to_exercise(4)
        assert engine.weight_input == "40"

        engine.jump_to_exercise(1)
        assert engine.weight_input == ""

    def test_prefill_on_first_exercise(self, single_plan, clock):
        """Test the starting exercise is prefilled too."""
        engine = SessionEngine(
            single_plan, clock=clock, weight_lookup=StaticWeightLookup({"bench": 80})
        )
        assert engine.weight_input == "80"

    def test_weight_kept_between_sets(self, single_plan, clock):
        """Test a typed weight survives staying on the same exercise."""
        engine = SessionEngine(single_plan, clock=clock)
        engine.set_weight("100")
        complete_and_rest(engine)

        assert engine.weight_input == "100"
        assert engine.complete_set().weight == 100.0

    def test_non_numeric_weight_logs_zero(self, single_plan, clock):
        """Test invalid input is logged as zero rather than rejected."""
        engine = SessionEngine(single_plan, clock=clock)
        engine.set_weight("heavy")

        assert engine.complete_set().weight == 0.0

    def test_adjust_weight(self, single_plan, clock):
        """Test stepping the weight and flooring at zero."""
        engine = SessionEngine(single_plan, clock=clock)
        engine.set_weight("20")

        assert engine.adjust_weight(1.25) == 21.25
        assert engine.weight_input == "21.25"

        engine.set_weight("")
        assert engine.adjust_weight(-1.25) == 0.0
        assert engine.weight_input == "0"


class TestLabels:
    """Tests for on-screen counters and labels."""

    def test_complete_label(self, circuit_plan, clock):
        """Test the complete action describes what it will do."""
        engine = SessionEngine(circuit_plan, clock=clock)
        engine.jump_to_exercise(1)
        assert engine.complete_label == "Next in circuit"

        engine.jump_to_exercise(3)
        assert engine.complete_label == "Done, rest"

        engine.jump_to_exercise(4)
        assert engine.complete_label == "Done, rest"
        engine.skip_set()
        assert engine.complete_label == "Done, next"

    def test_set_position(self, single_plan, clock):
        """Test the set counter never passes the target."""
        engine = SessionEngine(single_plan, clock=clock)
        assert engine.set_position == 1

        for _ in range(5):
            engine.skip_set()
        assert engine.set_position == 3
        assert engine.is_last_set_of_exercise


class TestLifecycle:
    """Tests for finishing and abandoning sessions."""

    def test_finish_records_session(self, two_plan, clock):
        """Test finishing snapshots sets and hands them to the sink."""
        sink = InMemoryHistorySink()
        engine = SessionEngine(two_plan, clock=clock, history_sink=sink)
        engine.set_weight("60")
        engine.complete_set()
        clock.advance(90)
        engine.finish_rest()
        engine.complete_set()
        clock.advance(30)

        log = engine.finish()

        assert engine.is_finished
        assert engine.rest_timer is None
        assert sink.sessions == [log]
        assert log.plan_id == "two"
        assert log.duration_seconds == 120
        assert [s.weight for s in log.get_exercise_log("bench").sets] == [60.0, 60.0]

    def test_no_mutation_after_finish(self, two_plan, clock):
        """Test the session cannot change once finished."""
        engine = SessionEngine(two_plan, clock=clock)
        engine.finish()

        with pytest.raises(SessionFinishedError):
            engine.complete_set()
        with pytest.raises(SessionFinishedError):
            engine.jump_to_exercise(1)
        with pytest.raises(SessionFinishedError):
            engine.finish()

    def test_abandon_saves_nothing(self, two_plan, clock):
        """Test abandoning discards the working state."""
        sink = InMemoryHistorySink()
        engine = SessionEngine(two_plan, clock=clock, history_sink=sink)
        engine.complete_set()
        engine.abandon()

        assert engine.is_finished
        assert sink.sessions == []
        with pytest.raises(SessionFinishedError):
            engine.skip_set()

    def test_rest_callback_after_abandon_is_ignored(self, two_plan, clock):
        """Test a stale timer cannot move a closed session."""
        engine = SessionEngine(two_plan, clock=clock)
        engine.complete_set()
        timer = engine.rest_timer
        engine.abandon()

        timer.skip()
        assert engine.is_finished

    def test_from_store(self, two_plan, clock):
        """Test starting from a plan store."""
        store = InMemoryPlanStore([two_plan])
        assert isinstance(store, PlanStore)
        engine = SessionEngine.from_store(store, "two", clock=clock)
        assert engine.plan is two_plan

        with pytest.raises(PlanNotFoundError):
            SessionEngine.from_store(store, "missing")

    def test_sessions_are_independent(self, two_plan, clock):
        """Test two engines do not share counters."""
        first = SessionEngine(two_plan, clock=clock)
        second = SessionEngine(two_plan, clock=clock)
        first.complete_set()

        assert second.state.completed == {}
        assert second.progress.total_completed == 0

    def test_elapsed_time_runs_during_rest(self, single_plan, clock):
        """Test the session clock keeps counting while resting."""
        engine = SessionEngine(single_plan, clock=clock)
        engine.complete_set()
        clock.advance(42)

        assert engine.is_resting
        assert engine.elapsed_seconds == 42
