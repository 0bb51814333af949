"""Default plans and plan/backup files."""

import json
import logging
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path

from ..exceptions import PlanFormatError
from ..models.plan import ExerciseDef, WorkoutPlan
from ..models.session import WorkoutSessionLog

logger = logging.getLogger(__name__)

BACKUP_VERSION = 1


def _abs_circuit(prefix: str) -> list[ExerciseDef]:
    """The four-exercise abs circuit both default plans open with."""
    circuit_id = f"{prefix}_abs_circuit"
    return [
        ExerciseDef(
            id=f"{prefix}_abs_1",
            name="Criss-cross",
            sets=3,
            reps="20",
            notes="Circuit exercise 1",
            superset_id=circuit_id,
            tags=("Abs",),
        ),
        ExerciseDef(
            id=f"{prefix}_abs_2",
            name="Mountain Climber",
            sets=3,
            reps="20 m.",
            notes="Circuit exercise 2",
            superset_id=circuit_id,
            tags=("Abs", "Cardio"),
        ),
        ExerciseDef(
            id=f"{prefix}_abs_3",
            name="Crunch, legs at 90°",
            sets=3,
            reps="12",
            notes="Circuit exercise 3",
            superset_id=circuit_id,
            tags=("Abs",),
        ),
        ExerciseDef(
            id=f"{prefix}_abs_4",
            name="Elbow plank",
            sets=3,
            reps='30"',
            is_duration=True,
            notes="Circuit exercise 4. Rest 1' at the end.",
            superset_id=circuit_id,
            tags=("Abs",),
        ),
    ]


def _warmup(prefix: str) -> ExerciseDef:
    return ExerciseDef(
        id=f"{prefix}_warmup",
        name="Aerobic activation + mobility",
        sets=1,
        reps="10' + 10'",
        is_duration=True,
        tags=("Cardio",),
    )


def _stretch(prefix: str) -> ExerciseDef:
    return ExerciseDef(
        id=f"{prefix}_stretch",
        name="General stretching",
        sets=1,
        reps="10'",
        is_duration=True,
        tags=("Cardio",),
    )


WORKOUT_A = WorkoutPlan(
    id="A",
    name="Workout A",
    exercises=(
        _warmup("a"),
        *_abs_circuit("a"),
        ExerciseDef(id="a_rdl", name="Barbell Romanian deadlift", sets=3, reps="10",
                    tags=("Hamstrings", "Glutes", "Back")),
        ExerciseDef(id="a_lunges", name="Stationary lunges", sets=3, reps="10 per side",
                    notes="Dumbbells 6+6kg. Rest 1'", default_weight=6,
                    tags=("Quads", "Glutes")),
        ExerciseDef(id="a_squat", name="Smith machine squat", sets=3, reps="10",
                    notes="Load: 10+10kg", default_weight=20, tags=("Quads", "Glutes")),
        ExerciseDef(id="a_tbar", name="T-bar row", sets=3, reps="10", tags=("Back",)),
        ExerciseDef(id="a_lat", name="Lat pulldown", sets=3, reps="10", tags=("Back",)),
        ExerciseDef(id="a_pushdown", name="Pushdown", sets=3, reps="12", tags=("Triceps",)),
        ExerciseDef(id="a_french", name="Overhead cable French press", sets=3, reps="10",
                    notes="Load: 7.5kg", default_weight=7.5, tags=("Triceps",)),
        ExerciseDef(id="a_calf", name="Leg press calf raise", sets=3, reps="12/15",
                    notes="Load: 70kg", default_weight=70, tags=("Calves",)),
        _stretch("a"),
    ),
)

WORKOUT_B = WorkoutPlan(
    id="B",
    name="Workout B",
    exercises=(
        _warmup("b"),
        *_abs_circuit("b"),
        ExerciseDef(id="b_bench", name="Flat bench press", sets=4, reps="8",
                    tags=("Chest", "Triceps")),
        ExerciseDef(id="b_chest", name="Chest press", sets=3, reps="12",
                    notes="Seat 6.\nLoad: 25kg", default_weight=25, tags=("Chest",)),
        ExerciseDef(id="b_croci", name="Incline dumbbell fly", sets=3, reps="10",
                    notes="Bench at 30 degrees", tags=("Chest",)),
        ExerciseDef(id="b_bicep_low", name="Low cable curl", sets=4, reps="10",
                    tags=("Biceps",)),
        ExerciseDef(id="b_bicep_45", name="Incline dumbbell curl", sets=3, reps="10",
                    tags=("Biceps",)),
        ExerciseDef(id="b_military", name="Seated dumbbell shoulder press", sets=4,
                    reps="8", tags=("Shoulders",)),
        ExerciseDef(id="b_lat_raise", name="Single-arm cable lateral raise", sets=3,
                    reps="10 per arm", notes="Torso leaning", tags=("Shoulders",)),
        _stretch("b"),
    ),
)

DEFAULT_PLANS = [WORKOUT_A, WORKOUT_B]


@dataclass
class Backup:
    """Plans and history read from a file."""

    plans: list[WorkoutPlan] = field(default_factory=list)
    history: list[WorkoutSessionLog] = field(default_factory=list)


def parse_backup(data) -> Backup:
    """Build plans and sessions from decoded JSON.

    Accepts a bare list of plans, a single plan object, or a backup object
    with ``plans`` and ``history`` lists. Malformed entries are dropped.
    """
    if isinstance(data, list):
        raw_plans, raw_history = data, []
    elif isinstance(data, dict) and "exercises" in data:
        raw_plans, raw_history = [data], []
    elif isinstance(data, dict):
        raw_plans = data.get("plans") if isinstance(data.get("plans"), list) else []
        raw_history = data.get("history") if isinstance(data.get("history"), list) else []
    else:
        raise PlanFormatError("Invalid format: expected a JSON object or list")

    backup = Backup()
    for entry in raw_plans:
        if not isinstance(entry, dict):
            logger.warning("Dropping non-object plan entry: %r", entry)
            continue
        backup.plans.append(WorkoutPlan.from_dict(entry))

    for entry in raw_history:
        if not isinstance(entry, dict) or not entry.get("id"):
            logger.warning("Dropping session entry without an id")
            continue
        try:
            backup.history.append(WorkoutSessionLog.from_dict(entry))
        except (TypeError, ValueError) as e:
            logger.warning("Dropping unreadable session %s: %s", entry.get("id"), e)

    return backup


def load_backup(path: Path) -> Backup:
    """Read plans (and optionally history) from a JSON file.

    Raises:
        PlanFormatError: The file is empty or not valid JSON
    """
    content = Path(path).read_text(encoding="utf-8")
    if not content.strip():
        raise PlanFormatError(f"{path} is empty")
    try:
        data = json.loads(content)
    except json.JSONDecodeError as e:
        raise PlanFormatError(f"Corrupt JSON in {path}: {e}") from e
    return parse_backup(data)


def dump_backup(plans: list[WorkoutPlan], history: list[WorkoutSessionLog]) -> str:
    """Serialize plans and history to a backup document."""
    return json.dumps(
        {
            "plans": [plan.to_dict() for plan in plans],
            "history": [log.to_dict() for log in history],
            "version": BACKUP_VERSION,
            "exported_at": datetime.now().isoformat(),
        },
        indent=2,
    )
