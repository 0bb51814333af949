"""Data access layer for liftlog."""

import json
import logging
from pathlib import Path

import aiosqlite

from ..models.plan import WorkoutPlan
from ..models.session import ProgressPoint, WorkoutSessionLog
from .engine import get_db_path

logger = logging.getLogger(__name__)


class PlanRepository:
    """Repository for workout plans."""

    def __init__(self, db_path: Path | None = None):
        self.db_path = db_path or get_db_path()

    async def upsert(self, plan: WorkoutPlan) -> None:
        """Create a plan or replace the one with the same ID."""
        data = plan.to_dict()
        async with aiosqlite.connect(self.db_path) as db:
            cursor = await db.execute("SELECT COALESCE(MAX(position), -1) + 1 FROM plans")
            (next_position,) = await cursor.fetchone()
            await db.execute(
                """
                INSERT INTO plans (id, name, exercises, is_hidden, position)
                VALUES (?, ?, ?, ?, ?)
                ON CONFLICT(id) DO UPDATE SET
                    name = excluded.name,
                    exercises = excluded.exercises,
                    is_hidden = excluded.is_hidden,
                    updated_at = CURRENT_TIMESTAMP
                """,
                (
                    data["id"],
                    data["name"],
                    json.dumps(data["exercises"]),
                    1 if data["is_hidden"] else 0,
                    next_position,
                ),
            )
            await db.commit()

    async def get(self, plan_id: str) -> WorkoutPlan | None:
        """Get a plan by ID."""
        async with aiosqlite.connect(self.db_path) as db:
            db.row_factory = aiosqlite.Row
            cursor = await db.execute("SELECT * FROM plans WHERE id = ?", (plan_id,))
            row = await cursor.fetchone()
            if row is None:
                return None
            return self._row_to_plan(row)

    async def list_all(self, include_hidden: bool = False) -> list[WorkoutPlan]:
        """List plans in creation order."""
        query = "SELECT * FROM plans"
        if not include_hidden:
            query += " WHERE is_hidden = 0"
        query += " ORDER BY position, created_at"

        async with aiosqlite.connect(self.db_path) as db:
            db.row_factory = aiosqlite.Row
            cursor = await db.execute(query)
            rows = await cursor.fetchall()
            return [self._row_to_plan(row) for row in rows]

    async def delete(self, plan_id: str) -> bool:
        """Delete a plan. Past sessions on it are kept."""
        async with aiosqlite.connect(self.db_path) as db:
            cursor = await db.execute("DELETE FROM plans WHERE id = ?", (plan_id,))
            await db.commit()
            return cursor.rowcount > 0

    def _row_to_plan(self, row: aiosqlite.Row) -> WorkoutPlan:
        """Convert a database row to a WorkoutPlan."""
        data = {
            "id": row["id"],
            "name": row["name"],
            "exercises": json.loads(row["exercises"]),
            "is_hidden": bool(row["is_hidden"]),
        }
        return WorkoutPlan.from_dict(data)


class SessionHistoryRepository:
    """Repository for finished sessions."""

    def __init__(self, db_path: Path | None = None):
        self.db_path = db_path or get_db_path()

    async def save(self, log: WorkoutSessionLog) -> None:
        """Store a finished session and its sets."""
        data = log.to_dict()
        async with aiosqlite.connect(self.db_path) as db:
            await db.execute(
                """
                INSERT INTO sessions
                (id, plan_id, start_time, end_time, duration_seconds, exercises)
                VALUES (?, ?, ?, ?, ?, ?)
                """,
                (
                    data["id"],
                    data["plan_id"],
                    data["start_time"],
                    data["end_time"],
                    data["duration_seconds"],
                    json.dumps(data["exercises"]),
                ),
            )
            await db.executemany(
                """
                INSERT INTO session_sets
                (session_id, exercise_id, set_number, weight, completed_at)
                VALUES (?, ?, ?, ?, ?)
                """,
                [
                    (log.id, ex.exercise_id, s.set_number, s.weight, s.completed_at)
                    for ex in log.exercises
                    for s in ex.sets
                ],
            )
            await db.commit()
        logger.info("Saved session %s (%d sets)", log.id, log.total_sets)

    async def get(self, session_id: str) -> WorkoutSessionLog | None:
        """Get a session by ID."""
        async with aiosqlite.connect(self.db_path) as db:
            db.row_factory = aiosqlite.Row
            cursor = await db.execute(
                "SELECT * FROM sessions WHERE id = ?", (session_id,)
            )
            row = await cursor.fetchone()
            if row is None:
                return None
            return self._row_to_session(row)

    async def list_recent(self, limit: int | None = None) -> list[WorkoutSessionLog]:
        """List sessions, newest first."""
        query = "SELECT * FROM sessions ORDER BY start_time DESC"
        params: tuple = ()
        if limit is not None:
            query += " LIMIT ?"
            params = (limit,)

        async with aiosqlite.connect(self.db_path) as db:
            db.row_factory = aiosqlite.Row
            cursor = await db.execute(query, params)
            rows = await cursor.fetchall()
            return [self._row_to_session(row) for row in rows]

    async def get_last_weight(self, exercise_id: str) -> float | None:
        """Weight of the last set of the most recent session with this exercise."""
        async with aiosqlite.connect(self.db_path) as db:
            cursor = await db.execute(
                """
                SELECT ss.weight FROM session_sets ss
                JOIN sessions s ON s.id = ss.session_id
                WHERE ss.exercise_id = ?
                ORDER BY s.start_time DESC, ss.set_number DESC, ss.id DESC
                LIMIT 1
                """,
                (exercise_id,),
            )
            row = await cursor.fetchone()
            return row[0] if row else None

    async def exercise_progress(self, exercise_id: str) -> list[ProgressPoint]:
        """Top weight per session for one exercise, oldest first."""
        async with aiosqlite.connect(self.db_path) as db:
            cursor = await db.execute(
                """
                SELECT s.end_time, MAX(ss.weight) FROM session_sets ss
                JOIN sessions s ON s.id = ss.session_id
                WHERE ss.exercise_id = ?
                GROUP BY s.id
                ORDER BY s.start_time ASC
                """,
                (exercise_id,),
            )
            rows = await cursor.fetchall()
        return [ProgressPoint(timestamp=end_time, weight=weight) for end_time, weight in rows]

    async def last_weights(self) -> dict[str, float]:
        """Last weight for every exercise that has been logged."""
        async with aiosqlite.connect(self.db_path) as db:
            cursor = await db.execute(
                """
                SELECT ss.exercise_id, ss.weight FROM session_sets ss
                JOIN sessions s ON s.id = ss.session_id
                ORDER BY s.start_time ASC, ss.set_number ASC, ss.id ASC
                """
            )
            rows = await cursor.fetchall()
        # Later rows overwrite earlier ones
        return {exercise_id: weight for exercise_id, weight in rows}

    async def clear(self) -> int:
        """Delete all sessions."""
        async with aiosqlite.connect(self.db_path) as db:
            await db.execute("DELETE FROM session_sets")
            cursor = await db.execute("DELETE FROM sessions")
            await db.commit()
            return cursor.rowcount

    def _row_to_session(self, row: aiosqlite.Row) -> WorkoutSessionLog:
        """Convert a database row to a WorkoutSessionLog."""
        data = {
            "id": row["id"],
            "plan_id": row["plan_id"],
            "start_time": row["start_time"],
            "end_time": row["end_time"],
            "duration_seconds": row["duration_seconds"],
            "exercises": json.loads(row["exercises"]),
        }
        return WorkoutSessionLog.from_dict(data)
