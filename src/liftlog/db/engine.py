"""Database engine setup and initialization."""

import json
from pathlib import Path

import aiosqlite

from ..config import settings


def get_db_path(data_dir: Path | None = None) -> Path:
    """Get the database file path."""
    if data_dir is None:
        data_dir = settings.DATA_DIR
    data_dir.mkdir(parents=True, exist_ok=True)
    return data_dir / "liftlog.db"


async def init_db(db_path: Path | None = None) -> None:
    """Initialize the database schema."""
    if db_path is None:
        db_path = get_db_path()

    async with aiosqlite.connect(db_path) as db:
        # Plans table
        await db.execute("""
            CREATE TABLE IF NOT EXISTS plans (
                id TEXT PRIMARY KEY,
                name TEXT NOT NULL,
                exercises TEXT NOT NULL DEFAULT '[]',
                is_hidden INTEGER DEFAULT 0,
                position INTEGER DEFAULT 0,
                created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
                updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
            )
        """)

        # Finished sessions
        await db.execute("""
            CREATE TABLE IF NOT EXISTS sessions (
                id TEXT PRIMARY KEY,
                plan_id TEXT NOT NULL,
                start_time INTEGER NOT NULL,
                end_time INTEGER NOT NULL,
                duration_seconds REAL NOT NULL,
                exercises TEXT NOT NULL DEFAULT '[]'
            )
        """)

        # One row per logged set, for last-weight lookups
        await db.execute("""
            CREATE TABLE IF NOT EXISTS session_sets (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                session_id TEXT NOT NULL,
                exercise_id TEXT NOT NULL,
                set_number INTEGER NOT NULL,
                weight REAL NOT NULL,
                completed_at INTEGER NOT NULL,
                FOREIGN KEY (session_id) REFERENCES sessions(id) ON DELETE CASCADE
            )
        """)

        # Create indexes for common queries
        await db.execute("""
            CREATE INDEX IF NOT EXISTS idx_sessions_start
            ON sessions(start_time)
        """)
        await db.execute("""
            CREATE INDEX IF NOT EXISTS idx_session_sets_exercise
            ON session_sets(exercise_id)
        """)

        await db.commit()


async def seed_plans(db_path: Path | None = None) -> int:
    """Seed the database with the default plans, keeping existing ones.

    Returns:
        Number of plans inserted
    """
    from ..data.plan_loader import DEFAULT_PLANS

    if db_path is None:
        db_path = get_db_path()

    count = 0
    async with aiosqlite.connect(db_path) as db:
        for position, plan in enumerate(DEFAULT_PLANS):
            cursor = await db.execute(
                """
                INSERT OR IGNORE INTO plans (id, name, exercises, is_hidden, position)
                VALUES (?, ?, ?, ?, ?)
                """,
                (
                    plan.id,
                    plan.name,
                    json.dumps([ex.to_dict() for ex in plan.exercises]),
                    1 if plan.is_hidden else 0,
                    position,
                ),
            )
            count += cursor.rowcount

        await db.commit()

    return count
