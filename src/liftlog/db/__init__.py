"""Database layer for liftlog."""

from .engine import get_db_path, init_db, seed_plans
from .repositories import PlanRepository, SessionHistoryRepository

__all__ = [
    "get_db_path",
    "init_db",
    "PlanRepository",
    "seed_plans",
    "SessionHistoryRepository",
]
