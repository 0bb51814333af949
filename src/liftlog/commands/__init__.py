"""CLI commands for liftlog."""

from .history import history
from .init import init
from .plans import plans
from .session import session

__all__ = [
    "history",
    "init",
    "plans",
    "session",
]
