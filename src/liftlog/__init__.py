"""liftlog: workout session tracking."""

__version__ = "0.1.0"
