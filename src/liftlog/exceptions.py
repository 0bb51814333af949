"""Exceptions raised by liftlog."""


class LiftlogError(Exception):
    """Base class for liftlog errors."""


class PlanNotFoundError(LiftlogError, LookupError):
    """No plan with the requested id exists."""

    def __init__(self, plan_id: str):
        super().__init__(f"Plan {plan_id!r} not found")
        self.plan_id = plan_id


class PlanFormatError(LiftlogError, ValueError):
    """A plan file could not be read as plans."""


class SessionFinishedError(LiftlogError, RuntimeError):
    """The session was finished or abandoned and can no longer change."""


class InvalidNavigationError(LiftlogError, IndexError):
    """A jump targeted a position outside the plan."""

    def __init__(self, index: int, size: int):
        super().__init__(f"Exercise index {index} out of range for plan of {size}")
        self.index = index
        self.size = size


class PlanEditError(LiftlogError, ValueError):
    """A plan edit referenced a bad position or would break the plan."""
