"""Exception types raised by the planner."""


class PlannerError(Exception):
    """Base class for planner failures the caller can recover from."""


class ValidationError(PlannerError):
    """Input was rejected before anything was persisted."""


class NotFoundError(PlannerError):
    """A referenced plan, session, goal or record does not exist."""


class StoreError(PlannerError):
    """The underlying key-value store failed."""
