"""Error taxonomy for the planner core"""
from typing import Optional


class PlannerError(Exception):
    """Base class for all planner failures surfaced to callers"""

    kind = "planner_error"

    def __init__(self, message: str, *, record_id: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.record_id = record_id


class ValidationError(PlannerError):
    """Rejected at the command boundary (empty description, malformed date, bad reference)"""

    kind = "validation_error"


class CycleError(PlannerError):
    """Parent reassignment would make a task its own ancestor"""

    kind = "cycle_error"


class NotFoundError(PlannerError):
    """Referenced record does not exist (possibly removed concurrently)"""

    kind = "not_found"


class PersistenceError(PlannerError):
    """Store write failed after the retry budget was exhausted"""

    kind = "persistence_error"


class CommitInProgressError(PlannerError):
    """A drag commit was requested while another one is still in flight"""

    kind = "commit_in_progress"
