"""Error types for dayboard.

ValidationError and NotFoundError are raised by the task store and leave
the snapshot untouched. PersistenceError is raised by the codec and the
storage transports and is always absorbed by the persistence bridge.
"""

from typing import Optional


class TaskBoardError(Exception):
    """Base class for all dayboard errors."""


class ValidationError(TaskBoardError, ValueError):
    """Raised when a task field fails normalization (e.g. an empty title)."""


class NotFoundError(TaskBoardError, LookupError):
    """Raised when an operation references an unknown task id.

    Attributes:
        task_id: The id that could not be found
    """

    def __init__(self, task_id: str, message: Optional[str] = None):
        self.task_id = task_id
        super().__init__(message or f"Task with ID {task_id} does not exist")


class PersistenceError(TaskBoardError):
    """Raised when stored data cannot be read, parsed or written."""
