"""Error types and classification for the task engine.

Parsing never raises. I/O problems surface as the exceptions below; the
workflow facade classifies them with :func:`classify_error` before
handing them to whatever presents errors to a person.
"""

from __future__ import annotations

from enum import Enum
from pathlib import Path


class SpecTasksError(Exception):
    """Base class for spectasks errors."""


class DocumentMissingError(SpecTasksError, FileNotFoundError):
    """The tasks document does not exist (recoverable: it can be created)."""

    def __init__(self, path: Path | str):
        self.path = Path(path)
        super().__init__(f"No tasks document found at '{self.path}'. Create it before loading tasks.")


class PersistenceError(SpecTasksError, OSError):
    """Writing the tasks document failed.

    The in-memory graph already holds the new status when this is raised;
    reload the workspace to resynchronise with the document.
    """


class TaskLineNotFoundError(PersistenceError):
    """The task's checkbox line is no longer present in the current document."""

    def __init__(self, task_id: str, path: Path | str):
        self.task_id = task_id
        self.path = Path(path)
        super().__init__(
            f"Task '{task_id}' no longer appears in '{self.path}'; the document changed since it was loaded."
        )


class WorkspaceNotLoadedError(SpecTasksError, RuntimeError):
    """A query ran before the workspace loaded its document."""


class ErrorKind(str, Enum):
    DOCUMENT_MISSING = "document_missing"
    UNKNOWN_TASK_ID = "unknown_task_id"
    PERSISTENCE_FAILURE = "persistence_failure"
    CONFIRMATION_DECLINED = "confirmation_declined"
    UNEXPECTED = "unexpected"


def classify_error(error: BaseException) -> ErrorKind:
    """Map an exception onto the error kinds reported to users."""
    if isinstance(error, DocumentMissingError):
        return ErrorKind.DOCUMENT_MISSING
    if isinstance(error, (PersistenceError, OSError)):
        return ErrorKind.PERSISTENCE_FAILURE
    return ErrorKind.UNEXPECTED


SUGGESTIONS = {
    ErrorKind.DOCUMENT_MISSING: "Create tasks.md with create_tasks_document or write it by hand, then reload.",
    ErrorKind.UNKNOWN_TASK_ID: "Use list_tasks to see valid task ids (for example 'task-2.1').",
    ErrorKind.PERSISTENCE_FAILURE: "Check that tasks.md is writable, then call reload_tasks to resynchronise.",
    ErrorKind.CONFIRMATION_DECLINED: "No changes were made.",
    ErrorKind.UNEXPECTED: "Check the server logs for details.",
}
