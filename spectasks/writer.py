"""Status writer: flips one checkbox and writes the document back.

Only the marker character inside ``[ ]`` / ``[x]`` of the target task line
changes; every other byte of the document is preserved, including line
endings and a missing trailing newline.

There is no locking. The document is re-read right before the write, and
any edit made by someone else between that read and the write is lost
(last writer wins). Callers must serialise writes to one document.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Callable, List, Optional

from .errors import PersistenceError, SpecTasksError, TaskLineNotFoundError
from .graph import TaskGraph
from .models import Task
from .parser import make_task_id, match_task_line
from .spectasks_logging import log_operation, log_task_update
from .storage import FileStorage, Storage

logger = logging.getLogger("spectasks.writer")

ConfirmCallback = Callable[[str], bool]


def _split_terminator(line: str) -> tuple[str, str]:
    content = line.splitlines()[0] if line else ""
    return content, line[len(content):]


def _is_task_line(line: str, task_id: str) -> bool:
    match = match_task_line(_split_terminator(line)[0])
    return bool(match) and make_task_id(match.group("number")) == task_id


def _locate(lines: List[str], task: Task) -> Optional[int]:
    if 0 <= task.line_index < len(lines) and _is_task_line(lines[task.line_index], task.id):
        return task.line_index
    for idx, line in enumerate(lines):
        if _is_task_line(line, task.id):
            return idx
    return None


def patch_checkbox(text: str, task: Task, completed: bool, path: Path | str = "") -> str:
    """Return *text* with *task*'s checkbox set to *completed*.

    The line is looked up at ``task.line_index`` first and by id if it moved.
    Raises :class:`TaskLineNotFoundError` when the task line is gone.
    """
    lines = text.splitlines(keepends=True)
    index = _locate(lines, task)
    if index is None:
        raise TaskLineNotFoundError(task.id, path)
    if index != task.line_index:
        logger.info(f"Task '{task.id}' moved from line {task.line_index + 1} to {index + 1}")
        task.line_index = index

    content, terminator = _split_terminator(lines[index])
    match = match_task_line(content)
    mark = match.group("mark")
    if (mark.lower() == "x") == completed:
        return text

    position = match.start("mark")
    lines[index] = content[:position] + ("x" if completed else " ") + content[position + 1:] + terminator
    return "".join(lines)


class StatusWriter:
    """Apply completion changes to the graph and the backing document."""

    def __init__(
        self,
        graph: TaskGraph,
        path: Path,
        storage: Optional[Storage] = None,
        confirm: Optional[ConfirmCallback] = None,
    ):
        self.graph = graph
        self.path = Path(path)
        self.storage = storage or FileStorage()
        self.confirm = confirm

    def set_status(self, task_id: str, completed: bool, persist: bool = True) -> bool:
        """Set *task_id*'s completion flag.

        Returns ``False`` for an unknown id or when the confirmation callback
        declines; nothing is changed in either case. The in-memory flag is
        updated before the write, so a failed write leaves the graph ahead of
        the document.
        """
        task = self.graph.get(task_id)
        if task is None:
            logger.warning(f"Task '{task_id}' not found")
            return False

        changed = task.completed != completed
        if changed and self.confirm is not None:
            prompt_kind = "complete" if completed else "reopen"
            if not self.confirm(prompt_kind):
                logger.info(f"Status change for '{task_id}' declined ({prompt_kind})")
                return False

        old_status = task.status_label
        task.completed = completed

        if persist:
            with log_operation("set_status", task_id=task_id, completed=completed, path=str(self.path)):
                self._persist(task, completed)

        if changed:
            log_task_update(task_id, old_status, task.status_label, persisted=persist)
        return True

    def _persist(self, task: Task, completed: bool) -> None:
        text = self.storage.read_text(self.path)
        patched = patch_checkbox(text, task, completed, self.path)
        if patched == text:
            logger.debug(f"Document already reflects '{task.id}', nothing to write")
            return
        try:
            self.storage.write_text(self.path, patched)
        except SpecTasksError:
            raise
        except OSError as e:
            raise PersistenceError(f"Failed to write '{self.path}': {e}") from e
