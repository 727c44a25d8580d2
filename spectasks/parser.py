"""Checklist parser for tasks.md documents.

Turns raw document text into an ordered list of :class:`Task` records.
Parsing never fails: lines that are not recognised are skipped, so a
malformed document yields fewer tasks rather than an error.

Recognised layout::

    - [ ] 1. Set up project structure
      - Create directory structure
      - _Requirements: 1.1, 2.3_
      - _Depends on: task-0_
      - _Context: setup.py, pyproject.toml_
    - [x] 2.1 Create User model
"""

from __future__ import annotations

import logging
import re
from typing import Dict, List, Optional

from .models import Task

logger = logging.getLogger("spectasks.parser")

TASK_ID_PREFIX = "task-"

_TASK_LINE_PATTERN = re.compile(
    r"^(?P<indent>[ \t]*)-[ \t]+\[(?P<mark>[ xX])\][ \t]+"
    r"(?P<number>\d+(?:\.\d+)*)\.?[ \t]+(?P<title>\S.*?)\s*$"
)
_CHECKBOX_PATTERN = re.compile(r"^[ \t]*[-*][ \t]+\[.?\]")
_ANNOTATION_PATTERN = re.compile(
    r"^\s*(?:[-*]\s+)?_(?P<label>requirements|depends on|context):\s*(?P<payload>.*?)_(?!\w)",
    re.IGNORECASE,
)
_BULLET_PATTERN = re.compile(r"^\s*[-*]\s+")
_HEADING_PATTERN = re.compile(r"^#{1,6}\s")

_ANNOTATION_FIELDS = {
    "requirements": "requirements",
    "depends on": "dependencies",
    "context": "context_files",
}


def make_task_id(number: str) -> str:
    """Return the task id for a dotted task number (``2.1`` -> ``task-2.1``)."""
    return f"{TASK_ID_PREFIX}{number}"


def parent_task_id(task_id: str) -> Optional[str]:
    """Derive the parent id from the shape of *task_id* alone.

    ``task-2.1`` -> ``task-2``; ``task-2`` -> ``None``.
    """
    head, dot, _ = task_id.rpartition(".")
    if not dot:
        return None
    return head


def match_task_line(line: str) -> Optional[re.Match]:
    """Return the task-line match for *line*, or ``None``."""
    return _TASK_LINE_PATTERN.match(line)


def _split_payload(payload: str) -> List[str]:
    return [item.strip() for item in payload.split(",") if item.strip()]


def _apply_body(task: Task, body: List[str]) -> None:
    annotations: Dict[str, List[str]] = {}
    for line in body:
        if not line.strip():
            continue
        annotation = _ANNOTATION_PATTERN.match(line)
        if annotation:
            label = annotation.group("label").lower()
            # last occurrence of a label wins
            annotations[_ANNOTATION_FIELDS[label]] = _split_payload(annotation.group("payload"))
            continue
        task.description_lines.append(_BULLET_PATTERN.sub("", line, count=1).strip())

    task.requirements = annotations.get("requirements", [])
    task.dependencies = annotations.get("dependencies", [])
    task.context_files = annotations.get("context_files", [])


def parse_tasks(text: str) -> List[Task]:
    """Parse *text* into tasks in document order.

    Duplicate task ids keep their first occurrence; later duplicates are
    skipped with a warning.
    """
    tasks: List[Task] = []
    seen: set[str] = set()
    current: Optional[Task] = None
    body: List[str] = []

    def close() -> None:
        nonlocal current, body
        if current is not None:
            _apply_body(current, body)
        current = None
        body = []

    for idx, line in enumerate(text.splitlines()):
        task_match = _TASK_LINE_PATTERN.match(line)
        if task_match:
            close()
            number = task_match.group("number")
            task_id = make_task_id(number)
            if task_id in seen:
                logger.warning(f"Skipping duplicate task '{task_id}' at line {idx + 1}")
                continue
            seen.add(task_id)
            current = Task(
                id=task_id,
                number=number,
                title=task_match.group("title"),
                completed=task_match.group("mark").lower() == "x",
                parent_task_id=parent_task_id(task_id),
                line_index=idx,
            )
            tasks.append(current)
            continue

        if current is None:
            continue

        if _CHECKBOX_PATTERN.match(line) or _HEADING_PATTERN.match(line):
            logger.debug(f"Line {idx + 1} closes task '{current.id}'")
            close()
            continue

        body.append(line)

    close()
    logger.debug(f"Parsed {len(tasks)} tasks")
    return tasks
