"""Shared fixtures for spectasks tests."""

import logging

import pytest

from spectasks.spectasks_logging import performance_monitor


SAMPLE_TASKS = """# Implementation Plan

- [ ] 1. Set up project structure
  - Create directory structure for models, services, repositories
  - _Requirements: 1.1, 2.3_
  - _Depends on: task-0_

- [x] 2. Implement data models
- [ ] 2.1 Create User model
  - Write User class with validation methods
  - _Requirements: 1.2_
  - _Context: user.ts, validation.ts_

- [ ] 2.2 Create Document model
  - Write Document class with relationships
  - _Requirements: 2.1, 3.3_
  - _Depends on: task-2.1_

- [x] 3. Create storage mechanism
  - Implement database connection utilities
  - _Requirements: 2.1_
"""


@pytest.fixture
def sample_tasks():
    """The five-task sample document."""
    return SAMPLE_TASKS


@pytest.fixture
def write_tasks(tmp_path):
    """Write a tasks.md under tmp_path and return its path."""
    def _write(content, name="tasks.md"):
        path = tmp_path / name
        path.write_bytes(content.encode("utf-8"))
        return path
    return _write


@pytest.fixture(autouse=True)
def _reset_observability():
    """Drop handlers and metrics left behind by a test."""
    yield
    logger = logging.getLogger("spectasks")
    for handler in list(logger.handlers):
        handler.close()
    logger.handlers.clear()
    logger.setLevel(logging.NOTSET)
    performance_monitor.clear()
