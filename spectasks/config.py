"""Environment-driven settings for spectasks."""

from __future__ import annotations

import os
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping, Optional

_TRUE_VALUES = {"1", "true", "yes", "on"}
_FEATURE_SEPARATORS = re.compile(r"[/\\:\x00]")


def _env_bool(value: Optional[str], default: bool) -> bool:
    if value is None or not value.strip():
        return default
    return value.strip().lower() in _TRUE_VALUES


@dataclass(slots=True)
class Settings:
    """Runtime settings.

    ``SPECTASKS_PROJECT_ROOT``       explicit project root
    ``SPECTASKS_SPECS_DIR``          directory holding one folder per feature
    ``SPECTASKS_TASKS_FILE``         checklist file name inside a feature folder
    ``SPECTASKS_LOG_LEVEL``          logging level name
    ``SPECTASKS_LOG_FILE``           optional JSON log file
    ``SPECTASKS_CONFIRM_COMPLETION`` require confirmation before status changes
    """

    project_root: Optional[Path] = None
    specs_dir: str = ".specs"
    tasks_file: str = "tasks.md"
    log_level: str = "INFO"
    log_file: Optional[Path] = None
    confirm_completion: bool = False

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "Settings":
        env = os.environ if environ is None else environ
        root = env.get("SPECTASKS_PROJECT_ROOT")
        log_file = env.get("SPECTASKS_LOG_FILE")
        return cls(
            project_root=Path(root).expanduser() if root else None,
            specs_dir=env.get("SPECTASKS_SPECS_DIR") or ".specs",
            tasks_file=env.get("SPECTASKS_TASKS_FILE") or "tasks.md",
            log_level=(env.get("SPECTASKS_LOG_LEVEL") or "INFO").upper(),
            log_file=Path(log_file).expanduser() if log_file else None,
            confirm_completion=_env_bool(env.get("SPECTASKS_CONFIRM_COMPLETION"), False),
        )

    def feature_dir(self, root: Path | str, feature: str) -> Path:
        """Return ``<root>/<specs_dir>/<feature>``.

        Raises ``ValueError`` unless *feature* is a single directory name.
        """
        if feature in {"", ".", ".."} or _FEATURE_SEPARATORS.search(feature):
            raise ValueError(
                f"Invalid feature name '{feature}': expected a single directory name under '{self.specs_dir}'."
            )
        return Path(root) / self.specs_dir / feature

    def tasks_path(self, root: Path | str, feature: str) -> Path:
        return self.feature_dir(root, feature) / self.tasks_file
