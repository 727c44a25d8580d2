"""Document storage used by the workspace and the status writer."""

from __future__ import annotations

from pathlib import Path
from typing import Protocol

from .errors import DocumentMissingError


class Storage(Protocol):
    def exists(self, path: Path) -> bool: ...

    def read_text(self, path: Path) -> str: ...

    def write_text(self, path: Path, text: str) -> None: ...


class FileStorage:
    """UTF-8 files on local disk.

    Both directions use ``newline=""`` so CRLF documents come back
    byte-for-byte.
    """

    encoding = "utf-8"

    def exists(self, path: Path) -> bool:
        return Path(path).is_file()

    def read_text(self, path: Path) -> str:
        path = Path(path)
        try:
            with path.open("r", encoding=self.encoding, newline="") as handle:
                return handle.read()
        except FileNotFoundError as e:
            raise DocumentMissingError(path) from e

    def write_text(self, path: Path, text: str) -> None:
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        with path.open("w", encoding=self.encoding, newline="") as handle:
            handle.write(text)
