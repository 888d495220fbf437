"""Hierarchical file store over a local directory.

Used for the intake (pending) area, the processed (imported) area and the
acknowledgement output area. Names are plain file names within the folder;
sub-directories and hidden files are not listed.
"""

from __future__ import annotations

import os
import re
import shutil
from pathlib import Path

from .logging_setup import get_logger

_logger = get_logger("donation_ledger.storage")

_UNSAFE_CHARS_RE = re.compile(r"[^\w.\- ]+")


def safe_file_name(name: str) -> str:
    """Replace characters that do not belong in a portable file name."""

    cleaned = _UNSAFE_CHARS_RE.sub("_", name).strip(" .")
    return cleaned or "unnamed"


class FolderStore:
    """A folder of files addressed by name."""

    def __init__(self, root: str | os.PathLike[str]) -> None:
        self.root = Path(root)

    def __repr__(self) -> str:  # pragma: no cover - trivial repr
        return f"FolderStore({str(self.root)!r})"

    def _path(self, name: str) -> Path:
        path = self.root / name
        if path.parent != self.root:
            raise ValueError(f"invalid file name for {self.root}: {name!r}")
        return path

    def ensure(self) -> None:
        if not self.root.is_dir():
            raise FileNotFoundError(f"folder does not exist: {self.root}")

    def list_files(self) -> list[str]:
        self.ensure()
        return [
            p.name for p in self.root.iterdir() if p.is_file() and not p.name.startswith(".")
        ]

    def exists(self, name: str) -> bool:
        return self._path(name).is_file()

    def read_bytes(self, name: str) -> bytes:
        return self._path(name).read_bytes()

    def write_bytes(self, name: str, data: bytes) -> Path:
        """Write ``data`` atomically (``.tmp`` then replace) and return the path."""

        self.ensure()
        target = self._path(name)
        tmp = target.with_name(target.name + ".tmp")
        tmp.write_bytes(data)
        os.replace(tmp, target)
        return target

    def move_to(self, name: str, destination: FolderStore) -> Path:
        """Move ``name`` into ``destination``; an existing file there is replaced."""

        destination.ensure()
        source = self._path(name)
        target = destination._path(name)
        shutil.move(os.fspath(source), os.fspath(target))
        _logger.debug("moved %s -> %s", source, target)
        return target


__all__ = ["FolderStore", "safe_file_name"]
