"""Filesystem pattern helpers.

Rules:
- write raw artifacts under workspace/
- print only small summaries/previews (never dump huge payloads to stdout)
- scanning code reaches the disk only through a FileSystem capability
"""
from __future__ import annotations

import os
import stat as stat_mod
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, List, Optional, Protocol

WORKSPACE_DIR = Path("workspace")


@dataclass(frozen=True)
class FileStat:
    size: int
    mtime: float
    is_dir: bool
    is_file: bool
    is_symlink: bool = False


class FileSystem(Protocol):
    """What the analyzer needs from a filesystem.

    Implementations raise OSError for anything unreadable; callers decide
    whether that is fatal.
    """

    def list_dir(self, path: str) -> List[str]:
        ...

    def stat(self, path: str) -> FileStat:
        ...

    def read_bytes(self, path: str, limit: Optional[int] = None) -> bytes:
        ...


class LocalFileSystem:
    def list_dir(self, path: str) -> List[str]:
        # Sorted so scan order does not depend on the platform.
        return sorted(os.listdir(path))

    def stat(self, path: str) -> FileStat:
        link = os.lstat(path)
        if stat_mod.S_ISLNK(link.st_mode):
            return FileStat(
                size=link.st_size,
                mtime=link.st_mtime,
                is_dir=False,
                is_file=False,
                is_symlink=True,
            )
        return FileStat(
            size=link.st_size,
            mtime=link.st_mtime,
            is_dir=stat_mod.S_ISDIR(link.st_mode),
            is_file=stat_mod.S_ISREG(link.st_mode),
        )

    def read_bytes(self, path: str, limit: Optional[int] = None) -> bytes:
        with open(path, "rb") as handle:
            if limit is None:
                return handle.read()
            return handle.read(limit)


def ensure_workspace() -> Path:
    WORKSPACE_DIR.mkdir(parents=True, exist_ok=True)
    return WORKSPACE_DIR


def workspace_root() -> Path:
    return ensure_workspace()


def write_text(path: Path, text: str) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text, encoding="utf-8")
    return path


def write_lines(path: Path, lines: Iterable[str]) -> Path:
    items = list(lines)
    text = "\n".join(items) + ("\n" if items else "")
    return write_text(path, text)


def safe_preview_text(text: str, max_bytes: int = 512) -> str:
    data = text.encode("utf-8", errors="replace")
    if len(data) <= max_bytes:
        return text
    cut = data[:max_bytes]
    return cut.decode("utf-8", errors="ignore") + "..."
