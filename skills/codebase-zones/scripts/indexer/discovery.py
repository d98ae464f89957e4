from __future__ import annotations

import os
from collections import Counter
from typing import Dict, Iterable, Iterator, List, Optional, Set, Tuple

from _fs import FileStat, FileSystem
from utils import warn

from .constants import EXCLUDE_DIRS


def relative_posix(path: str, root: str) -> str:
    return os.path.relpath(path, root).replace(os.sep, "/")


def walk_repo_files(
    root: str,
    fs: FileSystem,
    *,
    exclude_dirs: Optional[Set[str]] = None,
    warnings: Optional[List[str]] = None,
) -> Iterator[Tuple[str, FileStat]]:
    """Yield (path, stat) for every regular file under root, depth first.

    Excluded directory names are pruned without being listed. Symlinks are
    skipped so link cycles cannot trap the walk. Unreadable entries are
    reported and skipped.
    """
    excluded = EXCLUDE_DIRS if exclude_dirs is None else exclude_dirs
    try:
        names = fs.list_dir(root)
    except OSError as exc:
        warn(f"Failed to scan directory {root}: {exc}", warnings)
        return
    stack: List[Tuple[str, Iterator[str]]] = [(root, iter(names))]
    while stack:
        dir_path, entries = stack[-1]
        name = next(entries, None)
        if name is None:
            stack.pop()
            continue
        full = os.path.join(dir_path, name)
        try:
            info = fs.stat(full)
        except OSError as exc:
            warn(f"Failed to stat {full}: {exc}", warnings)
            continue
        if info.is_symlink:
            continue
        if info.is_dir:
            if name in excluded:
                continue
            try:
                children = fs.list_dir(full)
            except OSError as exc:
                warn(f"Failed to scan directory {full}: {exc}", warnings)
                continue
            stack.append((full, iter(children)))
        elif info.is_file:
            yield full, info


def language_counts(languages: Iterable[str]) -> Dict[str, int]:
    counts = Counter(languages)
    return dict(sorted(counts.items(), key=lambda item: (-item[1], item[0])))
