from __future__ import annotations

import asyncio
import inspect
import os
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Callable, Dict, Iterator, List, Optional, Sequence, Set, Tuple, Union

from _fs import FileStat, FileSystem, LocalFileSystem
from ir import CodeFile, DependencyEdge, file_id
from utils import NullTimer, progress, warn

from .constants import CONTENT_LINES, EXCLUDE_DIRS, IMPORT_SCAN_LINES, MAX_READ_BYTES, YIELD_EVERY
from .discovery import relative_posix, walk_repo_files
from .imports import build_dependency_edges, extract_dependencies
from .languages import is_code_language, language_for_path
from .quality import compute_complexity

FileCallback = Callable[[CodeFile], Any]
EdgesCallback = Callable[[List[DependencyEdge]], Any]


@dataclass
class ScanOptions:
    exclude_dirs: Set[str] = field(default_factory=lambda: set(EXCLUDE_DIRS))
    content_lines: int = CONTENT_LINES
    import_scan_lines: int = IMPORT_SCAN_LINES
    max_read_bytes: int = MAX_READ_BYTES
    yield_every: int = YIELD_EVERY

    def __post_init__(self) -> None:
        if self.yield_every < 1:
            raise ValueError("yield_every must be at least 1")
        if self.content_lines < 0 or self.import_scan_lines < 0:
            raise ValueError("line limits must be non-negative")
        if self.max_read_bytes < 1:
            raise ValueError("max_read_bytes must be positive")


async def _maybe_await(result: Any) -> None:
    if inspect.isawaitable(result):
        await result


class CodebaseAnalyzer:
    """Scans a directory tree into CodeFile records and dependency edges.

    The walk is single threaded. ``analyze_streaming`` hands control back to
    the event loop every ``options.yield_every`` files so a host loop stays
    responsive; it never reads files concurrently.
    """

    def __init__(
        self,
        root: Union[str, Path],
        *,
        fs: Optional[FileSystem] = None,
        options: Optional[ScanOptions] = None,
        timer: Any = None,
        warnings: Optional[List[str]] = None,
        echo_warnings: bool = True,
    ) -> None:
        self.root = os.fspath(root)
        self.fs: FileSystem = fs if fs is not None else LocalFileSystem()
        self.options = options or ScanOptions()
        self.timer = timer if timer is not None else NullTimer()
        self.warnings: List[str] = warnings if warnings is not None else []
        self.echo_warnings = echo_warnings
        self.files: List[CodeFile] = []

    def _warn(self, message: str) -> None:
        warn(message, self.warnings, echo=self.echo_warnings)

    def analyze_file(self, path: str, info: Optional[FileStat] = None) -> Optional[CodeFile]:
        """Metadata for one file, or None if it cannot be read."""
        with self.timer.stage("analyze_file"):
            try:
                stat = info if info is not None else self.fs.stat(path)
                raw = self.fs.read_bytes(path, self.options.max_read_bytes)
            except OSError as exc:
                self._warn(f"Failed to analyze file {path}: {exc}")
                return None

            content = raw.decode("utf-8", errors="replace")
            all_lines = content.splitlines()
            relative_path = relative_posix(path, self.root)
            language = language_for_path(relative_path)

            dependencies: Tuple[str, ...] = ()
            complexity: Optional[int] = None
            if is_code_language(language):
                import_section = "\n".join(all_lines[: self.options.import_scan_lines])
                dependencies = tuple(extract_dependencies(import_section, language))
                complexity = compute_complexity(content)

            return CodeFile(
                id=file_id(relative_path),
                file_path=path,
                relative_path=relative_path,
                language=language,
                size=stat.size,
                lines=len(all_lines),
                dependencies=dependencies,
                complexity=complexity,
                last_modified=datetime.fromtimestamp(stat.mtime, tz=timezone.utc),
                content="\n".join(all_lines[: self.options.content_lines]),
            )

    def iter_files(self) -> Iterator[CodeFile]:
        """Analyze files in walk order; also records them on ``self.files``."""
        self.files = []
        seen: Dict[str, str] = {}
        for path, info in walk_repo_files(
            self.root,
            self.fs,
            exclude_dirs=self.options.exclude_dirs,
            warnings=self.warnings,
        ):
            code_file = self.analyze_file(path, info)
            if code_file is None:
                continue
            if code_file.id in seen:
                self._warn(
                    f"File id collision: {code_file.relative_path} and {seen[code_file.id]} "
                    f"both map to {code_file.id}; keeping the first"
                )
                continue
            seen[code_file.id] = code_file.relative_path
            self.files.append(code_file)
            yield code_file

    def build_edges(self, files: Optional[Sequence[CodeFile]] = None) -> List[DependencyEdge]:
        with self.timer.stage("build_edges"):
            return build_dependency_edges(self.files if files is None else files)

    async def analyze_streaming(
        self,
        on_file: Optional[FileCallback] = None,
        on_complete: Optional[EdgesCallback] = None,
    ) -> List[DependencyEdge]:
        """Report each file as soon as it is analyzed, then the edge list.

        Callbacks may be plain functions or coroutine functions.
        """
        progress(f"Scanning {self.root}...")
        count = 0
        for code_file in self.iter_files():
            if on_file is not None:
                await _maybe_await(on_file(code_file))
            count += 1
            if count % self.options.yield_every == 0:
                await asyncio.sleep(0)
        progress(f"Analyzed {count} files", done=True)
        edges = self.build_edges()
        if on_complete is not None:
            await _maybe_await(on_complete(edges))
        return edges

    def analyze(
        self, on_file: Optional[Callable[[CodeFile], Any]] = None
    ) -> Tuple[List[CodeFile], List[DependencyEdge]]:
        """Blocking scan for callers without an event loop."""
        progress(f"Scanning {self.root}...")
        for code_file in self.iter_files():
            if on_file is not None:
                on_file(code_file)
        progress(f"Analyzed {len(self.files)} files", done=True)
        return list(self.files), self.build_edges()
