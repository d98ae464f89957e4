from __future__ import annotations

import sys
import time
from contextlib import contextmanager
from typing import Dict, Iterator, List, Optional


def progress(message: str, done: bool = False) -> None:
    """Print a progress message to stderr (doesn't interfere with stdout output)."""
    if done:
        print(f"  [done] {message}", file=sys.stderr)
    else:
        print(f"  [....] {message}", file=sys.stderr)


def warn(message: str, warnings: Optional[List[str]] = None, *, echo: bool = True) -> None:
    if warnings is not None:
        warnings.append(message)
    if echo:
        print(f"  [warn] {message}", file=sys.stderr)


class StageTimer:
    """Collects wall-clock durations of named stages.

    Passed explicitly to whatever wants to be measured; repeated stages
    accumulate.
    """

    def __init__(self) -> None:
        self.timing: Dict[str, float] = {}
        self.counts: Dict[str, int] = {}

    @contextmanager
    def stage(self, label: str) -> Iterator[None]:
        start = time.perf_counter()
        try:
            yield
        finally:
            elapsed = time.perf_counter() - start
            self.timing[label] = self.timing.get(label, 0.0) + elapsed
            self.counts[label] = self.counts.get(label, 0) + 1

    def report_lines(self, total_label: str = "total") -> List[str]:
        total_time = self.timing.get(total_label, sum(self.timing.values()))
        lines = [f"  Total: {total_time:.2f}s"]
        for stage, stage_time in self.timing.items():
            if stage == total_label:
                continue
            percent = (stage_time / total_time * 100) if total_time > 0 else 0.0
            calls = self.counts.get(stage, 1)
            suffix = f" x{calls}" if calls > 1 else ""
            lines.append(f"  {stage}: {stage_time:.2f}s ({percent:.1f}%){suffix}")
        return lines


class NullTimer:
    @contextmanager
    def stage(self, label: str) -> Iterator[None]:
        yield

    def report_lines(self, total_label: str = "total") -> List[str]:
        return []
