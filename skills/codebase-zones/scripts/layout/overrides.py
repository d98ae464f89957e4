"""Manual position overrides stored in ``<root>/.zonemap/layout.json``.

Document shape::

    {"version": 1, "overrides": {"<file id>": {"x": 1.235, "z": -4.0}}}

Keys are written sorted and coordinates rounded to three decimals so the
file diffs cleanly. Writes are debounced: a burst of ``save_position`` calls
(dragging an object around) ends in a single write.
"""
from __future__ import annotations

import json
import threading
from pathlib import Path
from typing import Dict, List, Optional, Union

from ir import Position
from utils import warn

LAYOUT_VERSION = 1
LAYOUT_DIR = ".zonemap"
LAYOUT_FILE = "layout.json"
DEFAULT_DEBOUNCE_SECONDS = 1.0


def normalize_coordinate(value: float) -> float:
    return round(float(value), 3)


class LayoutPersistence:
    def __init__(
        self,
        root: Optional[Union[str, Path]] = None,
        *,
        debounce_seconds: float = DEFAULT_DEBOUNCE_SECONDS,
        warnings: Optional[List[str]] = None,
        echo_warnings: bool = True,
    ) -> None:
        self.root = Path(root) if root is not None else None
        self.debounce_seconds = debounce_seconds
        self.warnings: List[str] = warnings if warnings is not None else []
        self.echo_warnings = echo_warnings
        self._overrides: Dict[str, Position] = {}
        self._lock = threading.Lock()
        # Held across building and writing a document so flushes land in order.
        self._write_lock = threading.RLock()
        self._timer: Optional[threading.Timer] = None
        self._dirty = False
        self.load()

    @property
    def path(self) -> Optional[Path]:
        if self.root is None:
            return None
        return self.root / LAYOUT_DIR / LAYOUT_FILE

    def set_root(self, root: Union[str, Path]) -> None:
        """Switch repos. Pending changes are written to the old root first."""
        with self._write_lock:
            self.flush()
            self.root = Path(root)
            self.load()

    def get_override(self, file_id: str) -> Optional[Position]:
        with self._lock:
            return self._overrides.get(file_id)

    def overrides(self) -> Dict[str, Position]:
        with self._lock:
            return dict(self._overrides)

    def __len__(self) -> int:
        with self._lock:
            return len(self._overrides)

    def load(self) -> None:
        with self._lock:
            self._overrides = {}
            self._dirty = False
        path = self.path
        if path is None or not path.exists():
            return
        try:
            payload = json.loads(path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as exc:
            warn(f"Failed to load {path}: {exc}", self.warnings, echo=self.echo_warnings)
            return
        if not isinstance(payload, dict) or payload.get("version") != LAYOUT_VERSION:
            warn(f"Ignoring {path}: unsupported layout document", self.warnings, echo=self.echo_warnings)
            return
        raw = payload.get("overrides")
        loaded: Dict[str, Position] = {}
        if isinstance(raw, dict):
            for key, value in raw.items():
                try:
                    loaded[str(key)] = Position(float(value["x"]), float(value["z"]))
                except (KeyError, TypeError, ValueError):
                    warn(f"Skipping malformed override for {key}", self.warnings, echo=self.echo_warnings)
        with self._lock:
            self._overrides = loaded

    def save_position(self, file_id: str, x: float, z: float) -> Position:
        position = Position(normalize_coordinate(x), normalize_coordinate(z))
        with self._lock:
            self._overrides[file_id] = position
        self._schedule()
        return position

    def remove_position(self, file_id: str) -> bool:
        with self._lock:
            removed = self._overrides.pop(file_id, None) is not None
        if removed:
            self._schedule()
        return removed

    def clear(self) -> None:
        with self._lock:
            self._overrides.clear()
        self._schedule()

    def to_document(self) -> Dict[str, object]:
        with self._lock:
            items = sorted(self._overrides.items())
        return {
            "version": LAYOUT_VERSION,
            "overrides": {key: {"x": pos.x, "z": pos.z} for key, pos in items},
        }

    def _schedule(self) -> None:
        with self._lock:
            self._dirty = True
            if self._timer is not None:
                self._timer.cancel()
            if self.debounce_seconds <= 0:
                self._timer = None
            else:
                self._timer = threading.Timer(self.debounce_seconds, self.flush)
                self._timer.daemon = True
                self._timer.start()
        if self.debounce_seconds <= 0:
            self.flush()

    def flush(self) -> bool:
        """Write pending changes now. Returns True if a file was written."""
        with self._write_lock:
            with self._lock:
                if self._timer is not None:
                    self._timer.cancel()
                    self._timer = None
                if not self._dirty:
                    return False
                self._dirty = False
            path = self.path
            if path is None:
                return False
            document = self.to_document()
            try:
                path.parent.mkdir(parents=True, exist_ok=True)
                path.write_text(json.dumps(document, indent=2, sort_keys=True) + "\n", encoding="utf-8")
            except OSError as exc:
                with self._lock:
                    self._dirty = True
                warn(f"Failed to persist {path}: {exc}", self.warnings, echo=self.echo_warnings)
                return False
            return True

    def close(self) -> None:
        self.flush()
