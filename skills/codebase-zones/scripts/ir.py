from __future__ import annotations

import json
import re
import time
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence, Tuple


IR_VERSION = 1

EDGE_KINDS = ("import", "extends", "calls")
IMPORT_KINDS = ("value", "type", "reexport")

_ID_UNSAFE = re.compile(r"[^A-Za-z0-9]")


def now_iso() -> str:
    return time.strftime("%Y-%m-%dT%H:%M:%SZ", time.gmtime())


def file_id(relative_path: str) -> str:
    # Not collision-proof: "a-b.ts" and "a_b.ts" share an id.
    return _ID_UNSAFE.sub("_", relative_path)


@dataclass(frozen=True)
class CodeFile:
    id: str
    file_path: str
    relative_path: str
    language: str
    size: int
    lines: int
    dependencies: Tuple[str, ...] = ()
    complexity: Optional[int] = None
    last_modified: datetime = field(
        default_factory=lambda: datetime.fromtimestamp(0, tz=timezone.utc)
    )
    content: str = ""

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "filePath": self.file_path,
            "relativePath": self.relative_path,
            "language": self.language,
            "size": self.size,
            "lines": self.lines,
            "dependencies": list(self.dependencies),
            "complexity": self.complexity,
            "lastModified": self.last_modified.isoformat(),
            "content": self.content,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "CodeFile":
        complexity = data.get("complexity")
        return cls(
            id=str(data["id"]),
            file_path=str(data.get("filePath", "")),
            relative_path=str(data.get("relativePath", "")),
            language=str(data.get("language", "other")),
            size=int(data.get("size", 0)),
            lines=int(data.get("lines", 0)),
            dependencies=tuple(str(dep) for dep in data.get("dependencies", [])),
            complexity=int(complexity) if complexity is not None else None,
            last_modified=datetime.fromisoformat(str(data["lastModified"]))
            if data.get("lastModified")
            else datetime.fromtimestamp(0, tz=timezone.utc),
            content=str(data.get("content", "")),
        )


@dataclass
class DependencyEdge:
    source: str
    target: str
    kind: str = "import"
    weight: int = 1
    is_circular: bool = False
    import_kind: str = "value"

    def __post_init__(self) -> None:
        if self.kind not in EDGE_KINDS:
            raise ValueError(f"Unknown edge kind: {self.kind}")
        if self.import_kind not in IMPORT_KINDS:
            raise ValueError(f"Unknown import kind: {self.import_kind}")

    def to_dict(self) -> Dict[str, Any]:
        return {
            "source": self.source,
            "target": self.target,
            "type": self.kind,
            "weight": self.weight,
            "isCircular": self.is_circular,
            "importKind": self.import_kind,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "DependencyEdge":
        return cls(
            source=str(data["source"]),
            target=str(data["target"]),
            kind=str(data.get("type", "import")),
            weight=int(data.get("weight", 1)),
            is_circular=bool(data.get("isCircular", False)),
            import_kind=str(data.get("importKind", "value")),
        )


@dataclass(frozen=True)
class Position:
    x: float
    z: float

    def to_dict(self) -> Dict[str, float]:
        return {"x": self.x, "z": self.z}


def new_analysis(
    root: Path, files: Sequence[CodeFile], edges: Sequence[DependencyEdge]
) -> Dict[str, Any]:
    return {
        "meta": {
            "version": IR_VERSION,
            "generated_at": now_iso(),
            "root": root.as_posix(),
            "languages": sorted({f.language for f in files}),
        },
        "files": [f.to_dict() for f in files],
        "edges": [e.to_dict() for e in edges],
    }


def save_analysis(
    path: Path, root: Path, files: Sequence[CodeFile], edges: Sequence[DependencyEdge]
) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    payload = new_analysis(root, files, edges)
    path.write_text(json.dumps(payload, ensure_ascii=True, indent=2), encoding="utf-8")


def load_analysis(
    path: Path, root: Path
) -> Optional[Tuple[List[CodeFile], List[DependencyEdge]]]:
    if not path.exists():
        return None
    try:
        payload = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError):
        return None
    if not isinstance(payload, dict):
        return None
    meta = payload.get("meta")
    if not isinstance(meta, dict) or meta.get("version") != IR_VERSION:
        return None
    if meta.get("root") != root.as_posix():
        return None
    try:
        files = [CodeFile.from_dict(item) for item in payload.get("files", [])]
        edges = [DependencyEdge.from_dict(item) for item in payload.get("edges", [])]
    except (KeyError, TypeError, ValueError):
        return None
    return files, edges
