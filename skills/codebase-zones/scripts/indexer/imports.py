"""Syntactic dependency extraction and best-effort resolution.

Nothing here parses code. Targets are pulled out with per-language regexes
and matched against scanned files by path substring or bare filename.
"""
from __future__ import annotations

import re
from collections import OrderedDict
from pathlib import PurePosixPath
from typing import Callable, Dict, List, Optional, Sequence

from ir import CodeFile, DependencyEdge

from .languages import is_code_language
from .quality import mark_circular

TS_FROM_RE = re.compile(r"""\bimport\s+[^'";]*?\s+from\s+['"]([^'"]+)['"]""")
TS_SIDE_EFFECT_RE = re.compile(r"""\bimport\s+['"]([^'"]+)['"]""")
REQUIRE_RE = re.compile(r"""\brequire\s*\(\s*['"]([^'"]+)['"]\s*\)""")
PY_FROM_RE = re.compile(r"^\s*from\s+(\S+)\s+import\b", re.MULTILINE)
PY_IMPORT_RE = re.compile(r"^\s*import\s+([^\n#;]+)", re.MULTILINE)
JAVA_IMPORT_RE = re.compile(r"^\s*import\s+(?:static\s+)?([^;\s]+)\s*;", re.MULTILINE)
GO_IMPORT_RE = re.compile(r"""\bimport\s+(?:\(\s*([^)]*)\)|(?:[\w.]+\s+)?"([^"]+)")""")
GO_QUOTED_RE = re.compile(r'"([^"]+)"')
C_INCLUDE_RE = re.compile(r"""^\s*#\s*include\s*[<"]([^>"]+)[>"]""", re.MULTILINE)
CS_USING_RE = re.compile(r"^\s*using\s+(?:static\s+)?([\w.]+)\s*;", re.MULTILINE)


def _js_imports(content: str) -> List[str]:
    deps = [m.group(1) for m in TS_FROM_RE.finditer(content)]
    deps.extend(m.group(1) for m in TS_SIDE_EFFECT_RE.finditer(content))
    deps.extend(m.group(1) for m in REQUIRE_RE.finditer(content))
    return deps


def _py_imports(content: str) -> List[str]:
    deps = [m.group(1) for m in PY_FROM_RE.finditer(content)]
    for match in PY_IMPORT_RE.finditer(content):
        for part in match.group(1).split(","):
            tokens = part.split()
            if tokens:
                deps.append(tokens[0])
    return deps


def _java_imports(content: str) -> List[str]:
    return [m.group(1) for m in JAVA_IMPORT_RE.finditer(content)]


def _go_imports(content: str) -> List[str]:
    deps: List[str] = []
    for match in GO_IMPORT_RE.finditer(content):
        block, single = match.group(1), match.group(2)
        if block is not None:
            for line in block.splitlines():
                quoted = GO_QUOTED_RE.search(line)
                if quoted:
                    deps.append(quoted.group(1))
        elif single:
            deps.append(single)
    return deps


def _c_includes(content: str) -> List[str]:
    return [m.group(1) for m in C_INCLUDE_RE.finditer(content)]


def _cs_usings(content: str) -> List[str]:
    return [m.group(1) for m in CS_USING_RE.finditer(content)]


EXTRACTORS: Dict[str, Callable[[str], List[str]]] = {
    "typescript": _js_imports,
    "javascript": _js_imports,
    "python": _py_imports,
    "java": _java_imports,
    "go": _go_imports,
    "c": _c_includes,
    "cpp": _c_includes,
    "csharp": _cs_usings,
}


def is_path_like(target: str) -> bool:
    return target.startswith((".", "/"))


def extract_dependencies(content: str, language: str) -> List[str]:
    """Raw, bare module-style targets declared in content.

    Relative and absolute path targets are dropped: this heuristic cannot
    resolve them.
    """
    extractor = EXTRACTORS.get(language)
    if extractor is None:
        return []
    deps: List[str] = []
    for raw in extractor(content):
        target = raw.strip()
        if target and not is_path_like(target):
            deps.append(target)
    return deps


def _matches(target: str, candidate: CodeFile) -> bool:
    if target in candidate.relative_path:
        return True
    return PurePosixPath(candidate.relative_path).stem == target


class DependencyResolver:
    """First-match lookup of raw targets over files in scan order."""

    def __init__(self, files: Sequence[CodeFile]) -> None:
        self.files = list(files)
        self._first: Dict[str, Optional[CodeFile]] = {}

    def _scan(self, target: str, skip_id: Optional[str]) -> Optional[CodeFile]:
        for candidate in self.files:
            if candidate.id == skip_id:
                continue
            if _matches(target, candidate):
                return candidate
        return None

    def resolve(self, target: str, importer: Optional[CodeFile] = None) -> Optional[CodeFile]:
        if target not in self._first:
            self._first[target] = self._scan(target, None)
        found = self._first[target]
        if found is not None and importer is not None and found.id == importer.id:
            return self._scan(target, importer.id)
        return found


def build_dependency_edges(files: Sequence[CodeFile]) -> List[DependencyEdge]:
    resolver = DependencyResolver(files)
    edges: List[DependencyEdge] = []
    for source in files:
        if not is_code_language(source.language):
            continue
        weights: "OrderedDict[str, int]" = OrderedDict()
        for target in source.dependencies:
            resolved = resolver.resolve(target, source)
            if resolved is None:
                continue
            weights[resolved.id] = weights.get(resolved.id, 0) + 1
        for target_id, weight in weights.items():
            edges.append(DependencyEdge(source=source.id, target=target_id, weight=weight))
    mark_circular(edges)
    return edges
