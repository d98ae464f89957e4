from __future__ import annotations

import argparse
import json
import math
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, Tuple

from _fs import WORKSPACE_DIR
from indexer import EXCLUDE_DIRS, REPO_CONFIG_FILES, ScanOptions
from layout import DEFAULT_PATHWAY_GAP, DEFAULT_SPACING
from utils import warn


@dataclass
class LayoutOptions:
    zone_spacing: float = DEFAULT_SPACING
    pathway_gap: float = DEFAULT_PATHWAY_GAP


INT_KEYS = ("content_lines", "import_scan_lines", "max_read_bytes", "yield_every")
FLOAT_KEYS = ("zone_spacing", "pathway_gap")

# (lowest accepted value, whether the bound itself is accepted)
MINIMUMS: Dict[str, Tuple[float, bool]] = {
    "content_lines": (0, True),
    "import_scan_lines": (0, True),
    "max_read_bytes": (1, True),
    "yield_every": (1, True),
    "zone_spacing": (0, False),
    "pathway_gap": (0, True),
}


def range_error(key: str, value: float) -> Optional[str]:
    """Describe why ``value`` is out of range for ``key``, or None when it is fine."""
    if isinstance(value, float) and not math.isfinite(value):
        return "must be a finite number"
    bound, inclusive = MINIMUMS[key]
    if inclusive and value < bound:
        return f"must be at least {bound}"
    if not inclusive and value <= bound:
        return f"must be greater than {bound}"
    return None


def option_type(key: str, cast: Callable[[str], Any]) -> Callable[[str], Any]:
    """argparse ``type=`` callable that applies the same bounds as the repo config."""

    def parse(text: str) -> Any:
        try:
            value = cast(text)
        except ValueError as exc:
            raise argparse.ArgumentTypeError(f"invalid value: {text!r}") from exc
        problem = range_error(key, value)
        if problem:
            raise argparse.ArgumentTypeError(problem)
        return value

    return parse


def normalize_str_list(value: Any) -> List[str]:
    if isinstance(value, str) and value.strip():
        return [value.strip()]
    if isinstance(value, list):
        return [item.strip() for item in value if isinstance(item, str) and item.strip()]
    return []


def load_repo_config(repo: Path, warnings: List[str]) -> Tuple[Dict[str, object], Optional[str]]:
    for filename in REPO_CONFIG_FILES:
        path = repo / filename
        if not path.exists():
            continue
        try:
            payload = json.loads(path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as exc:
            warn(f"Failed to parse {filename}: {exc}", warnings)
            return {}, filename
        if not isinstance(payload, dict):
            warn(f"Invalid {filename}: expected a JSON object", warnings)
            return {}, filename

        config: Dict[str, object] = {"exclude_dirs": normalize_str_list(payload.get("exclude_dirs"))}
        for key in INT_KEYS:
            if key not in payload:
                continue
            value = payload[key]
            if not isinstance(value, int) or isinstance(value, bool):
                warn(f"Ignoring {filename} {key}: expected an integer", warnings)
                continue
            problem = range_error(key, value)
            if problem:
                warn(f"Ignoring {filename} {key}: {problem}", warnings)
                continue
            config[key] = value
        for key in FLOAT_KEYS:
            if key not in payload:
                continue
            value = payload[key]
            if not isinstance(value, (int, float)) or isinstance(value, bool):
                warn(f"Ignoring {filename} {key}: expected a number", warnings)
                continue
            problem = range_error(key, value)
            if problem:
                warn(f"Ignoring {filename} {key}: {problem}", warnings)
                continue
            config[key] = float(value)
        return config, filename
    return {}, None


def _pick(name: str, overrides: Dict[str, Any], config: Dict[str, object], default: Any) -> Any:
    value = overrides.get(name)
    if value is not None:
        return value
    return config.get(name, default)


def scan_options_from(config: Dict[str, object], **overrides: Any) -> ScanOptions:
    exclude = set(EXCLUDE_DIRS)
    exclude.update(config.get("exclude_dirs", []) or [])  # type: ignore[arg-type]
    exclude.update(overrides.get("exclude_dirs") or [])
    defaults = ScanOptions()
    return ScanOptions(
        exclude_dirs=exclude,
        content_lines=_pick("content_lines", overrides, config, defaults.content_lines),
        import_scan_lines=_pick("import_scan_lines", overrides, config, defaults.import_scan_lines),
        max_read_bytes=_pick("max_read_bytes", overrides, config, defaults.max_read_bytes),
        yield_every=_pick("yield_every", overrides, config, defaults.yield_every),
    )


def layout_options_from(config: Dict[str, object], **overrides: Any) -> LayoutOptions:
    return LayoutOptions(
        zone_spacing=float(_pick("zone_spacing", overrides, config, DEFAULT_SPACING)),
        pathway_gap=float(_pick("pathway_gap", overrides, config, DEFAULT_PATHWAY_GAP)),
    )


def resolve_out_dir(repo: Path, out_arg: Optional[str], *, workspace_root: Path) -> Path:
    """Pick the output directory for ``repo``.

    Absolute ``--out`` values are used as given. Relative ones live under the
    workspace; a leading ``workspace`` component names the workspace itself, so
    ``workspace/maps`` and ``maps`` resolve to the same place.
    """
    if not out_arg:
        return (workspace_root / "codebase-zones" / repo.name).resolve()
    out_path = Path(out_arg)
    if out_path.is_absolute():
        return out_path
    parts = out_path.parts
    if parts and parts[0] == WORKSPACE_DIR.name:
        parts = parts[1:]
    return workspace_root.joinpath(*parts).resolve()
