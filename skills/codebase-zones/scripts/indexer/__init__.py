from __future__ import annotations

from .constants import (
    CONTENT_LINES,
    CONTROL_FLOW_KEYWORDS,
    EXCLUDE_DIRS,
    IMPORT_SCAN_LINES,
    MAX_READ_BYTES,
    REPO_CONFIG_FILES,
    YIELD_EVERY,
)
from .discovery import language_counts, relative_posix, walk_repo_files
from .imports import (
    DependencyResolver,
    build_dependency_edges,
    extract_dependencies,
    is_path_like,
)
from .languages import (
    LANGUAGES,
    UNKNOWN_LANGUAGE,
    is_code_language,
    language_color,
    language_display_name,
    language_for_extension,
    language_for_path,
)
from .quality import circular_pairs, compute_complexity, mark_circular
from .core import CodebaseAnalyzer, ScanOptions
