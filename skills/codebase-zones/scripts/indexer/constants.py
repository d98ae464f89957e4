from __future__ import annotations

EXCLUDE_DIRS = {
    ".git",
    ".hg",
    ".svn",
    "node_modules",
    "bower_components",
    "dist",
    "build",
    "out",
    "obj",
    "target",
    ".vscode",
    ".vscode-test",
    ".idea",
    "__pycache__",
    ".venv",
    "venv",
    ".tox",
    ".mypy_cache",
    ".pytest_cache",
    ".3d-descriptions",
    ".zonemap",
}

# Read cap per file; the tail of huge files never matters for metadata.
MAX_READ_BYTES = 64 * 1024
# Lines kept as the content sample.
CONTENT_LINES = 100
# Import declarations live near the top of a file.
IMPORT_SCAN_LINES = 50
# Files processed between two yields to the event loop.
YIELD_EVERY = 10

CONTROL_FLOW_KEYWORDS = ("if", "for", "while", "switch", "try", "catch")

REPO_CONFIG_FILES = (".zonemap.json", "zonemap.json")
