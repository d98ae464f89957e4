"""Architectural zone classification.

Rules are checked in a fixed order and the first hit wins; the order is the
policy. Utility markers are split in two: directory segments and config
files are checked before the core rule, loose "util"/"helper" substrings in
the basename after it, so ``services/user-util-service.ts`` lands in core.
"""
from __future__ import annotations

from pathlib import PurePosixPath
from typing import Any, Tuple

SOURCE_EXTS = {
    ".ts", ".tsx", ".js", ".jsx", ".mjs", ".cjs", ".py", ".java", ".go",
    ".cs", ".cpp", ".cc", ".c", ".h", ".hpp", ".rs", ".rb", ".php",
    ".kt", ".swift", ".scala",
}
ENTRY_EXTS = {
    ".ts", ".tsx", ".js", ".jsx", ".mjs", ".cjs", ".py", ".go", ".rs",
    ".java", ".rb", ".php",
}
ENTRY_NAMES = {"main", "index", "app", "server", "cli", "bin", "entry", "bootstrap", "startup"}

TEST_MARKERS = (".test.", ".spec.", "__tests__", "/test/", "/tests/")
INFRA_MARKERS = (
    "/.github/", ".gitlab-ci", "/ci/", "/cd/", "docker", "/k8s/", "/kubernetes/",
    "/helm/", "/terraform/", "/ansible/", "/deploy/", "/infra/",
)
INFRA_EXTS = {".tf", ".tfvars"}
ENTRY_SEGMENTS = ("/bin/", "/cmd/", "/cli/")
API_SEGMENTS = (
    "/api/", "/routes/", "/route/", "/controllers/", "/controller/", "/handlers/",
    "/handler/", "/endpoints/", "/resolvers/", "/graphql/", "/rest/", "/rpc/",
)
API_NAMES = ("controller", "handler", "route", "endpoint")
DATA_SEGMENTS = (
    "/models/", "/model/", "/schemas/", "/schema/", "/entities/", "/entity/",
    "/repositories/", "/repository/", "/repos/", "/dao/", "/migrations/",
    "/database/", "/db/", "/orm/", "/prisma/",
)
DATA_NAMES = ("model", "schema", "entity", "repository", "migration")
DATA_EXTS = {".prisma", ".sql"}
UI_SEGMENTS = (
    "/components/", "/component/", "/views/", "/view/", "/pages/", "/page/",
    "/layouts/", "/layout/", "/screens/", "/ui/", "/widgets/", "/templates/",
    "/styles/", "/css/", "/scss/",
)
UI_NAMES = ("component", "view", "page", "layout", "screen")
UI_EXTS = {".css", ".scss", ".sass", ".less", ".styl", ".tsx", ".jsx", ".vue", ".svelte"}
LIB_SEGMENTS = (
    "/utils/", "/util/", "/helpers/", "/helper/", "/lib/", "/libs/", "/common/",
    "/shared/", "/tools/", "/utilities/",
)
CONFIG_EXTS = {".json", ".yaml", ".yml", ".toml", ".ini", ".env", ".cfg"}
CORE_SEGMENTS = (
    "/services/", "/service/", "/domain/", "/core/", "/business/", "/logic/",
    "/managers/", "/providers/",
)
CORE_NAMES = ("service", "manager", "provider", "use-case", "usecase")
LIB_NAMES = ("util", "helper", "common", "constants", "config")


def _contains_any(text: str, markers: Tuple[str, ...]) -> bool:
    return any(marker in text for marker in markers)


def zone_for_path(path: str) -> str:
    lower = "/" + path.replace("\\", "/").lower().lstrip("/")
    pure = PurePosixPath(lower)
    name = pure.name
    suffix = pure.suffix
    stem = name[: -len(suffix)] if suffix else name

    if _contains_any(lower, TEST_MARKERS):
        return "test"
    if (
        _contains_any(lower, INFRA_MARKERS)
        or name.startswith("dockerfile")
        or name.endswith(".dockerfile")
        or suffix in INFRA_EXTS
    ):
        return "infra"
    if (stem in ENTRY_NAMES or _contains_any(lower, ENTRY_SEGMENTS)) and suffix in ENTRY_EXTS:
        return "entry"
    if _contains_any(lower, API_SEGMENTS) or _contains_any(name, API_NAMES):
        return "api"
    if _contains_any(lower, DATA_SEGMENTS) or _contains_any(name, DATA_NAMES) or suffix in DATA_EXTS:
        return "data"
    if _contains_any(lower, UI_SEGMENTS) or _contains_any(name, UI_NAMES) or suffix in UI_EXTS:
        return "ui"
    if _contains_any(lower, LIB_SEGMENTS) or suffix in CONFIG_EXTS:
        return "lib"
    if _contains_any(lower, CORE_SEGMENTS) or _contains_any(name, CORE_NAMES):
        return "core"
    if _contains_any(name, LIB_NAMES):
        return "lib"
    if suffix in SOURCE_EXTS:
        return "core"
    return "lib"


class ZoneClassifier:
    def zone_for(self, file: Any) -> str:
        """Zone name for a CodeFile (or anything with a path attribute)."""
        path = getattr(file, "relative_path", "") or getattr(file, "file_path", "")
        return zone_for_path(str(path))

    def __call__(self, file: Any) -> str:
        return self.zone_for(file)
