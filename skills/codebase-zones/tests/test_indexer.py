import asyncio
import contextlib
import os
import sys
import tempfile
import unittest
from pathlib import Path

# Add scripts/ to path to import modules
sys.path.append(os.path.join(os.path.dirname(__file__), "../scripts"))

from _fs import FileStat
from indexer import (
    EXCLUDE_DIRS,
    CodebaseAnalyzer,
    DependencyResolver,
    ScanOptions,
    build_dependency_edges,
    circular_pairs,
    compute_complexity,
    extract_dependencies,
    is_code_language,
    language_counts,
    language_for_path,
)
from ir import CodeFile, DependencyEdge, file_id, load_analysis, save_analysis

ROOT = "/repo"


class FakeFileSystem:
    def __init__(self, files, unreadable=()):
        self.files = dict(files)
        self.unreadable = set(unreadable)
        self.listed = []

    def _rel(self, path):
        return os.path.relpath(path, ROOT).replace(os.sep, "/")

    def list_dir(self, path):
        rel = self._rel(path)
        self.listed.append(rel)
        prefix = "" if rel == "." else rel + "/"
        names = {key[len(prefix):].split("/")[0] for key in self.files if key.startswith(prefix)}
        return sorted(names)

    def stat(self, path):
        rel = self._rel(path)
        if rel in self.files:
            return FileStat(size=len(self.files[rel].encode("utf-8")), mtime=0.0, is_dir=False, is_file=True)
        return FileStat(size=0, mtime=0.0, is_dir=True, is_file=False)

    def read_bytes(self, path, limit=None):
        rel = self._rel(path)
        if rel in self.unreadable:
            raise PermissionError(f"denied: {rel}")
        data = self.files[rel].encode("utf-8")
        return data if limit is None else data[:limit]


def make_file(relative_path, dependencies=(), language=None):
    return CodeFile(
        id=file_id(relative_path),
        file_path=f"{ROOT}/{relative_path}",
        relative_path=relative_path,
        language=language or language_for_path(relative_path),
        size=0,
        lines=0,
        dependencies=tuple(dependencies),
    )


class TestExtraction(unittest.TestCase):
    def test_typescript_imports(self):
        content = (
            "import React from 'react';\n"
            "import { a } from './a';\n"
            "import 'polyfill';\n"
            "const fs = require('fs');\n"
            'import type { T } from "@scope/types";\n'
        )
        deps = extract_dependencies(content, "typescript")
        self.assertEqual(deps, ["react", "@scope/types", "polyfill", "fs"])

    def test_python_imports(self):
        content = "import os, sys as system\nfrom pkg.mod import x\nfrom . import y\n"
        self.assertEqual(extract_dependencies(content, "python"), ["pkg.mod", "os", "sys"])

    def test_java_imports(self):
        content = "package a;\nimport java.util.List;\nimport static org.junit.Assert.assertEquals;\n"
        self.assertEqual(
            extract_dependencies(content, "java"),
            ["java.util.List", "org.junit.Assert.assertEquals"],
        )

    def test_go_imports(self):
        content = 'import (\n\t"fmt"\n\tlog "github.com/sirupsen/logrus"\n)\nimport "os"\n'
        self.assertEqual(
            extract_dependencies(content, "go"),
            ["fmt", "github.com/sirupsen/logrus", "os"],
        )

    def test_c_and_csharp(self):
        self.assertEqual(
            extract_dependencies('#include <stdio.h>\n#include "util.h"\n', "c"),
            ["stdio.h", "util.h"],
        )
        self.assertEqual(
            extract_dependencies("using System.Text;\nusing static System.Math;\n", "csharp"),
            ["System.Text", "System.Math"],
        )

    def test_path_like_targets_are_dropped(self):
        content = "import a from './a';\nimport b from '../b';\nimport c from '/abs/c';\n"
        self.assertEqual(extract_dependencies(content, "javascript"), [])

    def test_non_code_language_has_no_dependencies(self):
        self.assertEqual(extract_dependencies("import x from 'y'", "markdown"), [])
        self.assertFalse(is_code_language("markdown"))
        self.assertTrue(is_code_language("go"))

    def test_complexity(self):
        content = "if x:\n\n    for y in z:\n        pass\n"
        self.assertEqual(compute_complexity(content), 7)
        self.assertEqual(compute_complexity("notify()\nformat()\n"), 2)

    def test_file_id_sanitizes(self):
        self.assertEqual(file_id("src/a-b.ts"), "src_a_b_ts")
        self.assertEqual(file_id("src/a_b.ts"), file_id("src/a-b.ts"))

    def test_language_counts_sorted_by_count(self):
        counts = language_counts(["python", "go", "python", "c"])
        self.assertEqual(list(counts.items()), [("python", 2), ("c", 1), ("go", 1)])


class TestResolution(unittest.TestCase):
    def test_first_match_in_scan_order(self):
        files = [
            make_file("src/app.ts", ["config"]),
            make_file("src/config/index.ts"),
            make_file("config.ts"),
        ]
        edges = build_dependency_edges(files)
        self.assertEqual([(e.source, e.target) for e in edges], [("src_app_ts", "src_config_index_ts")])

    def test_importer_never_resolves_to_itself(self):
        files = [make_file("utils.py", ["utils"]), make_file("lib/utils.py")]
        resolver = DependencyResolver(files)
        self.assertEqual(resolver.resolve("utils", files[0]).id, "lib_utils_py")
        self.assertEqual(resolver.resolve("utils").id, "utils_py")

    def test_unresolved_target_gives_no_edge(self):
        files = [make_file("src/a.ts", ["lodash"]), make_file("src/b.ts")]
        self.assertEqual(build_dependency_edges(files), [])

    def test_repeated_targets_raise_weight(self):
        files = [make_file("a.py", ["b", "b"]), make_file("b.py")]
        edges = build_dependency_edges(files)
        self.assertEqual(len(edges), 1)
        self.assertEqual(edges[0].weight, 2)
        self.assertEqual(edges[0].kind, "import")
        self.assertEqual(edges[0].import_kind, "value")

    def test_circular_edges_flagged_both_ways(self):
        files = [make_file("a.py", ["b"]), make_file("b.py", ["a"])]
        edges = build_dependency_edges(files)
        self.assertEqual(len(edges), 2)
        self.assertTrue(all(edge.is_circular for edge in edges))
        self.assertEqual(circular_pairs(edges), [("a_py", "b_py")])

    def test_edge_kind_is_validated(self):
        with self.assertRaises(ValueError):
            DependencyEdge(source="a", target="b", kind="inherits")


class TestAnalyzer(unittest.TestCase):
    def test_scan_resolution_scope(self):
        with tempfile.TemporaryDirectory() as temp_dir:
            repo = Path(temp_dir)
            (repo / "src").mkdir()
            (repo / "src/a.ts").write_text(
                "import { x } from './b';\nimport _ from 'lodash';\n", encoding="utf-8"
            )
            (repo / "src/b.ts").write_text("export const x = 1;\n", encoding="utf-8")

            files, edges = CodebaseAnalyzer(repo, echo_warnings=False).analyze()
            self.assertEqual(len(files), 2)
            self.assertEqual(edges, [])

            (repo / "src/lodash.ts").write_text("export default {};\n", encoding="utf-8")
            files, edges = CodebaseAnalyzer(repo, echo_warnings=False).analyze()
            self.assertEqual([(e.source, e.target) for e in edges], [("src_a_ts", "src_lodash_ts")])

    def test_file_metadata(self):
        with tempfile.TemporaryDirectory() as temp_dir:
            repo = Path(temp_dir)
            body = "\n".join(f"line {i}" for i in range(150)) + "\n"
            (repo / "notes.md").write_text(body, encoding="utf-8")
            (repo / "main.py").write_text("import os\nif True:\n    pass\n", encoding="utf-8")

            files, _ = CodebaseAnalyzer(repo, echo_warnings=False).analyze()
            by_path = {f.relative_path: f for f in files}

            notes = by_path["notes.md"]
            self.assertEqual(notes.language, "markdown")
            self.assertEqual(notes.lines, 150)
            self.assertEqual(len(notes.content.splitlines()), 100)
            self.assertIsNone(notes.complexity)
            self.assertEqual(notes.dependencies, ())

            main = by_path["main.py"]
            self.assertEqual(main.id, "main_py")
            self.assertEqual(main.dependencies, ("os",))
            self.assertEqual(main.complexity, 5)
            self.assertEqual(main.size, len("import os\nif True:\n    pass\n"))
            self.assertIsNotNone(main.last_modified.tzinfo)

    def test_only_leading_lines_are_scanned_for_imports(self):
        fs = FakeFileSystem({"late.py": "x = 1\n" * 60 + "import json\n"})
        analyzer = CodebaseAnalyzer(ROOT, fs=fs, echo_warnings=False)
        files, _ = analyzer.analyze()
        self.assertEqual(files[0].dependencies, ())

    def test_excluded_dirs_are_pruned(self):
        with tempfile.TemporaryDirectory() as temp_dir:
            repo = Path(temp_dir)
            for rel in ("src/app.ts", "node_modules/pkg/index.js", "vendor/x.js", ".zonemap/layout.json"):
                path = repo / rel
                path.parent.mkdir(parents=True, exist_ok=True)
                path.write_text("x\n", encoding="utf-8")

            files, _ = CodebaseAnalyzer(repo, echo_warnings=False).analyze()
            self.assertEqual([f.relative_path for f in files], ["src/app.ts", "vendor/x.js"])

            options = ScanOptions(exclude_dirs=set(EXCLUDE_DIRS) | {"vendor"})
            files, _ = CodebaseAnalyzer(repo, options=options, echo_warnings=False).analyze()
            self.assertEqual([f.relative_path for f in files], ["src/app.ts"])

    def test_excluded_dirs_are_never_listed(self):
        fs = FakeFileSystem(
            {"src/app.ts": "x\n", "node_modules/pkg/index.js": "x\n", "vendor/lib/x.js": "x\n"}
        )
        options = ScanOptions(exclude_dirs=set(EXCLUDE_DIRS) | {"vendor"})
        files, _ = CodebaseAnalyzer(ROOT, fs=fs, options=options, echo_warnings=False).analyze()
        self.assertEqual([f.relative_path for f in files], ["src/app.ts"])
        self.assertIn("src", fs.listed)
        for rel in fs.listed:
            with self.subTest(rel=rel):
                self.assertFalse(rel.startswith(("node_modules", "vendor")))

    def test_unreadable_file_is_skipped_with_warning(self):
        fs = FakeFileSystem(
            {"a.py": "import b\n", "b.py": "x = 1\n", "secret.py": "x = 2\n"},
            unreadable={"secret.py"},
        )
        warnings = []
        analyzer = CodebaseAnalyzer(ROOT, fs=fs, warnings=warnings, echo_warnings=False)
        files, edges = analyzer.analyze()
        self.assertEqual([f.relative_path for f in files], ["a.py", "b.py"])
        self.assertEqual(len(edges), 1)
        self.assertEqual(len(warnings), 1)
        self.assertIn("secret.py", warnings[0])

    def test_id_collision_keeps_first(self):
        fs = FakeFileSystem({"a-b.py": "x = 1\n", "a_b.py": "y = 2\n"})
        warnings = []
        files, _ = CodebaseAnalyzer(ROOT, fs=fs, warnings=warnings, echo_warnings=False).analyze()
        self.assertEqual([f.relative_path for f in files], ["a-b.py"])
        self.assertTrue(any("collision" in item for item in warnings))

    def test_scan_options_validate(self):
        with self.assertRaises(ValueError):
            ScanOptions(yield_every=0)
        with self.assertRaises(ValueError):
            ScanOptions(content_lines=-1)

    def test_analysis_snapshot(self):
        with tempfile.TemporaryDirectory() as temp_dir:
            repo = Path(temp_dir) / "repo"
            (repo / "pkg").mkdir(parents=True)
            (repo / "pkg/a.py").write_text("import b\n", encoding="utf-8")
            (repo / "pkg/b.py").write_text("import a\n", encoding="utf-8")
            files, edges = CodebaseAnalyzer(repo, echo_warnings=False).analyze()

            snapshot = Path(temp_dir) / "out/analysis.json"
            save_analysis(snapshot, repo, files, edges)
            loaded = load_analysis(snapshot, repo)
            self.assertIsNotNone(loaded)
            loaded_files, loaded_edges = loaded
            self.assertEqual(loaded_files, files)
            self.assertEqual([e.to_dict() for e in loaded_edges], [e.to_dict() for e in edges])

            self.assertIsNone(load_analysis(snapshot, Path(temp_dir) / "other"))
            self.assertIsNone(load_analysis(Path(temp_dir) / "missing.json", repo))


class TestStreaming(unittest.IsolatedAsyncioTestCase):
    async def test_streaming_yields_to_event_loop(self):
        fs = FakeFileSystem({f"src/f{i:02d}.py": "x = 1\n" for i in range(25)})
        analyzer = CodebaseAnalyzer(ROOT, fs=fs, options=ScanOptions(yield_every=10), echo_warnings=False)
        seen = []
        ticks = []

        async def ticker():
            while True:
                ticks.append(len(seen))
                await asyncio.sleep(0)

        task = asyncio.create_task(ticker())
        await analyzer.analyze_streaming(seen.append)
        task.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await task

        self.assertEqual(len(seen), 25)
        self.assertIn(10, ticks)
        self.assertIn(20, ticks)
        self.assertTrue(all(count % 10 == 0 for count in ticks))

    async def test_async_callbacks_and_completion(self):
        fs = FakeFileSystem({"a.py": "import b\n", "b.py": "import a\n"})
        analyzer = CodebaseAnalyzer(ROOT, fs=fs, echo_warnings=False)
        seen = []
        completed = []

        async def on_file(code_file):
            seen.append(code_file.id)

        def on_complete(edges):
            completed.append(edges)

        edges = await analyzer.analyze_streaming(on_file, on_complete)
        self.assertEqual(seen, ["a_py", "b_py"])
        self.assertEqual(len(completed), 1)
        self.assertIs(completed[0], edges)
        self.assertEqual(len(edges), 2)
        self.assertEqual(analyzer.files[0].id, "a_py")


if __name__ == "__main__":
    unittest.main()
