#!/usr/bin/env python3
"""Zone mapper CLI: scan a repo, classify files into zones, lay them out."""

from __future__ import annotations

import argparse
import asyncio
import sys
from collections import Counter
from pathlib import Path
from typing import List, Optional, Sequence, Tuple

from _fs import safe_preview_text, write_lines, write_text, workspace_root
from exporter import build_scene, export_graphml, export_scene_json
from indexer import CodebaseAnalyzer, circular_pairs, language_counts, language_display_name
from ir import CodeFile, DependencyEdge, load_analysis, save_analysis
from layout import LayoutEngine, LayoutPersistence, LayoutResult, default_zones
from utils import NullTimer, StageTimer, progress
from .config import (
    layout_options_from,
    load_repo_config,
    option_type,
    resolve_out_dir,
    scan_options_from,
)


def top_counts(values: Sequence[str], max_items: int) -> List[str]:
    counts = Counter(values)
    return [f"{name}: {count}" for name, count in counts.most_common(max_items)]


def make_timer(args: argparse.Namespace):
    return StageTimer() if getattr(args, "timing", False) else NullTimer()


def print_timing(args: argparse.Namespace, timer) -> None:
    if not getattr(args, "timing", False):
        return
    print("\n[TIMING]", file=sys.stderr)
    for line in timer.report_lines():
        print(line, file=sys.stderr)


def build_summary(
    files: Sequence[CodeFile],
    edges: Sequence[DependencyEdge],
    warnings: Sequence[str],
    *,
    max_sample: int,
) -> List[str]:
    lines: List[str] = [f"FILE_COUNT: {len(files)}"]
    lines.append("TOP_DIRS:")
    dirs = [f.relative_path.split("/")[0] if "/" in f.relative_path else "." for f in files]
    lines.extend(f"  {line}" for line in top_counts(dirs, max_sample))
    lines.append("LANGUAGES:")
    for name, count in list(language_counts(f.language for f in files).items())[:max_sample]:
        lines.append(f"  {language_display_name(name)}: {count}")
    lines.append(f"IMPORT_EDGES: {len(edges)}")
    cycles = circular_pairs(list(edges))
    lines.append(f"CIRCULAR_PAIRS: {len(cycles)}")
    for first, second in cycles[:max_sample]:
        lines.append(f"  {first} <-> {second}")
    if warnings:
        lines.append(f"WARNINGS: {len(warnings)}")
        lines.extend(f"  {item}" for item in list(warnings)[:max_sample])
    return lines


def run_scan(
    args: argparse.Namespace, *, timer, warnings: List[str]
) -> Tuple[List[CodeFile], List[DependencyEdge], Path]:
    repo = Path(args.repo).resolve()
    out_dir = resolve_out_dir(repo, args.out, workspace_root=workspace_root())
    out_dir.mkdir(parents=True, exist_ok=True)
    analysis_path = out_dir / "analysis.json"

    if getattr(args, "cached", False):
        cached = load_analysis(analysis_path, repo)
        if cached is not None:
            progress(f"Reusing {analysis_path}", done=True)
            files, edges = cached
            return files, edges, out_dir
        progress("No usable cached analysis; scanning")

    config, config_name = load_repo_config(repo, warnings)
    if config_name:
        progress(f"Loaded {config_name}", done=True)
    options = scan_options_from(
        config,
        exclude_dirs=args.exclude or [],
        content_lines=getattr(args, "content_lines", None),
    )
    analyzer = CodebaseAnalyzer(repo, options=options, timer=timer, warnings=warnings)
    files: List[CodeFile] = []

    with timer.stage("scan"):
        edges = asyncio.run(analyzer.analyze_streaming(files.append))

    with timer.stage("save_analysis"):
        save_analysis(analysis_path, repo, files, edges)
    return files, edges, out_dir


def run_layout(
    args: argparse.Namespace,
    files: Sequence[CodeFile],
    *,
    timer,
    warnings: List[str],
) -> Tuple[LayoutEngine, LayoutResult]:
    repo = Path(args.repo).resolve()
    config, _ = load_repo_config(repo, warnings)
    options = layout_options_from(
        config,
        zone_spacing=getattr(args, "spacing", None),
        pathway_gap=getattr(args, "gap", None),
    )
    store = None if args.no_overrides else LayoutPersistence(repo, warnings=warnings)
    engine = LayoutEngine(
        store,
        zones=default_zones(options.zone_spacing),
        pathway_gap=options.pathway_gap,
        timer=timer,
    )
    result = engine.compute_layout(files)
    return engine, result


def zone_lines(result: LayoutResult) -> List[str]:
    lines = ["ZONES:"]
    for zone in result.zones:
        lines.append(
            f"  {zone.name:<6} {zone.display_name:<16} files={zone.file_count:<5} "
            f"x=[{zone.min_x:.1f}, {zone.max_x:.1f}] z=[{zone.min_z:.1f}, {zone.max_z:.1f}]"
        )
    return lines


def cmd_scan(args: argparse.Namespace) -> int:
    timer = make_timer(args)
    warnings: List[str] = []
    with timer.stage("total"):
        files, edges, out_dir = run_scan(args, timer=timer, warnings=warnings)
        summary = build_summary(files, edges, warnings, max_sample=args.max_sample)
        write_lines(out_dir / "summary.txt", summary)
    print(safe_preview_text("\n".join(summary), max_bytes=900))
    print(f"Artifacts: {out_dir}")
    print_timing(args, timer)
    return 0


def cmd_layout(args: argparse.Namespace) -> int:
    timer = make_timer(args)
    warnings: List[str] = []
    with timer.stage("total"):
        files, edges, out_dir = run_scan(args, timer=timer, warnings=warnings)
        _, result = run_layout(args, files, timer=timer, warnings=warnings)
        scene = build_scene(files, edges, result)
        with timer.stage("export"):
            write_text(out_dir / "scene.json", export_scene_json(scene))
            if args.graphml:
                write_text(out_dir / "scene.graphml", export_graphml(scene))
    print(f"FILE_COUNT: {len(files)}")
    print(f"IMPORT_EDGES: {len(edges)}")
    print("\n".join(zone_lines(result)))
    print(f"Artifacts: {out_dir}")
    print_timing(args, timer)
    return 0


def cmd_move(args: argparse.Namespace) -> int:
    repo = Path(args.repo).resolve()
    warnings: List[str] = []
    store = LayoutPersistence(repo, debounce_seconds=0, warnings=warnings)
    if args.remove:
        removed = store.remove_position(args.file_id)
        print(f"{args.file_id}: {'override removed' if removed else 'no override'}")
    else:
        if args.x is None or args.z is None:
            print("move needs X and Z (or --remove)", file=sys.stderr)
            return 2
        position = store.save_position(args.file_id, args.x, args.z)
        print(f"{args.file_id}: x={position.x} z={position.z}")
    store.close()
    return 1 if warnings else 0


def cmd_zones(args: argparse.Namespace) -> int:
    for config in LayoutEngine().all_zones():
        print(
            f"{config.name:<6} {config.display_name:<16} grid=({config.column:+d},{config.row:+d}) "
            f"color=#{config.color:06x} spacing={config.spacing}"
        )
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Architectural zone mapper")
    parser.add_argument("--repo", default=".", help="Repo root (default: .)")
    parser.add_argument(
        "--out", default=None, help="Output dir (default: workspace/codebase-zones/<repo>)"
    )
    parser.add_argument(
        "--timing", action="store_true", help="Show timing breakdown of operations"
    )
    sub = parser.add_subparsers(dest="command")

    def add_scan_args(p: argparse.ArgumentParser) -> None:
        p.add_argument(
            "--exclude", action="append", default=None, help="Extra directory name to prune"
        )
        p.add_argument(
            "--content-lines",
            type=option_type("content_lines", int),
            default=None,
            help="Content sample size",
        )
        p.add_argument(
            "--cached",
            action="store_true",
            help="Reuse analysis.json from the output dir when it matches the repo",
        )
        p.add_argument("--max-sample", type=int, default=12, help="Summary sample cap")

    scan_parser = sub.add_parser("scan", help="Analyze files and dependencies")
    add_scan_args(scan_parser)

    layout_parser = sub.add_parser("layout", help="Analyze and compute zone layout")
    add_scan_args(layout_parser)
    layout_parser.add_argument(
        "--spacing", type=option_type("zone_spacing", float), default=None, help="Grid spacing"
    )
    layout_parser.add_argument(
        "--gap",
        type=option_type("pathway_gap", float),
        default=None,
        help="Pathway gap between zones",
    )
    layout_parser.add_argument(
        "--no-overrides", action="store_true", help="Ignore manual positions"
    )
    layout_parser.add_argument("--graphml", action="store_true", help="Also write scene.graphml")

    move_parser = sub.add_parser("move", help="Pin a file to a manual position")
    move_parser.add_argument("file_id")
    move_parser.add_argument("x", type=float, nargs="?")
    move_parser.add_argument("z", type=float, nargs="?")
    move_parser.add_argument("--remove", action="store_true", help="Drop the override")

    sub.add_parser("zones", help="Print the zone table")
    return parser


COMMANDS = {
    "scan": cmd_scan,
    "layout": cmd_layout,
    "move": cmd_move,
    "zones": cmd_zones,
}


def main(argv: Optional[Sequence[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(list(argv) if argv is not None else None)
    if not args.command:
        parser.print_help()
        return 2
    return COMMANDS[args.command](args)


if __name__ == "__main__":
    sys.exit(main())
