from __future__ import annotations

import json
from typing import Dict, List, Optional, Sequence

from indexer import language_color
from ir import CodeFile, DependencyEdge
from layout import LayoutResult


def build_scene(
    files: Sequence[CodeFile],
    edges: Sequence[DependencyEdge],
    layout: LayoutResult,
    *,
    include_unplaced: bool = False,
) -> Dict[str, object]:
    nodes: List[Dict[str, object]] = []
    for code_file in files:
        position = layout.positions.get(code_file.id)
        if position is None and not include_unplaced:
            continue
        nodes.append(
            {
                "id": code_file.id,
                "label": code_file.relative_path,
                "language": code_file.language,
                "color": language_color(code_file.language),
                "zone": layout.zone_of.get(code_file.id),
                "x": position.x if position else None,
                "z": position.z if position else None,
                "size": code_file.size,
                "lines": code_file.lines,
                "complexity": code_file.complexity,
            }
        )
    placed = {node["id"] for node in nodes}
    edge_list = [
        edge.to_dict()
        for edge in edges
        if edge.source in placed and edge.target in placed
    ]
    return {
        "directed": True,
        "nodes": nodes,
        "edges": edge_list,
        "zones": [zone.to_dict() for zone in layout.zones],
    }


def export_scene_json(scene: Dict[str, object]) -> str:
    return json.dumps(scene, ensure_ascii=True, indent=2)


def export_graphml(scene: Dict[str, object]) -> str:
    def esc(value: object) -> str:
        text = "" if value is None else str(value)
        return (
            text.replace("&", "&amp;")
            .replace("<", "&lt;")
            .replace(">", "&gt;")
            .replace('"', "&quot;")
            .replace("'", "&apos;")
        )

    node_keys = [
        ("n_label", "label", "string"),
        ("n_zone", "zone", "string"),
        ("n_language", "language", "string"),
        ("n_x", "x", "double"),
        ("n_z", "z", "double"),
        ("n_lines", "lines", "int"),
        ("n_complexity", "complexity", "int"),
    ]
    edge_keys = [
        ("e_type", "type", "string"),
        ("e_weight", "weight", "int"),
        ("e_circular", "isCircular", "boolean"),
    ]

    lines = [
        '<?xml version="1.0" encoding="UTF-8"?>',
        '<graphml xmlns="http://graphml.graphdrawing.org/xmlns">',
    ]
    for key_id, name, key_type in node_keys:
        lines.append(f'<key id="{key_id}" for="node" attr.name="{name}" attr.type="{key_type}"/>')
    for key_id, name, key_type in edge_keys:
        lines.append(f'<key id="{key_id}" for="edge" attr.name="{name}" attr.type="{key_type}"/>')
    lines.append('<graph id="G" edgedefault="directed">')

    def data_line(key_id: str, value: Optional[object]) -> Optional[str]:
        if value is None:
            return None
        if isinstance(value, bool):
            value = "true" if value else "false"
        return f'  <data key="{key_id}">{esc(value)}</data>'

    for node in scene.get("nodes", []):  # type: ignore[union-attr]
        lines.append(f'<node id="{esc(node.get("id"))}">')
        for key_id, name, _ in node_keys:
            rendered = data_line(key_id, node.get(name))
            if rendered:
                lines.append(rendered)
        lines.append("</node>")

    for edge in scene.get("edges", []):  # type: ignore[union-attr]
        lines.append(f'<edge source="{esc(edge.get("source"))}" target="{esc(edge.get("target"))}">')
        for key_id, name, _ in edge_keys:
            rendered = data_line(key_id, edge.get(name))
            if rendered:
                lines.append(rendered)
        lines.append("</edge>")

    lines.append("</graph>")
    lines.append("</graphml>")
    return "\n".join(lines)
