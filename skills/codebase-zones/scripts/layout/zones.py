"""Zone table and per-call zone state.

Zone layout (top view, -z is north):

    [entry]  (    )  [api ]
    [lib  ]  [core]  [data]
    [infra]  [ui  ]  [test]
"""
from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Dict, Iterable, List, Tuple

DEFAULT_SPACING = 5.0
DEFAULT_PATHWAY_GAP = 10.0

ZONE_NAMES: Tuple[str, ...] = ("core", "entry", "api", "data", "ui", "infra", "lib", "test")


@dataclass(frozen=True)
class ZoneConfig:
    name: str
    display_name: str
    column: int
    row: int
    color: int
    spacing: float = DEFAULT_SPACING

    def __post_init__(self) -> None:
        if not self.spacing > 0:
            raise ValueError(f"Zone {self.name!r} needs a positive spacing, got {self.spacing}")
        if self.column not in (-1, 0, 1) or self.row not in (-1, 0, 1):
            raise ValueError(f"Zone {self.name!r} is off the 3x3 grid: ({self.column}, {self.row})")


def default_zones(spacing: float = DEFAULT_SPACING) -> Dict[str, ZoneConfig]:
    table = (
        ("core", "Core Logic", 0, 0, 0x9B59B6),
        ("entry", "Entry Points", -1, -1, 0x3498DB),
        ("api", "API Layer", 1, -1, 0x27AE60),
        ("data", "Data Layer", 1, 0, 0xF39C12),
        ("ui", "User Interface", 0, 1, 0xE74C3C),
        ("infra", "Infrastructure", -1, 1, 0x95A5A6),
        ("lib", "Utilities", -1, 0, 0x00BCD4),
        ("test", "Tests", 1, 1, 0x2ECC71),
    )
    return {
        name: ZoneConfig(name, display, column, row, color, spacing)
        for name, display, column, row, color in table
    }


def validate_zone_table(zones: Dict[str, ZoneConfig]) -> None:
    missing = [name for name in ZONE_NAMES if name not in zones]
    if missing:
        raise ValueError(f"Zone table is missing: {', '.join(missing)}")
    cells: Dict[Tuple[int, int], str] = {}
    for config in zones.values():
        cell = (config.column, config.row)
        if cell in cells:
            raise ValueError(f"Zones {cells[cell]!r} and {config.name!r} share grid cell {cell}")
        cells[cell] = config.name


@dataclass(frozen=True)
class ZoneSummary:
    name: str
    display_name: str
    min_x: float
    max_x: float
    min_z: float
    max_z: float
    file_count: int
    color: int

    def to_dict(self) -> Dict[str, object]:
        return {
            "name": self.name,
            "displayName": self.display_name,
            "minX": self.min_x,
            "maxX": self.max_x,
            "minZ": self.min_z,
            "maxZ": self.max_z,
            "fileCount": self.file_count,
            "color": self.color,
        }


@dataclass
class ZoneState:
    """Center and running bounds of one zone during one layout call."""

    config: ZoneConfig
    center_x: float = 0.0
    center_z: float = 0.0
    min_x: float = math.inf
    max_x: float = -math.inf
    min_z: float = math.inf
    max_z: float = -math.inf
    file_count: int = 0
    # Procedural spiral slots used; overridden files do not take one.
    placed: int = 0

    @property
    def name(self) -> str:
        return self.config.name

    def expand_to_include(self, x: float, z: float) -> None:
        self.min_x = min(self.min_x, x)
        self.max_x = max(self.max_x, x)
        self.min_z = min(self.min_z, z)
        self.max_z = max(self.max_z, z)
        self.file_count += 1

    def summary(self) -> ZoneSummary:
        # Padded by one spacing so fences clear the outermost files.
        pad = self.config.spacing
        return ZoneSummary(
            name=self.config.name,
            display_name=self.config.display_name,
            min_x=self.min_x - pad,
            max_x=self.max_x + pad,
            min_z=self.min_z - pad,
            max_z=self.max_z + pad,
            file_count=self.file_count,
            color=self.config.color,
        )


def summaries(states: Iterable[ZoneState]) -> List[ZoneSummary]:
    return [state.summary() for state in states if state.file_count > 0]
