from __future__ import annotations

from .classifier import ZoneClassifier, zone_for_path
from .engine import LayoutEngine, LayoutResult, MappingOverrides, OverrideLookup, as_position
from .overrides import LAYOUT_DIR, LAYOUT_FILE, LayoutPersistence, normalize_coordinate
from .spiral import ring_for_index, rings_for_count, spiral_position, zone_radius
from .zones import (
    DEFAULT_PATHWAY_GAP,
    DEFAULT_SPACING,
    ZONE_NAMES,
    ZoneConfig,
    ZoneState,
    ZoneSummary,
    default_zones,
)
