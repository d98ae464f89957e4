from __future__ import annotations

from collections import OrderedDict
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Mapping, Optional, Protocol, Sequence, Tuple

from ir import CodeFile, Position
from utils import NullTimer

from .classifier import ZoneClassifier
from .spiral import spiral_position, zone_radius
from .zones import (
    DEFAULT_PATHWAY_GAP,
    ZONE_NAMES,
    ZoneConfig,
    ZoneState,
    ZoneSummary,
    default_zones,
    summaries,
    validate_zone_table,
)


class OverrideLookup(Protocol):
    def get_override(self, file_id: str) -> Optional[Any]:
        ...


class MappingOverrides:
    """Adapts a plain ``{file_id: (x, z) | {"x":.., "z":..}}`` mapping."""

    def __init__(self, overrides: Mapping[str, Any]) -> None:
        self.overrides = overrides

    def get_override(self, file_id: str) -> Optional[Any]:
        return self.overrides.get(file_id)


def as_position(value: Any) -> Position:
    if isinstance(value, Position):
        return value
    if isinstance(value, Mapping):
        return Position(float(value["x"]), float(value["z"]))
    x, z = value
    return Position(float(x), float(z))


@dataclass
class LayoutResult:
    positions: Dict[str, Position] = field(default_factory=dict)
    zone_of: Dict[str, str] = field(default_factory=dict)
    zones: List[ZoneSummary] = field(default_factory=list)


class LayoutEngine:
    """Places files into eight architectural zones.

    Every call to ``compute_positions`` builds its own zone state, so results
    only depend on the file list and the override lookup. The engine keeps
    the latest result for ``get_zone_bounds``; do not share one engine
    between concurrent callers.
    """

    def __init__(
        self,
        overrides: Optional[Any] = None,
        *,
        zones: Optional[Dict[str, ZoneConfig]] = None,
        pathway_gap: float = DEFAULT_PATHWAY_GAP,
        classifier: Optional[Callable[[CodeFile], str]] = None,
        timer: Any = None,
    ) -> None:
        if pathway_gap < 0:
            raise ValueError(f"pathway_gap must be non-negative, got {pathway_gap}")
        self.zones: Dict[str, ZoneConfig] = dict(zones) if zones is not None else default_zones()
        validate_zone_table(self.zones)
        self.pathway_gap = float(pathway_gap)
        self.classifier = classifier if classifier is not None else ZoneClassifier()
        self.timer = timer if timer is not None else NullTimer()
        if overrides is not None and not hasattr(overrides, "get_override"):
            overrides = MappingOverrides(overrides)
        self.overrides: Optional[OverrideLookup] = overrides
        self._last = LayoutResult()

    def zone_config(self, name: str) -> Optional[ZoneConfig]:
        return self.zones.get(name)

    def all_zones(self) -> List[ZoneConfig]:
        return [self.zones[name] for name in ZONE_NAMES]

    def zone_for(self, file: CodeFile) -> str:
        zone = self.classifier(file)
        if zone not in self.zones:
            raise ValueError(f"Classifier returned unknown zone {zone!r} for {file.id}")
        return zone

    def zone_centers(self, counts: Mapping[str, int]) -> Dict[str, Tuple[float, float]]:
        """Zone centers for the given populations, core at the origin.

        Each grid column is as wide as its largest zone, each row as tall as
        its largest zone, and neighbouring columns/rows keep a pathway gap
        between them, so zone squares cannot overlap.
        """
        radii = {
            name: zone_radius(counts.get(name, 0), config.spacing)
            for name, config in self.zones.items()
        }
        col_half = {c: 0.0 for c in (-1, 0, 1)}
        row_half = {r: 0.0 for r in (-1, 0, 1)}
        for name, config in self.zones.items():
            col_half[config.column] = max(col_half[config.column], radii[name])
            row_half[config.row] = max(row_half[config.row], radii[name])

        gap = self.pathway_gap
        col_x = {
            -1: -(col_half[0] + col_half[-1] + gap),
            0: 0.0,
            1: col_half[0] + col_half[1] + gap,
        }
        row_z = {
            -1: -(row_half[0] + row_half[-1] + gap),
            0: 0.0,
            1: row_half[0] + row_half[1] + gap,
        }
        return {
            name: (col_x[config.column], row_z[config.row])
            for name, config in self.zones.items()
        }

    def _fresh_states(self, counts: Mapping[str, int]) -> Dict[str, ZoneState]:
        centers = self.zone_centers(counts)
        states: Dict[str, ZoneState] = OrderedDict()
        for name in ZONE_NAMES:
            cx, cz = centers[name]
            states[name] = ZoneState(config=self.zones[name], center_x=cx, center_z=cz)
        return states

    @staticmethod
    def _procedural(state: ZoneState) -> Position:
        gx, gz = spiral_position(state.placed)
        state.placed += 1
        spacing = state.config.spacing
        return Position(state.center_x + gx * spacing, state.center_z + gz * spacing)

    def compute_layout(self, files: Sequence[CodeFile]) -> LayoutResult:
        with self.timer.stage("layout"):
            buckets: Dict[str, List[CodeFile]] = {name: [] for name in ZONE_NAMES}
            for code_file in files:
                buckets[self.zone_for(code_file)].append(code_file)

            states = self._fresh_states({name: len(bucket) for name, bucket in buckets.items()})
            result = LayoutResult()
            for name in ZONE_NAMES:
                bucket = buckets[name]
                if not bucket:
                    continue
                state = states[name]
                for code_file in bucket:
                    override = (
                        self.overrides.get_override(code_file.id)
                        if self.overrides is not None
                        else None
                    )
                    if override is not None:
                        try:
                            position = as_position(override)
                        except (KeyError, TypeError, ValueError) as exc:
                            raise ValueError(
                                f"Invalid override for {code_file.id}: {override!r}"
                            ) from exc
                    else:
                        position = self._procedural(state)
                    state.expand_to_include(position.x, position.z)
                    result.positions[code_file.id] = position
                    result.zone_of[code_file.id] = name
            result.zones = summaries(states.values())
            return result

    def compute_positions(self, files: Sequence[CodeFile]) -> Dict[str, Position]:
        self._last = self.compute_layout(files)
        return dict(self._last.positions)

    def get_zone_bounds(self) -> List[ZoneSummary]:
        return list(self._last.zones)

    def zone_bounds_from_counts(self, counts: Mapping[str, int]) -> List[ZoneSummary]:
        """Zone summaries from populations alone, ignoring overrides.

        For streaming consumers that know how many files each zone will hold
        before any file is placed.
        """
        states = self._fresh_states(counts)
        for name in ZONE_NAMES:
            state = states[name]
            for _ in range(max(0, int(counts.get(name, 0)))):
                position = self._procedural(state)
                state.expand_to_include(position.x, position.z)
        return summaries(states.values())
