"""Square spiral math.

Index -> integer grid cell, growing outward ring by ring:

    16 15 14 13 12
    17  4  3  2 11
    18  5  0  1 10
    19  6  7  8  9
    20 21 22 23 24

(+x to the right, +z up in the picture.)
"""
from __future__ import annotations

import math
from typing import Tuple


def ring_for_index(index: int) -> int:
    """ceil((sqrt(index + 1) - 1) / 2), computed in integers."""
    if index < 0:
        raise ValueError(f"Spiral index must be non-negative, got {index}")
    return (math.isqrt(index) + 1) // 2


def rings_for_count(count: int) -> int:
    if count < 1:
        return 0
    return ring_for_index(count)


def zone_radius(count: int, spacing: float) -> float:
    """Half-width of the square a zone holding ``count`` files needs."""
    if count < 1:
        return 0.0
    return (rings_for_count(count) + 1) * spacing


def spiral_position(index: int) -> Tuple[int, int]:
    if index == 0:
        return 0, 0
    ring = ring_for_index(index)
    cells_before = (2 * ring - 1) ** 2
    position_in_ring = index - cells_before
    side_length = 2 * ring
    side = position_in_ring // side_length
    offset = position_in_ring % side_length
    if side == 0:
        # right edge, going up
        return ring, -ring + 1 + offset
    if side == 1:
        # top edge, going left
        return ring - 1 - offset, ring
    if side == 2:
        # left edge, going down
        return -ring, ring - 1 - offset
    # bottom edge, going right
    return -ring + 1 + offset, -ring
