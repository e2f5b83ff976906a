"""
Winding Geometry Module
Projects slot indices onto the circular and linear drawing surfaces
"""

import numpy as np
from dataclasses import dataclass
from typing import Tuple

from config import (
    INNER_RADIUS, LINEAR_BOTTOM_PAD, LINEAR_MARGIN_X, LINEAR_MAX_ROWS,
    LINEAR_PHASE_GAP, LINEAR_ROW_BASE, LINEAR_TOP_PAD, OUTER_RADIUS,
    STATOR_RING_MARGIN,
)
from winding_model import PHASE_GROUPS, Coil


def angle_for_slot(slot, num_slots: int):
    """
    Angle of a slot on the circular view, in radians

    Slot 1 sits at the top (-π/2 in a y-down surface) and angles grow with
    the slot index. Accepts scalars or numpy arrays.
    """
    return (2 * np.pi / num_slots) * (np.asarray(slot) - 1) - np.pi / 2


@dataclass(frozen=True)
class CircularLayout:
    """Two concentric slot rings centred on the surface"""

    width: float
    height: float
    outer_radius: float = OUTER_RADIUS
    inner_radius: float = INNER_RADIUS
    ring_margin: float = STATOR_RING_MARGIN

    @property
    def center(self) -> Tuple[float, float]:
        return self.width / 2, self.height / 2

    @property
    def stator_radius(self) -> float:
        return self.outer_radius + self.ring_margin

    def point_at(self, slot, num_slots: int, radius: float) -> Tuple[float, float]:
        """Surface coordinates of a slot on a ring of the given radius"""
        cx, cy = self.center
        angle = angle_for_slot(slot, num_slots)
        return float(cx + radius * np.cos(angle)), float(cy + radius * np.sin(angle))

    def outer_point(self, slot, num_slots: int) -> Tuple[float, float]:
        return self.point_at(slot, num_slots, self.outer_radius)

    def inner_point(self, slot, num_slots: int) -> Tuple[float, float]:
        return self.point_at(slot, num_slots, self.inner_radius)

    def chord_control_point(self, start: Tuple[float, float], end: Tuple[float, float],
                            bulge: float) -> Tuple[float, float]:
        """Chord midpoint pushed radially outward by `bulge` of its radius"""
        cx, cy = self.center
        mid_x = (start[0] + end[0]) / 2
        mid_y = (start[1] + end[1]) / 2
        return cx + (mid_x - cx) * (1 + bulge), cy + (mid_y - cy) * (1 + bulge)


@dataclass(frozen=True)
class LinearLayout:
    """Unrolled stator: every slot on one horizontal axis"""

    width: float
    height: float
    margin_x: float = LINEAR_MARGIN_X
    top_pad: float = LINEAR_TOP_PAD
    bottom_pad: float = LINEAR_BOTTOM_PAD

    @property
    def axis_y(self) -> float:
        return self.height - self.bottom_pad

    @property
    def row_floor(self) -> float:
        """Height where coil legs leave the knee region"""
        return self.axis_y - LINEAR_ROW_BASE

    @property
    def row_ceiling(self) -> float:
        return self.top_pad + 10

    def spacing(self, num_slots: int) -> float:
        if num_slots <= 1:
            return 0.0
        return (self.width - 2 * self.margin_x) / (num_slots - 1)

    def slot_x(self, slot, num_slots: int):
        """Axis position of a slot; accepts scalars or numpy arrays"""
        return self.margin_x + (np.asarray(slot) - 1) * self.spacing(num_slots)

    def slot_positions(self, num_slots: int) -> np.ndarray:
        return self.slot_x(np.arange(1, num_slots + 1), num_slots)


class PhaseRowStacking:
    """Coils of the same phase group share a row: A lowest, then B, then C"""

    name = "phase"

    def __init__(self, gap: float = LINEAR_PHASE_GAP):
        self.gap = gap

    def row_top(self, index: int, coil: Coil, coil_count: int, layout: LinearLayout) -> float:
        group = PHASE_GROUPS.index(coil.phase_group) if coil.phase_group in PHASE_GROUPS else 0
        top = layout.row_floor - (group + 1) * self.gap
        return max(top, layout.row_ceiling)

    def __repr__(self):
        return f"PhaseRowStacking(gap={self.gap})"


class SequentialRowStacking:
    """Coils cycle through a fixed number of rows by construction index"""

    name = "sequential"

    def __init__(self, max_rows: int = LINEAR_MAX_ROWS):
        if max_rows < 1:
            raise ValueError(f"max_rows must be at least 1, got {max_rows}")
        self.max_rows = max_rows

    def row_top(self, index: int, coil: Coil, coil_count: int, layout: LinearLayout) -> float:
        rows = min(self.max_rows, max(coil_count, 1))
        gap = (layout.row_floor - layout.row_ceiling) / rows
        return layout.row_floor - (index % rows + 1) * gap

    def __repr__(self):
        return f"SequentialRowStacking(max_rows={self.max_rows})"


ROW_STACKING = {
    PhaseRowStacking.name: PhaseRowStacking,
    SequentialRowStacking.name: SequentialRowStacking,
}


def make_row_stacking(name: str):
    """Build a row-stacking strategy from its name ('phase' or 'sequential')"""
    try:
        return ROW_STACKING[name]()
    except KeyError:
        raise ValueError(f"Unknown row stacking '{name}', expected one of {sorted(ROW_STACKING)}") from None
