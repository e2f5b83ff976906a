"""
Interaction Module
Owns the winding state and turns pointer, wheel and selection events into redraws
"""

import dataclasses
import logging
from enum import Enum
from typing import Callable, List, Optional, Sequence, Tuple

import numpy as np

from config import CIRCULAR_SURFACE_SIZE, HIT_RADIUS
from exceptions import WindingDesignError
from geometry import CircularLayout, angle_for_slot
from view_state import (
    DisplayOptions, SelectionState, ViewName, ViewportState, WindingSnapshot,
)
from winding_model import Coil, WindingDesign, design_winding
from winding_parameters import MachineSpec

logger = logging.getLogger("winding_designer.interaction")

RedrawListener = Callable[[WindingSnapshot], None]


class DragState(Enum):
    IDLE = "idle"
    DRAGGING = "dragging"


def find_coil_at(coils: Sequence[Coil], num_slots: int, layout: CircularLayout,
                 x: float, y: float, radius: float = HIT_RADIUS) -> Optional[int]:
    """Index of the first coil whose start-slot outer marker lies within `radius` of (x, y)"""
    if not coils:
        return None
    starts = np.array([c.start for c in coils])
    cx, cy = layout.center
    angles = angle_for_slot(starts, num_slots)
    distances = np.hypot(x - (cx + layout.outer_radius * np.cos(angles)),
                         y - (cy + layout.outer_radius * np.sin(angles)))
    hits = np.flatnonzero(distances < radius)
    return int(hits[0]) if hits.size else None


class WindingController:
    """
    Single owner of the coil sequence, selection and linear-view viewport

    Every state change ends in `request_redraw`, which hands a fresh
    WindingSnapshot to each registered listener.
    """

    def __init__(self, circular_layout: Optional[CircularLayout] = None):
        self.circular_layout = circular_layout or CircularLayout(*CIRCULAR_SURFACE_SIZE)
        self.spec: Optional[MachineSpec] = None
        self.design: Optional[WindingDesign] = None
        self.viewport = ViewportState()
        self.selection = SelectionState()
        self.options = DisplayOptions()
        self.active_view = ViewName.CIRCULAR
        self.drag_state = DragState.IDLE
        self._last_pointer: Tuple[float, float] = (0.0, 0.0)
        self._listeners: List[RedrawListener] = []

    def __repr__(self):
        slots = self.spec.num_slots if self.spec else None
        return f"WindingController(slots={slots}, coils={len(self.coils)}, view={self.active_view.value})"

    @property
    def coils(self) -> Tuple[Coil, ...]:
        return self.design.coils if self.design else ()

    def add_listener(self, listener: RedrawListener) -> None:
        self._listeners.append(listener)

    def snapshot(self) -> WindingSnapshot:
        return WindingSnapshot(
            spec=self.spec,
            figures=self.design.figures if self.design else None,
            coils=self.coils,
            selected_index=self.selection.index,
            transform=self.viewport.freeze(),
            options=self.options,
            active_view=self.active_view,
        )

    def request_redraw(self) -> WindingSnapshot:
        snapshot = self.snapshot()
        for listener in self._listeners:
            listener(snapshot)
        return snapshot

    # ------------------------------------------------------------------
    # Design
    # ------------------------------------------------------------------

    def recalculate(self, spec: MachineSpec) -> WindingDesign:
        """
        Compute figures and coils for a new spec and redraw

        All checks run before any state changes; on a WindingDesignError the
        previous design, selection and viewport stay as they were. A selected
        index survives unless the new coil sequence is too short for it.
        """
        try:
            design = design_winding(spec)
        except WindingDesignError as e:
            logger.warning("Rejected design input: %s", e)
            raise

        self.spec = spec
        self.design = design
        self.selection.discard_beyond(len(design.coils))
        self.request_redraw()
        return design

    # ------------------------------------------------------------------
    # Linear view pan / zoom
    # ------------------------------------------------------------------

    def pointer_down(self, x: float, y: float) -> None:
        self.drag_state = DragState.DRAGGING
        self._last_pointer = (x, y)

    def pointer_move(self, x: float, y: float) -> None:
        if self.drag_state is not DragState.DRAGGING:
            return
        last_x, last_y = self._last_pointer
        self.viewport.pan(x - last_x, y - last_y)
        self._last_pointer = (x, y)
        self.request_redraw()

    def pointer_up(self) -> None:
        self.drag_state = DragState.IDLE

    def wheel(self, steps: float, x: float, y: float) -> None:
        """Zoom the linear view around (x, y); positive steps zoom in"""
        if not steps:
            return
        self.viewport.zoom_at(steps, x, y)
        logger.debug("Zoom %+g at (%.1f, %.1f) -> scale %.3f", steps, x, y, self.viewport.scale)
        self.request_redraw()

    def reset_view(self) -> None:
        self.viewport.reset()
        self.request_redraw()

    # ------------------------------------------------------------------
    # Selection
    # ------------------------------------------------------------------

    def click_circular(self, x: float, y: float) -> Optional[int]:
        """Select the coil whose start marker was clicked; a miss changes nothing"""
        if not self.spec:
            return None
        index = find_coil_at(self.coils, self.spec.num_slots, self.circular_layout, x, y)
        if index is None:
            return None
        self.selection.select(index, len(self.coils))
        logger.debug("Selected coil %d from circular view", index + 1)
        self.request_redraw()
        return index

    def select_row(self, index: int) -> None:
        self.selection.select(index, len(self.coils))
        self.request_redraw()

    def clear_selection(self) -> None:
        self.selection.clear()
        self.request_redraw()

    # ------------------------------------------------------------------
    # View and display options
    # ------------------------------------------------------------------

    def toggle_view(self, view) -> None:
        self.active_view = ViewName(view)
        self.request_redraw()

    def set_options(self, **changes) -> None:
        self.options = dataclasses.replace(self.options, **changes)
        self.request_redraw()
