"""
View State Module
Pan/zoom, selection and display options, plus the immutable snapshot handed to renderers
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, Tuple

from config import MAX_SCALE, MIN_SCALE, ZOOM_STEP
from geometry import ROW_STACKING
from winding_model import PHASE_GROUPS, Coil
from winding_parameters import MachineSpec, WindingFigures


class ViewName(str, Enum):
    CIRCULAR = "circular"
    LINEAR = "linear"


PHASE_FILTERS = ('ALL',) + PHASE_GROUPS


@dataclass(frozen=True)
class ViewTransform:
    """Frozen pan/zoom: screen = offset + scale * world"""

    scale: float = 1.0
    offset_x: float = 0.0
    offset_y: float = 0.0

    def to_screen(self, x: float, y: float) -> Tuple[float, float]:
        return self.offset_x + self.scale * x, self.offset_y + self.scale * y

    def to_world(self, x: float, y: float) -> Tuple[float, float]:
        return (x - self.offset_x) / self.scale, (y - self.offset_y) / self.scale


@dataclass
class ViewportState:
    """Mutable pan/zoom of the linear view"""

    scale: float = 1.0
    offset_x: float = 0.0
    offset_y: float = 0.0

    def pan(self, dx: float, dy: float) -> None:
        self.offset_x += dx
        self.offset_y += dy

    def zoom_at(self, steps: float, x: float, y: float) -> None:
        """
        Zoom by ZOOM_STEP per wheel step, keeping (x, y) fixed on screen

        Positive steps zoom in, negative steps zoom out. The scale is clamped
        to [MIN_SCALE, MAX_SCALE]; the offset follows the clamped value so the
        anchor still holds at the limits.
        """
        if not steps:
            return
        old_scale = self.scale
        new_scale = min(MAX_SCALE, max(MIN_SCALE, old_scale * ZOOM_STEP ** steps))
        zoom = new_scale / old_scale
        self.offset_x = x - (x - self.offset_x) * zoom
        self.offset_y = y - (y - self.offset_y) * zoom
        self.scale = new_scale

    def reset(self) -> None:
        self.scale = 1.0
        self.offset_x = 0.0
        self.offset_y = 0.0

    def freeze(self) -> ViewTransform:
        return ViewTransform(self.scale, self.offset_x, self.offset_y)


@dataclass
class SelectionState:
    """Index of the highlighted coil, if any"""

    index: Optional[int] = None

    def select(self, index: int, coil_count: int) -> None:
        if not 0 <= index < coil_count:
            raise IndexError(f"Coil index {index} out of range for {coil_count} coils")
        self.index = index

    def clear(self) -> None:
        self.index = None

    def discard_beyond(self, coil_count: int) -> None:
        """Drop an index that no longer fits a coil sequence of `coil_count`"""
        if self.index is not None and self.index >= coil_count:
            self.index = None


@dataclass(frozen=True)
class DisplayOptions:
    """Display toggles shared by both views"""

    show_slot_numbers: bool = True
    show_direction_arrows: bool = False
    show_coil_indices: bool = False
    show_phase_labels: bool = False
    phase_filter: str = 'ALL'  # linear view only
    row_stacking: str = 'phase'  # linear view only

    def __post_init__(self):
        if self.phase_filter not in PHASE_FILTERS:
            raise ValueError(f"phase_filter must be one of {PHASE_FILTERS}, got {self.phase_filter!r}")
        if self.row_stacking not in ROW_STACKING:
            raise ValueError(f"row_stacking must be one of {sorted(ROW_STACKING)}, got {self.row_stacking!r}")

    def coil_label(self, index: int, coil: Coil) -> str:
        parts = []
        if self.show_coil_indices:
            parts.append(str(index + 1))
        if self.show_phase_labels:
            parts.append(coil.phase)
        return " ".join(parts)

    def shows_in_linear(self, coil: Coil) -> bool:
        return self.phase_filter == 'ALL' or coil.phase_group == self.phase_filter


@dataclass(frozen=True)
class WindingSnapshot:
    """Everything a redraw needs, frozen at the moment of the request"""

    spec: Optional[MachineSpec] = None
    figures: Optional[WindingFigures] = None
    coils: Tuple[Coil, ...] = ()
    selected_index: Optional[int] = None
    transform: ViewTransform = field(default_factory=ViewTransform)
    options: DisplayOptions = field(default_factory=DisplayOptions)
    active_view: ViewName = ViewName.CIRCULAR

    @property
    def num_slots(self) -> int:
        return self.spec.num_slots if self.spec else 0

    def is_selected(self, index: int) -> bool:
        return self.selected_index == index
