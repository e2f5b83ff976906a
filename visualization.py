"""
Visualization Module
Renders the coil list as a circular stator cross-section and an unrolled linear diagram
"""

import logging
import os
from typing import List, Tuple

import numpy as np
from matplotlib.figure import Figure
from matplotlib.lines import Line2D
from matplotlib.patches import Circle, PathPatch, Polygon
from matplotlib.path import Path
from matplotlib.transforms import Affine2D

from config import (
    ARROW_HEAD_CHORD, ARROW_HEAD_CIRCULAR, ARROW_HEAD_LINEAR, CHORD_BULGE,
    CIRCULAR_SURFACE_SIZE, INNER_MARKER_RADIUS, LABEL_FONT_SIZE,
    LINEAR_END_MARKER_RADIUS, LINEAR_SIDE_OFFSET, LINEAR_SLOT_MARKER_RADIUS,
    LINEAR_SURFACE_SIZE, OUTER_MARKER_RADIUS, PHASE_COLORS, STROKE_NORMAL,
    STROKE_SELECTED_CIRCULAR, STROKE_SELECTED_LINEAR, SURFACE_COLORS, SURFACE_DPI,
)
from geometry import CircularLayout, LinearLayout, make_row_stacking
from view_state import ViewTransform, WindingSnapshot
from winding_model import PHASE_SEQUENCE, slot_phases
from winding_parameters import LayerType

logger = logging.getLogger("winding_designer.visualization")


def create_surface_figure(size: Tuple[int, int], dpi: int = SURFACE_DPI) -> Figure:
    """Figure whose single axes spans the whole canvas, one data unit per pixel"""
    width, height = size
    fig = Figure(figsize=(width / dpi, height / dpi), dpi=dpi)
    fig.add_axes([0, 0, 1, 1])
    return fig


def arrow_head(tip: Tuple[float, float], angle: float, size: float) -> np.ndarray:
    """Triangle vertices of an arrow head pointing along `angle` at `tip`"""
    x, y = tip
    return np.array([
        [x, y],
        [x - size * np.cos(angle - np.pi / 6), y - size * np.sin(angle - np.pi / 6)],
        [x - size * np.cos(angle + np.pi / 6), y - size * np.sin(angle + np.pi / 6)],
    ])


class WindingVisualizer:
    """Draws both winding views from a WindingSnapshot"""

    def __init__(self, circular_size: Tuple[int, int] = CIRCULAR_SURFACE_SIZE,
                 linear_size: Tuple[int, int] = LINEAR_SURFACE_SIZE):
        self.circular_layout = CircularLayout(*circular_size)
        self.linear_layout = LinearLayout(*linear_size)
        self.colors = dict(PHASE_COLORS)
        self.colors.update(SURFACE_COLORS)

    # ------------------------------------------------------------------
    # Surface helpers
    # ------------------------------------------------------------------

    @staticmethod
    def _prepare_surface(ax, width: float, height: float):
        """Clear the axes and map data coordinates 1:1 to surface pixels (y down)"""
        ax.clear()
        ax.set_xlim(0, width)
        ax.set_ylim(height, 0)
        ax.set_aspect('equal')
        ax.axis('off')

    @staticmethod
    def _draw_placeholder(ax, width: float, height: float):
        ax.text(width / 2, height / 2, 'No winding computed\n\nPress "Calculate"',
                ha='center', va='center', fontsize=14, color='gray')

    def phase_color(self, phase: str) -> str:
        return self.colors.get(phase, '#000000')

    # ------------------------------------------------------------------
    # Circular view
    # ------------------------------------------------------------------

    def plot_circular_view(self, ax, snapshot: WindingSnapshot):
        """Full repaint of the stator cross-section"""
        layout = self.circular_layout
        self._prepare_surface(ax, layout.width, layout.height)
        if not snapshot.coils:
            self._draw_placeholder(ax, layout.width, layout.height)
            return

        self._draw_stator_ring(ax)
        self._draw_circular_slots(ax, snapshot)

        single_layer = snapshot.spec.layer_type is LayerType.SINGLE
        for i in range(len(snapshot.coils)):
            if single_layer:
                self._draw_chord_coil(ax, snapshot, i)
            else:
                self._draw_radial_coil(ax, snapshot, i)

        self._draw_phase_legend(ax)

    def _draw_stator_ring(self, ax):
        layout = self.circular_layout
        ring = Circle(layout.center, layout.stator_radius, fill=False,
                      edgecolor=self.colors['stator_ring'], linewidth=2, zorder=1)
        ax.add_patch(ring)

    def _draw_circular_slots(self, ax, snapshot: WindingSnapshot):
        """One marker per slot (single-layer) or outer + inner markers (double-layer)"""
        layout = self.circular_layout
        Z = snapshot.num_slots
        double_layer = snapshot.spec.layer_type is LayerType.DOUBLE
        phases = slot_phases(Z, snapshot.spec.num_poles)

        for s, phase in enumerate(phases, start=1):
            color = self.phase_color(phase)
            xo, yo = layout.outer_point(s, Z)
            ax.add_patch(Circle((xo, yo), OUTER_MARKER_RADIUS, color=color, zorder=3))
            if double_layer:
                xi, yi = layout.inner_point(s, Z)
                ax.add_patch(Circle((xi, yi), INNER_MARKER_RADIUS, color=color, zorder=3))

            if snapshot.options.show_slot_numbers:
                ax.text(xo - 6, yo - 10, str(s), fontsize=LABEL_FONT_SIZE,
                        color=self.colors['label'], ha='left', va='baseline')

    def _draw_chord_coil(self, ax, snapshot: WindingSnapshot, index: int):
        """Single-layer: quadratic curve between the two outer slot markers"""
        layout = self.circular_layout
        coil = snapshot.coils[index]
        Z = snapshot.num_slots
        color = self.phase_color(coil.phase)
        width = STROKE_SELECTED_CIRCULAR if snapshot.is_selected(index) else STROKE_NORMAL

        start = layout.outer_point(coil.start, Z)
        end = layout.outer_point(coil.end, Z)
        control = layout.chord_control_point(start, end, CHORD_BULGE)

        path = Path([start, control, end], [Path.MOVETO, Path.CURVE3, Path.CURVE3])
        ax.add_patch(PathPatch(path, fill=False, edgecolor=color, linewidth=width,
                               capstyle='round', zorder=2, gid=f"coil-{index}"))

        if snapshot.options.show_direction_arrows:
            angle = np.arctan2(end[1] - control[1], end[0] - control[0])
            ax.add_patch(Polygon(arrow_head(end, angle, ARROW_HEAD_CHORD), closed=True,
                                 facecolor=color, edgecolor='none', zorder=4,
                                 gid=f"coil-{index}-arrow"))

        self._draw_coil_label(ax, snapshot, index, start, end)

    def _draw_radial_coil(self, ax, snapshot: WindingSnapshot, index: int):
        """Double-layer: straight line from the outer start marker to the inner end marker"""
        layout = self.circular_layout
        coil = snapshot.coils[index]
        Z = snapshot.num_slots
        color = self.phase_color(coil.phase)
        width = STROKE_SELECTED_CIRCULAR if snapshot.is_selected(index) else STROKE_NORMAL

        start = layout.outer_point(coil.start, Z)
        end = layout.inner_point(coil.end, Z)

        ax.plot([start[0], end[0]], [start[1], end[1]], color=color, linewidth=width,
                solid_capstyle='round', zorder=2, gid=f"coil-{index}")

        if snapshot.options.show_direction_arrows:
            angle = np.arctan2(end[1] - start[1], end[0] - start[0])
            ax.add_patch(Polygon(arrow_head(end, angle, ARROW_HEAD_CIRCULAR), closed=True,
                                 facecolor=color, edgecolor='none', zorder=4,
                                 gid=f"coil-{index}-arrow"))

        self._draw_coil_label(ax, snapshot, index, start, end)

    def _draw_coil_label(self, ax, snapshot: WindingSnapshot, index: int,
                         start: Tuple[float, float], end: Tuple[float, float]):
        label = snapshot.options.coil_label(index, snapshot.coils[index])
        if label:
            mid_x = (start[0] + end[0]) / 2
            mid_y = (start[1] + end[1]) / 2
            ax.text(mid_x + 4, mid_y + 4, label, fontsize=LABEL_FONT_SIZE,
                    color=self.colors['label'], zorder=5)

    def _draw_phase_legend(self, ax):
        handles = [
            Line2D([0], [0], marker='o', color='w', markerfacecolor=self.phase_color(phase),
                   markeredgecolor=self.phase_color(phase), markersize=6, label=phase)
            for phase in PHASE_SEQUENCE
        ]
        ax.legend(handles=handles, loc='upper right', fontsize=LABEL_FONT_SIZE, frameon=False)

    # ------------------------------------------------------------------
    # Linear view
    # ------------------------------------------------------------------

    @staticmethod
    def _viewport_transform(ax, transform: ViewTransform):
        """Translate by the pan offset, then scale, on top of the data transform"""
        return (Affine2D().scale(transform.scale)
                .translate(transform.offset_x, transform.offset_y) + ax.transData)

    def plot_linear_view(self, ax, snapshot: WindingSnapshot):
        """Full repaint of the unrolled diagram under the current pan/zoom"""
        layout = self.linear_layout
        self._prepare_surface(ax, layout.width, layout.height)
        if not snapshot.coils:
            self._draw_placeholder(ax, layout.width, layout.height)
            return

        trans = self._viewport_transform(ax, snapshot.transform)
        slot_xs = layout.slot_positions(snapshot.num_slots)

        self._draw_linear_axis(ax, snapshot, slot_xs, trans)

        stacking = make_row_stacking(snapshot.options.row_stacking)
        for i, coil in enumerate(snapshot.coils):
            if not snapshot.options.shows_in_linear(coil):
                continue
            self._draw_u_coil(ax, snapshot, i, slot_xs, stacking, trans)

    def _draw_linear_axis(self, ax, snapshot: WindingSnapshot, slot_xs: np.ndarray, trans):
        y_axis = self.linear_layout.axis_y
        ax.plot([slot_xs[0], slot_xs[-1]], [y_axis, y_axis], color=self.colors['axis'],
                linewidth=1, linestyle=(0, (6, 4)), transform=trans)

        for s, x in enumerate(slot_xs, start=1):
            ax.add_patch(Circle((x, y_axis), LINEAR_SLOT_MARKER_RADIUS,
                                facecolor=self.colors['slot_face'],
                                edgecolor=self.colors['slot_edge'],
                                linewidth=1, transform=trans, zorder=2))
            if snapshot.options.show_slot_numbers:
                ax.text(x, y_axis + 18, str(s), fontsize=LABEL_FONT_SIZE + 1,
                        color=self.colors['slot_number'], ha='center',
                        transform=trans, clip_on=True)

    def _draw_u_coil(self, ax, snapshot: WindingSnapshot, index: int,
                     slot_xs: np.ndarray, stacking, trans):
        """Rectangular U from the start slot up to the coil's row and down to the end slot"""
        layout = self.linear_layout
        coil = snapshot.coils[index]
        color = self.phase_color(coil.phase)
        width = STROKE_SELECTED_LINEAR if snapshot.is_selected(index) else STROKE_NORMAL

        x1 = slot_xs[coil.start - 1]
        x2 = slot_xs[coil.end - 1]
        direction = 1 if x2 >= x1 else -1
        leg_start = x1 + direction * LINEAR_SIDE_OFFSET
        leg_end = x2 - direction * LINEAR_SIDE_OFFSET

        y_axis = layout.axis_y
        y_knee = y_axis + 6
        y_bottom = layout.row_floor
        y_top = stacking.row_top(index, coil, len(snapshot.coils), layout)

        xs = [x1, x1, leg_start, leg_start, leg_end, leg_end, x2, x2]
        ys = [y_axis, y_knee, y_bottom, y_top, y_top, y_bottom, y_knee, y_axis]
        ax.plot(xs, ys, color=color, linewidth=width, solid_capstyle='round',
                solid_joinstyle='round', transform=trans, zorder=3, gid=f"coil-{index}")

        # open circle where the coil leaves, filled circle where it returns
        ax.add_patch(Circle((x1, y_axis), LINEAR_END_MARKER_RADIUS, facecolor='#ffffff',
                            edgecolor=color, linewidth=1.5, transform=trans, zorder=4,
                            gid=f"coil-{index}-start"))
        ax.add_patch(Circle((x2, y_axis), LINEAR_END_MARKER_RADIUS, facecolor=color,
                            edgecolor=color, linewidth=1, transform=trans, zorder=4,
                            gid=f"coil-{index}-end"))

        if snapshot.options.show_direction_arrows:
            arrow_x1 = leg_start + (leg_end - leg_start) * 0.2
            arrow_x2 = leg_start + (leg_end - leg_start) * 0.8
            ax.plot([arrow_x1, arrow_x2], [y_top, y_top], color=color, linewidth=STROKE_NORMAL,
                    transform=trans, zorder=4)
            head = np.array([
                [arrow_x2, y_top],
                [arrow_x2 - direction * ARROW_HEAD_LINEAR, y_top - 3],
                [arrow_x2 - direction * ARROW_HEAD_LINEAR, y_top + 3],
            ])
            ax.add_patch(Polygon(head, closed=True, facecolor=color, edgecolor='none',
                                 transform=trans, zorder=4, gid=f"coil-{index}-arrow"))

        label = snapshot.options.coil_label(index, coil)
        if label:
            ax.text((leg_start + leg_end) / 2, y_top - 6, label, fontsize=LABEL_FONT_SIZE,
                    color=self.colors['label'], ha='center', transform=trans,
                    clip_on=True, zorder=5)

    # ------------------------------------------------------------------
    # Export
    # ------------------------------------------------------------------

    def export_views(self, snapshot: WindingSnapshot, prefix: str) -> List[str]:
        """Write both views as PNG files and return their paths"""
        directory = os.path.dirname(prefix)
        if directory:
            os.makedirs(directory, exist_ok=True)

        paths = []
        for name, size, plot in (
            ("circular", (self.circular_layout.width, self.circular_layout.height), self.plot_circular_view),
            ("linear", (self.linear_layout.width, self.linear_layout.height), self.plot_linear_view),
        ):
            fig = create_surface_figure(size)
            plot(fig.axes[0], snapshot)
            path = f"{prefix}_{name}.png"
            fig.savefig(path, dpi=SURFACE_DPI)
            logger.info("Saved %s view to %s", name, path)
            paths.append(path)
        return paths
