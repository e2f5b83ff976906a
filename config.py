"""
Configuration Module
Global constants for the winding designer: surfaces, colors, interaction limits
"""

# Default design shown at startup
DEFAULT_PHASES = 3
DEFAULT_SLOTS = 24
DEFAULT_POLES = 4

# Drawing surfaces (pixels)
CIRCULAR_SURFACE_SIZE = (560, 560)
LINEAR_SURFACE_SIZE = (960, 420)
SURFACE_DPI = 100

# Circular view
OUTER_RADIUS = 220  # slot departure ring
INNER_RADIUS = 180  # slot return ring
STATOR_RING_MARGIN = 15
CHORD_BULGE = 0.3  # radial push of the single-layer control point
OUTER_MARKER_RADIUS = 6
INNER_MARKER_RADIUS = 5
ARROW_HEAD_CIRCULAR = 14
ARROW_HEAD_CHORD = 10

# Linear view
LINEAR_MARGIN_X = 40
LINEAR_TOP_PAD = 40
LINEAR_BOTTOM_PAD = 40
LINEAR_ROW_BASE = 20
LINEAR_PHASE_GAP = 90
LINEAR_MAX_ROWS = 6
LINEAR_SIDE_OFFSET = 8
LINEAR_SLOT_MARKER_RADIUS = 6
LINEAR_END_MARKER_RADIUS = 4
ARROW_HEAD_LINEAR = 6

# Stroke widths
STROKE_NORMAL = 2
STROKE_SELECTED_CIRCULAR = 4
STROKE_SELECTED_LINEAR = 3

# Interaction
ZOOM_STEP = 1.1
MIN_SCALE = 0.2
MAX_SCALE = 5.0
HIT_RADIUS = 8

# Phase color scheme
PHASE_COLORS = {
    'A+': '#e53935',
    'A-': '#b71c1c',
    'B+': '#1e88e5',
    'B-': '#0d47a1',
    'C+': '#43a047',
    'C-': '#1b5e20',
}

SURFACE_COLORS = {
    'stator_ring': '#000000',
    'axis': '#b4bbcf',
    'slot_edge': '#7f8aa5',
    'slot_face': '#ffffff',
    'slot_number': '#555555',
    'label': '#000000',
}

LABEL_FONT_SIZE = 7
