# RideViz - isometric animated route renderer
# Copyright (C) 2024 RideViz Contributors
#
# This program is free software: you can redistribute it and/or modify
# it under the terms of the GNU Affero General Public License as published by
# the Free Software Foundation, either version 3 of the License, or
# (at your option) any later version.
#
# This program is distributed in the hope that it will be useful,
# but WITHOUT ANY WARRANTY; without even the implied warranty of
# MERCHANTABILITY or FITNESS FOR A PARTICULAR PURPOSE. See the
# GNU Affero General Public License for more details.
#
# You should have received a copy of the GNU Affero General Public License
# along with this program. If not, see <https://www.gnu.org/licenses/>.


"""
Configuration file for RideViz.
Contains all constants and settings for route projection, frame rendering
and animation export.

Note: backend URLs, license tokens and other per-user preferences are passed
in explicitly by the caller. This module contains only rendering parameters.
"""

# ============================================================
# Isometric Projection Parameters
# ============================================================
ISOMETRIC_ANGLE_DEG = 30.0          # Planar rotation of the ground plane
ELEVATION_GAMMA = 0.82              # <1 compresses high normalized elevations
EXTRUSION_RATIO = 0.24              # Extrusion height as fraction of working height
ELEVATION_RANGE_DIVISOR = 600.0     # Elevation range (m) mapped to scale 1.0
ELEVATION_SCALE_MIN = 0.7           # Flat routes still get visible walls
ELEVATION_SCALE_MAX = 1.4           # Alpine routes do not explode vertically

# Fixed working canvas for projection (rescaled later by the viewport fitter)
PROJECTION_CANVAS_WIDTH = 1920
PROJECTION_CANVAS_HEIGHT = 1080

# ============================================================
# Point Simplification
# ============================================================
SMOOTHING_MAX = 100                 # Upper bound of the smoothing parameter
SIMPLIFY_MAX_EXTRA_STRIDE = 29      # smoothing=100 keeps every 30th point

# Catmull-Rom curve smoothing (0 disables)
CURVE_TENSION_MAX = 0.5
CURVE_SUBDIVISIONS = 4

# ============================================================
# Frame Compositing
# ============================================================
WALL_FILL_OPACITY = 0.24
CONTRAST_REMAP_FACTOR = 1.55        # Wall fill only

GROUND_STROKE_COLOR = (255, 255, 255)
GROUND_STROKE_OPACITY = 0.14
GROUND_STROKE_WIDTH_FACTOR = 0.9

UNDERLAY_STROKE_COLOR = (255, 255, 255)
UNDERLAY_STROKE_OPACITY = 0.55
UNDERLAY_STROKE_WIDTH_FACTOR = 1.5

GLOW_STROKE_WIDTH_FACTOR = 2.2
GLOW_BLUR_RADIUS = 7                # Gaussian blur radius (px)
GLOW_BLUR_SPREAD_FACTOR = 3         # Halo tile margin, in blur radii
GLOW_HALO_OPACITY = 0.4
GLOW_HALO_OPACITY_WHITE = 0.8       # Stronger halo for the all-white palette
GLOW_MIN_EXTENT_PX = 1.0            # Glow needs a path longer than this

SEGMENT_COLOR_BUCKETS = 48          # Per-value top path coloring

ENDPOINT_RADIUS_FACTOR = 2.2
ENDPOINT_END_OPACITY = 0.95

BACKGROUND_COLORS = {
    'transparent': None,
    'white': (255, 255, 255),
    'black': (0, 0, 0),
}

# ============================================================
# Stats Overlay
# ============================================================
STATS_OFFSET_X = 14
STATS_OFFSET_Y = 28
STATS_FONT_RATIO = 0.024            # Font size as fraction of canvas height
STATS_FONT_MIN = 12
STATS_FONT_MAX = 34
STATS_LINE_GAP_RATIO = 1.38
STATS_LINE_GAP_MIN = 18
STATS_LINE_GAP_MAX = 52
STATS_LABEL_DX_RATIO = 6.1
STATS_LABEL_DX_MIN = 72
STATS_LABEL_DX_MAX = 280
STATS_LABEL_SIZE_RATIO = 0.68
STATS_LABEL_OPACITY = 0.78
STATS_FONT_FAMILY = 'DejaVu Sans'

STAT_KEYS = [
    'distance',
    'duration',
    'elevation_gain',
    'avg_speed',
    'avg_heart_rate',
    'max_heart_rate',
    'avg_power',
    'max_power',
]

# ============================================================
# Watermark
# ============================================================
WATERMARK_TEXT = 'created with rideviz.online'
WATERMARK_FONT_FAMILY = 'DejaVu Sans Mono'
WATERMARK_FONT_RATIO = 0.02
WATERMARK_FONT_MIN = 13
WATERMARK_FILL = (0, 0, 0, 89)          # rgba(0,0,0,0.35)
WATERMARK_OUTLINE = (255, 255, 255, 56)  # rgba(255,255,255,0.22)
WATERMARK_TEXT_FILL = (255, 255, 255, 235)
WATERMARK_TEXT_STROKE = (0, 0, 0, 179)

# ============================================================
# Animation Parameters
# ============================================================
DEFAULT_ANIMATION_DURATION_SECONDS = 9
DEFAULT_ANIMATION_FPS = 30
MIN_ANIMATION_DURATION_SECONDS = 1.0    # Preview loop never spins faster
MIN_ANIMATED_FRAMES = 8                 # APNG/GIF exports
MIN_FRAME_DELAY_MS = 16
ANIMATION_FORMATS = ('apng', 'gif', 'frames')

# ============================================================
# Gradients
# ============================================================
DEFAULT_GRADIENT = 'fire'
GRADIENTS = {
    'fire': ['#FF3366', '#FF6600', '#FF9933'],
    'ocean': ['#0055FF', '#0099DD', '#00D1FF'],
    'sunset': ['#FF2D55', '#FF7E5F', '#FEB47B'],
    'forest': ['#1D976C', '#4CD964', '#93F9B9'],
    'violet': ['#FF0080', '#8E2DE2', '#4A00E0'],
    'rideviz': ['#00C2FF', '#00EABD', '#00FF94'],
    'white': ['#FFFFFF', '#FFFFFF', '#FFFFFF'],
    'black': ['#000000', '#000000', '#000000'],
}

COLOR_BY_METRICS = ('elevation', 'speed', 'heartrate', 'power')

# ============================================================
# Export Presets
# ============================================================
DEFAULT_EXPORT_PRESET = 'hd_landscape_16x9'
EXPORT_PRESETS = {
    'story_9x16': (1080, 1920),
    'instagram_post_portrait_4x5': (1080, 1350),
    'instagram_post_square_1x1': (1080, 1080),
    'x_post_16x9': (1600, 900),
    'facebook_feed_landscape': (1200, 630),
    'facebook_feed_square': (1080, 1080),
    'hd_landscape_16x9': (1920, 1080),
}

# ============================================================
# Default Render Options
# ============================================================
DEFAULT_RENDER_OPTIONS = {
    'width': 1920,
    'height': 1080,
    'padding': 40,
    'stroke_width': 3.0,
    'smoothing': 30,
    'glow': False,
    'background': 'white',
    'gradient': DEFAULT_GRADIENT,
    'progress': 1.0,
    'color_by': None,
    'curve_tension': 0.0,
}
