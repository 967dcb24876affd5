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


"""Rendering and animation engine: projection, reveal, timing and compositing."""

from .animation import (
    AnimationLoop,
    CancelToken,
    PreviewController,
    build_animation_progress,
    ease_in_out_sine,
    export_progress_schedule,
    map_linear_progress_to_route,
)
from .export import (
    export_animation,
    iter_animation_frames,
    render_still,
    save_animation,
    save_frame_sequence,
    save_still,
)
from .gradients import get_gradient_stops, gradient_ramp, interpolate_gradient, remap_contrast
from .projection import (
    fit_to_viewport,
    prepare_frame_points,
    project_isometric,
    reveal_points,
    simplify_points,
)
from .render import build_render_options, create_surface, render_frame
from .structures import PreparedPoint, StatsEntry
from .telemetry import build_stats_entries, detect_available_data, sample_telemetry
from .watermark import draw_watermark

__all__ = [
    # Animation
    'AnimationLoop',
    'CancelToken',
    'PreviewController',
    'build_animation_progress',
    'ease_in_out_sine',
    'export_progress_schedule',
    'map_linear_progress_to_route',
    # Export
    'export_animation',
    'iter_animation_frames',
    'render_still',
    'save_animation',
    'save_frame_sequence',
    'save_still',
    # Gradients
    'get_gradient_stops',
    'gradient_ramp',
    'interpolate_gradient',
    'remap_contrast',
    # Geometry
    'fit_to_viewport',
    'prepare_frame_points',
    'project_isometric',
    'reveal_points',
    'simplify_points',
    # Rendering
    'build_render_options',
    'create_surface',
    'render_frame',
    'draw_watermark',
    # Data
    'PreparedPoint',
    'StatsEntry',
    'build_stats_entries',
    'detect_available_data',
    'sample_telemetry',
]
