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
Route geometry: simplification, isometric projection, viewport fitting
and progressive reveal.

All functions are pure. Input point sequences are never mutated and every
call returns freshly built ``PreparedPoint`` lists.
"""
import logging
import math

import numpy as np

try:
    from .. import config
except ImportError:
    import config

from .structures import (
    EPSILON,
    POINT_ELEVATION,
    POINT_ROUTE_PROGRESS,
    POINT_VALUE,
    POINT_X,
    POINT_Y,
    PreparedPoint,
)

logger = logging.getLogger(__name__)


def _clamp(value, lower, upper):
    return max(lower, min(upper, value))


def simplify_points(points, smoothing):
    """Keep every N-th point, N growing with smoothing.

    The last point is always kept so the route end never disappears.

    Args:
        points: sequence of route point mappings
        smoothing: 0..100, higher keeps fewer points

    Returns:
        list: selected route points
    """
    smoothing = min(config.SMOOTHING_MAX, max(0, smoothing))
    stride = max(1, int(round(1 + (smoothing / config.SMOOTHING_MAX) * config.SIMPLIFY_MAX_EXTRA_STRIDE)))
    last_index = len(points) - 1
    return [point for index, point in enumerate(points) if index % stride == 0 or index == last_index]


def elevation_bounds(points):
    """Min and max over non-null elevations, (0, 0) when none are present."""
    elevations = [point.get(POINT_ELEVATION) for point in points]
    elevations = [float(e) for e in elevations if e is not None]
    if not elevations:
        return 0.0, 0.0
    return min(elevations), max(elevations)


def extrusion_height_for(min_elev, max_elev, content_height):
    """Height of a fully raised point in working-canvas pixels.

    Args:
        min_elev: lowest elevation of the route
        max_elev: highest elevation of the route
        content_height: working canvas height

    Returns:
        tuple: (extrusion_height, elevation_scale)
    """
    elev_scale = _clamp(
        (max_elev - min_elev) / config.ELEVATION_RANGE_DIVISOR,
        config.ELEVATION_SCALE_MIN,
        config.ELEVATION_SCALE_MAX,
    )
    return content_height * config.EXTRUSION_RATIO * elev_scale, elev_scale


def project_isometric(points, content_width, content_height, angle_deg=None):
    """Project normalized route points into isometric ground/top pairs.

    Args:
        points: simplified route point mappings
        content_width: working canvas width
        content_height: working canvas height
        angle_deg: isometric rotation (defaults to config.ISOMETRIC_ANGLE_DEG)

    Returns:
        list of PreparedPoint (pre-fit, working canvas coordinates)
    """
    if not points:
        return []
    if angle_deg is None:
        angle_deg = config.ISOMETRIC_ANGLE_DEG

    min_elev, max_elev = elevation_bounds(points)
    elev_range = max(EPSILON, max_elev - min_elev)
    extrusion_height, elev_scale = extrusion_height_for(min_elev, max_elev, content_height)
    logger.debug(f"Projecting {len(points)} points, elevation {min_elev:.1f}..{max_elev:.1f} m, "
                 f"scale {elev_scale:.2f}")

    angle = math.radians(angle_deg)
    cos_a = math.cos(angle)
    sin_a = math.sin(angle)

    xs = np.array([float(p.get(POINT_X) or 0.0) for p in points]) * content_width
    ys = (1.0 - np.array([float(p.get(POINT_Y) or 0.0) for p in points])) * content_height
    elevations = np.array([
        min_elev if p.get(POINT_ELEVATION) is None else float(p[POINT_ELEVATION])
        for p in points
    ])

    ground_x = xs * cos_a + ys * sin_a
    ground_y = -xs * sin_a + ys * cos_a
    norm_elev = np.power(np.clip((elevations - min_elev) / elev_range, 0.0, None), config.ELEVATION_GAMMA)
    top_y = ground_y - norm_elev * extrusion_height

    return [
        PreparedPoint(
            float(gx), float(gy), float(gx), float(ty),
            point.get(POINT_VALUE),
            float(point.get(POINT_ROUTE_PROGRESS) or 0.0),
        )
        for gx, gy, ty, point in zip(ground_x, ground_y, top_y, points)
    ]


def fit_to_viewport(points, width, height, padding):
    """Uniformly scale and center projected points inside the padded canvas.

    The bounding box covers ground and top coordinates together so the
    extrusion is accounted for.

    Args:
        points: list of PreparedPoint
        width: canvas width in px
        height: canvas height in px
        padding: padding in px on every side

    Returns:
        list of PreparedPoint in canvas coordinates
    """
    if not points:
        return []

    xs = np.array([(p.ground_x, p.top_x) for p in points], dtype=float)
    ys = np.array([(p.ground_y, p.top_y) for p in points], dtype=float)
    min_x, max_x = float(xs.min()), float(xs.max())
    min_y, max_y = float(ys.min()), float(ys.max())

    content_width = max(EPSILON, max_x - min_x)
    content_height = max(EPSILON, max_y - min_y)
    view_width = max(1.0, width - padding * 2)
    view_height = max(1.0, height - padding * 2)
    scale = min(view_width / content_width, view_height / content_height)

    offset_x = padding + (view_width - content_width * scale) * 0.5
    offset_y = padding + (view_height - content_height * scale) * 0.5

    xs = offset_x + (xs - min_x) * scale
    ys = offset_y + (ys - min_y) * scale
    return [
        point._replace(
            ground_x=float(x[0]), top_x=float(x[1]),
            ground_y=float(y[0]), top_y=float(y[1]),
        )
        for point, x, y in zip(points, xs, ys)
    ]


def _lerp_optional(a, b, t):
    if a is None and b is None:
        return None
    if a is None:
        a = b
    if b is None:
        b = a
    return a + (b - a) * t


def lerp_point(a, b, t):
    """Linear interpolation between two prepared points."""
    def lerp(x, y):
        return x + (y - x) * t

    return PreparedPoint(
        lerp(a.ground_x, b.ground_x),
        lerp(a.ground_y, b.ground_y),
        lerp(a.top_x, b.top_x),
        lerp(a.top_y, b.top_y),
        _lerp_optional(a.value, b.value, t),
        lerp(a.route_progress, b.route_progress),
    )


def reveal_points(points, progress):
    """Truncate the path at a route-progress fraction.

    The returned path ends with a synthetic point interpolated inside the
    segment that contains ``progress``, so the drawn line grows smoothly.

    Args:
        points: fitted PreparedPoint list
        progress: route progress, 0..1

    Returns:
        list of PreparedPoint
    """
    if len(points) <= 1 or progress >= 1:
        return list(points)
    if progress <= 0:
        return [points[0]]

    revealed = [points[0]]
    for current, nxt in zip(points, points[1:]):
        # A skipped pair never appends its current point, so the tail joins from the last kept one
        if nxt.route_progress <= current.route_progress:
            continue
        if nxt.route_progress < progress:
            revealed.append(nxt)
            continue
        t = _clamp(
            (progress - current.route_progress) / (nxt.route_progress - current.route_progress),
            0.0,
            1.0,
        )
        revealed.append(lerp_point(current, nxt, t))
        return revealed

    return list(points)


def _hermite(p0, p1, p2, p3, t, curvature):
    t2 = t * t
    t3 = t2 * t
    m1 = (p2 - p0) * 0.5 * curvature
    m2 = (p3 - p1) * 0.5 * curvature
    return ((2 * t3 - 3 * t2 + 1) * p1 + (t3 - 2 * t2 + t) * m1
            + (-2 * t3 + 3 * t2) * p2 + (t3 - t2) * m2)


def subdivide_catmull_rom(points, tension, subdivisions=None):
    """Round off corners by inserting Catmull-Rom samples between points.

    Args:
        points: PreparedPoint list
        tension: 0..0.5, 0 returns the input unchanged
        subdivisions: samples per segment (defaults to config.CURVE_SUBDIVISIONS)

    Returns:
        list of PreparedPoint
    """
    if subdivisions is None:
        subdivisions = config.CURVE_SUBDIVISIONS
    if len(points) < 3 or subdivisions < 2 or tension <= 0:
        return list(points)

    curvature = _clamp(_clamp(tension, 0.0, config.CURVE_TENSION_MAX) * 2.0, 0.0, 1.0)
    out = []
    last = len(points) - 1
    for i in range(last):
        p0 = points[i - 1] if i > 0 else points[i]
        p1 = points[i]
        p2 = points[i + 1]
        p3 = points[i + 2] if i + 2 <= last else points[i + 1]
        for step in range(subdivisions):
            t = step / subdivisions
            fields = [
                _hermite(getattr(p0, name), getattr(p1, name), getattr(p2, name), getattr(p3, name),
                         t, curvature)
                for name in ('ground_x', 'ground_y', 'top_x', 'top_y')
            ]
            values = (p0.value, p1.value, p2.value, p3.value)
            if all(v is not None for v in values):
                value = _hermite(*values, t, curvature)
            else:
                value = _lerp_optional(p1.value, p2.value, t)
            progress = p1.route_progress + (p2.route_progress - p1.route_progress) * t
            out.append(PreparedPoint(*fields, value, progress))
    out.append(points[-1])
    return out


def prepare_frame_points(data, options):
    """Run the full geometry pipeline for one frame.

    Args:
        data: VizData mapping with a 'points' list
        options: render options dict (see engine.render.build_render_options)

    Returns:
        list of PreparedPoint ready to draw, empty when nothing can be drawn
    """
    route_points = (data or {}).get('points') or []
    if not route_points:
        return []

    simplified = simplify_points(route_points, options['smoothing'])
    if len(simplified) < 2:
        return []

    padding = options['padding']
    content_width = max(1, config.PROJECTION_CANVAS_WIDTH - padding * 2)
    content_height = max(1, config.PROJECTION_CANVAS_HEIGHT - padding * 2)

    projected = project_isometric(simplified, content_width, content_height)
    fitted = fit_to_viewport(projected, options['width'], options['height'], padding)
    revealed = reveal_points(fitted, _clamp(options['progress'], 0.0, 1.0))
    logger.debug(f"Frame points: {len(route_points)} -> {len(simplified)} simplified -> "
                 f"{len(revealed)} revealed at progress {options['progress']:.3f}")
    return subdivide_catmull_rom(revealed, options.get('curve_tension') or 0.0)
