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
Frame compositing.

Draws one frame of the isometric route onto a Pillow RGBA image. Layers
are composited back to front: background, walls (painter's order), ground
trace, glow, white underlay, colored top path, endpoint markers and the
stats overlay. Changing this order breaks the depth illusion.
"""
import logging
import math

import numpy as np
from PIL import Image, ImageDraw, ImageFilter

try:
    from .. import config
    from ..locales.strings import ERRORS
except ImportError:
    import config
    from locales.strings import ERRORS

from .fonts import load_font
from .gradients import gradient_ramp, interpolate_gradient, remap_contrast, resolve_gradient_name
from .projection import prepare_frame_points
from .structures import EPSILON

logger = logging.getLogger(__name__)


def _clamp(value, lower, upper):
    return max(lower, min(upper, value))


def _alpha(opacity):
    return int(round(255 * _clamp(opacity, 0.0, 1.0)))


def build_render_options(**overrides):
    """Build a complete render options dict from defaults and overrides.

    ``None`` overrides are ignored. Smoothing, progress and curve tension
    are clamped into range and unknown gradients fall back to the default.

    Raises:
        ValueError: unknown option, background or color metric, or a
            non-positive canvas size
    """
    options = dict(config.DEFAULT_RENDER_OPTIONS)
    unknown = sorted(set(overrides) - set(options))
    if unknown:
        raise ValueError(ERRORS['unknown_option'].format(names=', '.join(unknown)))
    options.update({key: value for key, value in overrides.items() if value is not None})

    options['width'] = int(options['width'])
    options['height'] = int(options['height'])
    if options['width'] <= 0 or options['height'] <= 0:
        raise ValueError(ERRORS['invalid_canvas_size'].format(
            width=options['width'], height=options['height']))

    if options['background'] not in config.BACKGROUND_COLORS:
        raise ValueError(ERRORS['invalid_background'].format(
            background=options['background'],
            choices=', '.join(config.BACKGROUND_COLORS)))

    color_by = options['color_by']
    if color_by == 'none':
        color_by = None
    if color_by is not None and color_by not in config.COLOR_BY_METRICS:
        raise ValueError(ERRORS['invalid_color_by'].format(
            metric=color_by, choices=', '.join(config.COLOR_BY_METRICS)))
    options['color_by'] = color_by

    options['gradient'] = resolve_gradient_name(options['gradient'])
    options['padding'] = max(0, options['padding'])
    options['stroke_width'] = max(0.5, float(options['stroke_width']))
    options['smoothing'] = _clamp(options['smoothing'], 0, config.SMOOTHING_MAX)
    options['progress'] = _clamp(float(options['progress']), 0.0, 1.0)
    options['curve_tension'] = _clamp(float(options['curve_tension']), 0.0, config.CURVE_TENSION_MAX)
    options['glow'] = bool(options['glow'])
    return options


def create_surface(width, height):
    """Create a transparent RGBA drawing surface."""
    return Image.new('RGBA', (int(width), int(height)), (0, 0, 0, 0))


def _region_box(surface, bounds):
    """Integer pixel box of ``bounds`` clipped to the surface, None when empty."""
    width, height = surface.size
    x0 = max(0, int(math.floor(bounds[0])))
    y0 = max(0, int(math.floor(bounds[1])))
    x1 = min(width, int(math.ceil(bounds[2])) + 1)
    y1 = min(height, int(math.ceil(bounds[3])) + 1)
    if x1 <= x0 or y1 <= y0:
        return None
    return x0, y0, x1, y1


def _draw_on_region(surface, bounds, paint, blur_radius=None):
    """Paint onto a transparent tile covering ``bounds`` and composite it.

    ``paint(draw, origin_x, origin_y)`` receives the tile origin so it can
    shift its coordinates. With ``blur_radius`` the tile is Gaussian-blurred
    before compositing, so ``bounds`` must include the blur spread.
    """
    box = _region_box(surface, bounds)
    if box is None:
        return
    x0, y0, x1, y1 = box
    tile = Image.new('RGBA', (x1 - x0, y1 - y0), (0, 0, 0, 0))
    paint(ImageDraw.Draw(tile), x0, y0)
    if blur_radius:
        tile = tile.filter(ImageFilter.GaussianBlur(blur_radius))
    surface.alpha_composite(tile, dest=(x0, y0))


def _path_bounds(coords, margin):
    xs = [x for x, _ in coords]
    ys = [y for _, y in coords]
    return (min(xs) - margin, min(ys) - margin, max(xs) + margin, max(ys) + margin)


def _stroke_path(draw, coords, fill, width):
    """Polyline with round joins and round caps."""
    width = max(1, int(round(width)))
    draw.line(coords, fill=fill, width=width, joint='curve')
    radius = width / 2.0
    for x, y in (coords[0], coords[-1]):
        draw.ellipse((x - radius, y - radius, x + radius, y + radius), fill=fill)


def _composite_stroke(surface, coords, fill, width):
    def paint(draw, ox, oy):
        _stroke_path(draw, [(x - ox, y - oy) for x, y in coords], fill, width)

    _draw_on_region(surface, _path_bounds(coords, width), paint)


def _clear_background(surface, background):
    fill = config.BACKGROUND_COLORS.get(background)
    color = (0, 0, 0, 0) if fill is None else tuple(fill) + (255,)
    surface.paste(color, (0, 0) + surface.size)


def build_wall_polygons(points, gradient_name):
    """Wall quads between consecutive points, sorted back to front.

    Returns:
        list of (depth, quad, rgb) tuples, ascending depth (mean ground y)
    """
    count = len(points)
    walls = []
    for index, (current, nxt) in enumerate(zip(points, points[1:])):
        t = current.value if current.value is not None else index / max(1, count - 1)
        color = interpolate_gradient(gradient_name, remap_contrast(t))
        quad = [
            (current.ground_x, current.ground_y),
            (current.top_x, current.top_y),
            (nxt.top_x, nxt.top_y),
            (nxt.ground_x, nxt.ground_y),
        ]
        walls.append(((current.ground_y + nxt.ground_y) * 0.5, quad, color))
    walls.sort(key=lambda wall: wall[0])
    return walls


def _draw_walls(surface, points, gradient_name):
    alpha = _alpha(config.WALL_FILL_OPACITY)
    for _, quad, color in build_wall_polygons(points, gradient_name):
        fill = tuple(color) + (alpha,)

        def paint(draw, ox, oy, quad=quad, fill=fill):
            draw.polygon([(x - ox, y - oy) for x, y in quad], fill=fill)

        _draw_on_region(surface, _path_bounds(quad, 1), paint)


def _draw_ground_path(surface, points, stroke_width):
    coords = [(p.ground_x, p.ground_y) for p in points]
    fill = tuple(config.GROUND_STROKE_COLOR) + (_alpha(config.GROUND_STROKE_OPACITY),)
    _composite_stroke(surface, coords, fill, max(1.0, stroke_width * config.GROUND_STROKE_WIDTH_FACTOR))


def _axis_positions(xs, ys, start, end):
    """Position of pixel centers along the start->end axis, clipped to [0, 1]."""
    dx = end[0] - start[0]
    dy = end[1] - start[1]
    length2 = dx * dx + dy * dy
    if length2 <= EPSILON:
        return np.zeros(np.shape(xs))
    t = ((xs - start[0]) * dx + (ys - start[1]) * dy) / length2
    return np.clip(t, 0.0, 1.0)


def _draw_gradient_stroke(surface, coords, gradient_name, width):
    """Stroke a path with a linear gradient running from its first to its last point."""
    box = _region_box(surface, _path_bounds(coords, width))
    if box is None:
        return
    ox, oy, ox1, oy1 = box
    mask = Image.new('L', (ox1 - ox, oy1 - oy), 0)
    _stroke_path(ImageDraw.Draw(mask), [(x - ox, y - oy) for x, y in coords], 255, width)
    bbox = mask.getbbox()
    if bbox is None:
        return

    x0, y0, x1, y1 = bbox
    ys, xs = np.mgrid[oy + y0:oy + y1, ox + x0:ox + x1]
    t = _axis_positions(xs + 0.5, ys + 0.5, coords[0], coords[-1])
    rgb = gradient_ramp(gradient_name, t)
    alpha = np.asarray(mask.crop(bbox), dtype=np.uint8)[..., np.newaxis]
    tile = Image.fromarray(np.ascontiguousarray(np.concatenate([rgb, alpha], axis=-1)))
    surface.alpha_composite(tile, dest=(ox + x0, oy + y0))


def _draw_segment_stroke(surface, points, gradient_name, width):
    """Stroke each segment with the gradient color of its value (bucketed)."""
    count = len(points)
    buckets = config.SEGMENT_COLOR_BUCKETS
    coords = [(p.top_x, p.top_y) for p in points]

    def paint(draw, ox, oy):
        for index, (a, b) in enumerate(zip(points, points[1:])):
            t = a.value if a.value is not None else index / max(1, count - 1)
            bucket = min(buckets - 1, int(round(_clamp(t, 0.0, 1.0) * (buckets - 1))))
            color = interpolate_gradient(gradient_name, bucket / max(1, buckets - 1))
            segment = [(a.top_x - ox, a.top_y - oy), (b.top_x - ox, b.top_y - oy)]
            _stroke_path(draw, segment, tuple(color) + (255,), width)

    _draw_on_region(surface, _path_bounds(coords, width), paint)


def _has_extent(points):
    first = points[0]
    min_extent2 = config.GLOW_MIN_EXTENT_PX ** 2
    return any(
        (p.top_x - first.top_x) ** 2 + (p.top_y - first.top_y) ** 2 > min_extent2
        for p in points
    )


def _uses_segment_colors(points, options):
    return options.get('color_by') is not None and any(p.value is not None for p in points)


def _draw_top_path(surface, points, options):
    stroke_width = options['stroke_width']
    gradient_name = options['gradient']
    coords = [(p.top_x, p.top_y) for p in points]
    segment_colors = _uses_segment_colors(points, options)

    if options['glow'] and _has_extent(points):
        glow_width = stroke_width * config.GLOW_STROKE_WIDTH_FACTOR
        halo_opacity = config.GLOW_HALO_OPACITY_WHITE if gradient_name == 'white' else config.GLOW_HALO_OPACITY
        halo_fill = (255, 255, 255, _alpha(halo_opacity))
        spread = glow_width + config.GLOW_BLUR_RADIUS * config.GLOW_BLUR_SPREAD_FACTOR

        def paint_halo(draw, ox, oy):
            _stroke_path(draw, [(x - ox, y - oy) for x, y in coords], halo_fill, glow_width)

        _draw_on_region(surface, _path_bounds(coords, spread), paint_halo, blur_radius=config.GLOW_BLUR_RADIUS)
        if segment_colors:
            _draw_segment_stroke(surface, points, gradient_name, glow_width)
        else:
            _draw_gradient_stroke(surface, coords, gradient_name, glow_width)

    underlay = tuple(config.UNDERLAY_STROKE_COLOR) + (_alpha(config.UNDERLAY_STROKE_OPACITY),)
    _composite_stroke(surface, coords, underlay, stroke_width * config.UNDERLAY_STROKE_WIDTH_FACTOR)

    if segment_colors:
        _draw_segment_stroke(surface, points, gradient_name, stroke_width)
    else:
        _draw_gradient_stroke(surface, coords, gradient_name, stroke_width)


def _draw_endpoints(surface, points, gradient_name, stroke_width):
    radius = stroke_width * config.ENDPOINT_RADIUS_FACTOR
    markers = [
        (points[0], interpolate_gradient(gradient_name, 0.0), 255),
        (points[-1], interpolate_gradient(gradient_name, 1.0), _alpha(config.ENDPOINT_END_OPACITY)),
    ]
    for point, color, alpha in markers:
        cx, cy = point.top_x, point.top_y
        fill = tuple(color) + (alpha,)

        def paint(draw, ox, oy, cx=cx, cy=cy, fill=fill):
            draw.ellipse((cx - ox - radius, cy - oy - radius, cx - ox + radius, cy - oy + radius), fill=fill)

        _draw_on_region(surface, (cx - radius, cy - radius, cx + radius, cy + radius), paint)


def stats_layout(options):
    """Anchor and sizes of the stats overlay for a canvas.

    Returns:
        dict with start_x, start_y, font_size, line_gap, label_dx
    """
    font_size = _clamp(options['height'] * config.STATS_FONT_RATIO, config.STATS_FONT_MIN, config.STATS_FONT_MAX)
    return {
        'start_x': options['padding'] + config.STATS_OFFSET_X,
        'start_y': options['padding'] + config.STATS_OFFSET_Y,
        'font_size': font_size,
        'line_gap': _clamp(font_size * config.STATS_LINE_GAP_RATIO,
                           config.STATS_LINE_GAP_MIN, config.STATS_LINE_GAP_MAX),
        'label_dx': _clamp(font_size * config.STATS_LABEL_DX_RATIO,
                           config.STATS_LABEL_DX_MIN, config.STATS_LABEL_DX_MAX),
    }


def _draw_stats(surface, stats, options):
    if not stats:
        return
    layout = stats_layout(options)
    label_font = load_font(config.STATS_FONT_FAMILY, layout['font_size'] * config.STATS_LABEL_SIZE_RATIO, 'bold')
    value_font = load_font(config.STATS_FONT_FAMILY, layout['font_size'], 'bold')
    label_alpha = _alpha(config.STATS_LABEL_OPACITY)

    layer = Image.new('RGBA', surface.size, (0, 0, 0, 0))
    draw = ImageDraw.Draw(layer)
    count = len(stats)
    for index, entry in enumerate(stats):
        y = layout['start_y'] + index * layout['line_gap']
        t = 0.5 if count <= 1 else index / (count - 1)
        color = tuple(interpolate_gradient(options['gradient'], t))
        draw.text((layout['start_x'], y), entry.label, font=label_font,
                  fill=color + (label_alpha,), anchor='ls')
        draw.text((layout['start_x'] + layout['label_dx'], y), entry.value, font=value_font,
                  fill=color + (255,), anchor='ls')
    surface.alpha_composite(layer)


def render_frame(surface, data, options, stats=()):
    """Composite one frame onto ``surface``.

    Args:
        surface: PIL RGBA image, sized options['width'] x options['height']
        data: VizData mapping
        options: dict from build_render_options()
        stats: sequence of StatsEntry for the overlay

    Returns:
        list of PreparedPoint that were drawn (empty for a background-only frame)
    """
    points = prepare_frame_points(data, options)
    _clear_background(surface, options['background'])
    if len(points) < 2:
        logger.debug("Fewer than 2 revealed points, background only")
        return []

    gradient_name = options['gradient']
    _draw_walls(surface, points, gradient_name)
    _draw_ground_path(surface, points, options['stroke_width'])
    _draw_top_path(surface, points, options)
    _draw_endpoints(surface, points, gradient_name, options['stroke_width'])
    _draw_stats(surface, stats, options)
    return points
