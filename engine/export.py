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
Still and animated exports.

A still export is one frame at progress 1. An animated export renders every
frame independently at evenly spaced animation-time fractions and writes
them as APNG, GIF or a numbered PNG sequence for an external encoder.
"""
import logging
import os

try:
    from .. import config
    from ..locales.strings import ERRORS
except ImportError:
    import config
    from locales.strings import ERRORS

from .animation import export_progress_schedule
from .render import create_surface, render_frame
from .telemetry import build_stats_entries, sample_telemetry
from .watermark import draw_watermark

logger = logging.getLogger(__name__)

FRAME_FILENAME_TEMPLATE = 'frame_{index:05d}.png'


def render_still(data, options, stat_keys=(), available_data=None, watermark=False):
    """Render the complete route (progress 1) onto a new surface.

    Returns:
        PIL.Image.Image (RGBA)
    """
    options = dict(options, progress=1.0)
    surface = create_surface(options['width'], options['height'])
    stats = build_stats_entries(stat_keys, sample_telemetry(data, 1.0), available_data, data)
    render_frame(surface, data, options, stats)
    if watermark:
        draw_watermark(surface)
    return surface


def iter_animation_frames(data, options, fps=None, duration_seconds=None, stat_keys=(),
                          available_data=None, ease=False, min_frames=1, watermark=False):
    """Yield ``(index, route_progress, image)`` for every exported frame.

    Each frame is rendered on its own surface; nothing is shared between
    frames except the read-only route data.
    """
    if fps is None:
        fps = config.DEFAULT_ANIMATION_FPS
    if duration_seconds is None:
        duration_seconds = config.DEFAULT_ANIMATION_DURATION_SECONDS

    schedule = export_progress_schedule(data, fps, duration_seconds, ease=ease, min_frames=min_frames)
    logger.info(f"Rendering {len(schedule)} frames ({fps} fps, {duration_seconds} s)")
    for index, route_progress in enumerate(schedule):
        frame_options = dict(options, progress=route_progress)
        surface = create_surface(frame_options['width'], frame_options['height'])
        stats = build_stats_entries(stat_keys, sample_telemetry(data, route_progress), available_data, data)
        render_frame(surface, data, frame_options, stats)
        if watermark:
            draw_watermark(surface)
        yield index, route_progress, surface


def frame_delay_ms(duration_seconds, frame_count):
    """Per-frame delay for animated image formats."""
    return max(config.MIN_FRAME_DELAY_MS, int(round(1000.0 * duration_seconds / max(1, frame_count))))


def save_still(image, output_file):
    """Save a still frame as PNG.

    Returns:
        str: path of the written file
    """
    base_filename, extension = os.path.splitext(output_file)
    if not extension:
        output_file = f"{base_filename}.png"
    image.save(output_file, format='PNG')
    logger.info(f"Still image saved to {output_file}")
    return output_file


def save_animation(frames, output_file, fmt='apng', duration_seconds=None):
    """Encode rendered frames as an animated image.

    Args:
        frames: list of PIL RGBA images
        output_file: target path
        fmt: 'apng' or 'gif'
        duration_seconds: total animation length, used for the frame delay

    Returns:
        dict: {'path': str, 'frames': int, 'frame_delay_ms': int}
    """
    if not frames:
        raise ValueError(ERRORS['no_frames'])
    if duration_seconds is None:
        duration_seconds = config.DEFAULT_ANIMATION_DURATION_SECONDS
    delay = frame_delay_ms(duration_seconds, len(frames))

    first, rest = frames[0], list(frames[1:])
    if fmt == 'apng':
        first.save(output_file, format='PNG', save_all=True, append_images=rest,
                   duration=delay, loop=0)
    elif fmt == 'gif':
        first.save(output_file, format='GIF', save_all=True, append_images=rest,
                   duration=delay, loop=0, disposal=2)
    else:
        raise ValueError(ERRORS['invalid_format'].format(
            fmt=fmt, choices=', '.join(config.ANIMATION_FORMATS)))

    logger.info(f"Animation with {len(frames)} frames saved to {output_file}")
    return {'path': output_file, 'frames': len(frames), 'frame_delay_ms': delay}


def save_frame_sequence(frames, output_dir):
    """Write ``(index, progress, image)`` frames as numbered PNG files.

    Frames are written as they arrive so long videos never sit in memory.

    Returns:
        dict: {'path': str, 'frames': int, 'files': [str, ...]}
    """
    os.makedirs(output_dir, exist_ok=True)
    files = []
    for index, _, image in frames:
        path = os.path.join(output_dir, FRAME_FILENAME_TEMPLATE.format(index=index))
        image.save(path, format='PNG')
        files.append(path)
    logger.info(f"{len(files)} frames written to {output_dir}")
    return {'path': output_dir, 'frames': len(files), 'files': files}


def export_animation(data, options, output_path, fmt='apng', fps=None, duration_seconds=None,
                     stat_keys=(), available_data=None, ease=False, watermark=False):
    """Render and write an animated export.

    Returns:
        dict describing the written output (see save_animation / save_frame_sequence)
    """
    if fps is None:
        fps = config.DEFAULT_ANIMATION_FPS
    if duration_seconds is None:
        duration_seconds = config.DEFAULT_ANIMATION_DURATION_SECONDS
    if fmt not in config.ANIMATION_FORMATS:
        raise ValueError(ERRORS['invalid_format'].format(
            fmt=fmt, choices=', '.join(config.ANIMATION_FORMATS)))

    min_frames = 1 if fmt == 'frames' else config.MIN_ANIMATED_FRAMES
    frames = iter_animation_frames(
        data, options, fps=fps, duration_seconds=duration_seconds,
        stat_keys=stat_keys, available_data=available_data,
        ease=ease, min_frames=min_frames, watermark=watermark,
    )
    if fmt == 'frames':
        return save_frame_sequence(frames, output_path)
    return save_animation([image for _, _, image in frames], output_path, fmt, duration_seconds)
