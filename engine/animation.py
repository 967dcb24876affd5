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
Animation timing.

Maps animation time to route progress, honoring the real pacing of the
recording when elapsed times are available, and drives the cooperative
preview loop.
"""
import logging
import math
import time

try:
    from .. import config
except ImportError:
    import config

from .render import render_frame
from .structures import EPSILON, POINT_ELAPSED_SECONDS, POINT_ROUTE_PROGRESS
from .telemetry import build_stats_entries, sample_telemetry

logger = logging.getLogger(__name__)


def _clamp(value, lower=0.0, upper=1.0):
    return max(lower, min(upper, value))


def ease_in_out_sine(t):
    """Sine ease-in-out on [0, 1]."""
    return 0.5 * (1 - math.cos(math.pi * _clamp(t)))


def build_animation_progress(frame_index, frame_count):
    """Eased time fraction of frame ``frame_index`` out of ``frame_count``."""
    if frame_count <= 1:
        return 1.0
    return ease_in_out_sine(frame_index / (frame_count - 1))


def _timed_samples(points):
    return [
        (float(point[POINT_ELAPSED_SECONDS]), float(point.get(POINT_ROUTE_PROGRESS) or 0.0))
        for point in points
        if point.get(POINT_ELAPSED_SECONDS) is not None
    ]


def map_linear_progress_to_route(data, linear_progress):
    """Convert a linear animation-time fraction into route progress.

    Timestamps that do not move forward are never used as an
    interpolation bracket; such a sample only becomes the new anchor for
    the following one.

    Args:
        data: VizData mapping
        linear_progress: 0..1 fraction of the animation duration

    Returns:
        float: route progress, 0..1
    """
    linear_progress = _clamp(float(linear_progress))
    points = (data or {}).get('points') or []
    if len(points) < 2:
        return linear_progress

    samples = _timed_samples(points)
    if len(samples) < 2:
        return linear_progress

    first_elapsed, first_progress = samples[0]
    total_elapsed = samples[-1][0]
    if total_elapsed <= EPSILON:
        return linear_progress
    if linear_progress >= 1.0:
        return 1.0

    target_elapsed = linear_progress * total_elapsed
    if target_elapsed <= first_elapsed:
        return _clamp(first_progress)

    prev_elapsed, prev_progress = samples[0]
    for curr_elapsed, curr_progress in samples[1:]:
        if curr_elapsed <= prev_elapsed:
            prev_elapsed, prev_progress = curr_elapsed, curr_progress
            continue
        if target_elapsed <= curr_elapsed:
            local_t = _clamp((target_elapsed - prev_elapsed) / (curr_elapsed - prev_elapsed))
            return _clamp(prev_progress + (curr_progress - prev_progress) * local_t)
        prev_elapsed, prev_progress = curr_elapsed, curr_progress

    return 1.0


def export_progress_schedule(data, fps, duration_seconds, ease=False, min_frames=1):
    """Route progress of every frame of an exported animation.

    Args:
        data: VizData mapping
        fps: frames per second
        duration_seconds: animation length
        ease: apply sine easing to the time fraction before mapping
        min_frames: lower bound on the frame count

    Returns:
        list of float, one route progress per frame
    """
    frame_count = max(1, min_frames, int(round(fps * duration_seconds)))
    schedule = []
    for index in range(frame_count):
        if ease:
            linear = build_animation_progress(index, frame_count)
        else:
            linear = 1.0 if frame_count <= 1 else index / (frame_count - 1)
        schedule.append(map_linear_progress_to_route(data, linear))
    return schedule


class CancelToken:
    """Cancellation flag shared between a loop and its owner."""

    def __init__(self):
        self.cancelled = False

    def cancel(self):
        self.cancelled = True


class AnimationLoop:
    """Preview loop rendering one frame per host tick.

    The host calls ``tick(now)`` from its refresh callback (or uses
    ``run``). Every tick checks the cancellation token before doing any
    work, so a replaced loop never draws again.
    """

    def __init__(self, data, options, surface, duration_seconds=None, stat_keys=(),
                 available_data=None, on_frame=None, token=None):
        if duration_seconds is None:
            duration_seconds = config.DEFAULT_ANIMATION_DURATION_SECONDS
        self.data = data
        self.options = dict(options)
        self.surface = surface
        self.duration = max(config.MIN_ANIMATION_DURATION_SECONDS, float(duration_seconds))
        self.stat_keys = list(stat_keys)
        self.available_data = available_data
        self.on_frame = on_frame
        self.token = token or CancelToken()
        self.start_time = None
        self.frames_rendered = 0

    @property
    def cancelled(self):
        return self.token.cancelled

    def cancel(self):
        self.token.cancel()

    def tick(self, now):
        """Render the frame for wall-clock time ``now`` (seconds).

        Returns:
            bool: False once the loop has been cancelled
        """
        if self.token.cancelled:
            return False
        if self.start_time is None:
            self.start_time = now

        linear = ((now - self.start_time) % self.duration) / self.duration
        route_progress = map_linear_progress_to_route(self.data, ease_in_out_sine(linear))

        sample = sample_telemetry(self.data, route_progress)
        stats = build_stats_entries(self.stat_keys, sample, self.available_data, self.data)
        frame_options = dict(self.options, progress=route_progress)
        render_frame(self.surface, self.data, frame_options, stats)

        self.frames_rendered += 1
        if self.on_frame is not None:
            self.on_frame(self.surface, route_progress)
        return True

    def run(self, clock=time.monotonic, sleep=time.sleep, fps=None, max_ticks=None):
        """Drive ticks until cancelled or ``max_ticks`` frames were drawn."""
        if fps is None:
            fps = config.DEFAULT_ANIMATION_FPS
        interval = 1.0 / max(1, fps)
        ticks = 0
        while max_ticks is None or ticks < max_ticks:
            if not self.tick(clock()):
                break
            ticks += 1
            sleep(interval)
        logger.info(f"Animation loop stopped after {ticks} ticks")
        return ticks


class PreviewController:
    """Owns the single active preview loop of a drawing surface."""

    def __init__(self, surface):
        self.surface = surface
        self.loop = None

    def start(self, data, options, duration_seconds=None, stat_keys=(),
              available_data=None, on_frame=None):
        """Cancel the in-flight loop and start a new one for the new config."""
        self.stop()
        self.loop = AnimationLoop(
            data, options, self.surface,
            duration_seconds=duration_seconds,
            stat_keys=stat_keys,
            available_data=available_data,
            on_frame=on_frame,
        )
        return self.loop

    def stop(self):
        if self.loop is not None:
            self.loop.cancel()
            logger.debug("Cancelled running preview loop")

    def tick(self, now):
        if self.loop is None:
            return False
        return self.loop.tick(now)
