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
Live ride statistics for the stats overlay.

Cumulative statistics are interpolated at an arbitrary route progress and
formatted into ``StatsEntry`` rows for the frame renderer.
"""
import logging
from bisect import bisect_left

try:
    from ..locales.strings import STAT_LABELS
except ImportError:
    from locales.strings import STAT_LABELS

from .structures import (
    POINT_AVG_HEART_RATE,
    POINT_AVG_POWER,
    POINT_DISTANCE_KM,
    POINT_ELAPSED_SECONDS,
    POINT_ELEVATION,
    POINT_ELEVATION_GAIN_M,
    POINT_HEART_RATE,
    POINT_MAX_HEART_RATE,
    POINT_MAX_POWER,
    POINT_POWER,
    POINT_ROUTE_PROGRESS,
    POINT_X,
    POINT_Y,
    SECONDS_PER_HOUR,
    SECONDS_PER_MINUTE,
    StatsEntry,
)

logger = logging.getLogger(__name__)

# Sample key -> RoutePoint key
_SAMPLED_FIELDS = {
    'distance_km': POINT_DISTANCE_KM,
    'elevation_gain_m': POINT_ELEVATION_GAIN_M,
    'elapsed_seconds': POINT_ELAPSED_SECONDS,
    'avg_heart_rate': POINT_AVG_HEART_RATE,
    'max_heart_rate': POINT_MAX_HEART_RATE,
    'avg_power': POINT_AVG_POWER,
    'max_power': POINT_MAX_POWER,
}
# Always numeric in the sample, others stay None when missing
_ZERO_DEFAULT_FIELDS = ('distance_km', 'elevation_gain_m')


def _lerp_optional(a, b, t):
    if a is None and b is None:
        return None
    if a is None:
        a = b
    if b is None:
        b = a
    return float(a) + (float(b) - float(a)) * t


def _values_at(point):
    return {key: point.get(field) for key, field in _SAMPLED_FIELDS.items()}


def sample_telemetry(data, progress):
    """Interpolate cumulative ride statistics at a route progress.

    Args:
        data: VizData mapping
        progress: route progress, clamped to [0, 1]

    Returns:
        dict: {
            'route_progress': float,
            'distance_km': float,
            'elevation_gain_m': float,
            'elapsed_seconds': float or None,
            'avg_speed_kmh': float or None,
            'avg_heart_rate', 'max_heart_rate',
            'avg_power', 'max_power': float or None
        }
    """
    progress = max(0.0, min(1.0, float(progress)))
    points = (data or {}).get('points') or []

    if not points:
        values = {key: None for key in _SAMPLED_FIELDS}
    else:
        progresses = [float(p.get(POINT_ROUTE_PROGRESS) or 0.0) for p in points]
        idx = bisect_left(progresses, progress)
        if idx == 0:
            values = _values_at(points[0])
        elif idx >= len(points):
            values = _values_at(points[-1])
        elif progresses[idx] == progress:
            values = _values_at(points[idx])
        else:
            prev_point, next_point = points[idx - 1], points[idx]
            span = progresses[idx] - progresses[idx - 1]
            t = (progress - progresses[idx - 1]) / span if span > 0 else 1.0
            values = {
                key: _lerp_optional(prev_point.get(field), next_point.get(field), t)
                for key, field in _SAMPLED_FIELDS.items()
            }

    sample = {'route_progress': progress}
    for key, value in values.items():
        if value is None:
            sample[key] = 0.0 if key in _ZERO_DEFAULT_FIELDS else None
        else:
            sample[key] = float(value)

    elapsed = sample['elapsed_seconds']
    if elapsed is None:
        sample['avg_speed_kmh'] = None
    elif elapsed > 0:
        sample['avg_speed_kmh'] = sample['distance_km'] / (elapsed / SECONDS_PER_HOUR)
    else:
        sample['avg_speed_kmh'] = 0.0
    return sample


def detect_available_data(data):
    """Capability flags derived from the route points themselves."""
    points = (data or {}).get('points') or []

    def has(field):
        return any(point.get(field) is not None for point in points)

    return {
        'has_coordinates': bool(points) and has(POINT_X) and has(POINT_Y),
        'has_elevation': has(POINT_ELEVATION),
        'has_heart_rate': has(POINT_HEART_RATE) or has(POINT_AVG_HEART_RATE),
        'has_power': has(POINT_POWER) or has(POINT_AVG_POWER),
    }


def format_duration(total_seconds):
    """Format seconds as ``MM:SS`` or ``H:MM:SS``."""
    total = max(0, int(round(total_seconds)))
    hours = total // 3600
    minutes = (total % 3600) // SECONDS_PER_MINUTE
    seconds = total % SECONDS_PER_MINUTE
    if hours > 0:
        return f"{hours}:{minutes:02d}:{seconds:02d}"
    return f"{minutes:02d}:{seconds:02d}"


def build_stats_entries(keys, sample, available_data=None, data=None):
    """Build overlay rows for the selected stat keys.

    Rows whose data is not available in the ride are left out, so the
    overlay only lists what can actually be shown.

    Args:
        keys: ordered stat keys (see config.STAT_KEYS)
        sample: dict from sample_telemetry()
        available_data: capability flags, detected from ``data`` when None
        data: VizData mapping used for detection

    Returns:
        list of StatsEntry
    """
    if not keys or not sample:
        return []
    if available_data is None:
        available_data = detect_available_data(data)

    elapsed = sample.get('elapsed_seconds')
    entries = []
    for key in keys:
        value = None
        if key == 'distance':
            value = f"{sample.get('distance_km', 0.0):.1f} km"
        elif key == 'duration' and elapsed is not None:
            value = format_duration(elapsed)
        elif key == 'elevation_gain' and available_data.get('has_elevation'):
            value = f"{round(sample.get('elevation_gain_m', 0.0))} m"
        elif key == 'avg_speed' and sample.get('avg_speed_kmh') is not None:
            value = f"{sample['avg_speed_kmh']:.1f} km/h"
        elif key in ('avg_heart_rate', 'max_heart_rate') and available_data.get('has_heart_rate'):
            if sample.get(key) is not None:
                value = f"{round(sample[key])} bpm"
        elif key in ('avg_power', 'max_power') and available_data.get('has_power'):
            if sample.get(key) is not None:
                value = f"{round(sample[key])} W"
        elif key not in STAT_LABELS:
            logger.warning(f"Unknown stat key '{key}' ignored")
            continue

        if value is not None:
            entries.append(StatsEntry(key, STAT_LABELS[key], value))
    return entries
