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
Loading of prepared route data (VizData).

Route data is produced by the backend from the raw activity file. This
module only reads the already prepared JSON payload, fills in missing
fields and derives capability flags; it does not parse GPX or FIT files.
"""
import json
import logging
import os

try:
    from .. import config
    from ..locales.strings import ERRORS
except ImportError:
    import config
    from locales.strings import ERRORS

try:
    from ..engine.structures import (
        POINT_DISTANCE_KM,
        POINT_ELAPSED_SECONDS,
        POINT_ELEVATION,
        POINT_HEART_RATE,
        POINT_NUMERIC_FIELDS,
        POINT_OPTIONAL_FIELDS,
        POINT_POWER,
        POINT_VALUE,
        SECONDS_PER_HOUR,
    )
    from ..engine.telemetry import detect_available_data
except ImportError:
    from engine.structures import (
        POINT_DISTANCE_KM,
        POINT_ELAPSED_SECONDS,
        POINT_ELEVATION,
        POINT_HEART_RATE,
        POINT_NUMERIC_FIELDS,
        POINT_OPTIONAL_FIELDS,
        POINT_POWER,
        POINT_VALUE,
        SECONDS_PER_HOUR,
    )
    from engine.telemetry import detect_available_data

logger = logging.getLogger(__name__)


def _to_float(value, default=None):
    if value is None:
        return default
    try:
        return float(value)
    except (TypeError, ValueError):
        return default


def normalize_point(raw):
    """Return a RoutePoint dict with every known field present."""
    point = dict(raw)
    for field in POINT_NUMERIC_FIELDS:
        point[field] = _to_float(raw.get(field), 0.0)
    for field in POINT_OPTIONAL_FIELDS:
        point[field] = _to_float(raw.get(field))
    return point


def parse_viz_data(payload):
    """Extract route data from a decoded JSON payload.

    Accepted shapes:
        - a list of route points
        - {'points': [...]}
        - a route data response {'viz_data': {...}, 'metrics': {...}, 'available_data': {...}}

    Args:
        payload: decoded JSON object

    Returns:
        dict: {
            'viz_data': {'points': [...]},
            'metrics': dict or None,
            'available_data': dict
        }

    Raises:
        ValueError: payload holds no list of points
    """
    metrics = None
    available_data = None
    if isinstance(payload, dict) and 'viz_data' in payload:
        metrics = payload.get('metrics')
        available_data = payload.get('available_data')
        payload = payload['viz_data']
    if isinstance(payload, dict):
        payload = payload.get('points')
    if not isinstance(payload, list):
        raise ValueError(ERRORS['missing_points'])

    points = [normalize_point(raw) for raw in payload if isinstance(raw, dict)]
    skipped = len(payload) - len(points)
    if skipped:
        logger.warning(f"Skipped {skipped} malformed route points")

    viz_data = {'points': points}
    if available_data is None:
        available_data = detect_available_data(viz_data)
    if points and not available_data.get('has_elevation'):
        logger.warning("Route has no elevation data, walls will be flat")

    return {'viz_data': viz_data, 'metrics': metrics, 'available_data': available_data}


def load_viz_data(file_path):
    """Read route data from a JSON file.

    Raises:
        ValueError: file missing, invalid JSON or no points
    """
    if not os.path.exists(file_path):
        raise ValueError(ERRORS['file_not_found'].format(file_path=file_path))
    try:
        with open(file_path, 'r', encoding='utf-8') as f:
            payload = json.load(f)
    except json.JSONDecodeError as e:
        raise ValueError(ERRORS['invalid_json'].format(file_path=file_path, error=e)) from e

    result = parse_viz_data(payload)
    logger.info(f"Loaded {len(result['viz_data']['points'])} route points from {file_path}")
    return result


def _speed_series(points):
    """Speed (km/h) between consecutive samples, None where time is missing."""
    speeds = [None] * len(points)
    for i in range(1, len(points)):
        prev, curr = points[i - 1], points[i]
        t0, t1 = prev.get(POINT_ELAPSED_SECONDS), curr.get(POINT_ELAPSED_SECONDS)
        if t0 is None or t1 is None or t1 <= t0:
            continue
        distance = (curr.get(POINT_DISTANCE_KM) or 0.0) - (prev.get(POINT_DISTANCE_KM) or 0.0)
        speeds[i] = max(0.0, distance) / ((t1 - t0) / SECONDS_PER_HOUR)
    if len(speeds) > 1 and speeds[0] is None:
        speeds[0] = speeds[1]
    return speeds


def apply_color_by(viz_data, metric):
    """Recompute normalized ``value`` of every point from a ride metric.

    Args:
        viz_data: VizData mapping (not modified)
        metric: one of config.COLOR_BY_METRICS, or None / 'none' to clear values

    Returns:
        dict: new VizData mapping
    """
    points = viz_data.get('points') or []
    if metric in (None, 'none'):
        return {'points': [dict(p, **{POINT_VALUE: None}) for p in points]}
    if metric not in config.COLOR_BY_METRICS:
        raise ValueError(ERRORS['invalid_color_by'].format(
            metric=metric, choices=', '.join(config.COLOR_BY_METRICS)))

    if metric == 'speed':
        raw = _speed_series(points)
    else:
        field = {'elevation': POINT_ELEVATION, 'heartrate': POINT_HEART_RATE, 'power': POINT_POWER}[metric]
        raw = [p.get(field) for p in points]

    present = [v for v in raw if v is not None]
    if not present:
        logger.warning(f"No '{metric}' samples in route, color falls back to route position")
        return {'points': [dict(p, **{POINT_VALUE: None}) for p in points]}

    low, high = min(present), max(present)
    span = high - low
    recolored = []
    for point, v in zip(points, raw):
        if v is None:
            value = None
        else:
            value = (v - low) / span if span > 0 else 0.5
        recolored.append(dict(point, **{POINT_VALUE: value}))
    logger.debug(f"Colored by {metric}: range {low:.1f}..{high:.1f}")
    return {'points': recolored}

