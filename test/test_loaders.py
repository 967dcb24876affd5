#!/usr/bin/env python3
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
Tests for route data loading and color metric normalization.
"""
import json
import os
import sys

import pytest

# Add parent directory to path for imports
PARENT_DIR = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
if PARENT_DIR not in sys.path:
    sys.path.insert(0, PARENT_DIR)

from loaders.viz_data import apply_color_by, load_viz_data, normalize_point, parse_viz_data

SAMPLE_ROUTE = os.path.join(os.path.dirname(os.path.abspath(__file__)), "resources", "sample_route.json")


def test_load_sample_route():
    route = load_viz_data(SAMPLE_ROUTE)
    points = route['viz_data']['points']
    assert len(points) == 8
    assert route['metrics']['distance_km'] == 8.0
    assert route['available_data']['has_power'] is True
    progresses = [p['route_progress'] for p in points]
    assert progresses == sorted(progresses)


def test_normalize_point_fills_missing_fields():
    point = normalize_point({'x': '0.5', 'y': 0.25, 'elevation': 'n/a'})
    assert point['x'] == 0.5
    assert point['route_progress'] == 0.0
    assert point['cumulative_distance_km'] == 0.0
    assert point['elevation'] is None
    assert point['heart_rate'] is None


@pytest.mark.parametrize("payload", [
    [{'x': 0, 'y': 0}, {'x': 1, 'y': 1}],
    {'points': [{'x': 0, 'y': 0}, {'x': 1, 'y': 1}]},
    {'viz_data': {'points': [{'x': 0, 'y': 0}, {'x': 1, 'y': 1}]}},
])
def test_parse_accepts_all_shapes(payload):
    route = parse_viz_data(payload)
    assert len(route['viz_data']['points']) == 2
    assert route['available_data']['has_coordinates'] is True
    assert route['available_data']['has_elevation'] is False


def test_parse_skips_malformed_points():
    route = parse_viz_data([{'x': 0, 'y': 0}, "garbage", None, {'x': 1, 'y': 1}])
    assert len(route['viz_data']['points']) == 2


@pytest.mark.parametrize("payload", [{}, {'points': 'nope'}, 42, None])
def test_parse_rejects_payload_without_points(payload):
    with pytest.raises(ValueError):
        parse_viz_data(payload)


def test_load_missing_file(tmp_path):
    with pytest.raises(ValueError, match="File not found"):
        load_viz_data(str(tmp_path / "missing.json"))


def test_load_invalid_json(tmp_path):
    path = tmp_path / "broken.json"
    path.write_text("{not json", encoding='utf-8')
    with pytest.raises(ValueError):
        load_viz_data(str(path))


def test_load_plain_point_list(tmp_path):
    path = tmp_path / "points.json"
    path.write_text(json.dumps([{'x': 0, 'y': 0, 'elevation': 10}, {'x': 1, 'y': 1, 'elevation': 20}]),
                    encoding='utf-8')
    route = load_viz_data(str(path))
    assert route['metrics'] is None
    assert route['available_data']['has_elevation'] is True


# ============================================================
# Color metric
# ============================================================

@pytest.mark.parametrize("metric", ['elevation', 'heartrate', 'power', 'speed'])
def test_color_by_normalizes_to_unit_range(metric):
    data = load_viz_data(SAMPLE_ROUTE)['viz_data']
    recolored = apply_color_by(data, metric)
    values = [p['value'] for p in recolored['points']]
    assert all(v is not None for v in values), f"Missing values for {metric}"
    assert min(values) == pytest.approx(0.0)
    assert max(values) == pytest.approx(1.0)


def test_color_by_elevation_peak():
    data = load_viz_data(SAMPLE_ROUTE)['viz_data']
    values = [p['value'] for p in apply_color_by(data, 'elevation')['points']]
    assert values[0] == pytest.approx(0.0)
    assert values[4] == pytest.approx(1.0)


def test_color_by_does_not_mutate_input():
    data = load_viz_data(SAMPLE_ROUTE)['viz_data']
    before = [p['value'] for p in data['points']]
    apply_color_by(data, 'power')
    assert [p['value'] for p in data['points']] == before


@pytest.mark.parametrize("metric", [None, 'none'])
def test_color_by_none_clears_values(metric):
    data = load_viz_data(SAMPLE_ROUTE)['viz_data']
    assert all(p['value'] is None for p in apply_color_by(data, metric)['points'])


def test_color_by_missing_metric_clears_values():
    data = {'points': [normalize_point({'x': 0, 'y': 0}), normalize_point({'x': 1, 'y': 1})]}
    assert all(p['value'] is None for p in apply_color_by(data, 'heartrate')['points'])


def test_color_by_unknown_metric():
    with pytest.raises(ValueError):
        apply_color_by({'points': []}, 'cadence')
