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
Tests for route simplification, isometric projection, viewport fitting,
progressive reveal and curve subdivision.
"""
import math
import os
import sys

import pytest

# Add parent directory to path for imports
PARENT_DIR = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
if PARENT_DIR not in sys.path:
    sys.path.insert(0, PARENT_DIR)

from engine.projection import (
    extrusion_height_for,
    fit_to_viewport,
    prepare_frame_points,
    project_isometric,
    reveal_points,
    simplify_points,
    subdivide_catmull_rom,
)
from engine.render import build_render_options
from engine.structures import PreparedPoint
import config


def make_route(count=20, elevation=True):
    """Synthetic route: a gentle S-curve with one climb."""
    points = []
    for i in range(count):
        f = i / (count - 1)
        points.append({
            'x': f,
            'y': 0.5 + 0.3 * math.sin(f * math.pi * 2),
            'elevation': 100.0 + 80.0 * math.sin(f * math.pi) if elevation else None,
            'value': f,
            'route_progress': f,
        })
    return points


def make_prepared(progresses):
    return [PreparedPoint(float(i * 10), float(i * 5), float(i * 10), float(i * 5 - 20), p, p)
            for i, p in enumerate(progresses)]


# ============================================================
# Simplification
# ============================================================

def test_simplify_without_smoothing_keeps_everything():
    points = make_route(50)
    assert simplify_points(points, 0) == points


def test_simplify_max_smoothing_keeps_every_30th_and_last():
    points = make_route(100)
    simplified = simplify_points(points, 100)
    assert [points.index(p) for p in simplified] == [0, 30, 60, 90, 99]


@pytest.mark.parametrize("smoothing", [0, 10, 35, 70, 100, 250])
def test_simplify_always_keeps_last_point(smoothing):
    points = make_route(47)
    simplified = simplify_points(points, smoothing)
    assert simplified[0] is points[0]
    assert simplified[-1] is points[-1], f"Last point dropped at smoothing {smoothing}"


# ============================================================
# Projection
# ============================================================

def test_flat_route_uses_minimum_elevation_scale():
    height, scale = extrusion_height_for(250.0, 250.0, 1000)
    assert scale == config.ELEVATION_SCALE_MIN
    assert height == pytest.approx(1000 * config.EXTRUSION_RATIO * config.ELEVATION_SCALE_MIN)


def test_alpine_route_scale_is_capped():
    _, scale = extrusion_height_for(400.0, 2400.0, 1000)
    assert scale == config.ELEVATION_SCALE_MAX


def test_flat_route_has_no_raised_points():
    projected = project_isometric(make_route(10, elevation=False), 1840, 1000)
    assert len(projected) == 10
    for point in projected:
        assert point.top_y == pytest.approx(point.ground_y)
        assert point.top_x == pytest.approx(point.ground_x)


def test_highest_point_is_raised_by_extrusion_height():
    route = make_route(21)
    projected = project_isometric(route, 1840, 1000)
    extrusion, _ = extrusion_height_for(100.0, 180.0, 1000)
    top = projected[10]
    assert top.ground_y - top.top_y == pytest.approx(extrusion)
    assert projected[0].ground_y - projected[0].top_y == pytest.approx(0.0)


def test_projection_keeps_value_and_progress():
    route = make_route(5)
    projected = project_isometric(route, 800, 600)
    assert [p.route_progress for p in projected] == [p['route_progress'] for p in route]
    assert [p.value for p in projected] == [p['value'] for p in route]


# ============================================================
# Viewport fitting
# ============================================================

@pytest.mark.parametrize("width,height,padding", [
    (1920, 1080, 40),
    (1080, 1920, 40),
    (400, 300, 10),
])
def test_fit_stays_inside_padded_canvas(width, height, padding):
    projected = project_isometric(make_route(30), 1840, 1000)
    fitted = fit_to_viewport(projected, width, height, padding)
    tolerance = 1e-6
    for point in fitted:
        for x in (point.ground_x, point.top_x):
            assert padding - tolerance <= x <= width - padding + tolerance
        for y in (point.ground_y, point.top_y):
            assert padding - tolerance <= y <= height - padding + tolerance


def test_fit_touches_padding_on_limiting_axis():
    projected = project_isometric(make_route(30), 1840, 1000)
    fitted = fit_to_viewport(projected, 1000, 1000, 50)
    xs = [c for p in fitted for c in (p.ground_x, p.top_x)]
    ys = [c for p in fitted for c in (p.ground_y, p.top_y)]
    x_fills = min(xs) == pytest.approx(50) and max(xs) == pytest.approx(950)
    y_fills = min(ys) == pytest.approx(50) and max(ys) == pytest.approx(950)
    assert x_fills or y_fills, "Route does not fill the limiting axis"


def test_fit_empty_input():
    assert fit_to_viewport([], 100, 100, 10) == []


# ============================================================
# Reveal
# ============================================================

def test_reveal_zero_returns_first_point():
    points = make_prepared([0.0, 0.25, 0.5, 0.75, 1.0])
    assert reveal_points(points, 0.0) == [points[0]]


def test_reveal_one_returns_everything():
    points = make_prepared([0.0, 0.25, 0.5, 0.75, 1.0])
    assert reveal_points(points, 1.0) == points


def test_reveal_ends_inside_segment():
    points = make_prepared([0.0, 0.25, 0.5, 0.75, 1.0])
    revealed = reveal_points(points, 0.4)
    assert len(revealed) == 3
    assert revealed[:2] == points[:2]
    last = revealed[-1]
    assert last.route_progress == pytest.approx(0.4)
    assert last.ground_x == pytest.approx(16.0)  # 60% of the way from 10 to 20


def test_reveal_is_monotonic():
    points = make_prepared([0.0, 0.1, 0.3, 0.35, 0.6, 0.9, 1.0])
    previous = 0
    for step in range(101):
        count = len(reveal_points(points, step / 100))
        assert count >= previous, f"Revealed path shrank at progress {step / 100}"
        previous = count


def test_reveal_skips_non_advancing_segments():
    points = make_prepared([0.0, 0.5, 0.5, 1.0])
    revealed = reveal_points(points, 0.75)
    assert revealed[-1].route_progress == pytest.approx(0.75)


def test_reveal_tail_joins_from_last_kept_point():
    """A progress step backwards is skipped; the tail is cut on the next advancing pair."""
    points = make_prepared([0.0, 0.5, 0.3, 0.6, 1.0])
    revealed = reveal_points(points, 0.55)
    assert [p.route_progress for p in revealed] == pytest.approx([0.0, 0.5, 0.55])
    assert revealed[:2] == points[:2]
    # Tail sits (0.55 - 0.3) / 0.3 of the way from point 2 to point 3
    assert revealed[-1].ground_x == pytest.approx(20 + 10 * 0.25 / 0.3)


# ============================================================
# Curve subdivision
# ============================================================

def test_subdivide_zero_tension_is_identity():
    points = make_prepared([0.0, 0.5, 1.0])
    assert subdivide_catmull_rom(points, 0.0) == points


def test_subdivide_passes_through_original_points():
    points = make_prepared([0.0, 0.5, 1.0])
    curved = subdivide_catmull_rom(points, 0.5, subdivisions=4)
    assert len(curved) == 9
    assert curved[0] == points[0]
    assert curved[4].ground_x == pytest.approx(points[1].ground_x)
    assert curved[4].top_y == pytest.approx(points[1].top_y)
    assert curved[-1] == points[-1]
    progresses = [p.route_progress for p in curved]
    assert progresses == sorted(progresses)


def test_subdivide_needs_three_points():
    points = make_prepared([0.0, 1.0])
    assert subdivide_catmull_rom(points, 0.5) == points


# ============================================================
# Full pipeline
# ============================================================

def test_prepare_frame_points_full_route():
    options = build_render_options(width=800, height=600, smoothing=0)
    prepared = prepare_frame_points({'points': make_route(25)}, options)
    assert len(prepared) == 25
    assert prepared[-1].route_progress == pytest.approx(1.0)


def test_prepare_frame_points_single_point_is_empty():
    options = build_render_options(width=800, height=600)
    assert prepare_frame_points({'points': make_route(25)[:1]}, options) == []
    assert prepare_frame_points({'points': []}, options) == []
