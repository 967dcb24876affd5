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
Tests for gradient palettes and color interpolation.
"""
import os
import sys

import numpy as np
import pytest

# Add parent directory to path for imports
PARENT_DIR = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
if PARENT_DIR not in sys.path:
    sys.path.insert(0, PARENT_DIR)

from engine.gradients import (
    get_gradient_stops,
    gradient_ramp,
    interpolate_gradient,
    remap_contrast,
    resolve_gradient_name,
)
import config


@pytest.mark.parametrize("name", sorted(config.GRADIENTS))
def test_gradient_endpoints_match_stops(name):
    """t=0 and t=1 return the first and last stop exactly."""
    stops = get_gradient_stops(name)
    assert interpolate_gradient(name, 0.0) == stops[0]
    assert interpolate_gradient(name, 1.0) == stops[-1]


def test_fire_gradient_values():
    assert interpolate_gradient('fire', 0.0) == (255, 51, 102)
    assert interpolate_gradient('fire', 0.5) == (255, 102, 0)
    assert interpolate_gradient('fire', 1.0) == (255, 153, 51)


def test_gradient_position_is_clamped():
    assert interpolate_gradient('ocean', -3.0) == interpolate_gradient('ocean', 0.0)
    assert interpolate_gradient('ocean', 7.0) == interpolate_gradient('ocean', 1.0)


@pytest.mark.parametrize("name", sorted(config.GRADIENTS))
def test_gradient_is_continuous_at_stops(name):
    """Crossing an interior stop never jumps by more than rounding."""
    count = len(get_gradient_stops(name))
    for k in range(1, count - 1):
        at = k / (count - 1)
        below = interpolate_gradient(name, at - 1e-9)
        above = interpolate_gradient(name, at + 1e-9)
        assert max(abs(a - b) for a, b in zip(below, above)) <= 1, f"{name} jumps at stop {k}: {below} vs {above}"


def test_white_and_black_are_constant():
    for t in (0.0, 0.33, 0.5, 1.0):
        assert interpolate_gradient('white', t) == (255, 255, 255)
        assert interpolate_gradient('black', t) == (0, 0, 0)


def test_unknown_gradient_falls_back_to_default():
    assert resolve_gradient_name('neon') == config.DEFAULT_GRADIENT
    assert interpolate_gradient('neon', 0.25) == interpolate_gradient(config.DEFAULT_GRADIENT, 0.25)


@pytest.mark.parametrize("name", ['fire', 'violet', 'rideviz'])
def test_ramp_agrees_with_scalar_interpolation(name):
    """Vectorized ramp and scalar lookup give the same colors (within rounding)."""
    positions = [0.0, 0.1, 0.25, 0.5, 0.8, 1.0]
    ramp = gradient_ramp(name, positions)
    assert ramp.shape == (len(positions), 3)
    assert ramp.dtype == np.uint8
    for row, t in zip(ramp, positions):
        expected = np.array(interpolate_gradient(name, t))
        assert np.abs(row.astype(int) - expected).max() <= 1, f"{name} at t={t}: {row} vs {expected}"


def test_ramp_keeps_input_shape():
    ramp = gradient_ramp('sunset', np.zeros((4, 5)))
    assert ramp.shape == (4, 5, 3)


@pytest.mark.parametrize("t,expected", [
    (0.5, 0.5),
    (0.0, 0.0),
    (1.0, 1.0),
    (0.6, 0.655),
    (0.4, 0.345),
])
def test_remap_contrast(t, expected):
    assert remap_contrast(t) == pytest.approx(expected)
