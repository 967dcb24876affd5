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
Named color palettes and gradient interpolation.

Colors are returned as integer ``(r, g, b)`` tuples so they can be handed
straight to Pillow drawing calls.
"""
import logging
import math

import numpy as np
from matplotlib.colors import to_rgb

try:
    from .. import config
except ImportError:
    import config

logger = logging.getLogger(__name__)

# Parsed stops, filled lazily per palette
_STOPS_CACHE = {}


def _clamp(value, lower=0.0, upper=1.0):
    return max(lower, min(upper, value))


def _round_half_up(value):
    return int(math.floor(value + 0.5))


def _hex_to_rgb(color):
    """Parse a hex color string into an integer RGB tuple."""
    try:
        r, g, b = to_rgb(color)
    except ValueError:
        logger.warning(f"Invalid gradient stop '{color}', using white")
        return (255, 255, 255)
    return (_round_half_up(r * 255), _round_half_up(g * 255), _round_half_up(b * 255))


def resolve_gradient_name(name):
    """Return a known palette name, falling back to the default palette."""
    if name in config.GRADIENTS:
        return name
    logger.warning(f"Unknown gradient '{name}', falling back to '{config.DEFAULT_GRADIENT}'")
    return config.DEFAULT_GRADIENT


def get_gradient_stops(name):
    """Get parsed RGB stops of a named gradient.

    Args:
        name: palette name (unknown names fall back to the default palette)

    Returns:
        list of (r, g, b) tuples, at least one entry
    """
    if name not in config.GRADIENTS:
        name = resolve_gradient_name(name)
    if name not in _STOPS_CACHE:
        stops = [_hex_to_rgb(color) for color in config.GRADIENTS[name]]
        _STOPS_CACHE[name] = stops or [(255, 255, 255)]
    return _STOPS_CACHE[name]


def interpolate_gradient(name, t):
    """Interpolate a color along a named gradient.

    Args:
        name: palette name
        t: position along the gradient, clamped to [0, 1]

    Returns:
        tuple: (r, g, b) integers
    """
    stops = get_gradient_stops(name)
    if len(stops) == 1:
        return stops[0]

    t = _clamp(float(t))
    scaled = t * (len(stops) - 1)
    index = min(len(stops) - 2, int(math.floor(scaled)))
    local_t = scaled - index

    start = stops[index]
    end = stops[index + 1]
    return tuple(
        _round_half_up(start[channel] + (end[channel] - start[channel]) * local_t)
        for channel in range(3)
    )


def gradient_ramp(name, t_values):
    """Vectorized gradient lookup.

    Args:
        name: palette name
        t_values: array-like of positions (any shape), clamped to [0, 1]

    Returns:
        np.ndarray: uint8 array of shape ``t_values.shape + (3,)``
    """
    stops = np.array(get_gradient_stops(name), dtype=float)
    t = np.clip(np.asarray(t_values, dtype=float), 0.0, 1.0)
    if len(stops) == 1:
        rgb = np.broadcast_to(stops[0], t.shape + (3,))
        return rgb.astype(np.uint8)

    positions = np.linspace(0.0, 1.0, len(stops))
    channels = [np.interp(t, positions, stops[:, channel]) for channel in range(3)]
    rgb = np.floor(np.stack(channels, axis=-1) + 0.5)
    return np.clip(rgb, 0, 255).astype(np.uint8)


def remap_contrast(t):
    """Spread mid-range values apart (used for wall fills only)."""
    v = _clamp(float(t))
    return _clamp((v - 0.5) * config.CONTRAST_REMAP_FACTOR + 0.5)
