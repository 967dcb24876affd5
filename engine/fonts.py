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
Font lookup for text drawn into frames.

Fonts are resolved through matplotlib's font manager (which ships DejaVu)
and loaded with Pillow.
"""
import logging

from matplotlib import font_manager
from PIL import ImageFont

logger = logging.getLogger(__name__)

# (family, weight, size) -> FreeTypeFont
_FONT_CACHE = {}


def load_font(family, size, weight='normal'):
    """Load a TrueType font at a pixel size.

    Args:
        family: font family name, e.g. 'DejaVu Sans'
        size: pixel size (at least 1)
        weight: matplotlib weight name ('normal', 'bold', ...)

    Returns:
        PIL.ImageFont.FreeTypeFont
    """
    size = max(1, int(round(size)))
    key = (family, weight, size)
    if key in _FONT_CACHE:
        return _FONT_CACHE[key]

    properties = font_manager.FontProperties(family=family, weight=weight)
    path = font_manager.findfont(properties, fallback_to_default=True)
    try:
        font = ImageFont.truetype(path, size)
    except OSError as e:
        logger.warning(f"Could not load font '{path}': {e}, using Pillow default font")
        font = ImageFont.load_default(size)

    _FONT_CACHE[key] = font
    return font
