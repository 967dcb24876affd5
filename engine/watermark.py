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
Watermark drawing: a rounded pill with outlined text, centered at the
bottom edge of the frame.
"""
import logging
import math

from PIL import Image, ImageDraw

try:
    from .. import config
except ImportError:
    import config

from .fonts import load_font

logger = logging.getLogger(__name__)


def draw_watermark(surface, text=None):
    """Draw the watermark pill onto ``surface``.

    Never raises for small canvases: the pill is shrunk to fit.

    Args:
        surface: PIL RGBA image
        text: watermark text (defaults to config.WATERMARK_TEXT)
    """
    if text is None:
        text = config.WATERMARK_TEXT
    width, height = surface.size

    font_size = max(config.WATERMARK_FONT_MIN, round(height * config.WATERMARK_FONT_RATIO))
    padding_x = round(font_size * 0.75)
    padding_y = round(font_size * 0.45)
    margin_bottom = max(14, round(font_size * 1.1))
    x = width / 2
    y = height - margin_bottom

    font = load_font(config.WATERMARK_FONT_FAMILY, font_size)
    layer = Image.new('RGBA', surface.size, (0, 0, 0, 0))
    draw = ImageDraw.Draw(layer)

    text_width = draw.textlength(text, font=font)
    box_width = min(max(1, width - 12), math.ceil(text_width + padding_x * 2))
    box_height = min(max(1, height - 12), math.ceil(font_size + padding_y * 2))
    box_x = round(x - box_width / 2)
    box_y = round(y - font_size - padding_y)
    radius = min(round(min(14, font_size * 0.75)), box_width // 2, box_height // 2)

    draw.rounded_rectangle(
        (box_x, box_y, box_x + box_width, box_y + box_height),
        radius=radius,
        fill=config.WATERMARK_FILL,
        outline=config.WATERMARK_OUTLINE,
        width=max(1, round(font_size * 0.06)),
    )
    draw.text(
        (x, y),
        text,
        font=font,
        anchor='mb',
        fill=config.WATERMARK_TEXT_FILL,
        stroke_width=max(2, round(font_size * 0.18)) // 2,
        stroke_fill=config.WATERMARK_TEXT_STROKE,
    )
    surface.alpha_composite(layer)
    logger.debug(f"Watermark drawn at {box_x},{box_y} ({box_width}x{box_height})")
