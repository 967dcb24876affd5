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
Localization strings for RideViz.
English dictionary for overlay labels and CLI messages.
"""

# Error messages
ERRORS = {
    'file_not_found': "File not found: {file_path}",
    'invalid_json': "Could not read route data from {file_path}: {error}",
    'missing_points': "Route data contains no list of points",
    'not_enough_points': "Route needs at least 2 points to render (got {count})",
    'unknown_option': "Unknown render option(s): {names}",
    'invalid_canvas_size': "Canvas size must be positive (got {width}x{height})",
    'invalid_background': "Unknown background '{background}' (choose from: {choices})",
    'invalid_color_by': "Unknown color metric '{metric}' (choose from: {choices})",
    'invalid_format': "Unknown animation format '{fmt}' (choose from: {choices})",
    'invalid_preset': "Unknown export preset '{preset}' (choose from: {choices})",
    'invalid_stat': "Unknown stat '{stat}' (choose from: {choices})",
    'no_frames': "No frames to encode",
    'render_failed': "Rendering failed",
}

# Stats overlay labels
STAT_LABELS = {
    'distance': "DIST",
    'duration': "DUR",
    'elevation_gain': "GAIN",
    'avg_speed': "AVG SPD",
    'avg_heart_rate': "AVG HR",
    'max_heart_rate': "MAX HR",
    'avg_power': "AVG PWR",
    'max_power': "MAX PWR",
}

# CLI notices
NOTICES = {
    'no_elevation': "Route has no elevation data; the 3D view will be flat",
    'color_by_black': "Gradient 'black' has a single color, color-by ignored",
}
