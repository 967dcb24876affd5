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
Shared data structures used across the rendering pipeline.

Route point mapping (``RoutePoint``)
------------------------------------
Produced by the backend (or ``loaders.viz_data``) as a plain dict parsed
from JSON and never mutated by the engine::

    {
        'x': 0.42,                          # normalized planar x, 0..1
        'y': 0.17,                          # normalized planar y, 0..1 (grows downward)
        'elevation': 312.0,                 # metres or None
        'value': 0.63,                      # normalized color metric, 0..1 or None
        'route_progress': 0.25,             # cumulative fraction of the route, 0..1
        'cumulative_distance_km': 12.4,
        'cumulative_elevation_gain_m': 210.0,
        'elapsed_seconds': 1834.0,          # or None
        'heart_rate': 151.0,                # raw sample or None
        'power': 240.0,                     # raw sample or None
        'cumulative_avg_heart_rate': 144.2, # or None
        'cumulative_max_heart_rate': 171.0, # or None
        'cumulative_avg_power': 205.3,      # or None
        'cumulative_max_power': 612.0,      # or None
    }

``VizData`` is ``{'points': [RoutePoint, ...]}`` ordered by route_progress.

Prepared point (``PreparedPoint``)
----------------------------------
Produced by ``engine.projection`` for every render pass. Ground coordinates
are the projected position at zero height, top coordinates are raised by the
elevation extrusion.
"""
import sys
from collections import namedtuple

PreparedPoint = namedtuple(
    'PreparedPoint',
    ['ground_x', 'ground_y', 'top_x', 'top_y', 'value', 'route_progress'],
)

StatsEntry = namedtuple('StatsEntry', ['key', 'label', 'value'])

# Keys of RoutePoint mappings
POINT_X = 'x'
POINT_Y = 'y'
POINT_ELEVATION = 'elevation'
POINT_VALUE = 'value'
POINT_ROUTE_PROGRESS = 'route_progress'
POINT_DISTANCE_KM = 'cumulative_distance_km'
POINT_ELEVATION_GAIN_M = 'cumulative_elevation_gain_m'
POINT_ELAPSED_SECONDS = 'elapsed_seconds'
POINT_HEART_RATE = 'heart_rate'
POINT_POWER = 'power'
POINT_AVG_HEART_RATE = 'cumulative_avg_heart_rate'
POINT_MAX_HEART_RATE = 'cumulative_max_heart_rate'
POINT_AVG_POWER = 'cumulative_avg_power'
POINT_MAX_POWER = 'cumulative_max_power'

# Fields that default to 0.0 when absent, all others default to None
POINT_NUMERIC_FIELDS = (
    POINT_X,
    POINT_Y,
    POINT_ROUTE_PROGRESS,
    POINT_DISTANCE_KM,
    POINT_ELEVATION_GAIN_M,
)
POINT_OPTIONAL_FIELDS = (
    POINT_ELEVATION,
    POINT_VALUE,
    POINT_ELAPSED_SECONDS,
    POINT_HEART_RATE,
    POINT_POWER,
    POINT_AVG_HEART_RATE,
    POINT_MAX_HEART_RATE,
    POINT_AVG_POWER,
    POINT_MAX_POWER,
)

# Unit conversion constants
SECONDS_PER_HOUR = 3600.0
SECONDS_PER_MINUTE = 60

# Float guard used wherever a range or duration can collapse to zero
EPSILON = sys.float_info.epsilon
