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
RideViz CLI entry point.

Renders prepared route data (VizData JSON) as an isometric still image or
an animated export.
"""
import json
import os
import sys
import argparse
import logging

# Add script directory to path for imports
SCRIPT_DIR = os.path.dirname(os.path.abspath(__file__))
if SCRIPT_DIR not in sys.path:
    sys.path.insert(0, SCRIPT_DIR)

from engine.export import export_animation, render_still, save_still
from engine.render import build_render_options
from loaders.viz_data import apply_color_by, load_viz_data
import config
from locales.strings import ERRORS, NOTICES

logging.basicConfig(
    level=logging.ERROR,
    format='%(levelname)s: %(message)s',
    stream=sys.stderr
)
logger = logging.getLogger('rideviz_render')


def parse_stat_keys(stats_arg):
    """Split a comma-separated stat list and validate every key."""
    if not stats_arg:
        return []
    keys = [key.strip() for key in stats_arg.split(',') if key.strip()]
    if keys == ['all']:
        return list(config.STAT_KEYS)
    for key in keys:
        if key not in config.STAT_KEYS:
            raise ValueError(ERRORS['invalid_stat'].format(stat=key, choices=', '.join(config.STAT_KEYS)))
    return keys


def resolve_canvas_size(preset, width=None, height=None):
    """Canvas size from an export preset, overridden by explicit width/height."""
    if preset not in config.EXPORT_PRESETS:
        raise ValueError(ERRORS['invalid_preset'].format(
            preset=preset, choices=', '.join(config.EXPORT_PRESETS)))
    preset_width, preset_height = config.EXPORT_PRESETS[preset]
    return width or preset_width, height or preset_height


def build_render_options_from_args(args):
    """Translate CLI arguments into render options."""
    width, height = resolve_canvas_size(args.preset, args.width, args.height)
    return build_render_options(
        width=width,
        height=height,
        padding=args.padding,
        stroke_width=args.stroke_width,
        smoothing=args.smoothing,
        glow=args.glow,
        background=args.background,
        gradient=args.gradient,
        color_by=args.color_by,
        curve_tension=args.curve_tension,
    )


def format_json_response(options, output, route_info, notices=None):
    """
    Format JSON response for CLI output.

    Args:
        options: render options used
        output: dict describing the written file(s)
        route_info: dict with point count and available data
        notices: list of informational messages

    Returns:
        dict with JSON response
    """
    response = {
        "success": True,
        "output": {
            "path": output.get("path"),
            "frames": output.get("frames", 1),
        },
        "render_options": {
            "width": options["width"],
            "height": options["height"],
            "gradient": options["gradient"],
            "color_by": options["color_by"],
            "background": options["background"],
            "smoothing": options["smoothing"],
            "glow": options["glow"],
        },
        "route": route_info,
    }
    if output.get("frame_delay_ms") is not None:
        response["output"]["frame_delay_ms"] = output["frame_delay_ms"]
    if notices:
        response["notice"] = notices
    return response


def print_error(message):
    error_response = {
        "success": False,
        "error": message
    }
    print(json.dumps(error_response, ensure_ascii=False, indent=2))


def main(argv=None):
    """CLI entry point."""
    parser = argparse.ArgumentParser(description='Render an isometric 3D route from prepared route data')
    parser.add_argument('route_file', help='Path to route data JSON (VizData)')
    parser.add_argument('--output', help='Output path (PNG/APNG/GIF file, or directory for frames)', required=True)
    parser.add_argument('--preset', help='Export preset (canvas size)', default=config.DEFAULT_EXPORT_PRESET)
    parser.add_argument('--width', type=int, help='Canvas width in px (overrides preset)', default=None)
    parser.add_argument('--height', type=int, help='Canvas height in px (overrides preset)', default=None)
    parser.add_argument('--padding', type=int, help='Canvas padding in px', default=None)
    parser.add_argument('--stroke-width', dest='stroke_width', type=float, help='Route stroke width in px', default=None)
    parser.add_argument('--smoothing', type=int, help='Point simplification 0-100', default=None)
    parser.add_argument('--curve-tension', dest='curve_tension', type=float,
                        help='Catmull-Rom corner rounding 0-0.5 (0 = straight segments)', default=None)
    parser.add_argument('--gradient', help=f"Palette: {', '.join(config.GRADIENTS)}", default=None)
    parser.add_argument('--color-by', dest='color_by',
                        help=f"Recolor by metric: {', '.join(config.COLOR_BY_METRICS)}, none", default=None)
    parser.add_argument('--background', help='transparent, white or black', default=None)
    parser.add_argument('--glow', action='store_true', help='Add a glow around the route')
    parser.add_argument('--stats', help=f"Comma-separated stats overlay ({', '.join(config.STAT_KEYS)}) or 'all'",
                        default=None)
    parser.add_argument('--watermark', action='store_true', help='Draw the watermark')
    parser.add_argument('--animated', action='store_true', help='Export an animation instead of a still')
    parser.add_argument('--format', dest='fmt', help=f"Animation format: {', '.join(config.ANIMATION_FORMATS)}",
                        default='apng')
    parser.add_argument('--duration', type=float, help='Animation duration in seconds',
                        default=config.DEFAULT_ANIMATION_DURATION_SECONDS)
    parser.add_argument('--fps', type=int, help='Animation frames per second', default=config.DEFAULT_ANIMATION_FPS)
    parser.add_argument('--ease', action='store_true', help='Ease animation start and end')
    parser.add_argument('--verbose', action='store_true', help='Log progress to stderr')
    args = parser.parse_args(argv)

    if args.verbose:
        logging.getLogger().setLevel(logging.INFO)

    try:
        if not os.path.exists(args.route_file):
            print_error(ERRORS['file_not_found'].format(file_path=args.route_file))
            sys.exit(1)

        route = load_viz_data(args.route_file)
        viz_data = route['viz_data']
        available_data = route['available_data']
        point_count = len(viz_data['points'])
        if point_count < 2:
            print_error(ERRORS['not_enough_points'].format(count=point_count))
            sys.exit(1)

        options = build_render_options_from_args(args)
        stat_keys = parse_stat_keys(args.stats)

        notices = []
        if not available_data.get('has_elevation'):
            notices.append(NOTICES['no_elevation'])
        if args.color_by is not None:
            if options['gradient'] == 'black' and options['color_by'] is not None:
                notices.append(NOTICES['color_by_black'])
                options['color_by'] = None
            viz_data = apply_color_by(viz_data, options['color_by'])

        if args.animated:
            output = export_animation(
                viz_data,
                options,
                args.output,
                fmt=args.fmt,
                fps=args.fps,
                duration_seconds=args.duration,
                stat_keys=stat_keys,
                available_data=available_data,
                ease=args.ease,
                watermark=args.watermark,
            )
        else:
            image = render_still(viz_data, options, stat_keys, available_data, watermark=args.watermark)
            output = {'path': save_still(image, args.output), 'frames': 1}

        route_info = {
            "points": point_count,
            "available_data": available_data,
        }
        if route.get('metrics'):
            route_info["metrics"] = route['metrics']

        response = format_json_response(options, output, route_info, notices)
        print(json.dumps(response, ensure_ascii=False, indent=2))

    except ValueError as ve:
        logger.error(str(ve))
        print_error(str(ve))
        sys.exit(1)
    except Exception as e:
        logger.error(f"{ERRORS['render_failed']}: {e}", exc_info=True)
        print_error(f"{ERRORS['render_failed']}: {str(e)}")
        sys.exit(1)


if __name__ == "__main__":
    main()
