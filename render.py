import os
import sys
import warnings
from dataclasses import dataclass
from pathlib import Path

_VERBOSE_FLAGS = {"--verbose", "-v"}
_cli_verbose = any(arg in _VERBOSE_FLAGS for arg in sys.argv[1:])
_env_log_level = os.environ.get("TF_CPP_MIN_LOG_LEVEL")
_suppress_messages = (not _cli_verbose) and _env_log_level != "0"

if _suppress_messages and _env_log_level is None:
    os.environ["TF_CPP_MIN_LOG_LEVEL"] = "3"

if _suppress_messages:
    warnings.filterwarnings(
        "ignore",
        message=r"Protobuf gencode version .* is exactly one major version older than the runtime version .*",
        category=UserWarning,
        module="google.protobuf",
    )

VERBOSE = _cli_verbose


def log(message, *args, **kwargs):
    if VERBOSE:
        print(message, *args, **kwargs)


import tensorflow as tf
import numpy as np

if _suppress_messages:
    tf.get_logger().setLevel("ERROR")

from escapetime import (
    ColorMode,
    ColorParameters,
    InvalidConfiguration,
    ViewParameters,
    ZoomPlanner,
    compute_zoom_factors,
    fit_aspect,
    parse_color,
    render_frame,
)
from escapetime.navigation import EASINGS
from escapetime.output import GifWriter, to_image, write_frame_sequence, write_single_image

log("TensorFlow version: %s" % tf.__version__)

# Use the first visible GPU when there is one; the per-pixel work is
# vectorized by TensorFlow either way.
gpus = tf.config.list_physical_devices('GPU')
if gpus:
    try:
        for gpu in gpus:
            tf.config.experimental.set_memory_growth(gpu, True)
        DEVICE = '/GPU:0'
        log("GPU found, using %s" % gpus[0].name)
    except RuntimeError as e:
        log(e)
        DEVICE = '/CPU:0'
else:
    DEVICE = '/CPU:0'
    log("No GPU found, using CPU")

from argparse import ArgumentParser

OUTPUT_MODES = ("image", "gif", "frames")


@dataclass
class OutputConfig:
    mode: str
    image_path: Path | None
    gif_path: Path | None
    frame_dir: Path | None
    image_format: str


def build_parser():
    parser = ArgumentParser(description='Render escape-time fractal images and zoom animations.')

    parser.add_argument('--x-res', type=int, dest='x_res', metavar='X_RES', default=800,
                        help='width of the render target in pixels')
    parser.add_argument('--y-res', type=int, dest='y_res', metavar='Y_RES', default=600,
                        help='height of the render target in pixels')
    parser.add_argument('--aspect', type=str, default=None, metavar='RATIO',
                        help='lock the aspect ratio (e.g. "16:9"); the height is derived from --x-res')

    parser.add_argument('--x-center', type=float, dest='x_center', metavar='X_CENTER', default=0.0,
                        help='horizontal pan, in un-zoomed units')
    parser.add_argument('--y-center', type=float, dest='y_center', metavar='Y_CENTER', default=0.0,
                        help='vertical pan, in un-zoomed units')
    parser.add_argument('--zoom', type=float, default=0.2,
                        help='magnification; the visible width in the complex plane is 1/zoom')
    parser.add_argument('--cycles', type=int, default=100,
                        help='maximum number of iterations per pixel')
    parser.add_argument('--window-offset', type=float, nargs=2, dest='window_offset', metavar=('X', 'Y'),
                        default=(0.0, 0.0),
                        help='pixel offset of the render origin within a larger canvas. A rendered frame is '
                             'the same for any offset; it only shifts the pixels render_pixel callers query')
    parser.add_argument('--julia', type=float, nargs=2, metavar=('RE', 'IM'), default=None,
                        help='render the Julia set of this constant instead of the Mandelbrot set')

    parser.add_argument('--color-mode', dest='color_mode', choices=[m.value for m in ColorMode],
                        default=ColorMode.GRADIENT.value, help='coloring policy')
    parser.add_argument('--start-color', dest='start_color', type=str, default='1,0,1',
                        help='gradient start as "h,s,v" or any matplotlib color (e.g. "#ff8800")')
    parser.add_argument('--end-color', dest='end_color', type=str, default='0,0,0',
                        help='gradient end as "h,s,v" or any matplotlib color')

    parser.add_argument('--mode', choices=OUTPUT_MODES, default='image',
                        help='write the last frame as an image, all frames as a GIF, or all frames as files')
    parser.add_argument('--frames', type=int, default=1, help='number of frames to generate')
    parser.add_argument('--zoom-factor', type=float, dest='zoom_factor', default=1.25,
                        help='magnification multiplier between consecutive frames (> 1 zooms in)')
    parser.add_argument('--final-zoom', type=float, dest='final_zoom', default=None,
                        help='overall magnification reached by the last frame; overrides --zoom-factor')
    parser.add_argument('--easing', choices=EASINGS, default='ease',
                        help='temporal curve used with --final-zoom')
    parser.add_argument('--focus', type=float, nargs=2, metavar=('COL', 'ROW'), default=None,
                        help='pixel to zoom toward (default: center of the render target)')

    parser.add_argument('--output', type=str, default=None,
                        help='destination file for image and gif modes')
    parser.add_argument('--frame-dir', dest='frame_dir', type=str, default=None,
                        help='directory for the frames mode (default: ./frames)')
    parser.add_argument('--format', type=str, default=None,
                        help='image format for image/frames modes, any extension supported by Pillow '
                             '(e.g. png, ppm). Defaults to the --output suffix or png.')

    parser.add_argument('--tile-rows', dest='tile_rows', type=int, default=None,
                        help='render in bands of this many rows on a thread pool')
    parser.add_argument('--workers', type=int, default=None, help='threads used with --tile-rows')
    parser.add_argument('-v', '--verbose', action='store_true',
                        help='Enable verbose logging, including TensorFlow and hardware diagnostics.')

    return parser


def resolve_output_config(opt, parser: ArgumentParser) -> OutputConfig:
    output_arg = opt.output
    format_arg = (opt.format or "").lower().lstrip(".") or None

    if opt.mode == "frames":
        if output_arg:
            parser.error("--output is only valid with the image and gif modes; use --frame-dir.")
        frame_dir = Path(opt.frame_dir or "./frames").expanduser().resolve()
        return OutputConfig(mode="frames", image_path=None, gif_path=None, frame_dir=frame_dir,
                            image_format=format_arg or "png")

    if opt.frame_dir is not None:
        parser.error("--frame-dir is only valid with the frames mode.")

    if opt.mode == "gif":
        if format_arg not in (None, "gif"):
            parser.error("--format cannot be combined with the gif mode.")
        gif_path = Path(output_arg or "movie.gif").expanduser()
        if gif_path.suffix:
            if gif_path.suffix.lower() != ".gif":
                parser.error("GIF outputs must end with .gif.")
        else:
            gif_path = gif_path.with_suffix(".gif")
        return OutputConfig(mode="gif", image_path=None, gif_path=gif_path.resolve(), frame_dir=None,
                            image_format="gif")

    image_format = format_arg
    if output_arg:
        image_path = Path(output_arg).expanduser()
        suffix = image_path.suffix.lower().lstrip(".")
        if suffix:
            if image_format is None:
                image_format = suffix
            elif suffix != image_format:
                parser.error(f"--output extension .{suffix} does not match --format {image_format}.")
        else:
            image_format = image_format or "png"
            image_path = image_path.with_suffix(f".{image_format}")
    else:
        image_format = image_format or "png"
        image_path = Path(f"fractal.{image_format}")

    return OutputConfig(mode="image", image_path=image_path.resolve(), gif_path=None, frame_dir=None,
                        image_format=image_format)


def build_view(opt, parser: ArgumentParser) -> ViewParameters:
    y_res = opt.y_res
    try:
        if opt.aspect is not None:
            y_res = fit_aspect(opt.x_res, opt.aspect)
        return ViewParameters(
            resolution=(opt.x_res, y_res),
            center=(opt.x_center, opt.y_center),
            zoom=opt.zoom,
            window_offset=tuple(opt.window_offset),
            cycles=opt.cycles,
            julia_constant=tuple(opt.julia) if opt.julia is not None else None,
        )
    except InvalidConfiguration as exc:
        parser.error(str(exc))


def build_colors(opt, parser: ArgumentParser) -> ColorParameters:
    try:
        return ColorParameters(
            start_color=parse_color(opt.start_color),
            end_color=parse_color(opt.end_color),
        )
    except InvalidConfiguration as exc:
        parser.error(str(exc))


def main(argv=None):
    parser = build_parser()
    opt = parser.parse_args(argv)

    global VERBOSE
    VERBOSE = bool(opt.verbose)

    output_config = resolve_output_config(opt, parser)
    view = build_view(opt, parser)
    colors = build_colors(opt, parser)

    if opt.frames < 1:
        parser.error("--frames must be at least 1.")
    try:
        factors = compute_zoom_factors(opt.frames, opt.zoom_factor, final_zoom=opt.final_zoom, easing=opt.easing)
    except InvalidConfiguration as exc:
        parser.error(str(exc))

    planner = ZoomPlanner(focus=tuple(opt.focus) if opt.focus is not None else None)
    frame_digits = max(3, len(str(opt.frames - 1)))

    log("Rendering %d frame(s) at %dx%d, %d cycles, %s coloring on %s"
        % (opt.frames, *view.frame_size, view.cycles, opt.color_mode, DEVICE))

    gif_writer = GifWriter(output_config.gif_path) if output_config.gif_path is not None else None
    last_rgba = None
    try:
        for i, frame_view in enumerate(planner.views(view, factors)):
            print("frame {0} out of {1}".format(i, opt.frames), end='\r')
            try:
                result = render_frame(
                    frame_view,
                    colors,
                    opt.color_mode,
                    device=DEVICE,
                    tile_rows=opt.tile_rows,
                    workers=opt.workers,
                )
            except InvalidConfiguration as exc:
                parser.error(str(exc))
            log("frame %d: zoom=%.6g center=(%.6g, %.6g) escaped=%.1f%%"
                % (i, frame_view.zoom, frame_view.center[0], frame_view.center[1],
                   100.0 * float(np.mean(result.escaped))))

            if gif_writer is not None:
                gif_writer.append(result.rgba)
            if output_config.frame_dir is not None:
                write_frame_sequence(
                    to_image(result.rgba),
                    output_config.frame_dir,
                    i,
                    frame_digits,
                    output_config.image_format,
                )
            last_rgba = result.rgba
    finally:
        if gif_writer is not None:
            gif_writer.close()

    if output_config.image_path is not None and last_rgba is not None:
        write_single_image(to_image(last_rgba), output_config.image_path, output_config.image_format)
        log("Wrote %s" % output_config.image_path)


if __name__ == '__main__':
    main()
