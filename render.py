import os
import sys
import warnings
from argparse import ArgumentParser
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

if _suppress_messages:
    tf.get_logger().setLevel("ERROR")
    for handler in tf.get_logger().handlers:
        handler.setLevel("ERROR")

from escapetime import ACTIONS, RenderSettings, Viewport, apply_action, render, zoom_sequence
from escapetime.output import GifWriter, pil_format_name, write_image


def default_device():
    gpus = tf.config.list_physical_devices('GPU')
    if gpus:
        log("GPU found, using %s" % gpus[0].name)
        return '/GPU:0'
    log("No GPU found, using CPU")
    return '/CPU:0'


def build_parser():
    parser = ArgumentParser(description='Render a greyscale escape-time image of the Mandelbrot set.')

    parser.add_argument('--width', type=int,
                        dest='width', help='width of the frame in pixels',
                        metavar='WIDTH', default=2560)

    parser.add_argument('--height', type=int,
                        dest='height', help='height of the frame in pixels',
                        metavar='HEIGHT', default=1440)

    parser.add_argument('--x-offset', type=float,
                        dest='x_offset', help='real coordinate shown at the center of the frame',
                        metavar='X_OFFSET', default=0.0)

    parser.add_argument('--y-offset', type=float,
                        dest='y_offset', help='imaginary coordinate shown at the center of the frame',
                        metavar='Y_OFFSET', default=0.0)

    parser.add_argument('--zoom', type=float,
                        dest='zoom', help='distance in the complex plane between adjacent pixels',
                        metavar='ZOOM', default=0.003)

    parser.add_argument('--engine', choices=['scalar', 'vector'], default='vector',
                        help='evaluate pixels one at a time or in lane batches')

    parser.add_argument('--lane-width', type=int,
                        dest='lane_width', help='number of adjacent pixels evaluated together by the vector engine',
                        metavar='LANES', default=4)

    parser.add_argument('--rows-per-band', type=int,
                        dest='rows_per_band', help='number of rows handed to a worker at a time',
                        metavar='ROWS', default=64)

    parser.add_argument('--workers', type=int,
                        dest='workers', help='number of threads rendering row bands',
                        metavar='WORKERS', default=1)

    parser.add_argument('--device', type=str, default=None,
                        help='TensorFlow device for the vector engine, e.g. "/CPU:0". Defaults to the first GPU when available.')

    parser.add_argument('--action', dest='actions', action='append', metavar='ACTION',
                        help='Pan or zoom step applied to the view before rendering. May be repeated. '
                             'Choices: %s.' % ', '.join(ACTIONS))

    parser.add_argument('--frames', type=int,
                        dest='frames', help='number of frames; more than one writes an animated GIF',
                        metavar='FRAMES', default=1)

    parser.add_argument('--zoom-factor', type=float,
                        dest='zoom_factor', help='factor applied to the zoom each animation frame. Choose < 1 for zoom in',
                        metavar='ZOOM_FACTOR', default=0.5)

    parser.add_argument('--output', dest='output', type=str,
                        help='Destination file. Defaults to mandelbrot.jpg, or mandelbrot.gif for animations.')

    parser.add_argument('--format', type=str,
                        dest='format', help='image format for single frames. Any format supported by Pillow. Defaults to the output suffix.',
                        metavar='FORMAT', default=None)

    parser.add_argument('-v', '--verbose', action='store_true',
                        help='Enable verbose logging, including TensorFlow and hardware diagnostics.')

    return parser


def resolve_output_path(opt, parser):
    animated = opt.frames > 1
    image_format = (opt.format or "").lower().lstrip(".")

    if animated:
        if image_format and image_format != "gif":
            parser.error("Animations are always written as GIF; --format must be gif or omitted.")
        output_path = Path(opt.output or "mandelbrot.gif").expanduser()
        if output_path.suffix:
            if output_path.suffix.lower() != ".gif":
                parser.error("GIF outputs must end with .gif.")
        else:
            output_path = output_path.with_suffix(".gif")
        return output_path.resolve(), "gif"

    output_path = Path(opt.output or "mandelbrot.jpg").expanduser()
    if image_format:
        suffix = output_path.suffix
        if suffix:
            if pil_format_name(suffix) != pil_format_name(image_format):
                parser.error(f"--output extension {suffix} does not match --format {image_format}.")
        else:
            output_path = output_path.with_suffix(f".{image_format}")
    elif not output_path.suffix:
        parser.error("--output needs a file extension when --format is not given.")
    return output_path.resolve(), image_format or output_path.suffix.lower().lstrip(".")


def main(argv=None):
    parser = build_parser()
    opt = parser.parse_args(argv)

    global VERBOSE
    VERBOSE = bool(opt.verbose)

    if opt.frames < 1:
        parser.error("--frames must be at least 1.")

    output_path, image_format = resolve_output_path(opt, parser)

    try:
        viewport = Viewport(
            x_offset=opt.x_offset,
            y_offset=opt.y_offset,
            zoom=opt.zoom,
            width=opt.width,
            height=opt.height,
        )
        for action in opt.actions or []:
            viewport = apply_action(viewport, action)
        settings = RenderSettings(
            engine=opt.engine,
            lane_width=opt.lane_width,
            rows_per_band=opt.rows_per_band,
            workers=opt.workers,
            device=opt.device or default_device(),
        )
        viewports = list(zoom_sequence(viewport, opt.frames, opt.zoom_factor))
    except ValueError as exc:
        parser.error(str(exc))

    log("TensorFlow version: %s" % tf.__version__)
    log("Rendering %dx%d with the %s engine (lane width %d, %d worker(s))"
        % (viewport.width, viewport.height, settings.engine, settings.lane_width, settings.workers))

    if len(viewports) == 1:
        frame = render(viewports[0], settings)
        write_image(frame, output_path, image_format)
        log("Wrote %s" % output_path)
        return output_path

    with GifWriter(output_path) as writer:
        for i, frame_viewport in enumerate(viewports):
            print("frame {0} out of {1}".format(i, len(viewports)), end='\r')
            writer.append(render(frame_viewport, settings))
    log("Wrote %d frames to %s" % (len(viewports), output_path))
    return output_path


if __name__ == '__main__':
    main()
