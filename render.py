import io
import logging
import sys
from argparse import ArgumentParser
from dataclasses import dataclass
from pathlib import Path
from typing import BinaryIO

import numpy as np
import PIL.Image

from mandelbrot import (
    InvalidConfiguration,
    RenderParameters,
    ViewWindow,
    default_iterations,
    render_frame,
)
from mandelbrot.palette import DEFAULT_CONTRAST, PALETTES
from mandelbrot.renderer import DEFAULT_SAMPLES, DEFAULT_WINDOW

logger = logging.getLogger("mandelbrot")

_CENTER_ARGS = ("x_center", "y_center", "x_width", "y_width")
_BOUND_ARGS = ("xmin", "ymin", "xmax", "ymax")


@dataclass
class OutputConfig:
    image_path: Path | None
    image_format: str
    pil_format: str
    mode: str


def build_parser():
    parser = ArgumentParser(description="Render the Mandelbrot set to an RGBA image.")

    parser.add_argument('--width', type=int,
                        dest='width', help='output width in pixels',
                        metavar='WIDTH', default=1024)

    parser.add_argument('--height', type=int,
                        dest='height', help='output height in pixels',
                        metavar='HEIGHT', default=1024)

    parser.add_argument('--xmin', type=float, help='left bound of the view window',
                        metavar='XMIN', default=None)
    parser.add_argument('--ymin', type=float, help='top bound of the view window',
                        metavar='YMIN', default=None)
    parser.add_argument('--xmax', type=float, help='right bound of the view window',
                        metavar='XMAX', default=None)
    parser.add_argument('--ymax', type=float, help='bottom bound of the view window',
                        metavar='YMAX', default=None)

    parser.add_argument('--x-center', type=float,
                        dest='x_center', help='x coordinate of the window center (use with the other center/width options)',
                        metavar='X_CENTER', default=None)
    parser.add_argument('--y-center', type=float,
                        dest='y_center', help='y coordinate of the window center',
                        metavar='Y_CENTER', default=None)
    parser.add_argument('--x-width', type=float,
                        dest='x_width', help='width of the window in the complex plane',
                        metavar='X_WIDTH', default=None)
    parser.add_argument('--y-width', type=float,
                        dest='y_width', help='height of the window in the complex plane',
                        metavar='Y_WIDTH', default=None)

    parser.add_argument('--max-iterations', type=int,
                        dest='max_iterations',
                        help='maximum escape iterations per point (default: 200 for discrete, 500 for smooth)',
                        metavar='MAX_ITERATIONS', default=None)

    parser.add_argument('--palette', choices=PALETTES, default='discrete',
                        help='"discrete" assigns random colors per magnitude bucket, "smooth" uses continuous bands.')

    parser.add_argument('--contrast', type=int, default=DEFAULT_CONTRAST,
                        help='alpha fade per iteration for the discrete palette.')

    parser.add_argument('--wrap-alpha', dest='wrap_alpha', action='store_true',
                        help='let the discrete palette alpha wrap around modulo 256 instead of stopping at 0.')

    parser.add_argument('-s', '--super-sample', type=int, dest='samples', nargs='?',
                        const=DEFAULT_SAMPLES, default=None, metavar='SAMPLES',
                        help=f'average SAMPLES randomly jittered sub-samples per pixel (default {DEFAULT_SAMPLES}).')

    parser.add_argument('--seed', type=int, default=None,
                        help='seed for the random source used by palettes and sampling.')

    parser.add_argument('--output', dest='output', type=str, default=None,
                        help='Destination image file. Omit or pass "-" to write to standard output.')

    parser.add_argument('--format', type=str,
                        dest='format', help='image file format. Can be any extension Pillow can write; formats without alpha are written as RGB. Default: "png".',
                        metavar='FORMAT', default='png')

    parser.add_argument('-v', '--verbose', action='store_true',
                        help='Enable verbose logging.')

    return parser


def configure_logging(verbose: bool) -> None:
    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter("%(asctime)s - %(levelname)s - %(message)s"))
    logger.handlers[:] = [handler]
    logger.setLevel(logging.DEBUG if verbose else logging.INFO)
    logger.propagate = False


def resolve_window(opt, parser: ArgumentParser) -> ViewWindow:
    center_values = [getattr(opt, name) for name in _CENTER_ARGS]
    bound_values = [getattr(opt, name) for name in _BOUND_ARGS]

    if any(value is not None for value in center_values):
        if any(value is not None for value in bound_values):
            parser.error("--x-center/--y-center/--x-width/--y-width cannot be combined with --xmin/--ymin/--xmax/--ymax.")
        if any(value is None for value in center_values):
            parser.error("--x-center, --y-center, --x-width and --y-width must be given together.")
        return ViewWindow.from_center(*center_values)

    defaults = (DEFAULT_WINDOW.xmin, DEFAULT_WINDOW.ymin, DEFAULT_WINDOW.xmax, DEFAULT_WINDOW.ymax)
    return ViewWindow(*(default if value is None else value for value, default in zip(bound_values, defaults)))


def resolve_output_config(opt, parser: ArgumentParser) -> OutputConfig:
    image_format = (getattr(opt, "format", "png") or "png").lower().lstrip(".")
    if not image_format:
        image_format = "png"

    pil_format = _pil_format_name(image_format)
    if pil_format is None:
        parser.error(f"--format {image_format} is not an image format Pillow can write.")
    mode = _writable_mode(pil_format)
    if mode is None:
        parser.error(f"--format {image_format} cannot store RGB or RGBA images.")
    if mode != "RGBA":
        logger.info("%s has no alpha channel, writing RGB", pil_format)

    output_arg = getattr(opt, "output", None)
    if output_arg is None or output_arg == "-":
        return OutputConfig(image_path=None, image_format=image_format, pil_format=pil_format, mode=mode)

    output_path = Path(output_arg).expanduser()
    if output_path.exists() and output_path.is_dir():
        parser.error("--output must point to a file, not a directory.")
    suffix = output_path.suffix
    expected_suffix = f".{image_format}"
    if suffix:
        if suffix.lower() != expected_suffix.lower():
            parser.error(f"--output extension {suffix} does not match --format {image_format}.")
    else:
        output_path = output_path.with_suffix(expected_suffix)
    return OutputConfig(
        image_path=output_path.resolve(),
        image_format=image_format,
        pil_format=pil_format,
        mode=mode,
    )


def _pil_format_name(ext: str) -> str | None:
    """Pillow format registered for the file extension ``ext``, if any."""

    return PIL.Image.registered_extensions().get(f".{ext.lower()}")


def _writable_mode(pil_format: str) -> str | None:
    """First of RGBA, RGB that ``pil_format`` can encode, or None."""

    for mode in ("RGBA", "RGB"):
        try:
            PIL.Image.new(mode, (1, 1)).save(io.BytesIO(), format=pil_format)
        except (OSError, KeyError, ValueError):
            continue
        return mode
    return None


def assemble_image(rgba: np.ndarray, mode: str = "RGBA") -> PIL.Image.Image:
    """Wrap a row-major ``(height, width, 4)`` pixel buffer in an image of ``mode``."""

    image = PIL.Image.fromarray(np.ascontiguousarray(rgba, dtype=np.uint8))
    if mode != "RGBA":
        image = image.convert(mode)
    return image


def write_single_image(image: PIL.Image.Image, output_path: Path, pil_format: str) -> None:
    output_path.parent.mkdir(parents=True, exist_ok=True)
    image.save(str(output_path), format=pil_format)


def write_stream(image: PIL.Image.Image, stream: BinaryIO, pil_format: str) -> None:
    image.save(stream, format=pil_format)
    stream.flush()


def main(argv=None):
    parser = build_parser()
    opt = parser.parse_args(argv)

    configure_logging(bool(opt.verbose))
    output_config = resolve_output_config(opt, parser)
    window = resolve_window(opt, parser)

    max_iterations = opt.max_iterations
    if max_iterations is None:
        max_iterations = default_iterations(opt.palette)

    params = RenderParameters(
        width=opt.width,
        height=opt.height,
        window=window,
        max_iterations=max_iterations,
        palette=opt.palette,
        contrast=opt.contrast,
        samples=opt.samples,
        seed=opt.seed,
        wrap_alpha=bool(opt.wrap_alpha),
    )
    try:
        params.validate()
    except InvalidConfiguration as exc:
        parser.error(str(exc))

    result = render_frame(params)
    image = assemble_image(result.rgba, output_config.mode)

    if output_config.image_path is not None:
        write_single_image(image, output_config.image_path, output_config.pil_format)
        logger.info("Wrote %s", output_config.image_path)
    else:
        write_stream(image, sys.stdout.buffer, output_config.pil_format)
    logger.debug("%d of %d pixel corners escaped", int(np.count_nonzero(result.escaped)), result.escaped.size)


if __name__ == '__main__':
    main()
