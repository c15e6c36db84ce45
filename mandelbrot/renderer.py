"""Rendering primitives for Mandelbrot frames."""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from typing import Optional

import numpy as np

from .errors import InvalidConfiguration, InvalidSampleCount
from .escape import IterationOutcome, evaluate_grid
from .generator import Sampler, SamplingMetadata, ViewWindow, compute_metadata, pixel_grid
from .palette import DEFAULT_CONTRAST, PALETTES, make_palette

logger = logging.getLogger(__name__)

DEFAULT_WINDOW = ViewWindow(-2.0, -2.0, 2.0, 2.0)
DEFAULT_ITERATIONS = {"discrete": 200, "smooth": 500}
DEFAULT_SAMPLES = 4
PROGRESS_ROWS = 64


def default_iterations(palette: str) -> int:
    return DEFAULT_ITERATIONS.get(palette.lower(), DEFAULT_ITERATIONS["discrete"])


@dataclass(frozen=True)
class RenderParameters:
    """Parameters that describe a single render of the Mandelbrot set.

    ``samples`` selects the strategy: ``None`` colors each pixel from the
    point at its corner, any other value averages that many jittered
    sub-samples per pixel.
    """

    width: int = 1024
    height: int = 1024
    window: ViewWindow = field(default=DEFAULT_WINDOW)
    max_iterations: int = DEFAULT_ITERATIONS["discrete"]
    palette: str = "discrete"
    contrast: int = DEFAULT_CONTRAST
    samples: Optional[int] = None
    seed: Optional[int] = None
    wrap_alpha: bool = False

    @property
    def supersampled(self) -> bool:
        return self.samples is not None

    def validate(self) -> None:
        """Raise :class:`InvalidConfiguration` if no image can be rendered."""

        if self.width <= 0 or self.height <= 0:
            raise InvalidConfiguration(f"Resolution must be positive, got {self.width}x{self.height}.")
        if self.max_iterations <= 0:
            raise InvalidConfiguration(f"max_iterations must be positive, got {self.max_iterations}.")
        bounds = (self.window.xmin, self.window.ymin, self.window.xmax, self.window.ymax)
        if not all(math.isfinite(value) for value in bounds):
            raise InvalidConfiguration(f"View window bounds must be finite, got {bounds}.")
        if not (self.window.xmin < self.window.xmax and self.window.ymin < self.window.ymax):
            raise InvalidConfiguration(f"View window must satisfy xmin < xmax and ymin < ymax, got {bounds}.")
        if not (math.isfinite(self.window.x_width) and math.isfinite(self.window.y_width)):
            raise InvalidConfiguration(f"View window extent overflows double precision, got {bounds}.")
        corners = (complex(x, y) for x in bounds[0::2] for y in bounds[1::2])
        if not all(math.isfinite(abs(corner)) for corner in corners):
            raise InvalidConfiguration(f"View window corners overflow double precision, got {bounds}.")
        if self.contrast < 0:
            raise InvalidConfiguration(f"contrast must not be negative, got {self.contrast}.")
        if self.palette.lower() not in PALETTES:
            raise InvalidConfiguration(f"Unknown palette '{self.palette}'. Valid choices: {', '.join(PALETTES)}.")
        if self.samples is not None and self.samples < 1:
            raise InvalidSampleCount(f"Super-sampling needs at least one sample per pixel, got {self.samples}.")


@dataclass(frozen=True)
class RenderResult:
    """Colored pixels of a render plus the escape data of each pixel's corner point.

    The corner data always comes from one vectorized pass over the grid. In
    super-sampled renders that pass is extra work on top of the jittered
    samples that produce ``rgba``.
    """

    rgba: np.ndarray
    escaped: np.ndarray
    iterations: np.ndarray
    metadata: SamplingMetadata
    palette_size: int


def render_frame(params: RenderParameters, *, rng: Optional[np.random.Generator] = None) -> RenderResult:
    """Render a Mandelbrot frame given the supplied parameters.

    Pixels are colored in row-major order, top to bottom and left to right,
    so a seeded ``rng`` reproduces the same image.
    """

    params.validate()
    if rng is None:
        rng = np.random.default_rng(params.seed)

    palette = make_palette(
        params.palette,
        max_iterations=params.max_iterations,
        rng=rng,
        contrast=params.contrast,
        wrap_alpha=params.wrap_alpha,
    )
    metadata = compute_metadata(params.window, params.width, params.height)
    logger.debug(
        "Rendering %dx%d over %s with %d iterations (%s)",
        params.width,
        params.height,
        params.window,
        params.max_iterations,
        f"{params.samples} samples per pixel" if params.supersampled else "direct",
    )

    points = pixel_grid(params.window, params.width, params.height)
    escaped, iterations, magnitudes = evaluate_grid(points, params.max_iterations)
    rgba = np.zeros((params.height, params.width, 4), dtype=np.uint8)

    sampler = None
    if params.supersampled:
        sampler = Sampler(palette, params.max_iterations, count=params.samples, rng=rng)
    jitter = (metadata.x_step, metadata.y_step)

    for row in range(params.height):
        for col in range(params.width):
            if sampler is not None:
                rgba[row, col] = sampler.pixel_color(complex(points[row, col]), jitter)
            else:
                outcome = IterationOutcome(
                    bool(escaped[row, col]),
                    int(iterations[row, col]),
                    float(magnitudes[row, col]),
                )
                rgba[row, col] = palette.resolve(outcome)
        if (row + 1) % PROGRESS_ROWS == 0:
            logger.debug("row %d out of %d", row + 1, params.height)

    logger.debug("Palette cache holds %d colors", len(palette.cache))
    return RenderResult(
        rgba=rgba,
        escaped=escaped,
        iterations=iterations,
        metadata=metadata,
        palette_size=len(palette.cache),
    )
