"""Public API for Mandelbrot rendering utilities."""

from .errors import InvalidConfiguration, InvalidSampleCount
from .escape import ESCAPE_RADIUS, IterationOutcome, evaluate, evaluate_grid
from .generator import (
    Sampler,
    SamplingMetadata,
    ViewWindow,
    average_samples,
    compute_metadata,
    map_pixel,
    pixel_grid,
)
from .palette import (
    INSIDE_COLOR,
    DiscretePalette,
    Palette,
    PaletteCache,
    SmoothPalette,
    bernstein_color,
    make_palette,
    normalized_escape_count,
)
from .renderer import RenderParameters, RenderResult, default_iterations, render_frame

__all__ = [
    "ESCAPE_RADIUS",
    "INSIDE_COLOR",
    "DiscretePalette",
    "InvalidConfiguration",
    "InvalidSampleCount",
    "IterationOutcome",
    "Palette",
    "PaletteCache",
    "RenderParameters",
    "RenderResult",
    "Sampler",
    "SamplingMetadata",
    "SmoothPalette",
    "ViewWindow",
    "average_samples",
    "bernstein_color",
    "compute_metadata",
    "default_iterations",
    "evaluate",
    "evaluate_grid",
    "make_palette",
    "map_pixel",
    "normalized_escape_count",
    "pixel_grid",
    "render_frame",
]
