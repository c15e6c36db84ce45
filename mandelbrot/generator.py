"""Utilities for generating sample points on the complex plane."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Sequence

import numpy as np

from .errors import InvalidSampleCount
from .escape import evaluate
from .palette import Color, Palette


@dataclass(frozen=True)
class ViewWindow:
    """Rectangular region of the complex plane shown by a render."""

    xmin: float
    ymin: float
    xmax: float
    ymax: float

    @classmethod
    def from_center(cls, x_center: float, y_center: float, x_width: float, y_width: float) -> "ViewWindow":
        x_width = np.float64(x_width)
        y_width = np.float64(y_width)
        return cls(
            xmin=float(x_center - x_width / 2.0),
            ymin=float(y_center - y_width / 2.0),
            xmax=float(x_center + x_width / 2.0),
            ymax=float(y_center + y_width / 2.0),
        )

    @property
    def x_width(self) -> float:
        return self.xmax - self.xmin

    @property
    def y_width(self) -> float:
        return self.ymax - self.ymin


@dataclass(frozen=True)
class SamplingMetadata:
    """Metadata describing the sampling grid for a rendered frame."""

    x_min: float
    y_min: float
    x_step: float
    y_step: float
    x_res: int
    y_res: int


def compute_metadata(window: ViewWindow, width: int, height: int) -> SamplingMetadata:
    return SamplingMetadata(
        x_min=window.xmin,
        y_min=window.ymin,
        x_step=window.x_width / width,
        y_step=window.y_width / height,
        x_res=width,
        y_res=height,
    )


def map_pixel(px: int, py: int, width: int, height: int, window: ViewWindow) -> complex:
    """Map pixel ``(px, py)`` to the plane point at its top-left corner."""

    re = px / width * (window.xmax - window.xmin) + window.xmin
    im = py / height * (window.ymax - window.ymin) + window.ymin
    return complex(re, im)


def pixel_grid(window: ViewWindow, width: int, height: int) -> np.ndarray:
    """Complex plane points for every pixel, shaped ``(height, width)``.

    Each element equals ``map_pixel(col, row, width, height, window)``.
    """

    x = np.arange(width, dtype=np.float64) / width * (window.xmax - window.xmin) + window.xmin
    y = np.arange(height, dtype=np.float64) / height * (window.ymax - window.ymin) + window.ymin
    X, Y = np.meshgrid(x, y)
    points = np.empty(X.shape, dtype=np.complex128)
    points.real = X
    points.imag = Y
    return points


class Sampler:
    """Draw jittered sub-samples of one output pixel and color each of them."""

    def __init__(
        self,
        palette: Palette,
        max_iterations: int,
        *,
        count: int = 4,
        rng: Optional[np.random.Generator] = None,
    ) -> None:
        if count < 1:
            raise InvalidSampleCount(f"Super-sampling needs at least one sample per pixel, got {count}.")
        self.palette = palette
        self.max_iterations = max_iterations
        self.count = count
        self.rng = rng if rng is not None else np.random.default_rng()

    def sample(self, point: complex, jitter: tuple[float, float]) -> list[Color]:
        """Colors of ``count`` points offset from ``point`` by up to ``jitter``."""

        offsets = self.rng.random((self.count, 2)) * np.asarray(jitter, dtype=np.float64)
        samples = []
        for dx, dy in offsets:
            sub_point = complex(point.real + float(dx), point.imag + float(dy))
            samples.append(self.palette.resolve(evaluate(sub_point, self.max_iterations)))
        return samples

    def pixel_color(self, point: complex, jitter: tuple[float, float]) -> Color:
        return average_samples(self.sample(point, jitter))


def average_samples(samples: Sequence[Color]) -> Color:
    """Per-channel mean of ``samples``, truncated to integers.

    >>> average_samples([(255, 0, 0, 255), (0, 0, 255, 255)])
    (127, 0, 127, 255)
    """

    if len(samples) == 0:
        raise InvalidSampleCount("Cannot average an empty sample set.")
    totals = np.sum(np.asarray(samples, dtype=np.uint32), axis=0)
    red, green, blue, alpha = (int(channel) for channel in totals // len(samples))
    return red, green, blue, alpha
