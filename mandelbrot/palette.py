"""Coloring models that turn escape outcomes into RGBA colors."""

from __future__ import annotations

import logging
import math
import threading
from abc import ABC, abstractmethod
from typing import Callable, Hashable, Optional

import numpy as np

from .errors import InvalidConfiguration
from .escape import IterationOutcome

logger = logging.getLogger(__name__)

Color = tuple[int, int, int, int]

INSIDE_COLOR: Color = (0, 0, 0, 255)
DEFAULT_CONTRAST = 15

_LOG2 = math.log(2.0)


class PaletteCache:
    """Insert-if-absent color table shared by every pixel of one render.

    The first color stored under a key is the one every later lookup sees.
    """

    def __init__(self) -> None:
        self._colors: dict[Hashable, Color] = {}
        self._lock = threading.Lock()

    def __len__(self) -> int:
        return len(self._colors)

    def __contains__(self, key: Hashable) -> bool:
        return key in self._colors

    def get(self, key: Hashable) -> Optional[Color]:
        return self._colors.get(key)

    def get_or_create(self, key: Hashable, factory: Callable[[], Color]) -> Color:
        color = self._colors.get(key)
        if color is not None:
            return color
        with self._lock:
            color = self._colors.get(key)
            if color is None:
                color = factory()
                self._colors[key] = color
            return color


def to_channel(value: float) -> int:
    """Clamp ``value`` to [0, 255] and truncate it toward zero."""

    return int(min(max(value, 0.0), 255.0))


def normalized_escape_count(outcome: IterationOutcome) -> float:
    """Fractional escape count ``n + 1 - log2(log|v|)`` of an escaped point."""

    return outcome.iterations + 1 - math.log(math.log(outcome.magnitude)) / _LOG2


def bernstein_color(iterations: int, max_iterations: int) -> Color:
    """Smooth color from altered Bernstein polynomials of ``t = n / max``."""

    t = min(max(iterations / max_iterations, 0.0), 1.0)
    u = 1.0 - t
    red = 9.0 * u * t * t * t * 255
    green = 15.0 * u * u * t * t * 255
    blue = 8.5 * u * u * u * t * 255
    return to_channel(red), to_channel(green), to_channel(blue), 255


class Palette(ABC):
    """Derive a color from an :class:`IterationOutcome`, memoized per key."""

    name: str

    def __init__(self, cache: Optional[PaletteCache] = None) -> None:
        self.cache = cache if cache is not None else PaletteCache()

    @abstractmethod
    def key(self, outcome: IterationOutcome) -> Hashable: ...

    @abstractmethod
    def make_color(self, outcome: IterationOutcome) -> Color: ...

    def resolve(self, outcome: IterationOutcome) -> Color:
        if not outcome.escaped:
            return INSIDE_COLOR
        return self.cache.get_or_create(self.key(outcome), lambda: self.make_color(outcome))


class DiscretePalette(Palette):
    """Random colors bucketed by the integer part of the escape magnitude.

    Alpha fades by ``contrast`` per iteration. With ``wrap_alpha`` the value
    wraps modulo 256 like an 8-bit subtraction; otherwise it stops at zero.
    """

    name = "discrete"

    def __init__(
        self,
        rng: Optional[np.random.Generator] = None,
        *,
        contrast: int = DEFAULT_CONTRAST,
        wrap_alpha: bool = False,
        cache: Optional[PaletteCache] = None,
    ) -> None:
        super().__init__(cache)
        self.rng = rng if rng is not None else np.random.default_rng()
        self.contrast = contrast
        self.wrap_alpha = wrap_alpha

    def key(self, outcome: IterationOutcome) -> int:
        return math.floor(outcome.magnitude)

    def alpha(self, iterations: int) -> int:
        value = 255 - self.contrast * iterations
        if self.wrap_alpha:
            return value % 256
        return max(value, 0)

    def make_color(self, outcome: IterationOutcome) -> Color:
        red, green, blue = (int(c) for c in self.rng.integers(0, 255, size=3))
        return red, green, blue, self.alpha(outcome.iterations)


class SmoothPalette(Palette):
    """Continuous coloring keyed by the renormalized escape count."""

    name = "smooth"

    def __init__(self, max_iterations: int, *, cache: Optional[PaletteCache] = None) -> None:
        super().__init__(cache)
        self.max_iterations = max_iterations

    def key(self, outcome: IterationOutcome) -> int:
        return outcome.iterations + 1 - int(math.log(math.log(outcome.magnitude)) / _LOG2)

    def make_color(self, outcome: IterationOutcome) -> Color:
        return bernstein_color(outcome.iterations, self.max_iterations)


PALETTES = ("discrete", "smooth")


def make_palette(
    name: str,
    *,
    max_iterations: int,
    rng: Optional[np.random.Generator] = None,
    contrast: int = DEFAULT_CONTRAST,
    wrap_alpha: bool = False,
) -> Palette:
    """Build a fresh palette (with its own empty cache) for one render."""

    mode = name.lower()
    if mode == "discrete":
        palette: Palette = DiscretePalette(rng, contrast=contrast, wrap_alpha=wrap_alpha)
    elif mode == "smooth":
        palette = SmoothPalette(max_iterations)
    else:
        raise InvalidConfiguration(f"Unknown palette '{name}'. Valid choices: {', '.join(PALETTES)}.")
    logger.debug("Using %s palette", palette.name)
    return palette
