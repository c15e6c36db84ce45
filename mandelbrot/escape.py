"""Escape-time evaluation of points on the complex plane."""

from __future__ import annotations

from dataclasses import dataclass

import numpy as np

ESCAPE_RADIUS = 2.0


@dataclass(frozen=True)
class IterationOutcome:
    """Classification of a single point after running the escape test."""

    escaped: bool
    iterations: int
    magnitude: float


def evaluate(point: complex, max_iterations: int) -> IterationOutcome:
    """Iterate ``v = v*v + point`` from zero until ``|v|`` exceeds the escape radius.

    ``iterations`` is the zero-based step at which the point escaped, or
    ``max_iterations`` when it never did.
    """

    v = 0j
    magnitude = 0.0
    for n in range(max_iterations):
        v = v * v + point
        magnitude = abs(v)
        if magnitude > ESCAPE_RADIUS:
            return IterationOutcome(True, n, magnitude)
    return IterationOutcome(False, max_iterations, magnitude)


def _escape_step(vs: np.ndarray, points: np.ndarray, active: np.ndarray) -> tuple[np.ndarray, np.ndarray]:
    """Advance the points that are still bounded by one iteration."""

    # escaped values are frozen, their square may overflow but is discarded
    with np.errstate(over="ignore", invalid="ignore"):
        vs = np.where(active, vs * vs + points, vs)
    magnitudes = np.abs(vs)
    return vs, np.logical_and(active, magnitudes <= ESCAPE_RADIUS)


def evaluate_grid(points: np.ndarray, max_iterations: int) -> tuple[np.ndarray, np.ndarray, np.ndarray]:
    """Vectorized :func:`evaluate` over an array of complex points.

    Returns ``(escaped, iterations, magnitudes)`` arrays shaped like ``points``
    holding the same values :func:`evaluate` reports for each element.
    """

    points = np.asarray(points, dtype=np.complex128)
    vs = np.zeros_like(points)
    iterations = np.full(points.shape, max_iterations, dtype=np.int64)
    active = np.ones(points.shape, dtype=bool)

    n = 0
    while n < max_iterations and np.any(active):
        vs, still_active = _escape_step(vs, points, active)
        iterations[active & ~still_active] = n
        active = still_active
        n += 1

    escaped = ~active
    return escaped, iterations, np.abs(vs)
