import math

import numpy as np
import pytest

from mandelbrot import ESCAPE_RADIUS, evaluate, evaluate_grid, pixel_grid, ViewWindow


def test_origin_never_escapes():
    outcome = evaluate(0j, 100)
    assert not outcome.escaped
    assert outcome.iterations == 100


def test_far_point_escapes_on_first_step():
    outcome = evaluate(2 + 2j, 50)
    assert outcome.escaped
    assert outcome.iterations == 0
    assert outcome.magnitude == pytest.approx(math.sqrt(8))


def test_escape_needs_magnitude_strictly_above_radius():
    # -2 maps to 2 and stays there forever.
    outcome = evaluate(-2 + 0j, 100)
    assert not outcome.escaped
    assert outcome.magnitude == pytest.approx(ESCAPE_RADIUS)


def test_escape_iteration_is_zero_based():
    # 1 -> 2 -> 5
    outcome = evaluate(1 + 0j, 10)
    assert outcome.escaped
    assert outcome.iterations == 2
    assert outcome.magnitude == pytest.approx(5.0)


@pytest.mark.parametrize("max_iterations", [0, 1, 7, 40])
def test_iterations_never_exceed_limit(max_iterations):
    for point in (0j, -1 + 0j, 0.3 + 0.5j, -0.75 + 0.1j, 0.25 + 0j):
        assert evaluate(point, max_iterations).iterations <= max_iterations


def test_grid_matches_scalar_evaluation():
    points = pixel_grid(ViewWindow(-2.0, -1.5, 1.0, 1.5), 12, 9)
    escaped, iterations, magnitudes = evaluate_grid(points, 30)

    assert escaped.shape == iterations.shape == magnitudes.shape == (9, 12)
    for (row, col), point in np.ndenumerate(points):
        outcome = evaluate(complex(point), 30)
        assert bool(escaped[row, col]) == outcome.escaped
        assert int(iterations[row, col]) == outcome.iterations
        assert float(magnitudes[row, col]) == pytest.approx(outcome.magnitude)


def test_grid_with_zero_iterations_marks_everything_inside():
    escaped, iterations, _ = evaluate_grid(np.array([[3 + 3j, 0j]]), 0)
    assert not escaped.any()
    assert (iterations == 0).all()
