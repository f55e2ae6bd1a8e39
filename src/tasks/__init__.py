"""Tasks module for the model trainer.

This package contains concrete objectives satisfying the Optimisable
protocol, used for examples, checks and tests.

Available tasks:
- QuadraticModel: Quadratic objective f(x) = 0.5 x^T A x + b^T x + c
"""

from __future__ import annotations

from tasks.synthetic_quadratic import (
    QuadraticModel,
    QuadraticProblem,
    make_spd_quadratic,
    squared_distance_problem,
)

__all__ = [
    "QuadraticProblem",
    "QuadraticModel",
    "make_spd_quadratic",
    "squared_distance_problem",
]
