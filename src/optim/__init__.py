"""Optimization algorithms module.

This package contains the one-dimensional search used by the trainer:
- Minimum bracketing by golden-ratio expansion with parabolic extrapolation
- Brent line minimisation (golden section + parabolic interpolation)
"""

from __future__ import annotations

from optim.line_search import (
    CPHI,
    MAX_STEP,
    PHI,
    TINY,
    TOL,
    bracket_minimum,
    line_minimise,
)

__all__ = [
    # Constants
    "PHI",
    "CPHI",
    "TOL",
    "TINY",
    "MAX_STEP",
    # Line search
    "bracket_minimum",
    "line_minimise",
]
