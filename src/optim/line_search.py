"""One-dimensional minimisation along a search direction.

This module provides:
- bracket_minimum: golden-ratio expansion (or shrinkage) with inverse
  parabolic interpolation to find three steps bounding a minimum
- line_minimise: Brent's method, golden-section steps guarded by
  parabolic interpolation, started from the bracket

Both operate on any scalar function of the step length, so they can be
used and tested independently of a model. Numerical degeneracies fall back
to golden-section steps and are never raised.
"""

from __future__ import annotations

import math

import numpy as np

from core.protocols import LineFunction
from core.types import Bracket, LineSearchResult

__all__ = [
    "PHI",
    "CPHI",
    "TOL",
    "TINY",
    "MAX_STEP",
    "bracket_minimum",
    "line_minimise",
]

# Golden ratio and its complement 1 - 1/PHI (the golden-section fraction)
PHI = 1.6180339887499
CPHI = 1.0 - 1.0 / PHI

# Maximal fractional precision
TOL = math.sqrt(float(np.finfo(np.float64).eps))

# Floor for denominators, and for precision when the minimum is at 0
TINY = 1.0e-10

# Maximum parabolic extrapolation, as a multiple of the current span
MAX_STEP = 10.0


def _sign(x: float) -> float:
    return float(np.sign(x))


def bracket_minimum(
    f: LineFunction,
    fa: float | None = None,
    a: float = 0.0,
    b: float = 1.0,
    *,
    max_iterations: int = 100,
) -> Bracket:
    """Find three steps bounding a local minimum of ``f``.

    If ``f(b)`` is worse than ``f(a)`` the trial point is pulled back towards
    ``a`` by golden-ratio division until it improves. Otherwise the search
    expands beyond ``b``: each iteration fits a parabola through the last
    three points, limits its minimum to ``MAX_STEP`` times the current span,
    and falls back to golden-ratio extrapolation when the fit is unusable.

    Args:
        f: Scalar function of the step length.
        fa: ``f(a)`` if already known; evaluated otherwise.
        a: Base step.
        b: Initial trial step.
        max_iterations: Cap on the iterations of either loop. When reached,
            the current triple is returned with ``bounded=False``.

    Returns:
        Bracket with ``lower <= mid <= upper``.
    """
    if fa is None:
        fa = f(a)
    fb = f(b)
    iterations = 0
    bounded = True

    if fb > fa:
        # Shrink towards a until the trial point is no longer worse
        c = b
        b = a + (c - a) / PHI
        fb = f(b)
        iterations = 1
        while fb > fa:
            if iterations >= max_iterations:
                bounded = False
                break
            c = b
            b = a + (c - a) / PHI
            fb = f(b)
            iterations += 1
    else:
        c = b + PHI * (b - a)
        fc = f(c)
        bracket_found = False

        while fb > fc:
            if iterations >= max_iterations:
                bounded = False
                break
            iterations += 1

            # Minimum of the parabola through (a, fa), (b, fb), (c, fc)
            r = (b - a) * (fb - fc)
            q = (b - c) * (fb - fa)
            denom = 2.0 * math.copysign(max(abs(q - r), TINY), q - r)
            u = b - ((b - c) * q - (b - a) * r) / denom
            ulimit = b + MAX_STEP * (c - b)

            if (b - u) * (u - c) > 0.0:
                # Parabolic minimum lies between b and c
                fu = f(u)
                if fu < fc:
                    return _ordered(b, u, c, iterations, bounded)
                if fu > fb:
                    return _ordered(a, b, u, iterations, bounded)
                u = c + PHI * (c - b)
            elif (c - u) * (u - ulimit) > 0.0:
                # Parabolic minimum lies between c and the extrapolation limit
                fu = f(u)
                if fu < fc:
                    b, c = c, u
                    fb, fc = fc, fu
                    u = c + PHI * (c - b)
                else:
                    bracket_found = True
            elif (u - ulimit) * (ulimit - c) >= 0.0:
                u = ulimit
            else:
                # Parabola unusable (wrong curvature, non-finite, or behind b)
                u = c + PHI * (c - b)

            if not bracket_found:
                fu = f(u)
            a, b, c = b, c, u
            fa, fb, fc = fb, fc, fu

    return _ordered(a, b, c, iterations, bounded)


def _ordered(a: float, mid: float, c: float, iterations: int, bounded: bool) -> Bracket:
    if a < c:
        return Bracket(lower=a, mid=mid, upper=c, iterations=iterations, bounded=bounded)
    return Bracket(lower=c, mid=mid, upper=a, iterations=iterations, bounded=bounded)


def line_minimise(
    f: LineFunction,
    fa: float | None = None,
    *,
    tolerance: float = 1.0e-4,
    max_iterations: int = 10,
    bracket_max_iterations: int = 100,
) -> LineSearchResult:
    """Minimise ``f`` over the step length using Brent's method.

    The minimum is first bracketed from steps 0 and 1. Each iteration then
    tries a parabolic fit through the three best points and accepts it only
    if its minimum falls inside the bracket and moves less than half the step
    taken two iterations before; otherwise a golden-section step into the
    larger half of the bracket is taken.

    Args:
        f: Scalar function of the step length.
        fa: ``f(0)`` if already known.
        tolerance: Search stops once the best point is within ``tolerance``
            of the bracket midpoint and the bracket is narrower than
            ``4 * tolerance``.
        max_iterations: Iteration cap. Reaching it is not an error; the best
            point found is returned with ``converged=False``.
        bracket_max_iterations: Iteration cap passed to the bracketer.

    Returns:
        LineSearchResult with the best step and its objective value.
    """
    bracket = bracket_minimum(f, fa, 0.0, 1.0, max_iterations=bracket_max_iterations)
    lower, upper = bracket.lower, bracket.upper

    x = w = v = bracket.mid
    e = 0.0
    d = 0.0
    fx = f(x)
    fv = fw = fx

    for n in range(1, max_iterations + 1):
        xm = 0.5 * (lower + upper)
        tol1 = TOL * abs(x) + TINY

        if abs(x - xm) <= tolerance and (upper - lower) < 4 * tolerance:
            return LineSearchResult(
                step=x, value=fx, iterations=n - 1, converged=True, bracket=bracket
            )

        if abs(e) > tol1:
            # Parabola through (v, fv), (w, fw), (x, fx)
            r = (fx - fv) * (x - w)
            q = (fx - fw) * (x - v)
            p = (x - v) * q - (x - w) * r
            q = 2.0 * (q - r)
            if q > 0.0:
                p = -p
            q = abs(q)

            if abs(p) >= abs(0.5 * q * e) or p <= q * (lower - x) or p >= q * (upper - x):
                e = lower - x if x >= xm else upper - x
                d = CPHI * e
            else:
                e = d
                d = p / q
                u = x + d
                if (u - lower) < 2 * tol1 or (upper - u) < 2 * tol1:
                    d = _sign(xm - x) * tol1
        else:
            e = lower - x if x >= xm else upper - x
            d = CPHI * e

        if abs(d) >= tol1:
            u = x + d
        else:
            u = x + _sign(d) * tol1

        fu = f(u)

        if fu <= fx:
            if u >= x:
                lower = x
            else:
                upper = x
            v, w, x = w, x, u
            fv, fw, fx = fw, fx, fu
        else:
            if u < x:
                lower = u
            else:
                upper = u

            if fu <= fw or w == x:
                v, w = w, u
                fv, fw = fw, fu
            elif fu <= fv or v == x or v == w:
                v, fv = u, fu

    return LineSearchResult(
        step=x, value=fx, iterations=max_iterations, converged=False, bracket=bracket
    )
