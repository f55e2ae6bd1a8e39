"""Synthetic quadratic objectives.

This module provides convex quadratic objectives for exercising the trainer:
    f(x) = 0.5 * x^T A x + b^T x + c

where A is symmetric positive definite (SPD), b is a vector and c a constant.

Quadratics are the primary sanity check for line searches and gradients:
- They have a unique global minimum at x* = -A^{-1} b
- Gradients are exact: ∇f(x) = Ax + b
- Central differences are exact up to rounding
"""

from __future__ import annotations

from dataclasses import dataclass

import numpy as np

from core.types import ParamVector
from models.numpy_vector import NumpyVectorModel

__all__ = [
    "QuadraticProblem",
    "QuadraticModel",
    "make_spd_quadratic",
    "squared_distance_problem",
]


@dataclass(frozen=True)
class QuadraticProblem:
    """A convex quadratic optimization problem.

    Defines the function:
        f(x) = 0.5 * x^T A x + b^T x + c

    Attributes:
        A: Symmetric positive definite matrix of shape (d, d).
        b: Linear term vector of shape (d,).
        c: Constant offset.

    Example:
        >>> A = np.array([[2.0, 0.0], [0.0, 1.0]])
        >>> b = np.array([1.0, -1.0])
        >>> problem = QuadraticProblem(A, b)
        >>> x = np.array([0.0, 0.0])
        >>> print(problem.loss(x))
        0.0
        >>> print(problem.grad(x))
        [ 1. -1.]
    """

    A: np.ndarray
    b: np.ndarray
    c: float = 0.0

    def __post_init__(self) -> None:
        """Validate that A is SPD and dimensions are consistent."""
        if self.A.ndim != 2:
            raise ValueError(f"A must be 2D, got ndim={self.A.ndim}")
        if self.A.shape[0] != self.A.shape[1]:
            raise ValueError(f"A must be square, got shape {self.A.shape}")
        if self.b.ndim != 1:
            raise ValueError(f"b must be 1D, got ndim={self.b.ndim}")
        if self.b.shape[0] != self.A.shape[0]:
            raise ValueError(
                f"Dimension mismatch: A is {self.A.shape[0]}x{self.A.shape[0]}, "
                f"b has length {self.b.shape[0]}"
            )

        if not np.allclose(self.A, self.A.T, rtol=1e-10, atol=1e-10):
            raise ValueError("A must be symmetric")

        min_eig = float(np.linalg.eigvalsh(self.A).min())
        if min_eig <= 0:
            raise ValueError(f"A must be positive definite, but has min eigenvalue {min_eig}")

    @property
    def dim(self) -> int:
        """Dimensionality of the problem."""
        return int(self.A.shape[0])

    def loss(self, x: ParamVector) -> float:
        """Compute f(x) = 0.5 * x^T A x + b^T x + c."""
        return float(0.5 * x @ self.A @ x + self.b @ x + self.c)

    def grad(self, x: ParamVector) -> ParamVector:
        """Compute ∇f(x) = Ax + b."""
        return np.asarray(self.A @ x + self.b, dtype=np.float64)

    def x_star(self) -> ParamVector:
        """Solve Ax* + b = 0 for the optimal solution."""
        return np.linalg.solve(self.A, -self.b)


def make_spd_quadratic(
    *,
    dim: int,
    rng: np.random.Generator,
    cond: float = 10.0,
) -> QuadraticProblem:
    """Generate a random SPD quadratic problem with controlled condition number.

    Creates a symmetric positive definite matrix A with eigenvalues
    uniformly spaced between 1 and `cond`, and a random vector b.

    Args:
        dim: Dimensionality of the problem.
        rng: Random number generator for reproducibility.
        cond: Condition number of A. Must be >= 1. Default is 10.0.

    Returns:
        A QuadraticProblem with the generated A and b.

    Raises:
        ValueError: If dim < 1 or cond < 1.
    """
    if dim < 1:
        raise ValueError(f"dim must be >= 1, got {dim}")
    if cond < 1.0:
        raise ValueError(f"cond must be >= 1, got {cond}")

    Q, _ = np.linalg.qr(rng.standard_normal((dim, dim)))

    if dim == 1:
        eigenvalues = np.array([1.0])
    else:
        eigenvalues = np.linspace(1.0, cond, dim)

    A = Q @ np.diag(eigenvalues) @ Q.T
    # Ensure exact symmetry (numerical errors can break this)
    A = (A + A.T) / 2.0

    b = rng.standard_normal(dim).astype(np.float64)

    return QuadraticProblem(A=A, b=b)


def squared_distance_problem(target: ParamVector) -> QuadraticProblem:
    """Return the quadratic f(x) = sum((x_i - target_i)^2).

    Expanded as 0.5 * x^T (2I) x - 2 target^T x + target^T target, so the
    minimum value is exactly 0 at x = target.
    """
    target = np.asarray(target, dtype=np.float64)
    if target.ndim != 1:
        raise ValueError(f"target must be 1D, got ndim={target.ndim}")
    dim = target.shape[0]
    return QuadraticProblem(
        A=2.0 * np.eye(dim),
        b=-2.0 * target,
        c=float(target @ target),
    )


class QuadraticModel(NumpyVectorModel):
    """Parameter vector whose objective is a QuadraticProblem.

    Satisfies the Optimisable protocol.

    Example:
        >>> model = QuadraticModel(squared_distance_problem(np.array([1.0, 2.0])))
        >>> model.objective()
        5.0
    """

    def __init__(self, problem: QuadraticProblem, x0: ParamVector | None = None) -> None:
        if x0 is None:
            x0 = np.zeros(problem.dim)
        super().__init__(x0)
        if self.dim != problem.dim:
            raise ValueError(f"x0 has length {self.dim}, problem has dim {problem.dim}")
        self.problem = problem

    def objective(self) -> float:
        return self.problem.loss(self._x)

    def gradient(self) -> ParamVector:
        return self.problem.grad(self._x)
