"""Models whose parameters are a single numpy vector.

NumpyVectorModel only holds the parameters; subclasses (see ``tasks``) add
``objective`` and ``gradient`` to become Optimisable. FunctionModel does the
same for a pair of plain callables of the parameter vector.
"""

from __future__ import annotations

from collections.abc import Callable

import numpy as np

from core.types import ParamVector

__all__ = ["NumpyVectorModel", "FunctionModel"]


class NumpyVectorModel:
    """Parameter holder backed by a float64 vector.

    The vector is copied on the way in and on the way out, so callers can
    never alias the model's state.

    Example:
        >>> model = NumpyVectorModel([1, 2, 3])
        >>> model.dim
        3
        >>> model.set_parameters_vector(np.zeros(3))
        >>> model.parameters_vector()
        array([0., 0., 0.])
    """

    def __init__(self, x: ParamVector) -> None:
        """
        Args:
            x: Initial parameters, anything convertible to a 1D array.

        Raises:
            ValueError: If x is not 1-dimensional.
        """
        x = np.asarray(x)
        if x.ndim != 1:
            raise ValueError(f"x must be 1-dimensional, got ndim={x.ndim}")
        self._x: ParamVector = x.astype(np.float64, copy=True)

    @property
    def dim(self) -> int:
        return int(self._x.shape[0])

    def parameters_vector(self) -> ParamVector:
        return self._x.copy()

    def set_parameters_vector(self, v: ParamVector) -> None:
        """Replace the parameters.

        Raises:
            ValueError: If v does not have shape (dim,).
        """
        v = np.asarray(v)
        if v.shape != self._x.shape:
            raise ValueError(f"Shape mismatch: expected {self._x.shape}, got {v.shape}")
        self._x = v.astype(np.float64, copy=True)


class FunctionModel(NumpyVectorModel):
    """Optimisable wrapper around ``objective_fn(x)`` and ``gradient_fn(x)``.

    Example:
        >>> model = FunctionModel([3.0], lambda x: float(x @ x), lambda x: 2.0 * x)
        >>> model.objective()
        9.0
    """

    def __init__(
        self,
        x: ParamVector,
        objective_fn: Callable[[ParamVector], float],
        gradient_fn: Callable[[ParamVector], ParamVector],
    ) -> None:
        super().__init__(x)
        self.objective_fn = objective_fn
        self.gradient_fn = gradient_fn

    def objective(self) -> float:
        return float(self.objective_fn(self._x.copy()))

    def gradient(self) -> ParamVector:
        g = np.asarray(self.gradient_fn(self._x.copy()), dtype=np.float64)
        if g.shape != self._x.shape:
            raise ValueError(f"gradient_fn returned shape {g.shape}, expected {self._x.shape}")
        return g
