"""Protocol definitions for the model trainer.

This module contains Protocol classes defining interfaces for:
- Optimisable models: anything exposing an objective, its gradient and a
  flat, mutable parameter vector
- Line functions: scalar functions of a step length along a direction
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from core.types import ParamVector

__all__ = [
    "Optimisable",
    "LineFunction",
]


@runtime_checkable
class Optimisable(Protocol):
    """Protocol for models a ModelTrainer can train.

    The trainer never keeps its own copy of the parameters; every evaluation
    installs a vector with ``set_parameters_vector`` and then queries the model.

    Contract:
    - ``gradient()`` has the same length as ``parameters_vector()``
    - ``set_parameters_vector(v)`` raises ValueError if ``v`` has the wrong length
    """

    def objective(self) -> float:
        """Return the objective at the current parameters."""
        ...

    def gradient(self) -> ParamVector:
        """Return the gradient of the objective at the current parameters.

        Returns:
            A 1D numpy array with one entry per parameter.
        """
        ...

    def parameters_vector(self) -> ParamVector:
        """Return model parameters as a flat vector.

        Returns:
            A 1D numpy array containing all model parameters.
        """
        ...

    def set_parameters_vector(self, v: ParamVector) -> None:
        """Set model parameters from a flat vector.

        Args:
            v: A 1D numpy array containing all model parameters.
        """
        ...


@runtime_checkable
class LineFunction(Protocol):
    """Scalar objective as a function of the step length along a direction."""

    def __call__(self, step: float) -> float: ...


# Re-export types that protocols depend on for convenience
__all__ += ["ParamVector"]
