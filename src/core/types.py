"""Core type definitions for the model trainer.

This module contains:
- Type aliases for parameter vectors and optimisation masks
- Data containers for brackets, line-search results and gradient checks
- The trainer configuration dataclass and evaluation counters
- A History container recording every line minimisation of a session
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field

import numpy as np

__all__ = [
    "ParamVector",
    "Mask",
    "Bracket",
    "LineSearchResult",
    "GradientCheckEntry",
    "GradientCheckReport",
    "TrainerConfig",
    "EvaluationCounters",
    "StepResult",
    "StepMeta",
    "History",
]

# Type alias for parameter vectors (model parameters flattened)
ParamVector = np.ndarray

# Boolean selector over the full parameter vector, True = optimise
Mask = np.ndarray


@dataclass(frozen=True, slots=True)
class Bracket:
    """Three step lengths bounding a local minimum along a direction.

    Attributes:
        lower: Smallest step of the bracket.
        mid: Interior step with the lowest known objective value.
        upper: Largest step of the bracket.
        iterations: Number of refinement iterations the bracketer used.
        bounded: False if the bracketer stopped on its iteration cap.
    """

    lower: float
    mid: float
    upper: float
    iterations: int = 0
    bounded: bool = True

    @property
    def width(self) -> float:
        """Distance between the outer steps."""
        return self.upper - self.lower


@dataclass(frozen=True, slots=True)
class LineSearchResult:
    """Outcome of a single line minimisation.

    Attributes:
        step: Best step length found along the direction.
        value: Objective value at ``step``.
        iterations: Number of Brent iterations performed.
        converged: True if the tolerance test was met before the cap.
        bracket: Bracket the search started from.
    """

    step: float
    value: float
    iterations: int
    converged: bool
    bracket: Bracket


@dataclass(frozen=True, slots=True)
class GradientCheckEntry:
    """One row of a gradient check.

    Masked-out parameters are reported with zero numeric and analytic values.
    """

    index: int
    masked: bool
    numeric: float
    analytic: float

    @property
    def difference(self) -> float:
        return abs(self.numeric - self.analytic)


@dataclass(frozen=True)
class GradientCheckReport:
    """Ordered gradient-check rows, one per full parameter index."""

    entries: tuple[GradientCheckEntry, ...] = ()

    def __len__(self) -> int:
        return len(self.entries)

    @property
    def max_difference(self) -> float:
        """Largest absolute difference over all rows (0.0 when empty)."""
        if not self.entries:
            return 0.0
        return max(entry.difference for entry in self.entries)

    def passed(self, tolerance: float) -> bool:
        """Return True if every row agrees to within ``tolerance``."""
        return self.max_difference <= tolerance


@dataclass(frozen=True, slots=True)
class TrainerConfig:
    """Training options, fixed for the lifetime of a trainer.

    Attributes:
        error_tolerance: Objective tolerance used by outer drivers.
        parameter_tolerance: Parameter tolerance used by outer drivers.
        line_minimiser_iterations: Iteration cap of the Brent line search.
        line_minimiser_parameter_tolerance: Convergence tolerance of the line search.
        epsilon: Perturbation for central-difference gradients.
        bracket_max_iterations: Iteration cap of each bracketing loop.
        display: Print progress lines.
        gradient_check: Run a gradient check in ``ModelTrainer.preflight``.
        analytic_gradients: Use the model gradient instead of finite differences.
    """

    error_tolerance: float = 1.0e-6
    parameter_tolerance: float = 1.0e-4
    line_minimiser_iterations: int = 10
    line_minimiser_parameter_tolerance: float = 1.0e-4
    epsilon: float = 1.0e-6
    bracket_max_iterations: int = 100
    display: bool = True
    gradient_check: bool = True
    analytic_gradients: bool = True

    def __post_init__(self) -> None:
        """Validate tolerances and iteration caps."""
        for name in (
            "error_tolerance",
            "parameter_tolerance",
            "line_minimiser_parameter_tolerance",
            "epsilon",
        ):
            value = getattr(self, name)
            if not value > 0:
                raise ValueError(f"{name} must be positive, got {value}")
        for name in ("line_minimiser_iterations", "bracket_max_iterations"):
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, int) or value < 1:
                raise ValueError(f"{name} must be an integer >= 1, got {value}")


@dataclass
class EvaluationCounters:
    """Evaluation bookkeeping for one trainer session.

    Attributes:
        function_evaluations: Number of objective evaluations.
        gradient_evaluations: Number of analytic gradient evaluations.
        function_value: Objective value reached by the last line minimisation.
    """

    function_evaluations: int = 0
    gradient_evaluations: int = 0
    function_value: float = 0.0


@dataclass(frozen=True, slots=True)
class StepResult:
    """Result of a single line minimisation within a session.

    Attributes:
        loss: The objective value reached.
        metrics: Additional values (step, iterations, converged).
    """

    loss: float
    metrics: Mapping[str, float] = field(default_factory=dict)


@dataclass(frozen=True, slots=True)
class StepMeta:
    """Evaluation budget consumed by a single line minimisation.

    Attributes:
        num_function_evals: Objective evaluations used.
        num_grad_evals: Gradient evaluations used.
    """

    num_function_evals: int = 0
    num_grad_evals: int = 0


@dataclass
class History:
    """Container for the line minimisations of a training session.

    Example:
        >>> history = History()
        >>> history.append(StepResult(loss=1.0, metrics={"step": 0.5}))
        >>> history.append(StepResult(loss=0.5, metrics={"step": 0.25}))
        >>> history.losses()
        [1.0, 0.5]
    """

    steps: list[tuple[StepResult, StepMeta]] = field(default_factory=list)

    def __len__(self) -> int:
        """Return the number of recorded line minimisations."""
        return len(self.steps)

    def append(self, record: StepResult, meta: StepMeta | None = None) -> None:
        """Append a record to the history.

        Args:
            record: Result of the line minimisation.
            meta: Optional evaluation budget. Defaults to empty StepMeta.
        """
        if meta is None:
            meta = StepMeta()
        self.steps.append((record, meta))

    def last(self) -> StepResult:
        """Return the most recent record.

        Raises:
            IndexError: If history is empty.
        """
        return self.steps[-1][0]

    def losses(self) -> list[float]:
        """Return the objective values in recording order."""
        return [record.loss for record, _meta in self.steps]

    def metric(self, key: str) -> list[float]:
        """Return one metric across all records.

        Raises:
            KeyError: If a record lacks the metric.
        """
        return [record.metrics[key] for record, _meta in self.steps]

    def total_function_evals(self) -> int:
        """Return total objective evaluations across all records."""
        return sum(meta.num_function_evals for _record, meta in self.steps)

    def total_grad_evals(self) -> int:
        """Return total gradient evaluations across all records."""
        return sum(meta.num_grad_evals for _record, meta in self.steps)
