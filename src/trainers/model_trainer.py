"""Gradient-based trainer for Optimisable models.

ModelTrainer owns one training session for one model. It provides:
- The objective/gradient oracle with evaluation counting
- Analytic or central-difference gradients
- Optional masking, so that only a subset of parameters is optimised
- Brent line minimisation along a caller-supplied direction
- A gradient check comparing analytic and numerical gradients
- A session summary

Outer drivers (steepest descent, conjugate gradients, quasi-Newton) choose
the search directions and call ``line_minimise`` repeatedly. The model's
parameters are mutated in place, so a model must not be shared between
concurrent trainers.
"""

from __future__ import annotations

from dataclasses import replace

import numpy as np

from core.logging import format_value, log
from core.protocols import Optimisable
from core.types import (
    EvaluationCounters,
    GradientCheckEntry,
    GradientCheckReport,
    History,
    LineSearchResult,
    Mask,
    ParamVector,
    StepMeta,
    StepResult,
    TrainerConfig,
)
from optim import line_search
from trainers.report import render_gradient_check, render_summary

__all__ = ["ModelTrainer"]


class ModelTrainer:
    """Train an Optimisable model by line minimisation.

    Example:
        >>> model = QuadraticModel(squared_distance_problem(np.array([1.0, 2.0, -1.0])))
        >>> trainer = ModelTrainer(model, TrainerConfig(display=False))
        >>> x = trainer.get_parameters()
        >>> result = trainer.line_minimise(x, -trainer.error_gradients(x))
        >>> trainer.set_parameters(x + result.step * -trainer.error_gradients(x))

    Attributes:
        model: The model being trained.
        config: Training options.
        algorithm_name: Name shown in the summary.
    """

    algorithm_name = "Line minimiser"

    def __init__(
        self,
        model: Optimisable,
        config: TrainerConfig | None = None,
        *,
        mask: Mask | None = None,
    ) -> None:
        """Initialize the trainer.

        Args:
            model: Model exposing objective, gradient and its parameter vector.
            config: Training options. Defaults to TrainerConfig().
            mask: Optional optimisation mask, see set_mask().
        """
        self.model = model
        self.config = config if config is not None else TrainerConfig()
        self._counters = EvaluationCounters()
        self._mask: Mask | None = None
        self._history = History()
        if mask is not None:
            self.set_mask(mask)

    # ------------------------------------------------------------------
    # Session state
    # ------------------------------------------------------------------

    @property
    def counters(self) -> EvaluationCounters:
        """Snapshot of the evaluation counters."""
        return replace(self._counters)

    @property
    def function_evaluations(self) -> int:
        return self._counters.function_evaluations

    @property
    def gradient_evaluations(self) -> int:
        return self._counters.gradient_evaluations

    @property
    def function_value(self) -> float:
        """Objective value reached by the most recent line minimisation."""
        return self._counters.function_value

    @property
    def history(self) -> History:
        """Line minimisations performed in this session."""
        return self._history

    # ------------------------------------------------------------------
    # Masking
    # ------------------------------------------------------------------

    @property
    def mask_set(self) -> bool:
        return self._mask is not None

    @property
    def mask(self) -> Mask | None:
        """Copy of the optimisation mask, or None if no mask is set."""
        return None if self._mask is None else self._mask.copy()

    @property
    def num_parameters(self) -> int:
        """Number of parameters being optimised."""
        if self._mask is None:
            return int(np.asarray(self.model.parameters_vector()).shape[0])
        return int(np.count_nonzero(self._mask))

    def set_mask(self, mask: Mask) -> None:
        """Restrict optimisation to the parameters where ``mask`` is True.

        The mask can be set once per trainer. Afterwards get_parameters()
        and set_parameters() work on the active subset only, in ascending
        index order.

        Args:
            mask: Boolean vector with one entry per model parameter.

        Raises:
            RuntimeError: If a mask has already been set.
            ValueError: If the mask is not 1D or its length differs from
                the model's parameter count.
        """
        if self._mask is not None:
            raise RuntimeError("Optimisation mask has already been set for this trainer")
        mask = np.array(mask, dtype=bool, copy=True)
        if mask.ndim != 1:
            raise ValueError(f"mask must be 1-dimensional, got ndim={mask.ndim}")
        self._check_mask_length(mask.shape[0])
        mask.flags.writeable = False
        self._mask = mask
        log(
            f"mask set: optimising {int(np.count_nonzero(mask))}/{mask.shape[0]} parameters",
            enabled=self.config.display,
        )

    def _check_mask_length(self, n: int) -> None:
        expected = int(np.asarray(self.model.parameters_vector()).shape[0])
        if n != expected:
            raise ValueError(f"Mask length mismatch: model has {expected} parameters, mask has {n}")

    def get_parameters(self) -> ParamVector:
        """Return the parameters being optimised.

        Returns:
            The full parameter vector, or only its masked-in entries.
        """
        p = np.array(self.model.parameters_vector(), dtype=np.float64, copy=True)
        if self._mask is None:
            return p
        self._check_mask_length(p.shape[0])
        return p[self._mask]

    def set_parameters(self, p: ParamVector) -> None:
        """Install parameters into the model.

        With a mask set, only the masked-in positions of the model's full
        parameter vector are overwritten.

        Args:
            p: Vector with one entry per optimised parameter.

        Raises:
            ValueError: If ``p`` has the wrong length.
        """
        p = np.asarray(p, dtype=np.float64)
        if self._mask is None:
            self.model.set_parameters_vector(p)
            return
        full = np.array(self.model.parameters_vector(), dtype=np.float64, copy=True)
        self._check_mask_length(full.shape[0])
        active = int(np.count_nonzero(self._mask))
        if p.shape != (active,):
            raise ValueError(f"Expected {active} masked parameters, got shape {p.shape}")
        full[self._mask] = p
        self.model.set_parameters_vector(full)

    def _restrict(self, g: ParamVector) -> ParamVector:
        g = np.asarray(g, dtype=np.float64)
        if self._mask is None:
            return g
        self._check_mask_length(g.shape[0])
        return g[self._mask]

    # ------------------------------------------------------------------
    # Objective / gradient oracle
    # ------------------------------------------------------------------

    def error_function(self, params: ParamVector) -> float:
        """Evaluate the objective at ``params``.

        Args:
            params: Optimised parameters (masked subset if a mask is set).

        Returns:
            The model's objective value.
        """
        self._counters.function_evaluations += 1
        self.set_parameters(params)
        return float(self.model.objective())

    def error_gradients(self, params: ParamVector) -> ParamVector:
        """Evaluate the gradient at ``params``.

        Uses the model's analytic gradient when ``config.analytic_gradients``
        is set and central differences otherwise. With a mask set, only the
        masked-in components are returned.
        """
        if not self.config.analytic_gradients:
            return self.numerical_gradients(params)
        self._counters.gradient_evaluations += 1
        self.set_parameters(params)
        return self._restrict(self.model.gradient())

    def numerical_gradients(self, params: ParamVector) -> ParamVector:
        """Central-difference gradient, two objective evaluations per component."""
        params = np.asarray(params, dtype=np.float64)
        self.set_parameters(params)
        g = np.array(
            [self.numerical_gradient(i, params) for i in range(params.shape[0])],
            dtype=np.float64,
        )
        self.set_parameters(params)
        return g

    def numerical_gradient(self, index: int, params: ParamVector) -> float:
        """Central-difference estimate of one gradient component.

        Args:
            index: Position in ``params`` to perturb.
            params: Optimised parameters.

        Returns:
            (f(params + eps e_i) - f(params - eps e_i)) / (2 eps)
        """
        params = np.asarray(params, dtype=np.float64)
        eps = self.config.epsilon

        x_new = params.copy()
        x_new[index] += eps
        fplus = self.error_function(x_new)

        x_new = params.copy()
        x_new[index] -= eps
        fminus = self.error_function(x_new)

        return 0.5 * ((fplus - fminus) / eps)

    # ------------------------------------------------------------------
    # Line search
    # ------------------------------------------------------------------

    def line_function(self, params: ParamVector, step: float, direction: ParamVector) -> float:
        """Objective at ``params + step * direction``.

        The model's parameters are restored afterwards.
        """
        x_old = self.get_parameters()
        f = self.error_function(params + step * direction)
        self.set_parameters(x_old)
        return f

    def line_minimise(
        self,
        params: ParamVector,
        direction: ParamVector,
        fa: float | None = None,
    ) -> LineSearchResult:
        """Minimise the objective along ``direction`` starting at ``params``.

        The minimum is bracketed from steps 0 and 1 and then refined with
        Brent's method. Reaching the iteration cap is not an error; the best
        step found is returned with ``converged=False``.

        Args:
            params: Starting point (optimised parameters).
            direction: Search direction, same length as ``params``.
            fa: Objective at ``params`` if already known.

        Returns:
            LineSearchResult; the model is left at ``params``.

        Raises:
            ValueError: If ``params`` and ``direction`` differ in shape.
        """
        params = np.asarray(params, dtype=np.float64)
        direction = np.asarray(direction, dtype=np.float64)
        if params.shape != direction.shape:
            raise ValueError(
                f"Shape mismatch: params {params.shape}, direction {direction.shape}"
            )

        f_evals = self._counters.function_evaluations
        g_evals = self._counters.gradient_evaluations

        if fa is None:
            fa = self.line_function(params, 0.0, direction)

        result = line_search.line_minimise(
            lambda step: self.line_function(params, step, direction),
            fa,
            tolerance=self.config.line_minimiser_parameter_tolerance,
            max_iterations=self.config.line_minimiser_iterations,
            bracket_max_iterations=self.config.bracket_max_iterations,
        )
        self._counters.function_value = result.value

        display = self.config.display
        if not result.bracket.bounded:
            log(
                f"bracket search stopped after {result.bracket.iterations} iterations "
                "without bounding a minimum",
                enabled=display,
            )
        if not result.converged:
            log(
                f"line minimiser reached {result.iterations} iterations without converging",
                enabled=display,
            )

        self._history.append(
            StepResult(
                loss=result.value,
                metrics={
                    "step": result.step,
                    "iterations": float(result.iterations),
                    "converged": float(result.converged),
                },
            ),
            StepMeta(
                num_function_evals=self._counters.function_evaluations - f_evals,
                num_grad_evals=self._counters.gradient_evaluations - g_evals,
            ),
        )
        log(
            f"line search {len(self._history)}: step={format_value(result.step)} "
            f"error={format_value(result.value)}",
            enabled=display,
        )
        return result

    # ------------------------------------------------------------------
    # Diagnostics
    # ------------------------------------------------------------------

    def check_gradient(self) -> GradientCheckReport:
        """Compare analytic and central-difference gradients at the current point.

        Masked-out parameters are reported with zero numeric and analytic
        values. Only the evaluation counters change; the model is left at
        its current parameters.

        Returns:
            GradientCheckReport with one entry per full parameter index.
        """
        x_old = self.get_parameters()
        g = np.asarray(self.model.gradient(), dtype=np.float64)
        if self._mask is not None:
            self._check_mask_length(g.shape[0])

        entries: list[GradientCheckEntry] = []
        pos = 0
        for i in range(g.shape[0]):
            if self._mask is not None and not self._mask[i]:
                entries.append(GradientCheckEntry(index=i, masked=True, numeric=0.0, analytic=0.0))
                continue
            index = pos if self._mask is not None else i
            delta = self.numerical_gradient(index, x_old)
            pos += 1
            entries.append(
                GradientCheckEntry(index=i, masked=False, numeric=delta, analytic=float(g[i]))
            )
        self.set_parameters(x_old)

        report = GradientCheckReport(entries=tuple(entries))
        if self.config.display:
            for line in render_gradient_check(report).splitlines():
                log(line, enabled=True)
        return report

    def preflight(self) -> GradientCheckReport | None:
        """Run the gradient check if ``config.gradient_check`` is set."""
        if not self.config.gradient_check:
            return None
        return self.check_gradient()

    def summary(self) -> str:
        """Return the formatted training summary."""
        return render_summary(self.algorithm_name, self.config, self._counters)
