"""Adapter exposing a PyTorch model as an Optimisable.

This module provides TorchModelAdapter which wraps a torch.nn.Module together
with a loss closure, and provides the Optimisable protocol interface
(objective, gradient, parameters_vector, set_parameters_vector). Gradients
come from autograd.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import Any

import numpy as np

from core.types import ParamVector

try:
    import torch
    import torch.nn as nn

    TORCH_AVAILABLE = True
except ImportError:
    TORCH_AVAILABLE = False

__all__ = ["TorchModelAdapter", "TORCH_AVAILABLE"]


def _check_torch() -> None:
    """Raise ImportError if torch is not available."""
    if not TORCH_AVAILABLE:
        raise ImportError("PyTorch is required for TorchModelAdapter. Install with: pip install torch")


class TorchModelAdapter:
    """Adapter wrapping a PyTorch model and its loss for the trainer.

    The parameter order is stable: iterate module.parameters() once and cache
    shapes/slices for consistent flattening/unflattening.

    Attributes:
        module: The wrapped PyTorch module.
        loss_fn: Callable mapping the module to a scalar loss tensor.
        device: Device where the model lives.

    Example:
        >>> module = torch.nn.Linear(2, 1).double()
        >>> X = torch.randn(8, 2, dtype=torch.float64)
        >>> y = torch.randn(8, 1, dtype=torch.float64)
        >>> adapter = TorchModelAdapter(module, lambda m: ((m(X) - y) ** 2).mean())
        >>> adapter.dim
        3
    """

    def __init__(
        self,
        module: nn.Module,
        loss_fn: Callable[[Any], Any],
        device: str = "cpu",
    ) -> None:
        """Initialize the adapter.

        Args:
            module: PyTorch model to wrap.
            loss_fn: Returns the scalar loss tensor for the module's current parameters.
            device: Device to use ("cpu" or "cuda").
        """
        _check_torch()
        self.module = module.to(device)
        self.loss_fn = loss_fn
        self.device = device

        # Cache parameter metadata for stable ordering
        self._param_shapes: list[tuple[int, ...]] = []
        self._param_slices: list[tuple[int, int]] = []

        offset = 0
        for param in self.module.parameters():
            numel = param.numel()
            self._param_shapes.append(tuple(param.shape))
            self._param_slices.append((offset, offset + numel))
            offset += numel

        self._total_params = offset

    @property
    def dim(self) -> int:
        """Total number of parameters."""
        return self._total_params

    def objective(self) -> float:
        """Evaluate the loss without building a graph."""
        with torch.no_grad():
            return float(self.loss_fn(self.module))

    def gradient(self) -> ParamVector:
        """Return the autograd gradient of the loss as a flat float64 array.

        Parameters the loss does not depend on get zero gradient.
        """
        self.module.zero_grad()
        loss = self.loss_fn(self.module)
        loss.backward()
        grads_list: list[np.ndarray] = []
        for param in self.module.parameters():
            if param.grad is None:
                grads_list.append(np.zeros(param.numel()))
            else:
                grads_list.append(param.grad.detach().cpu().numpy().flatten())
        if not grads_list:
            return np.zeros(0)
        return np.concatenate(grads_list).astype(np.float64)

    def parameters_vector(self) -> ParamVector:
        """Return all parameters as a flat numpy array (float64).

        Returns:
            1D numpy array of shape (dim,) containing all model parameters.
        """
        params_list: list[np.ndarray] = []
        for param in self.module.parameters():
            params_list.append(param.detach().cpu().numpy().flatten())
        if not params_list:
            return np.zeros(0)
        return np.concatenate(params_list).astype(np.float64)

    def set_parameters_vector(self, v: ParamVector) -> None:
        """Load parameters from a flat numpy array.

        Args:
            v: 1D numpy array of shape (dim,) containing parameter values.

        Raises:
            ValueError: If v has wrong shape.
        """
        v = np.asarray(v, dtype=np.float64)
        if v.shape != (self._total_params,):
            raise ValueError(f"Expected shape ({self._total_params},), got {v.shape}")

        with torch.no_grad():
            for i, param in enumerate(self.module.parameters()):
                start, end = self._param_slices[i]
                param_data = np.ascontiguousarray(v[start:end].reshape(self._param_shapes[i]))
                param.copy_(torch.from_numpy(param_data).to(self.device))
