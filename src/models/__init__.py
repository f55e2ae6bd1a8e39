"""Models module for the model trainer.

This package contains parameter containers and adapters used to build
Optimisable models.

Available models:
- NumpyVectorModel: Simple parameter vector (base for numpy objectives)
- FunctionModel: Objective and gradient given as callables of the vector
- TorchModelAdapter: Wraps a PyTorch module and loss (requires torch)
"""

from __future__ import annotations

from models.numpy_vector import FunctionModel, NumpyVectorModel
from models.torch_adapter import TORCH_AVAILABLE, TorchModelAdapter

__all__ = [
    "NumpyVectorModel",
    "FunctionModel",
    "TorchModelAdapter",
    "TORCH_AVAILABLE",
]
