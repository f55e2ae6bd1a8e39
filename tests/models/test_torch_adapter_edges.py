from __future__ import annotations

import numpy as np
import pytest

from core.protocols import Optimisable
from core.types import TrainerConfig
from models import torch_adapter as torch_adapter_module
from trainers.model_trainer import ModelTrainer

torch = pytest.importorskip("torch")


def _regression_adapter(seed: int = 0) -> tuple[torch_adapter_module.TorchModelAdapter, np.ndarray, np.ndarray]:
    gen = torch.Generator().manual_seed(seed)
    X = torch.randn(16, 2, generator=gen, dtype=torch.float64)
    y = torch.randn(16, 1, generator=gen, dtype=torch.float64)
    module = torch.nn.Linear(2, 1).double()
    adapter = torch_adapter_module.TorchModelAdapter(module, lambda m: ((m(X) - y) ** 2).mean())
    return adapter, X.numpy(), y.numpy()


def test_torch_adapter_check_torch_unavailable(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(torch_adapter_module, "TORCH_AVAILABLE", False)
    with pytest.raises(ImportError):
        torch_adapter_module._check_torch()


def test_torch_adapter_is_optimisable() -> None:
    adapter, _X, _y = _regression_adapter()
    assert isinstance(adapter, Optimisable)
    assert adapter.dim == 3


def test_torch_adapter_set_params_wrong_shape() -> None:
    adapter, _X, _y = _regression_adapter()
    with pytest.raises(ValueError):
        adapter.set_parameters_vector(np.zeros(adapter.dim + 1))


def test_torch_adapter_parameter_round_trip() -> None:
    adapter, _X, _y = _regression_adapter()
    v = np.array([0.5, -1.5, 2.0])

    adapter.set_parameters_vector(v)

    np.testing.assert_allclose(adapter.parameters_vector(), v)


def test_torch_adapter_gradient_matches_closed_form() -> None:
    adapter, X, y = _regression_adapter()
    v = np.array([0.5, -1.5, 2.0])
    adapter.set_parameters_vector(v)

    residual = X @ v[:2] + v[2] - y[:, 0]
    expected = np.concatenate([2.0 * X.T @ residual, [2.0 * residual.sum()]]) / X.shape[0]

    np.testing.assert_allclose(adapter.gradient(), expected, atol=1e-10)
    assert adapter.objective() == pytest.approx(float(np.mean(residual**2)))


def test_torch_adapter_gradient_check_and_line_search() -> None:
    adapter, _X, _y = _regression_adapter(seed=3)
    trainer = ModelTrainer(adapter, TrainerConfig(display=False, line_minimiser_iterations=50))

    assert trainer.check_gradient().passed(1e-6)

    x = trainer.get_parameters()
    fa = trainer.error_function(x)
    direction = -trainer.error_gradients(x)
    result = trainer.line_minimise(x, direction, fa)

    assert result.value < fa
