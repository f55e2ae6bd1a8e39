from __future__ import annotations

import numpy as np
import pytest

from core.protocols import Optimisable
from models.numpy_vector import FunctionModel, NumpyVectorModel


def test_numpy_vector_rejects_wrong_shape() -> None:
    model = NumpyVectorModel(np.zeros(3))
    with pytest.raises(ValueError):
        model.set_parameters_vector(np.zeros(4))


def test_numpy_vector_rejects_matrix() -> None:
    with pytest.raises(ValueError, match="1-dimensional"):
        NumpyVectorModel(np.zeros((2, 2)))


def test_numpy_vector_copy_semantics() -> None:
    x0 = np.array([1.0, 2.0])
    model = NumpyVectorModel(x0)
    x0[0] = 100.0

    params = model.parameters_vector()
    params[1] = -5.0

    np.testing.assert_array_equal(model.parameters_vector(), [1.0, 2.0])
    assert model.dim == 2


def test_numpy_vector_accepts_lists_and_ints() -> None:
    model = NumpyVectorModel(np.array([1, 2, 3]))
    model.set_parameters_vector([4, 5, 6])  # type: ignore[arg-type]

    assert model.parameters_vector().dtype == np.float64
    np.testing.assert_array_equal(model.parameters_vector(), [4.0, 5.0, 6.0])


def test_function_model_is_optimisable() -> None:
    model = FunctionModel([3.0, -1.0], lambda x: float(x @ x), lambda x: 2.0 * x)

    assert isinstance(model, Optimisable)
    assert model.objective() == 10.0
    np.testing.assert_array_equal(model.gradient(), [6.0, -2.0])


def test_function_model_callables_cannot_mutate_state() -> None:
    def objective(x: np.ndarray) -> float:
        x[:] = 0.0
        return 1.0

    model = FunctionModel([1.0, 2.0], objective, lambda x: x)
    model.objective()

    np.testing.assert_array_equal(model.parameters_vector(), [1.0, 2.0])


def test_function_model_rejects_bad_gradient_shape() -> None:
    model = FunctionModel([1.0, 2.0], lambda x: 0.0, lambda x: np.zeros(3))
    with pytest.raises(ValueError, match="gradient_fn returned shape"):
        model.gradient()
