import math

import numpy as np
import pytest

from nudgenet.core.activations import sigmoid, sigmoid_derivative
from nudgenet.testing import assert_float_eq


def test_sigmoid_known_values():
    assert sigmoid(0.0) == 0.5
    assert_float_eq(sigmoid(1.5), 0.8175744761936437)
    assert_float_eq(sigmoid(1.0), 0.7310585786300049)


def test_sigmoid_derivative_known_values():
    assert sigmoid_derivative(0.0) == 0.25
    assert_float_eq(sigmoid_derivative(-1.8), 0.12172934028708539)


@pytest.mark.parametrize("x", [-700.0, -30.0, -1.0, -1e-9, 1e-9, 2.0, 30.0])
def test_sigmoid_open_unit_interval_for_moderate_inputs(x):
    value = sigmoid(x)
    assert 0.0 < value < 1.0
    assert_float_eq(sigmoid_derivative(x), value * (1.0 - value))


def test_sigmoid_extremes_do_not_overflow():
    assert sigmoid(math.inf) == 1.0
    assert sigmoid(-math.inf) == 0.0
    assert sigmoid(-1e6) == 0.0
    assert sigmoid(1e6) == 1.0
    assert sigmoid_derivative(math.inf) == 0.0
    assert sigmoid_derivative(-math.inf) == 0.0


def test_nan_propagates():
    assert math.isnan(sigmoid(math.nan))
    assert math.isnan(sigmoid_derivative(math.nan))


def test_derivative_peaks_at_zero():
    xs = np.linspace(-5.0, 5.0, 101)
    derivs = sigmoid_derivative(xs)
    assert np.argmax(derivs) == 50
    assert derivs.max() == 0.25


def test_array_input_matches_scalar_path():
    xs = np.array([-np.inf, -3.0, 0.0, 0.5, np.inf, np.nan])
    out = sigmoid(xs)
    assert out.dtype == np.float64
    assert out[0] == 0.0 and out[4] == 1.0
    assert np.isnan(out[5])
    for x, y in zip(xs[1:4], out[1:4]):
        assert_float_eq(y, sigmoid(float(x)))


def test_float32_arrays_keep_their_dtype():
    xs = np.array([0.0, 1.5], dtype=np.float32)
    out = sigmoid(xs)
    assert out.dtype == np.float32
    assert_float_eq(out[1], np.float32(0.8175744))
    assert sigmoid(np.array([np.inf, -np.inf], dtype=np.float32)).tolist() == [1.0, 0.0]
