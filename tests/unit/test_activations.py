import math

import pytest

from neuroplay.core.activations import drelu, dsigmoid, relu, sigmoid


def test_sigmoid_midpoint():
    assert sigmoid(0.0) == 0.5


@pytest.mark.parametrize("x", [-20.0, -3.5, -0.1, 0.1, 2.0, 20.0])
def test_sigmoid_strictly_inside_unit_interval(x):
    y = sigmoid(x)
    assert 0.0 < y < 1.0


def test_sigmoid_handles_large_negative_input():
    assert sigmoid(-1000.0) == 0.0
    assert sigmoid(1000.0) == 1.0


def test_sigmoid_is_symmetric():
    assert sigmoid(1.7) == pytest.approx(1.0 - sigmoid(-1.7))


@pytest.mark.parametrize("y", [0.0, 0.25, 0.5, 0.9, 1.0])
def test_dsigmoid_uses_activated_output(y):
    assert dsigmoid(y) == y * (1 - y)


def test_dsigmoid_matches_numeric_derivative():
    x, h = 0.3, 1e-6
    numeric = (sigmoid(x + h) - sigmoid(x - h)) / (2 * h)
    assert dsigmoid(sigmoid(x)) == pytest.approx(numeric, rel=1e-6)


def test_relu_pair():
    assert relu(-2.0) == 0.0
    assert relu(1.5) == 1.5
    assert drelu(-0.1) == 0.0
    assert drelu(0.1) == 1.0


def test_sigmoid_propagates_nan():
    assert math.isnan(sigmoid(math.nan))
