import math

import numpy as np
import pytest

from neuroplay.core.errors import DimensionMismatch, InvalidDimension
from neuroplay.core.matrix import Matrix


def _random(rows, cols, seed=0):
    return Matrix(rows, cols).randomize(np.random.default_rng(seed))


def test_construct_is_zero_filled():
    m = Matrix(2, 3)
    assert m.shape == (2, 3)
    assert m.to_vector() == [0.0] * 6
    assert m.data.dtype == np.float64


@pytest.mark.parametrize("rows, cols", [(-1, 2), (2, -3), (1.5, 2)])
def test_construct_rejects_bad_dimensions(rows, cols):
    with pytest.raises(InvalidDimension):
        Matrix(rows, cols)


def test_zero_sized_matrix_is_allowed():
    m = Matrix(0, 4)
    assert m.to_vector() == []
    assert Matrix.transpose(m).shape == (4, 0)


def test_vector_round_trip_is_row_major():
    col = Matrix.from_vector([1.0, 2.0, 3.0])
    assert col.shape == (3, 1)
    grid = Matrix.from_rows([[1, 2], [3, 4]])
    assert grid.to_vector() == [1.0, 2.0, 3.0, 4.0]


@pytest.mark.parametrize("values", [[[1, 2], [3, 4]], 3.0])
def test_from_vector_rejects_non_flat_input(values):
    with pytest.raises(InvalidDimension):
        Matrix.from_vector(values)


def test_from_rows_rejects_ragged_input():
    with pytest.raises(InvalidDimension):
        Matrix.from_rows([[1, 2], [3]])


def test_randomize_fills_unit_interval_and_chains():
    m = Matrix(10, 10)
    out = m.randomize(np.random.default_rng(3))
    assert out is m
    assert np.all(m.data >= -1.0) and np.all(m.data <= 1.0)
    assert len(set(m.to_vector())) > 1


def test_transpose_twice_is_identity():
    a = _random(3, 5)
    assert Matrix.transpose(Matrix.transpose(a)) == a


def test_multiply_by_identity_returns_equal_matrix():
    a = _random(4, 3, seed=1)
    assert Matrix.multiply(a, Matrix.identity(3)) == a


def test_multiply_sum_of_products():
    a = Matrix.from_rows([[1, 2, 3], [4, 5, 6]])
    b = Matrix.from_rows([[7, 8], [9, 10], [11, 12]])
    product = Matrix.multiply(a, b)
    assert product.shape == (2, 2)
    assert product.to_vector() == [58.0, 64.0, 139.0, 154.0]


def test_multiply_rejects_incompatible_shapes():
    with pytest.raises(DimensionMismatch):
        Matrix.multiply(Matrix(2, 3), Matrix(2, 3))


def test_add_and_subtract_require_identical_shapes():
    with pytest.raises(DimensionMismatch):
        Matrix(2, 2).add(Matrix(2, 1))
    with pytest.raises(DimensionMismatch):
        Matrix.subtract(Matrix(1, 2), Matrix(2, 1))
    with pytest.raises(DimensionMismatch):
        Matrix.hadamard(Matrix(1, 2), Matrix(1, 3))


def test_add_is_in_place_and_subtract_is_not():
    a = Matrix.from_rows([[1, 2]])
    b = Matrix.from_rows([[10, 20]])
    diff = Matrix.subtract(b, a)
    assert diff.to_vector() == [9.0, 18.0]
    assert b.to_vector() == [10.0, 20.0]
    assert a.add(b) is a
    assert a.to_vector() == [11.0, 22.0]


def test_scale_in_place():
    m = Matrix.from_rows([[1, -2]])
    assert m.scale(0.5) is m
    assert m.to_vector() == [0.5, -1.0]


def test_map_receives_indices():
    m = Matrix(2, 3).map(lambda v, i, j: 10 * i + j)
    assert m.to_vector() == [0.0, 1.0, 2.0, 10.0, 11.0, 12.0]


def test_static_map_leaves_source_untouched():
    src = Matrix.from_rows([[1, 2], [3, 4]])
    doubled = Matrix.mapped(src, lambda v, i, j: 2 * v)
    assert doubled.to_vector() == [2.0, 4.0, 6.0, 8.0]
    assert src.to_vector() == [1.0, 2.0, 3.0, 4.0]


def test_results_never_alias_inputs():
    a = _random(2, 2, seed=4)
    b = _random(2, 2, seed=5)
    outputs = [
        Matrix.multiply(a, b),
        Matrix.subtract(a, b),
        Matrix.transpose(a),
        Matrix.mapped(a, lambda v, i, j: v),
        a.copy(),
    ]
    for out in outputs:
        assert not np.shares_memory(out.data, a.data)
        assert not np.shares_memory(out.data, b.data)

    clone = a.copy()
    clone.data[0, 0] = 99.0
    assert a.data[0, 0] != 99.0


def test_nan_propagates_without_error():
    a = Matrix.from_rows([[math.nan, 1.0]])
    b = Matrix.from_rows([[1.0], [1.0]])
    out = Matrix.multiply(a, b)
    assert math.isnan(out.data[0, 0])
