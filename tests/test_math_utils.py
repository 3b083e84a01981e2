import numpy as np
import pytest

from utils.math_utils import find_degeneracy, from_homogeneous, to_homogeneous


def test_to_homogeneous_appends_ones():
    np.testing.assert_array_equal(to_homogeneous([[1, 2], [3, 4]]), [[1, 2, 1], [3, 4, 1]])


def test_from_homogeneous_divides_by_w():
    np.testing.assert_allclose(from_homogeneous([[2, 4, 2], [3, 6, -3]]), [[1, 2], [-1, -2]])


def test_from_homogeneous_rejects_zero_w():
    with pytest.raises(ValueError):
        from_homogeneous([[1, 1, 0]])


def test_general_position():
    assert find_degeneracy([[0, 0], [1, 0], [0, 1], [1, 1]]) is None


def test_general_position_at_pixel_scale():
    assert find_degeneracy([[559, 529], [2041, 349], [573, 1733], [2053, 1887]]) is None


@pytest.mark.parametrize("points,expected", [
    ([[0, 0], [1, 1], [2, 2], [0, 1]], "collinear"),
    ([[0, 0], [1000, 0], [2000, 0], [0, 500]], "collinear"),
    ([[4, 4], [1, 0], [4, 4], [0, 1]], "coincide"),
])
def test_degenerate_sets(points, expected):
    assert expected in find_degeneracy(points)
