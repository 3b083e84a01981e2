import cv2
import numpy as np
import pytest

from homowarp import CorrespondenceSet, DegenerateInputError, Point2D, apply_homography, computeH
from homowarp.homography import build_linear_system


SQUARE = np.array([[0, 0], [2, 0], [0, 2], [2, 2]], dtype=float)


def test_half_scale_example():
    H = computeH(SQUARE, SQUARE / 2)
    np.testing.assert_allclose(H, [[0.5, 0, 0], [0, 0.5, 0], [0, 0, 1]], atol=1e-12)


def test_reproduces_destination_points():
    rng = np.random.default_rng(7)
    corners = np.array([[0, 0], [100, 0], [0, 100], [100, 100]], dtype=float)
    for _ in range(20):
        src = corners + rng.uniform(-10, 10, size=(4, 2))
        dst = corners * 3 + rng.uniform(-30, 30, size=(4, 2)) + 50
        H = computeH(src, dst)
        np.testing.assert_allclose(apply_homography(H, src), dst, atol=1e-6)


def test_bottom_right_is_exactly_one():
    src = np.array([[559, 529], [2041, 349], [573, 1733], [2053, 1887]], dtype=float)
    dst = np.array([[0, 0], [1023, 0], [0, 767], [1023, 767]], dtype=float)
    H = computeH(src, dst)
    assert H[2, 2] == 1.0
    assert H.dtype == np.float64


def test_matches_opencv_on_sample_points():
    src = np.array([[559, 529], [2041, 349], [573, 1733], [2053, 1887]], dtype=np.float32)
    dst = np.array([[0, 0], [1023, 0], [0, 767], [1023, 767]], dtype=np.float32)
    H_opencv, _ = cv2.findHomography(src, dst)
    np.testing.assert_allclose(computeH(src, dst), H_opencv, rtol=1e-4, atol=1e-6)


def test_identity_when_points_match():
    pts = np.array([[10, 20], [300, 25], [15, 240], [320, 260]], dtype=float)
    np.testing.assert_allclose(computeH(pts, pts), np.eye(3), atol=1e-9)


def test_result_is_read_only():
    H = computeH(SQUARE, SQUARE)
    with pytest.raises(ValueError):
        H[0, 0] = 5.0


def test_accepts_correspondence_set():
    corr = CorrespondenceSet.from_points(SQUARE, SQUARE * 3)
    np.testing.assert_allclose(computeH(corr), np.diag([3.0, 3.0, 1.0]), atol=1e-12)
    assert corr.src[1] == Point2D(2.0, 0.0)


def test_correspondence_set_rejects_dst_argument():
    corr = CorrespondenceSet.from_points(SQUARE, SQUARE)
    with pytest.raises(ValueError):
        computeH(corr, SQUARE)


@pytest.mark.parametrize("dst", [
    [[0, 0], [1, 1], [2, 2], [0, 1]],
    [[0, 0], [5, 0], [0, 5], [5, 5]],
])
def test_collinear_source_points_rejected(dst):
    src = [[0, 0], [1, 1], [2, 2], [0, 1]]
    with pytest.raises(DegenerateInputError):
        computeH(src, dst)


def test_coincident_source_points_rejected():
    src = [[0, 0], [3, 0], [3, 0], [0, 3]]
    with pytest.raises(DegenerateInputError):
        computeH(src, SQUARE)


def test_degenerate_error_is_a_value_error():
    with pytest.raises(ValueError):
        computeH([[0, 0], [1, 1], [2, 2], [3, 3]], SQUARE)


@pytest.mark.parametrize("src", [
    SQUARE[:3],
    np.vstack([SQUARE, [[5, 7]]]),
    SQUARE.ravel(),
])
def test_wrong_number_of_points(src):
    with pytest.raises(ValueError, match="shape"):
        computeH(src, SQUARE)


def test_non_finite_points_rejected():
    src = SQUARE.copy()
    src[2, 1] = np.nan
    with pytest.raises(ValueError, match="finite"):
        computeH(src, SQUARE)


def test_linear_system_layout():
    corr = CorrespondenceSet.from_points([[1, 2], [4, 0], [0, 5], [6, 7]],
                                         [[3, 4], [8, 1], [2, 9], [5, 5]])
    A, b = build_linear_system(corr)
    assert A.shape == (8, 8)
    np.testing.assert_array_equal(A[0], [1, 2, 1, 0, 0, 0, -3, -6])
    np.testing.assert_array_equal(A[1], [0, 0, 0, 1, 2, 1, -4, -8])
    np.testing.assert_array_equal(b, [3, 4, 8, 1, 2, 9, 5, 5])


def test_apply_homography_single_point():
    H = np.array([[2.0, 0, 1], [0, 2.0, -1], [0, 0, 1]])
    np.testing.assert_allclose(apply_homography(H, [3, 4]), [[7, 7]])


def test_apply_homography_point_at_infinity():
    H = np.array([[1.0, 0, 0], [0, 1.0, 0], [1.0, 0, 0]])
    with pytest.raises(ValueError, match="infinity"):
        apply_homography(H, [[0, 5]])


@pytest.mark.parametrize("side", [0.02, 0.01, 0.005])
def test_small_patch_is_solvable(side):
    src = np.array([[0, 0], [side, 0], [0, side], [side, side]]) + 0.3
    H = computeH(src, src * 2)
    np.testing.assert_allclose(apply_homography(H, src), src * 2, atol=1e-9)
