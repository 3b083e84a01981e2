"""
Homography estimation module.
Computes the homography matrix from exactly four point correspondences by
solving the 8x8 Direct Linear Transform system with h9 fixed to 1.
"""

import logging
from dataclasses import dataclass
from typing import NamedTuple, Tuple

import numpy as np

from utils.math_utils import find_degeneracy, from_homogeneous, to_homogeneous

from .errors import DegenerateInputError

logger = logging.getLogger(__name__)

N_POINTS = 4


class Point2D(NamedTuple):
    x: float
    y: float


@dataclass(frozen=True)
class CorrespondenceSet:
    """
    Four ordered (source, destination) point pairs.

    Pair i of ``src`` corresponds to pair i of ``dst``. Source points must be
    in general position: no two coincide and no three are collinear.
    """
    src: Tuple[Point2D, Point2D, Point2D, Point2D]
    dst: Tuple[Point2D, Point2D, Point2D, Point2D]

    def __post_init__(self):
        if len(self.src) != N_POINTS or len(self.dst) != N_POINTS:
            raise ValueError(f"Exactly {N_POINTS} correspondences required. "
                             f"Got {len(self.src)} source and {len(self.dst)} destination points")

        coords = np.array(self.src + self.dst, dtype=np.float64)
        if not np.all(np.isfinite(coords)):
            raise ValueError("Correspondence coordinates must be finite")

        problem = find_degeneracy(coords[:N_POINTS])
        if problem is not None:
            raise DegenerateInputError(f"Degenerate source points: {problem}")

    @classmethod
    def from_points(cls, points_src, points_dst):
        """
        Build a set from two array-likes of shape (4, 2).

        Args:
            points_src: Points from the source image
            points_dst: Points from the destination image

        Returns:
            CorrespondenceSet
        """
        points_src = np.asarray(points_src, dtype=np.float64)
        points_dst = np.asarray(points_dst, dtype=np.float64)

        for name, pts in (("source", points_src), ("destination", points_dst)):
            if pts.shape != (N_POINTS, 2):
                raise ValueError(f"{name.capitalize()} points must have shape ({N_POINTS}, 2), "
                                 f"got {pts.shape}")

        return cls(
            src=tuple(Point2D(float(x), float(y)) for x, y in points_src),
            dst=tuple(Point2D(float(x), float(y)) for x, y in points_dst),
        )


def build_linear_system(correspondences):
    """
    Stack two rows per correspondence into the 8x8 system A @ h = b.

    For source (x, y) and destination (x', y'):
        [x, y, 1, 0, 0, 0, -x'x, -x'y] . h = x'
        [0, 0, 0, x, y, 1, -y'x, -y'y] . h = y'

    Args:
        correspondences: CorrespondenceSet

    Returns:
        Tuple (A, b) with shapes (8, 8) and (8,)
    """
    A = np.zeros((2 * N_POINTS, 8))
    b = np.zeros(2 * N_POINTS)

    for i, ((x, y), (xp, yp)) in enumerate(zip(correspondences.src, correspondences.dst)):
        A[2*i, :] = [x, y, 1, 0, 0, 0, -xp*x, -xp*y]
        A[2*i+1, :] = [0, 0, 0, x, y, 1, -yp*x, -yp*y]
        b[2*i] = xp
        b[2*i+1] = yp

    return A, b


def computeH(points_src, points_dst=None):
    """
    Compute the homography that maps four source points onto four destination points.

    The system is exactly determined, so it is solved directly rather than
    in the least-squares sense.

    Args:
        points_src: Source points, array of shape (4, 2), or a CorrespondenceSet
        points_dst: Destination points, array of shape (4, 2). Omitted when
                    points_src is a CorrespondenceSet

    Returns:
        Read-only 3x3 float64 matrix H with H[2, 2] == 1 such that
        points_dst ~ H @ points_src (homogeneous)

    Raises:
        ValueError: If the points do not have shape (4, 2)
        DegenerateInputError: If the source points are coincident or collinear
    """
    if isinstance(points_src, CorrespondenceSet):
        if points_dst is not None:
            raise ValueError("points_dst must be omitted when passing a CorrespondenceSet")
        correspondences = points_src
    else:
        if points_dst is None:
            raise ValueError("Destination points are required")
        correspondences = CorrespondenceSet.from_points(points_src, points_dst)

    logger.debug("calculating H matrix...")
    A, b = build_linear_system(correspondences)

    # Rank tolerance is relative to the largest singular value, so it does not
    # depend on the scale of the coordinates
    if np.linalg.matrix_rank(A) < A.shape[0]:
        raise DegenerateInputError("Correspondence system is singular")

    try:
        h = np.linalg.solve(A, b)
    except np.linalg.LinAlgError as exc:
        raise DegenerateInputError("Correspondence system is singular") from exc

    H = np.append(h, 1.0).reshape(3, 3)
    H.flags.writeable = False
    logger.debug("H matrix:\n%s", H)
    return H


def apply_homography(H, points):
    """
    Apply homography transformation to points.

    Args:
        H: 3x3 homography matrix
        points: Points to transform, array of shape (n, 2)

    Returns:
        Transformed points, array of shape (n, 2)
    """
    H = np.asarray(H, dtype=np.float64)
    if H.shape != (3, 3):
        raise ValueError(f"Homography must be 3x3 matrix, got shape {H.shape}")

    points_homog = to_homogeneous(np.atleast_2d(points))
    transformed_homog = (H @ points_homog.T).T
    return from_homogeneous(transformed_homog)
