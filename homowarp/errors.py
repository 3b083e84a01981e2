"""
Error types raised by the homography estimator and the image warper.
"""


class HomographyError(ValueError):
    """Base class for failures that depend only on the input data."""


class DegenerateInputError(HomographyError):
    """
    The correspondences cannot define a homography.

    Raised when source points coincide or three of them are collinear,
    which makes the 8x8 linear system singular.
    """


class SingularHomographyError(HomographyError):
    """The homography matrix has no inverse, so backward mapping is impossible."""
