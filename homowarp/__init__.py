"""
Four-point homography estimation and backward image warping.
"""

__version__ = "1.0.0"

from .errors import DegenerateInputError, HomographyError, SingularHomographyError
from .homography import CorrespondenceSet, Point2D, apply_homography, computeH
from .warping import invert_homography, warp

__all__ = [
    'CorrespondenceSet',
    'DegenerateInputError',
    'HomographyError',
    'Point2D',
    'SingularHomographyError',
    'apply_homography',
    'computeH',
    'invert_homography',
    'warp',
]
