"""
Helpers around the homography core: image I/O, point picking and matrix files.
"""

from . import math_utils
from . import matrix_io

__all__ = ['math_utils', 'matrix_io']
