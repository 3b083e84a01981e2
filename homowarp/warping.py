"""
Image warping module.
Implements backward transform warping with nearest-neighbor sampling.
"""

import logging
import os
from concurrent.futures import ThreadPoolExecutor

import numpy as np

from .errors import SingularHomographyError

logger = logging.getLogger(__name__)

# Rows handed to one worker at a time
MIN_BAND_ROWS = 16


def invert_homography(H):
    """
    Invert a homography matrix.

    Args:
        H: 3x3 homography matrix

    Returns:
        3x3 inverse matrix (not rescaled; the projective divide removes scale)

    Raises:
        ValueError: If H is not 3x3
        SingularHomographyError: If H has no inverse
    """
    H = np.asarray(H, dtype=np.float64)
    if H.shape != (3, 3):
        raise ValueError(f"Homography must be 3x3 matrix, got shape {H.shape}")
    if not np.all(np.isfinite(H)):
        raise SingularHomographyError("Homography contains non-finite entries")

    if np.linalg.matrix_rank(H) < 3:
        raise SingularHomographyError("Homography matrix is singular")
    try:
        return np.linalg.inv(H)
    except np.linalg.LinAlgError as exc:
        raise SingularHomographyError("Homography matrix is singular") from exc


def _warp_rows(image, H_inv, warped, row_start, row_stop):
    """Fill warped[row_start:row_stop] by mapping each pixel back into image."""
    h, w = image.shape[:2]
    out_w = warped.shape[1]

    y_out, x_out = np.mgrid[row_start:row_stop, 0:out_w]
    output_coords = np.stack([x_out.ravel(), y_out.ravel(), np.ones(x_out.size)]).astype(np.float64)

    input_coords = H_inv @ output_coords
    xw, yw, wz = input_coords

    valid = wz != 0
    x_in = np.full(wz.shape, -1.0)
    y_in = np.full(wz.shape, -1.0)
    x_in[valid] = np.rint(xw[valid] / wz[valid])
    y_in[valid] = np.rint(yw[valid] / wz[valid])

    valid &= (x_in >= 0) & (x_in <= w - 1) & (y_in >= 0) & (y_in <= h - 1)
    if not np.any(valid):
        return

    band = warped[row_start:row_stop].reshape(-1, warped.shape[2])
    band[valid] = image[y_in[valid].astype(np.intp), x_in[valid].astype(np.intp)]


def _row_bands(height, workers):
    rows = max(MIN_BAND_ROWS, -(-height // workers))
    return [(start, min(start + rows, height)) for start in range(0, height, rows)]


def warp(image, homography, dest_width, dest_height, background=(0, 0, 0), workers=None):
    """
    Warp an image into a new canvas using a homography with backward transform.

    Every destination pixel (j, i) is mapped through H^-1, rounded to the
    nearest source pixel and copied from there. Pixels that land outside the
    source keep the background color.

    Args:
        image: Source image as numpy array (height, width, 3)
        homography: 3x3 matrix mapping source coordinates to destination coordinates
        dest_width: Width of the output image
        dest_height: Height of the output image
        background: Fill color for pixels with no source sample (default: black)
        workers: Number of threads; None picks from the CPU count, 1 runs inline

    Returns:
        New array of shape (dest_height, dest_width, 3) with the dtype of image

    Raises:
        ValueError: If the sizes or image shape are invalid
        SingularHomographyError: If the homography is not invertible
    """
    image = np.asarray(image)
    if image.ndim != 3 or image.shape[2] != 3:
        raise ValueError(f"Image must have shape (height, width, 3), got {image.shape}")
    if image.shape[0] == 0 or image.shape[1] == 0:
        raise ValueError(f"Image must not be empty, got {image.shape}")

    for name, value in (("dest_width", dest_width), ("dest_height", dest_height)):
        if isinstance(value, bool) or not isinstance(value, (int, np.integer)) or value <= 0:
            raise ValueError(f"{name} must be a positive integer, got {value!r}")

    if workers is None:
        workers = os.cpu_count() or 1
    if workers < 1:
        raise ValueError(f"workers must be at least 1, got {workers}")

    # Inverse is computed once, before any pixel is touched
    H_inv = invert_homography(homography)

    logger.debug("doing transform...")
    warped = np.empty((dest_height, dest_width, 3), dtype=image.dtype)
    warped[...] = np.asarray(background, dtype=image.dtype)

    bands = _row_bands(dest_height, workers)
    if workers == 1 or len(bands) == 1:
        for row_start, row_stop in bands:
            _warp_rows(image, H_inv, warped, row_start, row_stop)
    else:
        with ThreadPoolExecutor(max_workers=workers) as executor:
            futures = [executor.submit(_warp_rows, image, H_inv, warped, row_start, row_stop)
                       for row_start, row_stop in bands]
            for future in futures:
                future.result()

    logger.debug("warped %dx%d image into %dx%d using %d band(s)",
                 image.shape[1], image.shape[0], dest_width, dest_height, len(bands))
    return warped
