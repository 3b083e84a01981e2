"""
Perspective transform entry point.

Given a source image and four point correspondences, this script:
1. Obtains the correspondences (command line, saved .npy file, or interactive picking).
2. Estimates the homography mapping the source points onto the destination points.
3. Warps the whole source image into the destination frame with backward mapping.
4. Compares the estimate against OpenCV's findHomography, writes the result to disk
   and optionally displays it.
"""

from __future__ import annotations

import argparse
import logging
import sys
import time
from pathlib import Path
from typing import List, Optional, Tuple

import cv2
import numpy as np

from homowarp import computeH, warp
from utils.image_io import bgr_to_rgb, load_image, save_image, show_images
from utils.matrix_io import load_homography, save_homography
from utils.point_selection import (
    load_correspondences,
    save_correspondences,
    select_correspondences,
)

DEFAULT_SRC_POINTS = [559, 529, 2041, 349, 573, 1733, 2053, 1887]
DEFAULT_DST_POINTS = [0, 0, 1023, 0, 0, 767, 1023, 767]
DEFAULT_OUTPUT = "Transformed_img.jpg"


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Warp an image with a homography estimated from four point correspondences."
    )
    parser.add_argument("image", help="Source image path.")
    parser.add_argument(
        "--src-points",
        type=float,
        nargs=8,
        metavar="V",
        default=DEFAULT_SRC_POINTS,
        help="Four source points as x1 y1 x2 y2 x3 y3 x4 y4.",
    )
    parser.add_argument(
        "--dst-points",
        type=float,
        nargs=8,
        metavar="V",
        default=DEFAULT_DST_POINTS,
        help="Four destination points as x1 y1 x2 y2 x3 y3 x4 y4.",
    )
    parser.add_argument(
        "--corr",
        help="Load correspondences from a .npy file instead of --src-points/--dst-points.",
    )
    parser.add_argument(
        "--select",
        action="store_true",
        help="Pick the correspondences interactively; saved to --corr if given.",
    )
    parser.add_argument(
        "--homography",
        help="Use a saved 3x3 homography (.npy or .json) instead of estimating one.",
    )
    parser.add_argument("--width", type=int, help="Output width (default: source width).")
    parser.add_argument("--height", type=int, help="Output height (default: source height).")
    parser.add_argument(
        "--workers",
        type=int,
        default=None,
        help="Threads used for warping (default: one per CPU).",
    )
    parser.add_argument(
        "--output",
        default=DEFAULT_OUTPUT,
        help=f"Path of the warped image (default: {DEFAULT_OUTPUT}).",
    )
    parser.add_argument("--save-h", help="Write the homography to this .npy or .json file.")
    parser.add_argument("--show", action="store_true", help="Display source and result windows.")
    parser.add_argument(
        "--no-compare",
        action="store_true",
        help="Skip the comparison against cv2.findHomography.",
    )
    parser.add_argument("--verbose", action="store_true", help="Enable debug logging.")
    return parser.parse_args(argv)


def gather_correspondences(
    args: argparse.Namespace, img_bgr: np.ndarray, out_size: Tuple[int, int]
) -> Tuple[np.ndarray, np.ndarray]:
    """
    Resolve the four correspondences from, in order of preference, the
    interactive picker, a saved file, or the command-line values.
    """
    if args.select:
        out_w, out_h = out_size
        canvas = np.zeros((out_h, out_w, 3), dtype=np.uint8)
        points_src, points_dst = select_correspondences(
            bgr_to_rgb(img_bgr), canvas, title1=Path(args.image).name, title2="Output frame"
        )
        if args.corr:
            corr_path = save_correspondences(
                points_src, points_dst, args.corr, img1_name=Path(args.image).name
            )
            print(f"   Saved correspondences to {corr_path}")
        return points_src, points_dst

    if args.corr:
        points_src, points_dst, _metadata = load_correspondences(args.corr)
        print(f"   Loaded correspondences from {args.corr}")
        return points_src, points_dst

    return (
        np.asarray(args.src_points, dtype=np.float64).reshape(4, 2),
        np.asarray(args.dst_points, dtype=np.float64).reshape(4, 2),
    )


def compare_with_opencv(H: np.ndarray, points_src: np.ndarray, points_dst: np.ndarray) -> float:
    """Print both matrices and return the largest absolute entry difference."""
    H_opencv, _mask = cv2.findHomography(
        points_src.astype(np.float32), points_dst.astype(np.float32)
    )
    print("Self-implemented H matrix:")
    print(H)
    print("OpenCV's API H matrix:")
    print(H_opencv)
    if H_opencv is None:
        print("   OpenCV could not estimate a homography for these points.")
        return float("nan")

    max_diff = float(np.max(np.abs(H - H_opencv)))
    print(f"   Max absolute difference: {max_diff:.3e}")
    return max_diff


def run(args: argparse.Namespace) -> Path:
    print("Loading image...")
    img_bgr = load_image(args.image)
    src_h, src_w = img_bgr.shape[:2]
    print(f"   {args.image} loaded with shape {img_bgr.shape}")

    out_w = args.width if args.width is not None else src_w
    out_h = args.height if args.height is not None else src_h

    points_src = points_dst = None
    if args.homography:
        H = load_homography(args.homography)
        print(f"   Loaded homography from {args.homography}")
    else:
        points_src, points_dst = gather_correspondences(args, img_bgr, (out_w, out_h))

    t = time.perf_counter()
    if points_src is not None:
        H = computeH(points_src, points_dst)
    warped = warp(img_bgr, H, out_w, out_h, workers=args.workers)
    elapsed = time.perf_counter() - t
    print(f"time: {elapsed:.4f}s")

    if points_src is not None and not args.no_compare:
        compare_with_opencv(H, points_src, points_dst)

    if args.save_h:
        h_path = save_homography(H, args.save_h, metadata={"image": Path(args.image).name})
        print(f"   Homography saved to {h_path}")

    output_path = save_image(warped, args.output)
    print(f"\nWarped image written to {output_path}")

    if args.show:
        show_images({"Source image": img_bgr, "After transform": warped})

    return output_path


def main(argv: Optional[List[str]] = None) -> int:
    args = parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(name)s %(levelname)s: %(message)s",
    )
    try:
        run(args)
    except (ValueError, FileNotFoundError) as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
