"""
Mathematical utilities for computer vision operations.
"""

import numpy as np


def to_homogeneous(points):
    """
    Convert points to homogeneous coordinates.
    
    Args:
        points: Array of shape (n, 2) containing [x, y] coordinates
        
    Returns:
        Array of shape (n, 3) containing [x, y, 1] coordinates
    """
    points = np.asarray(points, dtype=np.float64)
    ones = np.ones((len(points), 1))
    return np.hstack([points, ones])


def from_homogeneous(points_homog):
    """
    Convert points from homogeneous coordinates to Cartesian.
    
    Args:
        points_homog: Array of shape (n, 3) containing [x, y, w] coordinates
        
    Returns:
        Array of shape (n, 2) containing [x/w, y/w] coordinates
        
    Raises:
        ValueError: If any point lies on the line at infinity (w == 0)
    """
    points_homog = np.asarray(points_homog, dtype=np.float64)
    w = points_homog[:, 2:3]
    if np.any(w == 0):
        raise ValueError("Point maps to the line at infinity (w == 0)")
    return points_homog[:, :2] / w


def triangle_area2(a, b, c):
    """Twice the signed area of triangle abc (z of the cross product)."""
    return (b[0] - a[0]) * (c[1] - a[1]) - (b[1] - a[1]) * (c[0] - a[0])


def find_degeneracy(points, tol=1e-9):
    """
    Look for coincident or collinear points in a small point set.
    
    The collinearity test is relative to the size of the triangle's sides,
    so it behaves the same for unit coordinates and for pixel coordinates.
    
    Args:
        points: Array of shape (n, 2)
        tol: Relative tolerance
        
    Returns:
        None if the points are in general position, otherwise a short
        description of the first problem found
    """
    points = np.asarray(points, dtype=np.float64)
    n = len(points)
    
    for i in range(n):
        for j in range(i + 1, n):
            if np.allclose(points[i], points[j], rtol=0.0, atol=tol):
                return f"points {i} and {j} coincide"
    
    for i in range(n):
        for j in range(i + 1, n):
            for k in range(j + 1, n):
                a, b, c = points[i], points[j], points[k]
                scale = np.linalg.norm(b - a) * np.linalg.norm(c - a)
                if abs(triangle_area2(a, b, c)) <= tol * scale:
                    return f"points {i}, {j} and {k} are collinear"
    
    return None
