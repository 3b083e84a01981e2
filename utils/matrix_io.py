"""
Saving and loading homography matrices.
"""

import json
from pathlib import Path

import numpy as np


def save_homography(H, output_path, metadata=None):
    """
    Save homography matrix to a file.
    
    Args:
        H: 3x3 homography matrix
        output_path: Path to save the homography (.npy, anything else is JSON)
        metadata: Optional metadata dictionary (JSON only)
        
    Returns:
        Path that was written
    """
    output_path = Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)
    H = np.asarray(H, dtype=np.float64)
    
    if output_path.suffix == '.npy':
        np.save(output_path, H)
    else:
        data = {
            'homography': H.tolist(),
            'metadata': metadata or {}
        }
        with open(output_path, 'w') as f:
            json.dump(data, f, indent=4)
    
    return output_path


def load_homography(file_path):
    """
    Load homography matrix from a file.
    
    Args:
        file_path: Path to a .npy or JSON homography file
        
    Returns:
        3x3 homography matrix
    """
    file_path = Path(file_path)
    if not file_path.exists():
        raise FileNotFoundError(f"Homography file not found: {file_path}")
    
    if file_path.suffix == '.npy':
        H = np.load(file_path)
    else:
        with open(file_path, 'r') as f:
            data = json.load(f)
        H = np.array(data['homography'], dtype=np.float64)
    
    if H.shape != (3, 3):
        raise ValueError(f"Homography must be 3x3 matrix, got shape {H.shape}")
    return H
