"""
Image I/O utilities for loading, saving and displaying images.
"""

import cv2
import numpy as np
from pathlib import Path


def load_image(image_path):
    """
    Load an image from file path.
    
    Args:
        image_path: Path to the image file
        
    Returns:
        Image as numpy array (BGR format from OpenCV)
    """
    image_path = Path(image_path)
    if not image_path.exists():
        raise FileNotFoundError(f"Image not found: {image_path}")
    
    img = cv2.imread(str(image_path), cv2.IMREAD_COLOR)
    if img is None:
        raise ValueError(f"Could not load image: {image_path}")
    
    return img


def save_image(img, output_path):
    """
    Write an image to disk, creating the parent directory if needed.
    
    Args:
        img: Image in BGR format
        output_path: Destination path; the extension selects the encoder
        
    Returns:
        Path that was written
    """
    output_path = Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)
    if not cv2.imwrite(str(output_path), np.ascontiguousarray(img)):
        raise ValueError(f"Could not write image: {output_path}")
    return output_path


def show_images(images, window_size=(640, 480)):
    """
    Show images in resizable OpenCV windows until a key is pressed.
    
    Args:
        images: Mapping of window title to BGR image
        window_size: (width, height) of each window
    """
    for title, img in images.items():
        cv2.namedWindow(title, cv2.WINDOW_NORMAL)
        cv2.resizeWindow(title, *window_size)
        cv2.imshow(title, img)
    
    cv2.waitKey(0)
    for title in images:
        cv2.destroyWindow(title)


def bgr_to_rgb(img):
    """
    Convert BGR image (OpenCV format) to RGB (matplotlib format).
    
    Args:
        img: Image in BGR format
        
    Returns:
        Image in RGB format
    """
    return cv2.cvtColor(img, cv2.COLOR_BGR2RGB)


def rgb_to_bgr(img):
    """
    Convert RGB image (matplotlib format) to BGR (OpenCV format).
    
    Args:
        img: Image in RGB format
        
    Returns:
        Image in BGR format
    """
    return cv2.cvtColor(img, cv2.COLOR_RGB2BGR)
