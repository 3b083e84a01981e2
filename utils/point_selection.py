"""
Manual point correspondence selection utilities.
"""

import json
from pathlib import Path

import matplotlib.pyplot as plt
import numpy as np

N_POINTS = 4


class PointSelector:
    """Collects clicks on one image at a time, source first, then destination."""

    def __init__(self, fig, axes, images, titles, n_points=N_POINTS):
        self.fig = fig
        self.axes = axes
        self.images = images
        self.titles = titles
        self.n_points = n_points

        self.points = ([], [])
        self.phase = 0

    @property
    def done(self):
        return self.phase > 1

    def redraw(self):
        colors = ('r', 'b')
        for idx, (ax, img, title) in enumerate(zip(self.axes, self.images, self.titles)):
            ax.clear()
            ax.imshow(img)
            if idx == self.phase:
                ax.set_title(f"{title}\nSelect {self.n_points} points", fontsize=14,
                             fontweight='bold', color='red')
            else:
                ax.set_title(f"{title}\n(Read-only)", fontsize=14, color='gray')

            for i, (x, y) in enumerate(self.points[idx]):
                ax.plot(x, y, f'{colors[idx]}o', markersize=5, markeredgecolor='white')
                ax.annotate(f'{i+1}', (x + 10, y - 10), fontsize=10, fontweight='bold',
                            color='white', ha='left', va='top',
                            bbox=dict(boxstyle='round,pad=0.2', facecolor=colors[idx],
                                      edgecolor='white', alpha=0.9))
            ax.axis('off')
        self.fig.canvas.draw_idle()

    def on_click(self, event):
        if self.done or event.button != 1 or event.xdata is None or event.ydata is None:
            return
        if event.inaxes is not self.axes[self.phase]:
            print(f"  [Info] Please click on {self.titles[self.phase]}")
            return

        points = self.points[self.phase]
        points.append([event.xdata, event.ydata])
        print(f"  Point {len(points)}/{self.n_points} selected: ({event.xdata:.1f}, {event.ydata:.1f})")

        if len(points) == self.n_points:
            self.phase += 1
            if not self.done:
                print(f"\n>>> Now click the corresponding points on {self.titles[self.phase]}")
        self.redraw()


def select_correspondences(img1, img2, n_points=N_POINTS, title1="Source", title2="Destination"):
    """
    Manually select corresponding points between two images.

    Args:
        img1: Source image (RGB format)
        img2: Destination image or blank canvas (RGB format)
        n_points: Number of corresponding points to select
        title1: Title for the source image
        title2: Title for the destination image

    Returns:
        Tuple of (points1, points2), numpy arrays of shape (n_points, 2) with (x, y) rows
    """
    print(f"Click {n_points} points on {title1}, then the same {n_points} points "
          f"in the same order on {title2}")

    fig, axes = plt.subplots(1, 2, figsize=(16, 8))
    selector = PointSelector(fig, axes, (img1, img2), (title1, title2), n_points)
    cid = fig.canvas.mpl_connect('button_press_event', selector.on_click)
    selector.redraw()

    plt.show(block=False)
    while not selector.done:
        if not plt.fignum_exists(fig.number):
            raise ValueError("Selection window closed before all points were picked")
        plt.pause(0.1)

    fig.canvas.mpl_disconnect(cid)
    plt.close(fig)

    points1, points2 = (np.array(p, dtype=np.float64) for p in selector.points)
    return points1, points2


def save_correspondences(points1, points2, output_path, img1_name=None, img2_name=None):
    """
    Save point correspondences to a file using numpy.save.

    Args:
        points1: Points from the source image (n_points, 2)
        points2: Points from the destination image (n_points, 2)
        output_path: Path to save the correspondences file (.npy format)
        img1_name: Name of the source image (optional, saved as metadata)
        img2_name: Name of the destination image (optional, saved as metadata)

    Returns:
        Path of the .npy file
    """
    output_path = Path(output_path)
    if output_path.suffix != '.npy':
        output_path = output_path.with_suffix('.npy')
    output_path.parent.mkdir(parents=True, exist_ok=True)

    # Shape (2, n_points, 2): [points1, points2]
    np.save(output_path, np.array([points1, points2], dtype=np.float64))

    if img1_name or img2_name:
        metadata = {
            'image1_name': img1_name,
            'image2_name': img2_name,
            'num_points': len(points1)
        }
        with open(output_path.with_suffix('.json'), 'w') as f:
            json.dump(metadata, f, indent=4)

    return output_path


def load_correspondences(file_path):
    """
    Load point correspondences from a numpy file.

    Args:
        file_path: Path to the correspondences file (.npy format)

    Returns:
        Tuple of (points1, points2, metadata)
    """
    file_path = Path(file_path)
    if not file_path.exists():
        raise FileNotFoundError(f"Correspondence file not found: {file_path}")

    correspondences = np.load(file_path)
    if correspondences.ndim != 3 or correspondences.shape[0] != 2 or correspondences.shape[2] != 2:
        raise ValueError(f"Expected correspondences of shape (2, n, 2), got {correspondences.shape}")

    metadata = {}
    metadata_path = file_path.with_suffix('.json')
    if metadata_path.exists():
        with open(metadata_path, 'r') as f:
            metadata = json.load(f)

    return correspondences[0], correspondences[1], metadata
