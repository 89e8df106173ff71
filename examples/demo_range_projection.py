"""Demo script for range image projection with synthetic data.

This script builds a synthetic organized scan of a 16-channel spinning
LiDAR inside a box-shaped room, then re-projects it onto a denser and a
coarser grid with different keep policies and prints what happened to
the points.

Usage:
    python examples/demo_range_projection.py
"""

import sys
from pathlib import Path

import numpy as np

# Add repository root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from src.common.organized_cloud import CloudHeader, OrganizedCloud
from src.projection import Keep, Projection, ProjectionConfig

SCAN_DTYPE = np.dtype({
    "names": ["x", "y", "z", "intensity", "ring"],
    "formats": ["<f4", "<f4", "<f4", "<f4", "<u2"],
    "offsets": [0, 4, 8, 12, 16],
    "itemsize": 24,
})


def create_synthetic_scan(
    channels: int = 16,
    columns: int = 900,
    room: tuple = (12.0, 8.0, 3.0),
    dropout: float = 0.05,
) -> OrganizedCloud:
    """Create an organized scan of a sensor standing in a box-shaped room.

    Parameters
    ----------
    channels : int
        Number of laser channels (rows).
    columns : int
        Firings per revolution (columns).
    room : tuple
        Half-extents of the room in x and y and the ceiling height, metres.
    dropout : float
        Fraction of returns replaced by the zero "no return" point.

    Returns
    -------
    OrganizedCloud
        Scan of shape (channels, columns).
    """
    print("Creating synthetic scan...")
    half_x, half_y, ceiling = room
    elevations = np.radians(np.linspace(15.0, -15.0, channels))
    azimuths = np.linspace(np.pi, -np.pi, columns, endpoint=False)
    el, az = np.meshgrid(elevations, azimuths, indexing="ij")

    # Distance to the nearest wall, floor (z = -1.5) or ceiling along each ray
    dx, dy, dz = np.cos(el) * np.cos(az), np.cos(el) * np.sin(az), np.sin(el)
    with np.errstate(divide="ignore"):
        t = np.minimum.reduce([
            np.where(dx != 0, half_x / np.abs(dx), np.inf),
            np.where(dy != 0, half_y / np.abs(dy), np.inf),
            np.where(dz > 0, (ceiling - 1.5) / np.where(dz > 0, dz, 1), np.inf),
            np.where(dz < 0, 1.5 / np.where(dz < 0, -dz, 1), np.inf),
        ])

    points = np.zeros((channels, columns), dtype=SCAN_DTYPE)
    points["x"], points["y"], points["z"] = t * dx, t * dy, t * dz
    points["intensity"] = np.clip(200.0 / t, 0, 255)
    points["ring"] = np.arange(channels)[:, None]

    rng = np.random.default_rng(0)
    lost = rng.random((channels, columns)) < dropout
    for name in ("x", "y", "z"):
        points[name][lost] = 0.0
    print(f"  - {channels}x{columns} points, {lost.sum():,} dropouts")

    return OrganizedCloud.from_structured(points, header=CloudHeader(frame_id="lidar"))


def main():
    cloud = create_synthetic_scan()

    runs = [
        ("azimuth-only upsample, keep closest",
         ProjectionConfig(width=1800, azimuth_only=True, keep=Keep.CLOSEST)),
        ("32x450 grid, keep closest", ProjectionConfig(height=32, width=450, keep=Keep.CLOSEST)),
        ("32x450 grid, keep farthest", ProjectionConfig(height=32, width=450, keep=Keep.FARTHEST)),
        ("8x256 grid, keep first", ProjectionConfig(height=8, width=256, keep=Keep.FIRST)),
    ]
    for title, config in runs:
        image = Projection(config).project(cloud)
        s = image.stats
        fill = image.occupied.mean()
        print(f"\n{title}")
        print(f"  output:        {image.cloud.height}x{image.cloud.width} ({fill:.1%} filled)")
        print(f"  kept:          {s.kept:,}")
        print(f"  collisions:    {s.collisions:,}")
        print(f"  out of window: {s.out_of_window:,}")
        print(f"  invalid:       {s.invalid:,}")


if __name__ == "__main__":
    main()
