"""Resolution of the output grid and its angle-to-pixel constants."""

import math
from dataclasses import dataclass

import numpy as np

from .config import ProjectionConfig
from .errors import InvalidCloudShapeError


@dataclass(frozen=True)
class GridParameters:
    """Resolved output size and the affine angle-to-pixel mapping.

    A point at azimuth `a` lands at column
    `floor(f_azimuth * a + c_azimuth + 0.5)`; rows use the elevation
    constants the same way.  The floating values are scalars of the
    coordinate dtype.
    """

    height: int
    width: int
    f_azimuth: np.floating
    f_elevation: np.floating
    c_azimuth: np.floating
    c_elevation: np.floating


def resolve_grid(
    input_height: int,
    input_width: int,
    config: ProjectionConfig,
    dtype=np.float32,
) -> GridParameters:
    """Derive the output grid from the input size and the config.

    Parameters
    ----------
    input_height, input_width : int
        Size of the input cloud.
    config : ProjectionConfig
        Overrides; zero sizes and NaN constants are replaced by defaults.
    dtype : numpy dtype, optional
        Floating type the constants are expressed in.

    Returns
    -------
    GridParameters

    Raises
    ------
    InvalidCloudShapeError
        If the resolved height or width is smaller than 1.
    """
    scalar = np.dtype(dtype).type
    height = input_height if (config.azimuth_only or config.height == 0) else config.height
    width = input_width if config.width == 0 else config.width
    if height < 1 or width < 1:
        raise InvalidCloudShapeError(f"output grid must be at least 1x1, got {height}x{width}")

    f_azimuth = config.focal_azimuth
    if not math.isfinite(f_azimuth) or f_azimuth == 0:
        # Full turn across the image width, azimuth increasing to the left.
        f_azimuth = -width / (2 * math.pi)
    f_elevation = config.focal_elevation
    if not math.isfinite(f_elevation) or f_elevation == 0:
        f_elevation = -height / (math.pi / 2)
    c_azimuth = config.center_azimuth
    if not math.isfinite(c_azimuth):
        c_azimuth = width / 2 - 0.5
    c_elevation = config.center_elevation
    if not math.isfinite(c_elevation):
        c_elevation = height / 2 - 0.5

    return GridParameters(
        height=int(height),
        width=int(width),
        f_azimuth=scalar(f_azimuth),
        f_elevation=scalar(f_elevation),
        c_azimuth=scalar(c_azimuth),
        c_elevation=scalar(c_elevation),
    )
