"""Range image projection of organized point clouds.

The package re-projects an organized cloud onto a grid indexed by
azimuth and elevation.  It is organised as a short pipeline:

- `angles`: validity check and spherical angles of a point
- `grid`: output size and angle-to-pixel constants
- `rasterizer`: single scan-order pass assigning points to pixels
- `keep_policy`: which point wins when several share a pixel
- `payload`: byte-for-byte copy of the winning records
- `projection`: the `Projection` facade tying the steps together
"""

from .angles import is_point_valid, azimuth, elevation, point_range
from .config import ProjectionConfig
from .errors import InvalidCloudShapeError
from .grid import GridParameters, resolve_grid
from .keep_policy import Keep, rejects_candidate
from .payload import copy_records
from .projection import Projection, RangeImage, check_cloud
from .rasterizer import ProjectionStats, rasterize

__all__ = [
    "is_point_valid",
    "azimuth",
    "elevation",
    "point_range",
    "ProjectionConfig",
    "InvalidCloudShapeError",
    "GridParameters",
    "resolve_grid",
    "Keep",
    "rejects_candidate",
    "copy_records",
    "Projection",
    "RangeImage",
    "check_cloud",
    "ProjectionStats",
    "rasterize",
]
