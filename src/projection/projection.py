"""Range image projection of organized point clouds.

`Projection` re-samples an organized cloud onto a new grid indexed by
azimuth (columns) and elevation (rows).  Every output pixel holds at
most one complete input record, chosen by the keep policy when several
points land on it.  Pixels nobody lands on stay zero, which decodes as
the (0, 0, 0) "no return" point.

Example
-------
>>> proj = Projection(ProjectionConfig(height=64, width=1024, keep=Keep.CLOSEST))
>>> image = proj.project(cloud)
>>> image.cloud.shape
(64, 1024)
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Union

import numpy as np

from ..common.organized_cloud import DTYPE_TO_DATATYPE, OrganizedCloud
from ..utils.logging import get_logger
from .config import ProjectionConfig
from .errors import InvalidCloudShapeError
from .grid import GridParameters, resolve_grid
from .payload import copy_records
from .rasterizer import EMPTY, ProjectionStats, rasterize

logger = get_logger(__name__)


@dataclass
class RangeImage:
    """Result of projecting one cloud."""

    cloud: OrganizedCloud
    """Output cloud of the resolved grid size."""

    source_index: np.ndarray
    """Flat row-major input index occupying each pixel, -1 where empty."""

    grid: GridParameters
    stats: ProjectionStats = field(default_factory=ProjectionStats)

    @property
    def occupied(self) -> np.ndarray:
        """Boolean mask of pixels holding a point."""
        return self.source_index != EMPTY


def check_cloud(cloud: OrganizedCloud, dtype=np.float32) -> None:
    """Verify the input contract of an organized cloud.

    Raises
    ------
    InvalidCloudShapeError
        If the cloud is empty, its strides disagree with its size, the
        buffer has the wrong length, the ``x`` field is not stored as
        `dtype` or the coordinates do not fit in a record.
    """
    if cloud.height < 1 or cloud.width < 1:
        raise InvalidCloudShapeError(f"cloud must be at least 1x1, got {cloud.height}x{cloud.width}")
    if cloud.point_step < 1:
        raise InvalidCloudShapeError(f"point_step must be positive, got {cloud.point_step}")
    if cloud.row_step != cloud.width * cloud.point_step:
        raise InvalidCloudShapeError(
            f"row_step {cloud.row_step} != width {cloud.width} * point_step {cloud.point_step}"
        )
    expected = cloud.height * cloud.row_step
    if cloud.data.size != expected:
        raise InvalidCloudShapeError(f"data holds {cloud.data.size} bytes, expected {expected}")
    x_field = cloud.get_field("x")
    if x_field is None:
        raise InvalidCloudShapeError("cloud has no 'x' field")
    expected_code = DTYPE_TO_DATATYPE[(np.dtype(dtype).kind, np.dtype(dtype).itemsize)]
    if x_field.datatype != expected_code:
        raise InvalidCloudShapeError(
            f"x field has datatype code {x_field.datatype}, expected {expected_code} "
            f"for {np.dtype(dtype)} coordinates"
        )
    end = x_field.offset + 3 * np.dtype(dtype).itemsize
    if x_field.offset < 0 or end > cloud.point_step:
        raise InvalidCloudShapeError(
            f"x, y, z at offset {x_field.offset} do not fit in a {cloud.point_step}-byte record"
        )


@dataclass
class Projection:
    """Project organized clouds to range images.

    Parameters
    ----------
    config : ProjectionConfig
        Grid size, angular constants and keep policy.
    dtype : numpy dtype
        Floating type of the x, y, z fields (float32 or float64).  All
        projection arithmetic runs in this precision.
    """

    config: ProjectionConfig = field(default_factory=ProjectionConfig)
    dtype: type = np.float32

    def __post_init__(self):
        if np.dtype(self.dtype) not in (np.dtype(np.float32), np.dtype(np.float64)):
            raise ValueError(f"coordinate dtype must be float32 or float64, got {np.dtype(self.dtype)}")

    @classmethod
    def from_config_file(cls, path: Union[str, Path], dtype=np.float32) -> "Projection":
        """Create a projection from the `projection` section of a YAML file."""
        return cls(ProjectionConfig.from_yaml(path), dtype=dtype)

    def resolve(self, cloud: OrganizedCloud) -> GridParameters:
        """Grid parameters this projection would use for `cloud`."""
        return resolve_grid(cloud.height, cloud.width, self.config, self.dtype)

    def project(self, cloud: OrganizedCloud) -> RangeImage:
        """Project a cloud and return the output along with the occupancy map.

        Raises
        ------
        InvalidCloudShapeError
            If the input violates the organized cloud contract or the
            resolved grid is empty.  Nothing is allocated in that case.
        """
        check_cloud(cloud, self.dtype)
        grid = self.resolve(cloud)

        x, y, z = cloud.coordinates(self.dtype)
        owner, stats = rasterize(x, y, z, grid, self.config.keep, self.config.azimuth_only)
        data = copy_records(cloud.records(), owner, cloud.point_step)

        output = OrganizedCloud(
            height=grid.height,
            width=grid.width,
            fields=list(cloud.fields),
            point_step=cloud.point_step,
            row_step=grid.width * cloud.point_step,
            data=data,
            is_bigendian=cloud.is_bigendian,
            is_dense=cloud.is_dense,
            header=cloud.header,
        )
        logger.debug(
            "Projected %dx%d -> %dx%d: kept=%d collisions=%d out_of_window=%d invalid=%d",
            cloud.height, cloud.width, grid.height, grid.width,
            stats.kept, stats.collisions, stats.out_of_window, stats.invalid,
        )
        return RangeImage(cloud=output, source_index=owner, grid=grid, stats=stats)

    def process(self, cloud: OrganizedCloud) -> OrganizedCloud:
        """Project a cloud and return only the output cloud."""
        return self.project(cloud).cloud
