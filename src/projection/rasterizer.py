"""Scatter points into the range image grid.

The rasterizer walks the input grid once in row-major order, projects
every valid point onto the output grid and resolves collisions with the
configured keep policy.  It does not touch the point payload: the
result is an occupancy map holding, for every output pixel, the flat
index of the input point that won it (or -1).  `payload.copy_records`
turns that map into the output byte buffer.

The loop is compiled with Numba and runs sequentially: the
keep policy compares each candidate with the occupant left by the
points before it, so collisions on one pixel must be resolved in scan
order.
"""

from dataclasses import dataclass
from typing import Tuple

import numpy as np
from numba import njit

from .angles import azimuth, elevation, is_point_valid, point_range
from .grid import GridParameters
from .keep_policy import KEEP_CLOSEST, KEEP_FARTHEST, Keep, rejects_candidate

EMPTY = -1
"""Occupancy value of a pixel no point was written to."""


@dataclass(frozen=True)
class ProjectionStats:
    """Per-call counters of what happened to the input points."""

    invalid: int = 0
    """Points failing the validity check (NaN/inf or the zero sentinel)."""

    out_of_window: int = 0
    """Points projecting outside the output grid, or to NaN."""

    collisions: int = 0
    """Points that lost a pixel: rejected by the keep policy or overwritten later."""

    kept: int = 0
    """Occupied output pixels after the pass."""

    @property
    def total(self) -> int:
        """Number of input points accounted for; equals the input point count."""
        return self.invalid + self.out_of_window + self.collisions + self.kept

    def __add__(self, other: "ProjectionStats") -> "ProjectionStats":
        return ProjectionStats(
            invalid=self.invalid + other.invalid,
            out_of_window=self.out_of_window + other.out_of_window,
            collisions=self.collisions + other.collisions,
            kept=self.kept + other.kept,
        )


@njit
def _scatter(x, y, z, f_azimuth, f_elevation, c_azimuth, c_elevation,
             out_height, out_width, keep, azimuth_only, owner):
    in_height, in_width = x.shape
    # invalid, out of window, rejected by keep policy, overwritten occupant
    counts = np.zeros(4, dtype=np.int64)
    ranged = keep == KEEP_CLOSEST or keep == KEEP_FARTHEST
    for i_in in range(in_height):
        for j_in in range(in_width):
            px = x[i_in, j_in]
            py = y[i_in, j_in]
            pz = z[i_in, j_in]
            if not is_point_valid(px, py, pz):
                counts[0] += 1
                continue
            # Shift [-0.5, 0.5) to [0, 1).
            u = f_azimuth * azimuth(px, py) + c_azimuth + 0.5
            if np.isnan(u) or u < 0 or u >= out_width:
                counts[1] += 1
                continue
            j_out = int(u)
            if azimuth_only:
                i_out = i_in
            else:
                v = f_elevation * elevation(px, py, pz) + c_elevation + 0.5
                if np.isnan(v) or v < 0 or v >= out_height:
                    counts[1] += 1
                    continue
                i_out = int(v)

            k = owner[i_out, j_out]
            occupied = k != EMPTY
            r_occupant = 0.0
            r_candidate = 0.0
            if occupied and ranged:
                ki = k // in_width
                kj = k % in_width
                r_occupant = point_range(x[ki, kj], y[ki, kj], z[ki, kj])
                r_candidate = point_range(px, py, pz)
            if rejects_candidate(keep, occupied, r_occupant, r_candidate):
                counts[2] += 1
                continue
            if occupied:
                counts[3] += 1
            owner[i_out, j_out] = i_in * in_width + j_in
    return counts


def rasterize(
    x: np.ndarray,
    y: np.ndarray,
    z: np.ndarray,
    grid: GridParameters,
    keep: Keep = Keep.LAST,
    azimuth_only: bool = False,
) -> Tuple[np.ndarray, ProjectionStats]:
    """Assign input points to output pixels.

    Parameters
    ----------
    x, y, z : numpy.ndarray
        `(H, W)` coordinate arrays of the input cloud, all of the same
        floating dtype.
    grid : GridParameters
        Resolved output size and angle-to-pixel constants.
    keep : Keep, optional
        Collision policy.  Default `Keep.LAST`.
    azimuth_only : bool, optional
        Reuse the input row index instead of projecting the elevation.
        Requires `grid.height == H`.

    Returns
    -------
    (numpy.ndarray, ProjectionStats)
        The `(grid.height, grid.width)` int64 occupancy map of flat
        row-major input indices (-1 for empty pixels) and the counters.
    """
    if x.shape != y.shape or x.shape != z.shape or x.ndim != 2:
        raise ValueError("x, y and z must be 2D arrays of the same shape")
    if azimuth_only and grid.height != x.shape[0]:
        raise ValueError(
            f"azimuth_only needs an output height equal to the input height "
            f"({grid.height} != {x.shape[0]})"
        )
    owner = np.full((grid.height, grid.width), EMPTY, dtype=np.int64)
    counts = _scatter(
        x, y, z,
        grid.f_azimuth, grid.f_elevation, grid.c_azimuth, grid.c_elevation,
        grid.height, grid.width, int(keep), bool(azimuth_only), owner,
    )
    collisions = int(counts[2] + counts[3])
    stats = ProjectionStats(
        invalid=int(counts[0]),
        out_of_window=int(counts[1]),
        collisions=collisions,
        kept=int(np.count_nonzero(owner != EMPTY)),
    )
    return owner, stats
