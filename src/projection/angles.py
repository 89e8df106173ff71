"""Point validity and spherical angle helpers.

All functions are compiled with Numba so the rasterization kernel can
call them directly; they remain ordinary callables from Python.  The
argument types decide the precision: float32 inputs are evaluated in
float32, float64 inputs in float64.
"""

import math

from numba import njit


@njit
def is_point_valid(x, y, z):
    """Return True if the coordinates are finite and not the (0, 0, 0) sentinel."""
    return (math.isfinite(x) and math.isfinite(y) and math.isfinite(z)
            and (x != 0 or y != 0 or z != 0))


@njit
def azimuth(x, y):
    """Horizontal angle about the vertical axis, in (-pi, pi]."""
    return math.atan2(y, x)


@njit
def elevation(x, y, z):
    """Vertical angle above the horizontal plane, in [-pi/2, pi/2]."""
    return math.atan2(z, math.hypot(x, y))


@njit
def point_range(x, y, z):
    """Euclidean distance of the point from the sensor origin."""
    return math.hypot(math.hypot(x, y), z)
