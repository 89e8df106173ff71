"""Exceptions raised by the projection package."""


class InvalidCloudShapeError(ValueError):
    """The input cloud or the resolved output grid violates the shape contract.

    Raised before any output buffer is allocated.  It signals a caller
    error (malformed cloud, non-organized layout, zero-sized grid), not
    a data-quality problem, so retrying with the same input is pointless.
    """
