"""Copy whole point records into the output buffer."""

import numpy as np

from .rasterizer import EMPTY


def copy_records(records: np.ndarray, owner: np.ndarray, point_step: int) -> np.ndarray:
    """Gather the records selected by an occupancy map into a new buffer.

    Parameters
    ----------
    records : numpy.ndarray
        `(H, W, point_step)` uint8 view of the input cloud.
    owner : numpy.ndarray
        `(out_H, out_W)` map of flat input indices, -1 for empty pixels.
    point_step : int
        Size of one record in bytes.

    Returns
    -------
    numpy.ndarray
        Flat uint8 buffer of `out_H * out_W * point_step` bytes.  Every
        record of an empty pixel is all zero; every other record is a
        byte-for-byte copy of its source point, payload included.
    """
    out = np.zeros(owner.size * point_step, dtype=np.uint8)
    flat_in = records.reshape(-1, point_step)
    flat_out = out.reshape(-1, point_step)
    occupied = owner.ravel() != EMPTY
    flat_out[occupied] = flat_in[owner.ravel()[occupied]]
    return out
