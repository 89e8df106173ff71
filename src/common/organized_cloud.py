"""In-memory organized point cloud container.

An organized cloud is a `height x width` grid of fixed-stride byte
records.  The field descriptor follows the PointCloud2 convention
(name, byte offset, numeric datatype code, count) so clouds coming from
a sensor driver can be wrapped without re-encoding.  The container
holds the bytes, views them as NumPy arrays and converts to and from
structured arrays.
"""

import sys
from dataclasses import dataclass, field
from typing import List, Optional, Tuple

import numpy as np

# PointCloud2 datatype codes
INT8 = 1
UINT8 = 2
INT16 = 3
UINT16 = 4
INT32 = 5
UINT32 = 6
FLOAT32 = 7
FLOAT64 = 8

DATATYPE_TO_DTYPE = {
    INT8: np.dtype('i1'),
    UINT8: np.dtype('u1'),
    INT16: np.dtype('i2'),
    UINT16: np.dtype('u2'),
    INT32: np.dtype('i4'),
    UINT32: np.dtype('u4'),
    FLOAT32: np.dtype('f4'),
    FLOAT64: np.dtype('f8'),
}
DTYPE_TO_DATATYPE = {(dt.kind, dt.itemsize): code for code, dt in DATATYPE_TO_DTYPE.items()}


@dataclass(frozen=True)
class PointField:
    """One named field inside a point record."""

    name: str
    offset: int
    datatype: int
    count: int = 1

    @property
    def dtype(self) -> np.dtype:
        """NumPy dtype of a single element, without byte order."""
        try:
            return DATATYPE_TO_DTYPE[self.datatype]
        except KeyError:
            raise ValueError(f"field '{self.name}': unknown datatype code {self.datatype}") from None


@dataclass(frozen=True)
class CloudHeader:
    """Acquisition metadata copied through unchanged."""

    frame_id: str = ""
    stamp: float = 0.0


@dataclass
class OrganizedCloud:
    """A point cloud stored as a 2D grid of fixed-stride byte records."""

    height: int
    width: int
    fields: List[PointField]
    point_step: int
    row_step: int
    data: np.ndarray
    """Flat uint8 buffer of `height * row_step` bytes."""

    is_bigendian: bool = False
    is_dense: bool = False
    header: CloudHeader = field(default_factory=CloudHeader)

    def get_field(self, name: str) -> Optional[PointField]:
        for f in self.fields:
            if f.name == name:
                return f
        return None

    @property
    def shape(self) -> Tuple[int, int]:
        return self.height, self.width

    def records(self) -> np.ndarray:
        """View the buffer as a `(height, width, point_step)` uint8 array.

        Assumes `row_step == width * point_step` and a buffer of the
        matching size; callers are expected to validate that first.
        """
        return self.data.reshape(self.height, self.width, self.point_step)

    def coordinate_dtype(self) -> Optional[np.dtype]:
        """Native dtype of the ``x`` field, or None if there is no ``x``."""
        x_field = self.get_field("x")
        return None if x_field is None else x_field.dtype

    def coordinates(self, dtype=np.float32) -> Tuple[np.ndarray, np.ndarray, np.ndarray]:
        """Extract the x, y, z coordinates as native-endian 2D arrays.

        The three coordinates are read as consecutive values of `dtype`
        starting at the offset of the field named ``x``.

        Parameters
        ----------
        dtype : numpy dtype, optional
            Floating type of the coordinate fields.  Default float32.

        Returns
        -------
        (numpy.ndarray, numpy.ndarray, numpy.ndarray)
            Contiguous `(height, width)` arrays in native byte order.
        """
        x_field = self.get_field("x")
        if x_field is None:
            raise ValueError("cloud has no 'x' field")
        base = np.dtype(dtype)
        stored = base.newbyteorder('>' if self.is_bigendian else '<')
        coords = []
        for k in range(3):
            view = np.ndarray(
                shape=(self.height, self.width),
                dtype=stored,
                buffer=self.data,
                offset=x_field.offset + k * base.itemsize,
                strides=(self.row_step, self.point_step),
            )
            coords.append(np.ascontiguousarray(view, dtype=base.newbyteorder('=')))
        return coords[0], coords[1], coords[2]

    def structured_dtype(self) -> np.dtype:
        """Build the structured dtype describing one point record."""
        order = '>' if self.is_bigendian else '<'
        names, formats, offsets = [], [], []
        for f in self.fields:
            base = f.dtype.newbyteorder(order)
            names.append(f.name)
            formats.append(base if f.count == 1 else (base, (f.count,)))
            offsets.append(f.offset)
        return np.dtype({
            "names": names,
            "formats": formats,
            "offsets": offsets,
            "itemsize": self.point_step,
        })

    def to_structured(self) -> np.ndarray:
        """Return a `(height, width)` structured array copy of the cloud."""
        arr = np.frombuffer(self.data.tobytes(), dtype=self.structured_dtype())
        return arr.reshape(self.height, self.width)

    @classmethod
    def from_structured(
        cls,
        points: np.ndarray,
        header: Optional[CloudHeader] = None,
        is_dense: bool = False,
    ) -> "OrganizedCloud":
        """Wrap a NumPy structured array as an organized cloud.

        A 1-D array becomes a single row.  Byte order is taken from the
        first multi-byte field; mixing byte orders is rejected.

        Parameters
        ----------
        points : numpy.ndarray
            Structured array of shape (W,) or (H, W).
        header : CloudHeader, optional
            Metadata to attach.
        is_dense : bool, optional
            Value of the `is_dense` flag.

        Returns
        -------
        OrganizedCloud
        """
        if points.dtype.names is None:
            raise ValueError("points must be a structured array")
        if points.ndim == 1:
            points = points.reshape(1, -1)
        elif points.ndim != 2:
            raise ValueError(f"points must be 1-D or 2-D, got {points.ndim} dimensions")

        fields: List[PointField] = []
        orders = set()
        for name in points.dtype.names:
            fdt, offset = points.dtype.fields[name][:2]
            count = 1
            if fdt.subdtype is not None:
                fdt, sub_shape = fdt.subdtype
                count = int(np.prod(sub_shape))
            code = DTYPE_TO_DATATYPE.get((fdt.kind, fdt.itemsize))
            if code is None:
                raise ValueError(f"field '{name}' has unsupported dtype {fdt}")
            if fdt.itemsize > 1:
                orders.add(_byte_order(fdt))
            fields.append(PointField(name, int(offset), code, count))
        if len(orders) > 1:
            raise ValueError("fields with mixed byte order are not supported")
        is_bigendian = orders == {'>'}

        height, width = points.shape
        point_step = points.dtype.itemsize
        data = np.ascontiguousarray(points).view(np.uint8).reshape(-1).copy()
        return cls(
            height=height,
            width=width,
            fields=fields,
            point_step=point_step,
            row_step=width * point_step,
            data=data,
            is_bigendian=is_bigendian,
            is_dense=is_dense,
            header=header if header is not None else CloudHeader(),
        )


def _byte_order(dt: np.dtype) -> str:
    order = dt.byteorder
    if order == '=':
        return '<' if sys.byteorder == 'little' else '>'
    return order
