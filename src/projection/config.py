"""Projection settings.

`ProjectionConfig` holds the user-facing knobs of the range image
projection.  Floating parameters use NaN for "unset"; the grid resolver
then substitutes defaults derived from the output size.  Configs can be
built from a plain mapping or from a section of a YAML file.
"""

import math
from dataclasses import asdict, dataclass, fields
from pathlib import Path
from typing import Any, Dict, Mapping, Optional, Union

from ..utils.config import load_config
from .keep_policy import Keep

_FLOAT_KEYS = ("focal_azimuth", "focal_elevation", "center_azimuth", "center_elevation")
_INT_KEYS = ("height", "width")


@dataclass(frozen=True)
class ProjectionConfig:
    """Output grid size, angular scale/offset overrides and keep policy."""

    height: int = 0
    """Output height in pixels.  0 uses the input height."""

    width: int = 0
    """Output width in pixels.  0 uses the input width."""

    focal_azimuth: float = math.nan
    """Pixels per radian of azimuth.  NaN or 0 derives -width / (2 pi)."""

    focal_elevation: float = math.nan
    """Pixels per radian of elevation.  NaN or 0 derives -height / (pi / 2)."""

    center_azimuth: float = math.nan
    """Column of azimuth 0.  NaN derives width / 2 - 0.5."""

    center_elevation: float = math.nan
    """Row of elevation 0.  NaN derives height / 2 - 0.5."""

    keep: Keep = Keep.LAST
    """Collision policy."""

    azimuth_only: bool = False
    """Keep the input row index and only re-project columns."""

    def to_dict(self) -> Dict[str, Any]:
        """Plain-data dictionary, with unset floats as None and keep as its name."""
        d = asdict(self)
        for key in _FLOAT_KEYS:
            if math.isnan(d[key]):
                d[key] = None
        d["keep"] = self.keep.name.lower()
        return d

    @classmethod
    def from_dict(cls, mapping: Optional[Mapping[str, Any]]) -> "ProjectionConfig":
        """Build a config from a mapping, validating keys and value types.

        Missing keys and None values fall back to the defaults.

        Raises
        ------
        ValueError
            On unknown keys or values that cannot be converted.
        """
        if not mapping:
            return cls()
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(mapping) - known)
        if unknown:
            raise ValueError(f"unknown projection settings: {', '.join(unknown)}")

        kwargs: Dict[str, Any] = {}
        for key, value in mapping.items():
            if value is None:
                continue
            if key in _INT_KEYS:
                if isinstance(value, bool) or int(value) != value:
                    raise ValueError(f"{key} must be an integer, got {value!r}")
                kwargs[key] = int(value)
            elif key in _FLOAT_KEYS:
                kwargs[key] = float(value)
            elif key == "keep":
                kwargs[key] = Keep.parse(value)
            elif key == "azimuth_only":
                if not isinstance(value, bool):
                    raise ValueError(f"azimuth_only must be a boolean, got {value!r}")
                kwargs[key] = value
        return cls(**kwargs)

    @classmethod
    def from_yaml(cls, path: Union[str, Path], section: Optional[str] = "projection") -> "ProjectionConfig":
        """Load the config from a YAML file.

        Parameters
        ----------
        path : str or Path
            YAML file.  A missing file yields the default config.
        section : str or None, optional
            Top-level key holding the settings.  None reads the whole
            document.
        """
        data = load_config(path)
        if section is not None:
            data = data.get(section) or {}
        if not isinstance(data, Mapping):
            raise ValueError(f"{path}: section '{section}' must be a mapping")
        return cls.from_dict(data)
