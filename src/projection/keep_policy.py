"""Collision policies for points competing for one output pixel."""

import numbers
from enum import IntEnum
from typing import Union

from numba import njit


class Keep(IntEnum):
    """Which point a pixel retains when several project onto it."""

    FIRST = 0
    """Earliest point in scan order wins."""

    LAST = 1
    """Latest point in scan order wins."""

    CLOSEST = 2
    """Point with the smallest range wins; ties keep the occupant."""

    FARTHEST = 3
    """Point with the largest range wins; ties keep the occupant."""

    @classmethod
    def parse(cls, value: Union["Keep", int, str]) -> "Keep":
        """Convert a policy name (case-insensitive) or integer code to `Keep`."""
        if isinstance(value, cls):
            return value
        if isinstance(value, bool):
            raise ValueError(f"invalid keep policy: {value!r}")
        if isinstance(value, numbers.Integral):
            try:
                return cls(int(value))
            except ValueError:
                raise ValueError(f"invalid keep policy code: {value}") from None
        if isinstance(value, str):
            try:
                return cls[value.strip().upper()]
            except KeyError:
                choices = ", ".join(k.name.lower() for k in cls)
                raise ValueError(f"invalid keep policy '{value}', expected one of: {choices}") from None
        raise ValueError(f"invalid keep policy: {value!r}")


# Plain integer codes for the compiled kernel.
KEEP_FIRST = int(Keep.FIRST)
KEEP_LAST = int(Keep.LAST)
KEEP_CLOSEST = int(Keep.CLOSEST)
KEEP_FARTHEST = int(Keep.FARTHEST)


@njit
def rejects_candidate(keep, occupant_valid, occupant_range, candidate_range):
    """Decide whether a candidate point loses against the current occupant.

    Parameters
    ----------
    keep : int
        Integer code of a `Keep` policy.
    occupant_valid : bool
        Whether the target pixel already holds a valid point.
    occupant_range, candidate_range : float
        Ranges of the occupant and the candidate.  Only read by the
        CLOSEST and FARTHEST policies.

    Returns
    -------
    bool
        True if the candidate must be discarded.
    """
    if not occupant_valid:
        return False
    if keep == KEEP_FIRST:
        return True
    if keep == KEEP_CLOSEST:
        return occupant_range <= candidate_range
    if keep == KEEP_FARTHEST:
        return occupant_range >= candidate_range
    return False
