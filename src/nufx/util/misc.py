import numpy as np

import nufx.info.error as nxe
import nufx.info.ptype as nxt

__all__ = [
    "as_vector",
    "check_vector",
]


def check_vector(arr: nxt.NDArray, name: str, size: nxt.Integer = None):
    """
    Assert `arr` is a 1D array, optionally of prescribed length.

    Raises
    ------
    ShapeMismatchError
    """
    if arr.ndim != 1:
        raise nxe.ShapeMismatchError(f"[{name}] Expected a 1D array, got shape {arr.shape}.")
    if (size is not None) and (len(arr) != size):
        raise nxe.ShapeMismatchError(f"[{name}] Expected length {size}, got {len(arr)}.")


def as_vector(x, name: str, size: nxt.Integer = None) -> nxt.NDArray:
    """
    Convert array-like `x` to a 1D NumPy array, without copy if possible.

    Scalars and nested sequences are rejected, i.e. `x` must be 1D after conversion.
    """
    arr = np.asarray(x)
    check_vector(arr, name, size)
    return arr
