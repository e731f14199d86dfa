import enum

import numpy as np

import nufx.info.error as nxe
import nufx.info.ptype as nxt

__all__ = [
    "Width",
    "CWidth",
    "resolve",
]


@enum.unique
class Width(enum.Enum):
    """
    Machine-dependent floating-point types.
    """

    SINGLE = np.dtype(np.single)
    DOUBLE = np.dtype(np.double)

    def eps(self) -> nxt.Real:
        """
        Machine precision of a floating-point type.

        Returns the difference between 1 and the next smallest representable float larger than 1.
        """
        eps = np.finfo(self.value).eps
        return float(eps)

    @property
    def complex(self) -> "CWidth":
        """
        Returns precision-equivalent complex-valued type.
        """
        return CWidth[self.name]


@enum.unique
class CWidth(enum.Enum):
    """
    Machine-dependent complex-valued floating-point types.
    """

    SINGLE = np.dtype(np.csingle)
    DOUBLE = np.dtype(np.cdouble)

    @property
    def real(self) -> "Width":
        """
        Returns precision-equivalent real-valued type.
        """
        return Width[self.name]


def resolve(dtype: nxt.DType) -> tuple[Width, bool]:
    """
    Map a plan element type onto its floating-point width.

    Parameters
    ----------
    dtype: DType
        One of float32/float64/complex64/complex128, or any specifier :py:func:`numpy.dtype` maps onto them.

    Returns
    -------
    width: Width
        Real-valued precision of the element type.
    is_real: bool
        True if `dtype` is real-valued.
    """
    try:
        dtype = np.dtype(dtype)
    except TypeError:
        raise nxe.ConfigurationError(f"Unknown element type {dtype!r}.")

    for w in Width:
        if dtype == w.value:
            return w, True
    for cw in CWidth:
        if dtype == cw.value:
            return cw.real, False
    raise nxe.ConfigurationError(f"Unsupported element type {dtype}: expected one of float32/64, complex64/128.")
