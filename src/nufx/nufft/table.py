import numpy as np
import numpy.polynomial.chebyshev as npc

import nufx.info.ptype as nxt
import nufx.runtime as nxrt

__all__ = [
    "degree",
    "tabulate",
    "evaluate",
]


def degree(M: nxt.Integer) -> int:
    """
    Chebyshev degree used to tabulate a kernel of half-support `M`.
    """
    return max(2 * M + 2, 16)


def tabulate(kernel: nxt.KernelT, width: nxrt.Width) -> nxt.NDArray:
    r"""
    Piecewise-Chebyshev expansion of the weights a point deposits on its neighbouring cells.

    A point at grid coordinate :math:`u = i_{0} + t`, with :math:`i_{0} = \lfloor u + 1/2 \rfloor` and :math:`t \in
    [-1/2, 1/2)`, interacts with cells :math:`i_{0} + d, \; d \in \{-M, \ldots, M\}` through weights
    :math:`\phi(t - d)`.  Each weight is expanded on both half-cells :math:`t \in [-1/2, 0)` and :math:`t \in [0,
    1/2)` separately, so that kernel knots (B-spline) and support edges fall on piece boundaries.

    Parameters
    ----------
    kernel: Kernel
        Kernel to tabulate.
    width: Width
        Precision of the table.

    Returns
    -------
    coeff: NDArray
        (2, 2M+1, p+1) Chebyshev coefficients, with :math:`p` given by :py:func:`~nufx.nufft.table.degree`.
        ``coeff[h, d + M]`` expands :math:`\phi(t - d)` in the variable :math:`s = 4 t + 1 - 2 h \in [-1, 1]`.

    Notes
    -----
    Use :py:func:`~nufx.nufft.table.evaluate` (or the Clenshaw recurrence in :py:mod:`~nufx.nufft.spread`) to
    reconstruct the weights.
    """
    M = kernel.support()
    p = degree(M)

    coeff = np.zeros((2, 2 * M + 1, p + 1), dtype=np.double)
    for h in range(2):
        for i, d in enumerate(range(-M, M + 1)):

            def f(s):
                t = (s - 1 + 2 * h) / 4
                return kernel.apply(t - d)

            coeff[h, i] = npc.chebinterpolate(f, p)
    return coeff.astype(width.value)


def evaluate(coeff: nxt.NDArray, t: nxt.NDArray) -> nxt.NDArray:
    """
    Reconstruct the weights of points with fractional offsets `t` from a table.

    Parameters
    ----------
    coeff: NDArray
        (2, 2M+1, p+1) table produced by :py:func:`~nufx.nufft.table.tabulate`.
    t: NDArray
        (Q,) fractional offsets in [-1/2, 1/2).

    Returns
    -------
    w: NDArray
        (Q, 2M+1) weights; ``w[q, d + M]`` approximates :math:`\\phi(t_{q} - d)`.
    """
    t = np.asarray(t, dtype=np.double)
    h = (t >= 0).astype(int)
    s = 4 * t + 1 - 2 * h

    w = np.zeros((len(t), coeff.shape[1]), dtype=np.double)
    for _h in range(2):
        sel = h == _h
        # chebval() broadcasts coefficient axis 0 against `x`.
        w[sel] = npc.chebval(s[sel], coeff[_h].T.astype(np.double)).T
    return w
