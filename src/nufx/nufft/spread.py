import concurrent.futures as cf

import numba
import numpy as np

import nufx.info.ptype as nxt
import nufx.nufft.points as nxpts

__all__ = [
    "Spreader",
    "Interpolator",
]


class Spreader:
    r"""
    Spread values at non-uniform points onto a size-`n` periodic grid.

    Computes

    .. math::

       g_{l} = \sum_{j} w_{j} \sum_{p \in \mathbb{Z}} \phi(u_{j} - l - p n), \qquad l \in \{0, \ldots, n-1\},

    where :math:`u_{j} = x_{j} n / 2\pi` and :math:`\phi` is the tabulated kernel of half-support :math:`M`.

    Points are processed block-wise (see :py:class:`~nufx.nufft.points.PointSet`) by a thread pool.  Each block
    deposits onto a private sub-grid covering its cell range + kernel footprint; sub-grids are then accumulated in
    block order into a padded grid of length :math:`n + 2M + 1`, which is finally folded modulo :math:`n`.
    Results are hence independent of thread scheduling.
    """

    def __init__(self, table: nxt.NDArray, n: nxt.Integer, workers: nxt.Integer):
        """
        Parameters
        ----------
        table: NDArray
            (2, 2M+1, p+1) kernel table.  (See :py:func:`~nufx.nufft.table.tabulate`.)
        n: Integer
            Grid size.
        workers: Integer
            Number of threads.
        """
        self._table = table
        self._n = int(n)
        self._M = (table.shape[1] - 1) // 2
        self._workers = int(workers)
        self._pad = None  # (n+2M+1,) accumulation buffer, allocated on first use.

    def apply(self, pts: nxpts.PointSet, w: nxt.NDArray, out: nxt.NDArray) -> nxt.NDArray:
        """
        Parameters
        ----------
        pts: PointSet
            (Q,) points.
        w: NDArray
            (Q,) values, in canonical order.
        out: NDArray
            (n,) grid to overwrite.

        Returns
        -------
        out: NDArray
            (n,) spread values.
        """
        n, M = self._n, self._M
        if (self._pad is None) or (self._pad.dtype != w.dtype):
            self._pad = np.zeros(n + 2 * M + 1, dtype=w.dtype)
        pad = self._pad
        pad.fill(0)

        with cf.ThreadPoolExecutor(max_workers=self._workers) as executor:
            fs = [executor.submit(self._spread, pts, w, q) for q in range(pts.nblocks)]
        for f in fs:  # block order
            a, sub = f.result()
            pad[a : a + len(sub)] += sub

        # Fold padded cells {-M, ..., -1} and {n, ..., n+M} onto the periodic grid.
        out[:] = pad[M : M + n]
        out[: M + 1] += pad[M + n :]
        out[n - M :] += pad[:M]
        return out

    def _spread(self, pts: nxpts.PointSet, w: nxt.NDArray, q: int) -> tuple[int, nxt.NDArray]:
        # Spread one block onto a private sub-grid.
        #
        # Returns
        # -------
        # anchor: int
        #     Offset of the sub-grid into the padded grid.
        # sub: NDArray
        #     Sub-grid values.
        a, b = pts.bound[q], pts.bound[q + 1]
        cell = pts.cell[a:b]

        anchor = cell[0]  # cells are sorted: first/last points bound the sub-grid.
        sub = np.zeros(cell[-1] - anchor + 2 * self._M + 1, dtype=w.dtype)
        _spread(cell, anchor, pts.offset[a:b], w[a:b], self._table, sub)
        return anchor, sub


class Interpolator:
    r"""
    Interpolate a size-`n` periodic grid at non-uniform points.

    Computes

    .. math::

       v_{j} = \sum_{l=0}^{n-1} g_{l} \sum_{p \in \mathbb{Z}} \phi(u_{j} - l - p n),

    i.e. the adjoint of :py:class:`~nufx.nufft.spread.Spreader`.

    The grid is first wrap-padded to length :math:`n + 2M + 1` so that no modular indexing happens in the inner
    loop.  Blocks write disjoint slices of the output and therefore run concurrently without synchronisation.
    """

    def __init__(self, table: nxt.NDArray, n: nxt.Integer, workers: nxt.Integer):
        self._table = table
        self._n = int(n)
        self._M = (table.shape[1] - 1) // 2
        self._workers = int(workers)
        self._wrap = (np.arange(self._n + 2 * self._M + 1) - self._M) % self._n

    def apply(self, pts: nxpts.PointSet, grid: nxt.NDArray) -> nxt.NDArray:
        """
        Parameters
        ----------
        pts: PointSet
            (Q,) points.
        grid: NDArray
            (n,) grid values.

        Returns
        -------
        v: NDArray
            (Q,) interpolated values, in canonical order.
        """
        gpad = grid[self._wrap]
        v = np.zeros(pts.size, dtype=grid.dtype)

        with cf.ThreadPoolExecutor(max_workers=self._workers) as executor:
            fs = [executor.submit(self._interpolate, pts, gpad, v, q) for q in range(pts.nblocks)]
        for f in fs:
            f.result()  # re-raise worker exceptions, if any.
        return v

    def _interpolate(self, pts: nxpts.PointSet, gpad: nxt.NDArray, v: nxt.NDArray, q: int):
        a, b = pts.bound[q], pts.bound[q + 1]
        _interpolate(pts.cell[a:b], pts.offset[a:b], gpad, self._table, v[a:b])


# Internal Helper functions ---------------------------------------------------
_nb_flags = dict(
    nopython=True,
    nogil=True,
    cache=True,
    forceobj=False,
    parallel=False,
    error_model="numpy",
    fastmath=True,
    boundscheck=False,
)


@numba.jit(**_nb_flags)
def _weights(t, table, out):
    # Evaluate the 2M+1 kernel weights of a point via Clenshaw's recurrence.
    #
    # Parameters
    # ----------
    # t: float
    #     Fractional offset in [-1/2, 1/2).
    # table: ndarray[float]
    #     (2, 2M+1, p+1) Chebyshev table.
    # out: ndarray[float]
    #     (2M+1,) weights [phi(t + M), ..., phi(t - M)].
    h = 1 if t >= 0 else 0
    s = 4 * t + 1 - 2 * h
    K, P = table.shape[1], table.shape[2]
    for i in range(K):
        b1 = 0.0
        b2 = 0.0
        for j in range(P - 1, 0, -1):
            b0 = 2 * s * b1 - b2 + table[h, i, j]
            b2 = b1
            b1 = b0
        # Index `i` tabulates phi(t - d), d = i - M, i.e. the weight of cell i0 + d.
        out[i] = s * b1 - b2 + table[h, i, 0]


@numba.jit(**_nb_flags)
def _spread(cell, anchor, t, w, table, out):
    # Parameters
    # ----------
    # cell: ndarray[int]
    #     (Q,) nearest cells (sorted.)
    # anchor: int
    #     Padded-grid index of out[0].
    # t: ndarray[float]
    #     (Q,) fractional offsets.
    # w: ndarray[float/complex]
    #     (Q,) values.
    # table: ndarray[float]
    #     (2, 2M+1, p+1) Chebyshev table.
    # out: ndarray[float/complex]
    #     (cell[-1] - anchor + 2M + 1,) sub-grid to accumulate into.
    K = table.shape[1]
    phi = np.zeros(K, dtype=table.dtype)
    for q in range(len(cell)):
        _weights(t[q], table, phi)
        a = cell[q] - anchor
        for i in range(K):
            out[a + i] += phi[i] * w[q]


@numba.jit(**_nb_flags)
def _interpolate(cell, t, gpad, table, out):
    # Parameters
    # ----------
    # cell: ndarray[int]
    #     (Q,) nearest cells.
    # t: ndarray[float]
    #     (Q,) fractional offsets.
    # gpad: ndarray[float/complex]
    #     (n+2M+1,) wrap-padded grid.
    # table: ndarray[float]
    #     (2, 2M+1, p+1) Chebyshev table.
    # out: ndarray[float/complex]
    #     (Q,) interpolated values.
    K = table.shape[1]
    phi = np.zeros(K, dtype=table.dtype)
    for q in range(len(cell)):
        _weights(t[q], table, phi)
        a = cell[q]
        acc = phi[0] * gpad[a]
        for i in range(1, K):
            acc += phi[i] * gpad[a + i]
        out[q] = acc
