import numpy as np

import nufx.info.error as nxe
import nufx.info.ptype as nxt
import nufx.math.cluster as nxm_cl
import nufx.runtime as nxrt
import nufx.util as nxu

__all__ = [
    "PointSet",
]


class PointSet:
    r"""
    Non-uniform coordinates :math:`\{x_{j}\}_{j=1}^{M} \subset [0, 2\pi)`, pre-processed for a size-`n` grid.

    Points are stored in *canonical order*, i.e. sorted by the grid cell :math:`i_{0}(x_{j}) = \lfloor x_{j} n / 2\pi
    + 1/2 \rfloor \in \{0, \ldots, n\}` they fall closest to, then split into contiguous blocks.

    Attributes
    ----------
    idx: NDArray
        (M,) canonical order, i.e. ``x[idx]`` is sorted by cell.
    cell: NDArray
        (M,) nearest cell of each point, in canonical order.
    offset: NDArray
        (M,) fractional offset :math:`t \in [-1/2, 1/2)` of each point w.r.t. its cell, in canonical order.
    bound: NDArray
        (Q+1,) block boundaries into canonical order.
    """

    def __init__(
        self,
        x: nxt.NDArray,
        n: nxt.Integer,
        width: nxrt.Width,
        workers: nxt.Integer,
        max_block_size: nxt.Integer,
    ):
        r"""
        Parameters
        ----------
        x: NDArray
            (M,) coordinates in :math:`[0, 2\pi)`.
        n: Integer
            Size of the periodic grid.
        width: Width
            Precision in which coordinates and offsets are stored.
        workers: Integer
            Minimum number of blocks to create (if enough points.)
        max_block_size: Integer
            Maximum number of points per block.

        Raises
        ------
        ShapeMismatchError
            If `x` is not 1D.
        DomainError
            If a coordinate is complex, non-finite or outside :math:`[0, 2\pi)`.
        """
        x = nxu.as_vector(x, "x")
        if np.iscomplexobj(x) or (not np.issubdtype(x.dtype, np.number)):
            raise nxe.DomainError(f"Coordinates must be real-valued, got dtype {x.dtype}.")

        # Domain checks run in double precision: casting to `width` first may round valid points onto 2pi.
        xd = x.astype(np.double, copy=False)
        if not np.all(np.isfinite(xd)):
            raise nxe.DomainError("Coordinates must be finite.")
        if not np.all((0 <= xd) & (xd < 2 * np.pi)):
            bad = x[~((0 <= xd) & (xd < 2 * np.pi))][0]
            raise nxe.DomainError(f"Coordinates must lie in [0, 2pi), got {bad}.")

        u = xd * (n / (2 * np.pi))
        cell = np.floor(u + 0.5).astype(np.int64)

        self._x = np.array(x, dtype=width.value)  # private copy
        self._x.setflags(write=False)
        self.idx, _ = nxm_cl.cell_sort(cell, n + 1)
        self.cell = cell[self.idx]
        self.offset = (u[self.idx] - self.cell).astype(width.value)
        self.bound = nxm_cl.block_bounds(len(x), workers, max_block_size)

    @property
    def x(self) -> nxt.NDArray:
        """
        (M,) coordinates, in caller order.  (Read-only.)
        """
        return self._x

    @property
    def size(self) -> int:
        return len(self._x)

    @property
    def nblocks(self) -> int:
        return len(self.bound) - 1
