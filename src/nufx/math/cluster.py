# Helper functions related to point binning.
#
# These are low-level routines NOT meant to be imported by default via `import nufx.math`.
# Import this module when/where needed only.

import numba
import numpy as np

import nufx.info.ptype as nxt

PointIndex = np.ndarray  # (M,) int64 indices into a point cloud.
BlockBound = np.ndarray  # (Q+1,) int64 offsets into a PointIndex.


def cell_sort(cell: nxt.NDArray, n_cells: nxt.Integer) -> tuple[PointIndex, nxt.NDArray]:
    """
    Order points by the grid cell they fall in.

    Parameters
    ----------
    cell: ndarray[int]
        (M,) cell index of each point, in [0, n_cells).
    n_cells: int
        Number of cells.

    Returns
    -------
    idx: PointIndex
        (M,) indices s.t. ``cell[idx]`` is sorted in ascending order.
        Points sharing a cell keep their relative order.
    count: ndarray[int]
        (n_cells,) number of points per cell.
    """
    cell = np.asarray(cell, dtype=np.int64)
    assert (cell.ndim == 1) and (n_cells > 0)
    if len(cell) > 0:
        assert 0 <= cell.min() and cell.max() < n_cells

    count, idx = _count_sort(cell, int(n_cells))
    return idx, count


def block_bounds(
    N_point: nxt.Integer,
    N_min: nxt.Integer,
    N_max: nxt.Integer,
) -> BlockBound:
    """
    Split `N_point` consecutive points into balanced contiguous blocks.

    Parameters
    ----------
    N_point: int
        Number of points to split.
    N_min: int
        Minimum number of blocks (if `N_point` allows it.)
        Set to the number of workers to expose parallelism.
    N_max: int
        Maximum number of points allocated per block.

    Returns
    -------
    bound: BlockBound
        (Q+1,) offsets s.t. block `q` contains points ``[bound[q], bound[q+1])``.
        `Q` is 0 if there are no points.
    """
    assert (N_point >= 0) and (N_min > 0) and (N_max > 0)

    Q = max(-(-N_point // N_max), min(N_min, N_point))
    bound = np.rint(np.linspace(0, N_point, Q + 1)).astype(np.int64)
    return bound


# Internal Helper functions ---------------------------------------------------
_nb_flags = dict(
    nopython=True,
    nogil=True,
    cache=True,
    forceobj=False,
    parallel=False,
    error_model="numpy",
    fastmath=True,
    locals={},
    boundscheck=False,
)


@numba.jit(**_nb_flags)
def _count_sort(x: np.ndarray, k: int) -> tuple[np.ndarray]:
    # Computes code below more efficiently:
    #     idx = np.argsort(x, kind="stable")
    #     count = np.bincount(x, minlength=k)
    #
    # Parameters
    # ----------
    # x: ndarray[int]
    #     (N,) non-negative integers.
    # k: int
    #     Upper bound on values in `x`.
    #
    # Returns
    # -------
    # count: ndarray[int]
    #     (k,) counts of each element in `x`.
    # idx: ndarray[int]
    #     (N,) indices to sort x into ascending order.
    count = np.zeros(k, dtype=np.int64)
    for _x in x:
        count[_x] += 1

    # Write-index for each category
    w_idx = np.zeros(k, dtype=np.int64)
    w_idx[1:] = np.cumsum(count)[: k - 1]

    N = len(x)
    idx = np.zeros(N, dtype=np.int64)
    for i in range(N):
        _x = x[i]
        idx[w_idx[_x]] = i
        w_idx[_x] += 1

    return count, idx
